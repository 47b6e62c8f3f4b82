"""Content renderers for davessg.

This module turns source bytes into output bytes. Markdown is converted to
HTML with mistune, page-like outputs are wrapped in the site template and
everything else is copied unchanged.

Key classes:
- MarkdownRenderer: Renders Markdown to HTML with heading anchors.
- PageTemplate: The site template with its two placeholders.
"""

from __future__ import annotations

import html
import re
from pathlib import Path

import mistune

from .files import MARKDOWN_EXT, SourceFile

CONTENT_PLACEHOLDER = b"{{ $content }}"
BASEURL_PLACEHOLDER = b"{{ $baseurl }}"

# Extensions whose output is wrapped in the page template
TEMPLATED_EXTS = (MARKDOWN_EXT, ".html", ".htm", ".js")


def _generate_heading_id(text: str) -> str:
    """Generate a URL-friendly ID from heading text.

    Args:
        text: The heading text.

    Returns:
        URL-friendly slug suitable for anchor links.
    """
    slug = html.unescape(re.sub(r"<[^>]+>", "", text)).lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[-\s]+", "-", slug)
    return slug.strip("-") or "heading"


class _AnchorRenderer(mistune.HTMLRenderer):
    """HTML renderer that gives every heading a unique id attribute."""

    def __init__(self):
        # Raw HTML in markdown is passed through as-is
        super().__init__(escape=False)
        self._heading_id_counts: dict[str, int] = {}

    def heading(self, text: str, level: int, **attrs) -> str:
        base_id = _generate_heading_id(text)

        if base_id in self._heading_id_counts:
            self._heading_id_counts[base_id] += 1
            heading_id = f"{base_id}-{self._heading_id_counts[base_id]}"
        else:
            self._heading_id_counts[base_id] = 0
            heading_id = base_id

        return f'<h{level} id="{heading_id}">{text}</h{level}>\n'


class MarkdownRenderer:
    """Renders Markdown content to HTML.

    A fresh mistune instance is created per document so heading ids are
    unique within a page but restart on every page.
    """

    plugins = ["table"]

    def render(self, content: str) -> str:
        """Render Markdown content to HTML.

        Args:
            content: Markdown source content.

        Returns:
            Rendered HTML.
        """
        markdown = mistune.create_markdown(
            renderer=_AnchorRenderer(), plugins=self.plugins
        )
        return markdown(content)


class PageTemplate:
    """The single site template.

    The template is kept as raw bytes and filled with literal byte
    substitutions, so line endings and encodings pass through untouched.

    Attributes:
        source: Raw template bytes.
        path: Where the template was loaded from, if anywhere.
    """

    def __init__(self, source: bytes, path: Path | None = None):
        self.source = source
        self.path = path

    @classmethod
    def load(cls, path: Path) -> PageTemplate:
        """Read a template from disk.

        Raises:
            OSError: If the template cannot be read.
        """
        return cls(path.read_bytes(), path)

    def render(self, content: bytes, base_url: str) -> bytes:
        """Substitute the content, then the base URL, into the template.

        The base URL substitution runs over the whole result, so a base URL
        placeholder inside the content is replaced too.

        Args:
            content: Body to place in the content slot.
            base_url: Value for the base URL placeholder.

        Returns:
            The finished page.
        """
        page = self.source.replace(CONTENT_PLACEHOLDER, content)
        return page.replace(BASEURL_PLACEHOLDER, base_url.encode("utf-8"))


def render_file(
    file: SourceFile,
    template: PageTemplate,
    base_url: str,
    markdown: MarkdownRenderer | None = None,
) -> bytes:
    """Produce the output bytes for a source file.

    Only Markdown is decoded (as UTF-8) for the Markdown engine. HTML and JS
    bodies are substituted into the template as raw bytes.

    Args:
        file: File to render.
        template: Site template for page-like outputs.
        base_url: Value for the base URL placeholder.
        markdown: Optional Markdown renderer to reuse.

    Returns:
        Bytes to write to file.out_path.

    Raises:
        OSError: If the source cannot be read.
        UnicodeDecodeError: If a Markdown source is not valid UTF-8.
    """
    data = file.path.read_bytes()
    if file.ext not in TEMPLATED_EXTS:
        return data

    if file.ext == MARKDOWN_EXT:
        rendered = (markdown or MarkdownRenderer()).render(data.decode("utf-8"))
        data = rendered.encode("utf-8")
    return template.render(data, base_url)
