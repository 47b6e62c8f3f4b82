"""Site building functionality for davessg.

This module contains the core logic for building a static site from source files.
It loads configuration, discovers content and static files, and writes every
stale output into the build directory.

Key functions:
- build_site: Main function to build the entire site.
- load_config: Loads site configuration from davessg.yaml.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .console import Console
from .files import SourceFile, find_files
from .renderers import MarkdownRenderer, PageTemplate, render_file

CONFIG_FILENAME = "davessg.yaml"
TEMPLATE_NAME = "index.html"
STATIC_DIRNAME = "static"


class BuildError(Exception):
    """Error during site build with file context.

    Attributes:
        source_path: Path to the file that caused the error.
        message: Human-readable error message.
        original_error: The original exception that was caught.
    """

    def __init__(
        self,
        source_path: Path,
        message: str,
        original_error: Exception | None = None,
    ):
        self.source_path = source_path
        self.message = message
        self.original_error = original_error
        super().__init__(f"{source_path}: {message}")


DEFAULT_CONFIG = {
    "bind_addr": "localhost:8009",
    "build_dir": "build/",
    "source_dir": "content/",
    "base_url": "/",
    "template_dir": "templates",
}


@dataclass
class BuildResult:
    """Result of a site build operation.

    Attributes:
        files: Every file discovered, content first, then static.
        built: Files that were written.
        skipped: Files whose output was already up to date.
        build_dir: Directory the site was built into.
    """

    files: list[SourceFile]
    build_dir: Path
    built: list[SourceFile] = field(default_factory=list)
    skipped: list[SourceFile] = field(default_factory=list)


def load_config(project_root: Path) -> dict[str, Any]:
    """Load site configuration from davessg.yaml.

    Args:
        project_root: Directory containing the configuration file.

    Returns:
        Dictionary containing configuration values, with defaults applied.
    """
    config_path = project_root / CONFIG_FILENAME
    config = DEFAULT_CONFIG.copy()
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
            if isinstance(loaded, dict):
                config.update(
                    {
                        k: str(v)
                        for k, v in loaded.items()
                        if k in DEFAULT_CONFIG and v is not None
                    }
                )
    return config


def discover(
    source_dir: Path,
    build_dir: Path,
    template_dir: Path,
    console: Console,
) -> list[SourceFile]:
    """Find content files and static template files.

    Static files live in ``<template_dir>/static`` and are copied to
    ``<build_dir>/static``. The static directory is optional.

    Raises:
        BuildError: If the source directory cannot be walked.
    """
    try:
        files = find_files(source_dir, build_dir, console)
    except OSError as exc:
        raise BuildError(source_dir, f"Error walking content dir: {exc}", exc) from exc
    console.info(f"Found {len(files)} content file(s)")

    static_dir = template_dir / STATIC_DIRNAME
    static_files: list[SourceFile] = []
    if static_dir.exists():
        try:
            static_files = find_files(
                static_dir, build_dir / STATIC_DIRNAME, console
            )
        except OSError as exc:
            raise BuildError(
                static_dir, f"Error walking static dir: {exc}", exc
            ) from exc
    console.info(f"Found {len(static_files)} static file(s)")

    return files + static_files


def build_site(
    source_dir: Path,
    build_dir: Path,
    template_dir: Path,
    base_url: str = "/",
    force: bool = False,
    console: Console | None = None,
) -> BuildResult:
    """Build the site, writing only outputs that are stale.

    Args:
        source_dir: Directory holding the content files.
        build_dir: Directory to write the site into.
        template_dir: Directory holding index.html and static/.
        base_url: Value substituted for the base URL placeholder.
        force: Rebuild every file regardless of timestamps.
        console: Console for progress output.

    Returns:
        BuildResult describing what was written and skipped.

    Raises:
        BuildError: On any read, write or render failure.
    """
    console = console or Console()
    files = discover(source_dir, build_dir, template_dir, console)

    template_path = template_dir / TEMPLATE_NAME
    try:
        template = PageTemplate.load(template_path)
    except OSError as exc:
        raise BuildError(template_path, f"Cannot read template: {exc}", exc) from exc

    result = BuildResult(files=files, build_dir=build_dir)
    markdown = MarkdownRenderer()
    for file in files:
        if not (force or file.is_stale()):
            console.debug(f"Skipping {file.path}")
            result.skipped.append(file)
            continue

        console.info(f"Building {file.path}")
        try:
            rendered = render_file(file, template, base_url, markdown)
            _write_file(file.out_path, rendered)
        except Exception as exc:
            raise BuildError(file.path, _format_error_message(exc), exc) from exc
        result.built.append(file)

    return result


def _format_error_message(exc: Exception) -> str:
    """Format an exception into a user-friendly error message.

    Args:
        exc: The exception to format.

    Returns:
        A human-readable error message.
    """
    if isinstance(exc, UnicodeDecodeError):
        return f"Not valid UTF-8 text: {exc}"
    if isinstance(exc, OSError):
        detail = exc.strerror or str(exc)
        if exc.filename:
            return f"{detail}: {exc.filename}"
        return detail

    return f"{type(exc).__name__}: {exc}"


def _write_file(out_path: Path, data: bytes) -> None:
    """Write output bytes, creating parent directories as needed.

    Args:
        out_path: Destination path.
        data: Bytes to write.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "wb") as f:
        f.write(data)
