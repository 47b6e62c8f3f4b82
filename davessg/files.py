"""Source file discovery and path mapping for davessg.

This module walks a directory tree, records each file's modification time and
decides where its output belongs in the build directory.

Key pieces:
- SourceFile: Dataclass describing one discovered file and its destination.
- map_path: Maps a source path to its build path (Markdown becomes a bundle).
- find_files: Walks a directory and returns SourceFile objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .console import Console

MARKDOWN_EXT = ".md"
BUNDLE_INDEX = "index.html"
ROOT_INDEX = "index.md"


@dataclass
class SourceFile:
    """A file discovered under a walk root.

    Attributes:
        path: Path to the source file.
        ext: Lower-cased extension including the leading dot.
        mod_time: Source modification time in nanoseconds.
        out_path: Destination path inside the build directory.
    """

    path: Path
    ext: str
    mod_time: int
    out_path: Path

    def is_stale(self) -> bool:
        """Check whether the destination needs to be rebuilt.

        Returns:
            True if the destination is missing or older than the source.
        """
        try:
            dest_stat = self.out_path.stat()
        except OSError:
            return True
        return self.mod_time > dest_stat.st_mtime_ns


def map_path(
    source_dir: Path,
    src_path: Path,
    ext: str,
    build_dir: Path,
    console: Console | None = None,
) -> Path:
    """Map a source path to its destination in the build directory.

    Markdown files become bundles: ``about.md`` is written to
    ``about/index.html``. The root ``index.md`` is the exception and maps
    straight to ``index.html``. Every other file keeps its relative path.

    Args:
        source_dir: Root the source path lives under.
        src_path: Path of the source file.
        ext: Lower-cased extension of the source file.
        build_dir: Root of the build directory.
        console: Optional console for debug output.

    Returns:
        Destination path under build_dir.

    Examples:
        >>> map_path(Path("content"), Path("content/blog/post.md"), ".md", Path("build"))
        PosixPath('build/blog/post/index.html')
    """
    rel = src_path.relative_to(source_dir)
    if ext == MARKDOWN_EXT:
        if rel.as_posix().lower() == ROOT_INDEX:
            out_path = build_dir / BUNDLE_INDEX
        else:
            bundle = rel.parent / rel.name[: -len(ext)]
            out_path = build_dir / bundle / BUNDLE_INDEX
    else:
        out_path = build_dir / rel
    if console is not None:
        console.debug(f"mapping {src_path} -> {out_path}")
    return out_path


def find_files(
    walk_dir: Path, build_dir: Path, console: Console | None = None
) -> list[SourceFile]:
    """Find every regular file under a directory.

    Args:
        walk_dir: Directory to walk recursively.
        build_dir: Build directory the files map into.
        console: Optional console for debug output.

    Returns:
        SourceFile objects in lexical path order.

    Raises:
        FileNotFoundError: If walk_dir does not exist.
        OSError: If a file cannot be stat'ed.
    """
    if not walk_dir.is_dir():
        raise FileNotFoundError(f"Expected directory at {walk_dir}")
    files: list[SourceFile] = []
    for path in sorted(walk_dir.rglob("*")):
        if path.is_dir():
            continue
        stat = path.stat()
        ext = path.suffix.lower()
        files.append(
            SourceFile(
                path=path,
                ext=ext,
                mod_time=stat.st_mtime_ns,
                out_path=map_path(walk_dir, path, ext, build_dir, console),
            )
        )
    return files
