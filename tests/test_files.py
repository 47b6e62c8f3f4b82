import os
from pathlib import Path

import pytest

from davessg.console import Console
from davessg.files import SourceFile, find_files, map_path


def set_mtime(path: Path, seconds: int) -> None:
    os.utime(path, ns=(seconds * 1_000_000_000, seconds * 1_000_000_000))


def test_map_path_markdown_becomes_bundle():
    src, build = Path("content"), Path("build")
    assert map_path(src, src / "about.md", ".md", build) == build / "about" / "index.html"
    assert (
        map_path(src, src / "blog" / "first-post.md", ".md", build)
        == build / "blog" / "first-post" / "index.html"
    )
    # Extension case does not leak into the bundle name
    assert map_path(src, src / "Notes.MD", ".md", build) == build / "Notes" / "index.html"


def test_map_path_root_index_is_not_a_bundle():
    src, build = Path("content"), Path("build")
    assert map_path(src, src / "index.md", ".md", build) == build / "index.html"
    assert map_path(src, src / "INDEX.md", ".md", build) == build / "index.html"
    assert map_path(src, src / "Index.MD", ".md", build) == build / "index.html"


def test_map_path_nested_index_is_a_bundle():
    src, build = Path("content"), Path("build")
    assert (
        map_path(src, src / "blog" / "index.md", ".md", build)
        == build / "blog" / "index" / "index.html"
    )


def test_map_path_keeps_other_files():
    src, build = Path("content"), Path("out")
    assert map_path(src, src / "page.html", ".html", build) == build / "page.html"
    assert map_path(src, src / "js" / "app.js", ".js", build) == build / "js" / "app.js"
    assert map_path(src, src / "img" / "a.PNG", ".png", build) == build / "img" / "a.PNG"


def test_map_path_reports_mapping(capsys):
    src, build = Path("content"), Path("build")
    map_path(src, src / "a.md", ".md", build, Console(verbose=True))
    map_path(src, src / "b.md", ".md", build, Console(verbose=False))
    out = capsys.readouterr().out
    assert f"mapping {src / 'a.md'} -> {build / 'a' / 'index.html'}" in out
    assert "b.md" not in out


def test_find_files_walks_recursively(tmp_path):
    content = tmp_path / "content"
    (content / "blog").mkdir(parents=True)
    (content / "empty").mkdir()
    (content / "index.md").write_text("# Home", encoding="utf-8")
    (content / "blog" / "Post.MD").write_text("# Post", encoding="utf-8")
    (content / "style.css").write_text("body{}", encoding="utf-8")
    set_mtime(content / "style.css", 1_000)

    build = tmp_path / "build"
    files = find_files(content, build)

    by_name = {f.path.name: f for f in files}
    assert set(by_name) == {"index.md", "Post.MD", "style.css"}
    assert by_name["Post.MD"].ext == ".md"
    assert by_name["Post.MD"].out_path == build / "blog" / "Post" / "index.html"
    assert by_name["index.md"].out_path == build / "index.html"
    assert by_name["style.css"].out_path == build / "style.css"
    assert by_name["style.css"].mod_time == 1_000 * 1_000_000_000
    assert [f.path for f in files] == sorted(f.path for f in files)


def test_find_files_missing_dir(tmp_path):
    with pytest.raises(FileNotFoundError):
        find_files(tmp_path / "missing", tmp_path / "build")


def test_missing_destination_is_stale(tmp_path):
    src = tmp_path / "a.txt"
    src.write_text("a", encoding="utf-8")
    file = SourceFile(path=src, ext=".txt", mod_time=0, out_path=tmp_path / "out" / "a.txt")
    assert file.is_stale()


def test_staleness_compares_timestamps(tmp_path):
    src = tmp_path / "a.txt"
    dest = tmp_path / "b.txt"
    src.write_text("a", encoding="utf-8")
    dest.write_text("b", encoding="utf-8")
    set_mtime(dest, 2_000)

    newer = SourceFile(src, ".txt", 3_000 * 1_000_000_000, dest)
    older = SourceFile(src, ".txt", 1_000 * 1_000_000_000, dest)
    same = SourceFile(src, ".txt", 2_000 * 1_000_000_000, dest)
    assert newer.is_stale()
    assert not older.is_stale()
    # Strictly after: equal timestamps are up to date
    assert not same.is_stale()
