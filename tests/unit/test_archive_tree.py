"""Unit tests for reading zip archives as trees, and for open_tree dispatch."""

from __future__ import annotations

import zipfile
from pathlib import Path

import pytest

from repodiff.models import ArchiveFile
from repodiff.tree import TreeSourceError, open_tree
from repodiff.tree.archive import _common_root, walk_archive


def _make_zip(path: Path, files: dict[str, str], prefix: str = "") -> Path:
    with zipfile.ZipFile(path, "w") as zf:
        for rel, text in files.items():
            zf.writestr(prefix + rel, text)
    return path


@pytest.mark.parametrize(
    "names, expected",
    [
        (["project-main/a.txt", "project-main/src/b.py"], "project-main/"),
        (["project-main/", "project-main/a.txt"], "project-main/"),
        (["a.txt", "src/b.py"], ""),
        (["one/a.txt", "two/b.txt"], ""),
        ([], ""),
    ],
)
def test_common_root(names: list[str], expected: str) -> None:
    assert _common_root(names) == expected


def test_archive_matches_directory_walk(tmp_path: Path, source_files: dict[str, str]) -> None:
    """A wrapped repository archive yields the same listing as its checkout."""
    archive = _make_zip(tmp_path / "source.zip", source_files, prefix="project-main/")
    listing = walk_archive(archive)
    assert sorted(listing.files) == [
        "README.md",
        "docs/guide.md",
        "only_source.txt",
        "src/keep.log",
        "src/main.py",
        "src/util.py",
    ]
    assert listing.excluded == ["app.log", "build/out.bin", "src/debug.log", "src/scratch.tmp"]
    assert listing.kind == "archive"


def test_archive_handles_read_member(tmp_path: Path, source_files: dict[str, str]) -> None:
    archive = _make_zip(tmp_path / "source.zip", source_files, prefix="project-main/")
    handle = walk_archive(archive).files["src/main.py"]
    assert isinstance(handle, ArchiveFile)
    assert handle.member == "project-main/src/main.py"
    assert handle.read_bytes() == b"print('v1')\n"


def test_archive_excluded_directory_is_pruned(tmp_path: Path, source_files: dict[str, str]) -> None:
    archive = _make_zip(tmp_path / "source.zip", source_files)
    listing = walk_archive(archive, exclude_patterns=["src/**"], respect_gitignore=False)
    assert listing.excluded == ["src"]
    assert sorted(listing.files) == [
        "README.md",
        "app.log",
        "build/out.bin",
        "docs/guide.md",
        "only_source.txt",
    ]


def test_archive_nested_levels_do_not_leak_to_siblings(tmp_path: Path) -> None:
    archive = _make_zip(
        tmp_path / "tree.zip",
        {
            ".gitignore": "*.txt\n",
            "a/.gitignore": "!keep.txt\n",
            "a/keep.txt": "k",
            "b/keep.txt": "k",
            "b/other.md": "o",
        },
    )
    listing = walk_archive(archive)
    assert sorted(listing.files) == ["a/keep.txt", "b/other.md"]
    assert listing.excluded == ["b/keep.txt"]


def test_archive_directory_ignored_by_parent_level(tmp_path: Path) -> None:
    """A directory ignored by an outer .gitignore is pruned before its own level is read."""
    archive = _make_zip(
        tmp_path / "tree.zip",
        {
            ".gitignore": "vendor\n",
            "vendor/.gitignore": "!*\n",
            "vendor/lib.py": "x",
            "vendor/sub/mod.py": "y",
            "main.py": "z",
        },
    )
    listing = walk_archive(archive)
    assert sorted(listing.files) == ["main.py"]
    assert listing.excluded == ["vendor"]


def test_archive_without_gitignore(tmp_path: Path, source_files: dict[str, str]) -> None:
    archive = _make_zip(tmp_path / "source.zip", source_files)
    listing = walk_archive(archive, respect_gitignore=False)
    assert "app.log" in listing.files
    assert ".gitignore" not in listing.files
    assert not any(p.startswith(".git/") for p in listing.files)
    assert listing.excluded == []


def test_archive_skips_entries_outside_tree(tmp_path: Path) -> None:
    archive = tmp_path / "evil.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr(zipfile.ZipInfo("../escape.txt"), "x")
        zf.writestr("inside.txt", "y")
    listing = walk_archive(archive)
    assert sorted(listing.files) == ["inside.txt"]


def test_corrupt_archive_raises(tmp_path: Path) -> None:
    archive = tmp_path / "broken.zip"
    archive.write_bytes(b"this is not a zip file")
    with pytest.raises(TreeSourceError):
        walk_archive(archive)


# --- open_tree ---


def test_open_tree_dispatches_on_location(tmp_path: Path, source_tree: Path, source_files: dict[str, str]) -> None:
    archive = _make_zip(tmp_path / "source.zip", source_files)
    assert open_tree(source_tree).kind == "directory"
    assert open_tree(archive).kind == "archive"


def test_open_tree_rejects_missing_and_plain_files(tmp_path: Path) -> None:
    with pytest.raises(TreeSourceError, match="does not exist"):
        open_tree(tmp_path / "missing")
    plain = tmp_path / "notes.txt"
    plain.write_text("x")
    with pytest.raises(TreeSourceError, match="Not a directory or zip archive"):
        open_tree(plain)


def test_archive_keep_root_preserves_real_top_level_directory(tmp_path: Path) -> None:
    archive = _make_zip(tmp_path / "src.zip", {"src/a.py": "a", "src/pkg/b.py": "b"})
    assert sorted(walk_archive(archive).files) == ["a.py", "pkg/b.py"]
    assert sorted(walk_archive(archive, strip_root=False).files) == ["src/a.py", "src/pkg/b.py"]
    assert sorted(open_tree(archive, strip_archive_root=False).files) == ["src/a.py", "src/pkg/b.py"]
