"""Shared fixtures: build small source/target trees on disk."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

SOURCE_FILES = {
    ".gitignore": "*.log\nbuild/\n",
    "README.md": "hello\n",
    "app.log": "noise\n",
    "build/out.bin": "compiled\n",
    "docs/guide.md": "guide\n",
    "only_source.txt": "source\n",
    "src/.gitignore": "# keep this one log\n!keep.log\n*.tmp\n",
    "src/debug.log": "debug\n",
    "src/keep.log": "kept\n",
    "src/main.py": "print('v1')\n",
    "src/scratch.tmp": "scratch\n",
    "src/util.py": "X = 1\n",
    ".git/HEAD": "ref: refs/heads/main\n",
}

TARGET_FILES = {
    ".gitignore": "*.log\n",
    "README.md": "hello\n",
    "build/out.bin": "compiled\n",
    "docs/guide.md": "guide\n",
    "notes.log": "notes\n",
    "only_target.txt": "target\n",
    "src/main.py": "print('v2')\n",
    "src/util.py": "X = 1\n",
}


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Create files (relative path -> text) under root and return root."""
    for rel, text in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[str, dict[str, str]], Path]:
    """Factory: make_tree("name", {"a/b.txt": "x"}) -> tmp_path / "name"."""

    def _make(name: str, files: dict[str, str]) -> Path:
        return write_tree(tmp_path / name, files)

    return _make


@pytest.fixture
def source_tree(make_tree) -> Path:
    return make_tree("source", SOURCE_FILES)


@pytest.fixture
def target_tree(make_tree) -> Path:
    return make_tree("target", TARGET_FILES)


@pytest.fixture
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the global config (~/.repodiff) at an empty temporary home."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: home))
    return home


@pytest.fixture
def source_files() -> dict[str, str]:
    return dict(SOURCE_FILES)
