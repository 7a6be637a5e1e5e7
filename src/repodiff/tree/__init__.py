"""Tree sources: local directories, zip archives and cloned remote repositories."""

from __future__ import annotations

import zipfile
from pathlib import Path

from repodiff.models import TreeListing
from repodiff.tree.archive import walk_archive
from repodiff.tree.errors import CloneError, TreeSourceError
from repodiff.tree.local import walk_directory
from repodiff.tree.remote import clone_repository, cloned_repository


def open_tree(
    location: Path | str,
    exclude_patterns: list[str] | None = None,
    respect_gitignore: bool = True,
    strip_archive_root: bool = True,
) -> TreeListing:
    """
    Walk location as a directory or, for a zip file, as an archive.

    strip_archive_root applies to archives only (see walk_archive).

    Raises TreeSourceError if location does not exist or is neither.
    """
    location = Path(location)
    if location.is_dir():
        return walk_directory(location, exclude_patterns, respect_gitignore)
    if location.is_file() and zipfile.is_zipfile(location):
        return walk_archive(location, exclude_patterns, respect_gitignore, strip_archive_root)
    if not location.exists():
        raise TreeSourceError(f"Path does not exist: {location}")
    raise TreeSourceError(f"Not a directory or zip archive: {location}")


__all__ = [
    "CloneError",
    "TreeSourceError",
    "clone_repository",
    "cloned_repository",
    "open_tree",
    "walk_archive",
    "walk_directory",
]
