"""Read a zip archive as a tree, rebuilding .gitignore levels from entry paths."""

from __future__ import annotations

import logging
import posixpath
import zipfile
from contextlib import ExitStack
from pathlib import Path

from repodiff.models import ArchiveFile, TreeListing
from repodiff.tree.errors import TreeSourceError
from repodiff.utils.ignore import (
    GIT_DIR,
    IGNORE_FILENAME,
    IgnoreStack,
    is_excluded,
    parse_ignore_lines,
)

logger = logging.getLogger(__name__)


def _common_root(names: list[str]) -> str:
    """
    Return "top/" if every entry lives under one top-level directory, else "".

    Archives of a repository usually wrap it in a single folder
    (e.g. project-main/); stripping it lines paths up with a checkout.
    """
    tops: set[str] = set()
    for name in names:
        top, sep, _ = name.lstrip("/").partition("/")
        if not sep:
            return ""
        tops.add(top)
    if len(tops) == 1:
        return tops.pop() + "/"
    return ""


def _read_members(
    zf: zipfile.ZipFile,
    respect_gitignore: bool,
    strip_root: bool = True,
) -> tuple[dict[str, str], dict[str, list[str]]]:
    """
    Map relative path -> member name for every file entry, and collect ignore
    patterns keyed by the directory (relative, "" for the root) they live in.
    """
    infos = zf.infolist()
    prefix = _common_root([info.filename.replace("\\", "/") for info in infos]) if strip_root else ""
    members: dict[str, str] = {}
    ignore_groups: dict[str, list[str]] = {}
    for info in infos:
        if info.is_dir():
            continue
        name = info.filename.replace("\\", "/").lstrip("/")
        rel = name[len(prefix):] if prefix else name
        parts = [p for p in rel.split("/") if p]
        if not parts:
            continue
        if ".." in parts:
            logger.warning("Skipping archive entry outside the tree: %s", info.filename)
            continue
        rel = "/".join(parts)
        members[rel] = info.filename
        if respect_gitignore and parts[-1] == IGNORE_FILENAME:
            text = zf.read(info).decode("utf-8", errors="replace")
            ignore_groups[posixpath.dirname(rel)] = parse_ignore_lines(text)
    return members, ignore_groups


def walk_archive(
    archive_path: Path | str,
    exclude_patterns: list[str] | None = None,
    respect_gitignore: bool = True,
    strip_root: bool = True,
) -> TreeListing:
    """
    Collect the files of a zip archive with the same exclusion rules as walk_directory.

    There is no directory-by-directory descent in an archive, so for every
    entry the ignore levels of its ancestor directories are pushed in order
    (root first). Each ancestor directory is checked against the levels above
    it before its own level is pushed, so an excluded directory prunes its
    whole subtree exactly as in a real walk.

    With strip_root, a single top-level folder wrapping every entry is removed
    from the paths. Pass False for archives whose only top-level entry is a
    real directory of the tree (e.g. everything under src/).

    Raises TreeSourceError if the archive cannot be read.
    """
    archive_path = Path(archive_path).resolve()
    exclude_patterns = list(exclude_patterns or [])
    try:
        with zipfile.ZipFile(archive_path) as zf:
            members, ignore_groups = _read_members(zf, respect_gitignore, strip_root)
    except (OSError, zipfile.BadZipFile) as e:
        raise TreeSourceError(f"Cannot read archive {archive_path}: {e}") from e

    stack = IgnoreStack()
    listing = TreeListing(root=archive_path.as_posix(), kind="archive")
    pruned: set[str] = set()

    for rel in sorted(members):
        parts = rel.split("/")
        if GIT_DIR in parts[:-1] or parts[-1] == IGNORE_FILENAME:
            continue
        directories = ["/".join(parts[:depth]) for depth in range(len(parts))]
        if any(d in pruned for d in directories[1:]):
            continue

        excluded_dir: str | None = None
        with ExitStack() as levels:
            for directory in directories:
                if directory and is_excluded(directory, exclude_patterns, stack):
                    excluded_dir = directory
                    break
                patterns = ignore_groups.get(directory)
                if patterns:
                    levels.enter_context(stack.level(patterns))
            excluded_file = excluded_dir is None and is_excluded(rel, exclude_patterns, stack)

        if excluded_dir is not None:
            pruned.add(excluded_dir)
            listing.excluded.append(excluded_dir)
        elif excluded_file:
            logger.debug("Excluded %s", rel)
            listing.excluded.append(rel)
        else:
            listing.files[rel] = ArchiveFile(archive_path, members[rel])

    logger.info(
        "Scanned archive %s: %d file(s), %d excluded",
        listing.root,
        len(listing.files),
        len(listing.excluded),
    )
    return listing
