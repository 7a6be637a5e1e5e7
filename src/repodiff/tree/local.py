"""Walk a directory tree, applying nested .gitignore files and the explicit exclude list."""

from __future__ import annotations

import logging
from contextlib import nullcontext
from pathlib import Path

from repodiff.models import LocalFile, TreeListing
from repodiff.utils.ignore import (
    IGNORE_FILENAME,
    IgnoreStack,
    is_builtin_excluded,
    is_excluded,
    parse_ignore_file,
)

logger = logging.getLogger(__name__)


def walk_directory(
    root: Path | str,
    exclude_patterns: list[str] | None = None,
    respect_gitignore: bool = True,
) -> TreeListing:
    """
    Collect the files of a directory tree, depth-first in name order.

    Each directory's .gitignore is pushed onto a stack owned by this walk on
    entry and popped on exit. Excluded directories are recorded once and not
    descended into; '.git' directories and ignore files are skipped without
    being recorded. Symlinked directories are not followed.
    """
    root = Path(root).resolve()
    exclude_patterns = list(exclude_patterns or [])
    stack = IgnoreStack(root.as_posix())
    listing = TreeListing(root=root.as_posix(), kind="directory")

    def recurse(current: Path) -> None:
        patterns = parse_ignore_file(current / IGNORE_FILENAME) if respect_gitignore else []
        with stack.level(patterns) if patterns else nullcontext():
            try:
                entries = sorted(current.iterdir(), key=lambda p: p.name)
            except OSError as e:
                logger.warning("Skipping unreadable directory %s: %s", current, e)
                return
            for entry in entries:
                is_dir = entry.is_dir() and not entry.is_symlink()
                if is_builtin_excluded(entry.name, is_dir):
                    continue
                rel = entry.relative_to(root).as_posix()
                if is_excluded(rel, exclude_patterns, stack):
                    logger.debug("Excluded %s", rel)
                    listing.excluded.append(rel)
                    continue
                if is_dir:
                    recurse(entry)
                elif entry.is_file():
                    listing.files[rel] = LocalFile(entry)

    recurse(root)
    logger.info(
        "Scanned %s: %d file(s), %d excluded",
        listing.root,
        len(listing.files),
        len(listing.excluded),
    )
    return listing
