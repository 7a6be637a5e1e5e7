"""Shallow-clone a remote git repository (GitPython) so it can be compared as a directory."""

from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from repodiff.tree.errors import CloneError

logger = logging.getLogger(__name__)


def clone_repository(
    url: str,
    dest: Path | str,
    branch: str | None = None,
    tag: str | None = None,
) -> Path:
    """
    Clone url into dest with depth 1 and a single branch.

    branch takes precedence over tag; with neither, the remote's default
    branch is used. Raises CloneError if git fails.
    """
    import git

    dest = Path(dest)
    kwargs: dict[str, object] = {"depth": 1, "single_branch": True}
    ref = branch or tag
    if ref:
        # git clone --branch accepts tag names as well
        kwargs["branch"] = ref
    logger.info("Cloning %s%s into %s", url, f" ({ref})" if ref else "", dest)
    try:
        git.Repo.clone_from(url, dest, **kwargs)
    except git.GitCommandError as e:
        raise CloneError(f"Could not clone {url}: {e}") from e
    return dest


@contextmanager
def cloned_repository(
    url: str,
    temp_dir: Path | str | None = None,
    branch: str | None = None,
    tag: str | None = None,
) -> Iterator[Path]:
    """
    Clone into a fresh temporary directory and remove it afterwards.

    With temp_dir the clone directory is created inside it (temp_dir itself is
    created if missing and never removed). Only the directory made here is
    deleted, on every exit path including a failed clone.
    """
    parent = Path(temp_dir) if temp_dir else None
    try:
        if parent is not None:
            parent.mkdir(parents=True, exist_ok=True)
        dest = Path(tempfile.mkdtemp(prefix="repodiff-", dir=parent))
    except OSError as e:
        raise CloneError(f"Cannot create clone directory in {parent}: {e}") from e
    try:
        yield clone_repository(url, dest, branch=branch, tag=tag)
    finally:
        shutil.rmtree(dest, ignore_errors=True)
        logger.debug("Removed clone at %s", dest)
