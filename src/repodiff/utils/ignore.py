"""Ignore rules: .gitignore parsing, the per-directory ignore stack, and exclusion checks."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from repodiff.utils.wildpath import match

logger = logging.getLogger(__name__)

IGNORE_FILENAME = ".gitignore"
GIT_DIR = ".git"


def parse_ignore_lines(text: str) -> list[str]:
    """Return the non-blank, non-comment lines of gitignore-style text, in order."""
    patterns: list[str] = []
    for line in text.splitlines():
        s = line.strip()
        if not s or s.startswith("#"):
            continue
        patterns.append(s)
    return patterns


def parse_ignore_file(path: Path) -> list[str]:
    """
    Read a gitignore-style file and return its patterns.

    A missing file yields []. An unreadable one is logged and also yields [],
    so a single bad ignore file never aborts a tree walk.
    """
    if not path.is_file():
        return []
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("Could not read ignore file %s: %s", path, e)
        return []
    return parse_ignore_lines(text)


def _to_slash(value: str) -> str:
    return value.replace("\\", "/")


def _relative(base: str, target: str) -> str | None:
    """
    Lexical relative path from base to target, both '/'-separated.

    Returns None when one is absolute and the other is not, or when base
    climbs above its own starting point so no relative form exists.
    """
    base = _normpath(base)
    target = _normpath(target)
    if base.startswith("/") != target.startswith("/"):
        return None

    base_parts = [p for p in base.split("/") if p and p != "."]
    target_parts = [p for p in target.split("/") if p and p != "."]
    common = 0
    while (
        common < len(base_parts)
        and common < len(target_parts)
        and base_parts[common] == target_parts[common]
    ):
        common += 1
    if ".." in base_parts[common:]:
        return None

    rel = [".."] * (len(base_parts) - common) + target_parts[common:]
    return "/".join(rel) or "."


def _normpath(value: str) -> str:
    """Collapse '.', '..' and repeated slashes without touching the filesystem."""
    anchored = value.startswith("/")
    parts: list[str] = []
    for part in value.split("/"):
        if not part or part == ".":
            continue
        if part == "..":
            if parts and parts[-1] != "..":
                parts.pop()
                continue
            if anchored:
                # '..' at the root stays at the root
                continue
        parts.append(part)
    joined = "/".join(parts)
    if anchored:
        return "/" + joined
    return joined or "."


def _escapes(rel: str) -> bool:
    return rel == ".." or rel.startswith("../")


class IgnoreStack:
    """
    Ignore pattern groups by directory depth, queried deepest first.

    The tree walker pushes the patterns of a directory's ignore file when it
    enters that directory and pops them when it leaves (see level()). Every
    queried path is made relative to base_path before matching.

    Precedence: the deepest group in which any pattern matches decides the
    outcome on its own, with the last matching pattern of that group winning.
    Shallower groups are not consulted once a deeper group has decided, even
    if its decision is a negation.
    """

    def __init__(self, base_path: str | Path = "") -> None:
        if isinstance(base_path, Path):
            base_path = base_path.as_posix()
        self.base_path = _to_slash(base_path)
        self._groups: list[tuple[str, ...]] = []

    def __len__(self) -> int:
        return len(self._groups)

    @property
    def depth(self) -> int:
        """Number of active pattern groups."""
        return len(self._groups)

    @property
    def groups(self) -> tuple[tuple[str, ...], ...]:
        return tuple(self._groups)

    def push(self, patterns: Iterable[str]) -> None:
        """Append a new group; patterns are stored with '/' separators."""
        group = tuple(_to_slash(p) for p in patterns)
        self._groups.append(group)
        logger.debug("Pushed %d pattern(s) at depth %d", len(group), len(self._groups))

    def pop(self) -> None:
        """Drop the most recent group. Popping an empty stack does nothing."""
        if self._groups:
            self._groups.pop()
            logger.debug("Popped pattern group, depth now %d", len(self._groups))

    @contextmanager
    def level(self, patterns: Iterable[str]) -> Iterator[IgnoreStack]:
        """Push patterns for the duration of a with-block; pops on every exit path."""
        self.push(patterns)
        try:
            yield self
        finally:
            self.pop()

    def should_ignore(self, path: str | Path) -> bool:
        """Return True if path is ignored by the active groups."""
        if isinstance(path, Path):
            path = path.as_posix()
        rel = _relative(self.base_path, _to_slash(path))
        if rel is None or _escapes(rel):
            return False

        for group in reversed(self._groups):
            decided = False
            ignored = False
            for pattern in group:
                if not pattern:
                    continue
                if _rule_matches(pattern, rel):
                    decided = True
                    ignored = not pattern.startswith("!")
            if decided:
                return ignored
        return False


def _rule_matches(pattern: str, rel: str) -> bool:
    """Return True if the rule matches rel, ignoring any negation prefix."""
    if pattern.startswith("!"):
        pattern = pattern[1:]
    if pattern.startswith("/"):
        pattern = pattern[1:]

    if pattern.endswith("/"):
        # Directory rule: descendants only, never the directory entry itself
        stem = pattern[:-1]
        matched = match("**/" + stem + "/**/*", rel) or match(stem + "/**/*", rel)
    elif "/" not in pattern:
        matched = match("**/" + pattern, rel) or match(pattern, rel)
    else:
        matched = match(pattern, rel)
    return matched


def matches_any(path: str, patterns: Iterable[str]) -> bool:
    """Flat exclude list: True if any pattern matches path (no negation, no levels)."""
    return any(match(pattern, path) for pattern in patterns)


def is_builtin_excluded(name: str, is_dir: bool) -> bool:
    """A '.git' directory and any ignore file are always left out of a comparison."""
    if is_dir and name == GIT_DIR:
        return True
    return name == IGNORE_FILENAME


def is_excluded(
    rel_path: str,
    exclude_patterns: Iterable[str],
    stack: IgnoreStack | None = None,
) -> bool:
    """
    Return True if rel_path is excluded by the explicit list or by the stack.

    rel_path is relative to the tree root; it is resolved against the stack's
    base path before the stack is queried.
    """
    if matches_any(rel_path, exclude_patterns):
        return True
    if stack is None:
        return False
    if stack.base_path:
        return stack.should_ignore(stack.base_path.rstrip("/") + "/" + rel_path)
    return stack.should_ignore(rel_path)
