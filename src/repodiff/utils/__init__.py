"""Shared utilities: glob matching, ignore rules, hashing."""

from repodiff.utils.hashing import handle_hash, stream_hash
from repodiff.utils.ignore import (
    IGNORE_FILENAME,
    IgnoreStack,
    is_builtin_excluded,
    is_excluded,
    matches_any,
    parse_ignore_file,
    parse_ignore_lines,
)
from repodiff.utils.wildpath import expand_braces, match

__all__ = [
    "IGNORE_FILENAME",
    "IgnoreStack",
    "expand_braces",
    "handle_hash",
    "is_builtin_excluded",
    "is_excluded",
    "match",
    "matches_any",
    "parse_ignore_file",
    "parse_ignore_lines",
    "stream_hash",
]
