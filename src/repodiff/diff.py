"""Per-file unified diffs for differing files (difflib)."""

from __future__ import annotations

import difflib

BINARY_SNIFF_BYTES = 8192
BINARY_MESSAGE = "Binary files differ"


def is_binary(data: bytes) -> bool:
    """Heuristic: a NUL byte near the start means binary content."""
    return b"\0" in data[:BINARY_SNIFF_BYTES]


def unified_diff(
    source: bytes,
    target: bytes,
    path: str,
    context_lines: int = 3,
) -> list[str]:
    """
    Return unified diff lines (without trailing newlines) from source to target.

    Binary content on either side yields a single "Binary files differ" line.
    Text is decoded as UTF-8 with replacement characters for invalid bytes.
    """
    if is_binary(source) or is_binary(target):
        return [BINARY_MESSAGE]
    source_lines = source.decode("utf-8", errors="replace").splitlines()
    target_lines = target.decode("utf-8", errors="replace").splitlines()
    return list(
        difflib.unified_diff(
            source_lines,
            target_lines,
            fromfile=f"source/{path}",
            tofile=f"target/{path}",
            n=context_lines,
            lineterm="",
        )
    )
