"""Glob matching for slash-separated paths (*, ?, [...], **, {a,b}, leading /)."""

from __future__ import annotations

GLOBSTAR = "**"


def match(pattern: str, path: str) -> bool:
    """
    Return True if path matches the glob pattern.

    Supported syntax:
      - ``*`` any run of characters within one path component
      - ``?`` exactly one character
      - ``[abc]``, ``[a-z]``, ``[!abc]`` / ``[^abc]`` bracket expressions
      - ``**`` zero or more whole path components
      - ``{js,ts}`` alternatives (needs at least one comma)
      - leading ``/`` anchors the pattern; it then only matches anchored paths

    Never raises: malformed brackets or braces simply fail to match or are
    taken literally. Backslashes are ordinary characters.
    """
    if "{" in pattern:
        return any(_match_expanded(p, path) for p in expand_braces(pattern))
    return _match_expanded(pattern, path)


def expand_braces(pattern: str) -> list[str]:
    """
    Expand the first ``{...}`` group and, recursively, any groups after it.

    "*.{js,ts}" -> ["*.js", "*.ts"]. Empty braces, braces without a comma
    and unterminated braces are left as literal text.
    """
    start = pattern.find("{")
    if start == -1:
        return [pattern]
    end = pattern.find("}", start)
    if end == -1:
        return [pattern]

    content = pattern[start + 1 : end]
    if "," not in content:
        return [pattern]

    prefix = pattern[:start]
    suffixes = expand_braces(pattern[end + 1 :])
    return [prefix + alt + suffix for alt in content.split(",") for suffix in suffixes]


def _match_expanded(pattern: str, path: str) -> bool:
    pattern_parts, pattern_anchored = _split(pattern)
    path_parts, path_anchored = _split(path)
    if pattern_anchored != path_anchored:
        return False
    return _match_parts(pattern_parts, path_parts, 0, 0)


def _split(value: str) -> tuple[list[str], bool]:
    """Split on '/' dropping empty components; also report a leading '/'."""
    return [part for part in value.split("/") if part], value.startswith("/")


def _match_parts(pattern: list[str], parts: list[str], pi: int, fi: int) -> bool:
    while pi < len(pattern):
        if fi == len(parts):
            # Only trailing globstars may remain
            return all(p == GLOBSTAR for p in pattern[pi:])

        if pattern[pi] == GLOBSTAR:
            if pi + 1 == len(pattern):
                return True
            return any(
                _match_parts(pattern, parts, pi + 1, split)
                for split in range(fi, len(parts) + 1)
            )

        if not match_component(pattern[pi], parts[fi]):
            return False
        pi += 1
        fi += 1

    return fi == len(parts)


def match_component(pattern: str, name: str) -> bool:
    """Match a single path component (no '/') against *, ? and [...] wildcards."""
    if pattern == "*" or pattern == name:
        return True

    i = j = 0
    star = -1
    star_match = 0

    while j < len(name):
        if i < len(pattern) and pattern[i] == "*":
            star = i
            star_match = j
            i += 1
            continue
        if i < len(pattern) and (pattern[i] == "?" or pattern[i] == name[j]):
            i += 1
            j += 1
            continue
        if i < len(pattern) and pattern[i] == "[":
            close = _closing_bracket(pattern, i)
            if close == -1:
                return False
            if _match_bracket(pattern[i + 1 : close], name[j]):
                i = close + 1
                j += 1
                continue
        if star == -1:
            return False
        # Let the last star swallow one more character and retry
        i = star + 1
        star_match += 1
        j = star_match

    while i < len(pattern) and pattern[i] == "*":
        i += 1
    return i == len(pattern)


def _closing_bracket(pattern: str, start: int) -> int:
    """Index of the ']' closing the bracket opened at start, or -1."""
    return pattern.find("]", start + 1)


def _match_bracket(members: str, char: str) -> bool:
    if not members:
        return False

    negated = members[0] in "!^"
    k = 1 if negated else 0
    matched = False
    while k < len(members):
        if k + 2 < len(members) and members[k + 1] == "-":
            if members[k] <= char <= members[k + 2]:
                matched = True
                break
            k += 3
        else:
            if members[k] == char:
                matched = True
                break
            k += 1

    return matched != negated
