"""Data models: file handles for each tree source, tree listings and comparison results."""

from __future__ import annotations

import zipfile
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, ContextManager, Optional, Protocol, Union


class FileHandle(Protocol):
    """Anything that can produce the bytes of one file in a tree."""

    def read_bytes(self) -> bytes: ...

    def open(self) -> ContextManager[IO[bytes]]: ...


@dataclass(frozen=True)
class LocalFile:
    """A regular file on disk."""

    path: Path

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def open(self) -> IO[bytes]:
        return self.path.open("rb")


@dataclass(frozen=True)
class ArchiveFile:
    """A member of a zip archive; the archive is reopened on each read."""

    archive: Path
    member: str  # Name inside the archive, as stored (unstripped)

    def read_bytes(self) -> bytes:
        with zipfile.ZipFile(self.archive) as zf:
            return zf.read(self.member)

    @contextmanager
    def open(self) -> Iterator[IO[bytes]]:
        """Stream the member without loading it into memory."""
        with zipfile.ZipFile(self.archive) as zf, zf.open(self.member) as f:
            yield f


@dataclass
class TreeListing:
    """Files one side of a comparison contributes, keyed by '/'-separated relative path."""

    root: str  # Directory path or archive path, for display
    kind: str  # 'directory' or 'archive'
    files: dict[str, Union[LocalFile, ArchiveFile]] = field(default_factory=dict)
    excluded: list[str] = field(default_factory=list)  # Relative paths removed by ignore rules


@dataclass
class ComparisonResult:
    """Outcome of comparing a source tree with a target tree."""

    source: str = ""
    target: str = ""
    identical: list[str] = field(default_factory=list)
    different: list[str] = field(default_factory=list)
    source_only: list[str] = field(default_factory=list)
    target_only: list[str] = field(default_factory=list)
    excluded_source: list[str] = field(default_factory=list)
    excluded_target: list[str] = field(default_factory=list)

    # Unified diff lines for differing files (only with detailed diffs)
    diffs: dict[str, list[str]] = field(default_factory=dict)
    # SHA-256 of (source, target) for differing files; None where unreadable
    digests: dict[str, tuple[Optional[str], Optional[str]]] = field(default_factory=dict)

    @property
    def has_differences(self) -> bool:
        return bool(self.different or self.source_only or self.target_only)
