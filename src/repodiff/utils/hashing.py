"""Content hashing (SHA-256) used to decide whether two files are identical."""

from __future__ import annotations

import hashlib
import zipfile
from typing import IO, TYPE_CHECKING

if TYPE_CHECKING:
    from repodiff.models import FileHandle

CHUNK_SIZE = 65536


def stream_hash(stream: IO[bytes]) -> str:
    """SHA-256 of everything left in a binary stream, read in chunks."""
    hasher = hashlib.sha256()
    for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
        hasher.update(chunk)
    return hasher.hexdigest()


def handle_hash(handle: FileHandle) -> str | None:
    """
    Hash the bytes behind a file handle from any tree source, streaming them.

    Returns None if the file cannot be read; callers treat that as "different".
    """
    try:
        with handle.open() as stream:
            return stream_hash(stream)
    except (OSError, KeyError, zipfile.BadZipFile):
        return None
