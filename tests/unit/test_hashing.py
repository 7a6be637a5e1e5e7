"""Unit tests for content hashing of files and tree handles."""

from __future__ import annotations

import hashlib
import io
import zipfile
from pathlib import Path
from unittest.mock import patch

from repodiff.models import ArchiveFile, LocalFile
from repodiff.utils.hashing import CHUNK_SIZE, handle_hash, stream_hash


def test_stream_hash_matches_sha256_across_chunks() -> None:
    data = b"\x00\x01binary\xff" * (CHUNK_SIZE // 4)
    digest = stream_hash(io.BytesIO(data))
    assert digest == hashlib.sha256(data).hexdigest()
    assert len(digest) == 64


def test_stream_hash_empty() -> None:
    assert stream_hash(io.BytesIO(b"")) == hashlib.sha256(b"").hexdigest()


def test_handle_hash_local_and_archive_agree(tmp_path: Path) -> None:
    """A file on disk and the same bytes inside an archive hash identically."""
    f = tmp_path / "a.txt"
    f.write_text("same\n")
    archive = tmp_path / "a.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("wrap/a.txt", "same\n")
    assert handle_hash(LocalFile(f)) == handle_hash(ArchiveFile(archive, "wrap/a.txt"))


def test_handle_hash_streams_instead_of_reading_whole_file(tmp_path: Path) -> None:
    data = b"x" * (CHUNK_SIZE * 3 + 7)
    f = tmp_path / "big.bin"
    f.write_bytes(data)
    archive = tmp_path / "big.zip"
    with zipfile.ZipFile(archive, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("big.bin", data)

    with patch.object(LocalFile, "read_bytes", side_effect=AssertionError("read whole file")), patch.object(
        ArchiveFile, "read_bytes", side_effect=AssertionError("read whole member")
    ):
        assert handle_hash(LocalFile(f)) == hashlib.sha256(data).hexdigest()
        assert handle_hash(ArchiveFile(archive, "big.bin")) == hashlib.sha256(data).hexdigest()


def test_handle_hash_unreadable_returns_none(tmp_path: Path) -> None:
    assert handle_hash(LocalFile(tmp_path / "gone.txt")) is None
    assert handle_hash(LocalFile(tmp_path)) is None  # a directory
    archive = tmp_path / "a.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("a.txt", "x")
    assert handle_hash(ArchiveFile(archive, "missing.txt")) is None
