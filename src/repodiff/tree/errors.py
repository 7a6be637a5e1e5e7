"""Errors raised while opening a tree source."""

from __future__ import annotations


class TreeSourceError(Exception):
    """Raised when a tree cannot be read (missing path, corrupt archive, unsupported type)."""


class CloneError(TreeSourceError):
    """Raised when cloning a remote repository fails."""
