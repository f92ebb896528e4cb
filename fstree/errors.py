"""Exception types raised by snapshot construction."""

from __future__ import annotations

from pathlib import Path


class FSTreeError(Exception):
    """Base class for fstree errors."""


class InvalidRootError(FSTreeError, NotADirectoryError):
    """Snapshot root is missing or not a directory."""

    def __init__(self, root: Path, reason: str = "not a directory") -> None:
        self.root = root
        self.reason = reason
        super().__init__(f"Invalid snapshot root {str(root)!r}: {reason}")


__all__ = ["FSTreeError", "InvalidRootError"]
