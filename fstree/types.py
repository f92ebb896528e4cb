"""Datatypes for snapshot entries and walker output."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class ItemKind(enum.Enum):
    """Filesystem entry kind recorded in a snapshot."""

    FILE = "file"
    FOLDER = "folder"


Fingerprint = tuple[object, ...]


@dataclass(frozen=True)
class WalkEntry:
    """One entry produced by a directory walker.

    ``path`` is relative to the walk root and uses ``/`` separators.
    """

    path: str
    is_dir: bool
    mtime_ns: int
    size: int
    mode: int = 0


@dataclass(frozen=True)
class TreeItem:
    """Immutable snapshot record for one file or folder."""

    path: str
    kind: ItemKind
    mtime_ns: int = 0
    size: int = 0
    mode: int = 0

    @property
    def name(self) -> str:
        """Return the final path segment."""
        return self.path.rpartition("/")[2]

    @property
    def is_folder(self) -> bool:
        return self.kind is ItemKind.FOLDER

    @property
    def fingerprint(self) -> Fingerprint:
        """Return the value compared by snapshot diffs.

        Folder mtimes move whenever a child is added or removed; the child is
        reported on its own, so folders only carry their kind.
        """
        if self.kind is ItemKind.FOLDER:
            return (self.kind,)
        return (self.kind, self.mtime_ns, self.size)

    @classmethod
    def from_walk_entry(cls, entry: WalkEntry) -> TreeItem:
        return cls(
            path=entry.path,
            kind=ItemKind.FOLDER if entry.is_dir else ItemKind.FILE,
            mtime_ns=entry.mtime_ns,
            size=0 if entry.is_dir else entry.size,
            mode=entry.mode,
        )


__all__ = [
    "Fingerprint",
    "ItemKind",
    "TreeItem",
    "WalkEntry",
]
