"""Filesystem walking for snapshot construction.

The walker is the only code that touches the disk. It yields root-relative
``WalkEntry`` rows in a deterministic order and absorbs per-entry errors.
"""

from __future__ import annotations

import logging
import os
import stat
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path

from .types import WalkEntry

logger = logging.getLogger(__name__)

Accepts = Callable[[str, bool], bool]
Walker = Callable[[Path, Accepts], Iterable[WalkEntry]]


def accept_all(_path: str, _is_dir: bool) -> bool:
    return True


def safe_mtime_ns(path: Path) -> int | None:
    """Return ``st_mtime_ns`` for ``path`` or ``None`` on stat failure."""
    try:
        return int(path.stat().st_mtime_ns)
    except OSError:
        return None


def _join(prefix: str, name: str) -> str:
    return f"{prefix}/{name}" if prefix else name


def list_directory_entries(directory: Path, prefix: str = "") -> tuple[list[WalkEntry], Exception | None]:
    """List direct children of ``directory`` sorted by name.

    Returns ``(entries, scan_error)``. ``scan_error`` is set when the directory
    itself cannot be listed; children whose stat fails are skipped.
    """
    entries: list[WalkEntry] = []
    try:
        with os.scandir(directory) as scanned:
            for child in scanned:
                try:
                    st = child.stat(follow_symlinks=False)
                except OSError as exc:
                    logger.debug("Skipping unreadable entry %s: %s", child.path, exc)
                    continue
                entries.append(
                    WalkEntry(
                        path=_join(prefix, child.name),
                        is_dir=stat.S_ISDIR(st.st_mode),
                        mtime_ns=int(st.st_mtime_ns),
                        size=int(st.st_size),
                        mode=int(st.st_mode),
                    )
                )
    except OSError as exc:
        return [], exc

    entries.sort(key=lambda entry: entry.path)
    return entries, None


def walk_directory(root: Path, accepts: Accepts | None = None) -> Iterator[WalkEntry]:
    """Yield every accepted entry below ``root``, parents before children.

    Symlinks are reported with their own ``lstat`` metadata and never followed.
    A folder rejected by ``accepts`` is not descended into. Unreadable folders
    are still yielded, just without children. A root that is gone or no longer
    a directory raises instead.
    """
    accepts = accepts or accept_all
    stack: list[tuple[Path, str]] = [(root, "")]
    while stack:
        directory, prefix = stack.pop()
        entries, scan_error = list_directory_entries(directory, prefix)
        if not prefix and isinstance(scan_error, (FileNotFoundError, NotADirectoryError)):
            raise scan_error
        if scan_error is not None:
            logger.debug("Skipping unreadable directory %s: %s", directory, scan_error)
            continue

        subdirs: list[tuple[Path, str]] = []
        for entry in entries:
            if not accepts(entry.path, entry.is_dir):
                continue
            yield entry
            if entry.is_dir:
                subdirs.append((root / entry.path, entry.path))

        # reversed so the stack pops subfolders in name order
        stack.extend(reversed(subdirs))
