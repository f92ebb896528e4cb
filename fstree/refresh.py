"""Caller-side helpers for rebuilding and diffing snapshots.

Nothing here watches the filesystem. ``SnapshotRefresher`` rebuilds on a
poll interval chosen by the caller and ``BackgroundSnapshotBuilder`` moves
construction onto a worker thread.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from pathlib import Path

from .filter import PathFilterLike
from .fs import Walker, walk_directory
from .tree import FSTree

logger = logging.getLogger(__name__)


def refresh_tree(
    previous: FSTree,
    path_filter: PathFilterLike | None = None,
    *,
    walker: Walker = walk_directory,
) -> tuple[FSTree, frozenset[str]]:
    """Snapshot ``previous.root_path`` again and return ``(tree, changes)``."""
    current = FSTree(previous.root_path, path_filter, walker=walker)
    return current, current.difference_from(previous)


class SnapshotRefresher:
    """Hold the latest snapshot of one root and rebuild it on demand."""

    def __init__(
        self,
        root: Path,
        path_filter: PathFilterLike | None = None,
        *,
        poll_seconds: float = 1.0,
        monotonic: Callable[[], float] = time.monotonic,
        walker: Walker = walk_directory,
    ) -> None:
        self.root = root
        self.path_filter = path_filter
        self.poll_seconds = poll_seconds
        self._monotonic = monotonic
        self._walker = walker
        self._last_poll: float | None = None
        self.current: FSTree | None = None

    def mark_dirty(self) -> None:
        """Force the next ``maybe_refresh`` call to rebuild."""
        self._last_poll = None

    def refresh(self) -> frozenset[str]:
        """Rebuild now. The first build only records a baseline."""
        return self._rebuild(self._monotonic())

    def _rebuild(self, now: float) -> frozenset[str]:
        self._last_poll = now
        previous = self.current
        if previous is None:
            self.current = FSTree(self.root, self.path_filter, walker=self._walker)
            return frozenset()
        self.current, changes = refresh_tree(previous, self.path_filter, walker=self._walker)
        if changes:
            logger.debug("%d paths changed under %s", len(changes), self.current.root_path)
        return changes

    def maybe_refresh(self) -> frozenset[str] | None:
        """Rebuild when the poll interval has elapsed; ``None`` means not polled."""
        now = self._monotonic()
        if self._last_poll is not None and (now - self._last_poll) < self.poll_seconds:
            return None
        return self._rebuild(now)


class BackgroundSnapshotBuilder:
    """Build snapshots on one daemon worker thread at a time.

    Multiple schedule requests collapse to the newest pending root/filter
    pair so builds do not pile up behind stale requests.
    """

    def __init__(
        self,
        on_built: Callable[[FSTree], None],
        *,
        walker: Walker = walk_directory,
    ) -> None:
        self._on_built = on_built
        self._walker = walker
        self._lock = threading.Lock()
        self._pending: tuple[Path, PathFilterLike | None] | None = None
        self._running = False
        self._idle = threading.Event()
        self._idle.set()

    def _worker(self) -> None:
        """Drain pending build requests until the queue is empty."""
        while True:
            with self._lock:
                pending = self._pending
                self._pending = None
                if pending is None:
                    self._running = False
                    self._idle.set()
                    return

            root, path_filter = pending
            try:
                tree = FSTree(root, path_filter, walker=self._walker)
            except Exception:
                logger.exception("Background snapshot of %s failed", root)
                continue
            try:
                self._on_built(tree)
            except Exception:
                logger.exception("Snapshot callback for %s failed", root)

    def schedule(self, root: Path, path_filter: PathFilterLike | None = None) -> None:
        """Queue a build and start the worker if idle."""
        with self._lock:
            self._pending = (root, path_filter)
            if self._running:
                return
            self._running = True
            self._idle.clear()

        worker = threading.Thread(
            target=self._worker,
            name="fstree-snapshot",
            daemon=True,
        )
        worker.start()

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until no build is running or queued."""
        return self._idle.wait(timeout)


__all__ = [
    "BackgroundSnapshotBuilder",
    "SnapshotRefresher",
    "refresh_tree",
]
