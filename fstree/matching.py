"""Path-segment matching helpers used by snapshot lookups."""

from __future__ import annotations

import os
import posixpath
from collections.abc import Iterable
from pathlib import Path, PurePath


def normalize_relative(path: str) -> str:
    """Normalize separators and strip leading/trailing slashes."""
    return path.replace("\\", "/").strip("/")


def matches_path_suffix(path: str, suffix: str) -> bool:
    """Return whether ``path`` ends with ``suffix`` at a segment boundary.

    ``suffix`` must already be normalized. ``"Sources/Foo.h"`` matches
    ``"Lib/Sources/Foo.h"`` but not ``"Lib/MySources/Foo.h"``.
    """
    if not suffix:
        return False
    if path == suffix:
        return True
    return path.endswith("/" + suffix)


def _relative_to_any(path: PurePath, roots: Iterable[PurePath]) -> PurePath | None:
    for root in roots:
        try:
            return path.relative_to(root)
        except ValueError:
            continue
    return None


def relative_subtree(
    root: Path,
    subtree: str | PurePath | None,
    *,
    given_root: PurePath | None = None,
) -> tuple[str, ...] | None:
    """Convert a preferred subtree into root-relative segments.

    ``root`` is the resolved snapshot root and ``given_root`` the absolute root
    as the caller spelled it, which may still go through symlinks. Absolute
    subtrees are normalized and made relative to either one, falling back to
    resolving the subtree itself. Returns ``None`` when there is no usable
    preference (unset, the root itself, or outside the root).
    """
    if subtree is None:
        return None
    raw = os.fspath(subtree)
    if not raw:
        return None
    if os.path.isabs(raw):
        roots = [root] if given_root is None or given_root == root else [given_root, root]
        relative_path = _relative_to_any(PurePath(os.path.normpath(raw)), roots)
        if relative_path is None:
            try:
                resolved = Path(raw).resolve()
            except (OSError, RuntimeError):
                return None
            relative_path = _relative_to_any(resolved, [root])
        if relative_path is None:
            return None
        raw = relative_path.as_posix()
    relative = posixpath.normpath(normalize_relative(raw) or ".")
    if relative == "." or relative == ".." or relative.startswith("../"):
        return None
    return tuple(relative.split("/"))


def shared_prefix_length(parts: tuple[str, ...], subtree: tuple[str, ...]) -> int:
    """Count leading segments of ``parts`` equal to ``subtree``.

    Only directory segments are compared, so a file never counts as being
    inside a subtree named like itself.
    """
    count = 0
    for part, expected in zip(parts[:-1], subtree):
        if part != expected:
            break
        count += 1
    return count


def best_suffix_match(candidates: Iterable[str], subtree: tuple[str, ...] | None) -> str | None:
    """Pick the preferred path among suffix matches.

    Ranking: most leading segments shared with ``subtree``, then fewest
    segments, then lexicographically smallest path.
    """
    best: tuple[int, int, str] | None = None
    for path in candidates:
        parts = tuple(path.split("/"))
        shared = shared_prefix_length(parts, subtree) if subtree else 0
        key = (-shared, len(parts), path)
        if best is None or key < best:
            best = key
    return best[2] if best is not None else None


__all__ = [
    "best_suffix_match",
    "matches_path_suffix",
    "normalize_relative",
    "relative_subtree",
    "shared_prefix_length",
]
