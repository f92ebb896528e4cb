"""Gitignore-aware path filtering utilities.

Builds a matcher by querying git for ignored files and directories.
``FSTreeFilter`` uses it to optionally drop ignored content from snapshots.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from .fs import safe_mtime_ns

logger = logging.getLogger(__name__)

GITIGNORE_MATCHER_CACHE_MAX = 64
GITIGNORE_MATCHER_CACHE_TTL_SECONDS = 2.0


def _is_within(path: Path, root: Path) -> bool:
    """Return whether ``path`` is at or under ``root``."""
    try:
        path.relative_to(root)
        return True
    except ValueError:
        return False


@dataclass(frozen=True)
class GitIgnoreMatcher:
    """Ignored paths under one snapshot root, stored root-relative.

    Directory entries reject their whole subtree, so a lookup walks the
    candidate's ancestors instead of enumerating ignored descendants.
    """

    root: Path
    ignored_files: frozenset[str]
    ignored_dirs: frozenset[str]

    def is_ignored(self, relative_path: str) -> bool:
        """Return whether the root-relative ``relative_path`` is ignored."""
        if relative_path in self.ignored_files:
            return True
        current = relative_path
        while current:
            if current in self.ignored_dirs:
                return True
            current = current.rpartition("/")[0]
        return False


def _load_matcher(root: Path) -> GitIgnoreMatcher | None:
    """Build a matcher by querying git for ignored files/directories.

    Returns ``None`` when git is unavailable, ``root`` is not inside a repo, or
    any git command fails. Only ignored paths within ``root`` are tracked,
    even when the repository root is higher up.
    """
    if shutil.which("git") is None:
        return None

    root = root.resolve()
    try:
        top_proc = subprocess.run(
            ["git", "-C", str(root), "rev-parse", "--show-toplevel"],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None

    top_level = top_proc.stdout.strip()
    if not top_level:
        return None

    repo_root = Path(top_level).resolve()
    if not _is_within(root, repo_root):
        return None

    try:
        proc = subprocess.run(
            [
                "git",
                "-C",
                str(repo_root),
                "ls-files",
                "-z",
                "--others",
                "-i",
                "--exclude-standard",
                "--directory",
            ],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        logger.debug("git ls-files failed under %s: %s", repo_root, exc)
        return None

    ignored_files: set[str] = set()
    ignored_dirs: set[str] = set()
    for raw in proc.stdout.split(b"\x00"):
        if not raw:
            continue
        rel = raw.decode("utf-8", errors="replace")
        is_dir = rel.endswith("/")
        rel = rel.rstrip("/")
        if not rel:
            continue
        abs_path = repo_root / rel
        if not _is_within(abs_path, root):
            continue
        relative = abs_path.relative_to(root).as_posix()
        if relative == ".":
            continue
        if is_dir or abs_path.is_dir():
            ignored_dirs.add(relative)
        else:
            ignored_files.add(relative)

    return GitIgnoreMatcher(
        root=root,
        ignored_files=frozenset(ignored_files),
        ignored_dirs=frozenset(ignored_dirs),
    )


@lru_cache(maxsize=GITIGNORE_MATCHER_CACHE_MAX)
def _matcher_for_key(root: str, root_mtime_ns: int | None, time_bucket: int) -> GitIgnoreMatcher | None:
    # mtime and bucket only take part in the cache key
    logger.debug("Loading gitignore matcher for %s", root)
    return _load_matcher(Path(root))


def get_gitignore_matcher(root: Path) -> GitIgnoreMatcher | None:
    """Return a cached matcher for ``root``.

    Entries are keyed by the resolved root, its mtime, and the current TTL
    window, so a matcher is reloaded after the root changes or the window ends.
    """
    resolved_root = root.resolve()
    time_bucket = int(time.monotonic() // GITIGNORE_MATCHER_CACHE_TTL_SECONDS)
    return _matcher_for_key(str(resolved_root), safe_mtime_ns(resolved_root), time_bucket)


def clear_gitignore_cache() -> None:
    """Drop every cached matcher."""
    _matcher_for_key.cache_clear()
