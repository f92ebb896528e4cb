"""Inclusion filters for snapshot construction.

A path filter is anything that answers ``accepts(path, is_dir)`` for a
root-relative path, or a plain callable with the same signature.
``FSTreeFilter`` is the stock implementation.
"""

from __future__ import annotations

import fnmatch
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Protocol, Union, runtime_checkable

from .gitignore import GitIgnoreMatcher


@runtime_checkable
class PathFilter(Protocol):
    def accepts(self, path: str, is_dir: bool) -> bool: ...


PathPredicate = Callable[[str, bool], bool]
PathFilterLike = Union[PathFilter, PathPredicate]


def as_predicate(path_filter: PathFilterLike | None) -> PathPredicate | None:
    """Normalize a filter object or callable into a plain predicate."""
    if path_filter is None:
        return None
    if isinstance(path_filter, PathFilter):
        return path_filter.accepts
    if callable(path_filter):
        return path_filter
    raise TypeError(f"path filter must be callable or define accepts(), got {type(path_filter).__name__}")


def _normalize_extension(ext: str) -> str:
    return ext.strip().lstrip(".").casefold()


@dataclass(frozen=True)
class FSTreeFilter:
    """Configurable inclusion rules for files and folders.

    ``excluded_names`` are fnmatch patterns tested against basenames;
    ``excluded_paths`` are tested against root-relative paths and exclude the
    whole subtree under a matching folder. ``enabled_extensions`` restricts
    files only. ``max_depth`` counts path segments, so ``1`` keeps direct
    children of the root.
    """

    ignore_hidden: bool = True
    excluded_names: tuple[str, ...] = ()
    enabled_extensions: frozenset[str] | None = None
    excluded_paths: tuple[str, ...] = ()
    gitignore_matcher: GitIgnoreMatcher | None = field(default=None, compare=False)
    max_depth: int | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "excluded_names", tuple(self.excluded_names))
        object.__setattr__(self, "excluded_paths", tuple(self.excluded_paths))
        if self.enabled_extensions is not None:
            object.__setattr__(
                self,
                "enabled_extensions",
                frozenset(_normalize_extension(ext) for ext in self.enabled_extensions),
            )
        if self.max_depth is not None and self.max_depth < 1:
            raise ValueError("max_depth must be >= 1")

    @classmethod
    def from_options(
        cls,
        *,
        ignore_hidden: bool = True,
        excluded_names: Iterable[str] = (),
        enabled_extensions: Iterable[str] | None = None,
        excluded_paths: Iterable[str] = (),
        gitignore_matcher: GitIgnoreMatcher | None = None,
        max_depth: int | None = None,
    ) -> FSTreeFilter:
        return cls(
            ignore_hidden=ignore_hidden,
            excluded_names=tuple(excluded_names),
            enabled_extensions=frozenset(enabled_extensions) if enabled_extensions is not None else None,
            excluded_paths=tuple(excluded_paths),
            gitignore_matcher=gitignore_matcher,
            max_depth=max_depth,
        )

    def accepts_file_name(self, name: str, is_dir: bool = False) -> bool:
        """Apply only the basename rules (hidden, excluded names, extensions)."""
        if self.ignore_hidden and name.startswith("."):
            return False
        if any(fnmatch.fnmatchcase(name, pattern) for pattern in self.excluded_names):
            return False
        if not is_dir and self.enabled_extensions is not None:
            _stem, dot, ext = name.rpartition(".")
            if not dot or _normalize_extension(ext) not in self.enabled_extensions:
                return False
        return True

    def _excluded_by_path(self, path: str) -> bool:
        for pattern in self.excluded_paths:
            current = path
            while current:
                if fnmatch.fnmatchcase(current, pattern):
                    return True
                current = current.rpartition("/")[0]
        return False

    def accepts(self, path: str, is_dir: bool) -> bool:
        """Return whether the root-relative ``path`` belongs in a snapshot."""
        if self.max_depth is not None and path.count("/") + 1 > self.max_depth:
            return False
        if not self.accepts_file_name(path.rpartition("/")[2], is_dir):
            return False
        if self.excluded_paths and self._excluded_by_path(path):
            return False
        if self.gitignore_matcher is not None and self.gitignore_matcher.is_ignored(path):
            return False
        return True

    __call__ = accepts


__all__ = [
    "FSTreeFilter",
    "PathFilter",
    "PathFilterLike",
    "PathPredicate",
    "as_predicate",
]
