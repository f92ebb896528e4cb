"""Immutable directory snapshots with diffing and basename lookups.

An ``FSTree`` is built by one walk of a root directory and never changes
afterwards. Two snapshots of the same root can be diffed to find the paths
that were added, removed, or modified between the walks; lookups answer
basename and path-suffix queries from indexes built at construction time.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable, Iterator
from pathlib import Path, PurePath

from .errors import InvalidRootError
from .filter import PathFilterLike, as_predicate
from .fs import Walker, accept_all, walk_directory
from .matching import best_suffix_match, matches_path_suffix, normalize_relative, relative_subtree
from .types import Fingerprint, TreeItem

logger = logging.getLogger(__name__)

_MISSING = object()


def _validate_root(root: Path) -> Path:
    try:
        resolved = root.resolve(strict=True)
    except FileNotFoundError as exc:
        raise InvalidRootError(root, "does not exist") from exc
    except OSError as exc:
        raise InvalidRootError(root, str(exc)) from exc
    if not resolved.is_dir():
        raise InvalidRootError(root, "not a directory")
    return resolved


class FSTree:
    """Read-only snapshot of the files and folders under ``root_path``.

    Paths are stored root-relative with ``/`` separators. The snapshot owns all
    of its items; a fresh disk state needs a fresh ``FSTree``.
    """

    __slots__ = (
        "_root_path",
        "_given_root",
        "_build_time",
        "_items",
        "_by_path",
        "_file_paths",
        "_folder_paths",
        "_files_by_name",
        "_frozen",
    )

    def __init__(
        self,
        root: str | PurePath,
        path_filter: PathFilterLike | None = None,
        *,
        walker: Walker = walk_directory,
    ) -> None:
        started = time.perf_counter()
        given_root = Path(os.path.normpath(Path(root).absolute()))
        root_path = _validate_root(Path(root))
        accepts = as_predicate(path_filter) or accept_all

        items: list[TreeItem] = []
        by_path: dict[str, TreeItem] = {}
        try:
            for entry in walker(root_path, accepts):
                if entry.path in by_path:
                    logger.debug("Ignoring duplicate walker entry %s", entry.path)
                    continue
                item = TreeItem.from_walk_entry(entry)
                items.append(item)
                by_path[item.path] = item
        except InvalidRootError:
            raise
        except (FileNotFoundError, NotADirectoryError) as exc:
            raise InvalidRootError(root_path, "disappeared during walk") from exc

        files_by_name: dict[str, list[str]] = {}
        file_paths: list[str] = []
        folder_paths: list[str] = []
        for item in items:
            if item.is_folder:
                folder_paths.append(item.path)
                continue
            file_paths.append(item.path)
            files_by_name.setdefault(item.name, []).append(item.path)

        self._root_path = root_path
        self._given_root = given_root
        self._items = tuple(items)
        self._by_path = by_path
        self._file_paths = tuple(file_paths)
        self._folder_paths = tuple(folder_paths)
        self._files_by_name = {name: tuple(sorted(paths)) for name, paths in files_by_name.items()}
        self._build_time = time.perf_counter() - started
        self._frozen = True
        logger.debug(
            "Built snapshot of %s: %d files, %d folders in %.3fs",
            root_path,
            len(file_paths),
            len(folder_paths),
            self._build_time,
        )

    def __setattr__(self, name: str, value: object) -> None:
        if getattr(self, "_frozen", False):
            raise AttributeError(f"{type(self).__name__} is immutable")
        object.__setattr__(self, name, value)

    def __repr__(self) -> str:
        return f"FSTree({str(self._root_path)!r}, items={len(self._items)})"

    @property
    def root_path(self) -> Path:
        return self._root_path

    @property
    def build_time(self) -> float:
        """Seconds spent walking and indexing; diagnostic only."""
        return self._build_time

    @property
    def items(self) -> tuple[TreeItem, ...]:
        return self._items

    @property
    def file_paths(self) -> tuple[str, ...]:
        return self._file_paths

    @property
    def folder_paths(self) -> tuple[str, ...]:
        return self._folder_paths

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[TreeItem]:
        return iter(self._items)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and normalize_relative(path) in self._by_path

    def item_for_path(self, path: str) -> TreeItem | None:
        return self._by_path.get(normalize_relative(path))

    def absolute_path(self, path: str) -> Path:
        """Join a root-relative snapshot path onto ``root_path``."""
        return self._root_path / path

    def fingerprints(self) -> dict[str, Fingerprint]:
        """Return a fresh ``path -> fingerprint`` mapping."""
        return {item.path: item.fingerprint for item in self._items}

    def difference_from(self, previous: FSTree) -> frozenset[str]:
        """Return paths added, removed, or modified since ``previous``.

        The smaller snapshot is loaded into a dict and the larger one is
        matched against it in a single pass; paths left over in the dict exist
        only in the smaller snapshot.
        """
        if previous is self:
            return frozenset()
        if previous.root_path != self._root_path:
            logger.warning(
                "Diffing snapshots of different roots (%s vs %s); result is undefined",
                previous.root_path,
                self._root_path,
            )

        if len(previous) <= len(self):
            smaller, larger = previous, self
        else:
            smaller, larger = self, previous

        remaining = smaller.fingerprints()
        changed: set[str] = set()
        for item in larger.items:
            fingerprint = remaining.pop(item.path, _MISSING)
            if fingerprint is _MISSING or fingerprint != item.fingerprint:
                changed.add(item.path)
        changed.update(remaining)
        return frozenset(changed)

    def contains_file_named(self, name: str) -> bool:
        return name in self._files_by_name

    def path_of_file_named(self, name: str) -> str | None:
        """Return one file path with basename ``name``.

        With duplicates, the lexicographically smallest path wins.
        """
        paths = self._files_by_name.get(name)
        return paths[0] if paths else None

    def paths_of_files_named(self, name: str) -> list[str]:
        return list(self._files_by_name.get(name, ()))

    def paths_of_files_matching(self, predicate: Callable[[str], bool]) -> list[str]:
        """Return file paths whose basename satisfies ``predicate``, in walk order."""
        matched_names = {name for name in self._files_by_name if predicate(name)}
        if not matched_names:
            return []
        return [path for path in self._file_paths if path.rpartition("/")[2] in matched_names]

    def path_of_best_file_matching_path_suffix(
        self,
        suffix: str,
        preferring_subtree: str | PurePath | None = None,
    ) -> str | None:
        """Return the file whose path ends with ``suffix`` at a segment boundary.

        Matches under ``preferring_subtree`` win; remaining ties go to the
        shallowest path, then the lexicographically smallest one.
        """
        normalized = normalize_relative(suffix)
        if not normalized:
            return None
        name = normalized.rpartition("/")[2]
        candidates = [
            path
            for path in self._files_by_name.get(name, ())
            if matches_path_suffix(path, normalized)
        ]
        if not candidates:
            return None
        subtree = relative_subtree(self._root_path, preferring_subtree, given_root=self._given_root)
        return best_suffix_match(candidates, subtree)


__all__ = ["FSTree"]
