"""Public package surface for fstree.

Exports the snapshot type, its item types, the stock filter, and ``main``
for programmatic CLI invocation.
"""

from __future__ import annotations

from .errors import FSTreeError, InvalidRootError
from .filter import FSTreeFilter, PathFilter
from .tree import FSTree
from .types import ItemKind, TreeItem, WalkEntry


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "FSTree",
    "FSTreeError",
    "FSTreeFilter",
    "InvalidRootError",
    "ItemKind",
    "PathFilter",
    "TreeItem",
    "WalkEntry",
    "main",
]
