"""Command-line front door for fstree.

Parses CLI options, builds a snapshot filter from config plus flags, and
dispatches to the list/find/best/watch subcommands.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TextIO

from . import config
from .errors import InvalidRootError
from .filter import FSTreeFilter
from .gitignore import get_gitignore_matcher
from .refresh import SnapshotRefresher
from .tree import FSTree

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_INVALID_ROOT = 2


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _positive_float(value: str) -> float:
    """argparse type for positive float values."""
    try:
        parsed = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be > 0")
    return parsed


def _add_filter_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("root", help="Directory to snapshot.")
    parser.add_argument("--show-hidden", action="store_true", help="Include dot-files and dot-folders.")
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Exclude basenames matching PATTERN (repeatable).",
    )
    parser.add_argument(
        "--ext",
        action="append",
        default=None,
        metavar="EXT",
        help="Only keep files with extension EXT (repeatable).",
    )
    parser.add_argument("--skip-gitignored", action="store_true", help="Drop paths ignored by git.")
    parser.add_argument("--max-depth", type=_positive_int, default=None, help="Limit walk depth.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug details to stderr.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fstree",
        description="Snapshot a directory tree, query it, and report changes between snapshots.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="Print every path in a snapshot.")
    _add_filter_options(list_parser)
    kind = list_parser.add_mutually_exclusive_group()
    kind.add_argument("--files", action="store_true", help="Only print files.")
    kind.add_argument("--folders", action="store_true", help="Only print folders.")

    find_parser = subparsers.add_parser("find", help="Find files by basename.")
    _add_filter_options(find_parser)
    find_parser.add_argument("name", help="Basename to look up.")
    find_parser.add_argument("--all", action="store_true", help="Print every match, not just one.")

    best_parser = subparsers.add_parser("best", help="Find the best file for a path suffix.")
    _add_filter_options(best_parser)
    best_parser.add_argument("suffix", help="Path suffix such as Sources/Foo.h.")
    best_parser.add_argument(
        "--prefer",
        default=None,
        metavar="SUBTREE",
        help="Prefer matches under SUBTREE (relative paths resolve against the current directory).",
    )

    watch_parser = subparsers.add_parser("watch", help="Poll the tree and print changed paths.")
    _add_filter_options(watch_parser)
    watch_parser.add_argument(
        "--interval",
        type=_positive_float,
        default=None,
        help="Seconds between polls (default from config).",
    )
    watch_parser.add_argument(
        "--count",
        type=_positive_int,
        default=None,
        help="Stop after this many polls.",
    )
    return parser


def build_filter(args: argparse.Namespace, root: Path) -> FSTreeFilter:
    """Merge persisted filter settings with command-line overrides."""
    settings = config.load_filter_settings()
    skip_gitignored = args.skip_gitignored or settings.skip_gitignored
    extensions = args.ext if args.ext is not None else settings.enabled_extensions
    return FSTreeFilter.from_options(
        ignore_hidden=settings.ignore_hidden and not args.show_hidden,
        excluded_names=(*settings.excluded_names, *args.exclude),
        enabled_extensions=extensions,
        gitignore_matcher=get_gitignore_matcher(root) if skip_gitignored else None,
        max_depth=args.max_depth if args.max_depth is not None else settings.max_depth,
    )


def describe_change(path: str, previous: FSTree, current: FSTree) -> str:
    """Label one changed path as added, removed, or modified."""
    if path not in previous:
        return "added"
    if path not in current:
        return "removed"
    return "modified"


def _run_list(tree: FSTree, args: argparse.Namespace, out: TextIO) -> int:
    if args.files:
        paths = tree.file_paths
    elif args.folders:
        paths = tree.folder_paths
    else:
        paths = tuple(item.path for item in tree.items)
    for path in paths:
        out.write(path + "\n")
    out.write(
        f"# {len(tree.file_paths)} files, {len(tree.folder_paths)} folders in {tree.build_time:.3f}s\n"
    )
    return EXIT_OK


def _run_find(tree: FSTree, args: argparse.Namespace, out: TextIO) -> int:
    if args.all:
        paths = tree.paths_of_files_named(args.name)
    else:
        single = tree.path_of_file_named(args.name)
        paths = [single] if single is not None else []
    if not paths:
        return EXIT_NOT_FOUND
    for path in paths:
        out.write(path + "\n")
    return EXIT_OK


def _run_best(tree: FSTree, args: argparse.Namespace, out: TextIO) -> int:
    prefer = str(Path(args.prefer).expanduser().absolute()) if args.prefer else None
    path = tree.path_of_best_file_matching_path_suffix(args.suffix, preferring_subtree=prefer)
    if path is None:
        return EXIT_NOT_FOUND
    out.write(path + "\n")
    return EXIT_OK


def run_watch(
    root: Path,
    path_filter: FSTreeFilter,
    interval: float,
    count: int | None,
    out: TextIO,
    *,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Poll ``root`` every ``interval`` seconds and print each change."""
    refresher = SnapshotRefresher(root, path_filter, poll_seconds=interval)
    refresher.refresh()
    polls = 0
    while count is None or polls < count:
        sleep(interval)
        previous = refresher.current
        assert previous is not None
        changes = refresher.refresh()
        polls += 1
        current = refresher.current
        assert current is not None
        for path in sorted(changes):
            out.write(f"{describe_change(path, previous, current)}\t{path}\n")
        if changes:
            out.flush()
    return EXIT_OK


def main(argv: Sequence[str] | None = None, out: TextIO | None = None) -> int:
    """Parse arguments and run one subcommand, returning the exit status."""
    out = out if out is not None else sys.stdout
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    root = Path(args.root).expanduser()
    try:
        path_filter = build_filter(args, root)
        if args.command == "watch":
            interval = args.interval if args.interval is not None else config.load_poll_seconds()
            return run_watch(root, path_filter, interval, args.count, out)
        tree = FSTree(root, path_filter)
    except InvalidRootError as exc:
        sys.stderr.write(f"fstree: {exc}\n")
        return EXIT_INVALID_ROOT

    if args.command == "list":
        return _run_list(tree, args, out)
    if args.command == "find":
        return _run_find(tree, args, out)
    return _run_best(tree, args, out)


if __name__ == "__main__":
    raise SystemExit(main())
