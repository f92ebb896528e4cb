"""CLI subcommand behavior tests.

Verifies how ``fstree.cli.main`` builds filters, prints lookups, and maps
invalid roots and lookup misses onto exit codes.
"""

from __future__ import annotations

import io
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from fstree import cli
from fstree.filter import FSTreeFilter


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        for rel in ("a/X.txt", "b/X.txt", "src/main.c", "src/main.o", ".hidden/secret.txt"):
            target = self.root / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(rel, encoding="utf-8")
        config_patch = mock.patch("fstree.config.CONFIG_PATH", self.root / "no-config" / "config.json")
        config_patch.start()
        self.addCleanup(config_patch.stop)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _run(self, *argv: str) -> tuple[int, str]:
        out = io.StringIO()
        code = cli.main(list(argv), out=out)
        return code, out.getvalue()

    def test_list_prints_files_and_summary(self) -> None:
        code, output = self._run("list", str(self.root), "--files")

        lines = output.splitlines()
        self.assertEqual(code, cli.EXIT_OK)
        self.assertEqual(lines[:-1], ["a/X.txt", "b/X.txt", "src/main.c", "src/main.o"])
        self.assertTrue(lines[-1].startswith("# 4 files, 3 folders"))

    def test_list_honors_exclude_and_show_hidden(self) -> None:
        code, output = self._run("list", str(self.root), "--folders", "--show-hidden", "--exclude", "src")

        self.assertEqual(code, cli.EXIT_OK)
        self.assertEqual(output.splitlines()[:-1], [".hidden", "a", "b"])

    def test_find_prints_one_or_all_matches(self) -> None:
        code, output = self._run("find", str(self.root), "X.txt")
        self.assertEqual((code, output), (cli.EXIT_OK, "a/X.txt\n"))

        code, output = self._run("find", str(self.root), "X.txt", "--all")
        self.assertEqual((code, output), (cli.EXIT_OK, "a/X.txt\nb/X.txt\n"))

        code, output = self._run("find", str(self.root), "missing.txt")
        self.assertEqual((code, output), (cli.EXIT_NOT_FOUND, ""))

    def test_best_prefers_subtree(self) -> None:
        code, output = self._run("best", str(self.root), "X.txt", "--prefer", str(self.root / "b"))

        self.assertEqual((code, output), (cli.EXIT_OK, "b/X.txt\n"))

    def test_best_resolves_relative_prefer_against_cwd(self) -> None:
        previous = os.getcwd()
        os.chdir(self.root / "a")
        try:
            from_sibling = self._run("best", str(self.root), "X.txt", "--prefer", "../b")
            from_here = self._run("best", str(self.root), "X.txt", "--prefer", ".")
        finally:
            os.chdir(previous)

        self.assertEqual(from_sibling, (cli.EXIT_OK, "b/X.txt\n"))
        self.assertEqual(from_here, (cli.EXIT_OK, "a/X.txt\n"))

    def test_best_with_extension_filter_misses(self) -> None:
        code, output = self._run("best", str(self.root), "main.o", "--ext", "c")

        self.assertEqual((code, output), (cli.EXIT_NOT_FOUND, ""))

    def test_invalid_root_exits_with_status_two(self) -> None:
        with mock.patch("sys.stderr", new_callable=io.StringIO) as stderr:
            code, output = self._run("list", str(self.root / "missing"))

        self.assertEqual(code, cli.EXIT_INVALID_ROOT)
        self.assertEqual(output, "")
        self.assertIn("does not exist", stderr.getvalue())

    def test_rejects_non_positive_max_depth(self) -> None:
        with mock.patch("sys.stderr", new_callable=io.StringIO), self.assertRaises(SystemExit) as ctx:
            self._run("list", str(self.root), "--max-depth", "0")

        self.assertEqual(ctx.exception.code, 2)

    def test_run_watch_prints_labelled_changes(self) -> None:
        moves = [
            lambda: (self.root / "new.txt").write_text("n", encoding="utf-8"),
            lambda: (self.root / "a" / "X.txt").unlink(),
            lambda: os.utime(self.root / "src" / "main.c", ns=(7_000_000_000, 7_000_000_000)),
        ]

        def fake_sleep(_seconds: float) -> None:
            moves.pop(0)()

        out = io.StringIO()
        code = cli.run_watch(self.root, FSTreeFilter(), 0.01, 3, out, sleep=fake_sleep)

        self.assertEqual(code, cli.EXIT_OK)
        self.assertEqual(
            out.getvalue().splitlines(),
            ["added\tnew.txt", "removed\ta/X.txt", "modified\tsrc/main.c"],
        )

    def test_watch_subcommand_uses_configured_interval(self) -> None:
        with mock.patch("fstree.cli.run_watch", return_value=cli.EXIT_OK) as run_watch, mock.patch(
            "fstree.config.load_poll_seconds", return_value=4.0
        ):
            code, _output = self._run("watch", str(self.root), "--count", "1")

        self.assertEqual(code, cli.EXIT_OK)
        root, _path_filter, interval, count, _out = run_watch.call_args.args
        self.assertEqual(root, self.root)
        self.assertEqual(interval, 4.0)
        self.assertEqual(count, 1)


if __name__ == "__main__":
    unittest.main()
