"""Tests for config persistence and input sanitization.

Validates filter-setting round-tripping and poll-interval defaults.
Ensures malformed config data is safely normalized on load.
"""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from fstree import config
from fstree.config import FilterSettings


class ConfigBehaviorTests(unittest.TestCase):
    def test_load_config_returns_empty_dict_for_missing_or_malformed_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            with mock.patch("fstree.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})
                config_path.write_text("{not json", encoding="utf-8")
                self.assertEqual(config.load_config(), {})
                config_path.write_text("[1, 2]", encoding="utf-8")
                self.assertEqual(config.load_config(), {})

    def test_filter_settings_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "nested" / "config.json"
            expected = FilterSettings(
                ignore_hidden=False,
                excluded_names=("*.o", "node_modules"),
                enabled_extensions=("c", "h"),
                skip_gitignored=True,
                max_depth=4,
            )
            with mock.patch("fstree.config.CONFIG_PATH", config_path):
                config.save_filter_settings(expected)
                self.assertEqual(config.load_filter_settings(), expected)

    def test_load_filter_settings_sanitizes_invalid_entries(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            with mock.patch("fstree.config.CONFIG_PATH", config_path):
                config.save_config(
                    {
                        "filter": {
                            "ignore_hidden": "yes",
                            "excluded_names": ["*.tmp", 3, ""],
                            "enabled_extensions": "py",
                            "skip_gitignored": 1,
                            "max_depth": True,
                        }
                    }
                )

                loaded = config.load_filter_settings()

            self.assertEqual(
                loaded,
                FilterSettings(
                    ignore_hidden=True,
                    excluded_names=("*.tmp",),
                    enabled_extensions=None,
                    skip_gitignored=False,
                    max_depth=None,
                ),
            )

    def test_poll_seconds_default_and_persistence(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            with mock.patch("fstree.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_poll_seconds(), config.DEFAULT_POLL_SECONDS)
                config.save_poll_seconds(0)
                self.assertEqual(config.load_poll_seconds(), config.DEFAULT_POLL_SECONDS)
                config.save_poll_seconds(2.5)
                self.assertEqual(config.load_poll_seconds(), 2.5)
                config.save_config({"poll_seconds": False})
                self.assertEqual(config.load_poll_seconds(), config.DEFAULT_POLL_SECONDS)

    def test_save_config_logs_write_failures(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "blocker"
            blocker.write_text("file, not a directory", encoding="utf-8")
            with mock.patch("fstree.config.CONFIG_PATH", blocker / "config.json"):
                with self.assertLogs("fstree.config", level="WARNING"):
                    config.save_config({"poll_seconds": 1.0})

    def test_build_filter_uses_settings(self) -> None:
        settings = FilterSettings(ignore_hidden=False, excluded_names=("*.o",), enabled_extensions=("c",))

        path_filter = settings.build_filter(Path("/unused"))

        self.assertTrue(path_filter.accepts(".hidden.c", False))
        self.assertFalse(path_filter.accepts("main.o", False))
        self.assertFalse(path_filter.accepts("main.h", False))
        self.assertIsNone(path_filter.gitignore_matcher)


if __name__ == "__main__":
    unittest.main()
