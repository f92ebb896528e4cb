"""Persistent JSON config helpers.

Stores default snapshot filter settings and the watch poll interval.
All access is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from .filter import FSTreeFilter
from .gitignore import get_gitignore_matcher

logger = logging.getLogger(__name__)

APP_NAME = "fstree"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH
DEFAULT_POLL_SECONDS = 1.0


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.debug("Ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Write failures are logged and otherwise ignored so a read-only config
    directory never breaks snapshotting.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not write config %s: %s", CONFIG_PATH, exc)


def _string_list(value: object) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(item for item in value if isinstance(item, str) and item)


def _positive_int_or_none(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value >= 1 else None


@dataclass(frozen=True)
class FilterSettings:
    """Filter options persisted between runs."""

    ignore_hidden: bool = True
    excluded_names: tuple[str, ...] = ()
    enabled_extensions: tuple[str, ...] | None = None
    skip_gitignored: bool = False
    max_depth: int | None = None

    def build_filter(self, root: Path) -> FSTreeFilter:
        """Create an ``FSTreeFilter`` for ``root`` from these settings."""
        matcher = get_gitignore_matcher(root) if self.skip_gitignored else None
        return FSTreeFilter.from_options(
            ignore_hidden=self.ignore_hidden,
            excluded_names=self.excluded_names,
            enabled_extensions=self.enabled_extensions,
            gitignore_matcher=matcher,
            max_depth=self.max_depth,
        )


def load_filter_settings() -> FilterSettings:
    """Load filter settings, dropping values of the wrong type."""
    value = load_config().get("filter")
    if not isinstance(value, dict):
        return FilterSettings()

    ignore_hidden = value.get("ignore_hidden")
    skip_gitignored = value.get("skip_gitignored")
    raw_extensions = value.get("enabled_extensions")
    return FilterSettings(
        ignore_hidden=ignore_hidden if isinstance(ignore_hidden, bool) else True,
        excluded_names=_string_list(value.get("excluded_names")),
        enabled_extensions=_string_list(raw_extensions) if isinstance(raw_extensions, list) else None,
        skip_gitignored=skip_gitignored if isinstance(skip_gitignored, bool) else False,
        max_depth=_positive_int_or_none(value.get("max_depth")),
    )


def save_filter_settings(settings: FilterSettings) -> None:
    """Persist filter settings under the ``filter`` key."""
    config = load_config()
    config["filter"] = {
        "ignore_hidden": bool(settings.ignore_hidden),
        "excluded_names": list(settings.excluded_names),
        "enabled_extensions": (
            list(settings.enabled_extensions) if settings.enabled_extensions is not None else None
        ),
        "skip_gitignored": bool(settings.skip_gitignored),
        "max_depth": settings.max_depth,
    }
    save_config(config)


def load_poll_seconds() -> float:
    """Return the persisted watch interval, or the default when unset/invalid."""
    value = load_config().get("poll_seconds")
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return DEFAULT_POLL_SECONDS
    return float(value)


def save_poll_seconds(value: float) -> None:
    """Persist the watch interval; non-positive values are ignored."""
    if value <= 0:
        return
    config = load_config()
    config["poll_seconds"] = float(value)
    save_config(config)
