"""User preferences persisted as one JSON object under the platform config dir.

A missing, unreadable or malformed file reads as "no preferences"; a value of
the wrong type reads as its default. Nothing here raises into a selection run.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path

from platformdirs import user_config_dir

from .logging import get_logger, log_event
from .output.formatter import MARKDOWN, OUTPUT_FORMATS

APP_NAME = "ctxselect"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / "config.json"

logger = get_logger(__name__)


def _is_bool(value: object) -> bool:
    return isinstance(value, bool)


def _is_format(value: object) -> bool:
    return value in OUTPUT_FORMATS


def _is_name(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


# key -> (default, validator)
SETTINGS: dict[str, tuple[object, Callable[[object], bool]]] = {
    "show_hidden": (False, _is_bool),
    "skip_gitignored": (True, _is_bool),
    "output_format": (MARKDOWN, _is_format),
    "theme": (None, _is_name),
}


def load_config() -> dict[str, object]:
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> bool:
    """Write ``data``; returns ``False`` (and logs) when the file can't be written."""
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        log_event(logger, "config.save_failed", level=logging.WARNING, path=str(CONFIG_PATH), error=str(exc))
        return False
    return True


def load_setting(key: str) -> object:
    default, valid = SETTINGS[key]
    value = load_config().get(key)
    return value if valid(value) else default


def save_setting(key: str, value: object) -> bool:
    """Persist one setting; invalid values are ignored and leave the file untouched."""
    _default, valid = SETTINGS[key]
    if not valid(value):
        return False
    if isinstance(value, str):
        value = value.strip()
    data = load_config()
    data[key] = value
    return save_config(data)


def load_show_hidden() -> bool:
    return bool(load_setting("show_hidden"))


def load_skip_gitignored() -> bool:
    return bool(load_setting("skip_gitignored"))


def load_output_format() -> str:
    return str(load_setting("output_format"))


def save_output_format(output_format: str) -> bool:
    return save_setting("output_format", output_format)


def load_theme_name() -> str | None:
    value = load_setting("theme")
    return value.strip() if isinstance(value, str) else None
