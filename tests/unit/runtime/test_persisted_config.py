from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from ctxselect import config


class PersistedConfigTests(unittest.TestCase):
    def test_defaults_when_config_is_missing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch("ctxselect.config.CONFIG_PATH", Path(tmp) / "config.json"):
                self.assertEqual(config.load_config(), {})
                self.assertFalse(config.load_show_hidden())
                self.assertTrue(config.load_skip_gitignored())
                self.assertEqual(config.load_output_format(), "markdown")
                self.assertIsNone(config.load_theme_name())

    def test_values_round_trip_under_distinct_keys(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "nested" / "config.json"
            with mock.patch("ctxselect.config.CONFIG_PATH", config_path):
                config.save_setting("show_hidden", True)
                config.save_setting("skip_gitignored", False)
                config.save_output_format("xml")
                config.save_setting("theme", " light ")

                saved = config.load_config()
                self.assertEqual(
                    saved,
                    {"show_hidden": True, "skip_gitignored": False, "output_format": "xml", "theme": "light"},
                )
                self.assertTrue(config.load_show_hidden())
                self.assertFalse(config.load_skip_gitignored())
                self.assertEqual(config.load_output_format(), "xml")
                self.assertEqual(config.load_theme_name(), "light")

    def test_malformed_config_falls_back_to_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            config_path.write_text("[1, 2", encoding="utf-8")
            with mock.patch("ctxselect.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})
                self.assertEqual(config.load_output_format(), "markdown")

            config_path.write_text('["not", "an", "object"]', encoding="utf-8")
            with mock.patch("ctxselect.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {})

    def test_invalid_values_are_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            original = '{"show_hidden": "yes", "output_format": "yaml"}'
            config_path.write_text(original, encoding="utf-8")
            with mock.patch("ctxselect.config.CONFIG_PATH", config_path):
                self.assertFalse(config.load_show_hidden())
                self.assertEqual(config.load_output_format(), "markdown")
                config.save_output_format("yaml")
                self.assertEqual(config_path.read_text(encoding="utf-8"), original)

    def test_unwritable_config_reports_failure(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            blocker = Path(tmp) / "blocker"
            blocker.write_text("", encoding="utf-8")
            with mock.patch("ctxselect.config.CONFIG_PATH", blocker / "config.json"):
                with self.assertLogs("ctxselect.config", level="WARNING"):
                    self.assertFalse(config.save_output_format("xml"))
                self.assertEqual(config.load_output_format(), "markdown")


if __name__ == "__main__":
    unittest.main()
