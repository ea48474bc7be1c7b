"""Tests for picker config validation and persistence.

Invalid values on disk must never stop the picker from opening: they are
reported and replaced by defaults.
"""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from fastpick import config
from fastpick.config import ConfigError, LoggingConfig, PickerConfig, PreviewConfig


class ConfigValidationTests(unittest.TestCase):
    def test_defaults(self) -> None:
        picker = PickerConfig()

        self.assertEqual(picker.max_results, 100)
        self.assertEqual(picker.preview.cache_size, 50)
        self.assertEqual(picker.preview.max_lines, 800)
        self.assertEqual(picker.preview.max_size, 2 * 1024 * 1024)
        self.assertAlmostEqual(picker.preview.debounce_seconds, 0.010)
        self.assertAlmostEqual(picker.scan_poll_seconds, 0.010)
        self.assertFalse(picker.logging.enabled)

    def test_out_of_range_values_raise(self) -> None:
        with self.assertRaises(ConfigError):
            PreviewConfig(cache_size=0)
        with self.assertRaises(ConfigError):
            PreviewConfig(debounce_ms=-1)
        with self.assertRaises(ConfigError):
            PickerConfig(max_results=True)
        with self.assertRaises(ConfigError):
            LoggingConfig(level="chatty")

    def test_with_show_scores_returns_copy(self) -> None:
        picker = PickerConfig()
        debug = picker.with_show_scores(True)

        self.assertFalse(picker.show_scores)
        self.assertTrue(debug.show_scores)
        self.assertEqual(debug.preview, picker.preview)

    def test_from_mapping_keeps_valid_and_drops_invalid_fields(self) -> None:
        data = {
            "max_results": 25,
            "list_height": -3,
            "show_scores": "yes",
            "unknown_key": 1,
            "preview": {"cache_size": 7, "max_lines": "many", "enabled": False},
            "logging": {"enabled": True, "level": "verbose", "log_file": None},
        }

        with self.assertLogs("fastpick.config", level="WARNING") as logs:
            picker = PickerConfig.from_mapping(data)

        self.assertEqual(picker.max_results, 25)
        self.assertEqual(picker.list_height, 20)
        self.assertFalse(picker.show_scores)
        self.assertEqual(picker.preview.cache_size, 7)
        self.assertEqual(picker.preview.max_lines, 800)
        self.assertFalse(picker.preview.enabled)
        self.assertTrue(picker.logging.enabled)
        self.assertEqual(picker.logging.level, "info")
        self.assertIsNone(picker.logging.log_file)
        self.assertEqual(len(logs.records), 4)

    def test_from_mapping_ignores_non_object_sections(self) -> None:
        with self.assertLogs("fastpick.config", level="WARNING"):
            picker = PickerConfig.from_mapping({"preview": [1, 2], "base_path": "/src"})

        self.assertEqual(picker.preview, PreviewConfig())
        self.assertEqual(picker.base_path, "/src")


class ConfigPersistenceTests(unittest.TestCase):
    def test_save_and_load_round_trip(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "nested" / "config.json"
            with mock.patch("fastpick.config.CONFIG_PATH", config_path):
                saved = PickerConfig(max_results=12, preview=PreviewConfig(debounce_ms=25))
                config.save_picker_config(saved)

                self.assertTrue(config_path.exists())
                self.assertEqual(config.load_picker_config(), saved)

    def test_missing_file_loads_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch("fastpick.config.CONFIG_PATH", Path(tmp) / "absent.json"):
                self.assertEqual(config.load_config_data(), {})
                self.assertEqual(config.load_picker_config(), PickerConfig())

    def test_malformed_or_non_object_json_loads_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "config.json"
            with mock.patch("fastpick.config.CONFIG_PATH", config_path):
                config_path.write_text("{not json", encoding="utf-8")
                with self.assertLogs("fastpick.config", level="WARNING"):
                    self.assertEqual(config.load_config_data(), {})

                config_path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
                self.assertEqual(config.load_config_data(), {})


if __name__ == "__main__":
    unittest.main()
