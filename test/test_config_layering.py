"""Tests for layered config parsing and validation."""

import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from QuoteLock.config import load_config_with_defaults, merge_config_dicts, parse_config_dict


def _base_raw_config() -> dict:
    return {
        "log": {"level": "INFO", "to_file": False, "dir": "log"},
        "provider": {
            "name": "wikiquote",
            "timeout": 15,
            "jinrishici": {"token_env": "JINRISHICI_TOKEN"},
            "feed": {"url": "https://example.com/rss", "min_refresh_interval": 3600},
        },
        "storage": {"db_path": "database/quotelock.db"},
        "display": {
            "placeholder_text": "Open the QuoteLock app",
            "placeholder_source": "to download your first quote",
            "narrow_offset": -65,
            "wide_offset": -113,
            "default_text_size": 16,
            "default_source_size": 14,
            "fonts_dir": None,
        },
        "schedule": {"check_every": 900},
        "network": {"check_url": None, "check_timeout": 3},
    }


_BASE_YAML = """
log:
  level: INFO
provider:
  name: wikiquote
storage:
  db_path: database/quotelock.db
schedule:
  check_every: 900
"""


class TestConfigLayering(unittest.TestCase):
    def test_parse_success_nested_access(self) -> None:
        cfg = parse_config_dict(_base_raw_config())
        self.assertEqual(cfg.runtime.level, "INFO")
        self.assertEqual(cfg.provider.name, "wikiquote")
        self.assertEqual(cfg.provider.timeout, 15.0)
        self.assertEqual(cfg.provider.feed_min_refresh_interval, 3600)
        self.assertEqual(cfg.storage.db_path, "database/quotelock.db")
        self.assertEqual(cfg.display.wide_offset, -113.0)
        self.assertIsNone(cfg.refresh.check_url)

    def test_optional_sections_use_defaults(self) -> None:
        raw = {"provider": {"name": "feed"}, "storage": {"db_path": "x.db"}}
        cfg = parse_config_dict(raw)
        self.assertEqual(cfg.runtime.level, "INFO")
        self.assertEqual(cfg.display.default_text_size, 16)
        self.assertEqual(cfg.refresh.check_every, 900)
        self.assertTrue(cfg.provider.feed_url.startswith("https://"))

    def test_provider_name_normalized_and_validated(self) -> None:
        raw = _base_raw_config()
        raw["provider"]["name"] = " JinRiShiCi "
        self.assertEqual(parse_config_dict(raw).provider.name, "jinrishici")
        raw["provider"]["name"] = "unknown"
        with self.assertRaisesRegex(ValueError, "provider\\.name"):
            parse_config_dict(raw)

    def test_missing_provider_section(self) -> None:
        raw = _base_raw_config()
        del raw["provider"]
        with self.assertRaisesRegex(ValueError, "provider"):
            parse_config_dict(raw)

    def test_timeout_type_error_contains_key(self) -> None:
        raw = _base_raw_config()
        raw["provider"]["timeout"] = "15"
        with self.assertRaisesRegex(TypeError, "provider\\.timeout"):
            parse_config_dict(raw)

    def test_jinrishici_token_read_from_env(self) -> None:
        raw = _base_raw_config()
        with patch.dict(os.environ, {"JINRISHICI_TOKEN": " tok "}, clear=False):
            cfg = parse_config_dict(raw)
        self.assertEqual(cfg.provider.jinrishici_token, "tok")

    def test_log_level_validated(self) -> None:
        raw = _base_raw_config()
        raw["log"]["level"] = "verbose"
        with self.assertRaisesRegex(ValueError, "log\\.level"):
            parse_config_dict(raw)

    def test_schedule_must_be_positive(self) -> None:
        raw = _base_raw_config()
        raw["schedule"]["check_every"] = 0
        with self.assertRaisesRegex(ValueError, "schedule\\.check_every"):
            parse_config_dict(raw)

    def test_check_url_must_be_http(self) -> None:
        raw = _base_raw_config()
        raw["network"]["check_url"] = "ftp://example.com"
        with self.assertRaisesRegex(ValueError, "network\\.check_url"):
            parse_config_dict(raw)

    def test_blank_check_url_means_disabled(self) -> None:
        raw = _base_raw_config()
        raw["network"]["check_url"] = "  "
        self.assertIsNone(parse_config_dict(raw).refresh.check_url)

    def test_display_size_validated(self) -> None:
        raw = _base_raw_config()
        raw["display"]["default_source_size"] = 0
        with self.assertRaisesRegex(ValueError, "display\\.default_source_size"):
            parse_config_dict(raw)

    def test_feed_url_must_be_http_when_feed_selected(self) -> None:
        raw = _base_raw_config()
        raw["provider"]["name"] = "feed"
        raw["provider"]["feed"]["url"] = "file:///tmp/quotes.xml"
        with self.assertRaisesRegex(ValueError, "provider\\.feed\\.url"):
            parse_config_dict(raw)
        raw["provider"]["feed"]["url"] = " "
        with self.assertRaisesRegex(ValueError, "provider\\.feed\\.url"):
            parse_config_dict(raw)

    def test_storage_path_expanded_and_busy_timeout_default(self) -> None:
        raw = _base_raw_config()
        raw["storage"]["db_path"] = "~/quotelock/quotes.db"
        cfg = parse_config_dict(raw)
        self.assertEqual(cfg.storage.db_path, os.path.expanduser("~/quotelock/quotes.db"))
        self.assertEqual(cfg.storage.busy_timeout, 5.0)

    def test_storage_path_must_name_a_file(self) -> None:
        raw = _base_raw_config()
        with tempfile.TemporaryDirectory() as tmp:
            raw["storage"]["db_path"] = tmp
            with self.assertRaisesRegex(ValueError, "storage\\.db_path"):
                parse_config_dict(raw)

    def test_busy_timeout_must_be_positive(self) -> None:
        raw = _base_raw_config()
        raw["storage"]["busy_timeout"] = 0
        with self.assertRaisesRegex(ValueError, "storage\\.busy_timeout"):
            parse_config_dict(raw)

    def test_merge_is_deep(self) -> None:
        merged = merge_config_dicts(
            {"provider": {"name": "wikiquote", "timeout": 15}},
            {"provider": {"timeout": 5}},
        )
        self.assertEqual(merged, {"provider": {"name": "wikiquote", "timeout": 5}})


class TestConfigOverride(unittest.TestCase):
    def test_override_merges_with_defaults(self) -> None:
        override_yaml = """
log:
  level: debug
provider:
  name: feed
  feed:
    min_refresh_interval: 60
"""
        with tempfile.TemporaryDirectory() as tmp:
            base_path = Path(tmp) / "default.yml"
            base_path.write_text(_BASE_YAML, encoding="utf-8")
            override_path = Path(tmp) / "override.yml"
            override_path.write_text(override_yaml, encoding="utf-8")

            cfg = load_config_with_defaults(override_path, default_path=base_path)

        self.assertEqual(cfg.runtime.level, "DEBUG")
        self.assertEqual(cfg.provider.name, "feed")
        self.assertEqual(cfg.provider.feed_min_refresh_interval, 60)
        self.assertEqual(cfg.storage.db_path, "database/quotelock.db")

    def test_shipped_default_config_parses(self) -> None:
        default_path = REPO_ROOT / "config" / "default.yml"
        cfg = load_config_with_defaults(default_path, default_path=default_path)
        self.assertEqual(cfg.provider.name, "wikiquote")
        self.assertEqual(cfg.display.narrow_offset, -65.0)


if __name__ == "__main__":
    unittest.main()
