#!/usr/bin/env python3
"""
Unit tests for configuration loading and validation.
"""

import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

# Add the project root to the Python path
sys.path.insert(0, str(Path(__file__).parent))

from refscout.config import (
    DEFAULT_REMOTE_CANDIDATES, Config, load_configuration, parse_categories,
    parse_mode, validate_configuration
)
from refscout.git_refs.models import ALL_CATEGORIES, RefCategory, ReconcileMode
from refscout.platform import (
    PlatformInfo, PlatformType, get_platform_specific_defaults, validate_git_availability
)


class TestParsing(unittest.TestCase):

    def test_categories_come_back_in_canonical_order(self):
        self.assertEqual(
            parse_categories("stashes,branches"),
            (RefCategory.BRANCHES, RefCategory.STASHES)
        )
        self.assertEqual(parse_categories(["tags", "TAGS "]), (RefCategory.TAGS,))
        self.assertEqual(parse_categories(RefCategory.TAGS), (RefCategory.TAGS,))
        self.assertEqual(parse_categories(None), ALL_CATEGORIES)

    def test_invalid_category(self):
        with self.assertRaises(ValueError) as context:
            parse_categories("branches,remotes")
        self.assertIn("Invalid category: remotes", str(context.exception))

    def test_mode(self):
        self.assertIs(parse_mode("Heuristic"), ReconcileMode.HEURISTIC)
        self.assertIs(parse_mode(ReconcileMode.EXACT), ReconcileMode.EXACT)
        with self.assertRaises(ValueError):
            parse_mode("fuzzy")


class TestConfig(unittest.TestCase):

    def test_defaults(self):
        config = Config()

        self.assertEqual(config.remote_candidates, DEFAULT_REMOTE_CANDIDATES)
        self.assertEqual(config.categories, ALL_CATEGORIES)
        self.assertIs(config.mode, ReconcileMode.EXACT)
        self.assertIsNone(config.limit)
        self.assertEqual(config.git_retry_attempts, 3)
        self.assertEqual(config.effective_log_level, "INFO")

    def test_normalization(self):
        config = Config(remote_candidates=["origin"], categories="tags", mode="heuristic", log_level="debug")

        self.assertEqual(config.remote_candidates, ("origin",))
        self.assertEqual(config.categories, (RefCategory.TAGS,))
        self.assertIs(config.mode, ReconcileMode.HEURISTIC)
        self.assertEqual(config.log_level, "DEBUG")

    def test_debug_overrides_log_level(self):
        self.assertEqual(Config(log_level="ERROR", debug=True).effective_log_level, "DEBUG")

    def test_invalid_values(self):
        invalid = [
            {"remote_candidates": ()},
            {"categories": ()},
            {"log_level": "LOUD"},
            {"limit": -1},
            {"git_retry_attempts": 0},
            {"git_retry_delay": -0.5},
            {"progress_interval": 0},
        ]
        for kwargs in invalid:
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(ValueError):
                    Config(**kwargs)

    def test_replace_ignores_none(self):
        base = Config(limit=5)

        changed = base.replace(limit=None, mode="heuristic")

        self.assertEqual(changed.limit, 5)
        self.assertIs(changed.mode, ReconcileMode.HEURISTIC)
        self.assertIs(base.mode, ReconcileMode.EXACT)

    def test_config_is_frozen(self):
        config = Config()
        with self.assertRaises(Exception):
            config.limit = 3


class TestLoadConfiguration(unittest.TestCase):

    @patch.dict(os.environ, {}, clear=True)
    def test_environment_defaults(self):
        config = load_configuration()

        self.assertEqual(config.remote_candidates, DEFAULT_REMOTE_CANDIDATES)
        self.assertEqual(config.categories, ALL_CATEGORIES)
        self.assertFalse(config.refresh_tracking)
        self.assertFalse(config.debug)

    @patch.dict(os.environ, {
        "REFSCOUT_REMOTES": "origin, backup",
        "REFSCOUT_CATEGORIES": "tags",
        "REFSCOUT_MODE": "heuristic",
        "REFSCOUT_LIMIT": "25",
        "REFSCOUT_GIT_RETRY_ATTEMPTS": "2",
        "REFSCOUT_GIT_RETRY_DELAY": "0",
        "REFSCOUT_LOG_LEVEL": "warning",
        "REFSCOUT_DEBUG": "true",
        "REFSCOUT_PROGRESS_INTERVAL": "50",
    }, clear=True)
    def test_environment_overrides(self):
        config = load_configuration()

        self.assertEqual(config.remote_candidates, ("origin", "backup"))
        self.assertEqual(config.categories, (RefCategory.TAGS,))
        self.assertIs(config.mode, ReconcileMode.HEURISTIC)
        self.assertEqual(config.limit, 25)
        self.assertEqual(config.git_retry_attempts, 2)
        self.assertEqual(config.git_retry_delay, 0.0)
        self.assertEqual(config.log_level, "WARNING")
        self.assertTrue(config.debug)
        self.assertEqual(config.progress_interval, 50)

    @patch.dict(os.environ, {"REFSCOUT_LIMIT": "many"}, clear=True)
    def test_bad_environment_value(self):
        with self.assertRaises(ValueError) as context:
            load_configuration()
        self.assertIn("Configuration error", str(context.exception))


class TestValidateConfiguration(unittest.TestCase):

    def test_clean_configuration(self):
        self.assertEqual(validate_configuration(Config()), [])

    def test_warnings(self):
        issues = validate_configuration(
            Config(mode="heuristic", refresh_tracking=True, limit=0, git_retry_attempts=20)
        )

        self.assertEqual(len(issues), 3)
        self.assertTrue(all(issue.startswith("WARNING: ") for issue in issues))


class TestPlatformDefaults(unittest.TestCase):

    def _defaults_on(self, platform_type):
        info = PlatformInfo()
        info._platform_type = platform_type
        with patch("refscout.platform._platform_info", info):
            return get_platform_specific_defaults()

    def test_windows_retries_longer(self):
        defaults = self._defaults_on(PlatformType.WINDOWS)

        self.assertEqual(defaults['git_retry_attempts'], 5)
        self.assertEqual(defaults['git_retry_delay'], 2.0)

    def test_linux_and_unknown(self):
        self.assertEqual(self._defaults_on(PlatformType.LINUX)['git_retry_delay'], 0.5)
        self.assertEqual(self._defaults_on(PlatformType.UNKNOWN)['git_retry_delay'], 1.0)

    def test_git_is_available(self):
        available, error = validate_git_availability()

        self.assertTrue(available, error)


if __name__ == "__main__":
    unittest.main(verbosity=2)
