"""Unit tests for scandelta.core.config: settings validation and per-scanner options."""

import os
import unittest
from pathlib import Path
from unittest.mock import patch

from pydantic import ValidationError

from scandelta.core.config import ScannerProcessSettings, Settings


class TestSettingsDefaults(unittest.TestCase):
    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)
        self.assertEqual(settings.LOG_LEVEL, "INFO")
        self.assertEqual(settings.GENERAL.workdir, Path("scandelta-data"))
        self.assertFalse(settings.RETENTION_ENABLED)
        self.assertEqual(settings.sort_fields(), {})
        self.assertEqual(settings.ignore_fields(), {})


class TestSettingsFromEnvironment(unittest.TestCase):
    def test_nested_values(self) -> None:
        env = {
            "GENERAL__WORKDIR": "/var/lib/scandelta",
            "GENERAL__NAME": "alpha",
            "GENERAL__REPO": "https://example.com/alpha.git",
            "PROCESS": '{"codesake_dawn": {"sort_field": "severity", "ignore_fields": ["date"]}}',
            "LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)
        self.assertEqual(settings.GENERAL.workdir, Path("/var/lib/scandelta"))
        self.assertEqual(settings.GENERAL.name, "alpha")
        self.assertEqual(settings.LOG_LEVEL, "DEBUG")
        self.assertEqual(settings.sort_fields(), {"codesake_dawn": "severity"})
        self.assertEqual(settings.ignore_fields(), {"codesake_dawn": ["date"]})


class TestSettingsValidation(unittest.TestCase):
    def test_retention_days_out_of_range(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, RETENTION_DAYS=0)
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, RETENTION_DAYS=4000)

    def test_empty_project_name_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, GENERAL={"name": "  "})

    def test_unknown_log_level_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            Settings(_env_file=None, LOG_LEVEL="verbose")

    def test_single_ignore_field_accepted(self) -> None:
        process = ScannerProcessSettings(ignore_fields="date")
        self.assertEqual(process.ignore_fields, ["date"])


if __name__ == "__main__":
    unittest.main()
