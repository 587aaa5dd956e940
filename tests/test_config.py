"""Tests for environment-driven configuration."""

import os
import unittest
from pathlib import Path
from unittest.mock import patch

from zimage_bot.config import load_config, validate_required_env
from zimage_bot.exceptions import ConfigurationError

ZIMAGE_VARS = [
    "DISCORD_TOKEN",
    "ZIMAGE_API_KEY",
    "ZIMAGE_API_BASE",
    "ZIMAGE_DAILY_LIMIT",
    "ZIMAGE_DEFAULT_STEPS",
    "ZIMAGE_POLL_INTERVAL_MS",
    "ZIMAGE_BANNED_WORDS",
    "ZIMAGE_BANNED_WORDS_ACTION",
    "ZIMAGE_DATA_DIR",
    "ZIMAGE_MSG_SUCCESS",
]


def clean_env(**values):
    env = {k: v for k, v in os.environ.items() if k not in ZIMAGE_VARS}
    env.update(values)
    return patch.dict(os.environ, env, clear=True)


class TestLoadConfig(unittest.TestCase):
    """Test configuration loading from the environment."""

    def test_defaults(self):
        with clean_env():
            config = load_config()
        self.assertEqual(config["ZIMAGE_API_BASE"], "https://api-inference.modelscope.cn/v1")
        self.assertEqual(config["ZIMAGE_DAILY_LIMIT"], 0)
        self.assertEqual(config["ZIMAGE_DEFAULT_STEPS"], 8)
        self.assertEqual(config["ZIMAGE_POLL_INTERVAL_MS"], 3000)
        self.assertEqual(config["ZIMAGE_MAX_POLL_TIME_MS"], 120000)
        self.assertEqual(config["ZIMAGE_BANNED_WORDS"], [])
        self.assertEqual(config["ZIMAGE_BANNED_WORDS_ACTION"], "reject")
        self.assertEqual(config["ZIMAGE_DATA_DIR"], Path("data/zimage"))
        self.assertEqual(config["ZIMAGE_MSG_SUCCESS"], "!")

    def test_overrides(self):
        with clean_env(
            ZIMAGE_API_BASE="https://proxy.example.test/v1/",
            ZIMAGE_DAILY_LIMIT="20  # per day",
            ZIMAGE_BANNED_WORDS="gore, blood\nviolence,,",
            ZIMAGE_BANNED_WORDS_ACTION="REPLACE",
            ZIMAGE_DATA_DIR="/var/lib/zimage",
        ):
            config = load_config()
        self.assertEqual(config["ZIMAGE_API_BASE"], "https://proxy.example.test/v1")
        self.assertEqual(config["ZIMAGE_DAILY_LIMIT"], 20)
        self.assertEqual(config["ZIMAGE_BANNED_WORDS"], ["gore", "blood", "violence"])
        self.assertEqual(config["ZIMAGE_BANNED_WORDS_ACTION"], "replace")
        self.assertEqual(config["ZIMAGE_DATA_DIR"], Path("/var/lib/zimage"))

    def test_malformed_values_fall_back(self):
        with clean_env(
            ZIMAGE_DEFAULT_STEPS="eight",
            ZIMAGE_DAILY_LIMIT="-5",
            ZIMAGE_BANNED_WORDS_ACTION="shout",
        ):
            config = load_config()
        self.assertEqual(config["ZIMAGE_DEFAULT_STEPS"], 8)
        self.assertEqual(config["ZIMAGE_DAILY_LIMIT"], 0)
        self.assertEqual(config["ZIMAGE_BANNED_WORDS_ACTION"], "reject")


class TestValidateRequiredEnv(unittest.TestCase):
    def test_missing_vars_raise(self):
        with clean_env(DISCORD_TOKEN="token"):
            with self.assertRaises(ConfigurationError) as ctx:
                validate_required_env()
        self.assertIn("ZIMAGE_API_KEY", str(ctx.exception))
        self.assertNotIn("DISCORD_TOKEN", str(ctx.exception))

    def test_all_present(self):
        with clean_env(DISCORD_TOKEN="token", ZIMAGE_API_KEY="ms-key"):
            validate_required_env()


if __name__ == "__main__":
    unittest.main()
