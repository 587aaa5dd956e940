"""Configuration loading and environment setup."""
import os
from pathlib import Path
from typing import Any, Dict, List

from dotenv import load_dotenv

from .exceptions import ConfigurationError
from .utils.logging import get_logger

logger = get_logger(__name__)

# Load environment variables from .env file with explicit path
load_dotenv(dotenv_path=Path.cwd() / ".env", verbose=False)

# Also try loading from the project root in case we're running from a subdirectory
load_dotenv(dotenv_path=Path(__file__).parent.parent / ".env", verbose=False)

BANNED_WORD_ACTIONS = ("reject", "replace")


def _clean_env_value(value: str) -> str:
    """Strip inline comments and whitespace from an environment value."""
    if not value:
        return value
    return value.split("#")[0].strip()


def _safe_int(value: str, default: str, var_name: str) -> int:
    """Safely convert environment variable to int, handling malformed values."""
    try:
        clean_value = _clean_env_value(value) if value else default
        return int(clean_value)
    except (ValueError, AttributeError):
        logger.warning(f"⚠ Invalid {var_name} value '{value}', using default {default}")
        return int(default)


def _split_words(value: str) -> List[str]:
    """Parse a comma or newline separated word list."""
    if not value:
        return []
    parts = value.replace("\n", ",").split(",")
    return [p.strip() for p in parts if p.strip()]


def load_config() -> Dict[str, Any]:
    """
    Load configuration from environment variables.
    """
    action = (_clean_env_value(os.getenv("ZIMAGE_BANNED_WORDS_ACTION", "reject")) or "reject").lower()
    if action not in BANNED_WORD_ACTIONS:
        logger.warning(f"⚠ Invalid ZIMAGE_BANNED_WORDS_ACTION '{action}', using 'reject'")
        action = "reject"

    config = {
        # DISCORD BOT SETTINGS
        "DISCORD_TOKEN": os.getenv("DISCORD_TOKEN"),
        "COMMAND_PREFIX": os.getenv("COMMAND_PREFIX", "!"),
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO"),

        # MODELSCOPE API
        "ZIMAGE_API_KEY": _clean_env_value(os.getenv("ZIMAGE_API_KEY")),
        "ZIMAGE_API_BASE": os.getenv(
            "ZIMAGE_API_BASE", "https://api-inference.modelscope.cn/v1"
        ).rstrip("/"),
        "ZIMAGE_HTTP_TIMEOUT_S": _safe_int(os.getenv("ZIMAGE_HTTP_TIMEOUT_S"), "30", "ZIMAGE_HTTP_TIMEOUT_S"),

        # GENERATION DEFAULTS
        "ZIMAGE_DEFAULT_MODEL": _clean_env_value(os.getenv("ZIMAGE_DEFAULT_MODEL", "z-image-turbo")),
        "ZIMAGE_DEFAULT_SIZE": _clean_env_value(os.getenv("ZIMAGE_DEFAULT_SIZE", "1024x1024")),
        "ZIMAGE_DEFAULT_STEPS": _safe_int(os.getenv("ZIMAGE_DEFAULT_STEPS"), "8", "ZIMAGE_DEFAULT_STEPS"),

        # QUOTA / POLLING
        "ZIMAGE_DAILY_LIMIT": max(0, _safe_int(os.getenv("ZIMAGE_DAILY_LIMIT"), "0", "ZIMAGE_DAILY_LIMIT")),
        "ZIMAGE_POLL_INTERVAL_MS": _safe_int(os.getenv("ZIMAGE_POLL_INTERVAL_MS"), "3000", "ZIMAGE_POLL_INTERVAL_MS"),
        "ZIMAGE_MAX_POLL_TIME_MS": _safe_int(os.getenv("ZIMAGE_MAX_POLL_TIME_MS"), "120000", "ZIMAGE_MAX_POLL_TIME_MS"),

        # CONTENT FILTER
        "ZIMAGE_BANNED_WORDS": _split_words(os.getenv("ZIMAGE_BANNED_WORDS", "")),
        "ZIMAGE_BANNED_WORDS_ACTION": action,

        # STORAGE
        "ZIMAGE_DATA_DIR": Path(os.getenv("ZIMAGE_DATA_DIR", "data/zimage")),

        # USER-FACING MESSAGES
        "ZIMAGE_MSG_BANNED": os.getenv("ZIMAGE_MSG_BANNED", "Your description contains blocked content, so I can't draw it."),
        "ZIMAGE_MSG_GENERATING": os.getenv("ZIMAGE_MSG_GENERATING", "🎨 Drawing..."),
        "ZIMAGE_MSG_ERROR": os.getenv("ZIMAGE_MSG_ERROR", "Something went wrong"),
        "ZIMAGE_MSG_LIMIT_REACHED": os.getenv(
            "ZIMAGE_MSG_LIMIT_REACHED", "Today's drawing quota is used up. Come back tomorrow!"
        ),
        "ZIMAGE_MSG_NO_PROMPT": os.getenv(
            "ZIMAGE_MSG_NO_PROMPT", "Please describe what to draw, e.g. `!draw a kitten`"
        ),
        "ZIMAGE_MSG_SUCCESS": os.getenv("ZIMAGE_MSG_SUCCESS", "!"),
    }

    return config


def validate_required_env() -> None:
    """
    Validate that all required environment variables are present.
    """
    required_vars = [
        "DISCORD_TOKEN",
        "ZIMAGE_API_KEY",
    ]

    missing_vars = [var for var in required_vars if not os.getenv(var)]

    if missing_vars:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing_vars)}"
        )
