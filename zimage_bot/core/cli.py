"""
Handles command-line interface parsing and actions.
"""
import argparse
import sys

from zimage_bot import __version__
from zimage_bot.config import load_config, validate_required_env
from zimage_bot.exceptions import ConfigurationError
from zimage_bot.utils.logging import get_logger

SENSITIVE_KEYS = ("TOKEN", "KEY", "SECRET")


def parse_arguments(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Z-Image Discord drawing bot")
    parser.add_argument('--debug', action='store_true', help='Enable debug logging.')
    parser.add_argument('--config-check', action='store_true', help='Validate configuration and exit.')
    parser.add_argument('--version', action='store_true', help='Show version info and exit.')
    return parser.parse_args(argv)


def show_version_info():
    """Display version and system information."""
    print(f"Z-Image Drawing Bot - Version {__version__}")
    print(f"Python Version: {sys.version}")


def validate_configuration_only():
    """Validate configuration and exit."""
    logger = get_logger(__name__)
    try:
        logger.info("--- Running Configuration-Only Validation ---", extra={'subsys': 'core', 'event': 'config_check_start'})
        validate_required_env()
        config = load_config()
        logger.info("Configuration validation successful. The following settings are active:", extra={'subsys': 'core', 'event': 'config_valid_start'})

        for key, value in config.items():
            # Hide sensitive values like tokens
            if any(marker in key for marker in SENSITIVE_KEYS):
                value = '********'
            logger.info(f"  • {key}: {value}", extra={'subsys': 'core', 'event': 'config_valid'})

    except ConfigurationError as e:
        logger.critical(f"Configuration error: {e}", extra={'subsys': 'core', 'event': 'config_fail'})
        sys.exit(1)
