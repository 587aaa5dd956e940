"""
Discord bot main entry point - BOOTSTRAP ONLY
This module should contain NO business logic, only orchestration.
"""
import asyncio
import os
import sys
from typing import NoReturn

import aiohttp
import discord

from zimage_bot.config import load_config, validate_required_env
from zimage_bot.core.bot import DrawBot
from zimage_bot.core.cli import parse_arguments, show_version_info, validate_configuration_only
from zimage_bot.exceptions import ConfigurationError
from zimage_bot.utils.logging import init_logging, get_logger, shutdown_logging_and_exit


async def main() -> NoReturn:
    """Main bot execution function."""
    args = parse_arguments()

    if args.debug:
        os.environ['LOG_LEVEL'] = 'DEBUG'

    init_logging()
    logger = get_logger(__name__)

    if args.version:
        show_version_info()
        shutdown_logging_and_exit(0)

    if args.config_check:
        validate_configuration_only()
        shutdown_logging_and_exit(0)

    try:
        validate_required_env()
        config = load_config()
    except ConfigurationError as e:
        logger.critical(f"Configuration error during bot startup: {e}")
        shutdown_logging_and_exit(1)

    bot = DrawBot(config=config, help_command=None)

    max_retries = 3
    base_delay = 5  # seconds
    async with bot:
        for attempt in range(max_retries):
            try:
                logger.info(f"Connecting to Discord... (Attempt {attempt + 1}/{max_retries})")
                await bot.start(config["DISCORD_TOKEN"])
                break
            except (discord.HTTPException, aiohttp.ClientConnectorError):
                if attempt == max_retries - 1:
                    logger.error("Failed to log in. Please check your Discord token.")
                    shutdown_logging_and_exit(1)
                delay = base_delay * (2 ** attempt)
                logger.warning(f"Connection failed, retrying in {delay}s...")
                await asyncio.sleep(delay)

    shutdown_logging_and_exit(0)


def run() -> None:
    """Entry point for running the bot with proper error handling."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nBot shutdown requested by user.")
        shutdown_logging_and_exit(0)


if __name__ == "__main__":
    run()
