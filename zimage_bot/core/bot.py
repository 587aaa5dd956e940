"""Discord client wiring the draw pipeline into command cogs."""
import os
from typing import Optional

import discord
from discord.ext import commands

from zimage_bot.commands import setup_commands
from zimage_bot.draw import DrawOrchestrator
from zimage_bot.utils.logging import get_logger


def create_bot_intents() -> discord.Intents:
    """Create Discord intents for prefix commands."""
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    return intents


def get_prefix(bot, message: discord.Message) -> list:
    """Dynamically get the command prefix for the bot."""
    base_prefixes = os.getenv("COMMAND_PREFIX", "!").split(",")
    return commands.when_mentioned_or(*base_prefixes)(bot, message)


class DrawBot(commands.Bot):
    """Bot owning one DrawOrchestrator shared by all command cogs."""

    def __init__(self, *args, config: Optional[dict] = None, orchestrator: Optional[DrawOrchestrator] = None, **kwargs):
        if "command_prefix" not in kwargs:
            kwargs["command_prefix"] = get_prefix
        if "intents" not in kwargs:
            kwargs["intents"] = create_bot_intents()

        super().__init__(*args, **kwargs)
        self.config = config or {}
        self.orchestrator = orchestrator
        self.logger = get_logger(__name__)

    async def setup_hook(self) -> None:
        """Asynchronous setup phase for the bot."""
        self.logger.info("🔧 Starting bot setup")
        if self.orchestrator is None:
            self.orchestrator = DrawOrchestrator.from_config(self.config)
        await setup_commands(self)

    async def on_ready(self) -> None:
        self.logger.info(f"✔ Logged in as {self.user} ({len(self.guilds)} guilds)")

    async def close(self) -> None:
        """Clean up resources before shutdown."""
        self.logger.info("Bot is shutting down...")
        try:
            if self.orchestrator is not None:
                await self.orchestrator.client.close()
        finally:
            await super().close()
