"""
Command handlers for the Discord bot.
"""
import importlib

from zimage_bot.utils.logging import get_logger

logger = get_logger(__name__)

# module name -> cog name
COMMAND_MODULES = {
    "draw_commands": "DrawCommands",
}


async def setup_commands(bot):
    """
    Set up all command modules with the bot instance.
    This function is called during bot startup to register all commands.
    """
    logger.info("[Commands Setup] Starting command module initialization...")

    loaded = 0
    for module_name, cog_name in COMMAND_MODULES.items():
        if bot.get_cog(cog_name):
            logger.debug(f"[Commands Setup] Skipping already loaded cog: {cog_name}")
            continue

        module = importlib.import_module(f"zimage_bot.commands.{module_name}")
        await module.setup(bot)

        if bot.get_cog(cog_name):
            logger.info(f"[Commands Setup] ✅ {cog_name} loaded successfully")
            loaded += 1
        else:
            logger.error(f"[Commands Setup] ❌ {cog_name} setup completed but cog not found")

    commands_list = [cmd.name for cog in bot.cogs.values() for cmd in cog.get_commands()]
    logger.info(f"[Commands Setup] 🎉 Command setup complete: {loaded} loaded, commands: {commands_list}")
