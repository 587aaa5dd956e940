"""
!draw prefix commands

Thin command layer over the DrawOrchestrator: parses the prompt and its
-m/-s/-t options, renders results and manages runtime defaults and the
banned word list.
"""

import asyncio
import io
from typing import Any, Dict, Optional, Set, Tuple

import discord
from discord.ext import commands

from zimage_bot.config import load_config
from zimage_bot.draw import (
    MODEL_NAMES,
    SIZES,
    DrawError,
    DrawErrorType,
    DrawOrchestrator,
    DrawResult,
    GenerationNotifier,
    GenerationRequest,
)
from zimage_bot.draw.types import MAX_STEPS, MIN_STEPS
from zimage_bot.logger import log_command
from zimage_bot.utils.logging import get_logger

logger = get_logger(__name__)

BRAND_PRIMARY = 0x5865F2

_OPTION_FLAGS = {
    "-m": "model",
    "--model": "model",
    "-s": "size",
    "--size": "size",
    "-t": "steps",
    "--steps": "steps",
}


def split_draw_options(text: Optional[str]) -> Tuple[str, Dict[str, Any]]:
    """Split ``a cat -m z-image -t 20`` into the prompt and its options.

    Unparseable step values are kept as strings so validation reports them.
    A flag with no value after it is treated as prompt text.
    """
    tokens = (text or "").split()
    prompt_parts = []
    options: Dict[str, Any] = {}
    i = 0
    while i < len(tokens):
        key = _OPTION_FLAGS.get(tokens[i])
        if key and i + 1 < len(tokens):
            value = tokens[i + 1]
            if key == "steps":
                try:
                    value = int(value)
                except ValueError:
                    pass
            options[key] = value
            i += 2
            continue
        prompt_parts.append(tokens[i])
        i += 1
    return " ".join(prompt_parts), options


class ChannelNotifier(GenerationNotifier):
    """Sends the 'generating' message without holding up the draw."""

    def __init__(self, ctx: commands.Context, message: str, tasks: Set[asyncio.Task]):
        self.ctx = ctx
        self.message = message
        self._tasks = tasks
        self._task: Optional[asyncio.Task] = None

    def generation_started(self, request: GenerationRequest) -> None:
        task = asyncio.get_running_loop().create_task(self.ctx.send(self.message))
        self._task = task
        self._tasks.add(task)
        task.add_done_callback(self._finished)

    async def wait_sent(self) -> None:
        """Wait for the notice (if any) so it lands before the result."""
        if self._task is not None:
            await asyncio.wait([self._task])

    def _finished(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"Could not send generating notice: {task.exception()}")


class DrawCommands(commands.Cog):
    """Image generation commands backed by ModelScope Z-Image"""

    def __init__(self, bot, orchestrator: Optional[DrawOrchestrator] = None, config: Optional[Dict[str, Any]] = None):
        self.bot = bot
        self.config = config or load_config()
        self.orchestrator = orchestrator or DrawOrchestrator.from_config(self.config)
        self.prefix = self.config.get("COMMAND_PREFIX", "!")
        self.suffix = self.config.get("ZIMAGE_MSG_SUCCESS", "")
        self._notice_tasks: Set[asyncio.Task] = set()

        logger.info("!draw commands cog initialized")

    async def cog_unload(self) -> None:
        await self.orchestrator.client.close()

    async def cog_command_error(self, ctx, error):
        if isinstance(error, commands.MissingPermissions):
            await ctx.send("❌ You need administrator permissions to change the banned word list.")
            return
        if isinstance(error, commands.BadArgument):
            await ctx.send(f"❌ {error}")
            return
        logger.error(f"Draw command error: {error}", exc_info=error)
        if isinstance(error, commands.CommandInvokeError):
            await ctx.send(f"{self.config['ZIMAGE_MSG_ERROR']}: the command could not be completed")

    def _failure_message(self, error: DrawError) -> str:
        if error.error_type == DrawErrorType.EMPTY_PROMPT:
            return self.config["ZIMAGE_MSG_NO_PROMPT"]
        if error.error_type == DrawErrorType.QUOTA_EXCEEDED:
            return self.config["ZIMAGE_MSG_LIMIT_REACHED"]
        if error.error_type == DrawErrorType.CONTENT_REJECTED:
            return self.config["ZIMAGE_MSG_BANNED"]
        if error.error_type == DrawErrorType.INVALID_PARAMETER:
            return f"❌ {error.user_message}"
        return f"{self.config['ZIMAGE_MSG_ERROR']}: {error.user_message or error.error_type.value}"

    async def _send_result(self, ctx, result: DrawResult) -> None:
        image = result.image
        if image.is_url:
            embed = discord.Embed(color=BRAND_PRIMARY)
            embed.set_image(url=image.value)
            embed.set_footer(text=f"{result.model} · {result.size} · {result.steps} steps")
            await ctx.send(embed=embed)
            return

        try:
            data = image.as_bytes()
        except ValueError as e:
            logger.error(f"Inline image could not be decoded: {e}")
            await ctx.send(f"{self.config['ZIMAGE_MSG_ERROR']}: the returned image could not be decoded")
            return
        await ctx.send(file=discord.File(io.BytesIO(data), filename="zimage.png"))

    @commands.command(name="draw", aliases=["画图"], help="Generate an image from a text prompt")
    async def draw_command(self, ctx, *, prompt: Optional[str] = None):
        """
        Generate an image

        Usage:
        !draw a kitten playing with yarn
        !draw -m z-image -s 1344x768 -t 30 a misty mountain lake
        """
        text, options = split_draw_options(prompt)
        notifier = ChannelNotifier(ctx, self.config["ZIMAGE_MSG_GENERATING"], self._notice_tasks)

        result = await self.orchestrator.draw(
            text,
            model=options.get("model"),
            size=options.get("size"),
            steps=options.get("steps"),
            notifier=notifier,
        )
        await notifier.wait_sent()

        if not result.success:
            log_command(ctx, "draw", {"error": result.error.error_type.value}, success=False)
            await ctx.send(self._failure_message(result.error))
            return

        log_command(ctx, "draw", {"model": result.model, "size": result.size, "count": result.count})
        await self._send_result(ctx, result)

    @commands.command(name="draw-model", aliases=["draw_model"])
    async def model_command(self, ctx, model: Optional[str] = None):
        """Show or set the default model."""
        settings = self.orchestrator.settings
        if not model:
            await ctx.send(f"Current model: `{settings.model}`\nAvailable: {', '.join(MODEL_NAMES)} {self.suffix}")
            return
        try:
            settings.set_default_model(model)
        except DrawError as e:
            await ctx.send(f"❌ {e.user_message}")
            return
        await ctx.send(f"✅ Switched{self.suffix} Current model: `{model}`")

    @commands.command(name="draw-size", aliases=["draw_size"])
    async def size_command(self, ctx, size: Optional[str] = None):
        """Show or set the default image size."""
        settings = self.orchestrator.settings
        if not size:
            await ctx.send(f"Current size: `{settings.size}`\nAvailable: {', '.join(SIZES)} {self.suffix}")
            return
        try:
            settings.set_default_size(size)
        except DrawError as e:
            await ctx.send(f"❌ {e.user_message}")
            return
        await ctx.send(f"✅ Switched{self.suffix} Current size: `{size}`")

    @commands.command(name="draw-steps", aliases=["draw_steps"])
    async def steps_command(self, ctx, steps: Optional[int] = None):
        """Show or set the default number of inference steps."""
        settings = self.orchestrator.settings
        if steps is None:
            await ctx.send(f"Current steps: `{settings.steps}` (range: {MIN_STEPS}-{MAX_STEPS}) {self.suffix}")
            return
        try:
            settings.set_default_steps(steps)
        except DrawError as e:
            await ctx.send(f"❌ {e.user_message}")
            return
        await ctx.send(f"✅ Saved{self.suffix} Current steps: `{settings.steps}`")

    @commands.command(name="draw-status", aliases=["draw_status"])
    async def status_command(self, ctx):
        """Show today's usage."""
        usage = await self.orchestrator.usage()
        if usage.remaining is None:
            await ctx.send(f"Drawn {usage.count} times today, no daily limit{self.suffix}")
        else:
            await ctx.send(f"Drawn {usage.count} times today, {usage.remaining} left{self.suffix}")

    @commands.group(name="draw-banned", aliases=["draw_banned"], invoke_without_command=True)
    async def banned_group(self, ctx):
        """List banned words.

        Usage:
        !draw-banned - list banned words
        !draw-banned add <word> - add a banned word
        !draw-banned remove <word> - remove a banned word
        !draw-banned clear - clear runtime banned words
        """
        words = await self.orchestrator.banned_words.list_words()
        if not words:
            await ctx.send(f"No banned words configured{self.suffix}")
            return
        lines = "\n".join(f"{i}. {w}" for i, w in enumerate(words, 1))
        await ctx.send(f"Banned words ({len(words)}):\n{lines} {self.suffix}")

    @banned_group.command(name="add")
    @commands.has_permissions(administrator=True)
    async def banned_add(self, ctx, *, word: str = ""):
        """Add a banned word."""
        try:
            count = await self.orchestrator.banned_words.add(word)
        except DrawError as e:
            await ctx.send(f"❌ {e.user_message}")
            return
        log_command(ctx, "banned_add", {"count": count})
        await ctx.send(f"✅ Added{self.suffix} {count} banned words in effect")

    @banned_group.command(name="remove", aliases=["delete", "del"])
    @commands.has_permissions(administrator=True)
    async def banned_remove(self, ctx, *, word: str = ""):
        """Remove a banned word added at runtime."""
        try:
            count = await self.orchestrator.banned_words.remove(word)
        except DrawError as e:
            await ctx.send(f"❌ {e.user_message}")
            return
        log_command(ctx, "banned_remove", {"count": count})
        await ctx.send(f"✅ Removed{self.suffix} {count} banned words in effect")

    @banned_group.command(name="clear")
    @commands.has_permissions(administrator=True)
    async def banned_clear(self, ctx):
        """Clear all banned words added at runtime."""
        dropped = await self.orchestrator.banned_words.clear()
        log_command(ctx, "banned_clear", {"dropped": dropped})
        await ctx.send(f"✅ Cleared {dropped} runtime banned words{self.suffix}")

    @commands.command(name="draw-help", aliases=["draw_help"])
    async def help_command(self, ctx):
        """Show drawing help."""
        await ctx.send(embed=self._build_help_embed())

    def _build_help_embed(self) -> discord.Embed:
        p = self.prefix
        embed = discord.Embed(
            title="🎨 Z-Image Drawing Help",
            description=f"Usage: `{p}draw <description>`",
            color=BRAND_PRIMARY,
        )
        embed.add_field(
            name="Options",
            value=(
                f"`-m <model>` {' / '.join(MODEL_NAMES)}\n"
                f"`-s <size>` {', '.join(SIZES[:3])} ...\n"
                f"`-t <steps>` {MIN_STEPS}-{MAX_STEPS}"
            ),
            inline=False,
        )
        embed.add_field(
            name="Other commands",
            value=(
                f"`{p}draw-model [name]` view or set the model\n"
                f"`{p}draw-size [size]` view or set the size\n"
                f"`{p}draw-steps [n]` view or set the steps\n"
                f"`{p}draw-status` today's usage\n"
                f"`{p}draw-banned` list banned words\n"
                f"`{p}draw-banned add|remove <word>` edit banned words\n"
                f"`{p}draw-banned clear` clear runtime banned words"
            ),
            inline=False,
        )
        embed.add_field(
            name="Examples",
            value=f"• `{p}draw a kitten`\n• `{p}draw -m z-image -s 1344x768 a mountain landscape`",
            inline=False,
        )
        return embed


async def setup(bot):
    """Setup function for Discord cog loading"""
    orchestrator = getattr(bot, "orchestrator", None)
    config = getattr(bot, "config", None)
    await bot.add_cog(DrawCommands(bot, orchestrator=orchestrator, config=config))
