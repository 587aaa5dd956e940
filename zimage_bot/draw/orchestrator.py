"""
Draw Orchestrator - gating and sequencing for one image generation

Pipeline per call, each step short-circuiting on failure:
1. empty prompt check
2. daily quota check
3. banned word filter (reject or redact)
4. model/size/steps resolution against the runtime defaults
5. "generation started" notification
6. remote generation, then usage counter increment on success

Failures never escape as exceptions; they come back as a failed DrawResult
carrying the DrawError.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional

from zimage_bot.utils.logging import get_logger
from .banned_words import BannedWordStore
from .content_filter import ContentFilter
from .modelscope_client import ModelScopeClient
from .settings import DrawSettings, validate_size, validate_steps
from .types import (
    DrawError,
    DrawErrorType,
    DrawResult,
    GenerationRequest,
    UsageStatus,
)
from .usage_counter import DailyUsageCounter

logger = get_logger(__name__)


class GenerationNotifier:
    """Capability called right before the blocking network round trip."""

    def generation_started(self, request: GenerationRequest) -> None:
        raise NotImplementedError


class DrawOrchestrator:
    """Entry point used by the command layer for drawing and usage queries"""

    def __init__(
        self,
        client: ModelScopeClient,
        counter: DailyUsageCounter,
        banned_words: BannedWordStore,
        content_filter: ContentFilter,
        settings: DrawSettings,
        daily_limit: int = 0,
    ):
        self.client = client
        self.counter = counter
        self.banned_words = banned_words
        self.content_filter = content_filter
        self.settings = settings
        self.daily_limit = max(0, daily_limit)

    @classmethod
    def from_config(cls, config: Dict[str, Any], **overrides) -> "DrawOrchestrator":
        data_dir = Path(config["ZIMAGE_DATA_DIR"])
        client = overrides.pop("client", None) or ModelScopeClient(
            api_key=config["ZIMAGE_API_KEY"],
            base_url=config["ZIMAGE_API_BASE"],
            poll_interval_seconds=config["ZIMAGE_POLL_INTERVAL_MS"] / 1000,
            max_poll_seconds=config["ZIMAGE_MAX_POLL_TIME_MS"] / 1000,
            request_timeout_seconds=config["ZIMAGE_HTTP_TIMEOUT_S"],
        )
        orchestrator = cls(
            client=client,
            counter=DailyUsageCounter(data_dir / "daily_count.json"),
            banned_words=BannedWordStore(
                data_dir / "banned_words.json", config.get("ZIMAGE_BANNED_WORDS", [])
            ),
            content_filter=ContentFilter(config["ZIMAGE_BANNED_WORDS_ACTION"]),
            settings=DrawSettings.from_config(config),
            daily_limit=config.get("ZIMAGE_DAILY_LIMIT", 0),
        )
        logger.info(
            f"Draw orchestrator initialized - data_dir: {data_dir}, daily_limit: {orchestrator.daily_limit}, "
            f"banned_action: {orchestrator.content_filter.action.value}"
        )
        return orchestrator

    async def usage(self) -> UsageStatus:
        return UsageStatus(count=await self.counter.get(), limit=self.daily_limit)

    async def draw(
        self,
        prompt: Optional[str],
        model: Optional[str] = None,
        size: Optional[str] = None,
        steps: Optional[int] = None,
        notifier: Optional[GenerationNotifier] = None,
    ) -> DrawResult:
        try:
            return await self._draw(prompt, model, size, steps, notifier)
        except DrawError as e:
            log = logger.info if e.error_type in _POLICY_ERRORS else logger.error
            log(
                f"Draw failed - {e}",
                extra={"subsys": "draw", "event": "draw.error", "detail": {"error_type": e.error_type.value}},
            )
            return DrawResult(success=False, error=e, prompt=prompt or "")

    async def _draw(self, prompt, model, size, steps, notifier) -> DrawResult:
        if not prompt or not prompt.strip():
            raise DrawError(
                error_type=DrawErrorType.EMPTY_PROMPT,
                message="Prompt is empty",
                user_message="Please describe what to draw",
            )

        if self.daily_limit > 0:
            current = await self.counter.get()
            if current >= self.daily_limit:
                raise DrawError(
                    error_type=DrawErrorType.QUOTA_EXCEEDED,
                    message=f"Daily limit reached ({current}/{self.daily_limit})",
                    user_message="Today's drawing quota is used up",
                    details={"count": current, "limit": self.daily_limit},
                )

        words = await self.banned_words.effective_words()
        filtered = self.content_filter.apply(prompt, words)
        if not filtered.approved:
            raise DrawError(
                error_type=DrawErrorType.CONTENT_REJECTED,
                message=f"Prompt contains {len(filtered.matched)} banned word(s)",
                user_message="Your description contains blocked content",
                details={"matched": filtered.matched},
            )

        request = GenerationRequest(
            prompt=filtered.prompt.strip(),
            model=model or self.settings.model,
            size=validate_size(size) if size else self.settings.size,
            steps=validate_steps(steps) if steps is not None else self.settings.steps,
        )

        if notifier is not None:
            notifier.generation_started(request)

        image = await self.client.generate(request)
        count = await self.counter.increment()

        logger.info(
            f"Draw completed - model: {request.model}, size: {request.size}, steps: {request.steps}, today: {count}",
            extra={"subsys": "draw", "event": "draw.complete", "detail": {"inline": not image.is_url}},
        )
        return DrawResult(
            success=True,
            image=image,
            prompt=request.prompt,
            model=request.model,
            size=request.size,
            steps=request.steps,
            count=count,
            filtered_words=filtered.matched,
        )


_POLICY_ERRORS = {
    DrawErrorType.EMPTY_PROMPT,
    DrawErrorType.QUOTA_EXCEEDED,
    DrawErrorType.CONTENT_REJECTED,
    DrawErrorType.INVALID_PARAMETER,
}
