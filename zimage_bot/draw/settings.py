"""Runtime drawing defaults, changeable through bot commands."""

from __future__ import annotations
from typing import Any, Dict

from zimage_bot.utils.logging import get_logger
from .types import (
    DEFAULT_MODEL,
    MAX_STEPS,
    MIN_STEPS,
    MODEL_NAMES,
    SIZES,
    DrawError,
    DrawErrorType,
)

logger = get_logger(__name__)


def validate_size(size: str) -> str:
    if size not in SIZES:
        raise DrawError(
            error_type=DrawErrorType.INVALID_PARAMETER,
            message=f"Unknown size: {size}",
            user_message=f"No such size. Available: {', '.join(SIZES)}",
        )
    return size


def validate_steps(steps: Any) -> int:
    try:
        value = int(steps)
    except (TypeError, ValueError):
        value = None
    if value is None or isinstance(steps, bool) or not MIN_STEPS <= value <= MAX_STEPS:
        raise DrawError(
            error_type=DrawErrorType.INVALID_PARAMETER,
            message=f"Steps out of range: {steps}",
            user_message=f"Steps must be between {MIN_STEPS} and {MAX_STEPS}",
        )
    return value


class DrawSettings:
    """
    Mutable generation defaults shared by the command layer and orchestrator.

    Fields are only changed through the ``set_*`` methods so every update is
    validated and logged.
    """

    def __init__(self, model: str = DEFAULT_MODEL, size: str = "1024x1024", steps: int = 8):
        self._model = model if model in MODEL_NAMES else DEFAULT_MODEL
        self._size = size if size in SIZES else SIZES[0]
        try:
            self._steps = validate_steps(steps)
        except DrawError:
            self._steps = 8
        if (self._model, self._size, self._steps) != (model, size, steps):
            logger.warning(
                f"⚠ Invalid drawing defaults replaced: model={self._model}, size={self._size}, steps={self._steps}"
            )

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "DrawSettings":
        return cls(
            model=config.get("ZIMAGE_DEFAULT_MODEL", DEFAULT_MODEL),
            size=config.get("ZIMAGE_DEFAULT_SIZE", "1024x1024"),
            steps=config.get("ZIMAGE_DEFAULT_STEPS", 8),
        )

    @property
    def model(self) -> str:
        return self._model

    @property
    def size(self) -> str:
        return self._size

    @property
    def steps(self) -> int:
        return self._steps

    def set_default_model(self, model: str) -> str:
        if model not in MODEL_NAMES:
            raise DrawError(
                error_type=DrawErrorType.INVALID_PARAMETER,
                message=f"Unknown model: {model}",
                user_message=f"No such model. Available: {', '.join(MODEL_NAMES)}",
            )
        self._model = model
        logger.info(f"Default model set to {model}", extra={"subsys": "draw", "event": "settings.model"})
        return model

    def set_default_size(self, size: str) -> str:
        self._size = validate_size(size)
        logger.info(f"Default size set to {size}", extra={"subsys": "draw", "event": "settings.size"})
        return self._size

    def set_default_steps(self, steps: int) -> int:
        self._steps = validate_steps(steps)
        logger.info(f"Default steps set to {self._steps}", extra={"subsys": "draw", "event": "settings.steps"})
        return self._steps
