"""
Drawing pipeline - ModelScope text-to-image behind quota and content gates

Core components:
- DrawOrchestrator: gating and sequencing entry point for commands
- ModelScopeClient: submit/poll protocol against the remote API
- DailyUsageCounter: JSON-backed per-day usage count
- BannedWordStore: configured + runtime banned words
- ContentFilter: reject/replace policy over banned words
- DrawSettings: runtime defaults for model, size and steps

Usage:
    from zimage_bot.draw import DrawOrchestrator

    orchestrator = DrawOrchestrator.from_config(config)
    result = await orchestrator.draw("a kitten", size="1344x768")
"""

from .banned_words import BannedWordStore
from .clock import Clock, SystemClock
from .content_filter import ContentFilter, FilterAction, FilterResult
from .modelscope_client import ModelScopeClient
from .orchestrator import DrawOrchestrator, GenerationNotifier
from .settings import DrawSettings
from .types import (
    MODEL_NAMES, MODELS, SIZES,
    DrawError, DrawErrorType, DrawResult,
    GenerationJob, GenerationRequest, ImageResult, JobState, UsageStatus,
)
from .usage_counter import DailyUsageCounter

__all__ = [
    'BannedWordStore',
    'Clock',
    'SystemClock',
    'ContentFilter',
    'FilterAction',
    'FilterResult',
    'ModelScopeClient',
    'DrawOrchestrator',
    'GenerationNotifier',
    'DrawSettings',
    'DailyUsageCounter',
    'MODEL_NAMES',
    'MODELS',
    'SIZES',
    'DrawError',
    'DrawErrorType',
    'DrawResult',
    'GenerationJob',
    'GenerationRequest',
    'ImageResult',
    'JobState',
    'UsageStatus',
]
