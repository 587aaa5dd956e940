"""
Core types and data models for the drawing pipeline

Request/result models, the remote job state machine and the structured
error type shared by the usage counter, banned-word store, content filter,
ModelScope client and orchestrator.
"""

from __future__ import annotations
import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


DEFAULT_MODEL = "z-image-turbo"

# Friendly model name -> ModelScope model identifier
MODELS: Dict[str, str] = {
    "z-image-turbo": "Tongyi-MAI/Z-Image-Turbo",
    "z-image": "Tongyi-MAI/Z-Image",
}

MODEL_NAMES = tuple(MODELS)

SIZES = (
    "1024x1024",
    "768x1344",
    "864x1152",
    "1344x768",
    "1152x864",
    "1440x720",
    "720x1440",
)

MIN_STEPS = 1
MAX_STEPS = 50


class JobState(Enum):
    """Remote job state machine"""
    SUBMITTING = "submitting"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


class DrawErrorType(Enum):
    """Categorized error types for proper handling"""
    EMPTY_PROMPT = "empty_prompt"
    QUOTA_EXCEEDED = "quota_exceeded"
    CONTENT_REJECTED = "content_rejected"
    INVALID_PARAMETER = "invalid_parameter"
    SUBMIT_ERROR = "submit_error"
    NO_TASK_ID = "no_task_id"
    REMOTE_TASK_FAILED = "remote_task_failed"
    EMPTY_RESULT = "empty_result"
    TIMEOUT = "timeout"
    ALREADY_EXISTS = "already_exists"
    NOT_FOUND = "not_found"


@dataclass
class DrawError(Exception):
    """Structured error with categorization and user-friendly messaging"""
    error_type: DrawErrorType
    message: str
    user_message: str = ""
    status: Optional[int] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{self.error_type.value}: {self.message}"


@dataclass
class GenerationRequest:
    """One text-to-image invocation"""
    prompt: str
    model: str = DEFAULT_MODEL
    size: str = "1024x1024"
    steps: int = 8

    @property
    def model_id(self) -> str:
        """Remote model identifier; unknown names fall back to turbo."""
        return MODELS.get(self.model, MODELS[DEFAULT_MODEL])

    def to_payload(self) -> Dict[str, Any]:
        return {
            "model": self.model_id,
            "prompt": self.prompt,
            "size": self.size,
            "steps": self.steps,
        }


@dataclass
class GenerationJob:
    """A submitted remote task, alive for one orchestration call"""
    task_id: str
    submitted_at: float
    state: JobState = JobState.SUBMITTING
    polls: int = 0


@dataclass(frozen=True)
class ImageResult:
    """Image reference: a remote URL or an inline base64 payload"""
    value: str

    @property
    def is_url(self) -> bool:
        return self.value.startswith(("http://", "https://"))

    @property
    def display_uri(self) -> str:
        if self.is_url:
            return self.value
        return f"data:image/png;base64,{self.value}"

    def as_bytes(self) -> bytes:
        """Decode an inline payload; URLs have no bytes to decode."""
        if self.is_url:
            raise ValueError("URL results have no inline payload")
        payload = self.value
        if payload.startswith("data:") and "," in payload:
            payload = payload.split(",", 1)[1]
        return base64.b64decode(payload)


@dataclass
class DrawResult:
    """Outcome of one orchestrated draw"""
    success: bool
    image: Optional[ImageResult] = None
    error: Optional[DrawError] = None
    prompt: str = ""
    model: str = ""
    size: str = ""
    steps: int = 0
    count: Optional[int] = None
    filtered_words: list = field(default_factory=list)


@dataclass
class UsageStatus:
    """Today's usage against the daily limit"""
    count: int
    limit: int

    @property
    def remaining(self) -> Optional[int]:
        if self.limit <= 0:
            return None
        return max(0, self.limit - self.count)
