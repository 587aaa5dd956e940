"""
ModelScope image generation client

Two-phase async protocol against the ModelScope inference API:
submit a generation task, then poll the task endpoint until it reaches a
terminal status or the wall-clock deadline passes. Individual poll
failures are logged and retried; only the deadline is fatal.
"""

from __future__ import annotations
import asyncio
import json
from typing import Any, Dict, Optional, Union

import aiohttp

from zimage_bot.utils.logging import get_logger
from .clock import Clock, SystemClock
from .types import (
    DrawError,
    DrawErrorType,
    GenerationJob,
    GenerationRequest,
    ImageResult,
    JobState,
)

logger = get_logger(__name__)

DEFAULT_API_BASE = "https://api-inference.modelscope.cn/v1"

STATUS_SUCCEED = "SUCCEED"
STATUS_FAILED = "FAILED"


def _image_value(value: Any) -> Optional[str]:
    """Only non-empty strings count as an image reference."""
    if isinstance(value, str) and value:
        return value
    return None


def _first_data_image(data: Any) -> Optional[str]:
    """Pull url or inline payload from an OpenAI-style ``data`` array."""
    if isinstance(data, list) and data and isinstance(data[0], dict):
        entry = data[0]
        for key in ("url", "base64", "b64_json"):
            value = _image_value(entry.get(key))
            if value:
                return value
    return None


def extract_inline_image(body: Dict[str, Any]) -> Optional[str]:
    """Image embedded directly in a submit response, if any."""
    images = body.get("images")
    if isinstance(images, list) and images:
        first = images[0]
        if isinstance(first, dict):
            first = first.get("url")
        if _image_value(first):
            return first
    return _first_data_image(body.get("data"))


def extract_task_image(body: Dict[str, Any]) -> Optional[str]:
    """Image from a SUCCEED task status body, if any."""
    outputs = body.get("output_images")
    if isinstance(outputs, list) and outputs and _image_value(outputs[0]):
        return outputs[0]
    if _image_value(body.get("image_url")):
        return body["image_url"]
    return _first_data_image(body.get("data"))


class ModelScopeClient:
    """
    Async client for ModelScope text-to-image tasks

    The session is created lazily (or injected) and shared by submit and
    poll calls; call ``close()`` on shutdown.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_API_BASE,
        poll_interval_seconds: float = 3.0,
        max_poll_seconds: float = 120.0,
        request_timeout_seconds: float = 30.0,
        clock: Optional[Clock] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.poll_interval_seconds = poll_interval_seconds
        self.max_poll_seconds = max_poll_seconds
        self.request_timeout_seconds = request_timeout_seconds
        self.clock = clock or SystemClock()
        self.session = session

    @property
    def submit_url(self) -> str:
        return f"{self.base_url}/images/generations"

    def task_url(self, task_id: str) -> str:
        return f"{self.base_url}/tasks/{task_id}"

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session [RM]"""
        if self.session is None or self.session.closed:
            timeout = aiohttp.ClientTimeout(total=self.request_timeout_seconds)
            self.session = aiohttp.ClientSession(timeout=timeout)
        return self.session

    async def close(self) -> None:
        if self.session is not None and not self.session.closed:
            await self.session.close()

    async def generate(self, request: GenerationRequest) -> ImageResult:
        """Submit ``request`` and wait for its image."""
        submitted = await self.submit(request)
        if isinstance(submitted, ImageResult):
            return submitted
        return await self.poll(submitted)

    async def submit(self, request: GenerationRequest) -> Union[GenerationJob, ImageResult]:
        session = await self._get_session()
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-ModelScope-Async-Mode": "true",
        }
        payload = request.to_payload()
        submitted_at = self.clock.monotonic()

        logger.debug(
            "Submitting generation task",
            extra={
                "subsys": "draw",
                "event": "modelscope.submit",
                "detail": {k: ("..." if k == "prompt" else v) for k, v in payload.items()},
            },
        )

        try:
            async with session.post(self.submit_url, json=payload, headers=headers) as resp:
                text = await resp.text(errors="replace")
                if resp.status < 200 or resp.status >= 300:
                    raise DrawError(
                        error_type=DrawErrorType.SUBMIT_ERROR,
                        message=f"Submit failed: {resp.status} - {text}",
                        user_message=f"Submit failed (HTTP {resp.status})",
                        status=resp.status,
                        details={"body": text},
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DrawError(
                error_type=DrawErrorType.SUBMIT_ERROR,
                message=f"Submit failed: {e}",
                user_message="Submit failed (network error)",
            )

        try:
            body = json.loads(text)
        except ValueError:
            body = None
        if not isinstance(body, dict):
            raise DrawError(
                error_type=DrawErrorType.NO_TASK_ID,
                message=f"Submit response is not a JSON object: {text[:200]}",
                user_message="No task id was returned",
            )

        task_id = body.get("task_id") or body.get("id")
        if not task_id:
            inline = extract_inline_image(body)
            if inline:
                logger.info(
                    "Submit returned an inline result",
                    extra={"subsys": "draw", "event": "modelscope.inline"},
                )
                return ImageResult(inline)
            raise DrawError(
                error_type=DrawErrorType.NO_TASK_ID,
                message="No task id in submit response",
                user_message="No task id was returned",
                details={"body": body},
            )

        logger.info(
            f"Task submitted - task_id: {task_id}",
            extra={"subsys": "draw", "event": "modelscope.task", "detail": {"task_id": str(task_id)}},
        )
        return GenerationJob(task_id=str(task_id), submitted_at=submitted_at)

    async def poll(self, job: GenerationJob) -> ImageResult:
        """Poll ``job`` on a fixed interval until terminal status or deadline."""
        session = await self._get_session()
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "X-ModelScope-Task-Type": "image_generation",
        }
        job.state = JobState.POLLING
        last_status = None

        while self.clock.monotonic() - job.submitted_at < self.max_poll_seconds:
            await self.clock.sleep(self.poll_interval_seconds)
            job.polls += 1

            try:
                async with session.get(self.task_url(job.task_id), headers=headers) as resp:
                    if resp.status < 200 or resp.status >= 300:
                        logger.warning(f"⚠ Poll failed - task_id: {job.task_id}, status: {resp.status}")
                        continue
                    body = json.loads(await resp.text(errors="replace"))
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                logger.warning(f"⚠ Poll error - task_id: {job.task_id}: {e}")
                continue

            if not isinstance(body, dict):
                logger.warning(f"⚠ Poll returned non-object body - task_id: {job.task_id}")
                continue

            status = body.get("task_status")
            if status != last_status:
                logger.info(f"Task state change - task_id: {job.task_id}, {last_status or 'init'} -> {status}")
                last_status = status

            if status == STATUS_SUCCEED:
                image = extract_task_image(body)
                if not image:
                    job.state = JobState.FAILED
                    raise DrawError(
                        error_type=DrawErrorType.EMPTY_RESULT,
                        message=f"Task {job.task_id} succeeded without an image",
                        user_message="The task succeeded but returned no image",
                    )
                job.state = JobState.SUCCEEDED
                return ImageResult(image)

            if status == STATUS_FAILED:
                job.state = JobState.FAILED
                reason = body.get("errors") or body.get("message")
                raise DrawError(
                    error_type=DrawErrorType.REMOTE_TASK_FAILED,
                    message=f"Task {job.task_id} failed: {reason or 'no reason given'}",
                    user_message="The generation task failed",
                    details={"reason": reason} if reason else {},
                )

        job.state = JobState.TIMED_OUT
        raise DrawError(
            error_type=DrawErrorType.TIMEOUT,
            message=f"Task {job.task_id} timed out after {self.max_poll_seconds:.0f}s ({job.polls} polls)",
            user_message="Generation timed out, please try again later",
        )
