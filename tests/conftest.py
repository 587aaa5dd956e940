"""
Shared pytest fixtures: simulated clock, scripted aiohttp session and a
config dict pointing persisted state at a temporary directory.
"""

import json

import pytest

from zimage_bot.draw.clock import Clock


class FakeClock(Clock):
    """Clock whose sleep advances simulated time instantly."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps = []

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeResponse:
    """Minimal stand-in for aiohttp.ClientResponse used as an async context manager."""

    def __init__(self, status=200, body=None, text=None, raw=None):
        self.status = status
        if raw is None:
            raw = (text if text is not None else json.dumps(body if body is not None else {})).encode("utf-8")
        self._raw = raw

    async def text(self, encoding=None, errors="strict"):
        return self._raw.decode(encoding or "utf-8", errors)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """
    Scripted session: each call pops the next queued response; the last one
    repeats once the queue is down to a single item. Queued exceptions are raised.
    """

    def __init__(self, post_responses=(), get_responses=()):
        self.closed = False
        self.post_responses = list(post_responses)
        self.get_responses = list(get_responses)
        self.posts = []
        self.gets = []

    def post(self, url, json=None, headers=None):
        self.posts.append({"url": url, "json": json, "headers": headers})
        return self._next(self.post_responses)

    def get(self, url, headers=None):
        self.gets.append({"url": url, "headers": headers})
        return self._next(self.get_responses)

    def _next(self, queue):
        if not queue:
            raise AssertionError("unexpected request")
        item = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def draw_config(tmp_path):
    """Config dict shaped like load_config() output."""
    return {
        "DISCORD_TOKEN": "discord-token",
        "COMMAND_PREFIX": "!",
        "ZIMAGE_API_KEY": "ms-test-key",
        "ZIMAGE_API_BASE": "https://api.example.test/v1",
        "ZIMAGE_HTTP_TIMEOUT_S": 30,
        "ZIMAGE_DEFAULT_MODEL": "z-image-turbo",
        "ZIMAGE_DEFAULT_SIZE": "1024x1024",
        "ZIMAGE_DEFAULT_STEPS": 8,
        "ZIMAGE_DAILY_LIMIT": 0,
        "ZIMAGE_POLL_INTERVAL_MS": 3000,
        "ZIMAGE_MAX_POLL_TIME_MS": 120000,
        "ZIMAGE_BANNED_WORDS": [],
        "ZIMAGE_BANNED_WORDS_ACTION": "reject",
        "ZIMAGE_DATA_DIR": tmp_path / "data",
        "ZIMAGE_MSG_BANNED": "banned!",
        "ZIMAGE_MSG_GENERATING": "drawing...",
        "ZIMAGE_MSG_ERROR": "error",
        "ZIMAGE_MSG_LIMIT_REACHED": "limit!",
        "ZIMAGE_MSG_NO_PROMPT": "no prompt!",
        "ZIMAGE_MSG_SUCCESS": "!",
    }


@pytest.fixture
def fake_http():
    """Access to the scripted session/response classes."""

    class _Http:
        Session = FakeSession
        Response = FakeResponse

    return _Http
