"""
Daily usage counter - JSON-backed count of successful generations

Stores a single {"date": "YYYY-MM-DD", "count": n} record that is
overwritten on every increment. A record for any other day reads as zero.
"""

from __future__ import annotations
import asyncio
import json
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

import aiofiles

from zimage_bot.utils.logging import get_logger

logger = get_logger(__name__)


def today_str() -> str:
    """Local calendar day as YYYY-MM-DD."""
    return datetime.now().strftime("%Y-%m-%d")


class DailyUsageCounter:
    """
    Persistent per-day counter

    Reads fail open (a broken or missing file counts as zero) and
    increments are serialized so concurrent draws cannot lose updates.
    """

    def __init__(self, path: Path, today: Optional[Callable[[], str]] = None):
        self.path = Path(path)
        self.today = today or today_str
        self._lock = asyncio.Lock()

        self.path.parent.mkdir(parents=True, exist_ok=True)

    async def get(self) -> int:
        """Count for today, or 0 when the stored record is for another day."""
        return await self._load()

    async def increment(self) -> int:
        async with self._lock:
            count = await self._load() + 1
            await self._save(count)
            logger.debug(
                f"Usage counter incremented to {count}",
                extra={"subsys": "draw", "event": "usage.increment", "detail": {"count": count}},
            )
            return count

    async def _load(self) -> int:
        try:
            if not self.path.exists():
                return 0
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                data = json.loads(await f.read())
            if not isinstance(data, dict) or data.get("date") != self.today():
                return 0
            count = int(data.get("count") or 0)
            return max(count, 0)
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"⚠ Failed to read usage counter {self.path}: {e}")
            return 0

    async def _save(self, count: int) -> None:
        # Atomic write with temp file + rename
        temp_file = self.path.with_name(self.path.name + ".tmp")
        try:
            async with aiofiles.open(temp_file, "w", encoding="utf-8") as f:
                await f.write(json.dumps({"date": self.today(), "count": count}))
            temp_file.replace(self.path)
        except OSError as e:
            logger.warning(f"⚠ Failed to save usage counter {self.path}: {e}")
