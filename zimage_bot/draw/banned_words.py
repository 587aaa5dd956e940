"""
Banned word store - static configured words plus a runtime-editable list

The dynamic list is persisted as {"words": [...]} and rewritten in full on
every mutation. Static words come from configuration and cannot be removed
at runtime.
"""

from __future__ import annotations
import asyncio
import json
from pathlib import Path
from typing import Iterable, List

import aiofiles

from zimage_bot.utils.logging import get_logger
from .types import DrawError, DrawErrorType

logger = get_logger(__name__)


def normalize_words(words: Iterable[str]) -> List[str]:
    """Trim, drop empties and dedupe (case-sensitive), keeping first occurrence."""
    seen = set()
    result = []
    for word in words:
        if not isinstance(word, str):
            continue
        w = word.strip()
        if w and w not in seen:
            seen.add(w)
            result.append(w)
    return result


class BannedWordStore:
    """Merged view over configured and persisted banned words"""

    def __init__(self, path: Path, static_words: Iterable[str] = ()):
        self.path = Path(path)
        self.static_words = normalize_words(static_words)
        self._lock = asyncio.Lock()

        self.path.parent.mkdir(parents=True, exist_ok=True)

    async def effective_words(self) -> List[str]:
        dynamic = await self._load_dynamic()
        return normalize_words([*self.static_words, *dynamic])

    async def list_words(self) -> List[str]:
        return await self.effective_words()

    async def add(self, word: str) -> int:
        """Add a word to the dynamic list; returns the new effective count."""
        new_word = (word or "").strip()
        if not new_word:
            raise DrawError(
                error_type=DrawErrorType.INVALID_PARAMETER,
                message="Empty banned word",
                user_message="Please enter a word to add.",
            )

        async with self._lock:
            dynamic = await self._load_dynamic()
            if new_word in normalize_words([*self.static_words, *dynamic]):
                raise DrawError(
                    error_type=DrawErrorType.ALREADY_EXISTS,
                    message=f"Banned word already present: {new_word}",
                    user_message="That banned word already exists.",
                )
            dynamic.append(new_word)
            await self._save_dynamic(dynamic)
            count = len(normalize_words([*self.static_words, *dynamic]))

        logger.info(
            f"Banned word added, {count} in effect",
            extra={"subsys": "draw", "event": "banned.add", "detail": {"count": count}},
        )
        return count

    async def remove(self, word: str) -> int:
        """Remove the first exact match from the dynamic list; returns the new effective count."""
        target = (word or "").strip()
        if not target:
            raise DrawError(
                error_type=DrawErrorType.INVALID_PARAMETER,
                message="Empty banned word",
                user_message="Please enter a word to remove.",
            )

        async with self._lock:
            dynamic = await self._load_dynamic()
            if target not in dynamic:
                if target in self.static_words:
                    raise DrawError(
                        error_type=DrawErrorType.NOT_FOUND,
                        message=f"Banned word is configured statically: {target}",
                        user_message="That word comes from the bot configuration and can't be removed at runtime.",
                        details={"static": True},
                    )
                raise DrawError(
                    error_type=DrawErrorType.NOT_FOUND,
                    message=f"Banned word not found: {target}",
                    user_message="That banned word wasn't found.",
                )
            dynamic.remove(target)
            await self._save_dynamic(dynamic)
            count = len(normalize_words([*self.static_words, *dynamic]))

        logger.info(
            f"Banned word removed, {count} in effect",
            extra={"subsys": "draw", "event": "banned.remove", "detail": {"count": count}},
        )
        return count

    async def clear(self) -> int:
        """Empty the dynamic list; returns how many dynamic words were dropped."""
        async with self._lock:
            dropped = len(await self._load_dynamic())
            await self._save_dynamic([])

        logger.info(
            f"Banned word list cleared ({dropped} removed, {len(self.static_words)} configured remain)",
            extra={"subsys": "draw", "event": "banned.clear"},
        )
        return dropped

    async def _load_dynamic(self) -> List[str]:
        try:
            if not self.path.exists():
                return []
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                data = json.loads(await f.read())
            words = data.get("words", []) if isinstance(data, dict) else []
            return normalize_words(words if isinstance(words, list) else [])
        except (OSError, ValueError) as e:
            logger.warning(f"⚠ Failed to read banned words {self.path}: {e}")
            return []

    async def _save_dynamic(self, words: List[str]) -> None:
        temp_file = self.path.with_name(self.path.name + ".tmp")
        async with aiofiles.open(temp_file, "w", encoding="utf-8") as f:
            await f.write(json.dumps({"words": words}, ensure_ascii=False))
        temp_file.replace(self.path)
