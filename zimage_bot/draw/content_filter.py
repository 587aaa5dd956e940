"""
Prompt content filter - banned word detection and redaction

Matching is case-insensitive substring containment. Two policies:
- reject: any match refuses the prompt
- replace: each match is masked with '*' of the same length
"""

from __future__ import annotations
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List

from zimage_bot.utils.logging import get_logger

logger = get_logger(__name__)


class FilterAction(Enum):
    """What to do with a prompt that contains banned words"""

    REJECT = "reject"
    REPLACE = "replace"


@dataclass
class FilterResult:
    """Result of a content filter check"""

    approved: bool
    prompt: str
    action: FilterAction
    matched: List[str] = field(default_factory=list)


def scan(prompt: str, words: Iterable[str]) -> List[str]:
    """Return the banned words found in ``prompt`` (trimmed, in input order)."""
    text_lower = (prompt or "").lower()
    found: List[str] = []
    for word in words:
        if not word or not word.strip():
            continue
        w = word.strip()
        if w.lower() in text_lower and w not in found:
            found.append(w)
    return found


def redact(prompt: str, words: Iterable[str]) -> str:
    """Mask every case-insensitive occurrence of each word with '*'."""
    result = prompt
    for word in words:
        if not word or not word.strip():
            continue
        w = word.strip()
        # Words are literal text, never patterns
        pattern = re.compile(re.escape(w), re.IGNORECASE)
        result = pattern.sub(lambda m: "*" * len(m.group(0)), result)
    return result


class ContentFilter:
    """Applies the configured banned-word policy to prompts"""

    def __init__(self, action: FilterAction | str = FilterAction.REJECT):
        self.action = FilterAction(action)

    def apply(self, prompt: str, words: Iterable[str]) -> FilterResult:
        matched = scan(prompt, words)
        if not matched:
            return FilterResult(approved=True, prompt=prompt, action=self.action)

        if self.action == FilterAction.REJECT:
            logger.info(
                f"Prompt rejected by banned words ({len(matched)} matched)",
                extra={"subsys": "draw", "event": "filter.reject", "detail": {"matched": matched}},
            )
            return FilterResult(
                approved=False, prompt=prompt, action=self.action, matched=matched
            )

        rewritten = redact(prompt, matched)
        logger.info(
            f"Prompt redacted ({len(matched)} banned words)",
            extra={"subsys": "draw", "event": "filter.replace", "detail": {"matched": matched}},
        )
        return FilterResult(
            approved=True, prompt=rewritten, action=self.action, matched=matched
        )
