"""
Tests for banned word scanning and the reject/replace policies.
"""
import pytest

from zimage_bot.draw.content_filter import (
    ContentFilter,
    FilterAction,
    redact,
    scan,
)


class TestScan:
    def test_no_match_returns_empty(self):
        assert scan("a kitten in the garden", ["dog", "blood"]) == []

    def test_match_is_case_insensitive(self):
        assert scan("A Big CAT sleeping", ["cat"]) == ["cat"]

    def test_substring_match_inside_word(self):
        assert scan("concatenate", ["cat"]) == ["cat"]

    def test_blank_words_are_skipped(self):
        assert scan("anything at all", ["", "   ", "at"]) == ["at"]

    def test_words_are_trimmed_and_deduplicated(self):
        assert scan("gore and more gore", [" gore ", "gore"]) == ["gore"]

    def test_empty_prompt(self):
        assert scan("", ["cat"]) == []


class TestRedact:
    def test_replaces_with_same_length_preserving_case_free_match(self):
        assert redact("Cat and cat and CAT", ["cat"]) == "*** and *** and ***"

    def test_multiple_words_replaced_independently(self):
        result = redact("red dragon breathing fire", ["dragon", "fire"])
        assert result == "red ****** breathing ****"

    def test_pattern_characters_are_literal(self):
        assert redact("price is $5.00 (cheap)", ["$5.00", "(cheap)"]) == "price is ***** *******"
        # '.' must not behave as a wildcard
        assert redact("a5b00", ["5.00"]) == "a5b00"

    def test_length_is_preserved(self):
        prompt = "Some BLOODY scene with Blood"
        result = redact(prompt, ["blood"])
        assert len(result) == len(prompt)
        assert "blood" not in result.lower()


class TestContentFilter:
    def test_reject_policy_refuses_prompt(self):
        result = ContentFilter("reject").apply("a bloody knife", ["blood"])
        assert result.approved is False
        assert result.matched == ["blood"]
        assert result.prompt == "a bloody knife"

    def test_replace_policy_rewrites_prompt(self):
        result = ContentFilter(FilterAction.REPLACE).apply("a Bloody knife", ["blood"])
        assert result.approved is True
        assert result.prompt == "a *****y knife"
        assert result.matched == ["blood"]

    def test_clean_prompt_passes_untouched(self):
        result = ContentFilter("replace").apply("a sunny beach", ["blood"])
        assert result.approved is True
        assert result.prompt == "a sunny beach"
        assert result.matched == []

    def test_unknown_action_rejected(self):
        with pytest.raises(ValueError):
            ContentFilter("ignore")
