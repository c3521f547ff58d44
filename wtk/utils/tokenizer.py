"""Token estimation utilities."""

from __future__ import annotations

import math
from collections.abc import Callable

# Anything that maps text to a token count can stand in for the heuristic.
TokenCounter = Callable[[str], int]

CHARS_PER_TOKEN = 4


def approximate_token_count(text: str) -> int:
    """Approximate token count as one token per four characters.

    This is not a real tokenizer and is not compatible with any model's
    byte-pair encoding. It is kept exact so numbers stay comparable between
    runs and reports.
    """
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def estimate_tokens(text: str) -> int:
    """Estimate token count for text (alias of approximate_token_count)."""
    return approximate_token_count(text)


def savings_percent(original_tokens: int, compressed_tokens: int) -> int:
    """Whole-number percentage saved, 0 when there was nothing to save from."""
    if original_tokens <= 0:
        return 0
    # Round half up, not to even
    return math.floor((original_tokens - compressed_tokens) / original_tokens * 100 + 0.5)
