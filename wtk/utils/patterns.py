"""Pattern detection for ranking how compressible a workspace file is."""

from __future__ import annotations

import math
import re

# =============================================================================
# Indicator Patterns
# =============================================================================

VERBOSE_PATTERN = re.compile(
    r"\b(When|Please|In order to|It is important|You should|This is|That is)\b",
    re.IGNORECASE,
)
STOPWORD_PATTERN = re.compile(
    r"\b(the|and|or|but|with|from|into|during|including)\b", re.IGNORECASE
)
FILLER_PATTERN = re.compile(
    r"\b(very|quite|rather|really|actually|basically|essentially)\b", re.IGNORECASE
)
BULLET_PATTERN = re.compile(r"^[ \t]*[-•*]", re.MULTILINE)

LONG_SENTENCE_CHARS = 100

# Weights applied to each indicator count
WEIGHTS = {
    "verbose": 2,
    "stopwords": 0.5,
    "filler": 3,
    "long_sentences": 5,
}
# Files with fewer bullets than this are scored as unstructured prose
BULLET_BASELINE = 20


# =============================================================================
# Scoring
# =============================================================================


def count_indicators(text: str) -> dict[str, int]:
    """Count each compressibility indicator in text.

    Returns:
        Dict with verbose, stopwords, filler, long_sentences and bullets counts
    """
    return {
        "verbose": len(VERBOSE_PATTERN.findall(text)),
        "stopwords": len(STOPWORD_PATTERN.findall(text)),
        "filler": len(FILLER_PATTERN.findall(text)),
        "long_sentences": sum(
            1 for sentence in text.split(".") if len(sentence) > LONG_SENTENCE_CHARS
        ),
        "bullets": len(BULLET_PATTERN.findall(text)),
    }


def assess_compression_potential(text: str) -> int:
    """Score 0-100 for how much text could shrink under the rewrite rules.

    A ranking signal only: verbose phrasing, stop-words, filler adverbs and
    long sentences push the score up; existing bullet structure pulls it
    down.
    """
    counts = count_indicators(text)
    score = (
        counts["verbose"] * WEIGHTS["verbose"]
        + counts["stopwords"] * WEIGHTS["stopwords"]
        + counts["filler"] * WEIGHTS["filler"]
        + counts["long_sentences"] * WEIGHTS["long_sentences"]
        + max(0, BULLET_BASELINE - counts["bullets"])
    )
    return math.floor(min(100, score))


def potential_indicator(potential: int) -> str:
    """Traffic-light colour for a compression potential score."""
    if potential > 50:
        return "red"
    if potential > 25:
        return "yellow"
    return "green"
