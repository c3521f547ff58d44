"""Tests for compression potential scoring."""

import pytest

from wtk.utils.patterns import (
    assess_compression_potential,
    count_indicators,
    potential_indicator,
)


class TestCountIndicators:
    """Tests for count_indicators function."""

    def test_empty(self):
        assert count_indicators("") == {
            "verbose": 0,
            "stopwords": 0,
            "filler": 0,
            "long_sentences": 0,
            "bullets": 0,
        }

    def test_verbose_phrases(self):
        counts = count_indicators("Please do it. When done, tell me. You should rest.")
        assert counts["verbose"] == 3

    def test_verbose_case_insensitive(self):
        assert count_indicators("please PLEASE Please")["verbose"] == 3

    def test_stopwords(self):
        counts = count_indicators("bread and butter with jam or the tea")
        assert counts["stopwords"] == 4

    def test_stopwords_whole_words(self):
        """Stop-words inside other words are not counted."""
        assert count_indicators("android theory")["stopwords"] == 0

    def test_filler(self):
        assert count_indicators("very quite rather really actually basically essentially")["filler"] == 7

    def test_long_sentences(self):
        text = "a" * 101 + ". short. " + "b" * 150
        assert count_indicators(text)["long_sentences"] == 2

    def test_bullets(self):
        text = "- one\n* two\n• three\n  - nested\nnot a bullet"
        assert count_indicators(text)["bullets"] == 4


class TestAssessCompressionPotential:
    """Tests for assess_compression_potential function."""

    def test_empty_text(self):
        """Empty text scores only the unstructured baseline."""
        assert assess_compression_potential("") == 20

    def test_weights(self):
        # verbose 1 (*2), filler 1 (*3), stopwords 1 (*0.5), no bullets (+20)
        assert assess_compression_potential("Please be very calm and") == 25

    def test_half_points_floor(self):
        # one stop-word is worth 0.5
        assert assess_compression_potential("and") == 20

    def test_bullets_reduce_score(self):
        text = "\n".join(f"- item {i}." for i in range(25))
        assert assess_compression_potential(text) == 0

    def test_capped_at_100(self):
        text = "Please be very really quite careful. " * 50
        assert assess_compression_potential(text) == 100

    @pytest.mark.parametrize(
        "text",
        ["", "x", "- a\n- b", "When " * 1000, "." * 500, "a" * 5000],
    )
    def test_bounds(self, text):
        score = assess_compression_potential(text)
        assert isinstance(score, int)
        assert 0 <= score <= 100


class TestPotentialIndicator:
    def test_levels(self):
        assert potential_indicator(80) == "red"
        assert potential_indicator(40) == "yellow"
        assert potential_indicator(10) == "green"
