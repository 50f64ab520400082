"""Unit tests for text normalization, tokenization and stemming."""

import pytest

from memsearch.search.analyzers import (
    AnalyzedQuery,
    analyze_query,
    analyze_text,
    normalize_text,
    stem,
    tokenize,
)


@pytest.mark.unit
class TestNormalizeText:
    """Normalization strips punctuation and lowercases."""

    def test_strips_punctuation_and_lowercases(self):
        assert normalize_text("Hello, World!") == "hello world"

    def test_keeps_word_characters_and_whitespace(self):
        assert normalize_text("snake_case  42\tTabs") == "snake_case  42\ttabs"

    def test_non_ascii_letters_are_kept(self):
        assert normalize_text("Café Société!") == "café société"
        assert tokenize("Ærø, naïve") == ["ærø", "naïve"]

    def test_non_string_passes_through(self):
        assert normalize_text(1925) == 1925
        assert normalize_text(None) is None
        assert normalize_text(True) is True


@pytest.mark.unit
class TestTokenize:
    def test_splits_on_any_whitespace_and_drops_empty_tokens(self):
        assert tokenize("  The  Great\tGatsby\n") == ["the", "great", "gatsby"]

    def test_punctuation_only_text_yields_nothing(self):
        assert tokenize("... !!! ---") == []


@pytest.mark.unit
class TestStem:
    """Rule order follows plural, past/continuous, y, derivational, removal, cleanup."""

    @pytest.mark.parametrize(
        ("word", "expected"),
        [
            ("cats", "cat"),
            ("caresses", "caress"),
            ("caress", "caress"),
            ("agreed", "agre"),
            ("connected", "connect"),
            ("connecting", "connect"),
            ("hopping", "hop"),
            ("hoping", "hop"),
            ("running", "run"),
            ("happy", "happi"),
            ("sky", "ski"),
        ],
    )
    def test_inflection_rules(self, word, expected):
        assert stem(word) == expected

    @pytest.mark.parametrize(
        ("word", "expected"),
        [
            ("relational", "relate"),
            ("conditional", "condition"),
            ("electrical", "electric"),
            ("happiness", "happi"),
            ("hopeful", "hope"),
        ],
    )
    def test_derivational_suffix_replaced_and_stemming_stops(self, word, expected):
        assert stem(word) == expected

    def test_removable_suffix_stripped(self):
        assert stem("adjustment") == "adjust"

    def test_cleanup_drops_trailing_e_and_collapses_ll(self):
        assert stem("the") == "th"
        assert stem("fall") == "fal"

    def test_empty_word(self):
        assert stem("") == ""

    def test_deterministic(self):
        assert [stem("expectations") for _ in range(3)] == ["expectate"] * 3

    @pytest.mark.parametrize(
        "word",
        ["connect", "connected", "connecting", "great", "running", "hopping", "cats", "caress", "happy"],
    )
    def test_idempotent_on_fixed_point_vocabulary(self, word):
        once = stem(word)
        assert stem(once) == once


@pytest.mark.unit
class TestAnalyzeQuery:
    def test_keeps_words_and_stems_aligned(self):
        analyzed = analyze_query("The GREAT, gatsby!!")

        assert analyzed.words == ("the", "great", "gatsby")
        assert analyzed.stems == ("th", "great", "gatsbi")
        assert analyzed.phrase == "th great gatsbi"
        assert bool(analyzed) is True

    def test_words_made_of_punctuation_are_dropped(self):
        analyzed = analyze_query("  ...  ")

        assert analyzed == AnalyzedQuery(text="  ...  ", words=(), stems=())
        assert not analyzed

    def test_boolean_words_keep_surface_form(self):
        analyzed = analyze_query("True")

        assert analyzed.words == ("true",)
        assert analyzed.stems == ("tru",)


@pytest.mark.unit
def test_analyze_text_stems_every_token():
    assert analyze_text("Great Expectations") == ["great", "expectate"]
