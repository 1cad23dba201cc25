# =============================================================================
# AGIP XP TRACKER - SIMILARITY SCORER UNIT TESTS
# =============================================================================

import pytest

from pairing.similarity import (
    MAX_TEXT_LENGTH,
    levenshtein_distance,
    normalize,
    similarity,
)


class TestLevenshtein:

    @pytest.mark.parametrize("first,second,expected", [
        ("", "", 0),
        ("abc", "", 3),
        ("", "abc", 3),
        ("abc", "abc", 0),
        ("kitten", "sitting", 3),
        ("flaw", "lawn", 2),
    ])
    def test_distance(self, first, second, expected):
        assert levenshtein_distance(first, second) == expected


class TestNormalize:

    def test_lowercases_and_trims(self):
        assert normalize("  Hello World  ") == "hello world"

    def test_strips_tag_only_when_asked(self):
        assert normalize("[AGIP] Foo", strip_tag=True) == "foo"
        assert normalize("[AGIP] Foo") == "[agip] foo"

    def test_truncates(self):
        assert len(normalize("x" * (MAX_TEXT_LENGTH + 100))) == MAX_TEXT_LENGTH

    def test_none_is_empty(self):
        assert normalize(None) == ""


class TestSimilarity:

    def test_identical(self):
        assert similarity("abc", "abc") == 1.0

    def test_both_empty(self):
        assert similarity("", "") == 1.0

    def test_fully_distinct(self):
        assert similarity("abc", "xyz") < 0.5

    def test_case_insensitive(self):
        assert similarity("Add Wearables", "add wearables") == 1.0

    @pytest.mark.parametrize("first,second", [
        ("", "abc"),
        ("abc", ""),
        ("a", "abcdefghij"),
        ("[AGIP] x", "y"),
    ])
    def test_bounded(self, first, second):
        assert 0.0 <= similarity(first, second) <= 1.0

    def test_tag_stripped_from_first_argument_only(self):
        assert similarity("[AGIP] Foo", "Foo") == 1.0
        assert similarity("Foo", "[AGIP] Foo") < 1.0

    def test_only_first_max_length_characters_count(self):
        first = "a" * MAX_TEXT_LENGTH + "b" * 50
        second = "a" * MAX_TEXT_LENGTH + "c" * 50

        assert similarity(first, second) == 1.0

    def test_monotonic_in_distance(self):
        close = similarity("wearables set", "wearables sex")
        far = similarity("wearables set", "wearXbles sex")

        assert close > far
