"""
Tests for the string-similarity primitives.
"""

import pytest

from core.fuzzy import (
    contains_either,
    extract_trailing_number,
    fuzzy_match,
    normalize,
    number_tokens,
    numbers_compatible,
    significant_words,
    similarity,
    token_jaccard,
    word_overlap,
)


class TestNormalize:

    def test_punctuation_collapsed(self):
        assert normalize("Sony WH-1000XM5 (Black)") == 'sony wh 1000xm5 black'

    def test_none(self):
        assert normalize(None) == ''

    def test_significant_words(self):
        assert significant_words("The new iPhone 15 Pro", ignore={'new'}) == ['the', 'iphone', 'pro']


class TestSimilarity:

    def test_containment_respects_word_boundaries(self):
        assert contains_either("iphone 15", "Apple iPhone 15 (128GB)")
        assert not contains_either("phone", "iPhone 15")
        assert not contains_either("", "iPhone 15")

    def test_word_overlap_uses_shorter_side(self):
        assert word_overlap("tuf gaming rig", "ASUS TUF Gaming F15") == pytest.approx(2 / 3)

    def test_word_overlap_no_significant_words(self):
        assert word_overlap("a b", "ASUS TUF Gaming F15") == 0.0

    def test_containment_scores_one(self):
        assert similarity("iPhone 15", "Apple iPhone 15") == 1.0

    def test_containment_of_ignored_words_only_does_not_count(self):
        assert similarity("laptop", "HP laptop 14", ignore={'laptop'}) == 0.0

    def test_token_jaccard(self):
        assert token_jaccard("Samsung Galaxy S24", "Samsung S24 TV") == pytest.approx(0.5)
        assert token_jaccard("", "Samsung S24 TV") == 0.0

    @pytest.mark.parametrize("a,b,threshold,expected", [
        ("samsung s24", "Samsung Galaxy S24", 0.6, True),
        ("tuf gaming rig", "ASUS TUF Gaming F15", 0.85, False),
        ("tuf gaming rig", "ASUS TUF Gaming F15", 0.52, True),
        ("redmi note", "Apple Watch SE", 0.3, False),
    ])
    def test_fuzzy_match(self, a, b, threshold, expected):
        assert fuzzy_match(a, b, threshold) is expected


class TestNumbers:

    def test_number_tokens(self):
        assert number_tokens("Galaxy S24 Ultra 5G") == ['24', '5']

    @pytest.mark.parametrize("a,b,expected", [
        ("iPhone 15", "iPhone 14", False),
        ("iPhone 15", "iPhone 15", True),
        ("galaxy s24 price", "Samsung Galaxy S24 Ultra 5G", True),
        ("iphone", "iPhone 15", True),
        ("Samsung Galaxy 2", "Samsung Galaxy S24", False),
    ])
    def test_numbers_compatible(self, a, b, expected):
        assert numbers_compatible(a, b) is expected

    def test_trailing_number(self):
        assert extract_trailing_number("Dell Legion 5 1") == ('Dell Legion 5', 1)
        assert extract_trailing_number("iPhone") == ('iPhone', None)
        assert extract_trailing_number("  Samsung Galaxy 2 ") == ('Samsung Galaxy', 2)
