"""
Tests for intent detection.

Covers the detection tiers in priority order:
- PRODUCT_RECOMMENDATION
- PRODUCT_COMPARISON
- PRODUCT_EXACT
- Rule table (ORDER_SUPPORT, ORDER_TRACKING, USER_ACCOUNT, PRODUCT_SEMANTIC)
- Residual product cue and GENERAL
"""

import pytest

from core.context import Category, IntentType
from core.intent import IntentDetector
from core.title_cache import CatalogTitleCache


# === RECOMMENDATION TESTS ===

class TestRecommendation:
    """Recommendation cues win over every other tier."""

    def test_category_and_price(self, detector):
        intent = detector.detect("best gaming laptop under 80k")
        assert intent.type == IntentType.PRODUCT_RECOMMENDATION
        assert intent.category == Category.LAPTOPS
        assert intent.price_ceiling == 80000
        assert 'gaming' in intent.use_cases
        assert intent.confidence == pytest.approx(0.92)

    def test_category_only(self, detector):
        intent = detector.detect("recommend a phone")
        assert intent.category == Category.SMARTPHONES
        assert intent.price_ceiling is None
        assert intent.confidence == pytest.approx(0.85)

    def test_no_category(self, detector):
        intent = detector.detect("suggest something nice")
        assert intent.type == IntentType.PRODUCT_RECOMMENDATION
        assert intent.category is None
        assert intent.confidence == pytest.approx(0.80)

    def test_brand_and_rating(self, detector):
        intent = detector.detect("top 5 samsung phones rated above 4")
        assert intent.brands == ('samsung',)
        assert intent.min_rating == 4.0

    def test_price_range_uses_upper_bound(self, detector):
        intent = detector.detect("best laptop for programming between 50k and 70k")
        assert intent.type == IntentType.PRODUCT_RECOMMENDATION
        assert intent.price_ceiling == 70000
        assert intent.use_cases == ('programming',)

    def test_lakh_price(self, detector):
        intent = detector.detect("best phone under 1.5 lakh")
        assert intent.category == Category.SMARTPHONES
        assert intent.price_ceiling == 150000

    def test_top_not_matched_inside_laptop(self, detector):
        intent = detector.detect("show me a laptop")
        assert intent.type == IntentType.PRODUCT_SEMANTIC
        assert intent.category == Category.LAPTOPS

    def test_short_brand_not_matched_inside_word(self, detector):
        intent = detector.detect("best gaming phone")
        assert intent.brands == ()


# === COMPARISON TESTS ===

class TestComparison:
    """Comparison cues and product name resolution."""

    def test_resolves_same_category_products(self, detector):
        intent = detector.detect("Compare iPhone 15 vs Samsung S24")
        assert intent.type == IntentType.PRODUCT_COMPARISON
        assert intent.product_names == ('iPhone 15', 'Samsung S24')
        # The Samsung S24 TV is in another category and must not win
        assert intent.product_ids == ('ph-002', 'ph-003')
        assert intent.category == Category.SMARTPHONES
        assert intent.confidence == pytest.approx(0.95)

    def test_unresolved_name_keeps_names_only(self, detector):
        intent = detector.detect("iPhone 15 vs Pixel 9")
        assert intent.type == IntentType.PRODUCT_COMPARISON
        assert intent.product_names == ('iPhone 15', 'Pixel 9')
        assert intent.product_ids == ()
        assert intent.confidence == pytest.approx(0.85)

    def test_cue_only(self, detector):
        intent = detector.detect("compare these")
        assert intent.type == IntentType.PRODUCT_COMPARISON
        assert intent.product_names == ()
        assert intent.confidence == pytest.approx(0.70)

    @pytest.mark.parametrize("query", ["cheapest phones compared", "comparing budget phones"])
    def test_inflected_cue(self, detector, query):
        intent = detector.detect(query)
        assert intent.type == IntentType.PRODUCT_COMPARISON
        assert intent.category == Category.SMARTPHONES
        assert intent.product_names == ()

    def test_which_is_better(self, detector):
        intent = detector.detect("which is better, iPhone 12 or iPhone 15?")
        assert intent.type == IntentType.PRODUCT_COMPARISON
        assert intent.product_ids == ('ph-001', 'ph-002')

    def test_price_range_is_not_comparison(self, detector):
        intent = detector.detect("phones between 20k and 40k")
        assert intent.type == IntentType.PRODUCT_SEMANTIC
        assert intent.category == Category.SMARTPHONES


# === EXACT PRODUCT TESTS ===

class TestExactProduct:
    """Exact product references resolved against the title cache."""

    def test_title_match(self, detector):
        intent = detector.detect("iPhone 15 price")
        assert intent.type == IntentType.PRODUCT_EXACT
        assert intent.product_id == 'ph-002'
        assert intent.confidence == pytest.approx(0.95)

    def test_number_mismatch_never_resolves(self, detector):
        intent = detector.detect("iPhone 14")
        assert intent.type != IntentType.PRODUCT_EXACT

    def test_tie_broken_by_token_overlap(self, detector):
        intent = detector.detect("Samsung Galaxy S24")
        assert intent.product_id == 'ph-003'

    def test_model_index(self, detector):
        intent = detector.detect("Samsung Galaxy 2")
        assert intent.type == IntentType.PRODUCT_EXACT
        assert intent.product_id == 'ph-004'
        assert intent.sku_index == 2
        assert intent.confidence == pytest.approx(0.85)

    def test_commerce_relaxed_match(self, detector):
        intent = detector.detect("price of tuf gaming rig")
        assert intent.type == IntentType.PRODUCT_EXACT
        assert intent.product_id == 'lap-002'
        assert intent.confidence == pytest.approx(0.75)

    def test_relaxed_match_needs_commerce_verb(self, detector):
        intent = detector.detect("tuf gaming rig")
        assert intent.type == IntentType.GENERAL

    def test_order_cue_skips_exact_tier(self, detector):
        intent = detector.detect("where is my Samsung Galaxy S24 order")
        assert intent.type == IntentType.ORDER_TRACKING

    def test_generic_words_do_not_match_titles(self, detector):
        intent = detector.detect("laptop with good battery")
        assert intent.type == IntentType.PRODUCT_SEMANTIC
        assert intent.confidence == pytest.approx(0.60)


# === RULE TABLE TESTS ===

class TestRules:
    """Keyword rules after the pattern tiers."""

    def test_track_order(self, detector):
        intent = detector.detect("track my order")
        assert intent.type == IntentType.ORDER_TRACKING
        assert intent.order_id is None
        assert intent.confidence == pytest.approx(0.90)

    def test_order_id_after_hash(self, detector):
        intent = detector.detect("where is order #ORD1002")
        assert intent.type == IntentType.ORDER_TRACKING
        assert intent.order_id == 'ORD1002'

    def test_refund_is_support(self, detector):
        intent = detector.detect("I want a refund for my last order")
        assert intent.type == IntentType.ORDER_SUPPORT
        assert intent.confidence == pytest.approx(0.85)

    def test_support_checked_before_tracking(self, detector):
        intent = detector.detect("cancel my order")
        assert intent.type == IntentType.ORDER_SUPPORT

    def test_account(self, detector):
        intent = detector.detect("update my email address")
        assert intent.type == IntentType.USER_ACCOUNT

    def test_profile(self, detector):
        intent = detector.detect("show my profile")
        assert intent.type == IntentType.USER_ACCOUNT

    def test_general(self, detector):
        intent = detector.detect("hello")
        assert intent.type == IntentType.GENERAL
        assert intent.confidence == pytest.approx(0.30)

    def test_empty_query_is_general(self, detector):
        assert detector.detect("").type == IntentType.GENERAL


# === CALLER HINT TESTS ===

class TestCoerce:
    """Caller-supplied intents."""

    def test_hint_builds_variant_with_slots(self, detector):
        intent = detector.coerce("my order #ORD1002", "order_tracking")
        assert intent.type == IntentType.ORDER_TRACKING
        assert intent.order_id == 'ORD1002'
        assert intent.confidence == 1.0
        assert intent.reason == "intent supplied by caller"

    def test_hint_accepts_enum(self, detector):
        intent = detector.coerce("gaming laptop under 80k", IntentType.PRODUCT_RECOMMENDATION)
        assert intent.category == Category.LAPTOPS
        assert intent.price_ceiling == 80000

    def test_unknown_hint_raises(self, detector):
        with pytest.raises(ValueError):
            detector.coerce("anything", "teleport")


# === ROBUSTNESS TESTS ===

class TestRobustness:

    def test_internal_failure_returns_general(self, detector, monkeypatch):
        def boom(query):
            raise RuntimeError("broken table")

        monkeypatch.setattr(detector, "_detect", boom)
        intent = detector.detect("best laptop")
        assert intent.type == IntentType.GENERAL
        assert "RuntimeError" in intent.reason

    def test_failed_title_cache_degrades_to_rules(self):
        def failing_loader():
            raise ConnectionError("catalog down")

        detector = IntentDetector(CatalogTitleCache(failing_loader))
        assert detector.detect("iPhone 15 price").type != IntentType.PRODUCT_EXACT
        assert detector.detect("track my order").type == IntentType.ORDER_TRACKING


# === EXTRACTOR TESTS ===

class TestExtractors:

    @pytest.mark.parametrize("text,expected", [
        ("under 50k", 50000),
        ("below 25000", 25000),
        ("under ₹30,000", 30000),
        ("under 1 lakh", 100000),
        ("between 20k and 40k", 40000),
        ("between 20k and 40", 40000),
        ("best laptop between 20k and 40000", 40000),
        ("between 1 lakh and 150000", 150000),
        ("cheap phones", None),
    ])
    def test_price_ceiling(self, detector, text, expected):
        assert detector.extract_price_ceiling(text) == expected

    @pytest.mark.parametrize("text,expected", [
        ("4+ stars", 4.0),
        ("at least 4.5 stars", 4.5),
        ("rated above 4", 4.0),
        ("rated 9", 5.0),
        ("no rating here", None),
    ])
    def test_min_rating(self, detector, text, expected):
        assert detector.extract_min_rating(text) == expected

    def test_order_id_needs_digit(self, detector):
        assert detector.extract_order_id("order number A-77") == 'A-77'
        assert detector.extract_order_id("order status please") is None

    def test_product_names(self, detector):
        assert detector.extract_product_names("Compare iPhone 15 vs Samsung S24") == ['iPhone 15', 'Samsung S24']

    def test_noise_cancelling_is_not_a_brand(self, detector):
        assert detector.extract_brands("noise cancelling headphones from sony") == ['sony']

    def test_category_phrase_before_keyword(self, detector):
        assert detector.detect_category("gaming mouse for my laptop") == Category.ACCESSORIES
