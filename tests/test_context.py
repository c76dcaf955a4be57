"""
Tests for the data models, intent variants and store filters.
"""

import pytest

from core.context import (
    INTENT_VARIANTS,
    Category,
    ComparisonIntent,
    IntentType,
    Order,
    OrderStatus,
    Product,
    RecommendationIntent,
    Route,
    RoutedContext,
)
from core.stores import InMemoryCatalogStore, ProductFilter


class TestCategory:

    @pytest.mark.parametrize("text,expected", [
        ("Laptops", Category.LAPTOPS),
        ("smart tvs", Category.SMART_TVS),
        ("Smart-TV", Category.SMART_TVS),
        ("phones", Category.SMARTPHONES),
        (Category.WEARABLES, Category.WEARABLES),
    ])
    def test_parse(self, text, expected):
        assert Category.parse(text) is expected

    def test_unknown(self):
        with pytest.raises(ValueError):
            Category.parse("groceries")


class TestProduct:

    def test_negative_price_rejected(self):
        with pytest.raises(ValueError):
            Product(id="x", title="X", category=Category.LAPTOPS, price=-1)

    def test_title_falls_back_to_name(self):
        product = Product(id=7, title="", name="Widget", category="Accessories", price=1.0)
        assert product.id == "7"
        assert product.title == "Widget"

    def test_sectioned_specs_flattened(self, products):
        specs = products[1].spec_map()
        assert specs['gpu'] == 'NVIDIA RTX 3050'
        assert specs['best_for'] == 'gaming'
        assert 'section' not in specs

    def test_json_string_specs(self):
        product = Product(id="x", title="X", category=Category.LAPTOPS, price=1.0,
                          specifications='{"Battery Life": "10 hours"}')
        assert product.spec_map() == {'battery_life': '10 hours'}

    def test_free_text_specs(self):
        product = Product(id="x", title="X", category=Category.LAPTOPS, price=1.0,
                          specifications="Great machine")
        assert product.spec_map() == {'details': 'Great machine'}

    def test_searchable_text(self, products):
        text = products[0].searchable_text()
        assert 'hp pavilion 14' in text
        assert 'backlit keyboard' in text
        assert 'intel core i5' in text


def test_order_status_parsed():
    order = Order(id=1, user_id=2, status="Out-For-Delivery")
    assert order.id == "1"
    assert order.status is OrderStatus.OUT_FOR_DELIVERY


class TestIntentVariants:

    def test_one_variant_per_type(self):
        assert set(INTENT_VARIANTS) == set(IntentType)

    def test_slots_flatten_enums_and_tuples(self):
        intent = RecommendationIntent(0.92, "r", category=Category.LAPTOPS, brands=('hp',))
        assert intent.slots() == {
            'category': 'Laptops',
            'price_ceiling': None,
            'brands': ['hp'],
            'use_cases': [],
            'min_rating': None,
        }
        assert intent.to_dict()['intent'] == 'product_recommendation'

    def test_variants_are_immutable(self):
        intent = ComparisonIntent(0.7, "r")
        with pytest.raises(AttributeError):
            intent.confidence = 1.0


def test_routed_context_items_never_none():
    routed = RoutedContext(intent=ComparisonIntent(0.7, "r"), route=Route.CLARIFICATION, items=None)
    assert routed.items == []
    assert routed.is_empty()


class TestProductFilter:

    def test_brand_matches_brand_or_title_word(self, products):
        matched = [p.id for p in products if ProductFilter(brands=('xiaomi',)).matches(p)]
        assert matched == ['ph-005']
        matched = [p.id for p in products if ProductFilter(brands=('redmi',)).matches(p)]
        assert matched == ['ph-005']

    def test_bounds_are_inclusive(self, products):
        product_filter = ProductFilter(max_price=49900, min_rating=4.5)
        assert 'ph-001' in [p.id for p in products if product_filter.matches(p)]

    def test_to_dict(self):
        product_filter = ProductFilter(category=Category.LAPTOPS, max_price=80000)
        assert product_filter.to_dict() == {'category': 'Laptops', 'price_ceiling': 80000}


class TestSearchText:

    def test_match_all(self, catalog):
        assert [p.id for p in catalog.search_text(['galaxy', 'amoled'])] == ['ph-003', 'ph-004']

    def test_match_any_with_category(self, catalog):
        found = catalog.search_text(['dolby', 'rtx'], category=Category.SMART_TVS, match_all=False)
        assert [p.id for p in found] == ['tv-003']

    def test_title_only(self, catalog):
        assert catalog.search_text(['gaming'], title_only=True)[0].id == 'lap-002'
        assert catalog.search_text(['amoled'], title_only=True) == []

    def test_no_terms(self):
        assert InMemoryCatalogStore().search_text([]) == []
