"""
Tests for the catalog title cache.
"""

from core.context import Category, Product
from core.title_cache import CatalogTitleCache, TitleEntry


class CountingLoader:
    """Loader that records how often the cache refreshed."""

    def __init__(self, products):
        self.products = list(products)
        self.calls = 0
        self.fail = False

    def __call__(self):
        self.calls += 1
        if self.fail:
            raise ConnectionError("catalog down")
        return list(self.products)


def test_entry_from_product():
    product = Product(id="p1", title="Galaxy S24", category="phones", brand="Samsung", price=1.0)
    entry = TitleEntry.from_product(product)
    assert entry.id == 'p1'
    assert entry.category is Category.SMARTPHONES
    assert entry.searchable == 'galaxy s24 galaxy s24 samsung smartphones'


class TestRefresh:

    def test_loaded_once_within_ttl(self, products):
        loader = CountingLoader(products)
        cache = CatalogTitleCache(loader, ttl_seconds=60)
        assert len(cache.get(now=0)) == len(products)
        cache.get(now=59)
        assert loader.calls == 1

    def test_refreshed_after_ttl(self, products):
        loader = CountingLoader(products[:2])
        cache = CatalogTitleCache(loader, ttl_seconds=60)
        cache.get(now=0)
        loader.products = products
        assert len(cache.get(now=60)) == len(products)
        assert loader.calls == 2

    def test_failed_refresh_keeps_previous_snapshot(self, products):
        loader = CountingLoader(products)
        cache = CatalogTitleCache(loader, ttl_seconds=60)
        cache.get(now=0)
        loader.fail = True
        assert len(cache.get(now=120)) == len(products)
        # Still stale, so the next read retries
        assert cache.is_stale(now=121)

    def test_failure_before_first_load(self):
        loader = CountingLoader([])
        loader.fail = True
        cache = CatalogTitleCache(loader)
        assert cache.get(now=0) == ()

    def test_injected_clock(self, products):
        ticks = iter([0.0, 10.0, 400.0])
        loader = CountingLoader(products)
        cache = CatalogTitleCache(loader, ttl_seconds=300, clock=lambda: next(ticks))
        cache.get()
        cache.get()
        cache.get()
        assert loader.calls == 2


def test_by_category(title_cache):
    entries = title_cache.by_category(Category.WEARABLES)
    assert [e.id for e in entries] == ['wr-001', 'wr-002']
    assert len(title_cache.by_category(None)) == 17
