"""
Time-bounded snapshot of lightweight catalog records.

Matching routines read titles from here instead of scanning the full
catalog per query. The snapshot is refreshed lazily on read once its
time-to-live has passed; a refresh swaps the snapshot reference, so
concurrent readers see either the old or the new tuple, never a mix.
"""

import time
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from core.context import Category, Product
from core.structured_logging import get_logger

_logger = get_logger("core.title_cache")


@dataclass(frozen=True)
class TitleEntry:
    """Lightweight product record used for text matching."""
    id: str
    title: str
    brand: str
    category: Category
    searchable: str

    @classmethod
    def from_product(cls, product: Product) -> "TitleEntry":
        searchable = " ".join(
            p for p in (product.title, product.name or "", product.brand, product.category.value) if p
        ).lower()
        return cls(
            id=product.id,
            title=product.title,
            brand=product.brand or "",
            category=product.category,
            searchable=searchable,
        )


@dataclass(frozen=True)
class _Snapshot:
    entries: tuple[TitleEntry, ...]
    loaded_at: float


class CatalogTitleCache:
    """
    Lazily refreshed title snapshot with get-or-refresh(now) semantics.

    Args:
        loader: Returns every catalog product (the store's list_all)
        ttl_seconds: Snapshot lifetime
        clock: Monotonic time source, injectable for tests

    Example:
        cache = CatalogTitleCache(catalog.list_all, ttl_seconds=300)
        entries = cache.get()
    """

    def __init__(
        self,
        loader: Callable[[], Iterable[Product]],
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._loader = loader
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._snapshot: Optional[_Snapshot] = None

    def get(self, now: Optional[float] = None) -> tuple[TitleEntry, ...]:
        """
        Return the current entries, refreshing first if the snapshot expired.

        A failed refresh keeps serving the previous snapshot (or an empty
        tuple if nothing was ever loaded); the next read retries.
        """
        now = self._clock() if now is None else now
        snapshot = self._snapshot
        if snapshot is not None and now - snapshot.loaded_at < self.ttl_seconds:
            return snapshot.entries

        try:
            entries = tuple(TitleEntry.from_product(p) for p in self._loader())
        except Exception as e:
            _logger.error(
                f"Title cache refresh failed: {e}",
                extra={"event": "title_cache_refresh_failed", "error_type": type(e).__name__},
                exc_info=True,
            )
            return snapshot.entries if snapshot is not None else ()

        self._snapshot = _Snapshot(entries=entries, loaded_at=now)
        _logger.debug(
            "Title cache refreshed",
            extra={"event": "title_cache_refresh", "entries": len(entries)},
        )
        return entries

    def is_stale(self, now: Optional[float] = None) -> bool:
        now = self._clock() if now is None else now
        return self._snapshot is None or now - self._snapshot.loaded_at >= self.ttl_seconds

    def by_category(self, category: Optional[Category], now: Optional[float] = None) -> tuple[TitleEntry, ...]:
        """Entries restricted to one category (all entries when category is None)."""
        entries = self.get(now)
        if category is None:
            return entries
        return tuple(e for e in entries if e.category is category)
