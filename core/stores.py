"""
Store interfaces consumed by the router, plus in-memory implementations.

The retrieval core only reads from these. Persistent backends implement
the same abstract classes and raise StoreError on access failure; the
router converts any such failure into a fallback route.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional

from core.context import Category, Order, Product, User


class StoreError(Exception):
    """A read against a catalog, order, user or vector store failed."""


@dataclass(frozen=True)
class ProductFilter:
    """
    Catalog filter set.

    Attributes:
        category: Hard category constraint
        brands: Brand names, OR-matched case-insensitively
        max_price: Inclusive price ceiling
        min_rating: Inclusive rating floor
    """
    category: Optional[Category] = None
    brands: tuple[str, ...] = ()
    max_price: Optional[float] = None
    min_rating: Optional[float] = None

    def matches(self, product: Product) -> bool:
        if self.category is not None and product.category is not self.category:
            return False
        if self.brands:
            brand = (product.brand or '').lower()
            title = product.title.lower()
            if not any(b.lower() == brand or b.lower() in title.split() for b in self.brands):
                return False
        if self.max_price is not None and product.price > self.max_price:
            return False
        if self.min_rating is not None and (product.rating or 0.0) < self.min_rating:
            return False
        return True

    def to_dict(self) -> dict:
        result = {}
        if self.category is not None:
            result['category'] = self.category.value
        if self.brands:
            result['brands'] = list(self.brands)
        if self.max_price is not None:
            result['price_ceiling'] = self.max_price
        if self.min_rating is not None:
            result['min_rating'] = self.min_rating
        return result


class CatalogStore(ABC):
    """Read-only product catalog."""

    @abstractmethod
    def get(self, product_id: str) -> Optional[Product]:
        """Product by id, or None."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Every product; used to populate the title cache."""

    @abstractmethod
    def find(self, product_filter: ProductFilter) -> list[Product]:
        """Products satisfying every constraint of the filter."""

    def by_category(self, category: Category) -> list[Product]:
        return self.find(ProductFilter(category=category))

    def search_text(
        self,
        terms: Iterable[str],
        category: Optional[Category] = None,
        match_all: bool = True,
        title_only: bool = False,
    ) -> list[Product]:
        """
        Products whose searchable text contains the terms.

        Args:
            terms: Lowercase words or phrases
            category: Optional category constraint
            match_all: Require every term (True) or any term (False)
            title_only: Search title and name only
        """
        wanted = [t.lower() for t in terms if t]
        if not wanted:
            return []
        check = all if match_all else any
        candidates = self.by_category(category) if category else self.list_all()

        def text_of(p: Product) -> str:
            return f"{p.title} {p.name or ''}".lower() if title_only else p.searchable_text()

        return [p for p in candidates if check(t in text_of(p) for t in wanted)]


class OrderStore(ABC):
    """Read-only order history."""

    @abstractmethod
    def get(self, order_id: str) -> Optional[Order]:
        """Order by id, or None."""

    @abstractmethod
    def by_owner(self, user_id: str, limit: Optional[int] = None) -> list[Order]:
        """Orders placed by a user, most recent first."""

    def list_all(self) -> list[Order]:
        """Every order, for index initialisation. Backends that cannot enumerate return []."""
        return []


class UserStore(ABC):
    """Read-only user profiles."""

    @abstractmethod
    def get(self, user_id: str) -> Optional[User]:
        """User by id, or None."""


class InMemoryCatalogStore(CatalogStore):
    """Catalog held in a dict, insertion order preserved."""

    def __init__(self, products: Iterable[Product] = ()):
        self._products = {p.id: p for p in products}

    def __len__(self) -> int:
        return len(self._products)

    def add(self, product: Product) -> None:
        self._products[product.id] = product

    def get(self, product_id: str) -> Optional[Product]:
        return self._products.get(str(product_id))

    def list_all(self) -> list[Product]:
        return list(self._products.values())

    def find(self, product_filter: ProductFilter) -> list[Product]:
        return [p for p in self._products.values() if product_filter.matches(p)]


class InMemoryOrderStore(OrderStore):

    def __init__(self, orders: Iterable[Order] = ()):
        self._orders = {o.id: o for o in orders}

    def add(self, order: Order) -> None:
        self._orders[order.id] = order

    def get(self, order_id: str) -> Optional[Order]:
        return self._orders.get(str(order_id))

    def list_all(self) -> list[Order]:
        return list(self._orders.values())

    def by_owner(self, user_id: str, limit: Optional[int] = None) -> list[Order]:
        owned = [o for o in self._orders.values() if o.user_id == str(user_id)]
        owned.sort(key=lambda o: o.created_at, reverse=True)
        return owned[:limit] if limit is not None else owned


class InMemoryUserStore(UserStore):

    def __init__(self, users: Iterable[User] = ()):
        self._users = {u.id: u for u in users}

    def get(self, user_id: str) -> Optional[User]:
        return self._users.get(str(user_id))
