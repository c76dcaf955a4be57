"""
Core data models for ShopBot.

Defines the catalog records, the intent variants produced by the
detector, and the context envelopes passed from router to fusion.
These are pure Python dataclasses with no external dependencies.
"""

import json
import re
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Optional


class Category(Enum):
    """
    Closed set of product categories.

    Declaration order is the tie-break order used wherever two
    categories score the same.
    """
    LAPTOPS = "Laptops"
    SMARTPHONES = "Smartphones"
    SMART_TVS = "Smart TVs"
    WEARABLES = "Wearables"
    ACCESSORIES = "Accessories"

    @classmethod
    def parse(cls, text: Any) -> "Category":
        """
        Resolve a canonical value or common alias to a Category.

        Examples:
            >>> Category.parse("smart tvs")
            <Category.SMART_TVS: 'Smart TVs'>
            >>> Category.parse("phones")
            <Category.SMARTPHONES: 'Smartphones'>

        Raises:
            ValueError: If the text names no known category
        """
        if isinstance(text, cls):
            return text
        key = re.sub(r'[^a-z0-9]+', ' ', str(text or '').lower()).strip()
        for member in cls:
            if key == member.value.lower():
                return member
        if key in _CATEGORY_ALIASES:
            return _CATEGORY_ALIASES[key]
        raise ValueError(f"Unknown product category: {text!r}")


_CATEGORY_ALIASES = {
    'laptop': Category.LAPTOPS,
    'notebook': Category.LAPTOPS,
    'notebooks': Category.LAPTOPS,
    'smartphone': Category.SMARTPHONES,
    'phone': Category.SMARTPHONES,
    'phones': Category.SMARTPHONES,
    'mobile': Category.SMARTPHONES,
    'mobiles': Category.SMARTPHONES,
    'smart tv': Category.SMART_TVS,
    'tv': Category.SMART_TVS,
    'tvs': Category.SMART_TVS,
    'television': Category.SMART_TVS,
    'televisions': Category.SMART_TVS,
    'wearable': Category.WEARABLES,
    'watch': Category.WEARABLES,
    'watches': Category.WEARABLES,
    'smartwatch': Category.WEARABLES,
    'smartwatches': Category.WEARABLES,
    'accessory': Category.ACCESSORIES,
}


class IntentType(Enum):
    """
    User intent types.

    Exactly one is assigned per query. Detection priority is
    recommendation, comparison, exact product, rule table, residual
    product cue, then general.
    """
    ORDER_TRACKING = "order_tracking"
    ORDER_SUPPORT = "order_support"
    PRODUCT_COMPARISON = "product_comparison"
    PRODUCT_RECOMMENDATION = "product_recommendation"
    PRODUCT_EXACT = "product_exact"
    PRODUCT_SEMANTIC = "product_semantic"
    USER_ACCOUNT = "user_account"
    GENERAL = "general"


class Route(Enum):
    """Retrieval procedure that produced a routed context."""
    PRODUCT_SEARCH = "product_search"
    PRODUCT_LOOKUP = "product_lookup"
    PRODUCT_COMPARISON = "product_comparison"
    COMPARISON_CANDIDATES = "comparison_candidates"
    RECOMMENDATION = "recommendation"
    ORDER_LOOKUP = "order_lookup"
    ORDER_SUPPORT = "order_support"
    USER_PROFILE = "user_profile"
    LOGIN_REQUIRED = "login_required"
    CLARIFICATION = "clarification"
    NO_RETRIEVAL = "no_retrieval"


# One-to-one route -> envelope type table consumed by fusion
ROUTE_TYPES = {
    Route.PRODUCT_SEARCH: "product",
    Route.PRODUCT_LOOKUP: "product_detail",
    Route.PRODUCT_COMPARISON: "comparison",
    Route.COMPARISON_CANDIDATES: "comparison_candidates",
    Route.RECOMMENDATION: "recommendation",
    Route.ORDER_LOOKUP: "order",
    Route.ORDER_SUPPORT: "order_support",
    Route.USER_PROFILE: "user",
    Route.LOGIN_REQUIRED: "auth_required",
    Route.CLARIFICATION: "clarification",
    Route.NO_RETRIEVAL: "general",
}


class RetrievalType(Enum):
    """How the items of a routed context were obtained."""
    ID_LOOKUP = "id_lookup"
    TEXT_MATCH = "text_match"
    SEMANTIC = "semantic"
    FILTERED = "filtered"
    VECTOR = "vector"
    RECENCY = "recency"
    PROFILE = "profile"
    NONE = "none"


class OrderStatus(Enum):
    """Order lifecycle as the storefront records it."""
    PENDING = "pending"
    PACKING = "packing"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out-for-delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


def normalize_spec_key(key: Any) -> str:
    """'Refresh Rate' -> 'refresh_rate'"""
    return re.sub(r'[^a-z0-9]+', '_', str(key).lower()).strip('_')


@dataclass
class Product:
    """
    Catalog product.

    Attributes:
        id: Catalog identifier
        title: Display title (falls back to name)
        category: One of the closed Category set
        brand: Brand name
        price: Selling price, never negative
        rating: Average rating (0-5)
        stock: Units in stock
        specifications: Absent, a flat key->value map, a list of
            sectioned key->value maps, or a JSON string of either
        features: Feature bullet list
        description: Free-text description
        rating_count: Number of ratings
        name: Short product name
    """
    id: str
    title: str
    category: Category
    brand: str = ""
    price: float = 0.0
    rating: float = 0.0
    stock: int = 0
    specifications: Any = None
    features: list[str] = field(default_factory=list)
    description: str = ""
    rating_count: int = 0
    name: Optional[str] = None

    def __post_init__(self):
        self.id = str(self.id)
        if not isinstance(self.category, Category):
            self.category = Category.parse(self.category)
        if self.price is None or self.price < 0:
            raise ValueError(f"Product {self.id} has invalid price {self.price!r}")
        if not self.title:
            self.title = self.name or ""
        if self.name is None:
            self.name = self.title

    def spec_map(self) -> dict[str, str]:
        """
        Flatten specifications into {normalised_key: value}.

        Sectioned lists are merged in order; later sections overwrite
        duplicate keys. Unstructured text is kept under 'details'.
        """
        raw = self.specifications
        if raw is None or raw == "":
            return {}
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except ValueError:
                return _parse_spec_lines(raw)

        flat: dict[str, str] = {}
        if isinstance(raw, dict):
            _flatten_specs(raw, flat)
        elif isinstance(raw, list):
            for section in raw:
                if isinstance(section, dict):
                    _flatten_specs(section, flat)
        else:
            flat['details'] = str(raw)
        return flat

    def spec_text(self) -> str:
        """Lowercase serialisation of the specifications used for keyword scoring."""
        return " ".join(f"{key} {value}" for key, value in self.spec_map().items()).lower()

    def searchable_text(self) -> str:
        """Title, name, brand, description, features and specs in one lowercase string."""
        parts = [self.title, self.name or "", self.brand, self.description]
        parts.extend(str(f) for f in self.features)
        parts.append(self.spec_text())
        return " ".join(p for p in parts if p).lower()

    def to_dict(self) -> dict:
        """Normalised record handed to fusion."""
        return {
            'id': self.id,
            'title': self.title,
            'name': self.name,
            'category': self.category.value,
            'brand': self.brand,
            'price': self.price,
            'rating': self.rating,
            'rating_count': self.rating_count,
            'stock': self.stock,
            'features': list(self.features),
            'specifications': self.spec_map(),
            'description': self.description,
        }


def _flatten_specs(section: dict, out: dict) -> None:
    for key, value in section.items():
        if key in ('section', 'group', 'heading'):
            continue
        if isinstance(value, dict):
            _flatten_specs(value, out)
        elif isinstance(value, list):
            if value and all(isinstance(v, dict) for v in value):
                for v in value:
                    _flatten_specs(v, out)
            else:
                out[normalize_spec_key(key)] = ", ".join(str(v) for v in value)
        elif value is not None:
            out[normalize_spec_key(key)] = str(value)


def _parse_spec_lines(text: str) -> dict[str, str]:
    """Parse 'Key: Value' lines (newline or semicolon separated)."""
    flat = {}
    for line in re.split(r'[\n;]+', text):
        key, sep, value = line.partition(':')
        if sep and key.strip() and value.strip():
            flat[normalize_spec_key(key)] = value.strip()
    if not flat and text.strip():
        flat['details'] = text.strip()
    return flat


@dataclass
class OrderItem:
    """Line item snapshot taken when the order was placed."""
    product_id: Optional[str]
    title: str
    brand: str = ""
    quantity: int = 1
    price: float = 0.0

    def to_dict(self) -> dict:
        return {
            'product_id': self.product_id,
            'title': self.title,
            'brand': self.brand,
            'quantity': self.quantity,
            'price': self.price,
        }


@dataclass
class Order:
    """
    Customer order.

    Attributes:
        id: Order identifier
        user_id: Owning user
        items: Line items
        total_amount: Order total
        status: Lifecycle status
        created_at: Placement time, used for recency ordering
        address: Delivery address parts (street, city, zip_code)
    """
    id: str
    user_id: str
    items: list[OrderItem] = field(default_factory=list)
    total_amount: float = 0.0
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = field(default_factory=datetime.now)
    address: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self.id = str(self.id)
        self.user_id = str(self.user_id)
        if not isinstance(self.status, OrderStatus):
            self.status = OrderStatus(str(self.status).lower())

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'user_id': self.user_id,
            'items': [item.to_dict() for item in self.items],
            'total_amount': self.total_amount,
            'status': self.status.value,
            'created_at': self.created_at.isoformat(),
            'address': dict(self.address),
        }


@dataclass
class User:
    """Public user profile. Credentials are never loaded into this record."""
    id: str
    name: str
    email: str = ""
    phone: str = ""
    address: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'address': dict(self.address),
        }


# === Intent Variants ===

@dataclass(frozen=True)
class IntentResult:
    """
    Classified intent with metadata.

    Each subclass is one intent variant and carries only its own slots.

    Attributes:
        confidence: Confidence score (0.0-1.0), ordinal across tiers
        reason: Why this intent was selected
    """
    type: ClassVar[IntentType] = IntentType.GENERAL

    confidence: float
    reason: str

    def slots(self) -> dict[str, Any]:
        """Intent-specific slot values, enums flattened to their values."""
        result = {}
        for f in fields(self):
            if f.name in ('confidence', 'reason'):
                continue
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, tuple):
                value = list(value)
            result[f.name] = value
        return result

    def to_dict(self) -> dict:
        return {
            'intent': self.type.value,
            'confidence': round(self.confidence, 2),
            'reason': self.reason,
            'slots': self.slots(),
        }

    def __str__(self) -> str:
        return f"Intent({self.type.value}, confidence={self.confidence:.2f})"


@dataclass(frozen=True)
class OrderTrackingIntent(IntentResult):
    type: ClassVar[IntentType] = IntentType.ORDER_TRACKING
    order_id: Optional[str] = None


@dataclass(frozen=True)
class OrderSupportIntent(IntentResult):
    type: ClassVar[IntentType] = IntentType.ORDER_SUPPORT
    order_id: Optional[str] = None


@dataclass(frozen=True)
class ComparisonIntent(IntentResult):
    """
    Comparison request.

    product_ids holds the resolved catalog ids, in query order, when
    every extracted name resolved; product_names holds the raw names.
    """
    type: ClassVar[IntentType] = IntentType.PRODUCT_COMPARISON
    product_ids: tuple[str, ...] = ()
    product_names: tuple[str, ...] = ()
    category: Optional[Category] = None


@dataclass(frozen=True)
class RecommendationIntent(IntentResult):
    type: ClassVar[IntentType] = IntentType.PRODUCT_RECOMMENDATION
    category: Optional[Category] = None
    price_ceiling: Optional[int] = None
    brands: tuple[str, ...] = ()
    use_cases: tuple[str, ...] = ()
    min_rating: Optional[float] = None


@dataclass(frozen=True)
class ExactProductIntent(IntentResult):
    type: ClassVar[IntentType] = IntentType.PRODUCT_EXACT
    product_id: Optional[str] = None
    product_title: Optional[str] = None
    sku_index: Optional[int] = None


@dataclass(frozen=True)
class SemanticProductIntent(IntentResult):
    type: ClassVar[IntentType] = IntentType.PRODUCT_SEMANTIC
    category: Optional[Category] = None


@dataclass(frozen=True)
class UserAccountIntent(IntentResult):
    type: ClassVar[IntentType] = IntentType.USER_ACCOUNT


@dataclass(frozen=True)
class GeneralIntent(IntentResult):
    type: ClassVar[IntentType] = IntentType.GENERAL


INTENT_VARIANTS = {
    cls.type: cls for cls in (
        OrderTrackingIntent,
        OrderSupportIntent,
        ComparisonIntent,
        RecommendationIntent,
        ExactProductIntent,
        SemanticProductIntent,
        UserAccountIntent,
        GeneralIntent,
    )
}


# === Context Envelopes ===

@dataclass
class RoutedContext:
    """
    Raw router output for one query.

    Attributes:
        intent: Intent the route was chosen for
        route: Retrieval procedure that ran
        retrieval_type: How the items were obtained
        items: Products, orders, or a single user record (never None)
        applied_filters: Filters and fallback tier actually used
        message: Clarification or login prompt, when the route needs one
        error: Error text when a failure redirected the route
    """
    intent: IntentResult
    route: Route
    retrieval_type: RetrievalType = RetrievalType.NONE
    items: list = field(default_factory=list)
    applied_filters: dict = field(default_factory=dict)
    message: Optional[str] = None
    error: Optional[str] = None

    def __post_init__(self):
        if self.items is None:
            self.items = []
        elif not isinstance(self.items, list):
            self.items = list(self.items) if isinstance(self.items, (tuple, set)) else [self.items]

    def is_empty(self) -> bool:
        return not self.items


@dataclass
class FusedContext:
    """
    Uniform envelope consumed by answer generation.

    `type` is a pure function of `route` (see ROUTE_TYPES).
    """
    intent: str
    route: str
    type: str
    items: list[dict] = field(default_factory=list)
    retrieval_type: str = RetrievalType.NONE.value
    metadata: dict = field(default_factory=dict)
    user_id: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'intent': self.intent,
            'route': self.route,
            'type': self.type,
            'items': list(self.items),
            'retrievalType': self.retrieval_type,
            'metadata': dict(self.metadata),
            'userId': self.user_id,
            'error': self.error,
        }
