"""Core retrieval logic for ShopBot."""

from core.context import (
    Category,
    IntentType,
    Route,
    ROUTE_TYPES,
    RetrievalType,
    Product,
    Order,
    OrderItem,
    OrderStatus,
    User,
    IntentResult,
    OrderTrackingIntent,
    OrderSupportIntent,
    ComparisonIntent,
    RecommendationIntent,
    ExactProductIntent,
    SemanticProductIntent,
    UserAccountIntent,
    GeneralIntent,
    RoutedContext,
    FusedContext,
)

# Component modules import config, which imports core.context; keep this
# package init limited to the data models so either side can load first.

__all__ = [
    "Category",
    "IntentType",
    "Route",
    "ROUTE_TYPES",
    "RetrievalType",
    "Product",
    "Order",
    "OrderItem",
    "OrderStatus",
    "User",
    "IntentResult",
    "OrderTrackingIntent",
    "OrderSupportIntent",
    "ComparisonIntent",
    "RecommendationIntent",
    "ExactProductIntent",
    "SemanticProductIntent",
    "UserAccountIntent",
    "GeneralIntent",
    "RoutedContext",
    "FusedContext",
]
