"""
Retrieval handlers for ShopBot.

Each handler runs the retrieval procedure for one intent type.
"""

from handlers.base import LOGIN_MESSAGE, BaseHandler, HandlerContext
from handlers.products import ExactProductHandler, SemanticSearchHandler
from handlers.comparison import ComparisonHandler
from handlers.recommendation import RecommendationHandler
from handlers.orders import OrderSupportHandler, OrderTrackingHandler
from handlers.account import GeneralHandler, UserAccountHandler

__all__ = [
    # Base classes
    'BaseHandler',
    'HandlerContext',
    'LOGIN_MESSAGE',
    # Handlers
    'SemanticSearchHandler',
    'ExactProductHandler',
    'ComparisonHandler',
    'RecommendationHandler',
    'OrderTrackingHandler',
    'OrderSupportHandler',
    'UserAccountHandler',
    'GeneralHandler',
]
