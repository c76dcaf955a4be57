"""
Order handlers: order tracking and order support.
"""

from typing import Optional

from core.context import Order, RetrievalType, Route, RoutedContext
from handlers.base import BaseHandler, HandlerContext


def _owned_order(ctx: HandlerContext, order_id: Optional[str]) -> Optional[Order]:
    """Order by id, scoped to the caller when authenticated."""
    if not order_id or ctx.orders is None:
        return None
    order = ctx.orders.get(order_id)
    if order is None:
        return None
    if ctx.user_id is not None and order.user_id != str(ctx.user_id):
        return None
    return order


class OrderTrackingHandler(BaseHandler):
    """
    Handles order_tracking intents.

    1. Explicit order id -> that order
    2. Authenticated -> most recent orders, owner-scoped vector hits first
    3. Otherwise -> login_required
    """

    def _recent_orders(self, ctx: HandlerContext) -> tuple[list[Order], RetrievalType]:
        limit = ctx.config.recent_orders_limit
        owned = ctx.orders.by_owner(ctx.user_id)

        hit_ids = []
        if ctx.order_index is not None and len(ctx.order_index) > 0:
            hits = ctx.order_index.top_k(ctx.query_vector(), k=ctx.config.vector_top_k, owner_id=ctx.user_id)
            hit_ids = [h.entity_id for h in hits]

        if not hit_ids:
            return owned[:limit], RetrievalType.RECENCY

        by_id = {o.id: o for o in owned}
        preferred = [by_id[i] for i in hit_ids if i in by_id]
        rest = [o for o in owned if o.id not in set(hit_ids)]
        return (preferred + rest)[:limit], RetrievalType.VECTOR

    def handle(self, ctx: HandlerContext) -> RoutedContext:
        order_id = getattr(ctx.intent, 'order_id', None)
        order = _owned_order(ctx, order_id)
        if order is not None:
            return self._routed(ctx, Route.ORDER_LOOKUP, RetrievalType.ID_LOOKUP, [order],
                                {'order_id': order.id})

        if ctx.user_id is None or ctx.orders is None:
            return self._routed(ctx, Route.LOGIN_REQUIRED,
                                message="Please log in so I can look up your orders.")

        orders, retrieval = self._recent_orders(ctx)
        applied = {'recent_limit': ctx.config.recent_orders_limit}
        message = None
        if order_id:
            applied['order_id_not_found'] = order_id
            message = f"I couldn't find order {order_id}; here are your most recent orders."
        elif not orders:
            message = "You don't have any orders yet."
        return self._routed(ctx, Route.ORDER_LOOKUP, retrieval, orders, applied, message)


class OrderSupportHandler(BaseHandler):
    """
    Handles order_support intents (returns, refunds, cancellations).

    Authenticated only: the referenced order, else the most recent one.
    """

    def handle(self, ctx: HandlerContext) -> RoutedContext:
        if ctx.user_id is None or ctx.orders is None:
            return self._login_required(ctx)

        order_id = getattr(ctx.intent, 'order_id', None)
        order = _owned_order(ctx, order_id)
        if order is not None:
            return self._routed(ctx, Route.ORDER_SUPPORT, RetrievalType.ID_LOOKUP, [order],
                                {'order_id': order.id})

        recent = ctx.orders.by_owner(ctx.user_id, limit=1)
        return self._routed(ctx, Route.ORDER_SUPPORT, RetrievalType.RECENCY, recent,
                            {'recent_limit': 1},
                            message=None if recent else "You don't have any orders yet.")
