"""
Account and general handlers.
"""

from core.context import RetrievalType, Route, RoutedContext
from handlers.base import BaseHandler, HandlerContext


class UserAccountHandler(BaseHandler):
    """Returns the caller's own profile; unauthenticated callers get no retrieval."""

    def handle(self, ctx: HandlerContext) -> RoutedContext:
        if ctx.user_id is None or ctx.users is None:
            return self._login_required(ctx)
        user = ctx.users.get(ctx.user_id)
        items = [user] if user is not None else []
        return self._routed(ctx, Route.USER_PROFILE, RetrievalType.PROFILE, items)


class GeneralHandler(BaseHandler):
    """No retrieval: the answer generator handles small talk and help."""

    def handle(self, ctx: HandlerContext) -> RoutedContext:
        return self._routed(ctx, Route.NO_RETRIEVAL)
