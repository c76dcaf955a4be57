"""
Base handler and context classes for ShopBot retrieval handlers.

Provides the common interface and shared context for all handlers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from config.settings import DEFAULT_CONFIG, RetrievalConfig
from core.context import IntentResult, RetrievalType, Route, RoutedContext
from core.embeddings import Embedder, safe_embed
from core.stores import CatalogStore, OrderStore, UserStore
from core.vector_index import OrderVectorIndex, VectorIndex

LOGIN_MESSAGE = "Please log in to see your orders and account details."


@dataclass
class HandlerContext:
    """
    Context passed to all intent handlers.

    Contains everything a handler needs to process a query:
    - The query and its detected intent
    - The caller's user id, when authenticated
    - Store and index references
    - Matching and scoring components

    This avoids passing a dozen parameters to each handler.
    """
    query: str
    intent: IntentResult
    catalog: CatalogStore
    user_id: Optional[str] = None
    config: RetrievalConfig = DEFAULT_CONFIG
    orders: Optional[OrderStore] = None
    users: Optional[UserStore] = None

    # Component references (set by the router)
    detector: Any = None
    spec_matcher: Any = None
    scorer: Any = None
    product_index: Optional[VectorIndex] = None
    order_index: Optional[OrderVectorIndex] = None
    embedder: Optional[Embedder] = None

    # Debug output collector
    debug_lines: List[str] = field(default_factory=list)
    _query_vector: Optional[List[float]] = field(default=None, init=False, repr=False)

    def add_debug(self, message: str) -> None:
        self.debug_lines.append(message)

    def query_vector(self) -> List[float]:
        """Query embedding, computed once per context; zero vector when unavailable."""
        if self._query_vector is None:
            dimension = self.product_index.dimension if self.product_index is not None else self.config.embedding_dimension
            self._query_vector = safe_embed(self.embedder, self.query, dimension)
        return self._query_vector

    def product_vector_scores(self) -> Dict[str, float]:
        """{product id: similarity} for vector hits above the floor."""
        if self.product_index is None or len(self.product_index) == 0:
            return {}
        hits = self.product_index.top_k(self.query_vector(), k=self.config.vector_top_k)
        return {hit.entity_id: hit.similarity for hit in hits}


class BaseHandler(ABC):
    """
    Base class for all intent handlers.

    Each handler runs the retrieval procedure for one intent type and
    returns a RoutedContext. Handlers are stateless; all state is in
    HandlerContext. Exceptions propagate to the router, which converts
    them into the no-retrieval route.
    """

    @abstractmethod
    def handle(self, ctx: HandlerContext) -> RoutedContext:
        """
        Run the retrieval procedure.

        Args:
            ctx: Handler context with query, intent, stores and components

        Returns:
            RoutedContext with route, items and applied filters
        """
        pass

    @staticmethod
    def _routed(
        ctx: HandlerContext,
        route: Route,
        retrieval_type: RetrievalType = RetrievalType.NONE,
        items: Optional[list] = None,
        applied_filters: Optional[dict] = None,
        message: Optional[str] = None,
    ) -> RoutedContext:
        return RoutedContext(
            intent=ctx.intent,
            route=route,
            retrieval_type=retrieval_type,
            items=list(items or []),
            applied_filters=dict(applied_filters or {}),
            message=message,
        )

    def _login_required(self, ctx: HandlerContext, route: Route = Route.NO_RETRIEVAL) -> RoutedContext:
        ctx.add_debug("No authenticated user")
        return self._routed(ctx, route, message=LOGIN_MESSAGE)
