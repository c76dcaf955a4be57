"""
Adaptive router for ShopBot.

Dispatches each intent to its retrieval handler. Handler failures never
escape: they are logged and converted into the no-retrieval route with
the error recorded on the routed context.
"""

from typing import Optional

from config.settings import DEFAULT_CONFIG, RetrievalConfig
from core.context import IntentResult, IntentType, Route, RoutedContext
from core.embeddings import Embedder
from core.scoring import SemanticScorer
from core.specs import SpecificationMatcher
from core.stores import CatalogStore, OrderStore, UserStore
from core.structured_logging import Timer, get_logger, log_error, log_route
from core.vector_index import OrderVectorIndex, VectorIndex
from handlers import (
    ComparisonHandler,
    ExactProductHandler,
    GeneralHandler,
    HandlerContext,
    OrderSupportHandler,
    OrderTrackingHandler,
    RecommendationHandler,
    SemanticSearchHandler,
    UserAccountHandler,
)

# Module-level logger
_logger = get_logger("core.router")

# Handler registry - one handler per intent type
HANDLERS = {
    IntentType.ORDER_TRACKING: OrderTrackingHandler(),
    IntentType.ORDER_SUPPORT: OrderSupportHandler(),
    IntentType.PRODUCT_COMPARISON: ComparisonHandler(),
    IntentType.PRODUCT_RECOMMENDATION: RecommendationHandler(),
    IntentType.PRODUCT_EXACT: ExactProductHandler(),
    IntentType.PRODUCT_SEMANTIC: SemanticSearchHandler(),
    IntentType.USER_ACCOUNT: UserAccountHandler(),
    IntentType.GENERAL: GeneralHandler(),
}


def _item_id(item) -> Optional[str]:
    if isinstance(item, dict):
        return item.get('id')
    return getattr(item, 'id', None)


class AdaptiveRouter:
    """
    Routes an intent to its retrieval procedure.

    Args:
        catalog: Product store
        orders: Order store (order routes degrade without it)
        users: User store
        detector: IntentDetector, used for name resolution and cue checks
        spec_matcher: Specification matcher for category inference
        scorer: Composite semantic scorer
        product_index: Product vector index
        order_index: Order vector index
        embedder: Text -> vector function for query embeddings
        config: Retrieval settings
    """

    def __init__(
        self,
        catalog: CatalogStore,
        orders: Optional[OrderStore] = None,
        users: Optional[UserStore] = None,
        detector=None,
        spec_matcher: Optional[SpecificationMatcher] = None,
        scorer: Optional[SemanticScorer] = None,
        product_index: Optional[VectorIndex] = None,
        order_index: Optional[OrderVectorIndex] = None,
        embedder: Optional[Embedder] = None,
        config: RetrievalConfig = DEFAULT_CONFIG,
    ):
        self.catalog = catalog
        self.orders = orders
        self.users = users
        self.detector = detector
        self.spec_matcher = spec_matcher or SpecificationMatcher()
        self.scorer = scorer or SemanticScorer()
        self.product_index = product_index
        self.order_index = order_index
        self.embedder = embedder
        self.config = config

    def route(
        self,
        query: str,
        intent: IntentResult,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> RoutedContext:
        """
        Run the retrieval procedure for an intent. Never raises.

        Args:
            query: Validated query text
            intent: Detected or caller-hinted intent
            user_id: Authenticated caller, if any
            session_id: Session identifier for logging

        Returns:
            RoutedContext; on handler failure the route is no_retrieval
            and `error` carries the failure text
        """
        ctx = HandlerContext(
            query=query,
            intent=intent,
            catalog=self.catalog,
            user_id=str(user_id) if user_id is not None else None,
            config=self.config,
            orders=self.orders,
            users=self.users,
            detector=self.detector,
            spec_matcher=self.spec_matcher,
            scorer=self.scorer,
            product_index=self.product_index,
            order_index=self.order_index,
            embedder=self.embedder,
        )
        handler = HANDLERS.get(intent.type, HANDLERS[IntentType.GENERAL])

        with Timer() as t:
            try:
                routed = handler.handle(ctx)
            except Exception as e:
                log_error(session_id, e, context=f"route:{intent.type.value}")
                routed = RoutedContext(
                    intent=intent,
                    route=Route.NO_RETRIEVAL,
                    error=f"{type(e).__name__}: {e}",
                )

        for line in ctx.debug_lines:
            _logger.debug(line, extra={"event": "route_debug", "session_id": session_id})

        log_route(
            session_id=session_id,
            intent=intent.type.value,
            route=routed.route.value,
            items_found=len(routed.items),
            retrieval_type=routed.retrieval_type.value,
            route_time_ms=t.elapsed_ms,
            applied_filters=routed.applied_filters,
            item_ids=[_item_id(item) for item in routed.items],
        )
        return routed
