"""
Query orchestrator for ShopBot.

Coordinates the flow: validation → intent detection → routing → fusion.
"""

import time
from typing import Optional, Union

from config.settings import DEFAULT_CONFIG, RetrievalConfig
from core.context import FusedContext, IntentType
from core.embeddings import Embedder, IndexSync
from core.fusion import ContextFusion
from core.intent import IntentDetector
from core.router import AdaptiveRouter
from core.scoring import SemanticScorer
from core.specs import SpecificationMatcher
from core.stores import CatalogStore, OrderStore, UserStore
from core.structured_logging import (
    Timer,
    get_logger,
    log_conversation_turn,
    log_intent,
    log_query,
)
from core.title_cache import CatalogTitleCache
from core.vector_index import OrderVectorIndex, VectorIndex

_logger = get_logger("core.orchestrator")


class EmptyQueryError(ValueError):
    """Raised for empty or whitespace-only queries, before detection runs."""


def validate_query(query: Optional[str]) -> str:
    """
    Return the stripped query.

    Raises:
        EmptyQueryError: If nothing remains after stripping
    """
    text = (query or '').strip()
    if not text:
        raise EmptyQueryError("Query must not be empty")
    return text


class RetrievalPipeline:
    """
    End-to-end retrieval for one query.

    Use build_pipeline() to wire the components from stores.

    Example:
        pipeline = build_pipeline(catalog, orders, users)
        fused = pipeline.answer("best gaming laptop under 80k", session_id="s1")
        fused.to_dict()["type"]  # "recommendation"
    """

    def __init__(self, detector: IntentDetector, router: AdaptiveRouter, fusion: Optional[ContextFusion] = None):
        self.detector = detector
        self.router = router
        self.fusion = fusion or ContextFusion()

    def _intent(self, query: str, intent_hint: Union[str, IntentType, None], session_id: Optional[str]):
        if intent_hint:
            try:
                return self.detector.coerce(query, intent_hint)
            except ValueError:
                _logger.warning(
                    f"Ignoring unknown intent hint {intent_hint!r}",
                    extra={"event": "intent_hint_invalid", "session_id": session_id},
                )
        return self.detector.detect(query)

    def answer(
        self,
        query: str,
        intent_hint: Union[str, IntentType, None] = None,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> FusedContext:
        """
        Detect, route and fuse one query.

        Args:
            query: Raw user query
            intent_hint: Caller-supplied intent; skips detection when valid
            user_id: Authenticated caller, if any
            session_id: Session identifier for logging

        Returns:
            FusedContext for the answer generator

        Raises:
            EmptyQueryError: If the query is empty or whitespace
        """
        start_time = time.perf_counter()
        query = validate_query(query)
        log_query(session_id, query, user_id=user_id)

        # Step 1: Detect intent
        with Timer() as t:
            intent = self._intent(query, intent_hint, session_id)
        log_intent(
            session_id=session_id,
            query=query,
            intent=intent.type.value,
            confidence=intent.confidence,
            reason=intent.reason,
            classification_time_ms=t.elapsed_ms,
            slots=intent.slots(),
        )

        # Step 2: Route
        routed = self.router.route(query, intent, user_id=user_id, session_id=session_id)

        # Step 3: Fuse
        fused = self.fusion.fuse(routed, user_id=user_id, session_id=session_id)

        log_conversation_turn(
            session_id=session_id,
            user_query=query,
            intent_result=intent.type.value,
            intent_confidence=intent.confidence,
            route=fused.route,
            items_found=len(fused.items),
            item_ids=[item.get('id') for item in fused.items],
            applied_filters=routed.applied_filters,
            response_time_ms=(time.perf_counter() - start_time) * 1000,
        )
        return fused


def build_pipeline(
    catalog: CatalogStore,
    orders: Optional[OrderStore] = None,
    users: Optional[UserStore] = None,
    config: Optional[RetrievalConfig] = None,
    embedder: Optional[Embedder] = None,
) -> RetrievalPipeline:
    """
    Wire a pipeline from stores.

    Vector indexes are filled from the catalog and order store at build
    time; without an embedder they stay empty and vector scoring is a
    no-op.
    """
    config = config or DEFAULT_CONFIG
    title_cache = CatalogTitleCache(catalog.list_all, ttl_seconds=config.title_cache_ttl_seconds)
    detector = IntentDetector(title_cache, config=config)

    dimension = getattr(embedder, 'dimension', config.embedding_dimension)
    product_index = VectorIndex(dimension=dimension, min_similarity=config.vector_min_similarity)
    order_index = OrderVectorIndex(dimension=dimension, min_similarity=config.vector_min_similarity)
    if embedder is not None:
        sync = IndexSync(product_index, order_index, embedder=embedder, catalog=catalog, orders=orders)
        sync.initialize(catalog.list_all())
        if orders is not None:
            for order in orders.list_all():
                sync.embed_order(order)

    router = AdaptiveRouter(
        catalog,
        orders=orders,
        users=users,
        detector=detector,
        spec_matcher=SpecificationMatcher(),
        scorer=SemanticScorer(detector.vocabulary),
        product_index=product_index,
        order_index=order_index,
        embedder=embedder,
        config=config,
    )
    return RetrievalPipeline(detector, router, ContextFusion())
