"""
Comparison handler.

Strict resolution: explicit product references must all resolve to
distinct products or the route becomes a clarification. A broader
candidate search runs only for bulk cues ("top", "best", "all", ...).
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, Sequence

from core.context import Category, Product, RetrievalType, Route, RoutedContext
from core.ladder import FallbackLadder, Rung
from core.scoring import top_rated
from core.structured_logging import get_logger
from handlers.base import BaseHandler, HandlerContext

_logger = get_logger("handlers.comparison")


def _gather(fn: Callable[[str], Optional[Product]], keys: Sequence[str], max_workers: int) -> list[Optional[Product]]:
    """Run one store read per key concurrently; results keep key order."""
    if not keys:
        return []
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(keys)))) as pool:
        return list(pool.map(fn, keys))


class ComparisonHandler(BaseHandler):
    """Handles product_comparison intents."""

    def handle(self, ctx: HandlerContext) -> RoutedContext:
        intent = ctx.intent
        ids = tuple(getattr(intent, 'product_ids', ()) or ())
        names = tuple(getattr(intent, 'product_names', ()) or ())
        category = getattr(intent, 'category', None)

        if ids:
            return self._by_ids(ctx, ids)
        if len(names) >= 2:
            return self._by_names(ctx, names, category)
        if ctx.detector is not None and ctx.detector.has_bulk_cue(ctx.query):
            return self._broad(ctx, category)

        if names:
            message = f"Which product would you like to compare with {names[0]}?"
        else:
            message = "Which products would you like to compare? Please name at least two."
        return self._routed(ctx, Route.CLARIFICATION, message=message)

    def _clarify(self, ctx: HandlerContext, found: int, total: int, missing: Sequence[str]) -> RoutedContext:
        message = f"I could find {found} of {total} products you mentioned."
        if missing:
            message += f" I couldn't identify: {', '.join(missing)}. Could you give the exact names?"
        return self._routed(ctx, Route.CLARIFICATION, applied_filters={'resolved': found, 'requested': total},
                            message=message)

    def _by_ids(self, ctx: HandlerContext, ids: Sequence[str]) -> RoutedContext:
        products = _gather(ctx.catalog.get, list(ids), ctx.config.max_workers)
        found = [p for p in products if p is not None]
        if len(found) != len(ids):
            missing = [pid for pid, p in zip(ids, products) if p is None]
            return self._clarify(ctx, len(found), len(ids), missing)
        return self._routed(ctx, Route.PRODUCT_COMPARISON, RetrievalType.ID_LOOKUP, found,
                            {'product_ids': list(ids)})

    def _by_names(self, ctx: HandlerContext, names: Sequence[str], category: Optional[Category]) -> RoutedContext:
        def resolve(name: str) -> Optional[Product]:
            match = ctx.detector.resolve_name(name, category)
            return ctx.catalog.get(match.entry.id) if match else None

        products = _gather(resolve, list(names), ctx.config.max_workers)

        distinct = []
        seen = set()
        missing = []
        for name, product in zip(names, products):
            if product is None or product.id in seen:
                missing.append(name)
                continue
            seen.add(product.id)
            distinct.append(product)

        if len(distinct) != len(names):
            return self._clarify(ctx, len(distinct), len(names), missing)

        applied = {'product_names': list(names)}
        if category:
            applied['category'] = category.value
        return self._routed(ctx, Route.PRODUCT_COMPARISON, RetrievalType.TEXT_MATCH, distinct, applied)

    def _broad(self, ctx: HandlerContext, category: Optional[Category]) -> RoutedContext:
        limit = ctx.config.comparison_broad_limit
        category = category or ctx.detector.detect_category(ctx.query)
        terms = [t for t in ctx.detector.significant_terms(ctx.query)
                 if category is None or t not in ctx.detector.vocabulary.category_keywords.get(category, ())]
        cat_filter = {'category': category.value} if category else {}

        def vector_candidates() -> list[Product]:
            scores = ctx.product_vector_scores()
            products = [ctx.catalog.get(pid) for pid in scores]
            return [p for p in products if p is not None and (category is None or p.category is category)]

        rungs = [
            Rung("text_search", lambda: ctx.catalog.search_text(terms, category, match_all=False),
                 {**cat_filter, 'terms': terms}),
            Rung("vector", vector_candidates, cat_filter),
        ]
        if category is not None:
            rungs.append(Rung("category_top_rated", lambda: top_rated(ctx.catalog.by_category(category)), cat_filter))

        result = FallbackLadder(rungs).run()
        retrieval = {
            "text_search": RetrievalType.TEXT_MATCH,
            "vector": RetrievalType.VECTOR,
            "category_top_rated": RetrievalType.FILTERED,
        }.get(result.tier, RetrievalType.NONE)

        if not result.items:
            return self._routed(ctx, Route.CLARIFICATION,
                                message="Which products would you like to compare?")

        _logger.debug(
            f"Broad comparison via {result.tier}",
            extra={"event": "comparison_broad", "tier": result.tier, "items_found": len(result.items)},
        )
        ranked = ctx.scorer.rank(ctx.query, result.items, top_n=limit) if ctx.scorer else result.items[:limit]
        return self._routed(ctx, Route.COMPARISON_CANDIDATES, retrieval, ranked,
                            {**result.filters, 'tier': result.tier})
