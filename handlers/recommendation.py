"""
Recommendation handler.

Runs the recommendation fallback ladder and re-ranks whatever survives
with the semantic scorer before truncating.
"""

from core.context import RetrievalType, Route, RoutedContext
from core.ladder import FallbackLadder, Rung
from core.scoring import top_rated
from core.stores import ProductFilter
from handlers.base import BaseHandler, HandlerContext


class RecommendationHandler(BaseHandler):
    """
    Handles product_recommendation intents.

    Ladder, first non-empty rung wins:
    1. all_filters - category, brands (OR), price ceiling, rating floor
    2. category_only
    3. use_case - text search for use-case triggers
    4. category_top_rated
    5. global_top_rated
    """

    def _use_case_terms(self, ctx: HandlerContext, use_cases) -> list[str]:
        vocabulary = ctx.detector.vocabulary if ctx.detector else None
        terms = []
        for name in use_cases:
            terms.append(name)
            if vocabulary is not None:
                terms.extend(vocabulary.use_cases.get(name, ()))
        return list(dict.fromkeys(terms))

    def handle(self, ctx: HandlerContext) -> RoutedContext:
        intent = ctx.intent
        category = getattr(intent, 'category', None)
        use_cases = tuple(getattr(intent, 'use_cases', ()) or ())
        strict = ProductFilter(
            category=category,
            brands=tuple(getattr(intent, 'brands', ()) or ()),
            max_price=getattr(intent, 'price_ceiling', None),
            min_rating=getattr(intent, 'min_rating', None),
        )
        catalog = ctx.catalog

        rungs = [Rung("all_filters", lambda: catalog.find(strict), strict.to_dict())]
        if category is not None:
            cat_only = ProductFilter(category=category)
            rungs.append(Rung("category_only", lambda: catalog.find(cat_only), cat_only.to_dict()))
        if use_cases:
            terms = self._use_case_terms(ctx, use_cases)
            rungs.append(Rung("use_case", lambda: catalog.search_text(terms, match_all=False),
                              {'use_cases': list(use_cases)}))
        if category is not None:
            rungs.append(Rung("category_top_rated", lambda: top_rated(catalog.by_category(category)),
                              {'category': category.value}))
        rungs.append(Rung("global_top_rated", lambda: top_rated(catalog.list_all())))

        result = FallbackLadder(rungs).run()
        ctx.add_debug(f"Recommendation ladder: {result.attempted} -> {result.tier}")

        ranked = ctx.scorer.rank(
            ctx.query,
            result.items,
            top_n=ctx.config.recommendation_top_n,
            vector_scores=ctx.product_vector_scores(),
        )
        applied = {**result.filters, 'tier': result.tier, 'relaxed': result.relaxed()}
        if use_cases:
            applied['use_cases'] = list(use_cases)
        retrieval = RetrievalType.FILTERED if result.tier in ("all_filters", "category_only") else RetrievalType.SEMANTIC
        return self._routed(ctx, Route.RECOMMENDATION, retrieval, ranked, applied)
