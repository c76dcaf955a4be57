"""
Product search handlers: semantic search and exact product lookup.
"""

import re
from typing import Optional

from core.context import Category, RetrievalType, Route, RoutedContext
from handlers.base import BaseHandler, HandlerContext

# Phone-like queries always search smartphones, whatever the spec cues say
PHONE_OVERRIDE = re.compile(r'\b(?:phones?|smartphones?|mobiles?|iphones?|android)\b', re.IGNORECASE)


class SemanticSearchHandler(BaseHandler):
    """
    Handles product_semantic intents.

    Resolves a category (phone override, intent slot, spec matcher),
    filters the catalog by it, and ranks candidates with the composite
    semantic score.
    """

    def _resolve_category(self, ctx: HandlerContext) -> tuple[Optional[Category], str]:
        if PHONE_OVERRIDE.search(ctx.query):
            return Category.SMARTPHONES, "phone_override"
        slot = getattr(ctx.intent, 'category', None)
        if slot is not None:
            return slot, "intent"
        if ctx.spec_matcher is not None:
            top = ctx.spec_matcher.top_category(ctx.query)
            if top is not None:
                return top, "spec_matcher"
        return None, "none"

    def handle(self, ctx: HandlerContext) -> RoutedContext:
        category, source = self._resolve_category(ctx)
        ctx.add_debug(f"Semantic category: {category.value if category else None} ({source})")

        candidates = ctx.catalog.by_category(category) if category else ctx.catalog.list_all()
        vector_scores = ctx.product_vector_scores()
        ranked = ctx.scorer.rank(ctx.query, candidates, top_n=ctx.config.semantic_top_n,
                                 vector_scores=vector_scores)

        applied = {'category_source': source}
        if category:
            applied['category'] = category.value
        if ctx.spec_matcher is not None:
            specs = ctx.spec_matcher.extract_specs(ctx.query, category)
            if specs:
                applied['specs'] = sorted(specs)

        retrieval = RetrievalType.VECTOR if vector_scores else RetrievalType.SEMANTIC
        return self._routed(ctx, Route.PRODUCT_SEARCH, retrieval, ranked, applied)


class ExactProductHandler(BaseHandler):
    """
    Handles product_exact intents. Returns at most one product.

    Uses the intent's product id when present, else a multi-term partial
    match across title and name.
    """

    def handle(self, ctx: HandlerContext) -> RoutedContext:
        product_id = getattr(ctx.intent, 'product_id', None)
        if product_id:
            product = ctx.catalog.get(product_id)
            if product is not None:
                return self._routed(ctx, Route.PRODUCT_LOOKUP, RetrievalType.ID_LOOKUP, [product],
                                    {'product_id': product.id})
            ctx.add_debug(f"Product id {product_id} not in catalog")

        reference = getattr(ctx.intent, 'product_title', None) or ctx.query
        terms = ctx.detector.significant_terms(reference) if ctx.detector else reference.lower().split()
        matches = ctx.catalog.search_text(terms, title_only=True) if terms else []
        if matches:
            return self._routed(ctx, Route.PRODUCT_LOOKUP, RetrievalType.TEXT_MATCH, matches[:1],
                                {'terms': terms})

        return self._routed(ctx, Route.PRODUCT_LOOKUP, RetrievalType.TEXT_MATCH, [],
                            {'terms': terms},
                            message="I couldn't find that exact product in the catalog.")
