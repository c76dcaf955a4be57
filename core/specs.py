"""
Specification matcher.

Maps queries onto the per-category specification dictionaries in
config.spec_patterns. Everything here is a pure function of the
dictionaries and the input, so results are exactly reproducible.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Optional

from config.spec_patterns import SPEC_PATTERNS, SpecDictionary
from core.context import Category, Product


@dataclass(frozen=True)
class SpecScore:
    """A product scored against a set of mentioned specs."""
    product: Product
    matched_specs: tuple[str, ...]
    score: float


class SpecificationMatcher:
    """
    Extracts mentioned specs from queries and scores products by them.

    Args:
        spec_patterns: Category -> {spec name -> pattern fragments}

    Example:
        matcher = SpecificationMatcher()
        matcher.extract_specs("phone with 5000mah battery", Category.SMARTPHONES)
        # frozenset({'battery_capacity'})
    """

    def __init__(self, spec_patterns: SpecDictionary = SPEC_PATTERNS):
        self._patterns = MappingProxyType({
            category: MappingProxyType({
                spec: tuple(re.compile(fragment, re.IGNORECASE) for fragment in fragments)
                for spec, fragments in specs.items()
            })
            for category, specs in spec_patterns.items()
        })

    def categories(self) -> tuple[Category, ...]:
        return tuple(c for c in Category if c in self._patterns)

    def _mentioned(self, query: str, category: Category) -> list[str]:
        text = (query or '').lower()
        return [
            spec for spec, compiled in self._patterns.get(category, {}).items()
            if any(p.search(text) for p in compiled)
        ]

    def extract_specs(self, query: str, category: Optional[Category]) -> frozenset[str]:
        """
        Spec names the query mentions for a category.

        With no category, the union across every category is returned.
        """
        if category is None:
            names: set[str] = set()
            for cat in self.categories():
                names.update(self._mentioned(query, cat))
            return frozenset(names)
        return frozenset(self._mentioned(query, category))

    def score_by_spec(self, products: Iterable[Product], spec_set: Iterable[str]) -> list[SpecScore]:
        """
        Score products by how many requested specs they carry.

        score = 0.6 * matched_count + 0.4 * rating. A spec is carried when
        the product's flattened specifications have a non-empty value
        under that key. Sorted by score descending; ties keep input order.
        """
        wanted = sorted(set(spec_set))
        scored = []
        for product in products:
            specs = product.spec_map()
            matched = tuple(s for s in wanted if specs.get(s))
            score = 0.6 * len(matched) + 0.4 * (product.rating or 0.0)
            scored.append(SpecScore(product=product, matched_specs=matched, score=score))
        scored.sort(key=lambda s: s.score, reverse=True)
        return scored

    def category_confidence(self, query: str) -> dict[Category, float]:
        """
        Confidence per category that the query is about it.

        confidence = mentioned specs / specs defined for the category.
        Categories with no mention are absent, so a query without any
        spec cue yields an empty dict.
        """
        result = {}
        for category in self.categories():
            total = len(self._patterns[category])
            matched = len(self._mentioned(query, category))
            if matched and total:
                result[category] = min(matched / total, 1.0)
        return result

    def top_category(self, query: str) -> Optional[Category]:
        """Highest-confidence category; ties go to the earlier Category member."""
        confidences = self.category_confidence(query)
        if not confidences:
            return None
        best = max(confidences.values())
        return next(c for c in Category if confidences.get(c) == best)
