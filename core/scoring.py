"""
Semantic scoring for product candidates.

Composite keyword score, deterministic without embeddings:
- base = 2 x rating
- +10 if the first query word appears in the title
- +3 per category keyword found in the query
- +4 per query spec keyword found in the serialised specifications
- fixed bonuses for semantic cues (gaming, long battery, ...)
- +5 x cosine for vector-index hits above the similarity floor
"""

import re
from typing import Iterable, Mapping, Optional

from config.vocabulary import DEFAULT_VOCABULARY, Vocabulary
from core.context import Category, Product
from core.fuzzy import normalize

VECTOR_WEIGHT = 5.0
FIRST_WORD_BONUS = 10.0
CATEGORY_KEYWORD_BONUS = 3.0
SPEC_KEYWORD_BONUS = 4.0


class SemanticScorer:
    """
    Scores and ranks products against a query.

    Args:
        vocabulary: Category keywords and bonus cues

    Example:
        scorer = SemanticScorer()
        ranked = scorer.rank("lightweight laptop with long battery", products, top_n=10)
    """

    def __init__(self, vocabulary: Vocabulary = DEFAULT_VOCABULARY):
        self.vocabulary = vocabulary
        self._cues = [
            (cue, re.compile(cue.query_pattern, re.IGNORECASE), re.compile(cue.product_pattern, re.IGNORECASE))
            for cue in vocabulary.bonus_cues
        ]
        self._ignore = frozenset(vocabulary.stop_words) | frozenset(vocabulary.generic_nouns)

    def _category_hits(self, words: set[str], category: Category) -> int:
        keywords = self.vocabulary.category_keywords.get(category, ())
        return sum(1 for k in keywords if k in words)

    def _spec_keywords(self, words: list[str]) -> list[str]:
        return [w for w in words if len(w) > 2 and w not in self._ignore]

    def score(self, query: str, product: Product, vector_scores: Optional[Mapping[str, float]] = None) -> float:
        text = (query or '').lower()
        words = normalize(text).split()
        word_set = set(words)
        title = product.title.lower()

        score = 2.0 * (product.rating or 0.0)

        if words and words[0] in normalize(title).split():
            score += FIRST_WORD_BONUS

        score += CATEGORY_KEYWORD_BONUS * self._category_hits(word_set, product.category)

        spec_text = product.spec_text()
        if spec_text:
            score += SPEC_KEYWORD_BONUS * sum(1 for w in self._spec_keywords(words) if w in spec_text)

        product_text = product.searchable_text()
        for cue, query_pattern, product_pattern in self._cues:
            if query_pattern.search(text) and product_pattern.search(product_text):
                score += cue.bonus

        if vector_scores:
            score += VECTOR_WEIGHT * max(0.0, vector_scores.get(product.id, 0.0))

        return score

    def rank(
        self,
        query: str,
        products: Iterable[Product],
        top_n: Optional[int] = None,
        vector_scores: Optional[Mapping[str, float]] = None,
    ) -> list[Product]:
        """Products sorted by descending score (stable for ties), truncated to top_n."""
        scored = [(self.score(query, p, vector_scores), i, p) for i, p in enumerate(products)]
        scored.sort(key=lambda t: (-t[0], t[1]))
        ranked = [p for _, _, p in scored]
        return ranked[:top_n] if top_n is not None else ranked


def top_rated(products: Iterable[Product]) -> list[Product]:
    """Sort by rating desc, then rating count desc, then price asc."""
    return sorted(products, key=lambda p: (-(p.rating or 0.0), -(p.rating_count or 0), p.price))
