"""
Intent detection for ShopBot.

Classifies a raw query into exactly one intent variant and extracts its
slots. Detection is deterministic and rule based; tiers are tried in
strict priority order and the first one that matches wins:

1. Recommendation cues ("best", "top", "recommend", "suggest")
2. Comparison cues ("compare", "vs", "which ... better")
3. Exact product reference resolved against the catalog title cache
4. Keyword rule table (order support, order tracking, account, search)
5. Residual product noun -> semantic product search
6. General
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from config.patterns import (
    COMPARISON_LEAD_PATTERN,
    COMPARISON_SPLIT_PATTERN,
    ORDER_ID_PATTERNS,
    PRICE_BARE_PATTERN,
    PRICE_K_PATTERN,
    PRICE_LAKH_PATTERN,
    PRICE_RANGE_PATTERN,
    RATING_PATTERNS,
    parse_amount,
)
from config.settings import DEFAULT_CONFIG, RetrievalConfig
from config.vocabulary import DEFAULT_VOCABULARY, Vocabulary
from core.context import (
    Category,
    ComparisonIntent,
    ExactProductIntent,
    GeneralIntent,
    IntentResult,
    IntentType,
    OrderSupportIntent,
    OrderTrackingIntent,
    RecommendationIntent,
    SemanticProductIntent,
    UserAccountIntent,
)
from core.fuzzy import (
    extract_trailing_number,
    normalize,
    numbers_compatible,
    similarity,
    token_jaccard,
)
from core.structured_logging import get_logger
from core.title_cache import CatalogTitleCache, TitleEntry

# Module-level logger
_logger = get_logger("core.intent")

# Ordinal confidence per matching tier
RECOMMENDATION_BASE = 0.80
RECOMMENDATION_WITH_CATEGORY = 0.85
RECOMMENDATION_WITH_CATEGORY_AND_PRICE = 0.92
COMPARISON_RESOLVED = 0.95
COMPARISON_NAMED = 0.85
COMPARISON_CUE_ONLY = 0.70
EXACT_TIER_CONFIDENCE = {
    'title': 0.95,
    'brand_title': 0.90,
    'model_index': 0.85,
    'commerce': 0.75,
}
RESIDUAL_PRODUCT = 0.60
GENERAL = 0.30
CALLER_HINT = 1.0

_NOISE_CANCELLATION = re.compile(r'\bnoise[\s-]*cancel\w*', re.IGNORECASE)


def _term_pattern(terms: Iterable[str]) -> Optional[re.Pattern]:
    """
    Compile terms into one alternation matched on word boundaries.

    Longer terms are tried first so "order status" wins over "order".
    """
    unique = sorted({t.lower() for t in terms if t}, key=len, reverse=True)
    if not unique:
        return None
    alternation = '|'.join(re.escape(t) for t in unique)
    return re.compile(rf'(?<![a-z0-9])(?:{alternation})(?![a-z0-9])', re.IGNORECASE)


def _found(pattern: Optional[re.Pattern], text: str) -> list[str]:
    """Matched terms in order of first appearance, lowercased and de-duplicated."""
    if pattern is None:
        return []
    return list(dict.fromkeys(m.group(0).lower() for m in pattern.finditer(text)))


@dataclass(frozen=True)
class ReferenceMatch:
    """A product reference resolved against the title cache."""
    entry: TitleEntry
    tier: str
    sku_index: Optional[int] = None


class IntentDetector:
    """
    Classifies queries into intent variants.

    Args:
        title_cache: Catalog title snapshot used for product resolution
        vocabulary: Keyword tables (injectable for tests)
        config: Matching thresholds

    Example:
        detector = IntentDetector(CatalogTitleCache(catalog.list_all))
        intent = detector.detect("best gaming laptop under 80k")
        # RecommendationIntent(confidence=0.92, category=Category.LAPTOPS,
        #                      price_ceiling=80000, use_cases=('gaming',), ...)
    """

    def __init__(
        self,
        title_cache: CatalogTitleCache,
        vocabulary: Vocabulary = DEFAULT_VOCABULARY,
        config: RetrievalConfig = DEFAULT_CONFIG,
    ):
        self.title_cache = title_cache
        self.vocabulary = vocabulary
        self.config = config

        v = vocabulary
        self._recommendation = _term_pattern(v.recommendation_cues)
        self._comparison_strong = _term_pattern(v.comparison_strong_cues)
        self._comparison_weak = _term_pattern(v.comparison_weak_cues)
        self._commerce = _term_pattern(v.commerce_verbs)
        self._bulk = _term_pattern(v.bulk_cues)
        self._order_cues = _term_pattern(v.order_cues)
        self._product_nouns = _term_pattern(v.product_nouns)
        self._brands = _term_pattern(v.brands)
        self._phrases = [(_term_pattern([phrase]), category) for phrase, category in v.category_phrases]
        self._category_keywords = [
            (category, _term_pattern(v.category_keywords[category]))
            for category in Category if category in v.category_keywords
        ]
        self._use_cases = [(name, _term_pattern(triggers)) for name, triggers in v.use_cases.items()]
        self._rules = [(rule, _term_pattern(rule.keywords)) for rule in v.rules]

        # Words that never identify a product on their own
        self._name_noise = frozenset(v.stop_words) | frozenset(v.generic_nouns) | frozenset(
            c.rstrip('.') for c in v.comparison_strong_cues + v.comparison_weak_cues
        ) | frozenset(v.bulk_cues) | frozenset(v.recommendation_cues)
        self._match_ignore = self._name_noise | frozenset(v.commerce_verbs) | frozenset(v.brands)

    # =========================================================================
    # Public API
    # =========================================================================

    def detect(self, query: str) -> IntentResult:
        """
        Classify a query. Never raises.

        Args:
            query: Raw user query (validated non-empty upstream)

        Returns:
            One intent variant; unmatched queries yield GeneralIntent
        """
        try:
            intent = self._detect(query or '')
        except Exception as e:
            _logger.error(
                f"Intent detection failed: {e}",
                extra={"event": "intent_detection_failed", "error_type": type(e).__name__},
                exc_info=True,
            )
            return GeneralIntent(GENERAL, f"detection failed: {type(e).__name__}")

        _logger.debug(
            f"Detected {intent}",
            extra={
                "event": "intent_detected",
                "intent": intent.type.value,
                "confidence": intent.confidence,
                "reason": intent.reason,
            }
        )
        return intent

    def coerce(self, query: str, hint: Union[str, IntentType]) -> IntentResult:
        """
        Build the caller-hinted intent, with slots from the same extractors.

        Raises:
            ValueError: If the hint names no intent type
        """
        intent_type = hint if isinstance(hint, IntentType) else IntentType(str(hint).strip().lower())
        text = (query or '').lower()
        reason = "intent supplied by caller"

        if intent_type is IntentType.ORDER_TRACKING:
            return OrderTrackingIntent(CALLER_HINT, reason, order_id=self.extract_order_id(query))
        if intent_type is IntentType.ORDER_SUPPORT:
            return OrderSupportIntent(CALLER_HINT, reason, order_id=self.extract_order_id(query))
        if intent_type is IntentType.PRODUCT_RECOMMENDATION:
            return self._build_recommendation(text, CALLER_HINT, reason)
        if intent_type is IntentType.PRODUCT_COMPARISON:
            names, category, ids = self._comparison_slots(query, text)
            return ComparisonIntent(CALLER_HINT, reason, product_ids=ids,
                                    product_names=tuple(names), category=category)
        if intent_type is IntentType.PRODUCT_EXACT:
            match = self._match_exact(query, text)
            if match is None:
                return ExactProductIntent(CALLER_HINT, reason)
            return ExactProductIntent(CALLER_HINT, reason, product_id=match.entry.id,
                                      product_title=match.entry.title, sku_index=match.sku_index)
        if intent_type is IntentType.PRODUCT_SEMANTIC:
            return SemanticProductIntent(CALLER_HINT, reason, category=self.detect_category(text))
        if intent_type is IntentType.USER_ACCOUNT:
            return UserAccountIntent(CALLER_HINT, reason)
        return GeneralIntent(CALLER_HINT, reason)

    # =========================================================================
    # Tiers
    # =========================================================================

    def _detect(self, query: str) -> IntentResult:
        text = query.lower().strip()

        # Tier 1: Recommendation
        if _found(self._recommendation, text):
            return self._build_recommendation(text, None, None)

        # Tier 2: Comparison
        comparison = self._detect_comparison(query, text)
        if comparison is not None:
            return comparison

        # Tier 3: Exact product (never for order questions)
        if not self.has_order_cue(text):
            match = self._match_exact(query, text)
            if match is not None:
                return ExactProductIntent(
                    EXACT_TIER_CONFIDENCE[match.tier],
                    f"Query references product '{match.entry.title}' ({match.tier} match)",
                    product_id=match.entry.id,
                    product_title=match.entry.title,
                    sku_index=match.sku_index,
                )

        # Tier 4: Rule table
        has_product_noun = self.has_product_noun(text)
        for rule, pattern in self._rules:
            if rule.intent is IntentType.PRODUCT_RECOMMENDATION:
                continue
            if rule.intent is IntentType.ORDER_SUPPORT and has_product_noun:
                continue
            hits = _found(pattern, text)
            if hits:
                return self._build_rule_intent(rule.intent, rule.confidence, hits[0], query, text)

        # Tier 5: Residual product cue
        if has_product_noun:
            return SemanticProductIntent(
                RESIDUAL_PRODUCT,
                "Query mentions a product type",
                category=self.detect_category(text),
            )

        return GeneralIntent(GENERAL, "No retrieval cue found")

    def _build_rule_intent(self, intent_type: IntentType, confidence: float, keyword: str,
                           query: str, text: str) -> IntentResult:
        reason = f"Matched keyword '{keyword}'"
        if intent_type is IntentType.ORDER_TRACKING:
            return OrderTrackingIntent(confidence, reason, order_id=self.extract_order_id(query))
        if intent_type is IntentType.ORDER_SUPPORT:
            return OrderSupportIntent(confidence, reason, order_id=self.extract_order_id(query))
        if intent_type is IntentType.USER_ACCOUNT:
            return UserAccountIntent(confidence, reason)
        if intent_type is IntentType.PRODUCT_SEMANTIC:
            return SemanticProductIntent(confidence, reason, category=self.detect_category(text))
        return GeneralIntent(confidence, reason)

    def _build_recommendation(self, text: str, confidence: Optional[float],
                              reason: Optional[str]) -> RecommendationIntent:
        category = self.detect_category(text)
        price = self.extract_price_ceiling(text)

        if confidence is None:
            if category and price is not None:
                confidence = RECOMMENDATION_WITH_CATEGORY_AND_PRICE
            elif category:
                confidence = RECOMMENDATION_WITH_CATEGORY
            else:
                confidence = RECOMMENDATION_BASE
            reason = "Recommendation cue" + (f" for {category.value}" if category else "")

        return RecommendationIntent(
            confidence,
            reason,
            category=category,
            price_ceiling=price,
            brands=tuple(self.extract_brands(text)),
            use_cases=tuple(self.extract_use_cases(text)),
            min_rating=self.extract_min_rating(text),
        )

    def _detect_comparison(self, query: str, text: str) -> Optional[ComparisonIntent]:
        strong = _found(self._comparison_strong, text)
        # "between 20k and 40k" is a price range, not a comparison
        if strong == ['between'] and PRICE_RANGE_PATTERN.search(text):
            strong = []
        weak = _found(self._comparison_weak, text)
        if not strong and not weak:
            return None

        names, category, ids = self._comparison_slots(query, text)
        if not strong and len(names) < 2:
            return None

        if ids:
            confidence = COMPARISON_RESOLVED
            reason = f"Comparison of {len(ids)} resolved products"
        elif names:
            confidence = COMPARISON_NAMED
            reason = f"Comparison of {len(names)} named products"
        else:
            confidence = COMPARISON_CUE_ONLY
            reason = "Comparison cue without product names"

        return ComparisonIntent(
            confidence, reason, product_ids=ids, product_names=tuple(names), category=category
        )

    def _comparison_slots(self, query: str, text: str) -> tuple[list[str], Optional[Category], tuple[str, ...]]:
        """Names, inferred category, and ids when every name resolved distinctly."""
        names = self.extract_product_names(query)
        category = self.detect_category(text)
        if len(names) < 2:
            return names, category, ()
        matches = [self.resolve_name(name, category) for name in names]
        ids = [m.entry.id for m in matches if m is not None]
        if len(ids) == len(names) and len(set(ids)) == len(ids):
            return names, category, tuple(ids)
        return names, category, ()

    # =========================================================================
    # Product Resolution
    # =========================================================================

    def _ranked(self, reference: str, entries: Sequence[TitleEntry], threshold: float,
                with_brand: bool = False) -> list[tuple[tuple[float, float], TitleEntry]]:
        """Entries matching the reference at threshold, best first (ties keep catalog order)."""
        ranked = []
        for entry in entries:
            candidate = entry.title
            if with_brand and entry.brand and not normalize(entry.title).startswith(normalize(entry.brand)):
                candidate = f"{entry.brand} {entry.title}"
            if not numbers_compatible(reference, candidate):
                continue
            score = similarity(reference, candidate, self._match_ignore)
            if score >= threshold:
                ranked.append(((score, token_jaccard(reference, candidate, self._match_ignore)), entry))
        ranked.sort(key=lambda pair: pair[0], reverse=True)
        return ranked

    @staticmethod
    def _unique_best(ranked: list) -> Optional[TitleEntry]:
        """Top entry, or None when the top two rank identically."""
        if not ranked:
            return None
        if len(ranked) > 1 and ranked[0][0] == ranked[1][0]:
            return None
        return ranked[0][1]

    def resolve_reference(
        self,
        reference: str,
        entries: Sequence[TitleEntry],
        title_threshold: float,
        brand_threshold: float,
        relaxed_threshold: Optional[float] = None,
    ) -> Optional[ReferenceMatch]:
        """
        Resolve free text to one catalog entry.

        Order: (a) title match, (b) brand + title match, (c) trailing
        model number stripped, with the number used as a 1-based position
        among several hits, (d) relaxed threshold when given.
        """
        if not entries:
            return None

        best = self._unique_best(self._ranked(reference, entries, title_threshold))
        if best is not None:
            return ReferenceMatch(best, 'title')

        best = self._unique_best(self._ranked(reference, entries, brand_threshold, with_brand=True))
        if best is not None:
            return ReferenceMatch(best, 'brand_title')

        base, index = extract_trailing_number(reference)
        if index is not None:
            hits = self._ranked(base, entries, self.config.partial_threshold, with_brand=True)
            if len(hits) == 1:
                return ReferenceMatch(hits[0][1], 'model_index', index)
            if len(hits) > 1 and 1 <= index <= len(hits):
                position = {e.id: i for i, e in enumerate(entries)}
                in_catalog_order = sorted((e for _, e in hits), key=lambda e: position[e.id])
                return ReferenceMatch(in_catalog_order[index - 1], 'model_index', index)

        if relaxed_threshold is not None:
            best = self._unique_best(self._ranked(reference, entries, relaxed_threshold, with_brand=True))
            if best is not None:
                return ReferenceMatch(best, 'commerce')
        return None

    def resolve_name(self, name: str, category: Optional[Category] = None) -> Optional[ReferenceMatch]:
        """Resolve one comparison target, restricted to the inferred category."""
        threshold = self.config.comparison_name_threshold
        return self.resolve_reference(name, self.title_cache.by_category(category), threshold, threshold)

    def _match_exact(self, query: str, text: str) -> Optional[ReferenceMatch]:
        relaxed = self.config.relaxed_threshold if _found(self._commerce, text) else None
        reference = re.sub(r'[?!.]+$', '', query.strip())
        return self.resolve_reference(
            reference,
            self.title_cache.get(),
            self.config.exact_title_threshold,
            self.config.brand_title_threshold,
            relaxed,
        )

    # =========================================================================
    # Slot Extraction
    # =========================================================================

    def detect_category(self, text: str) -> Optional[Category]:
        """Priority phrases first, then single keywords in closed-set order."""
        text = (text or '').lower()
        for pattern, category in self._phrases:
            if pattern is not None and pattern.search(text):
                return category
        for category, pattern in self._category_keywords:
            if pattern is not None and pattern.search(text):
                return category
        return None

    def extract_price_ceiling(self, text: str) -> Optional[int]:
        """
        Price ceiling in rupees.

        Examples:
            "under 1 lakh" -> 100000, "under 50k" -> 50000,
            "below 25000" -> 25000, "between 20k and 40k" -> 40000
        """
        text = (text or '').lower()
        match = PRICE_LAKH_PATTERN.search(text)
        if match:
            return parse_amount(match.group(1), 'lakh')
        match = PRICE_K_PATTERN.search(text)
        if match:
            return parse_amount(match.group(1), 'k')
        match = PRICE_BARE_PATTERN.search(text)
        if match:
            return parse_amount(match.group(1))
        match = PRICE_RANGE_PATTERN.search(text)
        if match:
            low_unit, high, high_unit = match.group(2), match.group(3), match.group(4)
            # "20k and 40" shares the unit; "20k and 40000" is already in rupees
            if not high_unit and low_unit and float(high.replace(',', '')) < 1000:
                high_unit = low_unit
            return parse_amount(high, high_unit)
        return None

    def extract_brands(self, text: str) -> list[str]:
        cleaned = _NOISE_CANCELLATION.sub(' ', (text or '').lower())
        return _found(self._brands, cleaned)

    def extract_use_cases(self, text: str) -> list[str]:
        text = (text or '').lower()
        return [name for name, pattern in self._use_cases if pattern is not None and pattern.search(text)]

    def extract_min_rating(self, text: str) -> Optional[float]:
        """Rating floor from "rated above 4", "4+ stars", ...; clamped to [0, 5]."""
        for pattern in RATING_PATTERNS:
            match = pattern.search(text or '')
            if match:
                return max(0.0, min(5.0, float(match.group(1))))
        return None

    def extract_order_id(self, text: str) -> Optional[str]:
        """Order identifier after '#' or 'order id/no/number'; must contain a digit."""
        for pattern in ORDER_ID_PATTERNS:
            for match in pattern.finditer(text or ''):
                token = match.group(1)
                if any(ch.isdigit() for ch in token):
                    return token
        return None

    def extract_product_names(self, query: str) -> list[str]:
        """
        Product names joined by comparison delimiters.

        Example:
            >>> detector.extract_product_names("Compare iPhone 15 vs Samsung S24")
            ['iPhone 15', 'Samsung S24']
        """
        text = re.sub(r'[?!.]+$', '', (query or '').strip())
        text = COMPARISON_LEAD_PATTERN.sub('', text, count=1)

        names = []
        seen = set()
        for part in COMPARISON_SPLIT_PATTERN.split(text):
            if not part:
                continue
            tokens = [t for t in part.split() if normalize(t) and normalize(t) not in self._name_noise]
            if not any(re.search(r'[a-z]', t.lower()) and len(normalize(t)) > 1 for t in tokens):
                continue
            name = " ".join(tokens).strip(" ,")
            key = normalize(name)
            if key and key not in seen:
                seen.add(key)
                names.append(name)
        return names

    # =========================================================================
    # Cue Checks (shared with the router)
    # =========================================================================

    def has_order_cue(self, text: str) -> bool:
        return bool(_found(self._order_cues, (text or '').lower()))

    def has_product_noun(self, text: str) -> bool:
        return bool(_found(self._product_nouns, (text or '').lower()))

    def has_bulk_cue(self, text: str) -> bool:
        return bool(_found(self._bulk, (text or '').lower()))

    def significant_terms(self, text: str) -> list[str]:
        """Query words worth a text search: not stop, generic or cue words."""
        return [
            w for w in normalize(text).split()
            if len(w) > 2 and w not in self._name_noise and w not in self.vocabulary.commerce_verbs
        ]
