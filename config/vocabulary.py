"""
Keyword vocabularies for query understanding.

These tables drive intent detection, category inference and semantic
scoring. They are immutable module data bundled into a single
`Vocabulary` value that components receive at construction, so tests
can swap in smaller dictionaries without touching global state.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Tuple

from core.context import Category, IntentType


# === Category Vocabulary ===

# Multi-word phrases checked before single keywords.
# ORDER MATTERS: the first phrase found wins.
CATEGORY_PHRASES: Tuple[Tuple[str, Category], ...] = (
    ('best phone', Category.SMARTPHONES),
    ('mobile phone', Category.SMARTPHONES),
    ('gaming phone', Category.SMARTPHONES),
    ('camera phone', Category.SMARTPHONES),
    ('gaming laptop', Category.LAPTOPS),
    ('business laptop', Category.LAPTOPS),
    ('smart tv', Category.SMART_TVS),
    ('4k tv', Category.SMART_TVS),
    ('led tv', Category.SMART_TVS),
    ('oled tv', Category.SMART_TVS),
    ('smart watch', Category.WEARABLES),
    ('fitness band', Category.WEARABLES),
    ('fitness tracker', Category.WEARABLES),
    ('power bank', Category.ACCESSORIES),
    ('gaming mouse', Category.ACCESSORIES),
    ('bluetooth speaker', Category.ACCESSORIES),
)

# Single keywords per category, checked in closed-set order.
CATEGORY_KEYWORDS: Mapping[Category, Tuple[str, ...]] = MappingProxyType({
    Category.LAPTOPS: (
        'laptop', 'laptops', 'notebook', 'notebooks', 'macbook', 'ultrabook',
        'chromebook', 'ideapad', 'thinkpad', 'vivobook', 'zenbook',
    ),
    Category.SMARTPHONES: (
        'phone', 'phones', 'smartphone', 'smartphones', 'mobile', 'mobiles',
        'iphone', 'iphones', 'android',
    ),
    Category.SMART_TVS: (
        'tv', 'tvs', 'television', 'televisions', 'bravia',
    ),
    Category.WEARABLES: (
        'smartwatch', 'smartwatches', 'watch', 'watches', 'band', 'bands',
        'tracker', 'earbuds', 'wearable', 'wearables',
    ),
    Category.ACCESSORIES: (
        'accessory', 'accessories', 'headphone', 'headphones', 'headset',
        'charger', 'chargers', 'mouse', 'keyboard', 'keyboards', 'speaker',
        'speakers', 'webcam', 'pendrive', 'airdopes', 'cable', 'earphones',
    ),
})


# === Brand Vocabulary ===

BRANDS: Tuple[str, ...] = (
    'apple', 'samsung', 'oneplus', 'xiaomi', 'redmi', 'realme', 'vivo',
    'oppo', 'google', 'motorola', 'dell', 'hp', 'lenovo', 'asus', 'acer',
    'msi', 'sony', 'lg', 'tcl', 'mi', 'boat', 'noise', 'amazfit',
    'fireboltt', 'jbl', 'logitech', 'sandisk', 'zebronics',
)


# === Use Cases ===

# Canonical use case -> trigger words
USE_CASES: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    'gaming': ('gaming', 'gamer', 'gamers', 'games'),
    'programming': ('programming', 'coding', 'developer', 'developers', 'software development'),
    'travel': ('travel', 'travelling', 'traveling', 'commute'),
    'photography': ('photography', 'photos', 'photo', 'selfies'),
    'video editing': ('video editing', 'editing', 'content creation'),
    'fitness': ('fitness', 'workout', 'workouts', 'running', 'gym'),
    'office': ('office', 'work', 'business', 'productivity'),
    'students': ('student', 'students', 'college', 'school'),
    'music': ('music', 'bass', 'audiophile'),
    'calls': ('calls', 'calling', 'meetings'),
    'streaming': ('streaming', 'netflix', 'movies', 'binge'),
})


# === Intent Cues ===

RECOMMENDATION_CUES: Tuple[str, ...] = (
    'best', 'top', 'recommend', 'recommended', 'recommendation',
    'recommendations', 'suggest', 'suggestion', 'suggestions',
)

COMPARISON_STRONG_CUES: Tuple[str, ...] = (
    'compare', 'compared', 'comparing', 'comparison', 'vs', 'vs.', 'versus', 'between',
)
COMPARISON_WEAK_CUES: Tuple[str, ...] = ('which', 'better', 'difference')

# Words that mark an exact-product question ("price of", "in stock?")
COMMERCE_VERBS: Tuple[str, ...] = (
    'buy', 'price', 'cost', 'stock', 'available', 'availability',
    'warranty', 'specs', 'specifications', 'details', 'purchase', 'emi',
)

# Broad cues that allow a comparison without explicit product references
BULK_CUES: Tuple[str, ...] = (
    'top', 'best', 'all', 'cheapest', 'popular', 'highest rated',
    'budget', 'latest', 'every',
)

# Order-domain words: suppress the exact-product tier
ORDER_CUES: Tuple[str, ...] = (
    'order', 'orders', 'track', 'tracking', 'delivery', 'delivered',
    'shipped', 'shipping', 'refund', 'return', 'cancel',
)

# Generic nouns never treated as product names or significant title words
GENERIC_NOUNS: Tuple[str, ...] = (
    'phone', 'phones', 'smartphone', 'smartphones', 'mobile', 'mobiles',
    'laptop', 'laptops', 'notebook', 'tv', 'tvs', 'television', 'smart',
    'watch', 'watches', 'smartwatch', 'product', 'products', 'device',
    'devices', 'model', 'models', 'gadget', 'gadgets', 'one', 'ones',
)

STOP_WORDS: Tuple[str, ...] = (
    'the', 'and', 'for', 'with', 'what', 'which', 'that', 'this', 'these',
    'those', 'are', 'was', 'you', 'your', 'can', 'show', 'find', 'tell',
    'about', 'have', 'has', 'need', 'want', 'good', 'under', 'below',
    'between', 'from', 'any', 'some', 'please', 'me', 'is', 'better',
    'difference', 'compare', 'should', 'buy', 'get', 'its', 'does',
    'how', 'much', 'more', 'less', 'than', 'like', 'looking',
)


# === Rule Table ===

@dataclass(frozen=True)
class IntentRule:
    """
    Keyword rule checked after the pattern tiers.

    Attributes:
        intent: Intent produced when a keyword matches
        keywords: Words or phrases, matched on word boundaries
        confidence: Base confidence for the rule
    """
    intent: IntentType
    keywords: Tuple[str, ...]
    confidence: float


# ORDER MATTERS: first matching rule wins.
RULES: Tuple[IntentRule, ...] = (
    IntentRule(
        IntentType.ORDER_SUPPORT,
        ('return', 'refund', 'cancel', 'exchange', 'replace', 'replacement',
         'damaged', 'defective', 'broken', 'complaint', 'wrong item'),
        0.85,
    ),
    IntentRule(
        IntentType.ORDER_TRACKING,
        ('track', 'tracking', 'order status', 'where is my', 'delivery',
         'shipped', 'shipping', 'arrive', 'arriving', 'dispatched', 'my order',
         'my orders', 'order', 'orders'),
        0.90,
    ),
    IntentRule(
        IntentType.USER_ACCOUNT,
        ('account', 'profile', 'my address', 'my details', 'my email',
         'password', 'phone number', 'update my', 'change my'),
        0.85,
    ),
    IntentRule(
        IntentType.PRODUCT_RECOMMENDATION,
        RECOMMENDATION_CUES,
        0.80,
    ),
    IntentRule(
        IntentType.PRODUCT_SEMANTIC,
        ('show', 'find', 'search', 'looking for', 'need a', 'want a',
         'features', 'specs', 'good for', 'suitable'),
        0.75,
    ),
)


# === Semantic Scoring Cues ===

@dataclass(frozen=True)
class BonusCue:
    """
    Fixed scoring bonus applied when a query cue and a product cue co-occur.

    Attributes:
        name: Cue name (gaming, long_battery, ...)
        query_pattern: Regex searched in the lowercased query
        product_pattern: Regex searched in the lowercased product text
        bonus: Points added to the score
    """
    name: str
    query_pattern: str
    product_pattern: str
    bonus: float


BONUS_CUES: Tuple[BonusCue, ...] = (
    BonusCue('gaming', r'\bgam(?:ing|er|es)\b',
             r'\b(?:gaming|rtx|gtx|radeon|144\s*hz|165\s*hz|240\s*hz)\b', 8.0),
    BonusCue('long_battery', r'\bbattery\b|\blong\s+lasting\b|\bbackup\b',
             r'\b(?:\d{4,5}\s*mah|\d+\s*(?:hrs?|hours|days)|long\s+battery)\b', 6.0),
    BonusCue('lightweight', r'\b(?:light|lightweight|portable|thin|slim)\b',
             r'\b(?:lightweight|thin|slim|portable|1\.\d\s*kg)\b', 5.0),
    BonusCue('display', r'\b(?:display|screen)\b',
             r'\b(?:oled|amoled|retina|qled|120\s*hz|144\s*hz|4k)\b', 4.0),
    BonusCue('processor', r'\b(?:processor|cpu|fast|performance|powerful)\b',
             r'\b(?:i7|i9|ryzen\s*[79]|m[123]|snapdragon\s*8|dimensity|a1[5-8])\b', 4.0),
    BonusCue('camera', r'\b(?:camera|photo|photography|selfie)\b',
             r'\b(?:\d{2,3}\s*mp|camera)\b', 4.0),
)


# === Vocabulary Bundle ===

@dataclass(frozen=True)
class Vocabulary:
    """
    Immutable bundle of every keyword table the detector and router use.

    Example:
        vocab = Vocabulary(brands=('acme',))
        detector = IntentDetector(cache, vocabulary=vocab)
    """
    category_phrases: Tuple[Tuple[str, Category], ...] = CATEGORY_PHRASES
    category_keywords: Mapping[Category, Tuple[str, ...]] = field(
        default_factory=lambda: CATEGORY_KEYWORDS
    )
    brands: Tuple[str, ...] = BRANDS
    use_cases: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: USE_CASES)
    recommendation_cues: Tuple[str, ...] = RECOMMENDATION_CUES
    comparison_strong_cues: Tuple[str, ...] = COMPARISON_STRONG_CUES
    comparison_weak_cues: Tuple[str, ...] = COMPARISON_WEAK_CUES
    commerce_verbs: Tuple[str, ...] = COMMERCE_VERBS
    bulk_cues: Tuple[str, ...] = BULK_CUES
    order_cues: Tuple[str, ...] = ORDER_CUES
    generic_nouns: Tuple[str, ...] = GENERIC_NOUNS
    stop_words: Tuple[str, ...] = STOP_WORDS
    rules: Tuple[IntentRule, ...] = RULES
    bonus_cues: Tuple[BonusCue, ...] = BONUS_CUES

    @property
    def product_nouns(self) -> Tuple[str, ...]:
        """Every category keyword and phrase, used as the product-domain cue set."""
        nouns = [word for words in self.category_keywords.values() for word in words]
        nouns.extend(phrase for phrase, _ in self.category_phrases)
        return tuple(dict.fromkeys(nouns))


DEFAULT_VOCABULARY = Vocabulary()
