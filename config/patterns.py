"""
Regex patterns for structured data extraction.

Contains the patterns used to pull slots out of shopping queries:
price ceilings, rating floors, order identifiers, comparison delimiters
and trailing model numbers.
"""

import re
from typing import Optional

# === Price Patterns ===

# Words that introduce a price ceiling ("under 50k", "below ₹30,000")
PRICE_CEILING_WORDS = r'(?:under|below|less\s+than|cheaper\s+than|up\s*to|within|max(?:imum)?|not\s+more\s+than)'

# Optional currency marker
CURRENCY = r'(?:rs\.?|inr|₹|\$)?'

# Tried in order: lakh multiplier, k multiplier, bare currency
PRICE_LAKH_PATTERN = re.compile(
    rf'{PRICE_CEILING_WORDS}\s*{CURRENCY}\s*(\d+(?:\.\d+)?)\s*(?:lakhs?|lacs?|l)\b',
    re.IGNORECASE,
)
PRICE_K_PATTERN = re.compile(
    rf'{PRICE_CEILING_WORDS}\s*{CURRENCY}\s*(\d+(?:\.\d+)?)\s*k\b',
    re.IGNORECASE,
)
PRICE_BARE_PATTERN = re.compile(
    rf'{PRICE_CEILING_WORDS}\s*{CURRENCY}\s*(\d[\d,]*(?:\.\d+)?)\b',
    re.IGNORECASE,
)

# "between 20k and 40k", "between ₹20,000 - ₹40,000" (upper bound wins)
PRICE_RANGE_PATTERN = re.compile(
    rf'\bbetween\s*{CURRENCY}\s*(\d[\d,]*(?:\.\d+)?)\s*(k|lakhs?|lacs?)?\s*'
    rf'(?:and|to|-)\s*{CURRENCY}\s*(\d[\d,]*(?:\.\d+)?)\s*(k|lakhs?|lacs?)?\b',
    re.IGNORECASE,
)

PRICE_MULTIPLIERS = {
    'k': 1_000,
    'lakh': 100_000,
    'lakhs': 100_000,
    'lac': 100_000,
    'lacs': 100_000,
}


# === Rating Patterns ===

RATING_PATTERNS = [
    # "rated above 4", "rating of at least 4.5", "rating over 4"
    re.compile(
        r'\brat(?:ed|ing)\s*(?:of\s+)?(?:above|over|at\s+least|>=?|more\s+than)?\s*(\d(?:\.\d)?)',
        re.IGNORECASE,
    ),
    # "4+ stars", "4.5 stars and above", "at least 4 stars"
    re.compile(r'(?:at\s+least\s+)?(\d(?:\.\d)?)\s*\+?\s*stars?\b', re.IGNORECASE),
    # "4+ rating"
    re.compile(r'(\d(?:\.\d)?)\s*\+\s*(?:rating|rated)\b', re.IGNORECASE),
]


# === Order Identifier Patterns ===

# "order #A1001", "order id ORD-2024-7", "order number 665f0c..."
ORDER_ID_PATTERNS = [
    re.compile(r'#\s*([A-Za-z0-9][A-Za-z0-9\-]{2,})'),
    re.compile(
        r'\border\s+(?:id|no\.?|number)?\s*:?\s*([A-Za-z0-9][A-Za-z0-9\-]{2,})\b',
        re.IGNORECASE,
    ),
]


# === Comparison Patterns ===

# Delimiters between compared product names
COMPARISON_SPLIT_PATTERN = re.compile(
    r'\s+(?:vs\.?|versus|and|or|against|compared\s+(?:to|with)|&)\s+|\s*,\s*|\s*/\s*',
    re.IGNORECASE,
)

# Leading phrases stripped before splitting names
COMPARISON_LEAD_PATTERN = re.compile(
    r'^(?:please\s+)?(?:can\s+you\s+)?(?:compare|comparison\s+(?:of|between)|'
    r'(?:what\s+is\s+the\s+)?difference\s+between|which\s+is\s+better(?:\s*[:,-])?|'
    r'which\s+(?:one\s+)?should\s+i\s+(?:buy|get)|between)\s+',
    re.IGNORECASE,
)


# === Model Number Patterns ===

# Trailing standalone number: "Dell Legion 5 1" -> ("dell legion 5", 1)
TRAILING_NUMBER_PATTERN = re.compile(r'^(.*\S)\s+(\d{1,3})$')

# Tokens that carry digits ("15", "s24", "wh-1000xm5")
NUMBER_TOKEN_PATTERN = re.compile(r'\d+')


def parse_amount(raw: str, unit: Optional[str] = None) -> Optional[int]:
    """
    Convert a matched amount and optional unit into rupees.

    Examples:
        >>> parse_amount("50", "k")
        50000
        >>> parse_amount("1.5", "lakh")
        150000
        >>> parse_amount("30,000")
        30000
    """
    try:
        value = float(raw.replace(',', ''))
    except ValueError:
        return None
    if unit:
        value *= PRICE_MULTIPLIERS.get(unit.lower(), 1)
    return int(round(value))
