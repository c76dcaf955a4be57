"""
String-similarity primitives shared by every matching routine.

Two strings fuzzy-match when one contains the other, or when enough of
the shorter string's significant words (length > 2) appear in the other
string. Thresholds are chosen by the caller per matching tier.
"""

import re
from typing import Iterable, Optional

from config.patterns import NUMBER_TOKEN_PATTERN, TRAILING_NUMBER_PATTERN

_NON_WORD = re.compile(r'[^a-z0-9]+')


def normalize(text: Optional[str]) -> str:
    """
    Lowercase and collapse punctuation to single spaces.

    Example:
        >>> normalize("Sony WH-1000XM5 (Black)")
        'sony wh 1000xm5 black'
    """
    return _NON_WORD.sub(' ', (text or '').lower()).strip()


def significant_words(text: str, ignore: Iterable[str] = ()) -> list[str]:
    """Words longer than two characters, excluding any in `ignore`."""
    ignored = set(ignore)
    return [w for w in normalize(text).split() if len(w) > 2 and w not in ignored]


def contains_either(a: str, b: str) -> bool:
    """True if either normalised string contains the other on word boundaries."""
    na, nb = normalize(a), normalize(b)
    if not na or not nb:
        return False
    return f" {na} " in f" {nb} " or f" {nb} " in f" {na} "


def word_overlap(a: str, b: str, ignore: Iterable[str] = ()) -> float:
    """
    Fraction of the shorter string's significant words found in the other.

    A word is found when it is a substring of, or contains, some
    significant word of the other string.

    Returns:
        Ratio in [0, 1]; 0.0 when the shorter side has no significant words
    """
    ignored = frozenset(ignore)
    words_a = significant_words(a, ignored)
    words_b = significant_words(b, ignored)
    if not words_a or not words_b:
        return 0.0
    shorter, longer = (words_a, words_b) if len(words_a) <= len(words_b) else (words_b, words_a)
    found = sum(1 for w in shorter if any(w in o or o in w for o in longer))
    return found / len(shorter)


def similarity(a: str, b: str, ignore: Iterable[str] = ()) -> float:
    """
    Similarity used to rank fuzzy candidates.

    Containment scores 1.0 provided the contained side keeps at least
    one word outside `ignore`, otherwise word overlap.
    """
    ignored = frozenset(ignore)
    if contains_either(a, b):
        na, nb = normalize(a), normalize(b)
        inner = na if len(na) <= len(nb) else nb
        if any(token not in ignored for token in inner.split()):
            return 1.0
    return word_overlap(a, b, ignored)


def token_jaccard(a: str, b: str, ignore: Iterable[str] = ()) -> float:
    """Jaccard index of the normalised token sets, used as a ranking tie-break."""
    ignored = frozenset(ignore)
    ta = {t for t in normalize(a).split() if t not in ignored}
    tb = {t for t in normalize(b).split() if t not in ignored}
    if not ta or not tb:
        return 0.0
    return len(ta & tb) / len(ta | tb)


def fuzzy_match(a: str, b: str, threshold: float, ignore: Iterable[str] = ()) -> bool:
    """
    Check whether two strings match at the given threshold.

    Args:
        a: First string (usually the query or extracted name)
        b: Second string (usually a catalog title)
        threshold: Minimum word-overlap ratio, 0.52 (loose) to 0.85 (strict)
        ignore: Words that never count as significant

    Example:
        >>> fuzzy_match("samsung s24", "Samsung Galaxy S24", 0.6)
        True
    """
    return similarity(a, b, ignore) >= threshold


def number_tokens(text: str) -> list[str]:
    """Digit runs in text: 'Galaxy S24 Ultra 5G' -> ['24', '5']"""
    return NUMBER_TOKEN_PATTERN.findall(text or '')


def numbers_compatible(a: str, b: str) -> bool:
    """
    True unless both strings carry numbers and neither number set
    contains the other.

    Keeps "iPhone 15" from resolving to "iPhone 14" while letting
    "galaxy s24 price" match "Samsung Galaxy S24 Ultra 5G".
    """
    na, nb = set(number_tokens(a)), set(number_tokens(b))
    if not na or not nb:
        return True
    return na <= nb or nb <= na


def extract_trailing_number(text: str) -> tuple[str, Optional[int]]:
    """
    Split a trailing standalone number off a product reference.

    Examples:
        >>> extract_trailing_number("Dell Legion 5 1")
        ('Dell Legion 5', 1)
        >>> extract_trailing_number("iPhone")
        ('iPhone', None)
    """
    stripped = (text or '').strip()
    match = TRAILING_NUMBER_PATTERN.match(stripped)
    if not match:
        return stripped, None
    return match.group(1), int(match.group(2))
