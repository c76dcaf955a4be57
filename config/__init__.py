"""Configuration for the shopping assistant retrieval core."""

from config.settings import RetrievalConfig, DEFAULT_CONFIG
from config.patterns import parse_amount
from config.spec_patterns import SPEC_PATTERNS
from config.vocabulary import Vocabulary, IntentRule, BonusCue, DEFAULT_VOCABULARY

__all__ = [
    "RetrievalConfig",
    "DEFAULT_CONFIG",
    "parse_amount",
    "SPEC_PATTERNS",
    "Vocabulary",
    "IntentRule",
    "BonusCue",
    "DEFAULT_VOCABULARY",
]
