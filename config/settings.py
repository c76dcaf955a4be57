"""
Runtime settings for the retrieval pipeline.

Defaults live on the dataclass; deployments override individual values
through SHOPBOT_* environment variables (see RetrievalConfig.from_env).
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from typing import Optional

_logger = logging.getLogger("shopbot.config.settings")

ENV_PREFIX = "SHOPBOT_"


@dataclass(frozen=True)
class RetrievalConfig:
    """
    Configuration for detection and retrieval behavior.

    Attributes:
        title_cache_ttl_seconds: Lifetime of the catalog title snapshot
        exact_title_threshold: Fuzzy threshold for direct title matches
        brand_title_threshold: Fuzzy threshold for brand + title matches
        partial_threshold: Fuzzy threshold for model-number-stripped matches
        relaxed_threshold: Fuzzy threshold when commerce verbs are present
        comparison_name_threshold: Fuzzy threshold for comparison targets
        semantic_top_n: Products returned by the semantic route
        recommendation_top_n: Products returned by the recommendation route
        comparison_broad_limit: Candidates returned by a bulk comparison
        recent_orders_limit: Orders returned for order tracking
        vector_min_similarity: Similarity floor for vector hits
        vector_top_k: Hits requested from the vector index
        embedding_dimension: Length of embedding vectors
        max_workers: Threads used for concurrent store reads
    """
    title_cache_ttl_seconds: float = 300.0
    exact_title_threshold: float = 0.85
    brand_title_threshold: float = 0.75
    partial_threshold: float = 0.60
    relaxed_threshold: float = 0.52
    comparison_name_threshold: float = 0.60
    semantic_top_n: int = 10
    recommendation_top_n: int = 5
    comparison_broad_limit: int = 10
    recent_orders_limit: int = 3
    vector_min_similarity: float = 0.3
    vector_top_k: int = 10
    embedding_dimension: int = 384
    max_workers: int = 4

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "RetrievalConfig":
        """
        Build a config from SHOPBOT_* environment variables.

        Example:
            SHOPBOT_TITLE_CACHE_TTL_SECONDS=60 -> title_cache_ttl_seconds=60.0

        Malformed values are ignored with a warning and the default is kept.
        """
        env = os.environ if environ is None else environ
        overrides = {}
        for f in fields(cls):
            raw = env.get(f"{ENV_PREFIX}{f.name.upper()}")
            if raw is None or raw == "":
                continue
            caster = int if f.type in (int, "int") else float
            try:
                overrides[f.name] = caster(raw)
            except ValueError:
                _logger.warning(
                    f"Ignoring malformed setting {ENV_PREFIX}{f.name.upper()}={raw!r}",
                    extra={"event": "config_invalid_value"},
                )
        return replace(cls(), **overrides)


DEFAULT_CONFIG = RetrievalConfig()
