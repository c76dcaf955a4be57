"""
Fallback ladder: ordered retrieval strategies with progressive relaxation.

Each rung is a named thunk. Rungs run lazily in order and the ladder
stops at the first one yielding at least `min_results` items, so the
broad rungs (category top-rated, global top-rated) only cost anything
when the strict ones come back empty.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from core.structured_logging import get_logger

# Module-level logger
_logger = get_logger("core.ladder")


@dataclass(frozen=True)
class Rung:
    """
    One strategy on the ladder.

    Attributes:
        name: Tier name recorded in applied filters ("all_filters", ...)
        fetch: Thunk returning candidate items
        filters: Filters this rung applies, for reporting
    """
    name: str
    fetch: Callable[[], Sequence[Any]]
    filters: dict = field(default_factory=dict)


@dataclass
class LadderResult:
    """
    Outcome of a ladder run.

    Attributes:
        items: Items from the winning rung (empty if every rung was empty)
        tier: Name of the winning rung, None when nothing matched
        filters: Filters of the winning rung
        attempted: Rung names tried, in order
    """
    items: list
    tier: Optional[str] = None
    filters: dict = field(default_factory=dict)
    attempted: list[str] = field(default_factory=list)

    def relaxed(self) -> bool:
        """True if a rung after the first produced the items."""
        return len(self.attempted) > 1 and self.tier is not None


class FallbackLadder:
    """
    Runs rungs in order until one is non-empty.

    Example:
        ladder = FallbackLadder([
            Rung("all_filters", lambda: catalog.find(strict)),
            Rung("category_only", lambda: catalog.by_category(category)),
        ])
        result = ladder.run()
        # result.tier == "category_only" when the strict filter found nothing
    """

    def __init__(self, rungs: Sequence[Rung], min_results: int = 1,
                 key: Callable[[Any], Any] = lambda item: getattr(item, 'id', id(item))):
        self.rungs = list(rungs)
        self.min_results = min_results
        self._key = key

    def _dedupe(self, items: Sequence[Any]) -> list:
        seen = set()
        unique = []
        for item in items:
            k = self._key(item)
            if k not in seen:
                seen.add(k)
                unique.append(item)
        return unique

    def run(self) -> LadderResult:
        """
        Evaluate rungs lazily.

        Exceptions from a rung propagate; the router owns failure handling.
        """
        attempted = []
        for rung in self.rungs:
            attempted.append(rung.name)
            items = self._dedupe(rung.fetch() or [])
            _logger.debug(
                f"Ladder rung {rung.name}: {len(items)} items",
                extra={"event": "ladder_rung", "tier": rung.name, "items_found": len(items)},
            )
            if len(items) >= self.min_results:
                return LadderResult(items=items, tier=rung.name, filters=dict(rung.filters), attempted=attempted)
        return LadderResult(items=[], attempted=attempted)
