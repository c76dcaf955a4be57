"""
Context fusion: turns a routed context into the uniform envelope the
answer generator consumes.
"""

from typing import Optional

from core.context import ROUTE_TYPES, FusedContext, Route, RoutedContext
from core.structured_logging import get_logger, log_fusion

_logger = get_logger("core.fusion")


def normalize_item(item) -> dict:
    """Products, orders and users via to_dict(); dicts are copied."""
    if isinstance(item, dict):
        return dict(item)
    to_dict = getattr(item, 'to_dict', None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Cannot normalise item of type {type(item).__name__}")


class ContextFusion:
    """
    Builds FusedContext envelopes.

    The envelope type is looked up from the route, never chosen by a
    handler. A failure while normalising yields the degraded general
    envelope with the error text instead of raising.
    """

    def fuse(
        self,
        routed: RoutedContext,
        user_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> FusedContext:
        intent = routed.intent
        try:
            fused = FusedContext(
                intent=intent.type.value,
                route=routed.route.value,
                type=ROUTE_TYPES[routed.route],
                items=[normalize_item(item) for item in routed.items],
                retrieval_type=routed.retrieval_type.value,
                metadata={
                    'confidence': intent.confidence,
                    'reason': intent.reason,
                    'slots': intent.slots(),
                    'applied_filters': dict(routed.applied_filters),
                    'message': routed.message,
                    'item_count': len(routed.items),
                },
                user_id=user_id,
                error=routed.error,
            )
        except Exception as e:
            _logger.error(
                f"Context fusion failed: {e}",
                extra={"event": "fusion_failed", "session_id": session_id, "error_type": type(e).__name__},
                exc_info=True,
            )
            fused = FusedContext(
                intent=intent.type.value,
                route=Route.NO_RETRIEVAL.value,
                type=ROUTE_TYPES[Route.NO_RETRIEVAL],
                items=[],
                metadata={'confidence': intent.confidence, 'reason': intent.reason},
                user_id=user_id,
                error=f"{type(e).__name__}: {e}",
            )

        log_fusion(session_id, fused.route, fused.type, len(fused.items), error=fused.error)
        return fused
