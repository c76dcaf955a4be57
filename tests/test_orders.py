"""
Tests for order tracking and order support routing.
"""

from config.settings import RetrievalConfig
from core.context import OrderSupportIntent, OrderTrackingIntent, RetrievalType, Route
from core.router import AdaptiveRouter
from core.stores import InMemoryOrderStore
from core.vector_index import OrderVectorIndex
from handlers import LOGIN_MESSAGE


def _ids(routed):
    return [o.id for o in routed.items]


class TestOrderTracking:

    def test_anonymous_without_order_id_needs_login(self, router, detector):
        query = "track my order"
        routed = router.route(query, detector.detect(query))
        assert routed.route == Route.LOGIN_REQUIRED
        assert routed.items == []
        assert routed.message

    def test_recent_orders_newest_first(self, router, detector):
        query = "track my order"
        routed = router.route(query, detector.detect(query), user_id="u1")
        assert routed.route == Route.ORDER_LOOKUP
        assert routed.retrieval_type == RetrievalType.RECENCY
        assert _ids(routed) == ['ORD1004', 'ORD1003', 'ORD1002']
        assert routed.applied_filters == {'recent_limit': 3}

    def test_order_id_lookup(self, router, detector):
        query = "where is order #ORD1002"
        routed = router.route(query, detector.detect(query), user_id="u1")
        assert routed.retrieval_type == RetrievalType.ID_LOOKUP
        assert _ids(routed) == ['ORD1002']

    def test_other_users_order_is_not_returned(self, router, detector):
        query = "where is order #ORD2001"
        routed = router.route(query, detector.detect(query), user_id="u1")
        assert routed.route == Route.ORDER_LOOKUP
        assert 'ORD2001' not in _ids(routed)
        assert _ids(routed) == ['ORD1004', 'ORD1003', 'ORD1002']
        assert routed.applied_filters['order_id_not_found'] == 'ORD2001'
        assert 'ORD2001' in routed.message

    def test_anonymous_with_order_id(self, router, detector):
        query = "where is order #ORD2001"
        routed = router.route(query, detector.detect(query))
        assert routed.route == Route.ORDER_LOOKUP
        assert _ids(routed) == ['ORD2001']

    def test_anonymous_with_unknown_order_id_needs_login(self, router, detector):
        query = "where is order #ORD9999"
        routed = router.route(query, detector.detect(query))
        assert routed.route == Route.LOGIN_REQUIRED

    def test_user_without_orders(self, router):
        routed = router.route("track my order", OrderTrackingIntent(0.90, "test"), user_id="u3")
        assert routed.route == Route.ORDER_LOOKUP
        assert routed.items == []
        assert routed.message == "You don't have any orders yet."

    def test_vector_hits_come_first(self, catalog, order_store, detector):
        config = RetrievalConfig(embedding_dimension=3)
        index = OrderVectorIndex(dimension=3)
        index.upsert("ORD1001", [1.0, 0.0, 0.0], {"user_id": "u1"})
        index.upsert("ORD2001", [1.0, 0.0, 0.0], {"user_id": "u2"})
        router = AdaptiveRouter(
            catalog,
            orders=order_store,
            detector=detector,
            order_index=index,
            embedder=lambda text: [1.0, 0.0, 0.0],
            config=config,
        )

        routed = router.route("my delivered iphone order", OrderTrackingIntent(0.90, "test"), user_id="u1")
        assert routed.retrieval_type == RetrievalType.VECTOR
        assert _ids(routed) == ['ORD1001', 'ORD1004', 'ORD1003']


class TestOrderSupport:

    def test_anonymous_gets_no_retrieval(self, router, detector):
        query = "I want a refund for my last order"
        routed = router.route(query, detector.detect(query))
        assert routed.route == Route.NO_RETRIEVAL
        assert routed.items == []
        assert routed.message == LOGIN_MESSAGE

    def test_most_recent_order(self, router, detector):
        query = "cancel my order"
        routed = router.route(query, detector.detect(query), user_id="u1")
        assert routed.route == Route.ORDER_SUPPORT
        assert routed.retrieval_type == RetrievalType.RECENCY
        assert _ids(routed) == ['ORD1004']

    def test_referenced_order(self, router):
        intent = OrderSupportIntent(0.85, "test", order_id="ORD1001")
        routed = router.route("return order ORD1001", intent, user_id="u1")
        assert routed.retrieval_type == RetrievalType.ID_LOOKUP
        assert _ids(routed) == ['ORD1001']

    def test_no_orders(self, catalog, detector):
        router = AdaptiveRouter(catalog, orders=InMemoryOrderStore(), detector=detector)
        routed = router.route("cancel my order", OrderSupportIntent(0.85, "test"), user_id="u1")
        assert routed.route == Route.ORDER_SUPPORT
        assert routed.items == []
