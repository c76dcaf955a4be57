"""
End-to-end tests for the retrieval pipeline.
"""

import pytest

from config.settings import RetrievalConfig
from core.orchestrator import EmptyQueryError, build_pipeline, validate_query


class KeywordEmbedder:
    """Tiny deterministic embedder: gaming texts vs everything else."""

    dimension = 3

    def __call__(self, text):
        if 'gaming' in text.lower():
            return [1.0, 0.0, 0.0]
        return [0.0, 1.0, 0.0]


class TestValidation:

    @pytest.mark.parametrize("query", ["", "   ", None])
    def test_empty_query(self, query):
        with pytest.raises(EmptyQueryError):
            validate_query(query)

    def test_empty_query_raises_before_detection(self, pipeline):
        with pytest.raises(EmptyQueryError):
            pipeline.answer("  \t ")

    def test_query_is_stripped(self):
        assert validate_query("  track my order  ") == "track my order"


class TestPipeline:

    def test_recommendation(self, pipeline):
        fused = pipeline.answer("best gaming laptop under 80k", session_id="s1")
        assert fused.intent == 'product_recommendation'
        assert fused.type == 'recommendation'
        assert fused.items[0]['id'] == 'lap-002'
        assert fused.metadata['slots']['price_ceiling'] == 80000

    def test_login_required(self, pipeline):
        fused = pipeline.answer("track my order")
        assert fused.route == 'login_required'
        assert fused.type == 'auth_required'
        assert fused.items == []

    def test_user_orders(self, pipeline):
        fused = pipeline.answer("track my order", user_id="u1")
        assert [o['id'] for o in fused.items] == ['ORD1004', 'ORD1003', 'ORD1002']
        assert fused.user_id == 'u1'

    def test_intent_hint_skips_detection(self, pipeline):
        fused = pipeline.answer("laptops", intent_hint="order_tracking", user_id="u1")
        assert fused.intent == 'order_tracking'
        assert fused.metadata['confidence'] == 1.0
        assert fused.route == 'order_lookup'

    def test_invalid_hint_falls_back_to_detection(self, pipeline):
        fused = pipeline.answer("track my order", intent_hint="teleport")
        assert fused.intent == 'order_tracking'
        assert fused.type == 'auth_required'

    def test_comparison_clarification(self, pipeline):
        fused = pipeline.answer("iPhone 15 vs Pixel 9")
        assert fused.type == 'clarification'
        assert "1 of 2" in fused.metadata['message']

    def test_general(self, pipeline):
        fused = pipeline.answer("hello")
        assert fused.route == 'no_retrieval'
        assert fused.type == 'general'
        assert fused.error is None


class TestBuildPipeline:

    def test_indexes_empty_without_embedder(self, pipeline):
        assert len(pipeline.router.product_index) == 0
        assert len(pipeline.router.order_index) == 0

    def test_embedder_fills_indexes(self, catalog, order_store, user_store):
        pipeline = build_pipeline(catalog, order_store, user_store, embedder=KeywordEmbedder())
        assert len(pipeline.router.product_index) == len(catalog)
        assert len(pipeline.router.order_index) == 5
        assert pipeline.router.product_index.dimension == 3

    def test_vector_scores_used_for_search(self, catalog, order_store, user_store):
        pipeline = build_pipeline(catalog, order_store, user_store, embedder=KeywordEmbedder())
        fused = pipeline.answer("laptop with good battery")
        assert fused.intent == 'product_semantic'
        assert fused.retrieval_type == 'vector'

    def test_config_is_applied(self, catalog):
        pipeline = build_pipeline(catalog, config=RetrievalConfig(semantic_top_n=2))
        fused = pipeline.answer("laptop with good battery")
        assert len(fused.items) == 2
