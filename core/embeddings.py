"""
Embedding functions and vector index synchronisation.

An embedder is any callable mapping text to a fixed-length vector. The
retrieval core works with the degenerate ZeroEmbedder: every keyword and
spec scoring path is independent of the vectors, and the vector index
returns no hits for an all-zero query.
"""

from typing import Callable, Iterable, List, Optional, Sequence

import numpy as np

from core.context import Order, Product
from core.stores import CatalogStore, OrderStore
from core.structured_logging import get_logger, timed
from core.vector_index import OrderVectorIndex, VectorIndex

_logger = get_logger("core.embeddings")

Embedder = Callable[[str], Sequence[float]]


class ZeroEmbedder:
    """Returns an all-zero vector for every text."""

    def __init__(self, dimension: int = 384):
        self.dimension = dimension

    def __call__(self, text: str) -> List[float]:
        return [0.0] * self.dimension


class SentenceTransformerEmbedder:
    """
    sentence-transformers backed embedder (optional `embeddings` extra).

    The model is loaded on first use, not at construction.

    Usage:
        embedder = SentenceTransformerEmbedder()
        vector = embedder("lightweight laptop for travel")
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2", preload_model: bool = False):
        self.model_name = model_name
        self._encoder = None
        if preload_model:
            self._get_encoder()

    def _get_encoder(self):
        """Lazy load the sentence transformer model."""
        if self._encoder is None:
            try:
                from sentence_transformers import SentenceTransformer
            except ImportError:
                _logger.error(
                    "sentence-transformers not installed; pip install '.[embeddings]'",
                    extra={"event": "embedder_unavailable"},
                )
                raise
            self._encoder = SentenceTransformer(self.model_name)
        return self._encoder

    @property
    def dimension(self) -> int:
        return self._get_encoder().get_sentence_embedding_dimension()

    def __call__(self, text: str) -> List[float]:
        encoder = self._get_encoder()
        embedding = encoder.encode([text], convert_to_numpy=True, normalize_embeddings=True)
        return embedding[0].astype(np.float32).tolist()


def safe_embed(embedder: Optional[Embedder], text: str, dimension: int) -> List[float]:
    """
    Embed text without ever raising.

    Embedder failures, wrong-length outputs and non-finite values are
    logged and replaced by a zero vector of the given dimension.
    """
    if embedder is None:
        return [0.0] * dimension
    try:
        vector = [float(v) for v in embedder(text)]
    except Exception as e:
        _logger.error(
            f"Embedding failed: {e}",
            extra={"event": "embedding_failed", "error_type": type(e).__name__},
            exc_info=True,
        )
        return [0.0] * dimension
    if len(vector) != dimension:
        _logger.warning(
            f"Embedding has length {len(vector)}, expected {dimension}",
            extra={"event": "embedding_dimension_mismatch", "dimension": dimension},
        )
        return [0.0] * dimension
    if not np.all(np.isfinite(vector)):
        _logger.warning(
            "Embedding has non-finite components",
            extra={"event": "embedding_non_finite", "dimension": dimension},
        )
        return [0.0] * dimension
    return vector


def product_text(product: Product) -> str:
    """Text embedded for a product: title, description, features, category."""
    return " ".join(
        p for p in (
            product.title,
            product.description,
            " ".join(str(f) for f in product.features),
            product.category.value,
        ) if p
    )


def order_text(order: Order) -> str:
    """Text embedded for an order: id, status, amount, item count, city."""
    return (
        f"Order {order.id} status {order.status.value} amount {order.total_amount} "
        f"items {len(order.items)} address {order.address.get('city', '')}"
    ).strip()


def product_metadata(product: Product) -> dict:
    return {
        'title': product.title,
        'description': product.description,
        'category': product.category.value,
        'price': product.price,
        'rating': product.rating,
        'features': list(product.features),
        'stock': product.stock,
    }


def order_metadata(order: Order) -> dict:
    return {
        'user_id': order.user_id,
        'status': order.status.value,
        'total_amount': order.total_amount,
        'created_at': order.created_at.isoformat(),
    }


class IndexSync:
    """
    Keeps the product and order vector indexes eventually consistent.

    Called out-of-band when products or orders are created or edited.
    Every method reports success as a bool and never raises.

    Args:
        product_index: Product embeddings
        order_index: Order embeddings
        embedder: Text -> vector callable
        catalog: Used by refresh_product
        orders: Used by refresh_order
    """

    def __init__(
        self,
        product_index: VectorIndex,
        order_index: Optional[OrderVectorIndex] = None,
        embedder: Optional[Embedder] = None,
        catalog: Optional[CatalogStore] = None,
        orders: Optional[OrderStore] = None,
    ):
        self.product_index = product_index
        self.order_index = order_index
        self.embedder = embedder or ZeroEmbedder(product_index.dimension)
        self.catalog = catalog
        self.orders = orders

    def embed_product(self, product: Optional[Product]) -> bool:
        if product is None or not product.id:
            _logger.warning("Invalid product data", extra={"event": "embed_product_invalid"})
            return False
        try:
            vector = safe_embed(self.embedder, product_text(product), self.product_index.dimension)
            self.product_index.upsert(product.id, vector, product_metadata(product))
        except Exception as e:
            _logger.error(
                f"Error embedding product {product.id}: {e}",
                extra={"event": "embed_product_failed", "error_type": type(e).__name__},
                exc_info=True,
            )
            return False
        return True

    def embed_order(self, order: Optional[Order]) -> bool:
        if self.order_index is None:
            _logger.warning("Order index not configured", extra={"event": "embed_order_skipped"})
            return False
        if order is None or not order.id:
            _logger.warning("Invalid order data", extra={"event": "embed_order_invalid"})
            return False
        try:
            vector = safe_embed(self.embedder, order_text(order), self.order_index.dimension)
            self.order_index.upsert(order.id, vector, order_metadata(order))
        except Exception as e:
            _logger.error(
                f"Error embedding order {order.id}: {e}",
                extra={"event": "embed_order_failed", "error_type": type(e).__name__},
                exc_info=True,
            )
            return False
        return True

    def refresh_product(self, product_id: str) -> bool:
        """Re-embed a product after an edit; False if it no longer exists."""
        if self.catalog is None:
            return False
        try:
            product = self.catalog.get(product_id)
        except Exception as e:
            _logger.error(
                f"Error loading product {product_id}: {e}",
                extra={"event": "refresh_product_failed", "error_type": type(e).__name__},
                exc_info=True,
            )
            return False
        if product is None:
            _logger.warning(f"Product {product_id} not found", extra={"event": "refresh_product_missing"})
            return False
        return self.embed_product(product)

    def refresh_order(self, order_id: str) -> bool:
        """Re-embed an order after a status change; False if it no longer exists."""
        if self.orders is None:
            return False
        try:
            order = self.orders.get(order_id)
        except Exception as e:
            _logger.error(
                f"Error loading order {order_id}: {e}",
                extra={"event": "refresh_order_failed", "error_type": type(e).__name__},
                exc_info=True,
            )
            return False
        if order is None:
            _logger.warning(f"Order {order_id} not found", extra={"event": "refresh_order_missing"})
            return False
        return self.embed_order(order)

    @timed("index_initialize")
    def initialize(self, catalog: Iterable[Product]) -> int:
        """
        Bulk-embed a catalog at startup.

        Returns:
            Number of products embedded
        """
        count = 0
        for product in catalog:
            if self.embed_product(product):
                count += 1
        _logger.info(
            f"Vector index initialized with {count} products",
            extra={"event": "index_initialized", "entries": count},
        )
        return count
