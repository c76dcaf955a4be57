"""
Shared fixtures: the sample catalog, stores and wired components.

Records are read straight from data/*.json so these fixtures do not
depend on the pandas loader (which has its own tests).
"""

import json
from datetime import datetime
from pathlib import Path

import pytest

from core.context import Order, OrderItem, Product, User
from core.intent import IntentDetector
from core.orchestrator import build_pipeline
from core.router import AdaptiveRouter
from core.scoring import SemanticScorer
from core.specs import SpecificationMatcher
from core.stores import InMemoryCatalogStore, InMemoryOrderStore, InMemoryUserStore
from core.title_cache import CatalogTitleCache

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def _read(name: str) -> list:
    with open(DATA_DIR / name, encoding="utf-8") as f:
        return json.load(f)


def make_order(record: dict) -> Order:
    return Order(
        id=record["id"],
        user_id=record["user_id"],
        items=[OrderItem(**item) for item in record["items"]],
        total_amount=record["total_amount"],
        status=record["status"],
        created_at=datetime.fromisoformat(record["created_at"]),
        address=record["address"],
    )


@pytest.fixture
def data_dir():
    return DATA_DIR


@pytest.fixture
def products():
    return [Product(**record) for record in _read("sample_products.json")]


@pytest.fixture
def orders():
    return [make_order(record) for record in _read("sample_orders.json")]


@pytest.fixture
def users():
    records = _read("sample_users.json")
    return [
        User(id=r["id"], name=r["name"], email=r["email"], phone=r["phone"], address=r["address"])
        for r in records
    ]


@pytest.fixture
def catalog(products):
    return InMemoryCatalogStore(products)


@pytest.fixture
def order_store(orders):
    return InMemoryOrderStore(orders)


@pytest.fixture
def user_store(users):
    return InMemoryUserStore(users)


@pytest.fixture
def title_cache(catalog):
    return CatalogTitleCache(catalog.list_all)


@pytest.fixture
def detector(title_cache):
    return IntentDetector(title_cache)


@pytest.fixture
def router(catalog, order_store, user_store, detector):
    return AdaptiveRouter(
        catalog,
        orders=order_store,
        users=user_store,
        detector=detector,
        spec_matcher=SpecificationMatcher(),
        scorer=SemanticScorer(),
    )


@pytest.fixture
def pipeline(catalog, order_store, user_store):
    return build_pipeline(catalog, order_store, user_store)
