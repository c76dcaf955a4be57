"""
Tests for the seed data loader.
"""

import pandas as pd
import pytest

from catalog_loader import (
    build_stores,
    get_catalog_statistics,
    load_orders,
    load_products,
    load_users,
    read_frame,
)
from core.context import Category, OrderStatus


class TestJsonSeeds:

    def test_products(self, data_dir):
        products = load_products(data_dir / "sample_products.json")
        assert len(products) == 17
        tuf = next(p for p in products if p.id == 'lap-002')
        assert tuf.category is Category.LAPTOPS
        assert tuf.spec_map()['refresh_rate'] == '144Hz'
        assert tuf.features == ['RGB keyboard', 'Military grade durability']

    def test_orders(self, data_dir):
        orders = load_orders(data_dir / "sample_orders.json")
        assert len(orders) == 5
        order = next(o for o in orders if o.id == 'ORD2001')
        assert order.status is OrderStatus.OUT_FOR_DELIVERY
        assert order.created_at.year == 2026
        assert order.items[0].product_id == 'tv-002'
        assert order.address['city'] == 'Kolkata'

    def test_users_never_carry_credentials(self, data_dir):
        users = load_users(data_dir / "sample_users.json")
        assert [u.id for u in users] == ['u1', 'u2']
        assert 'password' not in users[0].to_dict()
        assert 'password' not in read_frame(data_dir / "sample_users.json").columns

    def test_build_stores(self, data_dir):
        catalog, orders, users = build_stores(
            data_dir / "sample_products.json",
            data_dir / "sample_orders.json",
            data_dir / "sample_users.json",
        )
        assert len(catalog) == 17
        assert [o.id for o in orders.by_owner('u1', limit=2)] == ['ORD1004', 'ORD1003']
        assert users.get('u2').name == 'Arjun Das'

    def test_build_stores_without_orders_or_users(self, data_dir):
        _, orders, users = build_stores(data_dir / "sample_products.json")
        assert orders.by_owner('u1') == []
        assert users.get('u1') is None


class TestCsvAndExcel:

    def test_csv_skips_bad_rows(self, tmp_path):
        path = tmp_path / "products.csv"
        path.write_text(
            'id,title,category,brand,price,rating,features,specifications\n'
            'p1,Widget Phone,phones,Acme,"1,299",4.1,Fast charge | 5G,"{""RAM"": ""8GB""}"\n'
            ',No Id,Laptops,X,10,4,,\n'
            'p3,Bad Category,Spaceships,X,10,4,,\n'
            'p4,Negative,Laptops,X,-5,4,,\n',
            encoding='utf-8',
        )
        products = load_products(path)
        assert [p.id for p in products] == ['p1']
        widget = products[0]
        assert widget.category is Category.SMARTPHONES
        assert widget.price == 1299.0
        assert widget.features == ['Fast charge', '5G']
        assert widget.spec_map() == {'ram': '8GB'}

    def test_excel_with_aliased_columns(self, tmp_path):
        path = tmp_path / "products.xlsx"
        pd.DataFrame([
            {'SKU': 'X-1', 'Product Name': 'Travel Notebook', 'Category': 'Laptop', 'Price': 500, 'Ratings': 4.0},
        ]).to_excel(path, index=False)

        [product] = load_products(path)
        assert product.id == 'X-1'
        assert product.title == 'Travel Notebook'
        assert product.category is Category.LAPTOPS
        assert product.rating == 4.0

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "products.txt"
        path.write_text("nope", encoding='utf-8')
        with pytest.raises(ValueError):
            read_frame(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_frame(tmp_path / "absent.json")


class TestStatistics:

    def test_sample_catalog(self, products):
        stats = get_catalog_statistics(products)
        assert stats['total'] == 17
        assert stats['by_category'] == {
            'Laptops': 5,
            'Smartphones': 5,
            'Smart TVs': 3,
            'Wearables': 2,
            'Accessories': 2,
        }
        assert stats['brands'] == 10
        assert stats['price_min'] == 1299
        assert stats['price_max'] == 99900
        assert stats['avg_rating'] == 4.3

    def test_empty(self):
        stats = get_catalog_statistics([])
        assert stats['total'] == 0
        assert stats['price_min'] is None
        assert stats['avg_rating'] == 0.0
