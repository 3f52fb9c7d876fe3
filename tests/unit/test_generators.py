"""
Unit Tests - Synthetic Data Generators
"""
from datetime import datetime, timedelta

import pytest

from storefront_analytics.analytics.records import OrderStatus
from storefront_analytics.data.generators import (
    CATEGORIES,
    RISK_PRODUCTS,
    TAX_RATE,
    CustomerGenerator,
    OrderGenerator,
    ProductGenerator,
)
from storefront_analytics.ingestion.seed_db import order_rows, product_rows, user_rows

NOW = datetime(2024, 6, 30, 12, 0)


@pytest.fixture
def customers():
    return CustomerGenerator(seed=7).generate(20)


@pytest.fixture
def catalog():
    return ProductGenerator(seed=7).generate(40)


class TestCustomerGenerator:

    def test_generate(self, customers):
        assert len(customers) == 20
        assert len({c.email for c in customers}) == 20
        assert all(c.name for c in customers)


class TestProductGenerator:
    """Tests for ProductGenerator"""

    def test_generate(self, catalog):
        assert len(catalog) == 40
        for product in catalog:
            assert product.category in CATEGORIES
            assert 10 <= product.price <= 500
            assert 0 <= product.cost < product.price
            assert 0 <= product.stock <= 100

    def test_some_costs_unknown(self):
        products = ProductGenerator(seed=3).generate(200)

        assert any(p.cost == 0 for p in products)
        assert any(p.cost > 0 for p in products)

    def test_risk_products(self):
        products = ProductGenerator.risk_products()

        assert [p.stock for p in products] == [row[4] for row in RISK_PRODUCTS]
        assert len({p.product_id for p in products}) == len(RISK_PRODUCTS)


class TestOrderGenerator:
    """Tests for OrderGenerator"""

    def test_orders_fall_inside_period_and_are_sorted(self, customers, catalog):
        orders = OrderGenerator(customers, catalog).generate(200, days=90, now=NOW)

        assert len(orders) == 200
        assert all(NOW - timedelta(days=90) <= o.ordered_at <= NOW for o in orders)
        assert [o.ordered_at for o in orders] == sorted(o.ordered_at for o in orders)

    def test_order_lines_reference_catalog(self, customers, catalog):
        product_ids = {p.product_id for p in catalog}
        user_ids = {c.user_id for c in customers}

        orders = OrderGenerator(customers, catalog).generate(100, now=NOW)

        for order in orders:
            assert 1 <= len(order.items) <= 5
            assert order.user_id in user_ids
            assert all(item.product_id in product_ids for item in order.items)

    def test_total_includes_tax(self, customers, catalog):
        prices = {p.product_id: p.price for p in catalog}

        orders = OrderGenerator(customers, catalog).generate(50, now=NOW)

        for order in orders:
            subtotal = sum(prices[item.product_id] * item.quantity for item in order.items)
            assert order.total_price >= round(subtotal * (1 + TAX_RATE), 2) - 0.01

    def test_old_orders_are_settled(self, customers, catalog):
        orders = OrderGenerator(customers, catalog).generate(300, days=365, now=NOW)

        settled = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}
        for order in orders:
            if NOW - order.ordered_at > timedelta(days=30):
                assert order.status in settled

    def test_same_seed_same_history(self, customers, catalog):
        first = OrderGenerator(customers, catalog, seed=11).generate(30, now=NOW)
        second = OrderGenerator(customers, catalog, seed=11).generate(30, now=NOW)

        assert [o.total_price for o in first] == [o.total_price for o in second]
        assert [o.status for o in first] == [o.status for o in second]

    def test_fast_sellers(self, customers, catalog):
        risky = ProductGenerator.risk_products()[2:4]

        orders = OrderGenerator(customers, catalog).fast_sellers(risky, orders_per_product=8, now=NOW)

        assert len(orders) == 16
        assert all(o.status == OrderStatus.PAID for o in orders)
        assert all(NOW - o.ordered_at <= timedelta(days=7) for o in orders)


class TestSeedRows:

    def test_rows_mirror_records(self, customers, catalog):
        orders = OrderGenerator(customers, catalog).generate(10, now=NOW)

        users = user_rows(customers)
        products = product_rows(catalog)
        rows = order_rows(orders)

        assert [u.user_id for u in users] == [c.user_id for c in customers]
        assert [p.stock for p in products] == [p.stock for p in catalog]
        assert [len(r.items) for r in rows] == [len(o.items) for o in orders]
        assert rows[0].created_at == orders[0].ordered_at
