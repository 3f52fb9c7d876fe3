"""
Integration Tests - SQL Repositories
"""
from datetime import datetime

import pytest

from storefront_analytics.analytics.records import OrderStatus
from storefront_analytics.database.models import Order, OrderItem, Product, User
from storefront_analytics.database.repositories import (
    SQLOrderRepository,
    SQLProductRepository,
    SQLUserRepository,
)


@pytest.fixture
async def seeded_db(test_db):
    test_db.add_all([
        User(user_id="u1", name="Alice Doe", email="alice@example.com"),
        User(user_id="u2", name="Bob Smith", email="bob@example.com"),
        Product(product_id="p1", name="Laptop", category="Electronics", price=100.0, cost=60.0, stock=50),
        Product(product_id="p2", name="Mouse", category=None, price=20.0, stock=3),
    ])
    test_db.add_all([
        Order(
            order_id="o1",
            user_id="u1",
            status=OrderStatus.DELIVERED,
            total_price=220.0,
            created_at=datetime(2024, 6, 3, 10, 0),
            items=[OrderItem(product_id="p1", quantity=2)],
        ),
        Order(
            order_id="o2",
            user_id="u1",
            status=OrderStatus.CANCELLED,
            total_price=20.0,
            created_at=datetime(2024, 6, 10, 9, 0),
            items=[OrderItem(product_id="p2", quantity=1)],
        ),
        Order(
            order_id="o3",
            user_id="u2",
            status=OrderStatus.PAID,
            total_price=140.0,
            created_at=datetime(2024, 6, 30, 23, 59, 59),
            items=[OrderItem(product_id="p1", quantity=1), OrderItem(product_id="p2", quantity=2)],
        ),
    ])
    await test_db.flush()
    return test_db


class TestSQLOrderRepository:
    """Tests for SQLOrderRepository"""

    async def test_all_orders_with_items(self, seeded_db):
        orders = await SQLOrderRepository(seeded_db).find_orders()

        assert [o.order_id for o in orders] == ["o1", "o2", "o3"]
        assert orders[2].units == 3
        assert orders[0].status == OrderStatus.DELIVERED
        assert orders[0].ordered_at == datetime(2024, 6, 3, 10, 0)

    async def test_window_bounds_are_inclusive(self, seeded_db):
        orders = await SQLOrderRepository(seeded_db).find_orders(
            start=datetime(2024, 6, 3, 10, 0), end=datetime(2024, 6, 30, 23, 59, 59)
        )

        assert len(orders) == 3

    async def test_status_filter(self, seeded_db):
        orders = await SQLOrderRepository(seeded_db).find_orders(
            statuses=[OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.DELIVERED]
        )

        assert [o.order_id for o in orders] == ["o1", "o3"]

    async def test_empty_window(self, seeded_db):
        orders = await SQLOrderRepository(seeded_db).find_orders(
            start=datetime(2023, 1, 1), end=datetime(2023, 12, 31)
        )

        assert orders == []


class TestSQLProductAndUserRepositories:

    async def test_list_products(self, seeded_db):
        products = await SQLProductRepository(seeded_db).list_products()

        assert [p.product_id for p in products] == ["p1", "p2"]
        assert products[1].category is None
        assert products[1].cost == 0.0

    async def test_get_products_skips_unknown_ids(self, seeded_db):
        products = await SQLProductRepository(seeded_db).get_products(["p1", "gone"])

        assert list(products) == ["p1"]
        assert products["p1"].price == 100.0

    async def test_get_products_without_ids(self, seeded_db):
        assert await SQLProductRepository(seeded_db).get_products([]) == {}

    async def test_get_customers(self, seeded_db):
        customers = await SQLUserRepository(seeded_db).get_customers(["u2", "u9"])

        assert list(customers) == ["u2"]
        assert customers["u2"].name == "Bob Smith"
