"""
Unit Tests - Inventory Risk Scorer
"""
from datetime import datetime, timedelta

import pytest

from storefront_analytics.analytics.frames import build_order_frames, build_product_frame
from storefront_analytics.analytics.inventory import (
    CRITICAL,
    LOW_STOCK,
    NORMAL,
    StockPosition,
    classify,
    score_inventory_risk,
)
from storefront_analytics.analytics.records import OrderStatus, ProductRecord

NOW = datetime(2024, 6, 30, 12, 0)


def position(stock, velocity=0.0, threshold=5, safety_days=14):
    return StockPosition(
        stock=stock,
        daily_velocity=velocity,
        threshold=threshold,
        safety_days=safety_days,
        critical_cover_days=7.0,
    )


class TestClassify:
    """Tests for the ordered risk rules"""

    def test_stock_at_threshold_is_critical(self):
        level, reason = classify(position(5, velocity=0.1))

        assert level == CRITICAL
        assert reason == "Only 5 units remaining"

    @pytest.mark.parametrize("velocity", [0.0, 0.1, 1.0, 3.0, 25.0])
    def test_stock_below_threshold_is_critical_at_any_velocity(self, velocity):
        level, reason = classify(position(3, velocity=velocity))

        assert level == CRITICAL
        assert reason == "Only 3 units remaining"

    def test_short_cover_is_critical(self):
        level, reason = classify(position(10, velocity=2.0))

        assert level == CRITICAL
        assert reason == "Will run out in 5.0 days at current sales rate"

    def test_five_days_of_cover_is_critical_not_low_stock(self):
        stock = position(50, velocity=10.0)

        assert stock.days_of_cover == 5.0
        assert classify(stock)[0] == CRITICAL

    def test_cover_within_safety_days_is_low_stock(self):
        level, _ = classify(position(20, velocity=2.0))

        assert level == LOW_STOCK

    def test_cover_beyond_safety_days_is_normal(self):
        assert classify(position(40, velocity=2.0)) == (NORMAL, "")

    def test_no_sales_and_low_stock(self):
        level, reason = classify(position(10))

        assert level == LOW_STOCK
        assert reason == "Low stock with no recent sales data"

    def test_no_sales_and_plenty_of_stock(self):
        level, _ = classify(position(11))

        assert level == NORMAL

    def test_days_of_cover_undefined_without_sales(self):
        assert position(10).days_of_cover is None


class TestScoreInventoryRisk:
    """Tests for score_inventory_risk"""

    def test_sample_catalog_without_recent_sales(self, order_frames, product_frame):
        """Only cancelled and pending orders fall in the trailing two weeks"""
        report = score_inventory_risk(order_frames, product_frame, NOW, threshold=5, safety_days=14)

        assert [e.product_id for e in report.risk_products] == ["p2", "p3"]
        mouse, novel = report.risk_products
        assert mouse.risk_level == CRITICAL
        assert mouse.risk_reason == "Only 3 units remaining"
        assert mouse.days_of_cover is None
        assert novel.risk_level == LOW_STOCK
        assert novel.risk_reason == "Low stock with no recent sales data"
        assert report.summary.total_at_risk == 2
        assert report.summary.critical == 1
        assert report.summary.low_stock == 1

    @pytest.mark.parametrize(
        "stock,expected_level",
        [
            (10, CRITICAL),
            (20, LOW_STOCK),
            (40, None),
        ],
    )
    def test_velocity_from_trailing_window(self, order_factory, stock, expected_level):
        """28 units sold over 14 days is a velocity of 2 per day"""
        products = build_product_frame([ProductRecord("x", "Widget", "Tools", price=5.0, stock=stock)])
        frames = build_order_frames([
            order_factory("a", "u1", NOW - timedelta(days=3), OrderStatus.PAID, 70.0, [("x", 14)]),
            order_factory("b", "u2", NOW - timedelta(days=10), OrderStatus.SHIPPED, 70.0, [("x", 14)]),
            order_factory("c", "u3", NOW - timedelta(days=20), OrderStatus.DELIVERED, 500.0, [("x", 100)]),
        ])

        report = score_inventory_risk(frames, products, NOW, threshold=5, safety_days=14)

        if expected_level is None:
            assert report.risk_products == []
        else:
            entry = report.risk_products[0]
            assert entry.risk_level == expected_level
            assert entry.daily_velocity == 2.0
            assert entry.days_of_cover == stock / 2.0

    def test_window_days_override(self, order_factory):
        products = build_product_frame([ProductRecord("x", "Widget", "Tools", price=5.0, stock=10)])
        frames = build_order_frames([
            order_factory("a", "u1", NOW - timedelta(days=20), OrderStatus.DELIVERED, 150.0, [("x", 30)]),
        ])

        report = score_inventory_risk(frames, products, NOW, safety_days=14, window_days=30)

        entry = report.risk_products[0]
        assert entry.daily_velocity == 1.0
        assert entry.days_of_cover == 10.0
        assert entry.risk_level == LOW_STOCK

    def test_critical_listed_before_low_stock_then_by_cover(self, order_factory):
        products = build_product_frame([
            ProductRecord("a", "A", "Tools", price=1.0, stock=26),
            ProductRecord("b", "B", "Tools", price=1.0, stock=2),
            ProductRecord("c", "C", "Tools", price=1.0, stock=20),
        ])
        frames = build_order_frames([
            order_factory("o", "u1", NOW - timedelta(days=1), OrderStatus.PAID, 56.0, [("a", 28), ("c", 28)]),
        ])

        report = score_inventory_risk(frames, products, NOW, threshold=5, safety_days=14)

        assert [e.product_id for e in report.risk_products] == ["b", "c", "a"]

    def test_empty_catalog(self, order_frames):
        report = score_inventory_risk(order_frames, build_product_frame([]), NOW)

        assert report.risk_products == []
        assert report.summary.total_at_risk == 0
