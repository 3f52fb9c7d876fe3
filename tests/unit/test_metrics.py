"""
Unit Tests - Metric Primitives
"""
from datetime import datetime

import pytest

from storefront_analytics.analytics.frames import build_order_frames, build_product_frame
from storefront_analytics.analytics.metrics import (
    KPI_FIELDS,
    compute_snapshot,
    gross_margin_pct,
    kpis_with_deltas,
    percent_delta,
)
from storefront_analytics.analytics.records import OrderStatus
from storefront_analytics.analytics.views import MetricSnapshot
from storefront_analytics.analytics.windows import DateWindow

JUNE = DateWindow(datetime(2024, 6, 1), datetime(2024, 6, 30, 23, 59, 59, 999999))
MAY = DateWindow(datetime(2024, 5, 1), datetime(2024, 5, 31, 23, 59, 59, 999999))


class TestComputeSnapshot:
    """Tests for compute_snapshot"""

    def test_counts_only_qualifying_orders(self, order_frames, product_frame):
        """Pending and cancelled orders never count toward revenue"""
        snapshot = compute_snapshot(order_frames, product_frame, JUNE)

        assert snapshot.gross_revenue == 290.0
        assert snapshot.orders == 3
        assert snapshot.units == 7
        assert snapshot.active_customers == 2
        assert snapshot.aov == pytest.approx(290.0 / 3)

    def test_refund_rate_uses_cancelled_orders(self, order_frames, product_frame):
        """One cancelled against three qualifying orders is 25%"""
        snapshot = compute_snapshot(order_frames, product_frame, JUNE)

        assert snapshot.refund_rate == 25.0

    def test_margin_ignores_products_without_cost(self, order_frames, product_frame):
        """Mouse has no cost and is left out of both sides of the margin"""
        margin = gross_margin_pct(order_frames, product_frame, JUNE)

        # Laptop 200 revenue / 120 cost, Novel 30 revenue / 12 cost
        assert margin == pytest.approx((230 - 132) * 100 / 230)

    def test_empty_window_yields_zero_ratios(self, order_frames, product_frame):
        """A window with no orders produces zeros, never NaN"""
        window = DateWindow(datetime(2023, 1, 1), datetime(2023, 1, 31))

        snapshot = compute_snapshot(order_frames, product_frame, window)

        assert snapshot.gross_revenue == 0.0
        assert snapshot.orders == 0
        assert snapshot.aov == 0.0
        assert snapshot.refund_rate == 0.0
        assert snapshot.gross_margin_pct == 0.0
        assert snapshot.active_customers == 0

    def test_window_with_only_cancellations_has_zero_refund_rate(self, order_factory, product_frame):
        """Refund rate is 0 when the window has no qualifying orders"""
        frames = build_order_frames([
            order_factory("c1", "u1", datetime(2024, 6, 5), OrderStatus.CANCELLED, 80.0),
        ])

        snapshot = compute_snapshot(frames, product_frame, JUNE)

        assert snapshot.refund_rate == 0.0
        assert snapshot.aov == 0.0

    def test_window_bounds_are_inclusive(self, order_factory):
        """Orders at the exact start and end of the window are counted"""
        frames = build_order_frames([
            order_factory("a", "u1", JUNE.start, OrderStatus.PAID, 10.0),
            order_factory("b", "u2", JUNE.end, OrderStatus.PAID, 20.0),
        ])

        snapshot = compute_snapshot(frames, build_product_frame([]), JUNE)

        assert snapshot.orders == 2
        assert snapshot.gross_revenue == 30.0

    def test_conversion_rate_is_reported_as_given(self, order_frames, product_frame):
        snapshot = compute_snapshot(order_frames, product_frame, JUNE, conversion_rate=2.5)

        assert snapshot.conversion_rate == 2.5


class TestDeltas:
    """Tests for percent_delta and kpis_with_deltas"""

    def test_percent_delta(self):
        assert percent_delta(110, 100) == 10.0
        assert percent_delta(90, 100) == -10.0

    def test_percent_delta_without_base_is_zero(self):
        """Never divides by zero"""
        assert percent_delta(50, 0) == 0.0
        assert percent_delta(50, None) == 0.0

    def test_kpis_are_camel_cased(self):
        kpis = kpis_with_deltas(MetricSnapshot(gross_revenue=10.0))

        assert set(kpis) == {
            "grossRevenue",
            "orders",
            "aov",
            "units",
            "conversionRate",
            "refundRate",
            "grossMarginPct",
            "activeCustomers",
        }
        assert len(kpis) == len(KPI_FIELDS)

    def test_deltas_against_comparison_period(self, order_frames, product_frame):
        """June against May: revenue 290 vs 200, orders 3 vs 2"""
        current = compute_snapshot(order_frames, product_frame, JUNE)
        previous = compute_snapshot(order_frames, product_frame, MAY)

        kpis = kpis_with_deltas(current, previous)

        assert kpis["grossRevenue"].value == 290.0
        assert kpis["grossRevenue"].delta_pct == 45.0
        assert kpis["orders"].delta_pct == 50.0
        # No cancellations in May
        assert kpis["refundRate"].delta_pct == 0.0

    def test_deltas_without_comparison_are_zero(self, order_frames, product_frame):
        current = compute_snapshot(order_frames, product_frame, JUNE)

        kpis = kpis_with_deltas(current)

        assert all(kpi.delta_pct == 0.0 for kpi in kpis.values())

    def test_count_kpis_serialize_as_integers(self, order_frames, product_frame):
        payload = {
            name: kpi.to_payload()
            for name, kpi in kpis_with_deltas(compute_snapshot(order_frames, product_frame, JUNE)).items()
        }

        assert payload["orders"]["value"] == 3
        for name in ("orders", "units", "activeCustomers"):
            assert type(payload[name]["value"]) is int
        assert type(payload["grossRevenue"]["value"]) is float

    def test_payload_uses_delta_pct_alias(self):
        kpis = kpis_with_deltas(MetricSnapshot(gross_revenue=110.0), MetricSnapshot(gross_revenue=100.0))

        assert kpis["grossRevenue"].to_payload() == {"value": 110.0, "deltaPct": 10.0}
