"""
Metric Primitives

Scalar KPIs over a date window and percentage deltas between two windows.

Revenue, units and customers come from qualifying orders only (Paid,
Shipped, Delivered). Cancelled orders feed the refund rate. Pending orders
are ignored everywhere.
"""

from typing import Dict, Optional

import polars as pl
import structlog
from pydantic.alias_generators import to_camel

from storefront_analytics.analytics.frames import (
    OrderFrames,
    in_window,
    priced_items,
    qualifying_items,
    qualifying_orders,
)
from storefront_analytics.analytics.records import OrderStatus
from storefront_analytics.analytics.views import KPIWithDelta, MetricSnapshot
from storefront_analytics.analytics.windows import DateWindow

logger = structlog.get_logger(__name__)

KPI_FIELDS = (
    "gross_revenue",
    "orders",
    "aov",
    "units",
    "conversion_rate",
    "refund_rate",
    "gross_margin_pct",
    "active_customers",
)


def gross_margin_pct(frames: OrderFrames, products: pl.DataFrame, window: DateWindow) -> float:
    """
    Gross margin over line items with a known unit cost.

    Items whose product has no cost (cost == 0) are left out of both the
    revenue and the cost side so they do not distort the ratio.
    """
    costed = priced_items(qualifying_items(frames, window), products).filter(pl.col("cost") > 0)
    totals = costed.select(
        pl.col("revenue").sum().alias("revenue"),
        (pl.col("cost") * pl.col("quantity")).sum().alias("cost"),
    ).row(0, named=True)

    revenue = float(totals["revenue"] or 0.0)
    if revenue <= 0:
        return 0.0
    return (revenue - float(totals["cost"] or 0.0)) * 100 / revenue


def compute_snapshot(
    frames: OrderFrames,
    products: pl.DataFrame,
    window: DateWindow,
    conversion_rate: float = 0.0,
) -> MetricSnapshot:
    """
    Compute the KPI snapshot for a window.

    Args:
        frames: Order and line-item frames (any status)
        products: Product frame used for margin
        window: Inclusive date window
        conversion_rate: Reported conversion rate

    Returns:
        MetricSnapshot; ratios are 0 when the window has no qualifying orders
    """
    orders = qualifying_orders(frames, window)
    totals = orders.select(
        pl.col("total_price").sum().alias("revenue"),
        pl.len().alias("orders"),
        pl.col("units").sum().alias("units"),
        pl.col("user_id").n_unique().alias("customers"),
    ).row(0, named=True)

    revenue = float(totals["revenue"] or 0.0)
    order_count = int(totals["orders"] or 0)
    cancelled = in_window(frames.orders, window).filter(
        pl.col("status") == OrderStatus.CANCELLED.value
    ).height

    if order_count > 0:
        aov = revenue / order_count
        refund_rate = cancelled * 100 / (order_count + cancelled)
    else:
        aov = 0.0
        refund_rate = 0.0

    snapshot = MetricSnapshot(
        gross_revenue=revenue,
        orders=order_count,
        aov=aov,
        units=int(totals["units"] or 0),
        active_customers=int(totals["customers"] or 0),
        refund_rate=refund_rate,
        gross_margin_pct=gross_margin_pct(frames, products, window),
        conversion_rate=conversion_rate,
    )
    logger.debug(
        "Metric snapshot computed",
        start=str(window.start),
        end=str(window.end),
        orders=order_count,
        cancelled=cancelled,
    )
    return snapshot


def percent_delta(current: float, compare: Optional[float]) -> float:
    """Percentage change from `compare` to `current`; 0 when there is no base."""
    if not compare:
        return 0.0
    return (current - compare) * 100 / compare


def kpis_with_deltas(
    current: MetricSnapshot,
    compare: Optional[MetricSnapshot] = None,
) -> Dict[str, KPIWithDelta]:
    """Pair each KPI with its delta against the comparison snapshot, keyed in camelCase"""
    kpis = {}
    for field_name in KPI_FIELDS:
        value = getattr(current, field_name)
        delta = percent_delta(value, getattr(compare, field_name)) if compare else 0.0
        kpis[to_camel(field_name)] = KPIWithDelta(value=value, delta_pct=delta)
    return kpis
