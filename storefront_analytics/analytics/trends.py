"""
Trend Aggregator

Buckets qualifying orders into day, ISO week or month intervals (UTC).
Buckets without orders are omitted.
"""

from typing import List

import polars as pl

from storefront_analytics.analytics.frames import OrderFrames, qualifying_orders
from storefront_analytics.analytics.views import TrendPoint
from storefront_analytics.analytics.windows import DateWindow

# Bucket key formats; week uses the ISO week-numbering year and week (2025-W01)
BUCKET_FORMATS = {
    "day": "%Y-%m-%d",
    "week": "%G-W%V",
    "month": "%Y-%m",
}

INTERVALS = tuple(BUCKET_FORMATS)


def aggregate_trends(frames: OrderFrames, window: DateWindow, interval: str = "day") -> List[TrendPoint]:
    """
    Revenue, orders and units per time bucket, ascending by bucket key.

    Args:
        frames: Order frames
        window: Inclusive date window
        interval: One of day, week, month

    Returns:
        One TrendPoint per bucket that has at least one qualifying order
    """
    bucket_format = BUCKET_FORMATS[interval]
    buckets = (
        qualifying_orders(frames, window)
        .with_columns(pl.col("ordered_at").dt.strftime(bucket_format).alias("bucket_key"))
        .group_by("bucket_key")
        .agg(
            pl.col("total_price").sum().alias("revenue"),
            pl.len().alias("orders"),
            pl.col("units").sum().alias("units"),
        )
        .sort("bucket_key")
    )

    return [
        TrendPoint(
            bucket_key=row["bucket_key"],
            revenue=float(row["revenue"] or 0.0),
            orders=int(row["orders"]),
            units=int(row["units"] or 0),
        )
        for row in buckets.iter_rows(named=True)
    ]
