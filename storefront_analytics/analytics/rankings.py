"""
Category & Product Ranker

Joins qualifying line items to the live catalog and ranks products by
revenue or units, or rolls them up by category.
"""

from typing import List

import polars as pl

from storefront_analytics.analytics.frames import OrderFrames, priced_items, qualifying_items
from storefront_analytics.analytics.views import CategoryRollup, ProductRanking
from storefront_analytics.analytics.windows import DateWindow

RANKING_METRICS = ("revenue", "units")


def rank_products(
    frames: OrderFrames,
    products: pl.DataFrame,
    window: DateWindow,
    metric: str = "revenue",
    limit: int = 50,
) -> List[ProductRanking]:
    """
    Top products by revenue or units sold.

    `orders` counts the line items naming the product, so an order listing
    a product twice counts twice. Ties fall back to ascending product id.
    """
    ranked = (
        priced_items(qualifying_items(frames, window), products)
        .group_by("product_id")
        .agg(
            pl.col("name").first(),
            pl.col("category").first(),
            pl.col("revenue").sum(),
            pl.col("quantity").sum().alias("units"),
            pl.len().alias("orders"),
        )
        .with_columns((pl.col("revenue") / pl.col("orders")).alias("avg_order_value"))
        .sort([metric, "product_id"], descending=[True, False])
        .head(limit)
    )

    return [
        ProductRanking(
            product_id=row["product_id"],
            name=row["name"],
            category=row["category"],
            revenue=float(row["revenue"]),
            units=int(row["units"]),
            orders=int(row["orders"]),
            avg_order_value=float(row["avg_order_value"]),
        )
        for row in ranked.iter_rows(named=True)
    ]


def rollup_categories(
    frames: OrderFrames,
    products: pl.DataFrame,
    window: DateWindow,
) -> List[CategoryRollup]:
    """Per-category revenue, units, line count and distinct products, by revenue"""
    rollup = (
        priced_items(qualifying_items(frames, window), products)
        .group_by("category")
        .agg(
            pl.col("revenue").sum(),
            pl.col("quantity").sum().alias("units"),
            pl.len().alias("orders"),
            pl.col("product_id").n_unique().alias("product_count"),
        )
        .with_columns((pl.col("revenue") / pl.col("orders")).alias("avg_order_value"))
        .sort(["revenue", "category"], descending=[True, False])
    )

    return [
        CategoryRollup(
            category=row["category"],
            revenue=float(row["revenue"]),
            units=int(row["units"]),
            orders=int(row["orders"]),
            product_count=int(row["product_count"]),
            avg_order_value=float(row["avg_order_value"]),
        )
        for row in rollup.iter_rows(named=True)
    ]
