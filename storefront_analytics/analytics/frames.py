"""
Record Frames

Converts source records into typed polars DataFrames and provides the
filters every aggregator shares: date window, order status and the
qualifying-order / qualifying-line-item views.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

import polars as pl

from storefront_analytics.analytics.records import (
    OrderRecord,
    OrderStatus,
    ProductRecord,
    QUALIFYING_STATUSES,
)
from storefront_analytics.analytics.windows import DateWindow

UNCATEGORIZED = "Uncategorized"

ORDER_SCHEMA = {
    "order_id": pl.Utf8,
    "user_id": pl.Utf8,
    "ordered_at": pl.Datetime("us"),
    "status": pl.Utf8,
    "total_price": pl.Float64,
    "units": pl.Int64,
}

ITEM_SCHEMA = {
    "order_id": pl.Utf8,
    "product_id": pl.Utf8,
    "quantity": pl.Int64,
}

PRODUCT_SCHEMA = {
    "product_id": pl.Utf8,
    "name": pl.Utf8,
    "category": pl.Utf8,
    "price": pl.Float64,
    "cost": pl.Float64,
    "stock": pl.Int64,
}


@dataclass
class OrderFrames:
    """Orders and their exploded line items"""
    orders: pl.DataFrame
    items: pl.DataFrame

    @property
    def is_empty(self) -> bool:
        return self.orders.height == 0


def _empty_columns(schema: Dict[str, pl.DataType]) -> Dict[str, List]:
    return {name: [] for name in schema}


def build_order_frames(orders: Iterable[OrderRecord]) -> OrderFrames:
    """Build order and line-item frames from order records"""
    order_columns = _empty_columns(ORDER_SCHEMA)
    item_columns = _empty_columns(ITEM_SCHEMA)

    for order in orders:
        order_columns["order_id"].append(order.order_id)
        order_columns["user_id"].append(order.user_id)
        order_columns["ordered_at"].append(order.ordered_at)
        order_columns["status"].append(order.status.value)
        order_columns["total_price"].append(float(order.total_price))
        order_columns["units"].append(order.units)

        for item in order.items:
            item_columns["order_id"].append(order.order_id)
            item_columns["product_id"].append(item.product_id)
            item_columns["quantity"].append(int(item.quantity))

    return OrderFrames(
        orders=pl.DataFrame(order_columns, schema=ORDER_SCHEMA),
        items=pl.DataFrame(item_columns, schema=ITEM_SCHEMA),
    )


def build_product_frame(products: Iterable[ProductRecord]) -> pl.DataFrame:
    """Build the product lookup frame; missing categories become 'Uncategorized'"""
    columns = _empty_columns(PRODUCT_SCHEMA)
    for product in products:
        columns["product_id"].append(product.product_id)
        columns["name"].append(product.name)
        columns["category"].append(product.category or UNCATEGORIZED)
        columns["price"].append(float(product.price))
        columns["cost"].append(float(product.cost or 0.0))
        columns["stock"].append(int(product.stock))
    return pl.DataFrame(columns, schema=PRODUCT_SCHEMA)


def in_window(frame: pl.DataFrame, window: DateWindow, column: str = "ordered_at") -> pl.DataFrame:
    """Rows whose timestamp lies inside the inclusive window"""
    return frame.filter(pl.col(column).is_between(window.start, window.end, closed="both"))


def with_status(frame: pl.DataFrame, statuses: Sequence[OrderStatus]) -> pl.DataFrame:
    """Rows whose order status is one of `statuses`"""
    return frame.filter(pl.col("status").is_in([status.value for status in statuses]))


def qualifying_orders(frames: OrderFrames, window: DateWindow) -> pl.DataFrame:
    """Paid, shipped or delivered orders inside the window"""
    return with_status(in_window(frames.orders, window), QUALIFYING_STATUSES)


def qualifying_items(frames: OrderFrames, window: DateWindow) -> pl.DataFrame:
    """Line items belonging to qualifying orders inside the window"""
    order_ids = qualifying_orders(frames, window).select("order_id")
    return frames.items.join(order_ids, on="order_id", how="inner")


def priced_items(items: pl.DataFrame, products: pl.DataFrame) -> pl.DataFrame:
    """
    Join line items to the live product catalog.

    Revenue per line uses the product's current price, not the price paid at
    order time. Items whose product no longer exists are dropped.
    """
    return items.join(products, on="product_id", how="inner").with_columns(
        (pl.col("price") * pl.col("quantity")).alias("revenue")
    )
