"""
Inventory Risk Scorer

Estimates daily sales velocity per product over a trailing window and
classifies stock-out risk with an ordered rule table (first match wins).
Only products at risk are reported.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

import polars as pl
import structlog

from storefront_analytics.analytics.frames import OrderFrames, with_status
from storefront_analytics.analytics.records import QUALIFYING_STATUSES
from storefront_analytics.analytics.views import (
    InventoryRiskReport,
    InventoryRiskSummary,
    RiskEntry,
)

logger = structlog.get_logger(__name__)

CRITICAL = "Critical"
LOW_STOCK = "Low Stock"
NORMAL = "Normal"

# Days of cover used for ordering when a product has no recent sales
MISSING_COVER_SORT_VALUE = 999.0


@dataclass(frozen=True)
class StockPosition:
    """Inputs the risk rules evaluate for one product"""
    stock: int
    daily_velocity: float
    threshold: int
    safety_days: int
    critical_cover_days: float

    @property
    def days_of_cover(self) -> Optional[float]:
        if self.daily_velocity > 0:
            return self.stock / self.daily_velocity
        return None


@dataclass(frozen=True)
class RiskRule:
    level: str
    applies: Callable[[StockPosition], bool]
    reason: Callable[[StockPosition], str]


def _runs_out_reason(position: StockPosition) -> str:
    return f"Will run out in {position.days_of_cover:.1f} days at current sales rate"


RISK_RULES: Tuple[RiskRule, ...] = (
    RiskRule(
        CRITICAL,
        lambda p: p.stock <= p.threshold,
        lambda p: f"Only {p.stock} units remaining",
    ),
    RiskRule(
        CRITICAL,
        lambda p: p.daily_velocity > 0 and p.days_of_cover <= p.critical_cover_days,
        _runs_out_reason,
    ),
    RiskRule(
        LOW_STOCK,
        lambda p: p.daily_velocity > 0 and p.days_of_cover <= p.safety_days,
        _runs_out_reason,
    ),
    RiskRule(
        LOW_STOCK,
        lambda p: p.daily_velocity == 0 and p.stock <= p.threshold * 2,
        lambda p: "Low stock with no recent sales data",
    ),
)


def classify(position: StockPosition) -> Tuple[str, str]:
    """Risk level and reason for a stock position; Normal when no rule matches."""
    for rule in RISK_RULES:
        if rule.applies(position):
            return rule.level, rule.reason(position)
    return NORMAL, ""


def units_sold_since(frames: OrderFrames, since: datetime) -> pl.DataFrame:
    """Units per product on qualifying orders placed at or after `since`"""
    recent_orders = with_status(
        frames.orders.filter(pl.col("ordered_at") >= since), QUALIFYING_STATUSES
    ).select("order_id")
    return (
        frames.items.join(recent_orders, on="order_id", how="inner")
        .group_by("product_id")
        .agg(pl.col("quantity").sum().alias("units_sold"))
    )


def _sort_key(entry: RiskEntry) -> Tuple[int, float, str]:
    cover = entry.days_of_cover if entry.days_of_cover is not None else MISSING_COVER_SORT_VALUE
    return (0 if entry.risk_level == CRITICAL else 1, cover, entry.product_id)


def score_inventory_risk(
    frames: OrderFrames,
    products: pl.DataFrame,
    now: datetime,
    threshold: int = 5,
    safety_days: int = 14,
    window_days: Optional[int] = None,
    critical_cover_days: float = 7.0,
) -> InventoryRiskReport:
    """
    Classify every product's stock-out risk.

    Args:
        frames: Order frames covering at least the trailing window
        products: Product frame with current stock
        now: Reference time closing the trailing window
        threshold: Stock at or below this is Critical
        safety_days: Days of cover at or below this is Low Stock
        window_days: Trailing velocity window, defaults to `safety_days`
        critical_cover_days: Days of cover at or below this is Critical

    Returns:
        Report listing Critical then Low Stock products, soonest stock-out first
    """
    window_days = window_days or safety_days
    sold = units_sold_since(frames, now - timedelta(days=window_days))
    positions = (
        products.join(sold, on="product_id", how="left")
        .with_columns(pl.col("units_sold").fill_null(0))
        .sort("product_id")
    )

    entries: List[RiskEntry] = []
    for row in positions.iter_rows(named=True):
        position = StockPosition(
            stock=int(row["stock"]),
            daily_velocity=int(row["units_sold"]) / window_days,
            threshold=threshold,
            safety_days=safety_days,
            critical_cover_days=critical_cover_days,
        )
        level, reason = classify(position)
        if level == NORMAL:
            continue

        cover = position.days_of_cover
        entries.append(
            RiskEntry(
                product_id=row["product_id"],
                name=row["name"],
                category=row["category"],
                current_stock=position.stock,
                daily_velocity=round(position.daily_velocity, 2),
                days_of_cover=round(cover, 1) if cover is not None else None,
                risk_level=level,
                risk_reason=reason,
            )
        )

    entries.sort(key=_sort_key)
    critical = sum(1 for entry in entries if entry.risk_level == CRITICAL)

    logger.info(
        "Inventory risk scored",
        products=products.height,
        at_risk=len(entries),
        critical=critical,
        window_days=window_days,
    )
    return InventoryRiskReport(
        risk_products=entries,
        summary=InventoryRiskSummary(
            total_at_risk=len(entries),
            critical=critical,
            low_stock=len(entries) - critical,
        ),
    )
