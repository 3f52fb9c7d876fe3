"""
RFM Segmentation Engine

Scores customers 1-5 on recency, frequency and monetary value using fixed
breakpoints, then assigns a named segment from an ordered rule table.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Mapping, Optional, Tuple

import polars as pl
import structlog

from storefront_analytics.analytics.frames import OrderFrames, qualifying_orders
from storefront_analytics.analytics.records import CustomerRecord
from storefront_analytics.analytics.views import CustomerRFM, SegmentSummary, SegmentationReport
from storefront_analytics.analytics.windows import DateWindow

logger = structlog.get_logger(__name__)

SECONDS_PER_DAY = 86400

# (upper bound in days, score): first bound the recency fits under wins
RECENCY_BREAKPOINTS = ((30, 5), (60, 4), (90, 3), (180, 2))
# (lower bound, score): first bound the value reaches wins
FREQUENCY_BREAKPOINTS = ((10, 5), (5, 4), (3, 3), (2, 2))
MONETARY_BREAKPOINTS = ((1000, 5), (500, 4), (200, 3), (100, 2))

NEW_CUSTOMER = "New Customer"


@dataclass(frozen=True)
class SegmentRule:
    name: str
    applies: Callable[[int, int, int], bool]


SEGMENT_RULES: Tuple[SegmentRule, ...] = (
    SegmentRule("Champions", lambda r, f, m: r >= 4 and f >= 4 and m >= 4),
    SegmentRule("Loyal Customers", lambda r, f, m: r >= 3 and f >= 3 and m >= 3),
    SegmentRule("Potential Loyalists", lambda r, f, m: r >= 4 and f <= 2),
    SegmentRule("At Risk", lambda r, f, m: r <= 2 and f >= 3),
    SegmentRule("Cannot Lose Them", lambda r, f, m: r <= 2 and f <= 2 and m >= 3),
    SegmentRule("Lost Customers", lambda r, f, m: r <= 2 and f <= 2),
)

SEGMENT_ORDER = [rule.name for rule in SEGMENT_RULES] + [NEW_CUSTOMER]


def score_recency(days: float) -> int:
    for bound, score in RECENCY_BREAKPOINTS:
        if days <= bound:
            return score
    return 1


def score_frequency(orders: int) -> int:
    for bound, score in FREQUENCY_BREAKPOINTS:
        if orders >= bound:
            return score
    return 1


def score_monetary(value: float) -> int:
    for bound, score in MONETARY_BREAKPOINTS:
        if value >= bound:
            return score
    return 1


def assign_segment(recency_score: int, frequency_score: int, monetary_score: int) -> str:
    """Segment name for a score triple; New Customer when no rule matches."""
    for rule in SEGMENT_RULES:
        if rule.applies(recency_score, frequency_score, monetary_score):
            return rule.name
    return NEW_CUSTOMER


def score_customer(
    user_id: str,
    recency_days: float,
    frequency: int,
    monetary: float,
    customer: Optional[CustomerRecord] = None,
    first_order: Optional[datetime] = None,
    last_order: Optional[datetime] = None,
) -> CustomerRFM:
    """Score one customer and assign their segment"""
    r = score_recency(recency_days)
    f = score_frequency(frequency)
    m = score_monetary(monetary)
    return CustomerRFM(
        user_id=user_id,
        name=customer.name if customer else None,
        email=customer.email if customer else None,
        recency_days=recency_days,
        frequency=frequency,
        monetary=monetary,
        first_order=first_order,
        last_order=last_order,
        recency_score=r,
        frequency_score=f,
        monetary_score=m,
        segment=assign_segment(r, f, m),
        rfm_score=f"{r}{f}{m}",
    )


def summarize_segments(customers: List[CustomerRFM]) -> List[SegmentSummary]:
    """Per-segment counts, total value and averages, in rule-table order"""
    grouped: Dict[str, List[CustomerRFM]] = {}
    for customer in customers:
        grouped.setdefault(customer.segment, []).append(customer)

    summaries = []
    for name in SEGMENT_ORDER:
        members = grouped.get(name)
        if not members:
            continue
        count = len(members)
        total_value = sum(member.monetary for member in members)
        summaries.append(
            SegmentSummary(
                name=name,
                count=count,
                total_value=total_value,
                avg_recency=sum(member.recency_days for member in members) / count,
                avg_frequency=sum(member.frequency for member in members) / count,
                avg_monetary=total_value / count,
            )
        )
    return summaries


def customer_order_stats(frames: OrderFrames, window: DateWindow) -> pl.DataFrame:
    """Last/first order, order count and spend per customer"""
    return qualifying_orders(frames, window).group_by("user_id").agg(
        pl.col("ordered_at").max().alias("last_order"),
        pl.col("ordered_at").min().alias("first_order"),
        pl.len().alias("frequency"),
        pl.col("total_price").sum().alias("monetary"),
    )


def segment_customers(
    frames: OrderFrames,
    window: DateWindow,
    now: datetime,
    customers: Optional[Mapping[str, CustomerRecord]] = None,
    cap: int = 100,
) -> SegmentationReport:
    """
    RFM-score every customer with a qualifying order in the window.

    Args:
        frames: Order frames
        window: Inclusive analysis window
        now: Reference time for recency
        customers: User records by id; unknown users are scored without a name
        cap: Maximum customers listed (highest spend first)

    Returns:
        SegmentationReport with the capped customer list and segment summaries
    """
    customers = customers or {}
    scored = []
    for row in customer_order_stats(frames, window).iter_rows(named=True):
        user_id = row["user_id"]
        last_order = row["last_order"]
        scored.append(
            score_customer(
                user_id=user_id,
                recency_days=(now - last_order).total_seconds() / SECONDS_PER_DAY,
                frequency=int(row["frequency"]),
                monetary=float(row["monetary"]),
                customer=customers.get(user_id),
                first_order=row["first_order"],
                last_order=last_order,
            )
        )

    scored.sort(key=lambda customer: (-customer.monetary, customer.user_id))
    logger.debug("Customers segmented", customers=len(scored))

    return SegmentationReport(
        customers=scored[:cap],
        segments=summarize_segments(scored),
        total_customers=len(scored),
    )
