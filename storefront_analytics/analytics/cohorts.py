"""
Cohort Engine

Groups customers by the month of their first qualifying order inside the
analysis window and tracks how many of them order again in each following
month.

First purchase is relative to the queried window: an earlier order outside
the window does not move a customer into an older cohort.
"""

from typing import Dict, Tuple

import polars as pl
import structlog

from storefront_analytics.analytics.frames import OrderFrames, qualifying_orders
from storefront_analytics.analytics.views import Cohort, CohortReport, RetentionPoint
from storefront_analytics.analytics.windows import DateWindow

logger = structlog.get_logger(__name__)


def month_key(month_index: int) -> str:
    """YYYY-MM for a month index counted as year * 12 + (month - 1)"""
    year, month = divmod(month_index, 12)
    return f"{year:04d}-{month + 1:02d}"


def build_cohorts(frames: OrderFrames, window: DateWindow, months: int = 12) -> CohortReport:
    """
    Monthly acquisition cohorts with retention for offsets 0..months-1.

    Args:
        frames: Order frames
        window: Inclusive analysis window
        months: Number of retention offsets per cohort

    Returns:
        CohortReport keyed by cohort month, months ascending
    """
    activity = (
        qualifying_orders(frames, window)
        .select(
            "user_id",
            (
                pl.col("ordered_at").dt.year().cast(pl.Int64) * 12
                + pl.col("ordered_at").dt.month().cast(pl.Int64)
                - 1
            ).alias("month_index"),
        )
        .unique()
    )

    first_months = activity.group_by("user_id").agg(
        pl.col("month_index").min().alias("cohort_index")
    )
    sizes = first_months.group_by("cohort_index").agg(pl.len().alias("size"))

    retained = (
        activity.join(first_months, on="user_id", how="inner")
        .with_columns((pl.col("month_index") - pl.col("cohort_index")).alias("offset"))
        .filter(pl.col("offset") < months)
        .group_by(["cohort_index", "offset"])
        .agg(pl.col("user_id").n_unique().alias("users"))
    )
    retained_users: Dict[Tuple[int, int], int] = {
        (row["cohort_index"], row["offset"]): row["users"]
        for row in retained.iter_rows(named=True)
    }

    report = CohortReport()
    for row in sizes.sort("cohort_index").iter_rows(named=True):
        cohort_index = row["cohort_index"]
        size = int(row["size"])
        cohort_month = month_key(cohort_index)

        retention = []
        for offset in range(months):
            users = int(retained_users.get((cohort_index, offset), 0))
            rate = users * 100 / size if size > 0 else 0.0
            retention.append(RetentionPoint(month=offset, users=users, rate=rate))

        report.cohorts[cohort_month] = Cohort(cohort_month=cohort_month, size=size, retention=retention)
        report.months.append(cohort_month)

    logger.debug("Cohorts built", cohorts=len(report.months), customers=first_months.height)
    return report
