"""
Data Quality Score

Grades how much an overview can be trusted: recent window, enough orders,
a comparison period, and clean source records.
"""

from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from storefront_analytics.analytics.views import DataQualityReport, MetricSnapshot
from storefront_analytics.analytics.windows import DateWindow
from storefront_analytics.quality.validators import ValidationResult

MISSING_KPIS_PENALTY = 20
STALE_WINDOW_PENALTY = 15
LOW_VOLUME_PENALTY = 10
NO_COMPARISON_PENALTY = 5
FAILED_CHECK_PENALTY = 5

LOW_VOLUME_ORDERS = 10
STALE_AFTER = timedelta(days=7)

SCORE_LABELS = ((90, "Excellent"), (70, "Good"), (50, "Fair"))


def score_label(score: int) -> str:
    for floor, label in SCORE_LABELS:
        if score >= floor:
            return label
    return "Poor"


def assess_data_quality(
    snapshot: MetricSnapshot,
    window: DateWindow,
    compare_window: Optional[DateWindow],
    now: datetime,
    validations: Sequence[ValidationResult] = (),
) -> DataQualityReport:
    """
    Score the data behind an overview from 0 to 100.

    Args:
        snapshot: KPI snapshot for the window
        window: Analysis window
        compare_window: Comparison window, if any
        now: Reference time for staleness
        validations: Record validation results for the source data

    Returns:
        DataQualityReport with score, label and the issues found
    """
    score = 100
    issues: List[str] = []

    if snapshot.orders == 0:
        issues.append("Missing KPI data")
        score -= MISSING_KPIS_PENALTY

    if window.end < now - STALE_AFTER:
        issues.append("Data is more than a week old")
        score -= STALE_WINDOW_PENALTY

    if snapshot.orders < LOW_VOLUME_ORDERS:
        issues.append("Low order volume may affect accuracy")
        score -= LOW_VOLUME_PENALTY

    if compare_window is None:
        issues.append("No comparison period selected")
        score -= NO_COMPARISON_PENALTY

    for result in validations:
        for check in result.failed:
            issues.append(check.message)
            score -= FAILED_CHECK_PENALTY

    score = max(0, score)
    return DataQualityReport(score=score, label=score_label(score), issues=issues)
