"""
KPI Insights

Turns overview KPIs into short, actionable observations for the admin
dashboard. Rules run in order and at most MAX_INSIGHTS are returned.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from storefront_analytics.analytics.views import Insight, KPIWithDelta

MAX_INSIGHTS = 4

KPIs = Dict[str, KPIWithDelta]


@dataclass(frozen=True)
class InsightRule:
    """Produces an insight when `applies` holds for the KPIs"""
    type: str
    title: str
    applies: Callable[[KPIs], bool]
    message: Callable[[KPIs], str]
    action: str


def _value(kpis: KPIs, name: str) -> float:
    kpi = kpis.get(name)
    return kpi.value if kpi else 0.0


def _delta(kpis: KPIs, name: str) -> float:
    kpi = kpis.get(name)
    return kpi.delta_pct if kpi else 0.0


def orders_per_customer(kpis: KPIs) -> Optional[float]:
    customers = _value(kpis, "activeCustomers")
    if customers <= 0:
        return None
    return _value(kpis, "orders") / customers


INSIGHT_RULES = (
    InsightRule(
        "positive",
        "Strong Revenue Growth",
        lambda k: _delta(k, "grossRevenue") > 10,
        lambda k: f"Revenue is up {_delta(k, 'grossRevenue'):.1f}% compared to the previous period.",
        "Consider scaling successful marketing campaigns.",
    ),
    InsightRule(
        "warning",
        "Revenue Decline",
        lambda k: _delta(k, "grossRevenue") < -10,
        lambda k: f"Revenue is down {abs(_delta(k, 'grossRevenue')):.1f}% compared to the previous period.",
        "Review marketing strategies and customer feedback.",
    ),
    InsightRule(
        "positive",
        "High Average Order Value",
        lambda k: _value(k, "aov") > 100,
        lambda k: f"Your AOV of ${_value(k, 'aov'):.2f} indicates customers are purchasing premium items.",
        "Focus on upselling and cross-selling strategies.",
    ),
    InsightRule(
        "info",
        "Opportunity for AOV Growth",
        lambda k: 0 < _value(k, "aov") < 50,
        lambda k: f"Current AOV is ${_value(k, 'aov'):.2f}. There's room for improvement.",
        "Consider bundling products or offering volume discounts.",
    ),
    InsightRule(
        "positive",
        "Healthy Profit Margins",
        lambda k: _value(k, "grossMarginPct") > 40,
        lambda k: f"Gross margin of {_value(k, 'grossMarginPct'):.1f}% indicates good pricing strategy.",
        "Maintain current pricing while monitoring competition.",
    ),
    InsightRule(
        "warning",
        "Low Profit Margins",
        lambda k: 0 < _value(k, "grossMarginPct") < 20,
        lambda k: f"Gross margin of {_value(k, 'grossMarginPct'):.1f}% may impact profitability.",
        "Review product costs and pricing strategy.",
    ),
    InsightRule(
        "warning",
        "High Refund Rate",
        lambda k: _value(k, "refundRate") > 5,
        lambda k: f"Refund rate of {_value(k, 'refundRate'):.1f}% is above industry average.",
        "Investigate product quality and customer satisfaction.",
    ),
    InsightRule(
        "positive",
        "Low Refund Rate",
        lambda k: _value(k, "orders") > 0 and _value(k, "refundRate") < 2,
        lambda k: f"Refund rate of {_value(k, 'refundRate'):.1f}% indicates high customer satisfaction.",
        "Continue current quality standards.",
    ),
    InsightRule(
        "positive",
        "High Customer Loyalty",
        lambda k: (orders_per_customer(k) or 0) > 2,
        lambda k: f"Customers are placing {orders_per_customer(k):.1f} orders on average.",
        "Implement loyalty programs to further increase retention.",
    ),
    InsightRule(
        "info",
        "Customer Retention Opportunity",
        lambda k: orders_per_customer(k) is not None and orders_per_customer(k) < 1.2,
        lambda k: "Most customers are placing only one order.",
        "Focus on email marketing and retargeting campaigns.",
    ),
)


def generate_insights(kpis: KPIs, limit: int = MAX_INSIGHTS) -> List[Insight]:
    """
    Insights for a set of overview KPIs keyed by camelCase metric name.

    Windows without orders yield no AOV, margin, refund or loyalty insights.
    """
    insights = []
    for rule in INSIGHT_RULES:
        if rule.applies(kpis):
            insights.append(
                Insight(type=rule.type, title=rule.title, message=rule.message(kpis), action=rule.action)
            )
        if len(insights) >= limit:
            break
    return insights
