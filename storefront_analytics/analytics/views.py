"""
Computed Views

Pydantic models for every derived entity the engine produces. Field names
are snake_case in Python and serialized in camelCase for API consumers.
"""

from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing with camelCase aliases"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict:
        """JSON-ready dict using camelCase keys"""
        return self.model_dump(by_alias=True, mode="json")


class MetricSnapshot(CamelModel):
    """Scalar KPIs for one date window"""
    gross_revenue: float = 0.0
    orders: int = 0
    aov: float = 0.0
    units: int = 0
    active_customers: int = 0
    refund_rate: float = 0.0
    gross_margin_pct: float = 0.0
    conversion_rate: float = 0.0


class KPIWithDelta(CamelModel):
    """KPI value with percentage change against the comparison period"""
    value: Union[int, float]
    delta_pct: float = 0.0


class TrendPoint(CamelModel):
    """Revenue, orders and units for one time bucket"""
    bucket_key: str
    revenue: float
    orders: int
    units: int


class ProductRanking(CamelModel):
    """Sales totals for one product"""
    product_id: str
    name: str
    category: str
    revenue: float
    units: int
    orders: int
    avg_order_value: float


class CategoryRollup(CamelModel):
    """Sales totals for one category"""
    category: str
    revenue: float
    units: int
    orders: int
    product_count: int
    avg_order_value: float


class RiskEntry(CamelModel):
    """Stock-out risk for one product"""
    product_id: str
    name: str
    category: str
    current_stock: int
    daily_velocity: float
    days_of_cover: Optional[float] = None
    risk_level: str
    risk_reason: str


class InventoryRiskSummary(CamelModel):
    total_at_risk: int
    critical: int
    low_stock: int


class InventoryRiskReport(CamelModel):
    risk_products: List[RiskEntry] = Field(default_factory=list)
    summary: InventoryRiskSummary


class RetentionPoint(CamelModel):
    """Cohort members active `month` months after the cohort month"""
    month: int
    users: int
    rate: float


class Cohort(CamelModel):
    cohort_month: str
    size: int
    retention: List[RetentionPoint] = Field(default_factory=list)


class CohortReport(CamelModel):
    cohorts: Dict[str, Cohort] = Field(default_factory=dict)
    months: List[str] = Field(default_factory=list)


class CustomerRFM(CamelModel):
    """Recency/frequency/monetary scoring for one customer"""
    user_id: str
    name: Optional[str] = None
    email: Optional[str] = None
    recency_days: float
    frequency: int
    monetary: float
    first_order: Optional[datetime] = None
    last_order: Optional[datetime] = None
    recency_score: int
    frequency_score: int
    monetary_score: int
    segment: str
    rfm_score: str


class SegmentSummary(CamelModel):
    name: str
    count: int
    total_value: float
    avg_recency: float
    avg_frequency: float
    avg_monetary: float


class SegmentationReport(CamelModel):
    customers: List[CustomerRFM] = Field(default_factory=list)
    segments: List[SegmentSummary] = Field(default_factory=list)
    total_customers: int = 0


class Insight(CamelModel):
    """Actionable observation derived from overview KPIs"""
    type: str
    title: str
    message: str
    action: str


class DataQualityReport(CamelModel):
    score: int
    label: str
    issues: List[str] = Field(default_factory=list)
