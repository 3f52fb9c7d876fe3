"""
Analytics API Endpoints

REST API for the admin analytics dashboard. Query values are passed to the
service unparsed so malformed input is reported as a 400 naming the
offending parameter.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Response
import structlog

from storefront_analytics.analytics.service import AnalyticsService
from storefront_analytics.serving.api.dependencies import get_analytics_service

router = APIRouter()
logger = structlog.get_logger(__name__)

FromQuery = Query(None, alias="from", description="Window start (ISO date or datetime)")
ToQuery = Query(None, alias="to", description="Window end (ISO date or datetime, inclusive)")
CompareFromQuery = Query(None, alias="compareFrom", description="Comparison window start")
CompareToQuery = Query(None, alias="compareTo", description="Comparison window end")


@router.get("/overview")
async def get_overview(
    from_: Optional[str] = FromQuery,
    to: Optional[str] = ToQuery,
    compare_from: Optional[str] = CompareFromQuery,
    compare_to: Optional[str] = CompareToQuery,
    service: AnalyticsService = Depends(get_analytics_service),
) -> Dict[str, Any]:
    """
    KPI overview with optional comparison to another period.
    """
    logger.debug("get_overview called", start=from_, end=to, compare_from=compare_from)
    return await service.overview(from_, to, compare_from, compare_to)


@router.get("/trends")
async def get_trends(
    from_: Optional[str] = FromQuery,
    to: Optional[str] = ToQuery,
    interval: Optional[str] = Query(None, description="day, week or month"),
    service: AnalyticsService = Depends(get_analytics_service),
) -> Dict[str, Any]:
    """Revenue, orders and units per time bucket."""
    return await service.trends(from_, to, interval)


@router.get("/products")
async def get_top_products(
    from_: Optional[str] = FromQuery,
    to: Optional[str] = ToQuery,
    limit: Optional[str] = Query(None, description="Number of products to return"),
    metric: Optional[str] = Query(None, description="revenue or units"),
    service: AnalyticsService = Depends(get_analytics_service),
) -> Dict[str, Any]:
    """Top products by revenue or units sold."""
    return await service.top_products(from_, to, limit, metric)


@router.get("/categories")
async def get_category_performance(
    from_: Optional[str] = FromQuery,
    to: Optional[str] = ToQuery,
    service: AnalyticsService = Depends(get_analytics_service),
) -> Dict[str, Any]:
    return await service.category_performance(from_, to)


@router.get("/inventory-risk")
async def get_inventory_risk(
    threshold: Optional[str] = Query(None, description="Critical stock threshold"),
    safety_days: Optional[str] = Query(None, alias="safetyDays", description="Days of cover considered safe"),
    window_days: Optional[str] = Query(None, alias="windowDays", description="Trailing sales velocity window"),
    service: AnalyticsService = Depends(get_analytics_service),
) -> Dict[str, Any]:
    """Products likely to stock out soon."""
    return await service.inventory_risk(threshold, safety_days, window_days)


@router.get("/cohorts")
async def get_cohort_analysis(
    from_: Optional[str] = FromQuery,
    to: Optional[str] = ToQuery,
    service: AnalyticsService = Depends(get_analytics_service),
) -> Dict[str, Any]:
    return await service.cohort_analysis(from_, to)


@router.get("/customer-segments")
async def get_customer_segments(
    from_: Optional[str] = FromQuery,
    to: Optional[str] = ToQuery,
    service: AnalyticsService = Depends(get_analytics_service),
) -> Dict[str, Any]:
    """RFM segmentation of customers active in the window."""
    return await service.customer_segments(from_, to)


@router.get("/insights")
async def get_insights(
    from_: Optional[str] = FromQuery,
    to: Optional[str] = ToQuery,
    compare_from: Optional[str] = CompareFromQuery,
    compare_to: Optional[str] = CompareToQuery,
    service: AnalyticsService = Depends(get_analytics_service),
) -> Dict[str, Any]:
    return await service.insights(from_, to, compare_from, compare_to)


@router.get("/data-quality")
async def get_data_quality(
    from_: Optional[str] = FromQuery,
    to: Optional[str] = ToQuery,
    compare_from: Optional[str] = CompareFromQuery,
    compare_to: Optional[str] = CompareToQuery,
    service: AnalyticsService = Depends(get_analytics_service),
) -> Dict[str, Any]:
    """Confidence score for the overview window."""
    return await service.data_quality(from_, to, compare_from, compare_to)


@router.get("/export/{dataset}")
async def export_dataset(
    dataset: str,
    from_: Optional[str] = FromQuery,
    to: Optional[str] = ToQuery,
    compare_from: Optional[str] = CompareFromQuery,
    compare_to: Optional[str] = CompareToQuery,
    interval: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    metric: Optional[str] = Query(None),
    service: AnalyticsService = Depends(get_analytics_service),
) -> Response:
    """
    Download kpis, trends or products as CSV.
    """
    content = await service.export_csv(
        dataset,
        from_,
        to,
        compare_from=compare_from,
        compare_to=compare_to,
        interval=interval,
        limit=limit,
        metric=metric,
    )
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="analytics-{dataset.lower()}.csv"'},
    )
