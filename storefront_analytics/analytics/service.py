"""
Analytics Service

Entry point for every dashboard operation. Each call validates its
parameters, consults the result cache, reads records through the
repositories and runs the metrics engine, returning a JSON-ready dict.
"""

from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

import polars as pl
import structlog

from storefront_analytics.analytics.cohorts import build_cohorts
from storefront_analytics.analytics.errors import AnalyticsError, DataFetchError
from storefront_analytics.analytics.export import (
    EXPORT_DATASETS,
    kpis_to_csv,
    products_to_csv,
    trends_to_csv,
)
from storefront_analytics.analytics.frames import (
    OrderFrames,
    build_order_frames,
    build_product_frame,
)
from storefront_analytics.analytics.insights import generate_insights
from storefront_analytics.analytics.inventory import score_inventory_risk
from storefront_analytics.analytics.metrics import compute_snapshot, kpis_with_deltas
from storefront_analytics.analytics.rankings import (
    RANKING_METRICS,
    rank_products,
    rollup_categories,
)
from storefront_analytics.analytics.records import (
    QUALIFYING_STATUSES,
    OrderRecord,
    utc_now,
)
from storefront_analytics.analytics.segmentation import segment_customers
from storefront_analytics.analytics.trends import INTERVALS, aggregate_trends
from storefront_analytics.analytics.views import KPIWithDelta
from storefront_analytics.analytics.windows import (
    DateWindow,
    format_timestamp,
    parse_bounded_int,
    parse_choice,
    resolve_compare_window,
    resolve_window,
    trailing_window,
)
from storefront_analytics.config.settings import AnalyticsSettings, get_settings
from storefront_analytics.database.repositories import (
    OrderRepository,
    ProductRepository,
    UserRepository,
)
from storefront_analytics.quality.scoring import assess_data_quality
from storefront_analytics.quality.validators import validate_records
from storefront_analytics.serving.cache import ResultCache, make_cache_key

logger = structlog.get_logger(__name__)


class AnalyticsService:
    """
    Dashboard analytics over the order, product and user repositories.

    Example:
        service = AnalyticsService(orders, products, users, ResultCache())
        payload = await service.overview(from_="2024-01-01", to="2024-01-31")
    """

    def __init__(
        self,
        orders: OrderRepository,
        products: ProductRepository,
        users: UserRepository,
        cache: ResultCache,
        settings: Optional[AnalyticsSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.orders = orders
        self.products = products
        self.users = users
        self.cache = cache
        self.settings = settings or get_settings().analytics
        self._clock = clock or utc_now

    # -------------------------------------------------------------------------
    # Record access
    # -------------------------------------------------------------------------

    async def _fetch(self, source: str, fetch: Callable[..., Awaitable[Any]], *args: Any) -> Any:
        """Run a repository call, surfacing storage failures as DataFetchError"""
        try:
            return await fetch(*args)
        except AnalyticsError:
            raise
        except Exception as e:
            logger.error(
                "Analytics data fetch failed",
                source=source,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise DataFetchError(source) from e

    async def _order_frames(self, window: DateWindow, qualifying_only: bool = False) -> OrderFrames:
        statuses = QUALIFYING_STATUSES if qualifying_only else None
        orders: List[OrderRecord] = await self._fetch(
            "orders", self.orders.find_orders, window.start, window.end, statuses
        )
        return build_order_frames(orders)

    async def _products_for(self, frames: OrderFrames) -> pl.DataFrame:
        product_ids = frames.items["product_id"].unique().to_list()
        products = await self._fetch("products", self.products.get_products, product_ids)
        return build_product_frame(products.values())

    async def _all_products(self) -> pl.DataFrame:
        products = await self._fetch("products", self.products.list_products)
        return build_product_frame(products)

    @staticmethod
    def _window_key(
        window: DateWindow,
        from_: Optional[str],
        to: Optional[str],
        compare: Optional[DateWindow] = None,
    ) -> Dict[str, Any]:
        """
        Cache key parameters for a window.

        Only explicit bounds are keyed, in their parsed form; a bound left to
        default stays None so relative windows follow the clock.
        """
        params: Dict[str, Any] = {
            "from": format_timestamp(window.start) if from_ else None,
            "to": format_timestamp(window.end) if to else None,
        }
        if compare is not None:
            params["compareFrom"] = format_timestamp(compare.start)
            params["compareTo"] = format_timestamp(compare.end)
        return params

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def overview(
        self,
        from_: Optional[str] = None,
        to: Optional[str] = None,
        compare_from: Optional[str] = None,
        compare_to: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        KPIs for the window with deltas against an optional comparison window.

        Returns:
            {range, kpis, compareRange}; compareRange is None without comparison
        """
        window = resolve_window(from_, to, self.settings.default_window_days, self._clock())
        compare = resolve_compare_window(compare_from, compare_to)

        async def compute() -> Dict[str, Any]:
            span = window
            if compare is not None:
                span = DateWindow(min(window.start, compare.start), max(window.end, compare.end))
            frames = await self._order_frames(span)
            products = await self._products_for(frames)

            current = compute_snapshot(frames, products, window, self.settings.conversion_rate)
            previous = (
                compute_snapshot(frames, products, compare, self.settings.conversion_rate)
                if compare is not None
                else None
            )
            kpis = kpis_with_deltas(current, previous)
            return {
                "range": window.to_dict(),
                "kpis": {name: kpi.to_payload() for name, kpi in kpis.items()},
                "compareRange": compare.to_dict() if compare is not None else None,
            }

        key = make_cache_key("overview", self._window_key(window, from_, to, compare))
        return await self.cache.get_or_set(key, compute)

    async def trends(
        self,
        from_: Optional[str] = None,
        to: Optional[str] = None,
        interval: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Revenue, orders and units per day, ISO week or month"""
        window = resolve_window(from_, to, self.settings.default_window_days, self._clock())
        bucket = parse_choice(interval, "interval", INTERVALS, "day")

        async def compute() -> Dict[str, Any]:
            frames = await self._order_frames(window, qualifying_only=True)
            points = aggregate_trends(frames, window, bucket)
            return {"interval": bucket, "trends": [point.to_payload() for point in points]}

        key = make_cache_key("trends", {**self._window_key(window, from_, to), "interval": bucket})
        return await self.cache.get_or_set(key, compute)

    async def top_products(
        self,
        from_: Optional[str] = None,
        to: Optional[str] = None,
        limit: Optional[Union[int, str]] = None,
        metric: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Best-selling products by revenue or units"""
        window = resolve_window(from_, to, self.settings.default_window_days, self._clock())
        size = parse_bounded_int(
            limit, "limit", self.settings.top_products_limit, 1, self.settings.max_products_limit
        )
        rank_by = parse_choice(metric, "metric", RANKING_METRICS, "revenue")

        async def compute() -> Dict[str, Any]:
            frames = await self._order_frames(window, qualifying_only=True)
            products = await self._products_for(frames)
            ranked = rank_products(frames, products, window, rank_by, size)
            return {"metric": rank_by, "products": [entry.to_payload() for entry in ranked]}

        key = make_cache_key(
            "products", {**self._window_key(window, from_, to), "limit": size, "metric": rank_by}
        )
        return await self.cache.get_or_set(key, compute)

    async def category_performance(
        self,
        from_: Optional[str] = None,
        to: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Revenue, units and product count per category"""
        window = resolve_window(from_, to, self.settings.default_window_days, self._clock())

        async def compute() -> Dict[str, Any]:
            frames = await self._order_frames(window, qualifying_only=True)
            products = await self._products_for(frames)
            rollups = rollup_categories(frames, products, window)
            return {"categories": [rollup.to_payload() for rollup in rollups]}

        key = make_cache_key("categories", self._window_key(window, from_, to))
        return await self.cache.get_or_set(key, compute)

    async def inventory_risk(
        self,
        threshold: Optional[Union[int, str]] = None,
        safety_days: Optional[Union[int, str]] = None,
        window_days: Optional[Union[int, str]] = None,
    ) -> Dict[str, Any]:
        """Products at risk of stocking out, from trailing sales velocity"""
        critical = parse_bounded_int(
            threshold, "threshold", self.settings.critical_stock_threshold, 0
        )
        safety = parse_bounded_int(safety_days, "safetyDays", self.settings.safety_days, 1)
        velocity_days = parse_bounded_int(window_days, "windowDays", safety, 1)
        now = self._clock()

        async def compute() -> Dict[str, Any]:
            frames = await self._order_frames(
                trailing_window(now, velocity_days), qualifying_only=True
            )
            products = await self._all_products()
            report = score_inventory_risk(
                frames,
                products,
                now,
                threshold=critical,
                safety_days=safety,
                window_days=velocity_days,
                critical_cover_days=self.settings.critical_cover_days,
            )
            return report.to_payload()

        key = make_cache_key(
            "inventory-risk",
            {"threshold": critical, "safetyDays": safety, "windowDays": velocity_days},
        )
        return await self.cache.get_or_set(key, compute)

    async def cohort_analysis(
        self,
        from_: Optional[str] = None,
        to: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Monthly acquisition cohorts with retention"""
        window = resolve_window(from_, to, self.settings.cohort_window_days, self._clock())

        async def compute() -> Dict[str, Any]:
            frames = await self._order_frames(window, qualifying_only=True)
            report = build_cohorts(frames, window, self.settings.retention_months)
            return report.to_payload()

        key = make_cache_key("cohorts", self._window_key(window, from_, to))
        return await self.cache.get_or_set(key, compute)

    async def customer_segments(
        self,
        from_: Optional[str] = None,
        to: Optional[str] = None,
    ) -> Dict[str, Any]:
        """RFM scores per customer and per-segment summaries"""
        now = self._clock()
        window = resolve_window(from_, to, self.settings.segments_window_days, now)

        async def compute() -> Dict[str, Any]:
            frames = await self._order_frames(window, qualifying_only=True)
            user_ids = frames.orders["user_id"].unique().to_list()
            customers = await self._fetch("users", self.users.get_customers, user_ids)
            report = segment_customers(
                frames, window, now, customers, cap=self.settings.customer_list_cap
            )
            return report.to_payload()

        key = make_cache_key("customer-segments", self._window_key(window, from_, to))
        return await self.cache.get_or_set(key, compute)

    # -------------------------------------------------------------------------
    # Dashboard extras
    # -------------------------------------------------------------------------

    async def insights(
        self,
        from_: Optional[str] = None,
        to: Optional[str] = None,
        compare_from: Optional[str] = None,
        compare_to: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Actionable observations derived from the overview KPIs"""
        overview = await self.overview(from_, to, compare_from, compare_to)
        kpis = {
            name: KPIWithDelta.model_validate(kpi) for name, kpi in overview["kpis"].items()
        }
        return {
            "range": overview["range"],
            "insights": [insight.to_payload() for insight in generate_insights(kpis)],
        }

    async def data_quality(
        self,
        from_: Optional[str] = None,
        to: Optional[str] = None,
        compare_from: Optional[str] = None,
        compare_to: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Trust score for the overview window plus the record checks that failed"""
        now = self._clock()
        window = resolve_window(from_, to, self.settings.default_window_days, now)
        compare = resolve_compare_window(compare_from, compare_to)

        async def compute() -> Dict[str, Any]:
            frames = await self._order_frames(window)
            products = await self._all_products()
            snapshot = compute_snapshot(frames, products, window, self.settings.conversion_rate)
            validations = validate_records(frames, products)
            report = assess_data_quality(snapshot, window, compare, now, validations)
            return {"range": window.to_dict(), **report.to_payload()}

        key = make_cache_key("data-quality", self._window_key(window, from_, to, compare))
        return await self.cache.get_or_set(key, compute)

    async def export_csv(
        self,
        dataset: str,
        from_: Optional[str] = None,
        to: Optional[str] = None,
        compare_from: Optional[str] = None,
        compare_to: Optional[str] = None,
        interval: Optional[str] = None,
        limit: Optional[Union[int, str]] = None,
        metric: Optional[str] = None,
    ) -> str:
        """
        Render a dashboard dataset as CSV.

        Args:
            dataset: One of kpis, trends or products
            from_, to: Analysis window
            compare_from, compare_to: Comparison window for KPI deltas
            interval: Trend bucket size
            limit, metric: Product ranking options

        Returns:
            CSV text with a header row
        """
        name = parse_choice(dataset, "dataset", EXPORT_DATASETS, "kpis")

        if name == "kpis":
            overview = await self.overview(from_, to, compare_from, compare_to)
            return kpis_to_csv(overview["kpis"])
        if name == "trends":
            trends = await self.trends(from_, to, interval)
            return trends_to_csv(trends["trends"])
        ranked = await self.top_products(from_, to, limit, metric)
        return products_to_csv(ranked["products"])

