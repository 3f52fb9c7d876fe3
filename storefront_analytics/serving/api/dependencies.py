"""
API Dependencies

Builds a request-scoped AnalyticsService over SQL repositories and the
application's shared result cache.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from storefront_analytics.analytics.service import AnalyticsService
from storefront_analytics.config import get_settings
from storefront_analytics.database.connection import get_read_session
from storefront_analytics.database.repositories import (
    SQLOrderRepository,
    SQLProductRepository,
    SQLUserRepository,
)
from storefront_analytics.serving.cache import ResultCache


def get_result_cache(request: Request) -> ResultCache:
    return request.app.state.result_cache


async def get_analytics_service(
    cache: ResultCache = Depends(get_result_cache),
    db: AsyncSession = Depends(get_read_session),
) -> AnalyticsService:
    return AnalyticsService(
        orders=SQLOrderRepository(db),
        products=SQLProductRepository(db),
        users=SQLUserRepository(db),
        cache=cache,
        settings=get_settings().analytics,
    )
