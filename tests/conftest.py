"""
Test Suite Configuration
"""
from datetime import datetime
from typing import AsyncGenerator, Callable, List, Sequence, Tuple

import pytest
import polars as pl
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from storefront_analytics.analytics.frames import (
    OrderFrames,
    build_order_frames,
    build_product_frame,
)
from storefront_analytics.analytics.records import (
    CustomerRecord,
    LineItem,
    OrderRecord,
    OrderStatus,
    ProductRecord,
)
from storefront_analytics.analytics.service import AnalyticsService
from storefront_analytics.config import AnalyticsSettings
from storefront_analytics.database.models import Base
from storefront_analytics.database.repositories import (
    InMemoryOrderRepository,
    InMemoryProductRepository,
    InMemoryUserRepository,
)
from storefront_analytics.serving.cache import ResultCache

NOW = datetime(2024, 6, 30, 12, 0, 0)


def make_order(
    order_id: str,
    user_id: str,
    ordered_at: datetime,
    status: OrderStatus,
    total: float,
    items: Sequence[Tuple[str, int]] = (),
) -> OrderRecord:
    return OrderRecord(
        order_id=order_id,
        user_id=user_id,
        ordered_at=ordered_at,
        status=status,
        total_price=total,
        items=tuple(LineItem(product_id=pid, quantity=qty) for pid, qty in items),
    )


class FakeClock:
    """Monotonic clock the tests advance by hand"""

    def __init__(self, start: float = 1000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


class CountingOrderRepository(InMemoryOrderRepository):
    """In-memory orders that count how often they are read"""

    def __init__(self, orders=()):
        super().__init__(orders)
        self.calls = 0

    async def find_orders(self, start=None, end=None, statuses=None):
        self.calls += 1
        return await super().find_orders(start, end, statuses)


class FailingOrderRepository(InMemoryOrderRepository):
    async def find_orders(self, start=None, end=None, statuses=None):
        raise ConnectionError("connection refused")


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def order_factory() -> Callable[..., OrderRecord]:
    return make_order


@pytest.fixture
def sample_products() -> List[ProductRecord]:
    """Catalog with one product of unknown cost and one without category"""
    return [
        ProductRecord("p1", "Laptop", "Electronics", price=100.0, cost=60.0, stock=50),
        ProductRecord("p2", "Mouse", "Electronics", price=20.0, cost=0.0, stock=3),
        ProductRecord("p3", "Novel", "Books", price=10.0, cost=4.0, stock=8),
        ProductRecord("p4", "Lamp", None, price=40.0, cost=10.0, stock=100),
    ]


@pytest.fixture
def sample_customers() -> List[CustomerRecord]:
    return [
        CustomerRecord("u1", "Alice Doe", "alice@example.com"),
        CustomerRecord("u2", "Bob Smith", "bob@example.com"),
    ]


@pytest.fixture
def sample_orders() -> List[OrderRecord]:
    """
    June 2024: three qualifying orders (290.00), one cancelled, one pending.
    May 2024: two delivered orders (200.00) used as the comparison period.
    """
    return [
        make_order("o1", "u1", datetime(2024, 6, 3, 10, 0), OrderStatus.DELIVERED, 220.0, [("p1", 2)]),
        make_order("o2", "u1", datetime(2024, 6, 10, 9, 0), OrderStatus.PAID, 40.0, [("p2", 2)]),
        make_order("o3", "u2", datetime(2024, 6, 10, 15, 0), OrderStatus.SHIPPED, 30.0, [("p3", 3)]),
        make_order("o4", "u3", datetime(2024, 6, 20, 12, 0), OrderStatus.CANCELLED, 100.0, [("p1", 1)]),
        make_order("o5", "u2", datetime(2024, 6, 25, 8, 0), OrderStatus.PENDING, 50.0, [("p4", 1)]),
        make_order("o6", "u1", datetime(2024, 5, 15, 10, 0), OrderStatus.DELIVERED, 100.0, [("p1", 1)]),
        make_order("o7", "u2", datetime(2024, 5, 20, 10, 0), OrderStatus.DELIVERED, 100.0, [("p3", 2)]),
    ]


@pytest.fixture
def order_frames(sample_orders) -> OrderFrames:
    return build_order_frames(sample_orders)


@pytest.fixture
def product_frame(sample_products) -> pl.DataFrame:
    return build_product_frame(sample_products)


@pytest.fixture
def analytics_settings() -> AnalyticsSettings:
    return AnalyticsSettings()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def result_cache(fake_clock) -> ResultCache:
    return ResultCache(ttl_seconds=300, clock=fake_clock)


@pytest.fixture
def order_repository(sample_orders) -> CountingOrderRepository:
    return CountingOrderRepository(sample_orders)


@pytest.fixture
def analytics_service(
    order_repository,
    sample_products,
    sample_customers,
    result_cache,
    analytics_settings,
) -> AnalyticsService:
    return AnalyticsService(
        orders=order_repository,
        products=InMemoryProductRepository(sample_products),
        users=InMemoryUserRepository(sample_customers),
        cache=result_cache,
        settings=analytics_settings,
        clock=lambda: NOW,
    )


@pytest.fixture
async def test_engine():
    """Create test database engine"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def test_db(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session"""
    session_factory = async_sessionmaker(
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def failing_service(sample_products, sample_customers, result_cache, analytics_settings) -> AnalyticsService:
    """Service whose order store is unreachable"""
    return AnalyticsService(
        orders=FailingOrderRepository(),
        products=InMemoryProductRepository(sample_products),
        users=InMemoryUserRepository(sample_customers),
        cache=result_cache,
        settings=analytics_settings,
        clock=lambda: NOW,
    )
