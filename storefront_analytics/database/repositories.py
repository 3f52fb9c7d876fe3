"""
Record Repositories

Storage-agnostic interfaces the analytics service reads through, with a
SQLAlchemy implementation over the storefront tables and an in-memory one
over plain record lists.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront_analytics.analytics.records import (
    CustomerRecord,
    OrderRecord,
    OrderStatus,
    ProductRecord,
)
from storefront_analytics.database.models import Order, Product, User


class OrderRepository(ABC):
    """Read access to orders and their line items."""

    @abstractmethod
    async def find_orders(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        statuses: Optional[Sequence[OrderStatus]] = None,
    ) -> List[OrderRecord]:
        """
        Orders placed inside [start, end], optionally restricted by status.

        Args:
            start: Inclusive lower bound, unbounded when None
            end: Inclusive upper bound, unbounded when None
            statuses: Accepted statuses, all when None

        Returns:
            Order records with their line items
        """


class ProductRepository(ABC):
    """Read access to the product catalog."""

    @abstractmethod
    async def list_products(self) -> List[ProductRecord]:
        """Every product in the catalog"""

    @abstractmethod
    async def get_products(self, product_ids: Iterable[str]) -> Dict[str, ProductRecord]:
        """Products by id; unknown ids are absent from the result"""


class UserRepository(ABC):
    """Read access to registered users."""

    @abstractmethod
    async def get_customers(self, user_ids: Iterable[str]) -> Dict[str, CustomerRecord]:
        """Users by id; unknown ids are absent from the result"""


# =============================================================================
# SQLALCHEMY
# =============================================================================

class SQLOrderRepository(OrderRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_orders(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        statuses: Optional[Sequence[OrderStatus]] = None,
    ) -> List[OrderRecord]:
        query = select(Order).options(selectinload(Order.items))
        if start is not None:
            query = query.where(Order.created_at >= start)
        if end is not None:
            query = query.where(Order.created_at <= end)
        if statuses is not None:
            query = query.where(Order.status.in_(list(statuses)))
        query = query.order_by(Order.created_at, Order.order_id)

        result = await self.session.execute(query)
        return [order.to_record() for order in result.scalars().all()]


class SQLProductRepository(ProductRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_products(self) -> List[ProductRecord]:
        result = await self.session.execute(select(Product).order_by(Product.product_id))
        return [product.to_record() for product in result.scalars().all()]

    async def get_products(self, product_ids: Iterable[str]) -> Dict[str, ProductRecord]:
        ids = list(set(product_ids))
        if not ids:
            return {}
        result = await self.session.execute(select(Product).where(Product.product_id.in_(ids)))
        return {product.product_id: product.to_record() for product in result.scalars().all()}


class SQLUserRepository(UserRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_customers(self, user_ids: Iterable[str]) -> Dict[str, CustomerRecord]:
        ids = list(set(user_ids))
        if not ids:
            return {}
        result = await self.session.execute(select(User).where(User.user_id.in_(ids)))
        return {user.user_id: user.to_record() for user in result.scalars().all()}


# =============================================================================
# IN-MEMORY
# =============================================================================

class InMemoryOrderRepository(OrderRepository):
    """Orders held in a list; used by tests and local tooling."""

    def __init__(self, orders: Iterable[OrderRecord] = ()):
        self.orders = list(orders)

    async def find_orders(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        statuses: Optional[Sequence[OrderStatus]] = None,
    ) -> List[OrderRecord]:
        accepted = set(statuses) if statuses is not None else None
        return [
            order
            for order in self.orders
            if (start is None or order.ordered_at >= start)
            and (end is None or order.ordered_at <= end)
            and (accepted is None or order.status in accepted)
        ]


class InMemoryProductRepository(ProductRepository):
    def __init__(self, products: Iterable[ProductRecord] = ()):
        self.products = {product.product_id: product for product in products}

    async def list_products(self) -> List[ProductRecord]:
        return list(self.products.values())

    async def get_products(self, product_ids: Iterable[str]) -> Dict[str, ProductRecord]:
        return {pid: self.products[pid] for pid in set(product_ids) if pid in self.products}


class InMemoryUserRepository(UserRepository):
    def __init__(self, customers: Iterable[CustomerRecord] = ()):
        self.customers = {customer.user_id: customer for customer in customers}

    async def get_customers(self, user_ids: Iterable[str]) -> Dict[str, CustomerRecord]:
        return {uid: self.customers[uid] for uid in set(user_ids) if uid in self.customers}
