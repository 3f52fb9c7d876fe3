"""
Database Models - Storefront Schema

Operational tables the analytics engine reads from:

- User: Registered storefront customers
- Product: Catalog with live price, unit cost and stock level
- Order: Placed orders with status and total
- OrderItem: Product lines on an order

Every model converts itself to the engine's read-only record type via
`to_record()`; the engine never touches ORM objects directly.
"""

from datetime import datetime
from typing import List, Optional
import uuid

from sqlalchemy import (
    DateTime,
    Enum as SQLEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from storefront_analytics.analytics.records import (
    CustomerRecord,
    LineItem,
    OrderRecord,
    OrderStatus,
    ProductRecord,
)


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


def _new_id() -> str:
    return uuid.uuid4().hex


# =============================================================================
# CATALOG AND CUSTOMERS
# =============================================================================

class User(Base):
    """
    Customer Table

    Only identity fields are kept; segmentation is computed on demand.
    """
    __tablename__ = "users"

    user_id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    name: Mapped[Optional[str]] = mapped_column(String(200))
    email: Mapped[Optional[str]] = mapped_column(String(255), unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    orders: Mapped[List["Order"]] = relationship(back_populates="user")

    def to_record(self) -> CustomerRecord:
        return CustomerRecord(
            user_id=self.user_id,
            name=self.name,
            email=self.email,
            created_at=self.created_at,
        )


class Product(Base):
    """
    Product Table

    `cost` of 0 means the unit cost is unknown and the product is left out of
    margin calculations.
    """
    __tablename__ = "products"

    product_id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[Optional[str]] = mapped_column(String(100))
    price: Mapped[float] = mapped_column(Float, nullable=False)
    cost: Mapped[float] = mapped_column(Float, default=0.0)
    stock: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    order_items: Mapped[List["OrderItem"]] = relationship(back_populates="product")

    __table_args__ = (
        Index("ix_products_category", "category"),
        Index("ix_products_stock", "stock"),
    )

    def to_record(self) -> ProductRecord:
        return ProductRecord(
            product_id=self.product_id,
            name=self.name,
            category=self.category,
            price=float(self.price),
            cost=float(self.cost or 0.0),
            stock=int(self.stock or 0),
        )


# =============================================================================
# ORDERS
# =============================================================================

class Order(Base):
    """
    Order Table

    `created_at` is the order timestamp (naive UTC) used for every windowed
    metric.
    """
    __tablename__ = "orders"

    order_id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    user_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("users.user_id"), nullable=False
    )
    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(
            OrderStatus,
            name="order_status",
            values_callable=lambda statuses: [status.value for status in statuses],
        ),
        default=OrderStatus.PENDING,
    )
    total_price: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    user: Mapped["User"] = relationship(back_populates="orders")
    items: Mapped[List["OrderItem"]] = relationship(
        back_populates="order", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_orders_created_at", "created_at"),
        Index("ix_orders_status_created", "status", "created_at"),
        Index("ix_orders_user", "user_id"),
    )

    def to_record(self) -> OrderRecord:
        return OrderRecord(
            order_id=self.order_id,
            user_id=self.user_id,
            ordered_at=self.created_at,
            status=self.status,
            total_price=float(self.total_price),
            items=tuple(item.to_line_item() for item in self.items),
        )


class OrderItem(Base):
    """Order line: one product and its quantity"""
    __tablename__ = "order_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("orders.order_id"), nullable=False
    )
    product_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("products.product_id"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    order: Mapped["Order"] = relationship(back_populates="items")
    product: Mapped["Product"] = relationship(back_populates="order_items")

    __table_args__ = (
        Index("ix_order_items_order", "order_id"),
        Index("ix_order_items_product", "product_id"),
    )

    def to_line_item(self) -> LineItem:
        return LineItem(product_id=self.product_id, quantity=self.quantity)
