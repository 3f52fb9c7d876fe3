"""
Source Records

Read-only order, product and customer records the metrics engine consumes.
Repositories translate their storage rows into these types.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple


class OrderStatus(str, Enum):
    """Order lifecycle status"""
    CANCELLED = "Cancelled"
    PENDING = "Pending"
    PAID = "Paid"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"


# Orders that count toward revenue, units and margin
QUALIFYING_STATUSES: Tuple[OrderStatus, ...] = (
    OrderStatus.PAID,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)


def to_utc_naive(value: datetime) -> datetime:
    """Normalize a datetime to naive UTC; naive values are assumed UTC already."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def utc_now() -> datetime:
    return to_utc_naive(datetime.now(timezone.utc))


@dataclass(frozen=True)
class LineItem:
    """Product reference and quantity on an order"""
    product_id: str
    quantity: int


@dataclass(frozen=True)
class OrderRecord:
    """A placed order"""
    order_id: str
    user_id: str
    ordered_at: datetime
    status: OrderStatus
    total_price: float
    items: Tuple[LineItem, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "ordered_at", to_utc_naive(self.ordered_at))
        object.__setattr__(self, "status", OrderStatus(self.status))
        object.__setattr__(self, "items", tuple(self.items))

    @property
    def units(self) -> int:
        return sum(item.quantity for item in self.items)


@dataclass(frozen=True)
class ProductRecord:
    """Catalog product with live price, unit cost and stock level"""
    product_id: str
    name: str
    category: Optional[str]
    price: float
    cost: float = 0.0  # 0 means margin unknown
    stock: int = 0


@dataclass(frozen=True)
class CustomerRecord:
    """Registered storefront user"""
    user_id: str
    name: Optional[str]
    email: Optional[str]
    created_at: Optional[datetime] = None
