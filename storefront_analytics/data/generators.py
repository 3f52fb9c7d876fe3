"""
Synthetic Data Generator

Generates a realistic storefront history for development and demos.
Includes:
- Customers with names and emails
- Products across categories, with unit costs and stock levels
- Deliberately low-stock products that exercise inventory risk
- Orders over a trailing period with an age-dependent status mix
"""

import random
import uuid
from datetime import datetime, timedelta
from typing import List, Optional

import numpy as np
from faker import Faker

from storefront_analytics.analytics.records import (
    CustomerRecord,
    LineItem,
    OrderRecord,
    OrderStatus,
    ProductRecord,
    utc_now,
)


# =============================================================================
# CONFIGURATION
# =============================================================================

CATEGORIES = {
    "Electronics": ["Smartphone", "Laptop", "Headphones", "Tablet", "Smart Watch", "Camera", "Speaker"],
    "Clothing": ["T-Shirt", "Jeans", "Dress", "Jacket", "Sneakers", "Hoodie", "Shorts"],
    "Books": ["Fiction Novel", "Cookbook", "Biography", "Self-Help", "Textbook", "Comic Book"],
    "Home": ["Coffee Maker", "Lamp", "Pillow", "Candle", "Plant Pot", "Mirror", "Rug"],
    "Sports": ["Running Shoes", "Yoga Mat", "Dumbbells", "Basketball", "Tennis Racket"],
    "Beauty": ["Lipstick", "Foundation", "Perfume", "Moisturizer", "Shampoo"],
    "Toys": ["Action Figure", "Board Game", "Puzzle", "Doll", "Building Blocks"],
}

EDITIONS = ["Pro", "Plus", "Elite", "Classic", "Premium", "Standard"]

TAX_RATE = 0.08

# (name, category, price, cost, stock)
RISK_PRODUCTS = [
    ("Critical Stock Item - Phone Case", "Electronics", 29.99, 15.00, 2),
    ("Critical Stock Item - Wireless Earbuds", "Electronics", 89.99, 45.00, 1),
    ("Popular T-Shirt - Low Stock", "Clothing", 24.99, 12.00, 15),
    ("Gaming Mouse - Fast Seller", "Electronics", 59.99, 30.00, 20),
    ("Well Stocked Notebook", "Books", 12.99, 6.00, 100),
]


def _new_id() -> str:
    return uuid.uuid4().hex


# =============================================================================
# GENERATORS
# =============================================================================

class CustomerGenerator:
    """Generate registered customers"""

    def __init__(self, seed: int = 42):
        self.fake = Faker()
        self.fake.seed_instance(seed)

    def generate(self, n: int = 50) -> List[CustomerRecord]:
        customers = []
        for _ in range(n):
            customers.append(
                CustomerRecord(
                    user_id=_new_id(),
                    name=self.fake.name(),
                    email=self.fake.unique.email(),
                    created_at=self.fake.date_time_between(start_date="-2y", end_date="-1y"),
                )
            )
        return customers


class ProductGenerator:
    """Generate a product catalog; roughly a third of products have no known cost"""

    def __init__(self, seed: int = 42):
        self.rng = random.Random(seed)

    def generate(self, n: int = 100) -> List[ProductRecord]:
        products = []
        for _ in range(n):
            category = self.rng.choice(list(CATEGORIES))
            base_name = self.rng.choice(CATEGORIES[category])
            price = round(self.rng.uniform(10, 500), 2)
            cost = round(price * self.rng.uniform(0.3, 0.7), 2) if self.rng.random() > 0.3 else 0.0

            products.append(
                ProductRecord(
                    product_id=_new_id(),
                    name=f"{base_name} {self.rng.choice(EDITIONS)}",
                    category=category,
                    price=price,
                    cost=cost,
                    stock=self.rng.randint(0, 100),
                )
            )
        return products

    @staticmethod
    def risk_products() -> List[ProductRecord]:
        """Fixed products spanning Critical, Low Stock and Normal inventory"""
        return [
            ProductRecord(
                product_id=_new_id(),
                name=name,
                category=category,
                price=price,
                cost=cost,
                stock=stock,
            )
            for name, category, price, cost, stock in RISK_PRODUCTS
        ]


class OrderGenerator:
    """
    Generate orders for existing customers and products.

    Older orders are mostly delivered (with some cancellations); recent ones
    are still pending, paid or shipped.
    """

    def __init__(
        self,
        customers: List[CustomerRecord],
        products: List[ProductRecord],
        seed: int = 42,
    ):
        self.customers = customers
        self.products = products
        self.rng = random.Random(seed)
        self.np_rng = np.random.default_rng(seed)

    def _status_for_age(self, days_old: float) -> OrderStatus:
        if days_old > 30:
            choices = [OrderStatus.DELIVERED] * 3 + [OrderStatus.CANCELLED]
        elif days_old > 7:
            choices = [OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.DELIVERED]
        elif days_old > 2:
            choices = [OrderStatus.PAID, OrderStatus.SHIPPED]
        else:
            choices = [OrderStatus.PENDING, OrderStatus.PAID]
        return self.rng.choice(choices)

    def generate(
        self,
        n: int = 500,
        days: int = 365,
        now: Optional[datetime] = None,
    ) -> List[OrderRecord]:
        """Generate n orders spread uniformly over the last `days` days"""
        now = now or utc_now()
        span_seconds = days * 24 * 60 * 60

        orders = []
        for _ in range(n):
            ordered_at = now - timedelta(seconds=float(self.np_rng.uniform(0, span_seconds)))

            # Most orders carry one to three lines
            num_items = int(self.np_rng.choice([1, 2, 3, 4, 5], p=[0.35, 0.30, 0.20, 0.10, 0.05]))
            items = []
            subtotal = 0.0
            for _ in range(num_items):
                product = self.rng.choice(self.products)
                quantity = int(self.np_rng.choice([1, 2, 3], p=[0.65, 0.25, 0.10]))
                items.append(LineItem(product_id=product.product_id, quantity=quantity))
                subtotal += product.price * quantity

            shipping = self.rng.uniform(0, 15)
            total = round(subtotal * (1 + TAX_RATE) + shipping, 2)

            orders.append(
                OrderRecord(
                    order_id=_new_id(),
                    user_id=self.rng.choice(self.customers).user_id,
                    ordered_at=ordered_at,
                    status=self._status_for_age((now - ordered_at).total_seconds() / 86400),
                    total_price=total,
                    items=tuple(items),
                )
            )

        orders.sort(key=lambda order: order.ordered_at)
        return orders

    def fast_sellers(
        self,
        products: List[ProductRecord],
        orders_per_product: int = 8,
        days: int = 7,
        now: Optional[datetime] = None,
    ) -> List[OrderRecord]:
        """Recent paid orders that give `products` a high sales velocity"""
        now = now or utc_now()
        orders = []
        for product in products:
            for _ in range(orders_per_product):
                quantity = self.rng.randint(1, 3)
                orders.append(
                    OrderRecord(
                        order_id=_new_id(),
                        user_id=self.rng.choice(self.customers).user_id,
                        ordered_at=now - timedelta(days=self.rng.uniform(0, days)),
                        status=OrderStatus.PAID,
                        total_price=round(product.price * quantity * (1 + TAX_RATE), 2),
                        items=(LineItem(product_id=product.product_id, quantity=quantity),),
                    )
                )
        return orders
