"""
Database Seeding

Fills the storefront tables with a synthetic year of activity: customers,
a product catalog, a handful of low-stock products and their recent fast
sales, and a few hundred orders.

Usage:
    python -m storefront_analytics.ingestion.seed_db
"""

import argparse
import asyncio
from typing import Iterable, List

import structlog

from storefront_analytics.analytics.records import CustomerRecord, OrderRecord, ProductRecord
from storefront_analytics.config.logging import configure_logging
from storefront_analytics.data.generators import (
    CustomerGenerator,
    OrderGenerator,
    ProductGenerator,
)
from storefront_analytics.database.connection import (
    close_database,
    create_tables,
    get_db,
    init_database,
)
from storefront_analytics.database.models import Base, Order, OrderItem, Product, User

logger = structlog.get_logger(__name__)

CHUNK_SIZE = 1000


def user_rows(customers: Iterable[CustomerRecord]) -> List[User]:
    return [
        User(user_id=c.user_id, name=c.name, email=c.email, created_at=c.created_at)
        for c in customers
    ]


def product_rows(products: Iterable[ProductRecord]) -> List[Product]:
    return [
        Product(
            product_id=p.product_id,
            name=p.name,
            category=p.category,
            price=p.price,
            cost=p.cost,
            stock=p.stock,
        )
        for p in products
    ]


def order_rows(orders: Iterable[OrderRecord]) -> List[Order]:
    return [
        Order(
            order_id=o.order_id,
            user_id=o.user_id,
            status=o.status,
            total_price=o.total_price,
            created_at=o.ordered_at,
            items=[
                OrderItem(product_id=item.product_id, quantity=item.quantity)
                for item in o.items
            ],
        )
        for o in orders
    ]


async def insert_rows(rows: List[Base], table: str) -> None:
    """Insert ORM rows in chunks, one transaction per chunk"""
    for i in range(0, len(rows), CHUNK_SIZE):
        async with get_db() as db:
            db.add_all(rows[i:i + CHUNK_SIZE])
    logger.info("Rows inserted", table=table, count=len(rows))


async def seed(customers: int = 50, products: int = 100, orders: int = 500, days: int = 365) -> None:
    """Generate and insert a complete storefront history"""
    users = CustomerGenerator().generate(customers)
    product_generator = ProductGenerator()
    catalog = product_generator.generate(products)
    risky = product_generator.risk_products()

    order_generator = OrderGenerator(users, catalog)
    history = order_generator.generate(orders, days=days)
    # Only the middle two risk products sell fast enough to be at risk by velocity
    history += order_generator.fast_sellers(risky[2:4])

    await create_tables()
    await insert_rows(user_rows(users), "users")
    await insert_rows(product_rows(catalog + risky), "products")
    await insert_rows(order_rows(history), "orders")


async def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the storefront database with synthetic data")
    parser.add_argument("--customers", type=int, default=50)
    parser.add_argument("--products", type=int, default=100)
    parser.add_argument("--orders", type=int, default=500)
    parser.add_argument("--days", type=int, default=365)
    args = parser.parse_args()

    configure_logging()
    logger.info("Starting database seeding...")
    await init_database()

    try:
        await seed(args.customers, args.products, args.orders, args.days)
        logger.info("Database seeding completed successfully")
    except Exception as e:
        logger.error("Seeding failed", error=str(e))
        raise
    finally:
        await close_database()


def run() -> None:
    """Console script entry point"""
    asyncio.run(main())


if __name__ == "__main__":
    run()
