"""
Database Module
"""
from .connection import (
    check_database_health,
    close_database,
    create_tables,
    get_db,
    get_read_session,
    init_database,
)
from .models import Base
from .repositories import (
    InMemoryOrderRepository,
    InMemoryProductRepository,
    InMemoryUserRepository,
    OrderRepository,
    ProductRepository,
    SQLOrderRepository,
    SQLProductRepository,
    SQLUserRepository,
    UserRepository,
)

__all__ = [
    "init_database",
    "close_database",
    "get_db",
    "get_read_session",
    "create_tables",
    "check_database_health",
    "Base",
    "OrderRepository",
    "ProductRepository",
    "UserRepository",
    "SQLOrderRepository",
    "SQLProductRepository",
    "SQLUserRepository",
    "InMemoryOrderRepository",
    "InMemoryProductRepository",
    "InMemoryUserRepository",
]
