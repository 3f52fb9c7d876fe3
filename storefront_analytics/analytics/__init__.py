"""
Analytics Engine Module

Pure computations over order, product and customer records. The
AnalyticsService in `service` wires them to repositories and the cache.
"""
from .errors import AnalyticsError, DataFetchError, InvalidParameterError
from .records import (
    CustomerRecord,
    LineItem,
    OrderRecord,
    OrderStatus,
    ProductRecord,
    QUALIFYING_STATUSES,
)
from .windows import DateWindow

__all__ = [
    "AnalyticsError",
    "DataFetchError",
    "InvalidParameterError",
    "CustomerRecord",
    "LineItem",
    "OrderRecord",
    "OrderStatus",
    "ProductRecord",
    "QUALIFYING_STATUSES",
    "DateWindow",
]
