"""
Analytics error types.

Malformed inputs raise InvalidParameterError before any data is fetched;
repository failures surface as DataFetchError. Degenerate data (no orders,
no customers) is never an error.
"""

from typing import Optional


class AnalyticsError(Exception):
    """Base class for metrics engine failures"""


class InvalidParameterError(AnalyticsError, ValueError):
    """A query parameter could not be parsed or is out of range"""

    def __init__(self, parameter: str, message: str, value: Optional[object] = None):
        self.parameter = parameter
        self.value = value
        detail = f"Invalid '{parameter}': {message}"
        if value is not None:
            detail += f" (got {value!r})"
        super().__init__(detail)


class DataFetchError(AnalyticsError):
    """The order, product or user store could not be read"""

    def __init__(self, source: str, message: str = "Error fetching analytics data"):
        self.source = source
        super().__init__(f"{message}: {source} unavailable")
