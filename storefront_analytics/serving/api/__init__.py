"""
API Module
"""
from .main import create_api_app
from .middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware

__all__ = [
    "create_api_app",
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
]
