"""
Serving Module
"""
from .cache import ResultCache, make_cache_key

__all__ = [
    "ResultCache",
    "make_cache_key",
]
