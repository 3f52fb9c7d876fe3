"""
Synthetic Data Module
"""
from .generators import CustomerGenerator, OrderGenerator, ProductGenerator

__all__ = ["CustomerGenerator", "OrderGenerator", "ProductGenerator"]
