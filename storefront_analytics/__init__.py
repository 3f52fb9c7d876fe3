"""
Storefront Analytics

Dashboard metrics engine and API for an e-commerce storefront.
"""

__version__ = "1.0.0"
