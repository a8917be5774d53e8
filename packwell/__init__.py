"""Packwell Store: storefront and order workflow API"""

__version__ = "1.0.0"
