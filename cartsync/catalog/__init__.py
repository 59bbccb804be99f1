"""
Catalog — product records from heterogeneous wire shapes.

    from cartsync import catalog

    products = catalog.normalize_catalog(payload)
    phones = catalog.filter_by_category(products, "smartphones")
"""

from __future__ import annotations

from cartsync.catalog._types import Product, parse_product
from cartsync.catalog._normalize import normalize_catalog, filter_by_category

__all__ = (
    "Product",
    "parse_product",
    "normalize_catalog",
    "filter_by_category",
)
