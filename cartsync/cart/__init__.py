"""
Cart — merge active records and join them with the catalog.

    from cartsync import cart

    records = cart.parse_cart_records(body["data"])
    lines = cart.merge_active(records, user_id)
    joined = cart.join(lines, products)
"""

from __future__ import annotations

from cartsync.cart._types import (
    ACTIVE,
    RawLineItem,
    CartRecord,
    LineKey,
    MergedLine,
    EnrichedLineItem,
    parse_cart_records,
)
from cartsync.cart._merge import merge_active
from cartsync.cart._join import JoinResult, index_catalog, join

__all__ = (
    "ACTIVE",
    "RawLineItem",
    "CartRecord",
    "LineKey",
    "MergedLine",
    "EnrichedLineItem",
    "parse_cart_records",
    "merge_active",
    "JoinResult",
    "index_catalog",
    "join",
)
