"""
Pricing — subtotal, informational discount, flat fee, total.

    from cartsync import pricing

    summary = pricing.summarize(lines)
"""

from __future__ import annotations

from cartsync.pricing._summary import (
    DEFAULT_FEE,
    PriceSummary,
    original_price,
    line_discount,
    summarize,
)

__all__ = (
    "DEFAULT_FEE",
    "PriceSummary",
    "original_price",
    "line_discount",
    "summarize",
)
