"""
Price summary — pure computation over enriched lines.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from cartsync.cart import EnrichedLineItem

DEFAULT_FEE = Decimal("4")
"""Flat platform fee added to every cart."""

_ZERO = Decimal(0)
_HUNDRED = Decimal(100)

# ═══════════════════════════════════════════════════════════════════════════════
# PriceSummary
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PriceSummary:
    """
    Derived totals for the current lines.

    `discount` is informational: prices are already discounted, so the
    total is `subtotal + fee`.
    """

    subtotal: Decimal
    discount: Decimal
    fee: Decimal
    total: Decimal
    line_count: int

    def rounded(self) -> PriceSummary:
        """Whole-unit rendition for display (half-up)."""
        return PriceSummary(
            subtotal=_whole(self.subtotal),
            discount=_whole(self.discount),
            fee=self.fee,
            total=_whole(self.total),
            line_count=self.line_count,
        )


def _whole(value: Decimal) -> Decimal:
    return value.quantize(Decimal(1), rounding=ROUND_HALF_UP)


# ═══════════════════════════════════════════════════════════════════════════════
# Per-line Rules
# ═══════════════════════════════════════════════════════════════════════════════


def original_price(price: Decimal, discount_percentage: Decimal) -> Decimal | None:
    """
    Pre-discount unit price: price / (1 - pct/100).

    None when the percentage gives no meaningful original price
    (pct <= 0 means "no discount", pct >= 100 would divide by zero).
    """
    if discount_percentage <= 0 or discount_percentage >= _HUNDRED:
        return None
    return price / (1 - discount_percentage / _HUNDRED)


def line_discount(line: EnrichedLineItem) -> Decimal:
    original = original_price(line.unit_price, line.discount_percentage)
    if original is None:
        return _ZERO
    return (original - line.unit_price) * line.quantity


# ═══════════════════════════════════════════════════════════════════════════════
# summarize() — Lines → Summary
# ═══════════════════════════════════════════════════════════════════════════════


def summarize(
    lines: Sequence[EnrichedLineItem],
    fee: Decimal = DEFAULT_FEE,
) -> PriceSummary:
    """
    Compute subtotal, discount and total.

    Example:
        summary = summarize(view.lines, fee=config.platform_fee)
        print(summary.rounded().total)
    """
    subtotal = sum((line.line_total for line in lines), _ZERO)
    discount = sum((line_discount(line) for line in lines), _ZERO)
    return PriceSummary(
        subtotal=subtotal,
        discount=discount,
        fee=fee,
        total=subtotal + fee,
        line_count=len(lines),
    )


__all__ = (
    "DEFAULT_FEE",
    "PriceSummary",
    "original_price",
    "line_discount",
    "summarize",
)
