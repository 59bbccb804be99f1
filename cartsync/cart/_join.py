"""
Line-item join — merged lines × catalog → enriched lines.

Unresolved policy: DROP. A line whose product is not in the catalog is
left out of display and totals; its key is reported in
`JoinResult.unresolved` so the caller can tell the user how many lines
could not be shown.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from cartsync.catalog import Product
from cartsync.cart._types import EnrichedLineItem, LineKey, MergedLine

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class JoinResult:
    lines: tuple[EnrichedLineItem, ...]
    unresolved: tuple[LineKey, ...]

    @property
    def unresolved_count(self) -> int:
        return len(self.unresolved)

    def describe_unresolved(self) -> str | None:
        """User-facing reconciliation message, or None when nothing was dropped."""
        n = self.unresolved_count
        if n == 0:
            return None
        noun = "line item" if n == 1 else "line items"
        verb = "references" if n == 1 else "referenced"
        return f"{n} {noun} {verb} unknown products"


def index_catalog(products: Iterable[Product]) -> dict[str, Product]:
    """Id → product, keeping the FIRST product for duplicated ids."""
    index: dict[str, Product] = {}
    for product in products:
        index.setdefault(product.id, product)
    return index


def join(
    lines: Sequence[MergedLine],
    products: Sequence[Product],
) -> JoinResult:
    """
    Resolve every merged line against the catalog.

    Identifiers compare by their normalized string form, so a cart that
    stores `7` matches a catalog `_id` of `"7"`. Each occurrence is joined
    independently: two lines for the same product give two enriched lines.

    Never raises.
    """
    index = index_catalog(products)
    enriched: list[EnrichedLineItem] = []
    unresolved: list[LineKey] = []

    for line in lines:
        product = index.get(line.key.product_ref)
        if product is None:
            logger.warning("Product not found for cart line %s", line.key)
            unresolved.append(line.key)
            continue

        enriched.append(
            EnrichedLineItem(
                key=line.key,
                product_id=line.product_id,
                quantity=line.quantity,
                product=product,
            )
        )

    return JoinResult(lines=tuple(enriched), unresolved=tuple(unresolved))


__all__ = ("JoinResult", "index_catalog", "join")
