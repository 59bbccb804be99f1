"""
Cart types — wire records, merged lines, enriched lines.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from decimal import Decimal

from cartsync._types import WireId, normalize_id
from cartsync.catalog import Product

logger = logging.getLogger(__name__)

ACTIVE = "active"

# ═══════════════════════════════════════════════════════════════════════════════
# Wire Records
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class RawLineItem:
    product_id: WireId  # verbatim, as the cart service stores it
    quantity: int


@dataclass(frozen=True, slots=True)
class CartRecord:
    cart_id: str
    user_id: str
    status: str
    items: tuple[RawLineItem, ...]

    @property
    def is_active(self) -> bool:
        return self.status == ACTIVE


# ═══════════════════════════════════════════════════════════════════════════════
# Line Identity
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class LineKey:
    """
    Stable identity of one merged line.

    Position in the merged list shifts after a removal, so mutations
    address lines by (originating cart, product, n-th occurrence of that
    product inside the cart).
    """

    cart_id: str
    product_ref: str
    occurrence: int = 0

    def __str__(self) -> str:
        return f"{self.cart_id}/{self.product_ref}#{self.occurrence}"


@dataclass(frozen=True, slots=True)
class MergedLine:
    """RawLineItem tagged with the record it came from."""

    key: LineKey
    product_id: WireId
    quantity: int


# ═══════════════════════════════════════════════════════════════════════════════
# Enriched Line
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class EnrichedLineItem:
    """
    A cart line joined with its product snapshot.

    `product_id` is the cart's own value, even when the catalog spells
    the identifier differently. Quantity is always >= 1; a line that
    would reach 0 is removed instead.
    """

    key: LineKey
    product_id: WireId
    quantity: int
    product: Product

    @property
    def title(self) -> str:
        return self.product.title

    @property
    def unit_price(self) -> Decimal:
        return self.product.price

    @property
    def discount_percentage(self) -> Decimal:
        return self.product.discount_percentage

    @property
    def line_total(self) -> Decimal:
        return self.product.price * self.quantity


# ═══════════════════════════════════════════════════════════════════════════════
# Wire → CartRecord
# ═══════════════════════════════════════════════════════════════════════════════


def _parse_item(raw: object, cart_id: str) -> RawLineItem | None:
    if not isinstance(raw, Mapping):
        logger.warning("Cart %s: skipping item of type %s", cart_id, type(raw).__name__)
        return None

    product_id = raw.get("productId")
    if product_id is None:
        logger.warning("Cart %s: skipping item without productId", cart_id)
        return None

    quantity = raw.get("quantity", 1)
    if quantity is None:
        quantity = 1
    try:
        quantity = int(quantity)
    except (TypeError, ValueError):
        logger.warning("Cart %s: bad quantity %r for %s", cart_id, quantity, product_id)
        return None
    if quantity <= 0:
        logger.warning(
            "Cart %s: dropping %s with non-positive quantity %d",
            cart_id,
            product_id,
            quantity,
        )
        return None

    if not isinstance(product_id, (str, int)) or isinstance(product_id, bool):
        product_id = normalize_id(product_id)
    return RawLineItem(product_id=product_id, quantity=quantity)


def parse_cart_records(payload: object) -> tuple[CartRecord, ...]:
    """
    Convert the `data` sequence of `GET /carts` into CartRecords.

    Records without an id get a positional one (`cart-<n>`) so their lines
    still have a stable key for the session.
    """
    if not isinstance(payload, Sequence) or isinstance(payload, (str, bytes)):
        return ()

    records: list[CartRecord] = []
    for position, raw in enumerate(payload):
        if not isinstance(raw, Mapping):
            logger.warning("Skipping cart record of type %s", type(raw).__name__)
            continue

        raw_id = raw.get("_id", raw.get("id"))
        cart_id = normalize_id(raw_id) if raw_id is not None else f"cart-{position}"
        raw_items = raw.get("items") or ()
        if not isinstance(raw_items, Sequence) or isinstance(raw_items, (str, bytes)):
            raw_items = ()

        items = tuple(
            item
            for item in (_parse_item(i, cart_id) for i in raw_items)
            if item is not None
        )
        records.append(
            CartRecord(
                cart_id=cart_id,
                user_id=normalize_id(raw.get("userId")),
                status=str(raw.get("status") or ""),
                items=items,
            )
        )
    return tuple(records)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = (
    "ACTIVE",
    "RawLineItem",
    "CartRecord",
    "LineKey",
    "MergedLine",
    "EnrichedLineItem",
    "parse_cart_records",
)
