"""
Catalog types.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from cartsync._types import WireId, normalize_id

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Product
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Product:
    """
    One catalog entry.

    `id` is already normalized (see `normalize_id`), prices are `Decimal`.
    `wire_id` keeps the identifier exactly as the catalog sent it; it is
    what the cart service expects back.
    Immutable for the session; a re-fetch replaces the whole catalog.
    """

    id: str
    title: str
    brand: str
    category: str
    price: Decimal
    discount_percentage: Decimal = Decimal(0)
    stock: int = 0
    rating: Decimal = Decimal(0)
    thumbnail: str | None = None
    description: str = ""
    wire_id: WireId | None = None

    @property
    def cart_ref(self) -> WireId:
        """Identifier to send to the cart service."""
        return self.wire_id if self.wire_id is not None else self.id


# ═══════════════════════════════════════════════════════════════════════════════
# Wire → Product
# ═══════════════════════════════════════════════════════════════════════════════


def _decimal(value: object, default: Decimal = Decimal(0)) -> Decimal:
    if value is None or isinstance(value, bool):
        return default
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default
    return result if result.is_finite() else default


def _int(value: object, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return default


def _wire_id(value: object) -> WireId | None:
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        return None
    return value


def parse_product(raw: Mapping[str, object]) -> Product:
    """
    Build a Product from a wire record.

    Accepts both `_id` (document store) and `id` keys. Missing or
    malformed numbers fall back to zero; a negative price is clamped to 0.
    """
    raw_id = raw.get("_id", raw.get("id"))
    price = _decimal(raw.get("price"))
    if price < 0:
        logger.warning("Product %s has negative price %s, using 0", raw_id, price)
        price = Decimal(0)

    thumbnail = raw.get("thumbnail")
    return Product(
        id=normalize_id(raw_id),
        title=str(raw.get("title") or ""),
        brand=str(raw.get("brand") or ""),
        category=str(raw.get("category") or ""),
        price=price,
        discount_percentage=_decimal(raw.get("discountPercentage")),
        stock=_int(raw.get("stock")),
        rating=_decimal(raw.get("rating")),
        thumbnail=str(thumbnail) if thumbnail else None,
        description=str(raw.get("description") or ""),
        wire_id=_wire_id(raw_id),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("Product", "parse_product")
