"""
Catalog normalization — flat or nested-by-document payloads.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from cartsync.catalog._types import Product, parse_product

logger = logging.getLogger(__name__)


def _is_sequence(value: object) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _carries_products(doc: object) -> bool:
    return isinstance(doc, Mapping) and _is_sequence(doc.get("products"))


def _nested_products(doc: object) -> Sequence[object]:
    if isinstance(doc, Mapping):
        nested = doc.get("products")
        if _is_sequence(nested):
            return nested  # type: ignore[return-value]
    return ()


# ═══════════════════════════════════════════════════════════════════════════════
# normalize_catalog() — Payload → Products
# ═══════════════════════════════════════════════════════════════════════════════


def normalize_catalog(payload: object) -> tuple[Product, ...]:
    """
    Flatten a catalog payload into products.

    Two shapes are accepted:

        [{"_id": "a", ...}, {"_id": "b", ...}]                 # flat
        [{"products": [{...}, {...}]}, {"products": [...]}]    # nested

    The first element decides: if it carries a `products` sequence the
    whole payload is nested and every document's products are concatenated
    in document order. Anything that is not a sequence yields `()`.

    No deduplication; the joiner takes the first match.

    Example:
        products = normalize_catalog(await response.json())
    """
    if not _is_sequence(payload):
        if payload is not None:
            logger.warning(
                "Catalog payload is %s, expected a list", type(payload).__name__
            )
        return ()

    records: Sequence[object] = payload  # type: ignore[assignment]
    if not records:
        return ()

    if _carries_products(records[0]):
        flat: Iterable[object] = (
            item for doc in records for item in _nested_products(doc)
        )
    else:
        flat = records

    return tuple(_parse_all(flat))


def _parse_all(records: Iterable[object]) -> Iterable[Product]:
    for raw in records:
        if not isinstance(raw, Mapping):
            logger.warning("Skipping catalog entry of type %s", type(raw).__name__)
            continue
        yield parse_product(raw)


# ═══════════════════════════════════════════════════════════════════════════════
# Lookups
# ═══════════════════════════════════════════════════════════════════════════════


def filter_by_category(
    products: Sequence[Product],
    category: str | None,
) -> tuple[Product, ...]:
    """Products of one category, in catalog order. `None` keeps everything."""
    if category is None:
        return tuple(products)
    return tuple(p for p in products if p.category == category)


# ═══════════════════════════════════════════════════════════════════════════════
# Exports
# ═══════════════════════════════════════════════════════════════════════════════

__all__ = ("normalize_catalog", "filter_by_category")
