"""
Cart merging — every active record of a user is one logical cart.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from cartsync._types import WireId, normalize_id
from cartsync.cart._types import CartRecord, LineKey, MergedLine


def merge_active(
    records: Iterable[CartRecord],
    user_id: WireId,
) -> tuple[MergedLine, ...]:
    """
    Concatenate the items of the user's active carts.

    Record order first, then item order inside each record. Records of
    other users and inactive records never contribute. Duplicate product
    ids stay separate lines, each keyed by its originating cart.

    Example:
        lines = merge_active(records, session.user_id)
        if not lines:
            ...  # empty cart, not an error
    """
    owner = normalize_id(user_id)
    merged: list[MergedLine] = []
    seen: Counter[tuple[str, str]] = Counter()

    for record in records:
        if record.user_id != owner or not record.is_active:
            continue

        for item in record.items:
            ref = normalize_id(item.product_id)
            merged.append(
                MergedLine(
                    key=LineKey(record.cart_id, ref, seen[record.cart_id, ref]),
                    product_id=item.product_id,
                    quantity=item.quantity,
                )
            )
            seen[record.cart_id, ref] += 1

    return tuple(merged)


__all__ = ("merge_active",)
