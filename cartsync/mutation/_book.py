"""
LineBook — the ordered enriched-line sequence owned by a cart view.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from cartsync.cart import EnrichedLineItem, LineKey


class LineBook:
    """
    Ordered lines addressable by stable key.

    Positions are for display only; every write goes through a LineKey.
    """

    def __init__(self, lines: Iterable[EnrichedLineItem] = ()) -> None:
        self._lines: list[EnrichedLineItem] = list(lines)
        self._generation = 0

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def generation(self) -> int:
        """Bumped by every `replace_all`."""
        return self._generation

    @property
    def lines(self) -> tuple[EnrichedLineItem, ...]:
        return tuple(self._lines)

    def key_at(self, index: int) -> LineKey | None:
        if 0 <= index < len(self._lines):
            return self._lines[index].key
        return None

    def find(self, key: LineKey) -> EnrichedLineItem | None:
        return next((line for line in self._lines if line.key == key), None)

    def _position(self, key: LineKey) -> int | None:
        return next((i for i, line in enumerate(self._lines) if line.key == key), None)

    def set_quantity(self, key: LineKey, quantity: int) -> bool:
        if quantity < 1:
            raise ValueError(f"quantity must be >= 1, got {quantity}")
        position = self._position(key)
        if position is None:
            return False
        self._lines[position] = replace(self._lines[position], quantity=quantity)
        return True

    def delete(self, key: LineKey) -> bool:
        position = self._position(key)
        if position is None:
            return False
        del self._lines[position]
        return True

    def replace_all(self, lines: Iterable[EnrichedLineItem]) -> None:
        self._lines = list(lines)
        self._generation += 1


__all__ = ("LineBook",)
