"""
Events — notification channel between views.

A view that changes the cart publishes; any view that shows derived
counts subscribes.

    bus = EventBus()
    unsubscribe = bus.subscribe(on_cart_change, CartEventKind.LINE_REMOVED)
    await bus.publish(CartEvent(CartEventKind.LINE_REMOVED, user_id="1"))
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum, auto

from cartsync._types import WireId

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Event Types
# ═══════════════════════════════════════════════════════════════════════════════


class CartEventKind(Enum):
    ITEM_ADDED = auto()
    QUANTITY_CHANGED = auto()
    LINE_REMOVED = auto()
    RELOADED = auto()


@dataclass(frozen=True, slots=True)
class CartEvent:
    kind: CartEventKind
    user_id: str
    product_id: WireId | None = None
    quantity: int | None = None


type Handler = Callable[[CartEvent], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class PublishReport:
    delivered: int
    failed: int


# ═══════════════════════════════════════════════════════════════════════════════
# EventBus
# ═══════════════════════════════════════════════════════════════════════════════


class EventBus:
    """
    In-process publish/subscribe.

    Handlers run one after another in subscription order. A failing
    handler is logged and counted; the others still run and the publisher
    never sees the exception.
    """

    def __init__(self) -> None:
        self._subscribers: list[tuple[frozenset[CartEventKind], Handler]] = []

    def subscribe(self, handler: Handler, *kinds: CartEventKind) -> Callable[[], None]:
        """Subscribe to `kinds` (all kinds when none given). Returns an unsubscribe callable."""
        entry = (frozenset(kinds or CartEventKind), handler)
        self._subscribers.append(entry)

        def unsubscribe() -> None:
            if entry in self._subscribers:
                self._subscribers.remove(entry)

        return unsubscribe

    async def publish(self, event: CartEvent) -> PublishReport:
        delivered = 0
        failed = 0

        for kinds, handler in tuple(self._subscribers):
            if event.kind not in kinds:
                continue
            try:
                await handler(event)
                delivered += 1
            except Exception:
                logger.exception("Handler %r failed on %s", handler, event.kind.name)
                failed += 1

        return PublishReport(delivered=delivered, failed=failed)


__all__ = (
    "CartEventKind",
    "CartEvent",
    "Handler",
    "PublishReport",
    "EventBus",
)
