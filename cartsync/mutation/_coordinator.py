"""
Mutation coordinator — optimistic changes with commit or rollback.

Every mutation is a two-step transaction:

    1. local step   — applied immediately (optimistic quantity),
                      compensator restores the previous value
    2. remote step  — adjust/remove request

If the remote step fails, the compensator runs and the line ends up
exactly as it was, unless the book was reloaded meanwhile: the reloaded
value came from the service and is kept. Removal has no local step: the
line is only deleted once the service confirms.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from kungfu import Result, Ok, Error

from cartsync._types import Lazy
from cartsync.cart import EnrichedLineItem, LineKey
from cartsync.events import CartEvent, CartEventKind, EventBus
from cartsync.mutation._book import LineBook
from cartsync.mutation._types import (
    CartRemote,
    LineState,
    MutationError,
    MutationErrorKind,
    MutationKind,
    MutationOutcome,
)
from cartsync.remote import Ack, ServiceError, ServiceErrorKind
from cartsync.session import SessionContext

logger = logging.getLogger(__name__)

type Compensator = Callable[[], bool]
"""Restores the local value; returns whether anything was restored."""

type _Settled = tuple[Result[MutationOutcome, MutationError], CartEvent | None]


@dataclass(frozen=True, slots=True)
class _RemoteStep:
    request: Lazy[Ack, ServiceError]
    compensate: Compensator | None = None


def _from_service(key: LineKey, error: ServiceError, rolled_back: bool) -> MutationError:
    kind = (
        MutationErrorKind.REJECTED
        if error.kind is ServiceErrorKind.REJECTED
        else MutationErrorKind.TRANSPORT
    )
    return MutationError(kind, key, error.message, cause=error, rolled_back=rolled_back)


class MutationCoordinator:
    """
    Serializes mutations per line, runs different lines concurrently.

    Example:
        coordinator = MutationCoordinator(book, cart_client, session, bus)
        key = book.key_at(0)
        match await coordinator.change_quantity(key, +1):
            case Ok(outcome): ...
            case Error(e): show(e.message)  # already rolled back
    """

    def __init__(
        self,
        book: LineBook,
        remote: CartRemote,
        session: SessionContext,
        bus: EventBus,
        *,
        fallback_user_id: str = "1",
    ) -> None:
        self._book = book
        self._remote = remote
        self._session = session
        self._bus = bus
        self._fallback_user_id = fallback_user_id
        self._locks: dict[LineKey, asyncio.Lock] = {}
        self._states: dict[LineKey, LineState] = {}
        self._closed = False

    # ─────────────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Stop applying results; answers still in flight are discarded."""
        self._closed = True

    def state_of(self, key: LineKey) -> LineState:
        return self._states.get(key, LineState.STABLE)

    def reset(self) -> None:
        """Forget line states after a full rebuild of the book."""
        self._states.clear()
        live = {line.key for line in self._book.lines}
        self._locks = {
            k: lock for k, lock in self._locks.items() if k in live or lock.locked()
        }

    def _lock(self, key: LineKey) -> asyncio.Lock:
        return self._locks.setdefault(key, asyncio.Lock())

    def _user_id(self) -> str:
        return self._session.effective_user_id(self._fallback_user_id)

    # ─────────────────────────────────────────────────────────────────────────
    # Operations
    # ─────────────────────────────────────────────────────────────────────────

    async def change_quantity(
        self, key: LineKey, delta: int
    ) -> Result[MutationOutcome, MutationError]:
        """
        Add `delta` to the line's quantity.

        A result of zero or less turns into `remove`. Waits for earlier
        mutations of the same line before reading its quantity. Subscribers
        are notified after the line's turn is released.
        """
        async with self._lock(key):
            result, event = await self._change(key, delta)
        return await self._announce(result, event)

    async def remove(self, key: LineKey) -> Result[MutationOutcome, MutationError]:
        """Delete the line once the service confirms; untouched on failure."""
        async with self._lock(key):
            line = self._current(key)
            if isinstance(line, MutationError):
                return Error(line)
            result, event = await self._remove(line)
        return await self._announce(result, event)

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _current(self, key: LineKey) -> EnrichedLineItem | MutationError:
        if self._closed:
            return MutationError(MutationErrorKind.DISCARDED, key, "cart view is closed")
        line = self._book.find(key)
        if line is None:
            return MutationError(
                MutationErrorKind.UNKNOWN_LINE, key, f"line {key} is not in the cart"
            )
        return line

    async def _change(self, key: LineKey, delta: int) -> _Settled:
        line = self._current(key)
        if isinstance(line, MutationError):
            return Error(line), None

        new_quantity = line.quantity + delta
        if new_quantity <= 0:
            return await self._remove(line)
        if delta == 0:
            return Ok(
                MutationOutcome(key, MutationKind.UNCHANGED, line.quantity, line.quantity)
            ), None

        previous = line.quantity
        generation = self._book.generation
        self._states[key] = LineState.PENDING
        self._book.set_quantity(key, new_quantity)

        def restore() -> bool:
            # a reload while pending already brought the server's value
            if self._book.generation != generation:
                logger.info("Line %s was reloaded while pending, keeping it", key)
                return False
            return self._book.set_quantity(key, previous)

        result = await self._run(
            key,
            _RemoteStep(
                request=self._remote.adjust(line.product_id, delta, self._user_id()),
                compensate=restore,
            ),
        )

        match result:
            case Ok(ack):
                logger.debug("Committed %s: %d -> %d", key, previous, new_quantity)
                outcome = MutationOutcome(
                    key, MutationKind.ADJUSTED, previous, new_quantity, ack.message
                )
                return Ok(outcome), self._event(
                    CartEventKind.QUANTITY_CHANGED, line, new_quantity
                )
            case Error(e):
                return Error(e), None

    async def _remove(self, line: EnrichedLineItem) -> _Settled:
        key = line.key
        self._states[key] = LineState.PENDING
        result = await self._run(
            key,
            _RemoteStep(request=self._remote.remove(line.product_id, self._user_id())),
        )

        match result:
            case Ok(ack):
                self._book.delete(key)
                self._states.pop(key, None)
                logger.debug("Removed %s", key)
                outcome = MutationOutcome(
                    key, MutationKind.REMOVED, line.quantity, 0, ack.message
                )
                return Ok(outcome), self._event(CartEventKind.LINE_REMOVED, line, 0)
            case Error(e):
                return Error(e), None

    async def _run(
        self, key: LineKey, step: _RemoteStep
    ) -> Result[Ack, MutationError]:
        """Send the request; on failure run the compensator."""
        result = await step.request

        if self._closed:
            logger.debug("Discarding answer for %s, view closed", key)
            return Error(
                MutationError(MutationErrorKind.DISCARDED, key, "cart view is closed")
            )

        match result:
            case Ok(ack):
                self._states[key] = LineState.STABLE
                return Ok(ack)
            case Error(error):
                rolled_back = step.compensate() if step.compensate is not None else False
                self._states[key] = (
                    LineState.ROLLED_BACK if rolled_back else LineState.STABLE
                )
                logger.warning(
                    "Mutation of %s failed (%s), %s: %s",
                    key,
                    error.kind.name,
                    "rolled back" if rolled_back else "line kept",
                    error.message,
                )
                return Error(_from_service(key, error, rolled_back))

    def _event(
        self, kind: CartEventKind, line: EnrichedLineItem, quantity: int
    ) -> CartEvent:
        return CartEvent(kind, self._user_id(), product_id=line.product_id, quantity=quantity)

    async def _announce(
        self,
        result: Result[MutationOutcome, MutationError],
        event: CartEvent | None,
    ) -> Result[MutationOutcome, MutationError]:
        if event is not None:
            await self._bus.publish(event)
        return result


__all__ = ("MutationCoordinator",)
