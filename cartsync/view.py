"""
Cart view — the single authoritative, priced line-item view of a cart.

    view = CartView(catalog_client, cart_client, session, bus, config)
    await view.load()
    print(view.summary().rounded().total)
    await view.change_quantity_at(0, +1)
    view.close()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto

from combinators import parallel, lift as L
from kungfu import Result, Ok, Error

from cartsync._types import Lazy
from cartsync.cart import EnrichedLineItem, LineKey, merge_active, join
from cartsync.config import CartConfig
from cartsync.events import CartEvent, CartEventKind, EventBus
from cartsync.mutation import (
    LineBook,
    LineState,
    MutationCoordinator,
    MutationError,
    MutationErrorKind,
    MutationOutcome,
)
from cartsync.pricing import PriceSummary, summarize
from cartsync.remote import CartClient, CatalogClient, ServiceError
from cartsync.session import SessionContext

logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Notices — user-facing, non-blocking messages
# ═══════════════════════════════════════════════════════════════════════════════


class NoticeLevel(Enum):
    INFO = auto()
    WARNING = auto()
    ERROR = auto()


@dataclass(frozen=True, slots=True)
class Notice:
    level: NoticeLevel
    message: str


@dataclass(frozen=True, slots=True)
class LoadReport:
    line_count: int
    unresolved_count: int
    catalog_error: ServiceError | None = None
    carts_error: ServiceError | None = None
    discarded: bool = False

    @property
    def ok(self) -> bool:
        return (
            self.catalog_error is None
            and self.carts_error is None
            and not self.discarded
        )


def _settled[T](
    lazy: Lazy[T, ServiceError],
) -> Lazy[Result[T, ServiceError], str]:
    """Wrap a call so `parallel` always gets Ok(inner result)."""

    async def run() -> Result[T, ServiceError]:
        return await lazy

    return L.catching_async(run, on_error=str)


# ═══════════════════════════════════════════════════════════════════════════════
# CartView
# ═══════════════════════════════════════════════════════════════════════════════


class CartView:
    """
    Owns the enriched-line sequence and derives the price summary.

    Reads rebuild the whole sequence from both services; writes go through
    the MutationCoordinator. A failed reload keeps the last good lines.
    """

    def __init__(
        self,
        catalog: CatalogClient,
        carts: CartClient,
        session: SessionContext,
        bus: EventBus,
        config: CartConfig | None = None,
    ) -> None:
        self._catalog = catalog
        self._carts = carts
        self._session = session
        self._bus = bus
        self._config = config or CartConfig()
        self._book = LineBook()
        self._coordinator = MutationCoordinator(
            self._book,
            carts,
            session,
            bus,
            fallback_user_id=self._config.default_user_id,
        )
        self._notices: list[Notice] = []
        self._unresolved: tuple[LineKey, ...] = ()

    # ─────────────────────────────────────────────────────────────────────────
    # Read side
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def user_id(self) -> str:
        return self._session.effective_user_id(self._config.default_user_id)

    @property
    def lines(self) -> tuple[EnrichedLineItem, ...]:
        return self._book.lines

    @property
    def unresolved_count(self) -> int:
        return len(self._unresolved)

    @property
    def closed(self) -> bool:
        return self._coordinator.closed

    def summary(self) -> PriceSummary:
        return summarize(self._book.lines, fee=self._config.platform_fee)

    def state_of(self, key: LineKey) -> LineState:
        return self._coordinator.state_of(key)

    @property
    def notices(self) -> tuple[Notice, ...]:
        return tuple(self._notices)

    def drain_notices(self) -> tuple[Notice, ...]:
        drained, self._notices = tuple(self._notices), []
        return drained

    def _notify(self, level: NoticeLevel, message: str) -> None:
        self._notices.append(Notice(level, message))

    async def load(self) -> LoadReport:
        """
        Fetch catalog and carts in parallel, merge, join, replace the lines.

        Either fetch failing leaves the current lines in place and adds an
        error notice.
        """
        if self.closed:
            return LoadReport(len(self._book), self.unresolved_count, discarded=True)

        fetched = await parallel(
            _settled(self._catalog.list_products()),
            _settled(self._carts.list_carts()),
        )
        if self.closed:
            logger.debug("Cart view closed during load, discarding results")
            return LoadReport(len(self._book), self.unresolved_count, discarded=True)

        match fetched:
            case Ok(results):
                catalog_result, carts_result = results
            case Error(reason):
                logger.error("Cart load crashed: %s", reason)
                self._notify(NoticeLevel.ERROR, "Could not load the cart")
                return LoadReport(len(self._book), self.unresolved_count, discarded=True)

        catalog_error = carts_error = None
        match catalog_result:
            case Error(e):
                catalog_error = e
                self._notify(NoticeLevel.ERROR, f"Could not load products: {e.message}")
        match carts_result:
            case Error(e):
                carts_error = e
                self._notify(NoticeLevel.ERROR, f"Could not load your cart: {e.message}")

        if catalog_error is not None or carts_error is not None:
            return LoadReport(
                len(self._book),
                self.unresolved_count,
                catalog_error=catalog_error,
                carts_error=carts_error,
            )

        products = catalog_result.value
        records = carts_result.value
        joined = join(merge_active(records, self.user_id), products)

        self._book.replace_all(joined.lines)
        self._coordinator.reset()
        self._unresolved = joined.unresolved
        if message := joined.describe_unresolved():
            self._notify(NoticeLevel.WARNING, message)

        await self._bus.publish(
            CartEvent(CartEventKind.RELOADED, self.user_id, quantity=len(joined.lines))
        )
        return LoadReport(len(joined.lines), joined.unresolved_count)

    # ─────────────────────────────────────────────────────────────────────────
    # Write side
    # ─────────────────────────────────────────────────────────────────────────

    async def change_quantity(
        self, key: LineKey, delta: int
    ) -> Result[MutationOutcome, MutationError]:
        return self._report(await self._coordinator.change_quantity(key, delta))

    async def remove(self, key: LineKey) -> Result[MutationOutcome, MutationError]:
        return self._report(await self._coordinator.remove(key))

    async def change_quantity_at(
        self, index: int, delta: int
    ) -> Result[MutationOutcome, MutationError]:
        """Positional entry point; the key is captured before any await."""
        key = self._book.key_at(index)
        if key is None:
            return self._report(Error(self._no_line(index)))
        return await self.change_quantity(key, delta)

    async def remove_at(self, index: int) -> Result[MutationOutcome, MutationError]:
        key = self._book.key_at(index)
        if key is None:
            return self._report(Error(self._no_line(index)))
        return await self.remove(key)

    def close(self) -> None:
        """Tear down: answers still in flight are no longer applied."""
        self._coordinator.close()

    @staticmethod
    def _no_line(index: int) -> MutationError:
        return MutationError(
            MutationErrorKind.UNKNOWN_LINE, None, f"no cart line at position {index}"
        )

    def _report(
        self, result: Result[MutationOutcome, MutationError]
    ) -> Result[MutationOutcome, MutationError]:
        match result:
            case Error(e) if e.kind is not MutationErrorKind.DISCARDED:
                self._notify(NoticeLevel.ERROR, e.message)
        return result


__all__ = ("NoticeLevel", "Notice", "LoadReport", "CartView")
