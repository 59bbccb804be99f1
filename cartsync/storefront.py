"""
Storefront — product listings, category shelves, add-to-cart, cart count.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from combinators import parallel, lift as L
from kungfu import Result, Ok, Error

from cartsync._types import Lazy
from cartsync.cart import merge_active
from cartsync.catalog import Product, filter_by_category
from cartsync.config import CartConfig
from cartsync.events import CartEvent, CartEventKind, EventBus
from cartsync.remote import Ack, CartClient, CatalogClient, ServiceError
from cartsync.session import SessionContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Shelf:
    category: str
    products: tuple[Product, ...]
    error: ServiceError | None = None


class Storefront:
    """
    Catalog-facing operations.

    Example:
        shop = Storefront(catalog, carts, session, bus, config)
        match await shop.add_to_cart(product):
            case Ok(_): ...  # ITEM_ADDED published
            case Error(e): show(e.message)
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

    async def products(
        self, category: str | None = None
    ) -> Result[tuple[Product, ...], ServiceError]:
        """Whole catalog, optionally narrowed to one category."""
        match await self._catalog.list_products():
            case Ok(products):
                return Ok(filter_by_category(products, category))
            case Error(e):
                return Error(e)

    async def shelves(self) -> Result[tuple[Shelf, ...], ServiceError]:
        """
        First `category_limit` categories with up to `shelf_size` products each.

        Categories are fetched in parallel; one failing category yields an
        empty shelf carrying its error instead of failing the page.
        """
        match await self._catalog.list_categories():
            case Error(e):
                return Error(e)
            case Ok(categories):
                chosen = categories[: self._config.category_limit]

        size = self._config.shelf_size

        def fetch_shelf(category: str) -> Lazy[Shelf, str]:
            async def run() -> Shelf:
                match await self._catalog.list_category(category):
                    case Ok(products):
                        return Shelf(category, products[:size])
                    case Error(e):
                        return Shelf(category, (), e)

            return L.catching_async(run, on_error=str)

        if not chosen:
            return Ok(())

        match await parallel(*[fetch_shelf(c) for c in chosen]):
            case Ok(shelves):
                return Ok(tuple(shelves))
            case Error(reason):
                logger.error("Shelf fetch crashed: %s", reason)
                return Ok(tuple(Shelf(c, ()) for c in chosen))

    async def add_to_cart(
        self, product: Product, quantity: int = 1
    ) -> Result[Ack, ServiceError]:
        """Add `quantity` units (the service accumulates) and publish ITEM_ADDED."""
        user_id = self._session.effective_user_id(self._config.default_user_id)
        result = await self._carts.adjust(product.cart_ref, quantity, user_id)
        match result:
            case Ok(_):
                await self._bus.publish(
                    CartEvent(
                        CartEventKind.ITEM_ADDED,
                        user_id,
                        product_id=product.cart_ref,
                        quantity=quantity,
                    )
                )
        return result


class CartCounter:
    """
    Keeps `SessionContext.cart_count` in step with the server.

    Subscribe it to the bus; every cart event triggers a recount of the
    user's merged lines. A failed recount keeps the previous count.
    """

    def __init__(
        self,
        carts: CartClient,
        session: SessionContext,
        config: CartConfig | None = None,
    ) -> None:
        self._carts = carts
        self._session = session
        self._config = config or CartConfig()

    def attach(self, bus: EventBus):
        return bus.subscribe(self.on_event)

    async def on_event(self, event: CartEvent) -> None:
        await self.refresh()

    async def refresh(self) -> int:
        user_id = self._session.effective_user_id(self._config.default_user_id)
        match await self._carts.list_carts():
            case Ok(records):
                self._session.set_cart_count(len(merge_active(records, user_id)))
            case Error(e):
                logger.warning("Cart count refresh failed: %s", e)
        return self._session.cart_count


__all__ = ("Shelf", "Storefront", "CartCounter")
