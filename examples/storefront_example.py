"""
Storefront — shelves, add-to-cart, live cart counter.

Level 5: cartsync.storefront
Level 3: combinators.parallel
Level 2: kungfu.Result
"""

from kungfu import Ok, Error
from cartsync import CartCounter, EventBus, SessionContext, Storefront, load_config
from cartsync.remote import CartClient, CatalogClient
from examples._infra import DemoBackend, banner, run


async def main() -> None:
    backend = DemoBackend()
    http = backend.client()
    config = load_config({"shelf_size": 2})
    session = SessionContext()
    bus = EventBus()
    carts = CartClient(http, headers=session.auth_headers)
    shop = Storefront(CatalogClient(http), carts, session, bus, config)

    counter = CartCounter(carts, session, config)
    counter.attach(bus)
    await counter.refresh()
    print(f"Cart badge: {session.cart_count}")

    banner("Shelves")
    match await shop.shelves():
        case Ok(shelves):
            for shelf in shelves:
                print(f"  {shelf.category}: {', '.join(p.title for p in shelf.products)}")
        case Error(e):
            print(f"  ✗ {e}")

    banner("Add to cart")
    match await shop.products("accessories"):
        case Ok(products):
            charger = products[-1]
            await shop.add_to_cart(charger)
            print(f"  ✓ {charger.title} added, badge now {session.cart_count}")
        case Error(e):
            print(f"  ✗ {e}")

    await http.aclose()


if __name__ == "__main__":
    run(main)
