"""
Cart view — merge, join, price, mutate optimistically.

Level 5: cartsync.view
Level 3: combinators.parallel
Level 2: kungfu.Result
"""

from kungfu import Ok, Error
from cartsync import CartView, EventBus, SessionContext
from cartsync.remote import CartClient, CatalogClient
from examples._infra import DemoBackend, banner, run


def show(view: CartView) -> None:
    for line in view.lines:
        print(f"  {line.key}  {line.title:<8} x{line.quantity}  = {line.line_total}")
    summary = view.summary().rounded()
    print(f"  subtotal {summary.subtotal}  discount {summary.discount}  "
          f"fee {summary.fee}  total {summary.total}")
    for notice in view.drain_notices():
        print(f"  [{notice.level.name}] {notice.message}")


async def main() -> None:
    backend = DemoBackend()
    http = backend.client()
    session = SessionContext()
    view = CartView(CatalogClient(http), CartClient(http), session, EventBus())

    banner("Load")
    await view.load()
    show(view)

    banner("Increment first line")
    match await view.change_quantity_at(0, +1):
        case Ok(outcome):
            print(f"  ✓ {outcome.previous_quantity} → {outcome.quantity}")
        case Error(e):
            print(f"  ✗ {e.message}")
    show(view)

    banner("Increment with the service failing")
    backend.flaky_adds = 1
    match await view.change_quantity_at(0, +1):
        case Ok(outcome):
            print(f"  ✓ {outcome.quantity}")
        case Error(e):
            print(f"  ✗ {e.message} (rolled back: {e.rolled_back})")
    show(view)

    banner("Decrement last unit of second line")
    await view.change_quantity_at(1, -1)
    show(view)

    view.close()
    await http.aclose()


if __name__ == "__main__":
    run(main)
