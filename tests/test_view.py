import asyncio
from decimal import Decimal

import pytest
from kungfu import Ok, Error

from cartsync.events import CartEventKind
from cartsync.mutation import LineState, MutationErrorKind, MutationKind
from cartsync.view import CartView, NoticeLevel
from conftest import Failure


@pytest.fixture
def view(catalog_client, cart_client, session, bus, config):
    return CartView(catalog_client, cart_client, session, bus, config)


async def settle():
    for _ in range(10):
        await asyncio.sleep(0)


class TestLoad:
    @pytest.mark.asyncio
    async def test_merges_active_carts_and_prices(self, view, bus):
        events = []

        async def collect(event):
            events.append(event)

        bus.subscribe(collect, CartEventKind.RELOADED)

        report = await view.load()

        assert report.ok
        assert [(line.product_id, line.quantity) for line in view.lines] == [
            ("p1", 2),
            ("p2", 1),
        ]
        summary = view.summary()
        assert summary.subtotal == Decimal(250)
        assert summary.discount == Decimal(50)
        assert summary.total == Decimal(254)
        assert view.notices == ()
        assert [e.quantity for e in events] == [2]

    @pytest.mark.asyncio
    async def test_unknown_products_are_reported(self, backend, view):
        backend.carts[0]["items"].append({"productId": "ghost", "quantity": 1})

        report = await view.load()

        assert report.unresolved_count == 1
        assert len(view.lines) == 2
        assert view.drain_notices()[0].message == "1 line item references unknown products"
        assert view.notices == ()

    @pytest.mark.asyncio
    async def test_failed_reload_keeps_last_good_lines(self, backend, view):
        await view.load()
        backend.fail_next("GET", "/products", Failure(500, {}))

        report = await view.load()

        assert not report.ok
        assert report.catalog_error is not None
        assert len(view.lines) == 2
        (notice,) = view.notices
        assert notice.level is NoticeLevel.ERROR
        assert notice.message.startswith("Could not load products")

    @pytest.mark.asyncio
    async def test_cart_failure_on_first_load(self, backend, view):
        backend.fail_next("GET", "/carts", Failure(200, {"success": False, "message": "down"}))

        report = await view.load()

        assert report.carts_error is not None
        assert view.lines == ()
        assert view.notices[0].message == "Could not load your cart: down"
        assert view.summary().total == Decimal(4)

    @pytest.mark.asyncio
    async def test_other_users_cart_not_shown(self, backend, view, session):
        session.sign_in("good-token")
        session.set_user("2")

        await view.load()

        assert [line.product_id for line in view.lines] == ["p3"]

    @pytest.mark.asyncio
    async def test_close_during_load_discards(self, backend, view):
        gate = backend.gate("GET", "/carts")
        task = asyncio.create_task(view.load())
        await settle()

        view.close()
        gate.set()
        report = await task

        assert report.discarded
        assert view.lines == ()


class TestMutations:
    @pytest.mark.asyncio
    async def test_increment_updates_lines_and_server(self, backend, view):
        await view.load()

        result = await view.change_quantity_at(0, +1)

        assert isinstance(result, Ok)
        assert view.lines[0].quantity == 3
        assert backend.cart_quantity("1", "p1") == 3
        assert view.summary().subtotal == Decimal(350)

    @pytest.mark.asyncio
    async def test_failed_increment_rolls_back(self, backend, view):
        await view.load()
        backend.fail_next("POST", "/cart/add", Failure(503, {}))

        result = await view.change_quantity_at(0, +1)

        assert isinstance(result, Error)
        assert result.value.rolled_back
        assert view.lines[0].quantity == 2
        assert view.lines[1].quantity == 1
        assert backend.cart_quantity("1", "p1") == 2
        assert view.notices[-1].level is NoticeLevel.ERROR

    @pytest.mark.asyncio
    async def test_decrement_last_unit_removes_line(self, backend, view):
        await view.load()

        result = await view.change_quantity_at(1, -1)

        assert result.value.kind is MutationKind.REMOVED
        assert [line.product_id for line in view.lines] == ["p1"]
        assert backend.requests[-1] == ("DELETE", "/cart/1", {"productId": "p2"})

    @pytest.mark.asyncio
    async def test_remove_at(self, backend, view):
        await view.load()

        await view.remove_at(0)

        assert [line.product_id for line in view.lines] == ["p2"]
        assert backend.cart_quantity("1", "p1") == 0

    @pytest.mark.asyncio
    async def test_bad_position(self, view):
        await view.load()

        result = await view.change_quantity_at(7, +1)

        assert isinstance(result, Error)
        assert result.value.kind is MutationErrorKind.UNKNOWN_LINE
        assert result.value.key is None
        assert view.notices[-1].message == "no cart line at position 7"

    @pytest.mark.asyncio
    async def test_reload_agrees_with_local_state(self, view):
        await view.load()
        await view.change_quantity_at(0, +2)
        local = [(line.key, line.quantity) for line in view.lines]

        await view.load()

        assert [(line.key, line.quantity) for line in view.lines] == local

    @pytest.mark.asyncio
    async def test_closed_view_does_not_notify_discards(self, view):
        await view.load()
        view.close()

        result = await view.change_quantity_at(0, +1)

        assert result.value.kind is MutationErrorKind.DISCARDED
        assert view.notices == ()

    @pytest.mark.asyncio
    async def test_failed_change_keeps_value_reloaded_meanwhile(self, backend, view):
        await view.load()
        gate = backend.gate("POST", "/cart/add")
        backend.fail_next("POST", "/cart/add", Failure(503, {}))
        task = asyncio.create_task(view.change_quantity_at(0, +1))
        await settle()
        assert view.lines[0].quantity == 3

        backend.carts[0]["items"][0]["quantity"] = 7
        await view.load()
        gate.set()
        result = await task

        assert isinstance(result, Error)
        assert not result.value.rolled_back
        assert view.lines[0].quantity == 7
        assert view.state_of(view.lines[0].key) is LineState.STABLE
