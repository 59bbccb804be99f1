import pytest

from cartsync.events import CartEvent, CartEventKind, EventBus
from cartsync.session import SessionContext


def event(kind=CartEventKind.ITEM_ADDED):
    return CartEvent(kind, user_id="1", product_id="p1", quantity=1)


class TestEventBus:
    @pytest.mark.asyncio
    async def test_filters_by_kind(self):
        bus = EventBus()
        seen = []

        async def on_removed(e):
            seen.append(e.kind)

        bus.subscribe(on_removed, CartEventKind.LINE_REMOVED)

        await bus.publish(event(CartEventKind.ITEM_ADDED))
        await bus.publish(event(CartEventKind.LINE_REMOVED))

        assert seen == [CartEventKind.LINE_REMOVED]

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_others(self):
        bus = EventBus()
        seen = []

        async def broken(e):
            raise RuntimeError("boom")

        async def working(e):
            seen.append(e)

        bus.subscribe(broken)
        bus.subscribe(working)

        report = await bus.publish(event())

        assert (report.delivered, report.failed) == (1, 1)
        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        bus = EventBus()
        seen = []

        async def handler(e):
            seen.append(e)

        unsubscribe = bus.subscribe(handler)
        unsubscribe()
        unsubscribe()

        report = await bus.publish(event())

        assert seen == []
        assert report.delivered == 0


class TestSessionContext:
    def test_anonymous_uses_fallback(self):
        session = SessionContext()
        assert session.effective_user_id("1") == "1"
        assert session.auth_headers() == {}

    def test_token_without_user_uses_fallback(self):
        session = SessionContext()
        session.sign_in("t")
        assert session.effective_user_id("1") == "1"
        assert session.auth_headers() == {"Authorization": "Bearer t"}

    def test_signed_in_user(self):
        session = SessionContext()
        session.sign_in("t")
        session.set_user("42")
        assert session.effective_user_id("1") == "42"

        session.sign_out()
        assert session.effective_user_id("1") == "1"
        assert not session.has_credential

    def test_cart_count_never_negative(self):
        session = SessionContext()
        session.set_cart_count(-3)
        assert session.cart_count == 0
