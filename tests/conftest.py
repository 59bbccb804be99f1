"""Shared fixtures: an in-memory storefront backend behind httpx.MockTransport."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import httpx
import pytest
import pytest_asyncio

from cartsync.cart import EnrichedLineItem, LineKey
from cartsync.catalog import Product
from cartsync.config import CartConfig
from cartsync.events import EventBus
from cartsync.remote import AuthClient, CartClient, CatalogClient
from cartsync.session import SessionContext

BASE_URL = "http://shop.test"


def _same_id(a: object, b: object) -> bool:
    return str(a) == str(b)


@dataclass(frozen=True, slots=True)
class Failure:
    """Scripted answer for the next matching request."""

    status: int = 200
    body: Any = None
    exc: Exception | None = None


@dataclass(slots=True)
class FakeBackend:
    """
    Minimal storefront service.

    Cart quantities accumulate like the real service: `POST /cart/add`
    adds the delta to the user's first active cart holding the product.
    """

    products: list[dict[str, Any]] = field(default_factory=list)
    carts: list[dict[str, Any]] = field(default_factory=list)
    categories: list[str] = field(default_factory=list)
    profile: dict[str, Any] | None = None
    token: str = "good-token"
    nested: bool = False
    requests: list[tuple[str, str, Any]] = field(default_factory=list)
    scripted: dict[tuple[str, str], list[Failure]] = field(default_factory=dict)
    gates: dict[tuple[str, str], asyncio.Event] = field(default_factory=dict)

    # ─────────────────────────────────────────────────────────────────────────
    # Scripting
    # ─────────────────────────────────────────────────────────────────────────

    def fail_next(self, method: str, path: str, failure: Failure) -> None:
        self.scripted.setdefault((method, path), []).append(failure)

    def gate(self, method: str, path: str) -> asyncio.Event:
        event = asyncio.Event()
        self.gates[method, path] = event
        return event

    def cart_quantity(self, user_id: str, product_id: object) -> int:
        return sum(
            item["quantity"]
            for cart in self.carts
            if cart["userId"] == user_id and cart["status"] == "active"
            for item in cart["items"]
            if _same_id(item["productId"], product_id)
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Transport
    # ─────────────────────────────────────────────────────────────────────────

    async def handle(self, request: httpx.Request) -> httpx.Response:
        method, path = request.method, request.url.path
        payload = json.loads(request.content) if request.content else None
        self.requests.append((method, path, payload))

        if (gate := self.gates.get((method, path))) is not None:
            await gate.wait()

        if queue := self.scripted.get((method, path)):
            failure = queue.pop(0)
            if failure.exc is not None:
                raise failure.exc
            return httpx.Response(failure.status, json=failure.body)

        return self._route(method, path, payload, request.headers)

    def _route(
        self, method: str, path: str, payload: Any, headers: httpx.Headers
    ) -> httpx.Response:
        match method, path.strip("/").split("/"):
            case "GET", ["products"]:
                if self.nested:
                    return httpx.Response(200, json=[{"products": self.products}])
                return httpx.Response(200, json=self.products)
            case "GET", ["products", "category", category]:
                return httpx.Response(
                    200, json=[p for p in self.products if p.get("category") == category]
                )
            case "GET", ["categories"]:
                return httpx.Response(200, json=self.categories)
            case "GET", ["carts"]:
                return httpx.Response(200, json={"success": True, "data": self.carts})
            case "POST", ["cart", "add"]:
                return self._add(payload)
            case "DELETE", ["cart", user_id]:
                return self._remove(user_id, payload)
            case "GET", ["auth", "profile"]:
                if headers.get("Authorization") != f"Bearer {self.token}":
                    return httpx.Response(401, json={"message": "unauthorized"})
                return httpx.Response(200, json={"user": self.profile})
        return httpx.Response(404, json={"message": "not found"})

    def _add(self, payload: dict[str, Any]) -> httpx.Response:
        product_id, delta = payload["productId"], payload["quantity"]
        user_id = payload["userId"]
        for cart in self.carts:
            if cart["userId"] != user_id or cart["status"] != "active":
                continue
            for item in cart["items"]:
                if _same_id(item["productId"], product_id):
                    item["quantity"] += delta
                    if item["quantity"] <= 0:
                        cart["items"].remove(item)
                    return httpx.Response(200, json={"success": True, "message": "updated"})
        self.carts.append(
            {
                "_id": f"srv-{len(self.carts)}",
                "userId": user_id,
                "status": "active",
                "items": [{"productId": product_id, "quantity": delta}],
            }
        )
        return httpx.Response(200, json={"success": True, "message": "added"})

    def _remove(self, user_id: str, payload: dict[str, Any]) -> httpx.Response:
        for cart in self.carts:
            if cart["userId"] == user_id:
                cart["items"] = [
                    i for i in cart["items"]
                    if not _same_id(i["productId"], payload["productId"])
                ]
        return httpx.Response(200, json={"success": True, "message": "removed"})


# ═══════════════════════════════════════════════════════════════════════════════
# Data
# ═══════════════════════════════════════════════════════════════════════════════


def product_record(
    pid: str, title: str, price: int, pct: int = 0, category: str = "misc"
) -> dict[str, Any]:
    return {
        "_id": pid,
        "title": title,
        "brand": "Acme",
        "category": category,
        "price": price,
        "discountPercentage": pct,
        "stock": 10,
        "rating": 4.5,
    }


def make_product(pid: str = "p1", price: str = "100", pct: str = "0") -> Product:
    return Product(
        id=pid,
        title=f"Product {pid}",
        brand="Acme",
        category="misc",
        price=Decimal(price),
        discount_percentage=Decimal(pct),
    )


def make_line(
    pid: str = "p1",
    quantity: int = 1,
    price: str = "100",
    pct: str = "0",
    cart_id: str = "c1",
    occurrence: int = 0,
) -> EnrichedLineItem:
    return EnrichedLineItem(
        key=LineKey(cart_id, pid, occurrence),
        product_id=pid,
        quantity=quantity,
        product=make_product(pid, price, pct),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend(
        products=[
            product_record("p1", "Phone", 100, 20, "smartphones"),
            product_record("p2", "Case", 50, 0, "accessories"),
            product_record("p3", "Charger", 30, 10, "accessories"),
        ],
        carts=[
            {
                "_id": "c1",
                "userId": "1",
                "status": "active",
                "items": [{"productId": "p1", "quantity": 2}],
            },
            {
                "_id": "c2",
                "userId": "1",
                "status": "active",
                "items": [{"productId": "p2", "quantity": 1}],
            },
            {
                "_id": "c3",
                "userId": "1",
                "status": "ordered",
                "items": [{"productId": "p3", "quantity": 5}],
            },
            {
                "_id": "c4",
                "userId": "2",
                "status": "active",
                "items": [{"productId": "p3", "quantity": 1}],
            },
        ],
        categories=["smartphones", "accessories"],
        profile={"_id": "1", "name": "Alice", "email": "alice@example.com"},
    )


@pytest.fixture
def session() -> SessionContext:
    return SessionContext()


@pytest_asyncio.fixture
async def http(backend: FakeBackend) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(
        base_url=BASE_URL, transport=httpx.MockTransport(backend.handle)
    ) as client:
        yield client


@pytest.fixture
def catalog_client(http: httpx.AsyncClient) -> CatalogClient:
    return CatalogClient(http)


@pytest.fixture
def cart_client(http: httpx.AsyncClient, session: SessionContext) -> CartClient:
    return CartClient(http, headers=session.auth_headers)


@pytest.fixture
def auth_client(http: httpx.AsyncClient, session: SessionContext) -> AuthClient:
    return AuthClient(http, headers=session.auth_headers)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def config() -> CartConfig:
    return CartConfig(base_url=BASE_URL)
