"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from typing import Any

import httpx

from cartsync.config import LoggingConfig
from cartsync.log import setup_logging


# Fake storefront service
@dataclass(slots=True)
class DemoBackend:
    products: list[dict[str, Any]] = field(default_factory=lambda: [
        {"_id": "p1", "title": "Phone", "brand": "Acme", "category": "smartphones",
         "price": 100, "discountPercentage": 20},
        {"_id": "p2", "title": "Case", "brand": "Acme", "category": "accessories",
         "price": 50, "discountPercentage": 0},
        {"_id": "p3", "title": "Charger", "brand": "Volt", "category": "accessories",
         "price": 30, "discountPercentage": 10},
    ])
    carts: list[dict[str, Any]] = field(default_factory=lambda: [
        {"_id": "c1", "userId": "1", "status": "active",
         "items": [{"productId": "p1", "quantity": 2}, {"productId": "p404", "quantity": 1}]},
        {"_id": "c2", "userId": "1", "status": "active",
         "items": [{"productId": "p2", "quantity": 1}]},
        {"_id": "c3", "userId": "1", "status": "ordered",
         "items": [{"productId": "p3", "quantity": 9}]},
    ])
    flaky_adds: int = 0  # number of upcoming /cart/add calls that fail

    async def handle(self, request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0.01)
        body = json.loads(request.content) if request.content else None
        match request.method, request.url.path.strip("/").split("/"):
            case "GET", ["products"]:
                return httpx.Response(200, json=self.products)
            case "GET", ["products", "category", category]:
                return httpx.Response(200, json=[p for p in self.products if p["category"] == category])
            case "GET", ["categories"]:
                return httpx.Response(200, json=sorted({p["category"] for p in self.products}))
            case "GET", ["carts"]:
                return httpx.Response(200, json={"success": True, "data": self.carts})
            case "POST", ["cart", "add"]:
                if self.flaky_adds:
                    self.flaky_adds -= 1
                    return httpx.Response(503, json={"message": "busy"})
                self._add(body["productId"], body["quantity"], body["userId"])
                return httpx.Response(200, json={"success": True, "message": "Cart updated"})
            case "DELETE", ["cart", user_id]:
                for cart in self.carts:
                    if cart["userId"] == user_id:
                        cart["items"] = [i for i in cart["items"] if i["productId"] != body["productId"]]
                return httpx.Response(200, json={"success": True, "message": "Item removed"})
        return httpx.Response(404, json={"message": "not found"})

    def _add(self, product_id: str, delta: int, user_id: str) -> None:
        for cart in self.carts:
            if cart["userId"] != user_id or cart["status"] != "active":
                continue
            for item in cart["items"]:
                if item["productId"] == product_id:
                    item["quantity"] += delta
                    return
        self.carts.append({"_id": f"c{len(self.carts) + 1}", "userId": user_id,
                           "status": "active", "items": [{"productId": product_id, "quantity": delta}]})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url="http://demo.local", transport=httpx.MockTransport(self.handle))


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    setup_logging(LoggingConfig(level="WARNING"))
    asyncio.run(main())
