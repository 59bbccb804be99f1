"""
Cart service client.
"""

from __future__ import annotations

from urllib.parse import quote

from cartsync._types import Lazy, WireId
from cartsync.cart import CartRecord, parse_cart_records
from cartsync.remote._errors import ServiceError
from cartsync.remote._http import Ack, ServiceClient, expect_success, to_ack


class CartClient(ServiceClient):
    """
    Cart storage.

    The service accumulates quantities: `adjust` sends a DELTA, never the
    absolute quantity.
    """

    def list_carts(self) -> Lazy[tuple[CartRecord, ...], ServiceError]:
        """`GET /carts` → `{success, data: [...]}`."""

        async def fetch() -> tuple[CartRecord, ...]:
            body = expect_success(await self._request("GET", "/carts"))
            return parse_cart_records(body.get("data"))

        return self._call("list carts", fetch)

    def adjust(
        self,
        product_id: WireId,
        delta: int,
        user_id: str,
    ) -> Lazy[Ack, ServiceError]:
        """`POST /cart/add` with `{productId, quantity: delta, userId}`."""
        payload = {"productId": product_id, "quantity": delta, "userId": user_id}

        async def send() -> Ack:
            return to_ack(await self._request("POST", "/cart/add", json=payload))

        return self._call(f"adjust {product_id} by {delta}", send)

    def remove(
        self,
        product_id: WireId,
        user_id: str,
    ) -> Lazy[Ack, ServiceError]:
        """`DELETE /cart/{userId}` with `{productId}`."""
        path = f"/cart/{quote(user_id, safe='')}"

        async def send() -> Ack:
            return to_ack(
                await self._request("DELETE", path, json={"productId": product_id})
            )

        return self._call(f"remove {product_id}", send)


__all__ = ("CartClient",)
