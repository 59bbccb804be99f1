"""
Catalog service client.
"""

from __future__ import annotations

from urllib.parse import quote

from cartsync._types import Lazy
from cartsync.catalog import Product, normalize_catalog
from cartsync.remote._errors import ServiceError, ServiceErrorKind, ServiceFailure
from cartsync.remote._http import ServiceClient


class CatalogClient(ServiceClient):
    """
    Example:
        catalog = CatalogClient(http)
        match await catalog.list_products():
            case Ok(products): ...
            case Error(e): ...
    """

    def list_products(self) -> Lazy[tuple[Product, ...], ServiceError]:
        """`GET /products` — flat or nested payload, normalized."""

        async def fetch() -> tuple[Product, ...]:
            return normalize_catalog(await self._request("GET", "/products"))

        return self._call("list products", fetch)

    def list_category(
        self, category: str
    ) -> Lazy[tuple[Product, ...], ServiceError]:
        """`GET /products/category/{category}`."""

        async def fetch() -> tuple[Product, ...]:
            path = f"/products/category/{quote(category, safe='')}"
            return normalize_catalog(await self._request("GET", path))

        return self._call(f"list category {category}", fetch)

    def list_categories(self) -> Lazy[tuple[str, ...], ServiceError]:
        """`GET /categories` — ordered category identifiers."""

        async def fetch() -> tuple[str, ...]:
            body = await self._request("GET", "/categories")
            if not isinstance(body, list):
                raise ServiceFailure(ServiceErrorKind.PARSE, "expected a list of categories")
            return tuple(str(c) for c in body)

        return self._call("list categories", fetch)


__all__ = ("CatalogClient",)
