"""
Remote — catalog, cart and auth services over HTTP.

    import httpx
    from cartsync import remote as R

    http = httpx.AsyncClient(base_url=config.base_url, timeout=config.timeout)
    carts = R.CartClient(http, headers=session.auth_headers)
    result = await carts.list_carts()
"""

from __future__ import annotations

from cartsync.remote._errors import (
    ServiceErrorKind,
    ServiceError,
    ServiceFailure,
    as_service_error,
)
from cartsync.remote._http import Ack, HeadersFn, ServiceClient
from cartsync.remote._catalog import CatalogClient
from cartsync.remote._cart import CartClient
from cartsync.remote._auth import UserProfile, AuthClient, parse_profile, refresh_session

__all__ = (
    "ServiceErrorKind",
    "ServiceError",
    "ServiceFailure",
    "as_service_error",
    "Ack",
    "HeadersFn",
    "ServiceClient",
    "CatalogClient",
    "CartClient",
    "UserProfile",
    "AuthClient",
    "parse_profile",
    "refresh_session",
)
