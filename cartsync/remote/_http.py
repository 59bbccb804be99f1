"""
HTTP plumbing shared by the service clients.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from combinators import lift as L
from cartsync._types import Lazy
from cartsync.remote._errors import (
    ServiceError,
    ServiceErrorKind,
    ServiceFailure,
    as_service_error,
)

logger = logging.getLogger(__name__)

type HeadersFn = Callable[[], Mapping[str, str]]


@dataclass(frozen=True, slots=True)
class Ack:
    """Body of a successful mutation: `{"success": true, "message"?: str}`."""
    message: str | None = None


def no_headers() -> Mapping[str, str]:
    return {}


class ServiceClient:
    """
    Thin JSON-over-HTTP base.

    Every public call returns a LazyCoroResult: nothing is sent until it
    is awaited, and no exception escapes: failures come back as
    `Error(ServiceError)`.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        headers: HeadersFn = no_headers,
    ) -> None:
        self._http = http
        self._headers = headers

    def _call[T](
        self,
        operation: str,
        fn: Callable[[], Any],
    ) -> Lazy[T, ServiceError]:
        to_error = as_service_error(operation)

        def on_error(exc: Exception) -> ServiceError:
            error = to_error(exc)
            logger.warning("%s failed (%s): %s", operation, error.kind.name, error.message)
            return error

        return L.catching_async(fn, on_error=on_error)

    async def _request(
        self,
        method: str,
        path: str,
        json: object | None = None,
    ) -> Any:
        response = await self._http.request(
            method,
            path,
            json=json,
            headers=dict(self._headers()),
        )
        response.raise_for_status()
        return response.json()


def expect_success(body: object) -> Mapping[str, Any]:
    """Unwrap a `{success, ...}` envelope, raising ServiceFailure when rejected."""
    if not isinstance(body, Mapping):
        raise ServiceFailure(ServiceErrorKind.PARSE, "expected a JSON object")
    if not body.get("success"):
        message = body.get("message") or "request was rejected"
        raise ServiceFailure(ServiceErrorKind.REJECTED, str(message))
    return body


def to_ack(body: object) -> Ack:
    message = expect_success(body).get("message")
    return Ack(str(message) if message is not None else None)


__all__ = (
    "Ack",
    "HeadersFn",
    "ServiceClient",
    "expect_success",
    "no_headers",
    "to_ack",
)
