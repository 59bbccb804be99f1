"""
Remote errors — what a service call can fail with.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

import httpx


class ServiceErrorKind(Enum):
    """Service error kinds."""
    TRANSPORT = auto()  # network failure, timeout, non-2xx status
    PARSE = auto()  # body is not JSON or not the expected shape
    REJECTED = auto()  # service answered {"success": false}


@dataclass(frozen=True, slots=True)
class ServiceError:
    """Remote call error."""
    kind: ServiceErrorKind
    message: str
    operation: str = ""
    status: int | None = None  # HTTP status when the server answered non-2xx

    def __str__(self) -> str:
        prefix = f"{self.operation}: " if self.operation else ""
        return f"{prefix}{self.message}"


@dataclass(frozen=True, slots=True)
class ServiceFailure(Exception):
    """Raised inside request bodies, turned into ServiceError by `as_service_error`."""
    kind: ServiceErrorKind
    message: str

    def __str__(self) -> str:
        return self.message


def as_service_error(operation: str):
    """
    on_error mapper for `catching_async`.

    Example:
        L.catching_async(fetch, on_error=as_service_error("list carts"))
    """

    def convert(exc: Exception) -> ServiceError:
        match exc:
            case ServiceFailure(kind=kind, message=message):
                return ServiceError(kind, message, operation)
            case httpx.HTTPStatusError():
                return ServiceError(
                    ServiceErrorKind.TRANSPORT,
                    f"HTTP {exc.response.status_code}",
                    operation,
                    exc.response.status_code,
                )
            case httpx.HTTPError():
                return ServiceError(ServiceErrorKind.TRANSPORT, str(exc) or type(exc).__name__, operation)
            case ValueError():
                return ServiceError(ServiceErrorKind.PARSE, str(exc), operation)
            case _:
                return ServiceError(ServiceErrorKind.TRANSPORT, repr(exc), operation)

    return convert


__all__ = (
    "ServiceErrorKind",
    "ServiceError",
    "ServiceFailure",
    "as_service_error",
)
