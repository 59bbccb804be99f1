"""
Auth/profile client.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from kungfu import Ok, Error

from cartsync._types import Lazy, normalize_id
from cartsync.remote._errors import ServiceError, ServiceErrorKind, ServiceFailure
from cartsync.remote._http import ServiceClient
from cartsync.session import SessionContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class UserProfile:
    user_id: str
    name: str
    email: str


def parse_profile(body: object) -> UserProfile:
    """Accepts `{"user": {...}}` as well as the bare user object."""
    if isinstance(body, Mapping) and isinstance(body.get("user"), Mapping):
        body = body["user"]
    if not isinstance(body, Mapping):
        raise ServiceFailure(ServiceErrorKind.PARSE, "expected a user object")
    user: Mapping[str, Any] = body
    raw_id = user.get("_id", user.get("id"))
    if raw_id is None:
        raise ServiceFailure(ServiceErrorKind.PARSE, "user object has no id")
    return UserProfile(
        user_id=normalize_id(raw_id),
        name=str(user.get("name") or ""),
        email=str(user.get("email") or ""),
    )


class AuthClient(ServiceClient):
    def profile(self) -> Lazy[UserProfile, ServiceError]:
        """`GET /auth/profile` with the session's bearer token."""

        async def fetch() -> UserProfile:
            return parse_profile(await self._request("GET", "/auth/profile"))

        return self._call("fetch profile", fetch)


async def refresh_session(
    session: SessionContext,
    auth: AuthClient,
) -> UserProfile | None:
    """
    Resolve the signed-in user.

    No token → no user, nothing is sent. A rejected token (non-2xx) is
    dropped from the session; transport problems keep it for a retry.
    """
    if not session.has_credential:
        return None

    match await auth.profile():
        case Ok(profile):
            session.set_user(profile.user_id)
            return profile
        case Error(error):
            if error.status is not None:
                logger.info("Profile request refused, clearing stored token")
                session.sign_out()
            return None


__all__ = ("UserProfile", "parse_profile", "AuthClient", "refresh_session")
