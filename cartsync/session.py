"""
Session context — credential, user and cart count for one app session.

Injected into the components that need it instead of being read from
ambient storage.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class SessionContext:
    token: str | None = None
    user_id: str | None = None
    cart_count: int = 0

    @property
    def has_credential(self) -> bool:
        return bool(self.token)

    def auth_headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def effective_user_id(self, fallback: str) -> str:
        """User for cart flows: the signed-in one, otherwise `fallback`."""
        if self.has_credential and self.user_id:
            return self.user_id
        return fallback

    def sign_in(self, token: str) -> None:
        self.token = token
        self.user_id = None

    def sign_out(self) -> None:
        self.token = None
        self.user_id = None

    def set_user(self, user_id: str) -> None:
        self.user_id = user_id

    def set_cart_count(self, count: int) -> None:
        self.cart_count = max(count, 0)


__all__ = ("SessionContext",)
