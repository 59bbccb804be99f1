"""
Mutation types — line states, outcomes, errors, remote protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Protocol

from cartsync._types import Lazy, WireId
from cartsync.cart import LineKey
from cartsync.remote import Ack, ServiceError

# ═══════════════════════════════════════════════════════════════════════════════
# Line State — Optimistic Lifecycle
# ═══════════════════════════════════════════════════════════════════════════════


class LineState(Enum):
    """
    State of one line with respect to its latest mutation.

    Lifecycle:
        STABLE → PENDING → STABLE       (server confirmed)
                         → ROLLED_BACK  (server refused, local value restored)
    """

    STABLE = auto()
    PENDING = auto()
    ROLLED_BACK = auto()


class MutationKind(Enum):
    ADJUSTED = auto()
    REMOVED = auto()
    UNCHANGED = auto()


@dataclass(frozen=True, slots=True)
class MutationOutcome:
    """Committed mutation."""

    key: LineKey
    kind: MutationKind
    previous_quantity: int
    quantity: int  # 0 when removed
    message: str | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class MutationErrorKind(Enum):
    UNKNOWN_LINE = auto()  # key not (or no longer) in the cart
    REJECTED = auto()  # service answered success: false
    TRANSPORT = auto()  # network / parse failure
    DISCARDED = auto()  # view closed before the answer arrived


@dataclass(frozen=True, slots=True)
class MutationError:
    """Non-fatal mutation failure; local state is already reconciled."""

    kind: MutationErrorKind
    key: LineKey | None
    message: str
    cause: ServiceError | None = None
    rolled_back: bool = False

    def __str__(self) -> str:
        return self.message


# ═══════════════════════════════════════════════════════════════════════════════
# Remote Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class CartRemote(Protocol):
    """
    What the coordinator needs from the cart service.

    `CartClient` implements it; tests pass in-memory fakes.
    """

    def adjust(
        self, product_id: WireId, delta: int, user_id: str
    ) -> Lazy[Ack, ServiceError]:
        """Add `delta` (may be negative) to the server-side quantity."""
        ...

    def remove(
        self, product_id: WireId, user_id: str
    ) -> Lazy[Ack, ServiceError]:
        """Delete the product from the user's cart."""
        ...


__all__ = (
    "LineState",
    "MutationKind",
    "MutationOutcome",
    "MutationErrorKind",
    "MutationError",
    "CartRemote",
)
