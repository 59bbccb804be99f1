"""
Mutation — optimistic quantity changes and removals.

    from cartsync import mutation as M

    book = M.LineBook(joined.lines)
    coordinator = M.MutationCoordinator(book, cart_client, session, bus)
    result = await coordinator.change_quantity(book.key_at(0), +1)
"""

from __future__ import annotations

from cartsync.mutation._types import (
    LineState,
    MutationKind,
    MutationOutcome,
    MutationErrorKind,
    MutationError,
    CartRemote,
)
from cartsync.mutation._book import LineBook
from cartsync.mutation._coordinator import MutationCoordinator

__all__ = (
    "LineState",
    "MutationKind",
    "MutationOutcome",
    "MutationErrorKind",
    "MutationError",
    "CartRemote",
    "LineBook",
    "MutationCoordinator",
)
