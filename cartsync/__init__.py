"""
cartsync — client-side cart reconciliation for a storefront backend.

    from cartsync import catalog as C   # Product normalization
    from cartsync import cart as K      # Merge active carts, join with catalog
    from cartsync import pricing as P   # Subtotal, discount, fee, total
    from cartsync import mutation as M  # Optimistic changes with rollback
    from cartsync import remote as R    # HTTP service clients
"""

from cartsync import catalog
from cartsync import cart
from cartsync import pricing
from cartsync import remote
from cartsync import mutation
from cartsync._types import (
    Lazy,
    WireId,
    normalize_id,
)
from cartsync.config import CartConfig, LoggingConfig, load_config
from cartsync.events import CartEvent, CartEventKind, EventBus
from cartsync.log import setup_logging
from cartsync.session import SessionContext
from cartsync.storefront import CartCounter, Shelf, Storefront
from cartsync.view import CartView, LoadReport, Notice, NoticeLevel

__version__ = "0.1.0"

__all__ = (
    "catalog",
    "cart",
    "pricing",
    "remote",
    "mutation",
    "Lazy",
    "WireId",
    "normalize_id",
    "CartConfig",
    "LoggingConfig",
    "load_config",
    "CartEvent",
    "CartEventKind",
    "EventBus",
    "setup_logging",
    "SessionContext",
    "CartCounter",
    "Shelf",
    "Storefront",
    "CartView",
    "LoadReport",
    "Notice",
    "NoticeLevel",
)
