"""Storefront bounded context — cart, wishlist, checkout and order history.

Holds the client-side commerce state engine: the persisted cart and wishlist
collections, the three-step checkout state machine, the payment gateway
handshake and the append-only per-customer order history.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
