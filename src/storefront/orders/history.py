"""Order history reader — the customer's past orders, newest first."""

import structlog

from storefront.documents.port import DocumentStore
from storefront.exceptions import IdentityMissing
from storefront.identity.port import IdentityProvider
from storefront.orders.writer import ORDERS_COLLECTION, normalize_email

logger = structlog.get_logger(__name__)


class OrderHistoryReader:
    def __init__(self, documents: DocumentStore, identity: IdentityProvider) -> None:
        self.documents = documents
        self.identity = identity

    def _email(self, email: str | None) -> str:
        if email is None:
            identity = self.identity.current_identity()
            email = identity.email if identity else None
        resolved = normalize_email(email)
        if resolved is None:
            raise IdentityMissing("Sign in to see your orders.")
        return resolved

    def list_orders(self, email: str | None = None) -> list[dict]:
        """Orders for ``email`` (default: the signed-in customer), newest first."""
        resolved = self._email(email)
        history = self.documents.get(ORDERS_COLLECTION, resolved)
        if history is None:
            return []

        orders = sorted(history.get("orders", []), key=lambda order: order.get("created_at", ""), reverse=True)
        logger.debug("Fetched order history", user_email=resolved, orders=len(orders))
        return orders

    def find_order(self, order_number: str, email: str | None = None) -> dict | None:
        return next((order for order in self.list_orders(email) if order.get("order_number") == order_number), None)
