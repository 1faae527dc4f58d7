"""Order writer — appends a paid order to the customer's order history.

The history is one document per customer email. Appending is a
read-modify-write guarded by the document's version: the update only
lands if nobody wrote the history since it was read, otherwise the writer
reads again and reapplies the append. Transient store failures are retried
with exponential backoff; when the attempts run out the caller gets
OrderPersistenceFailed, carrying what support needs to find the payment.
"""

import random
import time
from collections.abc import Callable

import structlog

from storefront.config import Settings
from storefront.documents.port import DocumentStore
from storefront.exceptions import (
    DocumentExists,
    DocumentStoreError,
    IdentityMissing,
    OrderPersistenceFailed,
    VersionConflict,
)
from storefront.identity.port import IdentityProvider
from storefront.orders.numbering import generate_order_number
from storefront.orders.order import Order

logger = structlog.get_logger(__name__)

ORDERS_COLLECTION = "orders"
MAX_CONFLICT_RETRIES = 5


def normalize_email(email: str | None) -> str | None:
    if not email:
        return None
    email = email.strip().lower()
    if "@" not in email:
        return None
    return email


class OrderWriter:
    """Writes orders into per-customer order histories."""

    def __init__(
        self,
        documents: DocumentStore,
        identity: IdentityProvider,
        settings: Settings,
        sleep: Callable[[float], None] = time.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self.documents = documents
        self.identity = identity
        self.settings = settings
        self.sleep = sleep
        self.rng = rng

    def resolve_email(self, customer_email: str | None = None, draft=None) -> str:
        """Pick the email that keys the order history.

        An explicit email wins, then the signed-in identity, then the email
        typed into the checkout form.
        """
        identity = self.identity.current_identity()
        candidates = [
            customer_email,
            identity.email if identity else None,
            draft.email if draft is not None else None,
        ]
        for candidate in candidates:
            email = normalize_email(candidate)
            if email:
                return email
        raise IdentityMissing()

    def write(self, customer_email, draft, cart_lines, payment) -> str:
        """Append a new order and return its order number."""
        email = self.resolve_email(customer_email, draft)
        order_number = generate_order_number(rng=self.rng)
        max_attempts = max(1, self.settings.order_write_attempts)

        failures = 0
        conflicts = 0
        while True:
            try:
                history = self.documents.get(ORDERS_COLLECTION, email)
                order_number = self._unused_number(history, order_number)
                order = Order.place(
                    order_number=order_number,
                    user_email=email,
                    cart_lines=cart_lines,
                    draft=draft,
                    payment=payment,
                    method=self.settings.payment_method_name,
                    currency=self.settings.currency,
                )
                self._append(email, history, order)
            except (VersionConflict, DocumentExists) as exc:
                conflicts += 1
                logger.info(
                    "Order history changed while appending, retrying",
                    order_number=order_number,
                    user_email=email,
                    conflicts=conflicts,
                )
                if conflicts >= MAX_CONFLICT_RETRIES:
                    raise OrderPersistenceFailed(order_number, payment.payment_id, exc) from exc
                continue
            except DocumentStoreError as exc:
                failures += 1
                logger.warning(
                    "Failed to save order",
                    order_number=order_number,
                    user_email=email,
                    attempt=failures,
                    error=str(exc),
                )
                if failures >= max_attempts:
                    logger.error(
                        "Failed to save order after maximum retries",
                        order_number=order_number,
                        user_email=email,
                        payment_id=payment.payment_id,
                        max_attempts=max_attempts,
                        error=str(exc),
                    )
                    raise OrderPersistenceFailed(order_number, payment.payment_id, exc) from exc
                self.sleep(self.settings.order_write_backoff_seconds * 2**failures)
                continue

            logger.info(
                "Order saved",
                order_number=order_number,
                user_email=email,
                payment_id=payment.payment_id,
                attempt=failures + 1,
            )
            return order_number

    def _unused_number(self, history: dict | None, order_number: str) -> str:
        if history is None:
            return order_number
        taken = {order.get("order_number") for order in history.get("orders", [])}
        while order_number in taken:
            logger.info("Order number already used, drawing another", order_number=order_number)
            order_number = generate_order_number(rng=self.rng)
        return order_number

    def _append(self, email: str, history: dict | None, order: Order) -> None:
        record = order.to_record()
        timestamp = record["created_at"]

        if history is None:
            self.documents.create(
                ORDERS_COLLECTION,
                email,
                {
                    "email": email,
                    "orders": [record],
                    "total_orders": 1,
                    "created_at": timestamp,
                    "updated_at": timestamp,
                },
            )
            return

        orders = [*history.get("orders", []), record]
        self.documents.update(
            ORDERS_COLLECTION,
            email,
            {
                "orders": orders,
                "total_orders": history.get("total_orders", len(orders) - 1) + 1,
                "updated_at": timestamp,
            },
            expected_version=history["version"],
        )
