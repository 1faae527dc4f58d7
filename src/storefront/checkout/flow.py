"""Checkout flow — drives the Checkout aggregate through a real purchase.

The aggregate knows the steps and their rules. The flow owns everything
around it: the cart snapshot taken on entry, the payment bridge, the
order writer and where the customer is sent afterwards.

Gateway callbacks can arrive late or not at all. Each payment attempt gets
a token; leaving the Payment step or opening a new attempt drops the
current token, and callbacks carrying an old token are ignored.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import structlog

from storefront.cart.management import CartManager
from storefront.checkout.checkout import Checkout, CheckoutStep
from storefront.config import Settings
from storefront.exceptions import IdentityMissing, OrderPersistenceFailed
from storefront.identity.port import IdentityProvider
from storefront.orders.writer import OrderWriter
from storefront.payments.bridge import (
    CustomerContact,
    PaymentAttempt,
    PaymentBridge,
    PaymentCancelled,
    PaymentFailed,
    PaymentResult,
    PaymentSucceeded,
)

logger = structlog.get_logger(__name__)

CHECKOUT_RETURN_PATH = "/checkout"


class Navigation(Enum):
    CART = "cart"
    HOME = "home"


@dataclass(frozen=True)
class Confirmation:
    """What the customer sees once payment has gone through."""

    payment_id: str
    order_number: str | None
    message: str
    order_saved: bool
    redirect_after: float

    @property
    def needs_support(self) -> bool:
        return not self.order_saved


def payment_description(store_name: str, item_count: int) -> str:
    noun = "template" if item_count == 1 else "templates"
    return f"{store_name} - {item_count} digital {noun}"


class CheckoutFlow:
    """One customer's pass through checkout."""

    def __init__(
        self,
        cart: CartManager,
        bridge: PaymentBridge,
        writer: OrderWriter,
        identity: IdentityProvider,
        settings: Settings,
        navigate: Callable[[Navigation], None] | None = None,
        schedule: Callable[[float, Callable[[], None]], object] | None = None,
    ) -> None:
        self.cart = cart
        self.bridge = bridge
        self.writer = writer
        self.identity = identity
        self.settings = settings
        self._navigate = navigate
        self._schedule = schedule

        self.checkout: Checkout | None = None
        self.confirmation: Confirmation | None = None
        self.attempt: PaymentAttempt | None = None
        self.navigations: list[Navigation] = []

        self._lines = []
        self._active_token: object | None = None

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def total(self) -> float:
        return sum(line.line_total for line in self._lines)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    @property
    def lines(self) -> list:
        return list(self._lines)

    def _go(self, target: Navigation) -> None:
        self.navigations.append(target)
        logger.debug("Leaving checkout", target=target.value)
        if self._navigate is not None:
            self._navigate(target)

    def _require_checkout(self) -> Checkout:
        if self.checkout is None:
            raise RuntimeError("Checkout has not been entered")
        return self.checkout

    # -------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------
    def enter(self) -> Checkout:
        """Snapshot the cart and start checkout. An empty cart sends the customer back to the cart."""
        self._lines = self.cart.lines()
        self.confirmation = None
        self.attempt = None
        self._active_token = None
        self.checkout = Checkout.start(item_count=self.item_count, total=self.total)

        if self.checkout.current_step == CheckoutStep.ABANDONED:
            logger.info("Checkout entered with an empty cart")
            self._go(Navigation.CART)
        else:
            logger.info("Checkout started", checkout_id=str(self.checkout.id), total=self.total)
        return self.checkout

    def update_field(self, field_name: str, value: str) -> None:
        self._require_checkout().update_field(field_name, value)

    def next(self) -> bool:
        checkout = self._require_checkout()
        advanced = checkout.advance()
        if not advanced:
            logger.debug("Checkout step blocked", step=checkout.step, errors=sorted(checkout.form_errors))
        return advanced

    def back(self) -> None:
        """Step back. From Information this leaves checkout for the cart."""
        checkout = self._require_checkout()
        if checkout.current_step == CheckoutStep.INFORMATION:
            self._go(Navigation.CART)
            return

        if checkout.current_step == CheckoutStep.PAYMENT and self._active_token is not None:
            logger.info("Abandoning open payment attempt", checkout_id=str(checkout.id))
            self._active_token = None
        checkout.go_back()

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def pay(self) -> PaymentAttempt | None:
        """Open the payment gateway for the cart total.

        Returns None without opening the gateway when there is no email to
        file the order under; sign-in is requested instead.
        """
        checkout = self._require_checkout()
        if checkout.current_step != CheckoutStep.PAYMENT:
            raise RuntimeError(f"Payment is only possible at the Payment step, not {checkout.step}")

        try:
            self.writer.resolve_email(None, checkout.draft)
        except IdentityMissing as exc:
            logger.warning("Payment blocked, no customer email", checkout_id=str(checkout.id))
            checkout.record_payment_failure(str(exc), code="IDENTITY_MISSING")
            self.identity.request_sign_in(return_to=CHECKOUT_RETURN_PATH)
            return None

        checkout.begin_payment()
        token = object()
        self._active_token = token

        draft = checkout.draft
        self.attempt = self.bridge.pay(
            amount=self.total,
            customer=CustomerContact(name=draft.full_name, email=draft.email, phone=draft.phone),
            description=payment_description(self.settings.store_name, self.item_count),
            on_result=lambda result: self._on_payment_result(token, result),
        )
        return self.attempt

    def _on_payment_result(self, token: object, result: PaymentResult) -> None:
        if token is not self._active_token:
            logger.info("Ignoring result of an abandoned payment attempt", result=type(result).__name__)
            return
        self._active_token = None

        checkout = self._require_checkout()
        if isinstance(result, PaymentSucceeded):
            self._complete(result)
        elif isinstance(result, PaymentCancelled):
            checkout.record_payment_cancelled(result.description)
        elif isinstance(result, PaymentFailed):
            checkout.record_payment_failure(result.description, code=result.code)

    def _complete(self, payment: PaymentSucceeded) -> None:
        checkout = self._require_checkout()
        checkout.complete(payment.payment_id)

        order_number = None
        order_saved = False
        try:
            order_number = self.writer.write(None, checkout.draft, self._lines, payment)
            order_saved = True
            message = (
                f"Your order {order_number} has been processed successfully! "
                "You will receive download links via email."
            )
        except OrderPersistenceFailed as exc:
            order_number = exc.order_number
            message = (
                f"Payment successful! Payment ID: {payment.payment_id}. "
                "We could not save your order record. Please contact support with this payment ID."
            )
        except IdentityMissing:
            logger.error("Paid order has no customer email", payment_id=payment.payment_id)
            message = (
                f"Payment successful! Payment ID: {payment.payment_id}. "
                "Please contact support with this payment ID to receive your order."
            )
        except Exception:
            # Payment is already captured, so this still ends in a confirmation
            logger.exception("Unexpected error saving paid order", payment_id=payment.payment_id)
            message = (
                f"Payment successful! Payment ID: {payment.payment_id}. "
                "Please contact support with this payment ID to receive your order."
            )

        if order_number is not None:
            checkout.record_order_number(order_number)

        self.confirmation = Confirmation(
            payment_id=payment.payment_id,
            order_number=order_number,
            message=message,
            order_saved=order_saved,
            redirect_after=self.settings.confirmation_display_seconds,
        )
        logger.info(
            "Checkout completed",
            checkout_id=str(checkout.id),
            order_number=order_number,
            payment_id=payment.payment_id,
            order_saved=order_saved,
        )

        if self._schedule is not None:
            self._schedule(self.settings.confirmation_display_seconds, self.finish)

        try:
            self.cart.clear()
        except Exception:
            logger.exception("Failed to clear cart after payment", payment_id=payment.payment_id)

    def finish(self) -> None:
        """Close the confirmation and go home."""
        self._go(Navigation.HOME)
