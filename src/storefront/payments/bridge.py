"""Payment bridge — turns "pay now" into a hosted-gateway round trip.

The gateway reports back through three separate handlers with loosely
shaped payloads. The bridge converts the amount to minor units on the way
out and folds the three handlers into one tagged result on the way back,
so checkout only ever sees PaymentSucceeded, PaymentCancelled or
PaymentFailed.
"""

from collections.abc import Callable
from dataclasses import dataclass
from itertools import count

import structlog

from storefront.config import Settings
from storefront.exceptions import GatewayUnavailable
from storefront.payments.gateway.port import GatewayError, GatewayPaymentResponse, GatewayRequest, PaymentGateway

logger = structlog.get_logger(__name__)

DEFAULT_FAILURE_DESCRIPTION = "Payment failed. Please try again."
CANCELLED_DESCRIPTION = "Payment cancelled by user"


@dataclass(frozen=True)
class CustomerContact:
    name: str
    email: str
    phone: str


@dataclass(frozen=True)
class PaymentSucceeded:
    payment_id: str
    gateway_order_id: str | None = None
    signature: str | None = None


@dataclass(frozen=True)
class PaymentCancelled:
    description: str = CANCELLED_DESCRIPTION


@dataclass(frozen=True)
class PaymentFailed:
    code: str
    description: str
    reason: str | None = None
    source: str | None = None
    step: str | None = None


PaymentResult = PaymentSucceeded | PaymentCancelled | PaymentFailed


class PaymentAttempt:
    """One opening of the hosted checkout. Delivers at most one result."""

    _ids = count(1)

    def __init__(self, on_result: Callable[[PaymentResult], None]) -> None:
        self.attempt_id = next(self._ids)
        self.result: PaymentResult | None = None
        self._on_result = on_result

    @property
    def settled(self) -> bool:
        return self.result is not None

    def settle(self, result: PaymentResult) -> None:
        if self.settled:
            logger.warning(
                "Ignoring repeated gateway callback",
                attempt_id=self.attempt_id,
                first=type(self.result).__name__,
                repeated=type(result).__name__,
            )
            return
        self.result = result
        self._on_result(result)


class PaymentBridge:
    """Adapter between checkout and the hosted payment gateway."""

    def __init__(self, gateway: PaymentGateway, settings: Settings) -> None:
        self.gateway = gateway
        self.settings = settings

    def to_minor_units(self, amount: float) -> int:
        return int(round(amount * self.settings.minor_unit_factor))

    def build_request(self, amount: float, customer: CustomerContact, description: str) -> GatewayRequest:
        return GatewayRequest(
            amount_minor_units=self.to_minor_units(amount),
            currency=self.settings.currency,
            name=self.settings.store_name,
            description=description,
            prefill={"name": customer.name, "email": customer.email, "contact": customer.phone},
            theme={"color": self.settings.theme_color},
            notes={"address": f"{self.settings.store_name} Digital Templates"},
        )

    def pay(
        self,
        amount: float,
        customer: CustomerContact,
        description: str,
        on_result: Callable[[PaymentResult], None],
    ) -> PaymentAttempt:
        """Open the hosted checkout. ``on_result`` receives the normalized outcome, possibly much later."""
        attempt = PaymentAttempt(on_result)
        request = self.build_request(amount, customer, description)

        def on_success(response: GatewayPaymentResponse) -> None:
            logger.info("Payment succeeded", attempt_id=attempt.attempt_id, payment_id=response.gateway_payment_id)
            attempt.settle(
                PaymentSucceeded(
                    payment_id=response.gateway_payment_id,
                    gateway_order_id=response.gateway_order_id,
                    signature=response.signature,
                )
            )

        def on_failure(error: GatewayError) -> None:
            logger.warning(
                "Payment failed",
                attempt_id=attempt.attempt_id,
                code=error.code,
                description=error.description,
                reason=error.reason,
            )
            attempt.settle(
                PaymentFailed(
                    code=error.code or "PAYMENT_FAILED",
                    description=error.description or DEFAULT_FAILURE_DESCRIPTION,
                    reason=error.reason,
                    source=error.source,
                    step=error.step,
                )
            )

        def on_dismiss() -> None:
            logger.info("Payment dismissed", attempt_id=attempt.attempt_id)
            attempt.settle(PaymentCancelled())

        logger.info(
            "Opening payment gateway",
            attempt_id=attempt.attempt_id,
            gateway=self.gateway.name,
            amount_minor_units=request.amount_minor_units,
            currency=request.currency,
        )
        try:
            self.gateway.open(request, on_success=on_success, on_failure=on_failure, on_dismiss=on_dismiss)
        except GatewayUnavailable as exc:
            logger.error("Payment gateway unavailable", attempt_id=attempt.attempt_id, error=str(exc))
            attempt.settle(PaymentFailed(code="GATEWAY_UNAVAILABLE", description=str(exc)))

        return attempt
