"""Configurable fake payment gateway for development and testing.

Simulates a hosted checkout without any external calls. Depending on its
mode it answers immediately through the success, failure or dismiss
handler, or holds the session open so a test can answer it later (or
never).
"""

from enum import Enum
from uuid import uuid4

from storefront.exceptions import GatewayUnavailable
from storefront.payments.gateway.port import (
    DismissHandler,
    FailureHandler,
    GatewayError,
    GatewayPaymentResponse,
    GatewayRequest,
    PaymentGateway,
    SuccessHandler,
)


class FakeGatewayMode(Enum):
    SUCCEED = "succeed"
    FAIL = "fail"
    DISMISS = "dismiss"
    HOLD = "hold"


class FakeCheckoutSession:
    """An opened hosted checkout that has not been answered yet."""

    def __init__(
        self,
        request: GatewayRequest,
        on_success: SuccessHandler,
        on_failure: FailureHandler,
        on_dismiss: DismissHandler,
    ) -> None:
        self.request = request
        self._on_success = on_success
        self._on_failure = on_failure
        self._on_dismiss = on_dismiss

    def succeed(self, payment_id: str | None = None, order_id: str | None = None, signature: str | None = None):
        self._on_success(
            GatewayPaymentResponse(
                gateway_payment_id=payment_id or f"pay_fake_{uuid4().hex[:14]}",
                gateway_order_id=order_id,
                signature=signature,
            )
        )

    def fail(self, code: str = "BAD_REQUEST_ERROR", description: str = "Card declined", reason: str | None = None):
        self._on_failure(
            GatewayError(
                code=code,
                description=description,
                source="customer",
                step="payment_authorization",
                reason=reason or "payment_failed",
            )
        )

    def dismiss(self):
        self._on_dismiss()


class FakeGateway(PaymentGateway):
    """Configurable fake hosted-checkout gateway."""

    name = "FakeGateway"

    def __init__(self) -> None:
        self.mode: FakeGatewayMode = FakeGatewayMode.SUCCEED
        self.failure_code: str = "BAD_REQUEST_ERROR"
        self.failure_description: str = "Card declined"
        self.available: bool = True
        self.calls: list[GatewayRequest] = []
        self.pending: list[FakeCheckoutSession] = []

    def configure(
        self,
        mode: FakeGatewayMode,
        failure_code: str = "BAD_REQUEST_ERROR",
        failure_description: str = "Card declined",
        available: bool = True,
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.mode = mode
        self.failure_code = failure_code
        self.failure_description = failure_description
        self.available = available

    def open(
        self,
        request: GatewayRequest,
        on_success: SuccessHandler,
        on_failure: FailureHandler,
        on_dismiss: DismissHandler,
    ) -> None:
        if not self.available:
            raise GatewayUnavailable("Payment gateway SDK not loaded")

        self.calls.append(request)
        session = FakeCheckoutSession(request, on_success, on_failure, on_dismiss)

        if self.mode == FakeGatewayMode.SUCCEED:
            session.succeed()
        elif self.mode == FakeGatewayMode.FAIL:
            session.fail(code=self.failure_code, description=self.failure_description)
        elif self.mode == FakeGatewayMode.DISMISS:
            session.dismiss()
        else:
            self.pending.append(session)

    def reset(self) -> None:
        """Forget recorded calls and held sessions (useful between tests)."""
        self.mode = FakeGatewayMode.SUCCEED
        self.failure_code = "BAD_REQUEST_ERROR"
        self.failure_description = "Card declined"
        self.available = True
        self.calls.clear()
        self.pending.clear()
