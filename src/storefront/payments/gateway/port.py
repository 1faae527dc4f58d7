"""Payment gateway port (abstract interface).

The gateway hosts its own checkout UI. Opening it hands over a request and
three callbacks; exactly one of them fires later, or none at all if the
customer walks away from the hosted UI without closing it.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field


@dataclass(frozen=True)
class GatewayRequest:
    """Checkout request in the gateway's own conventions (amounts in minor units)."""

    amount_minor_units: int
    currency: str
    name: str
    description: str
    prefill: dict[str, str] = field(default_factory=dict)
    theme: dict[str, str] = field(default_factory=dict)
    notes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class GatewayPaymentResponse:
    """Payload delivered to the success handler."""

    gateway_payment_id: str
    gateway_order_id: str | None = None
    signature: str | None = None


@dataclass(frozen=True)
class GatewayError:
    """Payload delivered to the failure handler."""

    code: str | None = None
    description: str | None = None
    source: str | None = None
    step: str | None = None
    reason: str | None = None
    metadata: dict = field(default_factory=dict)


SuccessHandler = Callable[[GatewayPaymentResponse], None]
FailureHandler = Callable[[GatewayError], None]
DismissHandler = Callable[[], None]


class PaymentGateway(ABC):
    """Abstract hosted-checkout payment gateway."""

    name: str = "gateway"

    @abstractmethod
    def open(
        self,
        request: GatewayRequest,
        on_success: SuccessHandler,
        on_failure: FailureHandler,
        on_dismiss: DismissHandler,
    ) -> None:
        """Open the hosted checkout.

        Raises GatewayUnavailable when the checkout cannot be shown at all.
        """
        ...
