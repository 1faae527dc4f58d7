"""Domain events for the Checkout aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Checkout")
class CheckoutStarted:
    """A customer entered checkout with a non-empty cart."""

    __version__ = 1

    checkout_id: Identifier(required=True)
    item_count: Integer(required=True)
    total: Float(required=True)
    started_at: DateTime(required=True)


@storefront.event(part_of="Checkout")
class CheckoutAbandoned:
    """Checkout was entered with an empty cart and closed immediately."""

    __version__ = 1

    checkout_id: Identifier(required=True)
    reason: String(required=True)


@storefront.event(part_of="Checkout")
class CheckoutStepChanged:
    """The customer moved one step forward or back."""

    __version__ = 1

    checkout_id: Identifier(required=True)
    from_step: String(required=True)
    to_step: String(required=True)


@storefront.event(part_of="Checkout")
class PaymentAttemptStarted:
    """The hosted payment gateway was opened."""

    __version__ = 1

    checkout_id: Identifier(required=True)
    attempt_number: Integer(required=True)


@storefront.event(part_of="Checkout")
class PaymentAttemptCancelled:
    """The customer closed the hosted payment gateway without paying."""

    __version__ = 1

    checkout_id: Identifier(required=True)
    attempt_number: Integer(required=True)


@storefront.event(part_of="Checkout")
class PaymentAttemptFailed:
    """The gateway reported a failed payment."""

    __version__ = 1

    checkout_id: Identifier(required=True)
    attempt_number: Integer(required=True)
    code: String()
    description: String(required=True)


@storefront.event(part_of="Checkout")
class CheckoutCompleted:
    """Payment succeeded and checkout is finished."""

    __version__ = 1

    checkout_id: Identifier(required=True)
    payment_id: String(required=True)
    completed_at: DateTime(required=True)
