"""Checkout aggregate — the three-step checkout as an explicit state machine.

State Machine:
    INFORMATION → REVIEW → PAYMENT → COMPLETED
    PAYMENT → REVIEW → INFORMATION (back)
    ABANDONED when entered with an empty cart (terminal)

Leaving INFORMATION requires every contact and address field. REVIEW is a
confirmation step and always lets the customer through. PAYMENT is left
forward only by a successful payment; cancelled and failed payments keep
the customer there with the reason on display.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Integer, String, Text, ValueObject
from protean.utils.reflection import declared_fields

from storefront.checkout.events import (
    CheckoutAbandoned,
    CheckoutCompleted,
    CheckoutStarted,
    CheckoutStepChanged,
    PaymentAttemptCancelled,
    PaymentAttemptFailed,
    PaymentAttemptStarted,
)
from storefront.domain import storefront


class CheckoutStep(Enum):
    INFORMATION = "Information"
    REVIEW = "Review"
    PAYMENT = "Payment"
    COMPLETED = "Completed"
    ABANDONED = "Abandoned"


_FORWARD = {
    CheckoutStep.INFORMATION: CheckoutStep.REVIEW,
    CheckoutStep.REVIEW: CheckoutStep.PAYMENT,
}

_BACKWARD = {
    CheckoutStep.PAYMENT: CheckoutStep.REVIEW,
    CheckoutStep.REVIEW: CheckoutStep.INFORMATION,
}

_TERMINAL = {CheckoutStep.COMPLETED, CheckoutStep.ABANDONED}

# Fields that must be filled before leaving a step, with their inline messages
REQUIRED_FIELDS = {
    CheckoutStep.INFORMATION: {
        "email": "Email is required",
        "first_name": "First name is required",
        "last_name": "Last name is required",
        "street": "Address is required",
        "city": "City is required",
        "state": "State is required",
        "postal_code": "ZIP code is required",
        "phone": "Phone is required",
    },
}

PAYMENT_INSTRUMENT_FIELDS = ("card_name", "card_number", "expiry_date", "cvv")

# Free-form text; only absurdly long input is refused
FORM_FIELD_MAX_LENGTH = 255


@storefront.value_object(part_of="Checkout")
class CheckoutDraft:
    """Billing form state. Replaced wholesale whenever one field changes."""

    email: String(max_length=FORM_FIELD_MAX_LENGTH, default="")
    first_name: String(max_length=FORM_FIELD_MAX_LENGTH, default="")
    last_name: String(max_length=FORM_FIELD_MAX_LENGTH, default="")
    phone: String(max_length=FORM_FIELD_MAX_LENGTH, default="")
    street: String(max_length=FORM_FIELD_MAX_LENGTH, default="")
    city: String(max_length=FORM_FIELD_MAX_LENGTH, default="")
    state: String(max_length=FORM_FIELD_MAX_LENGTH, default="")
    postal_code: String(max_length=FORM_FIELD_MAX_LENGTH, default="")
    country: String(max_length=FORM_FIELD_MAX_LENGTH, default="India")
    card_name: String(max_length=FORM_FIELD_MAX_LENGTH, default="")
    card_number: String(max_length=FORM_FIELD_MAX_LENGTH, default="")
    expiry_date: String(max_length=FORM_FIELD_MAX_LENGTH, default="")
    cvv: String(max_length=FORM_FIELD_MAX_LENGTH, default="")

    def is_blank(self, field_name):
        value = getattr(self, field_name)
        return value is None or not str(value).strip()

    @property
    def full_name(self):
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


@storefront.aggregate
class Checkout:
    step: String(choices=CheckoutStep, default=CheckoutStep.INFORMATION.value)
    draft: ValueObject(CheckoutDraft)
    field_errors: Text()  # JSON object: field name -> message
    payment_error: String(max_length=500)
    awaiting_payment: Boolean(default=False)
    payment_attempts: Integer(default=0)
    payment_id: String(max_length=255)
    order_number: String(max_length=30)
    started_at: DateTime()
    completed_at: DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def start(cls, item_count, total):
        """Enter checkout. An empty cart abandons immediately, without a draft."""
        now = datetime.now(UTC)

        if item_count <= 0:
            checkout = cls(step=CheckoutStep.ABANDONED.value, field_errors=json.dumps({}), started_at=now)
            checkout.raise_(CheckoutAbandoned(checkout_id=str(checkout.id), reason="Cart is empty"))
            return checkout

        checkout = cls(
            step=CheckoutStep.INFORMATION.value,
            draft=CheckoutDraft(),
            field_errors=json.dumps({}),
            started_at=now,
        )
        checkout.raise_(
            CheckoutStarted(
                checkout_id=str(checkout.id),
                item_count=item_count,
                total=total,
                started_at=now,
            )
        )
        return checkout

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    @property
    def current_step(self):
        return CheckoutStep(self.step)

    @property
    def form_errors(self):
        return json.loads(self.field_errors) if self.field_errors else {}

    @property
    def is_terminal(self):
        return self.current_step in _TERMINAL

    def _assert_active(self):
        if self.is_terminal:
            raise ValidationError({"step": [f"Checkout is already {self.step}"]})

    def _assert_step(self, expected):
        if self.current_step != expected:
            raise ValidationError({"step": [f"Expected {expected.value} step, checkout is at {self.step}"]})

    def _move_to(self, target):
        previous = self.current_step
        self.step = target.value
        self.raise_(
            CheckoutStepChanged(
                checkout_id=str(self.id),
                from_step=previous.value,
                to_step=target.value,
            )
        )

    def missing_fields(self, step):
        """Inline error messages for the step's required fields that are still empty."""
        required = REQUIRED_FIELDS.get(step, {})
        return {name: message for name, message in required.items() if self.draft.is_blank(name)}

    # -------------------------------------------------------------------
    # Form editing
    # -------------------------------------------------------------------
    def update_field(self, field_name, value):
        """Change one draft field. Its inline error goes away once it is non-empty.

        Input the draft cannot hold is reported in the field's inline error and
        the previous draft is kept.
        """
        self._assert_active()
        if field_name not in declared_fields(CheckoutDraft):
            raise ValidationError({field_name: ["Unknown checkout field"]})

        values = {name: getattr(self.draft, name) for name in declared_fields(CheckoutDraft)}
        values[field_name] = value
        try:
            draft = CheckoutDraft(**values)
        except ValidationError as exc:
            messages = exc.messages.get(field_name) or ["Invalid value"]
            self.field_errors = json.dumps({**self.form_errors, field_name: messages[0]})
            return
        self.draft = draft

        errors = self.form_errors
        if field_name in errors and not self.draft.is_blank(field_name):
            del errors[field_name]
            self.field_errors = json.dumps(errors)

    # -------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------
    def advance(self):
        """Move one step forward. Returns False when required fields block the move."""
        self._assert_active()
        current = self.current_step
        if current not in _FORWARD:
            raise ValidationError({"step": [f"Cannot advance from {current.value}; payment completes checkout"]})

        missing = self.missing_fields(current)
        self.field_errors = json.dumps(missing)
        if missing:
            return False

        self._move_to(_FORWARD[current])
        return True

    def go_back(self):
        """Move one step back. Leaving PAYMENT abandons any open payment attempt."""
        self._assert_active()
        current = self.current_step
        if current not in _BACKWARD:
            raise ValidationError({"step": [f"Cannot go back from {current.value}"]})

        if current == CheckoutStep.PAYMENT:
            self.awaiting_payment = False
        self._move_to(_BACKWARD[current])

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def begin_payment(self):
        self._assert_step(CheckoutStep.PAYMENT)
        self.payment_error = None
        self.awaiting_payment = True
        self.payment_attempts = (self.payment_attempts or 0) + 1
        self.raise_(PaymentAttemptStarted(checkout_id=str(self.id), attempt_number=self.payment_attempts))

    def record_payment_cancelled(self, description):
        self._assert_step(CheckoutStep.PAYMENT)
        self.awaiting_payment = False
        self.payment_error = description
        self.raise_(PaymentAttemptCancelled(checkout_id=str(self.id), attempt_number=self.payment_attempts or 0))

    def record_payment_failure(self, description, code=None):
        self._assert_step(CheckoutStep.PAYMENT)
        self.awaiting_payment = False
        self.payment_error = description
        self.raise_(
            PaymentAttemptFailed(
                checkout_id=str(self.id),
                attempt_number=self.payment_attempts or 0,
                code=code,
                description=description,
            )
        )

    def complete(self, payment_id):
        self._assert_step(CheckoutStep.PAYMENT)
        now = datetime.now(UTC)
        self.awaiting_payment = False
        self.payment_error = None
        self.payment_id = payment_id
        self.step = CheckoutStep.COMPLETED.value
        self.completed_at = now
        self.raise_(CheckoutCompleted(checkout_id=str(self.id), payment_id=payment_id, completed_at=now))

    def record_order_number(self, order_number):
        self._assert_step(CheckoutStep.COMPLETED)
        self.order_number = order_number
