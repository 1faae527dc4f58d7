"""Order aggregate — the immutable record of a paid checkout.

Everything the customer saw at purchase time is copied in: line prices,
titles and images, the contact and address details from the checkout form,
and the gateway's payment references. Later catalogue or profile edits
never reach a placed order.

Only ``completed`` orders are produced here. ``pending`` and ``failed``
are reserved for a payment reconciliation step that does not exist yet.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.orders.events import OrderPlaced


class OrderStatus(Enum):
    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class Address:
    """Billing address captured at checkout time."""

    street: String(max_length=255)
    city: String(max_length=100)
    state: String(max_length=100)
    postal_code: String(max_length=20)
    country: String(max_length=100)


@storefront.value_object(part_of="Order")
class CustomerSnapshot:
    """Contact details and address exactly as entered on the checkout form."""

    first_name: String(max_length=100)
    last_name: String(max_length=100)
    email: String(max_length=254)
    phone: String(max_length=30)
    address: ValueObject(Address)


@storefront.value_object(part_of="Order")
class PaymentRecord:
    """The gateway's references for the captured payment."""

    payment_id: String(required=True, max_length=255)
    gateway_order_id: String(max_length=255)
    signature: String(max_length=500)
    method: String(max_length=50)
    currency: String(max_length=3)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderLine:
    """A purchased product with the price and quantity at order time."""

    product_id: String(required=True, max_length=100)
    title: String(required=True, max_length=255)
    price: Float(required=True, min_value=0.0)
    quantity: Integer(required=True, min_value=1)
    image: String(max_length=500)
    category: String(max_length=100)
    subcategory: String(max_length=100)
    download_url: String(max_length=500)

    def to_record(self) -> dict:
        return {
            "product_id": self.product_id,
            "title": self.title,
            "price": self.price,
            "quantity": self.quantity,
            "image": self.image or "",
            "category": self.category or "",
            "subcategory": self.subcategory or "",
            "download_url": self.download_url or "#",
        }


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number: String(required=True, max_length=30)
    user_email: String(required=True, max_length=254)
    status: String(choices=OrderStatus, default=OrderStatus.COMPLETED.value)
    items: HasMany(OrderLine)
    subtotal: Float(default=0.0)
    tax: Float(default=0.0)
    total: Float(default=0.0)
    customer: ValueObject(CustomerSnapshot)
    payment: ValueObject(PaymentRecord)
    created_at: DateTime()

    @classmethod
    def place(cls, order_number, user_email, cart_lines, draft, payment, method, currency):
        """Snapshot a paid cart into a new order.

        Args:
            order_number: The generated ``ORD-...`` number.
            user_email: Key of the customer's order history.
            cart_lines: The cart lines being paid for.
            draft: The checkout form (contact and address fields).
            payment: The successful payment result from the bridge.
            method: Payment method name shown in order history.
            currency: ISO currency code the gateway charged in.
        """
        if not cart_lines:
            raise ValidationError({"items": ["An order needs at least one line"]})

        now = datetime.now(UTC)
        items = [
            OrderLine(
                product_id=line.product.product_id,
                title=line.product.title,
                price=line.product.price,
                quantity=line.quantity,
                image=line.product.primary_image,
                category=line.product.category,
                subcategory=line.product.subcategory,
                download_url=line.product.preview_url or "#",
            )
            for line in cart_lines
        ]
        total = sum(item.price * item.quantity for item in items)

        order = cls(
            order_number=order_number,
            user_email=user_email,
            status=OrderStatus.COMPLETED.value,
            items=items,
            subtotal=total,
            tax=0.0,
            total=total,
            customer=CustomerSnapshot(
                first_name=draft.first_name,
                last_name=draft.last_name,
                email=draft.email,
                phone=draft.phone,
                address=Address(
                    street=draft.street,
                    city=draft.city,
                    state=draft.state,
                    postal_code=draft.postal_code,
                    country=draft.country,
                ),
            ),
            payment=PaymentRecord(
                payment_id=payment.payment_id,
                gateway_order_id=payment.gateway_order_id,
                signature=payment.signature,
                method=method,
                currency=currency,
            ),
            created_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_number=order_number,
                user_email=user_email,
                payment_id=payment.payment_id,
                total=total,
                item_count=sum(item.quantity for item in items),
                placed_at=now,
            )
        )
        return order

    def to_record(self) -> dict:
        """Plain dict form stored in the customer's order history."""
        address = self.customer.address
        return {
            "order_number": self.order_number,
            "user_email": self.user_email,
            "status": self.status,
            "items": [item.to_record() for item in self.items],
            "subtotal": self.subtotal,
            "tax": self.tax,
            "total": self.total,
            "customer": {
                "first_name": self.customer.first_name or "",
                "last_name": self.customer.last_name or "",
                "email": self.customer.email or "",
                "phone": self.customer.phone or "",
                "address": {
                    "street": address.street or "",
                    "city": address.city or "",
                    "state": address.state or "",
                    "postal_code": address.postal_code or "",
                    "country": address.country or "",
                },
            },
            "payment": {
                "payment_id": self.payment.payment_id,
                "gateway_order_id": self.payment.gateway_order_id,
                "signature": self.payment.signature,
                "method": self.payment.method,
                "currency": self.payment.currency,
            },
            "created_at": self.created_at.isoformat(),
        }
