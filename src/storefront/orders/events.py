"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A paid order was assembled for the customer's order history."""

    __version__ = 1

    order_number: String(required=True)
    user_email: String(required=True)
    payment_id: String(required=True)
    total: Float(required=True)
    item_count: Integer(required=True)
    placed_at: DateTime(required=True)
