"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Float, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the cart, or its line grew by one."""

    __version__ = 1

    product_id: String(required=True)
    title: String()
    unit_price: Float()
    quantity: Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    """The quantity of a cart line was replaced."""

    __version__ = 1

    product_id: String(required=True)
    previous_quantity: Integer(required=True)
    new_quantity: Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemRemoved:
    """A line was removed from the cart."""

    __version__ = 1

    product_id: String(required=True)
    quantity: Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartCleared:
    """Every line was removed from the cart."""

    __version__ = 1

    lines_removed: Integer(required=True)
