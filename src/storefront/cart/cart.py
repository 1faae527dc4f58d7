"""Shopping cart aggregate — line items rebuilt from, and written back to, local storage.

The cart has no server-side identity. It is reconstituted from the stored
``cartItems`` collection before every change and serialized back in full
afterwards, so the stored collection is always the source of truth.
"""

import structlog
from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import HasMany, Integer, ValueObject

from storefront.cart.events import CartCleared, CartItemAdded, CartItemRemoved, CartQuantityUpdated
from storefront.domain import storefront
from storefront.shared.product import Product

logger = structlog.get_logger(__name__)


@storefront.entity(part_of="ShoppingCart")
class CartLine:
    product: ValueObject(Product, required=True)
    quantity: Integer(required=True, min_value=1)

    @property
    def line_total(self) -> float:
        return self.product.price * self.quantity

    def to_record(self) -> dict:
        return {"product": self.product.to_dict(), "quantity": self.quantity}


@storefront.aggregate
class ShoppingCart:
    lines: HasMany(CartLine)

    @invariant.post
    def one_line_per_product(self):
        product_ids = [line.product.product_id for line in self.lines]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"lines": ["A product can only appear once in the cart"]})

    # -------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------
    @classmethod
    def from_records(cls, records):
        """Rebuild a cart from stored line records.

        Malformed records are dropped. Duplicate records for the same product
        are folded into one line.
        """
        cart = cls()
        for record in records:
            try:
                product = Product.from_record(record["product"])
                quantity = int(record["quantity"])
            except (AttributeError, KeyError, TypeError, ValueError, ValidationError) as exc:
                logger.warning("Dropping malformed cart line", error=str(exc))
                continue
            if quantity < 1:
                continue

            existing = cart.line_for(product.product_id)
            if existing:
                existing.quantity += quantity
            else:
                cart.add_lines(CartLine(product=product, quantity=quantity))
        return cart

    def to_records(self):
        return [line.to_record() for line in self.lines]

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def line_for(self, product_id):
        return next((line for line in self.lines if line.product.product_id == str(product_id)), None)

    def total(self):
        return sum(line.line_total for line in self.lines)

    def item_count(self):
        return sum(line.quantity for line in self.lines)

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add(self, product):
        """Add one unit of a product, creating its line on first add."""
        existing = self.line_for(product.product_id)
        if existing:
            existing.quantity += 1
            quantity = existing.quantity
        else:
            self.add_lines(CartLine(product=product, quantity=1))
            quantity = 1

        self.raise_(
            CartItemAdded(
                product_id=product.product_id,
                title=product.title,
                unit_price=product.price,
                quantity=quantity,
            )
        )

    def set_quantity(self, product_id, quantity):
        """Replace a line's quantity. Zero or less removes the line."""
        if quantity <= 0:
            self.remove(product_id)
            return

        line = self.line_for(product_id)
        if line is None:
            return

        previous_quantity = line.quantity
        line.quantity = quantity

        self.raise_(
            CartQuantityUpdated(
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove(self, product_id):
        """Remove a product's line. Unknown products are ignored."""
        line = self.line_for(product_id)
        if line is None:
            return

        self.remove_lines(line)
        self.raise_(CartItemRemoved(product_id=str(product_id), quantity=line.quantity))

    def clear(self):
        lines_removed = len(self.lines)
        for line in list(self.lines):
            self.remove_lines(line)

        self.raise_(CartCleared(lines_removed=lines_removed))
