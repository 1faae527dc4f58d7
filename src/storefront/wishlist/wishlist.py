"""Wishlist aggregate — a set of saved products kept in local storage."""

import structlog
from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import HasMany, ValueObject

from storefront.domain import storefront
from storefront.shared.product import Product
from storefront.wishlist.events import ProductSaved, ProductUnsaved, WishlistCleared

logger = structlog.get_logger(__name__)


@storefront.entity(part_of="Wishlist")
class WishlistEntry:
    product: ValueObject(Product, required=True)


@storefront.aggregate
class Wishlist:
    entries: HasMany(WishlistEntry)

    @invariant.post
    def product_saved_at_most_once(self):
        product_ids = [entry.product.product_id for entry in self.entries]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"entries": ["A product can only be saved once"]})

    @classmethod
    def from_records(cls, records):
        """Rebuild a wishlist from stored product records, dropping malformed or repeated ones."""
        wishlist = cls()
        for record in records:
            try:
                product = Product.from_record(record)
            except (AttributeError, TypeError, ValueError, ValidationError) as exc:
                logger.warning("Dropping malformed wishlist entry", error=str(exc))
                continue
            if not wishlist.contains(product.product_id):
                wishlist.add_entries(WishlistEntry(product=product))
        return wishlist

    def to_records(self):
        return [entry.product.to_dict() for entry in self.entries]

    def products(self):
        return [entry.product for entry in self.entries]

    def entry_for(self, product_id):
        return next((entry for entry in self.entries if entry.product.product_id == str(product_id)), None)

    def contains(self, product_id):
        return self.entry_for(product_id) is not None

    def save(self, product):
        """Save a product. Returns False when it was already saved."""
        if self.contains(product.product_id):
            return False

        self.add_entries(WishlistEntry(product=product))
        self.raise_(ProductSaved(product_id=product.product_id, title=product.title))
        return True

    def unsave(self, product_id):
        """Remove a saved product. Returns the removed product, or None."""
        entry = self.entry_for(product_id)
        if entry is None:
            return None

        self.remove_entries(entry)
        self.raise_(ProductUnsaved(product_id=str(product_id)))
        return entry.product

    def clear(self):
        products_removed = len(self.entries)
        for entry in list(self.entries):
            self.remove_entries(entry)

        self.raise_(WishlistCleared(products_removed=products_removed))
