"""Domain events for the Wishlist aggregate."""

from protean.fields import Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Wishlist")
class ProductSaved:
    """A product was saved to the wishlist."""

    __version__ = 1

    product_id: String(required=True)
    title: String()


@storefront.event(part_of="Wishlist")
class ProductUnsaved:
    """A product was removed from the wishlist."""

    __version__ = 1

    product_id: String(required=True)


@storefront.event(part_of="Wishlist")
class WishlistCleared:
    """Every product was removed from the wishlist."""

    __version__ = 1

    products_removed: Integer(required=True)
