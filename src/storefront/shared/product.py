"""Product value object — the catalogue entity referenced by carts, wishlists and orders."""

from protean.fields import Boolean, Float, List, String, Text
from protean.utils.reflection import declared_fields

from storefront.domain import storefront


@storefront.value_object
class Product:
    """A digital product as published by the catalogue.

    Carts and wishlists hold copies of the product as it was when it was saved;
    they never change it. Orders take their own snapshot at purchase time.
    """

    product_id: String(required=True, max_length=100)
    title: String(required=True, max_length=255)
    description: Text()
    price: Float(required=True, min_value=0.0)
    original_price: Float(min_value=0.0)
    images: List(content_type=String, default=list)
    tags: List(content_type=String, default=list)
    category: String(max_length=100)
    subcategory: String(max_length=100)
    featured: Boolean(default=False)
    preview_url: String(max_length=500)

    @classmethod
    def from_record(cls, record: dict) -> "Product":
        """Rebuild a product from a stored record, ignoring unknown keys."""
        fields = declared_fields(cls)
        return cls(**{name: value for name, value in record.items() if name in fields})

    @property
    def primary_image(self) -> str:
        return self.images[0] if self.images else ""
