"""Cart manager — the cart operations used by product pages, the cart view and checkout.

Each mutation follows the same discipline: load the stored collection,
apply the change to a fresh aggregate, save the whole collection and fire
``cartUpdate``.
"""

import structlog

from storefront.cart.cart import CartLine, ShoppingCart
from storefront.shared.product import Product
from storefront.storage.collection_store import CollectionStore
from storefront.storage.notifier import CART_UPDATE

logger = structlog.get_logger(__name__)

CART_KEY = "cartItems"


class CartManager:
    """Reads and mutates the persisted cart."""

    def __init__(self, store: CollectionStore) -> None:
        self.store = store

    def load(self) -> ShoppingCart:
        return ShoppingCart.from_records(self.store.load(CART_KEY))

    def _persist(self, cart: ShoppingCart) -> None:
        self.store.save(CART_KEY, cart.to_records())
        self.store.notify(CART_UPDATE)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add(self, product: Product) -> None:
        cart = self.load()
        cart.add(product)
        self._persist(cart)
        logger.debug("Added to cart", product_id=product.product_id, item_count=cart.item_count())

    def add_many(self, products: list[Product]) -> None:
        """Apply ``add`` for every product against one load and one save."""
        cart = self.load()
        for product in products:
            cart.add(product)
        self._persist(cart)
        logger.debug("Added products to cart", added=len(products), item_count=cart.item_count())

    def set_quantity(self, product_id: str, quantity: int) -> None:
        cart = self.load()
        cart.set_quantity(product_id, quantity)
        self._persist(cart)

    def remove(self, product_id: str) -> None:
        cart = self.load()
        cart.remove(product_id)
        self._persist(cart)

    def clear(self) -> None:
        cart = self.load()
        cart.clear()
        self._persist(cart)
        logger.debug("Cart cleared")

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def lines(self) -> list[CartLine]:
        return list(self.load().lines)

    def total(self) -> float:
        return self.load().total()

    def item_count(self) -> int:
        return self.load().item_count()

    def contains(self, product_id: str) -> bool:
        return self.load().line_for(product_id) is not None

    def is_empty(self) -> bool:
        return not self.load().lines
