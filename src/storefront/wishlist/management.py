"""Wishlist manager — saving products for later and moving them into the cart."""

from urllib.parse import urlencode

import structlog

from storefront.cart.management import CartManager
from storefront.shared.product import Product
from storefront.storage.collection_store import CollectionStore
from storefront.storage.notifier import WISHLIST_UPDATE
from storefront.wishlist.wishlist import Wishlist

logger = structlog.get_logger(__name__)

WISHLIST_KEY = "wishlistItems"


class WishlistManager:
    """Reads and mutates the persisted wishlist."""

    def __init__(self, store: CollectionStore, share_base_url: str) -> None:
        self.store = store
        self.share_base_url = share_base_url

    def load(self) -> Wishlist:
        return Wishlist.from_records(self.store.load(WISHLIST_KEY))

    def _persist(self, wishlist: Wishlist, payload: dict | None = None) -> None:
        self.store.save(WISHLIST_KEY, wishlist.to_records())
        self.store.notify(WISHLIST_UPDATE, payload)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add(self, product: Product) -> None:
        """Save a product. Adding one that is already saved changes nothing and fires nothing."""
        wishlist = self.load()
        if not wishlist.save(product):
            return
        self._persist(wishlist, {"action": "add", "product": product.to_dict()})

    def remove(self, product_id: str) -> None:
        wishlist = self.load()
        removed = wishlist.unsave(product_id)
        payload = {"action": "remove", "product": removed.to_dict()} if removed else None
        self._persist(wishlist, payload)

    def toggle(self, product: Product) -> bool:
        """Save the product if absent, remove it if present. Returns True when now saved."""
        wishlist = self.load()
        if wishlist.contains(product.product_id):
            wishlist.unsave(product.product_id)
            self._persist(wishlist, {"action": "remove", "product": product.to_dict()})
            return False

        wishlist.save(product)
        self._persist(wishlist, {"action": "add", "product": product.to_dict()})
        return True

    def clear(self) -> None:
        wishlist = self.load()
        wishlist.clear()
        self._persist(wishlist)

    def add_all_to_cart(self, cart_manager: CartManager) -> int:
        """Add one unit of every saved product to the cart in a single cart write.

        Returns the number of products added. The wishlist itself is left as is.
        """
        products = self.load().products()
        if not products:
            return 0

        cart_manager.add_many(products)
        logger.info("Moved wishlist into cart", products=len(products))
        return len(products)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def products(self) -> list[Product]:
        return self.load().products()

    def contains(self, product_id: str) -> bool:
        return self.load().contains(product_id)

    def count(self) -> int:
        return len(self.load().entries)

    def share(self) -> str:
        """Return a link that lists the saved products."""
        product_ids = [product.product_id for product in self.products()]
        if not product_ids:
            return self.share_base_url
        return f"{self.share_base_url}?{urlencode({'items': ','.join(product_ids)})}"
