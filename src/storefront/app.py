"""Storefront composition root.

Wires the storage, gateway, identity and document store adapters into the
cart, wishlist, checkout and order history services. Adapters come from
the package factories, so tests can swap any of them with ``set_*`` before
calling ``build_storefront``.

Usage:
    from storefront.app import build_storefront, init_domain

    init_domain()
    shop = build_storefront(durable=True)
    shop.cart.add(product)
    flow = shop.checkout_flow(navigate=router.go)
"""

from collections.abc import Callable
from dataclasses import dataclass

import structlog

from storefront.cart.management import CartManager
from storefront.checkout.flow import CheckoutFlow, Navigation
from storefront.config import Settings
from storefront.documents import get_document_store, set_document_store
from storefront.documents.port import DocumentStore
from storefront.domain import storefront
from storefront.identity import get_identity_provider
from storefront.identity.port import IdentityProvider
from storefront.orders.history import OrderHistoryReader
from storefront.orders.writer import OrderWriter
from storefront.payments.bridge import PaymentBridge
from storefront.payments.gateway import get_gateway
from storefront.storage import get_storage, set_storage
from storefront.storage.collection_store import CollectionStore
from storefront.utils.logging import configure_logging
from storefront.wishlist.management import WishlistManager

logger = structlog.get_logger(__name__)


def init_domain(log: bool = True) -> None:
    """Initialize the storefront domain and push its context."""
    if log:
        configure_logging()
    storefront.init()
    storefront.domain_context().push()


@dataclass
class Storefront:
    settings: Settings
    store: CollectionStore
    cart: CartManager
    wishlist: WishlistManager
    bridge: PaymentBridge
    identity: IdentityProvider
    documents: DocumentStore
    orders: OrderWriter
    history: OrderHistoryReader

    def checkout_flow(
        self,
        navigate: Callable[[Navigation], None] | None = None,
        schedule: Callable[[float, Callable[[], None]], object] | None = None,
    ) -> CheckoutFlow:
        return CheckoutFlow(
            cart=self.cart,
            bridge=self.bridge,
            writer=self.orders,
            identity=self.identity,
            settings=self.settings,
            navigate=navigate,
            schedule=schedule,
        )


def build_storefront(settings: Settings | None = None, durable: bool = False) -> Storefront:
    """Assemble the storefront services.

    With ``durable=True`` the cart and wishlist go to the JSON file at
    ``settings.storage_path`` and order histories to the SQL database at
    ``settings.document_store_url``. Otherwise the currently installed
    adapters are used (in-memory by default).
    """
    settings = settings or Settings.from_env()

    if durable:
        from storefront.documents.sql_adapter import SqlDocumentStore
        from storefront.storage.file_adapter import JsonFileStorage

        set_storage(JsonFileStorage(settings.storage_path))
        set_document_store(SqlDocumentStore(settings.document_store_url))

    store = CollectionStore(get_storage())
    identity = get_identity_provider()
    documents = get_document_store()
    cart = CartManager(store)

    logger.info(
        "Storefront assembled",
        store_name=settings.store_name,
        currency=settings.currency,
        durable=durable,
    )
    return Storefront(
        settings=settings,
        store=store,
        cart=cart,
        wishlist=WishlistManager(store, settings.share_base_url),
        bridge=PaymentBridge(get_gateway(), settings),
        identity=identity,
        documents=documents,
        orders=OrderWriter(documents, identity, settings),
        history=OrderHistoryReader(documents, identity),
    )
