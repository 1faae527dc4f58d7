import random

import pytest
from protean.integrations.pytest import DomainFixture

from storefront.cart.management import CartManager
from storefront.checkout.flow import CheckoutFlow
from storefront.config import Settings
from storefront.documents.memory_adapter import InMemoryDocumentStore
from storefront.identity.fake_adapter import FakeIdentityProvider
from storefront.orders.writer import OrderWriter
from storefront.payments.bridge import PaymentBridge
from storefront.payments.gateway.fake_adapter import FakeGateway
from storefront.shared.product import Product
from storefront.storage.collection_store import CollectionStore
from storefront.storage.memory_adapter import MemoryStorage
from storefront.storage.notifier import ChangeNotifier
from storefront.wishlist.management import WishlistManager


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
def build_product(product_id="tpl-001", title="Portfolio Kit", price=49.0, **overrides):
    values = {
        "product_id": product_id,
        "title": title,
        "description": "A responsive portfolio template",
        "price": price,
        "images": [f"https://cdn.example/{product_id}.png"],
        "tags": ["portfolio"],
        "category": "Web Templates",
        "subcategory": "Portfolio",
    }
    values.update(overrides)
    return Product(**values)


@pytest.fixture()
def make_product():
    return build_product


@pytest.fixture()
def product():
    return build_product()


@pytest.fixture()
def other_product():
    return build_product(product_id="tpl-002", title="Landing Page Pack", price=19.5)


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------
@pytest.fixture()
def settings():
    return Settings(order_write_backoff_seconds=0.5, confirmation_display_seconds=5.0)


@pytest.fixture()
def storage():
    return MemoryStorage()


@pytest.fixture()
def notifier():
    return ChangeNotifier()


@pytest.fixture()
def store(storage, notifier):
    return CollectionStore(storage, notifier)


@pytest.fixture()
def signals(notifier):
    """Every cartUpdate / wishlistUpdate published during the test, in order."""
    received = []
    notifier.subscribe("cartUpdate", lambda payload: received.append(("cartUpdate", payload)))
    notifier.subscribe("wishlistUpdate", lambda payload: received.append(("wishlistUpdate", payload)))
    return received


@pytest.fixture()
def gateway():
    return FakeGateway()


@pytest.fixture()
def identity():
    return FakeIdentityProvider()


@pytest.fixture()
def documents():
    return InMemoryDocumentStore()


@pytest.fixture()
def sleeps():
    return []


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------
@pytest.fixture()
def cart_manager(store):
    return CartManager(store)


@pytest.fixture()
def wishlist_manager(store, settings):
    return WishlistManager(store, settings.share_base_url)


@pytest.fixture()
def bridge(gateway, settings):
    return PaymentBridge(gateway, settings)


@pytest.fixture()
def writer(documents, identity, settings, sleeps):
    return OrderWriter(documents, identity, settings, sleep=sleeps.append, rng=random.Random(42))


@pytest.fixture()
def navigations():
    return []


@pytest.fixture()
def scheduled():
    return []


@pytest.fixture()
def flow(cart_manager, bridge, writer, identity, settings, navigations, scheduled):
    return CheckoutFlow(
        cart=cart_manager,
        bridge=bridge,
        writer=writer,
        identity=identity,
        settings=settings,
        navigate=navigations.append,
        schedule=lambda delay, callback: scheduled.append((delay, callback)),
    )


INFORMATION = {
    "email": "asha@example.com",
    "first_name": "Asha",
    "last_name": "Rao",
    "phone": "+91 98450 00000",
    "street": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "postal_code": "560001",
}


@pytest.fixture()
def information():
    return dict(INFORMATION)


def fill_information(target, values=None):
    """Type the contact and address fields into a Checkout or CheckoutFlow."""
    for name, value in (values or INFORMATION).items():
        target.update_field(name, value)


@pytest.fixture()
def fill():
    return fill_information
