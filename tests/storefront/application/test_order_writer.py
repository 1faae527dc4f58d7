"""Tests for the order writer's append protocol."""

import random

import pytest

from storefront.cart.cart import CartLine
from storefront.checkout.checkout import CheckoutDraft
from storefront.documents.memory_adapter import InMemoryDocumentStore
from storefront.exceptions import IdentityMissing, OrderPersistenceFailed
from storefront.orders.numbering import ORDER_NUMBER_PATTERN, generate_order_number
from storefront.orders.writer import ORDERS_COLLECTION, OrderWriter
from storefront.payments.bridge import PaymentSucceeded

EMAIL = "asha@example.com"


@pytest.fixture()
def draft(information):
    return CheckoutDraft(**information)


@pytest.fixture()
def lines(product, other_product):
    return [CartLine(product=product, quantity=1), CartLine(product=other_product, quantity=2)]


@pytest.fixture()
def payment():
    return PaymentSucceeded(payment_id="pay_123", gateway_order_id="order_9", signature="sig")


def _history(documents, email=EMAIL):
    return documents.get(ORDERS_COLLECTION, email)


class TestFirstAndSubsequentOrders:
    def test_first_order_creates_history(self, writer, documents, draft, lines, payment):
        order_number = writer.write(None, draft, lines, payment)
        assert ORDER_NUMBER_PATTERN.match(order_number)

        history = _history(documents)
        assert history["email"] == EMAIL
        assert history["total_orders"] == 1
        assert history["version"] == 1
        assert [order["order_number"] for order in history["orders"]] == [order_number]
        assert history["orders"][0]["total"] == pytest.approx(88.0)

    def test_second_order_appends(self, writer, documents, draft, lines, payment):
        first = writer.write(None, draft, lines, payment)
        second = writer.write(None, draft, lines, PaymentSucceeded(payment_id="pay_456"))

        history = _history(documents)
        assert [order["order_number"] for order in history["orders"]] == [first, second]
        assert history["total_orders"] == 2
        assert history["version"] == 2
        assert history["orders"][1]["payment"]["payment_id"] == "pay_456"


class TestEmailResolution:
    def test_explicit_email_wins(self, writer, identity, draft):
        identity.sign_in_as("signed-in@example.com")
        assert writer.resolve_email("Given@Example.com", draft) == "given@example.com"

    def test_identity_before_draft(self, writer, identity, draft):
        identity.sign_in_as("Signed-In@Example.com")
        assert writer.resolve_email(None, draft) == "signed-in@example.com"

    def test_draft_email_for_guests(self, writer, draft):
        assert writer.resolve_email(None, draft) == EMAIL

    def test_no_email_anywhere(self, writer, information, lines, payment, documents):
        information["email"] = "not-an-email"
        with pytest.raises(IdentityMissing):
            writer.write(None, CheckoutDraft(**information), lines, payment)
        assert documents.writes == []

    def test_histories_keyed_by_normalized_email(self, writer, documents, identity, draft, lines, payment):
        identity.sign_in_as("ASHA@example.com ")
        writer.write(None, draft, lines, payment)
        assert _history(documents, "asha@example.com") is not None


class RacingDocumentStore(InMemoryDocumentStore):
    """Lets another writer land an order between our read and our write, once."""

    def __init__(self, intruder_order):
        super().__init__()
        self.intruder_order = intruder_order
        self.raced = False

    def _intrude(self, collection, key):
        self.raced = True
        current = self.get(collection, key)
        if current is None:
            super().create(
                collection,
                key,
                {"email": key, "orders": [self.intruder_order], "total_orders": 1},
            )
        else:
            super().update(
                collection,
                key,
                {"orders": [*current["orders"], self.intruder_order], "total_orders": current["total_orders"] + 1},
                expected_version=current["version"],
            )

    def create(self, collection, key, record):
        if not self.raced:
            self._intrude(collection, key)
        return super().create(collection, key, record)

    def update(self, collection, key, patch, expected_version=None):
        if not self.raced:
            self._intrude(collection, key)
        return super().update(collection, key, patch, expected_version)


class TestConcurrentWriters:
    @pytest.fixture()
    def intruder(self):
        return {"order_number": "ORD-20240101-OTHER1", "created_at": "2024-01-01T00:00:00+00:00"}

    def test_lost_create_race_is_retried_as_append(self, identity, settings, intruder, draft, lines, payment):
        documents = RacingDocumentStore(intruder)
        writer = OrderWriter(documents, identity, settings, sleep=lambda _: None)

        order_number = writer.write(None, draft, lines, payment)

        history = _history(documents)
        assert [order["order_number"] for order in history["orders"]] == ["ORD-20240101-OTHER1", order_number]
        assert history["total_orders"] == 2

    def test_version_conflict_rereads_and_keeps_both(self, identity, settings, intruder, draft, lines, payment):
        documents = RacingDocumentStore(intruder)
        documents.raced = True
        writer = OrderWriter(documents, identity, settings, sleep=lambda _: None)
        first = writer.write(None, draft, lines, payment)

        documents.raced = False
        second = writer.write(None, draft, lines, PaymentSucceeded(payment_id="pay_456"))

        history = _history(documents)
        assert [order["order_number"] for order in history["orders"]] == [first, "ORD-20240101-OTHER1", second]
        assert history["total_orders"] == 3

    def test_conflicts_do_not_back_off(self, identity, settings, intruder, draft, lines, payment):
        documents = RacingDocumentStore(intruder)
        sleeps = []
        writer = OrderWriter(documents, identity, settings, sleep=sleeps.append)
        writer.write(None, draft, lines, payment)
        assert sleeps == []


class TestTransientFailures:
    def test_retries_with_exponential_backoff(self, writer, documents, sleeps, draft, lines, payment):
        documents.fail_next(2)
        order_number = writer.write(None, draft, lines, payment)
        assert sleeps == [1.0, 2.0]
        assert _history(documents)["orders"][0]["order_number"] == order_number

    def test_gives_up_after_max_attempts(self, writer, documents, sleeps, draft, lines, payment):
        documents.fail_next(3)
        with pytest.raises(OrderPersistenceFailed) as exc:
            writer.write(None, draft, lines, payment)

        assert exc.value.payment_id == "pay_123"
        assert ORDER_NUMBER_PATTERN.match(exc.value.order_number)
        assert "contact support" in str(exc.value)
        assert len(sleeps) == 2
        assert _history(documents) is None


class TestOrderNumberCollisions:
    def test_number_already_in_history_is_redrawn(self, documents, identity, settings, draft, lines, payment):
        taken = generate_order_number(rng=random.Random(7))
        documents.create(ORDERS_COLLECTION, EMAIL, {"email": EMAIL, "orders": [{"order_number": taken}], "total_orders": 1})

        writer = OrderWriter(documents, identity, settings, sleep=lambda _: None, rng=random.Random(7))
        order_number = writer.write(None, draft, lines, payment)

        assert order_number != taken
        numbers = [order["order_number"] for order in _history(documents)["orders"]]
        assert numbers == [taken, order_number]
