"""Tests for reading a customer's past orders."""

import pytest

from storefront.exceptions import IdentityMissing
from storefront.orders.history import OrderHistoryReader
from storefront.orders.writer import ORDERS_COLLECTION


@pytest.fixture()
def reader(documents, identity):
    return OrderHistoryReader(documents, identity)


@pytest.fixture()
def seeded(documents):
    documents.create(
        ORDERS_COLLECTION,
        "asha@example.com",
        {
            "email": "asha@example.com",
            "orders": [
                {"order_number": "ORD-20240101-AAAAAA", "created_at": "2024-01-01T10:00:00+00:00"},
                {"order_number": "ORD-20240301-CCCCCC", "created_at": "2024-03-01T10:00:00+00:00"},
                {"order_number": "ORD-20240201-BBBBBB", "created_at": "2024-02-01T10:00:00+00:00"},
            ],
            "total_orders": 3,
        },
    )


class TestListOrders:
    def test_newest_first(self, reader, seeded):
        numbers = [order["order_number"] for order in reader.list_orders("asha@example.com")]
        assert numbers == ["ORD-20240301-CCCCCC", "ORD-20240201-BBBBBB", "ORD-20240101-AAAAAA"]

    def test_defaults_to_signed_in_customer(self, reader, identity, seeded):
        identity.sign_in_as("Asha@Example.com")
        assert len(reader.list_orders()) == 3

    def test_unknown_customer_has_no_orders(self, reader):
        assert reader.list_orders("nobody@example.com") == []

    def test_guest_without_email(self, reader):
        with pytest.raises(IdentityMissing):
            reader.list_orders()


class TestFindOrder:
    def test_find_existing(self, reader, seeded):
        order = reader.find_order("ORD-20240201-BBBBBB", "asha@example.com")
        assert order["created_at"].startswith("2024-02-01")

    def test_find_missing(self, reader, seeded):
        assert reader.find_order("ORD-20990101-ZZZZZZ", "asha@example.com") is None
