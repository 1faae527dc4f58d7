"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from pytest_bdd import given, parsers, then

from storefront.orders.writer import ORDERS_COLLECTION

_TITLES = {"tpl-001": "Portfolio Kit", "tpl-002": "Landing Page Pack"}


@pytest.fixture()
def catalogue(make_product):
    """Products by id, built on first use."""
    products = {}

    def lookup(product_id, price=None):
        if product_id not in products:
            products[product_id] = make_product(
                product_id=product_id,
                title=_TITLES.get(product_id, product_id),
                price=price if price is not None else 10.0,
            )
        return products[product_id]

    return lookup


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the cart holds {quantity:d} of "{product_id}" at {price:f}'))
def cart_holds(cart_manager, catalogue, quantity, product_id, price):
    product = catalogue(product_id, price)
    for _ in range(quantity):
        cart_manager.add(product)


@given("the cart is empty")
def cart_is_empty(cart_manager):
    cart_manager.clear()


@given(parsers.cfparse('the wishlist holds "{product_id}"'))
def wishlist_holds(wishlist_manager, catalogue, product_id):
    wishlist_manager.add(catalogue(product_id))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the cart is empty")
def cart_empty(cart_manager):
    assert cart_manager.is_empty()


@then(parsers.cfparse("the cart still holds {count:d} items"))
def cart_item_count(cart_manager, count):
    assert cart_manager.item_count() == count


@then(parsers.cfparse('the cart holds {quantity:d} of "{product_id}"'))
def cart_line_quantity(cart_manager, quantity, product_id):
    line = next(line for line in cart_manager.lines() if line.product.product_id == product_id)
    assert line.quantity == quantity


@then(parsers.cfparse('no order is recorded for "{email}"'))
def no_order(documents, email):
    assert documents.get(ORDERS_COLLECTION, email) is None
