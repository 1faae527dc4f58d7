"""Tests for the payment bridge."""

import pytest

from storefront.payments.bridge import (
    CustomerContact,
    PaymentCancelled,
    PaymentFailed,
    PaymentSucceeded,
)
from storefront.payments.gateway.fake_adapter import FakeGatewayMode


@pytest.fixture()
def customer():
    return CustomerContact(name="Asha Rao", email="asha@example.com", phone="+91 98450 00000")


@pytest.fixture()
def results():
    return []


class TestRequest:
    @pytest.mark.parametrize(
        "amount, minor",
        [(49.0, 4900), (19.99, 1999), (0.1 + 0.2, 30), (0, 0)],
    )
    def test_minor_units(self, bridge, amount, minor):
        assert bridge.to_minor_units(amount) == minor

    def test_request_carries_customer_and_store(self, bridge, gateway, customer, results):
        bridge.pay(68.5, customer, "LayzoMarket - 2 digital templates", results.append)
        [request] = gateway.calls
        assert request.amount_minor_units == 6850
        assert request.currency == "INR"
        assert request.name == "LayzoMarket"
        assert request.description == "LayzoMarket - 2 digital templates"
        assert request.prefill == {"name": "Asha Rao", "email": "asha@example.com", "contact": "+91 98450 00000"}
        assert request.theme == {"color": "#8B5CF6"}


class TestOutcomes:
    def test_success(self, bridge, gateway, customer, results):
        attempt = bridge.pay(10.0, customer, "d", results.append)
        [result] = results
        assert isinstance(result, PaymentSucceeded)
        assert result.payment_id.startswith("pay_fake_")
        assert attempt.settled

    def test_failure(self, bridge, gateway, customer, results):
        gateway.configure(FakeGatewayMode.FAIL, failure_code="BAD_REQUEST_ERROR", failure_description="Card declined")
        bridge.pay(10.0, customer, "d", results.append)
        [result] = results
        assert isinstance(result, PaymentFailed)
        assert result.code == "BAD_REQUEST_ERROR"
        assert result.description == "Card declined"
        assert result.reason == "payment_failed"

    def test_failure_without_description_gets_default(self, bridge, gateway, customer, results):
        gateway.configure(FakeGatewayMode.HOLD)
        bridge.pay(10.0, customer, "d", results.append)
        gateway.pending[0].fail(code=None, description=None)
        assert results[0].description == "Payment failed. Please try again."
        assert results[0].code == "PAYMENT_FAILED"

    def test_dismiss(self, bridge, gateway, customer, results):
        gateway.configure(FakeGatewayMode.DISMISS)
        bridge.pay(10.0, customer, "d", results.append)
        assert results == [PaymentCancelled()]
        assert results[0].description == "Payment cancelled by user"

    def test_unavailable_gateway_fails_attempt(self, bridge, gateway, customer, results):
        gateway.configure(FakeGatewayMode.SUCCEED, available=False)
        bridge.pay(10.0, customer, "d", results.append)
        [result] = results
        assert isinstance(result, PaymentFailed)
        assert result.code == "GATEWAY_UNAVAILABLE"
        assert gateway.calls == []


class TestAtMostOneResult:
    def test_held_attempt_delivers_nothing(self, bridge, gateway, customer, results):
        gateway.configure(FakeGatewayMode.HOLD)
        attempt = bridge.pay(10.0, customer, "d", results.append)
        assert results == []
        assert not attempt.settled

    def test_repeated_callbacks_ignored(self, bridge, gateway, customer, results):
        gateway.configure(FakeGatewayMode.HOLD)
        bridge.pay(10.0, customer, "d", results.append)
        session = gateway.pending[0]
        session.succeed(payment_id="pay_1")
        session.dismiss()
        session.fail()
        assert results == [PaymentSucceeded(payment_id="pay_1")]

    def test_attempts_have_distinct_ids(self, bridge, customer, results):
        first = bridge.pay(10.0, customer, "d", results.append)
        second = bridge.pay(10.0, customer, "d", results.append)
        assert first.attempt_id != second.attempt_id


class TestFakeGatewayReset:
    def test_reset_restores_defaults(self, gateway, bridge, customer, results):
        gateway.configure(FakeGatewayMode.FAIL, failure_code="GATEWAY_ERROR", failure_description="Issuer down")
        gateway.reset()

        gateway.configure(FakeGatewayMode.FAIL)
        bridge.pay(10.0, customer, "d", results.append)
        assert results[0].code == "BAD_REQUEST_ERROR"
        assert results[0].description == "Card declined"

    def test_reset_forgets_failure_text_without_reconfiguring(self, gateway):
        gateway.configure(FakeGatewayMode.FAIL, failure_code="GATEWAY_ERROR", failure_description="Issuer down")
        gateway.reset()
        assert gateway.mode == FakeGatewayMode.SUCCEED
        assert gateway.failure_code == "BAD_REQUEST_ERROR"
        assert gateway.failure_description == "Card declined"
