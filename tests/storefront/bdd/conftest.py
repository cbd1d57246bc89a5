"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from pytest_bdd import given, parsers, then
from storefront.refund.submission import RequestRefund, get_refund_request, request_refund


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for the exception raised by a When step."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse("a customer who paid {amount:f} for an order"), target_fixture="purchase")
def customer_who_paid(amount, customer_id, add_card, charge, place):
    payment_id = charge(customer_id, add_card(customer_id), amount=amount)
    order_id = place(customer_id, unit_price=amount, payment_id=payment_id)
    return {"customer_id": customer_id, "payment_id": payment_id, "order_id": order_id}


@given("the customer requested a refund for the payment", target_fixture="refund_request_id")
def customer_requested_refund(purchase):
    return request_refund(
        RequestRefund(
            customer_id=purchase["customer_id"],
            payment_id=purchase["payment_id"],
            reason="Arrived damaged",
        )
    )


# ---------------------------------------------------------------------------
# Then steps (shared)
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the request is "{status}"'))
def request_status_is(refund_request_id, status):
    assert get_refund_request(refund_request_id).status == status
