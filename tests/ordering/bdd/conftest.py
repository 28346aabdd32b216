"""Shared BDD fixtures and step definitions for ordering."""

import pytest
from pytest_bdd import given, parsers, then, when

from pizzeria.ordering import workflows
from pizzeria.shared.errors import PizzeriaError


@pytest.fixture()
def error():
    """Holds the error raised by the last When step, if any."""
    return {}


@pytest.fixture()
def placed():
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a customer has placed a cash on delivery order")
def cod_order(place_order, placed):
    placed["order"], placed["gateway_order"] = place_order(payment_method="cod")


@given("a customer has placed an online order")
def online_order(place_order, placed):
    placed["order"], placed["gateway_order"] = place_order()


@given("the order is confirmed")
def order_confirmed(customer, placed):
    workflows.confirm_cash_on_delivery(customer, placed["order"].order_number)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the admin moves the order to "{status}"'))
def admin_moves(admin, placed, error, status):
    try:
        workflows.change_status(admin, placed["order"].order_number, status)
    except PizzeriaError as exc:
        error["exc"] = exc


@when("the customer cancels the order")
def customer_cancels(customer, placed, error):
    try:
        workflows.cancel_by_customer(customer, placed["order"].order_number)
    except PizzeriaError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(placed, status):
    assert workflows.find_order(placed["order"].order_number).status == status


@then(parsers.cfparse('the payment status is "{status}"'))
def payment_status_is(placed, status):
    assert workflows.find_order(placed["order"].order_number).payment_status == status


@then(parsers.cfparse('the change is rejected as "{kind}"'))
def rejected_as(error, kind):
    assert "exc" in error
    assert error["exc"].kind == kind
