"""Application tests for the order workflows: checkout, payment, status changes and their side effects."""

import json
from unittest.mock import patch

import pytest
from protean import current_domain

from pizzeria.catalog.management import RetirePizza
from pizzeria.inventory import ledger
from pizzeria.ordering import workflows
from pizzeria.ordering.order import Order
from pizzeria.shared.errors import (
    AlreadyProcessed,
    CancellationRequiresSupport,
    Conflict,
    Forbidden,
    InvalidSize,
    InvalidTransition,
    NotFound,
    PaymentVerificationFailed,
    UpstreamFailure,
    ValidationFailure,
)
from pizzeria.shared.query import fetch


def _pay(gateway, user, order, gateway_order, payment_id="pay_test123"):
    return workflows.verify_payment(
        user,
        order.order_number,
        gateway_order["id"],
        payment_id,
        gateway.sign(gateway_order["id"], payment_id),
    )


class TestPlaceOrder:
    def test_prices_the_cart(self, place_order):
        order, _ = place_order()
        assert order.pricing.subtotal == 598
        assert order.pricing.tax == 30
        assert order.pricing.delivery_fee == 50
        assert order.pricing.total == 678
        assert order.status == "pending"
        assert order.order_number.startswith("PZ")
        assert len(order.order_number) == 11

    def test_creates_gateway_order_in_paise(self, place_order, gateway):
        order, gateway_order = place_order()
        assert gateway_order["amount"] == 67800
        assert gateway_order["currency"] == "INR"
        assert order.payment.gateway_order_id == gateway_order["id"]
        assert gateway.calls[0]["receipt"] == order.order_number

    def test_cod_skips_the_gateway(self, place_order, gateway):
        order, gateway_order = place_order(payment_method="cod")
        assert gateway_order is None
        assert gateway.calls == []
        assert order.payment is None

    def test_captures_customization_prices(self, place_order, margherita):
        items = [
            {
                "pizza_id": margherita,
                "size": "large",
                "quantity": 1,
                "customizations": {"base": "Thin Crust", "cheese": ["Cheddar"], "vegetables": ["Olives"]},
            }
        ]
        order, _ = place_order(payment_method="cod", items=items)
        [item] = order.items
        # 299 * 1.3 + 40 + 35
        assert item.item_price == 463.7
        captured = json.loads(item.customizations)
        assert captured["cheese"] == [{"name": "Cheddar", "price": 40.0}]

    def test_gateway_failure_discards_the_order(self, place_order, gateway):
        gateway.configure(should_succeed=False)
        with pytest.raises(UpstreamFailure):
            place_order()
        assert fetch(Order) == []

    def test_unavailable_pizza_is_rejected(self, place_order, margherita):
        current_domain.process(RetirePizza(pizza_id=margherita), asynchronous=False)
        with pytest.raises(ValidationFailure):
            place_order(payment_method="cod")

    def test_unoffered_size_is_rejected(self, place_order, margherita):
        with pytest.raises(InvalidSize):
            place_order(items=[{"pizza_id": margherita, "size": "family", "quantity": 1}])

    def test_taken_order_number_is_redrawn(self, place_order):
        numbers = iter(["PZ123456001", "PZ123456001", "PZ123456002"])
        with patch("pizzeria.ordering.checkout.generate_order_number", side_effect=lambda: next(numbers)):
            first, _ = place_order(payment_method="cod")
            second, _ = place_order(payment_method="cod")

        assert (first.order_number, second.order_number) == ("PZ123456001", "PZ123456002")
        assert len(fetch(Order)) == 2

    def test_gives_up_when_every_number_is_taken(self, place_order):
        with patch("pizzeria.ordering.checkout.generate_order_number", return_value="PZ123456001"):
            place_order(payment_method="cod")
            with pytest.raises(Conflict):
                place_order(payment_method="cod")

        assert len(fetch(Order)) == 1

    def test_estimated_delivery(self, place_order):
        order, _ = place_order(payment_method="cod")
        # One 15 minute line is raised to the 30 minute kitchen minimum, plus 30 on the road
        minutes = (order.estimated_delivery_time - order.created_at).total_seconds() / 60
        assert round(minutes) == 60


class TestVerifyPayment:
    def test_confirms_order_and_runs_side_effects(self, place_order, customer, gateway, mailbox, broadcasts):
        order, gateway_order = place_order()
        order = _pay(gateway, customer, order, gateway_order)

        assert order.status == "confirmed"
        assert order.payment_status == "completed"
        assert order.payment.gateway_payment_id == "pay_test123"
        assert mailbox.sent_to(customer.email)[-1]["subject"] == f"Order Confirmation - {order.order_number}"
        [update] = broadcasts.emitted("orderStatusUpdate", room=f"user-{customer.id}")
        assert update["payload"]["status"] == "confirmed"
        [announcement] = broadcasts.emitted("newOrder", room="admin-room")
        assert announcement["payload"]["customerName"] == customer.name

    def test_second_verification_is_rejected_without_double_consumption(
        self, place_order, customer, gateway, make_item, margherita
    ):
        cheddar = make_item("Cheddar", current_stock=20, min_stock_level=2, max_stock_level=50)
        items = [{"pizza_id": margherita, "size": "medium", "quantity": 2, "customizations": {"cheese": ["Cheddar"]}}]
        order, gateway_order = place_order(items=items)

        _pay(gateway, customer, order, gateway_order)
        with pytest.raises(AlreadyProcessed):
            _pay(gateway, customer, order, gateway_order)

        assert ledger.get_item(cheddar).current_stock == 18
        assert len(ledger.history(cheddar)) == 1

    def test_bad_signature_is_rejected(self, place_order, customer):
        order, gateway_order = place_order()
        with pytest.raises(PaymentVerificationFailed):
            workflows.verify_payment(customer, order.order_number, gateway_order["id"], "pay_1", "forged")
        assert workflows.find_order(order.order_number).status == "pending"

    def test_signature_for_another_gateway_order_is_rejected(self, place_order, customer, gateway):
        order, _ = place_order()
        signature = gateway.sign("order_other", "pay_1")
        with pytest.raises(PaymentVerificationFailed):
            workflows.verify_payment(customer, order.order_number, "order_other", "pay_1", signature)

    def test_only_the_owner_can_pay(self, place_order, other_customer, gateway):
        order, gateway_order = place_order()
        with pytest.raises(NotFound):
            _pay(gateway, other_customer, order, gateway_order)

    def test_cod_orders_cannot_be_paid_online(self, place_order, customer, gateway):
        order, _ = place_order(payment_method="cod")
        with pytest.raises(NotFound):
            workflows.verify_payment(customer, order.order_number, "order_x", "pay_1", gateway.sign("order_x", "pay_1"))


class TestCashOnDelivery:
    def test_confirmation_side_effects(self, place_order, customer, mailbox, broadcasts):
        order, _ = place_order(payment_method="cod")
        order = workflows.confirm_cash_on_delivery(customer, order.order_number)

        assert order.status == "confirmed"
        assert order.payment_status == "pending"
        assert len(mailbox.sent_to(customer.email)) >= 1
        assert broadcasts.emitted("newOrder", room="admin-room")

    def test_confirms_once(self, place_order, customer):
        order, _ = place_order(payment_method="cod")
        workflows.confirm_cash_on_delivery(customer, order.order_number)
        with pytest.raises(AlreadyProcessed):
            workflows.confirm_cash_on_delivery(customer, order.order_number)

    def test_consumption_drives_low_stock_alert(self, place_order, customer, make_item, margherita, mailbox):
        make_item("Olives", current_stock=12, min_stock_level=10, max_stock_level=60, category="vegetable")
        items = [{"pizza_id": margherita, "size": "small", "quantity": 3, "customizations": {"vegetables": ["Olives"]}}]
        order, _ = place_order(payment_method="cod", items=items)

        workflows.confirm_cash_on_delivery(customer, order.order_number)

        alerts = [e for e in mailbox.sent_emails if e["subject"].startswith("[Low Stock]")]
        assert len(alerts) == 1
        assert "Olives" in alerts[0]["body"]

    def test_broadcast_failure_does_not_undo_confirmation(self, place_order, customer, broadcasts):
        broadcasts.should_fail = True
        order, _ = place_order(payment_method="cod")
        order = workflows.confirm_cash_on_delivery(customer, order.order_number)
        assert order.status == "confirmed"


class TestAdminStatusChanges:
    def test_change_returns_previous_status(self, place_order, customer, admin, mailbox, broadcasts):
        order, _ = place_order(payment_method="cod")
        workflows.confirm_cash_on_delivery(customer, order.order_number)

        order, previous = workflows.change_status(admin, order.order_number, "preparing", notes="Oven on")

        assert (previous, order.status) == ("confirmed", "preparing")
        assert order.status_history[-1].notes == "Oven on"
        assert mailbox.sent_to(customer.email)[-1]["subject"] == f"Order Update - {order.order_number}"
        [changed] = broadcasts.emitted("orderStatusChanged")
        assert changed["payload"]["updatedBy"] == admin.name

    def test_broadcast_failure_keeps_the_status_change(self, place_order, customer, admin, broadcasts):
        order, _ = place_order(payment_method="cod")
        workflows.confirm_cash_on_delivery(customer, order.order_number)
        broadcasts.should_fail = True

        order, previous = workflows.change_status(admin, order.order_number, "preparing")

        assert (previous, order.status) == ("confirmed", "preparing")

    def test_invalid_transition_is_rejected(self, place_order, admin):
        order, _ = place_order(payment_method="cod")
        with pytest.raises(InvalidTransition):
            workflows.change_status(admin, order.order_number, "delivered")

    def test_cancelling_a_paid_order_refunds_it(self, place_order, customer, admin, gateway):
        order, gateway_order = place_order()
        _pay(gateway, customer, order, gateway_order)

        order, _ = workflows.change_status(admin, order.order_number, "cancelled")

        assert order.status == "cancelled"
        assert order.payment_status == "refunded"
        [refund] = [c for c in gateway.calls if c["method"] == "refund"]
        assert (refund["gateway_payment_id"], refund["amount"]) == ("pay_test123", 67800)

    def test_refund_failure_leaves_cancellation_in_place(self, place_order, customer, admin, gateway):
        order, gateway_order = place_order()
        _pay(gateway, customer, order, gateway_order)
        gateway.configure(should_succeed=False)

        order, _ = workflows.change_status(admin, order.order_number, "cancelled")

        assert order.status == "cancelled"
        assert order.payment_status == "completed"


class TestCustomerCancellation:
    def test_customer_can_cancel_before_dispatch(self, place_order, customer, broadcasts):
        order, _ = place_order(payment_method="cod")
        order = workflows.cancel_by_customer(customer, order.order_number, reason="Ordered twice")
        assert order.status == "cancelled"
        assert broadcasts.emitted("orderStatusUpdate")[-1]["payload"]["message"] == "Order cancelled successfully"

    def test_out_for_delivery_needs_support(self, place_order, customer, admin):
        order, _ = place_order(payment_method="cod")
        workflows.confirm_cash_on_delivery(customer, order.order_number)
        for status in ("preparing", "ready", "out-for-delivery"):
            workflows.change_status(admin, order.order_number, status)

        with pytest.raises(CancellationRequiresSupport):
            workflows.cancel_by_customer(customer, order.order_number)
        assert workflows.find_order(order.order_number).status == "out-for-delivery"

    def test_other_customers_cannot_cancel(self, place_order, other_customer):
        order, _ = place_order(payment_method="cod")
        with pytest.raises(Forbidden):
            workflows.cancel_by_customer(other_customer, order.order_number)

    def test_payment_arriving_after_cancellation_is_refunded(self, place_order, customer, gateway, mailbox):
        order, gateway_order = place_order()
        workflows.cancel_by_customer(customer, order.order_number)

        with pytest.raises(InvalidTransition, match="refunded"):
            _pay(gateway, customer, order, gateway_order, payment_id="pay_late")

        order = workflows.find_order(order.order_number)
        assert order.status == "cancelled"
        assert order.payment_status == "refunded"
        assert order.payment.gateway_payment_id == "pay_late"
        [refund] = [c for c in gateway.calls if c["method"] == "refund"]
        assert refund["gateway_payment_id"] == "pay_late"
        assert not any(e["subject"].startswith("Order Confirmation") for e in mailbox.sent_emails)

    def test_failed_late_refund_leaves_payment_on_record(self, place_order, customer, gateway):
        order, gateway_order = place_order()
        workflows.cancel_by_customer(customer, order.order_number)
        signature = gateway.sign(gateway_order["id"], "pay_late")
        gateway.configure(should_succeed=False)

        with pytest.raises(InvalidTransition, match="contact support"):
            workflows.verify_payment(customer, order.order_number, gateway_order["id"], "pay_late", signature)

        order = workflows.find_order(order.order_number)
        assert (order.status, order.payment_status) == ("cancelled", "completed")


class TestTrackingAndRating:
    def test_tracking_steps(self, place_order, customer):
        order, _ = place_order(payment_method="cod")
        workflows.confirm_cash_on_delivery(customer, order.order_number)

        tracking = workflows.track(customer, order.order_number)

        steps = {step["key"]: step for step in tracking["tracking_steps"]}
        assert tracking["current_status"] == "confirmed"
        assert steps["pending"]["is_completed"] and steps["pending"]["timestamp"]
        assert steps["confirmed"]["is_current"]
        assert not steps["preparing"]["is_completed"]
        assert steps["preparing"]["timestamp"] is None

    def test_admin_can_track_any_order(self, place_order, admin):
        order, _ = place_order(payment_method="cod")
        assert workflows.track(admin, order.order_number)["order_id"] == order.order_number

    def test_rating_a_delivered_order(self, place_order, customer, admin):
        order, _ = place_order(payment_method="cod")
        workflows.confirm_cash_on_delivery(customer, order.order_number)
        for status in ("preparing", "ready", "out-for-delivery", "delivered"):
            workflows.change_status(admin, order.order_number, status)

        order = workflows.rate_order(customer, order.order_number, 5, "Great crust")
        assert order.rating == 5

    def test_my_orders_lists_only_my_orders(self, place_order, customer, other_customer):
        place_order(payment_method="cod")
        place_order(payment_method="cod", user=other_customer)
        assert len(workflows.list_orders_for(customer)) == 1
        assert workflows.list_orders_for(customer, status="delivered") == []
