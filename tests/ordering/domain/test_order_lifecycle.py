"""Tests for the Order aggregate: placement, the status machine and payment state."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from protean.exceptions import ValidationError

from pizzeria.ordering.events import OrderPlaced, OrderStatusChanged, PaymentCompleted
from pizzeria.ordering.order import Order, OrderStatus, allowed_transitions
from pizzeria.shared.errors import AlreadyProcessed, CancellationRequiresSupport, InvalidTransition

ADDRESS = {"street": "12 MG Road", "city": "Bengaluru", "state": "KA", "zip_code": "560001"}
PRICING = {"subtotal": 598.0, "delivery_fee": 50.0, "tax": 30.0, "discount": 0.0, "total": 678.0}


def _order(payment_method="razorpay", **overrides):
    now = datetime.now(UTC)
    attributes = {
        "order_number": "PZ123456001",
        "user_id": str(uuid4()),
        "items": [
            {
                "pizza_id": str(uuid4()),
                "name": "Margherita",
                "quantity": 2,
                "size": "medium",
                "customizations": None,
                "item_price": 299.0,
                "total_item_price": 598.0,
            }
        ],
        "delivery_address": ADDRESS,
        "contact_phone": "9876543210",
        "payment_method": payment_method,
        "pricing": PRICING,
        "estimated_delivery_time": now + timedelta(minutes=60),
        "now": now,
    }
    attributes.update(overrides)
    return Order.place(**attributes)


def _advance(order, *statuses):
    for status in statuses:
        order.transition_to(status, actor="admin-1")
    return order


class TestPlacement:
    def test_new_order_is_pending(self):
        order = _order()
        assert order.status == "pending"
        assert order.payment_status == "pending"
        assert [h.status for h in order.status_history] == ["pending"]

    def test_raises_order_placed(self):
        order = _order()
        event = order._events[0]
        assert isinstance(event, OrderPlaced)
        assert (event.item_count, event.total) == (2, 678.0)

    def test_amount_in_paise(self):
        assert _order().amount_in_paise == 67800

    def test_order_needs_items(self):
        with pytest.raises(ValidationError):
            _order(items=[])

    def test_pricing_must_add_up(self):
        with pytest.raises(ValidationError):
            _order(pricing={**PRICING, "total": 700.0})

    @pytest.mark.parametrize("phone", ["98765", "98765432ab", "98765432101"])
    def test_contact_phone_needs_ten_digits(self, phone):
        with pytest.raises(ValidationError):
            _order(contact_phone=phone)

    def test_zip_code_needs_six_digits(self):
        with pytest.raises(ValidationError):
            _order(delivery_address={**ADDRESS, "zip_code": "5600"})


class TestStatusMachine:
    @pytest.mark.parametrize(
        "status, allowed",
        [
            ("pending", {"confirmed", "cancelled"}),
            ("confirmed", {"preparing", "cancelled"}),
            ("preparing", {"ready", "cancelled"}),
            ("ready", {"out-for-delivery", "cancelled"}),
            ("out-for-delivery", {"delivered"}),
            ("delivered", set()),
            ("cancelled", set()),
        ],
    )
    def test_transition_table(self, status, allowed):
        assert allowed_transitions(status) == allowed

    def test_pending_cannot_skip_to_preparing(self):
        order = _order()
        with pytest.raises(InvalidTransition) as exc:
            order.transition_to("preparing")
        assert str(exc.value) == "Cannot change status from pending to preparing"
        assert order.status == "pending"
        assert len(order.status_history) == 1

    def test_full_path_records_every_step(self):
        order = _advance(_order(), "confirmed", "preparing", "ready", "out-for-delivery", "delivered")
        assert [h.status for h in order.status_history] == [
            "pending",
            "confirmed",
            "preparing",
            "ready",
            "out-for-delivery",
            "delivered",
        ]
        assert order.actual_delivery_time is not None
        assert order.status_history[-1].actor == "admin-1"

    def test_status_change_event(self):
        order = _advance(_order(), "confirmed")
        event = order._events[-1]
        assert isinstance(event, OrderStatusChanged)
        assert (event.previous_status, event.new_status) == ("pending", "confirmed")

    @pytest.mark.parametrize("terminal", ["delivered", "cancelled"])
    def test_terminal_statuses_are_final(self, terminal):
        order = _order()
        if terminal == "delivered":
            _advance(order, "confirmed", "preparing", "ready", "out-for-delivery", "delivered")
        else:
            _advance(order, "cancelled")
        with pytest.raises(InvalidTransition):
            order.transition_to("confirmed")


class TestCustomerCancellation:
    @pytest.mark.parametrize("reached", [[], ["confirmed"], ["confirmed", "preparing"], ["confirmed", "preparing", "ready"]])
    def test_cancellable_before_dispatch(self, reached):
        order = _advance(_order(), *reached)
        order.cancel_by_customer(actor=str(order.user_id), reason="Changed my mind")
        assert order.status == "cancelled"
        assert order.status_history[-1].notes == "Changed my mind"

    def test_out_for_delivery_needs_support(self):
        order = _advance(_order(), "confirmed", "preparing", "ready", "out-for-delivery")
        with pytest.raises(CancellationRequiresSupport):
            order.cancel_by_customer(actor=str(order.user_id))
        assert order.status == "out-for-delivery"

    def test_delivered_order_cannot_be_cancelled(self):
        order = _advance(_order(), "confirmed", "preparing", "ready", "out-for-delivery", "delivered")
        with pytest.raises(InvalidTransition):
            order.cancel_by_customer(actor=str(order.user_id))


class TestPayment:
    def test_completing_payment_confirms_the_order(self):
        order = _order()
        order.attach_gateway_order("order_abc")
        order.complete_payment("pay_123", "sig")

        assert order.status == "confirmed"
        assert order.payment_status == "completed"
        assert order.payment.gateway_order_id == "order_abc"
        assert order.payment.gateway_payment_id == "pay_123"
        assert any(isinstance(e, PaymentCompleted) for e in order._events)
        assert order.is_refundable

    def test_payment_completes_once(self):
        order = _order()
        order.complete_payment("pay_123", "sig")
        with pytest.raises(AlreadyProcessed):
            order.complete_payment("pay_123", "sig")
        assert [h.status for h in order.status_history].count("confirmed") == 1

    def test_payment_captured_after_cancellation_keeps_order_cancelled(self):
        order = _order()
        order.attach_gateway_order("order_abc")
        order.cancel_by_customer(actor=str(order.user_id))

        order.complete_payment("pay_123", "sig")

        assert order.status == "cancelled"
        assert order.payment_status == "completed"
        assert order.is_refundable

    def test_cash_on_delivery_confirmation(self):
        order = _order(payment_method="cod")
        order.confirm_cash_on_delivery(actor="user-1")
        assert order.status == OrderStatus.CONFIRMED.value
        assert order.payment_status == "pending"
        assert not order.is_refundable
        with pytest.raises(AlreadyProcessed):
            order.confirm_cash_on_delivery(actor="user-1")

    def test_record_refund(self):
        order = _order()
        order.complete_payment("pay_123", "sig")
        order.record_refund("rfnd_1")
        assert order.payment_status == "refunded"
        assert order.payment.gateway_payment_id == "pay_123"
        assert order.payment.gateway_refund_id == "rfnd_1"


class TestRating:
    def test_only_delivered_orders_can_be_rated(self):
        with pytest.raises(ValidationError):
            _order().rate(5)

    def test_rating_is_recorded_once(self):
        order = _advance(_order(), "confirmed", "preparing", "ready", "out-for-delivery", "delivered")
        order.rate(4, "Hot and fresh")
        assert (order.rating, order.review) == (4, "Hot and fresh")
        with pytest.raises(AlreadyProcessed):
            order.rate(5)
