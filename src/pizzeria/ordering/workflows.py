"""Order workflows.

Each workflow processes one command inside a per-order lock, then runs the
side effects of the change: ingredient consumption, email and real-time
pushes. Side effects are isolated from each other and from the committed
change; a failure there is logged and the caller still gets the order.
"""

import json

from protean.exceptions import ObjectNotFoundError, TransactionError, ValidationError
from protean.utils.globals import current_domain

from pizzeria.config import get_settings
from pizzeria.domain import logger
from pizzeria.identity.access import ensure_access
from pizzeria.identity.user import User
from pizzeria.inventory import ledger
from pizzeria.notifications import dispatcher
from pizzeria.ordering.checkout import (
    ORDER_NUMBER_ATTEMPTS,
    AttachGatewayOrder,
    DiscardOrder,
    PlaceOrder,
    is_order_number_clash,
)
from pizzeria.ordering.lifecycle import (
    CancelOrder,
    ChangeOrderStatus,
    ConfirmCashOnDelivery,
    ConfirmPayment,
    RateOrder,
    RecordRefund,
)
from pizzeria.ordering.order import Order, OrderStatus, PaymentMethod, PaymentStatus
from pizzeria.payments.gateway import get_gateway
from pizzeria.realtime import events as realtime
from pizzeria.shared.errors import (
    AlreadyProcessed,
    Conflict,
    InvalidTransition,
    NotFound,
    PaymentVerificationFailed,
    UpstreamFailure,
)
from pizzeria.shared.locks import hold
from pizzeria.shared.query import fetch, fetch_one

TRACKING_STEPS = [
    (OrderStatus.PENDING.value, "Order Received", "Your order has been received"),
    (OrderStatus.CONFIRMED.value, "Order Confirmed", "Your order has been confirmed"),
    (OrderStatus.PREPARING.value, "In the Kitchen", "Our chefs are preparing your pizza"),
    (OrderStatus.READY.value, "Ready for Delivery", "Your order is ready and will be dispatched soon"),
    (OrderStatus.OUT_FOR_DELIVERY.value, "Out for Delivery", "Your pizza is on the way!"),
    (OrderStatus.DELIVERED.value, "Delivered", "Order delivered successfully"),
]


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------
def find_order(order_number):
    order = fetch_one(Order, order_number=order_number)
    if order is None:
        raise NotFound("Order not found")
    return order


def _reload(order):
    return current_domain.repository_for(Order).get(order.id)


def _owner_of(order):
    try:
        return current_domain.repository_for(User).get(order.user_id)
    except ObjectNotFoundError:
        logger.warning("order_owner_missing", order_number=order.order_number, user_id=str(order.user_id))
        return None


def get_order_for(user, order_number):
    """The order, if ``user`` owns it or is an admin."""
    order = find_order(order_number)
    ensure_access(user, order.user_id)
    return order


def _own_order(user, order_number, payment_method):
    """The caller's own order paid with ``payment_method``; anything else reads as not found."""
    order = fetch_one(Order, order_number=order_number)
    if order is None or str(order.user_id) != str(user.id) or order.payment_method != payment_method:
        raise NotFound("Order not found")
    return order


def list_orders_for(user, status=None):
    filters = {"user_id": str(user.id)}
    if status:
        filters["status"] = status
    return sorted(fetch(Order, **filters), key=lambda o: o.created_at, reverse=True)


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
def _submit(**fields):
    """Process a PlaceOrder built from ``fields``, drawing a fresh order number whenever the last one was taken."""
    for attempt in range(1, ORDER_NUMBER_ATTEMPTS + 1):
        try:
            return current_domain.process(PlaceOrder(**fields), asynchronous=False)
        except (ValidationError, TransactionError) as exc:
            if not is_order_number_clash(exc):
                raise
            logger.warning("order_number_collision", attempt=attempt)
    raise Conflict("Could not allocate a unique order number")


def place_order(user, items, delivery_address, contact_phone, payment_method, order_notes=None):
    """Create a pending order. Returns ``(order, gateway_order)``; gateway_order is None for COD."""
    order_id = _submit(
        user_id=str(user.id),
        items=json.dumps(items),
        delivery_address=json.dumps(delivery_address),
        contact_phone=contact_phone,
        payment_method=payment_method,
        order_notes=order_notes,
    )
    order = current_domain.repository_for(Order).get(order_id)

    if payment_method != PaymentMethod.RAZORPAY.value:
        return order, None

    settings = get_settings()
    try:
        result = get_gateway().create_order(order.amount_in_paise, settings.currency, order.order_number)
    except Exception:
        logger.exception("gateway_order_failed", order_number=order.order_number)
        result = None

    if result is None or not result.success:
        current_domain.process(DiscardOrder(order_id=order_id), asynchronous=False)
        logger.error(
            "gateway_order_rejected",
            order_number=order.order_number,
            reason=result.failure_reason if result else None,
        )
        raise UpstreamFailure("Payment order creation failed")

    current_domain.process(
        AttachGatewayOrder(order_id=order_id, gateway_order_id=result.gateway_order_id),
        asynchronous=False,
    )
    gateway_order = {
        "id": result.gateway_order_id,
        "amount": result.amount,
        "currency": result.currency,
        "key_id": settings.razorpay_key_id or None,
    }
    return _reload(order), gateway_order


# ---------------------------------------------------------------------------
# Payment confirmation
# ---------------------------------------------------------------------------
def verify_payment(user, order_number, gateway_order_id, gateway_payment_id, signature):
    order = _own_order(user, order_number, PaymentMethod.RAZORPAY.value)

    with hold("order", str(order.id)):
        order = _reload(order)
        if order.payment_status == PaymentStatus.COMPLETED.value:
            raise AlreadyProcessed("Payment already completed")

        expected_gateway_order = order.payment.gateway_order_id if order.payment else None
        if expected_gateway_order and expected_gateway_order != gateway_order_id:
            logger.warning("gateway_order_mismatch", order_number=order_number)
            raise PaymentVerificationFailed()
        if not get_gateway().verify_signature(gateway_order_id, gateway_payment_id, signature):
            logger.warning("payment_signature_rejected", order_number=order_number)
            raise PaymentVerificationFailed()

        current_domain.process(
            ConfirmPayment(
                order_id=str(order.id),
                gateway_payment_id=gateway_payment_id,
                gateway_signature=signature,
                actor=str(user.id),
            ),
            asynchronous=False,
        )
        order = _reload(order)

    if order.status == OrderStatus.CANCELLED.value:
        order = _refund_if_paid(order, "Payment received for a cancelled order")
        if order.payment_status == PaymentStatus.REFUNDED.value:
            raise InvalidTransition("Order was cancelled and the payment has been refunded")
        raise InvalidTransition("Order was cancelled. Please contact support for a refund.")

    _after_confirmation(order, user, "Order confirmed and payment successful!")
    return order


def confirm_cash_on_delivery(user, order_number):
    order = _own_order(user, order_number, PaymentMethod.COD.value)

    with hold("order", str(order.id)):
        current_domain.process(ConfirmCashOnDelivery(order_id=str(order.id), actor=str(user.id)), asynchronous=False)
        order = _reload(order)

    _after_confirmation(order, user, "Order confirmed! We will start preparing your pizza.")
    return order


def _after_confirmation(order, user, message):
    try:
        ledger.consume_for_order(order)
        ledger.send_low_stock_alerts()
    except Exception:
        logger.exception("inventory_update_failed", order_number=order.order_number)

    try:
        dispatcher.notify_order_confirmed(order, user)
    except Exception:
        logger.exception("confirmation_email_failed", order_number=order.order_number)

    realtime.order_status_update(order, message)
    realtime.new_order(order, user.name)


# ---------------------------------------------------------------------------
# Status changes
# ---------------------------------------------------------------------------
def change_status(admin, order_number, status, notes=None):
    """Admin status change. Returns ``(order, previous_status)``."""
    order = find_order(order_number)

    with hold("order", str(order.id)):
        previous = current_domain.process(
            ChangeOrderStatus(order_id=str(order.id), status=status, actor=str(admin.id), notes=notes),
            asynchronous=False,
        )
        order = _reload(order)

    if order.status == OrderStatus.CANCELLED.value:
        order = _refund_if_paid(order, "Order cancelled by admin")

    _after_status_change(order, notes, updated_by=admin.name)
    return order, previous


def cancel_by_customer(user, order_number, reason=None):
    order = get_order_for(user, order_number)

    with hold("order", str(order.id)):
        current_domain.process(
            CancelOrder(order_id=str(order.id), actor=str(user.id), reason=reason),
            asynchronous=False,
        )
        order = _reload(order)

    order = _refund_if_paid(order, "Order cancelled by user")
    _after_status_change(order, reason, updated_by=user.name, message="Order cancelled successfully")
    return order


def _refund_if_paid(order, reason):
    """Refund a captured gateway payment. The cancellation stands whatever happens here."""
    if not order.is_refundable:
        return order

    try:
        result = get_gateway().refund(order.payment.gateway_payment_id, order.amount_in_paise, reason)
    except Exception:
        logger.exception("refund_failed", order_number=order.order_number)
        return order

    if not result.success:
        logger.error("refund_rejected", order_number=order.order_number, reason=result.failure_reason)
        return order

    with hold("order", str(order.id)):
        current_domain.process(
            RecordRefund(order_id=str(order.id), gateway_refund_id=result.gateway_refund_id),
            asynchronous=False,
        )
        order = _reload(order)
    logger.info("order_refunded", order_number=order.order_number, refund_id=result.gateway_refund_id)
    return order


def _after_status_change(order, notes, updated_by, message=None):
    owner = _owner_of(order)
    try:
        dispatcher.notify_status_update(order, owner, notes)
    except Exception:
        logger.exception("status_email_failed", order_number=order.order_number)

    message = message or f"Order status updated to {order.status.replace('-', ' ')}"
    realtime.order_status_update(order, message)
    realtime.order_status_changed(order, updated_by)


# ---------------------------------------------------------------------------
# Tracking and feedback
# ---------------------------------------------------------------------------
def track(user, order_number):
    order = get_order_for(user, order_number)
    statuses = [key for key, _, _ in TRACKING_STEPS]
    current_index = statuses.index(order.status) if order.status in statuses else -1

    steps = []
    for index, (key, label, description) in enumerate(TRACKING_STEPS):
        reached = order.reached_at(key)
        steps.append(
            {
                "key": key,
                "label": label,
                "description": description,
                "is_completed": index <= current_index,
                "is_current": index == current_index,
                "timestamp": reached.isoformat() if reached else None,
            }
        )

    return {
        "order_id": order.order_number,
        "current_status": order.status,
        "estimated_delivery_time": _iso(order.estimated_delivery_time),
        "actual_delivery_time": _iso(order.actual_delivery_time),
        "tracking_steps": steps,
        "order_time": _iso(order.created_at),
    }


def rate_order(user, order_number, rating, review=None):
    order = find_order(order_number)
    if str(order.user_id) != str(user.id):
        raise NotFound("Order not found")
    current_domain.process(RateOrder(order_id=str(order.id), rating=rating, review=review), asynchronous=False)
    return _reload(order)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------
def _iso(value):
    return value.isoformat() if value else None


def order_summary(order):
    return {
        "order_id": order.order_number,
        "status": order.status,
        "payment_status": order.payment_status,
        "payment_method": order.payment_method,
        "total": order.pricing.total,
        "item_count": order.item_count,
        "estimated_delivery_time": _iso(order.estimated_delivery_time),
        "created_at": _iso(order.created_at),
    }


def order_view(order, include_history=True):
    address = order.delivery_address
    view = {
        "id": str(order.id),
        "order_id": order.order_number,
        "user_id": str(order.user_id),
        "status": order.status,
        "payment_status": order.payment_status,
        "payment_method": order.payment_method,
        "items": [
            {
                "pizza_id": str(item.pizza_id),
                "name": item.name,
                "size": item.size,
                "quantity": item.quantity,
                "customizations": json.loads(item.customizations) if item.customizations else {},
                "item_price": item.item_price,
                "total_item_price": item.total_item_price,
            }
            for item in order.items
        ],
        "delivery_address": {
            "street": address.street,
            "city": address.city,
            "state": address.state,
            "zip_code": address.zip_code,
            "landmark": address.landmark,
            "instructions": address.instructions,
        },
        "contact_phone": order.contact_phone,
        "pricing": {
            "subtotal": order.pricing.subtotal,
            "delivery_fee": order.pricing.delivery_fee,
            "tax": order.pricing.tax,
            "discount": order.pricing.discount,
            "total": order.pricing.total,
        },
        "estimated_delivery_time": _iso(order.estimated_delivery_time),
        "actual_delivery_time": _iso(order.actual_delivery_time),
        "order_notes": order.order_notes,
        "rating": order.rating,
        "review": order.review,
        "created_at": _iso(order.created_at),
        "updated_at": _iso(order.updated_at),
    }
    if include_history:
        view["status_history"] = [
            {"status": h.status, "timestamp": _iso(h.timestamp), "actor": h.actor, "notes": h.notes}
            for h in sorted(order.status_history, key=lambda h: h.timestamp)
        ]
    return view
