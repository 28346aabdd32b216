"""Order aggregate: what a customer bought, where it goes, and where it is.

Status machine:

    pending → confirmed → preparing → ready → out-for-delivery → delivered
    cancelled from any state before out-for-delivery

Items and pricing are captured at checkout and never change afterwards.
Every status change appends a ``StatusChange`` to ``status_history``.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, Text, ValueObject

from pizzeria.catalog.pizza import PizzaSize
from pizzeria.domain import pizzeria
from pizzeria.ordering.events import (
    GatewayOrderAttached,
    OrderPlaced,
    OrderRated,
    OrderStatusChanged,
    PaymentCompleted,
    PaymentRefunded,
)
from pizzeria.shared.errors import AlreadyProcessed, CancellationRequiresSupport, InvalidTransition

MAX_ITEM_QUANTITY = 10


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    OUT_FOR_DELIVERY = "out-for-delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    RAZORPAY = "razorpay"
    COD = "cod"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.READY, OrderStatus.CANCELLED},
    OrderStatus.READY: {OrderStatus.OUT_FOR_DELIVERY, OrderStatus.CANCELLED},
    OrderStatus.OUT_FOR_DELIVERY: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

# Orders the kitchen is working on
ACTIVE_STATUSES = {
    OrderStatus.CONFIRMED.value,
    OrderStatus.PREPARING.value,
    OrderStatus.READY.value,
    OrderStatus.OUT_FOR_DELIVERY.value,
}


def allowed_transitions(status):
    return {s.value for s in _VALID_TRANSITIONS[OrderStatus(status)]}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@pizzeria.value_object(part_of="Order")
class DeliveryAddress:
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    zip_code = String(required=True, max_length=6)
    landmark = String(max_length=255)
    instructions = String(max_length=500)

    @invariant.post
    def zip_code_must_have_six_digits(self):
        if self.zip_code and not (len(self.zip_code) == 6 and self.zip_code.isdigit()):
            raise ValidationError({"zip_code": ["Please provide a valid 6-digit zip code"]})


@pizzeria.value_object(part_of="Order")
class OrderPricing:
    """Amounts in rupees, locked at checkout."""

    subtotal = Float(required=True, min_value=0.0)
    delivery_fee = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    total = Float(required=True, min_value=0.0)

    @invariant.post
    def total_must_add_up(self):
        expected = (self.subtotal or 0) + (self.delivery_fee or 0) + (self.tax or 0) - (self.discount or 0)
        if abs(expected - (self.total or 0)) > 0.005:
            raise ValidationError({"total": ["Total must equal subtotal + delivery fee + tax - discount"]})


@pizzeria.value_object(part_of="Order")
class PaymentDetails:
    gateway_order_id = String(max_length=100)
    gateway_payment_id = String(max_length=100)
    gateway_signature = String(max_length=255)
    gateway_refund_id = String(max_length=100)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@pizzeria.entity(part_of="Order")
class OrderItem:
    """One pizza line. Name and customization prices are snapshots taken at checkout."""

    pizza_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    quantity = Integer(required=True, min_value=1, max_value=MAX_ITEM_QUANTITY)
    size = String(required=True, choices=PizzaSize)
    customizations = Text()  # JSON: resolved selection with captured prices
    item_price = Float(required=True, min_value=0.0)
    total_item_price = Float(required=True, min_value=0.0)


@pizzeria.entity(part_of="Order")
class StatusChange:
    status = String(required=True, choices=OrderStatus)
    timestamp = DateTime(required=True)
    actor = String(max_length=100)  # user id, or "system"
    notes = Text()


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@pizzeria.aggregate
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    delivery_address = ValueObject(DeliveryAddress)
    contact_phone = String(required=True, max_length=10)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(required=True, choices=PaymentMethod)
    payment = ValueObject(PaymentDetails)
    pricing = ValueObject(OrderPricing)
    estimated_delivery_time = DateTime()
    actual_delivery_time = DateTime()
    order_notes = Text()
    status_history = HasMany(StatusChange)
    rating = Integer(min_value=1, max_value=5)
    review = Text()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def contact_phone_must_have_ten_digits(self):
        if self.contact_phone and not (len(self.contact_phone) == 10 and self.contact_phone.isdigit()):
            raise ValidationError({"contact_phone": ["Please provide a valid 10-digit phone number"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        user_id,
        items,
        delivery_address,
        contact_phone,
        payment_method,
        pricing,
        estimated_delivery_time,
        order_notes=None,
        now=None,
    ):
        """Build a pending order.

        ``items`` are dicts with pizza_id, name, quantity, size, customizations
        (JSON), item_price and total_item_price. ``pricing`` is an
        ``OrderPricingSummary.as_dict()``.
        """
        if not items:
            raise ValidationError({"items": ["Order must contain at least one item"]})

        now = now or datetime.now(UTC)
        order = cls(
            order_number=order_number,
            user_id=user_id,
            delivery_address=DeliveryAddress(**delivery_address),
            contact_phone=contact_phone,
            payment_method=payment_method,
            pricing=OrderPricing(**pricing),
            estimated_delivery_time=estimated_delivery_time,
            order_notes=order_notes,
            created_at=now,
            updated_at=now,
        )
        for item in items:
            order.add_items(OrderItem(**item))
        order.add_status_history(
            StatusChange(status=OrderStatus.PENDING.value, timestamp=now, actor=str(user_id), notes="Order placed")
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                user_id=str(user_id),
                payment_method=payment_method,
                item_count=sum(item["quantity"] for item in items),
                total=order.pricing.total,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def item_count(self):
        return sum(item.quantity for item in self.items)

    @property
    def amount_in_paise(self):
        return int(round(self.pricing.total * 100))

    @property
    def is_refundable(self):
        return (
            self.payment_method == PaymentMethod.RAZORPAY.value
            and self.payment_status == PaymentStatus.COMPLETED.value
            and bool(self.payment and self.payment.gateway_payment_id)
        )

    def reached_at(self, status):
        """Timestamp of the first history entry for ``status``, if any."""
        entries = [h.timestamp for h in self.status_history if h.status == status]
        return min(entries) if entries else None

    # -------------------------------------------------------------------
    # Status machine
    # -------------------------------------------------------------------
    def transition_to(self, status, actor=None, notes=None, now=None):
        current = OrderStatus(self.status)
        target = OrderStatus(status)
        if target not in _VALID_TRANSITIONS[current]:
            raise InvalidTransition(f"Cannot change status from {current.value} to {target.value}")

        now = now or datetime.now(UTC)
        self.status = target.value
        self.add_status_history(
            StatusChange(
                status=target.value,
                timestamp=now,
                actor=actor or "system",
                notes=notes or f"Status updated from {current.value} to {target.value}",
            )
        )
        if target == OrderStatus.DELIVERED:
            self.actual_delivery_time = now
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=current.value,
                new_status=target.value,
                actor=actor or "system",
                changed_at=now,
            )
        )

    def cancel_by_customer(self, actor, reason=None):
        if self.status in (OrderStatus.DELIVERED.value, OrderStatus.CANCELLED.value):
            raise InvalidTransition("Order cannot be cancelled")
        if self.status == OrderStatus.OUT_FOR_DELIVERY.value:
            raise CancellationRequiresSupport()
        self.transition_to(OrderStatus.CANCELLED.value, actor=actor, notes=reason or "Cancelled by user")

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def attach_gateway_order(self, gateway_order_id):
        self.payment = PaymentDetails(gateway_order_id=gateway_order_id)
        self.raise_(GatewayOrderAttached(order_id=str(self.id), gateway_order_id=gateway_order_id))

    def complete_payment(self, gateway_payment_id, gateway_signature, actor=None, now=None):
        if self.payment_status == PaymentStatus.COMPLETED.value:
            raise AlreadyProcessed("Payment already completed")

        now = now or datetime.now(UTC)
        self.payment = PaymentDetails(
            gateway_order_id=self.payment.gateway_order_id if self.payment else None,
            gateway_payment_id=gateway_payment_id,
            gateway_signature=gateway_signature,
        )
        self.payment_status = PaymentStatus.COMPLETED.value
        self.raise_(
            PaymentCompleted(
                order_id=str(self.id),
                order_number=self.order_number,
                gateway_payment_id=gateway_payment_id,
                amount=self.pricing.total,
                completed_at=now,
            )
        )
        # Cancelled while the gateway was capturing: record the payment, keep the status
        if self.status == OrderStatus.CANCELLED.value:
            self.updated_at = now
            return
        self.transition_to(OrderStatus.CONFIRMED.value, actor=actor, notes="Payment verified", now=now)

    def confirm_cash_on_delivery(self, actor=None):
        if self.status != OrderStatus.PENDING.value:
            raise AlreadyProcessed("Order already processed")
        self.transition_to(OrderStatus.CONFIRMED.value, actor=actor, notes="Cash on delivery confirmed")

    def record_refund(self, gateway_refund_id, now=None):
        now = now or datetime.now(UTC)
        self.payment = PaymentDetails(
            gateway_order_id=self.payment.gateway_order_id,
            gateway_payment_id=self.payment.gateway_payment_id,
            gateway_signature=self.payment.gateway_signature,
            gateway_refund_id=gateway_refund_id,
        )
        self.payment_status = PaymentStatus.REFUNDED.value
        self.updated_at = now
        self.raise_(
            PaymentRefunded(
                order_id=str(self.id),
                order_number=self.order_number,
                gateway_refund_id=gateway_refund_id,
                amount=self.pricing.total,
                refunded_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Feedback
    # -------------------------------------------------------------------
    def rate(self, rating, review=None):
        if self.status != OrderStatus.DELIVERED.value:
            raise ValidationError({"rating": ["Only delivered orders can be rated"]})
        if self.rating is not None:
            raise AlreadyProcessed("Order already rated")
        self.rating = rating
        self.review = review
        self.updated_at = datetime.now(UTC)
        self.raise_(OrderRated(order_id=str(self.id), rating=rating, rated_at=self.updated_at))
