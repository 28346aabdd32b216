"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from pizzeria.domain import pizzeria


@pizzeria.event(part_of="Order")
class OrderPlaced:
    """A customer checked out. The order waits for payment or COD confirmation."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    payment_method = String(required=True)
    item_count = Integer(required=True)
    total = Float(required=True)
    placed_at = DateTime(required=True)


@pizzeria.event(part_of="Order")
class GatewayOrderAttached:
    __version__ = 1

    order_id = Identifier(required=True)
    gateway_order_id = String(required=True)


@pizzeria.event(part_of="Order")
class PaymentCompleted:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    gateway_payment_id = String(required=True)
    amount = Float(required=True)
    completed_at = DateTime(required=True)


@pizzeria.event(part_of="Order")
class OrderStatusChanged:
    """Every move through the status machine, including the first confirmation."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    actor = String()
    changed_at = DateTime(required=True)


@pizzeria.event(part_of="Order")
class PaymentRefunded:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    gateway_refund_id = String()
    amount = Float(required=True)
    refunded_at = DateTime(required=True)


@pizzeria.event(part_of="Order")
class OrderRated:
    __version__ = 1

    order_id = Identifier(required=True)
    rating = Integer(required=True)
    rated_at = DateTime(required=True)
