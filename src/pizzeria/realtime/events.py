"""Order events pushed to clients.

Wire names and payload keys are what the web client listens for:
``orderStatusUpdate`` in the owner's room, ``newOrder`` and
``orderStatusChanged`` in the admin room. Broadcasting is best-effort;
errors are logged and swallowed.
"""

from pizzeria.realtime import get_broadcaster
from pizzeria.realtime.port import ADMIN_ROOM, user_room
from pizzeria.utils.logging import get_logger

logger = get_logger(__name__)


def _emit(room: str, event: str, payload: dict) -> bool:
    try:
        get_broadcaster().emit(room, event, payload)
        return True
    except Exception:
        logger.exception("broadcast_failed", room=room, event_name=event)
        return False


def order_status_update(order, message: str) -> bool:
    return _emit(
        user_room(order.user_id),
        "orderStatusUpdate",
        {"orderId": order.order_number, "status": order.status, "message": message},
    )


def new_order(order, customer_name: str | None = None) -> bool:
    return _emit(
        ADMIN_ROOM,
        "newOrder",
        {
            "orderId": order.order_number,
            "customerName": customer_name,
            "total": order.pricing.total,
            "itemCount": sum(item.quantity for item in order.items),
            "paymentMethod": order.payment_method,
        },
    )


def order_status_changed(order, updated_by: str) -> bool:
    return _emit(
        ADMIN_ROOM,
        "orderStatusChanged",
        {"orderId": order.order_number, "status": order.status, "updatedBy": updated_by},
    )
