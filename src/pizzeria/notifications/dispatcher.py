"""Notification dispatcher: render a template and hand it to the channel adapters.

Dispatch is fire-and-forget for callers. ``send`` never raises; failures are
logged and reported through the boolean return value so a committed order or
stock change is never turned into an error by a mail server.
"""

import json

from pizzeria.config import get_settings
from pizzeria.notifications.channel import get_channel
from pizzeria.notifications.templates import get_template
from pizzeria.notifications.types import NotificationType
from pizzeria.utils.logging import get_logger

logger = get_logger(__name__)


def send(notification_type: str, recipient: str, data: dict) -> bool:
    if not recipient:
        logger.warning("notification_skipped", notification_type=notification_type, reason="no recipient")
        return False

    try:
        template = get_template(notification_type)
        content = template.render(data)
        delivered = True
        for channel_type in template.default_channels:
            result = get_channel(channel_type).send(
                to=recipient,
                subject=content["subject"],
                body=content["body"],
                html_body=content.get("html_body"),
            )
            if result.get("status") != "sent":
                delivered = False
                logger.warning(
                    "notification_not_delivered",
                    notification_type=notification_type,
                    channel=channel_type,
                    recipient=recipient,
                    error=result.get("error"),
                )
        if delivered:
            logger.info("notification_sent", notification_type=notification_type, recipient=recipient)
        return delivered
    except Exception:
        logger.exception("notification_failed", notification_type=notification_type, recipient=recipient)
        return False


# ---------------------------------------------------------------------------
# Context builders
# ---------------------------------------------------------------------------
def _order_context(order, user) -> dict:
    items = []
    for item in order.items:
        items.append(
            {
                "name": item.name,
                "size": item.size,
                "quantity": item.quantity,
                "total_item_price": item.total_item_price,
                "customizations": json.loads(item.customizations) if item.customizations else {},
            }
        )
    return {
        "name": user.name if user else "there",
        "order_number": order.order_number,
        "status": order.status,
        "items": items,
        "subtotal": order.pricing.subtotal,
        "delivery_fee": order.pricing.delivery_fee,
        "tax": order.pricing.tax,
        "total": order.pricing.total,
        "payment_method": order.payment_method,
        "estimated_delivery_time": (
            order.estimated_delivery_time.strftime("%d %b %Y, %H:%M") if order.estimated_delivery_time else None
        ),
    }


def notify_order_confirmed(order, user) -> bool:
    return send(NotificationType.ORDER_CONFIRMATION.value, user.email if user else None, _order_context(order, user))


def notify_status_update(order, user, notes=None) -> bool:
    context = _order_context(order, user)
    context["notes"] = notes
    return send(NotificationType.ORDER_STATUS_UPDATE.value, user.email if user else None, context)


def notify_email_verification(user, token) -> bool:
    url = f"{get_settings().frontend_url}/verify-email/{token}"
    return send(NotificationType.EMAIL_VERIFICATION.value, user.email, {"name": user.name, "verification_url": url})


def notify_password_reset(user, token, expires_in_minutes) -> bool:
    url = f"{get_settings().frontend_url}/reset-password/{token}"
    return send(
        NotificationType.PASSWORD_RESET.value,
        user.email,
        {"name": user.name, "reset_url": url, "expires_in_minutes": expires_in_minutes},
    )


def notify_low_stock(items) -> bool:
    """One alert email to the admin address listing every item passed in."""
    if not items:
        return False
    payload = [
        {
            "name": item.name,
            "current_stock": item.current_stock,
            "min_stock_level": item.min_stock_level,
            "unit": item.unit,
            "status": item.stock_status,
        }
        for item in items
    ]
    return send(NotificationType.LOW_STOCK_ALERT.value, get_settings().admin_email, {"items": payload})
