"""Template registry: notification type -> template class."""

from pizzeria.notifications.templates.email_verification import EmailVerificationTemplate
from pizzeria.notifications.templates.low_stock_alert import LowStockAlertTemplate
from pizzeria.notifications.templates.order_confirmation import OrderConfirmationTemplate
from pizzeria.notifications.templates.order_status_update import OrderStatusUpdateTemplate
from pizzeria.notifications.templates.password_reset import PasswordResetTemplate
from pizzeria.notifications.types import NotificationType

TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationType.EMAIL_VERIFICATION.value: EmailVerificationTemplate,
    NotificationType.PASSWORD_RESET.value: PasswordResetTemplate,
    NotificationType.ORDER_CONFIRMATION.value: OrderConfirmationTemplate,
    NotificationType.ORDER_STATUS_UPDATE.value: OrderStatusUpdateTemplate,
    NotificationType.LOW_STOCK_ALERT.value: LowStockAlertTemplate,
}


def get_template(notification_type: str):
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls
