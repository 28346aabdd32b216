"""Order status update template."""

from pizzeria.notifications.types import NotificationChannel, NotificationType

STATUS_MESSAGES = {
    "confirmed": "Your order has been confirmed and is being prepared!",
    "preparing": "Our chefs are working on your delicious pizza!",
    "ready": "Your order is ready and will be dispatched shortly!",
    "out-for-delivery": "Your pizza is on the way! Our delivery person will be there soon!",
    "delivered": "Your order has been delivered! Enjoy your meal!",
    "cancelled": "Your order has been cancelled.",
}


class OrderStatusUpdateTemplate:
    notification_type = NotificationType.ORDER_STATUS_UPDATE.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        status = context.get("status", "")
        message = STATUS_MESSAGES.get(status, "Your order status has been updated.")
        body = f"Hi {context.get('name', 'there')},\n\n{message}\n\nOrder: {order_number}\nStatus: {status}"
        if context.get("notes"):
            body += f"\nNotes: {context['notes']}"
        return {"subject": f"Order Update - {order_number}", "body": body}
