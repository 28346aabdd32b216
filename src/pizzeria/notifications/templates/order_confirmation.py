"""Order confirmation template: sent once payment is verified or COD is confirmed."""

from pizzeria.notifications.types import NotificationChannel, NotificationType


class OrderConfirmationTemplate:
    notification_type = NotificationType.ORDER_CONFIRMATION.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number", "N/A")
        lines = [
            f"  {item['quantity']} x {item['name']} ({item['size']}) - Rs. {item['total_item_price']}"
            for item in context.get("items", [])
        ]
        eta = context.get("estimated_delivery_time", "soon")
        return {
            "subject": f"Order Confirmation - {order_number}",
            "body": (
                f"Hi {context.get('name', 'there')},\n\n"
                f"Thank you for your order {order_number}!\n\n"
                + "\n".join(lines)
                + "\n\n"
                f"Subtotal: Rs. {context.get('subtotal', 0)}\n"
                f"Delivery fee: Rs. {context.get('delivery_fee', 0)}\n"
                f"Tax: Rs. {context.get('tax', 0)}\n"
                f"Total: Rs. {context.get('total', 0)}\n\n"
                f"Payment: {context.get('payment_method', '')}\n"
                f"Estimated delivery: {eta}"
            ),
        }
