"""Low stock alert template: internal notification to the kitchen admin."""

from pizzeria.notifications.types import NotificationChannel, NotificationType


class LowStockAlertTemplate:
    notification_type = NotificationType.LOW_STOCK_ALERT.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        items = context.get("items", [])
        lines = [
            f"  {item['name']}: {item['current_stock']} {item.get('unit', '')} "
            f"(minimum {item['min_stock_level']}, {item.get('status', 'low')})"
            for item in items
        ]
        return {
            "subject": f"[Low Stock] {len(items)} item(s) need restocking",
            "body": "The following ingredients are running low:\n\n" + "\n".join(lines) + "\n\nPlease restock soon.",
        }
