"""Password reset template."""

from pizzeria.notifications.types import NotificationChannel, NotificationType


class PasswordResetTemplate:
    notification_type = NotificationType.PASSWORD_RESET.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        name = context.get("name", "there")
        link = context.get("reset_url", "")
        minutes = context.get("expires_in_minutes", 10)
        return {
            "subject": "Password Reset Request - Pizza Delivery",
            "body": (
                f"Hi {name},\n\n"
                "We received a request to reset your password. Use the link below:\n\n"
                f"{link}\n\n"
                f"The link expires in {minutes} minutes. If you did not ask for this, ignore this email."
            ),
        }
