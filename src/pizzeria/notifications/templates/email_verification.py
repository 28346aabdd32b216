"""Email verification template: sent right after registration."""

from pizzeria.notifications.types import NotificationChannel, NotificationType


class EmailVerificationTemplate:
    notification_type = NotificationType.EMAIL_VERIFICATION.value
    default_channels = [NotificationChannel.EMAIL.value]

    @staticmethod
    def render(context: dict) -> dict:
        name = context.get("name", "there")
        link = context.get("verification_url", "")
        return {
            "subject": "Verify Your Email - Pizza Delivery",
            "body": (
                f"Hi {name},\n\n"
                "Welcome to Pizza Delivery! Please confirm your email address:\n\n"
                f"{link}\n\n"
                "This link expires in 24 hours."
            ),
        }
