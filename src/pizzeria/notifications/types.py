"""Notification kinds and channels."""

from enum import Enum


class NotificationType(Enum):
    EMAIL_VERIFICATION = "email-verification"
    PASSWORD_RESET = "password-reset"
    ORDER_CONFIRMATION = "order-confirmation"
    ORDER_STATUS_UPDATE = "order-status-update"
    LOW_STOCK_ALERT = "low-stock-alert"


class NotificationChannel(Enum):
    EMAIL = "Email"
