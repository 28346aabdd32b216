"""Channel adapter registry.

The fake adapter is used unless EMAIL_BACKEND=smtp.
"""

from pizzeria.config import get_settings
from pizzeria.notifications.types import NotificationChannel

_channel_instances: dict[str, object] = {}


def get_channel(channel_type: str = NotificationChannel.EMAIL.value):
    """Return the adapter for ``channel_type`` (one instance per process)."""
    if channel_type not in _channel_instances:
        if channel_type != NotificationChannel.EMAIL.value:
            raise ValueError(f"Unknown channel type: {channel_type}")

        settings = get_settings()
        if settings.email_backend == "smtp":
            from pizzeria.notifications.channel.smtp_email import SmtpEmailAdapter

            _channel_instances[channel_type] = SmtpEmailAdapter(
                host=settings.smtp_host,
                port=settings.smtp_port,
                sender=settings.email_from,
                username=settings.smtp_user,
                password=settings.smtp_password,
            )
        else:
            from pizzeria.notifications.channel.fake_email import FakeEmailAdapter

            _channel_instances[channel_type] = FakeEmailAdapter()

    return _channel_instances[channel_type]


def set_channel(channel_type: str, adapter) -> None:
    _channel_instances[channel_type] = adapter


def reset_channels():
    _channel_instances.clear()
