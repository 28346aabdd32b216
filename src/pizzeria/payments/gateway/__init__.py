"""Payment gateway registry.

get_gateway() returns the configured adapter:
- FakeGateway unless PAYMENT_GATEWAY=razorpay and both Razorpay keys are set
- RazorpayGateway otherwise
"""

from pizzeria.config import get_settings
from pizzeria.payments.gateway.fake_adapter import FakeGateway
from pizzeria.payments.gateway.port import PaymentGateway
from pizzeria.payments.gateway.razorpay_adapter import RazorpayGateway

_current_gateway: PaymentGateway | None = None


def _build_default() -> PaymentGateway:
    settings = get_settings()
    if settings.payment_gateway == "razorpay" and settings.razorpay_key_id and settings.razorpay_key_secret:
        return RazorpayGateway(settings.razorpay_key_id, settings.razorpay_key_secret)
    return FakeGateway()


def get_gateway() -> PaymentGateway:
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_default()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active gateway (tests, manual QA)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    global _current_gateway
    _current_gateway = None
