"""Payment gateway port.

The contract mirrors what a Razorpay-style processor offers: create a gateway
order the client pays against, verify the signature the client hands back,
and refund a captured payment. Amounts crossing this boundary are in minor
units (paise).
"""

import hashlib
import hmac
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class GatewayOrderResult:
    """Result of creating a gateway order."""

    success: bool
    gateway_order_id: str | None = None
    amount: int | None = None
    currency: str | None = None
    status: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True)
class RefundResult:
    success: bool
    gateway_refund_id: str | None = None
    status: str | None = None
    failure_reason: str | None = None


def payment_signature(secret: str, gateway_order_id: str, gateway_payment_id: str) -> str:
    """HMAC-SHA256 hex digest of ``"<order id>|<payment id>"`` keyed by ``secret``."""
    message = f"{gateway_order_id}|{gateway_payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def signature_matches(secret: str, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
    if not signature:
        return False
    expected = payment_signature(secret, gateway_order_id, gateway_payment_id)
    return hmac.compare_digest(expected, signature)


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_order(self, amount: int, currency: str, receipt: str) -> GatewayOrderResult:
        """Create a gateway order for ``amount`` minor units."""
        ...

    @abstractmethod
    def verify_signature(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        ...

    @abstractmethod
    def refund(self, gateway_payment_id: str, amount: int | None = None, reason: str = "") -> RefundResult:
        """Refund a captured payment; ``amount=None`` refunds it in full."""
        ...
