"""Configurable fake payment gateway for development and testing.

No network calls. Signatures are real HMAC-SHA256 digests over a local
secret, so ``sign()`` produces exactly what a client would receive from the
processor's checkout widget.
"""

from uuid import uuid4

from pizzeria.payments.gateway.port import (
    GatewayOrderResult,
    PaymentGateway,
    RefundResult,
    payment_signature,
    signature_matches,
)


class FakeGateway(PaymentGateway):
    def __init__(self, key_secret: str = "fake_secret") -> None:
        self.key_secret = key_secret
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Gateway unavailable") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def sign(self, gateway_order_id: str, gateway_payment_id: str) -> str:
        return payment_signature(self.key_secret, gateway_order_id, gateway_payment_id)

    def create_order(self, amount: int, currency: str, receipt: str) -> GatewayOrderResult:
        self.calls.append({"method": "create_order", "amount": amount, "currency": currency, "receipt": receipt})

        if not self.should_succeed:
            return GatewayOrderResult(success=False, failure_reason=self.failure_reason)
        return GatewayOrderResult(
            success=True,
            gateway_order_id=f"order_fake{uuid4().hex[:10]}",
            amount=amount,
            currency=currency,
            status="created",
        )

    def verify_signature(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        self.calls.append(
            {
                "method": "verify_signature",
                "gateway_order_id": gateway_order_id,
                "gateway_payment_id": gateway_payment_id,
            }
        )
        return signature_matches(self.key_secret, gateway_order_id, gateway_payment_id, signature)

    def refund(self, gateway_payment_id: str, amount: int | None = None, reason: str = "") -> RefundResult:
        self.calls.append(
            {"method": "refund", "gateway_payment_id": gateway_payment_id, "amount": amount, "reason": reason}
        )

        if not self.should_succeed:
            return RefundResult(success=False, failure_reason=self.failure_reason)
        return RefundResult(success=True, gateway_refund_id=f"rfnd_fake{uuid4().hex[:10]}", status="processed")

    def reset(self) -> None:
        self.calls.clear()
        self.should_succeed = True
        self.failure_reason = "Gateway unavailable"
