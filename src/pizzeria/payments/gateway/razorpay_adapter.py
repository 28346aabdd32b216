"""Razorpay gateway adapter over the public REST API.

Uses HTTP basic auth with the key id/secret pair. Network and HTTP errors are
logged and reported as unsuccessful results; provider error bodies are never
passed back to callers.
"""

import requests

from pizzeria.payments.gateway.port import (
    GatewayOrderResult,
    PaymentGateway,
    RefundResult,
    signature_matches,
)
from pizzeria.utils.logging import get_logger

logger = get_logger(__name__)

RAZORPAY_API = "https://api.razorpay.com/v1"


class RazorpayGateway(PaymentGateway):
    def __init__(
        self,
        key_id: str,
        key_secret: str,
        timeout: float = 10.0,
        session: requests.Session | None = None,
        base_url: str = RAZORPAY_API,
    ) -> None:
        self.key_id = key_id
        self.key_secret = key_secret
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.auth = (key_id, key_secret)

    def _post(self, path: str, payload: dict) -> dict:
        response = self.session.post(f"{self.base_url}{path}", json=payload, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def create_order(self, amount: int, currency: str, receipt: str) -> GatewayOrderResult:
        try:
            body = self._post("/orders", {"amount": amount, "currency": currency, "receipt": receipt})
        except requests.RequestException as exc:
            logger.error("razorpay_order_failed", receipt=receipt, amount=amount, error=str(exc))
            return GatewayOrderResult(success=False, failure_reason="Failed to create payment order")

        return GatewayOrderResult(
            success=True,
            gateway_order_id=body["id"],
            amount=body.get("amount", amount),
            currency=body.get("currency", currency),
            status=body.get("status"),
        )

    def verify_signature(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        return signature_matches(self.key_secret, gateway_order_id, gateway_payment_id, signature)

    def refund(self, gateway_payment_id: str, amount: int | None = None, reason: str = "") -> RefundResult:
        payload: dict = {"notes": {"reason": reason or "Order cancelled"}}
        if amount is not None:
            payload["amount"] = amount

        try:
            body = self._post(f"/payments/{gateway_payment_id}/refund", payload)
        except requests.RequestException as exc:
            logger.error("razorpay_refund_failed", payment_id=gateway_payment_id, error=str(exc))
            return RefundResult(success=False, failure_reason="Failed to process refund")

        return RefundResult(success=True, gateway_refund_id=body.get("id"), status=body.get("status"))
