"""Razorpay implementation of PaymentGateway.

Orders are created through the REST Orders API with HTTP basic auth
(key id / key secret). Checkout signatures are HMAC-SHA256 over
"<order_id>|<payment_id>" keyed with the same secret.
"""

from typing import Any

import httpx

from config import RazorpaySettings
from errors import PaymentGatewayError
from infrastructure.http_client import HttpClient
from shared.crypto import verify_payment_signature
from shared.logging import get_logger

log = get_logger(__name__)


class RazorpayGateway:
    def __init__(self, settings: RazorpaySettings, http_client: HttpClient) -> None:
        self._settings = settings
        self._http = http_client

    async def create_order(
        self, amount_minor: int, currency: str, receipt: str
    ) -> dict[str, Any]:
        if not (self._settings.razorpay_key_id and self._settings.razorpay_secret):
            log.error("razorpay_order_failed", reason="credentials_not_configured")
            raise PaymentGatewayError("Payment initiation failed")

        payload = {"amount": amount_minor, "currency": currency, "receipt": receipt}
        try:
            response = await self._http.post(
                f"{self._settings.razorpay_api_url}/orders", json=payload
            )
        except httpx.HTTPError as e:
            log.error(
                "razorpay_order_error",
                receipt=receipt,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PaymentGatewayError("Payment initiation failed") from e

        if response.status_code not in (200, 201):
            log.error(
                "razorpay_order_rejected",
                receipt=receipt,
                status_code=response.status_code,
                response=response.text[:200],
            )
            raise PaymentGatewayError("Payment initiation failed")

        order = response.json()
        log.info(
            "razorpay_order_created",
            order_id=order.get("id"),
            amount=amount_minor,
            receipt=receipt,
        )
        return order

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        return verify_payment_signature(
            order_id, payment_id, signature, self._settings.razorpay_secret
        )
