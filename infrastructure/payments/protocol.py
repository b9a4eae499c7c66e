"""PaymentGateway protocol — services depend on this, not the concrete implementation."""

from typing import Any, Protocol


class PaymentGateway(Protocol):
    async def create_order(
        self, amount_minor: int, currency: str, receipt: str
    ) -> dict[str, Any]:
        """Open an order for *amount_minor* (paise) and return the gateway's order object.

        The returned dict always contains the gateway order ``id``.
        Raises PaymentGatewayError when the order cannot be created.
        """
        ...

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool: ...
