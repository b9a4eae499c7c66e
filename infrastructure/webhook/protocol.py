"""WebhookProvider protocol — report notifications go through this."""

from typing import Any, Protocol


class WebhookProvider(Protocol):
    async def send(self, payload: dict[str, Any]) -> bool: ...
