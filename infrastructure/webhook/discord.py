"""Discord webhook implementation of WebhookProvider.

Used to notify moderators when a profile is reported. Delivery is best
effort: failures are logged and reported as False, never raised.
"""

from typing import Any

from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

_EMBED_COLOR_REPORT = 0xE74C3C


def build_report_embed(report: dict[str, Any]) -> dict[str, Any]:
    """Build the Discord message payload for a profile report."""
    fields = [
        {"name": "Reported profile", "value": report.get("reported_profile_id") or "-", "inline": True},
        {"name": "Reported by", "value": report.get("reporting_user_id") or "-", "inline": True},
        {"name": "Reason", "value": report.get("reason") or "-", "inline": False},
    ]
    for key, label in (
        ("category", "Category"),
        ("name", "Name"),
        ("location", "Location"),
        ("profession", "Profession"),
        ("education", "Education"),
    ):
        if report.get(key):
            fields.append({"name": label, "value": str(report[key]), "inline": True})
    if report.get("message"):
        fields.append({"name": "Message", "value": str(report["message"])[:1000], "inline": False})

    return {
        "embeds": [
            {
                "title": "Profile reported",
                "color": _EMBED_COLOR_REPORT,
                "fields": fields,
            }
        ]
    }


class DiscordWebhookProvider:
    def __init__(self, webhook_url: str, http_client: HttpClient) -> None:
        self._webhook_url = webhook_url
        self._http = http_client

    async def send(self, payload: dict[str, Any]) -> bool:
        if not self._webhook_url:
            log.warning("discord_webhook_not_configured")
            return False
        try:
            response = await self._http.post(self._webhook_url, json=payload)
            if response.status_code in (200, 204):
                return True
            log.warning(
                "discord_webhook_failed",
                status_code=response.status_code,
                response_text=response.text[:200],
            )
            return False
        except Exception as e:
            log.error(
                "discord_webhook_request_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return False
