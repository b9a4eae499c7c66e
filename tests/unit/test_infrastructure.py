"""Unit tests for the infrastructure layer: HTTP, gateway, email, webhook and rate limits."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from config import EmailSettings, RazorpaySettings
from errors import PaymentGatewayError, RateLimitError
from infrastructure.email.zeptomail import ZeptoMailProvider
from infrastructure.http_client import HttpClient
from infrastructure.payments.razorpay import RazorpayGateway
from infrastructure.rate_limit import RateLimiter
from infrastructure.webhook.discord import DiscordWebhookProvider, build_report_embed
from shared.crypto import compute_payment_signature


# ── HttpClient ────────────────────────────────────────────────────────────────


class TestHttpClient:
    async def test_post_delegates_to_httpx(self, mocker):
        client = HttpClient()
        fake_resp = MagicMock(status_code=200)
        mocker.patch.object(client._client, "post", return_value=fake_resp)
        resp = await client.post("http://example.com")
        assert resp.status_code == 200
        await client.aclose()

    async def test_post_propagates_exception(self, mocker):
        client = HttpClient()
        mocker.patch.object(client._client, "post", side_effect=httpx.ConnectError("down"))
        with pytest.raises(httpx.ConnectError):
            await client.post("http://example.com")
        await client.aclose()

    async def test_basic_auth_configured(self):
        async with HttpClient(auth=("key", "secret")) as client:
            assert client._client.auth is not None


# ── RazorpayGateway ───────────────────────────────────────────────────────────


class TestRazorpayGateway:
    def _make(self, key_id="rzp_test", secret="shh"):
        settings = RazorpaySettings(razorpay_key_id=key_id, razorpay_secret=secret)
        http = MagicMock()
        return RazorpayGateway(settings, http), http

    async def test_create_order(self):
        gateway, http = self._make()
        http.post = AsyncMock(
            return_value=MagicMock(status_code=200, json=lambda: {"id": "order_1", "amount": 299900})
        )

        order = await gateway.create_order(299900, "INR", "receipt_1")

        assert order["id"] == "order_1"
        url, kwargs = http.post.call_args[0][0], http.post.call_args[1]
        assert url == "https://api.razorpay.com/v1/orders"
        assert kwargs["json"] == {"amount": 299900, "currency": "INR", "receipt": "receipt_1"}

    async def test_rejected_order(self):
        gateway, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=401, text="Unauthorized"))
        with pytest.raises(PaymentGatewayError):
            await gateway.create_order(100, "INR", "r")

    async def test_network_failure(self):
        gateway, http = self._make()
        http.post = AsyncMock(side_effect=httpx.ReadTimeout("slow"))
        with pytest.raises(PaymentGatewayError):
            await gateway.create_order(100, "INR", "r")

    async def test_missing_credentials(self):
        gateway, http = self._make(key_id="", secret="")
        http.post = AsyncMock()
        with pytest.raises(PaymentGatewayError):
            await gateway.create_order(100, "INR", "r")
        http.post.assert_not_awaited()

    def test_signature_verification(self):
        gateway, _ = self._make(secret="shh")
        good = compute_payment_signature("order_1", "pay_1", "shh")
        assert gateway.verify_signature("order_1", "pay_1", good)
        assert not gateway.verify_signature("order_1", "pay_2", good)
        assert not gateway.verify_signature("order_1", "pay_1", "0" * 64)


# ── DiscordWebhookProvider ────────────────────────────────────────────────────


class TestDiscordWebhookProvider:
    def _make(self, url="https://discord.com/api/webhooks/123/abc"):
        http = MagicMock()
        return DiscordWebhookProvider(webhook_url=url, http_client=http), http

    async def test_returns_true_on_204(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=204))
        assert await provider.send({"embeds": []}) is True

    async def test_returns_false_on_error_status(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=400, text="Bad Request"))
        assert await provider.send({}) is False

    async def test_returns_false_when_url_empty(self):
        provider, _ = self._make(url="")
        assert await provider.send({}) is False

    async def test_returns_false_on_exception(self):
        provider, http = self._make()
        http.post = AsyncMock(side_effect=Exception("network error"))
        assert await provider.send({}) is False

    def test_report_embed_skips_empty_fields(self):
        payload = build_report_embed(
            {"reported_profile_id": "KM2", "reporting_user_id": "KM1", "reason": "Spam", "name": ""}
        )
        names = [f["name"] for f in payload["embeds"][0]["fields"]]
        assert names == ["Reported profile", "Reported by", "Reason"]


# ── ZeptoMailProvider ─────────────────────────────────────────────────────────


class TestZeptoMailProvider:
    def _make(self, token="test-token"):
        settings = EmailSettings(
            zepto_api_token=token,
            zepto_from_email="noreply@kannadamatch.com",
            zepto_from_name="KannadaMatch",
        )
        http = MagicMock()
        return ZeptoMailProvider(settings=settings, http_client=http), http

    async def test_registration_otp_is_rendered(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=201))

        assert await provider.send_registration_otp_email("u@example.com", "482913") is True

        payload = http.post.call_args[1]["json"]
        assert "482913" in payload["htmlbody"]
        assert payload["to"][0]["email_address"]["address"] == "u@example.com"

    async def test_password_reset_greets_user(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=200))

        await provider.send_password_reset_email("u@example.com", "Asha", "654321")

        payload = http.post.call_args[1]["json"]
        assert "Asha" in payload["htmlbody"]
        assert "654321" in payload["htmlbody"]

    async def test_returns_false_when_token_empty(self):
        provider, http = self._make(token="")
        http.post = AsyncMock()
        assert await provider.send_registration_otp_email("u@e.com", "000000") is False
        http.post.assert_not_awaited()

    async def test_returns_false_on_non_2xx(self):
        provider, http = self._make()
        http.post = AsyncMock(return_value=MagicMock(status_code=422, text="Unprocessable"))
        assert await provider.send_registration_otp_email("u@e.com", "000000") is False

    async def test_returns_false_on_exception(self):
        provider, http = self._make()
        http.post = AsyncMock(side_effect=Exception("timeout"))
        assert await provider.send_registration_otp_email("u@e.com", "000000") is False

    async def test_auth_header_not_double_prefixed(self):
        provider, http = self._make(token="Zoho-enczapikey alreadyprefixed")
        http.post = AsyncMock(return_value=MagicMock(status_code=201))
        await provider.send_password_reset_email("u@e.com", "Asha", "654321")
        auth = http.post.call_args[1]["headers"]["Authorization"]
        assert auth == "Zoho-enczapikey alreadyprefixed"


# ── RateLimiter ───────────────────────────────────────────────────────────────


class TestRateLimiter:
    async def test_blocks_after_limit(self):
        limiter = RateLimiter("forgot_password", "3 per 15 minutes")
        for _ in range(3):
            await limiter.hit("10.0.0.1")
        with pytest.raises(RateLimitError):
            await limiter.hit("10.0.0.1")

    async def test_keys_are_independent(self):
        limiter = RateLimiter("forgot_password", "1 per minute")
        await limiter.hit("10.0.0.1")
        await limiter.hit("10.0.0.2")

    async def test_limiters_are_independent(self):
        first = RateLimiter("first", "1 per minute")
        second = RateLimiter("second", "1 per minute")
        await first.hit("10.0.0.1")
        await second.hit("10.0.0.1")
