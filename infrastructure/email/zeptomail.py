"""ZeptoMail implementation of EmailProvider.

Sends the registration OTP and the password-reset OTP. HTML bodies are
rendered from Jinja2 templates under templates/emails; a plain-text
alternative is always attached.
"""

import os
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import EmailSettings
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

_ZEPTO_API_URL = "https://api.zeptomail.in/v1.1/email"
_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "templates",
    "emails",
)
OTP_VALIDITY_MINUTES = 10


class ZeptoMailProvider:
    def __init__(
        self,
        settings: EmailSettings,
        http_client: HttpClient,
        app_name: str = "KannadaMatch",
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._app_name = app_name
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    async def _send(
        self,
        to_email: str,
        to_name: Optional[str],
        subject: str,
        html_body: str,
        text_body: Optional[str] = None,
    ) -> bool:
        if not self._settings.zepto_api_token:
            log.error("zepto_mail_send_failed", reason="token_not_configured")
            return False

        payload: dict = {
            "from": {
                "address": self._settings.zepto_from_email,
                "name": self._settings.zepto_from_name,
            },
            "to": [
                {
                    "email_address": {
                        "address": to_email,
                        "name": to_name or to_email,
                    }
                }
            ],
            "subject": subject,
            "htmlbody": html_body,
        }
        if text_body:
            payload["textbody"] = text_body

        token = self._settings.zepto_api_token
        if not token.startswith("Zoho-enczapikey "):
            token = f"Zoho-enczapikey {token}"

        headers = {"Authorization": token, "Content-Type": "application/json"}

        try:
            response = await self._http.post(
                _ZEPTO_API_URL, json=payload, headers=headers
            )
            if response.status_code in (200, 201, 202):
                log.info("email_sent_success", to_email=to_email, subject=subject)
                return True
            log.error(
                "email_sent_failed",
                to_email=to_email,
                subject=subject,
                status_code=response.status_code,
                response=response.text[:200],
            )
            return False
        except Exception as e:
            log.error(
                "email_send_error",
                to_email=to_email,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

    async def send_registration_otp_email(self, email: str, otp_code: str) -> bool:
        subject = f"{self._app_name} OTP Verification"
        template = self._jinja.get_template("registration_otp.html")
        html_body = template.render(
            otp_code=otp_code,
            app_name=self._app_name,
            validity_minutes=OTP_VALIDITY_MINUTES,
        )
        text_body = (
            f"Your OTP for {self._app_name} verification is {otp_code}. "
            f"It is valid for {OTP_VALIDITY_MINUTES} minutes."
        )
        return await self._send(email, None, subject, html_body, text_body)

    async def send_password_reset_email(
        self, email: str, user_name: Optional[str], otp_code: str
    ) -> bool:
        subject = "Your password reset code"
        template = self._jinja.get_template("password_reset.html")
        html_body = template.render(
            otp_code=otp_code,
            user_name=user_name,
            app_name=self._app_name,
            validity_minutes=OTP_VALIDITY_MINUTES,
        )
        text_body = (
            f"Hello{f' {user_name}' if user_name else ''},\n\n"
            f"Your password reset code is {otp_code}. "
            f"It expires in {OTP_VALIDITY_MINUTES} minutes.\n\n"
            f"If you did not request this, you can ignore this email."
        )
        return await self._send(email, user_name, subject, html_body, text_body)
