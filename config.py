"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

The reset-token secret falls back to the session JWT secret when
RESET_JWT_SECRET is not set (handled in JWTSettings.reset_secret).
"""

from __future__ import annotations

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "matrimony"


class RedisSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Without Redis the rate limiter keeps its counters in memory
    redis_uri: Optional[str] = None


class JWTSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    jwt_issuer: str = "kannadamatch"
    jwt_audience: str = "kannadamatch.api"
    jwt_secret: str = ""
    access_token_ttl_seconds: int = 604800  # 7 days
    admin_token_ttl_seconds: int = 3600

    reset_jwt_secret: str = ""
    reset_token_ttl_seconds: int = 900

    @property
    def reset_secret(self) -> str:
        return self.reset_jwt_secret or self.jwt_secret


class RazorpaySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    razorpay_key_id: str = ""
    razorpay_secret: str = ""
    razorpay_currency: str = "INR"
    razorpay_api_url: str = "https://api.razorpay.com/v1"


class EmailSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    zepto_api_token: str = ""
    zepto_from_email: str = "noreply@kannadamatch.com"
    zepto_from_name: str = "KannadaMatch"


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production

    # Sampling rates (0.0–1.0)
    sample_rate_presence: float = 0.10
    sample_rate_scheduler: float = 0.05


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class SchedulerSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    scheduler_enabled: bool = True
    scheduler_interval_seconds: float = 60.0


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_name: str = "KannadaMatch"
    base_url: str = "http://localhost:5000"

    cors_origins: list[str] = ["*"]

    # Per-IP limit on POST /api/auth/forgot-password
    forgot_password_rate_limit: str = "6 per 15 minutes"

    # Moderator notifications for profile reports (Discord webhook)
    report_webhook: str = ""

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    redis: Optional[RedisSettings] = None
    jwt: Optional[JWTSettings] = None
    razorpay: Optional[RazorpaySettings] = None
    email: Optional[EmailSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None
    scheduler: Optional[SchedulerSettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        # Populate sub-configs from the same env/dotenv source
        if self.db is None:
            self.db = DatabaseSettings()
        if self.redis is None:
            self.redis = RedisSettings()
        if self.jwt is None:
            self.jwt = JWTSettings()
        if self.razorpay is None:
            self.razorpay = RazorpaySettings()
        if self.email is None:
            self.email = EmailSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()
        if self.scheduler is None:
            self.scheduler = SchedulerSettings()

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"
