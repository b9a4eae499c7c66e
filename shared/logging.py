"""
Structured logging for the matrimony backend.

Provides:
- setup_logging(): configure stdlib logging + structlog once at startup
- get_logger(): module-level logger factory
- should_sample(): probabilistic sampling for high-frequency events
- hash_ip(): privacy-preserving IP representation for production logs

Production uses JSON output; development uses the colored console renderer.
Sensitive fields (passwords, OTPs, tokens, signatures) are always redacted.
"""

from __future__ import annotations

import hashlib
import logging
import os
import random
import sys
from datetime import datetime, timezone
from typing import Optional

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import EventDict, Processor

_state = {
    "production": os.getenv("ENV", "development") == "production",
}

# Sampling rates for high-frequency events
SAMPLING_RATES: dict[str, float] = {
    "presence_change": float(os.getenv("SAMPLE_RATE_PRESENCE", "0.10")),
    "scheduler_tick": float(os.getenv("SAMPLE_RATE_SCHEDULER", "0.05")),
}

# Sensitive fields to redact from logs
REDACTED_FIELDS = {
    "password",
    "password_hash",
    "otp",
    "code",
    "token",
    "reset_token",
    "signature",
    "razorpay_signature",
    "authorization",
    "secret",
    "key",
}

_SENSITIVE_FRAGMENTS = ("password", "token", "secret", "signature", "otp")
_PROTECTED_KEYS = {"level", "event", "timestamp", "logger"}


def add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add ISO format timestamp to event dict."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Redact sensitive fields from logs."""
    for key in list(event_dict.keys()):
        if key in _PROTECTED_KEYS:
            continue
        lowered = key.lower()
        if lowered in REDACTED_FIELDS or any(
            fragment in lowered for fragment in _SENSITIVE_FRAGMENTS
        ):
            event_dict[key] = "***REDACTED***"
    return event_dict


def configure_structlog(log_format: str = "console") -> None:
    """Configure structlog processors for JSON (production) or console output."""
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        redact_sensitive_fields,
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            pad_event=15,
            sort_keys=False,
        )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "console",
    production: bool = False,
    sampling_rates: Optional[dict[str, float]] = None,
) -> None:
    """Configure stdlib logging and structlog. Call once at app startup."""
    _state["production"] = production
    if sampling_rates:
        SAMPLING_RATES.update(sampling_rates)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )
    # uvicorn access logs duplicate our request logging
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)

    configure_structlog(log_format)


def get_logger(name: str) -> BoundLogger:
    """
    Get a configured logger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("interest_sent", source="KM1", target="KM2")
    """
    return structlog.get_logger(name)


def should_sample(event_type: str) -> bool:
    """Return True if an event of *event_type* should be logged.

    Unknown event types are always logged.
    """
    sample_rate = SAMPLING_RATES.get(event_type, 1.0)
    if sample_rate >= 1.0:
        return True
    if sample_rate <= 0.0:
        return False
    return random.random() < sample_rate


def hash_ip(ip_address: Optional[str]) -> Optional[str]:
    """SHA-256 prefix of *ip_address* in production, the raw IP otherwise."""
    if ip_address is None:
        return None
    if _state["production"] and ip_address:
        return hashlib.sha256(ip_address.encode()).hexdigest()[:16]
    return ip_address


def log_with_context(logger: BoundLogger, **context) -> BoundLogger:
    """Bind context (e.g. user_id, request_id) to *logger*."""
    return logger.bind(**context)
