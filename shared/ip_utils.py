"""
Client IP resolution for HTTP requests and WebSocket handshakes.

Used as the rate-limit key for unauthenticated endpoints such as
forgot-password, where no user identity is available yet.
"""

from __future__ import annotations

from starlette.requests import HTTPConnection

_PROXY_HEADERS: tuple[str, ...] = (
    "CF-Connecting-IP",
    "True-Client-IP",
    "X-Forwarded-For",
    "X-Real-IP",
)


def get_client_ip(connection: HTTPConnection) -> str:
    """Return the originating client IP.

    Proxy headers are checked in order (first address of a comma-separated
    list wins) before falling back to the socket peer. Returns ``""`` when
    nothing is known.
    """
    for header in _PROXY_HEADERS:
        value: str | None = connection.headers.get(header)
        if value:
            client_ip = value.split(",")[0].strip()
            if client_ip:
                return client_ip

    return connection.client.host if connection.client else ""
