from __future__ import annotations

from flask import Request


def get_client_ip(request: Request, trust_proxy_headers: bool = True) -> str | None:
    """Best-effort address of the peer, used for connection logs only."""
    if trust_proxy_headers:
        for header in ("CF-Connecting-IP", "X-Real-IP"):
            value = request.headers.get(header)
            if value:
                return value.strip()

        xff = request.headers.get("X-Forwarded-For")
        if xff:
            first = xff.split(",")[0].strip()
            if first:
                return first

    return request.remote_addr or None
