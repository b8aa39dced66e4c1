"""Device fingerprinting from request metadata."""

import hashlib

from fastapi import Request

UNKNOWN = "unknown"


def get_client_ip(request: Request) -> str:
    """Client IP, honouring proxy headers.

    ``X-Forwarded-For`` may hold a chain of addresses; the first one is the client.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or UNKNOWN

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    return request.client.host if request.client else UNKNOWN


def generate_device_fingerprint(ip: str | None, user_agent: str | None) -> str:
    """SHA-256 of ``"<ip>|<user agent>"``. A weak signal: NAT and shared devices collide."""
    data = f"{ip or UNKNOWN}|{user_agent or UNKNOWN}"
    return hashlib.sha256(data.encode()).hexdigest()


def fingerprint_request(request: Request) -> str:
    return generate_device_fingerprint(get_client_ip(request), request.headers.get("user-agent"))


def short_device_id(fingerprint: str) -> str:
    """Readable prefix for log lines."""
    return fingerprint[:8]
