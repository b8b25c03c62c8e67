"""
Rate limiting for the login, refresh and password endpoints.

Counters are keyed by client address and stored in Redis when REDIS_URL
is set (shared across workers), in process memory otherwise.
"""

from fastapi import Request
from slowapi import Limiter

from workforce_auth.core.config import settings


def client_address(request: Request) -> str:
    """
    Address of the calling client.

    Behind a trusted reverse proxy (TRUST_FORWARDED_FOR=true) this is the
    left-most X-Forwarded-For hop; otherwise the socket peer.
    """
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("X-Forwarded-For", "")
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


limiter = Limiter(
    key_func=client_address,
    storage_uri=settings.redis_url_str or "memory://",
    default_limits=[settings.rate_limit_default],
    enabled=settings.rate_limit_enabled,
    headers_enabled=False,
)
