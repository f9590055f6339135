"""Rate limiting for the TutorStream API."""

from typing import Callable, Iterable

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from tutorstream.config import Settings

RATE_LIMIT_LOGIN = "3/hour"          # Login: strict, brute-force guard
RATE_LIMIT_SIGNED_URL = "60/minute"  # Minting signed URLs
RATE_LIMIT_STREAM = "500/minute"     # Redeeming signed URLs (range requests)


def client_key(trusted_proxies: Iterable[str] = ()) -> Callable[[Request], str]:
    """
    Build the rate limit key function.

    The key is the connecting peer's address. X-Forwarded-For is only
    consulted when that peer is a trusted proxy, and then the nearest
    hop not belonging to a trusted proxy is used.
    """
    trusted = frozenset(trusted_proxies)

    def _get_limiter_key(request: Request) -> str:
        peer = get_remote_address(request)
        if peer not in trusted:
            return peer

        forwarded = request.headers.get("X-Forwarded-For", "")
        hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
        for hop in reversed(hops):
            if hop not in trusted:
                return hop
        return peer

    return _get_limiter_key


def create_limiter(settings: Settings) -> Limiter:
    """Create the application's limiter; Redis-backed when configured."""
    return Limiter(
        key_func=client_key(settings.trusted_proxies),
        storage_uri=settings.redis_url or "memory://",
    )
