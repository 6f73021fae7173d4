from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from ...config import Settings

# stricter than registration, login is the brute-force target
LOGIN_LIMIT = "10/minute"


def build_limiter(settings: Settings) -> Limiter:
    """One limiter per app, with its own in-memory counters."""
    return Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)


def register_limit(settings: Settings) -> str:
    return f"{settings.RATE_LIMIT_PER_MINUTE}/minute"


def get_rate_limited(request: Request) -> dict:
    return request.app.state.rate_limited
