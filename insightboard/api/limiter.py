"""
Shared rate limiter, keyed by client IP.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from insightboard.core.config import get_settings

limiter = Limiter(key_func=get_remote_address)


def upload_rate_limit() -> str:
    """Evaluated per request so reloaded settings take effect."""
    return f"{get_settings().rate_limit_per_minute}/minute"
