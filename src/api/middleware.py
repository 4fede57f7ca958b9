"""
Cross-cutting HTTP concerns: rate limiting and request logging.
"""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from src.config import Settings, settings

logger = logging.getLogger("src.api.access")

# Per-client-IP limits; routes opt in with ``@limiter.limit(current_rate_limit)``.
# The limiter is process-wide; ``configure_limiter`` points it at the
# settings of the app being built.
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)

_rate_limit = settings.rate_limit


def current_rate_limit() -> str:
    """Limit string for decorated routes, read on every request."""
    return _rate_limit


def configure_limiter(app_settings: Settings) -> Limiter:
    global _rate_limit
    _rate_limit = app_settings.rate_limit
    limiter.enabled = app_settings.rate_limit_enabled
    return limiter


async def log_requests(request: Request, call_next):
    """Log every inbound request.  Bodies are never logged (passwords)."""
    logger.info(
        "%s %s ip=%s user_agent=%r query=%s",
        request.method,
        request.url.path,
        request.client.host if request.client else None,
        request.headers.get("user-agent"),
        dict(request.query_params),
    )
    return await call_next(request)
