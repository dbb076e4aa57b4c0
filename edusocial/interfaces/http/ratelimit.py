"""Rate limiting for the auth endpoints.

The limiter and its storage backend are process-wide and built from the
environment settings at import. The limit strings and the on/off switch
are applied per app by ``configure_limiter`` and read on every request.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from ...config import Settings, settings

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
)

_limits = {
    "login": settings.LOGIN_RATE_LIMIT,
    "register": settings.REGISTER_RATE_LIMIT,
}


def login_limit() -> str:
    return _limits["login"]


def register_limit() -> str:
    return _limits["register"]


def configure_limiter(config: Settings) -> Limiter:
    _limits["login"] = config.LOGIN_RATE_LIMIT
    _limits["register"] = config.REGISTER_RATE_LIMIT
    limiter.enabled = config.RATE_LIMIT_ENABLED
    return limiter
