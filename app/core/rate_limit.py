# Boundary rate limiting with slowapi.
# Global limit per client IP for every route, a stricter per-IP limit on login
# and a per-identity limit on write endpoints. Limit strings come from Settings
# and are installed once by configure_rate_limits() when the app is created.

import logging
from typing import Dict

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import Settings
from app.core.security import decode_access_token

logger = logging.getLogger("app")

_limits: Dict[str, str] = {
    "global": "100/15minutes",
    "login": "10/minute",
    "write": "30/minute",
}


def global_limit() -> str:
    return _limits["global"]


def login_limit() -> str:
    return _limits["login"]


def write_limit() -> str:
    return _limits["write"]


def extract_token(request: Request, cookie_name: str = "accessToken"):
    """Bearer token from the Authorization or auth-token header, falling back to the cookie"""
    header = request.headers.get("authorization") or request.headers.get("auth-token")
    if header:
        if header.lower().startswith("bearer "):
            return header[7:].strip() or None
        parts = header.split(" ")
        return parts[1] if len(parts) == 2 else header
    return request.cookies.get(cookie_name)


def identity_or_ip(request: Request) -> str:
    """Rate limit key: the verified user id when a valid token is present, else the client IP"""
    settings = getattr(request.app.state, "settings", None)
    if settings is not None:
        token = extract_token(request, settings.COOKIE_NAME)
        if token:
            payload = decode_access_token(token, settings)
            if payload:
                return f"user:{payload['sub']}"
    return get_remote_address(request)


limiter = Limiter(key_func=get_remote_address, application_limits=[global_limit])


def configure_rate_limits(settings: Settings) -> Limiter:
    _limits["global"] = settings.GLOBAL_RATE_LIMIT
    _limits["login"] = settings.LOGIN_RATE_LIMIT
    _limits["write"] = settings.WRITE_RATE_LIMIT
    limiter.enabled = settings.RATE_LIMIT_ENABLED
    if not settings.RATE_LIMIT_ENABLED:
        logger.warning("Rate limiting is disabled")
    return limiter
