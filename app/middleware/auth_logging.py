from fastapi import Request
import logging
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("app")

WRITE_METHODS = ("POST", "PUT", "PATCH", "DELETE")
# Writes that are expected to arrive without credentials
PUBLIC_WRITE_PATHS = ("/auth/register", "/auth/login", "/auth/logout", "/auth/forgot-password", "/auth/reset-password")


class AuthLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, cookie_name: str = "accessToken"):
        super().__init__(app)
        self.cookie_name = cookie_name

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        has_auth = bool(
            request.headers.get("Authorization")
            or request.headers.get("auth-token")
            or request.cookies.get(self.cookie_name)
        )

        if not has_auth and request.method in WRITE_METHODS and not path.endswith(PUBLIC_WRITE_PATHS):
            logger.warning(f"Write request {request.method} {path} without credentials")

        response = await call_next(request)

        if response.status_code in (401, 403):
            logger.warning(f"Auth error: {response.status_code} on {request.method} {path}")

        return response
