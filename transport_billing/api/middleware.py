"""
transport_billing/api/middleware.py

Purpose: Cookie-based route protection

- Runs before any handler, using only the auth_token cookie
- Protected prefixes without a cookie -> /login?redirect=<path>
- A cookie holder asking for /login -> /dashboard
"""

from typing import Iterable, Optional

from fastapi import Request
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from transport_billing.core.config import settings
from transport_billing.core.logging import get_logger
from transport_billing.flow.guards import login_redirect_target
from utils.constants import AUTH_TOKEN_KEY, DASHBOARD_PATH, LOGIN_PATH

logger = get_logger(__name__)


class RouteProtectionMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, protected_paths: Optional[Iterable[str]] = None):
        super().__init__(app)
        self.protected_paths = tuple(protected_paths or settings.PROTECTED_PATHS)

    def is_protected(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self.protected_paths)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        has_token = bool(request.cookies.get(AUTH_TOKEN_KEY))

        if not has_token and self.is_protected(path):
            logger.debug(f"No auth cookie for {path}, redirecting to login")
            return RedirectResponse(login_redirect_target(path), status_code=307)

        if has_token and path == LOGIN_PATH and request.method == "GET":
            return RedirectResponse(DASHBOARD_PATH, status_code=307)

        return await call_next(request)
