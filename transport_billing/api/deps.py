"""
transport_billing/api/deps.py

Purpose: Shared request dependencies

- Services lookup from the app
- Session ownership: only the caller holding the session's token cookie
  sees it as signed in
- Route guard dependencies (protected pages, login/signup pages)
- Failed ApiResponse -> exception conversion
- Set-Cookie mirroring of the token cookie
"""

import secrets
from typing import Optional

from fastapi import HTTPException, Request, Response

from transport_billing.core.exceptions import (
    ExternalServiceError,
    NavigationRequired,
    ResourceNotFoundError,
    ValidationError,
)
from transport_billing.flow.guards import protect, redirect_if_authenticated
from transport_billing.flow.states import SessionState
from transport_billing.schemas.response import ApiResponse
from transport_billing.schemas.user import User
from transport_billing.services.container import Services
from utils.constants import AUTH_TOKEN_KEY, NOT_AUTHENTICATED_MESSAGE, REDIRECT_PARAM


def get_services(request: Request) -> Services:
    return request.app.state.services


def _current_path(request: Request) -> str:
    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"
    return path


def owns_session(request: Request) -> bool:
    """
    True when the request's token cookie is the session's own token.
    """
    cookie = request.cookies.get(AUTH_TOKEN_KEY)
    token = get_services(request).tokens.get_token()
    if not cookie or not token:
        return False
    return secrets.compare_digest(cookie.encode(), token.encode())


def session_state(request: Request) -> SessionState:
    """
    The session state as this caller sees it. A signed-in session is
    ANONYMOUS to anyone without its token cookie.
    """
    state = get_services(request).session.state
    if state == SessionState.AUTHENTICATED and not owns_session(request):
        return SessionState.ANONYMOUS
    return state


async def require_user(request: Request) -> User:
    """
    Guard for protected pages. Returns the signed-in user or raises a
    redirect to the login page.
    """
    services = get_services(request)
    session = services.session
    decision = protect(session_state(request), _current_path(request))

    if decision.intent is not None:
        # A cookie that is not the session's would bounce back here from /login
        stale = request.cookies.get(AUTH_TOKEN_KEY) and not owns_session(request)
        raise NavigationRequired(
            decision.intent.target,
            clear_cookie=services.cookies.delete_cookie_kwargs() if stale else None,
        )
    if not decision.render or session.user is None:
        raise HTTPException(status_code=503, detail=NOT_AUTHENTICATED_MESSAGE)
    return session.user


async def require_anonymous(request: Request):
    """
    Guard for login and signup pages: signed-in users are sent on.
    """
    decision = redirect_if_authenticated(session_state(request), request.query_params.get(REDIRECT_PARAM))
    if decision.intent is not None:
        raise NavigationRequired(decision.intent.target)


def ensure_success(
    response: ApiResponse,
    fallback: str,
    not_found: Optional[str] = None,
    require_data: bool = False,
) -> ApiResponse:
    """
    Raises for a failed gateway response. Backend field errors are
    passed through untouched as validation details.
    """
    if response.success:
        if require_data and response.data is None:
            raise ExternalServiceError(fallback)
        return response

    message = response.error or fallback
    if response.errors:
        raise ValidationError(message, details=[error.model_dump() for error in response.errors])
    if not_found and message == not_found:
        raise ResourceNotFoundError(message)
    raise ExternalServiceError(message)


def mirror_cookie(services: Services, response: Response) -> Response:
    """
    Copies the token cookie onto the response: set while a token is held,
    deleted once it has been removed.
    """
    cookies = services.cookies
    if cookies.get_token():
        response.set_cookie(**cookies.set_cookie_kwargs())
    elif cookies.removed:
        response.delete_cookie(**cookies.delete_cookie_kwargs())
    return response


def ensure_result(result, fallback: str):
    """
    Raises for a failed EntryListResult, like ensure_success.
    """
    if result.success:
        return result
    if result.errors:
        raise ValidationError(result.error or fallback, details=[error.model_dump() for error in result.errors])
    raise ExternalServiceError(result.error or fallback)
