"""
transport_billing/api/auth.py

Purpose: Login, signup, logout and password reset

- Public pages guarded by redirect_if_authenticated
- Login/signup run through the auth session and mirror the token cookie
- "Remember me" keeps only the email
- Password reset: request link, verify token, set new password
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, Field

from transport_billing.api.deps import ensure_success, get_services, mirror_cookie, owns_session, require_anonymous
from transport_billing.core.exceptions import AuthenticationError, ExternalServiceError, ValidationError
from transport_billing.core.logging import get_logger
from transport_billing.flow.guards import safe_redirect
from transport_billing.schemas.user import RegisterRequest
from transport_billing.services.auth_session import AuthResult
from utils import constants as c
from utils.validation_utils import validate_email, validate_password

logger = get_logger(__name__)
router = APIRouter()


class LoginForm(BaseModel):
    email: str
    password: str
    remember_me: bool = Field(False, alias="rememberMe")
    redirect: Optional[str] = None

    class Config:
        populate_by_name = True


class ResetRequestForm(BaseModel):
    email: str


class ResetConfirmForm(BaseModel):
    token: str
    password: str
    confirm_password: str = Field(..., alias="confirmPassword")

    class Config:
        populate_by_name = True


def _signed_in_response(request: Request, result: AuthResult, redirect: Optional[str], status_code: int = 200):
    services = get_services(request)
    response = JSONResponse(
        status_code=status_code,
        content={
            "success": True,
            "user": result.user.to_storage(),
            "redirect": safe_redirect(redirect),
        },
    )
    return mirror_cookie(services, response)


def _raise_for_failure(result: AuthResult, error_cls):
    if result.errors:
        raise ValidationError(result.error, details=[error.model_dump() for error in result.errors])
    raise error_cls(result.error)


@router.get("/login", dependencies=[Depends(require_anonymous)])
async def login_page(request: Request):
    """Login page data: the remembered email, if any."""
    return {"page": "login", **get_services(request).remembered.load()}


@router.post("/login")
async def login(request: Request, form: LoginForm):
    services = get_services(request)
    result = await services.session.login(form.email.strip(), form.password)

    if not result.success:
        logger.info("Login rejected")
        _raise_for_failure(result, AuthenticationError)

    services.remembered.save(form.email.strip(), form.remember_me)
    return _signed_in_response(request, result, form.redirect)


@router.get("/signup", dependencies=[Depends(require_anonymous)])
async def signup_page():
    return {"page": "signup"}


@router.post("/signup")
async def signup(request: Request, form: RegisterRequest):
    services = get_services(request)
    result = await services.session.register(form.to_payload())

    if not result.success:
        _raise_for_failure(result, ExternalServiceError)

    return _signed_in_response(request, result, None, status_code=201)


@router.post("/logout")
async def logout(request: Request):
    """
    Signs out and sends the browser to the login page with the cookie
    cleared. A caller that does not hold the session only loses its own
    cookie.
    """
    services = get_services(request)
    if not owns_session(request):
        response = RedirectResponse(c.LOGIN_PATH, status_code=303)
        response.delete_cookie(**services.cookies.delete_cookie_kwargs())
        return response

    intent = services.session.logout()
    response = RedirectResponse(intent.target, status_code=303)
    return mirror_cookie(services, response)


@router.post("/reset-password")
async def request_password_reset(request: Request, form: ResetRequestForm):
    email = form.email.strip().lower()
    if not validate_email(email):
        raise ValidationError("Please enter a valid email address")

    response = await get_services(request).api.request_password_reset(email)
    ensure_success(response, c.RESET_REQUEST_FAILED_MESSAGE)
    return {"success": True, "message": response.message or c.RESET_EMAIL_SENT_MESSAGE}


@router.get("/reset-password/confirm")
async def verify_reset_token(request: Request, token: str = Query(..., min_length=1)):
    response = await get_services(request).api.verify_reset_token(token)
    if not response.success or response.data is None:
        raise ValidationError(response.error or c.RESET_TOKEN_INVALID_MESSAGE)
    return {"valid": True, "info": response.data.model_dump(by_alias=True, mode="json")}


@router.post("/reset-password/confirm")
async def confirm_password_reset(request: Request, form: ResetConfirmForm):
    if form.password != form.confirm_password:
        raise ValidationError(c.PASSWORD_MISMATCH_MESSAGE)
    error = validate_password(form.password)
    if error:
        raise ValidationError(error)

    response = await get_services(request).api.reset_password(form.token, form.password)
    ensure_success(response, c.RESET_TOKEN_INVALID_MESSAGE)
    return {"success": True, "message": response.message or c.PASSWORD_CHANGED_MESSAGE}
