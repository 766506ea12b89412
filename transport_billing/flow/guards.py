"""
transport_billing/flow/guards.py

Purpose: Route guards as pure decisions

- protect: pages that need an authenticated session
- redirect_if_authenticated: login/signup pages
- Guards never navigate; they return a NavigationIntent for the host
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from transport_billing.flow.states import SessionState
from utils.constants import DASHBOARD_PATH, LOGIN_PATH, NO_REDIRECT_PARAM_PATHS, REDIRECT_PARAM


@dataclass(frozen=True)
class NavigationIntent:
    """
    A navigation the host should perform.

    ``hard`` asks for a full reload (discarding in-memory state) rather
    than a client-side route change.
    """
    target: str
    hard: bool = False


@dataclass(frozen=True)
class GuardDecision:
    render: bool
    intent: Optional[NavigationIntent] = None


def login_redirect_target(current_path: str) -> str:
    """
    /login with the ``redirect`` parameter, except for paths where
    returning is pointless.
    """
    if not current_path or current_path in NO_REDIRECT_PARAM_PATHS:
        return LOGIN_PATH
    return f"{LOGIN_PATH}?{REDIRECT_PARAM}={quote(current_path, safe='')}"


def protect(state: SessionState, current_path: str) -> GuardDecision:
    """
    Decision for a protected page.

    LOADING renders nothing and navigates nowhere; AUTHENTICATED renders;
    anything else sends the user to the login page.
    """
    if state == SessionState.LOADING:
        return GuardDecision(render=False)
    if state == SessionState.AUTHENTICATED:
        return GuardDecision(render=True)
    return GuardDecision(
        render=False,
        intent=NavigationIntent(login_redirect_target(current_path)),
    )


def redirect_if_authenticated(state: SessionState, redirect_param: Optional[str] = None) -> GuardDecision:
    """
    Decision for the login and signup pages.

    While loading the page renders optimistically.
    """
    if state == SessionState.AUTHENTICATED:
        return GuardDecision(
            render=False,
            intent=NavigationIntent(safe_redirect(redirect_param)),
        )
    return GuardDecision(render=True)


def safe_redirect(redirect_param: Optional[str]) -> str:
    """
    Only same-site absolute paths are followed; anything else lands on
    the dashboard.
    """
    if redirect_param and redirect_param.startswith("/") and not redirect_param.startswith("//"):
        return redirect_param
    return DASHBOARD_PATH
