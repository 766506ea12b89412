"""
transport_billing/services/auth_session.py

Purpose: Authentication session manager

- Owns the current user and the session state
- Restores the session from the stored token and cached user snapshot
- Revalidates the snapshot against /api/auth/me when older than the TTL
- Login / register / logout / refresh
- Enforces valid state transitions
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from transport_billing.core.config import settings
from transport_billing.core.exceptions import StorageError
from transport_billing.core.logging import get_logger, LogContext
from transport_billing.flow.guards import NavigationIntent
from transport_billing.flow.states import SessionState, is_valid_transition
from transport_billing.schemas.response import FieldError
from transport_billing.schemas.user import User
from transport_billing.services.api_client import ApiClient
from transport_billing.services.token_store import UserCache
from utils.constants import LOGIN_FAILED_MESSAGE, LOGIN_PATH, REGISTRATION_FAILED_MESSAGE
from utils.time_utils import is_cache_fresh, now_ms

logger = get_logger(__name__)


@dataclass
class AuthResult:
    success: bool
    user: Optional[User] = None
    error: Optional[str] = None
    errors: List[FieldError] = field(default_factory=list)


class AuthSession:
    """
    The single authentication session of this process.

    Overlapping calls are not coalesced: two concurrent ``init()`` calls
    both hit the backend and the last one to finish wins.
    """

    def __init__(
        self,
        api_client: ApiClient,
        user_cache: UserCache,
        clock: Callable[[], float] = time.time,
        cache_ttl_minutes: Optional[int] = None,
    ):
        self.api = api_client
        self.user_cache = user_cache
        self.clock = clock
        self.cache_ttl_minutes = (
            cache_ttl_minutes if cache_ttl_minutes is not None else settings.SESSION_CACHE_TTL_MINUTES
        )
        self.state = SessionState.UNINITIALIZED
        self.user: Optional[User] = None

    @property
    def is_loading(self) -> bool:
        return self.state == SessionState.LOADING

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED and self.user is not None

    def _now_ms(self) -> int:
        return now_ms(self.clock)

    def _transition(self, new_state: SessionState):
        if not is_valid_transition(self.state, new_state):
            logger.warning(f"Invalid session transition attempted: {self.state} -> {new_state}")
            raise ValueError(f"Invalid session transition: {self.state} -> {new_state}")
        self.state = new_state

    def _cache_is_fresh(self) -> bool:
        return is_cache_fresh(self.user_cache.get_timestamp(), self._now_ms(), self.cache_ttl_minutes)

    async def init(self) -> SessionState:
        """
        Restores the session at startup.

        No token means anonymous. A token with a cached snapshot is
        authenticated immediately; the snapshot is revalidated only when
        older than the cache TTL.
        """
        self._transition(SessionState.LOADING)

        if not self.api.get_token():
            self.user = None
            self._transition(SessionState.ANONYMOUS)
            logger.debug("No stored token, session is anonymous")
            return self.state

        cached = self.user_cache.get_user()
        if cached is not None:
            self.user = cached
            self._transition(SessionState.AUTHENTICATED)
            if self._cache_is_fresh():
                logger.debug("Using cached user", extra={"user_id": cached.id})
                return self.state

        await self._revalidate()
        return self.state

    async def _revalidate(self) -> bool:
        """
        Fetches the current user and replaces the snapshot.

        On failure a stale snapshot is kept; with nothing cached the token
        is dropped and the session becomes anonymous.
        """
        response = await self.api.get_current_user()

        if response.success and response.data is not None:
            user: User = response.data
            with LogContext(user_id=user.id):
                try:
                    self.user_cache.replace(user, self._now_ms())
                except StorageError as e:
                    logger.error(f"Could not cache revalidated user: {e}")
                self.user = user
                self._transition(SessionState.AUTHENTICATED)
                logger.info("Session revalidated")
            return True

        if self.user is not None:
            logger.warning(f"Revalidation failed, keeping cached user: {response.error}")
            return False

        logger.info(f"Revalidation failed with no cached user, signing out: {response.error}")
        try:
            self.api.remove_token()
        except StorageError as e:
            logger.error(f"Error clearing token after failed revalidation: {e}")
        self._transition(SessionState.ANONYMOUS)
        return False

    async def _complete_auth(self, response, fallback_error: str) -> AuthResult:
        if not response.success or response.data is None:
            return AuthResult(
                success=False,
                error=response.error or fallback_error,
                errors=list(response.errors or []),
            )

        user = response.data.to_user()
        try:
            self.user_cache.stamp(self._now_ms())
        except StorageError as e:
            logger.error(f"Could not stamp user cache: {e}")
        self.user = user
        self._transition(SessionState.AUTHENTICATED)
        logger.info("Signed in", extra={"user_id": user.id})
        return AuthResult(success=True, user=user)

    async def login(self, email: str, password: str) -> AuthResult:
        try:
            response = await self.api.login(email, password)
        except StorageError as e:
            logger.error(f"Login succeeded but the session could not be stored: {e}")
            return AuthResult(success=False, error=e.message)
        return await self._complete_auth(response, LOGIN_FAILED_MESSAGE)

    async def register(self, payload: Dict[str, Any]) -> AuthResult:
        try:
            response = await self.api.register(payload)
        except StorageError as e:
            logger.error(f"Registration succeeded but the session could not be stored: {e}")
            return AuthResult(success=False, error=e.message)
        return await self._complete_auth(response, REGISTRATION_FAILED_MESSAGE)

    def logout(self) -> NavigationIntent:
        """
        Clears token, cookie and cached user, and asks for a full reload
        of the login page.
        """
        user_id = self.user.id if self.user else None
        try:
            self.api.remove_token()
        except StorageError as e:
            logger.error(f"Error clearing stored session: {e}")
        self.user = None
        self._transition(SessionState.ANONYMOUS)
        logger.info("Signed out", extra={"user_id": user_id})
        return NavigationIntent(LOGIN_PATH, hard=True)

    async def refresh_user(self) -> Optional[User]:
        """
        Returns the current user, hitting the backend only when the cached
        snapshot is older than the TTL.
        """
        if not self.api.get_token():
            return self.user
        if self.user is not None and self._cache_is_fresh():
            return self.user
        await self._revalidate()
        return self.user

    def apply_user(self, user: User):
        """
        Adopts a user returned by a profile or bank update.
        """
        try:
            self.user_cache.replace(user, self._now_ms())
        except StorageError as e:
            logger.error(f"Could not cache updated user: {e}")
        self.user = user

    def teardown(self):
        """
        Drops in-memory state. Stored token and snapshot are left alone.
        """
        self.user = None
        if self.state != SessionState.UNINITIALIZED:
            self._transition(SessionState.UNINITIALIZED)

