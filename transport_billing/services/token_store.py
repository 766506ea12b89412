"""
transport_billing/services/token_store.py

Purpose: Bearer token and user snapshot persistence

- One TokenStore interface, two adapters: local key-value store and cookie
- DualTokenStore keeps both copies in sync on set/remove
- UserCache: cached user snapshot plus its freshness timestamp
- RememberedLogin: "remember me" email (the password is never stored)
"""

import json
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol

from pydantic import ValidationError as PydanticValidationError

from transport_billing.core.exceptions import StorageError
from transport_billing.core.logging import get_logger
from transport_billing.db.storage import KeyValueStore
from transport_billing.schemas.user import User
from utils.constants import (
    AUTH_TOKEN_KEY,
    REMEMBER_ME_KEY,
    REMEMBERED_EMAIL_KEY,
    USER_DATA_KEY,
    USER_DATA_TIMESTAMP_KEY,
)

logger = get_logger(__name__)

COOKIE_SAMESITE = "strict"


class TokenStore(Protocol):
    def get_token(self) -> Optional[str]:
        ...

    def set_token(self, token: str) -> None:
        ...

    def remove_token(self) -> None:
        ...


class LocalStorageTokenAdapter:
    """
    Token kept under ``auth_token`` in the persistent key-value store.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get_token(self) -> Optional[str]:
        return self.store.get(AUTH_TOKEN_KEY) or None

    def set_token(self, token: str) -> None:
        self.store.set(AUTH_TOKEN_KEY, token)

    def remove_token(self) -> None:
        self.store.remove(AUTH_TOKEN_KEY)


class CookieTokenAdapter:
    """
    Token mirrored into an ``auth_token`` cookie so the route protection
    middleware can read it.

    The adapter only tracks the cookie's value; ``set_cookie_kwargs`` and
    ``delete_cookie_kwargs`` describe it for ``Response.set_cookie`` and
    ``Response.delete_cookie``. The cookie is not HTTP-only, lives for
    ``max_age_days``, is ``SameSite=Strict`` and ``Secure`` only when
    served over HTTPS.
    """

    def __init__(
        self,
        value: Optional[str] = None,
        secure: bool = False,
        max_age_days: int = 7,
        clock: Callable[[], float] = time.time,
    ):
        self.value = value
        self.removed = False
        self.secure = secure
        self.max_age_days = max_age_days
        self.clock = clock

    def get_token(self) -> Optional[str]:
        return self.value or None

    def set_token(self, token: str) -> None:
        self.value = token
        self.removed = False

    def remove_token(self) -> None:
        self.value = None
        self.removed = True

    def set_cookie_kwargs(self) -> dict:
        expires = datetime.fromtimestamp(self.clock(), tz=timezone.utc) + timedelta(days=self.max_age_days)
        return {
            "key": AUTH_TOKEN_KEY,
            "value": self.value,
            "max_age": self.max_age_days * 24 * 60 * 60,
            "expires": expires,
            "path": "/",
            "secure": self.secure,
            "httponly": False,
            "samesite": COOKIE_SAMESITE,
        }

    def delete_cookie_kwargs(self) -> dict:
        return {
            "key": AUTH_TOKEN_KEY,
            "path": "/",
            "secure": self.secure,
            "httponly": False,
            "samesite": COOKIE_SAMESITE,
        }


class DualTokenStore:
    """
    Writes the token to a primary store and a mirror.

    ``set_token`` rolls the primary back if the mirror write fails so the
    two never disagree. ``get_token`` prefers the primary and falls back
    to the mirror.
    """

    def __init__(self, primary: TokenStore, mirror: TokenStore):
        self.primary = primary
        self.mirror = mirror

    def get_token(self) -> Optional[str]:
        return self.primary.get_token() or self.mirror.get_token()

    def set_token(self, token: str) -> None:
        previous = self.primary.get_token()
        self.primary.set_token(token)
        try:
            self.mirror.set_token(token)
        except Exception as e:
            logger.error(f"Token mirror write failed, rolling back: {e}")
            if previous:
                self.primary.set_token(previous)
            else:
                self.primary.remove_token()
            raise StorageError("Could not persist auth token") from e

    def remove_token(self) -> None:
        errors = []
        for target in (self.primary, self.mirror):
            try:
                target.remove_token()
            except Exception as e:
                logger.error(f"Error removing token from {type(target).__name__}: {e}")
                errors.append(e)
        if errors:
            raise StorageError("Could not fully remove auth token") from errors[0]


class UserCache:
    """
    Cached user snapshot and the epoch-ms time it was stamped.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def get_user(self) -> Optional[User]:
        raw = self.store.get(USER_DATA_KEY)
        if not raw:
            return None
        try:
            return User.model_validate(json.loads(raw))
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.warning(f"Discarding unreadable cached user: {e}")
            return None

    def set_user(self, user: User) -> None:
        self.store.set(USER_DATA_KEY, json.dumps(user.to_storage()))

    def get_timestamp(self) -> Optional[int]:
        raw = self.store.get(USER_DATA_TIMESTAMP_KEY)
        if not raw:
            return None
        try:
            return int(raw)
        except ValueError:
            return None

    def stamp(self, timestamp_ms: int) -> None:
        self.store.set(USER_DATA_TIMESTAMP_KEY, str(timestamp_ms))

    def replace(self, user: User, timestamp_ms: int) -> None:
        """
        Replaces snapshot and timestamp together; on a failed timestamp
        write the previous snapshot is restored.
        """
        previous = self.store.get(USER_DATA_KEY)
        self.set_user(user)
        try:
            self.stamp(timestamp_ms)
        except StorageError:
            if previous is None:
                self.store.remove(USER_DATA_KEY)
            else:
                self.store.set(USER_DATA_KEY, previous)
            raise

    def clear(self) -> None:
        self.store.remove(USER_DATA_KEY)
        self.store.remove(USER_DATA_TIMESTAMP_KEY)


class RememberedLogin:
    """
    Remembers the login email for the "remember me" checkbox.

    Only the email and the flag are persisted; a password is never
    written to local storage.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    def load(self) -> dict:
        remember = self.store.get(REMEMBER_ME_KEY) == "true"
        return {
            "email": self.store.get(REMEMBERED_EMAIL_KEY) if remember else None,
            "remember_me": remember,
        }

    def save(self, email: str, remember_me: bool) -> None:
        if remember_me:
            self.store.set(REMEMBERED_EMAIL_KEY, email)
            self.store.set(REMEMBER_ME_KEY, "true")
        else:
            self.forget()

    def forget(self) -> None:
        self.store.remove(REMEMBERED_EMAIL_KEY)
        self.store.remove(REMEMBER_ME_KEY)
