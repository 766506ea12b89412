"""
transport_billing/services/container.py

Purpose: Wires the session services together

- Local store -> token adapters -> API client -> auth session
- One Services object per app, kept on ``app.state.services``
"""

import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

import httpx

from transport_billing.core.config import settings
from transport_billing.db.storage import KeyValueStore
from transport_billing.services.api_client import ApiClient
from transport_billing.services.auth_session import AuthSession
from transport_billing.services.token_store import (
    CookieTokenAdapter,
    DualTokenStore,
    LocalStorageTokenAdapter,
    RememberedLogin,
    UserCache,
)


@dataclass
class Services:
    store: KeyValueStore
    cookies: CookieTokenAdapter
    tokens: DualTokenStore
    user_cache: UserCache
    remembered: RememberedLogin
    api: ApiClient
    session: AuthSession
    clock: Callable[[], float] = time.time

    def today(self) -> date:
        return date.fromtimestamp(self.clock())

    async def close(self):
        self.session.teardown()
        await self.api.close()


def build_services(
    store: KeyValueStore,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    clock: Callable[[], float] = time.time,
    base_url: Optional[str] = None,
) -> Services:
    """
    Builds the service graph over ``store``.

    ``transport`` replaces the network (tests pass an httpx.MockTransport).
    ``clock`` drives cache freshness and "today"; cookie expiry always
    uses wall-clock time.
    """
    cookies = CookieTokenAdapter(secure=settings.cookie_secure, max_age_days=settings.TOKEN_COOKIE_DAYS)
    tokens = DualTokenStore(LocalStorageTokenAdapter(store), cookies)
    user_cache = UserCache(store)
    api = ApiClient(tokens, user_cache, base_url=base_url, transport=transport)
    session = AuthSession(api, user_cache, clock=clock)

    return Services(
        store=store,
        cookies=cookies,
        tokens=tokens,
        user_cache=user_cache,
        remembered=RememberedLogin(store),
        api=api,
        session=session,
        clock=clock,
    )
