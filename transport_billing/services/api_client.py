"""
transport_billing/services/api_client.py

Purpose: Backend REST API gateway

- Single point of HTTP access (httpx.AsyncClient)
- Attaches the bearer token when one is stored
- Normalizes every response to ApiResponse; never raises to callers
- Persists token and user snapshot as part of login/register
- Entry CRUD returns typed, date-normalized TransportBill objects
"""

from datetime import date
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from transport_billing.core.config import settings
from transport_billing.core.logging import get_logger, LogContext
from transport_billing.schemas.response import ApiResponse
from transport_billing.schemas.transport import parse_entry_page, parse_transport_bill
from transport_billing.schemas.user import AuthResponse, ResetTokenInfo, User
from transport_billing.services.token_store import TokenStore, UserCache
from utils import constants as c
from utils.validation_utils import sanitize_input

logger = get_logger(__name__)


class ApiClient:
    """
    Async client for the transport billing backend.

    No retries, no backoff and no request deduplication: a failure is
    returned as ``ApiResponse(success=False)`` and the caller decides.
    """

    def __init__(
        self,
        token_store: TokenStore,
        user_cache: UserCache,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token_store = token_store
        self.user_cache = user_cache
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.API_TIMEOUT,
            transport=transport,
        )

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> ApiResponse:
        """
        Issues one backend call.

        Args:
            endpoint: Path under the base URL (e.g. /api/auth/me)
            method: HTTP method
            json: Optional JSON body
            params: Optional query parameters (None values are dropped)

        Returns:
            ApiResponse; HTTP and transport failures are returned, not raised
        """
        headers = {"Content-Type": "application/json"}
        token = self.token_store.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        query = {key: value for key, value in (params or {}).items() if value is not None}

        with LogContext(endpoint=endpoint):
            try:
                response = await self._client.request(
                    method,
                    endpoint,
                    json=json,
                    params=query or None,
                    headers=headers,
                )
                body = response.json() if response.content else {}
            except httpx.TimeoutException:
                logger.error(f"Backend timeout: {method} {endpoint}")
                return ApiResponse.failure(c.NETWORK_ERROR_MESSAGE)
            except httpx.RequestError as e:
                logger.error(f"Network error calling {method} {endpoint}: {e}")
                return ApiResponse.failure(c.NETWORK_ERROR_MESSAGE)
            except ValueError as e:
                logger.error(f"Non-JSON response from {method} {endpoint}: {e}")
                return ApiResponse.failure(c.NETWORK_ERROR_MESSAGE)

            if not isinstance(body, dict):
                body = {"data": body}

            try:
                if not response.is_success:
                    logger.warning(f"Backend returned {response.status_code} for {method} {endpoint}")
                    return ApiResponse(
                        success=False,
                        error=body.get("error") or body.get("message")
                        or c.HTTP_ERROR_MESSAGE.format(status=response.status_code),
                        errors=body.get("errors"),
                    )

                return ApiResponse(
                    success=bool(body.get("success", True)),
                    data=body.get("data"),
                    error=body.get("error"),
                    errors=body.get("errors"),
                    message=body.get("message"),
                )
            except PydanticValidationError as e:
                logger.error(f"Malformed response envelope from {method} {endpoint}: {e}")
                return ApiResponse.failure(c.NETWORK_ERROR_MESSAGE)

    def _typed(self, response: ApiResponse, parse) -> ApiResponse:
        """
        Converts ``data`` with ``parse``; a payload that does not fit the
        schema becomes a failure response.
        """
        if not response.success or response.data is None:
            return response
        try:
            response.data = parse(response.data)
        except (PydanticValidationError, TypeError, ValueError) as e:
            logger.error(f"Unexpected payload shape: {e}")
            return ApiResponse.failure("Unexpected response from server")
        return response

    # ------------------------------------------------------------------
    # Token and user snapshot
    # ------------------------------------------------------------------

    def get_token(self) -> Optional[str]:
        return self.token_store.get_token()

    def set_token(self, token: str) -> None:
        self.token_store.set_token(token)

    def remove_token(self) -> None:
        """Clears the token (both copies) and the cached user."""
        self.token_store.remove_token()
        self.user_cache.clear()

    def is_authenticated(self) -> bool:
        return bool(self.get_token())

    # ------------------------------------------------------------------
    # Auth endpoints
    # ------------------------------------------------------------------

    async def _authenticate(self, endpoint: str, payload: Dict[str, Any]) -> ApiResponse:
        response = self._typed(
            await self.request(endpoint, method="POST", json=payload),
            AuthResponse.model_validate,
        )
        if response.success and response.data is not None:
            auth: AuthResponse = response.data
            self.set_token(auth.token)
            self.user_cache.set_user(auth.to_user())
            logger.info("Authenticated", extra={"user_id": auth.id})
        return response

    async def login(self, email: str, password: str) -> ApiResponse:
        return await self._authenticate(c.AUTH_LOGIN, {"email": email, "password": password})

    async def register(self, payload: Dict[str, Any]) -> ApiResponse:
        return await self._authenticate(c.AUTH_REGISTER, payload)

    async def get_current_user(self) -> ApiResponse:
        return self._typed(await self.request(c.AUTH_ME), User.model_validate)

    async def logout(self) -> None:
        self.remove_token()

    async def request_password_reset(self, email: str) -> ApiResponse:
        return await self.request(c.AUTH_FORGOT_PASSWORD, method="POST", json={"email": email})

    async def verify_reset_token(self, token: str) -> ApiResponse:
        return self._typed(
            await self.request(c.AUTH_VERIFY_RESET_TOKEN.format(token=token)),
            ResetTokenInfo.model_validate,
        )

    async def reset_password(self, token: str, new_password: str) -> ApiResponse:
        return await self.request(
            c.AUTH_RESET_PASSWORD,
            method="POST",
            json={"token": token, "password": new_password},
        )

    async def change_password(self, current_password: str, new_password: str) -> ApiResponse:
        return await self.request(
            c.AUTH_CHANGE_PASSWORD,
            method="PUT",
            json={"currentPassword": current_password, "newPassword": new_password},
        )

    # ------------------------------------------------------------------
    # User management endpoints
    # ------------------------------------------------------------------

    async def update_profile(self, user_id: str, profile_data: Dict[str, Any]) -> ApiResponse:
        return self._typed(
            await self.request(c.USER_PROFILE.format(user_id=user_id), method="PUT", json=profile_data),
            User.model_validate,
        )

    async def update_bank_details(self, user_id: str, bank_data: Dict[str, Any]) -> ApiResponse:
        return self._typed(
            await self.request(c.USER_BANK.format(user_id=user_id), method="PUT", json=bank_data),
            User.model_validate,
        )

    async def get_users(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        search: Optional[str] = None,
        role: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> ApiResponse:
        """Admin user listing."""
        params = {
            "page": page,
            "limit": limit,
            "search": search,
            "role": role,
            "isActive": None if is_active is None else str(is_active).lower(),
        }
        return await self.request(c.USERS, params=params)

    # ------------------------------------------------------------------
    # Transport entry endpoints
    # ------------------------------------------------------------------

    async def get_transport_entries(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        financial_year: Optional[str] = None,
    ) -> ApiResponse:
        """
        Lists entries. ``data`` is an EntryPage of parsed TransportBills.
        """
        params = {
            "search": sanitize_input(search) or None,
            "status": status,
            "from": from_date.isoformat() if from_date else None,
            "to": to_date.isoformat() if to_date else None,
            "page": page,
            "limit": limit,
            "financialYear": financial_year,
        }
        return self._typed(await self.request(c.TRANSPORT_ENTRIES, params=params), parse_entry_page)

    async def get_transport_entry(self, entry_id: str) -> ApiResponse:
        return self._typed(
            await self.request(c.TRANSPORT_ENTRY.format(entry_id=entry_id)),
            parse_transport_bill,
        )

    async def create_transport_entry(self, payload: Dict[str, Any]) -> ApiResponse:
        return self._typed(
            await self.request(c.TRANSPORT_ENTRIES, method="POST", json=payload),
            parse_transport_bill,
        )

    async def update_transport_entry(self, entry_id: str, payload: Dict[str, Any]) -> ApiResponse:
        return self._typed(
            await self.request(c.TRANSPORT_ENTRY.format(entry_id=entry_id), method="PUT", json=payload),
            parse_transport_bill,
        )

    async def delete_transport_entry(self, entry_id: str) -> ApiResponse:
        return await self.request(c.TRANSPORT_ENTRY.format(entry_id=entry_id), method="DELETE")

    async def health_check(self) -> ApiResponse:
        return await self.request(c.HEALTH)

    async def close(self):
        await self._client.aclose()

