"""
HTTP client for the hosted backend.

The hosted backend exposes every table through a PostgREST-style API under
/rest/v1/<table> and the current session under /auth/v1/user. Requests carry
the public API key plus the session's bearer token.
"""

import logging
from typing import Any, Optional

import httpx

from src.services.exceptions import BackendError, UnauthenticatedError

logger = logging.getLogger(__name__)

REST_PREFIX = "/rest/v1"
AUTH_USER_PATH = "/auth/v1/user"


def _error_details(response: httpx.Response) -> tuple[Optional[str], str]:
    """Extract (code, message) from a PostgREST error body."""
    try:
        body = response.json()
    except ValueError:
        return None, response.text or response.reason_phrase
    if not isinstance(body, dict):
        return None, response.text
    message = body.get("message") or body.get("msg") or body.get("error") or response.reason_phrase
    code = body.get("code")
    return (str(code) if code else None), message


def _handle_error_response(response: httpx.Response) -> None:
    """Convert an error response into the store's exception types."""
    status = response.status_code
    code, message = _error_details(response)

    if status in (401, 403):
        raise UnauthenticatedError(f"Backend rejected the session: {message}")
    if code == "23505" or (status == 409 and code is None):
        raise BackendError(f"Database error: {message}", code="23505")
    raise BackendError(f"Database error: {message}", code=code or str(status))


class RestClient:
    """
    Thin async wrapper over httpx for the hosted backend.

    Args:
        base_url: Project URL (e.g. https://xyz.example.co)
        api_key: Public API key, sent as the apikey header
        access_token: Session token; the API key is used when absent
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        access_token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key
        self._access_token = access_token or None
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    @property
    def access_token(self) -> Optional[str]:
        return self._access_token

    def set_access_token(self, access_token: Optional[str]) -> None:
        """Switch the session token (None signs out)."""
        self._access_token = access_token or None

    def _headers(self, prefer: Optional[str] = None) -> dict[str, str]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._access_token or self._api_key}",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[list[tuple[str, str]]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        """
        Send a request and return the decoded JSON body (None when empty).

        Raises:
            UnauthenticatedError: On 401/403
            BackendError: On any other error response or transport failure
        """
        try:
            response = await self._client.request(
                method,
                path,
                params=params,
                json=json,
                headers=self._headers(prefer),
            )
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise BackendError(f"Backend request failed: {e}", original_error=e) from e

        if response.is_error:
            logger.error(f"{method} {path} returned {response.status_code}")
            _handle_error_response(response)

        if not response.content:
            return None
        return response.json()

    async def table_request(
        self,
        method: str,
        table: str,
        params: Optional[list[tuple[str, str]]] = None,
        json: Any = None,
        prefer: Optional[str] = None,
    ) -> Any:
        return await self.request(method, f"{REST_PREFIX}/{table}", params, json, prefer)

    async def get_user(self) -> Optional[dict]:
        """Return the session user record, or None when signed out."""
        if not self._access_token:
            return None
        try:
            return await self.request("GET", AUTH_USER_PATH)
        except UnauthenticatedError:
            logger.info("Session token rejected; treating as signed out")
            return None

    async def aclose(self) -> None:
        await self._client.aclose()
