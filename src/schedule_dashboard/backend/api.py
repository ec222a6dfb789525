# src/schedule_dashboard/backend/api.py

"""
The single outbound HTTP path to the backend API.

- The bearer credential is attached per request (httpx.Auth), read from the
  session at send time; the underlying client has no default Authorization header.
- Any 401/403 invalidates the session here, once, for every caller, and
  surfaces as AuthDenied.
- Other failures surface as ApiError carrying the server's {"error": ...} message.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from typing import Any

import httpx

from ..core.errors import ApiError, AuthDenied
from ..core.ports import CredentialProvider

logger = logging.getLogger(__name__)

_DENIED = (401, 403)


class BearerAuth(httpx.Auth):
    def __init__(self, token: str) -> None:
        self._token = token

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = f"Bearer {self._token}"
        yield request


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        msg = payload.get("error") or payload.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
    return f"HTTP {response.status_code}"


def make_timeout(connect_s: float, read_s: float) -> httpx.Timeout:
    return httpx.Timeout(connect=connect_s, read=read_s, write=10.0, pool=connect_s)


class ApiClient:
    """
    Thin async JSON client over httpx.AsyncClient.

    credentials is attached after construction by the composition root
    (the session needs this client for its own exchanges).
    """

    def __init__(
        self,
        base_url: str,
        *,
        credentials: CredentialProvider | None = None,
        timeout: httpx.Timeout | float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.credentials = credentials
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def _auth_for(self, token: str | None) -> httpx.Auth | None:
        if token is None and self.credentials is not None:
            token = self.credentials.bearer_token()
        return BearerAuth(token) if token else None

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        token: str | None = None,
    ) -> Any:
        """
        Send one request and return the decoded JSON body (None for an empty body).

        token overrides the session credential for this request only
        (used when validating a stored credential before it is adopted).
        """
        try:
            response = await self._client.request(
                method,
                path,
                params=params,
                json=json,
                auth=self._auth_for(token),
            )
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e.__class__.__name__)
            raise ApiError(f"Network error: {e.__class__.__name__}") from e

        if response.status_code in _DENIED:
            message = _error_message(response)
            logger.warning("%s %s denied (%s): %s", method, path, response.status_code, message)
            if self.credentials is not None:
                self.credentials.invalidate(f"HTTP {response.status_code} on {path}")
            raise AuthDenied(message, status_code=response.status_code)

        if response.is_error:
            message = _error_message(response)
            logger.warning("%s %s -> %s: %s", method, path, response.status_code, message)
            raise ApiError(message, status_code=response.status_code)

        logger.debug("%s %s -> %s", method, path, response.status_code)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError("Malformed JSON response", status_code=response.status_code) from e

    async def get(self, path: str, *, params: dict[str, Any] | None = None, token: str | None = None) -> Any:
        return await self.request("GET", path, params=params, token=token)

    async def post(self, path: str, *, json: Any = None, token: str | None = None) -> Any:
        return await self.request("POST", path, json=json, token=token)
