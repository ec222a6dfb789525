# src/schedule_dashboard/backend/auth_api.py

from __future__ import annotations

from typing import Any

from ..core.errors import ApiError
from .api import ApiClient


def _require_dict(payload: Any, what: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ApiError(f"Unexpected {what} response")
    return payload


class HttpIdentityApi:
    """IdentityApi over the backend's /auth endpoints."""

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def exchange(self, external_token: str) -> dict[str, Any]:
        payload = await self._api.post("/auth/google", json={"token": external_token})
        return _require_dict(payload, "login")

    async def validate(self, bearer_token: str) -> bool:
        payload = await self._api.get("/auth/validate", token=bearer_token)
        return isinstance(payload, dict) and payload.get("valid") is True

    async def refresh(self, bearer_token: str) -> dict[str, Any]:
        payload = await self._api.post("/auth/refresh", token=bearer_token)
        return _require_dict(payload, "refresh")
