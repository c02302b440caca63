"""httpx wrapper and the authenticated App Store session.

Why a wrapper:
- Standardizes timeouts, headers and error mapping for every store call.
- Owns the credential cache so token refresh is scoped to one session
  object instead of a module-level singleton.
- Easy to test: inject an `httpx.AsyncClient` built on `httpx.MockTransport`.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Mapping, TypeVar

import httpx
from pydantic import BaseModel

from adapters.app_store.auth import issue_token
from core.config import AppSettings, AppStoreCredentials
from core.domain.errors import VendorRequestError
from core.domain.models import Credential

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Reissue when the cached token has less than this many seconds left.
TOKEN_REFRESH_MARGIN_SECONDS = 60


def build_async_client(
    settings: AppSettings | None = None,
    *,
    base_url: str | None = None,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with safe defaults.

    Why a builder:
    - Centralizes timeouts/headers so every store adapter behaves the same.
    - `transport` lets tests plug in `httpx.MockTransport`.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        base_url=base_url or settings.app_store_base_url,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        headers=headers,
        transport=transport,
    )


class AppStoreSession:
    """Authenticated JSON transport for App Store Connect.

    Use as an async context manager; the underlying client is closed on exit
    unless it was injected by the caller.
    """

    def __init__(
        self,
        credentials: AppStoreCredentials,
        settings: AppSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._credentials = credentials
        self._settings = settings or AppSettings()
        self._owns_client = client is None
        self._client = client or build_async_client(self._settings)
        self._clock = clock or time.time
        self._credential: Credential | None = None

    async def __aenter__(self) -> "AppStoreSession":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def current_token(self) -> str:
        """Return the cached token, reissuing it when close to expiry.

        No await between the check and the read, so this is atomic under
        the asyncio scheduler.
        """

        now = int(self._clock())
        cached = self._credential
        if cached is not None and cached.expires_at - TOKEN_REFRESH_MARGIN_SECONDS > now:
            return cached.token

        logger.debug("Issuing App Store token (previous expiry: %s)", cached.expires_at if cached else None)
        self._credential = issue_token(
            self._credentials,
            now=now,
            expiration_seconds=self._settings.token_expiration_seconds,
        )
        return self._credential.token

    async def get(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        model: type[M] | None = None,
    ) -> Any:
        payload = await self._request("GET", path, params=params)
        return model.model_validate(payload) if model is not None else payload

    async def post(self, path: str, body: Any, *, model: type[M] | None = None) -> Any:
        payload = await self._request("POST", path, body=body)
        return model.model_validate(payload) if model is not None else payload

    async def patch(self, path: str, body: Any) -> None:
        await self._request("PATCH", path, body=body)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        headers = {
            "Authorization": f"Bearer {self.current_token()}",
            "Content-Type": "application/json",
        }
        logger.debug("%s %s params=%s", method, path, dict(params) if params else None)
        response = await self._client.request(
            method,
            path,
            params=params,
            json=body,
            headers=headers,
        )
        logger.debug("%s %s -> HTTP %s", method, path, response.status_code)

        payload = _read_payload(response)
        if response.is_success:
            return payload

        logger.warning("App Store request failed: %s %s -> HTTP %s", method, path, response.status_code)
        raise VendorRequestError(
            f"App Store request failed: {response.status_code} {response.reason_phrase}",
            status=response.status_code,
            body=payload,
        )


def _read_payload(response: httpx.Response) -> Any:
    """Decode a response body.

    Error bodies are best-effort (fall back to text); a 2xx that claims JSON
    but does not parse is unexpected and raises.
    """

    if not response.content:
        return None

    content_type = response.headers.get("content-type", "")
    if "json" not in content_type:
        return response.text

    if response.is_success:
        return response.json()
    try:
        return response.json()
    except json.JSONDecodeError:
        return response.text
