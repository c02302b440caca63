"""App Store service layer.

Wraps session creation and the metadata client so callers (CLI, tool
handlers) get `ServiceResult` / `MaybeResult` envelopes instead of
exceptions for every expected failure path. A fresh session, and with it a
fresh credential cache and fresh resource resolution, is opened per call.
"""

from __future__ import annotations

import logging
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, TypeVar

import httpx
import jwt

from adapters.app_store.auth import decode_token, issue_token
from adapters.app_store.client import AppStoreClient
from adapters.http_client import AppStoreSession
from core.config import AppSettings, AppStoreCredentials, load_app_store_credentials
from core.domain.errors import SyncError, describe_error
from core.domain.models import (
    AppInfo,
    AppSummary,
    CanonicalMetadata,
    CreateVersionResult,
    DecodedToken,
    DistributionResult,
    RegisteredApp,
    ReleaseNote,
)
from core.domain.results import MaybeResult, ServiceResult
from core.domain.store import DEFAULT_LOCALE, Store
from core.interfaces.transport import Transport
from core.interfaces.translator import Translator
from core.services.helpers import check_push_prerequisites
from core.services.locale_distribution import distribute_translation

logger = logging.getLogger(__name__)

T = TypeVar("T")

SessionFactory = Callable[[AppStoreCredentials, AppSettings], AbstractAsyncContextManager[Transport]]


class AppStoreService:
    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        session_factory: SessionFactory | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._session_factory = session_factory or AppStoreSession

    @asynccontextmanager
    async def open_client(self) -> AsyncIterator[AppStoreClient]:
        credentials = load_app_store_credentials(self._settings)
        async with self._session_factory(credentials, self._settings) as session:
            yield AppStoreClient(session)

    async def _run(self, operation: Callable[[AppStoreClient], Awaitable[T]]) -> ServiceResult[T]:
        try:
            async with self.open_client() as client:
                data = await operation(client)
        except SyncError as exc:
            logger.info("App Store operation failed: %s", exc)
            return ServiceResult.fail(describe_error(exc))
        except httpx.HTTPError as exc:
            logger.warning("App Store transport error: %r", exc)
            return ServiceResult.fail(f"App Store API: request failed ({exc.__class__.__name__}: {exc})")
        return ServiceResult.ok(data)

    def verify_auth(self, expiration_seconds: int = 300) -> ServiceResult[DecodedToken]:
        """Issue a token locally and return its decoded header/payload."""

        try:
            credentials = load_app_store_credentials(self._settings)
            credential = issue_token(credentials, expiration_seconds=expiration_seconds)
            return ServiceResult.ok(decode_token(credential.token))
        except SyncError as exc:
            return ServiceResult.fail(describe_error(exc))
        except (jwt.PyJWTError, ValueError) as exc:
            return ServiceResult.fail(f"App Store auth: could not sign token ({exc})")

    async def pull_metadata(self, app: str) -> ServiceResult[CanonicalMetadata]:
        return await self._run(lambda client: client.pull_metadata(app))

    async def push_metadata(self, app: str, metadata: CanonicalMetadata) -> ServiceResult[None]:
        return await self._run(lambda client: client.push_metadata(app, metadata))

    async def create_version(self, app: str, version_string: str) -> ServiceResult[CreateVersionResult]:
        return await self._run(lambda client: client.create_version(app, version_string))

    async def pull_release_notes(self, app: str) -> ServiceResult[list[ReleaseNote]]:
        return await self._run(lambda client: client.pull_release_notes(app))

    async def push_release_notes(self, app: str, notes: dict[str, str]) -> ServiceResult[list[str]]:
        return await self._run(lambda client: client.push_release_notes(app, notes))

    async def list_released_apps(self) -> ServiceResult[list[AppSummary]]:
        return await self._run(lambda client: client.list_apps(only_released=True))

    async def fetch_app_info(self, bundle_id: str) -> MaybeResult[AppInfo]:
        """App id, name and supported locales for a bundle id."""

        async def lookup(client: AppStoreClient) -> AppInfo | None:
            app_id = await client.locator.find_app_id_by_bundle_id(bundle_id)
            if app_id is None:
                return None
            return AppInfo(
                app_id=app_id,
                name=await client.get_app_name(app_id),
                supported_locales=await client.get_supported_locales(app_id),
            )

        result = await self._run(lookup)
        if not result.success:
            return MaybeResult.miss(result.error)
        if result.data is None:
            return MaybeResult.miss()
        return MaybeResult.hit(result.data)

    async def publish_release_notes(
        self,
        app: RegisteredApp,
        source_text: str,
        translator: Translator,
        source_locale: str = DEFAULT_LOCALE,
    ) -> ServiceResult[DistributionResult]:
        """Translate release notes for every App Store locale and push them."""

        identifier = app.app_store.identifier if app.app_store else None
        skip = check_push_prerequisites(
            store_label=Store.APP_STORE.label(),
            configured=self._settings.app_store_configured,
            identifier_label="Bundle ID",
            identifier=identifier,
            has_data=bool(source_text.strip()),
        )
        if skip:
            return ServiceResult.fail(skip)

        distribution = await distribute_translation(
            app,
            source_text,
            translator,
            source_locale=source_locale,
            store=Store.APP_STORE,
        )
        pushed = await self.push_release_notes(identifier, distribution.translations.app_store)
        if not pushed.success:
            return ServiceResult.fail(pushed.error or "App Store push failed")
        return ServiceResult.ok(distribution)
