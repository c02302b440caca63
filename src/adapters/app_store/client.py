"""App Store metadata synchronizer.

Pull reads the app plus the latest version's primary-locale localization
into `CanonicalMetadata`; push writes one locale back, patching the
existing localization or creating it. Calls are issued one after another
(app -> version -> localization) to respect rate limits and keep the
resolution ordered.
"""

from __future__ import annotations

import logging

from adapters.app_store.constants import (
    APP_LIST_LIMIT,
    APP_RESOURCE_TYPE,
    APP_STORE_PLATFORM,
    APPS_PATH,
    LOCALIZATION_RESOURCE_TYPE,
    RELEASE_NOTES_VERSION_LIMIT,
    RELEASED_APP_STATE,
    VERSION_LOCALIZATIONS_PATH,
    VERSION_RESOURCE_TYPE,
    VERSIONS_PATH,
)
from adapters.app_store.locator import ResourceLocator
from adapters.app_store.schemas import AppListResponse, AppResponse, VersionResponse
from core.domain.errors import NoVersionError
from core.domain.models import (
    AppSummary,
    CanonicalMetadata,
    CreateVersionResult,
    ReleaseNote,
)
from core.domain.store import DEFAULT_LOCALE
from core.interfaces.transport import Transport

logger = logging.getLogger(__name__)

# Order in which metadata fields are scanned to pick the push target locale.
LOCALE_PRECEDENCE = (
    "description",
    "keywords",
    "subtitle",
    "name",
    "support_url",
    "marketing_url",
    "whats_new",
)

# Canonical field -> appStoreVersionLocalizations attribute.
_LOCALIZATION_ATTRIBUTES = {
    "description": "description",
    "keywords": "keywords",
    "subtitle": "promotionalText",
    "support_url": "supportUrl",
    "marketing_url": "marketingUrl",
    "whats_new": "whatsNew",
}


def pick_locale(metadata: CanonicalMetadata) -> str | None:
    """First key of the first populated field, in `LOCALE_PRECEDENCE` order."""

    for field_name in LOCALE_PRECEDENCE:
        mapping = getattr(metadata, field_name)
        if mapping:
            return next(iter(mapping))
    return None


def localization_attributes(metadata: CanonicalMetadata, locale: str) -> dict[str, str]:
    """Attributes to send for `locale`; fields without a value are left out."""

    attributes: dict[str, str] = {}
    for field_name, attribute in _LOCALIZATION_ATTRIBUTES.items():
        mapping = getattr(metadata, field_name) or {}
        value = mapping.get(locale)
        if value is not None:
            attributes[attribute] = value
    return attributes


class AppStoreClient:
    def __init__(self, transport: Transport, locator: ResourceLocator | None = None) -> None:
        self._transport = transport
        self.locator = locator or ResourceLocator(transport)

    async def pull_metadata(self, app: str) -> CanonicalMetadata:
        """Read name/subtitle/description/... for the app's primary locale."""

        app_id = await self.locator.ensure_app_id(app)
        app_payload = await self._transport.get(f"{APPS_PATH}/{app_id}")
        app_res = AppResponse.model_validate(app_payload)
        attrs = app_res.data.attributes
        primary_locale = attrs.primary_locale or DEFAULT_LOCALE

        version = await self.locator.get_latest_version(app_id)
        localization = None
        if version is not None:
            localization = await self.locator.get_localization_for_locale(version.id, primary_locale)

        def one(value: str | None) -> dict[str, str] | None:
            return {primary_locale: value} if value else None

        loc = localization
        return CanonicalMetadata(
            name=one(attrs.name),
            subtitle=one((loc.promotional_text if loc else None) or attrs.subtitle),
            description=one(loc.description if loc else None),
            keywords=one(loc.keywords if loc else None),
            support_url=one(loc.support_url if loc else None),
            marketing_url=one(loc.marketing_url if loc else None),
            whats_new=one(loc.whats_new if loc else None),
            raw={
                "app": app_payload,
                "version": version.raw if version else None,
                "localization": localization.raw if localization else None,
            },
        )

    async def push_metadata(self, app: str, metadata: CanonicalMetadata) -> None:
        """Upsert the version localization keyed by (latest version, target locale).

        An existing localization is patched with only the provided attributes;
        otherwise a new one is created and linked to the version. Nothing is
        written when no attribute has a value for the target locale.
        """

        app_id = await self.locator.ensure_app_id(app)
        target_locale = pick_locale(metadata) or DEFAULT_LOCALE

        version = await self.locator.get_latest_version(app_id)
        if version is None:
            raise NoVersionError(app_id)

        attributes = localization_attributes(metadata, target_locale)
        if not attributes:
            logger.info("No localization attributes to push for %s; skipping write", target_locale)
            return

        existing = await self.locator.get_localization_for_locale(version.id, target_locale)

        if existing is not None:
            logger.info("Patching %s localization %s (%s)", target_locale, existing.id, ", ".join(attributes))
            await self._transport.patch(
                f"{VERSION_LOCALIZATIONS_PATH}/{existing.id}",
                {
                    "data": {
                        "type": LOCALIZATION_RESOURCE_TYPE,
                        "id": existing.id,
                        "attributes": attributes,
                    }
                },
            )
            return

        logger.info("Creating %s localization for version %s", target_locale, version.version_string)
        await self._transport.post(
            VERSION_LOCALIZATIONS_PATH,
            {
                "data": {
                    "type": LOCALIZATION_RESOURCE_TYPE,
                    "attributes": {"locale": target_locale, **attributes},
                    "relationships": {
                        "appStoreVersion": {
                            "data": {"type": VERSION_RESOURCE_TYPE, "id": version.id},
                        }
                    },
                }
            },
        )

    async def push_release_notes(self, app: str, notes: dict[str, str]) -> list[str]:
        """Write one "what's new" text per locale; returns the locales written."""

        written: list[str] = []
        for locale, text in notes.items():
            if not text:
                continue
            await self.push_metadata(app, CanonicalMetadata(whats_new={locale: text}))
            written.append(locale)
        return written

    async def create_version(self, app: str, version_string: str) -> CreateVersionResult:
        """Create an App Store version unless one with the same string exists."""

        app_id = await self.locator.ensure_app_id(app)
        existing = await self.locator.get_version_by_string(app_id, version_string)
        if existing is not None:
            logger.info("Version %s already exists for app %s", version_string, app_id)
            return CreateVersionResult(version=version_string, created=False, record=existing)

        payload = await self._transport.post(
            VERSIONS_PATH,
            {
                "data": {
                    "type": VERSION_RESOURCE_TYPE,
                    "attributes": {
                        "platform": APP_STORE_PLATFORM,
                        "versionString": version_string,
                    },
                    "relationships": {
                        "app": {"data": {"type": APP_RESOURCE_TYPE, "id": app_id}},
                    },
                }
            },
        )
        created = VersionResponse.model_validate(payload)
        return CreateVersionResult(
            version=version_string,
            created=True,
            record=created.data.to_record(),
            raw=payload,
        )

    async def pull_release_notes(self, app: str) -> list[ReleaseNote]:
        """Every non-empty "what's new" across recent versions, in fetch order.

        The same locale may appear once per version.
        """

        app_id = await self.locator.ensure_app_id(app)
        versions = await self.locator.list_versions(app_id, RELEASE_NOTES_VERSION_LIMIT)

        notes: list[ReleaseNote] = []
        for version in versions:
            for loc in await self.locator.list_localizations(version.id):
                if loc.locale and loc.whats_new:
                    notes.append(ReleaseNote(locale=loc.locale, text=loc.whats_new))
        return notes

    async def list_apps(self, *, only_released: bool = False) -> list[AppSummary]:
        res: AppListResponse = await self._transport.get(
            APPS_PATH,
            params={"limit": APP_LIST_LIMIT},
            model=AppListResponse,
        )
        apps: list[AppSummary] = []
        for item in res.data:
            released = False
            if only_released:
                live = await self.locator.list_versions(item.id, 1, state=RELEASED_APP_STATE)
                released = bool(live)
                if not released:
                    continue
            apps.append(item.to_summary(is_released=released))
        return apps

    async def get_supported_locales(self, app: str) -> list[str]:
        """Locales that have a localization on the latest version."""

        app_id = await self.locator.ensure_app_id(app)
        version = await self.locator.get_latest_version(app_id)
        if version is None:
            return []
        locales: list[str] = []
        for loc in await self.locator.list_localizations(version.id):
            if loc.locale and loc.locale not in locales:
                locales.append(loc.locale)
        return locales

    async def get_app_name(self, app_id: str) -> str | None:
        res: AppResponse = await self._transport.get(f"{APPS_PATH}/{app_id}", model=AppResponse)
        return res.data.attributes.name

