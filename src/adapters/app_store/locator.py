"""Resource location in the App Store Connect graph.

Resolves human identifiers (numeric id, bundle id, store URL) to an app id,
then the app's current version and the localization record for a locale.
Nothing is cached: every top-level operation resolves fresh so concurrent
edits made in App Store Connect are picked up.
"""

from __future__ import annotations

import logging
import re
from functools import cmp_to_key

from adapters.app_store.constants import (
    APP_STORE_PLATFORM,
    APPS_PATH,
    LATEST_VERSION_FETCH_LIMIT,
    LOCALIZATION_FETCH_LIMIT,
    VERSION_LOOKUP_LIMIT,
    VERSIONS_PATH,
)
from adapters.app_store.schemas import (
    AppListResponse,
    LocalizationListResponse,
    VersionListResponse,
)
from core.domain.errors import AppNotFoundError, VendorRequestError
from core.domain.models import LocalizationRecord, VersionRecord
from core.interfaces.transport import Transport

logger = logging.getLogger(__name__)

# Store URLs look like https://apps.apple.com/us/app/app-name/id1234567890
_STORE_ID_RE = re.compile(r"id(\d{6,})")
_NUMERIC_RE = re.compile(r"^\d+$")
_LEADING_DIGITS_RE = re.compile(r"\d+")


def _segment(part: str) -> int:
    match = _LEADING_DIGITS_RE.match(part.strip())
    return int(match.group()) if match else 0


def compare_version_strings(a: str, b: str) -> int:
    """Compare dot-separated versions numerically.

    Missing trailing segments count as 0, as do segments without leading
    digits (`""`, `"beta"`); `"1.0b"` compares equal to `"1.0"`. The first
    non-zero segment difference is returned, so only the sign is meaningful.
    """

    pa = [_segment(part) for part in (a or "").split(".")]
    pb = [_segment(part) for part in (b or "").split(".")]
    for i in range(max(len(pa), len(pb))):
        diff = (pa[i] if i < len(pa) else 0) - (pb[i] if i < len(pb) else 0)
        if diff != 0:
            return diff
    return 0


_LATEST_KEY = cmp_to_key(
    lambda a, b: compare_version_strings(a.version_string, b.version_string)
)


class ResourceLocator:
    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def extract_app_id(self, value: str) -> str | None:
        """Pull an app id out of a store URL, or look up a bundle id.

        URLs never hit the network. Inputs with a dot are treated as bundle
        ids; anything else is not resolvable.
        """

        match = _STORE_ID_RE.search(value)
        if match:
            return match.group(1)

        if "." in value:
            return await self.find_app_id_by_bundle_id(value)
        return None

    async def ensure_app_id(self, value: str) -> str:
        """Like `extract_app_id`, but numeric ids short-circuit and a miss raises."""

        value = value.strip()
        if _NUMERIC_RE.match(value):
            return value

        app_id = await self.extract_app_id(value)
        if not app_id:
            raise AppNotFoundError(value)
        return app_id

    async def resolve_app_id(self, identifier: str) -> str:
        return await self.ensure_app_id(identifier)

    async def find_app_id_by_bundle_id(self, bundle_id: str) -> str | None:
        res: AppListResponse = await self._transport.get(
            APPS_PATH,
            params={"filter[bundleId]": bundle_id},
            model=AppListResponse,
        )
        if not res.data:
            logger.info("No app matches bundle id %s", bundle_id)
            return None
        return res.data[0].id

    async def list_versions(
        self,
        app_id: str,
        limit: int = LATEST_VERSION_FETCH_LIMIT,
        *,
        state: str | None = None,
    ) -> list[VersionRecord]:
        params: dict[str, object] = {"filter[platform]": APP_STORE_PLATFORM, "limit": limit}
        if state:
            params["filter[appStoreState]"] = state
        res: VersionListResponse = await self._transport.get(
            f"{APPS_PATH}/{app_id}/appStoreVersions",
            params=params,
            model=VersionListResponse,
        )
        return [item.to_record() for item in res.data]

    async def get_latest_version(self, app_id: str) -> VersionRecord | None:
        """Highest version by version-string ordering, not server order or date."""

        versions = await self.list_versions(app_id, LATEST_VERSION_FETCH_LIMIT)
        if not versions:
            return None
        # max() keeps the first of equal versions.
        return max(versions, key=_LATEST_KEY)

    async def get_version_by_string(self, app_id: str, version_string: str) -> VersionRecord | None:
        versions = await self.list_versions(app_id, VERSION_LOOKUP_LIMIT)
        for version in versions:
            if version.version_string == version_string:
                return version
        return None

    async def list_localizations(self, version_id: str) -> list[LocalizationRecord]:
        res: LocalizationListResponse = await self._transport.get(
            f"{VERSIONS_PATH}/{version_id}/appStoreVersionLocalizations",
            params={"limit": LOCALIZATION_FETCH_LIMIT},
            model=LocalizationListResponse,
        )
        return [item.to_record() for item in res.data]

    async def get_localization_for_locale(
        self,
        version_id: str,
        locale: str,
        *,
        server_filter: bool = True,
    ) -> LocalizationRecord | None:
        """Find the localization of `version_id` for `locale`.

        Tries a server-side `filter[locale]` first. If the platform rejects
        the filter (HTTP 400) or ignores it, scans the full list instead.
        """

        if server_filter:
            try:
                res: LocalizationListResponse = await self._transport.get(
                    f"{VERSIONS_PATH}/{version_id}/appStoreVersionLocalizations",
                    params={"filter[locale]": locale, "limit": 1},
                    model=LocalizationListResponse,
                )
            except VendorRequestError as exc:
                if exc.status != 400:
                    raise
                logger.info("Locale filter rejected for version %s; scanning localizations", version_id)
            else:
                if not res.data:
                    return None
                record = res.data[0].to_record()
                if record.locale == locale:
                    return record
                logger.info("Locale filter ignored for version %s; scanning localizations", version_id)

        for record in await self.list_localizations(version_id):
            if record.locale == locale:
                return record
        return None
