"""App Store Connect policy constants.

Page sizes encode the rate/latency trade-off chosen for each lookup; keep
them here instead of inlining literals at call sites.
"""

from __future__ import annotations

APP_STORE_PLATFORM = "IOS"

LATEST_VERSION_FETCH_LIMIT = 10
RELEASE_NOTES_VERSION_LIMIT = 20
VERSION_LOOKUP_LIMIT = 50
LOCALIZATION_FETCH_LIMIT = 200
APP_LIST_LIMIT = 200

RELEASED_APP_STATE = "READY_FOR_SALE"

APPS_PATH = "v1/apps"
VERSIONS_PATH = "v1/appStoreVersions"
VERSION_LOCALIZATIONS_PATH = "v1/appStoreVersionLocalizations"

VERSION_RESOURCE_TYPE = "appStoreVersions"
LOCALIZATION_RESOURCE_TYPE = "appStoreVersionLocalizations"
APP_RESOURCE_TYPE = "apps"
