"""Registered app records (read-only).

Supported format:
- {"apps": [{"slug": ..., "appStore": {...}, "googlePlay": {...}}, ...]}

The file is owned by whoever maintains the local source of truth; this
module only loads and looks up entries.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field

from core.config import AppSettings, get_user_config_dir
from core.domain.models import RegisteredApp

REGISTERED_APPS_FILENAME = "registered-apps.json"


class RegisteredAppsFile(BaseModel):
    apps: list[RegisteredApp] = Field(default_factory=list)


def get_default_registered_apps_path(settings: AppSettings | None = None) -> Path | None:
    """Look for the registered apps file in common locations.

    Order:
    1) the configured path (ASO_SYNC_REGISTERED_APPS_PATH)
    2) ./<filename> (cwd)
    3) the per-user config directory
    """

    settings = settings or AppSettings()
    candidates: list[Path] = []
    if settings.registered_apps_path:
        candidates.append(settings.registered_apps_path.expanduser())
    candidates.append(Path.cwd() / REGISTERED_APPS_FILENAME)
    candidates.append(get_user_config_dir() / REGISTERED_APPS_FILENAME)
    for p in candidates:
        if p.exists() and p.is_file():
            return p
    return None


def load_registered_apps(path: Path) -> RegisteredAppsFile:
    raw = path.read_text(encoding="utf-8")
    data = json.loads(raw)
    return RegisteredAppsFile.model_validate(data)


def find_registered_app(apps: RegisteredAppsFile, key: str) -> RegisteredApp | None:
    """Match by slug, bundle id or package name."""

    for app in apps.apps:
        if app.slug == key:
            return app
        if app.app_store and app.app_store.identifier == key:
            return app
        if app.google_play and app.google_play.identifier == key:
            return app
    return None
