"""Core configuration.

Why here:
- Centralizes environment variables (pydantic-settings) without polluting
  the CLI.
- Lets adapters (HTTP, App Store auth) read config consistently.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.errors import AuthConfigMissingError


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "aso-sync"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "aso-sync"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "aso-sync"
    return Path.home() / ".config" / "aso-sync"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str], env_path: Path | None = None) -> Path:
    """Write/update variables in the user's global .env."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# aso-sync user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppStoreCredentials(BaseModel):
    """Signing material for App Store Connect tokens."""

    issuer_id: str = Field(..., min_length=1)
    key_id: str = Field(..., min_length=1)
    private_key: str = Field(..., min_length=1, description="PEM encoded EC (P-256) private key.")


class AppSettings(BaseSettings):
    """Central application configuration.

    Why pydantic-settings:
    - Typing + validation at the edge (env vars) keeps the core free of
      parsing logic.
    - A single configuration contract for CLI, services and adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="ASO_SYNC_",
        extra="ignore",
        case_sensitive=False,
        # Project .env first (dev), then the per-user config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    app_store_issuer_id: str | None = Field(
        default=None,
        description="App Store Connect API issuer id.",
    )
    app_store_key_id: str | None = Field(
        default=None,
        description="App Store Connect API key id.",
    )
    app_store_private_key: str | None = Field(
        default=None,
        description="Inline PEM private key (takes precedence over the path).",
    )
    app_store_private_key_path: Path | None = Field(
        default=None,
        description="Path to the .p8 private key downloaded from App Store Connect.",
    )
    app_store_base_url: str = Field(
        default="https://api.appstoreconnect.apple.com/",
        min_length=8,
        description="Base URL of the App Store Connect API.",
    )

    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout (seconds).",
    )
    user_agent: str = Field(
        default="aso-sync/0.1",
        min_length=1,
        description="User-Agent sent to store APIs.",
    )
    token_expiration_seconds: int = Field(
        default=600,
        ge=1,
        le=1200,
        description="Lifetime of issued App Store tokens; the platform rejects more than 20 minutes.",
    )

    registered_apps_path: Path | None = Field(
        default=None,
        description="JSON file listing registered apps and their supported locales.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Root log level used by the CLI.",
    )

    @property
    def app_store_configured(self) -> bool:
        return bool(
            self.app_store_issuer_id
            and self.app_store_key_id
            and (self.app_store_private_key or self.app_store_private_key_path)
        )


def load_app_store_credentials(settings: AppSettings) -> AppStoreCredentials:
    """Build credentials from settings, reading the key file when needed.

    Raises `AuthConfigMissingError` naming every missing piece.
    """

    missing: list[str] = []
    if not settings.app_store_issuer_id:
        missing.append("issuer id")
    if not settings.app_store_key_id:
        missing.append("key id")

    private_key = settings.app_store_private_key
    if not private_key and settings.app_store_private_key_path:
        key_path = settings.app_store_private_key_path.expanduser()
        if key_path.is_file():
            private_key = key_path.read_text(encoding="utf-8")
    if not private_key:
        missing.append("private key")

    if missing:
        raise AuthConfigMissingError(missing)

    return AppStoreCredentials(
        issuer_id=settings.app_store_issuer_id,
        key_id=settings.app_store_key_id,
        # .env files commonly store the PEM with literal "\n".
        private_key=private_key.replace("\\n", "\n"),
    )
