"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Strict validation and self-documenting fields (Field) without coupling the
  core to I/O libraries.
- Makes it easy to normalize metadata coming from several stores into one
  store-agnostic shape.

Note:
- These models describe *what* the metadata is, not *how* it is fetched.
  Vendor payload schemas live in `adapters.app_store.schemas`.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

from core.domain.store import Store

LocaleMap = dict[str, str]


class Credential(BaseModel):
    """Short-lived signed access token. Replaced on refresh, never mutated."""

    model_config = ConfigDict(frozen=True)

    token: str = Field(..., min_length=1, description="Compact signed token (three base64url segments).")
    expires_at: int = Field(..., description="Expiry as epoch seconds (the `exp` claim).")


class DecodedToken(BaseModel):
    header: dict[str, Any] = Field(default_factory=dict)
    payload: dict[str, Any] = Field(default_factory=dict)
    signature: str = Field(..., min_length=1, description="Base64url signature segment, as issued.")


class VersionRecord(BaseModel):
    id: str = Field(..., min_length=1)
    version_string: str = Field(..., description="Dot-separated non-negative integers, e.g. '1.10.2'.")
    platform: str | None = Field(default=None, description="Store platform (e.g. IOS).")
    state: str | None = Field(default=None, description="Lifecycle state reported by the store, if any.")
    raw: dict[str, Any] = Field(default_factory=dict, repr=False, description="Vendor resource as received.")


class LocalizationRecord(BaseModel):
    """Per-locale editable listing fields attached to one version."""

    id: str = Field(..., min_length=1)
    locale: str | None = Field(default=None, description="IETF language tag (e.g. en-US).")
    description: str | None = None
    keywords: str | None = None
    promotional_text: str | None = None
    support_url: str | None = None
    marketing_url: str | None = None
    whats_new: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict, repr=False, description="Vendor resource as received.")


class CanonicalMetadata(BaseModel):
    """Store-agnostic listing metadata: per field, a locale -> value mapping.

    Every populated mapping has at least one key; an empty mapping is
    normalized to `None`. Locale keys need not match across fields.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: LocaleMap | None = None
    subtitle: LocaleMap | None = None
    description: LocaleMap | None = None
    keywords: LocaleMap | None = None
    support_url: LocaleMap | None = Field(default=None, alias="supportUrl")
    marketing_url: LocaleMap | None = Field(default=None, alias="marketingUrl")
    whats_new: LocaleMap | None = Field(default=None, alias="whatsNew")
    raw: dict[str, Any] = Field(
        default_factory=dict,
        description="Last fetched vendor payloads, kept for diagnostics.",
    )

    @field_validator(
        "name",
        "subtitle",
        "description",
        "keywords",
        "support_url",
        "marketing_url",
        "whats_new",
    )
    @classmethod
    def _empty_mapping_is_none(cls, value: LocaleMap | None) -> LocaleMap | None:
        if not value:
            return None
        return value


class ReleaseNote(BaseModel):
    locale: str = Field(..., min_length=1)
    text: str = Field(..., min_length=1)


class CreateVersionResult(BaseModel):
    version: str
    created: bool = Field(..., description="False when an existing version with the same string was reused.")
    record: VersionRecord
    raw: dict[str, Any] = Field(default_factory=dict)


class AppSummary(BaseModel):
    id: str
    name: str | None = None
    bundle_id: str | None = None
    sku: str | None = None
    is_released: bool = False


class AppInfo(BaseModel):
    app_id: str
    name: str | None = None
    supported_locales: list[str] = Field(default_factory=list)


class StoreListing(BaseModel):
    """One store's side of a registered app."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    identifier: str | None = Field(
        default=None,
        description="Bundle id (App Store) or package name (Google Play).",
    )
    supported_locales: list[str] = Field(default_factory=list, alias="supportedLocales")


class RegisteredApp(BaseModel):
    """Read-only record describing where an app is listed and in which locales."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    slug: str = Field(..., min_length=1)
    name: str | None = None
    app_store: StoreListing | None = Field(default=None, alias="appStore")
    google_play: StoreListing | None = Field(default=None, alias="googlePlay")


class TranslationRequest(BaseModel):
    source_text: str
    source_locale: str
    target_locales: list[str] = Field(default_factory=list)
    store: Store


class StoreTranslations(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    app_store: LocaleMap = Field(default_factory=dict, alias="appStore")
    google_play: LocaleMap = Field(default_factory=dict, alias="googlePlay")

    def for_store(self, store: Store) -> LocaleMap:
        if store is Store.APP_STORE:
            return self.app_store
        if store is Store.GOOGLE_PLAY:
            return self.google_play
        raise ValueError("for_store expects a concrete store, not 'both'")


class DistributionResult(BaseModel):
    translations: StoreTranslations = Field(default_factory=StoreTranslations)
    missing: dict[Store, list[str]] = Field(
        default_factory=dict,
        description="Per store, supported locales left without a translation.",
    )
