"""JSON:API response schemas for the App Store Connect resources we touch.

Only the attributes the sync engine reads are modeled; unknown keys are
ignored so schema additions on Apple's side do not break validation.
Resources still keep the dict they were validated from in `payload`, so
diagnostics see every vendor attribute.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict

from core.domain.models import AppSummary, LocalizationRecord, VersionRecord


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class _Resource(_Schema):
    payload: dict[str, Any] = Field(default_factory=dict, exclude=True, repr=False)

    @model_validator(mode="before")
    @classmethod
    def _keep_payload(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {**data, "payload": dict(data)}
        return data


class AppAttributes(_Schema):
    name: str | None = None
    subtitle: str | None = None
    primary_locale: str | None = Field(default=None, alias="primaryLocale")
    bundle_id: str | None = Field(default=None, alias="bundleId")
    sku: str | None = None


class AppResource(_Resource):
    id: str
    type: str = "apps"
    attributes: AppAttributes = Field(default_factory=AppAttributes)

    def to_summary(self, *, is_released: bool = False) -> AppSummary:
        return AppSummary(
            id=self.id,
            name=self.attributes.name,
            bundle_id=self.attributes.bundle_id,
            sku=self.attributes.sku,
            is_released=is_released,
        )


class AppResponse(_Schema):
    data: AppResource


class AppListResponse(_Schema):
    data: list[AppResource] = Field(default_factory=list)


class VersionAttributes(_Schema):
    version_string: str = Field(default="", alias="versionString")
    platform: str | None = None
    app_store_state: str | None = Field(default=None, alias="appStoreState")


class VersionResource(_Resource):
    id: str
    type: str = "appStoreVersions"
    attributes: VersionAttributes = Field(default_factory=VersionAttributes)

    def to_record(self) -> VersionRecord:
        return VersionRecord(
            id=self.id,
            version_string=self.attributes.version_string,
            platform=self.attributes.platform,
            state=self.attributes.app_store_state,
            raw=self.payload,
        )


class VersionResponse(_Schema):
    data: VersionResource


class VersionListResponse(_Schema):
    data: list[VersionResource] = Field(default_factory=list)


class LocalizationAttributes(_Schema):
    locale: str | None = None
    description: str | None = None
    keywords: str | None = None
    promotional_text: str | None = Field(default=None, alias="promotionalText")
    support_url: str | None = Field(default=None, alias="supportUrl")
    marketing_url: str | None = Field(default=None, alias="marketingUrl")
    whats_new: str | None = Field(default=None, alias="whatsNew")


class LocalizationResource(_Resource):
    id: str
    type: str = "appStoreVersionLocalizations"
    attributes: LocalizationAttributes = Field(default_factory=LocalizationAttributes)

    def to_record(self) -> LocalizationRecord:
        return LocalizationRecord(id=self.id, raw=self.payload, **self.attributes.model_dump())


class LocalizationListResponse(_Schema):
    data: list[LocalizationResource] = Field(default_factory=list)
