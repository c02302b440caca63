import httpx
import pytest

from conftest import install_app, localization, version
from core.config import AppSettings
from core.domain.errors import TranslationUnavailableError, VendorRequestError
from core.domain.models import CanonicalMetadata, RegisteredApp
from core.domain.store import Store
from core.services.app_store_service import AppStoreService

APP_ID = "1234567890"


@pytest.fixture
def service(settings, fake_transport, session_factory_for) -> AppStoreService:
    return AppStoreService(settings, session_factory=session_factory_for(fake_transport))


@pytest.fixture
def unconfigured() -> AppSettings:
    return AppSettings(
        _env_file=None,
        app_store_issuer_id=None,
        app_store_key_id=None,
        app_store_private_key=None,
        app_store_private_key_path=None,
    )


class TestVerifyAuth:
    def test_returns_decoded_token(self, service):
        result = service.verify_auth(300)

        assert result.success
        assert result.data.header["kid"] == "ABC123KEY"
        assert result.data.payload["aud"] == "appstoreconnect-v1"

    def test_missing_configuration(self, unconfigured):
        result = AppStoreService(unconfigured).verify_auth()

        assert not result.success
        assert result.error.startswith("App Store auth:")
        assert "issuer id" in result.error

    def test_invalid_private_key(self):
        settings = AppSettings(
            _env_file=None,
            app_store_issuer_id="I",
            app_store_key_id="K",
            app_store_private_key="not a pem",
        )

        result = AppStoreService(settings).verify_auth()

        assert not result.success
        assert result.error.startswith("App Store auth:")


class TestEnvelopes:
    async def test_pull_success(self, service, fake_transport):
        install_app(
            fake_transport,
            app_id=APP_ID,
            versions=[version("v1", "1.0")],
            localizations={"v1": [localization("l", "en-US", description="Hello")]},
        )

        result = await service.pull_metadata("com.example.app")

        assert result.success
        assert result.data.description == {"en-US": "Hello"}

    async def test_unknown_app_is_a_failure(self, service, fake_transport):
        install_app(fake_transport, app_id=APP_ID)

        result = await service.pull_metadata("com.example.unknown")

        assert not result.success
        assert result.error.startswith("Resource locator:")

    async def test_no_version_is_a_failure(self, service, fake_transport):
        install_app(fake_transport, app_id=APP_ID, versions=[])

        result = await service.push_metadata(APP_ID, CanonicalMetadata(description={"en-US": "x"}))

        assert not result.success
        assert "create a version first" in result.error

    async def test_vendor_error_includes_sanitized_body(self, service, fake_transport):
        fake_transport.add(
            "GET",
            f"v1/apps/{APP_ID}/appStoreVersions",
            VendorRequestError(
                "App Store request failed: 401 Unauthorized",
                status=401,
                body={"errors": [{"detail": "Bearer abc.def.ghi\nexpired"}]},
            ),
        )

        result = await service.pull_release_notes(APP_ID)

        assert not result.success
        assert result.error.startswith("App Store API: App Store request failed: 401")
        assert "abc.def.ghi" not in result.error
        assert "\n" not in result.error

    async def test_transport_errors_are_failures(self, service, fake_transport):
        fake_transport.add("GET", f"v1/apps/{APP_ID}/appStoreVersions", httpx.ConnectTimeout("timed out"))

        result = await service.create_version(APP_ID, "1.0")

        assert not result.success
        assert "ConnectTimeout" in result.error

    async def test_unexpected_errors_propagate(self, service, fake_transport):
        fake_transport.add("GET", f"v1/apps/{APP_ID}/appStoreVersions", RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            await service.pull_release_notes(APP_ID)

    async def test_missing_auth_config_is_a_failure(self, unconfigured, fake_transport, session_factory_for):
        service = AppStoreService(unconfigured, session_factory=session_factory_for(fake_transport))

        result = await service.pull_metadata(APP_ID)

        assert not result.success
        assert "not configured" in result.error
        assert fake_transport.calls == []


class TestFetchAppInfo:
    async def test_found(self, service, fake_transport):
        install_app(
            fake_transport,
            app_id=APP_ID,
            app_attributes={"name": "Example"},
            versions=[version("v1", "1.0")],
            localizations={"v1": [localization("a", "en-US"), localization("b", "ja")]},
        )

        result = await service.fetch_app_info("com.example.app")

        assert result.found
        assert result.data.app_id == APP_ID
        assert result.data.name == "Example"
        assert result.data.supported_locales == ["en-US", "ja"]

    async def test_not_found(self, service, fake_transport):
        install_app(fake_transport, app_id=APP_ID)

        result = await service.fetch_app_info("com.example.missing")

        assert not result.found
        assert result.error is None

    async def test_error(self, service, fake_transport):
        fake_transport.add("GET", "v1/apps", VendorRequestError("forbidden", status=403))

        result = await service.fetch_app_info("com.example.app")

        assert not result.found
        assert result.error.startswith("App Store API:")


class TestPublishReleaseNotes:
    class Translator:
        async def translate(self, text, *, source_locale, target_locale):
            if target_locale == "de-DE":
                raise TranslationUnavailableError(target_locale)
            return f"{text} [{target_locale}]"

    async def test_pushes_available_translations(self, service, fake_transport):
        install_app(
            fake_transport,
            app_id=APP_ID,
            versions=[version("v1", "1.0")],
            localizations={"v1": [localization("l-en", "en-US")]},
        )
        fake_transport.add("PATCH", "v1/appStoreVersionLocalizations/l-en", None)
        fake_transport.add("POST", "v1/appStoreVersionLocalizations", {"data": {"id": "new"}})
        app = RegisteredApp.model_validate(
            {
                "slug": "example",
                "appStore": {"identifier": "com.example.app", "supportedLocales": ["en-US", "fr-FR", "de-DE"]},
            }
        )

        result = await service.publish_release_notes(app, "Fixes", self.Translator())

        assert result.success
        assert result.data.missing == {Store.APP_STORE: ["de-DE"]}
        assert fake_transport.calls_for("PATCH")[0].body["data"]["attributes"] == {"whatsNew": "Fixes"}
        assert fake_transport.calls_for("POST")[0].body["data"]["attributes"] == {
            "locale": "fr-FR",
            "whatsNew": "Fixes [fr-FR]",
        }

    async def test_skips_without_bundle_id(self, service, fake_transport):
        app = RegisteredApp(slug="play-only")

        result = await service.publish_release_notes(app, "Fixes", self.Translator())

        assert not result.success
        assert "no Bundle ID provided" in result.error
        assert fake_transport.calls == []
