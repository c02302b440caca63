import pytest

from adapters.app_store.locator import ResourceLocator, compare_version_strings
from conftest import install_app, localization, version
from core.domain.errors import AppNotFoundError, VendorRequestError


class TestCompareVersionStrings:
    def test_numeric_segments(self):
        assert compare_version_strings("1.2.0", "1.10.0") < 0

    def test_missing_segments_are_zero(self):
        assert compare_version_strings("1.2", "1.2.0") == 0

    def test_major_wins(self):
        assert compare_version_strings("2", "1.9.9") > 0

    def test_equal(self):
        assert compare_version_strings("3.0.1", "3.0.1") == 0

    def test_non_numeric_segments_count_as_zero(self):
        assert compare_version_strings("1.0b", "1.0") == 0
        assert compare_version_strings("", "0.1") < 0
        assert compare_version_strings("2.beta", "2.0.1") < 0


class TestAppIdResolution:
    async def test_store_url_needs_no_network(self, fake_transport):
        locator = ResourceLocator(fake_transport)

        app_id = await locator.extract_app_id("https://apps.apple.com/us/app/x/id1234567890")

        assert app_id == "1234567890"
        assert fake_transport.calls == []

    async def test_bundle_id_is_looked_up(self, fake_transport):
        install_app(fake_transport, app_id="555000", bundle_id="com.example.app")
        locator = ResourceLocator(fake_transport)

        assert await locator.extract_app_id("com.example.app") == "555000"
        (call,) = fake_transport.calls
        assert call.path == "v1/apps"
        assert call.params == {"filter[bundleId]": "com.example.app"}

    async def test_unknown_shape_is_not_resolved(self, fake_transport):
        locator = ResourceLocator(fake_transport)

        assert await locator.extract_app_id("example") is None
        assert fake_transport.calls == []

    async def test_numeric_id_short_circuits(self, fake_transport):
        locator = ResourceLocator(fake_transport)

        assert await locator.ensure_app_id("987") == "987"
        assert fake_transport.calls == []

    async def test_missing_bundle_id_raises(self, fake_transport):
        install_app(fake_transport, bundle_id="com.example.app")
        locator = ResourceLocator(fake_transport)

        with pytest.raises(AppNotFoundError):
            await locator.resolve_app_id("com.example.other")


class TestVersions:
    async def test_latest_is_highest_version_string(self, fake_transport):
        install_app(
            fake_transport,
            app_id="1",
            versions=[version("a", "1.2.0"), version("b", "1.10.0"), version("c", "1.9")],
        )
        locator = ResourceLocator(fake_transport)

        latest = await locator.get_latest_version("1")

        assert latest.id == "b"
        call = fake_transport.calls[0]
        assert call.params == {"filter[platform]": "IOS", "limit": 10}

    async def test_latest_tolerates_missing_version_string(self, fake_transport):
        blank = {"id": "x", "type": "appStoreVersions", "attributes": {"platform": "IOS"}}
        install_app(fake_transport, app_id="1", versions=[blank, version("a", "1.0")])

        latest = await ResourceLocator(fake_transport).get_latest_version("1")

        assert latest.id == "a"

    async def test_latest_is_none_without_versions(self, fake_transport):
        install_app(fake_transport, app_id="1", versions=[])
        assert await ResourceLocator(fake_transport).get_latest_version("1") is None

    async def test_version_by_string_is_exact(self, fake_transport):
        install_app(fake_transport, app_id="1", versions=[version("a", "1.2"), version("b", "1.2.0")])
        locator = ResourceLocator(fake_transport)

        found = await locator.get_version_by_string("1", "1.2.0")

        assert found.id == "b"
        assert await locator.get_version_by_string("1", "1.2.1") is None
        assert fake_transport.calls[0].params["limit"] == 50


class TestLocalizationLookup:
    async def test_server_side_filter(self, fake_transport):
        install_app(
            fake_transport,
            localizations={"v1": [localization("l-en", "en-US"), localization("l-fr", "fr-FR")]},
        )
        locator = ResourceLocator(fake_transport)

        record = await locator.get_localization_for_locale("v1", "fr-FR")

        assert record.id == "l-fr"
        assert fake_transport.calls[0].params == {"filter[locale]": "fr-FR", "limit": 1}
        assert len(fake_transport.calls) == 1

    async def test_no_match_returns_none(self, fake_transport):
        install_app(fake_transport, localizations={"v1": [localization("l-en", "en-US")]})
        assert await ResourceLocator(fake_transport).get_localization_for_locale("v1", "ja") is None

    async def test_rejected_filter_falls_back_to_scan(self, fake_transport):
        locs = [localization("l-en", "en-US"), localization("l-de", "de-DE")]

        def handler(params, _body):
            if "filter[locale]" in params:
                return VendorRequestError("bad filter", status=400, body={"errors": []})
            return {"data": locs}

        fake_transport.add("GET", "v1/appStoreVersions/v1/appStoreVersionLocalizations", handler)
        locator = ResourceLocator(fake_transport)

        record = await locator.get_localization_for_locale("v1", "de-DE")

        assert record.id == "l-de"
        assert fake_transport.calls[1].params == {"limit": 200}

    async def test_ignored_filter_falls_back_to_scan(self, fake_transport):
        locs = [localization("l-en", "en-US"), localization("l-de", "de-DE")]
        fake_transport.add(
            "GET",
            "v1/appStoreVersions/v1/appStoreVersionLocalizations",
            lambda params, _body: {"data": locs[: params.get("limit", 200)]},
        )

        record = await ResourceLocator(fake_transport).get_localization_for_locale("v1", "de-DE")

        assert record.id == "l-de"
        assert len(fake_transport.calls) == 2

    async def test_other_vendor_errors_propagate(self, fake_transport):
        fake_transport.add(
            "GET",
            "v1/appStoreVersions/v1/appStoreVersionLocalizations",
            VendorRequestError("forbidden", status=403),
        )

        with pytest.raises(VendorRequestError):
            await ResourceLocator(fake_transport).get_localization_for_locale("v1", "en-US")
