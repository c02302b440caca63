from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Callable

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from core.config import AppSettings, AppStoreCredentials


@dataclass
class Call:
    method: str
    path: str
    params: dict[str, Any] = field(default_factory=dict)
    body: Any = None


class FakeTransport:
    """In-memory `Transport`: routes (method, path) to payloads or handlers.

    A handler receives `(params, body)` and returns a payload or an
    exception instance to raise.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.calls: list[Call] = []

    def add(self, method: str, path: str, response: Any) -> None:
        self.routes[(method, path)] = response

    def calls_for(self, method: str, path: str | None = None) -> list[Call]:
        return [c for c in self.calls if c.method == method and (path is None or c.path == path)]

    async def _dispatch(self, method: str, path: str, params: Any = None, body: Any = None) -> Any:
        params = dict(params or {})
        self.calls.append(Call(method, path, params, body))
        if (method, path) not in self.routes:
            raise AssertionError(f"unexpected request: {method} {path} {params}")
        handler = self.routes[(method, path)]
        result = handler(params, body) if callable(handler) else handler
        if isinstance(result, Exception):
            raise result
        return result

    async def get(self, path, *, params=None, model=None):
        payload = await self._dispatch("GET", path, params=params)
        return model.model_validate(payload) if model is not None else payload

    async def post(self, path, body, *, model=None):
        payload = await self._dispatch("POST", path, body=body)
        return model.model_validate(payload) if model is not None else payload

    async def patch(self, path, body):
        await self._dispatch("PATCH", path, body=body)


def version(id_: str, version_string: str) -> dict[str, Any]:
    return {
        "id": id_,
        "type": "appStoreVersions",
        "attributes": {"versionString": version_string, "platform": "IOS"},
    }


def localization(id_: str, locale: str, **attributes: Any) -> dict[str, Any]:
    return {
        "id": id_,
        "type": "appStoreVersionLocalizations",
        "attributes": {"locale": locale, **attributes},
    }


def install_app(
    fake: FakeTransport,
    *,
    app_id: str = "1234567890",
    bundle_id: str = "com.example.app",
    app_attributes: dict[str, Any] | None = None,
    versions: list[dict[str, Any]] | None = None,
    localizations: dict[str, list[dict[str, Any]]] | None = None,
) -> None:
    """Register the routes of one app with its versions and localizations."""

    attributes = {"name": "Example", "bundleId": bundle_id, **(app_attributes or {})}
    app = {"id": app_id, "type": "apps", "attributes": attributes}
    versions = versions if versions is not None else []
    localizations = localizations or {}

    def apps(params: dict[str, Any], _body: Any) -> dict[str, Any]:
        wanted = params.get("filter[bundleId]")
        if wanted is None or wanted == bundle_id:
            return {"data": [app]}
        return {"data": []}

    fake.add("GET", "v1/apps", apps)
    fake.add("GET", f"v1/apps/{app_id}", {"data": app})
    fake.add("GET", f"v1/apps/{app_id}/appStoreVersions", lambda p, b: {"data": versions[: p.get("limit", 10)]})

    for version_id, locs in localizations.items():

        def list_locs(params: dict[str, Any], _body: Any, locs=locs) -> dict[str, Any]:
            wanted = params.get("filter[locale]")
            items = [loc for loc in locs if wanted is None or loc["attributes"]["locale"] == wanted]
            return {"data": items[: params.get("limit", 200)]}

        fake.add("GET", f"v1/appStoreVersions/{version_id}/appStoreVersionLocalizations", list_locs)


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture(scope="session")
def ec_key_pair() -> tuple[str, str]:
    key = ec.generate_private_key(ec.SECP256R1())
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


@pytest.fixture
def credentials(ec_key_pair) -> AppStoreCredentials:
    return AppStoreCredentials(issuer_id="ISSUER-ID-TEST", key_id="ABC123KEY", private_key=ec_key_pair[0])


@pytest.fixture
def settings(ec_key_pair) -> AppSettings:
    return AppSettings(
        _env_file=None,
        app_store_issuer_id="ISSUER-ID-TEST",
        app_store_key_id="ABC123KEY",
        app_store_private_key=ec_key_pair[0],
        app_store_private_key_path=None,
    )


@pytest.fixture
def session_factory_for() -> Callable[[FakeTransport], Callable]:
    def build(transport: FakeTransport):
        @asynccontextmanager
        async def factory(_credentials, _settings):
            yield transport

        return factory

    return build
