"""Error taxonomy.

Adapters raise these typed exceptions; the service layer converts them into
`ServiceResult` / `MaybeResult` failures so callers never see them for the
expected failure paths (missing auth, unknown app, no version, vendor
rejection, missing translation).

Anything that is not a `SyncError` (malformed JSON on a 2xx, schema drift)
is a programming or platform error and is allowed to propagate.
"""

from __future__ import annotations

import re
from typing import Any

_MAX_BODY_CHARS = 300
_BEARER_RE = re.compile(r"(Bearer\s+)[A-Za-z0-9\-_\.=]+", re.IGNORECASE)
_WS_RE = re.compile(r"\s+")


class SyncError(Exception):
    """Base class for expected failures of the sync engine."""

    subsystem = "ASO Sync"


class AuthConfigMissingError(SyncError):
    """Issuer id, key id or private key is not configured."""

    subsystem = "App Store auth"

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        names = ", ".join(self.missing) or "credentials"
        super().__init__(f"App Store credentials are not configured (missing: {names})")


class MalformedTokenError(SyncError):
    subsystem = "App Store auth"


class AppNotFoundError(SyncError):
    subsystem = "Resource locator"

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"App not found for identifier: {identifier}")


class NoVersionError(SyncError):
    subsystem = "Metadata sync"

    def __init__(self, app_id: str) -> None:
        self.app_id = app_id
        super().__init__(f"No App Store version found for app {app_id}; create a version first")


class VendorRequestError(SyncError):
    """Non-2xx response from a store API."""

    subsystem = "App Store API"

    def __init__(self, message: str, *, status: int, body: Any = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body

    @property
    def is_auth_failure(self) -> bool:
        return self.status == 401

    @property
    def is_state_conflict(self) -> bool:
        """409 with a STATE_ERROR code: the resource is not editable in its current state."""

        if self.status != 409:
            return False
        return any(str(code).startswith("STATE_ERROR") for code in self.error_codes())

    def error_codes(self) -> list[str]:
        if not isinstance(self.body, dict):
            return []
        errors = self.body.get("errors")
        if not isinstance(errors, list):
            return []
        return [e.get("code") for e in errors if isinstance(e, dict) and e.get("code")]


class TranslationUnavailableError(SyncError):
    subsystem = "Locale distribution"

    def __init__(self, locale: str, reason: str | None = None) -> None:
        self.locale = locale
        message = f"No translation available for {locale}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


def sanitize_body(body: Any, max_chars: int = _MAX_BODY_CHARS) -> str:
    """Flatten a response body into a short single-line excerpt."""

    if body is None:
        return ""
    text = body if isinstance(body, str) else repr(body)
    text = _BEARER_RE.sub(r"\1***", text)
    text = _WS_RE.sub(" ", text).strip()
    if len(text) <= max_chars:
        return text
    return text[: max_chars - 1].rstrip() + "…"


def describe_error(exc: BaseException) -> str:
    """Render an error as `<subsystem>: <message>` for users."""

    if not isinstance(exc, SyncError):
        return str(exc) or exc.__class__.__name__

    message = f"{exc.subsystem}: {exc}"
    if isinstance(exc, VendorRequestError):
        if exc.is_auth_failure:
            message += " (check issuer id, key id and private key)"
        elif exc.is_state_conflict:
            message += " (the resource is not editable in its current state)"
        excerpt = sanitize_body(exc.body)
        if excerpt:
            message += f" | {excerpt}"
    return message
