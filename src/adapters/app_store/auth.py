"""App Store Connect token issuance (ES256 JWT via PyJWT).

Header `{alg, kid, typ}` and payload `{iss, aud, exp}` as required by the
platform; tokens living longer than 20 minutes are rejected, so the lifetime
is capped regardless of what the caller asks for.
"""

from __future__ import annotations

import time

import jwt

from core.config import AppStoreCredentials
from core.domain.errors import MalformedTokenError
from core.domain.models import Credential, DecodedToken

AUDIENCE = "appstoreconnect-v1"
ALGORITHM = "ES256"
DEFAULT_EXPIRATION_SECONDS = 60 * 10
MAX_EXPIRATION_SECONDS = 60 * 20


def issue_token(
    credentials: AppStoreCredentials,
    *,
    now: int | None = None,
    expiration_seconds: int | None = None,
) -> Credential:
    """Sign a new short-lived token.

    `now` (epoch seconds) exists for deterministic tests.
    """

    now_seconds = int(time.time()) if now is None else int(now)
    lifetime = min(
        DEFAULT_EXPIRATION_SECONDS if expiration_seconds is None else int(expiration_seconds),
        MAX_EXPIRATION_SECONDS,
    )
    expires_at = now_seconds + lifetime

    payload = {
        "iss": credentials.issuer_id,
        "aud": AUDIENCE,
        "exp": expires_at,
    }
    token = jwt.encode(
        payload,
        credentials.private_key,
        algorithm=ALGORITHM,
        headers={"kid": credentials.key_id, "typ": "JWT"},
    )
    return Credential(token=token, expires_at=expires_at)


def decode_token(token: str) -> DecodedToken:
    """Split a token into header, payload and signature without verifying it."""

    parts = token.split(".") if isinstance(token, str) else []
    if len(parts) != 3 or not all(parts):
        raise MalformedTokenError("Invalid token format: expected three non-empty segments")

    try:
        header = jwt.get_unverified_header(token)
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError as exc:
        raise MalformedTokenError(f"Invalid token format: {exc}") from exc

    return DecodedToken(header=header, payload=payload, signature=parts[2])
