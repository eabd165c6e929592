"""Extraction of session credentials from request headers."""

import base64
import binascii
import json
import logging
from urllib.parse import unquote

from pydantic import ValidationError as PydanticValidationError

from image_catalog.domain.credentials import ExtractedCredentials, SessionCredential

logger = logging.getLogger(__name__)

BASE64_PREFIX = "base64-"
BEARER_SCHEME = "bearer"
DEFAULT_COOKIE_PREFIX = "sb-"
DEFAULT_COOKIE_SUFFIX = "-auth-token"


def extract_credentials(
    cookie_header: str | None,
    authorization_header: str | None,
    *,
    cookie_prefix: str = DEFAULT_COOKIE_PREFIX,
    cookie_suffix: str = DEFAULT_COOKIE_SUFFIX,
) -> ExtractedCredentials:
    """Return the session credential and bearer token found on a request."""
    return ExtractedCredentials(
        session=parse_session_cookie(
            cookie_header, prefix=cookie_prefix, suffix=cookie_suffix
        ),
        bearer_token=parse_bearer_token(authorization_header),
    )


def parse_bearer_token(authorization_header: str | None) -> str | None:
    """Return the token of a `Bearer <token>` authorization header."""
    if not authorization_header:
        return None
    scheme, _, token = authorization_header.strip().partition(" ")
    if scheme.lower() != BEARER_SCHEME:
        return None
    token = token.strip()
    return token or None


def parse_session_cookie(
    cookie_header: str | None,
    *,
    prefix: str = DEFAULT_COOKIE_PREFIX,
    suffix: str = DEFAULT_COOKIE_SUFFIX,
) -> SessionCredential | None:
    """Return the first session cookie that decodes to a credential."""
    if not cookie_header:
        return None
    for name, value in _session_cookie_values(cookie_header, prefix, suffix):
        credential = decode_session_value(value)
        if credential is not None:
            return credential
        logger.warning("Ignoring undecodable session cookie", extra={"cookie": name})
    return None


def decode_session_value(raw_value: str) -> SessionCredential | None:
    """Decode one cookie value into a session credential."""
    value = _url_decode(raw_value.strip())
    if value.startswith(BASE64_PREFIX):
        decoded = _decode_base64(value[len(BASE64_PREFIX) :])
        if decoded is None:
            return None
        value = decoded
    try:
        payload = json.loads(value)
    except ValueError:
        logger.warning("Failed to parse session cookie as JSON")
        return None
    return _to_credential(payload)


def _session_cookie_values(
    cookie_header: str, prefix: str, suffix: str
) -> list[tuple[str, str]]:
    """Return (name, value) pairs for session cookies, reassembling chunks."""
    whole: list[tuple[str, str]] = []
    chunks: dict[str, dict[int, str]] = {}
    for part in cookie_header.split(";"):
        raw_key, separator, raw_value = part.partition("=")
        key = raw_key.strip()
        value = raw_value.strip()
        if not separator or not key or not value:
            continue
        if key.startswith(prefix) and key.endswith(suffix):
            whole.append((key, value))
            continue
        base, dot, index = key.rpartition(".")
        if (
            dot
            and index.isdigit()
            and base.startswith(prefix)
            and base.endswith(suffix)
        ):
            chunks.setdefault(base, {})[int(index)] = value
    seen = {name for name, _ in whole}
    for name, parts in chunks.items():
        if name in seen:
            continue
        ordered = [parts[index] for index in sorted(parts)]
        whole.append((name, "".join(ordered)))
    return whole


def _url_decode(value: str) -> str:
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        logger.warning("Failed to URL-decode session cookie")
        return value


def _decode_base64(encoded: str) -> str | None:
    normalized = encoded.replace("+", "-").replace("/", "_").rstrip("=")
    padded = normalized + "=" * (-len(normalized) % 4)
    try:
        return base64.urlsafe_b64decode(padded).decode("utf-8")
    except (binascii.Error, ValueError):
        logger.warning("Failed to base64-decode session cookie")
        return None


def _to_credential(payload: object) -> SessionCredential | None:
    if isinstance(payload, str):
        return SessionCredential(access_token=payload) if payload else None
    if isinstance(payload, list):
        # Legacy cookie format: [access_token, refresh_token, ...]
        tokens = [item if isinstance(item, str) else None for item in payload[:2]]
        if not tokens or not tokens[0]:
            return None
        refresh_token = tokens[1] if len(tokens) > 1 else None
        return SessionCredential(access_token=tokens[0], refresh_token=refresh_token)
    if not isinstance(payload, dict):
        return None
    try:
        return SessionCredential.model_validate(payload)
    except PydanticValidationError:
        logger.warning("Session cookie has an unexpected shape")
        return None
