"""Config export/import as JSON text and as share links.

Share links carry the config as ``?c=<base64>``, where the base64 payload wraps
the percent-encoded compact JSON. The format matches links produced by the
browser front end, so links can be exchanged between the two.

``load_*`` functions raise on bad input; ``parse_*``/``decode_*`` wrap them and
return ``None`` instead.
"""

from __future__ import annotations

import base64
import json
from typing import Any, Optional
from urllib.parse import parse_qs, quote, unquote, urlsplit, urlunsplit

from guidescope.presets import create_default_config
from guidescope.schema_validator import APP_CONFIG_SCHEMA, DEFAULT_VALIDATOR
from guidescope.types import AppConfig


DEFAULT_SHARE_BASE_URL = "http://localhost:3000/"
MAX_SHARE_LINK_LENGTH = 2000
SHARE_PARAM = "c"

# Characters left unescaped by JavaScript's encodeURIComponent.
_URI_COMPONENT_SAFE = "-_.!~*'()"


class ConfigParseError(ValueError):
    """Config JSON could not be read as an AppConfig."""


class ConfigDecodeError(ValueError):
    """A share link did not contain a readable config."""


def config_to_json(config: AppConfig) -> str:
    return json.dumps(config.to_dict(), indent=2, ensure_ascii=False)


def config_from_payload(payload: Any) -> AppConfig:
    """
    Build an AppConfig from a decoded JSON value.

    Fields absent from the payload are filled from the default config of its
    ``activeTab``. No normalization is applied.

    Raises:
        ConfigParseError: If the payload is not an object with ``activeTab`` or
            does not conform to the app-config schema
    """
    if not isinstance(payload, dict):
        raise ConfigParseError("Config JSON must be an object.")
    if "activeTab" not in payload:
        raise ConfigParseError("Config JSON is missing activeTab.")
    try:
        DEFAULT_VALIDATOR.validate(payload, APP_CONFIG_SCHEMA)
    except ValueError as exc:
        raise ConfigParseError(str(exc)) from exc

    merged = create_default_config(payload["activeTab"]).to_dict()
    merged.update(payload)
    return AppConfig.from_dict(merged)


def load_config_json(text: str) -> AppConfig:
    """Parse exported config JSON, raising ConfigParseError on failure."""
    try:
        payload = json.loads(text)
    except (TypeError, json.JSONDecodeError) as exc:
        raise ConfigParseError(f"Invalid config JSON: {exc}") from exc
    return config_from_payload(payload)


def parse_config_json(text: str) -> Optional[AppConfig]:
    try:
        return load_config_json(text)
    except ConfigParseError:
        return None


def _link_base(base_url: str) -> str:
    parts = urlsplit(base_url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def encode_config_to_link(config: AppConfig, base_url: str = DEFAULT_SHARE_BASE_URL) -> str:
    """Encode ``config`` into a share link rooted at ``base_url``.

    Any query string or fragment on ``base_url`` is dropped.
    """
    compact = json.dumps(config.to_dict(), ensure_ascii=False, separators=(",", ":"))
    escaped = quote(compact, safe=_URI_COMPONENT_SAFE)
    encoded = base64.b64encode(escaped.encode("ascii")).decode("ascii")
    return f"{_link_base(base_url)}?{SHARE_PARAM}={encoded}"


def load_config_from_link(url: str) -> AppConfig:
    """
    Decode a share link back into an AppConfig.

    Args:
        url: Absolute URL carrying the ``c`` query parameter

    Returns:
        The decoded config, not normalized

    Raises:
        ConfigDecodeError: If the URL, its parameter, or the payload is malformed
    """
    try:
        parts = urlsplit(url)
        values = parse_qs(parts.query).get(SHARE_PARAM)
    except ValueError as exc:
        raise ConfigDecodeError(f"Share link is not a valid URL: {exc}") from exc
    if not parts.scheme or not parts.netloc:
        raise ConfigDecodeError("Share link must be an absolute URL.")

    if not values or not values[0]:
        raise ConfigDecodeError("Share link has no config parameter.")

    # Unescaped '+' in the base64 payload arrives as a space after query parsing.
    encoded = values[0].replace(" ", "+")
    try:
        escaped = base64.b64decode(encoded, validate=True).decode("ascii")
        text = unquote(escaped, errors="strict")
    except ValueError as exc:
        raise ConfigDecodeError(f"Share link payload is not valid: {exc}") from exc

    try:
        return load_config_json(text)
    except ConfigParseError as exc:
        raise ConfigDecodeError(str(exc)) from exc


def decode_config_from_link(url: str) -> Optional[AppConfig]:
    try:
        return load_config_from_link(url)
    except ConfigDecodeError:
        return None


def is_share_link_too_long(config: AppConfig, base_url: str = DEFAULT_SHARE_BASE_URL) -> bool:
    return len(encode_config_to_link(config, base_url)) > MAX_SHARE_LINK_LENGTH
