from __future__ import annotations

import os
from typing import Mapping
from urllib.parse import urlsplit

from backend.storage import _config as storage_config
from guidescope.codec import DEFAULT_SHARE_BASE_URL
from guidescope.config_ops import MAX_VENDOR_DOC_CHARS


def _require_positive_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw_value = env.get(name, str(default)).strip()
    try:
        parsed = int(raw_value)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer.") from exc
    if parsed <= 0:
        raise RuntimeError(f"{name} must be a positive integer.")
    return parsed


def _require_http_url(env: Mapping[str, str], name: str, default: str) -> str:
    raw_value = env.get(name, default).strip()
    parts = urlsplit(raw_value)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise RuntimeError(f"{name} must be an absolute http(s) URL.")
    return raw_value


def share_base_url(env: Mapping[str, str] | None = None) -> str:
    return _require_http_url(env or os.environ, "GUIDESCOPE_SHARE_BASE_URL", DEFAULT_SHARE_BASE_URL)


def max_vendor_doc_chars(env: Mapping[str, str] | None = None) -> int:
    return _require_positive_int(
        env or os.environ, "GUIDESCOPE_MAX_VENDOR_DOC_CHARS", MAX_VENDOR_DOC_CHARS
    )


def validate_runtime_environment(mode: str, env: Mapping[str, str] | None = None) -> None:
    active_env = env or os.environ

    errors: list[str] = []

    try:
        storage_config(active_env)
    except RuntimeError as exc:
        errors.append(str(exc))

    try:
        share_base_url(active_env)
    except RuntimeError as exc:
        errors.append(str(exc))

    try:
        max_vendor_doc_chars(active_env)
    except RuntimeError as exc:
        errors.append(str(exc))

    if errors:
        error_lines = "\n- ".join(errors)
        raise RuntimeError(f"Invalid runtime environment for {mode}:\n- {error_lines}")
