from __future__ import annotations

from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[2]
sys.path.append(str(ROOT))

from backend.runtime_config import (
    max_vendor_doc_chars,
    share_base_url,
    validate_runtime_environment,
)


def test_local_defaults_are_valid(tmp_path):
    env = {"GUIDESCOPE_STORAGE_DIR": str(tmp_path / "storage")}

    validate_runtime_environment("api", env=env)


def test_surfaces_storage_validation_errors():
    env = {
        "STORAGE_MODE": "s3",
        "S3_PREFIX": "",
    }

    with pytest.raises(RuntimeError, match="S3_BUCKET must be set for S3 storage"):
        validate_runtime_environment("api", env=env)


def test_storage_dir_must_not_be_a_file(tmp_path):
    blocker = tmp_path / "storage"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(RuntimeError, match="GUIDESCOPE_STORAGE_DIR must point to a directory"):
        validate_runtime_environment("api", env={"GUIDESCOPE_STORAGE_DIR": str(blocker)})


@pytest.mark.parametrize("value", ["ftp://example.jp/", "example.jp", "https://"])
def test_share_base_url_must_be_http(tmp_path, value):
    env = {"GUIDESCOPE_STORAGE_DIR": str(tmp_path), "GUIDESCOPE_SHARE_BASE_URL": value}

    with pytest.raises(RuntimeError, match="GUIDESCOPE_SHARE_BASE_URL must be an absolute http"):
        validate_runtime_environment("api", env=env)


@pytest.mark.parametrize(
    "value,message",
    [
        ("many", "must be an integer"),
        ("0", "must be a positive integer"),
        ("-5", "must be a positive integer"),
    ],
)
def test_max_vendor_doc_chars_must_be_positive(tmp_path, value, message):
    env = {"GUIDESCOPE_STORAGE_DIR": str(tmp_path), "GUIDESCOPE_MAX_VENDOR_DOC_CHARS": value}

    with pytest.raises(RuntimeError, match=message):
        validate_runtime_environment("api", env=env)


def test_reports_every_error_at_once():
    env = {
        "STORAGE_MODE": "s3",
        "GUIDESCOPE_SHARE_BASE_URL": "nope",
        "GUIDESCOPE_MAX_VENDOR_DOC_CHARS": "0",
    }

    with pytest.raises(RuntimeError) as exc_info:
        validate_runtime_environment("api", env=env)

    message = str(exc_info.value)
    assert message.startswith("Invalid runtime environment for api:")
    assert message.count("\n- ") == 3


def test_runtime_values_are_read():
    env = {
        "GUIDESCOPE_SHARE_BASE_URL": " https://guidescope.example.jp/app ",
        "GUIDESCOPE_MAX_VENDOR_DOC_CHARS": "1200",
    }

    assert share_base_url(env) == "https://guidescope.example.jp/app"
    assert max_vendor_doc_chars(env) == 1200


def test_runtime_value_defaults(monkeypatch):
    monkeypatch.delenv("GUIDESCOPE_SHARE_BASE_URL", raising=False)
    monkeypatch.delenv("GUIDESCOPE_MAX_VENDOR_DOC_CHARS", raising=False)

    assert share_base_url() == "http://localhost:3000/"
    assert max_vendor_doc_chars() == 60_000
