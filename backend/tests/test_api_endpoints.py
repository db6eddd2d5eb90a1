from __future__ import annotations

from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[2]
sys.path.append(str(ROOT))

pytest.importorskip("fastapi")
try:
    from fastapi.testclient import TestClient
except RuntimeError as exc:  # pragma: no cover - dependency guard for CI/runtime
    if "httpx" in str(exc):
        TestClient = None
    else:
        raise

if TestClient is None:
    pytestmark = pytest.mark.skip(reason="fastapi.testclient requires httpx")

import backend.app as app_module
from guidescope.presets import create_default_config


@pytest.fixture
def client(monkeypatch, tmp_path):
    monkeypatch.setenv("GUIDESCOPE_STORAGE_DIR", str(tmp_path / "storage"))
    monkeypatch.setenv("GUIDESCOPE_SHARE_BASE_URL", "https://guidescope.example.jp/")
    monkeypatch.delenv("STORAGE_MODE", raising=False)
    monkeypatch.delenv("GUIDESCOPE_MAX_VENDOR_DOC_CHARS", raising=False)
    return TestClient(app_module.app)


def _config_payload(**overrides) -> dict:
    payload = create_default_config("medical-device", today="2026-02-04").to_dict()
    payload["query"] = "AI問診システムの医療機器該当性"
    payload.update(overrides)
    return payload


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_list_presets(client):
    body = client.get("/presets").json()

    assert [preset["id"] for preset in body["presets"]] == [
        "medical-device",
        "clinical-operation",
        "research-ethics",
        "generative-ai",
    ]
    assert [preset["id"] for preset in body["difficulties"]] == ["standard", "professional"]


def test_get_preset_and_missing_preset(client):
    found = client.get("/presets/generative-ai")
    missing = client.get("/presets/cardiology")

    assert found.status_code == 200
    assert found.json()["categories"][0] == "生成AIの利用"
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Preset not found."


def test_default_config(client):
    response = client.get("/configs/default", params={"preset_id": "research-ethics"})

    assert response.status_code == 200
    assert response.json()["activeTab"] == "research-ethics"
    assert client.get("/configs/default", params={"preset_id": "nope"}).status_code == 404


def test_normalize_applies_standard_lock(client):
    response = client.post("/configs/normalize", json={"config": _config_payload(query="")})

    body = response.json()
    assert response.status_code == 200
    assert body["config"]["activeTab"] == "clinical-operation"
    assert body["config"]["audiences"] == ["医療機関"]
    assert body["validation"]["isValid"] is False


def test_normalize_caps_vendor_doc(client, monkeypatch):
    monkeypatch.setenv("GUIDESCOPE_MAX_VENDOR_DOC_CHARS", "10")

    response = client.post(
        "/configs/normalize", json={"config": _config_payload(vendorDocText="x" * 25)}
    )

    assert response.json()["config"]["vendorDocText"] == "x" * 10 + "\n\n...(省略: 15文字)...\n"


def test_generate_professional(client):
    response = client.post(
        "/generate", json={"config": _config_payload(difficultyLevel="professional")}
    )

    body = response.json()
    assert response.status_code == 200
    assert "3省2ガイドライン" in body["prompt"]
    assert "e-Gov" in body["prompt"]
    assert len(body["searchQueries"]) == 10
    assert body["warnings"] == []
    assert body["config"]["difficultyLevel"] == "professional"


def test_generate_with_inline_settings(client):
    response = client.post(
        "/generate",
        json={
            "config": _config_payload(),
            "settings": {"template": {"customInstructions": "表形式で回答"}},
        },
    )

    assert response.status_code == 200
    assert "# カスタム指示\n表形式で回答" in response.json()["prompt"]


def test_generate_blank_query_is_rejected(client):
    response = client.post("/generate", json={"config": _config_payload(query="  ")})

    assert response.status_code == 422
    assert response.json()["detail"]["isValid"] is False
    assert response.json()["detail"]["errors"]


@pytest.mark.parametrize(
    "config",
    [
        {"query": "no tab"},
        {"activeTab": "medical-device", "difficultyLevel": "expert"},
    ],
)
def test_generate_malformed_config(client, config):
    response = client.post("/generate", json={"config": config})

    assert response.status_code == 422


def test_generate_warns_on_disabled_toggles(client):
    response = client.post(
        "/generate", json={"config": _config_payload(officialDomainPriority=False)}
    )

    assert response.status_code == 200
    assert len(response.json()["warnings"]) == 1


def test_export_then_import_by_url(client):
    exported = client.post("/configs/export", json={"config": _config_payload()}).json()

    assert exported["json"].startswith("{\n")
    assert exported["url"].startswith("https://guidescope.example.jp/?c=")
    assert isinstance(exported["tooLong"], bool)

    imported = client.post("/configs/import", json={"url": exported["url"]})

    assert imported.status_code == 200
    assert imported.json()["config"]["query"] == "AI問診システムの医療機器該当性"
    assert imported.json()["config"]["activeTab"] == "clinical-operation"


def test_import_by_text(client):
    exported = client.post("/configs/export", json={"config": _config_payload()}).json()

    imported = client.post("/configs/import", json={"text": exported["json"]})

    assert imported.status_code == 200
    assert imported.json()["validation"]["isValid"] is True


@pytest.mark.parametrize("body", [{}, {"text": "{}", "url": "https://example.jp/?c=e30="}])
def test_import_requires_exactly_one_source(client, body):
    response = client.post("/configs/import", json=body)

    assert response.status_code == 400


@pytest.mark.parametrize(
    "body",
    [
        {"text": "{broken"},
        {"url": "https://example.jp/"},
        {"url": "https://example.jp/?c=***"},
        {"url": "https://example.jp/?c=%E3%81%82"},
        {"url": "http://[::1/?c=abc"},
    ],
)
def test_import_failures_are_unprocessable(client, body):
    response = client.post("/configs/import", json=body)

    assert response.status_code == 422


def test_settings_lifecycle(client, tmp_path):
    initial = client.get("/settings").json()
    assert initial["search"]["maxResults"] == 20
    assert initial["version"] == 1

    saved = client.put("/settings", json={"template": {"customInstructions": "簡潔に"}})
    assert saved.status_code == 200
    assert saved.json()["template"]["customInstructions"] == "簡潔に"
    assert (tmp_path / "storage" / "settings" / "medai_extended_settings_v1.json").exists()

    assert client.get("/settings").json()["template"]["customInstructions"] == "簡潔に"
    generated = client.post("/generate", json={"config": _config_payload()}).json()
    assert "# カスタム指示\n簡潔に" in generated["prompt"]

    reset = client.delete("/settings")
    assert reset.status_code == 200
    assert reset.json()["template"]["customInstructions"] == ""
    assert client.get("/settings").json()["template"]["customInstructions"] == ""


def test_put_invalid_settings_is_rejected(client, tmp_path):
    response = client.put("/settings", json={"search": {"priorityRule": "newest"}})

    assert response.status_code == 422
    assert "priorityRule" in response.json()["detail"]
    assert not (tmp_path / "storage" / "settings" / "medai_extended_settings_v1.json").exists()


def test_unreadable_stored_settings_fall_back_to_defaults(client, tmp_path):
    target = tmp_path / "storage" / "settings" / "medai_extended_settings_v1.json"
    target.parent.mkdir(parents=True)
    target.write_text("{broken", encoding="utf-8")

    response = client.get("/settings")

    assert response.status_code == 200
    assert response.json()["search"]["maxResults"] == 20


def test_non_utf8_stored_settings_fall_back_to_defaults(client, tmp_path):
    target = tmp_path / "storage" / "settings" / "medai_extended_settings_v1.json"
    target.parent.mkdir(parents=True)
    target.write_bytes(b"\xff\xfe{")

    response = client.get("/settings")
    generated = client.post("/generate", json={"config": _config_payload()})

    assert response.status_code == 200
    assert response.json()["search"]["maxResults"] == 20
    assert generated.status_code == 200


def test_storage_client_error_falls_back_to_defaults(client, monkeypatch):
    from botocore.exceptions import ClientError

    def _denied():
        raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "GetObject")

    monkeypatch.setattr(app_module, "load_settings_document", _denied)

    response = client.get("/settings")

    assert response.status_code == 200
    assert response.json()["template"]["customInstructions"] == ""
