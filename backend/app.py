from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import datetime, timezone
from time import perf_counter
from typing import Any, Optional
from uuid import uuid4

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Body, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from backend.logging_config import configure_logging
from backend.runtime_config import (
    max_vendor_doc_chars,
    share_base_url,
    validate_runtime_environment,
)
from backend.storage import (
    delete_settings_document,
    load_settings_document,
    save_settings_document,
)
from guidescope.codec import (
    ConfigDecodeError,
    ConfigParseError,
    config_from_payload,
    config_to_json,
    encode_config_to_link,
    is_share_link_too_long,
    load_config_from_link,
    load_config_json,
)
from guidescope.config_ops import cap_vendor_doc_text
from guidescope.generation import generate_from_config
from guidescope.normalizer import normalize_config, validate_config
from guidescope.presets import (
    DIFFICULTY_PRESETS,
    PRESETS_BY_ID,
    PURPOSE_PRESETS,
    create_default_config,
)
from guidescope.schema_validator import DEFAULT_VALIDATOR, EXTENDED_SETTINGS_SCHEMA
from guidescope.settings import (
    create_default_extended_settings,
    merge_settings_payload,
    resolve_settings,
    touch_settings,
)
from guidescope.types import AppConfig, ExtendedSettings


@asynccontextmanager
async def app_lifespan(_: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    validate_runtime_environment("api")
    yield


app = FastAPI(title="GuideScope Prompt Builder API", lifespan=app_lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

LOGGER = logging.getLogger("guidescope.api")


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    request_id = request.headers.get("x-request-id") or str(uuid4())
    request.state.request_id = request_id

    started_at = perf_counter()
    response = await call_next(request)
    duration_ms = (perf_counter() - started_at) * 1000

    response.headers["x-request-id"] = request_id
    LOGGER.info(
        "request.complete",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(duration_ms, 2),
        },
    )
    return response


class ConfigRequest(BaseModel):
    config: dict[str, Any]


class GenerateRequest(BaseModel):
    config: dict[str, Any]
    settings: Optional[dict[str, Any]] = None


class ImportRequest(BaseModel):
    text: Optional[str] = None
    url: Optional[str] = None


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def _parse_config(payload: dict[str, Any]) -> AppConfig:
    try:
        return config_from_payload(payload)
    except ConfigParseError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def _prepare_config(config: AppConfig) -> AppConfig:
    normalized = normalize_config(config)
    return replace(
        normalized,
        vendor_doc_text=cap_vendor_doc_text(normalized.vendor_doc_text, max_vendor_doc_chars()),
    )


def _stored_settings(request: Request) -> Optional[Any]:
    try:
        return load_settings_document()
    except (ValueError, BotoCoreError, ClientError) as exc:
        LOGGER.warning(
            "settings.unreadable",
            extra={"request_id": _request_id(request), "error": str(exc)},
        )
        return None


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "time": _iso_now()}


@app.get("/presets")
def list_presets() -> dict:
    return {
        "presets": [preset.to_dict() for preset in PURPOSE_PRESETS],
        "difficulties": [preset.to_dict() for preset in DIFFICULTY_PRESETS],
    }


@app.get("/presets/{preset_id}")
def get_preset(preset_id: str) -> dict:
    preset = PRESETS_BY_ID.get(preset_id)
    if not preset:
        raise HTTPException(status_code=404, detail="Preset not found.")
    return preset.to_dict()


@app.get("/configs/default")
def default_config(preset_id: str = Query("medical-device")) -> dict:
    if preset_id not in PRESETS_BY_ID:
        raise HTTPException(status_code=404, detail="Preset not found.")
    return create_default_config(preset_id).to_dict()


@app.post("/configs/normalize")
def normalize(body: ConfigRequest) -> dict:
    config = _prepare_config(_parse_config(body.config))
    return {"config": config.to_dict(), "validation": validate_config(config).to_dict()}


@app.post("/generate")
def generate(body: GenerateRequest, request: Request) -> dict:
    config = _prepare_config(_parse_config(body.config))
    validation = validate_config(config)
    if not validation.is_valid:
        raise HTTPException(status_code=422, detail=validation.to_dict())

    stored = body.settings if body.settings is not None else _stored_settings(request)
    result = generate_from_config(config, stored)
    LOGGER.info(
        "prompt.generated",
        extra={
            "request_id": _request_id(request),
            "preset_id": config.active_tab,
            "difficulty": config.difficulty_level,
            "query_count": len(result.search_queries),
            "prompt_chars": len(result.prompt),
            "warning_count": len(validation.warnings),
        },
    )
    return {
        "prompt": result.prompt,
        "searchQueries": result.search_queries,
        "warnings": validation.warnings,
        "config": result.config.to_dict(),
    }


@app.post("/configs/export")
def export_config(body: ConfigRequest) -> dict:
    config = _parse_config(body.config)
    base_url = share_base_url()
    return {
        "json": config_to_json(config),
        "url": encode_config_to_link(config, base_url),
        "tooLong": is_share_link_too_long(config, base_url),
    }


@app.post("/configs/import")
def import_config(body: ImportRequest, request: Request) -> dict:
    if (body.text is None) == (body.url is None):
        raise HTTPException(status_code=400, detail="Provide exactly one of 'text' or 'url'.")

    source = "text" if body.text is not None else "url"
    try:
        if body.text is not None:
            config = load_config_json(body.text)
        else:
            config = load_config_from_link(body.url)
    except (ConfigParseError, ConfigDecodeError) as exc:
        LOGGER.warning(
            "config.import_failed",
            extra={"request_id": _request_id(request), "source": source, "error": str(exc)},
        )
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    config = _prepare_config(config)
    return {"config": config.to_dict(), "validation": validate_config(config).to_dict()}


@app.get("/settings")
def get_settings(request: Request) -> dict:
    return resolve_settings(_stored_settings(request)).to_dict()


@app.put("/settings")
def put_settings(request: Request, payload: dict[str, Any] = Body(...)) -> dict:
    merged = merge_settings_payload(payload)
    try:
        DEFAULT_VALIDATOR.validate(merged, EXTENDED_SETTINGS_SCHEMA)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    settings = touch_settings(ExtendedSettings.from_dict(merged))
    storage_path = save_settings_document(settings.to_dict())
    LOGGER.info(
        "settings.saved",
        extra={"request_id": _request_id(request), "storage_path": storage_path},
    )
    return settings.to_dict()


@app.delete("/settings")
def reset_settings(request: Request) -> dict:
    existed = delete_settings_document()
    LOGGER.info(
        "settings.reset",
        extra={"request_id": _request_id(request), "source": "stored" if existed else "defaults"},
    )
    return create_default_extended_settings().to_dict()
