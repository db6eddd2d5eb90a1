from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from guidescope.settings import SETTINGS_STORAGE_KEY


SETTINGS_CATEGORY = "settings"


@dataclass(frozen=True)
class StorageConfig:
    mode: str
    local_dir: Path
    s3_bucket: Optional[str]
    s3_prefix: Optional[str]
    s3_endpoint_url: Optional[str]
    s3_region: Optional[str]


def _validate_config(config: StorageConfig) -> None:
    if config.mode not in {"local", "s3"}:
        raise RuntimeError("STORAGE_MODE must be either 'local' or 's3'.")

    if config.mode == "local" and config.local_dir.exists() and not config.local_dir.is_dir():
        raise RuntimeError("GUIDESCOPE_STORAGE_DIR must point to a directory.")

    if config.mode == "s3":
        if not config.s3_bucket:
            raise RuntimeError("S3_BUCKET must be set for S3 storage.")
        if not config.s3_prefix:
            raise RuntimeError("S3_PREFIX must be a non-empty path segment for S3 storage.")


def _config(env: Mapping[str, str] | None = None) -> StorageConfig:
    active_env = env or os.environ
    mode = active_env.get("STORAGE_MODE", "local")
    local_dir = Path(active_env.get("GUIDESCOPE_STORAGE_DIR", "storage")).resolve()
    config = StorageConfig(
        mode=mode,
        local_dir=local_dir,
        s3_bucket=active_env.get("S3_BUCKET"),
        s3_prefix=active_env.get("S3_PREFIX", "guidescope"),
        s3_endpoint_url=active_env.get("S3_ENDPOINT_URL"),
        s3_region=active_env.get("AWS_REGION") or active_env.get("S3_REGION"),
    )
    _validate_config(config)
    return config


def _s3_client(cfg: StorageConfig):
    import boto3

    return boto3.client(
        "s3",
        region_name=cfg.s3_region,
        endpoint_url=cfg.s3_endpoint_url,
    )


def _settings_filename() -> str:
    return f"{SETTINGS_STORAGE_KEY}.json"


def _s3_key(cfg: StorageConfig) -> str:
    return f"{cfg.s3_prefix}/{SETTINGS_CATEGORY}/{_settings_filename()}"


def _local_path(cfg: StorageConfig) -> Path:
    target = cfg.local_dir / SETTINGS_CATEGORY / _settings_filename()
    target.parent.mkdir(parents=True, exist_ok=True)
    return target


def load_settings_document(env: Mapping[str, str] | None = None) -> Optional[Any]:
    """Load the stored extended-settings override, or None when nothing is stored.

    Raises:
        json.JSONDecodeError: If the stored document is not valid JSON
    """
    cfg = _config(env)
    if cfg.mode == "s3":
        client = _s3_client(cfg)
        try:
            response = client.get_object(Bucket=cfg.s3_bucket, Key=_s3_key(cfg))
        except client.exceptions.NoSuchKey:
            return None
        return json.loads(response["Body"].read().decode("utf-8"))

    path = _local_path(cfg)
    if not path.exists():
        return None
    return json.loads(path.read_text(encoding="utf-8"))


def save_settings_document(payload: Mapping[str, Any], env: Mapping[str, str] | None = None) -> str:
    """Persist the settings document and return its storage path."""
    cfg = _config(env)
    body = json.dumps(payload, indent=2, ensure_ascii=False) + "\n"
    if cfg.mode == "s3":
        key = _s3_key(cfg)
        _s3_client(cfg).put_object(
            Bucket=cfg.s3_bucket, Key=key, Body=body.encode("utf-8")
        )
        return f"s3://{cfg.s3_bucket}/{key}"

    target = _local_path(cfg)
    # Write next to the target and swap in, so readers never see a partial file.
    fd, tmp_name = tempfile.mkstemp(dir=target.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(body)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return str(target)


def delete_settings_document(env: Mapping[str, str] | None = None) -> bool:
    """Remove the stored settings document; returns whether one existed."""
    cfg = _config(env)
    if cfg.mode == "s3":
        _s3_client(cfg).delete_object(Bucket=cfg.s3_bucket, Key=_s3_key(cfg))
        return True

    path = _local_path(cfg)
    if not path.exists():
        return False
    path.unlink()
    return True
