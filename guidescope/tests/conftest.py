"""Pytest configuration and shared fixtures for engine tests."""

import json
import tempfile
from pathlib import Path

import pytest

from guidescope.presets import create_default_config
from guidescope.settings import create_default_extended_settings


FIXED_DATE = "2026-02-04"
FIXED_NOW = "2026-02-04T09:00:00+00:00"


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def base_config():
    """Medical-device config with a theme and a fixed date."""
    config = create_default_config("medical-device", today=FIXED_DATE)
    config.query = "AI問診システムの医療機器該当性"
    return config


@pytest.fixture
def professional_config(base_config):
    """Professional-tier config on the medical-device tab."""
    base_config.difficulty_level = "professional"
    return base_config


@pytest.fixture
def default_settings():
    """Default extended settings with a fixed timestamp."""
    return create_default_extended_settings(now=FIXED_NOW)


@pytest.fixture
def schema_dir(temp_dir):
    """Create temporary schema directory with a test schema."""
    schema_path = temp_dir / "schemas"
    schema_path.mkdir()

    test_schema = {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "properties": {
            "id": {"type": "string"},
            "name": {"type": "string"},
        },
        "required": ["id", "name"],
    }

    with open(schema_path / "test.schema.json", "w") as f:
        json.dump(test_schema, f)

    return schema_path
