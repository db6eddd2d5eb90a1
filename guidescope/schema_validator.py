"""JSON Schema validation for imported configs and stored settings."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from jsonschema import Draft202012Validator


SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"

APP_CONFIG_SCHEMA = "app-config.schema.json"
EXTENDED_SETTINGS_SCHEMA = "extended-settings.schema.json"


class SchemaValidator:
    """Validates payloads against the bundled JSON schemas, caching compiled validators."""

    def __init__(self, base_dir: Optional[Path] = None):
        """
        Initialize validator with schema directory.

        Args:
            base_dir: Directory containing JSON schema files, defaults to the
                schemas shipped with the package
        """
        self.base_dir = base_dir or SCHEMA_DIR
        self._validator_cache: Dict[str, Draft202012Validator] = {}

    def _load_validator(self, schema_name: str) -> Draft202012Validator:
        if schema_name not in self._validator_cache:
            schema_path = self.base_dir / schema_name
            with schema_path.open("r", encoding="utf-8") as handle:
                schema = json.load(handle)
            self._validator_cache[schema_name] = Draft202012Validator(schema)
        return self._validator_cache[schema_name]

    def validate(self, payload: Any, schema_name: str) -> None:
        """
        Validate a payload against a named schema.

        Args:
            payload: Decoded JSON value to validate
            schema_name: Name of schema file (e.g., "app-config.schema.json")

        Raises:
            ValueError: If validation fails, listing every failing path
        """
        try:
            validator = self._load_validator(schema_name)
        except FileNotFoundError as e:
            raise ValueError(f"Schema file not found: {schema_name}") from e
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in schema {schema_name}: {e}") from e

        errors = sorted(validator.iter_errors(payload), key=lambda error: [str(p) for p in error.path])
        if not errors:
            return

        message_lines = [f"Schema validation failed ({schema_name}):"]
        for error in errors:
            error_path = ".".join(str(p) for p in error.path) if error.path else "root"
            message_lines.append(f"- At '{error_path}': {error.message}")
        raise ValueError("\n".join(message_lines))

    def is_valid(self, payload: Any, schema_name: str) -> bool:
        return self._load_validator(schema_name).is_valid(payload)


DEFAULT_VALIDATOR = SchemaValidator()
