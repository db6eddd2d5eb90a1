"""
GuideScope generation engine.

Turns a purpose preset, a difficulty tier and user toggles into a prompt for
domestic (Japanese) medical-AI guideline research plus an ordered list of web
search queries. Everything here is pure and synchronous.
"""

from guidescope.types import (
    AppConfig,
    CategoryItem,
    DifficultyPreset,
    ExtendedSettings,
    GenerateOptions,
    GenerateResult,
    OutputSection,
    PurposePreset,
    ValidationResult,
)
from guidescope.presets import (
    DEFAULT_AUDIENCE_OPTIONS,
    DEFAULT_PRIORITY_DOMAINS,
    DEFAULT_SCOPE_OPTIONS,
    DIFFICULTY_PRESETS,
    PURPOSE_PRESETS,
    create_default_config,
    get_difficulty_preset,
    get_purpose_preset,
)
from guidescope.normalizer import normalize_config, validate_config
from guidescope.settings import (
    apply_difficulty,
    create_default_extended_settings,
    resolve_settings,
    touch_settings,
)
from guidescope.template import render_prompt
from guidescope.queries import generate_search_queries
from guidescope.codec import (
    ConfigDecodeError,
    ConfigParseError,
    config_to_json,
    decode_config_from_link,
    encode_config_to_link,
    is_share_link_too_long,
    load_config_from_link,
    load_config_json,
    parse_config_json,
)
from guidescope.generation import (
    create_config,
    generate,
    generate_from_config,
    generate_prompt,
)

__all__ = [
    "AppConfig",
    "CategoryItem",
    "DifficultyPreset",
    "ExtendedSettings",
    "GenerateOptions",
    "GenerateResult",
    "OutputSection",
    "PurposePreset",
    "ValidationResult",
    "DEFAULT_AUDIENCE_OPTIONS",
    "DEFAULT_PRIORITY_DOMAINS",
    "DEFAULT_SCOPE_OPTIONS",
    "DIFFICULTY_PRESETS",
    "PURPOSE_PRESETS",
    "create_default_config",
    "get_difficulty_preset",
    "get_purpose_preset",
    "normalize_config",
    "validate_config",
    "apply_difficulty",
    "create_default_extended_settings",
    "resolve_settings",
    "touch_settings",
    "render_prompt",
    "generate_search_queries",
    "ConfigDecodeError",
    "ConfigParseError",
    "config_to_json",
    "decode_config_from_link",
    "encode_config_to_link",
    "is_share_link_too_long",
    "load_config_from_link",
    "load_config_json",
    "parse_config_json",
    "create_config",
    "generate",
    "generate_from_config",
    "generate_prompt",
]
