"""One-call generation API built on the resolver, assembler and query generator."""

from __future__ import annotations

import copy
from typing import Any, Mapping, Optional, Tuple

from guidescope.presets import (
    DEFAULT_PRIORITY_DOMAINS,
    STANDARD_AUDIENCES,
    STANDARD_SCOPE,
    get_difficulty_preset,
    get_purpose_preset,
    preset_categories,
    preset_keyword_chips,
    today_iso,
)
from guidescope.queries import generate_search_queries as _build_queries
from guidescope.settings import apply_difficulty, resolve_settings
from guidescope.template import render_prompt
from guidescope.types import (
    AppConfig,
    ExtendedSettings,
    GenerateOptions,
    GenerateResult,
)


def create_config(options: GenerateOptions) -> AppConfig:
    """Build a ready-to-generate config from simplified options.

    Search log and proof mode are on only for professional difficulty; the
    e-Gov cross-reference stays off unless the difficulty preset enables it.
    """
    preset = get_purpose_preset(options.preset)
    professional = options.difficulty == "professional"
    return AppConfig(
        date_today=options.date or today_iso(),
        query=options.query,
        scope=list(options.scope) if options.scope is not None else list(STANDARD_SCOPE),
        audiences=(
            list(options.audiences) if options.audiences is not None else list(STANDARD_AUDIENCES)
        ),
        difficulty_level=options.difficulty,
        vendor_doc_text="",
        three_ministry_guidelines=True,
        official_domain_priority=True,
        site_operator=True,
        latest_version_priority=True,
        pdf_direct_link=True,
        include_search_log=professional,
        egov_cross_reference=False,
        proof_mode=professional,
        categories=preset_categories(preset),
        keyword_chips=preset_keyword_chips(preset),
        custom_keywords=list(options.custom_keywords or []),
        exclude_keywords=[],
        priority_domains=(
            list(options.priority_domains)
            if options.priority_domains is not None
            else list(DEFAULT_PRIORITY_DOMAINS)
        ),
        active_tab=options.preset,
    )


def effective_inputs(
    config: AppConfig, stored_settings: Optional[Mapping[str, Any]] = None
) -> Tuple[ExtendedSettings, AppConfig]:
    """Resolve stored settings and overlay the config's difficulty preset."""
    settings = resolve_settings(stored_settings)
    return apply_difficulty(settings, get_difficulty_preset(config.difficulty_level), config)


def generate_from_config(
    config: AppConfig, stored_settings: Optional[Mapping[str, Any]] = None
) -> GenerateResult:
    """
    Generate the prompt and query list for a config.

    The caller is expected to have normalized and validated ``config``.

    Args:
        config: Normalized config
        stored_settings: Partial extended-settings override, or None for defaults

    Returns:
        GenerateResult carrying a copy of the input config
    """
    settings, effective = effective_inputs(config, stored_settings)
    return GenerateResult(
        prompt=render_prompt(effective, settings),
        search_queries=_build_queries(effective, settings),
        config=copy.deepcopy(config),
    )


def generate(options: GenerateOptions) -> GenerateResult:
    return generate_from_config(create_config(options))


def generate_prompt(options: GenerateOptions) -> str:
    return generate(options).prompt


def generate_search_queries(options: GenerateOptions) -> list[str]:
    return generate(options).search_queries
