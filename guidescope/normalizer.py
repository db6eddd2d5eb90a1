"""Config repair and validation.

``normalize_config`` enforces the difficulty-tier invariants on a config and
``validate_config`` reports what blocks generation. Both are pure: the input is
never mutated.
"""

from __future__ import annotations

import copy

from guidescope.presets import (
    STANDARD_ACTIVE_TAB,
    STANDARD_AUDIENCES,
    STANDARD_SCOPE,
    get_purpose_preset,
    preset_categories,
    preset_keyword_chips,
)
from guidescope.types import AppConfig, ValidationResult


QUERY_REQUIRED_ERROR = "探索テーマを入力してください"
OFFICIAL_DOMAIN_WARNING = "公式ドメイン優先がオフです。非公式情報が混入する可能性があります。"
LATEST_VERSION_WARNING = "最新版優先がオフです。旧版のガイドラインが含まれる可能性があります。"
EGOV_DATE_WARNING = "e-Gov法令クロスリファレンスがオンですが、日付が未入力です。"


def normalize_config(config: AppConfig) -> AppConfig:
    """Return a repaired copy of ``config``.

    Standard difficulty is locked to the clinical-operation profile (tab,
    audiences, scope); its categories and keyword chips are re-derived when the
    tab had to be switched or a list is empty. Professional difficulty only
    repairs empty category or keyword-chip lists from the active tab's preset.
    The query and vendor document text are never touched.

    Applying this twice gives the same result as applying it once.
    """
    result = copy.deepcopy(config)

    if result.difficulty_level == "standard":
        tab_switched = result.active_tab != STANDARD_ACTIVE_TAB
        preset = get_purpose_preset(STANDARD_ACTIVE_TAB)
        result.active_tab = STANDARD_ACTIVE_TAB
        result.audiences = list(STANDARD_AUDIENCES)
        result.scope = list(STANDARD_SCOPE)
        if tab_switched or not result.categories:
            result.categories = preset_categories(preset)
        if tab_switched or not result.keyword_chips:
            result.keyword_chips = preset_keyword_chips(preset)
    elif result.difficulty_level == "professional":
        preset = get_purpose_preset(result.active_tab)
        if not result.categories:
            result.categories = preset_categories(preset)
        if not result.keyword_chips:
            result.keyword_chips = preset_keyword_chips(preset)

    return result


def validate_config(config: AppConfig) -> ValidationResult:
    errors: list[str] = []
    warnings: list[str] = []

    if not config.query.strip():
        errors.append(QUERY_REQUIRED_ERROR)

    if not config.official_domain_priority:
        warnings.append(OFFICIAL_DOMAIN_WARNING)

    if not config.latest_version_priority:
        warnings.append(LATEST_VERSION_WARNING)

    if config.egov_cross_reference and not config.date_today:
        warnings.append(EGOV_DATE_WARNING)

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)
