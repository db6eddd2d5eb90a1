"""Field-level setters for AppConfig.

Every operation returns a new config and leaves its argument untouched, so
callers can keep the previous value for undo or comparison.
"""

from __future__ import annotations

import copy
from dataclasses import replace
from typing import Literal

from guidescope.normalizer import normalize_config
from guidescope.presets import (
    PRESETS_BY_ID,
    create_default_config,
    preset_categories,
    preset_keyword_chips,
)
from guidescope.types import AppConfig, CategoryItem, DifficultyLevel


MAX_VENDOR_DOC_CHARS = 60_000

MoveDirection = Literal["up", "down"]


def _updated(config: AppConfig, **changes) -> AppConfig:
    return replace(copy.deepcopy(config), **changes)


def cap_vendor_doc_text(text: str | None, limit: int = MAX_VENDOR_DOC_CHARS) -> str:
    """Truncate a vendor document excerpt to ``limit`` characters.

    Truncated text ends with a note giving the number of omitted characters.
    """
    value = text or ""
    if len(value) <= limit:
        return value
    omitted = len(value) - limit
    return f"{value[:limit]}\n\n...(省略: {omitted:,}文字)...\n"


def parse_keyword_lines(text: str) -> list[str]:
    """Split textarea input into one keyword per non-blank line."""
    return [line.strip() for line in text.split("\n") if line.strip()]


def switch_tab(config: AppConfig, tab_id: str) -> AppConfig:
    """Activate a purpose tab and reseed categories and keyword chips from it.

    Unknown tab ids leave the config as it is.
    """
    preset = PRESETS_BY_ID.get(tab_id)
    if preset is None:
        return copy.deepcopy(config)
    return _updated(
        config,
        active_tab=tab_id,
        categories=preset_categories(preset),
        keyword_chips=preset_keyword_chips(preset),
    )


def set_difficulty(config: AppConfig, level: DifficultyLevel) -> AppConfig:
    """Switch difficulty tiers.

    Standard resets to the clinical-operation profile while keeping the user's
    date, query, vendor document and keyword lists. Professional turns on every
    thoroughness flag except the e-Gov cross-reference, which stays opt-in.
    """
    if level == "standard":
        defaults = create_default_config("clinical-operation", today=config.date_today)
        reset = replace(
            defaults,
            query=config.query,
            vendor_doc_text=config.vendor_doc_text,
            custom_keywords=list(config.custom_keywords),
            exclude_keywords=list(config.exclude_keywords),
        )
        return normalize_config(reset)

    return _updated(
        config,
        difficulty_level=level,
        three_ministry_guidelines=True,
        official_domain_priority=True,
        site_operator=True,
        latest_version_priority=True,
        pdf_direct_link=True,
        include_search_log=True,
        egov_cross_reference=False,
        proof_mode=True,
    )


def _toggle_named(items: list[CategoryItem], name: str) -> list[CategoryItem]:
    return [
        CategoryItem(name=item.name, enabled=not item.enabled if item.name == name else item.enabled)
        for item in items
    ]


def _swap(items: list[CategoryItem], index: int, direction: MoveDirection) -> list[CategoryItem] | None:
    target = index - 1 if direction == "up" else index + 1
    if index < 0 or index >= len(items) or target < 0 or target >= len(items):
        return None
    swapped = [CategoryItem(name=item.name, enabled=item.enabled) for item in items]
    swapped[index], swapped[target] = swapped[target], swapped[index]
    return swapped


def toggle_category(config: AppConfig, name: str) -> AppConfig:
    return _updated(config, categories=_toggle_named(config.categories, name))


def toggle_keyword_chip(config: AppConfig, name: str) -> AppConfig:
    return _updated(config, keyword_chips=_toggle_named(config.keyword_chips, name))


def move_category(config: AppConfig, index: int, direction: MoveDirection) -> AppConfig:
    """Swap the category at ``index`` with its neighbour; out-of-range moves are no-ops."""
    swapped = _swap(config.categories, index, direction)
    if swapped is None:
        return copy.deepcopy(config)
    return _updated(config, categories=swapped)


def move_keyword_chip(config: AppConfig, index: int, direction: MoveDirection) -> AppConfig:
    swapped = _swap(config.keyword_chips, index, direction)
    if swapped is None:
        return copy.deepcopy(config)
    return _updated(config, keyword_chips=swapped)


def toggle_scope(config: AppConfig, scope: str) -> AppConfig:
    if scope in config.scope:
        return _updated(config, scope=[item for item in config.scope if item != scope])
    return _updated(config, scope=[*config.scope, scope])


def add_custom_scope(config: AppConfig, scope: str) -> AppConfig:
    if not scope.strip() or scope in config.scope:
        return copy.deepcopy(config)
    return _updated(config, scope=[*config.scope, scope])


def toggle_audience(config: AppConfig, audience: str) -> AppConfig:
    if audience in config.audiences:
        return _updated(
            config, audiences=[item for item in config.audiences if item != audience]
        )
    return _updated(config, audiences=[*config.audiences, audience])


def add_priority_domain(config: AppConfig, domain: str) -> AppConfig:
    if not domain.strip() or domain in config.priority_domains:
        return copy.deepcopy(config)
    return _updated(config, priority_domains=[*config.priority_domains, domain])


def remove_priority_domain(config: AppConfig, domain: str) -> AppConfig:
    return _updated(
        config,
        priority_domains=[item for item in config.priority_domains if item != domain],
    )


def set_custom_keywords(config: AppConfig, text: str) -> AppConfig:
    return _updated(config, custom_keywords=parse_keyword_lines(text))


def set_exclude_keywords(config: AppConfig, text: str) -> AppConfig:
    return _updated(config, exclude_keywords=parse_keyword_lines(text))


def set_vendor_doc_text(
    config: AppConfig, text: str, limit: int = MAX_VENDOR_DOC_CHARS
) -> AppConfig:
    return _updated(config, vendor_doc_text=cap_vendor_doc_text(text, limit))


def reset_config(config: AppConfig) -> AppConfig:
    """Return the default config for the currently active tab."""
    return create_default_config(config.active_tab)
