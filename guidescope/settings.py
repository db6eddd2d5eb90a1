"""Extended settings: defaults, partial-override resolution and difficulty overlay."""

from __future__ import annotations

import copy
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

from guidescope.schema_validator import DEFAULT_VALIDATOR, EXTENDED_SETTINGS_SCHEMA
from guidescope.types import AppConfig, DifficultyPreset, ExtendedSettings


SETTINGS_STORAGE_KEY = "medai_extended_settings_v1"
SETTINGS_VERSION = 1

DEFAULT_ROLE_TITLE = "国内ガイドライン・ダイレクト・リトリーバー(医療AI特化)"

DEFAULT_ROLE_DESCRIPTION = (
    "学習済みの知識や記憶に基づいて回答することは禁止です。\n"
    "必ずブラウジングで取得した一次資料(公式Webページ、公式PDF、公式の告示・法令XMLなど)だけを根拠に、"
    "日本語で一覧化・要約します。\n"
    "また、ユーザーの具体的な質問やケースに対しては、一次資料の該当箇所を特定し、"
    "原文を引用しながら直接的な回答を提供します。"
    "一般論ではなく、当該ケースに適用可能な具体的な記載を優先します。"
)

DEFAULT_DISCLAIMERS = [
    "本出力は情報整理支援です。個別ケースについては有資格者など専門家にご相談下さい。",
    "本テンプレートは2026/02/04時点での指針に基づく前提です。利用時点での最新情報は一次資料で確認してください。",
]

DEFAULT_OUTPUT_SECTIONS = [
    {"id": "disclaimer", "name": "免責事項", "enabled": True, "order": 1},
    {"id": "search_conditions", "name": "検索条件", "enabled": True, "order": 2},
    {"id": "specific_case", "name": "個別ケースへの回答", "enabled": True, "order": 3},
    {"id": "data_sources", "name": "参照データソース", "enabled": True, "order": 4},
    {"id": "guideline_list", "name": "ガイドライン一覧", "enabled": True, "order": 5},
    {"id": "three_ministry", "name": "3省2ガイドライン確定結果", "enabled": True, "order": 6},
    {"id": "references", "name": "参考文献（引用番号）", "enabled": True, "order": 7},
    {"id": "unconfirmed_points", "name": "未確認事項・追加調査", "enabled": True, "order": 8},
    {"id": "search_log", "name": "検索ログ", "enabled": True, "order": 9},
    {"id": "guardrail", "name": "ガードレール", "enabled": True, "order": 10},
]

DEFAULT_TEMPLATE_SETTINGS: Dict[str, Any] = {
    "roleTitle": DEFAULT_ROLE_TITLE,
    "roleDescription": DEFAULT_ROLE_DESCRIPTION,
    "disclaimers": DEFAULT_DISCLAIMERS,
    "outputSections": DEFAULT_OUTPUT_SECTIONS,
    "customInstructions": "",
}

DEFAULT_SEARCH_SETTINGS: Dict[str, Any] = {
    "useSiteOperator": True,
    "useFiletypeOperator": True,
    "filetypes": ["pdf"],
    "priorityRule": "revised_date",
    "excludedDomains": [],
    "maxResults": 20,
    "recursiveDepth": 2,
}

DEFAULT_OUTPUT_SETTINGS: Dict[str, Any] = {
    "languageMode": "japanese_only",
    "includeEnglishTerms": True,
    "detailLevel": "standard",
    "eGovCrossReference": False,
    "includeLawExcerpts": True,
    "outputFormat": "markdown",
    "includeSearchLog": True,
}

DEFAULT_UI_SETTINGS: Dict[str, Any] = {
    "theme": "light",
    "fontSize": "medium",
    "defaultOutputTab": "prompt",
    "defaultPurposeTab": "medical-device",
    "compactMode": False,
    "showTooltips": True,
    "animationsEnabled": True,
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _group(stored: Optional[Mapping[str, Any]], name: str) -> Mapping[str, Any]:
    if not stored:
        return {}
    group = stored.get(name)
    return group if isinstance(group, Mapping) else {}


def _pick(group: Mapping[str, Any], key: str, default: Any) -> Any:
    """Stored leaf when present and not None, otherwise a copy of the default.

    Lists are taken wholesale from whichever side wins.
    """
    value = group.get(key)
    if value is None:
        return copy.deepcopy(default)
    return copy.deepcopy(value)


def _merge_template(group: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "roleTitle": _pick(group, "roleTitle", DEFAULT_TEMPLATE_SETTINGS["roleTitle"]),
        "roleDescription": _pick(
            group, "roleDescription", DEFAULT_TEMPLATE_SETTINGS["roleDescription"]
        ),
        "disclaimers": _pick(group, "disclaimers", DEFAULT_TEMPLATE_SETTINGS["disclaimers"]),
        "outputSections": _pick(
            group, "outputSections", DEFAULT_TEMPLATE_SETTINGS["outputSections"]
        ),
        "customInstructions": _pick(
            group, "customInstructions", DEFAULT_TEMPLATE_SETTINGS["customInstructions"]
        ),
    }


def _merge_search(group: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: _pick(group, key, default) for key, default in DEFAULT_SEARCH_SETTINGS.items()}


def _merge_output(group: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: _pick(group, key, default) for key, default in DEFAULT_OUTPUT_SETTINGS.items()}


def _merge_ui(group: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: _pick(group, key, default) for key, default in DEFAULT_UI_SETTINGS.items()}


def default_settings_payload(now: Optional[str] = None) -> Dict[str, Any]:
    return {
        "template": _merge_template({}),
        "search": _merge_search({}),
        "output": _merge_output({}),
        "ui": _merge_ui({}),
        "version": SETTINGS_VERSION,
        "lastUpdated": now or _now_iso(),
    }


def create_default_extended_settings(now: Optional[str] = None) -> ExtendedSettings:
    return ExtendedSettings.from_dict(default_settings_payload(now))


def merge_settings_payload(
    stored: Optional[Mapping[str, Any]], now: Optional[str] = None
) -> Dict[str, Any]:
    """Merge a stored partial override onto the defaults, group by group."""
    stored = stored if isinstance(stored, Mapping) else {}
    version = stored.get("version")
    last_updated = stored.get("lastUpdated")
    return {
        "template": _merge_template(_group(stored, "template")),
        "search": _merge_search(_group(stored, "search")),
        "output": _merge_output(_group(stored, "output")),
        "ui": _merge_ui(_group(stored, "ui")),
        "version": version if version is not None else SETTINGS_VERSION,
        "lastUpdated": last_updated if last_updated else (now or _now_iso()),
    }


def resolve_settings(
    stored: Optional[Mapping[str, Any]] = None, now: Optional[str] = None
) -> ExtendedSettings:
    """Resolve stored settings into a complete ExtendedSettings.

    Args:
        stored: Partial camelCase override as persisted by the caller, or None
        now: Timestamp used when ``lastUpdated`` is missing

    Returns:
        The merged settings, or the defaults when the merge result does not
        conform to the extended-settings schema
    """
    merged = merge_settings_payload(stored, now)
    if not DEFAULT_VALIDATOR.is_valid(merged, EXTENDED_SETTINGS_SCHEMA):
        return create_default_extended_settings(now)
    return ExtendedSettings.from_dict(merged)


def touch_settings(settings: ExtendedSettings, now: Optional[str] = None) -> ExtendedSettings:
    """Copy of ``settings`` with a refreshed ``lastUpdated`` for saving."""
    return replace(copy.deepcopy(settings), last_updated=now or _now_iso())


def apply_difficulty(
    settings: ExtendedSettings, preset: DifficultyPreset, config: AppConfig
) -> Tuple[ExtendedSettings, AppConfig]:
    """Overlay the difficulty preset onto resolved settings.

    The preset's detail level, law-excerpt flag, recursion depth and result cap
    replace the stored values. The e-Gov cross-reference is on when either the
    preset or the config asks for it. Proof mode is resolved the same way but
    lands on the returned config copy, not on the settings.

    Returns:
        ``(settings, effective_config)``, both new objects
    """
    governed = preset.settings
    output = replace(
        settings.output,
        detail_level=governed.detail_level,
        egov_cross_reference=governed.egov_cross_reference or config.egov_cross_reference,
        include_law_excerpts=governed.include_law_excerpts,
    )
    search = replace(
        copy.deepcopy(settings.search),
        recursive_depth=governed.recursive_depth,
        max_results=governed.max_results,
    )
    adjusted = replace(copy.deepcopy(settings), output=output, search=search)
    effective_config = replace(
        copy.deepcopy(config), proof_mode=governed.proof_mode or config.proof_mode
    )
    return adjusted, effective_config
