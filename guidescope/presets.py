"""Purpose and difficulty preset catalog plus the default-config factory."""

from __future__ import annotations

from datetime import date
from typing import Optional

from guidescope.types import (
    AppConfig,
    CategoryItem,
    DifficultyPreset,
    GenerationSettings,
    PurposePreset,
)


STANDARD_ACTIVE_TAB = "clinical-operation"
STANDARD_AUDIENCES = ["医療機関"]
STANDARD_SCOPE = ["医療AI", "医療情報セキュリティ", "医療データ利活用"]

MUST_KEYWORD = "3省2ガイドライン"

DEFAULT_PRIORITY_DOMAINS = [
    "mhlw.go.jp",
    "meti.go.jp",
    "soumu.go.jp",
    "pmda.go.jp",
    "ipa.go.jp",
    "cas.go.jp",
    "e-gov.go.jp",
    "mext.go.jp",
    "nii.ac.jp",
]

DEFAULT_SCOPE_OPTIONS = [
    "医療AI",
    "生成AI",
    "SaMD",
    "医療情報セキュリティ",
    "医療データ利活用",
    "研究倫理",
]

DEFAULT_AUDIENCE_OPTIONS = [
    "医療機関",
    "提供事業者",
    "開発企業",
    "研究者",
    "審査対応",
]

DIFFICULTY_PRESETS: list[DifficultyPreset] = [
    DifficultyPreset(
        id="standard",
        name="スタンダード",
        description="基本的な情報収集に最適",
        features=[
            "詳細サマリー",
            "引用文献リスト",
            "基本的な検索（10件まで）",
        ],
        settings=GenerationSettings(
            detail_level="standard",
            egov_cross_reference=False,
            include_law_excerpts=False,
            recursive_depth=0,
            max_results=10,
            proof_mode=False,
        ),
    ),
    DifficultyPreset(
        id="professional",
        name="プロフェッショナル",
        description="詳細な分析と法令参照に最適",
        features=[
            "冒頭サマリー",
            "e-Gov法令参照の自動取得",
            "関連文書の再帰的探索",
            "詳細な条文抜粋",
            "詳細検索（20件まで）",
        ],
        settings=GenerationSettings(
            detail_level="detailed",
            egov_cross_reference=True,
            include_law_excerpts=True,
            recursive_depth=2,
            max_results=20,
            proof_mode=True,
        ),
    ),
]

PURPOSE_PRESETS: list[PurposePreset] = [
    PurposePreset(
        id="medical-device",
        name="医療機器開発寄り",
        categories=[
            "医療機器規制とSaMD、AI医療機器",
            "臨床評価と性能評価",
            "品質マネジメントとリスク管理",
            "市販後と変更管理",
            "横断的AIガバナンス",
        ],
        keyword_chips=[
            "医療AI ガイドライン 国内",
            "AI 医療機器 ガイドライン",
            "プログラムの医療機器該当性に関するガイドライン",
            "SaMD 承認申請 手引き",
            "PMDA プログラム医療機器 審査 手引き",
        ],
    ),
    PurposePreset(
        id="clinical-operation",
        name="臨床運用寄り",
        categories=[
            "医療情報セキュリティ(3省2ガイドライン等)",
            "クラウド利用と委託管理",
            "アクセス制御と監査ログ",
            "事故対応と継続運用",
            "横断的AIガバナンス",
        ],
        keyword_chips=[
            "医療情報システムの安全管理に関するガイドライン",
            "医療情報を取り扱う情報システム・サービスの提供事業者における安全管理ガイドライン",
            "医療 生成AI 利用 ガイドライン",
            "医療AI ガイドライン 国内",
        ],
    ),
    PurposePreset(
        id="research-ethics",
        name="研究倫理寄り",
        categories=[
            "研究倫理",
            "医療データ利活用と個人情報保護",
            "同意と二次利用",
            "データ管理と匿名化",
            "横断的AIガバナンス",
        ],
        keyword_chips=[
            "医療デジタルデータ AI 研究開発 利活用 ガイドライン",
            "医療AI 倫理 指針",
            "人を対象とする生命科学・医学系研究に関する倫理指針",
            "個人情報保護 医療 AI 仮名加工",
        ],
    ),
    PurposePreset(
        id="generative-ai",
        name="生成AI寄り",
        categories=[
            "生成AIの利用",
            "情報漏えいとデータ持ち出し",
            "誤情報と説明責任",
            "出力物の取扱い",
            "横断的AIガバナンス",
        ],
        keyword_chips=[
            "医療 生成AI 利用 ガイドライン",
            "生成AI 医療 文書 作成 支援 指針",
            "医療 生成AI 個人情報 漏えい 対策",
            "医療AI ガイドライン 国内",
        ],
    ),
]


PRESETS_BY_ID = {preset.id: preset for preset in PURPOSE_PRESETS}
DIFFICULTY_PRESETS_BY_ID = {preset.id: preset for preset in DIFFICULTY_PRESETS}


def get_purpose_preset(preset_id: str) -> PurposePreset:
    """Return the purpose preset for ``preset_id``, falling back to the first entry."""
    return PRESETS_BY_ID.get(preset_id, PURPOSE_PRESETS[0])


def get_difficulty_preset(level: str) -> DifficultyPreset:
    """Return the difficulty preset for ``level``, falling back to standard."""
    return DIFFICULTY_PRESETS_BY_ID.get(level, DIFFICULTY_PRESETS[0])


def preset_categories(preset: PurposePreset) -> list[CategoryItem]:
    return [CategoryItem(name=name, enabled=True) for name in preset.categories]


def preset_keyword_chips(preset: PurposePreset) -> list[CategoryItem]:
    return [CategoryItem(name=name, enabled=True) for name in preset.keyword_chips]


def today_iso() -> str:
    return date.today().isoformat()


def create_default_config(tab_id: str = "medical-device", today: Optional[str] = None) -> AppConfig:
    """Build the starting config for a purpose tab.

    Args:
        tab_id: Purpose preset id; unknown ids seed from the first preset but
            keep ``tab_id`` as the active tab
        today: ISO date override, defaults to the current local date

    Returns:
        A fresh AppConfig with every list newly allocated
    """
    preset = get_purpose_preset(tab_id)
    return AppConfig(
        date_today=today or today_iso(),
        query="",
        scope=["医療AI"],
        audiences=["医療機関", "開発企業"],
        difficulty_level="standard",
        vendor_doc_text="",
        three_ministry_guidelines=True,
        official_domain_priority=True,
        site_operator=True,
        latest_version_priority=True,
        pdf_direct_link=True,
        include_search_log=True,
        egov_cross_reference=False,
        proof_mode=True,
        categories=preset_categories(preset),
        keyword_chips=preset_keyword_chips(preset),
        custom_keywords=[],
        exclude_keywords=[],
        priority_domains=list(DEFAULT_PRIORITY_DOMAINS),
        active_tab=tab_id,
    )
