"""Type definitions for the GuideScope generation engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional


DifficultyLevel = Literal["standard", "professional"]

DetailLevel = Literal["concise", "standard", "detailed"]

PriorityRule = Literal["published_date", "revised_date", "relevance"]

LanguageMode = Literal["japanese_only", "mixed", "english_priority"]

OutputFormat = Literal["markdown", "plain_text"]

Theme = Literal["light", "dark", "system"]

FontSize = Literal["small", "medium", "large"]

OutputTab = Literal["prompt", "queries", "json"]


@dataclass(frozen=True)
class PurposePreset:
    """A purpose tab: the categories and keyword chips seeded into a config."""
    id: str
    name: str
    categories: List[str]
    keyword_chips: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "categories": list(self.categories),
            "keywordChips": list(self.keyword_chips),
        }


@dataclass(frozen=True)
class GenerationSettings:
    """Generation-affecting settings bundled with a difficulty preset."""
    detail_level: DetailLevel
    egov_cross_reference: bool
    include_law_excerpts: bool
    recursive_depth: int
    max_results: int
    proof_mode: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detailLevel": self.detail_level,
            "eGovCrossReference": self.egov_cross_reference,
            "includeLawExcerpts": self.include_law_excerpts,
            "recursiveDepth": self.recursive_depth,
            "maxResults": self.max_results,
            "proofMode": self.proof_mode,
        }


@dataclass(frozen=True)
class DifficultyPreset:
    id: DifficultyLevel
    name: str
    description: str
    features: List[str]
    settings: GenerationSettings

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "features": list(self.features),
            "settings": self.settings.to_dict(),
        }


@dataclass
class CategoryItem:
    name: str
    enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "enabled": self.enabled}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CategoryItem":
        return cls(name=str(payload["name"]), enabled=bool(payload.get("enabled", True)))


# Keyword chips share the category shape.
KeywordChipItem = CategoryItem


@dataclass
class AppConfig:
    """User-editable configuration, passed by value into the engine.

    Attribute names are snake_case; ``to_dict`` emits the camelCase keys used
    by exported JSON and share links.
    """
    date_today: str
    query: str = ""
    scope: List[str] = field(default_factory=list)
    audiences: List[str] = field(default_factory=list)
    difficulty_level: DifficultyLevel = "standard"
    vendor_doc_text: str = ""

    three_ministry_guidelines: bool = True
    official_domain_priority: bool = True
    site_operator: bool = True
    latest_version_priority: bool = True
    pdf_direct_link: bool = True
    include_search_log: bool = True
    egov_cross_reference: bool = False
    proof_mode: bool = True

    categories: List[CategoryItem] = field(default_factory=list)
    keyword_chips: List[KeywordChipItem] = field(default_factory=list)
    custom_keywords: List[str] = field(default_factory=list)
    exclude_keywords: List[str] = field(default_factory=list)
    priority_domains: List[str] = field(default_factory=list)

    active_tab: str = "medical-device"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "dateToday": self.date_today,
            "query": self.query,
            "scope": list(self.scope),
            "audiences": list(self.audiences),
            "difficultyLevel": self.difficulty_level,
            "vendorDocText": self.vendor_doc_text,
            "threeMinistryGuidelines": self.three_ministry_guidelines,
            "officialDomainPriority": self.official_domain_priority,
            "siteOperator": self.site_operator,
            "latestVersionPriority": self.latest_version_priority,
            "pdfDirectLink": self.pdf_direct_link,
            "includeSearchLog": self.include_search_log,
            "eGovCrossReference": self.egov_cross_reference,
            "proofMode": self.proof_mode,
            "categories": [item.to_dict() for item in self.categories],
            "keywordChips": [item.to_dict() for item in self.keyword_chips],
            "customKeywords": list(self.custom_keywords),
            "excludeKeywords": list(self.exclude_keywords),
            "priorityDomains": list(self.priority_domains),
            "activeTab": self.active_tab,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AppConfig":
        """Build a config from camelCase keys; absent keys take field defaults."""
        defaults = cls(date_today="")
        return cls(
            date_today=payload.get("dateToday", defaults.date_today),
            query=payload.get("query", defaults.query),
            scope=list(payload.get("scope", [])),
            audiences=list(payload.get("audiences", [])),
            difficulty_level=payload.get("difficultyLevel", defaults.difficulty_level),
            vendor_doc_text=payload.get("vendorDocText") or "",
            three_ministry_guidelines=payload.get(
                "threeMinistryGuidelines", defaults.three_ministry_guidelines
            ),
            official_domain_priority=payload.get(
                "officialDomainPriority", defaults.official_domain_priority
            ),
            site_operator=payload.get("siteOperator", defaults.site_operator),
            latest_version_priority=payload.get(
                "latestVersionPriority", defaults.latest_version_priority
            ),
            pdf_direct_link=payload.get("pdfDirectLink", defaults.pdf_direct_link),
            include_search_log=payload.get("includeSearchLog", defaults.include_search_log),
            egov_cross_reference=payload.get("eGovCrossReference", defaults.egov_cross_reference),
            proof_mode=payload.get("proofMode", defaults.proof_mode),
            categories=[CategoryItem.from_dict(item) for item in payload.get("categories", [])],
            keyword_chips=[
                KeywordChipItem.from_dict(item) for item in payload.get("keywordChips", [])
            ],
            custom_keywords=list(payload.get("customKeywords", [])),
            exclude_keywords=list(payload.get("excludeKeywords", [])),
            priority_domains=list(payload.get("priorityDomains", [])),
            active_tab=payload.get("activeTab", defaults.active_tab),
        )


@dataclass
class OutputSection:
    id: str
    name: str
    enabled: bool = True
    order: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "enabled": self.enabled, "order": self.order}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "OutputSection":
        return cls(
            id=payload["id"],
            name=payload["name"],
            enabled=payload.get("enabled", True),
            order=payload.get("order", 0),
        )


@dataclass
class TemplateSettings:
    role_title: str
    role_description: str
    disclaimers: List[str]
    output_sections: List[OutputSection]
    custom_instructions: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roleTitle": self.role_title,
            "roleDescription": self.role_description,
            "disclaimers": list(self.disclaimers),
            "outputSections": [section.to_dict() for section in self.output_sections],
            "customInstructions": self.custom_instructions,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "TemplateSettings":
        return cls(
            role_title=payload["roleTitle"],
            role_description=payload["roleDescription"],
            disclaimers=list(payload["disclaimers"]),
            output_sections=[OutputSection.from_dict(item) for item in payload["outputSections"]],
            custom_instructions=payload.get("customInstructions", ""),
        )


@dataclass
class SearchSettings:
    use_site_operator: bool
    use_filetype_operator: bool
    filetypes: List[str]
    priority_rule: PriorityRule
    excluded_domains: List[str]
    max_results: int
    recursive_depth: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "useSiteOperator": self.use_site_operator,
            "useFiletypeOperator": self.use_filetype_operator,
            "filetypes": list(self.filetypes),
            "priorityRule": self.priority_rule,
            "excludedDomains": list(self.excluded_domains),
            "maxResults": self.max_results,
            "recursiveDepth": self.recursive_depth,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "SearchSettings":
        return cls(
            use_site_operator=payload["useSiteOperator"],
            use_filetype_operator=payload["useFiletypeOperator"],
            filetypes=list(payload["filetypes"]),
            priority_rule=payload["priorityRule"],
            excluded_domains=list(payload["excludedDomains"]),
            max_results=payload["maxResults"],
            recursive_depth=payload["recursiveDepth"],
        )


@dataclass
class OutputSettings:
    language_mode: LanguageMode
    include_english_terms: bool
    detail_level: DetailLevel
    egov_cross_reference: bool
    include_law_excerpts: bool
    output_format: OutputFormat
    include_search_log: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "languageMode": self.language_mode,
            "includeEnglishTerms": self.include_english_terms,
            "detailLevel": self.detail_level,
            "eGovCrossReference": self.egov_cross_reference,
            "includeLawExcerpts": self.include_law_excerpts,
            "outputFormat": self.output_format,
            "includeSearchLog": self.include_search_log,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "OutputSettings":
        return cls(
            language_mode=payload["languageMode"],
            include_english_terms=payload["includeEnglishTerms"],
            detail_level=payload["detailLevel"],
            egov_cross_reference=payload["eGovCrossReference"],
            include_law_excerpts=payload["includeLawExcerpts"],
            output_format=payload["outputFormat"],
            include_search_log=payload["includeSearchLog"],
        )


@dataclass
class UISettings:
    """Presentation-only settings; carried through but never read by the engine."""
    theme: Theme
    font_size: FontSize
    default_output_tab: OutputTab
    default_purpose_tab: str
    compact_mode: bool
    show_tooltips: bool
    animations_enabled: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "theme": self.theme,
            "fontSize": self.font_size,
            "defaultOutputTab": self.default_output_tab,
            "defaultPurposeTab": self.default_purpose_tab,
            "compactMode": self.compact_mode,
            "showTooltips": self.show_tooltips,
            "animationsEnabled": self.animations_enabled,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "UISettings":
        return cls(
            theme=payload["theme"],
            font_size=payload["fontSize"],
            default_output_tab=payload["defaultOutputTab"],
            default_purpose_tab=payload["defaultPurposeTab"],
            compact_mode=payload["compactMode"],
            show_tooltips=payload["showTooltips"],
            animations_enabled=payload["animationsEnabled"],
        )


@dataclass
class ExtendedSettings:
    template: TemplateSettings
    search: SearchSettings
    output: OutputSettings
    ui: UISettings
    version: int = 1
    last_updated: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "template": self.template.to_dict(),
            "search": self.search.to_dict(),
            "output": self.output.to_dict(),
            "ui": self.ui.to_dict(),
            "version": self.version,
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ExtendedSettings":
        """Build from a complete camelCase mapping (see ``resolve_settings`` for partials)."""
        return cls(
            template=TemplateSettings.from_dict(payload["template"]),
            search=SearchSettings.from_dict(payload["search"]),
            output=OutputSettings.from_dict(payload["output"]),
            ui=UISettings.from_dict(payload["ui"]),
            version=payload.get("version", 1),
            last_updated=payload.get("lastUpdated", ""),
        )


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


@dataclass
class GenerateOptions:
    """Options for the simplified one-call generation API."""
    query: str
    preset: str = "medical-device"
    difficulty: DifficultyLevel = "standard"
    scope: Optional[List[str]] = None
    audiences: Optional[List[str]] = None
    custom_keywords: Optional[List[str]] = None
    priority_domains: Optional[List[str]] = None
    date: Optional[str] = None


@dataclass
class GenerateResult:
    prompt: str
    search_queries: List[str]
    config: AppConfig

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prompt": self.prompt,
            "searchQueries": list(self.search_queries),
            "config": self.config.to_dict(),
        }
