"""Search query list generation."""

from __future__ import annotations

from guidescope.presets import MUST_KEYWORD
from guidescope.types import AppConfig, ExtendedSettings


FALLBACK_THEME = "医療AI"
QUERY_LIMIT = 10
MAX_CHIP_QUERIES = 5
MAX_SITE_QUERIES = 3


def query_cap(settings: ExtendedSettings) -> int:
    return min(QUERY_LIMIT, settings.search.max_results)


def generate_search_queries(config: AppConfig, settings: ExtendedSettings) -> list[str]:
    """
    Build the ordered, capped list of web-search queries.

    Earlier entries win under the cap: the three-ministry query, the theme
    query, enabled keyword chips, site-restricted queries, then one filetype
    query. Near-duplicates are kept.

    Args:
        config: Effective config
        settings: Resolved settings with the difficulty overlay applied

    Returns:
        At most ``min(10, settings.search.max_results)`` query strings
    """
    theme = config.query.strip()
    subject = theme or FALLBACK_THEME
    search = settings.search
    queries: list[str] = [f"{MUST_KEYWORD} {subject} ガイドライン 最新版"]

    if theme:
        queries.append(f"{theme} ガイドライン 国内")

    enabled_chips = [chip.name for chip in config.keyword_chips if chip.enabled]
    queries.extend(enabled_chips[:MAX_CHIP_QUERIES])

    if config.official_domain_priority and search.use_site_operator:
        for domain in config.priority_domains[:MAX_SITE_QUERIES]:
            queries.append(f"site:{domain} {subject} ガイドライン")

    if search.use_filetype_operator and search.filetypes:
        filetype_clause = " OR ".join(f"filetype:{filetype}" for filetype in search.filetypes)
        queries.append(f"{subject} ガイドライン ({filetype_clause})")

    return queries[: max(query_cap(settings), 0)]
