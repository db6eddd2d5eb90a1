from dataclasses import replace

import pytest

from guidescope.queries import FALLBACK_THEME, generate_search_queries, query_cap
from guidescope.settings import resolve_settings

FIXED_NOW = "2026-02-04T09:00:00+00:00"


def _settings(search=None):
    return resolve_settings({"search": search or {}}, now=FIXED_NOW)


def test_queries_follow_fixed_order(base_config):
    queries = generate_search_queries(base_config, _settings({"maxResults": 20}))

    assert queries[0] == "3省2ガイドライン AI問診システムの医療機器該当性 ガイドライン 最新版"
    assert queries[1] == "AI問診システムの医療機器該当性 ガイドライン 国内"
    assert queries[2:7] == [chip.name for chip in base_config.keyword_chips][:5]
    assert queries[7] == "site:mhlw.go.jp AI問診システムの医療機器該当性 ガイドライン"
    assert queries[9] == "site:soumu.go.jp AI問診システムの医療機器該当性 ガイドライン"


@pytest.mark.parametrize("max_results,expected", [(20, 10), (10, 10), (4, 4), (1, 1)])
def test_query_cap(base_config, max_results, expected):
    settings = _settings({"maxResults": max_results})

    assert query_cap(settings) == expected
    assert len(generate_search_queries(base_config, settings)) == expected


def test_filetype_query_when_chips_disabled_and_site_off(base_config):
    for chip in base_config.keyword_chips:
        chip.enabled = False
    base_config.official_domain_priority = False

    queries = generate_search_queries(base_config, _settings())

    assert len(queries) == 3
    assert sum("filetype:pdf" in query for query in queries) == 1
    assert queries[-1] == "AI問診システムの医療機器該当性 ガイドライン (filetype:pdf)"


def test_multiple_filetypes_joined_with_or(base_config):
    base_config.keyword_chips = []
    base_config.official_domain_priority = False

    queries = generate_search_queries(base_config, _settings({"filetypes": ["pdf", "docx"]}))

    assert queries[-1].endswith("(filetype:pdf OR filetype:docx)")


def test_site_operator_setting_suppresses_site_queries(base_config):
    queries = generate_search_queries(base_config, _settings({"useSiteOperator": False}))

    assert not any(query.startswith("site:") for query in queries)


def test_filetype_operator_off_or_empty(base_config):
    base_config.keyword_chips = []
    base_config.official_domain_priority = False

    off = generate_search_queries(base_config, _settings({"useFiletypeOperator": False}))
    empty = generate_search_queries(base_config, _settings({"filetypes": []}))

    assert off == empty == [
        "3省2ガイドライン AI問診システムの医療機器該当性 ガイドライン 最新版",
        "AI問診システムの医療機器該当性 ガイドライン 国内",
    ]


@pytest.mark.parametrize("query", ["", "   "])
def test_blank_theme_uses_fallback(base_config, query):
    base_config.query = query
    base_config.keyword_chips = []

    queries = generate_search_queries(base_config, _settings())

    assert queries[0] == f"3省2ガイドライン {FALLBACK_THEME} ガイドライン 最新版"
    assert queries[1] == f"site:mhlw.go.jp {FALLBACK_THEME} ガイドライン"
    assert all("国内" not in query for query in queries)


def test_only_first_three_domains_used(base_config):
    base_config.keyword_chips = []

    queries = generate_search_queries(base_config, _settings())

    site_queries = [query for query in queries if query.startswith("site:")]
    assert [query.split()[0] for query in site_queries] == [
        "site:mhlw.go.jp",
        "site:meti.go.jp",
        "site:soumu.go.jp",
    ]


def test_no_priority_domains_no_site_queries(base_config):
    config = replace(base_config, priority_domains=[])

    queries = generate_search_queries(config, _settings())

    assert not any(query.startswith("site:") for query in queries)


@pytest.mark.parametrize("query", ["AI問診システムの医療機器該当性", ""])
def test_empty_scope_domains_and_chips_still_produce_queries(base_config, query):
    config = replace(base_config, query=query, scope=[], priority_domains=[], keyword_chips=[])
    settings = _settings()

    queries = generate_search_queries(config, settings)

    assert queries
    assert len(queries) <= query_cap(settings)
    assert queries[0].startswith("3省2ガイドライン ")
