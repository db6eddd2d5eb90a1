"""Tests for the one-call generation API."""

import copy

import pytest

import guidescope
from guidescope.generation import (
    create_config,
    generate,
    generate_from_config,
    generate_prompt,
    generate_search_queries,
)
from guidescope.normalizer import normalize_config
from guidescope.presets import DEFAULT_PRIORITY_DOMAINS, STANDARD_SCOPE
from guidescope.types import GenerateOptions


class TestCreateConfig:
    def test_defaults_for_standard(self):
        config = create_config(GenerateOptions(query="医療AI", date="2026-02-04"))

        assert config.active_tab == "medical-device"
        assert config.difficulty_level == "standard"
        assert config.scope == STANDARD_SCOPE
        assert config.audiences == ["医療機関"]
        assert config.priority_domains == DEFAULT_PRIORITY_DOMAINS
        assert config.include_search_log is False
        assert config.proof_mode is False
        assert config.egov_cross_reference is False

    def test_professional_turns_on_log_and_proof(self):
        config = create_config(
            GenerateOptions(query="医療AI", preset="generative-ai", difficulty="professional")
        )

        assert config.include_search_log is True
        assert config.proof_mode is True
        assert config.active_tab == "generative-ai"
        assert config.categories[0].name == "生成AIの利用"

    def test_explicit_lists_are_copied(self):
        scope = ["SaMD"]
        keywords = ["承認申請"]

        config = create_config(
            GenerateOptions(query="x", scope=scope, custom_keywords=keywords, priority_domains=[])
        )
        scope.append("changed")

        assert config.scope == ["SaMD"]
        assert config.custom_keywords == ["承認申請"]
        assert config.priority_domains == []

    def test_date_defaults_to_today(self, monkeypatch):
        monkeypatch.setattr("guidescope.generation.today_iso", lambda: "2030-01-01")

        assert create_config(GenerateOptions(query="x")).date_today == "2030-01-01"


def test_generate_returns_prompt_and_queries():
    result = generate(
        GenerateOptions(query="AI問診", difficulty="professional", date="2026-02-04")
    )

    assert "AI問診" in result.prompt
    assert "e-Gov" in result.prompt
    assert result.search_queries[0] == "3省2ガイドライン AI問診 ガイドライン 最新版"
    assert len(result.search_queries) == 10
    assert result.to_dict()["searchQueries"] == result.search_queries


def test_generate_helpers_agree():
    options = GenerateOptions(query="医療情報 クラウド", date="2026-02-04")

    assert generate_prompt(options) == generate(options).prompt
    assert generate_search_queries(options) == generate(options).search_queries


def test_result_config_is_input_copy(professional_config):
    professional_config.proof_mode = False
    snapshot = copy.deepcopy(professional_config)

    result = generate_from_config(professional_config)

    assert result.config == snapshot
    assert result.config is not professional_config
    assert result.config.proof_mode is False
    assert professional_config == snapshot


def test_stored_settings_are_applied(base_config):
    config = normalize_config(base_config)

    result = generate_from_config(config, {"template": {"customInstructions": "簡潔に"}})

    assert "# カスタム指示\n簡潔に" in result.prompt


@pytest.mark.parametrize("difficulty", ["standard", "professional"])
def test_query_cap_follows_difficulty(difficulty):
    options = GenerateOptions(query="x", difficulty=difficulty, date="2026-02-04")

    assert len(generate(options).search_queries) <= 10


def test_package_exports():
    assert guidescope.generate is generate
    assert "generate_search_queries" in guidescope.__all__
