"""Tests for the keyword boost and category tables."""

from knowledge_arsenal.search.keywords import (
    CATEGORY_KEYWORDS,
    DEFAULT_KEYWORD_TABLE,
    KeywordBoostTable,
)


def test_matching_is_substring_of_query():
    assert DEFAULT_KEYWORD_TABLE.matching("airdropops roi") == ["airdrop", "ai"]


def test_boosted_ids_unknown_keyword():
    assert DEFAULT_KEYWORD_TABLE.boosted_ids("nope") == frozenset()


def test_default_table_targets_bundled_entities():
    assert "project_airdropops" in DEFAULT_KEYWORD_TABLE.boosted_ids("web3")
    assert DEFAULT_KEYWORD_TABLE.boosted_ids("async") == {"blueprint_async-architecture"}
    assert DEFAULT_KEYWORD_TABLE.version


def test_replacement_table_is_independent():
    table = KeywordBoostTable(version="2", boosts={"rust": frozenset({"x"})})
    assert table.matching("rust services") == ["rust"]
    assert DEFAULT_KEYWORD_TABLE.matching("rust services") == []


def test_category_keywords():
    assert set(CATEGORY_KEYWORDS) == {"project", "architecture", "technical", "principle"}
    assert "principle" in CATEGORY_KEYWORDS["principle"]
    assert "architectural_principle" in CATEGORY_KEYWORDS["architecture"]
