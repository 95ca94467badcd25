"""Keyword tables used by the heuristic ranker.

Both tables are plain data so they can be extended or swapped without
touching the scoring loop.
"""

from dataclasses import dataclass, field

# Query keyword -> entity categories/subcategories it boosts.
CATEGORY_KEYWORDS: dict[str, frozenset[str]] = {
    "project": frozenset({"project_case_study"}),
    "architecture": frozenset({"architectural_principle", "architecture"}),
    "technical": frozenset({"technology", "code_example", "implementation"}),
    "principle": frozenset({"architectural_principle", "principle"}),
}


@dataclass(frozen=True)
class KeywordBoostTable:
    """Versioned mapping from a query keyword to the entity ids it boosts.

    A keyword matches when it occurs anywhere in the lowercased query.
    """

    version: str
    boosts: dict[str, frozenset[str]] = field(default_factory=dict)

    def matching(self, query: str) -> list[str]:
        """Keywords of this table contained in ``query`` (already lowercased)."""
        return [keyword for keyword in self.boosts if keyword in query]

    def boosted_ids(self, keyword: str) -> frozenset[str]:
        """Entity ids boosted by a keyword."""
        return self.boosts.get(keyword, frozenset())


DEFAULT_KEYWORD_TABLE = KeywordBoostTable(
    version="2024.1",
    boosts={
        "airdrop": frozenset({"project_airdropops"}),
        "web3": frozenset({"project_airdropops"}),
        "defi": frozenset({"project_airdropops"}),
        "ai": frozenset({"project_prompt-codex"}),
        "automation": frozenset({"project_galyarderos"}),
        "productivity": frozenset({"project_galyarderos"}),
        "prompt": frozenset({"project_prompt-codex"}),
        "async": frozenset({"blueprint_async-architecture"}),
        "modular": frozenset({"blueprint_modularity-over-monolith"}),
        "scale": frozenset({"blueprint_build-to-scale"}),
    },
)
