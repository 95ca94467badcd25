"""Tests for source mappers and the mapper registry."""

import pytest

from knowledge_arsenal.ingest.mappers import (
    MapperRegistry,
    MappingError,
    default_registry,
    map_blueprint,
    map_insight,
    map_project,
    map_testimonial,
)
from knowledge_arsenal.models.entity import KnowledgeType, RelationshipType
from tests.conftest import make_blueprint, make_insight, make_project, make_testimonial


class TestMapProject:
    def test_id_and_type(self):
        entity = map_project(make_project())
        assert entity.id == "project_airdropops"
        assert entity.type == KnowledgeType.PROJECT_CASE_STUDY
        assert entity.title == "AirdropOps"

    def test_same_record_same_entity(self):
        a = map_project(make_project())
        b = map_project(make_project())
        assert a.id == b.id
        assert a.checksum == b.checksum
        assert a.checksum == a.compute_checksum()

    def test_content_covers_searchable_fields(self):
        content = map_project(make_project()).content
        for expected in (
            "Automate airdrop farming",
            "Event-driven async workers",
            "Hands-off farming",
            "Web3.js",
            "Scheduler -> Wallet pool",
            "roi: 300%",
            "PRODUCTION",
        ):
            assert expected in content

    def test_tags_combine_kind_stack_metrics_and_domain(self):
        tags = map_project(make_project()).metadata.tags
        assert tags[0] == "project"
        for expected in ("production", "n8n", "web3.js", "roi", "efficiency_gain", "web3", "defi"):
            assert expected in tags
        assert len(tags) == len(set(tags))

    def test_relevance_production_with_metrics(self):
        assert map_project(make_project()).metadata.relevance_score == 1.0

    def test_relevance_research_scores_lower(self):
        entity = map_project(make_project(status="research", metrics={"roi": "10%"}))
        assert entity.metadata.relevance_score == pytest.approx(0.7)

    def test_business_impact_from_metrics(self):
        impact = map_project(make_project()).metadata.business_impact
        assert impact.roi_improvement == "300%"
        assert impact.efficiency_gain == "85%"

    def test_no_impact_metrics_leaves_none(self):
        entity = map_project(make_project(metrics={"users": "12"}))
        assert entity.metadata.business_impact is None

    def test_associations_and_attributes(self):
        entity = map_project(make_project())
        assert entity.metadata.project_associations == ["airdropops"]
        assert entity.metadata.technology_stack == ["n8n", "Web3.js", "LangChain"]
        assert entity.attributes["status"] == "production"
        assert entity.attributes["architecture_patterns"] == [
            "event-driven",
            "async-first",
            "modular-design",
        ]

    def test_missing_field_raises_mapping_error(self):
        raw = make_project()
        del raw["project_name"]
        with pytest.raises(MappingError) as exc_info:
            map_project(raw)
        assert exc_info.value.kind == KnowledgeType.PROJECT_CASE_STUDY
        assert exc_info.value.record_id == "airdropops"
        assert "project_name" in str(exc_info.value)

    def test_bad_status_raises_mapping_error(self):
        with pytest.raises(MappingError):
            map_project(make_project(status="someday"))

    def test_non_mapping_raises_mapping_error(self):
        with pytest.raises(MappingError) as exc_info:
            map_project(["not", "a", "record"])
        assert exc_info.value.record_id is None
        assert "<unknown>" in str(exc_info.value)

    def test_domain_tag_change_changes_checksum(self):
        a = map_project(make_project())
        b = map_project(make_project(tech_stack=["n8n"]))
        assert a.checksum != b.checksum


class TestMapBlueprint:
    def test_root_principle_has_no_edges(self):
        entity = map_blueprint(make_blueprint())
        assert entity.id == "blueprint_async-architecture"
        assert entity.type == KnowledgeType.ARCHITECTURAL_PRINCIPLE
        assert entity.relationships == []

    def test_parent_emits_validated_extends_edge(self):
        entity = map_blueprint(make_blueprint(parent_node="core-design-principles"))
        [edge] = entity.relationships
        assert edge.target_id == "blueprint_core-design-principles"
        assert edge.relationship_type == RelationshipType.EXTENDS
        assert edge.strength == 0.9
        assert edge.validated is True
        assert edge.bidirectional is False

    def test_project_mentions_become_associations(self):
        entity = map_blueprint(make_blueprint())
        assert entity.metadata.project_associations == ["airdropops"]

    def test_short_tags_dropped(self):
        entity = map_blueprint(make_blueprint(label="AI at Scale"))
        assert "ai" not in entity.metadata.tags
        assert "at" not in entity.metadata.tags
        assert "scale" in entity.metadata.tags

    def test_content_includes_examples_and_implementation(self):
        content = map_blueprint(make_blueprint()).content
        assert "Event bus for wallet updates" in content
        assert "Message queues" in content

    def test_relevance(self):
        assert map_blueprint(make_blueprint()).metadata.relevance_score == pytest.approx(0.9)
        header = make_blueprint(is_section_header=True, examples=[])
        assert map_blueprint(header).metadata.relevance_score == pytest.approx(0.9)
        plain = make_blueprint(examples=[])
        assert map_blueprint(plain).metadata.relevance_score == pytest.approx(0.8)


class TestMapInsight:
    def test_title_and_summary(self):
        entity = map_insight(make_insight())
        assert entity.id == "insight_0"
        assert entity.title == "Principle: Clear beats clever when the system..."
        assert entity.metadata.subcategory == "principle"

    def test_long_text_summary_truncated(self):
        entity = map_insight(make_insight(text="word " * 100))
        assert entity.summary.endswith("...")
        assert len(entity.summary) == 203

    def test_keywords_in_tags_and_content(self):
        entity = map_insight(make_insight())
        assert entity.metadata.tags == ["insight", "principles", "design", "principle"]
        assert "Keywords: principles, design" in entity.content

    def test_empty_text_rejected(self):
        with pytest.raises(MappingError):
            map_insight(make_insight(text=""))


class TestMapTestimonial:
    def test_validates_edge_to_project(self):
        entity = map_testimonial(make_testimonial())
        assert entity.id == "testimonial_airdrop-ops-1"
        [edge] = entity.relationships
        assert edge.target_id == "project_airdropops"
        assert edge.relationship_type == RelationshipType.VALIDATES
        assert edge.strength == 0.95
        assert edge.validated is True

    def test_tags_and_associations(self):
        entity = map_testimonial(make_testimonial())
        tags = entity.metadata.tags
        for expected in ("testimonial", "chain-labs", "airdropops", "web3", "defi"):
            assert expected in tags
        assert entity.metadata.client_associations == ["Chain Labs"]
        assert entity.metadata.project_associations == ["airdropops"]

    def test_relevance_rewards_impact_and_project(self):
        assert map_testimonial(make_testimonial()).metadata.relevance_score == 1.0
        general = make_testimonial(related_project_id=None, impact=None, category="general")
        assert map_testimonial(general).metadata.relevance_score == pytest.approx(0.9)

    def test_expertise_only_has_no_edge(self):
        raw = make_testimonial(related_project_id=None, related_expertise_id="smart-contracts")
        entity = map_testimonial(raw)
        assert entity.relationships == []
        assert "smart-contracts" in entity.metadata.tags
        assert "Related Expertise" in entity.content

    def test_quote_in_content(self):
        entity = map_testimonial(make_testimonial())
        assert '"The automation paid for itself in a week."' in entity.content
        assert entity.title == "Client Testimonial: Dana Reyes - Chain Labs"


class TestRegistry:
    def test_default_registry_covers_four_kinds(self):
        registry = default_registry()
        assert registry.kinds == [
            KnowledgeType.PROJECT_CASE_STUDY,
            KnowledgeType.ARCHITECTURAL_PRINCIPLE,
            KnowledgeType.INSIGHT,
            KnowledgeType.TESTIMONIAL,
        ]
        assert registry.get(KnowledgeType.INSIGHT) is map_insight

    def test_reserved_kind_has_no_mapper(self):
        registry = default_registry()
        assert registry.get(KnowledgeType.MISSION_LOG) is None
        assert KnowledgeType.MISSION_LOG not in registry

    def test_register_replaces(self):
        registry = MapperRegistry()
        registry.register(KnowledgeType.INSIGHT, map_insight)
        registry.register(KnowledgeType.INSIGHT, map_project)
        assert registry.get(KnowledgeType.INSIGHT) is map_project
