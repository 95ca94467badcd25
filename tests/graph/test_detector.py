"""Tests for pairwise relationship detection."""

import logging
from datetime import UTC, datetime

from knowledge_arsenal.graph.detector import RelationshipDetector, detect_pair
from knowledge_arsenal.graph.queries import build_adjacency
from knowledge_arsenal.models.entity import RelationshipType
from tests.conftest import make_entity


def test_shared_project_applies_to():
    a = make_entity("a", projects=["airdropops", "galyarderos"])
    b = make_entity("b", projects=["galyarderos"])

    [edge] = detect_pair(a, b)

    assert edge.target_id == "b"
    assert edge.relationship_type == RelationshipType.APPLIES_TO
    assert edge.strength == 0.7
    assert edge.bidirectional is True
    assert edge.validated is False
    assert edge.context == "Both relate to projects: galyarderos"


def test_shared_technology_references():
    a = make_entity("a", tech=["n8n", "Supabase"])
    b = make_entity("b", tech=["Supabase"])
    [edge] = detect_pair(a, b)
    assert edge.relationship_type == RelationshipType.REFERENCES
    assert edge.strength == 0.5
    assert edge.context == "Shared technologies: Supabase"


def test_two_shared_tags_supports():
    a = make_entity("a", tags=["web3", "defi", "ai"])
    b = make_entity("b", tags=["defi", "web3"])
    [edge] = detect_pair(a, b)
    assert edge.relationship_type == RelationshipType.SUPPORTS
    assert edge.strength == 0.4
    assert edge.context == "Shared concepts: web3, defi"


def test_one_shared_tag_is_not_enough():
    a = make_entity("a", tags=["web3", "ai"])
    b = make_entity("b", tags=["web3"])
    assert detect_pair(a, b) == []


def test_checks_are_independent():
    a = make_entity("a", projects=["p"], tech=["n8n"], tags=["x", "y"])
    b = make_entity("b", projects=["p"], tech=["n8n"], tags=["x", "y"])
    types = [e.relationship_type for e in detect_pair(a, b)]
    assert types == [
        RelationshipType.APPLIES_TO,
        RelationshipType.REFERENCES,
        RelationshipType.SUPPORTS,
    ]


def test_same_id_never_related():
    a = make_entity("a", projects=["p"])
    assert detect_pair(a, a) == []


def test_edges_stamped_with_given_time():
    now = datetime(2024, 5, 1, tzinfo=UTC)
    [edge] = detect_pair(make_entity("a", projects=["p"]), make_entity("b", projects=["p"]), now)
    assert edge.created_at == now


class TestRelationshipDetector:
    def test_edges_attached_to_first_entity(self):
        a = make_entity("a", projects=["p"])
        b = make_entity("b", projects=["p"])

        detected = RelationshipDetector().detect([a, b])

        assert len(detected) == 1
        assert [r.target_id for r in a.relationships] == ["b"]
        assert b.relationships == []

    def test_b_connected_through_bidirectional_edge(self):
        a = make_entity("a", projects=["p"])
        b = make_entity("b", projects=["p"])
        RelationshipDetector().detect([a, b])

        adjacency = build_adjacency([a, b])
        assert adjacency["a"] == ["b"]
        assert adjacency["b"] == ["a"]

    def test_comparisons_are_all_unordered_pairs(self):
        entities = [make_entity(str(i)) for i in range(6)]
        detector = RelationshipDetector()
        detector.detect(entities)
        assert detector.comparisons == 15

    def test_detect_appends_to_existing_edges(self):
        a = make_entity("a", projects=["p"])
        b = make_entity("b", projects=["p"])
        RelationshipDetector().detect([a, b])
        RelationshipDetector().detect([a, b])
        assert len(a.relationships) == 2

    def test_scaling_warning(self, caplog):
        entities = [make_entity(str(i)) for i in range(4)]
        with caplog.at_level(logging.WARNING, logger="knowledge_arsenal.graph.detector"):
            RelationshipDetector(warn_threshold=3).detect(entities)
        assert "Pairwise relationship detection over 4 entities" in caplog.text

    def test_no_warning_below_threshold(self, caplog):
        entities = [make_entity(str(i)) for i in range(3)]
        with caplog.at_level(logging.WARNING, logger="knowledge_arsenal.graph.detector"):
            RelationshipDetector(warn_threshold=3).detect(entities)
        assert caplog.text == ""
