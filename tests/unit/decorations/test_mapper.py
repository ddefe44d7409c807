"""Tests for decorations/mapper.py"""
import pytest
from conftest import heading, paragraph

from docdelta.decorations.mapper import DecorationMapper
from docdelta.diff.differ import StructuralDiffer
from docdelta.models import (
    ChangeType,
    Decoration,
    DecorationKind,
    EditStep,
    Proposal,
    ProposalDescriptor,
    branch_node,
    doc_node,
)


@pytest.fixture
def mapper(config):
    return DecorationMapper(config)


@pytest.fixture
def small_doc():
    """A 40-unit document."""
    return doc_node([
        heading("Day 1", level=2),
        paragraph("Louvre visit"),
        paragraph("Boat ride Seine"),
    ])


class TestSnapshotStrategy:
    def test_appended_heading(self, mapper, trip_doc):
        proposed = doc_node(list(trip_doc.children) + [heading("Day 2", 2)])
        decorations = mapper.decorations_for(trip_doc, ProposalDescriptor(proposed=proposed))
        assert decorations == [Decoration(13, 13, DecorationKind.INSERTED, "Day 2")]

    def test_replaced_word(self, mapper):
        current = doc_node([paragraph("Day 1")])
        proposed = doc_node([paragraph("Day 2")])
        decorations = mapper.decorations_for(current, ProposalDescriptor(proposed=proposed))
        assert decorations == [
            Decoration(6, 7, DecorationKind.DELETED),
            Decoration(7, 7, DecorationKind.INSERTED, "2"),
        ]

    def test_no_changes(self, mapper, trip_doc):
        assert mapper.decorations_for(trip_doc, ProposalDescriptor(proposed=trip_doc)) == []

    def test_snapshot_wins_over_change_type(self, mapper, trip_doc):
        descriptor = ProposalDescriptor(change_type=ChangeType.MODIFY, proposed=trip_doc)
        assert mapper.decorations_for(trip_doc, descriptor) == []


class TestStepsStrategy:
    def test_projects_stored_steps(self, mapper, trip_doc):
        proposal = Proposal(steps=[EditStep(7, 13), EditStep(1, 1, [paragraph("Intro")])])
        decorations = mapper.decorations_for(trip_doc, ProposalDescriptor(proposal=proposal))
        assert decorations == [
            Decoration(1, 1, DecorationKind.INSERTED, "Intro"),
            Decoration(7, 13, DecorationKind.DELETED),
        ]

    def test_block_content_joined_by_newline(self, mapper, trip_doc):
        steps = [EditStep(13, 13, [heading("Day 2"), paragraph("Louvre")])]
        decorations = mapper.from_steps(trip_doc, steps)
        assert decorations[0].content == "Day 2\nLouvre"

    def test_stale_steps_clamped(self, small_doc, capture_log, metrics, metrics_config):
        records = capture_log("docdelta.decorations")
        # Generated against a 53-unit revision; rendered on a 40-unit one.
        step = EditStep(45, 52, [paragraph("Dinner")])
        mapper = DecorationMapper(metrics_config)
        decorations = mapper.from_steps(small_doc, [step])
        for decoration in decorations:
            assert 0 <= decoration.from_ <= decoration.to <= 39
        assert decorations == [
            Decoration(39, 39, DecorationKind.DELETED),
            Decoration(39, 39, DecorationKind.INSERTED, "Dinner"),
        ]
        assert sum(1 for r in records if r.getMessage() == "Decoration range clamped") == 2
        assert metrics.names().count("docdelta.clamps_total") == 2


class TestCoarseStrategies:
    def test_add_is_point_at_end(self, mapper, trip_doc):
        descriptor = ProposalDescriptor(change_type=ChangeType.ADD, summary="Day 2: museums")
        assert mapper.decorations_for(trip_doc, descriptor) == [
            Decoration(13, 13, DecorationKind.INSERTED, "Day 2: museums")
        ]

    def test_modify_covers_content(self, mapper, trip_doc):
        descriptor = ProposalDescriptor(change_type=ChangeType.MODIFY)
        assert mapper.decorations_for(trip_doc, descriptor) == [
            Decoration(1, 13, DecorationKind.MODIFIED)
        ]

    def test_nothing_known_defaults_to_addition(self, mapper, trip_doc):
        assert mapper.decorations_for(trip_doc, ProposalDescriptor()) == [
            Decoration(13, 13, DecorationKind.INSERTED)
        ]

    def test_empty_step_list_falls_through(self, mapper, trip_doc):
        descriptor = ProposalDescriptor(change_type=ChangeType.MODIFY, proposal=Proposal())
        assert mapper.decorations_for(trip_doc, descriptor)[0].kind is DecorationKind.MODIFIED

    def test_modify_on_empty_document(self, mapper):
        assert mapper.decorations_for(doc_node(), ProposalDescriptor(change_type=ChangeType.MODIFY)) == [
            Decoration(1, 1, DecorationKind.MODIFIED)
        ]

    def test_strategy_metric(self, metrics, metrics_config, trip_doc):
        DecorationMapper(metrics_config).decorations_for(
            trip_doc, ProposalDescriptor(change_type=ChangeType.ADD)
        )
        calls = [c for c in metrics.increments if c["name"] == "docdelta.decorations_total"]
        assert calls == [
            {"name": "docdelta.decorations_total", "value": 1, "tags": {"strategy": "add"}}
        ]


class TestFromDiffTree:
    def test_merged_tree_ranges(self, mapper):
        old = doc_node([paragraph("Hello world")])
        new = doc_node([paragraph("Hello brave world")])
        tree = StructuralDiffer().diff(old, new)
        assert mapper.from_diff_tree(tree) == [Decoration(8, 14, DecorationKind.INSERTED)]

    def test_deleted_branch_is_one_range(self, mapper, trip_doc):
        tree = StructuralDiffer().diff(trip_doc, doc_node([paragraph("Plan")]))
        assert mapper.from_diff_tree(tree) == [Decoration(1, 7, DecorationKind.DELETED)]

    def test_adjacent_same_kind_coalesced(self, mapper):
        old = doc_node([paragraph("a")])
        new = doc_node([paragraph("a"), heading("b"), paragraph("c")])
        tree = StructuralDiffer().diff(old, new)
        assert mapper.from_diff_tree(tree) == [Decoration(4, 10, DecorationKind.INSERTED)]

    def test_delete_then_insert(self, mapper):
        old = doc_node([paragraph("x")])
        new = doc_node([branch_node("heading", [], attrs={"level": 1})])
        tree = StructuralDiffer().diff(old, new)
        assert mapper.from_diff_tree(tree) == [
            Decoration(1, 4, DecorationKind.DELETED),
            Decoration(4, 6, DecorationKind.INSERTED),
        ]
