"""Property-based tests for docdelta using Hypothesis.

These tests verify the algebraic laws of the diff and patch engine over
randomly generated document trees.  They complement the example-based
unit tests by exercising nesting, marks and text runs in combinations no
hand-written case covers.
"""

from __future__ import annotations

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from docdelta.decorations import DecorationMapper
from docdelta.diff import StructuralDiffer, accepted, diff_stats, rejected
from docdelta.document.json_io import node_from_json, node_to_json
from docdelta.document.positions import document_size, iter_boundaries, node_size, walk
from docdelta.models import DiffKind, EditStep, Mark, branch_node, doc_node, text_node
from docdelta.patch import StepGenerator, apply_step, apply_steps, invert_step

# ---------------------------------------------------------------------------
# Reusable strategies
# ---------------------------------------------------------------------------

# A small alphabet makes shared runs between two random documents likely.
_text_st = st.builds(
    text_node,
    st.text(alphabet="ab ", min_size=1, max_size=6),
    st.sampled_from([(), (Mark("bold"),), (Mark("link", {"href": "/a"}),)]),
)

_branch_type_st = st.sampled_from([
    ("paragraph", {}),
    ("heading", {"level": 1}),
    ("heading", {"level": 2}),
    ("blockquote", {}),
    ("listItem", {"id": "li-1"}),
])


def _branch(children_st):
    return st.builds(
        lambda kind, children: branch_node(kind[0], children, attrs=kind[1]),
        _branch_type_st,
        st.lists(children_st, max_size=4),
    )


_node_st = st.recursive(_text_st, _branch, max_leaves=12)

_doc_st = st.lists(_node_st, max_size=5).map(doc_node)

_PROPERTY_SETTINGS = settings(
    max_examples=150,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)

_differ = StructuralDiffer()
_generator = StepGenerator()


# ---------------------------------------------------------------------------
# Position model
# ---------------------------------------------------------------------------

class TestPositions:

    @_PROPERTY_SETTINGS
    @given(doc=_doc_st)
    def test_boundaries_increase_to_document_size(self, doc):
        boundaries = list(iter_boundaries(doc))
        assert boundaries == sorted(boundaries)
        assert boundaries[-1] == document_size(doc)

    @_PROPERTY_SETTINGS
    @given(doc=_doc_st)
    def test_walk_positions_are_consistent_with_sizes(self, doc):
        for pos, node, _depth in walk(doc):
            assert 0 <= pos
            assert pos + node_size(node) <= document_size(doc)

    @_PROPERTY_SETTINGS
    @given(doc=_doc_st)
    def test_json_round_trip(self, doc):
        assert node_from_json(node_to_json(doc)) == doc


# ---------------------------------------------------------------------------
# Diff
# ---------------------------------------------------------------------------

class TestDiffLaws:

    @_PROPERTY_SETTINGS
    @given(old=_doc_st, new=_doc_st)
    def test_tree_spells_both_documents(self, old, new):
        tree = _differ.diff(old, new)
        assert accepted(tree) == new
        assert rejected(tree) == old

    @_PROPERTY_SETTINGS
    @given(old=_doc_st, new=_doc_st)
    def test_every_node_is_marked(self, old, new):
        tree = _differ.diff(old, new)
        assert all(node.diff is not None for _pos, node, _depth in walk(tree))

    @_PROPERTY_SETTINGS
    @given(doc=_doc_st)
    def test_self_diff_has_no_changes(self, doc):
        tree = _differ.diff(doc, doc)
        assert not diff_stats(tree).has_changes
        assert all(node.diff is DiffKind.UNCHANGED for _pos, node, _depth in walk(tree))

    @_PROPERTY_SETTINGS
    @given(old=_doc_st, new=_doc_st)
    def test_character_counts_cover_both_sides(self, old, new):
        stats = diff_stats(_differ.diff(old, new))
        old_chars = sum(len(n.text) for _p, n, _d in walk(old) if n.is_text)
        new_chars = sum(len(n.text) for _p, n, _d in walk(new) if n.is_text)
        assert stats.unchanged_chars + stats.deleted_chars == old_chars
        assert stats.unchanged_chars + stats.inserted_chars == new_chars


# ---------------------------------------------------------------------------
# Patch
# ---------------------------------------------------------------------------

class TestPatchLaws:

    @_PROPERTY_SETTINGS
    @given(old=_doc_st, new=_doc_st)
    def test_steps_turn_old_into_new(self, old, new):
        proposal = _generator.from_documents(old, new)
        assert apply_steps(old, proposal.steps) == new

    @_PROPERTY_SETTINGS
    @given(old=_doc_st, new=_doc_st)
    def test_inverse_steps_restore_old(self, old, new):
        proposal = _generator.from_documents(old, new)
        applied = apply_steps(old, proposal.steps)
        assert apply_steps(applied, proposal.inverse_steps) == old

    @_PROPERTY_SETTINGS
    @given(old=_doc_st, new=_doc_st)
    def test_diff_steps_need_no_adjustment(self, old, new):
        proposal = _generator.from_documents(old, new)
        warnings = []
        apply_steps(old, proposal.steps, warnings)
        assert warnings == []

    @_PROPERTY_SETTINGS
    @given(doc=_doc_st)
    def test_self_proposal_is_empty(self, doc):
        proposal = _generator.from_documents(doc, doc)
        assert proposal.is_empty
        assert proposal.inverse_steps == []

    @_PROPERTY_SETTINGS
    @given(
        doc=_doc_st,
        from_=st.integers(min_value=-5, max_value=80),
        to=st.integers(min_value=-5, max_value=80),
        insert=st.lists(_node_st, max_size=2),
    )
    def test_any_step_applies_and_inverts(self, doc, from_, to, insert):
        step = EditStep(from_, to, insert)
        inverse = invert_step(doc, step)
        applied = apply_step(doc, step)
        assert applied.type == "doc"
        assert apply_step(applied, inverse) == doc


# ---------------------------------------------------------------------------
# Decorations
# ---------------------------------------------------------------------------

class TestDecorationLaws:

    @_PROPERTY_SETTINGS
    @given(
        doc=_doc_st,
        bounds=st.lists(
            st.tuples(st.integers(-10, 100), st.integers(-10, 100)), max_size=4
        ),
    )
    def test_decorations_stay_inside_document(self, doc, bounds):
        steps = [EditStep(a, b, [text_node("x")]) for a, b in bounds]
        size = document_size(doc)
        for decoration in DecorationMapper().from_steps(doc, steps):
            assert 0 <= decoration.from_ <= decoration.to <= size - 1

    @_PROPERTY_SETTINGS
    @given(old=_doc_st, new=_doc_st)
    def test_diff_tree_decorations_are_ordered(self, old, new):
        tree = _differ.diff(old, new)
        decorations = DecorationMapper().from_diff_tree(tree)
        for first, second in zip(decorations, decorations[1:]):
            assert first.to <= second.from_
