"""Tests for patch/steps.py"""
from conftest import bold, heading, paragraph

from docdelta.document.positions import document_size, text_content
from docdelta.errors import WarningCode
from docdelta.models import EditStep, Mark, branch_node, doc_node, text_node
from docdelta.patch.steps import apply_step, apply_steps, invert_step


class TestApplyStep:
    def test_insert_block_between_blocks(self, trip_doc):
        result = apply_step(trip_doc, EditStep(7, 7, [paragraph("New")]))
        assert [c.type for c in result.children] == ["heading", "paragraph", "paragraph"]
        assert text_content(result) == "TripNewPlan"

    def test_insert_at_end_of_document(self, trip_doc):
        end = document_size(trip_doc) - 1
        result = apply_step(trip_doc, EditStep(end, end, [heading("Day 2", 2)]))
        assert result.children[-1] == heading("Day 2", 2)

    def test_insert_text_inside_paragraph(self):
        doc = doc_node([paragraph("Hello world")])
        result = apply_step(doc, EditStep(8, 8, [text_node("brave ")]))
        assert result == doc_node([paragraph("Hello brave world")])

    def test_delete_text_range(self, trip_doc):
        result = apply_step(trip_doc, EditStep(8, 10))
        assert text_content(result) == "Tripan"

    def test_delete_whole_block(self, trip_doc):
        result = apply_step(trip_doc, EditStep(1, 7))
        assert result == doc_node([paragraph("Plan")])

    def test_replace_text_keeps_marks_outside_range(self):
        doc = doc_node([paragraph("see ", bold("Louvre"))])
        result = apply_step(doc, EditStep(2, 6, [text_node("visit ")]))
        para = result.children[0]
        assert para.children == (text_node("visit "), text_node("Louvre", [Mark("bold")]))

    def test_original_untouched(self, trip_doc):
        before = trip_doc
        apply_step(trip_doc, EditStep(1, 13))
        assert text_content(before) == "TripPlan"

    def test_nested_insertion(self, itinerary_doc):
        # Start of the list item's content
        result = apply_step(itinerary_doc, EditStep(39, 39, [paragraph("Eiffel")]))
        item = result.children[3].children[0]
        assert [text_content(c) for c in item.children] == ["Eiffel", "Boat ride"]


class TestClampingAndWidening:
    def test_out_of_range_is_clamped(self, trip_doc, capture_log, metrics):
        records = capture_log("docdelta.patch")
        warnings = []
        result = apply_step(
            trip_doc, EditStep(40, 48, [paragraph("x")]), warnings, metrics
        )
        assert result.children[-1] == paragraph("x")
        assert warnings[0].code == WarningCode.OUT_OF_RANGE_POSITION
        assert warnings[0].context["clamped_from"] == 13
        assert any(r.getMessage() == "Step position clamped" for r in records)
        assert metrics.names() == ["docdelta.clamps_total"]

    def test_negative_position_inserts_at_start(self, trip_doc):
        warnings = []
        result = apply_step(trip_doc, EditStep(-5, -5, [paragraph("x")]), warnings)
        assert result.children[0] == paragraph("x")
        assert len(warnings) == 1

    def test_in_range_step_has_no_warnings(self, trip_doc):
        warnings = []
        apply_step(trip_doc, EditStep(7, 7, [paragraph("x")]), warnings)
        assert warnings == []

    def test_range_cutting_branch_open_is_widened(self, trip_doc):
        warnings = []
        result = apply_step(trip_doc, EditStep(4, 9), warnings)
        assert result == doc_node()
        assert warnings[0].code == WarningCode.RANGE_WIDENED
        assert (warnings[0].context["widened_from"], warnings[0].context["widened_to"]) == (1, 13)


class TestApplySteps:
    def test_descending_steps_stay_valid(self):
        doc = doc_node([paragraph("a"), paragraph("b"), paragraph("c")])
        steps = [EditStep(7, 10), EditStep(1, 4, [heading("A")])]
        result = apply_steps(doc, steps)
        assert result == doc_node([heading("A"), paragraph("b")])

    def test_empty(self, trip_doc):
        assert apply_steps(trip_doc, []) is trip_doc


class TestInvertStep:
    def test_insertion_inverse_deletes(self, trip_doc):
        step = EditStep(7, 7, [paragraph("New")])
        assert invert_step(trip_doc, step) == EditStep(7, 12)

    def test_deletion_inverse_restores(self, trip_doc):
        step = EditStep(1, 7)
        inverse = invert_step(trip_doc, step)
        assert inverse == EditStep(1, 1, [heading("Trip")])
        assert apply_step(apply_step(trip_doc, step), inverse) == trip_doc

    def test_text_replacement_round_trip(self, trip_doc):
        step = EditStep(8, 10, [text_node("Gr")])
        inverse = invert_step(trip_doc, step)
        assert inverse == EditStep(8, 10, [text_node("Pl")])
        assert apply_step(apply_step(trip_doc, step), inverse) == trip_doc

    def test_inverse_of_widened_step_is_exact(self, trip_doc):
        step = EditStep(4, 9, [paragraph("x")])
        inverse = invert_step(trip_doc, step)
        assert inverse.from_ == 1
        assert apply_step(apply_step(trip_doc, step), inverse) == trip_doc

    def test_inverse_of_clamped_step(self, trip_doc):
        step = EditStep(90, 90, [paragraph("x")])
        inverse = invert_step(trip_doc, step)
        assert inverse == EditStep(13, 16)
        assert apply_step(apply_step(trip_doc, step), inverse) == trip_doc

    def test_nested_insert_round_trip(self):
        doc = doc_node([branch_node("blockquote", [paragraph("a")])])
        step = EditStep(2, 2, [paragraph("b")])
        inverse = invert_step(doc, step)
        assert apply_step(apply_step(doc, step), inverse) == doc
