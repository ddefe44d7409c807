"""Error hierarchy, context fields and public exports."""

from __future__ import annotations

import pickle

import pytest

import docdelta
from docdelta import __all__ as PKG_ALL
from docdelta.errors import (
    DocDeltaConversionError,
    DocDeltaError,
    DocDeltaLimitError,
    DocDeltaMalformedNodeError,
    DocDeltaOperationError,
    ErrorCode,
    WarningCode,
)

_SUBCLASSES = {
    ErrorCode.MALFORMED_NODE: DocDeltaMalformedNodeError,
    ErrorCode.LIMIT_EXCEEDED: DocDeltaLimitError,
    ErrorCode.INVALID_OPERATION: DocDeltaOperationError,
    ErrorCode.CONVERSION_ERROR: DocDeltaConversionError,
}


class TestHierarchy:
    def test_every_code_has_a_subclass(self):
        assert set(_SUBCLASSES) == set(ErrorCode)

    @pytest.mark.parametrize("code,cls", list(_SUBCLASSES.items()))
    def test_subclass_sets_code(self, code, cls):
        err = cls("boom", context={"reason": "x"})
        assert isinstance(err, DocDeltaError)
        assert err.code == code
        assert err.message == "boom"
        assert err.context == {"reason": "x"}
        assert str(err) == "boom"

    def test_cause_is_chained(self):
        root = ValueError("bad")
        err = DocDeltaConversionError("wrapped", cause=root)
        assert err.cause is root
        assert err.__cause__ is root

    def test_context_defaults_to_empty_dict(self):
        assert DocDeltaLimitError("too big").context == {}

    def test_repr_includes_context(self):
        err = DocDeltaLimitError("too big", context={"limit": "max_nodes"})
        text = repr(err)
        assert text.startswith("DocDeltaLimitError(")
        assert "max_nodes" in text

    @pytest.mark.parametrize("cls", list(_SUBCLASSES.values()))
    def test_pickle_round_trip(self, cls):
        err = cls("boom", context={"reason": "x"})
        restored = pickle.loads(pickle.dumps(err))
        assert type(restored) is cls
        assert restored.code == err.code
        assert restored.context == {"reason": "x"}


class TestRaisedContext:
    def test_malformed_node_context(self):
        from docdelta.models import Node

        with pytest.raises(DocDeltaMalformedNodeError) as exc_info:
            Node(type="paragraph")
        assert exc_info.value.context == {"node_type": "paragraph", "reason": "neither"}

    def test_limit_context(self, trip_doc):
        from docdelta import DocDeltaEngine

        with pytest.raises(DocDeltaLimitError) as exc_info:
            DocDeltaEngine(max_nodes=2).parse(trip_doc)
        context = exc_info.value.context
        assert context["limit"] == "max_nodes"
        assert context["max_value"] == 2

    def test_operation_context(self, trip_doc):
        from docdelta.models import EditDescription
        from docdelta.patch import StepGenerator

        with pytest.raises(DocDeltaOperationError) as exc_info:
            StepGenerator().from_edit(trip_doc, EditDescription("move", "p-1"))
        assert exc_info.value.context == {"operation": "move", "target_id": "p-1"}
        assert isinstance(exc_info.value.cause, ValueError)


class TestExports:
    def test_all_names_resolve(self):
        for name in PKG_ALL:
            assert hasattr(docdelta, name), name

    def test_no_duplicates(self):
        assert len(PKG_ALL) == len(set(PKG_ALL))

    def test_codes_are_strings(self):
        assert WarningCode.RANGE_WIDENED == "RANGE_WIDENED"
        assert ErrorCode.LIMIT_EXCEEDED.value == "LIMIT_EXCEEDED"
