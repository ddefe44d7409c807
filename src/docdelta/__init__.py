"""docdelta: structural diff and patch engine for collaborative documents.

Public re-exports
-----------------

* **Engine:** :class:`DocDeltaEngine`
* **Components:** :class:`StructuralDiffer`, :class:`StepGenerator`,
  :class:`DecorationMapper`, :class:`MarkdownConverter`
* **Configuration:** :class:`DocDeltaConfig`
* **Errors:** Every :class:`DocDeltaError` subclass, :class:`ErrorCode`
  and :class:`WarningCode`
* **Models:** All value types and enums

Usage::

    from docdelta import DocDeltaEngine

    engine = DocDeltaEngine()
    tree = engine.diff(old_json, new_json)
    proposal = engine.propose_from_diff(old_json, new_json)
"""

from __future__ import annotations

# ── Configuration ───────────────────────────────────────────────────────
from docdelta.config import DEFAULT_ID_ATTRS, MAX_DEPTH_CEILING, DocDeltaConfig

# ── Components ─────────────────────────────────────────────────────────
from docdelta.converter import MarkdownConverter
from docdelta.decorations import DecorationMapper
from docdelta.diff import StructuralDiffer, accepted, diff_stats, rejected, strip_diff
from docdelta.document import (
    content_between,
    document_size,
    find_node,
    node_from_json,
    node_size,
    node_to_json,
)

# ── Engine ─────────────────────────────────────────────────────────────
from docdelta.engine import DocDeltaEngine

# ── Errors ──────────────────────────────────────────────────────────────
from docdelta.errors import (
    DocDeltaConversionError,
    DocDeltaError,
    DocDeltaLimitError,
    DocDeltaMalformedNodeError,
    DocDeltaOperationError,
    ErrorCode,
    WarningCode,
)

# ── Models ──────────────────────────────────────────────────────────────
from docdelta.models import (
    ChangeType,
    Decoration,
    DecorationKind,
    DeltaWarning,
    DiffKind,
    DiffStats,
    EditDescription,
    EditOperation,
    EditStep,
    Mark,
    Node,
    Proposal,
    ProposalDescriptor,
    branch_node,
    doc_node,
    text_node,
)
from docdelta.patch import StepGenerator, apply_step, apply_steps, invert_step

# ── Public surface ──────────────────────────────────────────────────────

__all__ = [
    # Engine
    "DocDeltaEngine",
    # Components
    "StructuralDiffer",
    "StepGenerator",
    "DecorationMapper",
    "MarkdownConverter",
    # Configuration
    "DocDeltaConfig",
    "DEFAULT_ID_ATTRS",
    "MAX_DEPTH_CEILING",
    # Errors
    "DocDeltaError",
    "ErrorCode",
    "WarningCode",
    "DocDeltaMalformedNodeError",
    "DocDeltaLimitError",
    "DocDeltaOperationError",
    "DocDeltaConversionError",
    # Models: document tree
    "Node",
    "Mark",
    "text_node",
    "branch_node",
    "doc_node",
    # Models: diff and patch
    "DiffKind",
    "DiffStats",
    "EditStep",
    "Proposal",
    "DeltaWarning",
    "EditDescription",
    "EditOperation",
    # Models: decorations
    "ChangeType",
    "Decoration",
    "DecorationKind",
    "ProposalDescriptor",
    # Functions
    "accepted",
    "rejected",
    "strip_diff",
    "diff_stats",
    "apply_step",
    "apply_steps",
    "invert_step",
    "content_between",
    "document_size",
    "node_size",
    "find_node",
    "node_from_json",
    "node_to_json",
]
