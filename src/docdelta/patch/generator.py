"""Proposal generation: turning diffs and edit descriptions into steps.

Two entry points produce a :class:`~docdelta.models.Proposal`:

* :meth:`StepGenerator.from_diff_tree` walks a DiffMark-annotated tree and
  coalesces each run of adjacent changed siblings into one replace step.
* :meth:`StepGenerator.from_edit` resolves an identifier-addressed
  :class:`~docdelta.models.EditDescription` to a position range.

In both cases applying ``steps`` and then ``inverse_steps`` to the source
document reproduces it exactly.
"""

from __future__ import annotations

import json
import sys
from typing import Any

from docdelta.config import DocDeltaConfig
from docdelta.converter import MarkdownConverter
from docdelta.diff import StructuralDiffer, strip_diff
from docdelta.document.json_io import node_from_json, proposal_to_json
from docdelta.document.positions import (
    DOC_CONTENT_START,
    document_size,
    find_node,
    node_size,
    sequence_size,
)
from docdelta.errors import DocDeltaConversionError, DocDeltaOperationError, WarningCode
from docdelta.models import (
    DeltaWarning,
    DiffKind,
    EditDescription,
    EditOperation,
    EditStep,
    Node,
    Proposal,
)
from docdelta.observability import get_logger, resolve_metrics

from .steps import invert_step

log = get_logger("docdelta.patch")

_CHANGED = (DiffKind.DELETED, DiffKind.INSERTED)


class _Cursor:
    """Old and new document positions while walking a diff tree."""

    __slots__ = ("new", "old")

    def __init__(self) -> None:
        self.old = DOC_CONTENT_START
        self.new = DOC_CONTENT_START


class StepGenerator:
    """Builds proposals from diffs and edit descriptions.

    Parameters
    ----------
    config:
        Engine configuration.  ``id_attrs`` controls identifier lookup,
        ``debug_dump_steps`` dumps every proposal to *stderr*.
    converter:
        Converter used for Markdown content.  Created on demand.
    """

    def __init__(
        self,
        config: DocDeltaConfig | None = None,
        converter: MarkdownConverter | None = None,
    ) -> None:
        self._config = config or DocDeltaConfig()
        self._metrics = resolve_metrics(self._config.metrics)
        self._differ = StructuralDiffer(self._config)
        self._converter = converter

    # ------------------------------------------------------------------
    # From a diff
    # ------------------------------------------------------------------

    def from_documents(self, old: Node, new: Node) -> Proposal:
        """Diff *old* against *new* and convert the result to steps."""
        warnings: list[DeltaWarning] = []
        tree = self._differ.diff(old, new, warnings)
        proposal = self.from_diff_tree(tree)
        proposal.warnings[:0] = warnings
        return proposal

    def from_diff_tree(self, tree: Node) -> Proposal:
        """Convert a DiffMark-annotated tree to a proposal.

        Steps are in old-document coordinates and ordered by descending
        position, so each stays valid while the previous ones are applied.
        Inverse steps are in new-document coordinates, also descending.
        """
        steps: list[EditStep] = []
        inverse_steps: list[EditStep] = []
        self._collect(tree, _Cursor(), steps, inverse_steps)
        steps.reverse()
        inverse_steps.reverse()
        proposal = Proposal(steps=steps, inverse_steps=inverse_steps)
        self._record(proposal, "diff")
        return proposal

    def _collect(
        self,
        parent: Node,
        cursor: _Cursor,
        steps: list[EditStep],
        inverse_steps: list[EditStep],
    ) -> None:
        children = parent.children
        index = 0
        while index < len(children):
            child = children[index]
            if child.diff not in _CHANGED:
                if child.is_text:
                    cursor.old += len(child.text)
                    cursor.new += len(child.text)
                else:
                    cursor.old += 1
                    cursor.new += 1
                    self._collect(child, cursor, steps, inverse_steps)
                    cursor.old += 1
                    cursor.new += 1
                index += 1
                continue

            deleted: list[Node] = []
            inserted: list[Node] = []
            while index < len(children) and children[index].diff in _CHANGED:
                node = children[index]
                target = deleted if node.diff is DiffKind.DELETED else inserted
                target.append(strip_diff(node))
                index += 1

            deleted_size = sequence_size(deleted)
            inserted_size = sequence_size(inserted)
            steps.append(EditStep(cursor.old, cursor.old + deleted_size, inserted))
            inverse_steps.append(EditStep(cursor.new, cursor.new + inserted_size, deleted))
            cursor.old += deleted_size
            cursor.new += inserted_size

    # ------------------------------------------------------------------
    # From an edit description
    # ------------------------------------------------------------------

    def from_edit(self, doc: Node, edit: EditDescription) -> Proposal:
        """Resolve *edit* against *doc* and build a single-step proposal.

        A target that no longer exists falls back to an insertion at the
        end of the document (or to an empty proposal for ``delete``) and
        is reported as an ``UNRESOLVABLE_TARGET`` warning.

        Raises
        ------
        DocDeltaOperationError
            If ``edit.operation`` is not a known operation.
        DocDeltaConversionError
            If ``edit.content`` cannot be converted to nodes.
        """
        try:
            operation = EditOperation(edit.operation)
        except ValueError as exc:
            raise DocDeltaOperationError(
                f"Unknown edit operation {edit.operation!r}",
                context={"operation": str(edit.operation), "target_id": edit.target_id},
                cause=exc,
            ) from exc

        content: tuple[Node, ...] = ()
        if operation is not EditOperation.DELETE:
            content = self.coerce_content(edit.content)

        proposal = Proposal()
        found = find_node(doc, edit.target_id, self._config.id_attrs)
        if found is None:
            size = document_size(doc)
            fields = {
                "op": "from_edit",
                "operation": operation.value,
                "target_id": edit.target_id,
                "doc_size": size,
            }
            log.warning("Edit target not found", extra={"extra_fields": fields})
            proposal.warnings.append(
                DeltaWarning(
                    code=WarningCode.UNRESOLVABLE_TARGET,
                    message=f"No node with identifier {edit.target_id!r}",
                    context=fields,
                )
            )
            if operation is EditOperation.DELETE:
                return proposal
            from_ = to = size - 1
        else:
            pos, node = found
            end = pos + node_size(node)
            from_, to = {
                EditOperation.INSERT_BEFORE: (pos, pos),
                EditOperation.INSERT_AFTER: (end, end),
                EditOperation.REPLACE: (pos, end),
                EditOperation.DELETE: (pos, end),
            }[operation]

        step = EditStep(from_, to, content)
        proposal.steps.append(step)
        proposal.inverse_steps.append(invert_step(doc, step))
        self._record(proposal, "edit")
        return proposal

    def coerce_content(self, content: Any) -> tuple[Node, ...]:
        """Normalise edit content to a tuple of plain nodes.

        Accepts a Markdown string, a single node or editor-JSON dict, or a
        list mixing nodes, dicts and Markdown strings.
        """
        if isinstance(content, (str, Node, dict)):
            content = [content]
        if not isinstance(content, (list, tuple)):
            raise DocDeltaConversionError(
                "Edit content must be nodes, editor JSON or Markdown",
                context={"content_type": type(content).__name__, "reason": "unsupported"},
            )
        nodes: list[Node] = []
        for item in content:
            if isinstance(item, Node):
                nodes.append(strip_diff(item))
            elif isinstance(item, dict):
                nodes.append(
                    strip_diff(
                        node_from_json(
                            item,
                            max_depth=self._config.max_depth,
                            max_nodes=self._config.max_nodes,
                        )
                    )
                )
            elif isinstance(item, str):
                nodes.extend(self._markdown().convert(item))
            else:
                raise DocDeltaConversionError(
                    f"Unsupported content item of type {type(item).__name__}",
                    context={"content_type": type(item).__name__, "reason": "unsupported"},
                )
        return tuple(nodes)

    def _markdown(self) -> MarkdownConverter:
        if self._converter is None:
            self._converter = MarkdownConverter(debug_dump=self._config.debug_dump_steps)
        return self._converter

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def _record(self, proposal: Proposal, source: str) -> None:
        self._metrics.increment(
            "docdelta.steps_total", len(proposal.steps), tags={"source": source}
        )
        log.debug(
            "Proposal generated",
            extra={"extra_fields": {"source": source, "steps": len(proposal.steps)}},
        )
        if self._config.debug_dump_steps:
            print(
                "[docdelta] Proposal:",
                json.dumps(proposal_to_json(proposal), indent=2, ensure_ascii=False),
                file=sys.stderr,
            )
