"""High-level facade over the diff, patch and decoration components.

:class:`DocDeltaEngine` wires the components to one shared
:class:`~docdelta.config.DocDeltaConfig` and accepts documents either as
:class:`~docdelta.models.Node` trees or as editor JSON.

Usage::

    from docdelta import DocDeltaEngine, ProposalDescriptor

    engine = DocDeltaEngine(max_nodes=2000)
    proposal = engine.propose_from_diff(current_json, proposed_json)
    preview = engine.apply(current_json, proposal.steps)
    decorations = engine.decorations(
        current_json, ProposalDescriptor(proposed=engine.parse(proposed_json))
    )
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from docdelta.config import DocDeltaConfig
from docdelta.converter import MarkdownConverter
from docdelta.decorations import DecorationMapper
from docdelta.diff import StructuralDiffer, accepted, diff_stats, rejected
from docdelta.document.json_io import check_limits, node_from_json
from docdelta.document.positions import assign_ids
from docdelta.models import (
    Decoration,
    DeltaWarning,
    DiffStats,
    EditDescription,
    EditStep,
    Node,
    Proposal,
    ProposalDescriptor,
)
from docdelta.observability import get_logger, resolve_metrics
from docdelta.patch import StepGenerator, apply_steps

log = get_logger("docdelta.engine")

Document = Node | dict[str, Any]


class DocDeltaEngine:
    """Diff, patch and preview engine for collaborative documents.

    Parameters
    ----------
    config:
        A pre-built configuration.  When omitted, one is built from
        *kwargs*.
    **kwargs:
        Forwarded to :class:`DocDeltaConfig` when *config* is ``None``.
    """

    def __init__(self, config: DocDeltaConfig | None = None, **kwargs: Any) -> None:
        self._config = config if config is not None else DocDeltaConfig(**kwargs)
        self._metrics = resolve_metrics(self._config.metrics)
        self._converter = MarkdownConverter(debug_dump=self._config.debug_dump_steps)
        self._differ = StructuralDiffer(self._config)
        self._generator = StepGenerator(self._config, converter=self._converter)
        self._mapper = DecorationMapper(self._config, generator=self._generator)

    @property
    def config(self) -> DocDeltaConfig:
        return self._config

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def parse(self, data: Document) -> Node:
        """Return *data* as a :class:`Node`, enforcing the configured limits."""
        if isinstance(data, Node):
            check_limits(
                data,
                max_nodes=self._config.max_nodes,
                max_depth=self._config.max_depth,
            )
            return data
        return node_from_json(
            data,
            max_depth=self._config.max_depth,
            max_nodes=self._config.max_nodes,
        )

    def assign_ids(self, doc: Document) -> Node:
        """Give every branch of *doc* a stable identifier."""
        return assign_ids(self.parse(doc), prefix=self._config.id_prefix)

    def markdown_to_nodes(self, markdown: str) -> list[Node]:
        """Convert *markdown* to block nodes."""
        return self._converter.convert(markdown)

    # ------------------------------------------------------------------
    # Diff
    # ------------------------------------------------------------------

    def diff(
        self,
        old: Document,
        new: Document,
        warnings: list[DeltaWarning] | None = None,
    ) -> Node:
        """Return the DiffMark-annotated merge of *old* and *new*."""
        return self._differ.diff(self.parse(old), self.parse(new), warnings)

    def stats(self, tree: Node) -> DiffStats:
        """Count changed characters and nodes of a diff tree."""
        return diff_stats(tree)

    def accept_all(self, tree: Node) -> Node:
        """Project *tree* onto the document with every change accepted."""
        return accepted(tree)

    def reject_all(self, tree: Node) -> Node:
        """Project *tree* onto the document with every change rejected."""
        return rejected(tree)

    # ------------------------------------------------------------------
    # Proposals
    # ------------------------------------------------------------------

    def propose_from_diff(self, old: Document, new: Document) -> Proposal:
        """Build the steps that turn *old* into *new*."""
        return self._generator.from_documents(self.parse(old), self.parse(new))

    def propose_edit(self, doc: Document, edit: EditDescription) -> Proposal:
        """Build the step for an identifier-addressed edit of *doc*."""
        return self._generator.from_edit(self.parse(doc), edit)

    def apply(
        self,
        doc: Document,
        steps: Iterable[EditStep],
        warnings: list[DeltaWarning] | None = None,
    ) -> Node:
        """Apply *steps* to *doc*, clamping and widening as needed."""
        return apply_steps(self.parse(doc), steps, warnings, self._metrics)

    def revert(
        self,
        doc: Document,
        proposal: Proposal,
        warnings: list[DeltaWarning] | None = None,
    ) -> Node:
        """Undo *proposal* on the document it was applied to."""
        log.debug(
            "Reverting proposal",
            extra={"extra_fields": {"steps": len(proposal.inverse_steps)}},
        )
        return apply_steps(self.parse(doc), proposal.inverse_steps, warnings, self._metrics)

    # ------------------------------------------------------------------
    # Decorations
    # ------------------------------------------------------------------

    def decorations(
        self,
        current: Document,
        descriptor: ProposalDescriptor,
    ) -> list[Decoration]:
        """Return decorations previewing *descriptor* on *current*."""
        return self._mapper.decorations_for(self.parse(current), descriptor)

    def diff_decorations(self, tree: Node) -> list[Decoration]:
        """Return decorations for a merged diff tree in its own coordinates."""
        return self._mapper.from_diff_tree(tree)
