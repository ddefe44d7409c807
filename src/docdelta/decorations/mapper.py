"""Projection of proposals onto the current document as decorations.

:class:`DecorationMapper` picks the most precise strategy a stored
proposal allows:

1. ``snapshot``: the proposed document is known, so it is diffed against
   the current one and the resulting steps are projected.
2. ``steps``: only previously generated steps are known.
3. ``modify``: a coarse modification; the whole content is highlighted.
4. ``add``: a coarse addition (also the fallback when nothing is known);
   a single insertion point at the end of the document.

Every decoration is clamped into ``[0, document_size - 1]`` of the
document it is rendered on.
"""

from __future__ import annotations

from collections.abc import Iterable

from docdelta.config import DocDeltaConfig
from docdelta.document.positions import (
    DOC_CONTENT_START,
    clamp_range,
    document_size,
    node_size,
    text_content,
    walk,
)
from docdelta.models import (
    ChangeType,
    Decoration,
    DecorationKind,
    DiffKind,
    EditStep,
    Node,
    ProposalDescriptor,
)
from docdelta.observability import get_logger, resolve_metrics
from docdelta.patch import StepGenerator

log = get_logger("docdelta.decorations")

_DIFF_TO_DECORATION: dict[DiffKind, DecorationKind] = {
    DiffKind.INSERTED: DecorationKind.INSERTED,
    DiffKind.DELETED: DecorationKind.DELETED,
}


def _insert_text(nodes: Iterable[Node]) -> str:
    nodes = list(nodes)
    if all(node.is_text for node in nodes):
        return "".join(node.text for node in nodes)
    return "\n".join(text_content(node) for node in nodes)


class DecorationMapper:
    """Maps proposals, steps and diff trees to :class:`Decoration` ranges.

    Parameters
    ----------
    config:
        Engine configuration, shared with the internal step generator.
    generator:
        Step generator used for the snapshot strategy.
    """

    def __init__(
        self,
        config: DocDeltaConfig | None = None,
        generator: StepGenerator | None = None,
    ) -> None:
        self._config = config or DocDeltaConfig()
        self._metrics = resolve_metrics(self._config.metrics)
        self._generator = generator or StepGenerator(self._config)

    def decorations_for(
        self,
        current: Node,
        descriptor: ProposalDescriptor,
    ) -> list[Decoration]:
        """Return the decorations previewing *descriptor* on *current*."""
        size = document_size(current)
        if descriptor.proposed is not None:
            strategy = "snapshot"
            proposal = self._generator.from_documents(current, descriptor.proposed)
            decorations = self.from_steps(current, proposal.steps)
        elif descriptor.proposal is not None and descriptor.proposal.steps:
            strategy = "steps"
            decorations = self.from_steps(current, descriptor.proposal.steps)
        elif descriptor.change_type is ChangeType.MODIFY:
            strategy = "modify"
            decorations = [
                self._clamped(
                    Decoration(DOC_CONTENT_START, size - 1, DecorationKind.MODIFIED),
                    size,
                )
            ]
        else:
            strategy = "add"
            point = size - 1
            decorations = [
                Decoration(
                    point,
                    point,
                    DecorationKind.INSERTED,
                    descriptor.summary or None,
                )
            ]

        self._metrics.increment(
            "docdelta.decorations_total",
            len(decorations),
            tags={"strategy": strategy},
        )
        log.debug(
            "Decorations mapped",
            extra={"extra_fields": {"strategy": strategy, "count": len(decorations)}},
        )
        return decorations

    def from_steps(self, doc: Node, steps: Iterable[EditStep]) -> list[Decoration]:
        """Project *steps* (in *doc*'s coordinates) onto *doc*.

        A deleted range becomes a ``DELETED`` decoration; inserted content
        becomes an ``INSERTED`` point at the end of the replaced range,
        carrying the text about to be inserted.  Decorations are returned
        in ascending position order.
        """
        size = document_size(doc)
        decorations: list[Decoration] = []
        for step in sorted(steps, key=lambda s: (s.from_, s.to)):
            if step.to != step.from_:
                decorations.append(
                    self._clamped(
                        Decoration(step.from_, step.to, DecorationKind.DELETED),
                        size,
                    )
                )
            if step.insert:
                decorations.append(
                    self._clamped(
                        Decoration(
                            step.to,
                            step.to,
                            DecorationKind.INSERTED,
                            _insert_text(step.insert),
                        ),
                        size,
                    )
                )
        return decorations

    def from_diff_tree(self, tree: Node) -> list[Decoration]:
        """Return ranges of changed content in *tree*'s own coordinates.

        Used to render the merged preview document, where deleted and
        inserted content are both present.  Adjacent ranges of the same
        kind are coalesced.
        """
        size = document_size(tree)
        decorations: list[Decoration] = []
        covered_to = -1
        for pos, node, _depth in walk(tree):
            kind = _DIFF_TO_DECORATION.get(node.diff)
            if kind is None or pos < covered_to:
                continue
            end = pos + node_size(node)
            covered_to = end
            last = decorations[-1] if decorations else None
            if last is not None and last.kind is kind and last.to == pos:
                decorations[-1] = Decoration(last.from_, end, kind)
            else:
                decorations.append(Decoration(pos, end, kind))
        return [self._clamped(decoration, size) for decoration in decorations]

    def _clamped(self, decoration: Decoration, size: int) -> Decoration:
        from_, to, changed = clamp_range(decoration.from_, decoration.to, size)
        if not changed:
            return decoration
        log.warning(
            "Decoration range clamped",
            extra={
                "extra_fields": {
                    "from": decoration.from_,
                    "to": decoration.to,
                    "clamped_from": from_,
                    "clamped_to": to,
                    "doc_size": size,
                    "kind": decoration.kind.value,
                }
            },
        )
        self._metrics.increment("docdelta.clamps_total", tags={"component": "decorations"})
        return Decoration(from_, to, decoration.kind, decoration.content)
