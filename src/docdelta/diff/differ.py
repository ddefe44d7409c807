"""Structural diff of two document trees.

:class:`StructuralDiffer` merges an old and a new document into a single
tree in which every node carries a DiffMark.  Children of matching branches
are aligned in three stages:

1. Common prefix and suffix are passed through ``UNCHANGED``.
2. The middle region is split around its longest run of equal siblings,
   repeatedly, on an explicit work stack.
3. What is left is reconciled pairwise: branches with the same markup are
   diffed recursively, maximal runs of text leaves are diffed character by
   character, and everything else becomes ``DELETED`` and/or ``INSERTED``.
"""

from __future__ import annotations

import json
import sys
import time

from docdelta.config import DocDeltaConfig
from docdelta.diff.aligner import Region, longest_run, split_region, trim_common
from docdelta.diff.annotate import mark_tree
from docdelta.diff.signature import compute_signatures
from docdelta.diff.text_diff import diff_text_runs
from docdelta.document.json_io import check_limits, node_to_json
from docdelta.errors import DocDeltaLimitError, WarningCode
from docdelta.models import DeltaWarning, DiffKind, Node
from docdelta.observability import get_logger, resolve_metrics

log = get_logger("docdelta.diff")


class StructuralDiffer:
    """Computes DiffMark-annotated merge trees.

    Parameters
    ----------
    config:
        Engine configuration.  ``max_nodes``, ``max_depth`` and
        ``max_text_chars`` bound the inputs; ``metrics`` receives timings
        and node counts.
    """

    def __init__(self, config: DocDeltaConfig | None = None) -> None:
        self._config = config or DocDeltaConfig()
        self._metrics = resolve_metrics(self._config.metrics)

    def diff(
        self,
        old: Node,
        new: Node,
        warnings: list[DeltaWarning] | None = None,
    ) -> Node:
        """Diff *old* against *new*.

        Parameters
        ----------
        old, new:
            Document roots.  Any existing DiffMarks are treated as part of
            node identity.
        warnings:
            Optional list that receives a ``ROOT_TYPE_MISMATCH`` warning
            when the roots have different types.

        Returns
        -------
        Node
            The merged tree.  Its ``UNCHANGED`` and ``DELETED`` nodes spell
            *old*; its ``UNCHANGED`` and ``INSERTED`` nodes spell *new*.

        Raises
        ------
        DocDeltaLimitError
            If either input exceeds ``max_nodes``, ``max_depth`` or
            ``max_text_chars``.
        """
        for doc in (old, new):
            check_limits(
                doc,
                max_nodes=self._config.max_nodes,
                max_depth=self._config.max_depth,
                max_text_chars=self._config.max_text_chars,
            )

        t0 = time.monotonic()
        if old.type == new.type and not old.is_text and not new.is_text:
            tree = self._diff_branch(old, new, depth=0)
        else:
            tree = self._diff_mismatched_roots(old, new, warnings)
        elapsed_ms = (time.monotonic() - t0) * 1000

        self._metrics.timing("docdelta.diff_duration_ms", elapsed_ms)
        self._emit_node_counts(tree)

        if self._config.debug_dump_diff:
            print(
                "[docdelta] Diff tree:",
                json.dumps(node_to_json(tree), indent=2, ensure_ascii=False),
                file=sys.stderr,
            )
        return tree

    # ------------------------------------------------------------------
    # Node level
    # ------------------------------------------------------------------

    def _diff_branch(self, old: Node, new: Node, depth: int) -> Node:
        if depth > self._config.max_depth:
            raise DocDeltaLimitError(
                f"Diff recursion exceeds depth {self._config.max_depth}",
                context={
                    "limit": "max_depth",
                    "max_value": self._config.max_depth,
                    "observed": depth,
                },
            )
        if old == new:
            return mark_tree(old, DiffKind.UNCHANGED)

        old_children = old.children
        new_children = new.children
        old_sigs = compute_signatures(old_children)
        new_sigs = compute_signatures(new_children)
        prefix, suffix = trim_common(old_sigs, new_sigs)

        children: list[Node] = [
            mark_tree(child, DiffKind.UNCHANGED) for child in old_children[:prefix]
        ]
        middle = Region(
            prefix,
            len(old_children) - suffix,
            prefix,
            len(new_children) - suffix,
        )
        children.extend(
            self._align(old_children, new_children, old_sigs, new_sigs, middle, depth)
        )
        children.extend(
            mark_tree(child, DiffKind.UNCHANGED)
            for child in old_children[len(old_children) - suffix:]
        )
        return Node(
            type=old.type,
            attrs=old.attrs,
            marks=old.marks,
            children=tuple(children),
            diff=DiffKind.UNCHANGED,
        )

    def _diff_mismatched_roots(
        self,
        old: Node,
        new: Node,
        warnings: list[DeltaWarning] | None,
    ) -> Node:
        log.warning(
            "Root types differ; diffing as full replacement",
            extra={"extra_fields": {"old_type": old.type, "new_type": new.type}},
        )
        if warnings is not None:
            warnings.append(
                DeltaWarning(
                    code=WarningCode.ROOT_TYPE_MISMATCH,
                    message=f"Root type changed from {old.type!r} to {new.type!r}",
                    context={"old_type": old.type, "new_type": new.type},
                )
            )
        old_children = (old,) if old.is_text else old.children
        new_children = (new,) if new.is_text else new.children
        children = [mark_tree(child, DiffKind.DELETED) for child in old_children]
        children.extend(mark_tree(child, DiffKind.INSERTED) for child in new_children)
        root_type = "doc" if old.is_text else old.type
        return Node(
            type=root_type,
            attrs={} if old.is_text else old.attrs,
            marks=() if old.is_text else old.marks,
            children=tuple(children),
            diff=DiffKind.UNCHANGED,
        )

    # ------------------------------------------------------------------
    # Sibling alignment
    # ------------------------------------------------------------------

    def _align(
        self,
        old_children: tuple[Node, ...],
        new_children: tuple[Node, ...],
        old_sigs: list,
        new_sigs: list,
        region: Region,
        depth: int,
    ) -> list[Node]:
        out: list[Node] = []
        # Items are either a Region still to align or a list of finished nodes.
        stack: list[Region | list[Node]] = [region]
        while stack:
            item = stack.pop()
            if isinstance(item, list):
                out.extend(item)
                continue
            run = None if item.is_one_sided else longest_run(old_sigs, new_sigs, item)
            if run is None:
                out.extend(
                    self._reconcile(
                        old_children[item.old_lo:item.old_hi],
                        new_children[item.new_lo:item.new_hi],
                        depth,
                    )
                )
                continue
            before, after = split_region(item, run)
            matched = [
                mark_tree(child, DiffKind.UNCHANGED)
                for child in old_children[run.old_start:run.old_start + run.length]
            ]
            stack.append(after)
            stack.append(matched)
            stack.append(before)
        return out

    def _reconcile(
        self,
        old_nodes: tuple[Node, ...],
        new_nodes: tuple[Node, ...],
        depth: int,
    ) -> list[Node]:
        out: list[Node] = []
        i = j = 0
        while i < len(old_nodes) or j < len(new_nodes):
            old_node = old_nodes[i] if i < len(old_nodes) else None
            new_node = new_nodes[j] if j < len(new_nodes) else None

            if (old_node is not None and old_node.is_text) or (
                new_node is not None and new_node.is_text
            ):
                i_end = i
                while i_end < len(old_nodes) and old_nodes[i_end].is_text:
                    i_end += 1
                j_end = j
                while j_end < len(new_nodes) and new_nodes[j_end].is_text:
                    j_end += 1
                out.extend(diff_text_runs(old_nodes[i:i_end], new_nodes[j:j_end]))
                i, j = i_end, j_end
            elif old_node is None:
                out.append(mark_tree(new_node, DiffKind.INSERTED))
                j += 1
            elif new_node is None:
                out.append(mark_tree(old_node, DiffKind.DELETED))
                i += 1
            elif old_node.same_markup(new_node):
                out.append(self._diff_branch(old_node, new_node, depth + 1))
                i += 1
                j += 1
            else:
                out.append(mark_tree(old_node, DiffKind.DELETED))
                out.append(mark_tree(new_node, DiffKind.INSERTED))
                i += 1
                j += 1
        return out

    def _emit_node_counts(self, tree: Node) -> None:
        counts = {kind: 0 for kind in DiffKind}
        stack = [tree]
        while stack:
            node = stack.pop()
            counts[node.diff or DiffKind.UNCHANGED] += 1
            if not node.is_text:
                stack.extend(node.children)
        for kind, count in counts.items():
            if count:
                self._metrics.increment(
                    "docdelta.diff_nodes_total", count, tags={"kind": kind.value}
                )
