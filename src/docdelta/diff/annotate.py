"""Helpers over DiffMark-annotated trees.

A diffed tree merges two documents: its ``UNCHANGED`` and ``DELETED``
nodes spell the old document, its ``UNCHANGED`` and ``INSERTED`` nodes
spell the new one.  The functions here stamp, strip, count and project
those marks.
"""

from __future__ import annotations

from docdelta.document.positions import node_size
from docdelta.models import DiffKind, DiffStats, Node


def mark_tree(node: Node, kind: DiffKind) -> Node:
    """Return a copy of *node* with *kind* stamped on it and every descendant."""
    if node.is_text:
        return node if node.diff is kind else node.with_diff(kind)
    return Node(
        type=node.type,
        attrs=node.attrs,
        marks=node.marks,
        children=tuple(mark_tree(child, kind) for child in node.children),
        diff=kind,
    )


def strip_diff(node: Node) -> Node:
    """Return a copy of *node* with every DiffMark removed."""
    if node.is_text:
        return node if node.diff is None else node.with_diff(None)
    return Node(
        type=node.type,
        attrs=node.attrs,
        marks=node.marks,
        children=tuple(strip_diff(child) for child in node.children),
    )


def _project(tree: Node, dropped: DiffKind) -> Node:
    children = tuple(
        strip_diff(child) if child.is_text else _project(child, dropped)
        for child in tree.children
        if child.diff is not dropped
    )
    return Node(type=tree.type, attrs=tree.attrs, marks=tree.marks, children=children)


def accepted(tree: Node) -> Node:
    """Return the document *tree* describes once every change is accepted.

    ``DELETED`` nodes are dropped and all marks stripped, which yields the
    new document the tree was diffed against.
    """
    return _project(tree, DiffKind.DELETED)


def rejected(tree: Node) -> Node:
    """Return the document *tree* describes once every change is rejected.

    ``INSERTED`` nodes are dropped and all marks stripped, which yields
    the old document the tree was diffed from.
    """
    return _project(tree, DiffKind.INSERTED)


def diff_stats(tree: Node) -> DiffStats:
    """Count characters and nodes of *tree* per DiffMark.

    Unmarked nodes count as unchanged.  Branch nodes contribute to the
    node counts only; characters come from text leaves.
    """
    stats = DiffStats()
    stack = [tree]
    while stack:
        node = stack.pop()
        kind = node.diff or DiffKind.UNCHANGED
        if node.is_text:
            chars = node_size(node)
            if kind is DiffKind.INSERTED:
                stats.inserted_chars += chars
            elif kind is DiffKind.DELETED:
                stats.deleted_chars += chars
            else:
                stats.unchanged_chars += chars
        else:
            stack.extend(node.children)
        if kind is DiffKind.INSERTED:
            stats.inserted_nodes += 1
        elif kind is DiffKind.DELETED:
            stats.deleted_nodes += 1
        else:
            stats.unchanged_nodes += 1
    return stats
