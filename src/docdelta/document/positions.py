"""Linear position addressing over a document tree.

Positions count tokens of a pre-order walk: entering or leaving a branch
costs one unit and a text leaf costs ``len(text)`` units.  Coordinates are
*document-inclusive*: the root's own open token occupies ``[0, 1)``, so the
first child of the document starts at position ``1``, and the
end-of-document insertion point is ``document_size(doc) - 1``::

    doc( heading("Trip") paragraph("Plan") )

    0   1        2    6        7          8    12         13  14
    |doc|heading |Trip|/heading|paragraph |Plan|/paragraph|/doc|

Every function here is pure and total for well-formed trees, and walks
the tree with explicit stacks.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from docdelta.models import Node, text_node

DOC_CONTENT_START = 1
"""Position of the first child of a document root."""


# ---------------------------------------------------------------------------
# Sizes
# ---------------------------------------------------------------------------

def node_size(node: Node) -> int:
    """Return the number of position units *node* occupies."""
    if node.is_text:
        return len(node.text)
    total = 0
    stack = [node]
    while stack:
        current = stack.pop()
        if current.is_text:
            total += len(current.text)
        else:
            total += 2
            stack.extend(current.children)
    return total


def sequence_size(nodes: list[Node] | tuple[Node, ...]) -> int:
    """Return the summed size of *nodes*."""
    return sum(node_size(node) for node in nodes)


def document_size(doc: Node) -> int:
    """Return the size of *doc* including the root's own boundaries."""
    return 2 + sequence_size(doc.children)


# ---------------------------------------------------------------------------
# Walking
# ---------------------------------------------------------------------------

def walk(doc: Node) -> Iterator[tuple[int, Node, int]]:
    """Yield ``(position, node, depth)`` for every node in pre-order.

    ``position`` is the position immediately before the node's first
    token; the root is yielded at ``(0, doc, 0)``.
    """
    stack: list[tuple[int, Node, int]] = [(0, doc, 0)]
    while stack:
        pos, node, depth = stack.pop()
        yield pos, node, depth
        if node.is_text:
            continue
        child_pos = pos + 1
        frames: list[tuple[int, Node, int]] = []
        for child in node.children:
            frames.append((child_pos, child, depth + 1))
            child_pos += node_size(child)
        stack.extend(reversed(frames))


def iter_boundaries(doc: Node) -> Iterator[int]:
    """Yield the position reached after each token of a pre-order walk.

    The sequence is non-decreasing and ends at ``document_size(doc)``.
    """
    pos = 0
    # (node, entered) pairs; a branch is pushed again to emit its close token.
    stack: list[tuple[Node, bool]] = [(doc, False)]
    while stack:
        node, entered = stack.pop()
        if node.is_text:
            pos += len(node.text)
            yield pos
        elif entered:
            pos += 1
            yield pos
        else:
            pos += 1
            yield pos
            stack.append((node, True))
            stack.extend((child, False) for child in reversed(node.children))


def find_node(
    doc: Node,
    node_id: str,
    id_attrs: tuple[str, ...] = ("id", "data-node-id"),
) -> tuple[int, Node] | None:
    """Return ``(position, node)`` of the first node whose identifier is
    *node_id*, or ``None`` if no node carries it.
    """
    for pos, node, _depth in walk(doc):
        if node.is_text:
            continue
        for attr in id_attrs:
            if node.attrs.get(attr) == node_id:
                return pos, node
    return None


def text_content(node: Node) -> str:
    """Return the concatenated text of every leaf under *node*."""
    parts: list[str] = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current.is_text:
            parts.append(current.text)
        else:
            stack.extend(reversed(current.children))
    return "".join(parts)


def assign_ids(doc: Node, prefix: str = "node-", attr: str = "id") -> Node:
    """Return a copy of *doc* where every non-root branch has an identifier.

    Existing identifiers are kept; missing ones become ``prefix + N``
    numbered in pre-order, skipping numbers already taken.
    """
    taken = {
        node.attrs[attr]
        for _pos, node, _depth in walk(doc)
        if not node.is_text and attr in node.attrs
    }
    counter = 0

    def next_id() -> str:
        nonlocal counter
        while f"{prefix}{counter}" in taken:
            counter += 1
        value = f"{prefix}{counter}"
        taken.add(value)
        return value

    def visit(node: Node, is_root: bool) -> Node:
        if node.is_text:
            return node
        attrs = node.attrs
        if not is_root and attr not in attrs:
            attrs = {**attrs, attr: next_id()}
        children = tuple(visit(child, False) for child in node.children)
        return Node(
            type=node.type,
            attrs=attrs,
            marks=node.marks,
            children=children,
            diff=node.diff,
        )

    return visit(doc, True)


# ---------------------------------------------------------------------------
# Clamping
# ---------------------------------------------------------------------------

def clamp_position(pos: int, doc_size: int) -> int:
    """Clamp *pos* into ``[0, doc_size - 1]``."""
    return min(max(pos, 0), max(doc_size - 1, 0))


def clamp_range(from_: int, to: int, doc_size: int) -> tuple[int, int, bool]:
    """Clamp both bounds into ``[0, doc_size - 1]`` and order them.

    Returns ``(from_, to, changed)`` where *changed* reports whether the
    input had to be adjusted.
    """
    lo = clamp_position(from_, doc_size)
    hi = clamp_position(to, doc_size)
    if lo > hi:
        lo, hi = hi, lo
    return lo, hi, (lo, hi) != (from_, to)


# ---------------------------------------------------------------------------
# Range resolution
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ResolvedRange:
    """A position range resolved to a single parent's child list.

    Attributes
    ----------
    path:
        Child indices leading from the root to ``parent``.
    parent:
        The deepest branch whose content contains both bounds.
    content_start:
        Position of ``parent``'s first child.
    from_, to:
        Effective bounds.  They differ from the requested ones only when
        the request cut a branch open and had to be widened.
    before, middle, after:
        ``parent``'s children split at the bounds; text leaves are cut.
    widened:
        Whether the requested bounds were widened.
    """

    path: tuple[int, ...]
    parent: Node
    content_start: int
    from_: int
    to: int
    before: tuple[Node, ...]
    middle: tuple[Node, ...]
    after: tuple[Node, ...]
    widened: bool


def resolve_range(doc: Node, from_: int, to: int) -> ResolvedRange:
    """Resolve the ordered range ``[from_, to)`` within *doc*.

    Descends to the deepest branch whose content strictly contains both
    bounds, then splits that branch's children.  A bound falling inside a
    child branch at that level widens the range to cover the whole child.
    Callers are expected to clamp first.  Position 0, before the root's
    content, is pulled onto the first content position without counting
    as a widening.
    """
    parent = doc
    start = DOC_CONTENT_START
    path: list[int] = []

    descended = True
    while descended:
        descended = False
        pos = start
        for index, child in enumerate(parent.children):
            end = pos + node_size(child)
            if not child.is_text and pos < from_ and to < end:
                path.append(index)
                parent = child
                start = pos + 1
                descended = True
                break
            if pos >= to:
                break
            pos = end

    content_end = start + sequence_size(parent.children)
    from_ = min(max(from_, start), content_end)
    to = min(max(to, from_), content_end)

    before: list[Node] = []
    middle: list[Node] = []
    after: list[Node] = []
    eff_from, eff_to = from_, to
    pos = start
    for child in parent.children:
        end = pos + node_size(child)
        if end <= from_:
            before.append(child)
        elif pos >= to:
            after.append(child)
        elif child.is_text:
            cut_from = max(from_, pos) - pos
            cut_to = min(to, end) - pos
            if cut_from > 0:
                before.append(text_node(child.text[:cut_from], child.marks, child.diff))
            if cut_to > cut_from:
                middle.append(text_node(child.text[cut_from:cut_to], child.marks, child.diff))
            if cut_to < len(child.text):
                after.append(text_node(child.text[cut_to:], child.marks, child.diff))
        else:
            middle.append(child)
            eff_from = min(eff_from, pos)
            eff_to = max(eff_to, end)
        pos = end

    return ResolvedRange(
        path=tuple(path),
        parent=parent,
        content_start=start,
        from_=eff_from,
        to=eff_to,
        before=tuple(before),
        middle=tuple(middle),
        after=tuple(after),
        widened=(eff_from, eff_to) != (from_, to),
    )


def content_between(doc: Node, from_: int, to: int) -> list[Node]:
    """Return the nodes covering ``[from_, to)``, cutting text at the bounds."""
    return list(resolve_range(doc, from_, to).middle)


def replace_at_path(root: Node, path: tuple[int, ...], replacement: Node) -> Node:
    """Return a copy of *root* with the node at *path* swapped for
    *replacement*, rebuilding every ancestor on the way up.
    """
    chain = [root]
    for index in path[:-1]:
        chain.append(chain[-1].children[index])
    node = replacement
    for ancestor, index in zip(reversed(chain), reversed(path)):
        children = list(ancestor.children)
        children[index] = node
        node = ancestor.with_children(children)
    return node
