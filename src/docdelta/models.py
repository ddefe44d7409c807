"""Public data models for the docdelta engine.

This module contains the document tree types, the diff and patch value
types, and the supporting enums referenced by the public API surface.
Everything here is an immutable value: snapshots arrive from the
collaboration layer by value, and diffs, proposals and decorations are
derived from them without ever being mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from docdelta.errors import DocDeltaMalformedNodeError

TEXT_TYPE = "text"
"""The ``type`` tag reserved for text leaves."""

DOC_TYPE = "doc"
"""The ``type`` tag of a document root."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class DiffKind(str, Enum):
    """The DiffMark attached to every node of a diffed tree."""

    UNCHANGED = "unchanged"
    """Present in both the old and the new document."""

    INSERTED = "inserted"
    """Present only in the new document."""

    DELETED = "deleted"
    """Present only in the old document."""


class DecorationKind(str, Enum):
    """How the rendering layer should highlight a range."""

    INSERTED = "inserted"
    DELETED = "deleted"
    MODIFIED = "modified"
    """Coarse fallback used when no diffable detail is available."""


class EditOperation(str, Enum):
    """Node-identifier-addressed operations the AI layer can request."""

    INSERT_BEFORE = "insert_before"
    INSERT_AFTER = "insert_after"
    REPLACE = "replace"
    DELETE = "delete"


class ChangeType(str, Enum):
    """Coarse description of a stored proposal without diffable detail."""

    ADD = "add"
    MODIFY = "modify"


# ---------------------------------------------------------------------------
# Document tree
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Mark:
    """An inline annotation such as ``bold`` or a geocoded ``geoMark``.

    Attributes
    ----------
    type:
        The mark type name.
    attrs:
        JSON-compatible attributes (e.g. ``lat``/``lng`` for a location).
    """

    type: str
    attrs: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Node:
    """A typed element of the document tree.

    A node is either a *branch* (``children`` set, ``text`` is ``None``)
    or a *text leaf* (``type == "text"``, ``text`` set, ``children`` is
    ``None``).  Anything else raises :class:`DocDeltaMalformedNodeError`
    from the constructor.

    Branch children are stored in canonical form: adjacent text leaves
    with equal marks and equal ``diff`` are joined into a single leaf.

    Attributes
    ----------
    type:
        Node type name (``"doc"``, ``"paragraph"``, ``"heading"``, ...).
    attrs:
        JSON-compatible node attributes.  A stable identifier, when the
        node has one, lives under ``attrs["id"]``.
    marks:
        Ordered inline annotations.
    children:
        Child nodes of a branch, ``None`` for a text leaf.
    text:
        Content of a text leaf, ``None`` for a branch.
    diff:
        The DiffMark.  ``None`` on plain documents; set on every node of
        a tree produced by the diff engine.
    """

    type: str
    attrs: dict[str, Any] = field(default_factory=dict)
    marks: tuple[Mark, ...] = ()
    children: tuple[Node, ...] | None = None
    text: str | None = None
    diff: DiffKind | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, str) or not self.type:
            raise DocDeltaMalformedNodeError(
                "Node type must be a non-empty string",
                context={"node_type": self.type, "reason": "missing_type"},
            )
        has_children = self.children is not None
        has_text = self.text is not None
        if has_children and has_text:
            raise DocDeltaMalformedNodeError(
                f"Node {self.type!r} has both children and text",
                context={"node_type": self.type, "reason": "both"},
            )
        if not has_children and not has_text:
            raise DocDeltaMalformedNodeError(
                f"Node {self.type!r} has neither children nor text",
                context={"node_type": self.type, "reason": "neither"},
            )
        if has_text:
            if self.type != TEXT_TYPE:
                raise DocDeltaMalformedNodeError(
                    f"Only {TEXT_TYPE!r} nodes may carry text, got {self.type!r}",
                    context={"node_type": self.type, "reason": "text_on_branch"},
                )
            if not isinstance(self.text, str) or not self.text:
                raise DocDeltaMalformedNodeError(
                    "Empty text nodes are not allowed",
                    context={"node_type": self.type, "reason": "empty_text"},
                )
        elif self.type == TEXT_TYPE:
            raise DocDeltaMalformedNodeError(
                "Text nodes cannot have children",
                context={"node_type": self.type, "reason": "children_on_text"},
            )

        if not isinstance(self.marks, tuple):
            object.__setattr__(self, "marks", tuple(self.marks))
        if self.attrs is None:
            object.__setattr__(self, "attrs", {})
        if has_children:
            for child in self.children:
                if not isinstance(child, Node):
                    raise DocDeltaMalformedNodeError(
                        f"Children of {self.type!r} must be Node instances",
                        context={
                            "node_type": self.type,
                            "reason": "bad_child",
                            "child": repr(child)[:80],
                        },
                    )
            object.__setattr__(self, "children", _join_text(self.children))

    @property
    def is_text(self) -> bool:
        return self.text is not None

    def same_markup(self, other: Node) -> bool:
        """Return ``True`` when *other* has the same type, attrs and marks."""
        return (
            self.type == other.type
            and self.attrs == other.attrs
            and self.marks == other.marks
        )

    def with_children(self, children: list[Node] | tuple[Node, ...]) -> Node:
        """Copy of this branch with *children* (normalised) as content."""
        return Node(
            type=self.type,
            attrs=self.attrs,
            marks=self.marks,
            children=tuple(children),
            diff=self.diff,
        )

    def with_diff(self, kind: DiffKind | None) -> Node:
        """Shallow copy of this node carrying *kind* as its DiffMark."""
        return Node(
            type=self.type,
            attrs=self.attrs,
            marks=self.marks,
            children=self.children,
            text=self.text,
            diff=kind,
        )


def _join_text(children: tuple[Node, ...] | list[Node]) -> tuple[Node, ...]:
    joined: list[Node] = []
    for child in children:
        prev = joined[-1] if joined else None
        if (
            prev is not None
            and prev.is_text
            and child.is_text
            and prev.marks == child.marks
            and prev.diff == child.diff
        ):
            joined[-1] = Node(
                type=TEXT_TYPE,
                marks=prev.marks,
                text=prev.text + child.text,
                diff=prev.diff,
            )
        else:
            joined.append(child)
    return tuple(joined)


def text_node(
    text: str,
    marks: list[Mark] | tuple[Mark, ...] = (),
    diff: DiffKind | None = None,
) -> Node:
    """Build a text leaf."""
    return Node(type=TEXT_TYPE, marks=tuple(marks), text=text, diff=diff)


def branch_node(
    type: str,
    children: list[Node] | tuple[Node, ...] = (),
    attrs: dict[str, Any] | None = None,
    marks: list[Mark] | tuple[Mark, ...] = (),
    diff: DiffKind | None = None,
) -> Node:
    """Build a branch node."""
    return Node(
        type=type,
        attrs=dict(attrs or {}),
        marks=tuple(marks),
        children=tuple(children),
        diff=diff,
    )


def doc_node(children: list[Node] | tuple[Node, ...] = ()) -> Node:
    """Build a document root."""
    return branch_node(DOC_TYPE, children)


# ---------------------------------------------------------------------------
# Patch types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EditStep:
    """Replace the position range ``[from_, to)`` with ``insert``.

    ``from_ == to`` denotes a pure insertion; an empty ``insert`` denotes
    a pure deletion.
    """

    from_: int
    to: int
    insert: tuple[Node, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.insert, tuple):
            object.__setattr__(self, "insert", tuple(self.insert))

    @property
    def is_insertion(self) -> bool:
        return self.from_ == self.to and bool(self.insert)

    @property
    def is_deletion(self) -> bool:
        return self.from_ < self.to and not self.insert


@dataclass
class DeltaWarning:
    """A recoverable condition reported upward instead of raised.

    Attributes
    ----------
    code:
        A :class:`~docdelta.errors.WarningCode` value.
    message:
        A human-readable description of the issue.
    context:
        Arbitrary structured data for diagnostics.
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)


@dataclass
class Proposal:
    """A reviewable, revertible edit.

    Applying ``steps`` and then ``inverse_steps`` to the document the
    proposal was generated against reproduces that document exactly.

    Attributes
    ----------
    steps:
        Edit steps, in application order.
    inverse_steps:
        Steps that undo ``steps`` when applied right after them.
    warnings:
        Recoverable conditions met while generating the proposal.
    """

    steps: list[EditStep] = field(default_factory=list)
    inverse_steps: list[EditStep] = field(default_factory=list)
    warnings: list[DeltaWarning] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.steps


@dataclass
class EditDescription:
    """An AI-requested edit addressed by a stable node identifier.

    Attributes
    ----------
    operation:
        What to do relative to the target node.
    target_id:
        The identifier stored in the target node's attrs.
    content:
        Nodes to insert (ignored for ``DELETE``).
    """

    operation: EditOperation
    target_id: str
    content: list[Node] = field(default_factory=list)


@dataclass
class ProposalDescriptor:
    """What the product stores about a pending proposal.

    The decoration mapper picks the most precise strategy the available
    fields allow: a fresh diff against ``proposed``, then the ``proposal``
    steps, then the coarse ``change_type``.

    Attributes
    ----------
    change_type:
        Coarse description (addition or modification), if known.
    proposed:
        The proposed document snapshot, if known.
    proposal:
        Previously generated steps, if known.
    summary:
        Display text (typically ``"<title>: <description>"``).
    """

    change_type: ChangeType | None = None
    proposed: Node | None = None
    proposal: Proposal | None = None
    summary: str = ""


@dataclass(frozen=True)
class Decoration:
    """A highlight range for the rendering layer.

    ``from_ == to`` marks a point decoration (typically a widget showing
    content about to be inserted).
    """

    from_: int
    to: int
    kind: DecorationKind
    content: str | None = None


@dataclass
class DiffStats:
    """Character and node counts of a diffed tree, per DiffMark."""

    unchanged_chars: int = 0
    inserted_chars: int = 0
    deleted_chars: int = 0
    unchanged_nodes: int = 0
    inserted_nodes: int = 0
    deleted_nodes: int = 0

    @property
    def has_changes(self) -> bool:
        return bool(
            self.inserted_chars
            or self.deleted_chars
            or self.inserted_nodes
            or self.deleted_nodes
        )
