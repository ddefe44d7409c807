"""Editor JSON <-> :class:`~docdelta.models.Node` conversion.

Snapshots reach the engine as the collaborative editor's JSON document
format::

    {"type": "doc", "content": [
        {"type": "heading", "attrs": {"level": 2, "id": "node-1"},
         "content": [{"type": "text", "text": "Day 1"}]},
        {"type": "paragraph", "content": [
            {"type": "text", "text": "Louvre",
             "marks": [{"type": "geoMark", "attrs": {"lat": "48.86"}}]}]}]}

A non-text node without a ``content`` key is an empty branch, which is how
the editor serialises an empty paragraph.  DiffMarks travel as a mark of
type ``"diff"`` whose ``attrs.type`` is ``-1`` (deleted), ``0``
(unchanged) or ``1`` (inserted), the encoding the editor's diff mark uses.

Parsing walks the input with an explicit stack, so nesting depth is bounded
by the configured ceiling rather than by the interpreter's recursion limit.
"""

from __future__ import annotations

from typing import Any

from docdelta.errors import DocDeltaLimitError, DocDeltaMalformedNodeError
from docdelta.models import (
    Decoration,
    DeltaWarning,
    DiffKind,
    EditStep,
    Mark,
    Node,
    Proposal,
)

DIFF_MARK_TYPE = "diff"

_DIFF_CODES: dict[DiffKind, int] = {
    DiffKind.DELETED: -1,
    DiffKind.UNCHANGED: 0,
    DiffKind.INSERTED: 1,
}
_DIFF_KINDS: dict[int, DiffKind] = {code: kind for kind, code in _DIFF_CODES.items()}


class _Frame:
    """Parse state for one JSON node whose children are being built."""

    __slots__ = ("children", "depth", "next_index", "path", "raw", "raw_children")

    def __init__(self, raw: Any, depth: int, path: str) -> None:
        self.raw = raw
        self.depth = depth
        self.path = path
        self.raw_children: list[Any] | None = None
        self.children: list[Node] = []
        self.next_index = 0


def node_from_json(
    data: dict[str, Any],
    *,
    max_depth: int | None = None,
    max_nodes: int | None = None,
) -> Node:
    """Build a :class:`Node` tree from editor JSON.

    Parameters
    ----------
    data:
        A JSON object with ``type`` and either ``text`` or ``content``.
    max_depth:
        Optional nesting ceiling (root is depth 0).
    max_nodes:
        Optional ceiling on the total number of nodes.

    Returns
    -------
    Node

    Raises
    ------
    DocDeltaMalformedNodeError
        If any node violates the branch/leaf invariant.  The error context
        carries a JSON ``path`` such as ``$.content[2].content[0]``.
    DocDeltaLimitError
        If a ceiling is exceeded.
    """
    stack = [_Frame(data, 0, "$")]
    count = 0
    result: Node | None = None

    while stack:
        frame = stack[-1]

        if frame.raw_children is None:
            count += 1
            if max_nodes is not None and count > max_nodes:
                raise DocDeltaLimitError(
                    f"Document exceeds the {max_nodes}-node ceiling",
                    context={"limit": "max_nodes", "max_value": max_nodes, "observed": count},
                )
            if max_depth is not None and frame.depth > max_depth:
                raise DocDeltaLimitError(
                    f"Document nesting exceeds depth {max_depth}",
                    context={"limit": "max_depth", "max_value": max_depth, "observed": frame.depth},
                )
            leaf = _start_node(frame)
            if leaf is not None:
                stack.pop()
                if stack:
                    stack[-1].children.append(leaf)
                else:
                    result = leaf
                continue

        if frame.next_index < len(frame.raw_children):
            index = frame.next_index
            frame.next_index += 1
            stack.append(
                _Frame(
                    frame.raw_children[index],
                    frame.depth + 1,
                    f"{frame.path}.content[{index}]",
                )
            )
            continue

        node = _finish_branch(frame)
        stack.pop()
        if stack:
            stack[-1].children.append(node)
        else:
            result = node

    assert result is not None
    return result


def _start_node(frame: _Frame) -> Node | None:
    """Validate *frame*'s raw object; return the node if it is a leaf."""
    raw = frame.raw
    if not isinstance(raw, dict):
        raise DocDeltaMalformedNodeError(
            "Node must be a JSON object",
            context={"path": frame.path, "reason": "not_an_object"},
        )
    node_type = raw.get("type")
    if "text" in raw and "content" in raw:
        raise DocDeltaMalformedNodeError(
            f"Node {node_type!r} has both content and text",
            context={"path": frame.path, "node_type": node_type, "reason": "both"},
        )
    if node_type == "text" or "text" in raw:
        return _build(frame, text=raw.get("text"))

    content = raw.get("content", [])
    if not isinstance(content, list):
        raise DocDeltaMalformedNodeError(
            f"Content of {node_type!r} must be a list",
            context={"path": frame.path, "node_type": node_type, "reason": "bad_content"},
        )
    frame.raw_children = content
    return None


def _finish_branch(frame: _Frame) -> Node:
    return _build(frame, children=tuple(frame.children))


def _build(
    frame: _Frame,
    *,
    text: Any = None,
    children: tuple[Node, ...] | None = None,
) -> Node:
    raw = frame.raw
    attrs = raw.get("attrs") or {}
    if not isinstance(attrs, dict):
        raise DocDeltaMalformedNodeError(
            "Node attrs must be an object",
            context={"path": frame.path, "reason": "bad_attrs"},
        )
    marks, diff = _parse_marks(raw.get("marks") or [], frame.path)
    try:
        return Node(
            type=raw.get("type"),
            attrs=dict(attrs),
            marks=marks,
            children=children,
            text=text,
            diff=diff,
        )
    except DocDeltaMalformedNodeError as exc:
        exc.context.setdefault("path", frame.path)
        raise


def _parse_marks(raw_marks: Any, path: str) -> tuple[tuple[Mark, ...], DiffKind | None]:
    if not isinstance(raw_marks, list):
        raise DocDeltaMalformedNodeError(
            "Node marks must be a list",
            context={"path": path, "reason": "bad_marks"},
        )
    marks: list[Mark] = []
    diff: DiffKind | None = None
    for raw_mark in raw_marks:
        if not isinstance(raw_mark, dict) or not isinstance(raw_mark.get("type"), str):
            raise DocDeltaMalformedNodeError(
                "Each mark must be an object with a string type",
                context={"path": path, "reason": "bad_mark"},
            )
        attrs = raw_mark.get("attrs") or {}
        if raw_mark["type"] == DIFF_MARK_TYPE:
            diff = _parse_diff_code(attrs.get("type"), path)
            continue
        marks.append(Mark(type=raw_mark["type"], attrs=dict(attrs)))
    return tuple(marks), diff


def _parse_diff_code(code: Any, path: str) -> DiffKind:
    if isinstance(code, str):
        try:
            return DiffKind(code)
        except ValueError:
            pass
    elif isinstance(code, int) and code in _DIFF_KINDS:
        return _DIFF_KINDS[code]
    raise DocDeltaMalformedNodeError(
        f"Unknown diff mark type {code!r}",
        context={"path": path, "reason": "bad_diff_mark"},
    )


def node_to_json(node: Node, *, include_diff: bool = True) -> dict[str, Any]:
    """Serialise *node* back to editor JSON.

    Empty ``attrs`` and ``marks`` are omitted, matching the editor's own
    output.  With *include_diff*, a DiffMark is emitted as a trailing
    ``"diff"`` mark.
    """
    out: dict[str, Any] = {"type": node.type}
    if node.attrs:
        out["attrs"] = dict(node.attrs)
    marks = [_mark_to_json(mark) for mark in node.marks]
    if include_diff and node.diff is not None:
        marks.append({"type": DIFF_MARK_TYPE, "attrs": {"type": _DIFF_CODES[node.diff]}})
    if marks:
        out["marks"] = marks
    if node.is_text:
        out["text"] = node.text
    else:
        out["content"] = [
            node_to_json(child, include_diff=include_diff) for child in node.children
        ]
    return out


def _mark_to_json(mark: Mark) -> dict[str, Any]:
    out: dict[str, Any] = {"type": mark.type}
    if mark.attrs:
        out["attrs"] = dict(mark.attrs)
    return out


def check_limits(
    node: Node,
    *,
    max_nodes: int,
    max_depth: int,
    max_text_chars: int | None = None,
) -> None:
    """Raise :class:`DocDeltaLimitError` if *node* exceeds a ceiling.

    Used for trees built in code rather than parsed from JSON.  With
    *max_text_chars*, the text children of every branch are also summed
    and checked against that ceiling.
    """
    count = 0
    stack: list[tuple[Node, int]] = [(node, 0)]
    while stack:
        current, depth = stack.pop()
        count += 1
        if count > max_nodes:
            raise DocDeltaLimitError(
                f"Document exceeds the {max_nodes}-node ceiling",
                context={"limit": "max_nodes", "max_value": max_nodes, "observed": count},
            )
        if depth > max_depth:
            raise DocDeltaLimitError(
                f"Document nesting exceeds depth {max_depth}",
                context={"limit": "max_depth", "max_value": max_depth, "observed": depth},
            )
        if current.is_text:
            continue
        if max_text_chars is not None:
            chars = sum(len(child.text) for child in current.children if child.is_text)
            if chars > max_text_chars:
                raise DocDeltaLimitError(
                    f"Text of a {current.type!r} node exceeds {max_text_chars} characters",
                    context={
                        "limit": "max_text_chars",
                        "max_value": max_text_chars,
                        "observed": chars,
                        "node_type": current.type,
                    },
                )
        stack.extend((child, depth + 1) for child in current.children)


# ---------------------------------------------------------------------------
# Patch and decoration values
# ---------------------------------------------------------------------------

def step_to_json(step: EditStep) -> dict[str, Any]:
    """Serialise an :class:`EditStep` as ``{"from", "to", "insert"}``."""
    return {
        "from": step.from_,
        "to": step.to,
        "insert": [node_to_json(node, include_diff=False) for node in step.insert],
    }


def step_from_json(data: dict[str, Any]) -> EditStep:
    """Parse the output of :func:`step_to_json`."""
    if not isinstance(data, dict):
        raise DocDeltaMalformedNodeError(
            "Step must be a JSON object",
            context={"reason": "not_an_object"},
        )
    from_, to = data.get("from"), data.get("to")
    if not isinstance(from_, int) or not isinstance(to, int):
        raise DocDeltaMalformedNodeError(
            "Step positions must be integers",
            context={"reason": "bad_step", "from": from_, "to": to},
        )
    insert = data.get("insert") or []
    if not isinstance(insert, list):
        raise DocDeltaMalformedNodeError(
            "Step insert must be a list",
            context={"reason": "bad_step"},
        )
    return EditStep(from_, to, tuple(node_from_json(item) for item in insert))


def proposal_to_json(proposal: Proposal) -> dict[str, Any]:
    """Serialise a :class:`Proposal`, warnings included."""
    return {
        "steps": [step_to_json(step) for step in proposal.steps],
        "inverse_steps": [step_to_json(step) for step in proposal.inverse_steps],
        "warnings": [_warning_to_json(warning) for warning in proposal.warnings],
    }


def decoration_to_json(decoration: Decoration) -> dict[str, Any]:
    """Serialise a :class:`Decoration`; ``content`` only when present."""
    out: dict[str, Any] = {
        "from": decoration.from_,
        "to": decoration.to,
        "kind": decoration.kind.value,
    }
    if decoration.content is not None:
        out["content"] = decoration.content
    return out


def _warning_to_json(warning: DeltaWarning) -> dict[str, Any]:
    code = getattr(warning.code, "value", warning.code)
    return {"code": code, "message": warning.message, "context": dict(warning.context)}
