"""Convert normalized AST tokens into document :class:`Node` trees.

Block tokens map onto the editor's node types::

    heading        -> heading {level}
    paragraph      -> paragraph
    block_quote    -> blockquote
    list           -> bulletList | orderedList {start}
    list_item      -> listItem
    block_code     -> codeBlock {language}
    thematic_break -> horizontalRule

Inline formatting becomes marks on text leaves (``bold``, ``italic``,
``code``, ``strike``, ``link {href}``); a hard line break becomes a
``hardBreak`` node.
"""

from __future__ import annotations

from collections.abc import Callable

from docdelta.models import Mark, Node, branch_node, text_node
from docdelta.observability import get_logger

log = get_logger("docdelta.converter")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_nodes(tokens: list[dict]) -> list[Node]:
    """Convert canonical block tokens to block nodes."""
    nodes: list[Node] = []
    for token in tokens:
        nodes.extend(_build_block(token))
    return nodes


def _build_block(token: dict) -> list[Node]:
    token_type = token.get("type", "")
    handler = _BLOCK_HANDLERS.get(token_type)
    if handler is not None:
        return handler(token)
    # Stray inline content at block level is wrapped in a paragraph
    if token_type in _INLINE_TYPES:
        inline = build_inline([token])
        return [branch_node("paragraph", inline)] if inline else []
    log.debug(
        "Unknown token skipped",
        extra={"extra_fields": {"token_type": token_type}},
    )
    return []


# ---------------------------------------------------------------------------
# Block builders
# ---------------------------------------------------------------------------

def _build_heading(token: dict) -> list[Node]:
    level = token.get("attrs", {}).get("level", 1)
    children = build_inline(token.get("children", []))
    return [branch_node("heading", children, attrs={"level": level})]


def _build_paragraph(token: dict) -> list[Node]:
    children = build_inline(token.get("children", []))
    if not children:
        return []
    return [branch_node("paragraph", children)]


def _build_block_quote(token: dict) -> list[Node]:
    return [branch_node("blockquote", build_nodes(token.get("children", [])))]


def _build_list(token: dict) -> list[Node]:
    attrs = token.get("attrs", {})
    items = [
        branch_node("listItem", build_nodes(item.get("children", [])))
        for item in token.get("children", [])
        if item.get("type") == "list_item"
    ]
    if attrs.get("ordered"):
        return [branch_node("orderedList", items, attrs={"start": attrs.get("start", 1)})]
    return [branch_node("bulletList", items)]


def _build_code_block(token: dict) -> list[Node]:
    info = token.get("attrs", {}).get("info")
    language = info.split()[0] if info and info.strip() else None
    raw = token.get("raw", "")
    children = [text_node(raw)] if raw else []
    return [branch_node("codeBlock", children, attrs={"language": language})]


def _build_divider(token: dict) -> list[Node]:
    return [branch_node("horizontalRule")]


def _build_html_block(token: dict) -> list[Node]:
    raw = token.get("raw", "").strip()
    if not raw:
        return []
    return [branch_node("paragraph", [text_node(raw)])]


_BLOCK_HANDLERS: dict[str, Callable[[dict], list[Node]]] = {
    "heading": _build_heading,
    "paragraph": _build_paragraph,
    "block_quote": _build_block_quote,
    "list": _build_list,
    "block_code": _build_code_block,
    "thematic_break": _build_divider,
    "html_block": _build_html_block,
}


# ---------------------------------------------------------------------------
# Inline content
# ---------------------------------------------------------------------------

_INLINE_TYPES: frozenset[str] = frozenset({
    "text", "strong", "emphasis", "codespan", "strikethrough", "link",
    "image", "softbreak", "linebreak", "html_inline",
})

_WRAPPING_MARKS: dict[str, str] = {
    "strong": "bold",
    "emphasis": "italic",
    "strikethrough": "strike",
}


def build_inline(children: list[dict], marks: tuple[Mark, ...] = ()) -> list[Node]:
    """Convert inline tokens to text leaves and ``hardBreak`` nodes.

    Parameters
    ----------
    children:
        Normalized inline tokens.
    marks:
        Marks inherited from enclosing formatting tokens.
    """
    nodes: list[Node] = []
    for token in children:
        token_type = token.get("type", "")

        if token_type in ("text", "html_inline"):
            raw = token.get("raw", "")
            if raw:
                nodes.append(text_node(raw, marks))

        elif token_type in _WRAPPING_MARKS:
            child_marks = marks + (Mark(_WRAPPING_MARKS[token_type]),)
            nodes.extend(build_inline(token.get("children", []), child_marks))

        elif token_type == "codespan":
            raw = token.get("raw", "")
            if raw:
                nodes.append(text_node(raw, marks + (Mark("code"),)))

        elif token_type == "link":
            href = token.get("attrs", {}).get("url", "")
            link = Mark("link", {"href": href})
            nodes.extend(build_inline(token.get("children", []), marks + (link,)))

        elif token_type == "image":
            # No image node in the itinerary schema; keep the alt text
            alt = "".join(
                child.get("raw", "") for child in token.get("children", [])
            )
            url = token.get("attrs", {}).get("url", "")
            text = alt or url
            if text:
                nodes.append(text_node(text, marks))

        elif token_type == "softbreak":
            nodes.append(text_node(" ", marks))

        elif token_type == "linebreak":
            nodes.append(branch_node("hardBreak"))

    return nodes
