"""Parse Markdown and normalize to canonical AST tokens.

This module wraps mistune v3's AST renderer and normalises the raw token
stream into the small set of canonical types the node builder understands.

Canonical block tokens:
    heading, paragraph, block_quote, list, list_item, block_code,
    thematic_break, html_block

Canonical inline tokens:
    text, strong, emphasis, codespan, strikethrough, link, image,
    softbreak, linebreak, html_inline
"""

from __future__ import annotations

import mistune

# ---------------------------------------------------------------------------
# Mistune-to-canonical type mapping
# ---------------------------------------------------------------------------

_BLOCK_TYPE_MAP: dict[str, str] = {
    "heading": "heading",
    "paragraph": "paragraph",
    "block_quote": "block_quote",
    "list": "list",
    "list_item": "list_item",
    "task_list_item": "list_item",
    "block_code": "block_code",
    "thematic_break": "thematic_break",
    "block_html": "html_block",
    # Tight list items wrap their inline content in block_text
    "block_text": "paragraph",
}

_INLINE_TYPE_MAP: dict[str, str] = {
    "text": "text",
    "strong": "strong",
    "emphasis": "emphasis",
    "codespan": "codespan",
    "strikethrough": "strikethrough",
    "link": "link",
    "image": "image",
    "softbreak": "softbreak",
    "linebreak": "linebreak",
    "inline_html": "html_inline",
}

_RAW_TYPES: frozenset[str] = frozenset({
    "block_code",
    "html_block",
    "codespan",
    "html_inline",
})

_SKIP_TYPES: frozenset[str] = frozenset({
    "blank_line",
})


class ASTNormalizer:
    """Parse Markdown and normalize to canonical AST tokens."""

    def __init__(self) -> None:
        self._parser = mistune.create_markdown(
            renderer="ast",
            plugins=["strikethrough", "url", "task_lists"],
        )

    def parse(self, markdown: str) -> list[dict]:
        """Parse markdown and return normalized AST token list."""
        raw_tokens = self._parser(markdown)
        if isinstance(raw_tokens, str):
            return []
        return self._normalize_tokens(raw_tokens)

    def _normalize_tokens(self, tokens: list[dict]) -> list[dict]:
        result: list[dict] = []
        for token in tokens:
            normalized = self._normalize_token(token)
            if normalized is not None:
                result.append(normalized)
        return result

    def _normalize_token(self, token: dict) -> dict | None:
        """Normalize a single token, returning None if it should be skipped."""
        raw_type = token.get("type", "")
        if raw_type in _SKIP_TYPES:
            return None

        canonical = _BLOCK_TYPE_MAP.get(raw_type) or _INLINE_TYPE_MAP.get(raw_type)
        if canonical is None:
            # "raw" appears inside codespan and similar containers
            if raw_type == "raw":
                return {"type": "text", "raw": token.get("raw", "")}
            return None

        result: dict = {"type": canonical}
        attrs = token.get("attrs")
        if attrs:
            result["attrs"] = dict(attrs)

        if canonical in _RAW_TYPES or canonical in ("text", "softbreak", "linebreak"):
            raw = token.get("raw", "")
            if canonical == "block_code" and raw.endswith("\n"):
                raw = raw[:-1]
            if raw or canonical != "text":
                result["raw"] = raw
            return result

        children = token.get("children")
        if children:
            result["children"] = self._normalize_tokens(children)
        return result
