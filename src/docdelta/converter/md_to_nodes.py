"""Markdown to document-node conversion.

The AI layer often phrases proposed content as Markdown.
:class:`MarkdownConverter` turns it into block nodes that can be inserted
by an :class:`~docdelta.models.EditStep`.
"""

from __future__ import annotations

import json
import sys

from docdelta.document.json_io import node_to_json
from docdelta.errors import DocDeltaConversionError, DocDeltaError
from docdelta.models import Node

from .ast_normalizer import ASTNormalizer
from .node_builder import build_nodes


class MarkdownConverter:
    """Converts Markdown text to a list of block nodes.

    Parameters
    ----------
    debug_dump:
        Write the normalized AST and the resulting nodes to *stderr*.
    """

    def __init__(self, debug_dump: bool = False) -> None:
        self._normalizer = ASTNormalizer()
        self._debug_dump = debug_dump

    def convert(self, markdown: str) -> list[Node]:
        """Convert *markdown* to block nodes.

        Raises
        ------
        DocDeltaConversionError
            If *markdown* is not a string or cannot be parsed.
        """
        if not isinstance(markdown, str):
            raise DocDeltaConversionError(
                "Markdown content must be a string",
                context={
                    "content_type": type(markdown).__name__,
                    "reason": "not_a_string",
                },
            )
        try:
            tokens = self._normalizer.parse(markdown)
            nodes = build_nodes(tokens)
        except DocDeltaError as exc:
            raise DocDeltaConversionError(
                f"Markdown produced an invalid node: {exc.message}",
                context={"content_type": "markdown", "reason": "invalid_node"},
                cause=exc,
            ) from exc
        except (ValueError, TypeError, RecursionError) as exc:
            raise DocDeltaConversionError(
                f"Markdown could not be parsed: {exc}",
                context={"content_type": "markdown", "reason": "parse_error"},
                cause=exc,
            ) from exc

        if self._debug_dump:
            print(
                "[docdelta] Normalized AST:",
                json.dumps(tokens, indent=2, ensure_ascii=False),
                file=sys.stderr,
            )
            print(
                "[docdelta] Converted nodes:",
                json.dumps([node_to_json(n) for n in nodes], indent=2, ensure_ascii=False),
                file=sys.stderr,
            )
        return nodes
