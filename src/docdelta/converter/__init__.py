"""Markdown-to-node conversion for proposed content.

Exports
-------
MarkdownConverter
    Converts Markdown text to block nodes.
ASTNormalizer
    Parses Markdown into canonical AST tokens.
"""

from .ast_normalizer import ASTNormalizer
from .md_to_nodes import MarkdownConverter

__all__ = [
    "ASTNormalizer",
    "MarkdownConverter",
]
