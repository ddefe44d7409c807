"""Decoration mapping for proposal previews.

Exports
-------
DecorationMapper
    Maps proposals, steps and diff trees to decoration ranges.
"""

from .mapper import DecorationMapper

__all__ = [
    "DecorationMapper",
]
