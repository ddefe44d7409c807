"""Structural diff engine.

Exports
-------
StructuralDiffer
    Merges two documents into a DiffMark-annotated tree.
diff_text_runs
    Character-level diff of sibling text leaves.
mark_tree, strip_diff
    Stamp or remove DiffMarks on a subtree.
accepted, rejected
    Project a diffed tree back onto the new or old document.
diff_stats
    Count characters and nodes per DiffMark.
"""

from .annotate import accepted, diff_stats, mark_tree, rejected, strip_diff
from .differ import StructuralDiffer
from .text_diff import diff_text_runs

__all__ = [
    "StructuralDiffer",
    "accepted",
    "diff_stats",
    "diff_text_runs",
    "mark_tree",
    "rejected",
    "strip_diff",
]
