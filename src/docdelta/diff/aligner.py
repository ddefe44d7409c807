"""Sibling alignment over node signatures.

Aligns the children of two matching branches in two stages:

1. :func:`trim_common` strips the longest common prefix and suffix.
2. :func:`longest_run` scans the remaining middle region for the longest
   contiguous run of equal siblings.  The regions before and after the run
   are aligned again the same way until no run is left.

The run scan is quadratic in the number of siblings, which is why the
engine enforces a node-count ceiling on its inputs.
"""

from __future__ import annotations

from dataclasses import dataclass

from docdelta.diff.signature import NodeSignature


@dataclass(frozen=True)
class Run:
    """A contiguous run of equal siblings.

    Attributes
    ----------
    old_start:
        Index of the run's first sibling in the old sequence.
    new_start:
        Index of the run's first sibling in the new sequence.
    length:
        Number of siblings in the run (always >= 1).
    """

    old_start: int
    new_start: int
    length: int


@dataclass(frozen=True)
class Region:
    """Half-open index windows ``[old_lo, old_hi)`` and ``[new_lo, new_hi)``."""

    old_lo: int
    old_hi: int
    new_lo: int
    new_hi: int

    @property
    def is_one_sided(self) -> bool:
        return self.old_lo == self.old_hi or self.new_lo == self.new_hi


def trim_common(
    old_sigs: list[NodeSignature],
    new_sigs: list[NodeSignature],
) -> tuple[int, int]:
    """Return the lengths of the common prefix and common suffix.

    The suffix never overlaps the prefix, so
    ``prefix + suffix <= min(len(old_sigs), len(new_sigs))``.
    """
    limit = min(len(old_sigs), len(new_sigs))
    prefix = 0
    while prefix < limit and old_sigs[prefix] == new_sigs[prefix]:
        prefix += 1
    suffix = 0
    while (
        suffix < limit - prefix
        and old_sigs[len(old_sigs) - 1 - suffix] == new_sigs[len(new_sigs) - 1 - suffix]
    ):
        suffix += 1
    return prefix, suffix


def longest_run(
    old_sigs: list[NodeSignature],
    new_sigs: list[NodeSignature],
    region: Region,
) -> Run | None:
    """Find the longest run of equal siblings inside *region*.

    Every ``(i, j)`` pair is scanned and the run starting there measured.
    Ties keep the first run found in scan order (old index, then new
    index).

    Returns
    -------
    Run | None
        ``None`` when no sibling of the old window equals any sibling of
        the new window.
    """
    best: Run | None = None
    for i in range(region.old_lo, region.old_hi):
        for j in range(region.new_lo, region.new_hi):
            length = 0
            while (
                i + length < region.old_hi
                and j + length < region.new_hi
                and old_sigs[i + length] == new_sigs[j + length]
            ):
                length += 1
            if length and (best is None or length > best.length):
                best = Run(old_start=i, new_start=j, length=length)
    return best


def split_region(region: Region, run: Run) -> tuple[Region, Region]:
    """Return the regions before and after *run* within *region*."""
    before = Region(region.old_lo, run.old_start, region.new_lo, run.new_start)
    after = Region(
        run.old_start + run.length,
        region.old_hi,
        run.new_start + run.length,
        region.new_hi,
    )
    return before, after
