"""Character-level diff of text runs.

Sibling text leaves are flattened into sequences of ``(character, marks)``
items, so a change of marks on otherwise identical text shows up as a
deletion of the old styled characters followed by an insertion of the new
ones.  The common prefix and suffix are trimmed first; the middle is diffed
with Myers' O(ND) shortest-edit-script algorithm.  The result is a list of
text leaves carrying DiffMarks, in document order, with every deleted
stretch of a change placed before the inserted stretch that replaces it.
"""

from __future__ import annotations

from collections.abc import Sequence

from docdelta.models import DiffKind, Mark, Node, text_node

# A text item is a character plus an interned marks id.
_Item = tuple[str, int]


class _MarkTable:
    """Interns mark tuples so items compare as plain ``(str, int)`` pairs."""

    __slots__ = ("_marks",)

    def __init__(self) -> None:
        self._marks: list[tuple[Mark, ...]] = []

    def intern(self, marks: tuple[Mark, ...]) -> int:
        for index, known in enumerate(self._marks):
            if known == marks:
                return index
        self._marks.append(marks)
        return len(self._marks) - 1

    def lookup(self, index: int) -> tuple[Mark, ...]:
        return self._marks[index]


def _flatten(nodes: Sequence[Node], table: _MarkTable) -> list[_Item]:
    items: list[_Item] = []
    for node in nodes:
        mark_id = table.intern(node.marks)
        items.extend((char, mark_id) for char in node.text)
    return items


# ---------------------------------------------------------------------------
# Myers shortest edit script
# ---------------------------------------------------------------------------

def myers_diff(a: Sequence[_Item], b: Sequence[_Item]) -> list[DiffKind]:
    """Return the shortest edit script turning *a* into *b*.

    Each entry describes one step: ``UNCHANGED`` consumes an item of both
    sequences, ``DELETED`` one of *a* and ``INSERTED`` one of *b*.

    The frontier ``V`` holds, at index ``offset + k``, the furthest ``x``
    reached on diagonal ``k = x - y``.  Before edit distance ``d`` only the
    diagonals ``-d - 1 .. d + 1`` can be read, so that slice is the
    snapshot kept for the backtrack.  The trace still grows with the
    square of the edit distance; callers bound it with ``max_text_chars``.
    """
    n, m = len(a), len(b)
    offset = n + m + 1
    v = [0] * (2 * offset + 1)
    trace: list[list[int]] = []

    for d in range(n + m + 1):
        trace.append(v[offset - d - 1:offset + d + 2])
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and v[offset + k - 1] < v[offset + k + 1]):
                x = v[offset + k + 1]
            else:
                x = v[offset + k - 1] + 1
            y = x - k
            while x < n and y < m and a[x] == b[y]:
                x += 1
                y += 1
            v[offset + k] = x
            if x >= n and y >= m:
                return _backtrack(trace, n, m)

    raise AssertionError("unreachable: the edit graph always has a path")


def _backtrack(trace: list[list[int]], n: int, m: int) -> list[DiffKind]:
    ops: list[DiffKind] = []
    x, y = n, m
    for d in range(len(trace) - 1, -1, -1):
        # Snapshot d stores diagonal k at index k + d + 1.
        row, shift = trace[d], d + 1
        k = x - y
        if k == -d or (k != d and row[k - 1 + shift] < row[k + 1 + shift]):
            prev_k = k + 1
        else:
            prev_k = k - 1
        prev_x = row[prev_k + shift]
        prev_y = prev_x - prev_k
        while x > prev_x and y > prev_y:
            ops.append(DiffKind.UNCHANGED)
            x -= 1
            y -= 1
        if d > 0:
            ops.append(DiffKind.INSERTED if x == prev_x else DiffKind.DELETED)
        x, y = prev_x, prev_y
    ops.reverse()
    return ops


# ---------------------------------------------------------------------------
# Text runs
# ---------------------------------------------------------------------------

def diff_text_runs(old_nodes: Sequence[Node], new_nodes: Sequence[Node]) -> list[Node]:
    """Diff two runs of sibling text leaves.

    Parameters
    ----------
    old_nodes, new_nodes:
        Maximal runs of adjacent text leaves (either may be empty).

    Returns
    -------
    list[Node]
        Text leaves whose DiffMarks partition both inputs: the
        ``UNCHANGED`` and ``DELETED`` leaves spell the old run, the
        ``UNCHANGED`` and ``INSERTED`` leaves spell the new run.
    """
    table = _MarkTable()
    old_items = _flatten(old_nodes, table)
    new_items = _flatten(new_nodes, table)

    limit = min(len(old_items), len(new_items))
    prefix = 0
    while prefix < limit and old_items[prefix] == new_items[prefix]:
        prefix += 1
    suffix = 0
    while (
        suffix < limit - prefix
        and old_items[len(old_items) - 1 - suffix] == new_items[len(new_items) - 1 - suffix]
    ):
        suffix += 1

    old_mid = old_items[prefix:len(old_items) - suffix]
    new_mid = new_items[prefix:len(new_items) - suffix]

    builder = _RunBuilder(table)
    builder.extend(DiffKind.UNCHANGED, old_items[:prefix])

    if not old_mid or not new_mid:
        builder.extend(DiffKind.DELETED, old_mid)
        builder.extend(DiffKind.INSERTED, new_mid)
    else:
        deleted: list[_Item] = []
        inserted: list[_Item] = []
        i = j = 0
        for op in myers_diff(old_mid, new_mid):
            if op is DiffKind.UNCHANGED:
                builder.extend(DiffKind.DELETED, deleted)
                builder.extend(DiffKind.INSERTED, inserted)
                deleted, inserted = [], []
                builder.extend(DiffKind.UNCHANGED, [old_mid[i]])
                i += 1
                j += 1
            elif op is DiffKind.DELETED:
                deleted.append(old_mid[i])
                i += 1
            else:
                inserted.append(new_mid[j])
                j += 1
        builder.extend(DiffKind.DELETED, deleted)
        builder.extend(DiffKind.INSERTED, inserted)

    builder.extend(DiffKind.UNCHANGED, old_items[len(old_items) - suffix:])
    return builder.build()


class _RunBuilder:
    """Accumulates items into text leaves, merging equal neighbours."""

    __slots__ = ("_segments", "_table")

    def __init__(self, table: _MarkTable) -> None:
        self._table = table
        # [kind, mark_id, chars]
        self._segments: list[list] = []

    def extend(self, kind: DiffKind, items: Sequence[_Item]) -> None:
        for char, mark_id in items:
            last = self._segments[-1] if self._segments else None
            if last is not None and last[0] is kind and last[1] == mark_id:
                last[2].append(char)
            else:
                self._segments.append([kind, mark_id, [char]])

    def build(self) -> list[Node]:
        return [
            text_node("".join(chars), self._table.lookup(mark_id), kind)
            for kind, mark_id, chars in self._segments
        ]
