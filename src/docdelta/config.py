"""Engine configuration for docdelta.

:class:`DocDeltaConfig` is a dataclass that captures every tuneable knob
exposed by the engine.  Instances are passed to
:class:`~docdelta.engine.DocDeltaEngine` and to the lower-level components
that need limits or observability hooks.

Two module-level constants:

* :data:`DEFAULT_ID_ATTRS` -- attribute keys checked, in order, when an
  edit description addresses a node by identifier.
* :data:`MAX_DEPTH_CEILING` -- the largest ``max_depth`` a configuration
  may set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Identifier and limit constants
# ---------------------------------------------------------------------------

DEFAULT_ID_ATTRS: tuple[str, ...] = ("id", "data-node-id")
"""Node ``attrs`` keys that may carry a stable per-node identifier."""

MAX_DEPTH_CEILING = 200
"""Largest accepted ``max_depth``.

Several tree helpers recurse once per nesting level, some through more
than one frame, so deeper trees would hit the interpreter recursion limit.
"""


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclass
class DocDeltaConfig:
    """Complete configuration for the diff/patch engine.

    Every parameter has a sensible default, so ``DocDeltaConfig()`` is a
    valid configuration.

    Parameters
    ----------
    max_nodes:
        Ceiling on the number of nodes in a single input document.  The
        middle-region alignment is quadratic in the number of siblings, so
        larger inputs are rejected with :class:`DocDeltaLimitError` before
        any work is done.
    max_depth:
        Ceiling on tree nesting depth (the root is depth 0).  Bounds the
        node-level diff recursion and may not exceed
        :data:`MAX_DEPTH_CEILING`.
    max_text_chars:
        Ceiling on the characters held by the text children of a single
        branch.  The character diff of a text run keeps a trace quadratic
        in its edit distance, so longer runs are rejected with
        :class:`DocDeltaLimitError`.
    id_attrs:
        Attribute keys consulted when resolving a stable node identifier.
    id_prefix:
        Prefix used by :func:`~docdelta.document.positions.assign_ids` for
        generated identifiers (``node-0``, ``node-1``, ...).
    debug_dump_diff:
        Write the merged diff tree as JSON to *stderr* on each diff.
    debug_dump_steps:
        Write generated steps and inverse steps as JSON to *stderr*.
    """

    # ── Limits ──────────────────────────────────────────────────────────
    max_nodes: int = 5000

    max_depth: int = 64

    max_text_chars: int = 2000

    # ── Identifiers ─────────────────────────────────────────────────────
    id_attrs: tuple[str, ...] = field(default_factory=lambda: DEFAULT_ID_ATTRS)

    id_prefix: str = "node-"

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_diff: bool = False

    debug_dump_steps: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.max_nodes < 1:
            raise ValueError(f"max_nodes must be >= 1, got {self.max_nodes}")
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {self.max_depth}")
        if self.max_depth > MAX_DEPTH_CEILING:
            raise ValueError(
                f"max_depth must be <= {MAX_DEPTH_CEILING}, got {self.max_depth}"
            )
        if self.max_text_chars < 1:
            raise ValueError(f"max_text_chars must be >= 1, got {self.max_text_chars}")
        if isinstance(self.id_attrs, str):
            # A bare string would be iterated character by character.
            self.id_attrs = (self.id_attrs,)
        else:
            self.id_attrs = tuple(self.id_attrs)
        if not self.id_attrs:
            raise ValueError("id_attrs must name at least one attribute")
        if not self.id_prefix:
            raise ValueError("id_prefix must be a non-empty string")
