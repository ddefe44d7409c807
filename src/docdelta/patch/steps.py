"""Applying and inverting :class:`~docdelta.models.EditStep` values.

A step replaces the flat range ``[from_, to)`` with its ``insert`` nodes.
Application is best-effort: bounds are clamped into the document and a
range that would cut a branch open is widened to the whole branch.  Both
adjustments are logged and reported as :class:`DeltaWarning` values so a
preview always renders.
"""

from __future__ import annotations

from collections.abc import Iterable

from docdelta.document.positions import (
    clamp_range,
    document_size,
    replace_at_path,
    resolve_range,
    sequence_size,
)
from docdelta.errors import WarningCode
from docdelta.models import DeltaWarning, EditStep, Node
from docdelta.observability import MetricsHook, NoopMetricsHook, get_logger

log = get_logger("docdelta.patch")


def _clamped(
    doc: Node,
    step: EditStep,
    warnings: list[DeltaWarning] | None,
    metrics: MetricsHook,
) -> tuple[int, int]:
    size = document_size(doc)
    from_, to, changed = clamp_range(step.from_, step.to, size)
    if changed:
        fields = {
            "op": "apply_step",
            "from": step.from_,
            "to": step.to,
            "clamped_from": from_,
            "clamped_to": to,
            "doc_size": size,
        }
        log.warning("Step position clamped", extra={"extra_fields": fields})
        metrics.increment("docdelta.clamps_total", tags={"component": "patch"})
        if warnings is not None:
            warnings.append(
                DeltaWarning(
                    code=WarningCode.OUT_OF_RANGE_POSITION,
                    message=(
                        f"Step [{step.from_}, {step.to}) clamped to "
                        f"[{from_}, {to}) for document of size {size}"
                    ),
                    context=fields,
                )
            )
    return from_, to


def apply_step(
    doc: Node,
    step: EditStep,
    warnings: list[DeltaWarning] | None = None,
    metrics: MetricsHook | None = None,
) -> Node:
    """Apply *step* to *doc* and return the resulting document.

    Parameters
    ----------
    doc:
        The document root the step's positions refer to.
    step:
        The step to apply.
    warnings:
        Optional list receiving ``OUT_OF_RANGE_POSITION`` and
        ``RANGE_WIDENED`` warnings.
    metrics:
        Optional hook counting clamps.

    Returns
    -------
    Node
        A new document; *doc* is left untouched.
    """
    metrics = metrics or NoopMetricsHook()
    from_, to = _clamped(doc, step, warnings, metrics)
    resolved = resolve_range(doc, from_, to)

    if resolved.widened:
        fields = {
            "op": "apply_step",
            "from": from_,
            "to": to,
            "widened_from": resolved.from_,
            "widened_to": resolved.to,
        }
        log.warning("Step range widened to whole nodes", extra={"extra_fields": fields})
        if warnings is not None:
            warnings.append(
                DeltaWarning(
                    code=WarningCode.RANGE_WIDENED,
                    message=(
                        f"Range [{from_}, {to}) crosses a node boundary; "
                        f"widened to [{resolved.from_}, {resolved.to})"
                    ),
                    context=fields,
                )
            )

    parent = resolved.parent.with_children(
        resolved.before + tuple(step.insert) + resolved.after
    )
    return replace_at_path(doc, resolved.path, parent)


def apply_steps(
    doc: Node,
    steps: Iterable[EditStep],
    warnings: list[DeltaWarning] | None = None,
    metrics: MetricsHook | None = None,
) -> Node:
    """Apply *steps* in order, each against the result of the previous one."""
    for step in steps:
        doc = apply_step(doc, step, warnings, metrics)
    return doc


def invert_step(doc: Node, step: EditStep) -> EditStep:
    """Return the step that undoes *step* once it has been applied to *doc*.

    The inverse is computed against the effective (clamped and widened)
    range, so it is exact even for steps that needed adjusting.
    """
    from_, to, _changed = clamp_range(step.from_, step.to, document_size(doc))
    resolved = resolve_range(doc, from_, to)
    return EditStep(
        resolved.from_,
        resolved.from_ + sequence_size(step.insert),
        resolved.middle,
    )
