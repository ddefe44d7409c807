"""Edit steps: generation, application and inversion.

Exports
-------
StepGenerator
    Builds proposals from diffs and identifier-addressed edits.
apply_step, apply_steps
    Apply steps with clamping and range widening.
invert_step
    Compute the exact inverse of a step.
"""

from .generator import StepGenerator
from .steps import apply_step, apply_steps, invert_step

__all__ = [
    "StepGenerator",
    "apply_step",
    "apply_steps",
    "invert_step",
]
