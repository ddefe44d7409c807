"""Metrics hook protocol and no-op default implementation.

docdelta emits counters and timings at the points where the engine does
measurable work.  A :class:`NoopMetricsHook` is used unless the caller puts
an object satisfying :class:`MetricsHook` on
:attr:`DocDeltaConfig.metrics <docdelta.config.DocDeltaConfig.metrics>`.

Emitted metric names:

* ``docdelta.diff_duration_ms``   -- timing
* ``docdelta.diff_nodes_total``   -- counter, tagged by ``kind``
* ``docdelta.steps_total``        -- counter, tagged by ``source``
* ``docdelta.clamps_total``       -- counter, tagged by ``component``
* ``docdelta.decorations_total``  -- counter, tagged by ``strategy``
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    All methods accept an optional *tags* dict of string keys and values.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric by *value*."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...


class NoopMetricsHook:
    """Default metrics implementation that discards all data points."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass


def resolve_metrics(metrics: object | None) -> MetricsHook:
    """Return *metrics* when it satisfies the protocol, else a no-op hook."""
    if metrics is not None and isinstance(metrics, MetricsHook):
        return metrics
    return NoopMetricsHook()
