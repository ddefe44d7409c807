"""Shared test fixtures for the docdelta test suite."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from docdelta.config import DocDeltaConfig
from docdelta.models import Mark, Node, branch_node, doc_node, text_node


class RecordingMetricsHook:
    """A metrics backend that records all calls for assertion."""

    def __init__(self) -> None:
        self.increments: list[dict[str, Any]] = []
        self.timings: list[dict[str, Any]] = []

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        self.increments.append({"name": name, "value": value, "tags": tags})

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        self.timings.append({"name": name, "ms": ms, "tags": tags})

    def names(self) -> list[str]:
        return [call["name"] for call in self.increments]


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def config() -> DocDeltaConfig:
    """Default test configuration."""
    return DocDeltaConfig()


@pytest.fixture
def metrics() -> RecordingMetricsHook:
    return RecordingMetricsHook()


@pytest.fixture
def metrics_config(metrics: RecordingMetricsHook) -> DocDeltaConfig:
    """Configuration wired to a recording metrics hook."""
    return DocDeltaConfig(metrics=metrics)


@pytest.fixture
def capture_log():
    """Return a function attaching a recording handler to a named logger.

    The docdelta loggers do not propagate, so ``caplog`` cannot see them.
    """
    attached: list[tuple[logging.Logger, _ListHandler]] = []

    def attach(name: str) -> list[logging.LogRecord]:
        logger = logging.getLogger(name)
        handler = _ListHandler()
        logger.addHandler(handler)
        attached.append((logger, handler))
        return handler.records

    yield attach
    for logger, handler in attached:
        logger.removeHandler(handler)


def paragraph(*parts: str | Node, **attrs: Any) -> Node:
    """Build a paragraph from strings (plain text) and nodes."""
    children = [text_node(p) if isinstance(p, str) else p for p in parts]
    return branch_node("paragraph", children, attrs=attrs or None)


def heading(text: str, level: int = 1, **attrs: Any) -> Node:
    return branch_node(
        "heading",
        [text_node(text)] if text else [],
        attrs={"level": level, **attrs},
    )


def bold(text: str) -> Node:
    return text_node(text, [Mark("bold")])


@pytest.fixture
def trip_doc() -> Node:
    """``doc( heading("Trip") paragraph("Plan") )``, 14 units."""
    return doc_node([heading("Trip"), paragraph("Plan")])


@pytest.fixture
def itinerary_doc() -> Node:
    """A 53-unit itinerary with stable identifiers.

    Layout::

        0  doc
        1  heading#day-1     "Day 1"          [1, 8)
        8  paragraph#p-1     "Louvre visit"   [8, 22)
        22 paragraph#p-2     "Lunch at cafe"  [22, 37)
        37 bulletList#l-1                     [37, 52)
        38   listItem#li-1                    [38, 51)
        39     paragraph     "Boat ride"      [39, 50)
    """
    return doc_node([
        heading("Day 1", level=2, id="day-1"),
        paragraph("Louvre visit", id="p-1"),
        paragraph("Lunch at cafe", id="p-2"),
        branch_node(
            "bulletList",
            [branch_node("listItem", [paragraph("Boat ride")], attrs={"id": "li-1"})],
            attrs={"id": "l-1"},
        ),
    ])
