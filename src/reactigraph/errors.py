"""Exceptions raised by the reactive graph."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reactigraph.graph import FlushReport


class GraphError(Exception):
    """Base class for reactive graph failures."""


class CycleDetected(GraphError):
    """A node was re-entered while it was still being evaluated.

    `path` lists node names from the outermost evaluation to the re-entered node.
    """

    def __init__(self, path: list[str]) -> None:
        self.path = list(path)
        super().__init__("cycle detected: " + " -> ".join(self.path))


class DisposedError(GraphError):
    """A disposed node or graph was used."""


class ForeignNodeError(GraphError):
    """A node from another graph (another session) was used as a dependency."""


class WriteDuringEvaluation(GraphError):
    """A Signal was written while a Computed function was running."""


class FlushError(GraphError):
    """One or more Sinks failed during a flush.

    The flush still visited every Sink; `report` holds what rendered and what failed.
    """

    def __init__(self, report: FlushReport) -> None:
        self.report = report
        names = ", ".join(f.sink for f in report.failures)
        super().__init__(f"{len(report.failures)} sink(s) failed: {names}")


class LoadError(Exception):
    """The tabular data source could not be loaded."""
