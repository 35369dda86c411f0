"""Dependency tracking — records which nodes an evaluation reads.

The evaluation stack itself lives on each Graph. The only context-local
value is the Graph currently evaluating, so a read can tell whether it
belongs to the running evaluation or to another session's graph.
"""

from __future__ import annotations

import contextvars
from typing import TYPE_CHECKING

from reactigraph.errors import ForeignNodeError

if TYPE_CHECKING:
    from reactigraph.graph import Graph

# The graph whose Computed or Sink is being evaluated in this context.
current_graph: contextvars.ContextVar[Graph | None] = contextvars.ContextVar(
    "current_graph", default=None
)


def track(graph: Graph, node_id: int) -> None:
    """Register `node_id` as a dependency of the node being evaluated, if any."""
    active = current_graph.get()
    if active is None:
        return
    if active is not graph:
        raise ForeignNodeError(
            f"{graph.describe(node_id)} belongs to graph {graph.name!r}, "
            f"read while evaluating graph {active.name!r}"
        )
    graph._track(node_id)
