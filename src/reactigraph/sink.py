"""Sinks — terminal consumers that render when their inputs change.

Unlike Computed (which recomputes when read), a Sink is driven by the
Graph: every flush visits the dirty Sinks in declaration order, brings
their inputs up to date, then calls the render function once with the
input values.

All state lives in the graph's arena — instances are thin handles
holding an _id.
"""

from __future__ import annotations

from typing import Callable, Sequence

from reactigraph._arena import Kind
from reactigraph.computed import _default_name
from reactigraph.graph import Graph


class Sink:
    """A render callback bound to a fixed set of input nodes.

    `when` is an optional readiness check. A Sink that isn't ready is
    skipped by flush and stays dirty until a later flush finds it ready.
    """

    __slots__ = ("_graph", "_id", "_name", "_inputs", "_when")

    def __init__(
        self,
        graph: Graph,
        render: Callable[..., object],
        inputs: Sequence = (),
        *,
        name: str | None = None,
        when: Callable[[], bool] | None = None,
    ) -> None:
        for node in inputs:
            graph._adopt(node)
        self._graph = graph
        self._inputs = tuple(inputs)
        self._when = when
        self._id = graph._register(self, Kind.SINK, name or _default_name(render))
        self._name = graph._arena.names[self._id]
        graph._arena.fns[self._id] = render

    @property
    def name(self) -> str:
        return self._name

    @property
    def inputs(self) -> tuple:
        return self._inputs

    @property
    def dirty(self) -> bool:
        return self._graph._arena.dirty.get(self._id, False)

    def ready(self) -> bool:
        return self._when is None or bool(self._when())

    def _collect(self) -> list:
        """Evaluate every input under this Sink, re-recording its edges."""
        graph = self._graph
        arena = graph._arena
        arena.unlink_all(self._id)
        with graph._evaluation(self._id):
            values = [node.get() for node in self._inputs]
        graph._snapshot(self._id)
        return values

    def _render(self, values: list) -> None:
        self._graph._arena.fns[self._id](*values)

    def dispose(self) -> None:
        """Stop rendering. The Sink is removed from future flushes."""
        if self._graph._arena.alive(self._id):
            self._graph._release(self._id)

    def __repr__(self) -> str:
        arena = self._graph._arena
        if not arena.alive(self._id):
            state = "disposed"
        else:
            state = "dirty" if arena.dirty[self._id] else "clean"
        return f"Sink({self.name}, {state})"


def sink(graph: Graph, *inputs, name: str | None = None, when=None):
    """Decorator factory to register a render function as a Sink.

    Usage:
        @sink(graph, filtered)
        def table(rows):
            print(rows)

        graph.flush()  # table(rows) runs once
    """

    def decorator(render: Callable[..., object]) -> Sink:
        return Sink(graph, render, inputs, name=name, when=when)

    return decorator
