"""Signals — mutable leaf values that track their readers.

When a Signal is read while a Computed or Sink is being evaluated, the
edge is registered automatically. Writing a new value bumps the
generation counter and marks the direct dependents dirty; the Graph
carries the invalidation downstream.

All state lives in the graph's arena — instances are thin handles
holding an _id.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, TypeVar

from reactigraph._arena import Kind
from reactigraph._tracking import track
from reactigraph.errors import WriteDuringEvaluation
from reactigraph.graph import Graph

T = TypeVar("T")


def structural_equals(old: Any, new: Any) -> bool:
    """Default equality policy for Signal writes.

    Identity first, then `.equals()` for pandas-style containers whose
    `==` is elementwise, then plain `==`.
    """
    if old is new:
        return True
    equals = getattr(old, "equals", None)
    if callable(equals) and type(old) is type(new):
        return bool(equals(new))
    try:
        return bool(old == new)
    except ValueError:
        # Elementwise comparison with no single truth value.
        return False


class Signal(Generic[T]):
    """A single mutable value owned by one Graph."""

    __slots__ = ("_graph", "_id", "_name", "_equals")

    def __init__(
        self,
        graph: Graph,
        value: T,
        *,
        name: str | None = None,
        equals: Callable[[Any, Any], bool] = structural_equals,
    ) -> None:
        self._graph = graph
        self._id = graph._register(self, Kind.SIGNAL, name)
        self._name = graph._arena.names[self._id]
        graph._arena.values[self._id] = value
        self._equals = equals

    @property
    def name(self) -> str:
        return self._name

    @property
    def generation(self) -> int:
        """Number of accepted writes since creation."""
        return self._graph._arena.generations[self._id]

    def get(self) -> T:
        """Read the value. If inside an evaluation, registers the dependency."""
        self._graph._check_alive(self._id)
        track(self._graph, self._id)
        return self._graph._arena.values[self._id]

    def peek(self) -> T:
        """Read the value without registering a dependency."""
        self._graph._check_alive(self._id)
        return self._graph._arena.values[self._id]

    def set(self, value: T) -> None:
        """Write a new value. Equal values are ignored."""
        graph = self._graph
        graph._check_alive(self._id)
        if graph.evaluating:
            raise WriteDuringEvaluation(
                f"{graph.describe(self._id)} written while graph {graph.name!r} is evaluating"
            )
        graph._check_render_write(self._id)

        arena = graph._arena
        if self._equals(arena.values[self._id], value):
            return
        arena.values[self._id] = value
        arena.generations[self._id] += 1
        for dependent in list(arena.dependents[self._id]):
            graph._mark_dirty(dependent)
        graph._after_write()

    read = get
    write = set

    def dispose(self) -> None:
        """Disconnect the Signal. Any later use raises DisposedError."""
        if self._graph._arena.alive(self._id):
            self._graph._release(self._id)

    def __repr__(self) -> str:
        arena = self._graph._arena
        if not arena.alive(self._id):
            return f"Signal({self.name}, disposed)"
        return f"Signal({arena.values[self._id]!r})"
