"""Computed values — derived state with automatic dependency tracking.

A Computed wraps a function. When evaluated, it records which nodes the
function reads and caches the result along with the generation of each
dependency. A write upstream only marks it dirty; it recomputes on the
next read, never before.

All state lives in the graph's arena — instances are thin handles
holding an _id.
"""

from __future__ import annotations

from typing import Callable, Generic, Sequence, TypeVar

from reactigraph._arena import Kind
from reactigraph._tracking import track
from reactigraph.graph import Graph

T = TypeVar("T")

_UNSET = object()


def _default_name(fn: Callable) -> str | None:
    name = getattr(fn, "__name__", None)
    return None if name in (None, "<lambda>") else name


class Computed(Generic[T]):
    """A derived value that auto-tracks dependencies and caches the result.

    With `inputs`, fn is called with the inputs' values in order. Without,
    fn takes no arguments and reads whatever nodes it needs.
    """

    __slots__ = ("_graph", "_id", "_name", "_inputs")

    def __init__(
        self,
        graph: Graph,
        fn: Callable[..., T],
        *,
        inputs: Sequence = (),
        name: str | None = None,
    ) -> None:
        for node in inputs:
            graph._adopt(node)
        self._graph = graph
        self._inputs = tuple(inputs)
        self._id = graph._register(self, Kind.COMPUTED, name or _default_name(fn))
        self._name = graph._arena.names[self._id]
        graph._arena.fns[self._id] = fn
        graph._arena.values[self._id] = _UNSET

    @property
    def name(self) -> str:
        return self._name

    @property
    def generation(self) -> int:
        """Number of completed recomputations."""
        return self._graph._arena.generations[self._id]

    @property
    def dirty(self) -> bool:
        return self._graph._arena.dirty.get(self._id, False)

    def get(self) -> T:
        """Read the computed value. Recomputes only if the cache is stale."""
        graph = self._graph
        graph._check_alive(self._id)
        graph._check_cycle(self._id)
        track(graph, self._id)

        if not graph._is_fresh(self._id):
            self._recompute()
        return graph._arena.values[self._id]

    evaluate = get

    def _recompute(self) -> None:
        """Re-evaluate the function against a fresh dependency set."""
        graph = self._graph
        arena = graph._arena
        fn = arena.fns[self._id]

        arena.unlink_all(self._id)
        arena.dirty[self._id] = True
        with graph._evaluation(self._id):
            if self._inputs:
                value = fn(*[node.get() for node in self._inputs])
            else:
                value = fn()

        arena.values[self._id] = value
        arena.generations[self._id] += 1
        graph._snapshot(self._id)
        arena.dirty[self._id] = False

    def dispose(self) -> None:
        """Disconnect from the graph. Any later read raises DisposedError."""
        if self._graph._arena.alive(self._id):
            self._graph._release(self._id)

    def __repr__(self) -> str:
        arena = self._graph._arena
        if not arena.alive(self._id):
            return f"Computed({self.name}, disposed)"
        if arena.dirty[self._id]:
            return f"Computed({self.name}, dirty)"
        return f"Computed({self.name}, cached={arena.values[self._id]!r})"


def computed(graph: Graph, *inputs, name: str | None = None):
    """Decorator factory to create a Computed from a function.

    Usage:
        graph = Graph()
        counter = Signal(graph, 0)

        @computed(graph)
        def doubled():
            return counter.get() * 2

        @computed(graph, doubled)
        def quadrupled(value):
            return value * 2

        quadrupled.get()  # 0
        counter.set(5)
        quadrupled.get()  # 20
    """

    def decorator(fn: Callable[..., T]) -> Computed[T]:
        return Computed(graph, fn, inputs=inputs, name=name)

    return decorator
