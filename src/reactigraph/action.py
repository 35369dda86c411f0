"""Actions and transactions — batched writes.

Writes never recompute anything by themselves, but a Graph created with
auto_flush=True flushes after each write. Wrapping writes in an @action or
`with transaction()` defers that flush until the outermost scope exits,
so Sinks never render an intermediate state.
"""

from __future__ import annotations

import functools
from contextlib import contextmanager
from typing import Callable, ParamSpec, TypeVar

from reactigraph.graph import Graph

P = ParamSpec("P")
R = TypeVar("R")


def action(graph: Graph) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator factory: batch all writes to `graph` made inside fn.

    Usage:
        graph = Graph(auto_flush=True)
        low = Signal(graph, 1900)
        high = Signal(graph, 2000)

        @action(graph)
        def set_range(a, b):
            low.set(a)
            high.set(b)
            # sinks see both changes at once, not one at a time
    """

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            graph.begin_batch()
            try:
                return fn(*args, **kwargs)
            finally:
                graph.end_batch()

        return wrapper

    return decorator


@contextmanager
def transaction(graph: Graph):
    """Context manager for batching writes.

    Usage:
        with transaction(graph):
            low.set(1950)
            high.set(1990)
            # sinks render here, after both are set
    """
    graph.begin_batch()
    try:
        yield
    finally:
        graph.end_batch()
