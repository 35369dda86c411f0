"""Inputs — explicit registry of named Signals for UI input.

The UI layer creates one Signal per input widget through an Inputs
registry and calls write() from its change handlers. Nothing is bound
implicitly; an unknown key is an error.
"""

from __future__ import annotations

from typing import Iterator

from reactigraph.graph import Graph
from reactigraph.signal import Signal


class Inputs:
    """Key-based Signal container for one session's inputs."""

    def __init__(self, graph: Graph, schema: dict[str, object], initial: dict | None = None) -> None:
        self._graph = graph
        self._signals: dict[str, Signal] = {}
        for key, default in schema.items():
            value = initial.get(key, default) if initial else default
            self._signals[key] = Signal(graph, value, name=key)

    def signal(self, key: str) -> Signal:
        try:
            return self._signals[key]
        except KeyError:
            raise KeyError(f"unknown input {key!r}") from None

    def read(self, key: str) -> object:
        return self.signal(key).get()

    def write(self, key: str, value: object) -> None:
        self.signal(key).set(value)

    def update(self, values: dict) -> None:
        """Write several inputs inside one batch."""
        for key in values:
            self.signal(key)
        with self._graph.batch():
            for key, value in values.items():
                self._signals[key].set(value)

    def keys(self) -> list[str]:
        return list(self._signals)

    def __contains__(self, key: str) -> bool:
        return key in self._signals

    def __iter__(self) -> Iterator[str]:
        return iter(self._signals)

    def snapshot(self) -> dict[str, object]:
        """Current values, read without tracking."""
        return {key: sig.peek() for key, sig in self._signals.items()}
