"""Node arena — plain Python structures that hold all graph state.

One Arena belongs to one Graph. Signals, Computeds and Sinks are thin
handles holding an integer id into it; edges are id sets, so no node
ever holds a reference to its dependents.
"""

from __future__ import annotations

import itertools
from enum import Enum


class Kind(Enum):
    SIGNAL = "signal"
    COMPUTED = "computed"
    SINK = "sink"


class Arena:
    """Per-graph storage for node values, flags and edges."""

    def __init__(self) -> None:
        self.kinds: dict[int, Kind] = {}
        self.names: dict[int, str] = {}

        # Value state (Signal value or Computed cache)
        self.values: dict[int, object] = {}
        self.generations: dict[int, int] = {}

        # Derivation state (Computed + Sink)
        self.fns: dict[int, object] = {}
        self.snapshots: dict[int, dict[int, int]] = {}  # id -> {dep_id: generation}
        self.dirty: dict[int, bool] = {}

        # Edges point from dependency to dependent
        self.dependencies: dict[int, set[int]] = {}
        self.dependents: dict[int, set[int]] = {}

        self._ids = itertools.count(1)

    def new_node(self, kind: Kind, name: str) -> int:
        node_id = next(self._ids)
        self.kinds[node_id] = kind
        self.names[node_id] = name
        self.generations[node_id] = 0
        self.dependencies[node_id] = set()
        self.dependents[node_id] = set()
        return node_id

    def link(self, dependency: int, dependent: int) -> None:
        self.dependencies[dependent].add(dependency)
        self.dependents[dependency].add(dependent)

    def unlink_all(self, dependent: int) -> None:
        """Drop every incoming edge of `dependent`."""
        for dep in self.dependencies[dependent]:
            self.dependents[dep].discard(dependent)
        self.dependencies[dependent] = set()

    def alive(self, node_id: int) -> bool:
        return node_id in self.kinds

    def release(self, node_id: int) -> None:
        """Disconnect a node in both directions and drop all of its state.

        A released id is simply absent from the arena; handles still holding
        it see it as disposed.
        """
        self.unlink_all(node_id)
        for dependent in self.dependents[node_id]:
            self.dependencies[dependent].discard(node_id)
            self.snapshots.get(dependent, {}).pop(node_id, None)
        for table in (
            self.kinds, self.names, self.values, self.generations, self.fns,
            self.snapshots, self.dirty, self.dependencies, self.dependents,
        ):
            table.pop(node_id, None)

    def reaches(self, source: int, target: int) -> bool:
        """True if `target` is a transitive dependent of `source`."""
        stack = [source]
        seen: set[int] = set()
        while stack:
            node_id = stack.pop()
            if node_id == target:
                return True
            if node_id in seen:
                continue
            seen.add(node_id)
            stack.extend(self.dependents[node_id])
        return False
