"""Graph scheduler — owns one session's nodes and drives flush cycles.

Writes only mark nodes dirty. Nothing recomputes until a Sink is flushed
or a Computed is read, so any number of writes between two flushes
coalesce into one recomputation per affected node.

Each Graph is a private arena: sessions never share nodes, and nodes of
one Graph can't be used as dependencies in another.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator

from reactigraph._arena import Arena, Kind
from reactigraph._tracking import current_graph
from reactigraph.errors import (
    CycleDetected,
    DisposedError,
    FlushError,
    ForeignNodeError,
    GraphError,
)

if TYPE_CHECKING:
    from reactigraph.sink import Sink

logger = logging.getLogger("reactigraph.graph")


@dataclass
class SinkFailure:
    sink: str
    error: BaseException


@dataclass
class FlushReport:
    """Outcome of one flush cycle."""

    graph: str
    rendered: list[str] = field(default_factory=list)
    deferred: list[str] = field(default_factory=list)
    failures: list[SinkFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class Graph:
    """A dependency graph of Signals, Computeds and Sinks for one session.

    auto_flush: flush after every write made outside a batch.
    raise_errors: raise FlushError when a Sink fails; otherwise log it and
        return the report.
    """

    def __init__(
        self,
        name: str = "graph",
        *,
        auto_flush: bool = False,
        raise_errors: bool = True,
    ) -> None:
        self.name = name
        self.auto_flush = auto_flush
        self.raise_errors = raise_errors
        self._arena = Arena()
        self._nodes: dict[int, object] = {}
        self._sinks: list[int] = []
        self._stack: list[int] = []
        self._rendering: int | None = None
        self._flushing = False
        self._batch_depth = 0
        self._disposed = False

    # ─── Node registration ──────────────────────────────────────────────────

    def _register(self, node, kind: Kind, name: str | None) -> int:
        self._check_open()
        node_id = self._arena.new_node(kind, name or kind.value)
        if name is None:
            self._arena.names[node_id] = f"{kind.value}#{node_id}"
        self._nodes[node_id] = node
        if kind is Kind.SINK:
            self._sinks.append(node_id)
        if kind is not Kind.SIGNAL:
            self._arena.dirty[node_id] = True
        return node_id

    def _adopt(self, node) -> int:
        """Return the id of a node owned by this graph."""
        graph = getattr(node, "_graph", None)
        if graph is not self:
            raise ForeignNodeError(f"{node!r} does not belong to graph {self.name!r}")
        return node._id

    def _check_open(self) -> None:
        if self._disposed:
            raise DisposedError(f"graph {self.name!r} is disposed")

    def _check_alive(self, node_id: int) -> None:
        self._check_open()
        if not self._arena.alive(node_id):
            raise DisposedError(f"node #{node_id} of graph {self.name!r} is disposed")

    def describe(self, node_id: int) -> str:
        return f"{self._arena.kinds[node_id].value} {self._arena.names[node_id]!r}"

    # ─── Evaluation bookkeeping ─────────────────────────────────────────────

    def _check_cycle(self, node_id: int) -> None:
        if node_id in self._stack:
            start = self._stack.index(node_id)
            path = [self._arena.names[i] for i in self._stack[start:]]
            path.append(self._arena.names[node_id])
            raise CycleDetected(path)

    @contextmanager
    def _evaluation(self, node_id: int) -> Iterator[None]:
        """Make `node_id` the target of dependency tracking for the block."""
        self._check_cycle(node_id)
        self._stack.append(node_id)
        token = current_graph.set(self)
        try:
            yield
        finally:
            current_graph.reset(token)
            self._stack.pop()

    def _track(self, node_id: int) -> None:
        if self._stack:
            self._arena.link(node_id, self._stack[-1])

    def _snapshot(self, node_id: int) -> None:
        arena = self._arena
        arena.snapshots[node_id] = {
            dep: arena.generations[dep] for dep in arena.dependencies[node_id]
        }

    def _is_fresh(self, node_id: int) -> bool:
        """A cache is valid iff clean and no dependency advanced since the snapshot."""
        arena = self._arena
        if arena.dirty[node_id]:
            return False
        snapshot = arena.snapshots.get(node_id, {})
        return all(arena.generations[dep] == gen for dep, gen in snapshot.items())

    @property
    def evaluating(self) -> bool:
        return bool(self._stack)

    # ─── Invalidation ───────────────────────────────────────────────────────

    def mark_dirty(self, node) -> None:
        """Mark a node and everything downstream of it dirty.

        Recursion stops at nodes that are already dirty, so diamond-shaped
        graphs are walked once.
        """
        self._mark_dirty(self._adopt(node))

    def _mark_dirty(self, node_id: int) -> None:
        arena = self._arena
        stack = [node_id]
        while stack:
            current = stack.pop()
            if arena.kinds[current] is not Kind.SIGNAL:
                if arena.dirty[current]:
                    continue
                arena.dirty[current] = True
            stack.extend(arena.dependents[current])

    def _after_write(self) -> None:
        if self.auto_flush and self._batch_depth == 0 and not self._flushing:
            self.flush()

    def is_dirty(self, node) -> bool:
        return self._arena.dirty.get(self._adopt(node), False)

    # ─── Batching ───────────────────────────────────────────────────────────

    def begin_batch(self) -> None:
        """Enter a batching scope. Nested batches are supported."""
        self._batch_depth += 1

    def end_batch(self) -> None:
        """Exit a batching scope. The outermost exit flushes when auto_flush is on."""
        self._batch_depth -= 1
        if self._batch_depth == 0:
            self._after_write()

    @contextmanager
    def batch(self) -> Iterator[None]:
        self.begin_batch()
        try:
            yield
        finally:
            self.end_batch()

    # ─── Flush ──────────────────────────────────────────────────────────────

    def flush(self) -> FlushReport:
        """Bring every dirty Sink up to date, in declaration order.

        Each Sink renders at most once. A failing Sink stays dirty and does
        not stop the others; failures are raised together as FlushError
        after every Sink was visited.
        """
        self._check_open()
        if self._flushing:
            raise GraphError(f"flush() re-entered on graph {self.name!r}")
        if self._stack:
            raise GraphError(f"flush() called during evaluation on graph {self.name!r}")

        report = FlushReport(graph=self.name)
        self._flushing = True
        try:
            for sink_id in list(self._sinks):
                if not self._arena.dirty.get(sink_id, False):
                    continue
                self._flush_sink(self._nodes[sink_id], report)
        finally:
            self._flushing = False

        logger.debug(
            "flush %s: rendered=%s deferred=%s failed=%d",
            self.name, report.rendered, report.deferred, len(report.failures),
        )
        if report.failures:
            if self.raise_errors:
                raise FlushError(report)
            for failure in report.failures:
                logger.error(
                    "Sink %r failed in graph %r",
                    failure.sink, self.name, exc_info=failure.error,
                )
        return report

    def _flush_sink(self, sink: Sink, report: FlushReport) -> None:
        name = sink.name
        if not sink.ready():
            report.deferred.append(name)
            return
        try:
            values = sink._collect()
            self._rendering = sink._id
            try:
                sink._render(values)
            finally:
                self._rendering = None
        except Exception as exc:
            report.failures.append(SinkFailure(name, exc))
            return
        self._arena.dirty[sink._id] = False
        report.rendered.append(name)

    def _check_render_write(self, signal_id: int) -> None:
        """Reject a render writing to a Signal upstream of its own Sink."""
        if self._rendering is not None and self._arena.reaches(signal_id, self._rendering):
            raise CycleDetected(
                [self._arena.names[self._rendering], self._arena.names[signal_id]]
            )

    # ─── Lifecycle ──────────────────────────────────────────────────────────

    def _release(self, node_id: int) -> None:
        """Drop one node. Its direct dependents lose the edge and go dirty."""
        for dependent in list(self._arena.dependents[node_id]):
            self._mark_dirty(dependent)
        self._arena.release(node_id)
        self._nodes.pop(node_id, None)
        if node_id in self._sinks:
            self._sinks.remove(node_id)

    def dispose(self) -> None:
        """Tear down every node. The graph can't be used afterwards."""
        if self._disposed:
            return
        self._arena = Arena()
        self._nodes.clear()
        self._sinks.clear()
        self._disposed = True
        logger.debug("disposed graph %s", self.name)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def __enter__(self) -> Graph:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else f"{len(self._nodes)} nodes"
        return f"Graph({self.name!r}, {state})"
