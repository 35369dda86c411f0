"""reactigraph: an explicit reactive computation graph for data-exploration UIs."""

from importlib.metadata import version as _version

__version__ = _version("reactigraph")

from reactigraph.errors import (
    CycleDetected,
    DisposedError,
    FlushError,
    ForeignNodeError,
    GraphError,
    LoadError,
    WriteDuringEvaluation,
)
from reactigraph.graph import Graph, FlushReport, SinkFailure
from reactigraph.signal import Signal, structural_equals
from reactigraph.computed import Computed, computed
from reactigraph.sink import Sink, sink
from reactigraph.action import action, transaction
from reactigraph.store import Inputs
# explorer (pandas) and textual are opt-in: import the submodules directly

__all__ = [
    "Graph",
    "FlushReport",
    "SinkFailure",
    "Signal",
    "structural_equals",
    "Computed",
    "computed",
    "Sink",
    "sink",
    "action",
    "transaction",
    "Inputs",
    "GraphError",
    "CycleDetected",
    "DisposedError",
    "ForeignNodeError",
    "WriteDuringEvaluation",
    "FlushError",
    "LoadError",
]
