from . import errors
from .actions import GraphAction
from .config import GraphConfig
from .errors import *
from .graph import Graph
from .history import GraphChanged, LogEntry, graph_operation
from .selection import Selection

__all__ = [
    "Graph",
    "GraphAction",
    "GraphChanged",
    "GraphConfig",
    "LogEntry",
    "Selection",
    "graph_operation",
    *errors.__all__,
]
