# selgraph/__init__.py
"""selgraph: tabular graphs with selections, traversals and an action log."""
from __future__ import annotations

import logging
from importlib import import_module
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version
from typing import Any

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Lazily exposed submodules (imported on first attribute access)
_lazy_submodules = {
    "adapters": "selgraph.adapters",
    "core": "selgraph.core",
    "io": "selgraph.io",
    # backend modules (optional dependencies)
    "igraph": "selgraph.adapters.igraph",
    "networkx": "selgraph.adapters.networkx",
}

# Curated top-level symbols (lazy). name -> (module, attribute)
_lazy_symbols: dict[str, tuple[str, str]] = {
    # Core
    "Graph": ("selgraph.core.graph", "Graph"),
    "GraphConfig": ("selgraph.core.config", "GraphConfig"),
    "Selection": ("selgraph.core.selection", "Selection"),
    "GraphAction": ("selgraph.core.actions", "GraphAction"),
    "GraphChanged": ("selgraph.core.history", "GraphChanged"),
    "graph_operation": ("selgraph.core.history", "graph_operation"),

    # Errors
    "GraphError": ("selgraph.core.errors", "GraphError"),
    "InvalidGraphStateError": ("selgraph.core.errors", "InvalidGraphStateError"),
    "NoActiveSelectionError": ("selgraph.core.errors", "NoActiveSelectionError"),
    "EmptySelectionError": ("selgraph.core.errors", "EmptySelectionError"),
    "InvalidReferenceError": ("selgraph.core.errors", "InvalidReferenceError"),
    "MissingAttributeError": ("selgraph.core.errors", "MissingAttributeError"),
    "NoMovableElementsError": ("selgraph.core.errors", "NoMovableElementsError"),
    "NoEdgesError": ("selgraph.core.errors", "NoEdgesError"),
    "ReferencedNodeError": ("selgraph.core.errors", "ReferencedNodeError"),
    "GraphActionError": ("selgraph.core.errors", "GraphActionError"),
    "BackupWarning": ("selgraph.core.errors", "BackupWarning"),

    # Persistence
    "write_graph": ("selgraph.io.snapshot", "write_graph"),
    "read_graph": ("selgraph.io.snapshot", "read_graph"),

    # Algorithm bridge
    "compute_metric": ("selgraph.adapters", "compute_metric"),
    "get_pagerank": ("selgraph.adapters.igraph", "get_pagerank"),
    "to_igraph": ("selgraph.adapters.igraph", "to_igraph"),
    "to_nx": ("selgraph.adapters.networkx", "to_nx"),
}

__all__ = sorted(set(list(_lazy_submodules) + list(_lazy_symbols)))


def __getattr__(name: str) -> Any:  # PEP 562: lazy attribute resolution
    if name in _lazy_submodules:
        return import_module(_lazy_submodules[name])
    if name in _lazy_symbols:
        mod, attr = _lazy_symbols[name]
        return getattr(import_module(mod), attr)
    raise AttributeError(name)


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(__all__))


try:
    __version__ = _pkg_version("selgraph")
except PackageNotFoundError:
    __version__ = "0.0.0"
