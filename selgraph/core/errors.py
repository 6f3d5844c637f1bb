"""Exception and warning types raised by graph operations.

All errors are raised during validation, before a new graph state is built,
so a failed call never changes the action log.
"""

from __future__ import annotations


class GraphError(Exception):
    """Base class for every error raised by selgraph."""


class InvalidGraphStateError(GraphError, ValueError):
    """A structural invariant of the node or edge table is violated."""


class NoActiveSelectionError(GraphError, ValueError):
    """The operation needs a node or edge selection and none is active."""


NoSelectionError = NoActiveSelectionError


class EmptySelectionError(GraphError, ValueError):
    """A selection request matched no elements."""


class InvalidReferenceError(GraphError, KeyError):
    """A node or edge ID does not exist in its table."""

    def __str__(self) -> str:
        # KeyError quotes its message; keep it readable
        return str(self.args[0]) if self.args else ""


class MissingAttributeError(GraphError, KeyError):
    """A required attribute column is absent."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class NoMovableElementsError(GraphError, ValueError):
    """A selection exists but none of its members qualify for the operation."""


NoMovableNodesError = NoMovableElementsError


class NoEdgesError(GraphError, ValueError):
    """The graph has no edges but the operation requires some."""


class ReferencedNodeError(GraphError, ValueError):
    """A node cannot be removed while edges still reference it."""


class GraphActionError(GraphError, RuntimeError):
    """A deferred graph action failed after the triggering mutation committed.

    Attributes
    ----------
    action_name : str
        Name of the action that raised.
    graph : Graph
        The graph as it stood when the action failed: the triggering
        mutation is applied and logged, along with any actions that ran
        before the failing one.
    """

    def __init__(self, action_name, graph):
        super().__init__(f"Graph action '{action_name}' failed")
        self.action_name = action_name
        self.graph = graph


class BackupWarning(UserWarning):
    """Writing a graph backup failed; the in-memory graph is unaffected."""


__all__ = [
    "BackupWarning",
    "EmptySelectionError",
    "GraphActionError",
    "GraphError",
    "InvalidGraphStateError",
    "InvalidReferenceError",
    "MissingAttributeError",
    "NoActiveSelectionError",
    "NoEdgesError",
    "NoMovableElementsError",
    "NoMovableNodesError",
    "NoSelectionError",
    "ReferencedNodeError",
]
