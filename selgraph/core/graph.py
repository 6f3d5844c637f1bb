import copy
import dataclasses
import logging
from uuid import uuid4

import polars as pl

from .actions import ActionQueueMixin
from .config import GraphConfig
from .errors import InvalidGraphStateError, InvalidReferenceError, ReferencedNodeError
from .history import HistoryMixin, graph_operation
from .mutations import MutationMixin
from .selection import Selection, SelectionMixin, as_id, as_id_list
from .tables import (
    EDGE_RESERVED,
    EDGE_SCHEMA,
    NODE_RESERVED,
    NODE_SCHEMA,
    append_rows,
    empty_edge_table,
    empty_node_table,
    id_list,
    missing_columns,
    row_attrs,
    set_values,
)
from .traversal import TraversalMixin

logger = logging.getLogger(__name__)


class Graph(SelectionMixin, TraversalMixin, MutationMixin, ActionQueueMixin, HistoryMixin):
    """Tabular property graph with a selection context and an action log.

    Nodes and edges are rows of two Polars DF (DataFrame) tables. Operations
    are chained fluently; each one returns a **new** ``Graph`` and leaves the
    receiver untouched::

        g = (
            Graph()
            .add_nodes(2)
            .add_edge(1, 2, rel="a")
            .select_edges()
            .add_forward_edges_ws(rel="b")
            .clear_selection()
        )

    Parameters
    ----------
    config : GraphConfig, optional
        Graph policy (directedness, backups, delete policy).
    name : str, optional
        Human-readable graph name.
    **overrides
        ``GraphConfig`` fields overriding ``config``.

    Attributes
    ----------
    nodes_df : polars.DataFrame
        Node table: ``id``, ``type``, ``label`` then attribute columns.
    edges_df : polars.DataFrame
        Edge table: ``id``, ``from``, ``to``, ``rel`` then attribute columns.
    selection : Selection
        Currently selected node and/or edge IDs.
    last_node_id, last_edge_id : int
        Highest ID ever allocated in each table; never decreases.

    Notes
    -----
    - Every mutating method goes through ``graph_operation``: it validates,
      builds the new state, appends exactly one action-log entry, runs the
      deferred action queue and subscribers, then writes a backup when
      ``config.write_backups`` is set.
    - Polars frames and tuples are immutable, so derived graphs share
      storage with their parents.

    """

    def __init__(self, config=None, *, name=None, **overrides):
        if config is None:
            config = GraphConfig(**overrides)
        elif overrides:
            config = dataclasses.replace(config, **overrides)
        self.config = config
        self.graph_id = uuid4().hex[:8]
        self.graph_name = name

        self.nodes_df = empty_node_table()
        self.edges_df = empty_edge_table()
        self.selection = Selection()
        self.last_node_id = 0
        self.last_edge_id = 0

        self._log = ()
        self._actions = ()
        self._subscribers = ()

    def _evolve(self, **changes) -> "Graph":
        new = copy.copy(self)
        for key, value in changes.items():
            setattr(new, key, value)
        return new

    def with_config(self, **changes) -> "Graph":
        """Return the graph with ``GraphConfig`` fields replaced."""
        return self._evolve(config=dataclasses.replace(self.config, **changes))

    def __repr__(self) -> str:
        sel = self.selection
        parts = [f"nodes={self.count_nodes()}", f"edges={self.count_edges()}"]
        if sel.nodes is not None:
            parts.append(f"selected_nodes={len(sel.nodes)}")
        if sel.edges is not None:
            parts.append(f"selected_edges={len(sel.edges)}")
        parts.append(f"version={self.version_id}")
        return f"Graph({', '.join(parts)})"

    # Validation

    def validate(self) -> None:
        """Check the structural invariants of the record tables.

        Raises
        ------
        InvalidGraphStateError
            If a required column is missing, an ID is duplicated, or an edge
            references a node that does not exist.

        """
        for table, schema, label in (
            (self.nodes_df, NODE_SCHEMA, "node"),
            (self.edges_df, EDGE_SCHEMA, "edge"),
        ):
            if not isinstance(table, pl.DataFrame):
                raise InvalidGraphStateError(f"The {label} table is missing")
            missing = missing_columns(table, schema)
            if missing:
                raise InvalidGraphStateError(f"The {label} table lacks columns {missing}")
            if table.get_column("id").n_unique() != table.height:
                raise InvalidGraphStateError(f"The {label} table has duplicate IDs")
        if self.edges_df.height:
            nodes = self.nodes_df.get_column("id")
            dangling = self.edges_df.filter(
                ~pl.col("from").is_in(nodes) | ~pl.col("to").is_in(nodes)
            )
            if dangling.height:
                raise InvalidGraphStateError(
                    f"Edges {id_list(dangling)} reference nodes that do not exist"
                )

    # Counts and accessors

    def count_nodes(self) -> int:
        return self.nodes_df.height

    def count_edges(self) -> int:
        return self.edges_df.height

    def get_node_df(self) -> pl.DataFrame:
        return self.nodes_df

    def get_edge_df(self) -> pl.DataFrame:
        return self.edges_df

    def get_node_ids(self) -> list[int]:
        return id_list(self.nodes_df)

    def get_edge_ids(self) -> list[int]:
        return id_list(self.edges_df)

    def has_node(self, node_id) -> bool:
        return row_attrs(self.nodes_df, node_id) is not None

    def has_edge_id(self, edge_id) -> bool:
        return row_attrs(self.edges_df, edge_id) is not None

    def get_node_attrs(self, node_id) -> dict:
        """Return the node row as a dict (``id`` included)."""
        row = row_attrs(self.nodes_df, node_id)
        if row is None:
            raise InvalidReferenceError(f"Node {node_id} not found")
        return row

    def get_edge_attrs(self, edge_id) -> dict:
        """Return the edge row as a dict (``id``, ``from``, ``to``, ``rel`` included)."""
        row = row_attrs(self.edges_df, edge_id)
        if row is None:
            raise InvalidReferenceError(f"Edge {edge_id} not found")
        return row

    # Record tables: nodes

    @graph_operation()
    def add_node(self, type=None, label=None, **attrs):
        """Add one node.

        Parameters
        ----------
        type : str, optional
            Node classifier.
        label : str, optional
        **attrs
            Scalar attributes; new columns are created as needed.

        Returns
        -------
        Graph
            The new ID is ``last_node_id`` of the returned graph.

        """
        return self._append_nodes(1, type, label, attrs)

    @graph_operation()
    def add_nodes(self, n: int, type=None, label=None, **attrs):
        """Add ``n`` nodes sharing ``type``, ``label`` and ``attrs``; one log entry."""
        if int(n) < 1:
            raise ValueError("n must be at least 1")
        return self._append_nodes(int(n), type, label, attrs)

    def _append_nodes(self, n, type, label, attrs):
        reserved = NODE_RESERVED & attrs.keys()
        if reserved:
            raise ValueError(f"Reserved node attribute(s): {sorted(reserved)}")
        first = self.last_node_id + 1
        rows = [
            {"id": first + i, "type": type, "label": label, **attrs} for i in range(n)
        ]
        return self._evolve(
            nodes_df=append_rows(self.nodes_df, rows),
            last_node_id=first + n - 1,
        )

    @graph_operation()
    def remove_node(self, node_id):
        """Remove one node.

        Edges referencing the node are removed too under the ``"cascade"``
        delete policy; under ``"forbid"`` the call fails instead.

        Raises
        ------
        InvalidReferenceError
            If the node does not exist.
        ReferencedNodeError
            If edges reference the node and the policy is ``"forbid"``.

        """
        node_id = as_id(node_id)
        if not self.has_node(node_id):
            raise InvalidReferenceError(f"Node {node_id} not found")
        return self._drop_nodes([node_id])

    def _drop_nodes(self, node_ids):
        node_ids = as_id_list(node_ids)
        touching = self.edges_df.filter(
            pl.col("from").is_in(node_ids) | pl.col("to").is_in(node_ids)
        )
        if touching.height and self.config.delete_policy == "forbid":
            raise ReferencedNodeError(
                f"Node(s) {node_ids} are referenced by edges {id_list(touching)}"
            )
        nodes_df = self.nodes_df.filter(~pl.col("id").is_in(node_ids))
        edges_df = self.edges_df.filter(~pl.col("id").is_in(id_list(touching)))
        return self._evolve(
            nodes_df=nodes_df,
            edges_df=edges_df,
            selection=self.selection.prune(id_list(nodes_df), id_list(edges_df)),
        )

    @graph_operation()
    def set_node_attrs(self, attr: str, value, nodes=None):
        """Set attribute ``attr`` to ``value`` on ``nodes`` (all nodes when omitted)."""
        if attr in NODE_RESERVED:
            raise ValueError(f"Cannot overwrite reserved node attribute '{attr}'")
        if nodes is not None:
            nodes = self._match_ids(self.nodes_df, "Node", None, nodes)
        return self._evolve(nodes_df=set_values(self.nodes_df, attr, value, nodes))

    @graph_operation()
    def set_node_position(self, node, x, y):
        """Set the ``x``/``y`` layout position of one node."""
        node = as_id(node)
        if not self.has_node(node):
            raise InvalidReferenceError(f"Node {node} not found")
        df = set_values(self.nodes_df, "x", None if x is None else float(x), [node])
        df = set_values(df, "y", None if y is None else float(y), [node])
        return self._evolve(nodes_df=df)

    # Record tables: edges

    @graph_operation()
    def add_edge(self, from_node, to_node, rel=None, **attrs):
        """Add one edge ``from_node -> to_node``.

        Parameters
        ----------
        from_node, to_node : int
            Existing node IDs.
        rel : str, optional
            Edge classifier.
        **attrs
            Scalar attributes.

        Returns
        -------
        Graph
            The new ID is ``last_edge_id`` of the returned graph.

        Raises
        ------
        InvalidReferenceError
            If either endpoint does not exist.

        """
        return self._append_edges([(from_node, to_node)], rel, attrs)

    def _append_edges(self, pairs, rel, attrs):
        reserved = EDGE_RESERVED & attrs.keys()
        if reserved:
            raise ValueError(f"Reserved edge attribute(s): {sorted(reserved)}")
        pairs = [(as_id(f), as_id(t)) for f, t in pairs]
        known = set(id_list(self.nodes_df))
        missing = sorted({n for pair in pairs for n in pair if n not in known})
        if missing:
            raise InvalidReferenceError(f"Node(s) {missing} not found; cannot create edge")
        first = self.last_edge_id + 1
        rows = [
            {"id": first + i, "from": f, "to": t, "rel": rel, **attrs}
            for i, (f, t) in enumerate(pairs)
        ]
        return self._evolve(
            edges_df=append_rows(self.edges_df, rows),
            last_edge_id=first + len(rows) - 1,
        )

    @graph_operation()
    def remove_edge(self, edge_id):
        """Remove one edge; it is pruned from the edge selection."""
        edge_id = as_id(edge_id)
        if not self.has_edge_id(edge_id):
            raise InvalidReferenceError(f"Edge {edge_id} not found")
        return self._drop_edges([edge_id])

    def _drop_edges(self, edge_ids):
        edges_df = self.edges_df.filter(~pl.col("id").is_in(as_id_list(edge_ids)))
        return self._evolve(
            edges_df=edges_df,
            selection=self.selection.prune(id_list(self.nodes_df), id_list(edges_df)),
        )

    @graph_operation()
    def set_edge_attrs(self, attr: str, value, edges=None):
        """Set attribute ``attr`` to ``value`` on ``edges`` (all edges when omitted)."""
        if attr in EDGE_RESERVED:
            raise ValueError(f"Cannot overwrite reserved edge attribute '{attr}'")
        if edges is not None:
            edges = self._match_ids(self.edges_df, "Edge", None, edges)
        return self._evolve(edges_df=set_values(self.edges_df, attr, value, edges))
