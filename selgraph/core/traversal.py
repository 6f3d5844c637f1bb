"""Traversal engine: derive a new selection from the current one.

Traversals are pure functions of (tables, selection) -> selection. They
never touch the node or edge tables and are not logged.
"""

from __future__ import annotations

import logging

import polars as pl

from .selection import Selection, apply_conditions, combine_ids
from .tables import id_list

logger = logging.getLogger(__name__)

TRAVERSAL_SET_OPS = ("replace", "union", "intersect")


class TraversalMixin:
    """Node/edge traversals for ``Graph``.

    Every traversal accepts:

    conditions : polars.Expr or iterable of polars.Expr, optional
        Filter applied to the destination table (nodes or edges reached).
    set_op : {"replace", "union", "intersect"}, default "replace"
        How the reached IDs combine with the existing selection of the
        destination kind.

    Results are ordered by ascending ID without duplicates. If nothing is
    reached the graph is returned with its selection unchanged.
    """

    def _land(self, kind, reached, conditions, set_op, origin):
        if set_op not in TRAVERSAL_SET_OPS:
            raise ValueError(f"set_op must be one of {TRAVERSAL_SET_OPS}, got {set_op!r}")
        df = self.nodes_df if kind == "nodes" else self.edges_df
        df = apply_conditions(df.filter(pl.col("id").is_in(sorted(set(reached)))), conditions)
        current = self.selection.nodes if kind == "nodes" else self.selection.edges
        ids = combine_ids(current, id_list(df), set_op)
        if not ids:
            logger.debug("%s reached no %s; selection retained", origin, kind)
            return self
        sel = Selection(nodes=ids) if kind == "nodes" else Selection(edges=ids)
        return self._evolve(selection=sel)

    # Node -> edge

    def traverse_out_edges(self, conditions=None, set_op: str = "replace"):
        """Select the edges leaving the selected nodes."""
        nodes = list(self._require_node_selection())
        reached = id_list(self.edges_df.filter(pl.col("from").is_in(nodes)))
        return self._land("edges", reached, conditions, set_op, "traverse_out_edges")

    def traverse_in_edges(self, conditions=None, set_op: str = "replace"):
        """Select the edges entering the selected nodes."""
        nodes = list(self._require_node_selection())
        reached = id_list(self.edges_df.filter(pl.col("to").is_in(nodes)))
        return self._land("edges", reached, conditions, set_op, "traverse_in_edges")

    def traverse_both_edges(self, conditions=None, set_op: str = "replace"):
        """Select the edges leaving or entering the selected nodes."""
        nodes = list(self._require_node_selection())
        reached = id_list(
            self.edges_df.filter(pl.col("from").is_in(nodes) | pl.col("to").is_in(nodes))
        )
        return self._land("edges", reached, conditions, set_op, "traverse_both_edges")

    # Edge -> node

    def traverse_out_nodes(self, conditions=None, set_op: str = "replace"):
        """Move against the direction of the selected edges onto their ``from`` nodes."""
        edges = list(self._require_edge_selection())
        reached = self.edges_df.filter(pl.col("id").is_in(edges)).get_column("from").to_list()
        return self._land("nodes", reached, conditions, set_op, "traverse_out_nodes")

    def traverse_in_nodes(self, conditions=None, set_op: str = "replace"):
        """Move along the direction of the selected edges onto their ``to`` nodes."""
        edges = list(self._require_edge_selection())
        reached = self.edges_df.filter(pl.col("id").is_in(edges)).get_column("to").to_list()
        return self._land("nodes", reached, conditions, set_op, "traverse_in_nodes")

    def traverse_both_nodes(self, conditions=None, set_op: str = "replace"):
        """Select both endpoints of the selected edges."""
        edges = list(self._require_edge_selection())
        df = self.edges_df.filter(pl.col("id").is_in(edges))
        reached = df.get_column("from").to_list() + df.get_column("to").to_list()
        return self._land("nodes", reached, conditions, set_op, "traverse_both_nodes")

    # Node -> node

    def traverse_out(self, conditions=None, set_op: str = "replace"):
        """Select the successors of the selected nodes."""
        nodes = list(self._require_node_selection())
        reached = self.edges_df.filter(pl.col("from").is_in(nodes)).get_column("to").to_list()
        return self._land("nodes", reached, conditions, set_op, "traverse_out")

    def traverse_in(self, conditions=None, set_op: str = "replace"):
        """Select the predecessors of the selected nodes."""
        nodes = list(self._require_node_selection())
        reached = self.edges_df.filter(pl.col("to").is_in(nodes)).get_column("from").to_list()
        return self._land("nodes", reached, conditions, set_op, "traverse_in")

    def traverse_both(self, conditions=None, set_op: str = "replace"):
        """Select the successors and predecessors of the selected nodes."""
        nodes = list(self._require_node_selection())
        out = self.edges_df.filter(pl.col("from").is_in(nodes)).get_column("to").to_list()
        inc = self.edges_df.filter(pl.col("to").is_in(nodes)).get_column("from").to_list()
        return self._land("nodes", out + inc, conditions, set_op, "traverse_both")
