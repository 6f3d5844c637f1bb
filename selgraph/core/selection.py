"""Selection context: the node or edge IDs currently in scope.

A selection persists across operations until it is cleared or replaced.
Selecting never touches the record tables and is not written to the
action log.
"""

from __future__ import annotations

import numbers
from collections.abc import Iterable
from dataclasses import dataclass

import polars as pl

from .errors import (
    EmptySelectionError,
    InvalidReferenceError,
    MissingAttributeError,
    NoActiveSelectionError,
)
from .tables import id_list, normalize_value

SET_OPS = ("replace", "union", "intersect", "difference")


def _normalize_ids(ids):
    if ids is None:
        return None
    out = tuple(sorted({int(i) for i in ids}))
    return out or None


@dataclass(frozen=True)
class Selection:
    """Selected node and edge IDs.

    Each side is either None or a non-empty tuple sorted ascending without
    duplicates; empty input collapses to None.
    """

    nodes: tuple[int, ...] | None = None
    edges: tuple[int, ...] | None = None

    def __post_init__(self):
        object.__setattr__(self, "nodes", _normalize_ids(self.nodes))
        object.__setattr__(self, "edges", _normalize_ids(self.edges))

    @property
    def is_empty(self) -> bool:
        return self.nodes is None and self.edges is None

    def prune(self, node_ids: Iterable[int], edge_ids: Iterable[int]) -> Selection:
        """Drop IDs that no longer exist in the tables."""
        alive_n, alive_e = set(node_ids), set(edge_ids)
        nodes = None if self.nodes is None else [i for i in self.nodes if i in alive_n]
        edges = None if self.edges is None else [i for i in self.edges if i in alive_e]
        return Selection(nodes=nodes, edges=edges)


def combine_ids(current, new, set_op: str) -> tuple[int, ...]:
    """Combine newly matched IDs with an existing selection side."""
    if set_op not in SET_OPS:
        raise ValueError(f"set_op must be one of {SET_OPS}, got {set_op!r}")
    new = set(new)
    cur = set(current or ())
    if set_op == "union":
        new = cur | new
    elif set_op == "intersect":
        new = cur & new
    elif set_op == "difference":
        new = cur - new
    return tuple(sorted(new))


def apply_conditions(df: pl.DataFrame, conditions) -> pl.DataFrame:
    """Filter ``df`` by one Polars expression or an iterable of them (AND-ed)."""
    if conditions is None:
        return df
    exprs = [conditions] if isinstance(conditions, pl.Expr) else list(conditions)
    if not exprs:
        return df
    try:
        return df.filter(*exprs)
    except pl.exceptions.ColumnNotFoundError as exc:
        raise MissingAttributeError(f"Condition refers to a missing attribute: {exc}") from exc


def as_id(value) -> int:
    """Return ``value`` as a plain ``int`` ID.

    Raises
    ------
    InvalidReferenceError
        If ``value`` is not an integral number (``2.7``, ``"2"``, ``True``).

    """
    value = normalize_value(value)
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidReferenceError(f"{value!r} is not a valid node or edge ID")
    return int(value)


def as_id_list(ids) -> list[int]:
    if isinstance(ids, (str, bytes)) or not isinstance(ids, Iterable):
        return [as_id(ids)]
    return [as_id(i) for i in ids]


class SelectionMixin:
    """Selection operations for ``Graph``."""

    def _match_ids(self, df, kind, conditions=None, ids=None):
        if ids is not None:
            ids = as_id_list(ids)
            missing = sorted(set(ids) - set(id_list(df)))
            if missing:
                raise InvalidReferenceError(f"{kind} ID(s) not in the graph: {missing}")
            df = df.filter(pl.col("id").is_in(ids))
        return id_list(apply_conditions(df, conditions))

    def _with_node_selection(self, matched, set_op):
        nodes = combine_ids(self.selection.nodes, matched, set_op)
        if not nodes:
            raise EmptySelectionError("The selection of nodes is empty")
        return self._evolve(selection=Selection(nodes=nodes))

    def _with_edge_selection(self, matched, set_op):
        edges = combine_ids(self.selection.edges, matched, set_op)
        if not edges:
            raise EmptySelectionError("The selection of edges is empty")
        return self._evolve(selection=Selection(edges=edges))

    def select_nodes(self, conditions=None, *, nodes=None, set_op: str = "replace"):
        """Select nodes matching ``conditions`` and/or listed in ``nodes``.

        Parameters
        ----------
        conditions : polars.Expr or iterable of polars.Expr, optional
            Filter over the node table, e.g. ``pl.col("type") == "b"``.
            Multiple expressions are AND-ed. Omit to match every node.
        nodes : int or iterable of int, optional
            Restrict candidates to these node IDs.
        set_op : {"replace", "union", "intersect", "difference"}, default "replace"
            How the matched IDs combine with the current node selection.

        Returns
        -------
        Graph
            A graph whose node selection is the result; any edge selection
            is dropped.

        Raises
        ------
        EmptySelectionError
            If the graph has no nodes or the result is empty.
        InvalidReferenceError
            If an ID in ``nodes`` does not exist.
        MissingAttributeError
            If a condition refers to an unknown column.

        """
        if self.count_nodes() == 0:
            raise EmptySelectionError("The graph contains no nodes")
        matched = self._match_ids(self.nodes_df, "Node", conditions, nodes)
        return self._with_node_selection(matched, set_op)

    def select_nodes_by_id(self, nodes, set_op: str = "replace"):
        return self.select_nodes(nodes=nodes, set_op=set_op)

    def select_last_node(self):
        """Select the node with the highest existing ID."""
        if self.count_nodes() == 0:
            raise EmptySelectionError("The graph contains no nodes")
        return self._evolve(selection=Selection(nodes=[self.nodes_df.get_column("id").max()]))

    def select_edges(
        self,
        conditions=None,
        *,
        edges=None,
        from_node=None,
        to_node=None,
        set_op: str = "replace",
    ):
        """Select edges matching ``conditions`` and/or the given IDs/endpoints.

        Parameters
        ----------
        conditions : polars.Expr or iterable of polars.Expr, optional
            Filter over the edge table, e.g. ``pl.col("rel") == "a"``.
        edges : int or iterable of int, optional
            Restrict candidates to these edge IDs.
        from_node, to_node : int or iterable of int, optional
            Restrict candidates to edges leaving / entering these nodes.
        set_op : {"replace", "union", "intersect", "difference"}, default "replace"

        Returns
        -------
        Graph
            A graph whose edge selection is the result; any node selection
            is dropped.

        Raises
        ------
        EmptySelectionError
            If the graph has no edges or the result is empty.

        """
        if self.count_edges() == 0:
            raise EmptySelectionError("The graph contains no edges")
        df = self.edges_df
        if from_node is not None:
            df = df.filter(pl.col("from").is_in(as_id_list(from_node)))
        if to_node is not None:
            df = df.filter(pl.col("to").is_in(as_id_list(to_node)))
        if edges is not None:
            wanted = as_id_list(edges)
            missing = sorted(set(wanted) - set(id_list(self.edges_df)))
            if missing:
                raise InvalidReferenceError(f"Edge ID(s) not in the graph: {missing}")
            df = df.filter(pl.col("id").is_in(wanted))
        matched = id_list(apply_conditions(df, conditions))
        return self._with_edge_selection(matched, set_op)

    def select_edges_by_edge_id(self, edges, set_op: str = "replace"):
        return self.select_edges(edges=edges, set_op=set_op)

    def select_edges_by_node_id(self, nodes, set_op: str = "replace"):
        """Select every edge with an endpoint among ``nodes``."""
        nodes = self._match_ids(self.nodes_df, "Node", None, nodes)
        df = self.edges_df.filter(pl.col("from").is_in(nodes) | pl.col("to").is_in(nodes))
        return self._with_edge_selection(id_list(df), set_op)

    def select_last_edge(self):
        """Select the edge with the highest existing ID."""
        if self.count_edges() == 0:
            raise EmptySelectionError("The graph contains no edges")
        return self._evolve(selection=Selection(edges=[self.edges_df.get_column("id").max()]))

    def invert_selection(self):
        """Replace the active selection with its complement in the same table."""
        sel = self.selection
        if sel.nodes is not None:
            chosen = set(sel.nodes)
            rest = [i for i in id_list(self.nodes_df) if i not in chosen]
            if not rest:
                raise EmptySelectionError("Every node is selected; the inverse is empty")
            return self._evolve(selection=Selection(nodes=rest))
        if sel.edges is not None:
            chosen = set(sel.edges)
            rest = [i for i in id_list(self.edges_df) if i not in chosen]
            if not rest:
                raise EmptySelectionError("Every edge is selected; the inverse is empty")
            return self._evolve(selection=Selection(edges=rest))
        raise NoActiveSelectionError("There is no selection to invert")

    def clear_selection(self):
        return self._evolve(selection=Selection())

    def get_selection(self) -> Selection:
        return self.selection

    def get_selected_nodes(self) -> list[int]:
        return list(self.selection.nodes or ())

    def get_selected_edges(self) -> list[int]:
        return list(self.selection.edges or ())

    def has_node_selection(self) -> bool:
        return self.selection.nodes is not None

    def has_edge_selection(self) -> bool:
        return self.selection.edges is not None

    def _require_node_selection(self) -> tuple[int, ...]:
        if self.selection.nodes is None:
            raise NoActiveSelectionError("There is no active selection of nodes")
        return self.selection.nodes

    def _require_edge_selection(self) -> tuple[int, ...]:
        if self.selection.edges is None:
            raise NoActiveSelectionError("There is no active selection of edges")
        return self.selection.edges
