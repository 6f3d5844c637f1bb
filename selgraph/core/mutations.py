"""Bulk mutation operations driven by the active selection.

Each operation is a single validated batch transform over a record table,
so it produces exactly one action-log entry however many rows it touches.
"""

from __future__ import annotations

import polars as pl

from .errors import (
    MissingAttributeError,
    NoEdgesError,
    NoMovableElementsError,
)
from .history import graph_operation
from .tables import EDGE_RESERVED, NODE_RESERVED, POSITION_COLUMNS, common_dtype

_JOIN_SUFFIX = "__joined"


def _join_table(table: pl.DataFrame, df, by_graph: str, by_df: str, reserved) -> pl.DataFrame:
    """Left-join ``df`` onto ``table``.

    Matched rows take the joined values; unmatched rows keep the value they
    had (or null for columns that did not exist yet). Row order is by ``id``.
    """
    if not isinstance(df, pl.DataFrame):
        df = pl.DataFrame(df)
    if by_graph not in table.columns:
        raise MissingAttributeError(f"The graph has no attribute '{by_graph}' to join on")
    if by_df not in df.columns:
        raise MissingAttributeError(f"The table has no column '{by_df}' to join on")

    incoming = df.rename({by_df: by_graph}) if by_df != by_graph else df
    value_cols = [c for c in incoming.columns if c != by_graph]
    clash = sorted(set(value_cols) & set(reserved))
    if clash:
        raise ValueError(f"Cannot join onto reserved column(s): {clash}")
    if not value_cols:
        return table

    incoming = incoming.with_columns(
        pl.col(by_graph).cast(table.schema[by_graph], strict=False)
    ).unique(subset=[by_graph], keep="first", maintain_order=True)
    joined = table.join(incoming, on=by_graph, how="left", suffix=_JOIN_SUFFIX)

    for col in value_cols:
        if col not in table.columns:
            continue
        new = f"{col}{_JOIN_SUFFIX}"
        dtype = common_dtype(table.schema[col], joined.schema[new])
        joined = joined.with_columns(
            pl.coalesce(pl.col(new).cast(dtype), pl.col(col).cast(dtype)).alias(col)
        ).drop(new)

    order = table.columns + [c for c in value_cols if c not in table.columns]
    return joined.select(order).sort("id")


class MutationMixin:
    """Selection-driven bulk mutations for ``Graph``."""

    # Edges from an edge selection

    @graph_operation()
    def add_forward_edges_ws(self, rel=None):
        """Add a copy of every selected edge, in the same direction.

        New edges get fresh IDs, the same ``from``/``to`` as the selected
        edge and a common ``rel`` (null when omitted). The edge selection is
        kept as it was; the new edges are not selected.

        Parameters
        ----------
        rel : str, optional

        Returns
        -------
        Graph

        Raises
        ------
        NoEdgesError
            If the graph has no edges.
        NoActiveSelectionError
            If there is no edge selection.

        Examples
        --------
        >>> g = (
        ...     Graph().add_nodes(2).add_edge(1, 2, rel="a")
        ...     .select_edges()
        ...     .add_forward_edges_ws(rel="b")
        ...     .add_forward_edges_ws(rel="c")
        ... )
        >>> g.get_edge_df().rows()
        [(1, 1, 2, 'a'), (2, 1, 2, 'b'), (3, 1, 2, 'c')]

        """
        if self.count_edges() == 0:
            raise NoEdgesError("The graph contains no edges and existing edges are required")
        edges = list(self._require_edge_selection())
        pairs = self.edges_df.filter(pl.col("id").is_in(edges)).select("from", "to").rows()
        return self._append_edges(pairs, rel, {})

    @graph_operation()
    def add_reverse_edges_ws(self, rel=None):
        """Add a reversed copy (``to -> from``) of every selected edge.

        Same contract as ``add_forward_edges_ws``.
        """
        if self.count_edges() == 0:
            raise NoEdgesError("The graph contains no edges and existing edges are required")
        edges = list(self._require_edge_selection())
        pairs = self.edges_df.filter(pl.col("id").is_in(edges)).select("to", "from").rows()
        return self._append_edges(pairs, rel, {})

    # Node positions

    @graph_operation()
    def nudge_node_positions_ws(self, dx, dy):
        """Move the selected nodes by ``(dx, dy)``.

        Selected nodes missing either ``x`` or ``y`` are skipped. The
        selection is unchanged.

        Parameters
        ----------
        dx : float
            Shift along x; positive moves right.
        dy : float
            Shift along y; positive moves up.

        Returns
        -------
        Graph

        Raises
        ------
        MissingAttributeError
            If the node table has no ``x`` or no ``y`` column, or either
            column is not numeric.
        NoActiveSelectionError
            If there is no node selection.
        NoMovableElementsError
            If none of the selected nodes has both ``x`` and ``y``.

        """
        ndf = self.nodes_df
        if any(c not in ndf.columns for c in POSITION_COLUMNS):
            raise MissingAttributeError("There are no `x` and `y` attribute values to modify")
        for c in POSITION_COLUMNS:
            if ndf.schema[c] != pl.Null and not ndf.schema[c].is_numeric():
                raise MissingAttributeError(f"The `{c}` attribute holds no numeric positions")
        nodes = list(self._require_node_selection())

        def pos(c):
            return pl.col(c).cast(pl.Float64).fill_nan(None)

        movable = pl.col("id").is_in(nodes) & pos("x").is_not_null() & pos("y").is_not_null()
        if ndf.filter(movable).height == 0:
            raise NoMovableElementsError(
                "None of the selected nodes has `x` and `y` values to move"
            )
        ndf = ndf.with_columns(
            pl.when(movable).then(pos("x") + float(dx)).otherwise(pl.col("x").cast(pl.Float64)).alias("x"),
            pl.when(movable).then(pos("y") + float(dy)).otherwise(pl.col("y").cast(pl.Float64)).alias("y"),
        )
        return self._evolve(nodes_df=ndf)

    # Deleting selected elements

    @graph_operation()
    def delete_nodes_ws(self):
        """Remove the selected nodes (edges follow ``config.delete_policy``)."""
        return self._drop_nodes(self._require_node_selection())

    @graph_operation()
    def delete_edges_ws(self):
        """Remove the selected edges."""
        return self._drop_edges(self._require_edge_selection())

    # Attributes on selected elements

    @graph_operation()
    def set_node_attrs_ws(self, attr: str, value):
        """Set ``attr`` to ``value`` on every selected node."""
        return self.set_node_attrs(attr, value, nodes=self._require_node_selection())

    @graph_operation()
    def set_edge_attrs_ws(self, attr: str, value):
        """Set ``attr`` to ``value`` on every selected edge."""
        return self.set_edge_attrs(attr, value, edges=self._require_edge_selection())

    # Joins

    @graph_operation()
    def join_node_attrs(self, df, by_graph: str = "id", by_df: str = "id"):
        """Merge a table of values onto the node records.

        Parameters
        ----------
        df : polars.DataFrame or mapping of columns
            Typically the result of an algorithm backend, e.g.
            ``get_pagerank(graph)`` with columns ``id`` and ``pagerank``.
        by_graph : str, default "id"
            Node column to match on.
        by_df : str, default "id"
            Column of ``df`` to match on.

        Returns
        -------
        Graph

        Raises
        ------
        MissingAttributeError
            If either key column is missing.
        ValueError
            If ``df`` carries a reserved column such as ``id``.

        """
        return self._evolve(
            nodes_df=_join_table(self.nodes_df, df, by_graph, by_df, NODE_RESERVED)
        )

    @graph_operation()
    def join_edge_attrs(self, df, by_graph: str = "id", by_df: str = "id"):
        """Merge a table of values onto the edge records (see ``join_node_attrs``)."""
        return self._evolve(
            edges_df=_join_table(self.edges_df, df, by_graph, by_df, EDGE_RESERVED)
        )
