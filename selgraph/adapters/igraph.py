try:
    import igraph as ig
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "Optional dependency 'python-igraph' is not installed. "
        "Install with: pip install selgraph[igraph]"
    ) from e

import numpy as np
import polars as pl

from ._base import MetricBackend


def _tables_to_igraph(nodes: pl.DataFrame, edges: pl.DataFrame, directed: bool = True) -> "ig.Graph":
    """
    Build an igraph.Graph from node/edge tables.

    igraph requires contiguous integer vertex indices; node IDs are kept in
    vertex attribute 'id' (and as strings in 'name'), edge IDs in edge
    attribute 'eid'. Parallel edges are kept.
    """
    ids = nodes.get_column("id").to_list()
    index = {nid: i for i, nid in enumerate(ids)}
    pairs = [(index[f], index[t]) for f, t in edges.select("from", "to").iter_rows()]

    igG = ig.Graph(n=len(ids), edges=pairs, directed=directed)
    igG.vs["id"] = ids
    igG.vs["name"] = [str(i) for i in ids]
    if pairs:
        igG.es["eid"] = edges.get_column("id").to_list()
        igG.es["rel"] = edges.get_column("rel").to_list()
    return igG


def to_igraph(graph, directed=None) -> "ig.Graph":
    """
    Export a Graph to igraph.Graph.

    Parameters
    ----------
    graph : Graph
    directed : bool, optional
        Defaults to ``graph.config.directed``.

    Returns
    -------
    igraph.Graph
        Vertex attribute 'id' holds the node ID; edge attribute 'eid' the
        edge ID. Only structure and ``rel`` are exported.
    """
    if directed is None:
        directed = graph.config.directed
    return _tables_to_igraph(graph.nodes_df, graph.edges_df, directed=directed)


class PageRank(MetricBackend):
    """PageRank scores; ``damping`` (default 0.85). Values rounded to 4 places."""

    metric = "pagerank"

    def compute(self, nodes, edges, directed=True, params=None):
        params = params or {}
        igG = _tables_to_igraph(nodes, edges, directed=directed)
        scores = igG.pagerank(directed=directed, damping=params.get("damping", 0.85))
        return self._result(igG.vs["id"], np.round(np.asarray(scores, dtype=float), 4))


class Betweenness(MetricBackend):
    """Vertex betweenness centrality."""

    metric = "betweenness"

    def compute(self, nodes, edges, directed=True, params=None):
        igG = _tables_to_igraph(nodes, edges, directed=directed)
        return self._result(igG.vs["id"], np.asarray(igG.betweenness(directed=directed), dtype=float))


def get_pagerank(graph, directed=True, damping=0.85) -> pl.DataFrame:
    """
    PageRank value for every node in the graph.

    Returns
    -------
    polars.DataFrame
        Columns ``id`` and ``pagerank``; merge back with
        ``graph.join_node_attrs(get_pagerank(graph))``.
    """
    return PageRank().compute(graph.nodes_df, graph.edges_df, directed, {"damping": damping})


def get_betweenness(graph, directed=True) -> pl.DataFrame:
    return Betweenness().compute(graph.nodes_df, graph.edges_df, directed)
