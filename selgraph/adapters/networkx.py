try:
    import networkx as nx
except ModuleNotFoundError as e:
    raise ModuleNotFoundError(
        "Optional dependency 'networkx' is not installed. "
        "Install with: pip install selgraph[networkx]"
    ) from e

import polars as pl

from ._base import MetricBackend


def _tables_to_nx(nodes: pl.DataFrame, edges: pl.DataFrame, directed: bool = True):
    """
    Build a networkx multigraph from node/edge tables.

    Node keys are the integer node IDs; every other node column becomes a
    node attribute. Edge keys are the edge IDs, so parallel edges survive.
    """
    G = nx.MultiDiGraph() if directed else nx.MultiGraph()
    for row in nodes.iter_rows(named=True):
        nid = row.pop("id")
        G.add_node(nid, **{k: v for k, v in row.items() if v is not None})
    for row in edges.iter_rows(named=True):
        eid, u, v = row.pop("id"), row.pop("from"), row.pop("to")
        G.add_edge(u, v, key=eid, **{k: val for k, val in row.items() if val is not None})
    return G


def to_nx(graph, directed=None):
    """
    Export a Graph to a networkx ``MultiDiGraph`` (or ``MultiGraph``).

    Parameters
    ----------
    graph : Graph
    directed : bool, optional
        Defaults to ``graph.config.directed``.
    """
    if directed is None:
        directed = graph.config.directed
    return _tables_to_nx(graph.nodes_df, graph.edges_df, directed=directed)


class Closeness(MetricBackend):
    """Closeness centrality (networkx ``closeness_centrality``)."""

    metric = "closeness"

    def compute(self, nodes, edges, directed=True, params=None):
        G = _tables_to_nx(nodes, edges, directed=directed)
        scores = nx.closeness_centrality(G)
        ids = nodes.get_column("id").to_list()
        return self._result(ids, [scores[i] for i in ids])


class DegreeCentrality(MetricBackend):
    """Degree centrality (networkx ``degree_centrality``)."""

    metric = "degree"

    def compute(self, nodes, edges, directed=True, params=None):
        G = _tables_to_nx(nodes, edges, directed=directed)
        scores = nx.degree_centrality(G)
        ids = nodes.get_column("id").to_list()
        return self._result(ids, [scores[i] for i in ids])


def get_closeness(graph, directed=True) -> pl.DataFrame:
    return Closeness().compute(graph.nodes_df, graph.edges_df, directed)


def get_degree_centrality(graph, directed=True) -> pl.DataFrame:
    return DegreeCentrality().compute(graph.nodes_df, graph.edges_df, directed)
