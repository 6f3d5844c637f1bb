from importlib import import_module, util

__all__ = ["available_backends", "available_metrics", "compute_metric", "load_metric"]

# metric -> (backend, import name, submodule, class_name)
_METRICS = {
    "pagerank": ("igraph", "igraph", ".igraph", "PageRank"),  # pip pkg is python-igraph; import is igraph
    "betweenness": ("igraph", "igraph", ".igraph", "Betweenness"),
    "closeness": ("networkx", "networkx", ".networkx", "Closeness"),
    "degree": ("networkx", "networkx", ".networkx", "DegreeCentrality"),
}


def _is_installed(modname: str) -> bool:
    return util.find_spec(modname) is not None


def available_backends() -> dict:
    return {backend: _is_installed(mod) for backend, mod, _, _ in _METRICS.values()}


def available_metrics() -> dict:
    """Map every known metric to whether its backend library is importable."""
    return {name: _is_installed(mod) for name, (_, mod, _, _) in _METRICS.items()}


def load_metric(name: str, *args, **kwargs):
    """Instantiate the ``MetricBackend`` computing metric ``name``."""
    if name not in _METRICS:
        raise ValueError(f"Unknown metric '{name}'; choose from {sorted(_METRICS)}")
    backend, modname, submod, cls = _METRICS[name]
    if not _is_installed(modname):
        raise ModuleNotFoundError(
            f"Optional backend '{backend}' is not installed. "
            f"Install with `pip install selgraph[{backend}]`."
        )
    mod = import_module(__name__ + submod)
    return getattr(mod, cls)(*args, **kwargs)


def compute_metric(graph, metric: str, directed=None, **params):
    """Compute ``metric`` over the graph's node and edge tables.

    Parameters
    ----------
    graph : Graph
    metric : str
        One of ``available_metrics()``.
    directed : bool, optional
        Defaults to ``graph.config.directed``.
    **params
        Backend parameters (e.g. ``damping`` for ``pagerank``).

    Returns
    -------
    polars.DataFrame
        Columns ``id`` and ``metric``; merge back with ``graph.join_node_attrs``.
    """
    if directed is None:
        directed = graph.config.directed
    return load_metric(metric).compute(graph.nodes_df, graph.edges_df, directed, params)
