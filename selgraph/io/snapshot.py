from __future__ import annotations

import json
import logging
import warnings
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

import polars as pl

if TYPE_CHECKING:
    from ..core.graph import Graph

logger = logging.getLogger(__name__)

SNAPSHOT_FORMAT = "selgraph"
SNAPSHOT_VERSION = "1.0.0"


def write_graph(graph: Graph, path: str | Path, *, compression="zstd", overwrite=False) -> Path:
    """Write a graph snapshot to a directory.

    Parameters
    ----------
    graph : Graph
    path : str | Path
        Target directory (e.g., "my_graph.selgraph").
    compression : str, default "zstd"
        Parquet compression codec.
    overwrite : bool, default False
        Allow writing into an existing directory.

    Returns
    -------
    Path
        The snapshot directory.

    Raises
    ------
    FileExistsError
        If ``path`` exists and ``overwrite`` is False.

    Notes
    -----
    Creates a self-contained directory with:
    - ``manifest.json``: identity, config, ID counters, selection, action names
    - ``nodes.parquet`` / ``edges.parquet``: the record tables
    - ``log.parquet``: the action log

    Queued action functions and subscribers are code, not data; only the
    action names are recorded.

    """
    root = Path(path)
    if root.exists() and not overwrite:
        raise FileExistsError(f"{path} already exists. Set overwrite=True.")
    root.mkdir(parents=True, exist_ok=overwrite)

    sel = graph.selection
    manifest = {
        "format": SNAPSHOT_FORMAT,
        "version": SNAPSHOT_VERSION,
        "created": datetime.now(UTC).isoformat(),
        "graph_id": graph.graph_id,
        "graph_name": graph.graph_name,
        "graph_version": graph.version_id,
        "config": graph.config.to_dict(),
        "last_node_id": graph.last_node_id,
        "last_edge_id": graph.last_edge_id,
        "counts": {"nodes": graph.count_nodes(), "edges": graph.count_edges()},
        "selection": {
            "nodes": list(sel.nodes) if sel.nodes is not None else None,
            "edges": list(sel.edges) if sel.edges is not None else None,
        },
        "actions": graph.get_graph_actions().get_column("action_name").to_list(),
    }
    (root / "manifest.json").write_text(json.dumps(manifest, indent=2))

    graph.nodes_df.write_parquet(root / "nodes.parquet", compression=compression)
    graph.edges_df.write_parquet(root / "edges.parquet", compression=compression)
    graph.get_graph_log().write_parquet(root / "log.parquet", compression=compression)
    return root


def read_graph(path: str | Path) -> Graph:
    """Load a graph written by ``write_graph``.

    The graph keeps its original ``graph_id``, ID counters, selection and
    action log. The deferred action queue starts empty.
    """
    from ..core.config import GraphConfig
    from ..core.graph import Graph
    from ..core.history import LogEntry
    from ..core.selection import Selection

    root = Path(path)
    manifest = json.loads((root / "manifest.json").read_text())
    if manifest.get("format") != SNAPSHOT_FORMAT:
        raise ValueError(f"{path} is not a {SNAPSHOT_FORMAT} snapshot")

    graph = Graph(GraphConfig(**manifest["config"]), name=manifest.get("graph_name"))
    log = pl.read_parquet(root / "log.parquet")
    sel = manifest["selection"]
    return graph._evolve(
        graph_id=manifest["graph_id"],
        nodes_df=pl.read_parquet(root / "nodes.parquet"),
        edges_df=pl.read_parquet(root / "edges.parquet"),
        last_node_id=manifest["last_node_id"],
        last_edge_id=manifest["last_edge_id"],
        selection=Selection(nodes=sel["nodes"], edges=sel["edges"]),
        _log=tuple(LogEntry(**row) for row in log.iter_rows(named=True)),
    )


def snapshot_path(graph: Graph) -> Path:
    return graph.config.backup_dir / f"{graph.graph_id}_{graph.version_id:06d}"


def save_snapshot(graph: Graph) -> Path | None:
    """Write a backup of ``graph`` under ``config.backup_dir``.

    Failures do not propagate: a ``BackupWarning`` is emitted and None is
    returned, leaving the in-memory graph as the source of truth.
    """
    from ..core.errors import BackupWarning

    target = snapshot_path(graph)
    try:
        return write_graph(graph, target, overwrite=True)
    except (OSError, pl.exceptions.PolarsError) as exc:
        logger.warning("graph backup to %s failed: %s", target, exc)
        warnings.warn(f"Could not write graph backup to {target}: {exc}", BackupWarning, stacklevel=3)
        return None
