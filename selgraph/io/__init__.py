"""Graph persistence: directory snapshots (manifest + Parquet tables)."""

from .snapshot import read_graph, save_snapshot, write_graph

__all__ = ["read_graph", "save_snapshot", "write_graph"]
