"""Action log and the operation protocol shared by every mutation."""

from __future__ import annotations

import logging
import time
from contextvars import ContextVar
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from functools import wraps
from pathlib import Path

import polars as pl

from ..io.snapshot import save_snapshot

logger = logging.getLogger(__name__)

LOG_SCHEMA = {
    "version_id": pl.Int64,
    "function_used": pl.Utf8,
    "time_modified": pl.Utf8,
    "duration": pl.Float64,
    "nodes": pl.Int64,
    "edges": pl.Int64,
    "d_n": pl.Int64,
    "d_e": pl.Int64,
}

_LOG_WRITERS = {
    ".parquet": pl.DataFrame.write_parquet,
    ".ndjson": pl.DataFrame.write_ndjson,
    ".jsonl": pl.DataFrame.write_ndjson,
    ".json": pl.DataFrame.write_json,
    ".csv": pl.DataFrame.write_csv,
}

# >0 while a logged operation is running; nested operations skip the protocol
_operation_depth: ContextVar[int] = ContextVar("selgraph_operation_depth", default=0)


def _utcnow_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="microseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class LogEntry:
    """One row of the action log."""

    version_id: int
    function_used: str
    time_modified: str
    duration: float
    nodes: int
    edges: int
    d_n: int = 0
    d_e: int = 0


@dataclass(frozen=True)
class GraphChanged:
    """Event dispatched once after each logged operation."""

    operation: str
    version_id: int
    d_n: int
    d_e: int


def graph_operation(name=None):
    """Wrap a ``Graph`` method returning a new graph in the mutation protocol.

    Validating -> Mutating -> Logging -> Triggering -> Persisting.

    Parameters
    ----------
    name : str, optional
        Value recorded in ``function_used``; defaults to the method name.

    Notes
    -----
    Calls made while another logged operation is running (for example a bulk
    operation reusing a primitive) run the body only: no validation, log
    entry, trigger or backup. The outer call records one entry whose deltas
    cover all of the inner edits.

    """

    def deco(fn):
        op = name or fn.__name__

        @wraps(fn)
        def wrapper(self, *args, **kwargs):
            if _operation_depth.get():
                return fn(self, *args, **kwargs)

            self.validate()
            started = _utcnow_iso()
            t0 = time.perf_counter()
            nodes_before, edges_before = self.count_nodes(), self.count_edges()

            token = _operation_depth.set(_operation_depth.get() + 1)
            try:
                graph = fn(self, *args, **kwargs)
            finally:
                _operation_depth.reset(token)

            d_n = graph.count_nodes() - nodes_before
            d_e = graph.count_edges() - edges_before
            graph = graph._append_log(
                op,
                time_modified=started,
                duration=time.perf_counter() - t0,
                d_n=d_n,
                d_e=d_e,
            )
            logger.debug("%s: d_n=%d d_e=%d (version %d)", op, d_n, d_e, graph.version_id)

            graph = graph._dispatch(GraphChanged(op, graph.version_id, d_n, d_e))

            if graph.config.write_backups:
                save_snapshot(graph)
            return graph

        return wrapper

    return deco


class HistoryMixin:
    """Read access to the append-only action log of a graph."""

    _log: tuple

    @property
    def version_id(self) -> int:
        """Version of the most recent log entry (0 for a fresh graph)."""
        return len(self._log)

    def _append_log(self, function_used, *, time_modified, duration, d_n=0, d_e=0):
        entry = LogEntry(
            version_id=len(self._log) + 1,
            function_used=function_used,
            time_modified=time_modified,
            duration=duration,
            nodes=self.count_nodes(),
            edges=self.count_edges(),
            d_n=d_n,
            d_e=d_e,
        )
        return self._evolve(_log=self._log + (entry,))

    def get_graph_log(self) -> pl.DataFrame:
        """Return the action log as a Polars DataFrame.

        Returns
        -------
        polars.DataFrame
            Columns ``version_id``, ``function_used``, ``time_modified``,
            ``duration``, ``nodes``, ``edges``, ``d_n``, ``d_e``. The schema is
            the same for an empty log.

        """
        if not self._log:
            return pl.DataFrame(schema=LOG_SCHEMA)
        return pl.DataFrame([asdict(e) for e in self._log], schema=LOG_SCHEMA)

    def history(self, as_df: bool = False):
        """Return the append-only action log.

        Parameters
        ----------
        as_df : bool, default False
            If True, return a Polars DF [DataFrame]; otherwise a list of dicts.

        """
        return self.get_graph_log() if as_df else [asdict(e) for e in self._log]

    def export_history(self, path) -> int:
        """Write the action log to ``path``, in the format named by its suffix.

        ``.parquet``, ``.ndjson`` / ``.jsonl``, ``.json`` (array of records)
        and ``.csv`` are understood; any other suffix gets ``.parquet``
        appended. Returns the number of entries written; an empty log writes
        no file and returns 0.
        """
        if not self._log:
            return 0
        target = Path(path)
        writer = _LOG_WRITERS.get(target.suffix.lower())
        if writer is None:
            writer = pl.DataFrame.write_parquet
            target = target.with_name(target.name + ".parquet")
        log = self.get_graph_log()
        writer(log, target)
        return log.height
