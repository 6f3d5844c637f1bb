from abc import ABC, abstractmethod

import polars as pl


class MetricBackend(ABC):
    """Table-in/table-out contract for algorithms computed outside the core.

    ``compute`` receives the node and edge tables and returns a DataFrame
    with an ``id`` column and one column named after ``metric``.
    """

    metric: str

    @abstractmethod
    def compute(
        self, nodes: pl.DataFrame, edges: pl.DataFrame, directed: bool = True, params: dict | None = None
    ) -> pl.DataFrame:
        pass

    def _result(self, ids, values) -> pl.DataFrame:
        return pl.DataFrame(
            {"id": list(ids), self.metric: [float(v) for v in values]},
            schema={"id": pl.Int64, self.metric: pl.Float64},
        )
