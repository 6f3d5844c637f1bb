"""Polars-backed record tables for nodes and edges.

Both tables are plain ``polars.DataFrame`` objects with a fixed set of key
columns followed by open-ended attribute columns. Helpers here never mutate
a frame in place; they return the updated frame.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

import numpy as np
import polars as pl

NODE_SCHEMA = {"id": pl.Int64, "type": pl.Utf8, "label": pl.Utf8}
EDGE_SCHEMA = {"id": pl.Int64, "from": pl.Int64, "to": pl.Int64, "rel": pl.Utf8}

NODE_RESERVED = frozenset({"id"})
EDGE_RESERVED = frozenset({"id", "from", "to"})
POSITION_COLUMNS = ("x", "y")


def empty_node_table() -> pl.DataFrame:
    return pl.DataFrame(schema=NODE_SCHEMA)


def empty_edge_table() -> pl.DataFrame:
    return pl.DataFrame(schema=EDGE_SCHEMA)


def normalize_value(v):
    """Unwrap NumPy scalars so Polars sees plain Python values."""
    if isinstance(v, np.generic):
        return v.item()
    return v


def dtype_for_value(v):
    """Infer the Polars dtype used to store a scalar attribute value.

    Parameters
    ----------
    v : Any

    Returns
    -------
    polars.datatypes.DataType
        One of ``pl.Null``, ``pl.Boolean``, ``pl.Int64``, ``pl.Float64`` or
        ``pl.Utf8``.

    Raises
    ------
    TypeError
        If ``v`` is a container; attributes are scalars only.

    """
    v = normalize_value(v)
    if v is None:
        return pl.Null
    if isinstance(v, bool):
        return pl.Boolean
    if isinstance(v, int):
        return pl.Int64
    if isinstance(v, float):
        return pl.Float64
    if isinstance(v, (list, tuple, set, dict)):
        raise TypeError(f"Attribute values must be scalars, got {type(v).__name__}")
    return pl.Utf8


def _coerce(v, dtype):
    v = normalize_value(v)
    if v is None:
        return None
    if dtype == pl.Utf8 and not isinstance(v, str):
        return str(v)
    if dtype == pl.Float64 and isinstance(v, int) and not isinstance(v, bool):
        return float(v)
    return v


def common_dtype(cur, new):
    """Return the dtype able to hold values of both ``cur`` and ``new``.

    Null yields to the other side, mixed integers and floats give
    ``Float64``, and anything else that differs falls back to ``Utf8``.
    """
    if cur == new or new == pl.Null:
        return cur
    if cur == pl.Null:
        return new
    if pl.Boolean not in (cur, new) and cur.is_numeric() and new.is_numeric():
        return pl.Float64 if cur.is_float() or new.is_float() else pl.Int64
    return pl.Utf8


def ensure_attr_columns(df: pl.DataFrame, attrs: Mapping) -> pl.DataFrame:
    """Create or widen attribute columns so ``attrs`` can be stored.

    Parameters
    ----------
    df : polars.DataFrame
        Node or edge table.
    attrs : Mapping
        Incoming attribute name/value pairs.

    Returns
    -------
    polars.DataFrame

    Notes
    -----
    - New columns are created with the inferred dtype, filled with nulls.
    - A ``Null`` column takes the dtype of its first non-null value.
    - Integer columns widen to ``Float64`` for float values.
    - Any other dtype conflict upcasts the column to ``Utf8``.

    """
    schema = df.schema
    for col, val in attrs.items():
        target = dtype_for_value(val)
        if col not in schema:
            df = df.with_columns(pl.lit(None).cast(target).alias(col))
            continue
        widened = common_dtype(schema[col], target)
        if widened != schema[col]:
            df = df.with_columns(pl.col(col).cast(widened))
    return df


def append_rows(df: pl.DataFrame, rows: list[dict]) -> pl.DataFrame:
    """Append ``rows`` to ``df``, adding attribute columns as needed."""
    if not rows:
        return df
    for row in rows:
        df = ensure_attr_columns(df, row)
    columns = [
        pl.Series(name, [_coerce(row.get(name), dtype) for row in rows], dtype=dtype)
        for name, dtype in df.schema.items()
    ]
    return pl.concat([df, pl.DataFrame(columns)], how="vertical")


def set_values(df: pl.DataFrame, attr: str, value, ids: Iterable[int] | None = None) -> pl.DataFrame:
    """Set one scalar attribute on the rows whose ``id`` is in ``ids``.

    All rows are updated when ``ids`` is None.
    """
    df = ensure_attr_columns(df, {attr: value})
    dtype = df.schema[attr]
    mask = pl.lit(True) if ids is None else pl.col("id").is_in(list(ids))
    return df.with_columns(
        pl.when(mask)
        .then(pl.lit(_coerce(value, dtype), dtype=dtype))
        .otherwise(pl.col(attr))
        .alias(attr)
    )


def id_list(df: pl.DataFrame) -> list[int]:
    return df.get_column("id").to_list()


def row_attrs(df: pl.DataFrame, row_id: int) -> dict | None:
    """Return the row with ``id == row_id`` as a dict, or None."""
    rows = df.filter(pl.col("id") == row_id).to_dicts()
    return rows[0] if rows else None


def missing_columns(df: pl.DataFrame, schema: Mapping) -> list[str]:
    return [c for c in schema if c not in df.columns]
