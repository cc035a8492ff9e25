from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd


logger = logging.getLogger(__name__)


def is_null(value: object) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def clean_cell(value: object) -> object:
    """Map pandas/numpy missing markers (NaN, NA, NaT) to None."""
    return None if is_null(value) else value


def _strip_text(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


def to_numbers(series: pd.Series) -> pd.Series:
    """Coerce a column to floats; NaN marks cells that are not finite numbers.

    Text is stripped and parsed as a decimal or scientific literal. Null,
    empty text, non-finite values and anything unparsable become NaN. Text
    with digit-group underscores ("1_000") stays text.
    """
    text = series.map(_strip_text).astype(object)
    grouped = text.map(lambda v: isinstance(v, str) and "_" in v).astype(bool)
    values = pd.to_numeric(text.where(~grouped), errors="coerce").astype(float)
    return values.where(np.isfinite(values))


def coerce_number(value: object) -> Optional[float]:
    """Single-cell form of `to_numbers`: a finite float, else None."""
    out = to_numbers(pd.Series([value], dtype=object)).iloc[0]
    return None if pd.isna(out) else float(out)


def cell_text(value: object) -> str:
    """Text representation used by search, filters, grouping and sorting."""
    if is_null(value):
        return ""
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    return str(value)


def from_records(rows: Iterable[Dict[str, Any]]) -> pd.DataFrame:
    """Build an immutable-by-convention snapshot from parsed rows.

    Columns come from the first row's keys in order; a row missing a key reads
    as None for it. Values are stored untouched in object columns.
    """
    rows = list(rows)
    if not rows:
        return pd.DataFrame()
    columns = list(rows[0].keys())
    data = [[clean_cell(row.get(col)) for col in columns] for row in rows]
    return pd.DataFrame(data, columns=columns, dtype=object)


def to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    if df.empty:
        return []
    cols = list(df.columns)
    return [{c: clean_cell(v) for c, v in zip(cols, row)} for row in df.itertuples(index=False, name=None)]


def column_keys(df: pd.DataFrame) -> List[str]:
    return list(df.columns)


def column_as_series(df: pd.DataFrame, col: str) -> pd.Series:
    if col not in df.columns:
        return pd.Series([None] * len(df), index=df.index, dtype=object)
    return df[col]


def numeric_values(df: pd.DataFrame, col: str) -> pd.Series:
    """Coerced float view of a column; NaN marks cells that fail coercion."""
    series = column_as_series(df, col)
    if series.empty:
        return pd.Series(dtype=float, index=series.index)
    return to_numbers(series)


def text_values(df: pd.DataFrame, col: str) -> pd.Series:
    series = column_as_series(df, col)
    if series.empty:
        return pd.Series(dtype=object, index=series.index)
    return series.map(cell_text).astype(object)


def with_column(df: pd.DataFrame, name: str, values: pd.Series) -> pd.DataFrame:
    """Return a copy with `name` set; an existing column keeps its position."""
    out = df.copy()
    out[name] = pd.Series(values, index=df.index).astype(object)
    return out


def edit_cell(df: pd.DataFrame, row_index: int, column: str, value: str) -> pd.DataFrame:
    """Return a copy with a single cell overwritten by the given text.

    The text is stored as-is; numeric checks re-coerce on read.
    """
    if column not in df.columns:
        raise KeyError(f"unknown column: {column!r}")
    if row_index < 0 or row_index >= len(df):
        raise IndexError(f"row index {row_index} out of range for {len(df)} rows")
    out = df.copy()
    out.iat[row_index, out.columns.get_loc(column)] = "" if value is None else str(value)
    logger.debug("edited cell (%s, %s)", row_index, column)
    return out
