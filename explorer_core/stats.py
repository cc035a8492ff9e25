from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

import pandas as pd

from explorer_core.classify import classify_columns
from explorer_core.dataset import numeric_values


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnSummary:
    mean: float
    median: float
    min: Optional[float]
    max: Optional[float]


@dataclass(frozen=True)
class DatasetStats:
    total_rows: int
    columns: int
    numeric_columns: int
    categorical_columns: int
    summaries: Dict[str, ColumnSummary] = field(default_factory=dict)


def _valid(values: Iterable[float]) -> pd.Series:
    return pd.Series(list(values), dtype=float).dropna()


def mean_value(values: Iterable[float]) -> float:
    """Arithmetic mean of the valid values, 0 when there are none."""
    valid = _valid(values)
    return float(valid.mean()) if not valid.empty else 0.0


def median_value(values: Iterable[float]) -> float:
    """Middle value (mean of the two middles for even counts), 0 when empty."""
    valid = _valid(values)
    return float(valid.median()) if not valid.empty else 0.0


def summarize_column(df: pd.DataFrame, col: str) -> ColumnSummary:
    valid = numeric_values(df, col).dropna()
    return ColumnSummary(
        mean=mean_value(valid),
        median=median_value(valid),
        min=float(valid.min()) if not valid.empty else None,
        max=float(valid.max()) if not valid.empty else None,
    )


def summarize(df: pd.DataFrame) -> Optional[DatasetStats]:
    if df.empty:
        return None
    types = classify_columns(df)
    return DatasetStats(
        total_rows=int(len(df)),
        columns=int(len(df.columns)),
        numeric_columns=len(types.numeric),
        categorical_columns=len(types.categorical),
        summaries={col: summarize_column(df, col) for col in types.numeric},
    )
