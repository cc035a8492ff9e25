from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from explorer_core.classify import classify_columns
from explorer_core.dataset import numeric_values


logger = logging.getLogger(__name__)

IQR_MULTIPLIER = 1.5
QUARTILE_POSITIONS = (0.25, 0.75)
MEDIAN_POSITION = 0.5


@dataclass(frozen=True)
class ColumnOutliers:
    count: int = 0
    rows: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class OutlierReport:
    columns: Dict[str, ColumnOutliers] = field(default_factory=dict)
    rows: List[int] = field(default_factory=list)
    total_rows: int = 0


@dataclass(frozen=True)
class BoxStats:
    name: str
    min: float
    q1: float
    median: float
    q3: float
    max: float
    outliers: List[float] = field(default_factory=list)


def nearest_rank(sorted_values: Sequence[float], position: float) -> float:
    """Quartile by integer index into sorted values, no interpolation."""
    return sorted_values[int(math.floor(len(sorted_values) * position))]


def iqr_bounds(sorted_values: Sequence[float]) -> Tuple[float, float, float, float]:
    """Return (q1, q3, lower, upper) for non-empty ascending values."""
    q1 = nearest_rank(sorted_values, QUARTILE_POSITIONS[0])
    q3 = nearest_rank(sorted_values, QUARTILE_POSITIONS[1])
    iqr = q3 - q1
    return q1, q3, q1 - IQR_MULTIPLIER * iqr, q3 + IQR_MULTIPLIER * iqr


def box_stats(name: str, values: Sequence[float]) -> BoxStats:
    ordered = sorted(values)
    q1, q3, lower, upper = iqr_bounds(ordered)
    outliers = [v for v in ordered if v < lower or v > upper]
    inliers = [v for v in ordered if lower <= v <= upper]
    return BoxStats(
        name=name,
        min=inliers[0] if inliers else 0.0,
        q1=q1,
        median=nearest_rank(ordered, MEDIAN_POSITION),
        q3=q3,
        max=inliers[-1] if inliers else 0.0,
        outliers=outliers,
    )


def column_outliers(df: pd.DataFrame, col: str) -> ColumnOutliers:
    values = numeric_values(df, col).dropna()
    if values.empty:
        return ColumnOutliers()
    _, _, lower, upper = iqr_bounds(sorted(values.tolist()))
    flagged = values[(values < lower) | (values > upper)]
    return ColumnOutliers(count=int(len(flagged)), rows=[int(i) for i in flagged.index])


def detect_outliers(df: pd.DataFrame) -> OutlierReport:
    if df.empty:
        return OutlierReport()
    columns: Dict[str, ColumnOutliers] = {}
    flagged_rows = set()
    for col in classify_columns(df).numeric:
        result = column_outliers(df, col)
        columns[col] = result
        flagged_rows.update(result.rows)
    rows = sorted(flagged_rows)
    logger.debug("outliers flagged in %d rows", len(rows))
    return OutlierReport(columns=columns, rows=rows, total_rows=len(rows))
