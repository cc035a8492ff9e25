from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

import pandas as pd

from explorer_core.dataset import numeric_values


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnTypes:
    numeric: List[str] = field(default_factory=list)
    categorical: List[str] = field(default_factory=list)


def is_numeric(df: pd.DataFrame, col: str) -> bool:
    """True iff the frame has rows and every cell of `col` coerces to a finite number."""
    if df.empty or col not in df.columns:
        return False
    return bool(numeric_values(df, col).notna().all())


def classify_columns(df: pd.DataFrame) -> ColumnTypes:
    numeric: List[str] = []
    categorical: List[str] = []
    for col in df.columns:
        (numeric if is_numeric(df, col) else categorical).append(col)
    logger.debug("numeric columns: %s", numeric)
    return ColumnTypes(numeric=numeric, categorical=categorical)
