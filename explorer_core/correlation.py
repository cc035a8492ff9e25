from __future__ import annotations

import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional, Sequence

import numpy as np
import pandas as pd

from explorer_core.classify import classify_columns
from explorer_core.dataset import numeric_values


logger = logging.getLogger(__name__)

CORRELATION_DECIMALS = 2

CorrelationMatrix = Dict[str, Dict[str, float]]


def round_half_up(value: float, ndigits: int = CORRELATION_DECIMALS) -> float:
    """Ties round away from zero, judged on the exact binary value of `value`."""
    q = Decimal(10) ** -ndigits
    return float(Decimal(value).quantize(q, rounding=ROUND_HALF_UP))


def pearson(values_a: Sequence[float], values_b: Sequence[float]) -> float:
    """Pearson r over two sequences paired by position.

    Returns 0 when lengths differ, either sequence is empty, or either has no
    variance.
    """
    a = np.asarray(values_a, dtype=float)
    b = np.asarray(values_b, dtype=float)
    if len(a) != len(b) or len(a) == 0:
        return 0.0
    da = a - a.mean()
    db = b - b.mean()
    ss_a = float((da * da).sum())
    ss_b = float((db * db).sum())
    if ss_a == 0 or ss_b == 0:
        return 0.0
    return float((da * db).sum()) / math.sqrt(ss_a * ss_b)


def correlation_matrix(df: pd.DataFrame) -> Optional[CorrelationMatrix]:
    """Pairwise Pearson coefficients across numeric columns, rounded to 2 places.

    Each column's valid values are extracted independently and paired by
    position, so the pairing is only row-aligned when both columns are valid
    on the same rows.
    """
    numeric = classify_columns(df).numeric
    if len(numeric) < 2:
        logger.debug("correlation unavailable: %d numeric columns", len(numeric))
        return None

    valid = {col: numeric_values(df, col).dropna().tolist() for col in numeric}
    matrix: CorrelationMatrix = {}
    for col_a in numeric:
        matrix[col_a] = {}
        for col_b in numeric:
            if col_a == col_b:
                matrix[col_a][col_b] = 1.0
                continue
            matrix[col_a][col_b] = round_half_up(pearson(valid[col_a], valid[col_b]))
    return matrix
