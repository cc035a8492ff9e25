from __future__ import annotations

import logging
from typing import Literal

import pandas as pd

from explorer_core.dataset import coerce_number, column_as_series, numeric_values, with_column
from explorer_core.stats import mean_value, median_value


logger = logging.getLogger(__name__)

Operation = Literal["add", "sub", "mul", "div"]
FillMethod = Literal["mean", "median", "custom"]

OPERATION_ALIASES = {"+": "add", "-": "sub", "*": "mul", "/": "div"}
OPERATIONS = ("add", "sub", "mul", "div")
FILL_METHODS = ("mean", "median", "custom")


def normalize_operation(op: str) -> Operation:
    name = OPERATION_ALIASES.get(op, op)
    if name not in OPERATIONS:
        raise ValueError(f"unsupported operation: {op!r}")
    return name  # type: ignore[return-value]


def add_computed_column(df: pd.DataFrame, name: str, col_a: str, col_b: str, op: str) -> pd.DataFrame:
    """Append `name` = col_a <op> col_b to a copy of the dataset.

    Rows where an operand is not numeric, or where a division has a zero
    divisor, get 0. A same-named column is overwritten in place.
    """
    op = normalize_operation(op)
    left = numeric_values(df, col_a)
    right = numeric_values(df, col_b)

    if op == "add":
        result = left + right
    elif op == "sub":
        result = left - right
    elif op == "mul":
        result = left * right
    else:
        result = left / right.where(right != 0)
    result = result.fillna(0.0)

    if name in df.columns:
        logger.debug("computed column %r replaces an existing column", name)
    return with_column(df, name, result)


def fill_value_for(df: pd.DataFrame, col: str, method: FillMethod, custom_value: object = None) -> float:
    if method not in FILL_METHODS:
        raise ValueError(f"unsupported fill method: {method!r}")
    if method == "custom":
        value = coerce_number(custom_value)
        return value if value is not None else 0.0
    valid = numeric_values(df, col).dropna()
    return mean_value(valid) if method == "mean" else median_value(valid)


def impute_missing(df: pd.DataFrame, col: str, method: FillMethod, custom_value: object = None) -> pd.DataFrame:
    """Replace every missing cell of `col` with one fill value.

    Missing means Null, empty text or text that fails numeric coercion. Valid
    cells and other columns are left untouched.
    """
    fill = fill_value_for(df, col, method, custom_value)
    valid_mask = numeric_values(df, col).notna()
    current = column_as_series(df, col)
    logger.debug("imputing %d missing cells in %r with %s=%s", int((~valid_mask).sum()), col, method, fill)
    return with_column(df, col, current.where(valid_mask, fill))
