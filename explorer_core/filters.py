from __future__ import annotations

import locale
import logging
import math
from dataclasses import dataclass, field, replace
from functools import cmp_to_key
from typing import Dict, List, Literal, Optional

import pandas as pd

from explorer_core.dataset import cell_text, coerce_number, numeric_values, text_values


logger = logging.getLogger(__name__)

SortDirection = Literal["asc", "desc"]


@dataclass(frozen=True)
class SortConfig:
    column: str
    direction: SortDirection = "asc"


@dataclass(frozen=True)
class CrossFilter:
    column: str
    value: str


@dataclass(frozen=True)
class FilterState:
    search_term: str = ""
    column_filters: Dict[str, str] = field(default_factory=dict)
    cross_filter: Optional[CrossFilter] = None
    sort: Optional[SortConfig] = None


def _as_text_map(values: Optional[dict]) -> Dict[str, str]:
    if not values:
        return {}
    out: Dict[str, str] = {}
    for k, v in values.items():
        if v is None:
            continue
        out[str(k)] = str(v)
    return out


def _as_cross_filter(raw: object) -> Optional[CrossFilter]:
    if not raw:
        return None
    if isinstance(raw, dict):
        column, value = raw.get("column"), raw.get("value")
    else:
        try:
            column, value = raw  # type: ignore[misc]
        except (TypeError, ValueError):
            return None
    if column is None or value is None:
        return None
    return CrossFilter(column=str(column), value=cell_text(value))


def _as_sort(raw: object) -> Optional[SortConfig]:
    if not raw or not isinstance(raw, dict):
        return None
    column = raw.get("column")
    if column is None or column == "":
        return None
    direction = str(raw.get("direction") or "asc").lower()
    if direction not in ("asc", "desc"):
        direction = "asc"
    return SortConfig(column=str(column), direction=direction)  # type: ignore[arg-type]


def normalize_filter_state(raw: Optional[dict]) -> FilterState:
    raw = raw or {}
    search_term = raw.get("search_term") or ""
    return FilterState(
        search_term=str(search_term),
        column_filters=_as_text_map(raw.get("column_filters")),
        cross_filter=_as_cross_filter(raw.get("cross_filter")),
        sort=_as_sort(raw.get("sort")),
    )


def toggle_sort(state: FilterState, column: str) -> FilterState:
    """Header-click behaviour: the active ascending column flips to descending, anything else sorts ascending."""
    if state.sort is not None and state.sort.column == column and state.sort.direction == "asc":
        return replace(state, sort=SortConfig(column=column, direction="desc"))
    return replace(state, sort=SortConfig(column=column, direction="asc"))


def _contains(texts: pd.Series, needle: str) -> pd.Series:
    return texts.str.lower().str.contains(needle.lower(), regex=False)


def _compare(num_a: float, num_b: float, text_a: str, text_b: str) -> int:
    if not (math.isnan(num_a) or math.isnan(num_b)):
        return (num_a > num_b) - (num_a < num_b)
    return locale.strcoll(text_a, text_b)


def compare_cells(a: object, b: object) -> int:
    """Numeric order when both cells are numbers, else lower-cased text order.

    Text goes through `locale.strcoll` under the process's collation locale,
    which is plain code-point order unless the host application calls
    `locale.setlocale`.
    """
    num_a, num_b = coerce_number(a), coerce_number(b)
    return _compare(
        float("nan") if num_a is None else num_a,
        float("nan") if num_b is None else num_b,
        cell_text(a).lower(),
        cell_text(b).lower(),
    )


def sort_rows(df: pd.DataFrame, sort: SortConfig) -> pd.DataFrame:
    if df.empty or sort.column not in df.columns:
        return df
    nums = numeric_values(df, sort.column).tolist()
    texts = text_values(df, sort.column).str.lower().tolist()
    sign = -1 if sort.direction == "desc" else 1

    def by_cell(i: int, j: int) -> int:
        return sign * _compare(nums[i], nums[j], texts[i], texts[j])

    order: List[int] = sorted(range(len(df)), key=cmp_to_key(by_cell))
    return df.iloc[order]


def apply_filters(df: pd.DataFrame, filters: FilterState) -> pd.DataFrame:
    """Search -> per-column filters -> cross-filter -> sort.

    The result keeps the snapshot's index labels so every row of the working
    view can be traced back to its original position.
    """
    view = df
    if not view.empty and filters.search_term:
        hits = pd.concat([_contains(text_values(view, col), filters.search_term) for col in view.columns], axis=1)
        view = view[hits.any(axis=1)]
        logger.debug("search %r kept %d rows", filters.search_term, len(view))

    for col, needle in filters.column_filters.items():
        if view.empty or not needle:
            continue
        view = view[_contains(text_values(view, col), needle)]
        logger.debug("filter %s~%r kept %d rows", col, needle, len(view))

    cross = filters.cross_filter
    if cross is not None and not view.empty:
        view = view[text_values(view, cross.column).str.lower() == cross.value.lower()]
        logger.debug("cross-filter %s=%r kept %d rows", cross.column, cross.value, len(view))

    if filters.sort is not None:
        view = sort_rows(view, filters.sort)

    return view.copy()
