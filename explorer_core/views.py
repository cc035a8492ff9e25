from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional, Union

import pandas as pd

from explorer_core.chart_data import aggregate_all, eligible_charts, recommend_charts
from explorer_core.charts import build_chart_spec, build_trend_spec
from explorer_core.classify import classify_columns
from explorer_core.correlation import correlation_matrix
from explorer_core.dataset import to_records
from explorer_core.filters import FilterState, apply_filters, normalize_filter_state
from explorer_core.outliers import detect_outliers
from explorer_core.stats import summarize
from explorer_core.trend import compute_trend


def _as_filter_state(filters: Union[FilterState, dict, None]) -> FilterState:
    return filters if isinstance(filters, FilterState) else normalize_filter_state(filters)


def compute_working_view(dataset: pd.DataFrame, filters: Union[FilterState, dict, None] = None) -> Dict[str, Any]:
    filt = _as_filter_state(filters)
    types = classify_columns(dataset)
    view = apply_filters(dataset, filt)
    outliers = detect_outliers(dataset)
    return {
        "filters": asdict(filt),
        "columns": list(dataset.columns),
        "numeric_columns": types.numeric,
        "categorical_columns": types.categorical,
        "rows": to_records(view),
        "row_indices": [int(i) for i in view.index],
        "sort": asdict(filt.sort) if filt.sort is not None else None,
        "total_rows": int(len(dataset)),
        "visible_rows": int(len(view)),
        "outlier_rows": outliers.rows,
    }


def compute_insights(dataset: pd.DataFrame, y_key: Optional[str] = None, *, include_specs: bool = False) -> Dict[str, Any]:
    stats = summarize(dataset)
    trend = compute_trend(dataset, y_key)
    payload: Dict[str, Any] = {
        "stats": asdict(stats) if stats is not None else None,
        "outliers": asdict(detect_outliers(dataset)),
        "correlation": correlation_matrix(dataset),
        "trend": asdict(trend) if trend is not None else None,
    }
    if include_specs:
        payload["specs"] = {"trend": build_trend_spec(trend) if trend is not None else None}
    return payload


def compute_charts(
    dataset: pd.DataFrame,
    filters: Union[FilterState, dict, None],
    x_key: Optional[str],
    y_key: Optional[str],
    *,
    include_specs: bool = False,
) -> Dict[str, Any]:
    filt = _as_filter_state(filters)
    if not x_key or not y_key:
        return {"filters": asdict(filt), "x_key": x_key, "y_key": y_key, "eligible": [], "recommendations": [], "charts": {}, "specs": {}}

    view = apply_filters(dataset, filt)
    charts = aggregate_all(view, x_key, y_key)
    specs: Dict[str, Any] = {}
    if include_specs:
        specs = {kind: build_chart_spec(chart, x_key, y_key) for kind, chart in charts.items() if chart.supported}
    return {
        "filters": asdict(filt),
        "x_key": x_key,
        "y_key": y_key,
        "eligible": eligible_charts(view, x_key, y_key),
        "recommendations": recommend_charts(view, x_key, y_key),
        "charts": {kind: asdict(chart) for kind, chart in charts.items()},
        "specs": specs,
    }
