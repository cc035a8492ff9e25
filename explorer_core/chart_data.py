from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional

import numpy as np
import pandas as pd

from explorer_core.classify import is_numeric
from explorer_core.dataset import numeric_values, text_values, to_records
from explorer_core.outliers import box_stats


logger = logging.getLogger(__name__)

ChartKind = Literal["bar", "line", "pie", "scatter", "box", "area"]
CHART_KINDS = ("bar", "line", "pie", "scatter", "box", "area")
LINE_MIN_DISTINCT_X = 2

UNSUPPORTED_REASONS = {
    "line": "Line chart requires a numeric x-axis with more than 2 unique values and a numeric y-axis.",
    "pie": "Pie chart requires a numeric y-axis.",
    "scatter": "Scatter chart requires at least one numeric axis.",
    "box": "Box plot requires a numeric y-axis.",
    "area": "Area chart requires numeric x and y axes.",
}
NO_DATA_REASON = "No data available for the selected columns."


@dataclass(frozen=True)
class ChartData:
    kind: ChartKind
    supported: bool
    rows: List[Dict[str, Any]] = field(default_factory=list)
    # numeric fields a renderer should plot, e.g. the stack keys of a stacked bar
    series: List[str] = field(default_factory=list)
    stacked: bool = False
    reason: Optional[str] = None


def _unsupported(kind: ChartKind, reason: str) -> ChartData:
    return ChartData(kind=kind, supported=False, reason=reason)


# ---------------- Eligibility ----------------
def is_line_supported(view: pd.DataFrame, x_key: str, y_key: str) -> bool:
    if not (is_numeric(view, x_key) and is_numeric(view, y_key)):
        return False
    return int(numeric_values(view, x_key).nunique()) > LINE_MIN_DISTINCT_X


def is_pie_supported(view: pd.DataFrame, x_key: str, y_key: str) -> bool:
    return is_numeric(view, y_key)


def is_scatter_supported(view: pd.DataFrame, x_key: str, y_key: str) -> bool:
    return is_numeric(view, x_key) or is_numeric(view, y_key)


def is_box_supported(view: pd.DataFrame, x_key: str, y_key: str) -> bool:
    return is_numeric(view, y_key)


def is_area_supported(view: pd.DataFrame, x_key: str, y_key: str) -> bool:
    return is_numeric(view, x_key) and is_numeric(view, y_key)


ELIGIBILITY: Dict[str, Callable[[pd.DataFrame, str, str], bool]] = {
    "bar": lambda view, x_key, y_key: True,
    "line": is_line_supported,
    "pie": is_pie_supported,
    "scatter": is_scatter_supported,
    "box": is_box_supported,
    "area": is_area_supported,
}


def eligible_charts(view: pd.DataFrame, x_key: str, y_key: str) -> List[str]:
    return [kind for kind in CHART_KINDS if ELIGIBILITY[kind](view, x_key, y_key)]


# ---------------- Aggregators ----------------
def aggregate_bar(view: pd.DataFrame, x_key: str, y_key: str) -> ChartData:
    """Group means for a numeric y, per-value counts (stacked shape) otherwise."""
    if view.empty:
        return _unsupported("bar", NO_DATA_REASON)
    names = text_values(view, x_key)

    if is_numeric(view, y_key):
        means = numeric_values(view, y_key).groupby(names, sort=False).mean()
        rows = [{"name": name, y_key: float(mean)} for name, mean in means.items()]
        return ChartData(kind="bar", supported=True, rows=rows, series=[y_key])

    labels = text_values(view, y_key)
    counts = labels.groupby([names, labels], sort=False).size()
    grouped: Dict[str, Dict[str, Any]] = {}
    series: List[str] = []
    for (name, label), count in counts.items():
        grouped.setdefault(name, {"name": name})[label] = int(count)
        if label not in series:
            series.append(label)
    if not grouped:
        return _unsupported("bar", NO_DATA_REASON)
    return ChartData(kind="bar", supported=True, rows=list(grouped.values()), series=series, stacked=True)


def aggregate_line(view: pd.DataFrame, x_key: str, y_key: str) -> ChartData:
    if not is_line_supported(view, x_key, y_key):
        return _unsupported("line", UNSUPPORTED_REASONS["line"])
    ys = numeric_values(view, y_key).tolist()
    rows = [{**record, y_key: y, "index": i} for i, (record, y) in enumerate(zip(to_records(view), ys))]
    return ChartData(kind="line", supported=True, rows=rows, series=[y_key])


def aggregate_pie(view: pd.DataFrame, x_key: str, y_key: str) -> ChartData:
    if not is_pie_supported(view, x_key, y_key):
        return _unsupported("pie", UNSUPPORTED_REASONS["pie"])
    frame = pd.DataFrame({"name": text_values(view, x_key), "value": numeric_values(view, y_key)}).dropna()
    frame = frame[frame["name"] != ""]
    if frame.empty:
        return _unsupported("pie", NO_DATA_REASON)
    sums = frame.groupby("name", sort=False)["value"].sum()
    rows = [{"name": name, "value": float(total)} for name, total in sums.items()]
    return ChartData(kind="pie", supported=True, rows=rows, series=["value"])


def aggregate_scatter(view: pd.DataFrame, x_key: str, y_key: str) -> ChartData:
    x_numeric, y_numeric = is_numeric(view, x_key), is_numeric(view, y_key)
    if not (x_numeric or y_numeric):
        return _unsupported("scatter", UNSUPPORTED_REASONS["scatter"])
    xs = numeric_values(view, x_key).tolist() if x_numeric else None
    ys = numeric_values(view, y_key).tolist() if y_numeric else None
    rows = []
    for i, record in enumerate(to_records(view)):
        if xs is not None:
            record[x_key] = xs[i]
        if ys is not None:
            record[y_key] = ys[i]
        record["index"] = i
        rows.append(record)
    return ChartData(kind="scatter", supported=True, rows=rows, series=[y_key])


def aggregate_box(view: pd.DataFrame, x_key: str, y_key: str) -> ChartData:
    if not is_box_supported(view, x_key, y_key):
        return _unsupported("box", UNSUPPORTED_REASONS["box"])
    frame = pd.DataFrame({"name": text_values(view, x_key), "value": numeric_values(view, y_key)}).dropna()
    rows = [asdict(box_stats(name, group.tolist())) for name, group in frame.groupby("name", sort=False)["value"]]
    if not rows:
        return _unsupported("box", NO_DATA_REASON)
    return ChartData(kind="box", supported=True, rows=rows)


def aggregate_area(view: pd.DataFrame, x_key: str, y_key: str) -> ChartData:
    """Rows ordered by numeric x with a running total of y."""
    if not is_area_supported(view, x_key, y_key):
        return _unsupported("area", UNSUPPORTED_REASONS["area"])
    xs = numeric_values(view, x_key).to_numpy()
    ys = numeric_values(view, y_key).fillna(0.0).to_numpy()
    order = np.argsort(xs, kind="stable")
    cumulative = np.cumsum(ys[order])
    records = to_records(view)
    rows = []
    for i, (pos, total) in enumerate(zip(order, cumulative)):
        rows.append({**records[pos], x_key: float(xs[pos]), "cumulative": float(total), "index": i})
    return ChartData(kind="area", supported=True, rows=rows, series=["cumulative"])


AGGREGATORS: Dict[str, Callable[[pd.DataFrame, str, str], ChartData]] = {
    "bar": aggregate_bar,
    "line": aggregate_line,
    "pie": aggregate_pie,
    "scatter": aggregate_scatter,
    "box": aggregate_box,
    "area": aggregate_area,
}


def aggregate_chart(kind: str, view: pd.DataFrame, x_key: str, y_key: str) -> ChartData:
    if kind not in AGGREGATORS:
        raise ValueError(f"unknown chart kind: {kind!r}")
    return AGGREGATORS[kind](view, x_key, y_key)


def aggregate_all(view: pd.DataFrame, x_key: str, y_key: str) -> Dict[str, ChartData]:
    charts = {kind: aggregate_chart(kind, view, x_key, y_key) for kind in CHART_KINDS}
    logger.debug("charts for (%s, %s): %s", x_key, y_key, [k for k, c in charts.items() if c.supported])
    return charts


def recommend_charts(view: pd.DataFrame, x_key: Optional[str], y_key: Optional[str]) -> List[Dict[str, str]]:
    """Suggested chart kinds for the current selection, with a one-line rationale each."""
    if not x_key or not y_key or view.empty:
        return []
    x_numeric, y_numeric = is_numeric(view, x_key), is_numeric(view, y_key)
    categorical_x = not x_numeric and y_numeric

    out: List[Dict[str, str]] = []
    if categorical_x:
        out.append({"kind": "bar", "label": "Bar Chart (Compare averages across categories)"})
    if is_line_supported(view, x_key, y_key):
        out.append({"kind": "line", "label": "Line Chart (Show trends over a continuous x-axis)"})
    if categorical_x:
        out.append({"kind": "pie", "label": "Pie Chart (Show proportions of a numeric value across categories)"})
    if is_scatter_supported(view, x_key, y_key):
        out.append({"kind": "scatter", "label": "Scatter Chart (Explore relationships between two variables)"})
    if categorical_x:
        out.append({"kind": "box", "label": "Box Plot (Visualize distribution, median, and outliers)"})
    if is_area_supported(view, x_key, y_key):
        out.append({"kind": "area", "label": "Area Chart (Show cumulative trends over a continuous x-axis)"})
    return out
