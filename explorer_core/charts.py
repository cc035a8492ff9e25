from __future__ import annotations

from typing import Any, Dict, Optional

import altair as alt
import pandas as pd

from explorer_core.chart_data import ChartData
from explorer_core.trend import TrendModel

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def field_ref(name: str) -> str:
    """Escape characters Vega-Lite reads as nested field access."""
    return str(name).replace("\\", "\\\\").replace(".", "\\.").replace("[", "\\[").replace("]", "\\]")


def _bar(data: pd.DataFrame, chart: ChartData, y_key: str) -> alt.Chart:
    if chart.stacked:
        long_df = data.melt(id_vars="name", value_vars=chart.series, var_name="value_label", value_name="count").dropna()
        return (
            alt.Chart(long_df)
            .mark_bar()
            .encode(
                x=alt.X("name:N", title=None, sort=None),
                y=alt.Y("count:Q", title="Count", stack="zero"),
                color=alt.Color("value_label:N", title=y_key),
                tooltip=["name", "value_label", "count"],
            )
        )
    return (
        alt.Chart(data)
        .mark_bar()
        .encode(
            x=alt.X("name:N", title=None, sort=None),
            y=alt.Y(field=field_ref(y_key), type="quantitative", title=f"Mean {y_key}"),
            tooltip=["name", alt.Tooltip(field=field_ref(y_key), type="quantitative", format=",.2f")],
        )
    )


def _line(data: pd.DataFrame, x_key: str, y_key: str) -> alt.Chart:
    return (
        alt.Chart(data)
        .mark_line(point=True)
        .encode(
            x=alt.X(field=field_ref(x_key), type="quantitative", title=x_key),
            y=alt.Y(field=field_ref(y_key), type="quantitative", title=y_key),
            order=alt.Order("index:Q"),
        )
    )


def _pie(data: pd.DataFrame) -> alt.Chart:
    return (
        alt.Chart(data)
        .mark_arc()
        .encode(
            theta=alt.Theta("value:Q"),
            color=alt.Color("name:N", title=None),
            tooltip=["name", alt.Tooltip("value:Q", format=",.2f")],
        )
    )


def _scatter(data: pd.DataFrame, x_key: str, y_key: str) -> alt.Chart:
    def _type(col: str) -> str:
        return "quantitative" if pd.api.types.is_numeric_dtype(data[col]) else "nominal"

    return (
        alt.Chart(data)
        .mark_circle()
        .encode(
            x=alt.X(field=field_ref(x_key), type=_type(x_key), title=x_key),
            y=alt.Y(field=field_ref(y_key), type=_type(y_key), title=y_key),
        )
    )


def _box(data: pd.DataFrame, y_key: str) -> alt.LayerChart:
    base = alt.Chart(data).encode(x=alt.X("name:N", title=None, sort=None))
    whiskers = base.mark_rule().encode(y=alt.Y("min:Q", title=y_key), y2="max:Q")
    boxes = base.mark_bar(size=24, opacity=0.5).encode(y="q1:Q", y2="q3:Q")
    medians = base.mark_tick(color="black", size=24).encode(y="median:Q")
    layers = [whiskers, boxes, medians]

    points = data[["name", "outliers"]].explode("outliers").dropna()
    if not points.empty:
        points = points.assign(outliers=points["outliers"].astype(float))
        layers.append(
            alt.Chart(points).mark_point(color="#FF8042").encode(x=alt.X("name:N", sort=None), y="outliers:Q")
        )
    return alt.layer(*layers)


def _area(data: pd.DataFrame, x_key: str) -> alt.Chart:
    return (
        alt.Chart(data)
        .mark_area(opacity=0.3, line=True)
        .encode(
            x=alt.X(field=field_ref(x_key), type="quantitative", title=x_key),
            y=alt.Y("cumulative:Q", title="Cumulative"),
        )
    )


def build_chart_spec(chart: ChartData, x_key: str, y_key: str) -> Optional[Dict[str, Any]]:
    if not chart.supported or not chart.rows:
        return None
    data = pd.DataFrame(chart.rows)
    if chart.kind == "bar":
        built = _bar(data, chart, y_key)
    elif chart.kind == "line":
        built = _line(data, x_key, y_key)
    elif chart.kind == "pie":
        built = _pie(data)
    elif chart.kind == "scatter":
        built = _scatter(data, x_key, y_key)
    elif chart.kind == "box":
        built = _box(data, y_key)
    elif chart.kind == "area":
        built = _area(data, x_key)
    else:
        return None
    return to_vega_spec(built.properties(title=f"{chart.kind.capitalize()} Chart"))


def build_trend_spec(model: TrendModel) -> Dict[str, Any]:
    """Actual, trend and forecast lines on one date axis."""
    observed = pd.DataFrame([{"date": p.date, "actual": p.actual, "trend": p.trend} for p in model.points])
    long_df = observed.melt(id_vars="date", var_name="series", value_name="value")
    forecast = pd.DataFrame([{"date": p.date, "series": "forecast", "value": p.forecast} for p in model.forecast])
    long_df = pd.concat([long_df, forecast], ignore_index=True)

    chart = (
        alt.Chart(long_df)
        .mark_line(point=True)
        .encode(
            x=alt.X("date:T", title=model.date_column),
            y=alt.Y("value:Q", title=model.value_column),
            color=alt.Color("series:N", title=None),
            strokeDash=alt.condition(alt.datum.series == "forecast", alt.value([5, 5]), alt.value([0])),
            tooltip=["date:T", "series:N", alt.Tooltip("value:Q", format=",.2f")],
        )
        .properties(title=f"Trend Analysis ({model.date_column} vs {model.value_column})")
    )
    return to_vega_spec(chart)
