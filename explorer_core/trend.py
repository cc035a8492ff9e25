from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

import pandas as pd

from explorer_core.classify import is_numeric
from explorer_core.dataset import cell_text, is_null, numeric_values


logger = logging.getLogger(__name__)

DATE_COLUMN_TOKEN = "date"
# Words pandas resolves against the wall clock.
RELATIVE_DATE_WORDS = re.compile(r"\b(now|today|tomorrow|yesterday)\b", re.IGNORECASE)
# A calendar part: ISO/numeric day, a month name, or a bare year.
CALENDAR_PART = re.compile(
    r"\d{4}[-/.]\d{1,2}|\d{1,2}[-/.]\d{1,2}[-/.]\d{2,4}|^\d{4}$"
    r"|\b(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\b",
    re.IGNORECASE,
)
MIN_TREND_POINTS = 2
FORECAST_STEPS = 5
# Fixed daily step, whatever the sampling interval of the data.
FORECAST_STEP_MS = 24 * 60 * 60 * 1000


@dataclass(frozen=True)
class TrendPoint:
    date: str
    actual: float
    trend: float


@dataclass(frozen=True)
class ForecastPoint:
    date: str
    forecast: float


@dataclass(frozen=True)
class TrendModel:
    date_column: str
    value_column: str
    slope: float
    intercept: float
    points: List[TrendPoint] = field(default_factory=list)
    forecast: List[ForecastPoint] = field(default_factory=list)


def parse_timestamp_ms(value: object) -> Optional[int]:
    """Milliseconds since the epoch (UTC) for a date-like cell, else None."""
    if is_null(value):
        return None
    if isinstance(value, pd.Timestamp):
        ts = value
    else:
        text = cell_text(value).strip()
        if not text or RELATIVE_DATE_WORDS.search(text) or not CALENDAR_PART.search(text):
            return None
        ts = pd.to_datetime(text, errors="coerce", utc=True)
    if pd.isna(ts):
        return None
    if ts.tzinfo is None:
        ts = ts.tz_localize("UTC")
    return int(ts.value // 1_000_000)


def iso_day(timestamp_ms: float) -> str:
    return pd.Timestamp(int(timestamp_ms), unit="ms", tz="UTC").strftime("%Y-%m-%d")


def detect_date_column(df: pd.DataFrame) -> Optional[str]:
    """First column named like a date whose every value parses as one."""
    if df.empty:
        return None
    for col in df.columns:
        if DATE_COLUMN_TOKEN not in str(col).lower():
            continue
        if all(parse_timestamp_ms(v) is not None for v in df[col]):
            return col
    return None


def compute_trend(df: pd.DataFrame, value_column: Optional[str]) -> Optional[TrendModel]:
    """Least-squares trend of `value_column` over the detected date column, plus a daily forecast."""
    if not value_column:
        return None
    date_column = detect_date_column(df)
    if date_column is None or not is_numeric(df, value_column):
        logger.debug("trend unavailable: date column=%r, value column=%r", date_column, value_column)
        return None

    series = pd.DataFrame(
        {
            "x": df[date_column].map(parse_timestamp_ms).astype(float),
            "y": numeric_values(df, value_column),
        }
    ).dropna()
    series = series.sort_values("x", kind="mergesort")
    if len(series) < MIN_TREND_POINTS:
        return None
    if series["x"].nunique() < MIN_TREND_POINTS:
        logger.debug("trend unavailable: all %d points share one timestamp", len(series))
        return None

    x = series["x"].to_numpy(dtype=float)
    y = series["y"].to_numpy(dtype=float)
    # Sums run on offsets from the first timestamp; raw epoch-ms squares lose the spread.
    origin = x[0]
    dx = x - origin
    n = len(dx)
    sum_x = float(dx.sum())
    sum_y = float(y.sum())
    sum_xy = float((dx * y).sum())
    sum_xx = float((dx * dx).sum())
    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)
    offset_intercept = (sum_y - slope * sum_x) / n
    intercept = offset_intercept - slope * origin

    def fitted(at: float) -> float:
        return float(slope * (at - origin) + offset_intercept)

    points = [TrendPoint(date=iso_day(xi), actual=float(yi), trend=fitted(xi)) for xi, yi in zip(x, y)]
    last = x[-1]
    forecast = []
    for step in range(1, FORECAST_STEPS + 1):
        at = last + step * FORECAST_STEP_MS
        forecast.append(ForecastPoint(date=iso_day(at), forecast=fitted(at)))

    return TrendModel(
        date_column=date_column,
        value_column=value_column,
        slope=float(slope),
        intercept=float(intercept),
        points=points,
        forecast=forecast,
    )
