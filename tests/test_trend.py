"""
Date detection and linear trend tests.

Run: pytest tests/ -v
"""

import pytest

from explorer_core.dataset import from_records
from explorer_core.trend import compute_trend, detect_date_column, iso_day, parse_timestamp_ms


def make_daily(values, start_day=1, date_key="Date"):
    return from_records(
        [{date_key: f"2024-01-{start_day + i:02d}", "sales": v, "region": "n"} for i, v in enumerate(values)]
    )


# ═══════════════════════════════════════════════════════════════
# 1. DATE HANDLING
# ═══════════════════════════════════════════════════════════════

class TestDates:

    def test_parse_iso_day(self):
        assert parse_timestamp_ms("1970-01-02") == 86_400_000

    def test_unparsable(self):
        assert parse_timestamp_ms("not a date") is None
        assert parse_timestamp_ms("") is None
        assert parse_timestamp_ms(None) is None

    def test_iso_day(self):
        assert iso_day(86_400_000) == "1970-01-02"

    def test_detects_first_matching_column(self):
        df = from_records([{"x": 1, "order_date": "2024-01-01", "ship_date": "2024-01-02"}])
        assert detect_date_column(df) == "order_date"

    def test_name_must_contain_date(self):
        df = from_records([{"when": "2024-01-01", "v": 1}])
        assert detect_date_column(df) is None

    @pytest.mark.parametrize("value", ["today", "now", "Tomorrow", "yesterday", "12:30"])
    def test_clock_relative_text_is_not_a_date(self, value):
        assert parse_timestamp_ms(value) is None

    def test_clock_relative_column_is_not_detected(self):
        df = from_records(
            [{"ship_date": "today", "v": 1}, {"ship_date": "now", "v": 2}, {"ship_date": "2024-01-01", "v": 3}]
        )
        assert detect_date_column(df) is None
        assert compute_trend(df, "v") is None

    @pytest.mark.parametrize("value", ["2024-01-05", "01/05/2024", "Jan 5, 2024", "2024"])
    def test_calendar_text_parses(self, value):
        assert parse_timestamp_ms(value) is not None

    def test_every_value_must_parse(self):
        df = from_records([{"Date": "2024-01-01"}, {"Date": "soon"}])
        assert detect_date_column(df) is None


# ═══════════════════════════════════════════════════════════════
# 2. TREND AND FORECAST
# ═══════════════════════════════════════════════════════════════

class TestTrend:

    def test_perfect_line(self):
        model = compute_trend(make_daily([10, 20, 30]), "sales")
        assert model.date_column == "Date"
        assert model.value_column == "sales"
        assert [p.date for p in model.points] == ["2024-01-01", "2024-01-02", "2024-01-03"]
        for point in model.points:
            assert point.trend == pytest.approx(point.actual, abs=1e-3)

    def test_forecast_five_days_ahead(self):
        model = compute_trend(make_daily([10, 20, 30]), "sales")
        assert [p.date for p in model.forecast] == [
            "2024-01-04",
            "2024-01-05",
            "2024-01-06",
            "2024-01-07",
            "2024-01-08",
        ]
        assert [p.forecast for p in model.forecast] == pytest.approx([40, 50, 60, 70, 80], abs=1e-3)

    def test_points_are_sorted_by_date(self):
        df = from_records(
            [
                {"Date": "2024-01-03", "sales": 30},
                {"Date": "2024-01-01", "sales": 10},
                {"Date": "2024-01-02", "sales": 20},
            ]
        )
        model = compute_trend(df, "sales")
        assert [p.actual for p in model.points] == [10.0, 20.0, 30.0]

    def test_forecast_step_is_daily_even_for_weekly_data(self):
        df = from_records([{"date": d, "v": v} for d, v in [("2024-01-01", 0), ("2024-01-08", 7)]])
        model = compute_trend(df, "v")
        assert model.forecast[0].date == "2024-01-09"
        assert model.forecast[0].forecast == pytest.approx(8, abs=1e-3)

    def test_flat_series(self):
        model = compute_trend(make_daily([5, 5, 5, 5]), "sales")
        assert model.slope == pytest.approx(0.0, abs=1e-12)
        assert all(p.forecast == pytest.approx(5, abs=1e-6) for p in model.forecast)

    def test_missing_value_column(self):
        assert compute_trend(make_daily([1, 2]), None) is None
        assert compute_trend(make_daily([1, 2]), "region") is None

    def test_no_date_column(self):
        df = from_records([{"when": "2024-01-01", "v": 1}, {"when": "2024-01-02", "v": 2}])
        assert compute_trend(df, "v") is None

    def test_too_few_points(self):
        assert compute_trend(make_daily([1]), "sales") is None

    @pytest.mark.parametrize("n", [2, 3, 6, 7, 25])
    def test_single_timestamp_has_no_trend(self, n):
        df = from_records([{"date": "2024-03-17", "v": i * 7.3} for i in range(n)])
        assert compute_trend(df, "v") is None

    def test_same_input_same_model(self):
        df = make_daily([3, 9, 4, 12])
        assert compute_trend(df, "sales") == compute_trend(df, "sales")
