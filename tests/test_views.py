"""
Payload builder tests for the working view, insights and charts.

Run: pytest tests/ -v
"""

from explorer_core.dataset import from_records
from explorer_core.filters import FilterState, SortConfig
from explorer_core.views import compute_charts, compute_insights, compute_working_view


def make_sales():
    return from_records(
        [
            {"date": "2024-01-01", "region": "north", "sales": 10, "units": 1},
            {"date": "2024-01-02", "region": "south", "sales": 20, "units": 2},
            {"date": "2024-01-03", "region": "north", "sales": 30, "units": 3},
            {"date": "2024-01-04", "region": "south", "sales": 40, "units": 4},
            {"date": "2024-01-05", "region": "north", "sales": 50, "units": 5},
            {"date": "2024-01-06", "region": "south", "sales": 60, "units": 600},
        ]
    )


# ═══════════════════════════════════════════════════════════════
# 1. WORKING VIEW
# ═══════════════════════════════════════════════════════════════

class TestWorkingView:

    def test_unfiltered(self):
        payload = compute_working_view(make_sales())
        assert payload["columns"] == ["date", "region", "sales", "units"]
        assert payload["numeric_columns"] == ["sales", "units"]
        assert payload["categorical_columns"] == ["date", "region"]
        assert payload["total_rows"] == 6
        assert payload["visible_rows"] == 6
        assert payload["outlier_rows"] == [5]
        assert payload["sort"] is None

    def test_filtered_and_sorted(self):
        filters = FilterState(cross_filter=None, column_filters={"region": "south"}, sort=SortConfig("sales", "desc"))
        payload = compute_working_view(make_sales(), filters)
        assert [r["sales"] for r in payload["rows"]] == [60, 40, 20]
        assert payload["row_indices"] == [5, 3, 1]
        assert payload["visible_rows"] == 3
        assert payload["total_rows"] == 6
        assert payload["sort"] == {"column": "sales", "direction": "desc"}

    def test_raw_filter_dict(self):
        payload = compute_working_view(make_sales(), {"search_term": "NORTH"})
        assert payload["visible_rows"] == 3

    def test_outliers_come_from_the_full_dataset(self):
        payload = compute_working_view(make_sales(), {"column_filters": {"region": "north"}})
        assert payload["outlier_rows"] == [5]


# ═══════════════════════════════════════════════════════════════
# 2. INSIGHTS
# ═══════════════════════════════════════════════════════════════

class TestInsights:

    def test_sections(self):
        payload = compute_insights(make_sales(), "sales")
        assert payload["stats"]["total_rows"] == 6
        assert payload["stats"]["summaries"]["sales"]["mean"] == 35.0
        assert payload["outliers"]["rows"] == [5]
        assert payload["outliers"]["columns"]["units"]["count"] == 1
        assert payload["correlation"]["sales"]["sales"] == 1.0
        assert payload["trend"]["date_column"] == "date"
        assert len(payload["trend"]["forecast"]) == 5
        assert "specs" not in payload

    def test_without_value_column(self):
        payload = compute_insights(make_sales())
        assert payload["trend"] is None

    def test_trend_spec(self):
        payload = compute_insights(make_sales(), "sales", include_specs=True)
        assert payload["specs"]["trend"]["mark"]

    def test_empty_dataset(self):
        payload = compute_insights(from_records([]), "sales")
        assert payload["stats"] is None
        assert payload["correlation"] is None
        assert payload["trend"] is None
        assert payload["outliers"]["rows"] == []


# ═══════════════════════════════════════════════════════════════
# 3. CHARTS
# ═══════════════════════════════════════════════════════════════

class TestCharts:

    def test_needs_both_axes(self):
        payload = compute_charts(make_sales(), None, "region", None)
        assert payload["charts"] == {}
        assert payload["eligible"] == []

    def test_charts_follow_the_working_view(self):
        payload = compute_charts(make_sales(), {"column_filters": {"region": "north"}}, "region", "sales")
        assert payload["eligible"] == ["bar", "pie", "scatter", "box"]
        assert payload["charts"]["bar"]["rows"] == [{"name": "north", "sales": 30.0}]
        assert payload["charts"]["line"]["supported"] is False
        assert payload["specs"] == {}

    def test_specs_for_supported_kinds(self):
        payload = compute_charts(make_sales(), None, "units", "sales", include_specs=True)
        assert set(payload["specs"]) == {"bar", "line", "pie", "scatter", "box", "area"}
        assert [r["kind"] for r in payload["recommendations"]] == ["line", "scatter", "area"]
