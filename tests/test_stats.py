"""
Dataset summary tests.

Run: pytest tests/ -v
"""

from explorer_core.dataset import from_records
from explorer_core.stats import mean_value, median_value, summarize


class TestSummaries:

    def test_mean_and_median(self):
        assert mean_value([1, 2, 3, 10]) == 4.0
        assert median_value([1, 2, 3, 10]) == 2.5
        assert median_value([5, 1, 3]) == 3.0

    def test_empty_values(self):
        assert mean_value([]) == 0.0
        assert median_value([]) == 0.0

    def test_summarize(self):
        df = from_records(
            [
                {"name": "a", "score": "4", "age": 20},
                {"name": "b", "score": 8, "age": None},
                {"name": "c", "score": 6, "age": 30},
            ]
        )
        stats = summarize(df)
        assert stats.total_rows == 3
        assert stats.columns == 3
        assert stats.numeric_columns == 1
        assert stats.categorical_columns == 2
        assert set(stats.summaries) == {"score"}
        score = stats.summaries["score"]
        assert (score.mean, score.median, score.min, score.max) == (6.0, 6.0, 4.0, 8.0)

    def test_summarize_empty(self):
        assert summarize(from_records([])) is None
