"""
Unit tests for transaction_analyzer.processors.query_merger module.
"""
import pytest
from transaction_analyzer.core.errors import InvalidInputError
from transaction_analyzer.core.types import QueryStats
from transaction_analyzer.processors.query_merger import QueryMerger


class TestQueryMerger:
    """Tests for summing query statistics."""

    def test_sums_by_type_and_text(self):
        merged = QueryMerger.merge([
            [QueryStats("SQL", "select 1", 100, 1, 1)],
            [QueryStats("SQL", "select 1", 50, 2, 2), QueryStats("CQL", "select 1", 10, 1, 0)],
        ])
        assert QueryStats("SQL", "select 1", 150, 3, 3) in merged
        assert QueryStats("CQL", "select 1", 10, 1, 0) in merged
        assert len(merged) == 2

    def test_sorted_by_total_time(self):
        merged = QueryMerger.merge([[
            QueryStats("SQL", "fast", 10, 1),
            QueryStats("SQL", "slow", 900, 1),
            QueryStats("SQL", "b", 50, 1),
            QueryStats("SQL", "a", 50, 1),
        ]])
        assert [q.query_text for q in merged] == ["slow", "a", "b", "fast"]

    def test_negative_statistics_rejected(self):
        with pytest.raises(InvalidInputError):
            QueryMerger.merge([[QueryStats("SQL", "select 1", -1, 1)]])

    def test_empty(self):
        assert QueryMerger.merge([]) == []
