"""
Query statistics merging.
"""

from typing import Dict, Iterable, List, Tuple

from ..core.errors import InvalidInputError
from ..core.types import QueryStats


class QueryMerger:
    """Sums query statistics by (query type, query text)."""

    @staticmethod
    def merge(query_lists: Iterable[Iterable[QueryStats]]) -> List[QueryStats]:
        """
        Merge per-sample query lists.

        Args:
            query_lists: One list of query statistics per sample

        Returns:
            Merged queries sorted by total time descending, then type and text
        """
        totals: Dict[Tuple[str, str], List[int]] = {}
        for queries in query_lists:
            for query in queries:
                if query.total_micros < 0 or query.execution_count < 0 or query.total_rows < 0:
                    raise InvalidInputError(f"Negative statistics for query {query.query_text!r}")
                key = (query.query_type, query.query_text)
                if key not in totals:
                    totals[key] = [0, 0, 0]
                totals[key][0] += query.total_micros
                totals[key][1] += query.execution_count
                totals[key][2] += query.total_rows

        merged = [
            QueryStats(query_type=query_type, query_text=query_text, total_micros=micros,
                       execution_count=executions, total_rows=rows)
            for (query_type, query_text), (micros, executions, rows) in totals.items()
        ]
        merged.sort(key=lambda q: (-q.total_micros, q.query_type, q.query_text))
        return merged
