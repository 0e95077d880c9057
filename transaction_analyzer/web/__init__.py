"""JSON result builders for the web layer."""

from .json_writer import dumps, iter_json
from .result_builder import (
    OVERWRITTEN,
    prepare_flame_graph_results,
    prepare_overview_results,
    prepare_percentile_results,
    prepare_profile_results,
    prepare_query_results,
)

__all__ = [
    "OVERWRITTEN",
    "dumps",
    "iter_json",
    "prepare_flame_graph_results",
    "prepare_overview_results",
    "prepare_percentile_results",
    "prepare_profile_results",
    "prepare_query_results",
]
