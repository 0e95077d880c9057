"""
Pytest configuration and shared fixtures for transaction analyzer tests.
"""
import json
import pytest

from transaction_analyzer.core.histogram import DurationHistogram
from transaction_analyzer.core.types import (
    OverviewSample,
    PercentileSample,
    ProfileNode,
    ThreadStats,
    TimerNode,
)


def make_timer_tree(root_total, timers, root_name="http request", count=1):
    """
    Build a synthetic root holding one real root timer.

    Args:
        root_total: Total micros of the real root timer
        timers: List of (name, total_micros) or (name, total_micros, [children]) tuples
    """
    def build(entry):
        name, total = entry[0], entry[1]
        children = [build(child) for child in (entry[2] if len(entry) > 2 else [])]
        return TimerNode(name=name, total_micros=total, count=count, children=children)

    real_root = TimerNode(name=root_name, total_micros=root_total, count=count,
                          children=[build(entry) for entry in timers])
    return TimerNode(name=None, total_micros=root_total, count=count, children=[real_root])


@pytest.fixture
def timer_tree():
    """Factory for synthetic root timer trees."""
    return make_timer_tree


@pytest.fixture
def overview_samples():
    """Three contiguous one-minute samples with jdbc and http timers."""
    return [
        OverviewSample(
            capture_time=60000,
            transaction_count=2,
            total_micros=10000,
            synthetic_root_timer=make_timer_tree(10000, [("jdbc query", 6000), ("http client", 2000)]),
            thread_stats=ThreadStats(total_cpu_micros=500, total_blocked_micros=None,
                                     total_waited_micros=10, total_allocated_kbytes=64),
        ),
        OverviewSample(
            capture_time=120000,
            transaction_count=1,
            total_micros=4000,
            synthetic_root_timer=make_timer_tree(4000, [("jdbc query", 1000)]),
            thread_stats=ThreadStats(total_cpu_micros=300),
        ),
        OverviewSample(
            capture_time=180000,
            transaction_count=4,
            total_micros=20000,
            synthetic_root_timer=make_timer_tree(20000, [("http client", 12000)]),
        ),
    ]


@pytest.fixture
def percentile_samples():
    """Three contiguous one-minute samples with small histograms."""
    return [
        PercentileSample(capture_time=60000, transaction_count=4,
                         histogram=DurationHistogram.from_values([10, 20, 30, 40]),
                         total_micros=100),
        PercentileSample(capture_time=120000, transaction_count=2,
                         histogram=DurationHistogram.from_values([5, 50]),
                         total_micros=55),
        PercentileSample(capture_time=180000, transaction_count=0,
                         histogram=DurationHistogram(),
                         total_micros=0),
    ]


@pytest.fixture
def profile_chain():
    """root -> A -> B -> C where C has two callees."""
    c = ProfileNode("C", 10, [ProfileNode("D", 6), ProfileNode("E", 3)])
    b = ProfileNode("B", 10, [c])
    a = ProfileNode("A", 10, [b])
    return ProfileNode(None, 10, [a])


@pytest.fixture
def sample_export():
    """Aggregate export document with every section populated."""
    return {
        "transactionType": "Web",
        "transactionName": "/checkout",
        "from": 60000,
        "to": 300000,
        "intervalMillis": 60000,
        "shouldHaveProfile": True,
        "shouldHaveQueries": True,
        "overviewAggregates": [
            {
                "captureTime": 60000,
                "transactionCount": 1,
                "totalMicros": 3000,
                "syntheticRootTimer": {
                    "name": None,
                    "totalMicros": 3000,
                    "count": 1,
                    "childNodes": [
                        {"name": "http request", "totalMicros": 3000, "count": 1, "childNodes": [
                            {"name": "jdbc query", "totalMicros": 1000, "count": 1, "childNodes": []}
                        ]}
                    ]
                },
                "threadStats": {"totalCpuMicros": 200, "totalBlockedMicros": None,
                                "totalWaitedMicros": None, "totalAllocatedKBytes": 16}
            },
            {
                "captureTime": 120000,
                "transactionCount": 2,
                "totalMicros": 8000,
                "syntheticRootTimer": {
                    "name": None,
                    "totalMicros": 8000,
                    "count": 2,
                    "childNodes": [
                        {"name": "http request", "totalMicros": 8000, "count": 2, "childNodes": [
                            {"name": "jdbc query", "totalMicros": 4000, "count": 3, "childNodes": []}
                        ]}
                    ]
                }
            }
        ],
        "percentileAggregates": [
            {"captureTime": 60000, "transactionCount": 1, "totalMicros": 3000,
             "histogram": {"values": [3000]}},
            {"captureTime": 120000, "transactionCount": 2, "totalMicros": 8000,
             "histogram": {"values": [10, 20]}}
        ],
        "profile": {
            "frameLabel": None,
            "sampleCount": 4,
            "childNodes": [
                {"frameLabel": "Thread.run", "sampleCount": 4, "childNodes": [
                    {"frameLabel": "Servlet.service", "sampleCount": 3, "childNodes": []},
                    {"frameLabel": "Socket.read", "sampleCount": 1, "childNodes": []}
                ]}
            ]
        },
        "queries": [
            {"queryType": "SQL", "queryText": "select 1", "totalMicros": 100,
             "executionCount": 1, "totalRows": 1},
            {"queryType": "SQL", "queryText": "select * from orders", "totalMicros": 900,
             "executionCount": 3, "totalRows": 30},
            {"queryType": "SQL", "queryText": "select 1", "totalMicros": 50,
             "executionCount": 2, "totalRows": 2}
        ]
    }


@pytest.fixture
def temp_json_file(tmp_path):
    """Create a temporary JSON file and return a helper function."""
    def _create_file(data, name="aggregates.json"):
        file_path = tmp_path / name
        with open(file_path, "w") as f:
            json.dump(data, f)
        return str(file_path)

    return _create_file


@pytest.fixture
def deep_profile_file(tmp_path):
    """Write an export whose profile is a single chain of ``depth`` frames."""
    def _create_file(depth, name="deep.json"):
        # assembled as text; json.dump recurses once per level
        frames = ''.join(f'{{"frameLabel": "frame {i}", "sampleCount": 1, "childNodes": ['
                         for i in range(depth))
        text = ('{"from": 0, "to": 60000, "shouldHaveProfile": true, '
                '"profile": {"frameLabel": null, "sampleCount": 1, "childNodes": ['
                + frames + ']}' * depth + ']}}')
        file_path = tmp_path / name
        file_path.write_text(text)
        return str(file_path)

    return _create_file
