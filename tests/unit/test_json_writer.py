"""
Unit tests for transaction_analyzer.web.json_writer module.
"""
import json

import pytest
from transaction_analyzer.web.json_writer import dumps, iter_json


@pytest.fixture
def document():
    return {
        "dataSeries": [{"name": "jdbc query", "data": [[60000, 1.5], None, [120000, 0.25]]}],
        "transactionCounts": {"60000": 1},
        "mergedAggregate": {"percentileValues": [], "overwritten": False, "label": "é \"q\""},
        "empty": {},
    }


class TestDumps:
    """Tests for iterative JSON encoding."""

    def test_matches_json_dumps(self, document):
        assert dumps(document) == json.dumps(document)

    def test_matches_json_dumps_indented(self, document):
        assert dumps(document, indent=2) == json.dumps(document, indent=2)

    def test_scalars(self):
        assert dumps(None) == 'null'
        assert dumps("x") == '"x"'
        assert dumps(3) == '3'

    def test_tuples_and_non_string_keys(self):
        assert dumps({1: (True, None)}) == '{"1": [true, null]}'

    def test_chunks_join_to_document(self, document):
        assert json.loads(''.join(iter_json(document))) == document

    def test_deep_nesting(self):
        depth = 5000
        root = {}
        node = root
        for _ in range(depth):
            child = {}
            node["c"] = child
            node = child

        text = dumps(root)

        assert text == '{"c": ' * depth + '{}' + '}' * depth
