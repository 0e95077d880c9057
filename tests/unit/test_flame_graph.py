"""
Unit tests for transaction_analyzer.processors.flame_graph module.
"""
import logging
import pytest
from transaction_analyzer.core.types import ProfileNode
from transaction_analyzer.processors.flame_graph import FlameGraphReducer


def walk(node):
    """Yield display nodes parent-first without recursion."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(current.children)


class TestSelectInterestingRoot:
    """Tests for skipping the single-child chain at the top of a profile."""

    def test_chain_to_first_branch(self, profile_chain):
        """root -> A -> B -> C with C branching selects C."""
        interesting = FlameGraphReducer.select_interesting_root(profile_chain)
        assert interesting.frame_label == "C"

    def test_branching_root_is_kept(self):
        profile = ProfileNode(None, 5, [ProfileNode("A", 2), ProfileNode("B", 3)])
        assert FlameGraphReducer.select_interesting_root(profile) is profile

    def test_single_branch_reverts_to_root(self):
        """A chain ending in a leaf keeps the original root."""
        profile = ProfileNode(None, 4, [ProfileNode("A", 4, [ProfileNode("B", 4)])])
        assert FlameGraphReducer.select_interesting_root(profile) is profile

    def test_empty_descent_reverts_to_root(self):
        """A branching frame with no samples is not interesting."""
        profile = ProfileNode(None, 0, [ProfileNode("A", 0, [ProfileNode("B", 0),
                                                              ProfileNode("C", 0)])])
        assert FlameGraphReducer.select_interesting_root(profile) is profile


class TestReduce:
    """Tests for flame graph construction."""

    def test_synthetic_root_wraps_interesting_root(self, profile_chain):
        flame_graph = FlameGraphReducer().reduce(profile_chain)

        assert flame_graph.label == ''
        assert flame_graph.self_samples == 0
        assert flame_graph.total_samples == 10
        assert [child.label for child in flame_graph.children] == ["C"]

    def test_chain_ending_in_sampled_leaf_keeps_whole_chain(self):
        """root -> A -> B -> C with C a leaf holding every sample draws the full chain."""
        leaf = ProfileNode("C", 7)
        profile = ProfileNode(None, 7, [ProfileNode("A", 7, [ProfileNode("B", 7, [leaf])])])

        assert FlameGraphReducer.select_interesting_root(profile) is profile

        flame_graph = FlameGraphReducer().reduce(profile)
        assert flame_graph.total_samples == 7
        [display_root] = flame_graph.children
        assert (display_root.label, display_root.self_samples, display_root.total_samples) == ('', 0, 7)
        chain = []
        node = display_root
        while node.children:
            [node] = node.children
            chain.append((node.label, node.self_samples, node.total_samples))
        assert chain == [("A", 0, 7), ("B", 0, 7), ("C", 7, 7)]

    def test_self_and_total_samples(self, profile_chain):
        flame_graph = FlameGraphReducer().reduce(profile_chain)
        c = flame_graph.children[0]

        assert (c.self_samples, c.total_samples) == (1, 10)
        assert [(n.label, n.self_samples, n.total_samples) for n in c.children] == [
            ("D", 6, 6),
            ("E", 3, 3),
        ]

    def test_total_is_self_plus_children(self):
        profile = ProfileNode(None, 20, [
            ProfileNode("A", 12, [ProfileNode("B", 5), ProfileNode("C", 4, [ProfileNode("D", 1)])]),
            ProfileNode("E", 8),
        ])
        flame_graph = FlameGraphReducer().reduce(profile)

        for node in walk(flame_graph.children[0]):
            assert node.total_samples == node.self_samples + sum(
                child.total_samples for child in node.children)

    def test_negative_self_samples_clamped(self, caplog):
        profile = ProfileNode(None, 3, [ProfileNode("A", 2), ProfileNode("B", 2)])
        with caplog.at_level(logging.WARNING):
            flame_graph = FlameGraphReducer().reduce(profile)
        assert flame_graph.children[0].self_samples == 0
        assert "clamping self samples to zero" in caplog.text

    def test_empty_profile(self):
        flame_graph = FlameGraphReducer().reduce(ProfileNode(None, 0))
        assert flame_graph.total_samples == 0
        assert flame_graph.to_dict() == {
            '': {'svUnique': 0, 'svTotal': 0, 'svChildren': {
                '': {'svUnique': 0, 'svTotal': 0, 'svChildren': {}},
            }},
        }

    def test_deep_profile_does_not_recurse(self):
        depth = 5000
        leaf = ProfileNode("leaf", 3, [ProfileNode("x", 1), ProfileNode("y", 2)])
        node = leaf
        for level in range(depth):
            node = ProfileNode(f"frame {level}", 3, [node])
        profile = ProfileNode(None, 3, [node])

        flame_graph = FlameGraphReducer().reduce(profile)

        assert flame_graph.children[0].label == "leaf"
        assert flame_graph.children[0].self_samples == 0


class TestToDict:
    """Tests for flame graph serialization."""

    def test_nested_mapping(self, profile_chain):
        assert FlameGraphReducer().reduce_to_dict(profile_chain) == {
            '': {
                'svUnique': 0,
                'svTotal': 10,
                'svChildren': {
                    'C': {
                        'svUnique': 1,
                        'svTotal': 10,
                        'svChildren': {
                            'D': {'svUnique': 6, 'svTotal': 6, 'svChildren': {}},
                            'E': {'svUnique': 3, 'svTotal': 3, 'svChildren': {}},
                        },
                    },
                },
            },
        }

    def test_children_keep_call_order(self, profile_chain):
        children = FlameGraphReducer().reduce_to_dict(profile_chain)['']['svChildren']['C']['svChildren']
        assert list(children) == ['D', 'E']

    def test_duplicate_labels_get_suffix(self):
        profile = ProfileNode("main", 5, [ProfileNode("X", 2), ProfileNode("X", 3)])
        children = FlameGraphReducer().reduce_to_dict(profile)['']['svChildren']['main']['svChildren']
        assert children == {
            'X': {'svUnique': 2, 'svTotal': 2, 'svChildren': {}},
            'X [2]': {'svUnique': 3, 'svTotal': 3, 'svChildren': {}},
        }

    def test_none_profile(self):
        assert FlameGraphReducer().reduce_to_dict(None)['']['svTotal'] == 0
