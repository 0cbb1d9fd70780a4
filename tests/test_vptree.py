"""
Tests for VP-tree construction and search.
"""

import numpy as np
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from vptree import (
    VPTree,
    build,
    SearchParameters,
    default_search_parameters,
    search_parameters_num_results,
)
from vptree.baselines import BruteForceSearcher
from vptree.distances import euclidean, levenshtein


def subtree_items(node):
    """All items stored under ``node`` (inclusive)."""
    out = []
    stack = [node] if node is not None else []
    while stack:
        n = stack.pop()
        out.append(n.item)
        if n.left is not None:
            stack.append(n.left)
        if n.right is not None:
            stack.append(n.right)
    return out


class TestBuild:
    """Test tree construction."""

    @pytest.fixture
    def sample_data(self):
        """Random 5-d points as tuples."""
        np.random.seed(42)
        return [tuple(row) for row in np.random.randn(300, 5)]

    def test_node_count_matches_input(self, sample_data):
        tree = build(euclidean, sample_data, random_state=0)

        assert len(tree) == len(sample_data)
        assert len(list(tree.nodes())) == len(sample_data)
        assert sorted(tree.items()) == sorted(sample_data)

    def test_partition_invariant(self, sample_data):
        tree = build(euclidean, sample_data, random_state=1)

        for node in tree.nodes():
            if node.is_leaf:
                continue
            for item in subtree_items(node.left):
                assert euclidean(item, node.item) < node.threshold
            for item in subtree_items(node.right):
                assert euclidean(item, node.item) >= node.threshold

    def test_threshold_is_median_distance(self, sample_data):
        tree = build(euclidean, sample_data, random_state=2)

        root = tree.root
        rest = [item for item in sample_data if item != root.item]
        dists = sorted(euclidean(item, root.item) for item in rest)
        assert root.threshold == dists[len(rest) // 2]

    def test_tree_is_reasonably_balanced(self, sample_data):
        tree = build(euclidean, sample_data, random_state=3)

        # log2(300) ~ 8.2; random vantage points leave some slack
        assert tree.depth() <= 20

    def test_input_is_not_modified(self, sample_data):
        original = list(sample_data)
        build(euclidean, sample_data, random_state=4)
        assert sample_data == original

    def test_same_seed_same_tree(self, sample_data):
        a = build(euclidean, sample_data, random_state=7)
        b = build(euclidean, sample_data, random_state=7)
        assert a.items() == b.items()
        assert [n.threshold for n in a.nodes()] == [n.threshold for n in b.nodes()]

    def test_build_stats_recorded(self, sample_data):
        tree = build(euclidean, sample_data, random_state=5)
        assert tree.build_time >= 0
        assert tree.build_dist_count > 0
        assert tree.is_fitted

    def test_fit_twice_is_noop(self, sample_data):
        tree = VPTree(euclidean, sample_data, random_state=6).fit()
        before = tree.items()
        tree.fit()
        assert tree.items() == before
        assert len(tree) == len(sample_data)

    def test_metric_by_name(self):
        tree = build('levenshtein', ['kitten', 'sitting', 'mitten'], random_state=0)
        assert tree.metric is levenshtein
        assert tree.nearest('kitten') == ('kitten', 0.0)

    def test_empty_input(self):
        tree = build(euclidean, [])
        assert tree.is_empty()
        assert len(tree) == 0
        assert tree.depth() == 0
        assert tree.items() == []

    def test_single_item_is_leaf(self):
        tree = build(levenshtein, ['only'])
        assert tree.root.is_leaf
        assert tree.depth() == 1


class TestSearch:
    """Test k-NN search against a brute force scan."""

    @pytest.fixture
    def sample_data(self):
        np.random.seed(42)
        return [tuple(row) for row in np.random.randn(500, 8)]

    @pytest.fixture
    def query_point(self):
        np.random.seed(123)
        return tuple(np.random.randn(8))

    @pytest.fixture
    def tree(self, sample_data):
        return build(euclidean, sample_data, random_state=42)

    def test_basic_query(self, tree, query_point):
        k = 10
        results = tree.search(query_point, search_parameters_num_results(k))

        assert len(results) == k
        assert all(d >= 0 for _, d in results)

    def test_matches_brute_force(self, tree, sample_data):
        exact = BruteForceSearcher(euclidean, sample_data).fit()
        np.random.seed(7)

        for _ in range(20):
            q = tuple(np.random.randn(8))
            for k in [1, 5, 25]:
                params = search_parameters_num_results(k)
                found = tree.search(q, params)
                expected = exact.search(q, params)

                assert {item for item, _ in found} == {item for item, _ in expected}
                np.testing.assert_allclose(
                    [d for _, d in found], [d for _, d in expected]
                )

    def test_distances_sorted(self, tree, query_point):
        results = tree.search(query_point, search_parameters_num_results(50))
        distances = [d for _, d in results]

        for i in range(len(distances) - 1):
            assert distances[i] <= distances[i + 1]

    def test_k_greater_than_n_returns_all(self, sample_data, query_point):
        tree = build(euclidean, sample_data[:20], random_state=0)
        results = tree.search(query_point, search_parameters_num_results(100))

        assert len(results) == 20
        assert {item for item, _ in results} == set(sample_data[:20])

    def test_self_query(self, tree, sample_data):
        for item in sample_data[:25]:
            results = tree.search(item, default_search_parameters())
            assert results == [(item, 0.0)]

    def test_max_distance_filters(self, tree, sample_data, query_point):
        radius = 2.5
        params = SearchParameters(num_results=len(sample_data), max_distance=radius)
        results = tree.search(query_point, params)

        within = [item for item in sample_data if euclidean(item, query_point) < radius]
        assert all(d < radius for _, d in results)
        assert {item for item, _ in results} == set(within)

    def test_max_distance_with_small_k(self, tree, sample_data, query_point):
        params = SearchParameters(num_results=3, max_distance=2.5)
        results = tree.search(query_point, params)

        assert len(results) <= 3
        assert all(d < 2.5 for _, d in results)

    def test_zero_max_distance_returns_nothing(self, tree, sample_data):
        params = SearchParameters(num_results=5, max_distance=0.0)
        assert tree.search(sample_data[0], params) == []

    def test_return_stats(self, tree, query_point):
        results, stats = tree.search(
            query_point, search_parameters_num_results(5), return_stats=True
        )

        assert 0 < stats['dist_count'] <= len(tree)
        assert stats['scan_ratio'] == stats['dist_count'] / len(tree)
        assert stats['tau'] == results[-1][1]

    def test_pruning_skips_items(self, tree, sample_data):
        # Self-queries on a 500 item tree should not need a full scan
        counts = []
        for item in sample_data[:20]:
            _, stats = tree.search(item, default_search_parameters(), return_stats=True)
            counts.append(stats['dist_count'])
        assert np.mean(counts) < len(sample_data)

    def test_search_does_not_mutate_tree(self, tree, query_point):
        before = [(n.item, n.threshold) for n in tree.nodes()]
        tree.search(query_point, search_parameters_num_results(10))
        tree.search_batch([query_point] * 3, search_parameters_num_results(3))
        assert [(n.item, n.threshold) for n in tree.nodes()] == before

    def test_search_batch(self, tree, query_point, sample_data):
        targets = [query_point, sample_data[0]]
        batch = tree.search_batch(targets, search_parameters_num_results(4))

        assert len(batch) == 2
        assert batch[0] == tree.search(query_point, search_parameters_num_results(4))
        assert batch[1][0] == (sample_data[0], 0.0)

    def test_default_params(self, tree, query_point):
        assert tree.search(query_point) == tree.search(query_point, default_search_parameters())
        assert len(tree.search(query_point)) == 1

    def test_nearest(self, tree, sample_data):
        assert tree.nearest(sample_data[3]) == (sample_data[3], 0.0)
        assert build(euclidean, []).nearest(sample_data[3]) is None


class TestStringSearch:
    """Edit distance over words, where ties are common."""

    @pytest.fixture
    def words(self):
        return [
            'apple', 'apply', 'ample', 'maple', 'applet', 'happy', 'snapple',
            'grape', 'grope', 'gripe', 'tripe', 'trip', 'strip', 'stripe',
            'banana', 'bandana', 'cabana', 'canal', 'canals', 'panel',
        ]

    def test_distances_match_brute_force(self, words):
        tree = build(levenshtein, words, random_state=11)
        exact = BruteForceSearcher(levenshtein, words).fit()

        for target in ['appel', 'grip', 'banan', 'zzz', 'stripes']:
            for k in [1, 3, 7]:
                params = search_parameters_num_results(k)
                found = [d for _, d in tree.search(target, params)]
                expected = [d for _, d in exact.search(target, params)]
                assert found == expected

    def test_hamming_example(self):
        tree = build('hamming', ["aa", "ab", "ba", "bb"], random_state=0)
        results = tree.search("aa", search_parameters_num_results(2))

        assert results[0] == ("aa", 0.0)
        assert results[1][1] == 1.0
        assert results[1][0] in {"ab", "ba"}


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
