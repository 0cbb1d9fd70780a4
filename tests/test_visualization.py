"""
Tests for plotting helpers.
"""

import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from vptree import build
from vptree.utils.visualization import (
    create_results_table,
    leaf_depths,
    plot_dist_count_vs_k,
    plot_leaf_depth_distribution,
)


@pytest.fixture
def tree():
    np.random.seed(0)
    return build('euclidean', [tuple(row) for row in np.random.rand(64, 2)], random_state=0)


def test_leaf_depths(tree):
    depths = leaf_depths(tree)

    assert depths.size > 0
    assert depths.max() == tree.depth()
    assert leaf_depths(build('euclidean', [])).size == 0


def test_plots_are_written(tree, tmp_path):
    plot_dist_count_vs_k({1: [10, 12], 5: [20, 25]}, 64, save_path=str(tmp_path / "k.png"))
    plot_leaf_depth_distribution(tree, save_path=str(tmp_path / "depth.png"))

    assert (tmp_path / "k.png").exists()
    assert (tmp_path / "depth.png").exists()


def test_results_table():
    metrics = {
        'recall': {'mean': 1.0},
        'speedup': {'mean': 4.0},
        'dist_ratio': {'mean': 0.25},
    }
    table = create_results_table({'vptree': metrics}, 'words', 5)

    assert "Results for words, k=5" in table
    assert "vptree" in table
