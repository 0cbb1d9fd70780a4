"""
Visualization utilities for benchmark results.
"""

import numpy as np
import matplotlib.pyplot as plt
from typing import Dict, List, Any, Optional


def plot_dist_count_vs_k(
    dist_counts: Dict[int, List[int]],
    total_points: int,
    title: str = "Metric evaluations per query",
    save_path: Optional[str] = None
):
    """
    Plot the fraction of the index scanned per query against k.

    Parameters
    ----------
    dist_counts : Dict[int, List[int]]
        k -> metric evaluations for each query.
    total_points : int
        Size of the index.
    title : str
        Plot title.
    save_path : str or None
        Path to save figure.
    """
    fig, ax = plt.subplots(figsize=(10, 6))

    ks = sorted(dist_counts)
    means = np.array([np.mean(dist_counts[k]) for k in ks]) / total_points
    stds = np.array([np.std(dist_counts[k]) for k in ks]) / total_points

    ax.errorbar(ks, means * 100, yerr=stds * 100, fmt='o-', markersize=8, capsize=5)

    ax.set_xlabel('k', fontsize=12)
    ax.set_ylabel('Items scanned (%)', fontsize=12)
    ax.set_title(title, fontsize=14)
    ax.grid(True, alpha=0.3)

    # Brute force scans everything
    ax.axhline(y=100, color='r', linestyle='--', alpha=0.5, label='Brute force')
    ax.legend()

    ax.set_ylim([0, 105])

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig, ax


def leaf_depths(tree) -> np.ndarray:
    """Depth of every leaf in ``tree`` (root at depth 1)."""
    depths = []
    stack = [(tree.root, 1)] if tree.root is not None else []
    while stack:
        node, level = stack.pop()
        if node.is_leaf:
            depths.append(level)
            continue
        if node.left is not None:
            stack.append((node.left, level + 1))
        if node.right is not None:
            stack.append((node.right, level + 1))
    return np.array(depths, dtype=np.int64)


def plot_leaf_depth_distribution(
    tree,
    title: str = "VP-tree leaf depth distribution",
    save_path: Optional[str] = None
):
    """
    Histogram of leaf depths. A balanced tree concentrates near log2(n).
    """
    depths = leaf_depths(tree)

    fig, ax = plt.subplots(figsize=(10, 6))

    if depths.size:
        bins = np.arange(depths.min(), depths.max() + 2) - 0.5
        ax.hist(depths, bins=bins, edgecolor='black', alpha=0.7)
        ax.axvline(np.mean(depths), color='r', linestyle='--',
                   label=f'Mean: {np.mean(depths):.1f}')
    if len(tree) > 0:
        ax.axvline(np.log2(len(tree)) + 1, color='g', linestyle=':',
                   label=f'log2(n)+1: {np.log2(len(tree)) + 1:.1f}')

    ax.set_xlabel('Leaf depth', fontsize=12)
    ax.set_ylabel('Frequency', fontsize=12)
    ax.set_title(title, fontsize=14)
    ax.legend()

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=150, bbox_inches='tight')

    return fig, ax


def create_results_table(
    results: Dict[str, Dict[str, Any]],
    dataset_name: str,
    k: int
) -> str:
    """
    Create formatted results table as string.
    """
    lines = []
    lines.append(f"\nResults for {dataset_name}, k={k}")
    lines.append("=" * 70)
    lines.append(f"{'Method':<20} {'Recall':>10} {'Speedup':>10} {'Dist Ratio':>12}")
    lines.append("-" * 70)

    for method_name, metrics in sorted(results.items()):
        recall = metrics['recall']['mean']
        speedup = metrics['speedup']['mean']
        dist_ratio = metrics['dist_ratio']['mean']

        lines.append(
            f"{method_name:<20} {recall:>10.4f} {speedup:>10.2f}x {dist_ratio:>12.4f}"
        )

    lines.append("=" * 70)

    return "\n".join(lines)
