"""
Evaluation metrics for k-NN search experiments.
"""

import numpy as np
from typing import Any, Dict, List, Sequence
from scipy import stats


def recall_at_k(
    retrieved: Sequence[Any],
    ground_truth: Sequence[Any]
) -> float:
    """
    Compute Recall@k for a single query.

    Parameters
    ----------
    retrieved : sequence of hashable items
        Items returned by the method under test.
    ground_truth : sequence of hashable items
        True k nearest items.

    Returns
    -------
    recall : float
        Proportion of true neighbors that were retrieved.
    """
    retrieved_set = set(retrieved)
    truth_set = set(ground_truth)

    if len(truth_set) == 0:
        return 1.0

    return len(retrieved_set & truth_set) / len(truth_set)


def distance_recall_at_k(
    retrieved_distances: Sequence[float],
    true_distances: Sequence[float],
    rtol: float = 1e-9
) -> float:
    """
    Tie-insensitive Recall@k.

    A retrieved neighbour counts as correct when its distance is no larger
    than the true k-th distance. Items at equal distance are
    interchangeable, so this is the fair measure when the metric produces
    many ties (Hamming, Levenshtein).
    """
    if len(true_distances) == 0:
        return 1.0

    kth = float(true_distances[-1])
    hits = sum(1 for d in retrieved_distances if d <= kth + rtol * max(abs(kth), 1.0))
    return min(hits, len(true_distances)) / len(true_distances)


def compute_speedup(
    exact_time: float,
    method_time: float
) -> float:
    """Compute speedup factor."""
    if method_time == 0:
        return float('inf')
    return exact_time / method_time


def compute_distance_ratio(
    dist_count: int,
    total_points: int
) -> float:
    """Compute fraction of distance computations."""
    return dist_count / total_points


def aggregate_metrics(
    all_recalls: List[float],
    all_speedups: List[float],
    all_dist_counts: List[int],
    total_points: int,
    confidence: float = 0.95
) -> Dict[str, Any]:
    """
    Aggregate metrics across multiple queries.

    Parameters
    ----------
    all_recalls : List[float]
        Recall values for each query.
    all_speedups : List[float]
        Speedup values for each query.
    all_dist_counts : List[int]
        Distance computation counts for each query.
    total_points : int
        Total items in the index (n).
    confidence : float
        Confidence level for intervals.

    Returns
    -------
    metrics : Dict[str, Any]
        Aggregated metrics with statistics.
    """
    all_recalls = np.asarray(all_recalls, dtype=np.float64)
    all_speedups = np.asarray(all_speedups, dtype=np.float64)
    all_dist_counts = np.asarray(all_dist_counts, dtype=np.float64)

    metrics = {
        'recall': {
            'mean': float(np.mean(all_recalls)),
            'std': float(np.std(all_recalls)),
            'min': float(np.min(all_recalls)),
            'max': float(np.max(all_recalls)),
            'median': float(np.median(all_recalls)),
        },
        'speedup': {
            'mean': float(np.mean(all_speedups)),
            'std': float(np.std(all_speedups)),
            'min': float(np.min(all_speedups)),
            'max': float(np.max(all_speedups)),
            'median': float(np.median(all_speedups)),
        },
        'dist_ratio': {
            'mean': float(np.mean(all_dist_counts) / total_points),
            'std': float(np.std(all_dist_counts) / total_points),
        }
    }

    # Percentiles
    for p in [10, 25, 75, 90]:
        metrics['recall'][f'p{p}'] = float(np.percentile(all_recalls, p))
        metrics['speedup'][f'p{p}'] = float(np.percentile(all_speedups, p))

    # Confidence intervals (using t-distribution for small samples)
    n = len(all_recalls)
    if n > 1:
        t_value = stats.t.ppf((1 + confidence) / 2, n - 1)

        recall_se = np.std(all_recalls, ddof=1) / np.sqrt(n)
        metrics['recall']['ci_lower'] = float(np.mean(all_recalls) - t_value * recall_se)
        metrics['recall']['ci_upper'] = float(np.mean(all_recalls) + t_value * recall_se)

        speedup_se = np.std(all_speedups, ddof=1) / np.sqrt(n)
        metrics['speedup']['ci_lower'] = float(np.mean(all_speedups) - t_value * speedup_se)
        metrics['speedup']['ci_upper'] = float(np.mean(all_speedups) + t_value * speedup_se)

    # An exact index should never fall below 1.0
    metrics['failure_rate'] = float(np.mean(all_recalls < 1.0))

    return metrics
