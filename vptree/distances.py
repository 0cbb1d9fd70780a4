"""
Distance functions usable as VP-tree metrics.

A metric is any callable ``metric(a, b) -> float`` satisfying
non-negativity, identity of indiscernibles, symmetry and the triangle
inequality. The tree trusts the callable and never checks these axioms;
a function that violates them still builds and searches, but answers may
miss true neighbours.
"""

from typing import Any, Callable, Dict, Sequence, Union

from scipy.spatial import distance as sp_distance

Metric = Callable[[Any, Any], float]


def euclidean(a: Sequence[float], b: Sequence[float]) -> float:
    """L2 distance between two equal-length vectors."""
    return float(sp_distance.euclidean(a, b))


def manhattan(a: Sequence[float], b: Sequence[float]) -> float:
    """L1 (city block) distance between two equal-length vectors."""
    return float(sp_distance.cityblock(a, b))


def chebyshev(a: Sequence[float], b: Sequence[float]) -> float:
    """L-infinity distance between two equal-length vectors."""
    return float(sp_distance.chebyshev(a, b))


def hamming(a: Sequence[Any], b: Sequence[Any]) -> float:
    """
    Number of positions at which two equal-length sequences differ.

    Use ``hamming_bits`` for integer bit masks.
    """
    if len(a) != len(b):
        raise ValueError(
            f"Hamming distance requires equal lengths, got {len(a)} and {len(b)}"
        )
    return float(sum(1 for x, y in zip(a, b) if x != y))


def hamming_bits(a: int, b: int) -> float:
    """Hamming distance between two integers (e.g. perceptual hashes)."""
    return float(bin(a ^ b).count("1"))


def levenshtein(a: Sequence[Any], b: Sequence[Any]) -> float:
    """
    Edit distance with unit cost insertions, deletions and substitutions.

    Two-row dynamic programming, O(len(a) * len(b)) time and
    O(min(len(a), len(b))) memory.
    """
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return float(len(a))

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            insert_cost = current[j - 1] + 1
            delete_cost = previous[j] + 1
            replace_cost = previous[j - 1] + (ca != cb)
            current.append(min(insert_cost, delete_cost, replace_cost))
        previous = current
    return float(previous[-1])


METRICS: Dict[str, Metric] = {
    'euclidean': euclidean,
    'manhattan': manhattan,
    'chebyshev': chebyshev,
    'hamming': hamming,
    'hamming_bits': hamming_bits,
    'levenshtein': levenshtein,
}


def get_metric(metric: Union[str, Metric]) -> Metric:
    """
    Resolve a metric by name, or return a callable unchanged.

    Parameters
    ----------
    metric : str or callable
        One of the names in ``METRICS`` or a distance function.

    Returns
    -------
    metric : callable
    """
    if callable(metric):
        return metric
    try:
        return METRICS[metric]
    except KeyError:
        raise ValueError(
            f"Unknown metric: {metric}. Available: {sorted(METRICS)}"
        ) from None
