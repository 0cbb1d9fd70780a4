"""
Ball Tree baseline for coordinate data.

A VP-tree only needs a metric, so it also works on plain vectors; this
wrapper around scikit-learn's BallTree gives an independent answer to
compare against when the items happen to be points in R^d.
"""

import time
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..parameters import SearchParameters, default_search_parameters
from .exact_brute_force import BaseKNNSearcher

# vptree.distances names -> sklearn metric names
_SKLEARN_METRICS = {
    'euclidean': 'euclidean',
    'manhattan': 'manhattan',
    'chebyshev': 'chebyshev',
}


class SklearnBallTreeKNN(BaseKNNSearcher):
    """
    Wrapper around sklearn's BallTree.

    Parameters
    ----------
    X : array-like of shape (n_samples, n_features)
        Dataset. Rows are returned as tuples so results compare equal to
        the tuple items a VP-tree built on the same data returns.
    leaf_size : int, default=30
        Passed through to sklearn.
    metric : str, default='euclidean'
        'euclidean', 'manhattan' or 'chebyshev'.
    """

    def __init__(
        self,
        X: Union[np.ndarray, Sequence[Sequence[float]]],
        leaf_size: int = 30,
        metric: str = 'euclidean'
    ):
        if metric not in _SKLEARN_METRICS:
            raise ValueError(f"Unknown metric: {metric}")
        self.X = np.asarray(X, dtype=np.float64)
        if self.X.ndim != 2:
            raise ValueError(f"Expected a 2-D array, got shape {self.X.shape}")
        super().__init__(tuple(float(v) for v in row) for row in self.X)
        self.leaf_size = leaf_size
        self.metric = metric
        self._tree = None

    def fit(self) -> 'SklearnBallTreeKNN':
        """Build the tree using sklearn."""
        from sklearn.neighbors import BallTree

        t0 = time.perf_counter()
        self._tree = BallTree(self.X, leaf_size=self.leaf_size, metric=_SKLEARN_METRICS[self.metric])
        self._build_time = time.perf_counter() - t0
        self.is_fitted = True
        return self

    def search(
        self,
        target: Sequence[float],
        params: Optional[SearchParameters] = None,
        return_stats: bool = False
    ) -> Union[List[Tuple[Any, float]], Tuple[List[Tuple[Any, float]], Dict[str, Any]]]:
        """Query using sklearn's implementation."""
        if params is None:
            params = default_search_parameters()
        k = min(params.num_results, self.n)

        results: List[Tuple[Any, float]] = []
        if k >= 1:
            q = np.asarray(target, dtype=np.float64).reshape(1, -1)
            distances, indices = self._tree.query(q, k=k)
            for idx, d in zip(indices[0], distances[0]):
                if d >= params.max_distance:
                    break
                results.append((self.dataset[idx], float(d)))

        if return_stats:
            # sklearn doesn't expose distance counts
            return results, {'dist_count': None}
        return results
