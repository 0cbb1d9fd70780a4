"""
Brute Force Exact k-NN Search

The simplest baseline - computes the distance to every item.
Always returns the exact k-NN but costs n metric evaluations per query.
Used as the ground-truth oracle for VP-tree tests and benchmarks.
"""

import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

import numpy as np

from ..distances import Metric, get_metric
from ..parameters import SearchParameters, default_search_parameters


class BaseKNNSearcher(ABC):
    """Abstract base class for k-NN search over an item collection."""

    def __init__(self, items: Iterable[Any], **kwargs):
        """
        Initialize the searcher with a dataset.

        Parameters
        ----------
        items : iterable
            The items to search.
        **kwargs : dict
            Method-specific parameters.
        """
        self.dataset = list(items)
        self.n = len(self.dataset)
        self.is_fitted = False
        self._build_time = 0.0

    @abstractmethod
    def fit(self) -> 'BaseKNNSearcher':
        """Build any required index structures."""
        pass

    @abstractmethod
    def search(
        self,
        target: Any,
        params: Optional[SearchParameters] = None,
        return_stats: bool = False
    ):
        """
        Find the k nearest neighbours of ``target``.

        Returns
        -------
        results : list of (item, distance)
            Ascending by distance.
        stats : dict, optional
            Contains ``dist_count``, the number of distance computations.
        """
        pass

    @property
    def build_time(self) -> float:
        """Return index build time in seconds."""
        return self._build_time


class BruteForceSearcher(BaseKNNSearcher):
    """
    Exact k-NN by scanning every item.

    Parameters
    ----------
    metric : callable or str
        Distance function, or a name from ``vptree.distances.METRICS``.
    items : iterable
        The items to search.
    """

    def __init__(
        self,
        metric: Union[str, Metric],
        items: Iterable[Any]
    ):
        super().__init__(items)
        self.metric = get_metric(metric)

    def fit(self) -> 'BruteForceSearcher':
        """No index to build for brute force."""
        t0 = time.perf_counter()
        self.is_fitted = True
        self._build_time = time.perf_counter() - t0
        return self

    def distances(self, target: Any) -> np.ndarray:
        """Distance from ``target`` to every item, in insertion order."""
        return np.fromiter(
            (self.metric(item, target) for item in self.dataset),
            dtype=np.float64,
            count=self.n,
        )

    def search(
        self,
        target: Any,
        params: Optional[SearchParameters] = None,
        return_stats: bool = False
    ) -> Union[List[Tuple[Any, float]], Tuple[List[Tuple[Any, float]], Dict[str, Any]]]:
        """Find the k nearest items by computing all distances."""
        if params is None:
            params = default_search_parameters()
        k = params.num_results

        results: List[Tuple[Any, float]] = []
        dist_count = 0

        if k >= 1 and self.n > 0:
            distances = self.distances(target)
            dist_count = self.n

            order = np.argsort(distances, kind='stable')
            for idx in order[:k]:
                d = float(distances[idx])
                if d >= params.max_distance:
                    break
                results.append((self.dataset[idx], d))

        if return_stats:
            return results, {'dist_count': dist_count}
        return results
