"""
Vantage-Point Tree for k-NN Search

A binary tree over an arbitrary metric space. Each node holds one item
(the vantage point) and the median distance from it to the items below;
closer items go left, the rest go right. Only the distance function is
ever applied to items, so anything with a metric can be indexed: strings
under edit distance, perceptual hashes under Hamming distance, vectors.

Implementation notes:
- Vantage points are drawn uniformly at random (seedable)
- Search keeps a bounded max-heap of the k best and a shrinking radius tau;
  the triangle inequality rules out subtrees that cannot beat tau
- Build and search walk the tree with explicit stacks; duplicate-heavy
  inputs degenerate into a right spine deeper than the recursion limit
- A built tree is never mutated, searches are safe to run concurrently
"""

import logging
import time
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union

import numpy as np

from . import config as vp_config
from .baselines.exact_brute_force import BaseKNNSearcher
from .distances import Metric, get_metric
from .logging import get_logger
from .parameters import SearchParameters, default_search_parameters
from .utils.heap import BoundedMaxHeap
from .utils.profiling import Profiler


class VPTreeNode:
    """Node in the VP-Tree."""

    __slots__ = ['item', 'threshold', 'left', 'right']

    def __init__(self, item: Any):
        self.item = item
        # Meaningless on leaves, never read there.
        self.threshold: float = 0.0
        self.left: Optional[VPTreeNode] = None
        self.right: Optional[VPTreeNode] = None

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


class VPTree(BaseKNNSearcher):
    """
    Vantage-point tree for exact k-NN search under a user supplied metric.

    Parameters
    ----------
    metric : callable or str
        Distance function ``metric(a, b) -> float``, or the name of one of
        the metrics in ``vptree.distances.METRICS``. It must satisfy the
        metric axioms; this is trusted, not checked.
    items : iterable, default=()
        Items to index. The iterable is copied, never modified.
    random_state : int, np.random.Generator or None, default=None
        Seed for vantage point selection. None falls back to VPTREE_SEED,
        and to fresh entropy if that is unset.
    """

    def __init__(
        self,
        metric: Union[str, Metric],
        items: Iterable[Any] = (),
        random_state: Optional[Union[int, np.random.Generator]] = None
    ):
        super().__init__(items)
        self.metric = get_metric(metric)
        if random_state is None:
            random_state = vp_config.runtime_config().seed
        self.random_state = random_state
        self.root: Optional[VPTreeNode] = None
        self.profiler = Profiler.from_env()
        self._size = 0
        self._build_dist_count = 0

    def fit(self) -> 'VPTree':
        """Build the tree. Calling it again on a built tree is a no-op."""
        if self.is_fitted:
            return self

        rng = np.random.default_rng(self.random_state)

        t0 = time.perf_counter()
        with self.profiler.time("build"):
            # _build_tree consumes its partitions
            self.root, self._build_dist_count = self._build_tree(list(self.dataset), rng)
        self._build_time = time.perf_counter() - t0

        self._size = self.n
        self.profiler.count("build_dist_count", self._build_dist_count)
        self.is_fitted = True

        logger = get_logger("vp_tree")
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Built VP-tree: %d items, depth %d, %d metric evaluations in %.6fs",
                self._size, self.depth(), self._build_dist_count, self._build_time,
            )
        return self

    def _build_tree(
        self,
        items: List[Any],
        rng: np.random.Generator
    ) -> Tuple[Optional[VPTreeNode], int]:
        """Partition ``items`` into a tree. Returns (root, metric evaluations)."""
        if not items:
            return None, 0

        metric = self.metric
        root: Optional[VPTreeNode] = None
        dist_count = 0

        # (partition, parent, attach as left child)
        stack: List[Tuple[List[Any], Optional[VPTreeNode], bool]] = [(items, None, False)]

        while stack:
            partition, parent, is_left = stack.pop()

            # Take a random vantage point out of the partition
            idx = int(rng.integers(len(partition)))
            partition[idx], partition[-1] = partition[-1], partition[idx]
            node = VPTreeNode(partition.pop())

            if parent is None:
                root = node
            elif is_left:
                parent.left = node
            else:
                parent.right = node

            if not partition:
                continue

            distances = np.fromiter(
                (metric(item, node.item) for item in partition),
                dtype=np.float64,
                count=len(partition),
            )
            dist_count += len(partition)

            # Sort by distance to the vantage point and split at the median
            order = np.argsort(distances, kind='stable')
            sorted_dists = distances[order]
            threshold = float(sorted_dists[len(partition) // 2])
            node.threshold = threshold

            # Everything before the first distance >= threshold is strictly
            # closer; ties with the median (and duplicates at 0) go right.
            split = int(np.searchsorted(sorted_dists, threshold, side='left'))
            near = [partition[i] for i in order[:split]]
            far = [partition[i] for i in order[split:]]

            if far:
                stack.append((far, node, False))
            if near:
                stack.append((near, node, True))

        return root, dist_count

    def search(
        self,
        target: Any,
        params: Optional[SearchParameters] = None,
        return_stats: bool = False
    ) -> Union[List[Tuple[Any, float]], Tuple[List[Tuple[Any, float]], Dict[str, Any]]]:
        """
        Find the k nearest neighbours of ``target``.

        Parameters
        ----------
        target : Any
            Query item. Need not be stored in the tree.
        params : SearchParameters or None
            k and the initial radius. Defaults to k=1, unbounded.
        return_stats : bool, default=False
            Whether to also return per-call statistics.

        Returns
        -------
        results : list of (item, distance)
            At most k pairs, ascending by distance. Ties come back in
            no particular order.
        stats : dict, optional
            ``dist_count`` (metric evaluations), ``scan_ratio``
            (dist_count / tree size) and ``tau`` (final radius).

        Raises
        ------
        RuntimeError
            If the tree was given items but ``fit()`` was never called.
        """
        if not self.is_fitted and self.n > 0:
            raise RuntimeError("VPTree has items but was never built; call fit() first")
        if params is None:
            params = default_search_parameters()

        k = params.num_results
        tau = params.max_distance

        if k < 1 or self.root is None:
            results: List[Tuple[Any, float]] = []
            if return_stats:
                return results, {'dist_count': 0, 'scan_ratio': 0.0, 'tau': tau}
            return results

        with self.profiler.time("search"):
            results, dist_count, tau = self._search(target, k, tau)
        self.profiler.count("search_dist_count", dist_count)

        if return_stats:
            stats = {
                'dist_count': dist_count,
                'scan_ratio': dist_count / self._size,
                'tau': tau,
            }
            return results, stats
        return results

    def _search(
        self,
        target: Any,
        k: int,
        tau: float
    ) -> Tuple[List[Tuple[Any, float]], int, float]:
        """Walk the tree. Returns (results, metric evaluations, final tau)."""
        metric = self.metric
        heap = BoundedMaxHeap(k)
        dist_count = 0

        # Entries are (node, deferred). A deferred entry carries the parent's
        # (dist, threshold, is_left) and is re-checked against tau when
        # popped, after the sibling subtree has been fully searched.
        stack: List[Tuple[VPTreeNode, Optional[Tuple[float, float, bool]]]] = [(self.root, None)]

        while stack:
            node, deferred = stack.pop()

            if deferred is not None:
                parent_dist, parent_threshold, is_left = deferred
                if is_left and parent_dist - tau > parent_threshold:
                    continue
                if not is_left and parent_dist + tau < parent_threshold:
                    continue

            dist = metric(node.item, target)
            dist_count += 1

            if dist < tau:
                heap.push(dist, node.item)
                if heap.is_full():
                    tau = heap.peek_max()[0]

            if node.is_leaf:
                continue

            threshold = node.threshold
            if dist < threshold:
                # Near side is left: search it first, far side afterwards
                if node.right is not None:
                    stack.append((node.right, (dist, threshold, False)))
                if node.left is not None and dist - tau <= threshold:
                    stack.append((node.left, None))
            else:
                if node.left is not None:
                    stack.append((node.left, (dist, threshold, True)))
                if node.right is not None and dist + tau >= threshold:
                    stack.append((node.right, None))

        # Heap drains largest-first
        drained = heap.drain()
        drained.reverse()
        return [(item, dist) for dist, item in drained], dist_count, tau

    def search_batch(
        self,
        targets: Iterable[Any],
        params: Optional[SearchParameters] = None
    ) -> List[List[Tuple[Any, float]]]:
        """Search each target in turn."""
        return [self.search(target, params) for target in targets]

    def nearest(self, target: Any) -> Optional[Tuple[Any, float]]:
        """Return the single nearest (item, distance), or None if empty."""
        results = self.search(target, default_search_parameters())
        return results[0] if results else None

    def nodes(self) -> Iterator[VPTreeNode]:
        """Iterate over all nodes in pre-order."""
        stack = [self.root] if self.root is not None else []
        while stack:
            node = stack.pop()
            yield node
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)

    def items(self) -> List[Any]:
        """All stored items, pre-order."""
        return [node.item for node in self.nodes()]

    def depth(self) -> int:
        """Number of levels; 0 for an empty tree."""
        max_depth = 0
        stack = [(self.root, 1)] if self.root is not None else []
        while stack:
            node, level = stack.pop()
            max_depth = max(max_depth, level)
            if node.left is not None:
                stack.append((node.left, level + 1))
            if node.right is not None:
                stack.append((node.right, level + 1))
        return max_depth

    def is_empty(self) -> bool:
        return self.root is None

    @property
    def build_dist_count(self) -> int:
        """Metric evaluations spent building the tree."""
        return self._build_dist_count

    def __len__(self) -> int:
        return self._size

    def __repr__(self) -> str:
        return f"VPTree(size={self._size}, metric={getattr(self.metric, '__name__', self.metric)!r})"


def build(
    metric: Union[str, Metric],
    items: Iterable[Any],
    random_state: Optional[Union[int, np.random.Generator]] = None
) -> VPTree:
    """Build a VP-tree over ``items``. Empty input gives an empty tree."""
    return VPTree(metric, items, random_state=random_state).fit()
