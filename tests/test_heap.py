"""
Tests for the bounded max-heap.
"""

import numpy as np
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from vptree.utils.heap import BoundedMaxHeap


class Unorderable:
    """Items that cannot be compared, like arbitrary user objects."""

    def __init__(self, name):
        self.name = name

    def __lt__(self, other):
        raise TypeError("not orderable")

    __gt__ = __lt__


class TestBoundedMaxHeap:
    """Test suite for BoundedMaxHeap."""

    def test_rejects_non_positive_capacity(self):
        with pytest.raises(ValueError):
            BoundedMaxHeap(0)

    def test_peek_max_tracks_largest(self):
        heap = BoundedMaxHeap(5)
        for d in [3.0, 1.0, 4.0, 1.5]:
            heap.push(d, f"item{d}")

        assert heap.peek_max() == (4.0, "item4.0")
        assert len(heap) == 4
        assert not heap.is_full()

    def test_push_evicts_maximum_when_full(self):
        heap = BoundedMaxHeap(3)
        for d in [5.0, 2.0, 8.0]:
            heap.push(d, d)
        assert heap.is_full()

        heap.push(1.0, 1.0)

        assert len(heap) == 3
        assert sorted(d for d, _ in heap.get_sorted()) == [1.0, 2.0, 5.0]
        assert heap.peek_max()[0] == 5.0

    def test_offer_rejects_worse_candidate(self):
        heap = BoundedMaxHeap(2)
        assert heap.offer(1.0, "a")
        assert heap.offer(2.0, "b")
        assert not heap.offer(3.0, "c")
        assert heap.offer(0.5, "d")

        assert [item for _, item in heap.get_sorted()] == ["d", "a"]

    def test_drain_is_worst_first(self):
        np.random.seed(42)
        values = np.random.rand(50)
        heap = BoundedMaxHeap(10)
        for i, v in enumerate(values):
            heap.offer(float(v), i)

        drained = heap.drain()

        distances = [d for d, _ in drained]
        assert distances == sorted(distances, reverse=True)
        assert sorted(distances) == sorted(values)[:10]
        assert len(heap) == 0
        assert not heap

    def test_pop_from_empty_heap_raises(self):
        heap = BoundedMaxHeap(1)
        with pytest.raises(IndexError):
            heap.pop_max()

    def test_peek_on_empty_heap(self):
        heap = BoundedMaxHeap(1)
        assert heap.peek_max()[0] == float('inf')

    def test_items_are_never_compared(self):
        heap = BoundedMaxHeap(3)
        for d in [1.0, 1.0, 2.0, 1.0, 0.5]:
            heap.push(d, Unorderable(str(d)))

        assert len(heap) == 3
        assert [d for d, _ in heap.drain()] == [1.0, 1.0, 0.5]


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
