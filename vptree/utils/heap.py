"""
Bounded heap used by the VP-tree k-NN search.
"""

from typing import Any, List, Tuple


class BoundedMaxHeap:
    """
    Max heap of at most ``capacity`` (distance, item) pairs.

    The root always holds the largest distance, i.e. the worst of the
    current k best candidates. Sifting compares distances only, so items
    can be arbitrary (unorderable) objects.

    Parameters
    ----------
    capacity : int
        Maximum number of elements (k).
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"Heap capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.heap: List[Tuple[float, Any]] = []  # (distance, item)

    def push(self, distance: float, item: Any) -> None:
        """
        Insert an element, evicting the current maximum first if full.
        """
        if len(self.heap) >= self.capacity:
            self._heap_replace((distance, item))
        else:
            self._heap_push((distance, item))

    def offer(self, distance: float, item: Any) -> bool:
        """
        Try to add a new element.

        Returns True if element was added, False if rejected.
        """
        if len(self.heap) < self.capacity:
            self._heap_push((distance, item))
            return True
        elif distance < self.heap[0][0]:
            self._heap_replace((distance, item))
            return True
        return False

    def peek_max(self) -> Tuple[float, Any]:
        """Return the maximum element (k-th nearest)."""
        if not self.heap:
            return (float('inf'), None)
        return self.heap[0]

    def pop_max(self) -> Tuple[float, Any]:
        """Remove and return the maximum element."""
        if not self.heap:
            raise IndexError("pop from empty heap")

        max_item = self.heap[0]
        last = self.heap.pop()

        if self.heap:
            self.heap[0] = last
            self._sift_down(0)

        return max_item

    def is_full(self) -> bool:
        return len(self.heap) >= self.capacity

    def drain(self) -> List[Tuple[float, Any]]:
        """Pop every element, largest distance first. Empties the heap."""
        out = []
        while self.heap:
            out.append(self.pop_max())
        return out

    def get_sorted(self) -> List[Tuple[float, Any]]:
        """Return elements in ascending distance order without popping."""
        return sorted(self.heap, key=lambda entry: entry[0])

    def _heap_push(self, item: Tuple[float, Any]):
        """Push item onto heap."""
        self.heap.append(item)
        self._sift_up(len(self.heap) - 1)

    def _heap_replace(self, item: Tuple[float, Any]):
        """Replace root with new item and re-heapify."""
        self.heap[0] = item
        self._sift_down(0)

    def _sift_up(self, pos: int):
        """Move item at pos up to maintain heap property."""
        item = self.heap[pos]
        while pos > 0:
            parent_pos = (pos - 1) >> 1
            parent = self.heap[parent_pos]
            if item[0] > parent[0]:  # Max heap: larger goes up
                self.heap[pos] = parent
                pos = parent_pos
            else:
                break
        self.heap[pos] = item

    def _sift_down(self, pos: int):
        """Move item at pos down to maintain heap property."""
        n = len(self.heap)
        item = self.heap[pos]
        child_pos = 2 * pos + 1

        while child_pos < n:
            right_pos = child_pos + 1
            if right_pos < n and self.heap[right_pos][0] > self.heap[child_pos][0]:
                child_pos = right_pos

            if item[0] < self.heap[child_pos][0]:
                self.heap[pos] = self.heap[child_pos]
                pos = child_pos
                child_pos = 2 * pos + 1
            else:
                break

        self.heap[pos] = item

    def __len__(self) -> int:
        return len(self.heap)

    def __bool__(self) -> bool:
        return bool(self.heap)
