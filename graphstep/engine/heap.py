"""
Binary min-heap priority queue.

The queue uses lazy deletion: the same item may be pushed several times
with different priorities, and all of those entries stay live. Callers must
re-check their own "settled" marker after every pop and discard entries for
items they have already finalized. The heap never deduplicates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from graphstep.errors import EmptyQueueError

T = TypeVar("T")


@dataclass(frozen=True)
class HeapEntry(Generic[T]):
    """An (item, priority) pair stored in the heap."""

    item: T
    priority: float


class MinHeap(Generic[T]):
    """
    Array-backed binary min-heap of HeapEntry values.

    For index i: parent is (i - 1) // 2, children are 2i + 1 and 2i + 2.
    Ties between equal priorities are broken arbitrarily.
    """

    def __init__(self) -> None:
        self._heap: list[HeapEntry[T]] = []

    def push(self, item: T, priority: float) -> None:
        """Insert an entry in O(log n)."""
        self._heap.append(HeapEntry(item, priority))
        self._sift_up(len(self._heap) - 1)

    def pop(self) -> HeapEntry[T]:
        """
        Remove and return the minimum-priority entry in O(log n).

        Raises:
            EmptyQueueError: If the heap is empty
        """
        if not self._heap:
            raise EmptyQueueError("pop from empty heap")
        root = self._heap[0]
        last = self._heap.pop()
        if self._heap:
            self._heap[0] = last
            self._sift_down(0)
        return root

    def pop_or_none(self) -> HeapEntry[T] | None:
        """Like pop(), but returns None when empty."""
        if not self._heap:
            return None
        return self.pop()

    def peek(self) -> HeapEntry[T]:
        """Return the minimum entry without removing it."""
        if not self._heap:
            raise EmptyQueueError("peek at empty heap")
        return self._heap[0]

    def is_empty(self) -> bool:
        return not self._heap

    def size(self) -> int:
        return len(self._heap)

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def _sift_up(self, i: int) -> None:
        heap = self._heap
        while i > 0:
            parent = (i - 1) // 2
            if heap[parent].priority <= heap[i].priority:
                break
            heap[parent], heap[i] = heap[i], heap[parent]
            i = parent

    def _sift_down(self, i: int) -> None:
        heap = self._heap
        n = len(heap)
        while True:
            left, right = 2 * i + 1, 2 * i + 2
            smallest = i
            if left < n and heap[left].priority < heap[smallest].priority:
                smallest = left
            if right < n and heap[right].priority < heap[smallest].priority:
                smallest = right
            if smallest == i:
                break
            heap[i], heap[smallest] = heap[smallest], heap[i]
            i = smallest

    def __repr__(self) -> str:
        return f"MinHeap(size={len(self._heap)})"
