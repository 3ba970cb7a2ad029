"""
Binary min-heap frontier used by A* search.

Entries are ``(priority, insertion_seq, index)`` tuples so that equal
priorities pop in insertion order and node indices are never compared.
"""

import heapq
import itertools
from typing import List, Tuple


class PriorityFrontier:
    """Min-priority queue of node indices with stable tie-breaking."""

    def __init__(self):
        self._heap: List[Tuple[int, int, int]] = []
        self._counter = itertools.count()

    def insert(self, index: int, priority: int) -> None:
        heapq.heappush(self._heap, (priority, next(self._counter), index))

    def remove_root(self) -> int:
        """Remove and return the index with the smallest priority."""
        if not self._heap:
            raise IndexError("remove_root() called on an empty frontier")
        return heapq.heappop(self._heap)[2]

    def peek_priority(self) -> int:
        if not self._heap:
            raise IndexError("peek_priority() called on an empty frontier")
        return self._heap[0][0]

    def clear(self) -> None:
        self._heap.clear()
        self._counter = itertools.count()

    @property
    def count(self) -> int:
        return len(self._heap)

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)
