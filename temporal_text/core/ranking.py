"""
Ranked candidate queue.

Binary max-heap of text candidates keyed by content, with an index from
text to heap position so repeat sightings escalate the existing entry in
O(log n) instead of adding a duplicate.
"""

import threading
from typing import Dict, List, Optional

from .utils import Candidate


class _Entry:
    __slots__ = ("text", "priority", "seq")

    def __init__(self, text: str, priority: int, seq: int):
        self.text = text
        self.priority = priority
        self.seq = seq

    def outranks(self, other: "_Entry") -> bool:
        # Equal priority: earlier insertion wins.
        if self.priority != other.priority:
            return self.priority > other.priority
        return self.seq < other.seq

    def to_candidate(self) -> Candidate:
        return Candidate(text=self.text, priority=self.priority)


class RankedCandidateQueue:
    """Thread-safe priority queue of deduplicated text candidates.

    Priority starts at 1 and grows by 1 on each repeat sighting within an
    epoch. ``reset()`` empties the queue and starts a new epoch.
    """

    def __init__(self):
        self._heap: List[_Entry] = []
        self._index: Dict[str, int] = {}
        self._seq = 0
        self._lock = threading.Lock()
        self.epoch = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._heap)

    def __contains__(self, text: str) -> bool:
        return self.contains(text)

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    def insert_or_escalate(self, text: str) -> int:
        """Insert ``text`` with priority 1, or bump its priority by 1.

        Returns:
            The candidate's priority after the call.
        """
        with self._lock:
            pos = self._index.get(text)
            if pos is None:
                entry = _Entry(text, 1, self._seq)
                self._seq += 1
                self._heap.append(entry)
                pos = len(self._heap) - 1
                self._index[text] = pos
            else:
                entry = self._heap[pos]
                entry.priority += 1
            self._sift_up(pos)
            return entry.priority

    def peek_max(self) -> Optional[Candidate]:
        """Highest-priority candidate without removing it, or None."""
        with self._lock:
            if not self._heap:
                return None
            return self._heap[0].to_candidate()

    def extract_max(self) -> Optional[Candidate]:
        """Remove and return the highest-priority candidate, or None."""
        with self._lock:
            if not self._heap:
                return None

            top = self._heap[0]
            last = self._heap.pop()
            del self._index[top.text]

            if self._heap:
                self._heap[0] = last
                self._index[last.text] = 0
                self._sift_down(0)

            return top.to_candidate()

    def reset(self) -> None:
        """Discard every candidate and start a new epoch."""
        with self._lock:
            self._heap.clear()
            self._index.clear()
            self._seq = 0
            self.epoch += 1

    def contains(self, text: str) -> bool:
        with self._lock:
            return text in self._index

    def priority_of(self, text: str) -> Optional[int]:
        with self._lock:
            pos = self._index.get(text)
            return self._heap[pos].priority if pos is not None else None

    def snapshot(self) -> List[Candidate]:
        """All candidates in rank order (highest first)."""
        with self._lock:
            entries = sorted(self._heap, key=lambda e: (-e.priority, e.seq))
            return [e.to_candidate() for e in entries]

    # -------------------------------------------------------------------------
    # Heap maintenance (lock held by caller)
    # -------------------------------------------------------------------------

    def _swap(self, i: int, j: int) -> None:
        heap = self._heap
        heap[i], heap[j] = heap[j], heap[i]
        self._index[heap[i].text] = i
        self._index[heap[j].text] = j

    def _sift_up(self, pos: int) -> None:
        heap = self._heap
        while pos > 0:
            parent = (pos - 1) // 2
            if not heap[pos].outranks(heap[parent]):
                break
            self._swap(pos, parent)
            pos = parent

    def _sift_down(self, pos: int) -> None:
        heap = self._heap
        size = len(heap)
        while True:
            best = pos
            left = 2 * pos + 1
            right = left + 1
            if left < size and heap[left].outranks(heap[best]):
                best = left
            if right < size and heap[right].outranks(heap[best]):
                best = right
            if best == pos:
                return
            self._swap(pos, best)
            pos = best
