"""
Unit tests for the ranked candidate queue.

Covers:
- Insert-or-escalate deduplication
- Max extraction order and tie-breaking
- Epoch reset
- Concurrent access from several threads

Usage:
    pytest temporal_text/tests/test_ranking.py -v
"""

import random
import threading
from collections import Counter

from temporal_text.core import Candidate, RankedCandidateQueue


# =============================================================================
# Insert / Escalate Tests
# =============================================================================

class TestInsertOrEscalate:

    def test_first_sighting_has_priority_one(self, queue):
        assert queue.insert_or_escalate("A?") == 1
        assert queue.contains("A?")
        assert queue.priority_of("A?") == 1
        assert len(queue) == 1

    def test_repeat_sighting_escalates_without_duplicate(self, queue):
        for _ in range(4):
            queue.insert_or_escalate("A?")
        assert len(queue) == 1
        assert queue.priority_of("A?") == 4

    def test_priority_equals_sighting_count(self, queue):
        rng = random.Random(7)
        texts = [rng.choice(["a?", "b?", "c?", "d?", "e?"]) for _ in range(200)]
        for text in texts:
            queue.insert_or_escalate(text)

        counts = Counter(texts)
        assert len(queue) == len(counts)
        for text, count in counts.items():
            assert queue.priority_of(text) == count

    def test_text_key_is_case_sensitive(self, queue):
        queue.insert_or_escalate("abc?")
        queue.insert_or_escalate("ABC?")
        assert len(queue) == 2

    def test_unknown_text(self, queue):
        assert not queue.contains("nope")
        assert "nope" not in queue
        assert queue.priority_of("nope") is None


# =============================================================================
# Extraction Tests
# =============================================================================

class TestExtractMax:

    def test_empty_queue_yields_none(self, queue):
        assert queue.peek_max() is None
        assert queue.extract_max() is None

    def test_most_sighted_wins(self, queue):
        for text in ["A?", "B?", "A?", "A?"]:
            queue.insert_or_escalate(text)

        assert queue.peek_max() == Candidate("A?", 3)
        assert queue.extract_max() == Candidate("A?", 3)
        assert queue.extract_max() == Candidate("B?", 1)
        assert queue.extract_max() is None

    def test_peek_does_not_remove(self, queue):
        queue.insert_or_escalate("A?")
        queue.peek_max()
        assert len(queue) == 1
        assert queue.contains("A?")

    def test_extract_removes_from_index(self, queue):
        queue.insert_or_escalate("A?")
        queue.extract_max()
        assert not queue.contains("A?")
        assert queue.insert_or_escalate("A?") == 1

    def test_ties_go_to_earliest_insertion(self, queue):
        for text in ["first?", "second?", "third?"]:
            queue.insert_or_escalate(text)
        assert [queue.extract_max().text for _ in range(3)] == ["first?", "second?", "third?"]

    def test_escalated_entry_overtakes_earlier_ones(self, queue):
        for text in ["a?", "b?", "c?", "d?", "e?"]:
            queue.insert_or_escalate(text)
        queue.insert_or_escalate("e?")
        queue.insert_or_escalate("c?")
        queue.insert_or_escalate("e?")

        assert queue.extract_max() == Candidate("e?", 3)
        assert queue.extract_max() == Candidate("c?", 2)
        assert queue.extract_max() == Candidate("a?", 1)

    def test_extraction_order_is_sorted(self, queue):
        rng = random.Random(11)
        texts = [f"t{rng.randint(0, 30)}?" for _ in range(500)]
        for text in texts:
            queue.insert_or_escalate(text)

        priorities = []
        while True:
            candidate = queue.extract_max()
            if candidate is None:
                break
            priorities.append(candidate.priority)

        assert priorities == sorted(priorities, reverse=True)
        assert sum(priorities) == len(texts)

    def test_snapshot_in_rank_order(self, queue):
        for text in ["b?", "a?", "a?", "c?"]:
            queue.insert_or_escalate(text)
        assert queue.snapshot() == [Candidate("a?", 2), Candidate("b?", 1), Candidate("c?", 1)]
        assert len(queue) == 3


# =============================================================================
# Reset Tests
# =============================================================================

class TestReset:

    def test_reset_empties_queue(self, queue):
        for text in ["A?", "B?", "A?"]:
            queue.insert_or_escalate(text)
        queue.reset()

        assert queue.peek_max() is None
        assert len(queue) == 0
        assert not queue.contains("A?")
        assert not queue.contains("B?")

    def test_reset_starts_new_epoch(self, queue):
        assert queue.epoch == 0
        queue.reset()
        queue.reset()
        assert queue.epoch == 2

    def test_priorities_restart_after_reset(self, queue):
        queue.insert_or_escalate("A?")
        queue.insert_or_escalate("A?")
        queue.reset()
        assert queue.insert_or_escalate("A?") == 1


# =============================================================================
# Concurrency Tests
# =============================================================================

class TestConcurrency:

    def test_concurrent_escalation_counts_every_sighting(self, queue):
        texts = ["x?", "y?", "z?"]
        per_thread = 300
        threads = [
            threading.Thread(
                target=lambda t=t: [queue.insert_or_escalate(t) for _ in range(per_thread)]
            )
            for t in texts * 2
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(queue) == 3
        for text in texts:
            assert queue.priority_of(text) == 2 * per_thread

    def test_concurrent_insert_and_extract_never_duplicates(self, queue):
        stop = threading.Event()
        extracted = []

        def consumer():
            while not stop.is_set():
                candidate = queue.extract_max()
                if candidate is not None:
                    extracted.append(candidate)

        worker = threading.Thread(target=consumer)
        worker.start()
        for i in range(2000):
            queue.insert_or_escalate(f"t{i % 17}?")
        stop.set()
        worker.join()

        remaining = queue.snapshot()
        assert len({c.text for c in remaining}) == len(remaining)
        total = sum(c.priority for c in extracted) + sum(c.priority for c in remaining)
        assert total == 2000
