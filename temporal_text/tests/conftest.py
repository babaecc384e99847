"""
Pytest configuration and shared fixtures for Temporal Text tests.

This module provides:
- Component fixtures (tracker, queue, pipeline) with small test windows
- A recording notification sink standing in for the network
- Recorded frame batch files written to tmp_path

Usage:
    pytest temporal_text/tests/ -v
    pytest temporal_text/tests/ -v -m "not slow"
"""

import json
import sys
import threading
from pathlib import Path
from typing import List

import pytest

# Add repository root to path for imports
REPO_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(REPO_ROOT))

from temporal_text.core import (  # noqa: E402
    MonitorConfig,
    NotificationSink,
    RankedCandidateQueue,
    StabilityTracker,
    TextMonitorPipeline,
)


# =============================================================================
# Fakes
# =============================================================================

class RecordingSink(NotificationSink):
    """Collects sent texts instead of posting them."""

    def __init__(self):
        self.sent: List[str] = []
        self.closed = False
        self.received = threading.Event()
        self._lock = threading.Lock()

    def send(self, text: str) -> None:
        with self._lock:
            self.sent.append(text)
        self.received.set()

    def close(self) -> None:
        self.closed = True


# =============================================================================
# Component Fixtures
# =============================================================================

@pytest.fixture
def tracker() -> StabilityTracker:
    """Tracker with the small window used throughout the scenarios (W=3, K=2)."""
    return StabilityTracker(window_size=3, stable_threshold=2)


@pytest.fixture
def queue() -> RankedCandidateQueue:
    return RankedCandidateQueue()


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def small_config() -> MonitorConfig:
    return MonitorConfig(window_size=3, stable_threshold=2, flush_interval=20.0)


@pytest.fixture
def pipeline(small_config, recording_sink):
    """Pipeline with a recording sink; the flush thread is not started."""
    p = TextMonitorPipeline(small_config, sink=recording_sink)
    yield p
    p.stop()


# =============================================================================
# Recorded Input Fixtures
# =============================================================================

SAMPLE_BATCHES = [
    ["X", "Y", "Who?"],
    ["X", "Z"],
    ["X", "W", "Who?"],
    ["Why?"],
    ["Who?"],
]


@pytest.fixture
def sample_batches() -> List[List[str]]:
    return [list(b) for b in SAMPLE_BATCHES]


@pytest.fixture
def batches_json(tmp_path, sample_batches) -> Path:
    path = tmp_path / "frames.json"
    path.write_text(json.dumps(sample_batches), encoding="utf-8")
    return path


@pytest.fixture
def batches_jsonl(tmp_path, sample_batches) -> Path:
    path = tmp_path / "frames.jsonl"
    lines = [
        json.dumps({"frame_index": 100 + i, "strings": strings})
        for i, strings in enumerate(sample_batches)
    ]
    path.write_text("\n".join(lines) + "\n\n", encoding="utf-8")
    return path
