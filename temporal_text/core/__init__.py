"""
Core module for Temporal Text.

This package contains the components of the text monitor:
- utils: Data classes, text cleaning and recorded-frame I/O
- tracking: Sliding-window stability tracker
- ranking: Deduplicating priority queue of interesting candidates
- notify: Notification sinks and fire-and-forget dispatch
- flush: Fixed-interval flush controller
- config: Layered configuration (defaults, YAML, environment, overrides)
- pipeline: Per-frame processing glue
"""

# Data classes
from .utils import (
    FrameBatch,
    Candidate,
    StableResult,
)

# File I/O utilities
from .utils import (
    clean_string,
    load_frame_batches,
    save_events,
)

# Components
from .tracking import StabilityTracker
from .ranking import RankedCandidateQueue
from .notify import (
    NotificationSink,
    HttpNotificationSink,
    LoggingNotificationSink,
    NotificationDispatcher,
)
from .flush import PeriodicFlushController

# Configuration
from .config import MonitorConfig, load_config, contains_marker, matches_pattern

# Main pipeline
from .pipeline import TextMonitorPipeline, build_sink


__all__ = [
    # Data classes
    "FrameBatch",
    "Candidate",
    "StableResult",
    # File I/O
    "clean_string",
    "load_frame_batches",
    "save_events",
    # Components
    "StabilityTracker",
    "RankedCandidateQueue",
    "NotificationSink",
    "HttpNotificationSink",
    "LoggingNotificationSink",
    "NotificationDispatcher",
    "PeriodicFlushController",
    # Configuration
    "MonitorConfig",
    "load_config",
    "contains_marker",
    "matches_pattern",
    # Pipeline
    "TextMonitorPipeline",
    "build_sink",
]
