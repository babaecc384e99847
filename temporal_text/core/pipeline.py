"""
Frame-processing pipeline for Temporal Text.

Wires one StabilityTracker, one RankedCandidateQueue and the periodic flush
together. Frames are processed synchronously on the caller's thread; the
flush runs on its own background thread.
"""

import logging
import time
from typing import Callable, Iterable, List, Optional

from tqdm import tqdm

from .config import MonitorConfig
from .flush import PeriodicFlushController
from .notify import (
    HttpNotificationSink, LoggingNotificationSink, NotificationDispatcher, NotificationSink
)
from .ranking import RankedCandidateQueue
from .tracking import StabilityTracker
from .utils import Candidate, FrameBatch, StableResult, clean_string

logger = logging.getLogger(__name__)


def build_sink(config: MonitorConfig) -> NotificationSink:
    """HTTP sink when an endpoint is configured, log-only otherwise."""
    if config.sink_endpoint:
        return HttpNotificationSink(
            config.sink_endpoint,
            timeout=config.sink_timeout,
            max_retries=config.sink_max_retries
        )
    logger.info("[Pipeline] No sink endpoint configured, notifications are logged only")
    return LoggingNotificationSink()


class TextMonitorPipeline:
    """Main pipeline: stability tracking plus periodic ranked flush."""

    def __init__(
        self,
        config: Optional[MonitorConfig] = None,
        sink: Optional[NotificationSink] = None,
        on_stable: Optional[Callable[[StableResult], None]] = None,
        on_flush: Optional[Callable[[Optional[Candidate]], None]] = None
    ):
        self.config = (config or MonitorConfig()).validate()
        self.is_interesting = self.config.build_predicate()
        self.on_stable = on_stable

        # Initialize components
        self.tracker = StabilityTracker(
            window_size=self.config.window_size,
            stable_threshold=self.config.stable_threshold
        )
        self.queue = RankedCandidateQueue()
        self.dispatcher = NotificationDispatcher(
            sink if sink is not None else build_sink(self.config),
            max_workers=self.config.dispatch_workers
        )
        self.flusher = PeriodicFlushController(
            self.queue,
            self.dispatcher,
            interval=self.config.flush_interval,
            on_flush=on_flush
        )
        self._next_frame_index = 0

    def process_frame(
        self,
        strings: Iterable[str],
        frame_index: Optional[int] = None
    ) -> Optional[StableResult]:
        """
        Process one frame's recognized strings.

        Args:
            strings: Raw candidate strings for the frame
            frame_index: Frame number; defaults to a running counter

        Returns:
            StableResult if a string became stable this frame, else None
        """
        if frame_index is None:
            frame_index = self._next_frame_index
        self._next_frame_index = frame_index + 1

        raw = list(strings)

        for text in raw:
            if text and self.is_interesting(text):
                priority = self.queue.insert_or_escalate(text)
                logger.debug("[Pipeline] Queued %r (priority %d)", text, priority)

        cleaned = [c for c in (clean_string(s) for s in raw) if c is not None]
        self.tracker.observe(cleaned)

        stable_text = self.tracker.stable()
        if stable_text is None:
            return None

        result = StableResult(
            text=stable_text,
            count=self.tracker.count(stable_text),
            frame_index=frame_index
        )
        self.tracker.forget(stable_text)
        logger.info("[Pipeline] Stable at frame %d: %r", frame_index, stable_text)

        if self.on_stable is not None:
            self.on_stable(result)
        return result

    def flush(self) -> Optional[Candidate]:
        return self.flusher.flush()

    def run(
        self,
        batches: Iterable[FrameBatch],
        fps: Optional[float] = None,
        progress: bool = True
    ) -> List[StableResult]:
        """
        Replay recorded batches through the pipeline.

        Args:
            batches: Frames in order
            fps: Pace frames at this rate; None processes as fast as possible
            progress: Show a progress bar

        Returns:
            Every StableResult produced during the replay
        """
        frame_period = 1.0 / fps if fps else 0.0
        results = []

        for batch in tqdm(batches, desc="Processing frames", disable=not progress):
            t0 = time.monotonic()
            result = self.process_frame(batch.strings, batch.frame_index)
            if result is not None:
                results.append(result)

            if frame_period:
                remaining = frame_period - (time.monotonic() - t0)
                if remaining > 0:
                    time.sleep(remaining)

        return results

    def start(self) -> None:
        self.flusher.start()

    def stop(self, wait: bool = True) -> None:
        self.flusher.stop()
        self.dispatcher.shutdown(wait=wait)

    def __enter__(self) -> "TextMonitorPipeline":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
