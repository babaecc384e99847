"""
Periodic flush of the ranked candidate queue.

Every ``interval`` seconds the controller takes the top candidate, hands its
text to the notification dispatcher and resets the queue, whether or not
anything was taken.
"""

import logging
import threading
from typing import Callable, Optional

from .notify import NotificationDispatcher
from .ranking import RankedCandidateQueue
from .utils import Candidate

logger = logging.getLogger(__name__)

DEFAULT_FLUSH_INTERVAL = 20.0


class PeriodicFlushController:
    """Fixed-interval flush driver running on a background thread."""

    def __init__(
        self,
        queue: RankedCandidateQueue,
        dispatcher: Optional[NotificationDispatcher],
        interval: float = DEFAULT_FLUSH_INTERVAL,
        on_flush: Optional[Callable[[Optional[Candidate]], None]] = None
    ):
        if interval <= 0:
            raise ValueError(f"Flush interval must be positive, got {interval}")
        self.queue = queue
        self.dispatcher = dispatcher
        self.interval = interval
        self.on_flush = on_flush
        self.ticks = 0

        self._flush_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def flush(self) -> Optional[Candidate]:
        """Extract the top candidate, dispatch it, and reset the queue.

        Serialized: a flush started while another is in flight waits for it.
        """
        with self._flush_lock:
            candidate = None
            try:
                candidate = self.queue.extract_max()
                if candidate is not None:
                    logger.info(
                        "[Flush] Posting: %r (priority %d)", candidate.text, candidate.priority
                    )
                    if self.dispatcher is not None:
                        self.dispatcher.dispatch(candidate.text)
                else:
                    logger.debug("[Flush] Nothing queued")
            finally:
                # The epoch ends even when delivery could not be scheduled.
                self.queue.reset()
                self.ticks += 1

        if self.on_flush is not None:
            self.on_flush(candidate)
        return candidate

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self.flush()
            except Exception:
                # Keep the cadence alive; the traceback goes to the log.
                logger.exception("[Flush] Tick failed")

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="flush-controller", daemon=True
        )
        self._thread.start()
        logger.info("[Flush] Started (interval %.1fs)", self.interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        if self._thread is None:
            return
        self._stop_event.set()
        self._thread.join(timeout)
        self._thread = None
        logger.info("[Flush] Stopped after %d ticks", self.ticks)

    def __enter__(self) -> "PeriodicFlushController":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
