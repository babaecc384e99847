"""
Notification sinks for flushed candidates.

A sink delivers one string out of process. Delivery failures are logged
here and never propagate back into the pipeline.
"""

import logging
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

import requests
from requests.adapters import HTTPAdapter

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
DEFAULT_MAX_RETRIES = 2
PAYLOAD_FIELD = "rawText"


class NotificationSink(ABC):
    """Accepts a single flushed string and delivers it somewhere."""

    @abstractmethod
    def send(self, text: str) -> None:
        """Deliver ``text``. Implementations must not raise on delivery failure."""

    def close(self) -> None:
        pass


class LoggingNotificationSink(NotificationSink):
    """Dry-run sink: only logs what would have been sent."""

    def send(self, text: str) -> None:
        logger.info("[Sink] Would post: %r", text)


class HttpNotificationSink(NotificationSink):
    """POSTs ``{"rawText": text}`` as JSON to a configured endpoint."""

    def __init__(
        self,
        endpoint: str,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        session: Optional[requests.Session] = None
    ):
        if not endpoint:
            raise ValueError("HttpNotificationSink requires an endpoint URL")
        self.endpoint = endpoint
        self.timeout = timeout
        self._owns_session = session is None
        self.session = session if session is not None else requests.Session()
        if self._owns_session:
            adapter = HTTPAdapter(max_retries=max_retries)
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)

    def send(self, text: str) -> None:
        logger.info("[Sink] Posting: %r", text)
        try:
            response = self.session.post(
                self.endpoint,
                json={PAYLOAD_FIELD: text},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.warning("[Sink] Delivery to %s failed: %s", self.endpoint, e)
            return

        try:
            body = response.json()
        except ValueError:
            logger.info("[Sink] Response %s (no JSON body)", response.status_code)
            return

        if isinstance(body, dict):
            logger.info("[Sink] Response %s: %s", response.status_code, body)
        else:
            logger.info("[Sink] Response %s (non-object JSON)", response.status_code)

    def close(self) -> None:
        if self._owns_session:
            self.session.close()


class NotificationDispatcher:
    """Fire-and-forget delivery on a bounded thread pool."""

    def __init__(self, sink: NotificationSink, max_workers: int = 2):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.sink = sink
        self.executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="notify"
        )

    def dispatch(self, text: str) -> Optional[Future]:
        """Queue ``text`` for delivery and return immediately.

        Returns None, after logging, when the dispatcher is already shut down.
        """
        try:
            future = self.executor.submit(self.sink.send, text)
        except RuntimeError as e:
            logger.warning("[Sink] Dropped %r, dispatcher unavailable: %s", text, e)
            return None
        future.add_done_callback(self._log_failure)
        return future

    @staticmethod
    def _log_failure(future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("[Sink] Notification raised: %r", exc)

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)
        self.sink.close()
