"""
Temporal stability tracking for per-frame recognition results.

A string is considered stable once it has been seen in at least
``stable_threshold`` of the last ``window_size`` frames. Single-frame
recognition noise never reaches that count and is dropped as the window
slides forward.
"""

from collections import Counter, deque
from typing import Deque, Dict, Iterable, Optional


DEFAULT_WINDOW_SIZE = 25
DEFAULT_STABLE_THRESHOLD = 10


def validate_window(window_size: int, stable_threshold: int) -> None:
    """Raise ValueError for a window/threshold pair that cannot work."""
    if not isinstance(window_size, int) or window_size < 1:
        raise ValueError(f"window_size must be a positive integer, got {window_size!r}")
    if not isinstance(stable_threshold, int) or stable_threshold < 2:
        raise ValueError(
            f"stable_threshold must be an integer >= 2, got {stable_threshold!r}"
        )
    if stable_threshold > window_size:
        raise ValueError(
            f"stable_threshold ({stable_threshold}) cannot exceed window_size ({window_size})"
        )


class StabilityTracker:
    """Sliding-window vote over the strings seen in recent frames."""

    def __init__(
        self,
        window_size: int = DEFAULT_WINDOW_SIZE,
        stable_threshold: int = DEFAULT_STABLE_THRESHOLD
    ):
        validate_window(window_size, stable_threshold)
        self.window_size = window_size
        self.stable_threshold = stable_threshold
        # Each frame is an ordered set (dict keys) of distinct strings.
        self._window: Deque[Dict[str, None]] = deque(maxlen=window_size)
        self._counts: Counter = Counter()
        self.frames_observed = 0

    def __len__(self) -> int:
        return len(self._window)

    def observe(self, batch: Iterable[str]) -> None:
        """Record one frame's strings, evicting the oldest frame when full."""
        frame = dict.fromkeys(s for s in batch if s)

        if len(self._window) == self.window_size:
            evicted = self._window[0]
            for text in evicted:
                self._counts[text] -= 1
                if self._counts[text] <= 0:
                    del self._counts[text]

        self._window.append(frame)
        self._counts.update(frame.keys())
        self.frames_observed += 1

    def count(self, text: str) -> int:
        """Number of frames in the current window that contain ``text``."""
        return self._counts.get(text, 0)

    def stable(self) -> Optional[str]:
        """
        Return the string meeting the stability threshold, or None.

        Ties on count go to the most recently seen string, then to the one
        first seen earliest in the window.
        """
        qualified = [t for t, c in self._counts.items() if c >= self.stable_threshold]
        if not qualified:
            return None
        if len(qualified) == 1:
            return qualified[0]

        last_seen: Dict[str, int] = {}
        first_seen: Dict[str, tuple] = {}
        wanted = set(qualified)
        for frame_pos, frame in enumerate(self._window):
            for order, text in enumerate(frame):
                if text in wanted:
                    last_seen[text] = frame_pos
                    first_seen.setdefault(text, (frame_pos, order))

        return min(
            qualified,
            key=lambda t: (-self._counts[t], -last_seen[t], first_seen[t])
        )

    def forget(self, text: str) -> None:
        """Drop all history of ``text`` so it must re-qualify from scratch."""
        if text not in self._counts:
            return
        for frame in self._window:
            frame.pop(text, None)
        del self._counts[text]

    def clear(self) -> None:
        """Drop the whole window."""
        self._window.clear()
        self._counts.clear()
