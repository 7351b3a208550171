"""The CUBIC congestion control algorithm."""

from __future__ import annotations

import enum
import threading
import time

CUBIC_BETA = 0.7
CUBIC_C = 0.4


class _Mode(enum.Enum):
    SLOW_START = enum.auto()
    NORMAL = enum.auto()


class CubicSendAlgorithm:
    """Tracks a congestion window that grows on acks and shrinks on loss."""

    def __init__(self, min_window_size: int, max_window_size: int) -> None:
        if min_window_size > max_window_size:
            raise ValueError(
                "minimum congestion window size is greater than maximum congestion window size"
            )
        self._min = min_window_size
        self._max = max_window_size
        self._mode = _Mode.SLOW_START
        self._window = min_window_size
        self._window_before_reduction = 0
        self._last_reduction_time = 0.0
        self._accumulated_acks = 0
        self._lock = threading.Lock()

    @property
    def congestion_window_size(self) -> int:
        """The current congestion window size."""
        with self._lock:
            return self._window

    @property
    def in_slow_start(self) -> bool:
        """Whether the algorithm is in slow start mode."""
        with self._lock:
            return self._mode is _Mode.SLOW_START

    def on_ack(self) -> int:
        """Update the window after an acknowledgement and return it."""
        with self._lock:
            if self._mode is _Mode.SLOW_START:
                self._window += 1
                return self._clamp()
            self._accumulated_acks += 1
            w = float(self._window_before_reduction)
            k = (w * (1 - CUBIC_BETA) / CUBIC_C) ** (1.0 / 3.0)
            t = time.time() - self._last_reduction_time
            growth = CUBIC_C * (t - k) ** 3 + w
            self._window = max(int(growth), 0) + self._accumulated_acks // 16
            return self._clamp()

    def on_loss(self) -> int:
        """Update the window after a packet loss and return it."""
        with self._lock:
            self._mode = _Mode.NORMAL
            self._last_reduction_time = time.time()
            self._window_before_reduction = self._window
            self._accumulated_acks = 0
            self._window = int(self._window * CUBIC_BETA)
            return self._clamp()

    def on_timeout(self) -> int:
        """Reset the window after a connection timeout and return it."""
        with self._lock:
            self._mode = _Mode.SLOW_START
            self._window = self._min
            self._window_before_reduction = 0
            self._last_reduction_time = 0.0
            self._accumulated_acks = 0
            return self._window

    def _clamp(self) -> int:
        self._window = min(max(self._window, self._min), self._max)
        return self._window