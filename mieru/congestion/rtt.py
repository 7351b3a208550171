"""Round-trip time statistics."""

from __future__ import annotations

import struct
from datetime import timedelta

RTT_ALPHA = 0.125
RTT_BETA = 0.25
DEFAULT_INITIAL_RTT = timedelta(milliseconds=500)

_ZERO = timedelta(0)
_MICROSECOND = timedelta(microseconds=1)
_MIN_DEVIATION_TERM = timedelta(milliseconds=10)


def _f32(x: float) -> float:
    return struct.unpack("f", struct.pack("f", x))[0]


def _micros(d: timedelta) -> int:
    return d // _MICROSECOND


def _ewma(old: timedelta, new: timedelta, weight: float) -> timedelta:
    """Blend two durations in single precision, truncated to microseconds."""
    value = _f32(_f32((1 - weight) * _f32(_micros(old))) + _f32(weight * _f32(_micros(new))))
    return timedelta(microseconds=int(value))


class RTTStats:
    """Round-trip statistics of a connection."""

    def __init__(self) -> None:
        self._has_measurement = False
        self._min_rtt = _ZERO
        self._latest_rtt = _ZERO
        self._smoothed_rtt = _ZERO
        self._mean_deviation = _ZERO
        self._max_ack_delay = _ZERO
        self._rto_multiplier = 1.0

    @property
    def min_rtt(self) -> timedelta:
        """Smallest RTT seen; zero before any measurement."""
        return self._min_rtt

    @property
    def latest_rtt(self) -> timedelta:
        """Most recent RTT sample; zero before any measurement."""
        return self._latest_rtt

    @property
    def smoothed_rtt(self) -> timedelta:
        """Smoothed RTT; zero before any measurement."""
        return self._smoothed_rtt

    @property
    def mean_deviation(self) -> timedelta:
        return self._mean_deviation

    @property
    def max_ack_delay(self) -> timedelta:
        """The max ack delay advertised by the peer."""
        return self._max_ack_delay

    @max_ack_delay.setter
    def max_ack_delay(self, value: timedelta) -> None:
        self._max_ack_delay = value

    @property
    def rto_multiplier(self) -> float:
        return self._rto_multiplier

    @rto_multiplier.setter
    def rto_multiplier(self, value: float) -> None:
        if value <= 0:
            raise ValueError("retransmission timeout multiplier must be greater than 0")
        self._rto_multiplier = float(value)

    def rto(self) -> timedelta:
        """Return the retransmission timeout."""
        if self._smoothed_rtt == _ZERO:
            return 2 * DEFAULT_INITIAL_RTT
        rto = self._smoothed_rtt + max(4 * self._mean_deviation, _MIN_DEVIATION_TERM)
        rto += self._max_ack_delay
        return rto * self._rto_multiplier

    def update_rtt(self, sample: timedelta) -> None:
        """Feed a new RTT sample; non-positive or infinite samples are ignored."""
        if sample == timedelta.max or sample <= _ZERO:
            return
        if self._min_rtt == _ZERO or self._min_rtt > sample:
            self._min_rtt = sample
        self._latest_rtt = sample
        if not self._has_measurement:
            self._has_measurement = True
            self._smoothed_rtt = sample
            self._mean_deviation = sample / 2
        else:
            self._mean_deviation = _ewma(
                self._mean_deviation, abs(self._smoothed_rtt - sample), RTT_BETA
            )
            self._smoothed_rtt = _ewma(self._smoothed_rtt, sample, RTT_ALPHA)

    def set_initial_rtt(self, rtt: timedelta) -> None:
        """Set the RTT to use before the first measurement."""
        if self._has_measurement:
            raise RuntimeError("initial RTT set after first measurement")
        self._smoothed_rtt = rtt
        self._latest_rtt = rtt

    def reset(self) -> None:
        """Clear the RTT values, e.g. after connection migration."""
        self._latest_rtt = _ZERO
        self._min_rtt = _ZERO
        self._smoothed_rtt = _ZERO
        self._mean_deviation = _ZERO

    def expire_smoothed_metrics(self) -> None:
        """Raise smoothed RTT and mean deviation to the latest values if larger."""
        self._mean_deviation = max(
            self._mean_deviation, abs(self._smoothed_rtt - self._latest_rtt)
        )
        self._smoothed_rtt = max(self._smoothed_rtt, self._latest_rtt)