"""Named metrics, the groups that hold them and their JSON export."""

from __future__ import annotations

import abc
import enum
import json
import threading
from bisect import bisect_right
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Iterator


class MetricType(enum.IntEnum):
    COUNTER = 0
    COUNTER_TIME_SERIES = 1
    GAUGE = 2


class _RollUp(enum.IntEnum):
    NONE = 0
    TO_SECOND = 1
    TO_MINUTE = 2
    TO_HOUR = 3
    TO_DAY = 4


_ROLL_UP_INTERVAL = 256
_ROLL_UP_TO_SECOND = timedelta(seconds=2)
_ROLL_UP_SECOND_TO_MINUTE = timedelta(seconds=120)
_ROLL_UP_MINUTE_TO_HOUR = timedelta(minutes=120)
_ROLL_UP_HOUR_TO_DAY = timedelta(hours=48)

# (from label, to label, age after which to roll up, truncation unit)
_ROLL_UP_STEPS = (
    (_RollUp.NONE, _RollUp.TO_SECOND, _ROLL_UP_TO_SECOND, timedelta(seconds=1)),
    (_RollUp.TO_SECOND, _RollUp.TO_SECOND, _ROLL_UP_TO_SECOND, timedelta(seconds=1)),
    (_RollUp.TO_SECOND, _RollUp.TO_MINUTE, _ROLL_UP_SECOND_TO_MINUTE, timedelta(minutes=1)),
    (_RollUp.TO_MINUTE, _RollUp.TO_MINUTE, _ROLL_UP_SECOND_TO_MINUTE, timedelta(minutes=1)),
    (_RollUp.TO_MINUTE, _RollUp.TO_HOUR, _ROLL_UP_MINUTE_TO_HOUR, timedelta(hours=1)),
    (_RollUp.TO_HOUR, _RollUp.TO_HOUR, _ROLL_UP_MINUTE_TO_HOUR, timedelta(hours=1)),
    (_RollUp.TO_HOUR, _RollUp.TO_DAY, _ROLL_UP_HOUR_TO_DAY, timedelta(days=1)),
    (_RollUp.TO_DAY, _RollUp.TO_DAY, _ROLL_UP_HOUR_TO_DAY, timedelta(days=1)),
)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _as_utc(when: datetime) -> datetime:
    return when.astimezone(timezone.utc)


def _truncate(when: datetime, unit: timedelta) -> datetime:
    return _EPOCH + ((when - _EPOCH) // unit) * unit


class Metric(abc.ABC):
    """A single named integer metric."""

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """The metric name."""

    @property
    @abc.abstractmethod
    def type(self) -> MetricType:
        """The metric type."""

    @abc.abstractmethod
    def add(self, delta: int) -> int:
        """Change the metric by ``delta`` and return the new value."""

    @abc.abstractmethod
    def load(self) -> int:
        """Return the current value."""

    @abc.abstractmethod
    def store(self, value: int) -> None:
        """Set the value; only gauges support this."""


@dataclass(frozen=True)
class Record:
    """One entry in a counter's history."""

    time: datetime
    delta: int
    label: _RollUp = _RollUp.NONE


class Counter(Metric):
    """A value that never decreases, optionally keeping a time series."""

    def __init__(self, name: str, time_series: bool = False) -> None:
        self._name = name
        self._value = 0
        self._time_series = time_series
        self._history: list[Record] = []
        self._lock = threading.Lock()
        self._op = 0

    @property
    def name(self) -> str:
        with self._lock:
            self._op += 1
        return self._name

    @property
    def type(self) -> MetricType:
        with self._lock:
            self._op += 1
        return MetricType.COUNTER_TIME_SERIES if self._time_series else MetricType.COUNTER

    @property
    def history(self) -> list[Record]:
        """A copy of the recorded history, oldest first."""
        with self._lock:
            return list(self._history)

    def add(self, delta: int) -> int:
        if delta < 0:
            raise ValueError("can't add a negative value to Counter")
        return self.add_at(delta, datetime.now(timezone.utc))

    def add_at(self, delta: int, when: datetime) -> int:
        """Add ``delta`` as if it happened at ``when``; return the new value."""
        if delta < 0:
            raise ValueError("can't add a negative value to Counter")
        with self._lock:
            self._op += 1
            if delta == 0:
                return self._value
            self._value += delta
            if self._time_series:
                self._history.append(Record(_as_utc(when), delta))
                self._roll_up()
            return self._value

    def load(self) -> int:
        with self._lock:
            self._op += 1
            return self._value

    def store(self, value: int) -> None:
        raise TypeError("store() is not supported by Counter")

    def delta_between(self, t1: datetime, t2: datetime) -> int:
        """Return the total added after ``t1`` and up to ``t2``."""
        t1, t2 = _as_utc(t1), _as_utc(t2)
        if t2 < t1:
            raise ValueError("t2 must be later than t1")
        if not self._time_series:
            raise TypeError(f"{self._name} is not a time series Counter")
        with self._lock:
            self._op += 1
            start = bisect_right(self._history, t1, key=lambda r: r.time)
            end = bisect_right(self._history, t2, key=lambda r: r.time)
            return sum(r.delta for r in self._history[start:end])

    def _roll_up(self) -> None:
        if self._op % _ROLL_UP_INTERVAL != 0:
            return
        now = datetime.now(timezone.utc)
        for from_label, to_label, after, unit in _ROLL_UP_STEPS:
            self._do_roll_up(from_label, to_label, after, unit, now)

    def _do_roll_up(
        self,
        from_label: _RollUp,
        to_label: _RollUp,
        after: timedelta,
        unit: timedelta,
        now: datetime,
    ) -> None:
        merged: list[Record] = []
        pending: Record | None = None
        for record in self._history:
            if record.label != from_label:
                merged.append(record)
                continue
            if now - record.time <= after:
                if pending is not None:
                    merged.append(pending)
                    pending = None
                merged.append(record)
                continue
            bucket = _truncate(record.time, unit)
            if pending is not None and pending.time == bucket:
                pending = replace(pending, delta=pending.delta + record.delta)
            else:
                if pending is not None:
                    merged.append(pending)
                pending = Record(bucket, record.delta, to_label)
        if pending is not None:
            merged.append(pending)
        self._history = merged


class Gauge(Metric):
    """A value that can go up, down or be set."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._value = 0
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return self._name

    @property
    def type(self) -> MetricType:
        return MetricType.GAUGE

    def add(self, delta: int) -> int:
        with self._lock:
            self._value += delta
            return self._value

    def load(self) -> int:
        with self._lock:
            return self._value

    def store(self, value: int) -> None:
        with self._lock:
            self._value = value


class MetricGroup:
    """Metrics logged and exported together under one name."""

    def __init__(self, name: str) -> None:
        self._name = name
        self._metrics: dict[str, Metric] = {}
        self._lock = threading.Lock()
        self._logging = False

    @property
    def name(self) -> str:
        return self._name

    def __iter__(self) -> Iterator[Metric]:
        with self._lock:
            return iter(list(self._metrics.values()))

    def get_metric(self, name: str) -> Metric | None:
        """Return the metric called ``name``, or None."""
        with self._lock:
            return self._metrics.get(name)

    def get_or_add(self, metric: Metric) -> Metric:
        """Add ``metric`` unless one with its name exists; return the stored one."""
        key = metric.name
        with self._lock:
            return self._metrics.setdefault(key, metric)

    @property
    def logging_enabled(self) -> bool:
        return self._logging

    def enable_logging(self) -> None:
        self._logging = True

    def disable_logging(self) -> None:
        self._logging = False

    def new_log_msg(self) -> str:
        return f"[metrics - {self._name}]"

    def new_log_fields(self) -> dict[str, int]:
        return {metric.name: metric.load() for metric in self}


class MetricGroupList(list):
    """A list of metric groups."""

    def sort_by_name(self) -> None:
        """Sort in place by group name, ignoring case."""
        self.sort(key=lambda group: group.name.lower())

    def to_json(self) -> str:
        """Sort the list and return all its metrics as indented JSON."""
        self.sort_by_name()
        document: dict[str, dict[str, int]] = {}
        for group in self:
            values = {metric.name: metric.load() for metric in group}
            document[group.name] = dict(sorted(values.items()))
        return json.dumps(document, indent=4, ensure_ascii=False)