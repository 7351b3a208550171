"""The process-wide registry of metrics and periodic metrics logging."""

from __future__ import annotations

import threading

from mieru.log import exported as log
from mieru.metrics.metric import Counter, Gauge, Metric, MetricGroup, MetricGroupList, MetricType

_groups: dict[str, MetricGroup] = {}
_groups_lock = threading.Lock()

_logging_lock = threading.Lock()
_log_interval = 60.0
_stop_event: threading.Event | None = None
_log_thread: threading.Thread | None = None


def register_metric(group_name: str, metric_name: str, metric_type: MetricType) -> Metric:
    """Register a metric; registering it again returns the first object."""
    try:
        kind = MetricType(metric_type)
    except ValueError:
        raise ValueError(f"unrecognized metric type {metric_type!r}") from None
    with _groups_lock:
        group = _groups.setdefault(group_name, MetricGroup(group_name))
    group.enable_logging()
    if kind is MetricType.COUNTER:
        metric: Metric = Counter(metric_name)
    elif kind is MetricType.COUNTER_TIME_SERIES:
        metric = Counter(metric_name, time_series=True)
    else:
        metric = Gauge(metric_name)
    return group.get_or_add(metric)


def get_metric_group_by_name(group_name: str) -> MetricGroup | None:
    """Return the group called ``group_name``, or None."""
    with _groups_lock:
        return _groups.get(group_name)


def enabled_groups() -> MetricGroupList:
    """Return the groups whose logging is enabled."""
    with _groups_lock:
        groups = list(_groups.values())
    return MetricGroupList(group for group in groups if group.logging_enabled)


def get_metrics_as_json() -> str:
    """Return all enabled metrics as indented JSON."""
    return enabled_groups().to_json()


def log_metrics_now() -> None:
    """Write the current metrics to the log."""
    log.info("[metrics]")
    groups = enabled_groups()
    groups.sort_by_name()
    for group in groups:
        log.with_fields(group.new_log_fields()).info(group.new_log_msg())


def _log_loop(stop: threading.Event, interval: float) -> None:
    while not stop.wait(interval):
        log_metrics_now()


def enable_logging() -> None:
    """Start logging metrics periodically, if not already doing so."""
    global _stop_event, _log_thread
    with _logging_lock:
        if _log_thread is not None:
            return
        _stop_event = threading.Event()
        _log_thread = threading.Thread(
            target=_log_loop, args=(_stop_event, _log_interval), daemon=True
        )
        _log_thread.start()
        log.info("enabled metrics logging with duration %ss", _log_interval)


def disable_logging() -> None:
    """Stop periodic metrics logging."""
    global _stop_event, _log_thread
    with _logging_lock:
        if _log_thread is None:
            return
        _stop_event.set()
        _log_thread.join()
        _stop_event = None
        _log_thread = None
        log.info("disabled metrics logging")


def set_logging_duration(seconds: float) -> None:
    """Set the period of metrics logging; takes effect on the next enable."""
    global _log_interval
    if seconds <= 0:
        raise ValueError("duration must be a positive number")
    with _logging_lock:
        _log_interval = float(seconds)


# Metric group name format for each user.
USER_METRIC_GROUP_FORMAT = "user - %s"
USER_METRIC_READ_BYTES = "ReadBytes"
USER_METRIC_WRITE_BYTES = "WriteBytes"

# Max number of connections ever reached.
MAX_CONN = register_metric("connections", "MaxConn", MetricType.GAUGE)
# Accumulated active open connections.
ACTIVE_OPENS = register_metric("connections", "ActiveOpens", MetricType.COUNTER)
# Accumulated passive open connections.
PASSIVE_OPENS = register_metric("connections", "PassiveOpens", MetricType.COUNTER)
# Current number of established connections.
CURR_ESTABLISHED = register_metric("connections", "CurrEstablished", MetricType.GAUGE)
# Number of bytes received from proxy connections.
IN_BYTES = register_metric("traffic", "InBytes", MetricType.COUNTER)
# Number of bytes sent to proxy connections.
OUT_BYTES = register_metric("traffic", "OutBytes", MetricType.COUNTER)
# Number of padding bytes sent to proxy connections.
OUT_PADDING_BYTES = register_metric("traffic", "OutPaddingBytes", MetricType.COUNTER)