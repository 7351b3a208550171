import io
import json
import time

import pytest

from mieru.log import exported as log
from mieru.metrics import registry
from mieru.metrics.metric import MetricType


@pytest.fixture
def captured_log():
    buf = io.StringIO()
    previous = log.standard_logger().out
    log.set_output(buf)
    try:
        yield buf
    finally:
        log.set_output(previous)


def test_register_metric_returns_same_object():
    first = registry.register_metric("reg-same", "m", MetricType.COUNTER)
    second = registry.register_metric("reg-same", "m", MetricType.GAUGE)
    assert second is first
    assert first.type == MetricType.COUNTER


def test_register_metric_rejects_unknown_type():
    with pytest.raises(ValueError):
        registry.register_metric("reg-bad", "m", 99)


def test_register_time_series_counter():
    metric = registry.register_metric("reg-ts", "m", MetricType.COUNTER_TIME_SERIES)
    assert metric.type == MetricType.COUNTER_TIME_SERIES


def test_group_lookup():
    metric = registry.register_metric("reg-lookup", "m", MetricType.GAUGE)
    group = registry.get_metric_group_by_name("reg-lookup")
    assert group.get_metric("m") is metric
    assert group.logging_enabled is True
    assert registry.get_metric_group_by_name("reg-no-such-group") is None


def test_system_metrics_registered():
    group = registry.get_metric_group_by_name("connections")
    assert group.get_metric("MaxConn") is registry.MAX_CONN
    assert registry.get_metric_group_by_name("traffic").get_metric("InBytes") is registry.IN_BYTES


def test_json_includes_only_enabled_groups():
    registry.register_metric("reg-hidden", "m", MetricType.GAUGE)
    registry.get_metric_group_by_name("reg-hidden").disable_logging()
    parsed = json.loads(registry.get_metrics_as_json())
    assert "reg-hidden" not in parsed
    assert "MaxConn" in parsed["connections"]
    names = [g.name for g in registry.enabled_groups()]
    assert "reg-hidden" not in names
    assert "traffic" in names


def test_set_logging_duration_rejects_non_positive():
    with pytest.raises(ValueError):
        registry.set_logging_duration(0)
    with pytest.raises(ValueError):
        registry.set_logging_duration(-1)


def test_log_metrics_now(captured_log):
    registry.log_metrics_now()
    lines = captured_log.getvalue().splitlines()
    assert lines[0] == "[metrics]"
    assert "[metrics - traffic]" in lines
    assert "[metrics - connections]" in lines


def test_periodic_logging(captured_log):
    registry.set_logging_duration(0.01)
    try:
        registry.enable_logging()
        deadline = time.monotonic() + 5
        while "[metrics]\n" not in captured_log.getvalue() and time.monotonic() < deadline:
            time.sleep(0.01)
        registry.disable_logging()
    finally:
        registry.disable_logging()
        registry.set_logging_duration(60)
    output = captured_log.getvalue()
    assert "[metrics]\n" in output
    assert output.rstrip().endswith("disabled metrics logging")