# mieru

Building blocks for a socks5 proxy client and server, usable on their own:

- `mieru.log` – a structured logger with levels, fields, per-entry context and
  pluggable formatters (`CliFormatter`, `DaemonFormatter`, `NilFormatter`),
  plus helpers that create and prune client log files on disk.
- `mieru.metrics` – named counters (optionally keeping a time series that is
  rolled up into seconds, minutes, hours and days) and gauges, grouped in a
  process-wide registry, exported as indented JSON or logged periodically.
- `mieru.congestion` – the CUBIC congestion window algorithm and round-trip
  time statistics with a retransmission timeout.
- `mieru.egress` – decides whether a socks5 CONNECT request goes out directly
  or through a configured upstream proxy.
- `mieru.mathext` – `mid` (median of three) and `within_range`.
- `mieru.cli` – a prefix-matching command registry and a help-text formatter.

The package has no runtime dependencies and needs Python 3.10 or later.
Tests run with `pytest` (install the `test` extra).

## Congestion control

```python
from mieru.congestion.cubic import CubicSendAlgorithm

cubic = CubicSendAlgorithm(16, 1024)   # ValueError if min > max
cubic.on_ack()                  # grows by one while in slow start
cubic.on_loss()                 # window * 0.7, leaves slow start
cubic.in_slow_start             # property: False
cubic.congestion_window_size    # property: current window
cubic.on_timeout()              # back to the minimum window and slow start
```

Every result is clamped to the `[min, max]` window range.

```python
from datetime import timedelta
from mieru.congestion.rtt import RTTStats

stats = RTTStats()
stats.max_ack_delay = timedelta(seconds=2)
stats.rto_multiplier = 2        # must be > 0
stats.update_rtt(timedelta(milliseconds=300))
stats.rto()                     # timedelta(seconds=5.8)
```

`min_rtt`, `latest_rtt`, `smoothed_rtt` and `mean_deviation` are read-only
properties. Before any measurement `rto()` is one second.
`set_initial_rtt()` raises `RuntimeError` once a sample has been taken;
`reset()` and `expire_smoothed_metrics()` adjust the stored values.

## Egress rules

```python
from mieru.egress import (
    EgressAction, EgressConfig, EgressProxy, EgressRule,
    Input, ProxyProtocol, Socks5Controller,
)

controller = Socks5Controller(EgressConfig(
    proxies=[EgressProxy(name="wrap", protocol=ProxyProtocol.SOCKS5_PROXY_PROTOCOL,
                         host="127.0.0.1", port=6789)],
    rules=[EgressRule(ip_ranges=["*"], domain_names=["*"],
                      action=EgressAction.PROXY, proxy_name="wrap")],
))
request = Input(ProxyProtocol.SOCKS5_PROXY_PROTOCOL, bytes([5, 1, 0, 1, 1, 2, 3, 4, 0, 80]))
controller.find_action(request)   # Action(EgressAction.PROXY, <the "wrap" proxy>)
```

Only socks5 CONNECT requests are matched, and a rule matches only when the
first entry of `ip_ranges` (for IPv4/IPv6 addresses) or `domain_names` (for
domain names) is the wildcard `"*"`. Everything else gets
`EgressAction.DIRECT`. `AlwaysDirectController` always answers `DIRECT`.

## Metrics

```python
from mieru.metrics.metric import MetricType
from mieru.metrics.registry import register_metric, get_metrics_as_json

requests = register_metric("HTTP proxy", "Requests", MetricType.COUNTER)
requests.add(1)
print(get_metrics_as_json())
```

Registering the same group and name twice returns the first metric. Counters
never decrease (`add` of a negative value raises `ValueError`, `store` raises
`TypeError`); a time-series counter answers `delta_between(t1, t2)`. Gauges
can be added to and stored freely.

`enable_logging()` starts a background thread that writes all enabled groups
to the standard logger every 60 seconds; `set_logging_duration(seconds)`
changes the period for the next `enable_logging()`, and `disable_logging()`
stops the thread. `log_metrics_now()` writes them once. Importing
`mieru.metrics.registry` registers the `connections` and `traffic` groups
(`MAX_CONN`, `ACTIVE_OPENS`, `PASSIVE_OPENS`, `CURR_ESTABLISHED`, `IN_BYTES`,
`OUT_BYTES`, `OUT_PADDING_BYTES`).

## Logging

```python
from mieru.log import exported as log
from mieru.log.formatter import DaemonFormatter

log.set_level("debug")
log.set_formatter(DaemonFormatter())
log.with_field("user", "alice").info("connected from %s", "127.0.0.1")
```

The standard logger writes to standard output with `CliFormatter` at `INFO`.
`Logger` objects in `mieru.log.logger` take their own output, formatter,
level, exit function and buffer pool. `with_field`, `with_fields`,
`with_error`, `with_context` and `with_time` always return a new entry.
Logging at panic level raises `PanicError`; `fatal` logs and then calls the
logger's exit function with status 1 (`sys.exit` by default).

`mieru.log.clientlog.new_client_log_file()` opens a log file named after the
current time and process id in the user cache directory (or a directory
passed in), and `remove_old_client_log_files()` keeps only the 25 files whose
names sort last.

## Commands

`CommandRegistry` in `mieru.cli.parser` dispatches an argument list to the
first registered handler whose match list is a prefix of the arguments (an
empty string matches any word), runs its validator, then its callback. An
unknown command raises `CommandError` naming the binary's help command.
`check_no_extra_args` raises `CommandError` for trailing arguments.
`HelpFormatter` in `mieru.cli.helpfmt` renders a usage screen from
`HelpCmdEntry` items via `lines()` or `print()`.

## What this package does not do

It is a library of components, not a running proxy. It has no socks5 or HTTP
proxy server, no client or server daemon, no configuration storage and no
control commands; the command registry ships with no commands registered and
the package installs no executables.