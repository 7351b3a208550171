"""Building blocks for a socks5 proxy: logging, metrics, congestion control, egress rules and command dispatch."""

__version__ = "2.4.0"