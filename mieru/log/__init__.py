"""Leveled, structured logging with pluggable formatters and client log files."""