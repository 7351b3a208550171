"""Counters, gauges, metric groups and the process-wide metric registry."""