"""CUBIC congestion window control and round-trip time statistics."""