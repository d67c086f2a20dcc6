"""
Network-related utilities for portprobe.
"""

from .probes import PROBE_TIMEOUT_SECONDS, UDP_PAYLOAD, probe_tcp, probe_udp
from .utils import clear_resolution_cache, resolve_target

__all__ = [
    "PROBE_TIMEOUT_SECONDS",
    "UDP_PAYLOAD",
    "probe_tcp",
    "probe_udp",
    "resolve_target",
    "clear_resolution_cache",
]
