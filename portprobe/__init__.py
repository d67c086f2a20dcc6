"""
portprobe: concurrent TCP/UDP port reachability checks.
"""

from .engine import ProbeEngine
from .errors import PortValidationError, ScanError, TargetResolutionError
from .models import PortResult, ProbeResult

__version__ = "1.0.0"

__all__ = [
    "ProbeEngine",
    "PortResult",
    "ProbeResult",
    "ScanError",
    "TargetResolutionError",
    "PortValidationError",
]
