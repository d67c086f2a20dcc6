from __future__ import annotations
import socket
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Tuple, Union

MIN_PORT = 0
MAX_PORT = 65535

OPEN = "Open"
CLOSED = "Closed"


@dataclass(frozen=True)
class ProbeResult:
    """
    Outcome of a single probe.
    - available: whether the port answered within the timeout
    - error: why the probe reported closed, if it did
    - rtt: round-trip time in seconds, if successful
    """
    available: bool
    error: Optional[str] = None
    rtt: Optional[float] = None


@dataclass(frozen=True)
class PortResult:
    """Represents the TCP and UDP status of a single scanned port."""
    port: int
    tcp_open: bool
    udp_open: bool

    @property
    def is_open(self) -> bool:
        return self.tcp_open or self.udp_open

    @property
    def tcp_status(self) -> str:
        return OPEN if self.tcp_open else CLOSED

    @property
    def udp_status(self) -> str:
        return OPEN if self.udp_open else CLOSED


@dataclass(frozen=True)
class PortPreset:
    """A named, inclusive port range offered by the selection menu."""
    key: str
    label: str
    start: int
    end: int

    @property
    def size(self) -> int:
        return self.end - self.start + 1


@dataclass(frozen=True)
class ScanSelection:
    """Either an inclusive range (start, end) or an explicit ordered port list."""
    start: Optional[int] = None
    end: Optional[int] = None
    ports: Optional[List[int]] = None

    @property
    def is_range(self) -> bool:
        return self.ports is None

    def describe(self) -> str:
        if self.ports is not None:
            return ",".join(str(p) for p in self.ports)
        return f"{self.start}-{self.end}"


class ResolvedAddress(NamedTuple):
    """A concrete address for a target: (family, ip, flowinfo, scopeid)."""
    family: int
    ip: str
    flowinfo: int = 0
    scopeid: int = 0

    def sockaddr(self, port: int) -> Union[Tuple[str, int], Tuple[str, int, int, int]]:
        if self.family == socket.AF_INET6:
            return (self.ip, port, self.flowinfo, self.scopeid)
        return (self.ip, port)
