"""
TCP and UDP reachability probes.

Every probe is bounded by its own timeout and never raises for network
conditions: refusals, unreachable hosts, timeouts and socket errors all
come back as an unavailable ProbeResult.
"""
from __future__ import annotations
import socket
import time

from ..models import ProbeResult, ResolvedAddress

PROBE_TIMEOUT_SECONDS = 1.0
UDP_PAYLOAD = b"test"
UDP_RECV_BUFFER = 4096


def probe_tcp(address: ResolvedAddress, port: int, timeout: float = PROBE_TIMEOUT_SECONDS) -> ProbeResult:
    """Reports whether a TCP handshake with address:port completes within timeout."""
    try:
        with socket.socket(address.family, socket.SOCK_STREAM) as sock:
            sock.settimeout(timeout)
            start_time = time.monotonic()
            sock.connect(address.sockaddr(port))
            return ProbeResult(True, rtt=time.monotonic() - start_time)
    except socket.timeout:
        return ProbeResult(False, error="Timeout")
    except OSError as e:
        return ProbeResult(False, error=f"Socket error: {e}")
    except OverflowError as e:
        return ProbeResult(False, error=f"Invalid port: {e}")


def probe_udp(
    address: ResolvedAddress,
    port: int,
    timeout: float = PROBE_TIMEOUT_SECONDS,
    payload: bytes = UDP_PAYLOAD,
) -> ProbeResult:
    """
    Sends payload to address:port and waits up to timeout for any datagram back.

    Any reply counts, whatever its origin or content. Silence is reported as
    closed even though many UDP services never answer unsolicited data.
    """
    try:
        with socket.socket(address.family, socket.SOCK_DGRAM) as sock:
            sock.settimeout(timeout)
            start_time = time.monotonic()
            sock.sendto(payload, address.sockaddr(port))
            sock.recvfrom(UDP_RECV_BUFFER)
            return ProbeResult(True, rtt=time.monotonic() - start_time)
    except socket.timeout:
        return ProbeResult(False, error="Timeout")
    except OSError as e:
        return ProbeResult(False, error=f"Socket error: {e}")
    except OverflowError as e:
        return ProbeResult(False, error=f"Invalid port: {e}")
