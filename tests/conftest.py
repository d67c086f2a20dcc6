import socket
import threading

import pytest

from portprobe.models import ResolvedAddress
from portprobe.network.utils import clear_resolution_cache

LOOPBACK = "127.0.0.1"


@pytest.fixture(autouse=True)
def _fresh_resolution_cache():
    clear_resolution_cache()
    yield
    clear_resolution_cache()


@pytest.fixture
def loopback():
    return ResolvedAddress(socket.AF_INET, LOOPBACK)


@pytest.fixture
def tcp_listener():
    """A loopback TCP socket that accepts connections; yields its port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server:
        server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        server.bind((LOOPBACK, 0))
        server.listen(64)
        yield server.getsockname()[1]


@pytest.fixture
def closed_tcp_port():
    """A loopback port that was free a moment ago and has no listener."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((LOOPBACK, 0))
        return s.getsockname()[1]


@pytest.fixture
def udp_echo():
    """A loopback UDP server that echoes every datagram; yields its port."""
    stop = threading.Event()
    server = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    server.bind((LOOPBACK, 0))
    server.settimeout(0.05)

    def serve():
        while not stop.is_set():
            try:
                data, addr = server.recvfrom(4096)
            except socket.timeout:
                continue
            except OSError:
                break
            server.sendto(data, addr)

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    try:
        yield server.getsockname()[1]
    finally:
        stop.set()
        thread.join(timeout=1)
        server.close()


@pytest.fixture
def udp_silent():
    """A bound UDP socket that never reads or answers; yields its port."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as server:
        server.bind((LOOPBACK, 0))
        yield server.getsockname()[1]
