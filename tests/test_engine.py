import socket
import threading
import time

import pytest

from portprobe.engine import ProbeEngine
from portprobe.errors import PortValidationError, TargetResolutionError
from portprobe.models import PortResult, ProbeResult, ResolvedAddress

LOOPBACK = ResolvedAddress(socket.AF_INET, "127.0.0.1")


class FakeNetwork:
    """Test double standing in for the resolver and both probes."""

    def __init__(self, tcp_open=(), udp_open=(), delay=None):
        self.tcp_open = set(tcp_open)
        self.udp_open = set(udp_open)
        self.delay = delay
        self.calls = []
        self.resolved = []
        self._lock = threading.Lock()

    def resolve(self, target):
        self.resolved.append(target)
        return LOOPBACK

    def _record(self, protocol, port):
        with self._lock:
            self.calls.append((protocol, port))
        if self.delay:
            time.sleep(self.delay(port))

    def tcp(self, address, port, timeout):
        self._record("tcp", port)
        return ProbeResult(port in self.tcp_open)

    def udp(self, address, port, timeout, payload):
        self._record("udp", port)
        return ProbeResult(port in self.udp_open, error=None if port in self.udp_open else "Timeout")

    def engine(self, **kwargs):
        return ProbeEngine(tcp_probe=self.tcp, udp_probe=self.udp, resolver=self.resolve, **kwargs)


def unresolvable(target):
    raise TargetResolutionError(target, "no addresses found")


def test_scan_range_returns_every_port_ascending():
    # Lower ports finish last so completion order is the reverse of request order
    net = FakeNetwork(delay=lambda port: (110 - port) * 0.002)
    results = net.engine().scan_range("host", 100, 110)
    assert [r.port for r in results] == list(range(100, 111))
    assert len(results) == 11


def test_scan_range_single_port():
    results = FakeNetwork(tcp_open={80}).engine().scan_range("host", 80, 80)
    assert results == [PortResult(80, True, False)]


def test_scan_range_full_bounds_accepted():
    net = FakeNetwork()
    results = net.engine(max_workers=64).scan_range("host", 65530, 65535)
    assert [r.port for r in results] == [65530, 65531, 65532, 65533, 65534, 65535]
    assert FakeNetwork().engine().scan_range("host", 0, 0)[0].port == 0


def test_scan_ports_keeps_order_and_duplicates():
    ports = [443, 22, 443, 80, 22]
    net = FakeNetwork(tcp_open={22}, udp_open={80}, delay=lambda port: 0.01 if port == 443 else 0)
    results = net.engine().scan_ports("host", ports)
    assert [r.port for r in results] == ports
    assert [r.tcp_open for r in results] == [False, True, False, False, True]
    assert [r.udp_open for r in results] == [False, False, False, True, False]
    assert net.calls.count(("tcp", 443)) == 2
    assert net.calls.count(("udp", 22)) == 2


def test_each_port_gets_one_tcp_and_one_udp_probe():
    net = FakeNetwork()
    net.engine().scan_range("host", 1, 5)
    assert sorted(net.calls) == sorted([(p, n) for n in range(1, 6) for p in ("tcp", "udp")])


def test_scan_ports_empty_list_probes_nothing():
    net = FakeNetwork()
    assert net.engine().scan_ports("host", []) == []
    assert net.calls == []


def test_concrete_scenario_only_1024_listening():
    net = FakeNetwork(tcp_open={1024})
    results = net.engine().scan_range("127.0.0.1", 1020, 1025)
    assert len(results) == 6
    assert [r.port for r in results] == [1020, 1021, 1022, 1023, 1024, 1025]
    assert {r.port for r in results if r.tcp_open} == {1024}
    assert not any(r.udp_open for r in results)


def test_repeated_scans_are_stable():
    net = FakeNetwork(tcp_open={3, 7}, udp_open={7})
    engine = net.engine()
    assert engine.scan_range("host", 1, 10) == engine.scan_range("host", 1, 10)


@pytest.mark.parametrize("start, end", [(5, 2), (-1, 10), (0, 65536), (70000, 70001)])
def test_invalid_range_fails_before_probing(start, end):
    net = FakeNetwork()
    with pytest.raises(PortValidationError):
        net.engine().scan_range("host", start, end)
    assert net.calls == []
    assert net.resolved == []


@pytest.mark.parametrize("ports", [[-1, 70000], [80, 65536], [80, "443"], [True], [1.5]])
def test_invalid_port_list_fails_before_probing(ports):
    net = FakeNetwork()
    with pytest.raises(PortValidationError):
        net.engine().scan_ports("host", ports)
    assert net.calls == []


def test_validation_error_is_a_value_error():
    with pytest.raises(ValueError):
        FakeNetwork().engine().scan_range("host", 5, 2)


def test_unresolvable_target_fails_before_probing():
    net = FakeNetwork()
    engine = ProbeEngine(tcp_probe=net.tcp, udp_probe=net.udp, resolver=unresolvable)
    with pytest.raises(TargetResolutionError):
        engine.scan_range("nowhere.invalid", 1, 3)
    assert net.calls == []


def test_probe_exception_is_reported_closed():
    def exploding(address, port, timeout):
        raise RuntimeError("boom")

    net = FakeNetwork(udp_open={9})
    engine = ProbeEngine(tcp_probe=exploding, udp_probe=net.udp, resolver=net.resolve)
    assert engine.scan_ports("host", [9]) == [PortResult(9, False, True)]


def test_probes_receive_timeout_and_payload():
    seen = []

    def tcp(address, port, timeout):
        seen.append(("tcp", address, timeout))
        return ProbeResult(False)

    def udp(address, port, timeout, payload):
        seen.append(("udp", address, timeout, payload))
        return ProbeResult(False)

    engine = ProbeEngine(timeout=0.25, udp_payload=b"hello", tcp_probe=tcp, udp_probe=udp, resolver=lambda t: LOOPBACK)
    engine.scan_ports("host", [53])
    assert ("tcp", LOOPBACK, 0.25) in seen
    assert ("udp", LOOPBACK, 0.25, b"hello") in seen


def test_tcp_and_udp_of_one_port_run_concurrently():
    barrier = threading.Barrier(2, timeout=2)

    def tcp(address, port, timeout):
        barrier.wait()
        return ProbeResult(True)

    def udp(address, port, timeout, payload):
        barrier.wait()
        return ProbeResult(True)

    engine = ProbeEngine(max_workers=2, tcp_probe=tcp, udp_probe=udp, resolver=lambda t: LOOPBACK)
    assert engine.scan_ports("host", [1]) == [PortResult(1, True, True)]


def test_single_worker_still_orders_results():
    net = FakeNetwork(tcp_open={2})
    results = net.engine(max_workers=1).scan_ports("host", [3, 1, 2])
    assert results == [PortResult(3, False, False), PortResult(1, False, False), PortResult(2, True, False)]


def test_progress_reports_every_probe():
    updates = []
    FakeNetwork().engine().scan_range("host", 1, 4, on_progress=lambda done, total: updates.append((done, total)))
    assert len(updates) == 8
    assert updates[-1] == (8, 8)
    assert [done for done, _ in updates] == list(range(1, 9))


@pytest.mark.parametrize("kwargs", [{"timeout": 0}, {"timeout": -1}, {"max_workers": 0}])
def test_engine_rejects_bad_settings(kwargs):
    with pytest.raises(ValueError):
        ProbeEngine(**kwargs)


def test_scan_against_real_loopback(tcp_listener, closed_tcp_port, udp_echo):
    engine = ProbeEngine(timeout=0.3)
    results = engine.scan_ports("127.0.0.1", [tcp_listener, closed_tcp_port, udp_echo])
    assert [r.port for r in results] == [tcp_listener, closed_tcp_port, udp_echo]
    assert results[0].tcp_open
    assert not results[1].tcp_open
    assert not results[1].udp_open
    assert results[2].udp_open


def test_real_scan_of_unresolvable_name(monkeypatch):
    def fail(*args, **kwargs):
        raise socket.gaierror(socket.EAI_NONAME, "Name or service not known")

    monkeypatch.setattr(socket, "getaddrinfo", fail)
    with pytest.raises(TargetResolutionError):
        ProbeEngine().scan_range("nowhere.invalid", 1, 2)
