"""
Concurrent port probing engine.

Each requested port becomes one unit of work: a TCP probe and a UDP probe
submitted side by side to a shared thread pool. The engine waits for every
probe to finish and then assembles the results in request order.
"""
from __future__ import annotations
import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Sequence

from .models import PortResult, ProbeResult, ResolvedAddress
from .network.probes import PROBE_TIMEOUT_SECONDS, UDP_PAYLOAD, probe_tcp, probe_udp
from .network.utils import resolve_target
from .parsing import validate_port_range, validate_ports

TcpProbe = Callable[[ResolvedAddress, int, float], ProbeResult]
UdpProbe = Callable[[ResolvedAddress, int, float, bytes], ProbeResult]
Resolver = Callable[[str], ResolvedAddress]
ProgressCallback = Callable[[int, int], None]

DEFAULT_MAX_WORKERS = 512


@dataclass
class _PortUnit:
    """The pair of in-flight probes for one requested port."""
    port: int
    tcp: Future
    udp: Future


class ProbeEngine:
    """Runs TCP and UDP probes against a target and aggregates them per port."""

    def __init__(
        self,
        timeout: float = PROBE_TIMEOUT_SECONDS,
        max_workers: int = DEFAULT_MAX_WORKERS,
        udp_payload: bytes = UDP_PAYLOAD,
        tcp_probe: TcpProbe = probe_tcp,
        udp_probe: UdpProbe = probe_udp,
        resolver: Resolver = resolve_target,
    ):
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self.timeout = timeout
        self.max_workers = max_workers
        self.udp_payload = udp_payload
        self.tcp_probe = tcp_probe
        self.udp_probe = udp_probe
        self.resolver = resolver

    def scan_range(
        self,
        target: str,
        start_port: int,
        end_port: int,
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[PortResult]:
        """
        Probes every port in [start_port, end_port] and returns the results
        in ascending port order.

        Raises PortValidationError for an invalid range and
        TargetResolutionError if the target does not resolve. Both are raised
        before any probe is sent.
        """
        start, end = validate_port_range(start_port, end_port)
        return self._scan(target, range(start, end + 1), on_progress)

    def scan_ports(
        self,
        target: str,
        ports: Iterable[Any],
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[PortResult]:
        """
        Probes each listed port and returns one result per entry, in the
        given order. Duplicates are probed independently.
        """
        return self._scan(target, validate_ports(ports), on_progress)

    def _scan(
        self,
        target: str,
        ports: Sequence[int],
        on_progress: Optional[ProgressCallback],
    ) -> List[PortResult]:
        address = self.resolver(target)
        if not ports:
            return []

        total = 2 * len(ports)
        workers = min(self.max_workers, total)
        logging.info(f"Scanning {len(ports)} port(s) on {target} ({address.ip}) with {workers} worker(s).")
        started = time.monotonic()

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="portprobe") as executor:
            units = [self._launch(executor, address, port) for port in ports]
            futures = [f for unit in units for f in (unit.tcp, unit.udp)]
            try:
                for completed, _ in enumerate(as_completed(futures), start=1):
                    if on_progress:
                        on_progress(completed, total)
            except KeyboardInterrupt:
                executor.shutdown(wait=False, cancel_futures=True)
                raise

        results = [
            PortResult(
                port=unit.port,
                tcp_open=self._outcome(unit.tcp, unit.port, "TCP"),
                udp_open=self._outcome(unit.udp, unit.port, "UDP"),
            )
            for unit in units
        ]
        open_count = sum(1 for r in results if r.is_open)
        logging.info(f"Scan of {target} finished in {time.monotonic() - started:.2f}s, {open_count} port(s) open.")
        return results

    def _launch(self, executor: ThreadPoolExecutor, address: ResolvedAddress, port: int) -> _PortUnit:
        return _PortUnit(
            port=port,
            tcp=executor.submit(self.tcp_probe, address, port, self.timeout),
            udp=executor.submit(self.udp_probe, address, port, self.timeout, self.udp_payload),
        )

    @staticmethod
    def _outcome(future: Future, port: int, protocol: str) -> bool:
        """Reduces a finished probe to open/closed; nothing a probe does escapes."""
        try:
            result = future.result()
        except Exception as e:
            logging.error(f"{protocol} probe of port {port} failed with exception: {e}")
            return False
        if not result.available:
            logging.debug("%s probe of port %d closed: %s", protocol, port, result.error or "no response")
        return bool(result.available)
