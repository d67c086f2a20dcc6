"""
Handles parsing and validation of port selections and targets.
"""
from __future__ import annotations
import ipaddress
from typing import Any, Iterable, List, Tuple

from .errors import PortValidationError, TargetResolutionError
from .models import MAX_PORT, MIN_PORT, PortPreset

PRESETS: Tuple[PortPreset, ...] = (
    PortPreset("well-known", "Well-Known Ports (0-1023)", 0, 1023),
    PortPreset("registered", "Registered Ports (1024-49151)", 1024, 49151),
    PortPreset("dynamic", "Dynamic/Private Ports (49152-65535)", 49152, 65535),
)


def get_preset(key: str) -> PortPreset:
    """Looks up a preset by key, e.g. 'well-known'."""
    for preset in PRESETS:
        if preset.key == key:
            return preset
    raise PortValidationError(f"Unknown port preset '{key}'. Choose one of: {', '.join(p.key for p in PRESETS)}.")


def validate_port(port: Any) -> int:
    """Returns port unchanged if it is an integer in 0-65535."""
    if isinstance(port, bool) or not isinstance(port, int):
        raise PortValidationError(f"Port {port!r} is not an integer.")
    if not MIN_PORT <= port <= MAX_PORT:
        raise PortValidationError(f"Port {port} is out of range ({MIN_PORT}-{MAX_PORT}).")
    return port


def validate_ports(ports: Iterable[Any]) -> List[int]:
    """Validates every entry, keeping order and duplicates."""
    if isinstance(ports, (str, bytes)):
        raise PortValidationError("Ports must be a sequence of integers, not a string.")
    return [validate_port(p) for p in ports]


def validate_port_range(start_port: Any, end_port: Any) -> Tuple[int, int]:
    start, end = validate_port(start_port), validate_port(end_port)
    if start > end:
        raise PortValidationError(f"Invalid port range {start}-{end}: start is greater than end.")
    return start, end


def parse_port_list(text: str) -> List[int]:
    """
    Parses a comma-separated string of ports into a list of integers.

    Order and duplicates are kept as typed. Blank items are skipped, but the
    list must contain at least one port.
    """
    ports: List[int] = []
    for item in (text or '').split(','):
        item = item.strip()
        if not item:
            continue
        try:
            value = int(item)
        except ValueError:
            raise PortValidationError(f"Invalid port '{item}'. Use comma-separated numbers ({MIN_PORT}-{MAX_PORT}).")
        ports.append(validate_port(value))
    if not ports:
        raise PortValidationError("No ports given.")
    return ports


def parse_port_range(text: str) -> Tuple[int, int]:
    """Parses 'start-end' into a validated (start, end) pair."""
    start_s, sep, end_s = (text or '').strip().partition('-')
    if not sep:
        raise PortValidationError(f"Invalid port range '{text}'. Use START-END, e.g. 1-1024.")
    try:
        start, end = int(start_s.strip()), int(end_s.strip())
    except ValueError:
        raise PortValidationError(f"Invalid port range '{text}'. Use START-END, e.g. 1-1024.")
    return validate_port_range(start, end)


def validate_host(host: str) -> str:
    """Validates a hostname or IP address and returns it stripped."""
    host = (host or '').strip()
    if host.startswith('[') and host.endswith(']'):
        host = host[1:-1]
    try:
        ipaddress.ip_address(host.split('%')[0])
        return host
    except ValueError:
        pass
    if not host or len(host) > 253:
        raise TargetResolutionError(host, "not a valid hostname")
    labels = host.rstrip('.').split('.')
    if not all(labels):
        raise TargetResolutionError(host, "hostname contains empty labels")
    for lbl in labels:
        if not (1 <= len(lbl) <= 63):
            raise TargetResolutionError(host, "hostname has an invalid label length")
        if lbl.startswith('-') or lbl.endswith('-'):
            raise TargetResolutionError(host, "hostname has a label starting/ending with '-'")
        if not all(c.isalnum() or c in '-_' for c in lbl):
            raise TargetResolutionError(host, "hostname contains invalid characters")
    return host
