"""
Target resolution helpers.
"""
import socket
from functools import lru_cache
from typing import List, Optional, Tuple, cast

from ..errors import TargetResolutionError
from ..models import ResolvedAddress

@lru_cache(maxsize=128)
def _is_ip_literal(host: str) -> Tuple[bool, Optional[int]]:
    """Checks if a string is a valid IP literal."""
    try:
        socket.inet_pton(socket.AF_INET, host)
        return True, socket.AF_INET
    except OSError:
        pass
    try:
        socket.inet_pton(socket.AF_INET6, host.split('%')[0])
        return True, socket.AF_INET6
    except OSError:
        return False, None

def _literal_address(host: str, family: int) -> ResolvedAddress:
    if family == socket.AF_INET:
        return ResolvedAddress(socket.AF_INET, host)
    ip_only, _, scope = host.partition('%')
    scopeid = 0
    if scope:
        try:
            scopeid = int(scope) if scope.isdigit() else socket.if_nametoindex(scope)
        except OSError:
            scopeid = 0
    return ResolvedAddress(socket.AF_INET6, ip_only, 0, scopeid)

@lru_cache(maxsize=128)
def _cached_resolve_host(host: str) -> Tuple[ResolvedAddress, ...]:
    """
    Resolves a hostname to its addresses, caching the result.

    Failed lookups raise instead of returning, so lru_cache never keeps them.
    """
    is_ip, family = _is_ip_literal(host)
    if is_ip:
        return (_literal_address(host, cast(int, family)),)

    results: List[ResolvedAddress] = []
    try:
        infos = socket.getaddrinfo(host, None)
    except (socket.gaierror, UnicodeError) as e:
        raise TargetResolutionError(host, str(e)) from e
    for family, socktype, proto, canonname, sockaddr in infos:
        if family == socket.AF_INET:
            if isinstance(sockaddr, tuple) and len(sockaddr) >= 2:
                results.append(ResolvedAddress(family, cast(str, sockaddr[0])))
        elif family == socket.AF_INET6:
            if isinstance(sockaddr, tuple) and len(sockaddr) == 4:
                ip6, flowinfo, scopeid = cast(str, sockaddr[0]), cast(int, sockaddr[2]), cast(int, sockaddr[3])
                results.append(ResolvedAddress(family, ip6, flowinfo, scopeid))

    # getaddrinfo repeats each address once per socket type
    seen = set()
    deduped: List[ResolvedAddress] = []
    for rec in results:
        key = (rec.family, rec.ip, rec.scopeid)
        if key not in seen:
            seen.add(key)
            deduped.append(rec)
    if not deduped:
        raise TargetResolutionError(host, "no addresses found")
    return tuple(deduped)

def resolve_target(target: str) -> ResolvedAddress:
    """
    Resolves a target to the single address every probe of a scan will use.

    Raises TargetResolutionError if the target is empty or does not resolve.
    """
    host = (target or '').strip()
    if host.startswith('[') and host.endswith(']'):
        host = host[1:-1]
    if not host:
        raise TargetResolutionError(target, "empty target")
    return _cached_resolve_host(host)[0]

def clear_resolution_cache() -> None:
    """Forgets cached lookups so the next scan resolves again."""
    _cached_resolve_host.cache_clear()
