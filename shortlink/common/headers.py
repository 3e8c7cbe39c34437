"""Derive the public origin of a request that may have crossed reverse proxies."""

from typing import Mapping, Optional, Tuple

from fastapi import Request


def _first_hop(value: Optional[str]) -> Optional[str]:
    # Proxies append, so the left-most entry is the one the client saw
    if not value:
        return None
    return value.split(",")[0].strip() or None


def parse_forwarded(value: Optional[str]) -> Tuple[Optional[str], Optional[str]]:
    """Read proto and host from the first element of an RFC 7239 Forwarded header.

    >>> parse_forwarded('for=1.2.3.4;proto=https;host="sho.rt", for=10.0.0.1')
    ('https', 'sho.rt')
    """
    element = _first_hop(value)
    if element is None:
        return None, None

    pairs = {}
    for part in element.split(";"):
        key, sep, val = part.partition("=")
        if sep:
            pairs[key.strip().lower()] = val.strip().strip('"')
    return pairs.get("proto"), pairs.get("host")


def forwarded_origin(headers: Mapping[str, str]) -> Optional[str]:
    """Origin advertised by a proxy, or None when the headers do not name one.

    Forwarded wins over the X-Forwarded-* pair. Header lookups must be
    case-insensitive, as Starlette's Headers are.
    """
    proto, host = parse_forwarded(headers.get("forwarded"))
    if not (proto and host):
        proto = _first_hop(headers.get("x-forwarded-proto"))
        host = _first_hop(headers.get("x-forwarded-host"))
    if proto and host:
        return f"{proto.lower()}://{host}"
    return None


def build_base_url(request: Request, fallback_base_url: str) -> str:
    """Public origin for short URLs built while serving request.

    Priority:
    1. Forwarded / X-Forwarded-Proto + X-Forwarded-Host
    2. The request's own scheme and Host header
    3. The configured base URL
    """
    origin = forwarded_origin(request.headers)
    if origin:
        return origin

    host = request.headers.get("host")
    if host:
        return f"{request.url.scheme}://{host}"

    return fallback_base_url.rstrip("/")
