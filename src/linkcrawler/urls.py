"""
URL canonicalization, resolution and host scoping.
"""
from __future__ import annotations

from typing import Optional
from urllib.parse import unquote, urljoin, urlsplit

# Ports dropped from the canonical host
DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_url(raw_url: str) -> str:
    """
    Canonicalize a URL into a host/path key for deduplication.

    - Lowercases the whole key
    - Removes default ports (:80 for http, :443 for https)
    - Drops scheme, user-info, query and fragment
    - Removes a trailing slash; the root path collapses to the bare host

    Input without a recognizable host is returned unchanged.
    """
    url = "http:" + raw_url if raw_url.startswith("//") else raw_url

    try:
        parsed = urlsplit(url)
    except ValueError:
        return raw_url

    hostname = parsed.hostname
    if not parsed.netloc or not hostname:
        return raw_url

    try:
        port = parsed.port
    except ValueError:
        # Unusable port: keep the host as written, minus user-info
        host = parsed.netloc.rpartition("@")[2].lower()
    else:
        host = _format_host(hostname, port, parsed.scheme.lower())

    path = unquote(parsed.path)
    if len(path) > 1 and path.endswith("/"):
        path = path[:-1]
    if path in ("", "/"):
        return host

    return (host + path).lower()


def _format_host(hostname: str, port: Optional[int], scheme: str) -> str:
    if ":" in hostname:
        hostname = f"[{hostname}]"
    if port is None or DEFAULT_PORTS.get(scheme) == port:
        return hostname
    return f"{hostname}:{port}"


def _hostname(url: str) -> Optional[str]:
    """Return the lowercased hostname, or None if the URL does not parse."""
    try:
        parsed = urlsplit(url.lower())
        parsed.port  # validates the port
    except ValueError:
        return None
    return parsed.hostname


def same_domain(base_url: str, other_url: str) -> bool:
    """
    Check if two URLs share a hostname.

    Scheme, port, path, query, fragment and user-info are ignored. An
    unparsable URL or a missing hostname is never in scope.
    """
    base_host = _hostname(base_url)
    other_host = _hostname(other_url)
    if not base_host or not other_host:
        return False
    return base_host == other_host


def resolve_url(href: str, base_url: str) -> str:
    """Resolve a reference against a base URL (RFC 3986, section 5)."""
    return urljoin(base_url, href)
