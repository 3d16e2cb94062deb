"""
URL normalization and origin classification.
"""
from __future__ import annotations

from typing import Optional, Tuple
from urllib.parse import urldefrag, urljoin, urlsplit, urlunsplit

# Hrefs with these prefixes never become addresses
EXCLUDED_PREFIXES: Tuple[str, ...] = ("mailto:", "javascript:", "#")
EXCLUDED_HREFS: frozenset[str] = frozenset(("about:blank",))

DEFAULT_PORTS = {"http": 80, "https": 443}

Origin = Tuple[str, str, Optional[int]]


def normalize_url(href: str, base: str) -> Optional[str]:
    """
    Canonicalize an href into an absolute address.

    - Trims whitespace, rejects empty, mailto:, javascript:, pure fragments
      and about:blank
    - Drops the fragment, then resolves against base
    - Lowercases the host and drops default ports (:80, :443)
    - Strips a single trailing slash unless the path is the root
    - Returns None for anything that cannot be resolved to http(s)
    """
    href = (href or "").strip()
    if not href or href in EXCLUDED_HREFS:
        return None
    if href.lower().startswith(EXCLUDED_PREFIXES):
        return None

    href, _ = urldefrag(href)
    try:
        parsed = urlsplit(urljoin(base, href))
        # Accessing .port raises ValueError for a malformed port
        parsed.port
    except ValueError:
        return None

    scheme = parsed.scheme.lower()
    if scheme not in DEFAULT_PORTS or not parsed.hostname:
        return None

    # Lowercase host, drop default port
    hostname = parsed.hostname.lower()
    if ":" in hostname:
        hostname = f"[{hostname}]"
    port = parsed.port
    netloc = f"{hostname}:{port}" if port and port != DEFAULT_PORTS[scheme] else hostname

    path = parsed.path or "/"
    if path != "/" and path.endswith("/"):
        path = path[:-1]

    return urlunsplit((scheme, netloc, path, parsed.query, ""))


def origin_of(url: str) -> Origin:
    """Return the (scheme, host, port) tuple, with default ports filled in."""
    parsed = urlsplit(url)
    scheme = parsed.scheme.lower()
    return scheme, (parsed.hostname or "").lower(), parsed.port or DEFAULT_PORTS.get(scheme)


def is_internal(url: str, origin: Origin) -> bool:
    """Check if URL shares scheme, host and port with the given origin."""
    return origin_of(url) == origin


def resolve_redirect(location: str, current: str) -> Optional[str]:
    """Resolve a Location header value relative to the redirecting address."""
    return normalize_url(location, base=current)
