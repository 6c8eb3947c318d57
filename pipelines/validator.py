from __future__ import annotations

from typing import Any, Iterable, Set
from urllib.parse import urlsplit

_SCHEMES = ("http", "https")


def _host_variants(allowed_hosts: Iterable[str]) -> Set[str]:
    out: Set[str] = set()
    for h in allowed_hosts:
        h = str(h).strip().lower()
        if not h:
            continue
        if h.startswith("www."):
            h = h[4:]
        out.add(h)
        out.add(f"www.{h}")
    return out


def is_valid_repository_url(url: Any, allowed_hosts: Iterable[str] = ("github.com",)) -> bool:
    """
    Pure predicate: is `url` an http(s) URL on an allow-listed host with at
    least an owner/repo path? Never raises.

    Surrounding whitespace is rejected rather than stripped: the string that
    passes here is the exact string handed to the tool.
    """
    if not isinstance(url, str) or not url or url != url.strip():
        return False

    try:
        parts = urlsplit(url)
        # .port raises on garbage like "github.com:abc"
        _ = parts.port
    except ValueError:
        return False

    if parts.scheme.lower() not in _SCHEMES:
        return False

    host = (parts.hostname or "").lower()
    if not host or host not in _host_variants(allowed_hosts):
        return False

    segments = [s for s in parts.path.split("/") if s]
    return len(segments) >= 2
