"""
Ordered candidate domains for remote license validation.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


def strip_protocol(url: str | None) -> str | None:
    """Drop a leading ``scheme://`` and trailing slashes."""
    if not url:
        return None
    stripped = _SCHEME_RE.sub("", url.strip()).rstrip("/")
    return stripped or None


def is_dev_domain(domain: str, markers: Iterable[str]) -> bool:
    host = domain.lower()
    return any(marker and marker.lower() in host for marker in markers)


def candidate_domains(
    domain: str,
    base_url: str | None = None,
    dev_markers: Sequence[str] = (),
    fallbacks: Sequence[str] = (),
) -> list[str]:
    """Domains to try against the authority, most specific first.

    A full development subdomain goes first, then the domain as given, the
    domain without its protocol, the host the license was acquired under,
    and finally the configured generic fallbacks. Empty entries and
    repeats are dropped.
    """
    bare = strip_protocol(domain)
    ordered: list[str | None] = []
    if bare and is_dev_domain(bare, dev_markers):
        ordered.append(bare)
    ordered.extend([domain.strip() or None, bare, strip_protocol(base_url)])
    ordered.extend(fallbacks)

    seen: set[str] = set()
    candidates = []
    for candidate in ordered:
        if candidate and candidate not in seen:
            seen.add(candidate)
            candidates.append(candidate)
    return candidates
