"""Zone matching shared by all DNS providers."""

from __future__ import annotations

from collections.abc import Iterable

APEX = "@"


def _normalize(name: str) -> str:
    return name.rstrip(".").lower()


def find_best_zone(zones: Iterable[str], domain: str) -> str | None:
    """Return the most specific zone that contains ``domain``.

    A zone matches when it equals the domain or is a dot-aligned suffix of
    it, so ``example.com`` matches ``a.example.com`` but not
    ``notexample.com``. Comparison ignores case and a trailing root dot.

    Args:
        zones: Zone names managed by the provider account.
        domain: Fully qualified name the TXT record is published under.

    Returns:
        The longest matching zone as the provider spells it, or ``None``.
    """
    target = _normalize(domain)
    best: str | None = None
    best_length = -1
    for zone in zones:
        candidate = _normalize(zone)
        if not candidate:
            continue
        if target == candidate or target.endswith(f".{candidate}"):
            if len(candidate) > best_length:
                best = zone
                best_length = len(candidate)
    return best


def relative_record_name(domain: str, zone: str) -> str:
    """Name of the record relative to ``zone``; the apex marker when they are equal."""
    target = domain.rstrip(".")
    suffix = _normalize(zone)
    if target.lower() == suffix:
        return APEX
    if not target.lower().endswith(f".{suffix}"):
        raise ValueError(f"Record '{domain}' is not under zone '{zone}'")
    return target[: -(len(suffix) + 1)]
