"""Turn ordering: least-recently-served stylist first"""
from datetime import datetime
from typing import Any, List, Sequence, Tuple

from .timezones import ensure_utc


def turn_key(stylist: Any) -> Tuple[int, datetime, str]:
    """Never-served stylists sort first, then oldest last_service_at, then id."""
    served = stylist.last_service_at
    if served is None:
        return (0, datetime.min, str(stylist.id))
    return (1, ensure_utc(served).replace(tzinfo=None), str(stylist.id))


def rank_by_turn(stylists: Sequence[Any]) -> List[Any]:
    return sorted(stylists, key=turn_key)


def matches_requested(stylist: Any, requested: str) -> bool:
    """Case-insensitive substring match on the stylist's full name, or exact id."""
    needle = requested.strip().lower()
    if not needle:
        return True
    if str(stylist.id).lower() == needle:
        return True
    return needle in (stylist.full_name or "").lower()
