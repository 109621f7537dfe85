"""
Range arithmetic over minute-of-day intervals

TimeRange is the unit every schedule is expressed in. intersect_ranges
combines a tenant's and a stylist's ranges for one day; EffectiveWindow pins
the result to a concrete date and timezone so it can be turned into
absolute instants.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from .timezones import TzLike, ensure_utc, local_to_utc


@dataclass(frozen=True, order=True)
class TimeRange:
    """Half-open [open, close) in minutes after local midnight."""
    open: int
    close: int

    @property
    def duration(self) -> int:
        return self.close - self.open

    def to_string(self) -> str:
        return f"{format_minutes(self.open)}-{format_minutes(self.close)}"

    def __str__(self) -> str:
        return self.to_string()


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def intersect_ranges(a: Sequence[TimeRange], b: Sequence[TimeRange]) -> List[TimeRange]:
    """
    All non-empty pairwise intersections of two disjoint range lists.

    Since each input is disjoint, the intersections are disjoint too; the
    result is sorted ascending.
    """
    out = []
    for left in a:
        for right in b:
            start = max(left.open, right.open)
            end = min(left.close, right.close)
            if end > start:
                out.append(TimeRange(start, end))
    return sorted(out)


def ranges_are_disjoint(ranges: Iterable[TimeRange]) -> bool:
    ordered = sorted(ranges)
    return all(prev.close <= nxt.open for prev, nxt in zip(ordered, ordered[1:]))


@dataclass(frozen=True)
class EffectiveWindow:
    """Open ranges for one stylist on one local date. Derived, never stored."""
    day: date
    timezone: str
    ranges: Tuple[TimeRange, ...]

    @property
    def is_empty(self) -> bool:
        return not self.ranges

    def instants(self) -> List[Tuple[datetime, datetime]]:
        """UTC bounds of each range on this date."""
        return [
            (local_to_utc(self.day, r.open, self.timezone), local_to_utc(self.day, r.close, self.timezone))
            for r in self.ranges
        ]

    def contains(self, start: datetime, end: datetime) -> bool:
        """True if [start, end) lies inside one range (start inclusive, end may touch close)."""
        start, end = ensure_utc(start), ensure_utc(end)
        return any(open_at <= start and end <= close_at for open_at, close_at in self.instants())

    def to_strings(self) -> List[str]:
        return [r.to_string() for r in self.ranges]


def effective_window(
        tenant_schedule,
        stylist_schedule,
        day: date,
        tz: TzLike,
) -> EffectiveWindow:
    """
    Intersect the tenant's and the stylist's ranges for a date.

    A stylist schedule of None, or one that does not declare the weekday,
    inherits the tenant ranges for that day.
    """
    weekday = day.weekday()
    tenant_ranges = tenant_schedule.ranges_for(weekday)
    stylist_ranges: Optional[Sequence[TimeRange]] = None
    if stylist_schedule is not None:
        stylist_ranges = stylist_schedule.declared_ranges_for(weekday)
    if stylist_ranges is None:
        stylist_ranges = tenant_ranges

    zone_name = tz if isinstance(tz, str) else str(tz)
    return EffectiveWindow(day=day, timezone=zone_name, ranges=tuple(intersect_ranges(tenant_ranges, stylist_ranges)))
