"""
Pure availability composition: window -> candidate slots -> overlap filter.

The database-backed AvailabilityService loads rows and delegates here, so
the same logic runs inside the booking transaction and in unit tests.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Iterable, List, Optional

from .overlap import blocking_only, check_overlap
from .ranges import EffectiveWindow
from .slots import DEFAULT_GRANULARITY_MINUTES, SlotSequence
from .timezones import ensure_utc

REASON_OUTSIDE_WORKING_HOURS = "outside_working_hours"
REASON_CONFLICT = "conflict"


@dataclass
class SlotCheck:
    available: bool
    reason: Optional[str] = None
    conflicting_ids: List[Any] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "available": self.available,
            "reason": self.reason,
            "conflicting_ids": [str(i) for i in self.conflicting_ids],
        }


def compute_available_slots(
        window: EffectiveWindow,
        duration_minutes: int,
        appointments: Iterable[Any],
        granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES
) -> List[datetime]:
    """Ascending candidate starts whose [start, start + duration) is free."""
    blocking = blocking_only(appointments)
    duration = timedelta(minutes=duration_minutes)
    return [
        start for start in SlotSequence(window, duration_minutes, granularity_minutes)
        if check_overlap(start, start + duration, blocking).available
    ]


def check_proposed_slot(
        window: EffectiveWindow,
        start: datetime,
        duration_minutes: int,
        appointments: Iterable[Any],
        exclude_id: Optional[Any] = None
) -> SlotCheck:
    start = ensure_utc(start)
    end = start + timedelta(minutes=duration_minutes)

    if not window.contains(start, end):
        return SlotCheck(available=False, reason=REASON_OUTSIDE_WORKING_HOURS)

    overlap = check_overlap(start, end, appointments, exclude_id=exclude_id)
    if not overlap.available:
        return SlotCheck(available=False, reason=REASON_CONFLICT, conflicting_ids=overlap.conflicting_ids)

    return SlotCheck(available=True)
