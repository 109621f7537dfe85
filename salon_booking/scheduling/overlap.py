"""
Overlap Detection

Intervals are half-open: [14:00, 15:00) does not conflict with [15:00, 16:00).
Only appointments in a blocking status occupy the calendar.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List, Optional

from .status import is_blocking
from .timezones import ensure_utc


@dataclass
class OverlapResult:
    available: bool
    conflicting_ids: List[Any] = field(default_factory=list)


def intervals_overlap(s1: datetime, e1: datetime, s2: datetime, e2: datetime) -> bool:
    return s1 < e2 and s2 < e1


def blocking_only(appointments: Iterable[Any]) -> List[Any]:
    return [appt for appt in appointments if is_blocking(appt.status)]


def check_overlap(
        start: datetime,
        end: datetime,
        appointments: Iterable[Any],
        exclude_id: Optional[Any] = None
) -> OverlapResult:
    """
    Test a candidate interval against existing appointments.

    Appointments are any objects exposing id, status, start_time and
    end_time (ORM rows or plain records).
    """
    start, end = ensure_utc(start), ensure_utc(end)
    conflicts = []
    for appt in blocking_only(appointments):
        if exclude_id is not None and appt.id == exclude_id:
            continue
        if intervals_overlap(start, end, ensure_utc(appt.start_time), ensure_utc(appt.end_time)):
            conflicts.append(appt.id)
    return OverlapResult(available=not conflicts, conflicting_ids=conflicts)
