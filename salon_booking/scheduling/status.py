"""Appointment status state machine and the blocking set"""
import enum
from typing import Dict, FrozenSet, Union


class AppointmentStatus(str, enum.Enum):
    """Lifecycle of an appointment."""
    SCHEDULED = "scheduled"
    RESCHEDULED = "rescheduled"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses that occupy the stylist's calendar for conflict purposes
BLOCKING_STATUSES: FrozenSet[AppointmentStatus] = frozenset({
    AppointmentStatus.SCHEDULED,
    AppointmentStatus.RESCHEDULED,
    AppointmentStatus.CHECKED_IN,
})

ALLOWED_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset({
        AppointmentStatus.RESCHEDULED,
        AppointmentStatus.CHECKED_IN,
        AppointmentStatus.CANCELLED,
    }),
    AppointmentStatus.RESCHEDULED: frozenset({
        AppointmentStatus.RESCHEDULED,
        AppointmentStatus.CHECKED_IN,
        AppointmentStatus.CANCELLED,
    }),
    AppointmentStatus.CHECKED_IN: frozenset({
        AppointmentStatus.CHECKED_OUT,
        AppointmentStatus.CANCELLED,
    }),
    AppointmentStatus.CHECKED_OUT: frozenset({
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
    }),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}


def coerce_status(value: Union[str, AppointmentStatus]) -> AppointmentStatus:
    """Map a stored value to the enum. Unknown strings raise ValueError."""
    if isinstance(value, AppointmentStatus):
        return value
    return AppointmentStatus(str(value).strip().lower())


def is_blocking(value: Union[str, AppointmentStatus]) -> bool:
    return coerce_status(value) in BLOCKING_STATUSES


def can_transition(current: Union[str, AppointmentStatus], target: Union[str, AppointmentStatus]) -> bool:
    return coerce_status(target) in ALLOWED_TRANSITIONS[coerce_status(current)]
