# salon_booking/scheduling/__init__.py
from .exceptions import (
    SchedulingError,
    ScheduleValidationError,
    TenantNotFound,
    ServiceNotFound,
    AppointmentNotFound,
    StylistNotFound,
    NoStylistAvailable,
    StylistNotQualified,
    OutsideWorkingHours,
    SlotConflict,
    InvalidStatusTransition,
)
from .status import AppointmentStatus, BLOCKING_STATUSES, ALLOWED_TRANSITIONS
from .ranges import TimeRange, EffectiveWindow, intersect_ranges, effective_window
from .working_hours import WeeklySchedule, DaySchedule, resolve_schedule, resolve_optional_schedule
from .slots import SlotSequence, generate_slots
from .overlap import OverlapResult, check_overlap, intervals_overlap
from .availability import SlotCheck, compute_available_slots, check_proposed_slot
from .date_parser import parse_date_phrase, parse_time_phrase, interpret_date_phrase, interpret_time_phrase

__all__ = [
    "SchedulingError",
    "ScheduleValidationError",
    "TenantNotFound",
    "ServiceNotFound",
    "AppointmentNotFound",
    "StylistNotFound",
    "NoStylistAvailable",
    "StylistNotQualified",
    "OutsideWorkingHours",
    "SlotConflict",
    "InvalidStatusTransition",
    "AppointmentStatus",
    "BLOCKING_STATUSES",
    "ALLOWED_TRANSITIONS",
    "TimeRange",
    "EffectiveWindow",
    "intersect_ranges",
    "effective_window",
    "WeeklySchedule",
    "DaySchedule",
    "resolve_schedule",
    "resolve_optional_schedule",
    "SlotSequence",
    "generate_slots",
    "OverlapResult",
    "check_overlap",
    "intervals_overlap",
    "SlotCheck",
    "compute_available_slots",
    "check_proposed_slot",
    "parse_date_phrase",
    "parse_time_phrase",
    "interpret_date_phrase",
    "interpret_time_phrase",
]
