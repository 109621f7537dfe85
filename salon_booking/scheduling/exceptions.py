# ============================================================================
# salon_booking/scheduling/exceptions.py
# Error hierarchy for the scheduling engine
# ============================================================================
"""
Scheduling errors.

Each error carries the HTTP status and a machine-readable code so the API
layer can render every engine failure with a single exception handler.
None of these are system faults: they describe a negative business result
that the caller (dashboard or conversational layer) is expected to handle.
"""
from typing import Any, Dict, List, Optional


class SchedulingError(Exception):
    """Base class for all scheduling engine errors."""

    status_code: int = 400
    code: str = "scheduling_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "detail": self.message}


class ScheduleValidationError(SchedulingError):
    """Malformed working hours. Surfaced to the configuring user, never retried."""

    status_code = 422
    code = "invalid_schedule"

    def __init__(self, day: Optional[str], message: str):
        prefix = f"Invalid working hours for {day}: " if day else "Invalid working hours: "
        super().__init__(prefix + message)
        self.day = day

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["day"] = self.day
        return data


class TenantNotFound(SchedulingError):
    status_code = 404
    code = "tenant_not_found"


class ServiceNotFound(SchedulingError):
    status_code = 404
    code = "service_not_found"


class AppointmentNotFound(SchedulingError):
    status_code = 404
    code = "appointment_not_found"


class StylistNotFound(SchedulingError):
    status_code = 404
    code = "stylist_not_found"


class NoStylistAvailable(SchedulingError):
    status_code = 409
    code = "no_stylist_available"


class StylistNotQualified(SchedulingError):
    status_code = 422
    code = "stylist_not_qualified"


class OutsideWorkingHours(SchedulingError):
    status_code = 422
    code = "outside_working_hours"


class SlotConflict(SchedulingError):
    """
    The requested window overlaps a blocking appointment.

    Expected under concurrency: the caller should recompute availability and
    retry once.
    """

    status_code = 409
    code = "slot_conflict"

    def __init__(self, message: str, conflicting_ids: Optional[List[Any]] = None):
        super().__init__(message)
        self.conflicting_ids = [str(i) for i in (conflicting_ids or [])]

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["conflicting_ids"] = self.conflicting_ids
        return data


class InvalidStatusTransition(SchedulingError):
    status_code = 409
    code = "invalid_status_transition"

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move appointment from '{current}' to '{target}'")
        self.current = current
        self.target = target
