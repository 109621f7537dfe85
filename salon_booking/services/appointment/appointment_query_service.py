# ============================================================================
# salon_booking/services/appointment/appointment_query_service.py
# Pure business logic - no FastAPI dependencies, fully testable
# ============================================================================
from sqlalchemy.orm import Session
from datetime import date, datetime
from typing import Optional, Dict, Any
from uuid import UUID

from salon_booking.models.appointment import Appointment
from salon_booking.scheduling.exceptions import AppointmentNotFound
from salon_booking.scheduling.status import coerce_status
from salon_booking.scheduling.timezones import local_day_bounds
from salon_booking.services.availability.availability_service import AvailabilityService


class AppointmentQueryService:
    """Read-side queries over a tenant's appointments."""

    @staticmethod
    def list_appointments(
            db: Session,
            tenant_id: UUID,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None,
            stylist_id: Optional[UUID] = None,
            status: Optional[str] = None,
            skip: int = 0,
            limit: int = 50
    ) -> Dict[str, Any]:
        """
        Paginated appointments ordered by start time.

        Dates are tenant-local calendar days; end_date is inclusive.
        """
        tenant = AvailabilityService.get_tenant(db, tenant_id)
        query = db.query(Appointment).filter(Appointment.tenant_id == tenant_id)

        if start_date:
            range_start, _ = local_day_bounds(start_date, tenant.timezone)
            query = query.filter(Appointment.start_time >= range_start)
        if end_date:
            _, range_end = local_day_bounds(end_date, tenant.timezone)
            query = query.filter(Appointment.start_time < range_end)
        if stylist_id:
            query = query.filter(Appointment.stylist_id == stylist_id)
        if status:
            query = query.filter(Appointment.status == coerce_status(status))

        query = query.order_by(Appointment.start_time.asc())
        total = query.count()
        appointments = query.offset(skip).limit(limit).all()

        return {
            "tenant_id": str(tenant_id),
            "total_appointments": total,
            "page": {
                "skip": skip,
                "limit": limit,
                "total_pages": (total + limit - 1) // limit if total > 0 else 0
            },
            "filters": {
                "start_date": start_date.isoformat() if start_date else None,
                "end_date": end_date.isoformat() if end_date else None,
                "stylist_id": str(stylist_id) if stylist_id else None,
                "status": status,
            },
            "appointments": [appt.to_dict() for appt in appointments]
        }

    @staticmethod
    def get_appointment(db: Session, tenant_id: UUID, appointment_id: UUID) -> Dict[str, Any]:
        appointment = db.query(Appointment).filter(
            Appointment.id == appointment_id,
            Appointment.tenant_id == tenant_id
        ).first()

        if not appointment:
            raise AppointmentNotFound(f"Appointment {appointment_id} not found")

        data = appointment.to_dict()
        if appointment.cancelled_at:
            data["cancelled_at"] = appointment.cancelled_at.isoformat()
        return data
