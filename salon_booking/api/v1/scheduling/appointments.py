# ============================================================================
# salon_booking/api/v1/scheduling/appointments.py
# Booking and lifecycle endpoints - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Query, Path, status
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from uuid import UUID

from salon_booking.api.dependencies import get_booking_service, get_tenant_id
from salon_booking.config.database import get_db
from salon_booking.schemas.scheduling import (
    AppointmentBatchRequest,
    AppointmentCancelRequest,
    AppointmentCreateRequest,
    AppointmentRescheduleRequest,
)
from salon_booking.scheduling.status import AppointmentStatus
from salon_booking.services.appointment.appointment_query_service import AppointmentQueryService
from salon_booking.services.appointment.booking_service import BookingRequest, BookingService
from salon_booking.services.turn.turn_assignment_service import TurnAssignmentService

router = APIRouter(prefix="/appointments", tags=["appointments"])

# Write routes are sync: they hold a row lock for the length of the transaction


@router.post("", status_code=status.HTTP_201_CREATED)
def create_appointment(
        body: AppointmentCreateRequest,
        tenant_id: UUID = Depends(get_tenant_id),
        booking: BookingService = Depends(get_booking_service)
):
    """
    Book an appointment.

    Without stylist_id the next stylist in turn is assigned. The booking
    itself re-checks availability, so a 409 slot_conflict means someone else
    took the slot first: recompute availability and try again.
    """
    stylist_id = body.stylist_id
    if stylist_id is None:
        stylist_id = TurnAssignmentService.suggest_stylist(
            booking.db, tenant_id, body.service_id, body.start, requested_stylist=body.stylist
        ).id

    appointment = booking.book(tenant_id, body.client_id, stylist_id, body.service_id, body.start)
    return appointment.to_dict()


@router.post("/batch", status_code=status.HTTP_201_CREATED)
def create_appointments_batch(
        body: AppointmentBatchRequest,
        tenant_id: UUID = Depends(get_tenant_id),
        booking: BookingService = Depends(get_booking_service)
):
    """Book several appointments at once; if any fails, none are created."""
    items = [BookingRequest(item.stylist_id, item.service_id, item.start) for item in body.items]
    appointments = booking.book_batch(tenant_id, body.client_id, items)
    return {
        "total_appointments": len(appointments),
        "appointments": [appt.to_dict() for appt in appointments]
    }


@router.patch("/{appointment_id}/checkin")
def check_in(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        tenant_id: UUID = Depends(get_tenant_id),
        booking: BookingService = Depends(get_booking_service)
):
    return booking.check_in(tenant_id, appointment_id).to_dict()


@router.patch("/{appointment_id}/checkout")
def check_out(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        tenant_id: UUID = Depends(get_tenant_id),
        booking: BookingService = Depends(get_booking_service)
):
    """Finish the service; the stylist moves to the back of the turn queue."""
    return booking.check_out(tenant_id, appointment_id).to_dict()


@router.patch("/{appointment_id}/complete")
def complete(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        tenant_id: UUID = Depends(get_tenant_id),
        booking: BookingService = Depends(get_booking_service)
):
    return booking.complete(tenant_id, appointment_id).to_dict()


@router.patch("/{appointment_id}/cancel")
def cancel(
        body: AppointmentCancelRequest,
        appointment_id: UUID = Path(..., description="The appointment ID"),
        tenant_id: UUID = Depends(get_tenant_id),
        booking: BookingService = Depends(get_booking_service)
):
    return booking.cancel(tenant_id, appointment_id, reason=body.reason).to_dict()


@router.patch("/{appointment_id}/reschedule")
def reschedule(
        body: AppointmentRescheduleRequest,
        appointment_id: UUID = Path(..., description="The appointment ID"),
        tenant_id: UUID = Depends(get_tenant_id),
        booking: BookingService = Depends(get_booking_service)
):
    return booking.reschedule(tenant_id, appointment_id, body.start).to_dict()


@router.get("")
def list_appointments(
        start_date: Optional[date] = Query(None, description="Appointments starting on or after this date"),
        end_date: Optional[date] = Query(None, description="Appointments starting on or before this date"),
        stylist_id: Optional[UUID] = Query(None),
        status: Optional[AppointmentStatus] = Query(None),
        skip: int = Query(0, ge=0, description="Number of records to skip"),
        limit: int = Query(50, ge=1, le=100, description="Number of records to return"),
        tenant_id: UUID = Depends(get_tenant_id),
        db: Session = Depends(get_db)
):
    return AppointmentQueryService.list_appointments(
        db=db,
        tenant_id=tenant_id,
        start_date=start_date,
        end_date=end_date,
        stylist_id=stylist_id,
        status=status.value if status else None,
        skip=skip,
        limit=limit
    )


@router.get("/{appointment_id}")
def get_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        tenant_id: UUID = Depends(get_tenant_id),
        db: Session = Depends(get_db)
):
    return AppointmentQueryService.get_appointment(db, tenant_id, appointment_id)
