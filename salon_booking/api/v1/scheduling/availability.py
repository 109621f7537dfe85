# ============================================================================
# salon_booking/api/v1/scheduling/availability.py
# ============================================================================
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date, datetime
from uuid import UUID

from salon_booking.api.dependencies import get_tenant_id
from salon_booking.config.database import get_db
from salon_booking.schemas.scheduling import AvailableSlotsResponse, SlotCheckResponse
from salon_booking.services.availability.availability_service import AvailabilityService

router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("/slots", response_model=AvailableSlotsResponse)
def list_available_slots(
        stylist_id: UUID = Query(...),
        service_id: UUID = Query(...),
        day: date = Query(..., alias="date", description="Tenant-local date, YYYY-MM-DD"),
        tenant_id: UUID = Depends(get_tenant_id),
        db: Session = Depends(get_db)
):
    """
    Open start times (UTC) for a stylist and service on a date.
    An empty list means the stylist is off or fully booked.
    """
    tenant = AvailabilityService.get_tenant(db, tenant_id)
    slots = AvailabilityService.list_available_slots(db, tenant_id, stylist_id, day, service_id)
    return {
        "stylist_id": stylist_id,
        "service_id": service_id,
        "day": day,
        "timezone": tenant.timezone,
        "slots": slots,
    }


@router.get("/check", response_model=SlotCheckResponse)
def check_slot(
        stylist_id: UUID = Query(...),
        service_id: UUID = Query(...),
        start: datetime = Query(..., description="Proposed start; without offset it is tenant-local"),
        tenant_id: UUID = Depends(get_tenant_id),
        db: Session = Depends(get_db)
):
    """Whether a proposed start is bookable, and why not."""
    result = AvailabilityService.is_slot_available(db, tenant_id, stylist_id, service_id, start)
    return result.to_dict()
