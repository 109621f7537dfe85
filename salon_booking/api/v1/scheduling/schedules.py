# ============================================================================
# salon_booking/api/v1/scheduling/schedules.py
# Working hours configuration - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session
from uuid import UUID
import logging

from salon_booking.api.dependencies import get_tenant_id
from salon_booking.config.database import get_db
from salon_booking.schemas.scheduling import WorkingHoursRequest, WorkingHoursResponse
from salon_booking.scheduling.working_hours import resolve_schedule
from salon_booking.services.availability.availability_service import AvailabilityService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/schedules", tags=["schedules"])


@router.post("/validate", response_model=WorkingHoursResponse)
async def validate_schedule(body: WorkingHoursRequest):
    """
    Resolve raw working hours into the canonical per-day form without saving.
    Malformed input is rejected with 422 naming the offending day.
    """
    schedule = resolve_schedule(body.working_hours)
    return {"working_hours": schedule.to_dict(all_days=True)}


@router.put("/tenant", response_model=WorkingHoursResponse)
def update_tenant_schedule(
        body: WorkingHoursRequest,
        tenant_id: UUID = Depends(get_tenant_id),
        db: Session = Depends(get_db)
):
    """Replace the tenant's working hours; stored in canonical form."""
    tenant = AvailabilityService.get_tenant(db, tenant_id)
    canonical = resolve_schedule(body.working_hours).to_dict(all_days=True)

    tenant.working_hours = canonical
    db.commit()
    logger.info(f"Updated working hours for tenant {tenant_id}")
    return {"working_hours": canonical}


@router.put("/stylists/{stylist_id}")
def update_stylist_schedule(
        body: WorkingHoursRequest,
        stylist_id: UUID = Path(..., description="The stylist ID"),
        tenant_id: UUID = Depends(get_tenant_id),
        db: Session = Depends(get_db)
):
    """
    Replace a stylist's own working hours.
    Sending null clears them so the stylist inherits the tenant schedule.
    """
    stylist = AvailabilityService.get_stylist(db, tenant_id, stylist_id)

    if body.working_hours is None:
        stylist.working_hours = None
        db.commit()
        logger.info(f"Stylist {stylist_id} now inherits tenant working hours")
        return {"working_hours": None, "inherits_tenant": True}

    canonical = resolve_schedule(body.working_hours).to_dict()
    stylist.working_hours = canonical
    db.commit()
    logger.info(f"Updated working hours for stylist {stylist_id}")
    return {"working_hours": canonical, "inherits_tenant": False}
