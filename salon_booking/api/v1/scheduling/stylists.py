# ============================================================================
# salon_booking/api/v1/scheduling/stylists.py
# ============================================================================
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from salon_booking.api.dependencies import get_tenant_id
from salon_booking.config.database import get_db
from salon_booking.schemas.scheduling import QueueEntryResponse, StylistResponse
from salon_booking.services.turn.turn_assignment_service import TurnAssignmentService

router = APIRouter(prefix="/stylists", tags=["stylists"])


@router.get("/suggest", response_model=StylistResponse)
def suggest_stylist(
        service_id: UUID = Query(...),
        start: datetime = Query(...),
        stylist: Optional[str] = Query(None, description="Requested stylist id or name"),
        tenant_id: UUID = Depends(get_tenant_id),
        db: Session = Depends(get_db)
):
    """
    Next stylist in turn who is qualified and free at `start`.
    409 when nobody is available, 404 when the requested name matches nobody.
    """
    chosen = TurnAssignmentService.suggest_stylist(db, tenant_id, service_id, start, requested_stylist=stylist)
    return chosen.to_dict()


@router.get("/queue", response_model=List[QueueEntryResponse])
def get_turn_queue(
        service_id: UUID = Query(...),
        start: datetime = Query(...),
        tenant_id: UUID = Depends(get_tenant_id),
        db: Session = Depends(get_db)
):
    """Qualified stylists in turn order, available first and busy after."""
    entries = TurnAssignmentService.get_turn_queue(db, tenant_id, service_id, start)
    return [entry.to_dict() for entry in entries]
