# ============================================================================
# salon_booking/api/v1/scheduling/parsing.py
# Free-text date and time normalization for the conversational layer
# ============================================================================
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from uuid import UUID

from salon_booking.api.dependencies import get_tenant_id
from salon_booking.config.database import get_db
from salon_booking.config.settings import get_settings
from salon_booking.schemas.scheduling import ParsePhraseRequest, ParsedPhraseResponse
from salon_booking.scheduling.date_parser import interpret_date_phrase, interpret_time_phrase
from salon_booking.services.availability.availability_service import AvailabilityService

router = APIRouter(prefix="/parse", tags=["parsing"])


@router.post("/date", response_model=ParsedPhraseResponse)
def parse_date(
        body: ParsePhraseRequest,
        tenant_id: UUID = Depends(get_tenant_id),
        db: Session = Depends(get_db)
):
    """
    Canonical YYYY-MM-DD in the tenant's timezone.
    Unparseable text resolves to today with confident=false, never an error.
    """
    tenant = AvailabilityService.get_tenant(db, tenant_id)
    parsed = interpret_date_phrase(
        body.text,
        tenant.timezone,
        max_next_days=get_settings().NEXT_WEEKDAY_MAX_DAYS
    )
    return parsed._asdict()


@router.post("/time", response_model=ParsedPhraseResponse)
async def parse_time(body: ParsePhraseRequest):
    """Canonical 24-hour HH:MM; unparseable text gives the configured fallback."""
    parsed = interpret_time_phrase(body.text, fallback=get_settings().FALLBACK_TIME)
    return parsed._asdict()
