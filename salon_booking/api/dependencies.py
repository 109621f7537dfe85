# ============================================================================
# FILE: salon_booking/api/dependencies.py
# Tenant scoping and service dependencies
# ============================================================================
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session
from uuid import UUID
import redis

from salon_booking.config.database import get_db
from salon_booking.config.redis import get_redis
from salon_booking.config.settings import get_settings
from salon_booking.services.appointment.booking_service import BookingService
from salon_booking.services.conversation.session_store import ConversationSessionStore
from salon_booking.services.events.event_publisher import EventPublisher


def get_tenant_id(x_tenant_id: str = Header(..., alias="X-Tenant-ID")) -> UUID:
    """
    Tenant the request acts on.

    Every query is scoped by this id; tenants never see each other's data.
    """
    try:
        return UUID(x_tenant_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Tenant-ID must be a UUID"
        )


def get_redis_client() -> redis.Redis:
    return get_redis()


def get_event_publisher(redis_client: redis.Redis = Depends(get_redis_client)) -> EventPublisher:
    return EventPublisher(redis_client, enabled=get_settings().EVENTS_ENABLED)


def get_session_store(redis_client: redis.Redis = Depends(get_redis_client)) -> ConversationSessionStore:
    return ConversationSessionStore(redis_client, ttl_seconds=get_settings().SESSION_TTL_SECONDS)


def get_booking_service(
        db: Session = Depends(get_db),
        publisher: EventPublisher = Depends(get_event_publisher)
) -> BookingService:
    return BookingService(db, event_publisher=publisher)
