"""
API v1 router setup
Every route is tenant-scoped through the X-Tenant-ID header
"""
from fastapi import APIRouter

from salon_booking.api.v1.scheduling import appointments, availability, conversations, parsing, schedules, stylists

api_v1_router = APIRouter()

api_v1_router.include_router(schedules.router)
api_v1_router.include_router(availability.router)
api_v1_router.include_router(stylists.router)
api_v1_router.include_router(parsing.router)
api_v1_router.include_router(appointments.router)
api_v1_router.include_router(conversations.router)


@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """API information and available route groups."""
    return {
        "version": "1.0",
        "tenant_header": "X-Tenant-ID",
        "groups": ["schedules", "availability", "stylists", "parse", "appointments", "conversations"]
    }
