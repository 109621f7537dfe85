"""
Pydantic schemas for the scheduling API
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import date, datetime
from uuid import UUID


# ============================================================================
# Working hours
# ============================================================================

class WorkingHoursRequest(BaseModel):
    """
    Raw working hours as configured by the tenant.

    Accepts any of the historical shapes (single ranges, lists of ranges,
    group keys, English or Spanish day names); the resolver validates them.
    """
    working_hours: Optional[Any] = None


class DayScheduleResponse(BaseModel):
    active: bool
    ranges: List[str] = Field(default_factory=list)


class WorkingHoursResponse(BaseModel):
    working_hours: Dict[str, DayScheduleResponse]


# ============================================================================
# Availability
# ============================================================================

class AvailableSlotsResponse(BaseModel):
    stylist_id: UUID
    service_id: UUID
    day: date = Field(..., serialization_alias="date")
    timezone: str
    slots: List[datetime]


class SlotCheckResponse(BaseModel):
    available: bool
    reason: Optional[str] = None
    conflicting_ids: List[str] = Field(default_factory=list)


# ============================================================================
# Stylists
# ============================================================================

class StylistResponse(BaseModel):
    id: str
    name: str
    last_service_at: Optional[str] = None


class QueueEntryResponse(StylistResponse):
    is_busy: bool
    status_label: str


# ============================================================================
# Phrase parsing
# ============================================================================

class ParsePhraseRequest(BaseModel):
    text: Optional[str] = Field(None, max_length=200)


class ParsedPhraseResponse(BaseModel):
    value: str
    confident: bool
    rule: str


# ============================================================================
# Appointments
# ============================================================================

class AppointmentCreateRequest(BaseModel):
    """
    Create an appointment.

    Without stylist_id the next stylist in turn is assigned; `stylist` may
    narrow that choice by name.
    """
    client_id: UUID
    service_id: UUID
    start: datetime
    stylist_id: Optional[UUID] = None
    stylist: Optional[str] = Field(None, max_length=200)


class AppointmentBatchItem(BaseModel):
    stylist_id: UUID
    service_id: UUID
    start: datetime


class AppointmentBatchRequest(BaseModel):
    client_id: UUID
    items: List[AppointmentBatchItem] = Field(..., min_length=1, max_length=20)


class AppointmentCancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


class AppointmentRescheduleRequest(BaseModel):
    start: datetime


# ============================================================================
# Conversation flags
# ============================================================================

class ConversationFlagRequest(BaseModel):
    value: str = Field(..., max_length=500)


class ConversationFlagsResponse(BaseModel):
    chat_id: str
    flags: Dict[str, str]
