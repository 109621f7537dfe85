# salon_booking/schemas/__init__.py
from .scheduling import (
    WorkingHoursRequest,
    DayScheduleResponse,
    WorkingHoursResponse,
    AvailableSlotsResponse,
    SlotCheckResponse,
    StylistResponse,
    QueueEntryResponse,
    ParsePhraseRequest,
    ParsedPhraseResponse,
    AppointmentCreateRequest,
    AppointmentBatchItem,
    AppointmentBatchRequest,
    AppointmentCancelRequest,
    AppointmentRescheduleRequest,
    ConversationFlagRequest,
    ConversationFlagsResponse,
)
