# ===== salon_booking/services/availability/availability_service.py =====
from typing import List, Optional
from datetime import date, datetime, timedelta
from uuid import UUID
from sqlalchemy.orm import Session
import logging

from salon_booking.config.settings import get_settings
from salon_booking.models.appointment import Appointment
from salon_booking.models.service import Service, stylist_services
from salon_booking.models.tenant import Tenant
from salon_booking.models.user import User, UserRole
from salon_booking.scheduling.availability import SlotCheck, check_proposed_slot, compute_available_slots
from salon_booking.scheduling.exceptions import ServiceNotFound, StylistNotFound, TenantNotFound
from salon_booking.scheduling.ranges import EffectiveWindow, effective_window
from salon_booking.scheduling.status import BLOCKING_STATUSES
from salon_booking.scheduling.timezones import ensure_utc, local_date, local_day_bounds, to_instant
from salon_booking.scheduling.working_hours import resolve_optional_schedule, resolve_schedule

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Open slots and single-slot checks for a (tenant, stylist, service) tuple"""

    # ------------------------------------------------------------------
    # Loaders shared with the turn and booking services
    # ------------------------------------------------------------------

    @staticmethod
    def get_tenant(db: Session, tenant_id: UUID) -> Tenant:
        tenant = db.query(Tenant).filter(Tenant.id == tenant_id, Tenant.is_active.is_(True)).first()
        if not tenant:
            raise TenantNotFound(f"Tenant {tenant_id} not found")
        return tenant

    @staticmethod
    def get_stylist(db: Session, tenant_id: UUID, stylist_id: UUID, lock: bool = False) -> User:
        """Load a stylist of the tenant; lock=True takes the row lock for the booking transaction."""
        query = db.query(User).filter(
            User.id == stylist_id,
            User.tenant_id == tenant_id,
            User.role == UserRole.STYLIST
        )
        if lock:
            query = query.with_for_update()
        stylist = query.first()
        if not stylist:
            raise StylistNotFound(f"Stylist {stylist_id} not found")
        return stylist

    @staticmethod
    def get_service(db: Session, tenant_id: UUID, service_id: UUID) -> Service:
        # Re-read on every computation: duration may change between requests
        service = db.query(Service).filter(
            Service.id == service_id,
            Service.tenant_id == tenant_id,
            Service.is_active.is_(True)
        ).first()
        if not service:
            raise ServiceNotFound(f"Service {service_id} not found")
        return service

    @staticmethod
    def is_qualified(db: Session, stylist_id: UUID, service_id: UUID) -> bool:
        row = db.query(stylist_services.c.user_id).filter(
            stylist_services.c.user_id == stylist_id,
            stylist_services.c.service_id == service_id
        ).first()
        return row is not None

    @staticmethod
    def blocking_appointments(
            db: Session,
            stylist_id: UUID,
            range_start: datetime,
            range_end: datetime
    ) -> List[Appointment]:
        """Blocking appointments of a stylist overlapping [range_start, range_end)."""
        return db.query(Appointment).filter(
            Appointment.stylist_id == stylist_id,
            Appointment.status.in_(list(BLOCKING_STATUSES)),
            Appointment.start_time < ensure_utc(range_end),
            Appointment.end_time > ensure_utc(range_start)
        ).order_by(Appointment.start_time.asc()).all()

    # ------------------------------------------------------------------
    # Window
    # ------------------------------------------------------------------

    @staticmethod
    def get_effective_window(db: Session, tenant: Tenant, stylist: User, day: date) -> EffectiveWindow:
        tenant_schedule = resolve_schedule(tenant.working_hours)
        stylist_schedule = resolve_optional_schedule(stylist.working_hours)
        return effective_window(tenant_schedule, stylist_schedule, day, tenant.timezone)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    @staticmethod
    def list_available_slots(
            db: Session,
            tenant_id: UUID,
            stylist_id: UUID,
            day: date,
            service_id: UUID,
            granularity_minutes: Optional[int] = None
    ) -> List[datetime]:
        """
        Ascending UTC start instants the stylist can take the service at.

        An empty list is a valid answer: the stylist does not work that day
        or is fully booked.
        """
        granularity = granularity_minutes or get_settings().SLOT_GRANULARITY_MINUTES

        tenant = AvailabilityService.get_tenant(db, tenant_id)
        stylist = AvailabilityService.get_stylist(db, tenant_id, stylist_id)
        service = AvailabilityService.get_service(db, tenant_id, service_id)

        window = AvailabilityService.get_effective_window(db, tenant, stylist, day)
        if window.is_empty:
            logger.info(f"Stylist {stylist_id} has no working hours on {day}")
            return []

        day_start, day_end = local_day_bounds(day, tenant.timezone)
        booked = AvailabilityService.blocking_appointments(db, stylist.id, day_start, day_end)

        slots = compute_available_slots(window, service.duration_minutes, booked, granularity)
        logger.debug(
            f"{len(slots)} open slots for stylist {stylist_id} on {day} "
            f"(window={window.to_strings()}, booked={len(booked)})"
        )
        return slots

    @staticmethod
    def check_slot(
            db: Session,
            tenant: Tenant,
            stylist: User,
            service: Service,
            start: datetime,
            exclude_appointment_id: Optional[UUID] = None,
            duration_minutes: Optional[int] = None
    ) -> SlotCheck:
        """Check with already-loaded rows; the booking transaction calls this inside its lock."""
        duration = duration_minutes or service.duration_minutes
        start = to_instant(start, tenant.timezone)
        end = start + timedelta(minutes=duration)

        window = AvailabilityService.get_effective_window(db, tenant, stylist, local_date(start, tenant.timezone))
        booked = AvailabilityService.blocking_appointments(db, stylist.id, start, end)

        return check_proposed_slot(
            window,
            start,
            duration,
            booked,
            exclude_id=exclude_appointment_id
        )

    @staticmethod
    def is_slot_available(
            db: Session,
            tenant_id: UUID,
            stylist_id: UUID,
            service_id: UUID,
            proposed_start: datetime
    ) -> SlotCheck:
        """Available/unavailable plus reason (outside_working_hours or conflict)."""
        tenant = AvailabilityService.get_tenant(db, tenant_id)
        stylist = AvailabilityService.get_stylist(db, tenant_id, stylist_id)
        service = AvailabilityService.get_service(db, tenant_id, service_id)

        return AvailabilityService.check_slot(db, tenant, stylist, service, proposed_start)
