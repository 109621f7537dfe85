# ============================================================================
# salon_booking/services/appointment/booking_service.py
# Atomic appointment creation and status transitions
# ============================================================================
"""
Booking transaction.

Every write that can make a stylist's calendar overlap goes through here.
The stylist row is locked with SELECT ... FOR UPDATE, blocking appointments
are re-read under that lock, and the insert is the only write before commit.
Two bookings for the same stylist therefore serialize; bookings for different
stylists never contend.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from uuid import UUID
from sqlalchemy import update
from sqlalchemy.orm import Session
import logging

from salon_booking.models.appointment import Appointment
from salon_booking.models.service import Service, stylist_services
from salon_booking.models.tenant import Tenant
from salon_booking.models.user import User
from salon_booking.scheduling.availability import REASON_OUTSIDE_WORKING_HOURS
from salon_booking.scheduling.exceptions import (
    AppointmentNotFound,
    InvalidStatusTransition,
    OutsideWorkingHours,
    SlotConflict,
    StylistNotQualified,
)
from salon_booking.scheduling.status import AppointmentStatus, can_transition, coerce_status
from salon_booking.scheduling.timezones import ensure_utc, to_instant
from salon_booking.services.availability.availability_service import AvailabilityService
from salon_booking.services.events.event_publisher import EventPublisher

logger = logging.getLogger(__name__)


@dataclass
class BookingRequest:
    """One item of a batch booking."""
    stylist_id: UUID
    service_id: UUID
    start: datetime


class BookingService:
    """Creates appointments and drives them through their lifecycle"""

    def __init__(self, db: Session, event_publisher: Optional[EventPublisher] = None):
        self.db = db
        self.event_publisher = event_publisher

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def book(
            self,
            tenant_id: UUID,
            client_id: UUID,
            stylist_id: UUID,
            service_id: UUID,
            start: datetime
    ) -> Appointment:
        """
        Create a scheduled appointment for [start, start + duration).

        Raises SlotConflict (with the conflicting ids) if another blocking
        appointment overlaps, OutsideWorkingHours or StylistNotQualified if
        the request is not bookable at all. Nothing is written on failure.
        """
        try:
            tenant = AvailabilityService.get_tenant(self.db, tenant_id)
            service = AvailabilityService.get_service(self.db, tenant_id, service_id)
            stylist = AvailabilityService.get_stylist(self.db, tenant_id, stylist_id, lock=True)

            appointment = self._insert_locked(tenant, stylist, service, client_id, start)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(appointment)
        logger.info(
            f"Booked appointment {appointment.id}: stylist={stylist_id} service={service_id} "
            f"start={ensure_utc(appointment.start_time).isoformat()}"
        )
        self._publish_created(appointment)
        return appointment

    def book_batch(self, tenant_id: UUID, client_id: UUID, items: List[BookingRequest]) -> List[Appointment]:
        """
        Book several appointments in one transaction.

        Stylist locks are taken in id order so two overlapping batches cannot
        deadlock. Items see each other's inserts, so a batch that overlaps
        itself fails like any other conflict. One failure rolls back all.
        """
        if not items:
            return []

        try:
            tenant = AvailabilityService.get_tenant(self.db, tenant_id)

            stylists: Dict[UUID, User] = {}
            for stylist_id in sorted({item.stylist_id for item in items}, key=str):
                stylists[stylist_id] = AvailabilityService.get_stylist(self.db, tenant_id, stylist_id, lock=True)

            appointments = []
            for item in items:
                service = AvailabilityService.get_service(self.db, tenant_id, item.service_id)
                appointment = self._insert_locked(tenant, stylists[item.stylist_id], service, client_id, item.start)
                appointments.append(appointment)

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        for appointment in appointments:
            self.db.refresh(appointment)
            self._publish_created(appointment)

        logger.info(f"Batch booked {len(appointments)} appointments for client {client_id}")
        return appointments

    def _insert_locked(
            self,
            tenant: Tenant,
            stylist: User,
            service: Service,
            client_id: UUID,
            start: datetime
    ) -> Appointment:
        """Validate under the stylist lock and stage the insert. Caller commits."""
        if not AvailabilityService.is_qualified(self.db, stylist.id, service.id):
            raise StylistNotQualified(f"Stylist {stylist.full_name} does not offer {service.name}")

        start = to_instant(start, tenant.timezone)
        end = start + timedelta(minutes=service.duration_minutes)

        check = AvailabilityService.check_slot(self.db, tenant, stylist, service, start)
        if not check.available:
            self._raise_for(check, stylist, start, end)

        appointment = Appointment(
            tenant_id=tenant.id,
            client_id=client_id,
            stylist_id=stylist.id,
            service_id=service.id,
            start_time=start,
            end_time=end,
            status=AppointmentStatus.SCHEDULED,
        )
        self.db.add(appointment)
        self.db.flush()
        return appointment

    @staticmethod
    def _raise_for(check, stylist: User, start: datetime, end: datetime):
        window = f"{start.isoformat()} - {end.isoformat()}"
        if check.reason == REASON_OUTSIDE_WORKING_HOURS:
            raise OutsideWorkingHours(f"{window} is outside the working hours of {stylist.full_name}")
        logger.warning(f"Slot conflict for stylist {stylist.id} at {window}: {check.conflicting_ids}")
        raise SlotConflict(
            f"Stylist {stylist.full_name} already has an appointment in {window}",
            conflicting_ids=check.conflicting_ids
        )

    def _publish_created(self, appointment: Appointment) -> None:
        if self.event_publisher is None:
            return
        # The booking is committed; a failed publish is only logged
        if not self.event_publisher.appointment_created(appointment):
            logger.warning(f"appointment.created not delivered for {appointment.id}")

    # ------------------------------------------------------------------
    # Status machine
    # ------------------------------------------------------------------

    def _get(self, tenant_id: UUID, appointment_id: UUID) -> Appointment:
        appointment = self.db.query(Appointment).filter(
            Appointment.id == appointment_id,
            Appointment.tenant_id == tenant_id
        ).first()
        if not appointment:
            raise AppointmentNotFound(f"Appointment {appointment_id} not found")
        return appointment

    @staticmethod
    def _ensure_transition(appointment: Appointment, target: AppointmentStatus) -> None:
        current = coerce_status(appointment.status)
        if not can_transition(current, target):
            raise InvalidStatusTransition(current.value, target.value)

    def _transition(self, tenant_id: UUID, appointment_id: UUID, target: AppointmentStatus, apply=None) -> Appointment:
        try:
            appointment = self._get(tenant_id, appointment_id)
            self._ensure_transition(appointment, target)
            previous = appointment.status
            appointment.status = target
            if apply is not None:
                apply(appointment)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(appointment)
        logger.info(f"Appointment {appointment_id}: {coerce_status(previous).value} -> {target.value}")
        return appointment

    def check_in(self, tenant_id: UUID, appointment_id: UUID) -> Appointment:
        return self._transition(tenant_id, appointment_id, AppointmentStatus.CHECKED_IN)

    def check_out(self, tenant_id: UUID, appointment_id: UUID) -> Appointment:
        """Finish the service and move the stylist to the back of the turn queue."""
        def stamp_turn(appointment: Appointment) -> None:
            now = datetime.now(timezone.utc)
            self.db.execute(
                update(User).where(User.id == appointment.stylist_id).values(last_service_at=now)
            )
            self.db.execute(
                update(stylist_services).where(
                    stylist_services.c.user_id == appointment.stylist_id,
                    stylist_services.c.service_id == appointment.service_id
                ).values(
                    last_completed_at=now,
                    total_completed=stylist_services.c.total_completed + 1
                )
            )

        return self._transition(tenant_id, appointment_id, AppointmentStatus.CHECKED_OUT, stamp_turn)

    def complete(self, tenant_id: UUID, appointment_id: UUID) -> Appointment:
        return self._transition(tenant_id, appointment_id, AppointmentStatus.COMPLETED)

    def cancel(self, tenant_id: UUID, appointment_id: UUID, reason: Optional[str] = None) -> Appointment:
        def mark_cancelled(appointment: Appointment) -> None:
            appointment.cancelled_at = datetime.now(timezone.utc)
            appointment.cancellation_reason = reason

        return self._transition(tenant_id, appointment_id, AppointmentStatus.CANCELLED, mark_cancelled)

    def reschedule(self, tenant_id: UUID, appointment_id: UUID, new_start: datetime) -> Appointment:
        """
        Move an appointment to a new start, keeping its duration.

        Runs under the stylist lock like a fresh booking, ignoring the
        appointment's own current window when checking for conflicts.
        """
        try:
            tenant = AvailabilityService.get_tenant(self.db, tenant_id)
            appointment = self._get(tenant_id, appointment_id)
            self._ensure_transition(appointment, AppointmentStatus.RESCHEDULED)

            stylist = AvailabilityService.get_stylist(self.db, tenant_id, appointment.stylist_id, lock=True)
            service = self.db.query(Service).filter(Service.id == appointment.service_id).first()

            duration = ensure_utc(appointment.end_time) - ensure_utc(appointment.start_time)
            duration_minutes = int(duration.total_seconds() // 60)
            start = to_instant(new_start, tenant.timezone)
            end = start + duration

            check = AvailabilityService.check_slot(
                self.db, tenant, stylist, service, start,
                exclude_appointment_id=appointment.id,
                duration_minutes=duration_minutes
            )
            if not check.available:
                self._raise_for(check, stylist, start, end)

            appointment.start_time = start
            appointment.end_time = end
            appointment.status = AppointmentStatus.RESCHEDULED
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(appointment)
        logger.info(f"Appointment {appointment_id} rescheduled to {start.isoformat()}")
        return appointment
