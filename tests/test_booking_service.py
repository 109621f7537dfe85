"""
Tests for services/appointment/booking_service.py

Atomic booking, the status machine and turn bookkeeping at checkout.
"""
import json
import threading
from datetime import datetime, timedelta, timezone

import fakeredis
import pytest
from sqlalchemy import select

from salon_booking.models import Appointment, stylist_services
from salon_booking.scheduling.exceptions import (
    AppointmentNotFound,
    InvalidStatusTransition,
    OutsideWorkingHours,
    SlotConflict,
    StylistNotQualified,
)
from salon_booking.scheduling.status import AppointmentStatus
from salon_booking.scheduling.timezones import ensure_utc
from salon_booking.services.appointment.booking_service import BookingRequest, BookingService
from salon_booking.services.events.event_publisher import EventPublisher

# Monday 10:00 Bogota
START = datetime(2025, 1, 6, 15, 0, tzinfo=timezone.utc)


def book(service, salon, stylist=None, start=START, what=None):
    return service.book(
        salon.tenant.id,
        salon.client.id,
        (stylist or salon.ana).id,
        (what or salon.haircut).id,
        start,
    )


def count_appointments(db):
    return db.query(Appointment).count()


class TestBook:

    def test_creates_scheduled_appointment(self, db, salon):
        appointment = book(BookingService(db), salon)

        assert appointment.status == AppointmentStatus.SCHEDULED
        assert ensure_utc(appointment.start_time) == START
        assert ensure_utc(appointment.end_time) == START + timedelta(minutes=60)

    def test_naive_start_is_tenant_local(self, db, salon):
        appointment = book(BookingService(db), salon, start=datetime(2025, 1, 6, 10, 0))

        assert ensure_utc(appointment.start_time) == START

    def test_overlap_is_rejected_with_conflicting_ids(self, db, salon):
        service = BookingService(db)
        first = book(service, salon)

        with pytest.raises(SlotConflict) as exc:
            book(service, salon, start=START + timedelta(minutes=30))

        assert exc.value.conflicting_ids == [str(first.id)]
        assert count_appointments(db) == 1

    def test_back_to_back_is_fine(self, db, salon):
        service = BookingService(db)
        book(service, salon)
        book(service, salon, start=START + timedelta(minutes=60))

        assert count_appointments(db) == 2

    def test_outside_working_hours(self, db, salon):
        with pytest.raises(OutsideWorkingHours):
            book(BookingService(db), salon, start=datetime(2025, 1, 6, 17, 30))

        assert count_appointments(db) == 0

    def test_unqualified_stylist(self, db, salon):
        with pytest.raises(StylistNotQualified):
            book(BookingService(db), salon, stylist=salon.ana, what=salon.color)

    def test_publishes_created_event(self, db, salon, redis_client, publisher):
        pubsub = redis_client.pubsub()
        pubsub.subscribe(f"tenant:{salon.tenant.id}:events")
        pubsub.get_message(timeout=1)

        appointment = book(BookingService(db, publisher), salon)

        message = pubsub.get_message(timeout=1)
        payload = json.loads(message["data"])
        assert payload["event"] == "appointment.created"
        assert payload["tenant_id"] == str(salon.tenant.id)
        assert payload["data"]["appointment_id"] == str(appointment.id)
        assert payload["data"]["start_time"] == START.isoformat()

    def test_publish_failure_does_not_undo_booking(self, db, salon):
        server = fakeredis.FakeServer()
        server.connected = False
        broken = EventPublisher(fakeredis.FakeRedis(server=server))

        appointment = book(BookingService(db, broken), salon)

        assert db.get(Appointment, appointment.id) is not None


class TestConcurrentBooking:

    def test_only_one_of_two_racing_bookings_wins(self, session_factory, salon):
        tenant_id, client_id = salon.tenant.id, salon.client.id
        stylist_id, service_id = salon.ana.id, salon.haircut.id
        barrier = threading.Barrier(2)
        outcomes = []

        def attempt():
            session = session_factory()
            try:
                barrier.wait()
                appointment = BookingService(session).book(tenant_id, client_id, stylist_id, service_id, START)
                outcomes.append(("booked", appointment.id))
            except SlotConflict as exc:
                outcomes.append(("conflict", exc.conflicting_ids))
            finally:
                session.close()

        threads = [threading.Thread(target=attempt) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert sorted(kind for kind, _ in outcomes) == ["booked", "conflict"]
        booked_id = next(value for kind, value in outcomes if kind == "booked")
        conflict_ids = next(value for kind, value in outcomes if kind == "conflict")
        assert conflict_ids == [str(booked_id)]

        check = session_factory()
        try:
            assert check.query(Appointment).count() == 1
        finally:
            check.close()


class TestBookBatch:

    def test_books_all_items(self, db, salon):
        appointments = BookingService(db).book_batch(salon.tenant.id, salon.client.id, [
            BookingRequest(salon.beto.id, salon.color.id, START),
            BookingRequest(salon.ana.id, salon.haircut.id, START),
        ])

        assert [a.stylist_id for a in appointments] == [salon.beto.id, salon.ana.id]
        assert ensure_utc(appointments[0].end_time) == START + timedelta(minutes=90)

    def test_items_conflicting_with_each_other_roll_back_everything(self, db, salon):
        with pytest.raises(SlotConflict):
            BookingService(db).book_batch(salon.tenant.id, salon.client.id, [
                BookingRequest(salon.ana.id, salon.haircut.id, START),
                BookingRequest(salon.carla.id, salon.haircut.id, START),
                BookingRequest(salon.ana.id, salon.haircut.id, START + timedelta(minutes=30)),
            ])

        assert count_appointments(db) == 0

    def test_empty_batch(self, db, salon):
        assert BookingService(db).book_batch(salon.tenant.id, salon.client.id, []) == []


class TestStatusMachine:

    def test_full_lifecycle_stamps_turn_on_checkout(self, db, salon):
        service = BookingService(db)
        appointment = book(service, salon)

        service.check_in(salon.tenant.id, appointment.id)
        service.check_out(salon.tenant.id, appointment.id)
        done = service.complete(salon.tenant.id, appointment.id)

        assert done.status == AppointmentStatus.COMPLETED
        db.refresh(salon.ana)
        assert salon.ana.last_service_at is not None
        row = db.execute(
            select(stylist_services).where(
                stylist_services.c.user_id == salon.ana.id,
                stylist_services.c.service_id == salon.haircut.id
            )
        ).one()
        assert row.total_completed == 1
        assert row.last_completed_at is not None

    def test_checked_out_no_longer_blocks(self, db, salon):
        service = BookingService(db)
        appointment = book(service, salon)
        service.check_in(salon.tenant.id, appointment.id)
        service.check_out(salon.tenant.id, appointment.id)

        book(service, salon)

        assert count_appointments(db) == 2

    def test_illegal_transition(self, db, salon):
        service = BookingService(db)
        appointment = book(service, salon)

        with pytest.raises(InvalidStatusTransition):
            service.complete(salon.tenant.id, appointment.id)
        with pytest.raises(InvalidStatusTransition):
            service.check_out(salon.tenant.id, appointment.id)

        db.refresh(appointment)
        assert appointment.status == AppointmentStatus.SCHEDULED

    def test_cancel_frees_the_slot(self, db, salon):
        service = BookingService(db)
        appointment = book(service, salon)

        cancelled = service.cancel(salon.tenant.id, appointment.id, reason="client called")

        assert cancelled.status == AppointmentStatus.CANCELLED
        assert cancelled.cancellation_reason == "client called"
        assert cancelled.cancelled_at is not None
        book(service, salon)

    def test_cancelled_is_terminal(self, db, salon):
        service = BookingService(db)
        appointment = book(service, salon)
        service.cancel(salon.tenant.id, appointment.id)

        with pytest.raises(InvalidStatusTransition):
            service.check_in(salon.tenant.id, appointment.id)

    def test_unknown_appointment(self, db, salon):
        with pytest.raises(AppointmentNotFound):
            BookingService(db).check_in(salon.tenant.id, salon.ana.id)


class TestReschedule:

    def test_moves_and_keeps_duration(self, db, salon):
        service = BookingService(db)
        appointment = book(service, salon)

        moved = service.reschedule(salon.tenant.id, appointment.id, START + timedelta(minutes=30))

        assert moved.status == AppointmentStatus.RESCHEDULED
        assert ensure_utc(moved.start_time) == START + timedelta(minutes=30)
        assert ensure_utc(moved.end_time) == START + timedelta(minutes=90)

    def test_conflict_with_another_appointment(self, db, salon):
        service = BookingService(db)
        other = book(service, salon, start=START + timedelta(hours=2))
        appointment = book(service, salon)

        with pytest.raises(SlotConflict) as exc:
            service.reschedule(salon.tenant.id, appointment.id, START + timedelta(hours=1, minutes=30))

        assert exc.value.conflicting_ids == [str(other.id)]
        db.refresh(appointment)
        assert ensure_utc(appointment.start_time) == START

    def test_outside_hours(self, db, salon):
        service = BookingService(db)
        appointment = book(service, salon)

        with pytest.raises(OutsideWorkingHours):
            service.reschedule(salon.tenant.id, appointment.id, datetime(2025, 1, 5, 10, 0))

    def test_checked_in_cannot_be_rescheduled(self, db, salon):
        service = BookingService(db)
        appointment = book(service, salon)
        service.check_in(salon.tenant.id, appointment.id)

        with pytest.raises(InvalidStatusTransition):
            service.reschedule(salon.tenant.id, appointment.id, START + timedelta(hours=2))
