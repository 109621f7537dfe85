"""
Tests for services/turn/turn_assignment_service.py

Least-recently-served stylist selection.
"""
from datetime import datetime, timezone

import pytest

from salon_booking.models import Appointment, User, UserStatus
from salon_booking.scheduling.exceptions import NoStylistAvailable, StylistNotFound
from salon_booking.scheduling.status import AppointmentStatus
from salon_booking.services.turn.turn_assignment_service import TurnAssignmentService

# Monday 10:00 Bogota
START = datetime(2025, 1, 6, 15, 0, tzinfo=timezone.utc)


def occupy(db, salon, stylist, service=None):
    service = service or salon.haircut
    db.add(Appointment(
        tenant_id=salon.tenant.id,
        client_id=salon.client.id,
        stylist_id=stylist.id,
        service_id=service.id,
        start_time=START,
        end_time=datetime(2025, 1, 6, 16, 30, tzinfo=timezone.utc),
        status=AppointmentStatus.SCHEDULED,
    ))
    db.commit()


class TestSuggestStylist:

    def test_never_served_stylist_goes_first(self, db, salon):
        chosen = TurnAssignmentService.suggest_stylist(db, salon.tenant.id, salon.haircut.id, START)

        assert chosen.id == salon.ana.id

    def test_busy_stylist_is_skipped_in_turn_order(self, db, salon):
        occupy(db, salon, salon.ana)

        chosen = TurnAssignmentService.suggest_stylist(db, salon.tenant.id, salon.haircut.id, START)

        assert chosen.id == salon.beto.id

    def test_only_qualified_stylists_are_considered(self, db, salon):
        chosen = TurnAssignmentService.suggest_stylist(db, salon.tenant.id, salon.color.id, START)

        assert chosen.id == salon.beto.id

    def test_no_one_available(self, db, salon):
        occupy(db, salon, salon.beto, salon.color)

        with pytest.raises(NoStylistAvailable):
            TurnAssignmentService.suggest_stylist(db, salon.tenant.id, salon.color.id, START)

    def test_inactive_stylist_is_never_chosen(self, db, salon):
        salon.ana.status = UserStatus.INACTIVE
        db.commit()

        chosen = TurnAssignmentService.suggest_stylist(db, salon.tenant.id, salon.haircut.id, START)

        assert chosen.id == salon.beto.id

    def test_outside_hours_counts_as_unavailable(self, db, salon):
        salon.ana.working_hours = {"monday": "14:00-18:00"}
        db.commit()

        chosen = TurnAssignmentService.suggest_stylist(db, salon.tenant.id, salon.haircut.id, START)

        assert chosen.id == salon.beto.id

    def test_requested_name_narrows_candidates(self, db, salon):
        chosen = TurnAssignmentService.suggest_stylist(
            db, salon.tenant.id, salon.haircut.id, START, requested_stylist="carla"
        )

        assert chosen.id == salon.carla.id

    def test_requested_id_matches_exactly(self, db, salon):
        chosen = TurnAssignmentService.suggest_stylist(
            db, salon.tenant.id, salon.haircut.id, START, requested_stylist=str(salon.carla.id)
        )

        assert chosen.id == salon.carla.id

    def test_requested_name_without_match(self, db, salon):
        with pytest.raises(StylistNotFound):
            TurnAssignmentService.suggest_stylist(
                db, salon.tenant.id, salon.haircut.id, START, requested_stylist="Zoe"
            )

    def test_requested_stylist_busy(self, db, salon):
        occupy(db, salon, salon.carla)

        with pytest.raises(NoStylistAvailable):
            TurnAssignmentService.suggest_stylist(
                db, salon.tenant.id, salon.haircut.id, START, requested_stylist="Carla"
            )

    def test_ties_break_on_id(self, db, salon):
        salon.ana.last_service_at = salon.carla.last_service_at
        salon.beto.last_service_at = salon.carla.last_service_at
        db.commit()

        chosen = TurnAssignmentService.suggest_stylist(db, salon.tenant.id, salon.haircut.id, START)

        assert str(chosen.id) == min(str(s.id) for s in (salon.ana, salon.beto, salon.carla))


class TestTurnQueue:

    def test_available_first_then_busy(self, db, salon):
        occupy(db, salon, salon.ana)

        queue = TurnAssignmentService.get_turn_queue(db, salon.tenant.id, salon.haircut.id, START)

        assert [entry.stylist.id for entry in queue] == [salon.beto.id, salon.carla.id, salon.ana.id]
        assert [entry.is_busy for entry in queue] == [False, False, True]
        assert queue[-1].to_dict()["status_label"] == "busy"

    def test_stylists_not_working_are_left_out(self, db, salon):
        salon.carla.working_hours = {"monday": "closed"}
        db.commit()

        queue = TurnAssignmentService.get_turn_queue(db, salon.tenant.id, salon.haircut.id, START)

        assert salon.carla.id not in [entry.stylist.id for entry in queue]
