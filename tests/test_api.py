"""
Tests for the HTTP surface in api/v1/scheduling and main.py
"""
from uuid import uuid4


def tenant_headers(salon):
    return {"X-Tenant-ID": str(salon.tenant.id)}


class TestSchedules:

    def test_validate_returns_canonical_form(self, client):
        response = client.post("/api/v1/schedules/validate", json={
            "working_hours": {"lunes_a_viernes": "09:00-18:00", "sábado": ["09:00-13:00"]}
        })

        assert response.status_code == 200
        hours = response.json()["working_hours"]
        assert hours["friday"] == {"active": True, "ranges": ["09:00-18:00"]}
        assert hours["saturday"] == {"active": True, "ranges": ["09:00-13:00"]}
        assert hours["sunday"] == {"active": False, "ranges": []}
        assert len(hours) == 7

    def test_invalid_hours_name_the_day(self, client):
        response = client.post("/api/v1/schedules/validate", json={
            "working_hours": {"martes": "18:00-09:00"}
        })

        assert response.status_code == 422
        assert response.json()["error"] == "invalid_schedule"
        assert response.json()["day"] == "tuesday"

    def test_stylist_schedule_can_be_cleared(self, client, salon):
        url = f"/api/v1/schedules/stylists/{salon.ana.id}"
        set_response = client.put(url, json={"working_hours": {"monday": "12:00-16:00"}}, headers=tenant_headers(salon))
        clear_response = client.put(url, json={"working_hours": None}, headers=tenant_headers(salon))

        assert set_response.json()["working_hours"] == {"monday": {"active": True, "ranges": ["12:00-16:00"]}}
        assert clear_response.json()["inherits_tenant"] is True

    def test_tenant_schedule_update(self, client, salon):
        response = client.put(
            "/api/v1/schedules/tenant",
            json={"working_hours": {"weekdays": "08:00-17:00"}},
            headers=tenant_headers(salon),
        )

        assert response.status_code == 200
        hours = response.json()["working_hours"]
        assert len(hours) == 7
        assert hours["monday"] == {"active": True, "ranges": ["08:00-17:00"]}
        assert hours["saturday"] == {"active": False, "ranges": []}
        assert salon.tenant.working_hours == hours


class TestAvailabilityRoutes:

    def test_missing_tenant_header(self, client, salon):
        response = client.get("/api/v1/availability/slots", params={
            "stylist_id": str(salon.ana.id), "service_id": str(salon.haircut.id), "date": "2025-01-06",
        })

        assert response.status_code == 422

    def test_malformed_tenant_header(self, client, salon):
        response = client.get(
            "/api/v1/availability/slots",
            params={"stylist_id": str(salon.ana.id), "service_id": str(salon.haircut.id), "date": "2025-01-06"},
            headers={"X-Tenant-ID": "salon-centro"},
        )

        assert response.status_code == 400

    def test_slots(self, client, salon):
        response = client.get(
            "/api/v1/availability/slots",
            params={"stylist_id": str(salon.ana.id), "service_id": str(salon.haircut.id), "date": "2025-01-06"},
            headers=tenant_headers(salon),
        )

        body = response.json()
        assert response.status_code == 200
        assert body["timezone"] == "America/Bogota"
        assert len(body["slots"]) == 17

    def test_unknown_stylist_is_404(self, client, salon):
        response = client.get(
            "/api/v1/availability/slots",
            params={"stylist_id": str(uuid4()), "service_id": str(salon.haircut.id), "date": "2025-01-06"},
            headers=tenant_headers(salon),
        )

        assert response.status_code == 404
        assert response.json()["error"] == "stylist_not_found"

    def test_check_outside_hours(self, client, salon):
        response = client.get(
            "/api/v1/availability/check",
            params={"stylist_id": str(salon.ana.id), "service_id": str(salon.haircut.id), "start": "2025-01-06T20:00:00"},
            headers=tenant_headers(salon),
        )

        assert response.json() == {"available": False, "reason": "outside_working_hours", "conflicting_ids": []}


class TestStylistRoutes:

    def test_suggest_and_queue(self, client, salon):
        params = {"service_id": str(salon.haircut.id), "start": "2025-01-06T10:00:00-05:00"}

        suggested = client.get("/api/v1/stylists/suggest", params=params, headers=tenant_headers(salon))
        queue = client.get("/api/v1/stylists/queue", params=params, headers=tenant_headers(salon))

        assert suggested.json()["id"] == str(salon.ana.id)
        assert [entry["id"] for entry in queue.json()] == [str(salon.ana.id), str(salon.beto.id), str(salon.carla.id)]

    def test_no_stylist_available_is_409(self, client, salon):
        response = client.get(
            "/api/v1/stylists/suggest",
            params={"service_id": str(salon.color.id), "start": "2025-01-05T10:00:00"},
            headers=tenant_headers(salon),
        )

        assert response.status_code == 409
        assert response.json()["error"] == "no_stylist_available"


class TestParseRoutes:

    def test_parse_time(self, client):
        response = client.post("/api/v1/parse/time", json={"text": "3 de la tarde"})

        assert response.json() == {"value": "15:00", "confident": True, "rule": "twelve_hour"}

    def test_parse_date_never_fails(self, client, salon):
        response = client.post("/api/v1/parse/date", json={"text": "algún día"}, headers=tenant_headers(salon))

        assert response.status_code == 200
        assert response.json()["confident"] is False


class TestAppointmentRoutes:

    def _create(self, client, salon, **overrides):
        body = {
            "client_id": str(salon.client.id),
            "service_id": str(salon.haircut.id),
            "start": "2025-01-06T10:00:00",
        }
        body.update(overrides)
        return client.post("/api/v1/appointments", json=body, headers=tenant_headers(salon))

    def test_create_assigns_next_in_turn(self, client, salon, redis_client):
        response = self._create(client, salon)

        assert response.status_code == 201
        assert response.json()["stylist_id"] == str(salon.ana.id)
        assert response.json()["start_time"] == "2025-01-06T15:00:00+00:00"

    def test_second_create_goes_to_next_stylist(self, client, salon):
        self._create(client, salon)
        response = self._create(client, salon)

        assert response.json()["stylist_id"] == str(salon.beto.id)

    def test_conflict_is_409_with_ids(self, client, salon):
        first = self._create(client, salon, stylist_id=str(salon.carla.id))
        second = self._create(client, salon, stylist_id=str(salon.carla.id), start="2025-01-06T10:30:00")

        assert second.status_code == 409
        assert second.json()["error"] == "slot_conflict"
        assert second.json()["conflicting_ids"] == [first.json()["id"]]

    def test_batch_is_all_or_nothing(self, client, salon):
        response = client.post("/api/v1/appointments/batch", json={
            "client_id": str(salon.client.id),
            "items": [
                {"stylist_id": str(salon.ana.id), "service_id": str(salon.haircut.id), "start": "2025-01-06T10:00:00"},
                {"stylist_id": str(salon.ana.id), "service_id": str(salon.color.id), "start": "2025-01-06T12:00:00"},
            ],
        }, headers=tenant_headers(salon))

        assert response.status_code == 422
        assert response.json()["error"] == "stylist_not_qualified"
        listing = client.get("/api/v1/appointments", headers=tenant_headers(salon))
        assert listing.json()["total_appointments"] == 0

    def test_lifecycle_and_queries(self, client, salon):
        appointment_id = self._create(client, salon).json()["id"]
        base = f"/api/v1/appointments/{appointment_id}"

        assert client.patch(f"{base}/checkin", headers=tenant_headers(salon)).json()["status"] == "checked_in"
        assert client.patch(f"{base}/checkout", headers=tenant_headers(salon)).json()["status"] == "checked_out"

        illegal = client.patch(f"{base}/reschedule", json={"start": "2025-01-06T15:00:00"}, headers=tenant_headers(salon))
        assert illegal.status_code == 409
        assert illegal.json()["error"] == "invalid_status_transition"

        fetched = client.get(base, headers=tenant_headers(salon))
        assert fetched.json()["status"] == "checked_out"

        listing = client.get(
            "/api/v1/appointments",
            params={"start_date": "2025-01-06", "end_date": "2025-01-06", "status": "checked_out"},
            headers=tenant_headers(salon),
        )
        assert listing.json()["total_appointments"] == 1

    def test_cancel_with_reason(self, client, salon):
        appointment_id = self._create(client, salon).json()["id"]

        response = client.patch(
            f"/api/v1/appointments/{appointment_id}/cancel",
            json={"reason": "sick"},
            headers=tenant_headers(salon),
        )

        assert response.json()["status"] == "cancelled"
        assert response.json()["cancellation_reason"] == "sick"

    def test_other_tenant_cannot_see_appointment(self, client, salon):
        appointment_id = self._create(client, salon).json()["id"]

        response = client.get(f"/api/v1/appointments/{appointment_id}", headers={"X-Tenant-ID": str(uuid4())})

        assert response.status_code == 404


class TestHealth:

    def test_detailed_health(self, client):
        body = client.get("/health/detailed").json()

        assert body["database"] == "healthy"
        assert body["redis"] == "healthy"


class TestConversationFlags:

    def test_flags_are_set_read_and_cleared(self, client, salon, redis_client):
        url = "/api/v1/conversations/chat-42/flags"
        headers = tenant_headers(salon)

        set_response = client.put(f"{url}/awaiting", json={"value": "first_name"}, headers=headers)
        client.put(f"{url}/service", json={"value": "haircut"}, headers=headers)

        assert set_response.status_code == 200
        assert set_response.json() == {"chat_id": "chat-42", "flags": {"awaiting": "first_name"}}
        assert 0 < redis_client.ttl(f"chat:{salon.tenant.id}:chat-42:flags") <= 1800

        cleared_one = client.delete(f"{url}/awaiting", headers=headers)
        assert cleared_one.json()["flags"] == {"service": "haircut"}

        assert client.delete(url, headers=headers).status_code == 204
        assert client.get(url, headers=headers).json()["flags"] == {}

    def test_flags_are_scoped_by_tenant(self, client, salon):
        client.put(
            "/api/v1/conversations/chat-7/flags/awaiting",
            json={"value": "last_name"},
            headers=tenant_headers(salon),
        )

        other = client.get("/api/v1/conversations/chat-7/flags", headers={"X-Tenant-ID": str(uuid4())})

        assert other.json()["flags"] == {}
