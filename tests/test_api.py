"""HTTP tests for the booking API with in-memory repositories behind it."""

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from jose import jwt

from booking_engine.api.deps import get_booking_deps, get_schedule_locker
from booking_engine.core.config import settings
from booking_engine.domain.entities import AppointmentStatus, DailyWindow
import booking_engine.main as main_module
from booking_engine.main import app
from builders import build_appointment, build_schedule_for, make_deps, utc

API_V1 = "/api/v1"


def token_for(user_id: str, role: str = "USER") -> str:
    return jwt.encode(
        {"sub": user_id, "role": role, "type": "access"},
        settings.secret_key,
        algorithm=settings.algorithm,
    )


def auth(user_id: str, role: str = "USER") -> dict:
    return {"Authorization": f"Bearer {token_for(user_id, role)}"}


@pytest.fixture
def deps():
    return make_deps(
        schedules=[build_schedule_for(utc(2025, 1, 2), buffer_minutes=10)],
        appointments=[
            build_appointment(),  # 12:00-12:30 CONFIRMED
            build_appointment(
                id="appt-2",
                start=utc(2025, 1, 1, 20),
                end=utc(2025, 1, 1, 20, 30),
                status=AppointmentStatus.PENDING,
            ),
        ],
    )


@pytest.fixture
def locked():
    return []


@pytest.fixture
def client(deps, locked):
    async def lock_schedule(schedule_id: str) -> None:
        locked.append(schedule_id)

    app.dependency_overrides[get_booking_deps] = lambda: deps
    app.dependency_overrides[get_schedule_locker] = lambda: lock_schedule
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}


@pytest.mark.parametrize("enabled", [True, False])
def test_startup_table_creation_follows_setting(client, monkeypatch, enabled):
    calls = []

    async def fake_init_db():
        calls.append("init_db")

    monkeypatch.setattr(main_module, "init_db", fake_init_db)
    monkeypatch.setattr(settings, "create_tables_on_startup", enabled)
    with client:
        assert client.get("/health").status_code == status.HTTP_200_OK
    assert calls == (["init_db"] if enabled else [])


class TestAvailabilityEndpoint:
    def _get(self, client, schedule_id="sch-1", headers=None, **params):
        return client.get(
            f"{API_V1}/schedules/{schedule_id}/availability",
            params={"offering_id": "off-30", **params},
            headers=auth("cus-9") if headers is None else headers,
        )

    def test_slots_for_one_day(self, client):
        response = self._get(client, date="2025-01-02")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["schedule_id"] == "sch-1"
        assert "from" in data
        starts = [s["start"][11:16] for s in data["slots"]]
        assert starts[0] == "00:00"
        # 12:00-12:30 booked with a 10 minute buffer removes 11:30, 12:00 and 12:30
        assert "11:00" in starts
        assert "11:30" not in starts
        assert "12:00" not in starts
        assert "12:30" not in starts
        assert "13:00" in starts

    def test_explicit_range(self, client):
        response = self._get(client, **{"from": "2025-01-02T09:00:00Z", "to": "2025-01-02T10:00:00Z"})
        assert response.status_code == status.HTTP_200_OK
        assert [s["start"][11:16] for s in response.json()["slots"]] == ["09:00", "09:30"]

    def test_requires_token(self, client):
        response = self._get(client, headers={}, date="2025-01-02")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_missing_range(self, client):
        response = self._get(client)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_range_too_large(self, client):
        response = self._get(client, **{"from": "2025-01-02T00:00:00Z", "to": "2025-06-02T00:00:00Z"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unknown_schedule(self, client):
        response = self._get(client, schedule_id="nope", date="2025-01-02")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "SCHEDULE_NOT_FOUND"}

    def test_malformed_stored_window_is_bad_request(self, client, deps):
        deps.schedules.schedules["sch-1"].weekly_template[0].windows.append(DailyWindow("²:00", "23:00"))
        response = self._get(client, date="2025-01-02")
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "INVALID_TIME_FORMAT"}


class TestBookEndpoint:
    def test_book_for_self(self, client, deps, locked):
        response = client.post(
            f"{API_V1}/appointments",
            json={"schedule_id": "sch-1", "offering_id": "off-30", "start": "2025-01-02T13:00:00Z"},
            headers=auth("cus-9"),
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["id"] == "appt-new-1"
        assert data["status"] == "PENDING"
        assert data["customer_id"] == "cus-9"
        assert data["professional_id"] == "pro-1"
        assert locked == ["sch-1"]
        assert deps.appointments.create_calls == 1

    def test_overlap_is_conflict(self, client):
        response = client.post(
            f"{API_V1}/appointments",
            json={"schedule_id": "sch-1", "offering_id": "off-30", "start": "2025-01-02T12:35:00Z"},
            headers=auth("cus-9"),
        )
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json() == {"error": "OVERLAP_APPOINTMENT"}

    def test_past_start_is_bad_request(self, client):
        response = client.post(
            f"{API_V1}/appointments",
            json={"schedule_id": "sch-1", "offering_id": "off-30", "start": "2024-12-31T13:00:00Z"},
            headers=auth("cus-9"),
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "RULE_PAST_APPOINTMENT"}

    def test_requires_token(self, client):
        response = client.post(
            f"{API_V1}/appointments",
            json={"schedule_id": "sch-1", "offering_id": "off-30", "start": "2025-01-02T13:00:00Z"},
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_rejects_bad_token(self, client):
        response = client.post(
            f"{API_V1}/appointments",
            json={"schedule_id": "sch-1", "offering_id": "off-30", "start": "2025-01-02T13:00:00Z"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_user_cannot_book_for_someone_else(self, client, deps):
        response = client.post(
            f"{API_V1}/appointments",
            json={
                "schedule_id": "sch-1",
                "offering_id": "off-30",
                "start": "2025-01-02T13:00:00Z",
                "customer_id": "cus-2",
            },
            headers=auth("cus-9"),
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert deps.appointments.create_calls == 0

    def test_assistant_books_on_behalf(self, client):
        response = client.post(
            f"{API_V1}/appointments",
            json={
                "schedule_id": "sch-1",
                "offering_id": "off-30",
                "start": "2025-01-02T13:00:00Z",
                "customer_id": "cus-2",
            },
            headers=auth("asst-1", "ASSISTANT"),
        )
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["customer_id"] == "cus-2"


class TestAppointmentEndpoints:
    def test_get_own_appointment(self, client):
        response = client.get(f"{API_V1}/appointments/appt-1", headers=auth("cus-1"))
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["start"].startswith("2025-01-02T12:00:00")

    def test_get_hides_other_peoples_appointments(self, client):
        response = client.get(f"{API_V1}/appointments/appt-1", headers=auth("cus-9"))
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "APPOINTMENT_NOT_FOUND"}

    def test_confirm(self, client):
        response = client.post(f"{API_V1}/appointments/appt-2/confirm", headers=auth("pro-1"))
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "CONFIRMED"

    def test_confirm_by_stranger_is_forbidden(self, client, deps):
        response = client.post(f"{API_V1}/appointments/appt-2/confirm", headers=auth("intruder"))
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {"error": "FORBIDDEN"}
        stored = next(a for a in deps.appointments.all() if a.id == "appt-2")
        assert stored.status == AppointmentStatus.PENDING

    def test_staff_may_confirm(self, client):
        response = client.post(f"{API_V1}/appointments/appt-2/confirm", headers=auth("asst-1", "ASSISTANT"))
        assert response.status_code == status.HTTP_200_OK

    def test_confirm_unknown(self, client):
        response = client.post(f"{API_V1}/appointments/nope/confirm", headers=auth("pro-1"))
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_confirm_twice_is_conflict(self, client):
        response = client.post(f"{API_V1}/appointments/appt-1/confirm", headers=auth("pro-1"))
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json() == {"error": "INVALID_STATUS_TRANSITION"}

    def test_cancel_inside_window_as_user(self, client):
        response = client.post(
            f"{API_V1}/appointments/appt-2/cancel", json={"reason": "sick"}, headers=auth("cus-1")
        )
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json() == {"error": "CANCEL_WINDOW_VIOLATION"}

    def test_cancel_inside_window_as_admin(self, client):
        response = client.post(
            f"{API_V1}/appointments/appt-2/cancel", json={"reason": "sick"}, headers=auth("adm-1", "ADMIN")
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "CANCELLED"
        assert data["audit"][-1]["action"] == "CANCEL"
        assert data["audit"][-1]["reason"] == "sick"

    def test_cancel_without_body(self, client):
        response = client.post(f"{API_V1}/appointments/appt-1/cancel", headers=auth("cus-1"))
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["audit"][-1]["reason"] is None

    def test_cancel_by_stranger_is_forbidden(self, client):
        response = client.post(f"{API_V1}/appointments/appt-1/cancel", headers=auth("cus-9"))
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {"error": "FORBIDDEN_CANCELLATION"}

    def test_reschedule(self, client, deps, locked):
        response = client.post(
            f"{API_V1}/appointments/appt-1/reschedule",
            json={"new_start": "2025-01-02T15:00:00Z", "reason": "later"},
            headers=auth("cus-1"),
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["id"] == "appt-new-1"
        assert data["status"] == "PENDING"
        assert locked == ["sch-1"]
        old = next(a for a in deps.appointments.all() if a.id == "appt-1")
        assert old.status == AppointmentStatus.CANCELLED
        assert old.audit[-1].reason == "later"

    def test_reschedule_unknown(self, client, locked):
        response = client.post(
            f"{API_V1}/appointments/nope/reschedule",
            json={"new_start": "2025-01-02T15:00:00Z"},
            headers=auth("cus-1"),
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert locked == []


class TestScheduleEndpoints:
    payload = {
        "timezone": "Europe/Madrid",
        "buffer_minutes": 10,
        "weekly_template": [{"weekday": 4, "windows": [{"start": "9:00", "end": "12:00"}]}],
        "exceptions": [{"date": "2025-01-09", "available": False}],
    }

    def test_create_for_caller(self, client, deps):
        response = client.post(f"{API_V1}/schedules", json=self.payload, headers=auth("pro-7"))

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["professional_id"] == "pro-7"
        assert data["weekly_template"] == [{"weekday": 4, "windows": [{"start": "09:00", "end": "12:00"}]}]
        assert data["exceptions"] == [{"date": "2025-01-09", "available": False, "windows": []}]
        stored = deps.schedules.schedules[data["id"]]
        assert stored.buffer_minutes == 10

    def test_create_then_read_availability(self, client):
        created = client.post(f"{API_V1}/schedules", json=self.payload, headers=auth("pro-7")).json()
        response = client.get(
            f"{API_V1}/schedules/{created['id']}/availability",
            params={"offering_id": "off-30", "date": "2025-01-02"},
            headers=auth("cus-1"),
        )
        assert response.status_code == status.HTTP_200_OK
        starts = [s["start"][11:16] for s in response.json()["slots"]]
        assert starts == ["09:00", "09:30", "10:00", "10:30", "11:00", "11:30"]

    def test_create_requires_token(self, client):
        response = client.post(f"{API_V1}/schedules", json=self.payload)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_create_rejects_bad_time(self, client, deps):
        payload = {**self.payload, "weekly_template": [{"weekday": 4, "windows": [{"start": "²:00", "end": "12:00"}]}]}
        response = client.post(f"{API_V1}/schedules", json=payload, headers=auth("pro-7"))
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "INVALID_TIME_FORMAT"}
        assert list(deps.schedules.schedules) == ["sch-1"]

    def test_create_rejects_reversed_window(self, client):
        payload = {**self.payload, "weekly_template": [{"weekday": 4, "windows": [{"start": "12:00", "end": "09:00"}]}]}
        response = client.post(f"{API_V1}/schedules", json=payload, headers=auth("pro-7"))
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "INVALID_SCHEDULE"}

    def test_create_requires_a_template(self, client):
        payload = {**self.payload, "weekly_template": []}
        response = client.post(f"{API_V1}/schedules", json=payload, headers=auth("pro-7"))
        assert response.status_code == 422

    def test_owner_reads(self, client):
        response = client.get(f"{API_V1}/schedules/sch-1", headers=auth("pro-1"))
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["buffer_minutes"] == 10

    def test_admin_reads(self, client):
        response = client.get(f"{API_V1}/schedules/sch-1", headers=auth("adm-1", "ADMIN"))
        assert response.status_code == status.HTTP_200_OK

    def test_stranger_forbidden(self, client):
        response = client.get(f"{API_V1}/schedules/sch-1", headers=auth("cus-1"))
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json() == {"error": "FORBIDDEN"}

    def test_missing(self, client):
        response = client.get(f"{API_V1}/schedules/nope", headers=auth("pro-1"))
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "SCHEDULE_NOT_FOUND"}
