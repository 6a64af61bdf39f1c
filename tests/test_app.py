import asyncio
import inspect
import time

import httpx
from fastapi.routing import APIRoute

from sehat_saathi.api.deps import get_storage
from sehat_saathi.main import app
from sehat_saathi.schemas.appointment import AppointmentStatusUpdate
from sehat_saathi.schemas.common import CamelModel
from sehat_saathi.storage.memory import MemoryStorage

from .conftest import register


def test_health_check(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Process-Time" in response.headers


def test_api_info(client):
    response = client.get("/api/info")
    assert response.status_code == 200
    assert response.json()["endpoints"]["appointments"] == "/api/appointments"


def test_unknown_route(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert response.json()["error"] == "NOT_FOUND"
    assert response.json()["path"] == "/api/nothing-here"


def test_malformed_json_body(client):
    response = client.post(
        "/api/auth/login",
        content="{not json",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json()["error"] == "VALIDATION_ERROR"


class TestDoctorDirectory:

    def test_anonymous_listing_hides_email(self, client, doctor, patient):
        response = client.get("/api/doctors")
        assert response.status_code == 200
        assert response.json() == [
            {"id": doctor[0]["id"], "name": "Dr. A", "specialization": "General Medicine"}
        ]

    def test_authenticated_listing_shows_email(self, client, doctor, other_doctor, patient):
        response = client.get("/api/doctors", headers=patient[1])
        assert response.status_code == 200

        data = response.json()
        assert [d["name"] for d in data] == ["Dr. A", "Dr. B"]
        assert data[0]["email"] == "dr.a@example.com"

    def test_invalid_token_is_treated_as_anonymous(self, client, doctor):
        response = client.get("/api/doctors", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 200
        assert "email" not in response.json()[0]

    def test_new_doctor_appears(self, client):
        assert client.get("/api/doctors").json() == []

        register(client, "Dr. C", "dr.c@example.com", "doctor", "Dermatology")
        assert client.get("/api/doctors").json()[0]["specialization"] == "Dermatology"


class SlowStorage(MemoryStorage):
    """Store whose user lookup blocks the calling thread like a database round trip."""

    delay = 0.5

    def get_user_by_email(self, email):
        time.sleep(self.delay)
        return super().get_user_by_email(email)


class TestBlockingWork:

    def test_sync_routes_run_outside_the_event_loop(self):
        blocking = [
            route for route in app.routes
            if isinstance(route, APIRoute) and route.path != "/api/chat/ai"
            and route.path.startswith("/api/") and route.path != "/api/info"
        ]
        assert blocking
        for route in blocking:
            assert not inspect.iscoroutinefunction(route.endpoint), route.path

    def test_slow_lookups_do_not_serialize_requests(self):
        storage = SlowStorage()
        app.dependency_overrides[get_storage] = lambda: storage
        login = {"email": "nobody@example.com", "password": "Whatever123!"}

        async def timed(http, method, url, **kwargs):
            started = time.perf_counter()
            response = await http.request(method, url, **kwargs)
            return response, time.perf_counter() - started

        async def scenario():
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
                logins = [timed(http, "POST", "/api/auth/login", json=login) for _ in range(4)]
                started = time.perf_counter()
                results = await asyncio.gather(timed(http, "GET", "/health"), *logins)
                return results, time.perf_counter() - started

        try:
            results, elapsed = asyncio.run(scenario())
        finally:
            app.dependency_overrides.clear()

        (health, health_latency), *logins = results
        assert health.status_code == 200
        assert all(response.status_code == 401 for response, _ in logins)
        # Serial handling would take 4 * delay and hold /health behind the logins
        assert elapsed < 3 * SlowStorage.delay
        assert health_latency < SlowStorage.delay


def test_schemas_accept_both_key_styles():
    by_alias = AppointmentStatusUpdate.model_validate(
        {"status": "confirmed", "clinicPhone": "+91 98765 43210"}
    )
    by_name = AppointmentStatusUpdate(status="confirmed", clinic_phone="+91 98765 43210")

    assert by_alias == by_name
    assert by_name.model_dump(by_alias=True)["clinicPhone"] == "+91 98765 43210"
    assert CamelModel.model_config["from_attributes"] is True
