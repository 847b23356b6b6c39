import logging

from fastapi.testclient import TestClient

import coursegrid.main as main_module
from coursegrid.api.deps import get_time_grid
from coursegrid.core.config import Settings, get_settings
from coursegrid.main import app
from coursegrid.models.course import Semester
from coursegrid.services.term_lock import term_generation_lock
from coursegrid.services.time_grid import TimeGrid

TWO_BY_TWO = TimeGrid.build(["Monday", "Tuesday"], ["09:00-10:00", "10:00-11:00"])


def generate(client, **overrides):
    payload = {"semester": "fall", "year": 2026, "name": "Fall 2026"}
    payload.update(overrides)
    return client.post("/api/timetables/generate", json=payload)


def test_generate_returns_summary(client, seed_term):
    seed_term(credits=[3, 2])

    response = generate(client)

    assert response.status_code == 201
    body = response.json()
    assert body["assignments_count"] == 5
    assert body["message"] == "Generated timetable with 5 slots"
    assert body["warnings"] == []
    assert body["timetable_id"]


def test_generate_reports_partial_courses(client, seed_term):
    seed_term(credits=[2], faculty_department="ME")

    response = generate(client)

    assert response.status_code == 201
    warnings = response.json()["warnings"]
    assert len(warnings) == 1
    assert warnings[0]["course_id"] == "course-1"
    assert warnings[0]["course_code"] == "CS101"
    assert warnings[0]["required"] == 2
    assert warnings[0]["scheduled"] == 0
    assert "CS101" in warnings[0]["message"]


def test_generate_uses_configured_grid(client, seed_term):
    seed_term(credits=[5], faculty_count=1, room_capacities=(40,))
    app.dependency_overrides[get_time_grid] = lambda: TWO_BY_TWO

    response = generate(client)

    assert response.status_code == 201
    assert response.json()["assignments_count"] == 4
    assert response.json()["warnings"][0]["scheduled"] == 4


def test_generate_validates_payload(client):
    assert generate(client, semester="winter").status_code == 422
    assert generate(client, name="   ").status_code == 422
    assert generate(client, year=1999).status_code == 422


def test_generate_requires_admin_key_when_configured(client, seed_term):
    seed_term(credits=[1])
    app.dependency_overrides[get_settings] = lambda: Settings(admin_api_key="s3cret")

    missing = generate(client)
    wrong = client.post(
        "/api/timetables/generate",
        json={"semester": "fall", "year": 2026, "name": "Fall"},
        headers={"X-Admin-Key": "nope"},
    )
    allowed = client.post(
        "/api/timetables/generate",
        json={"semester": "fall", "year": 2026, "name": "Fall"},
        headers={"X-Admin-Key": "s3cret"},
    )

    assert missing.status_code == 401
    assert wrong.status_code == 401
    assert allowed.status_code == 201


def test_concurrent_trigger_for_same_term_is_refused(client, seed_term):
    seed_term(credits=[1])

    with term_generation_lock(Semester.fall, 2026):
        refused = generate(client)
        other_term = generate(client, semester="spring")

    assert refused.status_code == 409
    assert refused.json()["details"] == {"semester": "fall", "year": 2026}
    assert other_term.status_code == 201
    assert generate(client).status_code == 201


def test_active_timetable_and_detail(client, seed_term):
    seed_term(credits=[2])
    first = generate(client, name="Draft").json()
    second = generate(client, name="Final").json()

    active = client.get("/api/timetables/active", params={"semester": "fall", "year": 2026})
    assert active.status_code == 200
    body = active.json()
    assert body["id"] == second["timetable_id"]
    assert body["is_active"] is True
    assert [(slot["day"], slot["start_time"]) for slot in body["slots"]] == [
        ("Monday", "09:00"),
        ("Monday", "10:00"),
    ]

    old = client.get(f"/api/timetables/{first['timetable_id']}")
    assert old.status_code == 200
    assert old.json()["is_active"] is False
    assert len(old.json()["slots"]) == 2

    listing = client.get("/api/timetables/", params={"semester": "fall", "year": 2026})
    assert listing.status_code == 200
    assert {item["name"] for item in listing.json()} == {"Draft", "Final"}
    assert sum(item["is_active"] for item in listing.json()) == 1


def test_missing_timetables_return_404(client):
    missing = client.get("/api/timetables/does-not-exist")
    assert missing.status_code == 404
    assert "does-not-exist" in missing.json()["message"]

    no_active = client.get("/api/timetables/active", params={"semester": "summer", "year": 2026})
    assert no_active.status_code == 404

    assert client.get("/api/timetables/does-not-exist/conflicts").status_code == 404


def test_generated_timetable_audits_clean(client, seed_term):
    seed_term(credits=[4, 3, 5], faculty_count=2, room_capacities=(90, 45), faculty_department=None)
    timetable_id = generate(client).json()["timetable_id"]

    report = client.get(f"/api/timetables/{timetable_id}/conflicts")

    assert report.status_code == 200
    assert report.json()["conflicts"] == []
    assert report.json()["checked_slots"] == 12


def test_startup_warns_when_generation_is_unguarded(monkeypatch, caplog):
    monkeypatch.setattr(main_module, "settings", Settings(_env_file=None, admin_api_key=None))

    with caplog.at_level(logging.WARNING, logger="coursegrid.main"):
        with TestClient(app):
            pass

    assert any("ADMIN KEY NOT CONFIGURED" in record.getMessage() for record in caplog.records)


def test_startup_is_quiet_when_admin_key_is_set(monkeypatch, caplog):
    monkeypatch.setattr(main_module, "settings", Settings(_env_file=None, admin_api_key="s3cret"))

    with caplog.at_level(logging.WARNING, logger="coursegrid.main"):
        with TestClient(app):
            pass

    assert not any("ADMIN KEY NOT CONFIGURED" in record.getMessage() for record in caplog.records)
