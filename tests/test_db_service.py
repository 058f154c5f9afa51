from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

import db_service
from models import (
    db, Assignment, Shift, ScheduleGenerationRequest,
    GENERATION_STATUS_COMPLETED, GENERATION_STATUS_FAILED
)
from scheduler import generate_schedule
from scheduler.exceptions import (
    DataLoadError, InvalidRequestError, PersistenceError, SiteNotFoundError
)
from scheduler.models import ExperienceLevel, PreferenceLevel, RelationshipType


@pytest.fixture
def request_for(make_request):
    def _make(site_id, **overrides):
        return make_request(site_id=site_id, **overrides)
    return _make


class TestLoadSnapshot:

    def test_loads_owner_roster_in_creation_order(self, app_ctx, seeded, request_for):
        snapshot = db_service.load_generation_snapshot(request_for(seeded["site_id"]), seeded["user_id"])

        assert [e.id for e in snapshot.employees] == seeded["employees"]
        assert [e.first_name for e in snapshot.employees] == ["Victor", "Vera", "Noah", "Nina", "Marc"]
        assert [e.experience_level for e in snapshot.managers] == [ExperienceLevel.MANAGER]
        assert len(snapshot.opening_hours) == 7
        assert snapshot.opening_hours_for(0).is_closed
        assert snapshot.opening_hours_for(1).opening_time == "08:00"

    def test_inactive_employees_are_not_loaded(self, app_ctx, seeded, request_for, employee_factory):
        employee_factory(seeded["user_id"], "Gone", level="VETERANE", active=False)
        snapshot = db_service.load_generation_snapshot(request_for(seeded["site_id"]), seeded["user_id"])

        assert "Gone" not in [e.first_name for e in snapshot.employees]

    def test_preferences_and_relationships_are_converted(
            self, app_ctx, seeded, request_for, preference_factory, relationship_factory):
        v1, v2, n1, n2, m1 = seeded["employees"]
        preference_factory(v2, 1, "UNAVAILABLE")
        preference_factory(n2, 2, "PREFERRED")
        relationship_factory(v2, n2, "CONFLICT")
        relationship_factory(m1, n2, "PREFERENCE")

        snapshot = db_service.load_generation_snapshot(request_for(seeded["site_id"]), seeded["user_id"])

        assert snapshot.preference_for(v2, 1).preference == PreferenceLevel.UNAVAILABLE
        assert snapshot.preference_for(n2, 2).preference == PreferenceLevel.PREFERRED
        assert snapshot.preference_for(n2, 1) is None
        assert snapshot.is_conflict(n2, v2)
        assert snapshot.mentor_map == {v1: [n1]}
        assert RelationshipType.PREFERENCE in {r.relationship_type for r in snapshot.relationships}

    def test_unknown_relationship_type_is_skipped(self, app_ctx, seeded, request_for, relationship_factory):
        v1, v2 = seeded["employees"][:2]
        relationship_factory(v1, v2, "RIVALRY")

        snapshot = db_service.load_generation_snapshot(request_for(seeded["site_id"]), seeded["user_id"])

        assert len(snapshot.relationships) == 1  # only the demo mentor pair

    def test_site_of_another_owner_is_not_found(self, app_ctx, seeded, request_for):
        with pytest.raises(SiteNotFoundError):
            db_service.load_generation_snapshot(request_for(seeded["site_id"]), seeded["other_user_id"])

    def test_site_without_opening_hours_is_rejected(self, app_ctx, seeded, request_for, empty_site_factory):
        site = empty_site_factory(seeded["user_id"])
        with pytest.raises(InvalidRequestError):
            db_service.load_generation_snapshot(request_for(site.id), seeded["user_id"])

    def test_database_errors_become_data_load_errors(self, app_ctx, seeded, request_for, monkeypatch):
        def broken(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("database is down"))

        monkeypatch.setattr(db_service, "get_user_site", broken)

        with pytest.raises(DataLoadError) as exc_info:
            db_service.load_generation_snapshot(request_for(seeded["site_id"]), seeded["user_id"])
        assert exc_info.value.status_code == 500


class TestPersist:

    def _generate(self, seeded, request):
        snapshot = db_service.load_generation_snapshot(request, seeded["user_id"])
        return generate_schedule(request, snapshot)

    def test_saves_draft_shifts_assignments_and_audit(self, app_ctx, seeded, request_for):
        request = request_for(seeded["site_id"])
        result = self._generate(seeded, request)

        audit = db_service.persist_generated_schedule(request, result, seeded["user_id"])

        shifts = db_service.get_site_shifts(seeded["site_id"])
        assert len(shifts) == 10
        assert {s.status for s in shifts} == {"DRAFT"}
        assert shifts[0].get_requirements() == {"minEmployees": 2, "maxEmployees": 4, "requiredSkills": []}
        assert (shifts[0].start_time, shifts[0].end_time) == ("08:00", "16:00")
        assert [a.employee_id for a in shifts[0].assignments] == [
            seeded["employees"][0], seeded["employees"][2], seeded["employees"][1], seeded["employees"][3]
        ]

        assignments = Assignment.query.all()
        assert len(assignments) == 40
        assert {(a.status, a.role) for a in assignments} == {("CONFIRMED", "Associate")}

        assert audit.status == GENERATION_STATUS_COMPLETED
        assert audit.shifts_created == 10
        assert audit.assignments_created == 40
        assert audit.get_parameters()["siteId"] == seeded["site_id"]
        assert audit.get_parameters()["prioritizeVeterans"] is True

    def test_empty_result_still_writes_audit(self, app_ctx, seeded, request_for):
        saturday = date(2024, 4, 6)
        request = request_for(seeded["site_id"], start_date=saturday, end_date=saturday)

        audit = db_service.persist_generated_schedule(request, self._generate(seeded, request), seeded["user_id"])

        assert Shift.query.count() == 0
        assert audit.shifts_created == 0

    def test_failed_write_rolls_back(self, app_ctx, seeded, request_for, monkeypatch):
        request = request_for(seeded["site_id"])
        result = self._generate(seeded, request)

        def broken_commit():
            raise OperationalError("INSERT", {}, Exception("disk full"))

        monkeypatch.setattr(db.session, "commit", broken_commit)

        with pytest.raises(PersistenceError):
            db_service.persist_generated_schedule(request, result, seeded["user_id"])

        monkeypatch.undo()
        assert Shift.query.count() == 0
        assert Assignment.query.count() == 0
        assert ScheduleGenerationRequest.query.count() == 0

    def test_record_failed_generation(self, app_ctx, seeded, request_for):
        request = request_for(seeded["site_id"])

        assert db_service.record_failed_generation(request, seeded["user_id"], "boom") is True

        audit = ScheduleGenerationRequest.query.one()
        assert audit.status == GENERATION_STATUS_FAILED
        assert audit.error_message == "boom"

    def test_get_site_shifts_filters_by_date(self, app_ctx, seeded, request_for):
        request = request_for(seeded["site_id"])
        db_service.persist_generated_schedule(request, self._generate(seeded, request), seeded["user_id"])

        shifts = db_service.get_site_shifts(seeded["site_id"], date(2024, 4, 2), date(2024, 4, 3))

        assert [s.date for s in shifts] == [date(2024, 4, 2)] * 2 + [date(2024, 4, 3)] * 2
        assert [s.start_time for s in shifts] == ["08:00", "14:00", "08:00", "14:00"]
