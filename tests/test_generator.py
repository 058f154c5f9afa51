from datetime import date
from itertools import combinations

import pytest

from scheduler import ScheduleGenerator, generate_schedule
from scheduler.models import (
    Employee, ExperienceLevel, GenerationSnapshot, PreferenceLevel, Relationship,
    RelationshipType, WorkPreference, MIN_EMPLOYEES, MAX_EMPLOYEES
)
from scheduler.sample_data import (
    get_demo_employees, get_demo_opening_hours, get_demo_relationships
)


def _mixed_roster():
    """Twelve employees cycling through the three levels plus unclassified staff."""
    levels = [ExperienceLevel.VETERANE, ExperienceLevel.NOUVEAU, ExperienceLevel.MANAGER, None]
    return [Employee(f"E{i}", experience_level=levels[i % len(levels)]) for i in range(12)]


def _dense_conflicts(employees):
    """Every pair whose index sum is odd is a conflict."""
    rels = []
    for a, b in combinations(range(len(employees)), 2):
        if (a + b) % 2 == 1:
            rels.append(Relationship(employees[a].id, employees[b].id, RelationshipType.CONFLICT))
    return rels


class TestDemoScenario:

    def test_week_produces_two_shifts_per_weekday(self, demo_snapshot, make_request):
        result = generate_schedule(make_request(), demo_snapshot)

        assert result.shifts_created == 10
        assert result.assignments_created == 40
        dates = [s.date for s in result.shifts]
        assert dates == sorted(dates)
        assert {d.weekday() for d in dates} == {0, 1, 2, 3, 4}
        assert date(2024, 4, 6) not in dates and date(2024, 4, 7) not in dates

    def test_windows_and_assignments(self, demo_snapshot, make_request):
        result = generate_schedule(make_request(), demo_snapshot)
        monday = [s for s in result.shifts if s.date == date(2024, 4, 1)]

        assert [(s.start_time, s.end_time) for s in monday] == [("08:00", "16:00"), ("14:00", "20:00")]
        # Windows share no state: both get the same selection
        assert monday[0].assigned_employees == ["V1", "N1", "V2", "N2"]
        assert monday[1].assigned_employees == ["V1", "N1", "V2", "N2"]

    def test_metrics(self, demo_snapshot, make_request):
        metrics = generate_schedule(make_request(), demo_snapshot).metrics

        assert metrics.days_considered == 7
        assert metrics.days_closed == 2
        assert metrics.windows_considered == 10
        assert metrics.windows_understaffed == 0
        assert metrics.shifts_generated == 10
        assert metrics.assignments_generated == 40
        # V1 mentors N1 and they share every shift
        assert metrics.mentor_pairs_scheduled == 10

    def test_preference_first_policy(self, demo_snapshot, make_request):
        result = generate_schedule(make_request(prioritize_veterans=False), demo_snapshot)
        assert result.shifts[0].assigned_employees == ["V1", "V2", "N1", "N2"]

    def test_result_serializes_with_contract_keys(self, demo_snapshot, make_request):
        data = generate_schedule(make_request(), demo_snapshot).to_dict()

        assert data["shifts"][0]["date"] == "2024-04-01"
        assert set(data["shifts"][0]) == {
            "date", "startTime", "endTime", "minEmployees", "maxEmployees", "assignedEmployees"
        }
        assert data["metrics"]["shifts_generated"] == 10


def test_runs_are_deterministic(make_request):
    employees = _mixed_roster()
    snapshot = GenerationSnapshot(
        employees=employees,
        opening_hours=get_demo_opening_hours("07:00", "21:00"),
        preferences=[WorkPreference("E3", 2, PreferenceLevel.PREFERRED)],
        relationships=_dense_conflicts(employees)[:10]
    )
    request = make_request(end_date=date(2024, 4, 30))

    first = [s.to_dict() for s in generate_schedule(request, snapshot).shifts]
    second = [s.to_dict() for s in ScheduleGenerator(snapshot).generate(request).shifts]

    assert first == second
    assert first


@pytest.mark.parametrize("prioritize_veterans", [True, False])
def test_no_conflicting_pair_is_ever_scheduled(make_request, prioritize_veterans):
    employees = _mixed_roster()
    conflicts = _dense_conflicts(employees)
    snapshot = GenerationSnapshot(
        employees=employees,
        opening_hours=get_demo_opening_hours(),
        relationships=conflicts
    )
    forbidden = {frozenset((r.employee_1_id, r.employee_2_id)) for r in conflicts}

    result = generate_schedule(make_request(prioritize_veterans=prioritize_veterans), snapshot)

    assert result.shifts
    for shift in result.shifts:
        for a, b in combinations(shift.assigned_employees, 2):
            assert frozenset((a, b)) not in forbidden
        assert MIN_EMPLOYEES <= len(shift.assigned_employees) <= MAX_EMPLOYEES
        assert len(set(shift.assigned_employees)) == len(shift.assigned_employees)


def test_inactive_employees_are_left_out(make_request):
    employees = get_demo_employees()
    employees[0].active = False  # V1
    snapshot = GenerationSnapshot(employees=employees, opening_hours=get_demo_opening_hours())

    result = generate_schedule(make_request(), snapshot)

    assert all("V1" not in s.assigned_employees for s in result.shifts)
    assert result.shifts[0].assigned_employees == ["V2", "N1", "M1"]


def test_unavailable_day_is_skipped_entirely(make_request):
    employees = get_demo_employees()
    preferences = [WorkPreference(e.id, 1, PreferenceLevel.UNAVAILABLE) for e in employees]
    snapshot = GenerationSnapshot(
        employees=employees,
        opening_hours=get_demo_opening_hours(),
        preferences=preferences
    )

    result = generate_schedule(make_request(), snapshot)

    assert result.shifts_created == 8
    assert date(2024, 4, 1) not in {s.date for s in result.shifts}
    assert result.metrics.windows_understaffed == 2


def test_hour_limits_are_passed_through_unenforced(demo_snapshot, make_request):
    strict = generate_schedule(make_request(max_hours_per_day=1, min_rest_between_shifts=24), demo_snapshot)
    loose = generate_schedule(make_request(max_hours_per_day=24, min_rest_between_shifts=0), demo_snapshot)

    assert [s.to_dict() for s in strict.shifts] == [s.to_dict() for s in loose.shifts]


def test_preference_relationships_do_not_change_selection(make_request):
    base = GenerationSnapshot(
        employees=get_demo_employees(),
        opening_hours=get_demo_opening_hours(),
        relationships=get_demo_relationships()
    )
    with_preference = GenerationSnapshot(
        employees=get_demo_employees(),
        opening_hours=get_demo_opening_hours(),
        relationships=get_demo_relationships() + [Relationship("M1", "N2", RelationshipType.PREFERENCE)]
    )

    request = make_request(prioritize_veterans=False)
    assert [s.to_dict() for s in generate_schedule(request, base).shifts] == \
        [s.to_dict() for s in generate_schedule(request, with_preference).shifts]


def test_single_day_range(demo_snapshot, make_request):
    saturday = date(2024, 4, 6)
    result = generate_schedule(make_request(start_date=saturday, end_date=saturday), demo_snapshot)

    assert result.shifts == []
    assert result.metrics.days_closed == 1


def test_generation_leaves_the_snapshot_untouched(make_request):
    employees = get_demo_employees()
    snapshot = GenerationSnapshot(
        employees=employees,
        opening_hours=get_demo_opening_hours(),
        preferences=[WorkPreference("N2", 1, PreferenceLevel.PREFERRED)],
        relationships=get_demo_relationships() + [Relationship("V2", "N2", RelationshipType.CONFLICT)]
    )
    before = (
        [e.id for e in snapshot.employees], list(snapshot.preferences), list(snapshot.relationships),
        set(snapshot.conflict_pairs), {k: list(v) for k, v in snapshot.mentor_map.items()}
    )

    generator = ScheduleGenerator(snapshot)
    first = generator.generate(make_request())
    second = generator.generate(make_request(prioritize_veterans=False))

    after = (
        [e.id for e in snapshot.employees], list(snapshot.preferences), list(snapshot.relationships),
        set(snapshot.conflict_pairs), {k: list(v) for k, v in snapshot.mentor_map.items()}
    )
    assert after == before
    assert [s.to_dict() for s in generator.generate(make_request()).shifts] == [s.to_dict() for s in first.shifts]
    assert second.shifts
