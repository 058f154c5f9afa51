from datetime import date, datetime, timedelta
import itertools

import pytest

from app import create_app
from models import (
    db, User, Site, SiteOpeningHours, DBEmployee, EmployeeWorkPreference,
    EmployeeRelationship
)
import db_service
from scheduler.models import GenerationRequest
from scheduler.sample_data import get_demo_snapshot

MANAGER_EMAIL = "manager@example.com"
MANAGER_PASSWORD = "password123"

# Monday 1 April 2024 .. Sunday 7 April 2024
WEEK_START = date(2024, 4, 1)
WEEK_END = date(2024, 4, 7)

# Keeps roster order stable for employees added by tests
_creation_order = itertools.count()


# ---------------------------------------------------------------------------
# Flask app, database and clients
# ---------------------------------------------------------------------------
@pytest.fixture
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app_ctx(app):
    """Push an app context for tests that talk to the database directly."""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


def _create_user(email, username):
    user = User(email=email, username=username, first_name="Test", last_name="Manager")
    user.set_password(MANAGER_PASSWORD)
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def seeded(app):
    """A manager with the demo site (08:00-20:00 weekdays) and five employees.

    Returns plain IDs so tests can use them outside the app context.
    """
    with app.app_context():
        user = _create_user(MANAGER_EMAIL, "manager")
        site = db_service.seed_demo_site(user)

        # Another manager's data must never leak into generation
        other = _create_user("other@example.com", "other")
        db.session.add(DBEmployee(owner_id=other.id, first_name="Olga", last_name="Outsider",
                                  experience_level="VETERANE"))
        db.session.commit()

        employees = DBEmployee.query.filter_by(owner_id=user.id) \
            .order_by(DBEmployee.created_at).all()
        ids = {
            "user_id": user.id,
            "other_user_id": other.id,
            "site_id": site.id,
            # Roster order: V1, V2, N1, N2, M1
            "employees": [e.id for e in employees],
        }
    return ids


@pytest.fixture
def auth_client(client, seeded):
    response = client.post('/login', json={'email': MANAGER_EMAIL, 'password': MANAGER_PASSWORD})
    assert response.status_code == 200
    return client


# ---------------------------------------------------------------------------
# Plain in-memory fixtures for the generation engine
# ---------------------------------------------------------------------------
@pytest.fixture
def demo_snapshot():
    return get_demo_snapshot()


@pytest.fixture
def make_request():
    """Factory for GenerationRequest objects over the demo week."""
    def _make(**overrides):
        params = dict(
            site_id="site-1",
            start_date=WEEK_START,
            end_date=WEEK_END,
            prioritize_veterans=True,
            respect_conflicts=True
        )
        params.update(overrides)
        return GenerationRequest(**params)
    return _make


def add_employee(owner_id, first_name, level=None, active=True, created_at=None):
    """Insert an employee row (call inside an app context)."""
    emp = DBEmployee(
        owner_id=owner_id,
        first_name=first_name,
        last_name="Test",
        experience_level=level,
        active=active,
        created_at=created_at or datetime(2024, 2, 1) + timedelta(seconds=next(_creation_order))
    )
    db.session.add(emp)
    db.session.commit()
    return emp


@pytest.fixture
def employee_factory():
    return add_employee


@pytest.fixture
def preference_factory():
    def _add(employee_id, day_of_week, preference):
        pref = EmployeeWorkPreference(employee_id=employee_id, day_of_week=day_of_week, preference=preference)
        db.session.add(pref)
        db.session.commit()
        return pref
    return _add


@pytest.fixture
def relationship_factory():
    def _add(employee_1_id, employee_2_id, relationship_type):
        rel = EmployeeRelationship(employee_1_id=employee_1_id, employee_2_id=employee_2_id,
                                   relationship_type=relationship_type)
        db.session.add(rel)
        db.session.commit()
        return rel
    return _add


@pytest.fixture
def empty_site_factory():
    def _add(owner_id, with_hours=False):
        site = Site(owner_id=owner_id, code="EMPTY", name="Empty Site")
        db.session.add(site)
        db.session.flush()
        if with_hours:
            db.session.add(SiteOpeningHours(site_id=site.id, day_of_week=1,
                                            opening_time="09:00", closing_time="17:00"))
        db.session.commit()
        return site
    return _add
