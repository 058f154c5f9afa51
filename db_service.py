"""
Database service for schedule generation.

Handles conversion between scheduler dataclass models and SQLAlchemy database models:
- loads the snapshot the generator works on (employees, opening hours, preferences, relationships)
- persists generated shifts, their assignments and the audit record
- reads persisted shifts back for a site
"""

from datetime import date, datetime
from typing import List, Optional
import logging

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from models import (
    db, User, Site, SiteOpeningHours, DBEmployee, EmployeeWorkPreference,
    EmployeeRelationship, Shift, Assignment, ScheduleGenerationRequest,
    SHIFT_STATUS_DRAFT, ASSIGNMENT_STATUS_CONFIRMED, DEFAULT_ASSIGNMENT_ROLE,
    GENERATION_STATUS_COMPLETED, GENERATION_STATUS_FAILED
)
from scheduler.models import (
    Employee, ExperienceLevel, OpeningHours, WorkPreference, PreferenceLevel,
    Relationship, RelationshipType, GenerationRequest, GenerationResult,
    GenerationSnapshot
)
from scheduler.exceptions import (
    InvalidRequestError, SiteNotFoundError, DataLoadError, PersistenceError
)
from scheduler import sample_data

logger = logging.getLogger(__name__)


# =============================================================================
# SITE OPERATIONS
# =============================================================================

def get_user_site(site_id: str, owner_id: int) -> Optional[Site]:
    """Get a site by ID if it belongs to the given user."""
    return Site.query.filter_by(id=site_id, owner_id=owner_id).first()


def _db_opening_hours_to_model(db_hours: SiteOpeningHours) -> OpeningHours:
    """Convert a SiteOpeningHours row to an OpeningHours dataclass."""
    return OpeningHours(
        day_of_week=db_hours.day_of_week,
        opening_time=db_hours.opening_time,
        closing_time=db_hours.closing_time,
        is_closed=bool(db_hours.is_closed)
    )


# =============================================================================
# STAFF OPERATIONS
# =============================================================================

def _db_employee_to_model(db_emp: DBEmployee) -> Employee:
    """Convert a DBEmployee to an Employee dataclass."""
    try:
        level = ExperienceLevel(db_emp.experience_level) if db_emp.experience_level else None
    except ValueError:
        level = None

    return Employee(
        id=db_emp.id,
        first_name=db_emp.first_name,
        last_name=db_emp.last_name,
        experience_level=level,
        weekly_hours=db_emp.weekly_hours or 0.0,
        active=bool(db_emp.active)
    )


def _db_preference_to_model(db_pref: EmployeeWorkPreference) -> WorkPreference:
    """Convert an EmployeeWorkPreference row to a WorkPreference dataclass."""
    try:
        preference = PreferenceLevel(db_pref.preference)
    except ValueError:
        preference = PreferenceLevel.AVAILABLE

    return WorkPreference(
        employee_id=db_pref.employee_id,
        day_of_week=db_pref.day_of_week,
        preference=preference,
        preferred_start_time=db_pref.preferred_start_time,
        preferred_end_time=db_pref.preferred_end_time,
        max_hours_per_day=db_pref.max_hours_per_day
    )


def _db_relationship_to_model(db_rel: EmployeeRelationship) -> Optional[Relationship]:
    """Convert an EmployeeRelationship row; unknown types are skipped."""
    try:
        rel_type = RelationshipType(db_rel.relationship_type)
    except ValueError:
        logger.warning("Skipping relationship %s with unknown type %r", db_rel.id, db_rel.relationship_type)
        return None

    return Relationship(
        employee_1_id=db_rel.employee_1_id,
        employee_2_id=db_rel.employee_2_id,
        relationship_type=rel_type
    )


def load_generation_snapshot(request: GenerationRequest, owner_id: int) -> GenerationSnapshot:
    """
    Load everything the generator needs for a request.

    The roster is the caller's active employees, in creation order. Any
    database failure aborts the whole request before generation starts.
    """
    try:
        site = get_user_site(request.site_id, owner_id)
        if site is None:
            raise SiteNotFoundError(f"Site {request.site_id} not found.")

        db_hours = SiteOpeningHours.query.filter_by(site_id=site.id) \
            .order_by(SiteOpeningHours.day_of_week).all()
        if not db_hours:
            raise InvalidRequestError(f"Site {request.site_id} has no opening hours configured.")

        db_employees = DBEmployee.query.filter_by(owner_id=owner_id, active=True) \
            .order_by(DBEmployee.created_at, DBEmployee.id).all()
        employee_ids = [e.id for e in db_employees]

        db_preferences = []
        db_relationships = []
        if employee_ids:
            db_preferences = EmployeeWorkPreference.query \
                .filter(EmployeeWorkPreference.employee_id.in_(employee_ids)) \
                .order_by(EmployeeWorkPreference.id).all()
            db_relationships = EmployeeRelationship.query.filter(or_(
                EmployeeRelationship.employee_1_id.in_(employee_ids),
                EmployeeRelationship.employee_2_id.in_(employee_ids)
            )).order_by(EmployeeRelationship.id).all()
    except SQLAlchemyError as e:
        logger.exception("Failed to load generation data for site %s", request.site_id)
        raise DataLoadError(f"Could not load scheduling data: {e}") from e

    relationships = [r for r in (_db_relationship_to_model(r) for r in db_relationships) if r is not None]

    snapshot = GenerationSnapshot(
        employees=[_db_employee_to_model(e) for e in db_employees],
        opening_hours=[_db_opening_hours_to_model(h) for h in db_hours],
        preferences=[_db_preference_to_model(p) for p in db_preferences],
        relationships=relationships
    )

    logger.info(
        "Found %d employees, %d opening hours, %d preferences, %d relationships",
        len(snapshot.employees), len(snapshot.opening_hours),
        len(snapshot.preferences), len(snapshot.relationships)
    )
    return snapshot


# =============================================================================
# SHIFT OPERATIONS
# =============================================================================

def persist_generated_schedule(
    request: GenerationRequest,
    result: GenerationResult,
    user_id: int
) -> ScheduleGenerationRequest:
    """
    Save generated shifts, their assignments and the audit record.

    Shifts are inserted first so assignments can reference their IDs. Everything
    is one transaction: on failure nothing is kept and PersistenceError is raised.
    """
    try:
        db_shifts = []
        for generated in result.shifts:
            db_shift = Shift(
                site_id=request.site_id,
                date=generated.date,
                start_time=generated.start_time,
                end_time=generated.end_time,
                status=SHIFT_STATUS_DRAFT
            )
            db_shift.set_requirements({
                'minEmployees': generated.min_employees,
                'maxEmployees': generated.max_employees,
                'requiredSkills': []
            })
            db.session.add(db_shift)
            db_shifts.append(db_shift)

        db.session.flush()  # Get the shift IDs

        for generated, db_shift in zip(result.shifts, db_shifts):
            for employee_id in generated.assigned_employees:
                db.session.add(Assignment(
                    shift_id=db_shift.id,
                    employee_id=employee_id,
                    status=ASSIGNMENT_STATUS_CONFIRMED,
                    role=DEFAULT_ASSIGNMENT_ROLE
                ))

        audit = _build_audit_record(request, user_id, GENERATION_STATUS_COMPLETED)
        audit.shifts_created = result.shifts_created
        audit.assignments_created = result.assignments_created
        db.session.add(audit)

        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Failed to save generated schedule for site %s", request.site_id)
        raise PersistenceError(f"Could not save generated schedule: {e}") from e

    return audit


def _build_audit_record(request: GenerationRequest, user_id: int, status: str) -> ScheduleGenerationRequest:
    audit = ScheduleGenerationRequest(
        site_id=request.site_id,
        start_date=request.start_date,
        end_date=request.end_date,
        status=status,
        generated_by=user_id
    )
    audit.set_parameters(request.to_dict())
    return audit


def record_failed_generation(request: GenerationRequest, user_id: int, error_message: str) -> bool:
    """Write a FAILED audit record on a fresh transaction.

    Returns False (and logs) if the audit write itself fails, so the caller
    can still report the original error.
    """
    try:
        db.session.rollback()
        audit = _build_audit_record(request, user_id, GENERATION_STATUS_FAILED)
        audit.error_message = error_message
        db.session.add(audit)
        db.session.commit()
        return True
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.warning("Could not record failed generation for site %s: %s", request.site_id, e)
        return False


def get_site_shifts(site_id: str, start: date = None, end: date = None) -> List[Shift]:
    """Get the shifts of a site, optionally limited to a date range, in calendar order."""
    query = Shift.query.filter_by(site_id=site_id)
    if start is not None:
        query = query.filter(Shift.date >= start)
    if end is not None:
        query = query.filter(Shift.date <= end)
    return query.order_by(Shift.date, Shift.start_time, Shift.created_at).all()


def get_generation_history(site_id: str, limit: int = 20) -> List[ScheduleGenerationRequest]:
    """Most recent generation audit records for a site."""
    return ScheduleGenerationRequest.query.filter_by(site_id=site_id) \
        .order_by(ScheduleGenerationRequest.created_at.desc(), ScheduleGenerationRequest.id.desc()) \
        .limit(limit).all()


# =============================================================================
# DEMO DATA
# =============================================================================

def seed_demo_site(owner: User) -> Site:
    """Create the demo site and roster from scheduler.sample_data for a user."""
    site = Site(owner_id=owner.id, **sample_data.DEMO_SITE)
    db.session.add(site)
    db.session.flush()

    for hours in sample_data.get_demo_opening_hours():
        db.session.add(SiteOpeningHours(
            site_id=site.id,
            day_of_week=hours.day_of_week,
            opening_time=hours.opening_time,
            closing_time=hours.closing_time,
            is_closed=hours.is_closed
        ))

    # Demo IDs ("V1", ...) are replaced by generated keys
    id_map = {}
    for index, emp in enumerate(sample_data.get_demo_employees()):
        db_emp = DBEmployee(
            owner_id=owner.id,
            first_name=emp.first_name,
            last_name=emp.last_name,
            experience_level=emp.experience_level.value if emp.experience_level else None,
            weekly_hours=emp.weekly_hours,
            active=emp.active,
            # Keep roster order stable for generation
            created_at=datetime(2024, 1, 1, 0, 0, index)
        )
        db.session.add(db_emp)
        db.session.flush()
        id_map[emp.id] = db_emp.id

    for rel in sample_data.get_demo_relationships():
        db.session.add(EmployeeRelationship(
            employee_1_id=id_map[rel.employee_1_id],
            employee_2_id=id_map[rel.employee_2_id],
            relationship_type=rel.relationship_type.value,
            created_by=owner.id
        ))

    db.session.commit()
    return site
