"""Database models for user authentication, sites, staff data, and generated shifts."""

from datetime import datetime
from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from flask_bcrypt import Bcrypt
import json
import logging
import uuid

db = SQLAlchemy()
bcrypt = Bcrypt()

logger = logging.getLogger(__name__)

# Shift / assignment statuses written by the generator
SHIFT_STATUS_DRAFT = 'DRAFT'
ASSIGNMENT_STATUS_CONFIRMED = 'CONFIRMED'
DEFAULT_ASSIGNMENT_ROLE = 'Associate'

# Audit row statuses
GENERATION_STATUS_COMPLETED = 'COMPLETED'
GENERATION_STATUS_FAILED = 'FAILED'


def generate_uuid():
    """Generate a unique string ID."""
    return str(uuid.uuid4())


class User(db.Model, UserMixin):
    """User model for authentication (site managers)."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # Profile info
    first_name = db.Column(db.String(50), nullable=True)
    last_name = db.Column(db.String(50), nullable=True)

    # Account status
    is_active = db.Column(db.Boolean, default=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_login = db.Column(db.DateTime, nullable=True)

    def __repr__(self):
        return f'<User {self.username}>'

    def set_password(self, password):
        """Hash and set the user's password."""
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        """Check if the provided password matches the hash."""
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        """Convert user to dictionary (excluding sensitive data)."""
        return {
            'id': self.id,
            'email': self.email,
            'username': self.username,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'last_login': self.last_login.isoformat() if self.last_login else None
        }


# =============================================================================
# SITE MODELS
# =============================================================================

class Site(db.Model):
    """A physical location that needs staffing."""
    __tablename__ = 'sites'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)

    code = db.Column(db.String(20), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    address = db.Column(db.String(255), default='')
    active = db.Column(db.Boolean, default=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = db.relationship('User', backref=db.backref('sites', lazy=True))
    opening_hours = db.relationship('SiteOpeningHours', backref='site', lazy=True,
                                    cascade='all, delete-orphan',
                                    order_by='SiteOpeningHours.day_of_week')
    shifts = db.relationship('Shift', backref='site', lazy=True, cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Site {self.code}: {self.name}>'

    def to_dict(self):
        return {
            'id': self.id,
            'code': self.code,
            'name': self.name,
            'address': self.address,
            'active': self.active,
            'opening_hours': [h.to_dict() for h in self.opening_hours]
        }


class SiteOpeningHours(db.Model):
    """Opening hours of a site for one weekday (0=Sunday..6=Saturday)."""
    __tablename__ = 'site_opening_hours'

    id = db.Column(db.Integer, primary_key=True)
    site_id = db.Column(db.String(36), db.ForeignKey('sites.id', ondelete='CASCADE'), nullable=False, index=True)

    day_of_week = db.Column(db.Integer, nullable=False)
    opening_time = db.Column(db.String(8), nullable=False)  # "HH:MM"
    closing_time = db.Column(db.String(8), nullable=False)
    is_closed = db.Column(db.Boolean, default=False)

    # Unique constraint: one record per site per weekday
    __table_args__ = (db.UniqueConstraint('site_id', 'day_of_week', name='unique_hours_per_site_day'),)

    def __repr__(self):
        return f'<SiteOpeningHours site={self.site_id} day={self.day_of_week}>'

    def to_dict(self):
        return {
            'day_of_week': self.day_of_week,
            'opening_time': self.opening_time,
            'closing_time': self.closing_time,
            'is_closed': bool(self.is_closed)
        }


# =============================================================================
# STAFF MODELS
# =============================================================================

class DBEmployee(db.Model):
    """Persisted employee data."""
    __tablename__ = 'employees'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)

    # Basic info
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(200), nullable=True)
    color = db.Column(db.String(20), default='#4CAF50')

    # NOUVEAU, VETERANE or MANAGER (NULL = not classified)
    experience_level = db.Column(db.String(20), nullable=True)
    weekly_hours = db.Column(db.Float, default=38.0)
    active = db.Column(db.Boolean, default=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = db.relationship('User', backref=db.backref('employees', lazy=True))
    work_preferences = db.relationship('EmployeeWorkPreference', backref='employee', lazy=True,
                                       cascade='all, delete-orphan')

    def __repr__(self):
        return f'<DBEmployee {self.id}: {self.first_name} {self.last_name}>'

    def to_dict(self):
        return {
            'id': self.id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'color': self.color,
            'experience_level': self.experience_level,
            'weekly_hours': self.weekly_hours,
            'active': self.active
        }


class EmployeeWorkPreference(db.Model):
    """Per-weekday availability of an employee. No row means AVAILABLE."""
    __tablename__ = 'employee_work_preferences'

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.String(36), db.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False, index=True)

    day_of_week = db.Column(db.Integer, nullable=False)
    # AVAILABLE, PREFERRED or UNAVAILABLE
    preference = db.Column(db.String(20), nullable=False, default='AVAILABLE')
    preferred_start_time = db.Column(db.String(8), nullable=True)
    preferred_end_time = db.Column(db.String(8), nullable=True)
    max_hours_per_day = db.Column(db.Float, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    __table_args__ = (db.UniqueConstraint('employee_id', 'day_of_week', name='unique_preference_per_day'),)

    def __repr__(self):
        return f'<EmployeeWorkPreference {self.employee_id} day={self.day_of_week} {self.preference}>'

    def to_dict(self):
        return {
            'employee_id': self.employee_id,
            'day_of_week': self.day_of_week,
            'preference': self.preference,
            'preferred_start_time': self.preferred_start_time,
            'preferred_end_time': self.preferred_end_time,
            'max_hours_per_day': self.max_hours_per_day
        }


class EmployeeRelationship(db.Model):
    """Unordered pair of employees: CONFLICT, PREFERENCE or MENTOR_MENTEE.

    For MENTOR_MENTEE rows employee_1 is the mentor.
    """
    __tablename__ = 'employee_relationships'

    id = db.Column(db.Integer, primary_key=True)
    employee_1_id = db.Column(db.String(36), db.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False)
    employee_2_id = db.Column(db.String(36), db.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False)
    relationship_type = db.Column(db.String(20), nullable=False)
    notes = db.Column(db.Text, nullable=True)

    created_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<EmployeeRelationship {self.employee_1_id}-{self.employee_2_id} {self.relationship_type}>'

    def to_dict(self):
        return {
            'employee_1_id': self.employee_1_id,
            'employee_2_id': self.employee_2_id,
            'relationship_type': self.relationship_type,
            'notes': self.notes
        }


# =============================================================================
# SHIFT MODELS
# =============================================================================

class Shift(db.Model):
    """A shift at a site. Generated shifts start as DRAFT."""
    __tablename__ = 'shifts'

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    site_id = db.Column(db.String(36), db.ForeignKey('sites.id', ondelete='CASCADE'), nullable=False, index=True)

    date = db.Column(db.Date, nullable=False, index=True)
    start_time = db.Column(db.String(8), nullable=False)
    end_time = db.Column(db.String(8), nullable=False)

    # Format: {"minEmployees": 2, "maxEmployees": 4, "requiredSkills": []}
    requirements_json = db.Column(db.Text, default='{}')

    # Status: 'DRAFT', 'OPEN', 'CLOSED', 'PUBLISHED', 'COMPLETED'
    status = db.Column(db.String(20), default=SHIFT_STATUS_DRAFT)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    assignments = db.relationship('Assignment', backref='shift', lazy=True,
                                  cascade='all, delete-orphan', order_by='Assignment.id')

    def __repr__(self):
        return f'<Shift {self.date} {self.start_time}-{self.end_time} at {self.site_id}>'

    def get_requirements(self):
        """Get requirements as a dictionary."""
        if not self.requirements_json:
            return {}
        try:
            return json.loads(self.requirements_json)
        except json.JSONDecodeError:
            return {}

    def set_requirements(self, requirements):
        """Set requirements from a dictionary."""
        self.requirements_json = json.dumps(requirements)

    def to_dict(self):
        return {
            'id': self.id,
            'site_id': self.site_id,
            'date': self.date.isoformat() if self.date else None,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'requirements': self.get_requirements(),
            'status': self.status,
            'assignments': [a.to_dict() for a in self.assignments]
        }


class Assignment(db.Model):
    """An employee assigned to a shift."""
    __tablename__ = 'assignments'

    id = db.Column(db.Integer, primary_key=True)
    shift_id = db.Column(db.String(36), db.ForeignKey('shifts.id', ondelete='CASCADE'), nullable=False, index=True)
    employee_id = db.Column(db.String(36), db.ForeignKey('employees.id', ondelete='CASCADE'), nullable=False)

    # Status: 'PROPOSED', 'CONFIRMED', 'DECLINED'
    status = db.Column(db.String(20), default=ASSIGNMENT_STATUS_CONFIRMED)
    role = db.Column(db.String(50), default=DEFAULT_ASSIGNMENT_ROLE)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<Assignment {self.employee_id} on shift {self.shift_id}>'

    def to_dict(self):
        return {
            'shift_id': self.shift_id,
            'employee_id': self.employee_id,
            'status': self.status,
            'role': self.role
        }


class ScheduleGenerationRequest(db.Model):
    """Audit record of a schedule generation call."""
    __tablename__ = 'schedule_generation_requests'

    id = db.Column(db.Integer, primary_key=True)
    site_id = db.Column(db.String(36), nullable=False, index=True)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)

    # Status: 'COMPLETED', 'FAILED'
    status = db.Column(db.String(20), nullable=False)
    generated_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)

    # Request parameters stored as JSON (camelCase, as received)
    parameters_json = db.Column(db.Text, nullable=True)
    error_message = db.Column(db.Text, nullable=True)

    shifts_created = db.Column(db.Integer, default=0)
    assignments_created = db.Column(db.Integer, default=0)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f'<ScheduleGenerationRequest {self.id} site={self.site_id} {self.status}>'

    def get_parameters(self):
        """Get parameters as a dictionary."""
        if not self.parameters_json:
            return {}
        try:
            return json.loads(self.parameters_json)
        except json.JSONDecodeError:
            return {}

    def set_parameters(self, parameters):
        """Set parameters from a dictionary."""
        self.parameters_json = json.dumps(parameters)

    def to_dict(self):
        return {
            'id': self.id,
            'site_id': self.site_id,
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'status': self.status,
            'generated_by': self.generated_by,
            'parameters': self.get_parameters(),
            'error_message': self.error_message,
            'shifts_created': self.shifts_created,
            'assignments_created': self.assignments_created,
            'created_at': self.created_at.isoformat() if self.created_at else None
        }


def init_db(app):
    """Initialize the database with the Flask app."""
    db.init_app(app)
    bcrypt.init_app(app)

    with app.app_context():
        db.create_all()
        logger.debug("Database tables ensured for %s", app.config.get('SQLALCHEMY_DATABASE_URI'))
