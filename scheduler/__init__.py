"""Site schedule generation package - greedy shift slicing and staff assignment."""

from .models import (
    ExperienceLevel,
    PreferenceLevel,
    RelationshipType,
    SchedulePeriod,
    SelectionStrategy,
    Employee,
    OpeningHours,
    WorkPreference,
    Relationship,
    TimeWindow,
    GeneratedShift,
    GenerationMetrics,
    GenerationResult,
    GenerationRequest,
    GenerationSnapshot,
    MIN_EMPLOYEES,
    MAX_EMPLOYEES,
    MAX_RANGE_DAYS,
    DAYS_OF_WEEK
)
from .exceptions import (
    ScheduleGenerationError,
    InvalidRequestError,
    SiteNotFoundError,
    DataLoadError,
    PersistenceError
)
from .generator import ScheduleGenerator, generate_schedule
from .sample_data import get_demo_snapshot

__all__ = [
    # Models
    'ExperienceLevel',
    'PreferenceLevel',
    'RelationshipType',
    'SchedulePeriod',
    'SelectionStrategy',
    'Employee',
    'OpeningHours',
    'WorkPreference',
    'Relationship',
    'TimeWindow',
    'GeneratedShift',
    'GenerationMetrics',
    'GenerationResult',
    'GenerationRequest',
    'GenerationSnapshot',
    'MIN_EMPLOYEES',
    'MAX_EMPLOYEES',
    'MAX_RANGE_DAYS',
    'DAYS_OF_WEEK',

    # Errors
    'ScheduleGenerationError',
    'InvalidRequestError',
    'SiteNotFoundError',
    'DataLoadError',
    'PersistenceError',

    # Generator
    'ScheduleGenerator',
    'generate_schedule',

    # Sample data
    'get_demo_snapshot'
]
