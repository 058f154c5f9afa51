"""Data models for the schedule generation engine."""

from dataclasses import dataclass, field
from datetime import date
import math
from typing import Dict, List, Optional, Set, Tuple
from enum import Enum

from .exceptions import InvalidRequestError


# Fixed staffing bounds for every generated shift
MIN_EMPLOYEES = 2
MAX_EMPLOYEES = 4

# Longest accepted request, start and end included
MAX_RANGE_DAYS = 366

# Indexed by day_of_week (Sunday=0)
DAYS_OF_WEEK = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


class ExperienceLevel(Enum):
    """Employee experience bucket."""
    NOUVEAU = "NOUVEAU"
    VETERANE = "VETERANE"
    MANAGER = "MANAGER"


class PreferenceLevel(Enum):
    """Per-weekday work preference."""
    AVAILABLE = "AVAILABLE"
    PREFERRED = "PREFERRED"
    UNAVAILABLE = "UNAVAILABLE"


class RelationshipType(Enum):
    """How two employees relate to each other."""
    CONFLICT = "CONFLICT"
    PREFERENCE = "PREFERENCE"
    MENTOR_MENTEE = "MENTOR_MENTEE"


class SchedulePeriod(Enum):
    """Planning period picked in the UI (informational only)."""
    DAY = "day"
    WEEK = "week"
    BIWEEK = "biweek"
    MONTH = "month"


class SelectionStrategy(Enum):
    """How employees are picked for a shift window."""
    VETERAN_PAIRING = "veteran_pairing"    # Veteran + novice pairs first
    PREFERENCE_FIRST = "preference_first"  # PREFERRED employees first

    @classmethod
    def for_policy(cls, prioritize_veterans: bool) -> 'SelectionStrategy':
        return cls.VETERAN_PAIRING if prioritize_veterans else cls.PREFERENCE_FIRST


@dataclass
class Employee:
    """Snapshot of an employee as seen by the generator."""
    id: str
    first_name: str = ""
    last_name: str = ""
    experience_level: Optional[ExperienceLevel] = None
    weekly_hours: float = 0.0
    active: bool = True


def parse_hour(time_str: str) -> int:
    """Hour component of an "HH:MM" (or "HH:MM:SS") string."""
    return int(time_str.split(':')[0])


def format_hour(hour: int) -> str:
    return f"{hour:02d}:00"


@dataclass
class OpeningHours:
    """Opening hours of a site for one weekday."""
    day_of_week: int  # 0=Sunday, 6=Saturday
    opening_time: str
    closing_time: str
    is_closed: bool = False

    @property
    def opening_hour(self) -> int:
        return parse_hour(self.opening_time)

    @property
    def closing_hour(self) -> int:
        return parse_hour(self.closing_time)

    @property
    def total_hours(self) -> int:
        """Open hours counted on the hour component only (minutes are dropped)."""
        return self.closing_hour - self.opening_hour


@dataclass
class WorkPreference:
    """An employee's availability signal for one weekday."""
    employee_id: str
    day_of_week: int
    preference: PreferenceLevel = PreferenceLevel.AVAILABLE
    preferred_start_time: Optional[str] = None
    preferred_end_time: Optional[str] = None
    max_hours_per_day: Optional[float] = None

    @property
    def is_unavailable(self) -> bool:
        return self.preference == PreferenceLevel.UNAVAILABLE

    @property
    def is_preferred(self) -> bool:
        return self.preference == PreferenceLevel.PREFERRED


@dataclass
class Relationship:
    """Unordered pair of employees tagged with a relationship type."""
    employee_1_id: str
    employee_2_id: str
    relationship_type: RelationshipType


@dataclass
class TimeWindow:
    """A contiguous span on one date that needs staffing."""
    date: date
    day_of_week: int
    start_time: str
    end_time: str
    label: str = "morning"


@dataclass
class GeneratedShift:
    """A candidate shift with its assigned employees, in assignment order."""
    date: date
    start_time: str
    end_time: str
    min_employees: int = MIN_EMPLOYEES
    max_employees: int = MAX_EMPLOYEES
    assigned_employees: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "startTime": self.start_time,
            "endTime": self.end_time,
            "minEmployees": self.min_employees,
            "maxEmployees": self.max_employees,
            "assignedEmployees": list(self.assigned_employees)
        }


@dataclass
class GenerationMetrics:
    """Counters describing one generation run."""
    days_considered: int = 0
    days_closed: int = 0
    days_too_short: int = 0
    windows_considered: int = 0
    windows_understaffed: int = 0
    shifts_generated: int = 0
    assignments_generated: int = 0
    mentor_pairs_scheduled: int = 0

    def to_dict(self) -> dict:
        return {
            "days_considered": self.days_considered,
            "days_closed": self.days_closed,
            "days_too_short": self.days_too_short,
            "windows_considered": self.windows_considered,
            "windows_understaffed": self.windows_understaffed,
            "shifts_generated": self.shifts_generated,
            "assignments_generated": self.assignments_generated,
            "mentor_pairs_scheduled": self.mentor_pairs_scheduled
        }


@dataclass
class GenerationResult:
    """Output of a generation run."""
    shifts: List[GeneratedShift] = field(default_factory=list)
    metrics: GenerationMetrics = field(default_factory=GenerationMetrics)

    @property
    def shifts_created(self) -> int:
        return len(self.shifts)

    @property
    def assignments_created(self) -> int:
        return sum(len(s.assigned_employees) for s in self.shifts)

    def to_dict(self) -> dict:
        return {
            "shifts": [s.to_dict() for s in self.shifts],
            "metrics": self.metrics.to_dict()
        }


def _parse_date(data: dict, key: str) -> date:
    value = data.get(key)
    if not value or not isinstance(value, str):
        raise InvalidRequestError(f"{key} is required (YYYY-MM-DD).")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidRequestError(f"{key} must be an ISO date (YYYY-MM-DD), got {value!r}.")


def _parse_bool(data: dict, key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise InvalidRequestError(f"{key} must be a boolean.")
    return value


def _parse_number(data: dict, key: str, default: float) -> float:
    value = data.get(key, default)
    # bool is a subclass of int
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidRequestError(f"{key} must be a number.")
    # NaN and Infinity get through the JSON parser
    if not math.isfinite(value):
        raise InvalidRequestError(f"{key} must be a finite number.")
    if value < 0:
        raise InvalidRequestError(f"{key} must not be negative.")
    return value


@dataclass
class GenerationRequest:
    """
    Parameters of one generation call.

    max_hours_per_day and min_rest_between_shifts are accepted and stored
    with the request but the generator does not enforce them.
    """
    site_id: str
    start_date: date
    end_date: date
    period: SchedulePeriod = SchedulePeriod.WEEK
    prioritize_veterans: bool = True
    respect_conflicts: bool = True
    max_hours_per_day: float = 8
    min_rest_between_shifts: float = 12

    @property
    def strategy(self) -> SelectionStrategy:
        return SelectionStrategy.for_policy(self.prioritize_veterans)

    @classmethod
    def from_dict(cls, data: dict) -> 'GenerationRequest':
        """Build a request from the camelCase JSON body, validating every field."""
        if not isinstance(data, dict):
            raise InvalidRequestError("Request body must be a JSON object.")

        site_id = data.get('siteId')
        if site_id is None or str(site_id).strip() == '':
            raise InvalidRequestError("siteId is required.")

        start_date = _parse_date(data, 'startDate')
        end_date = _parse_date(data, 'endDate')
        if start_date > end_date:
            raise InvalidRequestError("startDate must be on or before endDate.")
        if (end_date - start_date).days + 1 > MAX_RANGE_DAYS:
            raise InvalidRequestError(f"A schedule can cover at most {MAX_RANGE_DAYS} days.")

        try:
            period = SchedulePeriod(data.get('period', SchedulePeriod.WEEK.value))
        except ValueError:
            allowed = ', '.join(p.value for p in SchedulePeriod)
            raise InvalidRequestError(f"period must be one of: {allowed}.")

        return cls(
            site_id=str(site_id).strip(),
            start_date=start_date,
            end_date=end_date,
            period=period,
            prioritize_veterans=_parse_bool(data, 'prioritizeVeterans', True),
            respect_conflicts=_parse_bool(data, 'respectConflicts', True),
            max_hours_per_day=_parse_number(data, 'maxHoursPerDay', 8),
            min_rest_between_shifts=_parse_number(data, 'minRestBetweenShifts', 12)
        )

    def to_dict(self) -> dict:
        return {
            "siteId": self.site_id,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "period": self.period.value,
            "prioritizeVeterans": self.prioritize_veterans,
            "respectConflicts": self.respect_conflicts,
            "maxHoursPerDay": self.max_hours_per_day,
            "minRestBetweenShifts": self.min_rest_between_shifts
        }


class GenerationSnapshot:
    """
    Everything the generator reads for one request.

    Built once from the loaded rows; the generator only reads it, so one
    snapshot can serve several runs. Only active employees make up the roster. Lookups that can match several
    records (opening hours, preferences) keep the first record found, in
    input order.
    """

    def __init__(
        self,
        employees: List[Employee],
        opening_hours: List[OpeningHours],
        preferences: List[WorkPreference] = None,
        relationships: List[Relationship] = None
    ):
        self.employees: List[Employee] = [e for e in employees if e.active]
        self.opening_hours: List[OpeningHours] = list(opening_hours)
        self.preferences: List[WorkPreference] = list(preferences or [])
        self.relationships: List[Relationship] = list(relationships or [])

        self._opening_index: Dict[int, OpeningHours] = {}
        for hours in self.opening_hours:
            self._opening_index.setdefault(hours.day_of_week, hours)

        self._preference_index: Dict[Tuple[str, int], WorkPreference] = {}
        for pref in self.preferences:
            self._preference_index.setdefault((pref.employee_id, pref.day_of_week), pref)

        # Stored in both directions so lookups ignore pair order
        self.conflict_pairs: Set[Tuple[str, str]] = set()
        self.mentor_map: Dict[str, List[str]] = {}
        for rel in self.relationships:
            if rel.relationship_type == RelationshipType.CONFLICT:
                self.conflict_pairs.add((rel.employee_1_id, rel.employee_2_id))
                self.conflict_pairs.add((rel.employee_2_id, rel.employee_1_id))
            elif rel.relationship_type == RelationshipType.MENTOR_MENTEE:
                self.mentor_map.setdefault(rel.employee_1_id, []).append(rel.employee_2_id)

        self.novices = self._pool(ExperienceLevel.NOUVEAU)
        self.veterans = self._pool(ExperienceLevel.VETERANE)
        self.managers = self._pool(ExperienceLevel.MANAGER)

    def _pool(self, level: ExperienceLevel) -> List[Employee]:
        return [e for e in self.employees if e.experience_level == level]

    def opening_hours_for(self, day_of_week: int) -> Optional[OpeningHours]:
        return self._opening_index.get(day_of_week)

    def preference_for(self, employee_id: str, day_of_week: int) -> Optional[WorkPreference]:
        return self._preference_index.get((employee_id, day_of_week))

    def is_conflict(self, employee_a: str, employee_b: str) -> bool:
        return (employee_a, employee_b) in self.conflict_pairs
