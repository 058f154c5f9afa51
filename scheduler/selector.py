"""
Assignment selector: picks the employees for one shift window.

Greedy and order-driven: candidates are scanned in roster order and no
secondary sort key is applied, so the same inputs always give the same
assignment order.
"""

import logging
from typing import Callable, Dict, List, Optional

from .models import (
    Employee, GeneratedShift, GenerationRequest, GenerationSnapshot,
    SelectionStrategy, TimeWindow, DAYS_OF_WEEK, MIN_EMPLOYEES, MAX_EMPLOYEES
)

logger = logging.getLogger(__name__)


def available_employees(snapshot: GenerationSnapshot, day_of_week: int) -> List[Employee]:
    """Employees without an UNAVAILABLE preference for the weekday.

    A missing preference record counts as available.
    """
    available = []
    for emp in snapshot.employees:
        pref = snapshot.preference_for(emp.id, day_of_week)
        if pref is None or not pref.is_unavailable:
            available.append(emp)
    return available


def has_conflict(
    snapshot: GenerationSnapshot,
    candidate: Employee,
    assigned: List[Employee],
    respect_conflicts: bool
) -> bool:
    """Check whether adding candidate would pair them with a conflicting employee."""
    if not respect_conflicts:
        return False
    return any(snapshot.is_conflict(candidate.id, other.id) for other in assigned)


def select_with_veteran_pairing(
    snapshot: GenerationSnapshot,
    available: List[Employee],
    day_of_week: int,
    respect_conflicts: bool
) -> List[Employee]:
    """Pair veterans with novices index for index, then top up with managers and veterans."""
    available_ids = {e.id for e in available}
    veterans = [v for v in snapshot.veterans if v.id in available_ids]
    novices = [n for n in snapshot.novices if n.id in available_ids]
    managers = [m for m in snapshot.managers if m.id in available_ids]

    assigned: List[Employee] = []

    for veteran, novice in zip(veterans, novices):
        if len(assigned) + 2 > MAX_EMPLOYEES:
            break
        if respect_conflicts and snapshot.is_conflict(veteran.id, novice.id):
            continue
        # A pair must not clash with anyone already on the shift either
        if has_conflict(snapshot, veteran, assigned, respect_conflicts) or \
                has_conflict(snapshot, novice, assigned, respect_conflicts):
            continue
        assigned.extend([veteran, novice])

    for emp in managers + veterans:
        if len(assigned) >= MAX_EMPLOYEES:
            break
        if emp in assigned:
            continue
        if not has_conflict(snapshot, emp, assigned, respect_conflicts):
            assigned.append(emp)

    return assigned


def select_by_preference(
    snapshot: GenerationSnapshot,
    available: List[Employee],
    day_of_week: int,
    respect_conflicts: bool
) -> List[Employee]:
    """Take employees who prefer the weekday first, then anyone else available."""
    preferred = []
    for emp in available:
        pref = snapshot.preference_for(emp.id, day_of_week)
        if pref is not None and pref.is_preferred:
            preferred.append(emp)

    assigned: List[Employee] = []

    for emp in preferred:
        if len(assigned) >= MAX_EMPLOYEES:
            break
        if not has_conflict(snapshot, emp, assigned, respect_conflicts):
            assigned.append(emp)

    for emp in available:
        if len(assigned) >= MAX_EMPLOYEES:
            break
        if emp in assigned:
            continue
        if not has_conflict(snapshot, emp, assigned, respect_conflicts):
            assigned.append(emp)

    return assigned


SelectorFn = Callable[[GenerationSnapshot, List[Employee], int, bool], List[Employee]]

STRATEGIES: Dict[SelectionStrategy, SelectorFn] = {
    SelectionStrategy.VETERAN_PAIRING: select_with_veteran_pairing,
    SelectionStrategy.PREFERENCE_FIRST: select_by_preference,
}


def select_employees(
    window: TimeWindow,
    snapshot: GenerationSnapshot,
    strategy: SelectionStrategy,
    respect_conflicts: bool
) -> Optional[List[Employee]]:
    """
    Choose the employees for a window.

    Returns None when fewer than MIN_EMPLOYEES are available or can be
    assigned; an understaffed shift is never returned.
    """
    available = available_employees(snapshot, window.day_of_week)
    if len(available) < MIN_EMPLOYEES:
        logger.debug(
            "Not enough available employees for %s %s %s",
            DAYS_OF_WEEK[window.day_of_week], window.date, window.start_time
        )
        return None

    assigned = STRATEGIES[strategy](snapshot, available, window.day_of_week, respect_conflicts)

    if len(assigned) < MIN_EMPLOYEES:
        logger.debug(
            "Not enough employees assigned for %s %s %s: %d",
            DAYS_OF_WEEK[window.day_of_week], window.date, window.start_time, len(assigned)
        )
        return None
    return assigned


def build_shift(
    window: TimeWindow,
    snapshot: GenerationSnapshot,
    request: GenerationRequest
) -> Optional[GeneratedShift]:
    """Staff a window and wrap the result as a GeneratedShift (or None)."""
    assigned = select_employees(window, snapshot, request.strategy, request.respect_conflicts)
    if assigned is None:
        return None

    return GeneratedShift(
        date=window.date,
        start_time=window.start_time,
        end_time=window.end_time,
        min_employees=MIN_EMPLOYEES,
        max_employees=MAX_EMPLOYEES,
        assigned_employees=[e.id for e in assigned]
    )
