"""
Schedule generator.

Walks the requested date range with the shift slicer and staffs each window
with the assignment selector. This is a pure computation over an in-memory
GenerationSnapshot: loading the snapshot and persisting the result are the
caller's job (see db_service).

Heuristic, not a solver:
- Windows are staffed independently; nothing carries over between windows
- Tie-breaks follow roster order, no randomness
- maxHoursPerDay / minRestBetweenShifts are carried on the request but not enforced
- PREFERENCE relationships are loaded but not consulted
"""

import logging
import time
from typing import List

from .models import (
    GeneratedShift, GenerationMetrics, GenerationRequest,
    GenerationResult, GenerationSnapshot
)
from .selector import build_shift
from .slicer import slice_range

logger = logging.getLogger(__name__)


class ScheduleGenerator:
    """
    Generates draft shifts for a site from a data snapshot.

    A generator can serve several requests against the same snapshot
    (e.g. a preview followed by the real run); runs share no state.
    """

    def __init__(self, snapshot: GenerationSnapshot):
        self.snapshot = snapshot

    def _count_mentor_pairs(self, shift: GeneratedShift) -> int:
        """Mentor/mentee pairs that ended up on the same shift."""
        assigned = set(shift.assigned_employees)
        count = 0
        for mentor_id, mentee_ids in self.snapshot.mentor_map.items():
            if mentor_id not in assigned:
                continue
            count += sum(1 for mentee_id in mentee_ids if mentee_id in assigned)
        return count

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate the shifts for request.start_date..request.end_date."""
        started = time.perf_counter()
        snapshot = self.snapshot
        metrics = GenerationMetrics()
        shifts: List[GeneratedShift] = []

        logger.info(
            "Employee distribution: %d nouveaux, %d veterans, %d managers",
            len(snapshot.novices), len(snapshot.veterans), len(snapshot.managers)
        )
        logger.debug(
            "Unenforced limits for site %s: maxHoursPerDay=%s minRestBetweenShifts=%s",
            request.site_id, request.max_hours_per_day, request.min_rest_between_shifts
        )

        for window in slice_range(request, snapshot, metrics):
            shift = build_shift(window, snapshot, request)
            if shift is None:
                metrics.windows_understaffed += 1
                continue
            shifts.append(shift)
            metrics.mentor_pairs_scheduled += self._count_mentor_pairs(shift)

        result = GenerationResult(shifts=shifts, metrics=metrics)
        metrics.shifts_generated = result.shifts_created
        metrics.assignments_generated = result.assignments_created

        logger.info(
            "Generated %d shifts with %d assignments for site %s (%s to %s) in %.1f ms",
            result.shifts_created, result.assignments_created, request.site_id,
            request.start_date.isoformat(), request.end_date.isoformat(),
            (time.perf_counter() - started) * 1000
        )
        return result


def generate_schedule(request: GenerationRequest, snapshot: GenerationSnapshot) -> GenerationResult:
    """Generate shifts for a request against a snapshot."""
    return ScheduleGenerator(snapshot).generate(request)
