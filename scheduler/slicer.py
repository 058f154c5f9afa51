"""
Shift slicer: turns a date range into staffing windows.

Each open day yields a morning window when the site is open at least
SHIFT_DURATION hours, and an afternoon window overlapping it by two hours
when the site is open at least 1.5x that long. Sizing uses the hour
component only. The morning start and afternoon end reuse the site's own
time strings while computed boundaries are written as "HH:00", so a site
opening at 08:30 gets a morning window of 08:30-16:00.
"""

from datetime import date, timedelta
from typing import Iterator, List, Optional

from .models import (
    GenerationMetrics, GenerationRequest, GenerationSnapshot,
    OpeningHours, TimeWindow, format_hour
)


SHIFT_DURATION = 8          # hours
AFTERNOON_OFFSET = 4        # earliest afternoon start, hours after opening
AFTERNOON_OVERLAP = 2       # hours shared with the morning window


def iter_dates(start_date: date, end_date: date) -> Iterator[date]:
    """Yield every date from start_date to end_date inclusive.

    Never steps past end_date, so a range ending on date.max is fine.
    """
    for offset in range((end_date - start_date).days + 1):
        yield start_date + timedelta(days=offset)


def day_of_week(day: date) -> int:
    """Weekday index with Sunday=0 ... Saturday=6."""
    return day.isoweekday() % 7


def slice_day(day: date, opening_hours: Optional[OpeningHours]) -> List[TimeWindow]:
    """Return the staffing windows for a single date."""
    if opening_hours is None or opening_hours.is_closed:
        return []

    total_hours = opening_hours.total_hours
    if total_hours < SHIFT_DURATION:
        return []

    weekday = day_of_week(day)
    open_hour = opening_hours.opening_hour
    close_hour = opening_hours.closing_hour

    morning_end_hour = min(open_hour + SHIFT_DURATION, close_hour)
    windows = [TimeWindow(
        date=day,
        day_of_week=weekday,
        start_time=opening_hours.opening_time,
        end_time=format_hour(morning_end_hour),
        label="morning"
    )]

    if total_hours >= SHIFT_DURATION * 1.5:
        afternoon_start_hour = max(open_hour + AFTERNOON_OFFSET, morning_end_hour - AFTERNOON_OVERLAP)
        windows.append(TimeWindow(
            date=day,
            day_of_week=weekday,
            start_time=format_hour(afternoon_start_hour),
            end_time=opening_hours.closing_time,
            label="afternoon"
        ))

    return windows


def slice_range(
    request: GenerationRequest,
    snapshot: GenerationSnapshot,
    metrics: GenerationMetrics = None
) -> Iterator[TimeWindow]:
    """Yield the windows of every date in the request, in date order."""
    for day in iter_dates(request.start_date, request.end_date):
        opening_hours = snapshot.opening_hours_for(day_of_week(day))
        windows = slice_day(day, opening_hours)

        if metrics is not None:
            metrics.days_considered += 1
            if opening_hours is None or opening_hours.is_closed:
                metrics.days_closed += 1
            elif not windows:
                metrics.days_too_short += 1
            metrics.windows_considered += len(windows)

        for window in windows:
            yield window
