"""
Sample data - a small demo site and roster.

Used by seed_demo.py and as a ready-made snapshot for local runs:
a site open 08:00-20:00 on weekdays and closed at the weekend, staffed by
two veterans, two novices and a manager.
"""

from typing import List

from .models import (
    Employee, ExperienceLevel, GenerationSnapshot, OpeningHours,
    Relationship, RelationshipType, WorkPreference
)

DEMO_SITE = {
    "code": "DEMO",
    "name": "Demo Store",
    "address": "1 Market Street"
}


def get_demo_opening_hours(opening_time: str = "08:00", closing_time: str = "20:00") -> List[OpeningHours]:
    """Open Monday to Friday, closed Saturday and Sunday."""
    hours = []
    for day in range(7):
        is_weekend = day in (0, 6)
        hours.append(OpeningHours(
            day_of_week=day,
            opening_time=opening_time,
            closing_time=closing_time,
            is_closed=is_weekend
        ))
    return hours


def get_demo_employees() -> List[Employee]:
    """Two veterans, two novices and one manager, in roster order."""
    return [
        Employee(id="V1", first_name="Victor", last_name="Lambert",
                 experience_level=ExperienceLevel.VETERANE, weekly_hours=38),
        Employee(id="V2", first_name="Vera", last_name="Dubois",
                 experience_level=ExperienceLevel.VETERANE, weekly_hours=38),
        Employee(id="N1", first_name="Noah", last_name="Peeters",
                 experience_level=ExperienceLevel.NOUVEAU, weekly_hours=24),
        Employee(id="N2", first_name="Nina", last_name="Claes",
                 experience_level=ExperienceLevel.NOUVEAU, weekly_hours=24),
        Employee(id="M1", first_name="Marc", last_name="Janssens",
                 experience_level=ExperienceLevel.MANAGER, weekly_hours=40),
    ]


def get_demo_preferences() -> List[WorkPreference]:
    """Everyone is available every day (no records needed)."""
    return []


def get_demo_relationships() -> List[Relationship]:
    return [
        Relationship("V1", "N1", RelationshipType.MENTOR_MENTEE),
    ]


def get_demo_snapshot() -> GenerationSnapshot:
    """Build the demo snapshot used in docs and local runs."""
    return GenerationSnapshot(
        employees=get_demo_employees(),
        opening_hours=get_demo_opening_hours(),
        preferences=get_demo_preferences(),
        relationships=get_demo_relationships()
    )
