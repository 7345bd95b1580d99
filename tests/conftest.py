"""Shared fixtures for PI Capacity Planner tests."""

import pytest
from datetime import date

from pi_capacity.models import DayType, Employee, Holiday, HolidayType, PIConfig, Team
from pi_capacity.store import Snapshot


def holiday(id, type, day, name="Off", day_type=DayType.FULL, **scope):
    """Single-day holiday record."""
    return Holiday(
        id=id,
        type=type,
        name=name,
        start_date=day,
        end_date=day,
        day_type=day_type,
        **scope
    )


@pytest.fixture
def make_holiday():
    return holiday


@pytest.fixture
def pi_config():
    """Four-week PI: Monday 2024-01-01 to Sunday 2024-01-28."""
    return PIConfig(
        name="PI 2024.1",
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 28),
        iteration_duration_weeks=2
    )


@pytest.fixture
def sample_snapshot(pi_config):
    """
    Two teams sharing a Product Owner.

    Alpha: alice (Developer), bob (QA), paula (Product Owner)
    Beta:  carol (Developer), paula
    """
    employees = {
        "alice": Employee(id="alice", name="Alice", role="Developer", hours_per_day=8, sp_capacity=8),
        "bob": Employee(id="bob", name="Bob", role="QA", hours_per_day=6, sp_capacity=5),
        "carol": Employee(id="carol", name="Carol", role="Developer", hours_per_day=8, sp_capacity=10),
        "paula": Employee(
            id="paula", name="Paula", role="Product Owner",
            hours_per_day=8, sp_capacity=3, allow_multi_team=True
        ),
    }
    teams = {
        "alpha": Team(id="alpha", name="Alpha", members=["alice", "bob", "paula"]),
        "beta": Team(id="beta", name="Beta", members=["carol", "paula"]),
    }
    holidays = [
        holiday("pub-1", HolidayType.PUBLIC, date(2024, 1, 3), name="New Year Observed"),
        holiday("team-1", HolidayType.TEAM, date(2024, 1, 10), name="Offsite", team_id="alpha"),
        holiday(
            "pers-1", HolidayType.PERSONAL, date(2024, 1, 16), name="Dentist",
            day_type=DayType.HALF, employee_id="bob"
        ),
    ]
    return Snapshot(pi=pi_config, employees=employees, teams=teams, holidays=holidays)


@pytest.fixture
def sample_document():
    """Persisted capacity-data document."""
    return {
        "config": {
            "pi": {
                "name": "PI 2024.1",
                "startDate": "2024-01-01",
                "endDate": "2024-01-28",
                "iterationDurationWeeks": 2
            },
            "workingDays": {"hoursPerDay": 8, "daysPerWeek": 5}
        },
        "publicHolidays": [
            {"id": "pub-1", "date": "2024-01-03", "name": "New Year Observed"}
        ],
        "organization": {
            "teams": [
                {
                    "id": "alpha",
                    "name": "Alpha",
                    "description": "Platform team",
                    "members": [
                        {"id": "alice", "name": "Alice", "role": "Developer",
                         "hoursPerDay": 8, "spCapacity": 8, "offDays": []},
                        {"id": "paula", "name": "Paula", "role": "Product Owner",
                         "hoursPerDay": 8, "spCapacity": 3,
                         "offDays": [{"id": "p-off", "date": "2024-01-17", "reason": "Training"}]}
                    ],
                    "offDays": [{"date": "2024-01-10", "reason": "Offsite"}]
                },
                {
                    "id": "beta",
                    "name": "Beta",
                    "members": [
                        {"id": "paula", "name": "Paula", "role": "Product Owner",
                         "hoursPerDay": 8, "spCapacity": 3,
                         "offDays": [{"id": "p-off", "date": "2024-01-17", "reason": "Training"}]}
                    ],
                    "offDays": []
                }
            ]
        }
    }
