"""
Working-Day Aggregator

Sums resolver fractions into per-member, per-team and combined working days,
and counts off days per member-day.
"""

import math
from datetime import date
from typing import Iterable

from .calendar import each_day, each_weekday
from .models import Employee, Team
from .resolver import HolidayResolver


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3)."""
    return math.floor(value + 0.5)


class WorkingDayAggregator:
    """
    Aggregates working days over a date range.

    Usage:
        aggregator = WorkingDayAggregator(HolidayResolver(holidays, teams))
        days = aggregator.member_working_days(start, end, ["team-a"], employee)
    """

    def __init__(self, resolver: HolidayResolver):
        self.resolver = resolver

    def member_working_days(
        self,
        start: date,
        end: date,
        team_ids: Iterable[str],
        employee: Employee
    ) -> float:
        """Sum of the member's working-day fractions over the range."""
        team_ids = set(team_ids)
        return sum(
            self.resolver.resolve_day(day, employee.id, team_ids).fraction
            for day in each_day(start, end)
        )

    def combined_working_days(
        self,
        start: date,
        end: date,
        team_ids: Iterable[str],
        members: list[Employee]
    ) -> int:
        """
        Average working days per member, rounded to a whole number.

        Args:
            start: First date (inclusive)
            end: Last date (inclusive)
            team_ids: Teams whose off days apply to every member
            members: Merged member list of those teams

        Returns:
            round(total person-days / member count), 0 with no members
        """
        if not members:
            return 0

        team_ids = set(team_ids)
        person_days = sum(
            self.member_working_days(start, end, team_ids, member)
            for member in members
        )
        return round_half_up(person_days / len(members))

    def team_working_days(
        self,
        start: date,
        end: date,
        team: Team,
        members: list[Employee]
    ) -> int:
        """Average working days of a single team's members."""
        return self.combined_working_days(start, end, [team.id], members)

    def off_day_count(
        self,
        start: date,
        end: date,
        team_ids: Iterable[str],
        members: list[Employee]
    ) -> int:
        """
        Count member-days on which an off-day record applies.

        Each affected member adds one per weekday, so the total can exceed
        the number of calendar days in the range.
        """
        team_ids = set(team_ids)
        count = 0

        for day in each_weekday(start, end):
            for member in members:
                if self.resolver.applicable_holiday(day, member.id, team_ids) is not None:
                    count += 1

        return count

    def organization_working_days(self, start: date, end: date) -> float:
        """Working days with only weekends and public holidays removed."""
        return sum(
            self.resolver.resolve_day(day, None, ()).fraction
            for day in each_day(start, end)
        )
