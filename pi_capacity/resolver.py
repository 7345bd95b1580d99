"""
Holiday Resolver

Decides which single off-day record applies to a member on a given date.

Rules are tried in priority order (public > team > personal) and the first
match wins, so every output built on the resolver (working-day fractions,
off-day counts, off-day listings) attributes a day the same way.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Iterable, Optional

from .calendar import each_weekday, is_weekend
from .models import (
    DayResolution,
    Employee,
    Holiday,
    HolidayType,
    OffDay,
    Team,
)


class HolidayRule(ABC):
    """A single scope in the holiday priority chain."""

    holiday_type: HolidayType

    @abstractmethod
    def applies(self, holiday: Holiday, employee_id: Optional[str], team_ids: Iterable[str]) -> bool:
        """Check if a holiday covering the date applies in this context."""
        pass

    def match(
        self,
        candidates: list[Holiday],
        employee_id: Optional[str],
        team_ids: Iterable[str]
    ) -> Optional[Holiday]:
        for holiday in candidates:
            if holiday.type is self.holiday_type and self.applies(holiday, employee_id, team_ids):
                return holiday
        return None

    def describe(self, holiday: Holiday, teams: dict[str, Team]) -> str:
        """Reason text shown in off-day listings."""
        return holiday.name


class PublicHolidayRule(HolidayRule):
    """Organization-wide holidays apply to everyone."""

    holiday_type = HolidayType.PUBLIC

    def applies(self, holiday, employee_id, team_ids) -> bool:
        return True


class TeamHolidayRule(HolidayRule):
    """Team off days apply to members evaluated in that team's context."""

    holiday_type = HolidayType.TEAM

    def applies(self, holiday, employee_id, team_ids) -> bool:
        return holiday.team_id in team_ids

    def describe(self, holiday: Holiday, teams: dict[str, Team]) -> str:
        team = teams.get(holiday.team_id)
        return f"{holiday.name} ({team.name if team else 'Team'})"


class PersonalLeaveRule(HolidayRule):
    """Personal leave applies only to its own employee."""

    holiday_type = HolidayType.PERSONAL

    def applies(self, holiday, employee_id, team_ids) -> bool:
        return employee_id is not None and holiday.employee_id == employee_id


DEFAULT_RULES = (PublicHolidayRule(), TeamHolidayRule(), PersonalLeaveRule())


class HolidayResolver:
    """
    Resolves working-day fractions against a fixed set of holidays.

    Usage:
        resolver = HolidayResolver(holidays, teams)
        resolution = resolver.resolve_day(date(2024, 1, 3), "emp-1", ["team-a"])
        resolution.fraction  # 0, 0.5 or 1
    """

    def __init__(
        self,
        holidays: Iterable[Holiday],
        teams: Optional[dict[str, Team]] = None,
        rules: tuple[HolidayRule, ...] = DEFAULT_RULES
    ):
        self.holidays = list(holidays)
        self.teams = teams or {}
        self.rules = rules

    def _candidates(self, day: date) -> list[Holiday]:
        return [h for h in self.holidays if h.covers(day)]

    def _match(self, day: date, employee_id: Optional[str], team_ids: Iterable[str]):
        candidates = self._candidates(day)
        if not candidates:
            return None, None

        team_ids = set(team_ids)
        for rule in self.rules:
            holiday = rule.match(candidates, employee_id, team_ids)
            if holiday is not None:
                return rule, holiday
        return None, None

    def applicable_holiday(
        self,
        day: date,
        employee_id: Optional[str],
        team_ids: Iterable[str]
    ) -> Optional[Holiday]:
        """Highest-priority holiday for a date, ignoring weekends."""
        _, holiday = self._match(day, employee_id, team_ids)
        return holiday

    def resolve_day(
        self,
        day: date,
        employee_id: Optional[str],
        team_ids: Iterable[str]
    ) -> DayResolution:
        """
        Working-day fraction for one member on one date.

        Weekends are always 0 and never carry a holiday. Otherwise a
        full-day holiday gives 0, a half-day holiday 0.5 and no holiday 1.
        """
        if is_weekend(day):
            return DayResolution(fraction=0.0)

        holiday = self.applicable_holiday(day, employee_id, team_ids)
        if holiday is None:
            return DayResolution(fraction=1.0)

        return DayResolution(fraction=1.0 - holiday.day_type.fraction, holiday=holiday)

    def member_off_days(
        self,
        employee: Employee,
        start: date,
        end: date,
        team_ids: Iterable[str]
    ) -> list[OffDay]:
        """
        List the member's off days in a range, one entry per weekday.

        Args:
            employee: Member being listed
            start: First date (inclusive)
            end: Last date (inclusive)
            team_ids: Teams whose off days apply to the member

        Returns:
            OffDay entries in date order
        """
        team_ids = set(team_ids)
        off_days = []

        for day in each_weekday(start, end):
            rule, holiday = self._match(day, employee.id, team_ids)
            if holiday is None:
                continue

            off_days.append(OffDay(
                date=day,
                reason=rule.describe(holiday, self.teams) + holiday.day_type.label,
                day_type=holiday.day_type
            ))

        return off_days
