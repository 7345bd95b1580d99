"""
Snapshot Store

Single normalized store of employees, teams, holidays and PI configuration.
The capacity engine only reads a snapshot; the mutation helpers here apply
the team-assignment and cascade rules when entities change.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from .calendar import expand_days
from .log import get_logger
from .models import (
    DayType,
    Employee,
    Holiday,
    HolidayType,
    PIConfig,
    Team,
)

logger = get_logger(__name__)


def generate_id() -> str:
    return f"id_{uuid.uuid4().hex[:12]}"


@dataclass
class TeamConflict:
    """A single-team member moved out of another team during assignment."""
    employee_id: str
    name: str
    role: str
    previous_team_id: str
    previous_team_name: str

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "name": self.name,
            "role": self.role,
            "previous_team": {
                "id": self.previous_team_id,
                "name": self.previous_team_name
            }
        }


@dataclass
class Snapshot:
    """Normalized entity state consumed by the capacity engine."""
    pi: PIConfig = field(default_factory=PIConfig)
    employees: dict[str, Employee] = field(default_factory=dict)
    teams: dict[str, Team] = field(default_factory=dict)
    holidays: list[Holiday] = field(default_factory=list)

    # --- Lookups -------------------------------------------------------

    def get_team(self, team_id: str) -> Team:
        if team_id not in self.teams:
            raise KeyError(f"Team {team_id} not found")
        return self.teams[team_id]

    def get_employee(self, employee_id: str) -> Employee:
        if employee_id not in self.employees:
            raise KeyError(f"Employee {employee_id} not found")
        return self.employees[employee_id]

    def members_of(self, team: Team) -> list[Employee]:
        """Employees of a team; ids without an employee are skipped."""
        return [self.employees[m] for m in team.members if m in self.employees]

    def members_of_teams(self, team_ids: Iterable[str]) -> list[Employee]:
        """Merged, de-duplicated member list of several teams."""
        seen = set()
        members = []
        for team_id in team_ids:
            team = self.teams.get(team_id)
            if not team:
                continue
            for employee in self.members_of(team):
                if employee.id not in seen:
                    seen.add(employee.id)
                    members.append(employee)
        return members

    def teams_of(self, employee_id: str) -> list[str]:
        """Ids of every team the employee belongs to."""
        return [t.id for t in self.teams.values() if t.has_member(employee_id)]

    # --- Employees -----------------------------------------------------

    def upsert_employee(self, employee: Employee, team_ids: Optional[list[str]] = None):
        """
        Add or replace an employee and set its team memberships.

        Raises:
            ValueError: a single-team employee is given more than one team
        """
        team_ids = list(dict.fromkeys(team_ids or []))
        if len(team_ids) > 1 and not employee.allow_multi_team:
            raise ValueError(
                f"{employee.name} ({employee.role}) can only belong to one team"
            )
        for team_id in team_ids:
            self.get_team(team_id)

        self.employees[employee.id] = employee

        for team in self.teams.values():
            if team.has_member(employee.id):
                team.members.remove(employee.id)
        for team_id in team_ids:
            self.teams[team_id].members.append(employee.id)

        logger.info(f"Saved employee {employee.id} in teams {team_ids}")

    def remove_employees(self, employee_ids: Iterable[str]):
        """Delete employees with their memberships and personal leave."""
        ids = set(employee_ids)
        for employee_id in ids:
            self.employees.pop(employee_id, None)

        for team in self.teams.values():
            team.members = [m for m in team.members if m not in ids]

        self.holidays = [
            h for h in self.holidays
            if not (h.type is HolidayType.PERSONAL and h.employee_id in ids)
        ]
        logger.info(f"Removed {len(ids)} employee(s)")

    # --- Teams ---------------------------------------------------------

    def upsert_team(self, team: Team, member_ids: Optional[list[str]] = None) -> list[TeamConflict]:
        """Add or replace a team, then assign its members."""
        existing = self.teams.get(team.id)
        if member_ids is None:
            member_ids = list(existing.members) if existing else list(team.members)

        team.members = []
        self.teams[team.id] = team
        return self.assign_members(team.id, member_ids)

    def assign_members(self, team_id: str, member_ids: list[str]) -> list[TeamConflict]:
        """
        Replace a team's member list.

        Single-team employees already in another team are moved out of it;
        multi-team employees keep their other memberships.

        Returns:
            One TeamConflict per member moved out of another team
        """
        team = self.get_team(team_id)
        conflicts = []

        for employee_id in member_ids:
            employee = self.employees.get(employee_id)
            if employee is None or employee.allow_multi_team:
                continue

            for other in self.teams.values():
                if other.id != team_id and other.has_member(employee_id):
                    other.members.remove(employee_id)
                    conflicts.append(TeamConflict(
                        employee_id=employee.id,
                        name=employee.name,
                        role=employee.role,
                        previous_team_id=other.id,
                        previous_team_name=other.name
                    ))
                    logger.warning(
                        f"Moved {employee.name} ({employee.role}) from {other.name} to {team.name}"
                    )

        team.members = list(dict.fromkeys(member_ids))
        return conflicts

    def remove_team(self, team_id: str):
        """Delete a team and its team off days; members are kept."""
        self.get_team(team_id)
        del self.teams[team_id]
        self.holidays = [
            h for h in self.holidays
            if not (h.type is HolidayType.TEAM and h.team_id == team_id)
        ]
        logger.info(f"Removed team {team_id}")

    # --- Holidays ------------------------------------------------------

    def add_holiday(
        self,
        holiday_type: HolidayType,
        name: str,
        start_date: date,
        end_date: date,
        exclude_weekends: bool = False,
        day_types: Optional[dict[date, DayType]] = None,
        team_ids: Optional[list[str]] = None,
        employee_id: Optional[str] = None
    ) -> list[Holiday]:
        """
        Create holiday records, one per day (and per team for team holidays).

        Args:
            holiday_type: Public, team or personal
            name: Holiday name or leave reason
            start_date: First day (inclusive)
            end_date: Last day (inclusive)
            exclude_weekends: Skip Saturdays and Sundays when expanding
            day_types: Per-date full/half choice, full when absent
            team_ids: Target teams (team holidays)
            employee_id: Target employee (personal leave)

        Returns:
            The created records
        """
        if holiday_type is HolidayType.TEAM and not team_ids:
            raise ValueError("Please select at least one team.")
        if holiday_type is HolidayType.PERSONAL and not employee_id:
            raise ValueError("Please select an employee.")

        day_types = day_types or {}
        scopes = list(dict.fromkeys(team_ids)) if holiday_type is HolidayType.TEAM else [None]

        created = []
        for team_id in scopes:
            for day in expand_days(start_date, end_date, exclude_weekends):
                created.append(Holiday(
                    id=generate_id(),
                    type=holiday_type,
                    name=name,
                    start_date=day,
                    end_date=day,
                    day_type=day_types.get(day, DayType.FULL),
                    exclude_weekends=exclude_weekends,
                    team_id=team_id,
                    employee_id=employee_id if holiday_type is HolidayType.PERSONAL else None
                ))

        self.holidays.extend(created)
        logger.info(f"Added {len(created)} {holiday_type.value} holiday record(s) for '{name}'")
        return created

    def remove_holiday(self, holiday_id: str):
        before = len(self.holidays)
        self.holidays = [h for h in self.holidays if h.id != holiday_id]
        if len(self.holidays) == before:
            raise KeyError(f"Holiday {holiday_id} not found")
