"""
Capacity Planner Data Model

Entities (employees, teams, holidays, PI configuration) and the summaries
the capacity engine derives from them.
"""

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Optional
from enum import Enum


DEFAULT_MULTI_TEAM_ROLES = ("Product Owner", "Product Designer")


class HolidayType(Enum):
    """Scope of an off-day record."""
    PUBLIC = "public"
    TEAM = "team"
    PERSONAL = "personal"


class DayType(Enum):
    """Portion of the day consumed by an off-day record."""
    FULL = "full"
    HALF = "half"

    @property
    def fraction(self) -> float:
        """Fraction of the day that is off."""
        return 1.0 if self is DayType.FULL else 0.5

    @property
    def label(self) -> str:
        return " (Half Day)" if self is DayType.HALF else ""


@dataclass
class Employee:
    """A person whose capacity is planned."""
    id: str
    name: str
    role: str
    hours_per_day: float = 8.0
    sp_capacity: int = 0
    allow_multi_team: bool = False

    @classmethod
    def with_role_capabilities(
        cls,
        multi_team_roles: tuple[str, ...] = DEFAULT_MULTI_TEAM_ROLES,
        **kwargs
    ) -> "Employee":
        """Create an employee whose multi-team flag follows its role."""
        employee = cls(**kwargs)
        employee.allow_multi_team = employee.role in multi_team_roles
        return employee

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "hours_per_day": self.hours_per_day,
            "sp_capacity": self.sp_capacity,
            "allow_multi_team": self.allow_multi_team
        }


@dataclass
class Team:
    """A team; members are referenced by employee id."""
    id: str
    name: str
    description: Optional[str] = None
    members: list[str] = field(default_factory=list)

    def has_member(self, employee_id: str) -> bool:
        return employee_id in self.members

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "members": list(self.members)
        }


@dataclass
class Holiday:
    """
    Unified off-day record.

    Exactly one scope applies: ``team_id`` for team holidays,
    ``employee_id`` for personal leave, neither for public holidays.
    """
    id: str
    type: HolidayType
    name: str
    start_date: date
    end_date: date
    day_type: DayType = DayType.FULL
    exclude_weekends: bool = False
    team_id: Optional[str] = None
    employee_id: Optional[str] = None

    def covers(self, day: date) -> bool:
        """Check if the record's inclusive range contains ``day``."""
        return self.start_date <= day <= self.end_date

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "name": self.name,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "day_type": self.day_type.value,
            "exclude_weekends": self.exclude_weekends,
            "team_id": self.team_id,
            "employee_id": self.employee_id
        }


@dataclass
class PIConfig:
    """Program Increment configuration."""
    name: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    iteration_duration_weeks: int = 2
    default_hours_per_day: float = 8.0
    days_per_week: int = 5

    @property
    def is_configured(self) -> bool:
        """Both PI dates are present."""
        return self.start_date is not None and self.end_date is not None

    @property
    def has_valid_range(self) -> bool:
        return self.is_configured and self.end_date > self.start_date

    @property
    def iteration_days(self) -> int:
        return self.iteration_duration_weeks * 7

    @property
    def total_days(self) -> int:
        """Inclusive length of the PI; 0 for a missing or invalid range."""
        if not self.has_valid_range:
            return 0
        return (self.end_date - self.start_date).days + 1

    @property
    def number_of_iterations(self) -> int:
        if self.total_days == 0 or self.iteration_days <= 0:
            return 0
        return math.ceil(self.total_days / self.iteration_days)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "iteration_duration_weeks": self.iteration_duration_weeks,
            "total_days": self.total_days,
            "number_of_iterations": self.number_of_iterations
        }


@dataclass(frozen=True)
class Iteration:
    """One fixed-length slice of the PI."""
    number: int
    start_date: date
    end_date: date

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "days": self.days
        }


@dataclass
class DayResolution:
    """Working-day fraction for one member on one date."""
    fraction: float
    holiday: Optional[Holiday] = None

    @property
    def is_off_day(self) -> bool:
        return self.holiday is not None


@dataclass
class OffDay:
    """A single entry in a member's off-day listing."""
    date: date
    reason: str
    day_type: DayType = DayType.FULL

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "reason": self.reason,
            "day_type": self.day_type.value
        }


@dataclass
class TeamSummary:
    """PI-level capacity of a single team."""
    team_id: str
    team_name: str
    member_count: int = 0
    working_days: int = 0
    off_days: int = 0
    hours_per_day: float = 0.0
    sp_per_iteration: int = 0
    number_of_iterations: int = 0

    @property
    def total_hours(self) -> float:
        return self.hours_per_day * self.working_days

    @property
    def total_sp(self) -> int:
        """Flat story points: per-iteration rate times iteration count."""
        return self.sp_per_iteration * self.number_of_iterations

    def to_dict(self) -> dict:
        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "members": self.member_count,
            "working_days": self.working_days,
            "off_days": self.off_days,
            "hours_per_day": self.hours_per_day,
            "total_hours": round(self.total_hours, 1),
            "sp_per_iteration": self.sp_per_iteration,
            "total_sp": self.total_sp
        }


@dataclass
class PISummary:
    """Organization-wide capacity for the whole PI."""
    configured: bool = True
    total_days: int = 0
    working_days: float = 0
    number_of_iterations: int = 0
    total_teams: int = 0
    total_employees: int = 0
    total_hours_per_day: float = 0.0
    total_sp_per_iteration: int = 0
    teams: list[TeamSummary] = field(default_factory=list)

    @classmethod
    def not_configured(cls) -> "PISummary":
        return cls(configured=False)

    @property
    def total_hours(self) -> float:
        return self.total_hours_per_day * self.working_days

    @property
    def total_sp(self) -> int:
        return self.total_sp_per_iteration * self.number_of_iterations

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "configured": self.configured,
            "summary": {
                "total_days": self.total_days,
                "working_days": self.working_days,
                "number_of_iterations": self.number_of_iterations,
                "total_teams": self.total_teams,
                "total_employees": self.total_employees,
                "total_hours": round(self.total_hours, 1),
                "total_sp": self.total_sp
            },
            "teams": [t.to_dict() for t in self.teams]
        }


@dataclass
class MemberIterationCapacity:
    """One member's availability within an iteration."""
    employee_id: str
    name: str
    role: str
    working_days: float
    hours_per_day: float
    sp_capacity: int
    adjusted_sp: float
    off_days: list[OffDay] = field(default_factory=list)

    @property
    def hours(self) -> float:
        return self.hours_per_day * self.working_days

    @property
    def full_off_days(self) -> int:
        return len([o for o in self.off_days if o.day_type is DayType.FULL])

    @property
    def half_off_days(self) -> int:
        return len([o for o in self.off_days if o.day_type is DayType.HALF])

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "name": self.name,
            "role": self.role,
            "working_days": self.working_days,
            "hours": round(self.hours, 1),
            "sp_capacity": self.sp_capacity,
            "adjusted_sp": round(self.adjusted_sp, 2),
            "off_days": {
                "full": self.full_off_days,
                "half": self.half_off_days,
                "days": [o.to_dict() for o in self.off_days]
            }
        }


@dataclass
class RoleCapacity:
    """Capacity of all iteration members sharing a role."""
    role: str
    count: int = 0
    hours: float = 0.0
    sp: float = 0.0

    def to_dict(self) -> dict:
        return {
            "role": self.role,
            "members": self.count,
            "hours": round(self.hours),
            "sp": round(self.sp)
        }


@dataclass
class TeamIterationCapacity:
    """A team's slice of an iteration, evaluated in that team's own context."""
    team_id: str
    team_name: str
    members: list[MemberIterationCapacity] = field(default_factory=list)

    @property
    def working_days(self) -> float:
        return sum(m.working_days for m in self.members)

    @property
    def total_hours(self) -> float:
        return sum(m.hours for m in self.members)

    @property
    def total_sp(self) -> float:
        return sum(m.adjusted_sp for m in self.members)

    def to_dict(self) -> dict:
        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "members": len(self.members),
            "total_hours": round(self.total_hours, 1),
            "total_sp": round(self.total_sp),
            "member_details": [m.to_dict() for m in self.members]
        }


@dataclass
class IterationSummary:
    """Capacity of one iteration for a team or a combined team set."""
    iteration: Iteration
    team_ids: list[str]
    working_days: int = 0
    off_days: int = 0
    weekdays: int = 0
    total_hours_per_day: float = 0.0
    flat_sp: int = 0
    members: list[MemberIterationCapacity] = field(default_factory=list)
    teams: list[TeamIterationCapacity] = field(default_factory=list)
    roles: list[RoleCapacity] = field(default_factory=list)

    @property
    def is_combined(self) -> bool:
        return len(self.team_ids) > 1

    @property
    def total_hours(self) -> float:
        return self.total_hours_per_day * self.working_days

    @property
    def total_sp(self) -> float:
        """Story points scaled by each member's availability ratio."""
        return sum(m.adjusted_sp for m in self.members)

    def to_dict(self, detailed: bool = False) -> dict:
        data = {
            "iteration": self.iteration.to_dict(),
            "team_ids": list(self.team_ids),
            "combined": self.is_combined,
            "members": len(self.members),
            "working_days": self.working_days,
            "off_days": self.off_days,
            "total_hours": round(self.total_hours, 1),
            "flat_sp": self.flat_sp,
            "total_sp": round(self.total_sp)
        }
        if detailed:
            data["roles"] = [r.to_dict() for r in self.roles]
            data["teams"] = [t.to_dict() for t in self.teams]
        return data
