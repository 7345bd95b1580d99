"""
PI Capacity Calculator

Combines working days with member hour and story-point rates into PI-level,
team-level and iteration-level capacity summaries.

Two story-point views exist on purpose:
- PI and team summaries use flat SP (per-iteration rate x iteration count).
- Iteration summaries scale each member's SP by their availability ratio.
"""

from datetime import date
from typing import Iterable, Optional

from .calendar import count_weekdays
from .iterations import get_iteration, partition
from .log import get_logger
from .models import (
    Employee,
    Iteration,
    IterationSummary,
    MemberIterationCapacity,
    OffDay,
    PISummary,
    RoleCapacity,
    Team,
    TeamIterationCapacity,
    TeamSummary,
)
from .resolver import HolidayResolver
from .store import Snapshot
from .working_days import WorkingDayAggregator

logger = get_logger(__name__)


class CapacityCalculator:
    """
    Computes capacity summaries from an entity snapshot.

    The calculator never mutates the snapshot; every call recomputes from it.

    Usage:
        calculator = CapacityCalculator(snapshot)
        summary = calculator.summarize()
        schedule = calculator.iteration_schedule(["team-a", "team-b"])
    """

    def __init__(self, snapshot: Snapshot):
        self.snapshot = snapshot
        self.resolver = HolidayResolver(snapshot.holidays, snapshot.teams)
        self.aggregator = WorkingDayAggregator(self.resolver)

    @property
    def pi(self):
        return self.snapshot.pi

    def summarize(self) -> PISummary:
        """
        Organization-wide capacity for the configured PI.

        Working days at this level only remove weekends and public holidays;
        team and personal leave is applied in the per-team summaries.
        """
        if not self.pi.is_configured:
            return PISummary.not_configured()

        employees = list(self.snapshot.employees.values())
        summary = PISummary(
            total_days=self.pi.total_days,
            number_of_iterations=self.pi.number_of_iterations,
            total_teams=len(self.snapshot.teams),
            total_employees=len(employees),
            total_hours_per_day=sum(e.hours_per_day for e in employees),
            total_sp_per_iteration=sum(e.sp_capacity for e in employees)
        )

        if self.pi.has_valid_range:
            summary.working_days = self.aggregator.organization_working_days(
                self.pi.start_date, self.pi.end_date
            )

        summary.teams = [self.team_summary(team) for team in self.snapshot.teams.values()]

        logger.debug(
            f"PI {self.pi.start_date}..{self.pi.end_date}: {summary.working_days} working days, "
            f"{summary.number_of_iterations} iterations"
        )
        return summary

    def team_summary(self, team: Team) -> TeamSummary:
        """PI-level capacity of a team with flat story points."""
        members = self.snapshot.members_of(team)
        summary = TeamSummary(
            team_id=team.id,
            team_name=team.name,
            member_count=len(members),
            hours_per_day=sum(m.hours_per_day for m in members),
            sp_per_iteration=sum(m.sp_capacity for m in members),
            number_of_iterations=self.pi.number_of_iterations
        )

        if self.pi.has_valid_range:
            start, end = self.pi.start_date, self.pi.end_date
            summary.working_days = self.aggregator.team_working_days(start, end, team, members)
            summary.off_days = self.aggregator.off_day_count(start, end, [team.id], members)

        return summary

    def _member_capacity(
        self,
        iteration: Iteration,
        team_ids: list[str],
        member: Employee,
        weekdays: int
    ) -> MemberIterationCapacity:
        working_days = self.aggregator.member_working_days(
            iteration.start_date, iteration.end_date, team_ids, member
        )
        ratio = working_days / weekdays if weekdays > 0 else 0
        return MemberIterationCapacity(
            employee_id=member.id,
            name=member.name,
            role=member.role,
            working_days=working_days,
            hours_per_day=member.hours_per_day,
            sp_capacity=member.sp_capacity,
            adjusted_sp=member.sp_capacity * ratio,
            off_days=self.resolver.member_off_days(
                member, iteration.start_date, iteration.end_date, team_ids
            )
        )

    def iteration_summary(self, iteration: Iteration, team_ids: list[str]) -> IterationSummary:
        """
        Capacity of one iteration for a team or a combined set of teams.

        Args:
            iteration: Iteration to evaluate
            team_ids: One team id, or several for the combined view

        Returns:
            IterationSummary with member, team and role breakdowns
        """
        team_ids = [t for t in dict.fromkeys(team_ids) if t in self.snapshot.teams]
        members = self.snapshot.members_of_teams(team_ids)
        start, end = iteration.start_date, iteration.end_date
        weekdays = count_weekdays(start, end)

        summary = IterationSummary(
            iteration=iteration,
            team_ids=team_ids,
            working_days=self.aggregator.combined_working_days(start, end, team_ids, members),
            off_days=self.aggregator.off_day_count(start, end, team_ids, members),
            weekdays=weekdays,
            total_hours_per_day=sum(m.hours_per_day for m in members),
            flat_sp=sum(m.sp_capacity for m in members),
            members=[self._member_capacity(iteration, team_ids, m, weekdays) for m in members]
        )

        # Each team group is evaluated in its own team context
        for team_id in team_ids:
            team = self.snapshot.teams[team_id]
            team_members = self.snapshot.members_of(team)
            if not team_members:
                continue
            summary.teams.append(TeamIterationCapacity(
                team_id=team.id,
                team_name=team.name,
                members=[
                    self._member_capacity(iteration, [team.id], m, weekdays)
                    for m in team_members
                ]
            ))

        summary.roles = role_breakdown([m for t in summary.teams for m in t.members])
        return summary

    def iteration_schedule(self, team_ids: list[str]) -> list[IterationSummary]:
        """Summaries for every iteration of the PI."""
        if not self.pi.is_configured:
            return []
        return [self.iteration_summary(it, team_ids) for it in partition(self.pi)]

    def iteration_detail(self, number: int, team_ids: list[str]) -> Optional[IterationSummary]:
        """Summary of a single iteration, or None if it does not exist."""
        if not self.pi.is_configured:
            return None
        iteration = get_iteration(self.pi, number)
        if iteration is None:
            return None
        return self.iteration_summary(iteration, team_ids)

    def member_off_days(
        self,
        employee: Employee,
        start: date,
        end: date,
        team_ids: Iterable[str]
    ) -> list[OffDay]:
        return self.resolver.member_off_days(employee, start, end, team_ids)


def role_breakdown(members: list[MemberIterationCapacity]) -> list[RoleCapacity]:
    """
    Group member capacity by role, sorted alphabetically by role name.

    Iteration summaries pass the per-team member groups, so a multi-team
    member is counted once per team with that team's off days.
    """
    roles: dict[str, RoleCapacity] = {}
    for member in members:
        role = roles.setdefault(member.role, RoleCapacity(role=member.role))
        role.count += 1
        role.hours += member.hours
        role.sp += member.adjusted_sp

    return [roles[name] for name in sorted(roles)]


# Convenience functions
def calculate_pi_capacity(snapshot: Snapshot) -> PISummary:
    """
    Quick function to compute the PI summary.

    Example:
        summary = calculate_pi_capacity(snapshot)
        if summary.configured:
            print(f"{summary.total_hours}h / {summary.total_sp} SP")
    """
    return CapacityCalculator(snapshot).summarize()


def calculate_team_capacity(snapshot: Snapshot, team_id: str) -> TeamSummary:
    """PI-level summary of one team. Raises KeyError for unknown teams."""
    return CapacityCalculator(snapshot).team_summary(snapshot.get_team(team_id))


def calculate_iteration_schedule(snapshot: Snapshot, team_ids: list[str]) -> list[IterationSummary]:
    return CapacityCalculator(snapshot).iteration_schedule(team_ids)


def resolve_member_off_days(
    snapshot: Snapshot,
    employee_id: str,
    start: date,
    end: date,
    team_ids: Optional[Iterable[str]] = None
) -> list[OffDay]:
    """
    Off-day listing of one member.

    ``team_ids`` defaults to every team the member belongs to.
    """
    employee = snapshot.get_employee(employee_id)
    if team_ids is None:
        team_ids = snapshot.teams_of(employee_id)
    return CapacityCalculator(snapshot).member_off_days(employee, start, end, team_ids)
