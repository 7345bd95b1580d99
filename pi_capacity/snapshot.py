"""
Snapshot document codec.

Reads and writes the single JSON document holding the PI configuration,
public holidays and the organization tree (teams with nested members and
their off days), converting it to and from the normalized Snapshot.
"""

import datetime as dt
import json
import os
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .calendar import each_day
from .log import get_logger
from .models import (
    DEFAULT_MULTI_TEAM_ROLES,
    DayType,
    Employee,
    Holiday,
    HolidayType,
    PIConfig,
    Team,
)
from .store import Snapshot

logger = get_logger(__name__)


class SnapshotFormatError(ValueError):
    """The document is not a capacity-data snapshot."""


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class OffDayRecord(_Record):
    id: Optional[str] = None
    date: dt.date
    reason: Optional[str] = None
    day_type: Literal["full", "half"] = Field("full", alias="dayType")


class PublicHolidayRecord(_Record):
    id: Optional[str] = None
    date: dt.date
    name: str
    day_type: Literal["full", "half"] = Field("full", alias="dayType")


class MemberRecord(_Record):
    id: str
    name: str
    role: str
    hours_per_day: float = Field(8.0, alias="hoursPerDay", gt=0)
    sp_capacity: int = Field(0, alias="spCapacity", ge=0)
    off_days: list[OffDayRecord] = Field(default_factory=list, alias="offDays")


class TeamRecord(_Record):
    id: str
    name: str
    description: Optional[str] = None
    members: list[MemberRecord] = Field(default_factory=list)
    off_days: list[OffDayRecord] = Field(default_factory=list, alias="offDays")


class OrganizationRecord(_Record):
    teams: list[TeamRecord] = Field(default_factory=list)
    unassigned: list[MemberRecord] = Field(default_factory=list)


class PIRecord(_Record):
    name: str = ""
    start_date: Optional[dt.date] = Field(None, alias="startDate")
    end_date: Optional[dt.date] = Field(None, alias="endDate")
    iteration_duration_weeks: int = Field(2, alias="iterationDurationWeeks", gt=0)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        return value or None


class WorkingDaysRecord(_Record):
    hours_per_day: float = Field(8.0, alias="hoursPerDay")
    days_per_week: int = Field(5, alias="daysPerWeek")


class ConfigRecord(_Record):
    pi: PIRecord = Field(default_factory=PIRecord)
    working_days: WorkingDaysRecord = Field(default_factory=WorkingDaysRecord, alias="workingDays")


class SnapshotDocument(_Record):
    config: ConfigRecord
    public_holidays: list[PublicHolidayRecord] = Field(default_factory=list, alias="publicHolidays")
    organization: OrganizationRecord


def _holiday_from_off_day(record: OffDayRecord, fallback_id: str, **scope) -> Holiday:
    holiday_type = HolidayType.TEAM if "team_id" in scope else HolidayType.PERSONAL
    default_reason = "Team Off" if holiday_type is HolidayType.TEAM else "Personal Leave"
    return Holiday(
        id=record.id or fallback_id,
        type=holiday_type,
        name=record.reason or default_reason,
        start_date=record.date,
        end_date=record.date,
        day_type=DayType(record.day_type),
        **scope
    )


def document_to_snapshot(
    document: SnapshotDocument,
    multi_team_roles: tuple[str, ...] = DEFAULT_MULTI_TEAM_ROLES
) -> Snapshot:
    """Flatten the organization tree into a normalized Snapshot."""
    pi = document.config.pi
    snapshot = Snapshot(pi=PIConfig(
        name=pi.name,
        start_date=pi.start_date,
        end_date=pi.end_date,
        iteration_duration_weeks=pi.iteration_duration_weeks,
        default_hours_per_day=document.config.working_days.hours_per_day,
        days_per_week=document.config.working_days.days_per_week
    ))

    for index, record in enumerate(document.public_holidays):
        snapshot.holidays.append(Holiday(
            id=record.id or f"holiday_{index}",
            type=HolidayType.PUBLIC,
            name=record.name,
            start_date=record.date,
            end_date=record.date,
            day_type=DayType(record.day_type)
        ))

    seen_holidays = {h.id for h in snapshot.holidays}

    def add_member(member: MemberRecord):
        if member.id not in snapshot.employees:
            snapshot.employees[member.id] = Employee.with_role_capabilities(
                multi_team_roles,
                id=member.id,
                name=member.name,
                role=member.role,
                hours_per_day=member.hours_per_day,
                sp_capacity=member.sp_capacity
            )
        # Multi-team members repeat their leave under every team
        for index, off in enumerate(member.off_days):
            holiday = _holiday_from_off_day(
                off, f"personal_{member.id}_{index}", employee_id=member.id
            )
            if holiday.id not in seen_holidays:
                seen_holidays.add(holiday.id)
                snapshot.holidays.append(holiday)

    for team_record in document.organization.teams:
        team = Team(
            id=team_record.id,
            name=team_record.name,
            description=team_record.description
        )
        for member in team_record.members:
            add_member(member)
            if member.id not in team.members:
                team.members.append(member.id)
        snapshot.teams[team.id] = team

        for index, off in enumerate(team_record.off_days):
            holiday = _holiday_from_off_day(off, f"team_{team.id}_{index}", team_id=team.id)
            if holiday.id not in seen_holidays:
                seen_holidays.add(holiday.id)
                snapshot.holidays.append(holiday)

    for member in document.organization.unassigned:
        add_member(member)

    return snapshot


def _off_day_entries(holiday: Holiday, reason_key: str) -> list[dict]:
    """One persisted entry per covered day."""
    days = list(each_day(holiday.start_date, holiday.end_date))
    return [
        {
            "id": holiday.id if len(days) == 1 else f"{holiday.id}_{n}",
            "date": day.isoformat(),
            reason_key: holiday.name,
            "dayType": holiday.day_type.value
        }
        for n, day in enumerate(days)
    ]


def snapshot_to_document(snapshot: Snapshot) -> dict:
    """Build the persisted JSON document from a Snapshot."""
    personal: dict[str, list[dict]] = {}
    team_offs: dict[str, list[dict]] = {}
    public = []

    for holiday in snapshot.holidays:
        if holiday.type is HolidayType.PUBLIC:
            public.extend(_off_day_entries(holiday, "name"))
        elif holiday.type is HolidayType.TEAM:
            team_offs.setdefault(holiday.team_id, []).extend(_off_day_entries(holiday, "reason"))
        else:
            personal.setdefault(holiday.employee_id, []).extend(_off_day_entries(holiday, "reason"))

    def member_entry(employee: Employee) -> dict:
        return {
            "id": employee.id,
            "name": employee.name,
            "role": employee.role,
            "hoursPerDay": employee.hours_per_day,
            "spCapacity": employee.sp_capacity,
            "offDays": personal.get(employee.id, [])
        }

    assigned = set()
    teams = []
    for team in snapshot.teams.values():
        members = snapshot.members_of(team)
        assigned.update(m.id for m in members)
        teams.append({
            "id": team.id,
            "name": team.name,
            "description": team.description,
            "members": [member_entry(m) for m in members],
            "offDays": team_offs.get(team.id, [])
        })

    pi = snapshot.pi
    return {
        "config": {
            "pi": {
                "name": pi.name,
                "startDate": pi.start_date.isoformat() if pi.start_date else "",
                "endDate": pi.end_date.isoformat() if pi.end_date else "",
                "iterationDurationWeeks": pi.iteration_duration_weeks
            },
            "workingDays": {
                "hoursPerDay": pi.default_hours_per_day,
                "daysPerWeek": pi.days_per_week
            }
        },
        "publicHolidays": public,
        "organization": {
            "teams": teams,
            "unassigned": [
                member_entry(e) for e in snapshot.employees.values() if e.id not in assigned
            ]
        }
    }


def parse_document(
    data: Any,
    multi_team_roles: tuple[str, ...] = DEFAULT_MULTI_TEAM_ROLES
) -> Snapshot:
    """
    Validate a decoded JSON document and convert it to a Snapshot.

    Raises:
        SnapshotFormatError: legacy array format, missing sections or
            invalid field values
    """
    if isinstance(data, list):
        raise SnapshotFormatError(
            "Legacy format detected. Export data with the current version and re-import."
        )
    if not isinstance(data, dict) or "config" not in data or "organization" not in data:
        raise SnapshotFormatError(
            "Invalid file format. Expected config, organization and publicHolidays."
        )

    try:
        document = SnapshotDocument.model_validate(data)
    except ValidationError as e:
        raise SnapshotFormatError(str(e)) from e

    return document_to_snapshot(document, multi_team_roles)


def load_snapshot(
    path: str,
    multi_team_roles: tuple[str, ...] = DEFAULT_MULTI_TEAM_ROLES
) -> Snapshot:
    """Load a snapshot from disk; a missing file gives an empty snapshot."""
    if not os.path.exists(path):
        logger.info(f"No data file at {path}, starting with empty data")
        return Snapshot()

    with open(path) as f:
        data = json.load(f)

    snapshot = parse_document(data, multi_team_roles)
    logger.info(
        f"Loaded {len(snapshot.teams)} teams, {len(snapshot.employees)} employees, "
        f"{len(snapshot.holidays)} holiday records from {path}"
    )
    return snapshot


def save_snapshot(snapshot: Snapshot, path: str):
    """Write the snapshot document to disk."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(path, "w") as f:
        json.dump(snapshot_to_document(snapshot), f, indent=2)
