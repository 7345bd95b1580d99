"""
FastAPI Backend for the PI Capacity Planner

Exposes the capacity engine, entity management and the snapshot
import/export over HTTP. Mutations edit a copy of the loaded snapshot that
replaces it only once it has been saved.
"""

import copy
from datetime import date, datetime
from typing import Any, Literal, Optional
from contextlib import asynccontextmanager

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .capacity import CapacityCalculator, resolve_member_off_days
from .config import config
from .log import get_logger
from .models import DayType, Employee, HolidayType, Team
from .snapshot import SnapshotFormatError, load_snapshot, parse_document, save_snapshot, snapshot_to_document
from .store import Snapshot, generate_id

logger = get_logger(__name__)

# Loaded snapshot
_cache = {
    "snapshot": None,
    "last_update": None
}


def get_snapshot() -> Snapshot:
    """Return the loaded snapshot, reading the data file on first use."""
    if _cache["snapshot"] is None:
        _cache["snapshot"] = load_snapshot(config.data_file, config.multi_team_roles)
        _cache["last_update"] = datetime.now()
    return _cache["snapshot"]


def working_copy() -> Snapshot:
    """Copy of the current snapshot to mutate; the cache changes only through persist()."""
    return copy.deepcopy(get_snapshot())


def persist(snapshot: Snapshot):
    """Save the snapshot and make it the current one."""
    save_snapshot(snapshot, config.data_file)
    _cache["snapshot"] = snapshot
    _cache["last_update"] = datetime.now()


# Pydantic models for API
class PIConfigUpdate(BaseModel):
    name: str = ""
    start_date: date
    end_date: date
    iteration_duration_weeks: int = Field(default_factory=lambda: config.default_iteration_weeks, gt=0)


class MemberAssignment(BaseModel):
    member_ids: list[str]


class EmployeeRequest(BaseModel):
    name: str
    role: str
    hours_per_day: Optional[float] = Field(None, gt=0)
    sp_capacity: int = Field(0, ge=0)
    team_ids: list[str] = Field(default_factory=list)


class EmployeeDeletion(BaseModel):
    employee_ids: list[str]


class TeamRequest(BaseModel):
    name: str
    description: Optional[str] = None
    member_ids: Optional[list[str]] = None


class HolidayRequest(BaseModel):
    type: Literal["public", "team", "personal"]
    name: str
    start_date: date
    end_date: date
    exclude_weekends: bool = False
    half_days: list[date] = Field(default_factory=list)
    team_ids: list[str] = Field(default_factory=list)
    employee_id: Optional[str] = None


# Lifespan context manager
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info(f"PI Capacity Planner API starting up (data file: {config.data_file})")
    yield
    logger.info("PI Capacity Planner API shutting down")


# Create FastAPI app
app = FastAPI(
    title="PI Capacity Planner",
    description="API for Program Increment capacity planning",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_configured(snapshot: Snapshot):
    if not snapshot.pi.is_configured:
        raise HTTPException(status_code=400, detail="PI not configured")


def _team_ids_or_all(snapshot: Snapshot, team_ids: Optional[list[str]]) -> list[str]:
    if not team_ids:
        return list(snapshot.teams)

    team_ids = list(dict.fromkeys(team_ids))
    unknown = [t for t in team_ids if t not in snapshot.teams]
    if unknown:
        raise HTTPException(status_code=404, detail=f"Teams not found: {', '.join(unknown)}")
    return team_ids


def _require_employees(snapshot: Snapshot, employee_ids: list[str]):
    unknown = [e for e in employee_ids if e not in snapshot.employees]
    if unknown:
        raise HTTPException(status_code=404, detail=f"Employees not found: {', '.join(unknown)}")


def _save_employee(snapshot: Snapshot, employee: Employee, team_ids: list[str]) -> dict:
    try:
        snapshot.upsert_employee(employee, team_ids)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except KeyError as e:
        raise HTTPException(status_code=404, detail=e.args[0])

    persist(snapshot)
    return {**employee.to_dict(), "team_ids": snapshot.teams_of(employee.id)}


def _save_team(snapshot: Snapshot, team: Team, member_ids: Optional[list[str]]) -> dict:
    if member_ids is not None:
        _require_employees(snapshot, member_ids)

    conflicts = snapshot.upsert_team(team, member_ids)
    persist(snapshot)

    return {
        "team": snapshot.teams[team.id].to_dict(),
        "moved": [c.to_dict() for c in conflicts]
    }


# Health check
@app.get("/health")
async def health_check():
    """Health check endpoint."""
    snapshot = get_snapshot()
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "pi_configured": snapshot.pi.is_configured,
        "last_update": _cache["last_update"].isoformat() if _cache["last_update"] else None
    }


# PI endpoints
@app.get("/api/pi")
async def get_pi_capacity():
    """Get the organization-wide PI capacity summary."""
    snapshot = get_snapshot()
    _require_configured(snapshot)

    summary = CapacityCalculator(snapshot).summarize()
    return {"pi": snapshot.pi.to_dict(), **summary.to_dict()}


@app.put("/api/pi")
async def update_pi_config(request: PIConfigUpdate):
    """Update PI dates and iteration length."""
    if request.end_date <= request.start_date:
        raise HTTPException(status_code=400, detail="PI end date must be after the start date")

    snapshot = working_copy()
    snapshot.pi.name = request.name
    snapshot.pi.start_date = request.start_date
    snapshot.pi.end_date = request.end_date
    snapshot.pi.iteration_duration_weeks = request.iteration_duration_weeks
    persist(snapshot)

    return snapshot.pi.to_dict()


# Employee endpoints
@app.get("/api/employees")
async def list_employees():
    """List employees with their team ids."""
    snapshot = get_snapshot()
    return {
        "employees": [
            {**e.to_dict(), "team_ids": snapshot.teams_of(e.id)}
            for e in snapshot.employees.values()
        ]
    }


@app.post("/api/employees", status_code=201)
async def create_employee(request: EmployeeRequest):
    """Add an employee; hours per day default to the PI working-day setting."""
    snapshot = working_copy()
    employee = Employee.with_role_capabilities(
        config.multi_team_roles,
        id=generate_id(),
        name=request.name,
        role=request.role,
        hours_per_day=request.hours_per_day or snapshot.pi.default_hours_per_day,
        sp_capacity=request.sp_capacity
    )
    return _save_employee(snapshot, employee, request.team_ids)


@app.put("/api/employees/{employee_id}")
async def update_employee(employee_id: str, request: EmployeeRequest):
    """Replace an employee's details and team memberships."""
    snapshot = working_copy()
    _require_employees(snapshot, [employee_id])

    current = snapshot.employees[employee_id]
    employee = Employee.with_role_capabilities(
        config.multi_team_roles,
        id=employee_id,
        name=request.name,
        role=request.role,
        hours_per_day=request.hours_per_day or current.hours_per_day,
        sp_capacity=request.sp_capacity
    )
    return _save_employee(snapshot, employee, request.team_ids)


@app.delete("/api/employees/{employee_id}")
async def delete_employee(employee_id: str):
    """Delete an employee with their memberships and personal leave."""
    snapshot = working_copy()
    _require_employees(snapshot, [employee_id])

    snapshot.remove_employees([employee_id])
    persist(snapshot)
    return {"deleted": [employee_id]}


@app.post("/api/employees/delete")
async def delete_employees(request: EmployeeDeletion):
    """Delete several employees at once."""
    snapshot = working_copy()
    employee_ids = list(dict.fromkeys(request.employee_ids))
    _require_employees(snapshot, employee_ids)

    snapshot.remove_employees(employee_ids)
    persist(snapshot)
    return {"deleted": employee_ids}


# Team endpoints
@app.get("/api/teams")
async def list_teams():
    """List teams with their member ids."""
    return {"teams": [t.to_dict() for t in get_snapshot().teams.values()]}


@app.post("/api/teams", status_code=201)
async def create_team(request: TeamRequest):
    """Add a team; single-team members move out of their current team."""
    team = Team(id=generate_id(), name=request.name, description=request.description)
    return _save_team(working_copy(), team, request.member_ids or [])


@app.put("/api/teams/{team_id}")
async def update_team(team_id: str, request: TeamRequest):
    """Update a team; members are kept when member_ids is omitted."""
    snapshot = working_copy()
    if team_id not in snapshot.teams:
        raise HTTPException(status_code=404, detail=f"Team {team_id} not found")

    team = Team(id=team_id, name=request.name, description=request.description)
    return _save_team(snapshot, team, request.member_ids)


@app.delete("/api/teams/{team_id}")
async def delete_team(team_id: str):
    """Delete a team and its team off days; its members are kept."""
    snapshot = working_copy()
    if team_id not in snapshot.teams:
        raise HTTPException(status_code=404, detail=f"Team {team_id} not found")

    snapshot.remove_team(team_id)
    persist(snapshot)
    return {"deleted": team_id}


@app.get("/api/teams/{team_id}/capacity")
async def get_team_capacity(team_id: str):
    """Get PI-level capacity of one team."""
    snapshot = get_snapshot()
    _require_configured(snapshot)

    if team_id not in snapshot.teams:
        raise HTTPException(status_code=404, detail=f"Team {team_id} not found")

    return CapacityCalculator(snapshot).team_summary(snapshot.teams[team_id]).to_dict()


@app.post("/api/teams/{team_id}/members")
async def assign_team_members(team_id: str, request: MemberAssignment):
    """Replace a team's members; single-team members move out of other teams."""
    snapshot = working_copy()
    if team_id not in snapshot.teams:
        raise HTTPException(status_code=404, detail=f"Team {team_id} not found")

    conflicts = snapshot.assign_members(team_id, request.member_ids)
    persist(snapshot)

    return {
        "team": snapshot.teams[team_id].to_dict(),
        "moved": [c.to_dict() for c in conflicts]
    }


# Iteration endpoints
@app.get("/api/iterations")
async def get_iteration_schedule(team_ids: Optional[list[str]] = Query(None)):
    """Get capacity for every iteration, per team or combined."""
    snapshot = get_snapshot()
    _require_configured(snapshot)
    team_ids = _team_ids_or_all(snapshot, team_ids)

    schedule = CapacityCalculator(snapshot).iteration_schedule(team_ids)
    return {
        "team_ids": team_ids,
        "combined": len(team_ids) > 1,
        "iterations": [s.to_dict() for s in schedule]
    }


@app.get("/api/iterations/{number}")
async def get_iteration_details(number: int, team_ids: Optional[list[str]] = Query(None)):
    """Get one iteration with member, team and role breakdowns."""
    snapshot = get_snapshot()
    _require_configured(snapshot)
    team_ids = _team_ids_or_all(snapshot, team_ids)

    summary = CapacityCalculator(snapshot).iteration_detail(number, team_ids)
    if summary is None:
        raise HTTPException(status_code=404, detail=f"Iteration {number} not found")

    return summary.to_dict(detailed=True)


# Member endpoints
@app.get("/api/members/{employee_id}/off-days")
async def get_member_off_days(
    employee_id: str,
    start: Optional[date] = None,
    end: Optional[date] = None,
    team_ids: Optional[list[str]] = Query(None)
):
    """List a member's off days; defaults to the PI range and the member's teams."""
    snapshot = get_snapshot()
    if employee_id not in snapshot.employees:
        raise HTTPException(status_code=404, detail=f"Employee {employee_id} not found")

    if start is None or end is None:
        _require_configured(snapshot)
        start = start or snapshot.pi.start_date
        end = end or snapshot.pi.end_date

    off_days = resolve_member_off_days(snapshot, employee_id, start, end, team_ids)
    return {
        "employee_id": employee_id,
        "start": start.isoformat(),
        "end": end.isoformat(),
        "count": len(off_days),
        "off_days": [o.to_dict() for o in off_days]
    }


# Holiday endpoints
@app.post("/api/holidays", status_code=201)
async def create_holiday(request: HolidayRequest):
    """Create holiday records, one per day (and per team)."""
    if request.end_date < request.start_date:
        raise HTTPException(status_code=400, detail="Holiday end date is before the start date")

    snapshot = working_copy()
    if request.employee_id and request.employee_id not in snapshot.employees:
        raise HTTPException(status_code=404, detail=f"Employee {request.employee_id} not found")
    unknown = [t for t in request.team_ids if t not in snapshot.teams]
    if unknown:
        raise HTTPException(status_code=404, detail=f"Teams not found: {', '.join(unknown)}")

    try:
        created = snapshot.add_holiday(
            HolidayType(request.type),
            request.name,
            request.start_date,
            request.end_date,
            exclude_weekends=request.exclude_weekends,
            day_types={d: DayType.HALF for d in request.half_days},
            team_ids=request.team_ids,
            employee_id=request.employee_id
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    persist(snapshot)
    return {"count": len(created), "holidays": [h.to_dict() for h in created]}


@app.delete("/api/holidays/{holiday_id}")
async def delete_holiday(holiday_id: str):
    """Delete a single holiday record."""
    snapshot = working_copy()
    try:
        snapshot.remove_holiday(holiday_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Holiday {holiday_id} not found")

    persist(snapshot)
    return {"deleted": holiday_id}


# Import / export
@app.get("/api/data")
async def export_data():
    """Export the full snapshot document."""
    return snapshot_to_document(get_snapshot())


@app.put("/api/data")
async def import_data(document: Any = Body(...)):
    """Replace all data with an imported snapshot document."""
    try:
        snapshot = parse_document(document, config.multi_team_roles)
    except SnapshotFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))

    persist(snapshot)
    logger.info(f"Imported {len(snapshot.teams)} teams and {len(snapshot.employees)} employees")

    return {
        "teams": len(snapshot.teams),
        "employees": len(snapshot.employees),
        "public_holidays": len([h for h in snapshot.holidays if h.type is HolidayType.PUBLIC])
    }


# Run with: uvicorn pi_capacity.api:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
