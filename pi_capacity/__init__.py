"""
PI Capacity Planner

Computes team capacity (working days, person-hours, story points) for a
Program Increment split into fixed-length iterations.
"""

__version__ = "1.0.0"

from .models import (
    DayType,
    Employee,
    Holiday,
    HolidayType,
    Iteration,
    IterationSummary,
    OffDay,
    PIConfig,
    PISummary,
    RoleCapacity,
    Team,
    TeamSummary
)

from .resolver import HolidayResolver
from .working_days import WorkingDayAggregator
from .iterations import partition

from .capacity import (
    CapacityCalculator,
    calculate_pi_capacity,
    calculate_team_capacity,
    calculate_iteration_schedule,
    resolve_member_off_days
)

from .store import Snapshot, TeamConflict
from .snapshot import SnapshotFormatError, load_snapshot, save_snapshot

__all__ = [
    # Version
    "__version__",

    # Models
    "DayType",
    "Employee",
    "Holiday",
    "HolidayType",
    "Iteration",
    "IterationSummary",
    "OffDay",
    "PIConfig",
    "PISummary",
    "RoleCapacity",
    "Team",
    "TeamSummary",

    # Engine
    "HolidayResolver",
    "WorkingDayAggregator",
    "partition",
    "CapacityCalculator",
    "calculate_pi_capacity",
    "calculate_team_capacity",
    "calculate_iteration_schedule",
    "resolve_member_off_days",

    # Data
    "Snapshot",
    "TeamConflict",
    "SnapshotFormatError",
    "load_snapshot",
    "save_snapshot",
]
