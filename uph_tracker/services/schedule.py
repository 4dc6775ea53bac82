from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from .goal_met import goal_met_at, has_goal_record
from .rates import required_units_exact, units_still_needed
from .records import TargetRecord, WorkLogRecord
from .shift_time import elapsed_work_minutes, hours_worked
from .units import TargetStatus, raw_units, target_status


class ProjectionState(str, Enum):
    MET = "met"                      # goal-met already recorded on the log
    REACHED = "reached"              # live units already cover the shift goal
    PROJECTED = "projected"
    INDETERMINATE = "indeterminate"  # no measurable pace yet
    UNAVAILABLE = "unavailable"      # no usable target, shift or requirement


@dataclass(frozen=True)
class ScheduleStatus:
    state: ProjectionState
    ahead_behind_seconds: Optional[float] = None   # + ahead, - behind
    projected_hit_time: Optional[datetime] = None
    met_at: Optional[datetime] = None


def schedule_status(log: WorkLogRecord, target: Optional[TargetRecord],
                    as_of: datetime) -> ScheduleStatus:
    """
    Lead/lag against the target pace and the instant the full-shift goal
    will be reached at the current live pace.
    """
    if target is not None and has_goal_record(log, target.id):
        return ScheduleStatus(state=ProjectionState.MET, met_at=goal_met_at(log, target.id))

    if target_status(target) is not TargetStatus.OK:
        return ScheduleStatus(state=ProjectionState.UNAVAILABLE)

    minutes = elapsed_work_minutes(log, as_of)
    if not minutes.valid:
        return ScheduleStatus(state=ProjectionState.UNAVAILABLE)

    target_uph = target.target_uph
    net_hours = minutes.net_elapsed_work_minutes / 60.0
    current = raw_units(log, target)

    expected_so_far = target_uph * net_hours
    ahead_behind = round((current - expected_so_far) / target_uph * 3600.0, 2)

    required = required_units_exact(hours_worked(log), target_uph)
    if round(required, 2) <= 0:
        return ScheduleStatus(state=ProjectionState.UNAVAILABLE, ahead_behind_seconds=ahead_behind)

    still_needed = units_still_needed(required, current)
    if still_needed <= 0:
        return ScheduleStatus(state=ProjectionState.REACHED, ahead_behind_seconds=ahead_behind)

    current_uph = current / net_hours if net_hours > 0 else 0.0
    if current_uph <= 0:
        return ScheduleStatus(state=ProjectionState.INDETERMINATE, ahead_behind_seconds=ahead_behind)

    hours_to_goal = still_needed / current_uph
    return ScheduleStatus(
        state=ProjectionState.PROJECTED,
        ahead_behind_seconds=ahead_behind,
        projected_hit_time=as_of + timedelta(minutes=hours_to_goal * 60.0),
    )
