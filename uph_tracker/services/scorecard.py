"""
Per-log metric views.

Every route, job and export reads its numbers from here so a target's units,
rates and projection are computed in exactly one way.
"""
from datetime import datetime
from typing import Optional, Sequence

from .formatting import format_ahead_behind, format_clock, format_duration_minutes
from .goal_met import GoalState, evaluate_goal, format_instant
from .rates import (
    final_uph,
    live_metrics,
    required_units,
    required_units_exact,
    unit_difference,
    units_still_needed,
)
from .records import TargetRecord, WorkLogRecord
from .schedule import ProjectionState, ScheduleStatus, schedule_status
from .shift_time import hours_worked, is_live
from .targets import resolve_target, sort_targets
from .units import TargetStatus, raw_units, target_status, units


def _iso(value: Optional[datetime]) -> Optional[str]:
    return format_instant(value) if value is not None else None


def _progress(log: WorkLogRecord, target: TargetRecord) -> tuple[float, float]:
    """Percent of the shift goal done (0..100) and units still to go (never negative)."""
    required = required_units_exact(hours_worked(log), target.target_uph)
    if round(required, 2) <= 0:
        return 0.0, 0.0
    current = raw_units(log, target)
    percent = min(100.0, max(0.0, current / required * 100.0))
    return round(percent, 1), max(0.0, units_still_needed(required, current))


def _time_remaining(schedule: ScheduleStatus, as_of: datetime) -> str:
    if schedule.state in (ProjectionState.MET, ProjectionState.REACHED):
        return format_duration_minutes(0)
    if schedule.projected_hit_time is None:
        return format_duration_minutes(None)
    return format_duration_minutes((schedule.projected_hit_time - as_of).total_seconds() / 60.0)


def target_card(log: WorkLogRecord, target: TargetRecord, as_of: datetime, *, live: bool) -> dict:
    status = target_status(target)
    hours = hours_worked(log)
    card = {
        "target_id": target.id,
        "name": target.name,
        "target_uph": target.target_uph,
        "status": status.value,
        "units": units(log, target),
        "required_units": required_units(hours, target.target_uph),
        "unit_difference": unit_difference(log, target),
        "avg_uph": final_uph(log, target),
    }

    goal = evaluate_goal(log, target, as_of, live=live)
    card["goal_met"] = goal.state is GoalState.MET
    card["met_at"] = _iso(goal.met_at)

    if not live:
        return card

    current = live_metrics(log, target, as_of)
    schedule = schedule_status(log, target, as_of)
    progress_percent, units_to_goal = _progress(log, target)
    card.update({
        "progress_percent": progress_percent,
        "units_to_goal": units_to_goal,
        "time_remaining": _time_remaining(schedule, as_of),
        "current_units": current.current_units,
        "current_uph": current.current_uph,
        "projection": schedule.state.value,
        "ahead_behind_seconds": schedule.ahead_behind_seconds,
        "ahead_behind": format_ahead_behind(schedule.ahead_behind_seconds),
        "projected_hit_time": _iso(schedule.projected_hit_time),
        "projected_hit_clock": format_clock(schedule.projected_hit_time),
    })
    if status is not TargetStatus.OK:
        # unusable target: keep it visible but without misleading rates
        card["current_uph"] = None
    return card


def log_summary(log: WorkLogRecord, targets: Sequence[TargetRecord], as_of: datetime) -> dict:
    live = is_live(log, as_of)
    ordered = sort_targets(targets)
    summary_target = resolve_target(log.target_id, ordered)

    summary_uph = None
    total_units = None
    if summary_target is not None:
        total_units = units(log, summary_target)
        if live:
            summary_uph = live_metrics(log, summary_target, as_of).current_uph
        else:
            summary_uph = final_uph(log, summary_target)

    net_minutes = hours_worked(log) * 60.0
    return {
        "id": log.id,
        "date": log.date,
        "start_time": log.start_time,
        "end_time": log.end_time,
        "break_minutes": log.break_minutes,
        "training_minutes": log.training_minutes,
        "hours_worked": round(hours_worked(log), 2),
        "net_work": format_duration_minutes(net_minutes),
        "documents_completed": log.documents_completed,
        "video_sessions_completed": log.video_sessions_completed,
        "is_finalized": log.is_finalized,
        "live": live,
        "as_of": format_instant(as_of),
        "summary_target_id": summary_target.id if summary_target else None,
        "summary_target_status": target_status(summary_target).value,
        "summary_uph": summary_uph,
        "total_units": total_units,
        "cards": [target_card(log, t, as_of, live=live) for t in ordered],
    }
