"""
Goal-met tracking per (work log, target).

    not_met --(live units >= required units > 0)--> met(at)

`met` is terminal for a live day: once `goal_met_times[target_id]` is on the
log it is never recomputed or reverted here. Only an explicit edit of the log
removes it. The engine reports the transition as a `GoalReached` event; the
caller writes it with `apply_goal_reached` (set-if-absent).
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Mapping, Optional

from .rates import goal_covered, required_units_exact
from .records import TargetRecord, WorkLogRecord
from .shift_time import hours_worked
from .units import TargetStatus, raw_units, target_status


class GoalState(str, Enum):
    NOT_MET = "not_met"
    MET = "met"


@dataclass(frozen=True)
class GoalReached:
    work_log_id: Optional[str]
    target_id: str
    at: datetime


@dataclass(frozen=True)
class GoalEvaluation:
    state: GoalState
    met_at: Optional[datetime] = None
    event: Optional[GoalReached] = None


def format_instant(value: datetime) -> str:
    return value.isoformat()


def parse_instant(value) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def has_goal_record(log: WorkLogRecord, target_id: str) -> bool:
    return target_id in (log.goal_met_times or {})


def goal_met_at(log: WorkLogRecord, target_id: str) -> Optional[datetime]:
    return parse_instant((log.goal_met_times or {}).get(target_id))


def _covers_goal(log: WorkLogRecord, target: TargetRecord) -> bool:
    required = required_units_exact(hours_worked(log), target.target_uph)
    return goal_covered(required, raw_units(log, target))


def evaluate_goal(log: WorkLogRecord, target: Optional[TargetRecord], as_of: datetime,
                  *, live: bool = True) -> GoalEvaluation:
    """
    Live evaluation (today's log): an existing record wins, otherwise the first
    evaluation that finds the goal covered emits `GoalReached(at=as_of)`.

    Final evaluation (past or finalized log, live=False): met iff the day's
    total covers the goal, whatever is recorded. `as_of` is ignored and no
    event is emitted; a stored instant is still reported as `met_at`.
    """
    if target is None:
        return GoalEvaluation(state=GoalState.NOT_MET)

    covered = target_status(target) is TargetStatus.OK and _covers_goal(log, target)

    if not live:
        if not covered:
            return GoalEvaluation(state=GoalState.NOT_MET)
        return GoalEvaluation(state=GoalState.MET, met_at=goal_met_at(log, target.id))

    if has_goal_record(log, target.id):
        return GoalEvaluation(state=GoalState.MET, met_at=goal_met_at(log, target.id))

    if not covered:
        return GoalEvaluation(state=GoalState.NOT_MET)

    return GoalEvaluation(
        state=GoalState.MET,
        met_at=as_of,
        event=GoalReached(work_log_id=log.id, target_id=target.id, at=as_of),
    )


def pending_goal_events(log: WorkLogRecord, targets: Iterable[TargetRecord],
                        as_of: datetime) -> list[GoalReached]:
    events = []
    for target in targets:
        event = evaluate_goal(log, target, as_of, live=True).event
        if event is not None:
            events.append(event)
    return events


def apply_goal_reached(goal_met_times: Optional[Mapping[str, str]], event: GoalReached) -> dict:
    """Set-if-absent write of a GoalReached event; returns a new map."""
    updated = dict(goal_met_times or {})
    updated.setdefault(event.target_id, format_instant(event.at))
    return updated
