from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .records import TargetRecord, WorkLogRecord
from .shift_time import elapsed_work_minutes, hours_worked
from .units import is_positive, raw_units


@dataclass(frozen=True)
class LiveMetrics:
    current_units: float = 0.0
    current_uph: float = 0.0
    net_elapsed_work_minutes: float = 0.0


def required_units_exact(hours: float, target_uph: float) -> float:
    if not (is_positive(hours) and is_positive(target_uph)):
        return 0.0
    return hours * target_uph


def required_units(hours: float, target_uph: float) -> float:
    """Units needed across the whole logged shift to hit the goal."""
    return round(required_units_exact(hours, target_uph), 2)


def units_still_needed(required: float, current: float) -> float:
    """Shortfall against the shift goal at display precision; <= 0 means covered."""
    return round(round(required, 2) - round(current, 2), 2)


def goal_covered(required: float, current: float) -> bool:
    # a zero-hour shift can never meet a goal
    return round(required, 2) > 0 and units_still_needed(required, current) <= 0


def final_uph(log: WorkLogRecord, target: Optional[TargetRecord]) -> float:
    hours = hours_worked(log)
    if hours <= 0:
        return 0.0
    return round(raw_units(log, target) / hours, 2)


def live_uph_exact(log: WorkLogRecord, target: Optional[TargetRecord], as_of: datetime) -> float:
    net_hours = elapsed_work_minutes(log, as_of).net_elapsed_work_minutes / 60.0
    if net_hours <= 0:
        return 0.0
    return raw_units(log, target) / net_hours


def live_metrics(log: WorkLogRecord, target: Optional[TargetRecord], as_of: datetime) -> LiveMetrics:
    # counts are cumulative for the day, only the time denominator is "so far"
    net_minutes = elapsed_work_minutes(log, as_of).net_elapsed_work_minutes
    return LiveMetrics(
        current_units=round(raw_units(log, target), 2),
        current_uph=round(live_uph_exact(log, target, as_of), 2),
        net_elapsed_work_minutes=round(net_minutes, 2),
    )


def unit_difference(log: WorkLogRecord, target: Optional[TargetRecord]) -> float:
    """Signed surplus (+) or shortfall (-) against the full-shift requirement."""
    if target is None:
        return 0.0
    required = required_units_exact(hours_worked(log), target.target_uph)
    return round(raw_units(log, target) - required, 2)
