"""
Shift time model.

Turns a log's date / start / end / break / training fields into gross and net
work minutes, either for the whole shift or "as of" a given instant.

Break and training time carry no timestamps, so they are apportioned evenly
across the shift: at 50% of the gross shift elapsed, 50% of the non-work
minutes are assumed taken. This is an approximation of the data model and is
kept as-is.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .records import WorkLogRecord

DATE_FMT = "%Y-%m-%d"
CLOCK_FMT = "%H:%M"


@dataclass(frozen=True)
class ShiftWindow:
    start: datetime
    end: datetime

    @property
    def gross_minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60.0


@dataclass(frozen=True)
class ShiftMinutes:
    gross_minutes: float = 0.0
    elapsed_gross_minutes: float = 0.0
    non_work_so_far: float = 0.0
    net_elapsed_work_minutes: float = 0.0
    net_total_work_minutes: float = 0.0
    valid: bool = False


def wall_clock(as_of: datetime) -> datetime:
    """Local wall-clock reading of `as_of` (shift times are naive local times)."""
    return as_of.replace(tzinfo=None)


def parse_shift(log: WorkLogRecord) -> Optional[ShiftWindow]:
    """Start/end as local datetimes on the log's date, or None if unparseable."""
    try:
        day = datetime.strptime((log.date or "").strip(), DATE_FMT)
        start_clock = datetime.strptime((log.start_time or "").strip(), CLOCK_FMT)
        end_clock = datetime.strptime((log.end_time or "").strip(), CLOCK_FMT)
    except (AttributeError, TypeError, ValueError):
        return None

    start = day.replace(hour=start_clock.hour, minute=start_clock.minute)
    end = day.replace(hour=end_clock.hour, minute=end_clock.minute)
    if end < start:
        # overnight shift, ends on the following day
        end += timedelta(days=1)
    return ShiftWindow(start=start, end=end)


def _non_work_minutes(log: WorkLogRecord) -> float:
    return float(max(0, log.break_minutes or 0) + max(0, log.training_minutes or 0))


def net_total_work_minutes(log: WorkLogRecord) -> float:
    window = parse_shift(log)
    if window is None:
        return 0.0
    return max(0.0, window.gross_minutes - _non_work_minutes(log))


def hours_worked(log: WorkLogRecord) -> float:
    """Net hours for the whole shift, full precision."""
    return net_total_work_minutes(log) / 60.0


def elapsed_work_minutes(log: WorkLogRecord, as_of: datetime) -> ShiftMinutes:
    window = parse_shift(log)
    if window is None:
        return ShiftMinutes()

    gross = window.gross_minutes
    non_work = _non_work_minutes(log)
    net_total = max(0.0, gross - non_work)

    elapsed = (wall_clock(as_of) - window.start).total_seconds() / 60.0
    elapsed = min(max(elapsed, 0.0), gross)

    proportion = elapsed / gross if gross > 0 else 0.0
    non_work_so_far = non_work * proportion
    net_elapsed = max(0.0, elapsed - non_work_so_far)

    return ShiftMinutes(
        gross_minutes=gross,
        elapsed_gross_minutes=elapsed,
        non_work_so_far=non_work_so_far,
        net_elapsed_work_minutes=net_elapsed,
        net_total_work_minutes=net_total,
        valid=True,
    )


def is_live(log: WorkLogRecord, as_of: datetime) -> bool:
    """
    Whether the log should be evaluated "as of now" rather than as a closed day.
    Finalized logs never are. Otherwise the log is live on its own date, and
    also while `as_of` is still inside an overnight shift that began the day before.
    """
    if log.is_finalized:
        return False
    now = wall_clock(as_of)
    if log.date == now.strftime(DATE_FMT):
        return True
    window = parse_shift(log)
    return window is not None and window.start <= now < window.end
