"""
Unit conversion: raw document / video counts -> abstract "units" for a target.

A target that is missing or carries a non-positive divisor yields 0 units.
A bad divisor is never swapped for 1; callers use `target_status` to tell a
misconfigured target apart from a missing one.
"""
import math
from enum import Enum
from typing import Optional

from .records import TargetRecord, WorkLogRecord


class TargetStatus(str, Enum):
    OK = "ok"
    MISSING = "missing"
    MISCONFIGURED = "misconfigured"


def is_positive(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def target_status(target: Optional[TargetRecord]) -> TargetStatus:
    if target is None:
        return TargetStatus.MISSING
    if not (is_positive(target.docs_per_unit)
            and is_positive(target.videos_per_unit)
            and is_positive(target.target_uph)):
        return TargetStatus.MISCONFIGURED
    return TargetStatus.OK


def _count(value) -> float:
    # anything below zero counts as nothing
    if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
        return 0.0
    return max(0.0, float(value))


def raw_units(log: WorkLogRecord, target: Optional[TargetRecord]) -> float:
    """Full-precision units; use this inside chained calculations."""
    if target is None:
        return 0.0
    if not (is_positive(target.docs_per_unit) and is_positive(target.videos_per_unit)):
        return 0.0
    return (_count(log.documents_completed) / target.docs_per_unit
            + _count(log.video_sessions_completed) / target.videos_per_unit)


def units(log: WorkLogRecord, target: Optional[TargetRecord]) -> float:
    return round(raw_units(log, target), 2)
