from datetime import datetime
from typing import Optional

PLACEHOLDER = "—"


def format_ahead_behind(seconds: Optional[float]) -> str:
    """3m 12s ahead / 1h 00m 00s behind / on schedule."""
    if seconds is None:
        return PLACEHOLDER
    total = int(round(abs(seconds)))
    if total == 0:
        return "on schedule"
    hours, rem = divmod(total, 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        text = f"{hours}h {minutes:02d}m {secs:02d}s"
    else:
        text = f"{minutes}m {secs:02d}s"
    return f"{text} {'ahead' if seconds > 0 else 'behind'}"


def format_duration_minutes(minutes: Optional[float]) -> str:
    if minutes is None or minutes < 0:
        return PLACEHOLDER
    hours, mins = divmod(int(round(minutes)), 60)
    if hours and mins:
        return f"{hours}h {mins}m"
    if hours:
        return f"{hours}h"
    return f"{mins}m"


def format_clock(value: Optional[datetime]) -> str:
    if value is None:
        return PLACEHOLDER
    return value.strftime("%I:%M:%S %p").lstrip("0")
