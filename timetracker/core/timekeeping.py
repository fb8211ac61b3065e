"""
Date and duration helpers
All "today" computations happen in the configured application timezone
"""

from datetime import date, datetime, timedelta
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from timetracker.core.config import settings
from timetracker.core.exceptions import ValidationFailed

DEFAULT_START_TIME = "09:00"


def app_timezone() -> ZoneInfo:
    return ZoneInfo(settings.APP_TIMEZONE)


def today(now: Optional[datetime] = None) -> date:
    """Current date in the application timezone"""
    if now is None:
        return datetime.now(app_timezone()).date()
    if now.tzinfo is None:
        return now.date()
    return now.astimezone(app_timezone()).date()


def is_project_active(start_date: Optional[date], end_date: Optional[date], on: date) -> bool:
    """A project is active when `on` falls inside [start, end]; missing bounds are open"""
    if start_date is not None and on < start_date:
        return False
    if end_date is not None and on > end_date:
        return False
    return True


def project_status(start_date: Optional[date], end_date: Optional[date], on: date) -> str:
    if start_date is not None and on < start_date:
        return "upcoming"
    if end_date is not None and on > end_date:
        return "ended"
    return "active"


def parse_clock(value: str) -> int:
    """Parse HH:MM (or HH:MM:SS) into seconds since midnight"""
    try:
        parts = [int(p) for p in value.strip().split(":")]
    except (AttributeError, ValueError):
        raise ValidationFailed(f"Invalid time format: {value!r}. Expected HH:MM")

    if len(parts) not in (2, 3):
        raise ValidationFailed(f"Invalid time format: {value!r}. Expected HH:MM")

    hours, minutes = parts[0], parts[1]
    seconds = parts[2] if len(parts) == 3 else 0
    if not (0 <= hours <= 23 and 0 <= minutes <= 59 and 0 <= seconds <= 59):
        raise ValidationFailed(f"Invalid time value: {value!r}")
    return hours * 3600 + minutes * 60 + seconds


def format_clock(seconds: int) -> str:
    return f"{seconds // 3600:02d}:{(seconds % 3600) // 60:02d}"


def calculate_duration(start_time: str, end_time: str) -> float:
    """Hours between two HH:MM times, rounded to two decimals; end must be after start"""
    start = parse_clock(start_time)
    end = parse_clock(end_time)
    if end <= start:
        raise ValidationFailed("End time must be after start time")
    return round((end - start) / 3600, 2)


def derive_times(duration: float, start_time: Optional[str] = None) -> Tuple[str, str]:
    """Start/end pair for a manually entered duration (start defaults to 09:00)"""
    if duration is None or duration <= 0:
        raise ValidationFailed("Duration must be greater than zero")

    start = parse_clock(start_time or DEFAULT_START_TIME)
    # End is rounded to the nearest minute, never before start + 1 minute
    end = start + max(1, round(duration * 60)) * 60
    if end >= 24 * 3600:
        raise ValidationFailed("Duration extends past the end of the day")
    return format_clock(start), format_clock(end)


def shift_month(value: date, months: int) -> date:
    """Same day `months` away, clamped to the last day of the target month"""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    for day in (value.day, 30, 29, 28):
        try:
            return date(year, month, min(value.day, day))
        except ValueError:
            continue
    return date(year, month, 28)


def dashboard_windows(on: date) -> dict:
    """Inclusive date windows used by the dashboard counters"""
    return {
        "today": (on, on),
        "week": (on - timedelta(days=7), on),
        "month": (shift_month(on, -1), on),
    }


def check_date_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date and end_date and end_date < start_date:
        raise ValidationFailed("end_date must not be before start_date")
