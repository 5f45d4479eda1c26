from __future__ import annotations

from datetime import datetime, timedelta


def event_end_time(scheduled_time: datetime, duration_minutes: int) -> datetime:
    return scheduled_time + timedelta(minutes=int(duration_minutes))


def is_within_window(scheduled_time: datetime, duration_minutes: int, now: datetime) -> bool:
    """True while ``scheduled_time <= now <= end``; the end instant is inclusive."""
    return scheduled_time <= now <= event_end_time(scheduled_time, duration_minutes)


def has_ended(scheduled_time: datetime, duration_minutes: int, now: datetime) -> bool:
    return now > event_end_time(scheduled_time, duration_minutes)
