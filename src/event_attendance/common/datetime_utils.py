from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def now_utc() -> datetime:
    """Current time as an aware UTC datetime.

    Note: Wrapped so tests can patch/inject a clock easier.
    """
    return datetime.now(timezone.utc)


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 string; naive values are taken as UTC."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    return ensure_utc(parsed)


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_db(value: datetime) -> datetime:
    """MySQL DATETIME columns hold naive UTC."""
    return ensure_utc(value).replace(tzinfo=None)


def from_db(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc)


def format_local(value: datetime) -> str:
    """Locale-formatted local time, used for exports and emails."""
    return ensure_utc(value).astimezone().strftime("%c")
