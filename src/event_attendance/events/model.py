from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import EventState


@dataclass(frozen=True)
class EventGroup:
    """Ownership container for events; belongs to one organizer."""

    group_id: int
    organizer_id: int
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Event:
    """Domain entity: a scheduled check-in window.

    Note: Plain data. ``state`` is written only by the state scheduler.
    """

    event_id: int
    group_id: int
    name: str
    scheduled_time: datetime
    duration_minutes: int
    state: EventState
    access_code: str
    qr_code_data: Optional[str] = None
    created_at: Optional[datetime] = None
