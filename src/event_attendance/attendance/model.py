from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Attendance:
    """Domain entity: one confirmed check-in. Immutable once stored."""

    attendance_id: int
    event_id: int
    participant_id: int
    confirmed_at: datetime


@dataclass(frozen=True)
class AttendanceConfirmation:
    """Result of a check-in, denormalized for immediate display."""

    attendance: Attendance
    event_id: int
    event_name: str
    participant_id: int
    participant_name: str
    participant_email: str

    @property
    def confirmed_at(self) -> datetime:
        return self.attendance.confirmed_at


@dataclass(frozen=True)
class AttendeeRow:
    attendance_id: int
    confirmed_at: datetime
    participant_id: int
    name: str
    email: str
    phone: Optional[str] = None


@dataclass(frozen=True)
class AttendanceExportRecord:
    """Read-model for exports; event/participant fields are None when the link is missing."""

    attendance_id: int
    confirmed_at: datetime
    event_name: Optional[str]
    participant_name: Optional[str]
    participant_email: Optional[str]
