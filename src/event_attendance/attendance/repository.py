from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Attendance, AttendanceExportRecord, AttendeeRow


class AttendanceRepository(Protocol):
    def create(self, *, event_id: int, participant_id: int, confirmed_at: datetime) -> Attendance:
        """Insert atomically against UNIQUE(event_id, participant_id).

        Raises AlreadyConfirmedError carrying the stored confirmed_at when the
        pair already exists. Never implemented as check-then-insert.
        """

        raise NotImplementedError

    def get_for_event_and_participant(self, event_id: int, participant_id: int) -> Optional[Attendance]:
        raise NotImplementedError

    def list_attendees(self, event_id: int) -> Sequence[AttendeeRow]:
        """Attendees of one event, most recent confirmation first."""

        raise NotImplementedError

    def list_export_records_for_event(self, event_id: int) -> Sequence[AttendanceExportRecord]:
        """Ordered by confirmation time descending."""

        raise NotImplementedError

    def list_export_records_for_group(self, group_id: int) -> Sequence[AttendanceExportRecord]:
        """Ordered by event schedule, then confirmation time descending."""

        raise NotImplementedError
