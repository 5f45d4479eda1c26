from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import EventState
from .model import Event, EventGroup


class EventGroupRepository(Protocol):
    """Repository interface for event groups, always scoped to an organizer."""

    def create(self, *, organizer_id: int, name: str, description: Optional[str]) -> EventGroup:
        raise NotImplementedError

    def get_for_organizer(self, group_id: int, organizer_id: int) -> Optional[EventGroup]:
        raise NotImplementedError

    def list_for_organizer(self, organizer_id: int) -> Sequence[EventGroup]:
        raise NotImplementedError

    def update(self, group_id: int, *, name: str, description: Optional[str]) -> bool:
        raise NotImplementedError

    def delete(self, group_id: int) -> bool:
        """Delete the group; the store cascades to events and attendance."""

        raise NotImplementedError


class EventRepository(Protocol):
    def create(
        self,
        *,
        group_id: int,
        name: str,
        scheduled_time: datetime,
        duration_minutes: int,
        access_code: str,
        qr_code_data: Optional[str],
    ) -> Event:
        """Insert a CLOSED event.

        Raises DuplicateAccessCodeError when the code is already taken.
        """

        raise NotImplementedError

    def get_by_id(self, event_id: int) -> Optional[Event]:
        raise NotImplementedError

    def get_by_access_code(self, access_code: str) -> Optional[Event]:
        raise NotImplementedError

    def get_for_organizer(self, event_id: int, organizer_id: int) -> Optional[Event]:
        raise NotImplementedError

    def list_for_group(self, group_id: int) -> Sequence[Event]:
        raise NotImplementedError

    def list_closed_due(self, now: datetime) -> Sequence[Event]:
        """CLOSED events whose window contains ``now`` (both ends inclusive).

        Events whose window already ended are never returned.
        """

        raise NotImplementedError

    def list_open(self) -> Sequence[Event]:
        raise NotImplementedError

    def update_details(
        self,
        event_id: int,
        *,
        name: str,
        scheduled_time: datetime,
        duration_minutes: int,
    ) -> bool:
        raise NotImplementedError

    def transition_state(self, event_id: int, *, from_state: EventState, to_state: EventState) -> bool:
        """Conditional update: only applies while the stored state equals ``from_state``."""

        raise NotImplementedError

    def delete(self, event_id: int) -> bool:
        raise NotImplementedError
