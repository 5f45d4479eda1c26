from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..codes.generator import EventCodes, generate_event_codes
from ..common.validators import (
    optional_text,
    require_datetime,
    require_max_length,
    require_non_empty,
    require_positive_int,
)
from ..core.constants import MAX_ACCESS_CODE_ATTEMPTS, MAX_NAME_LENGTH
from ..core.exceptions import ConflictError, DuplicateAccessCodeError, NotFoundError
from .model import Event, EventGroup
from .repository import EventGroupRepository, EventRepository

logger = logging.getLogger(__name__)


def _clean_name(name: Optional[str], field_name: str) -> str:
    return require_max_length(require_non_empty(name, field_name), field_name, MAX_NAME_LENGTH)


class EventGroupService:
    """Use case: organizers manage their own event groups."""

    def __init__(self, groups: EventGroupRepository, events: EventRepository):
        self._groups = groups
        self._events = events

    def create_group(self, *, organizer_id: int, name: str, description: Optional[str] = None) -> EventGroup:
        return self._groups.create(
            organizer_id=organizer_id,
            name=_clean_name(name, "Event group name"),
            description=optional_text(description),
        )

    def list_groups(self, *, organizer_id: int) -> Sequence[EventGroup]:
        return self._groups.list_for_organizer(organizer_id)

    def get_group(self, *, organizer_id: int, group_id: int) -> EventGroup:
        group = self._groups.get_for_organizer(group_id, organizer_id)
        if not group:
            raise NotFoundError("Event group not found")
        return group

    def list_group_events(self, *, organizer_id: int, group_id: int) -> Sequence[Event]:
        group = self.get_group(organizer_id=organizer_id, group_id=group_id)
        return self._events.list_for_group(group.group_id)

    def update_group(
        self,
        *,
        organizer_id: int,
        group_id: int,
        name: str,
        description: Optional[str] = None,
    ) -> EventGroup:
        group = self.get_group(organizer_id=organizer_id, group_id=group_id)
        # MySQL reports 0 affected rows for a no-op update; ownership was checked above.
        self._groups.update(group.group_id, name=_clean_name(name, "Event group name"), description=optional_text(description))
        return self.get_group(organizer_id=organizer_id, group_id=group_id)

    def delete_group(self, *, organizer_id: int, group_id: int) -> None:
        group = self.get_group(organizer_id=organizer_id, group_id=group_id)
        if not self._groups.delete(group.group_id):
            raise NotFoundError("Event group not found")
        logger.info("Event group %s deleted by organizer %s", group.group_id, organizer_id)


class EventService:
    """Use case: organizers create and edit events.

    Event state is never touched here; schedule edits take effect at the next
    scheduler sweep.
    """

    def __init__(
        self,
        events: EventRepository,
        groups: EventGroupRepository,
        *,
        code_factory: Callable[[], EventCodes] = generate_event_codes,
        max_code_attempts: int = MAX_ACCESS_CODE_ATTEMPTS,
    ):
        self._events = events
        self._groups = groups
        self._code_factory = code_factory
        self._max_code_attempts = int(max_code_attempts)

    def create_event(
        self,
        *,
        organizer_id: int,
        group_id: int,
        name: str,
        scheduled_time: datetime | str,
        duration_minutes: int | str,
    ) -> Event:
        name = _clean_name(name, "Event name")
        when = require_datetime(scheduled_time, "Scheduled time")
        duration = require_positive_int(duration_minutes, "Duration")
        group_id = require_positive_int(group_id, "Event group id")

        group = self._groups.get_for_organizer(group_id, organizer_id)
        if not group:
            raise NotFoundError("Event group not found")

        for attempt in range(1, self._max_code_attempts + 1):
            codes = self._code_factory()
            try:
                event = self._events.create(
                    group_id=group.group_id,
                    name=name,
                    scheduled_time=when,
                    duration_minutes=duration,
                    access_code=codes.access_code,
                    qr_code_data=codes.qr_code_data,
                )
            except DuplicateAccessCodeError:
                logger.warning("Access code collision on attempt %s/%s, regenerating", attempt, self._max_code_attempts)
                continue
            logger.info("Event %s (%s) created in group %s", event.event_id, event.name, group.group_id)
            return event

        raise ConflictError("Failed to generate unique access code. Please try again.")

    def get_event(self, *, organizer_id: int, event_id: int) -> Event:
        event = self._events.get_for_organizer(event_id, organizer_id)
        if not event:
            raise NotFoundError("Event not found")
        return event

    def update_event(
        self,
        *,
        organizer_id: int,
        event_id: int,
        name: Optional[str] = None,
        scheduled_time: datetime | str | None = None,
        duration_minutes: int | str | None = None,
    ) -> Event:
        """Update only the provided fields."""

        event = self.get_event(organizer_id=organizer_id, event_id=event_id)
        self._events.update_details(
            event.event_id,
            name=_clean_name(name, "Event name") if name is not None else event.name,
            scheduled_time=(
                require_datetime(scheduled_time, "Scheduled time") if scheduled_time is not None else event.scheduled_time
            ),
            duration_minutes=(
                require_positive_int(duration_minutes, "Duration") if duration_minutes is not None else event.duration_minutes
            ),
        )
        return self.get_event(organizer_id=organizer_id, event_id=event_id)

    def delete_event(self, *, organizer_id: int, event_id: int) -> None:
        event = self.get_event(organizer_id=organizer_id, event_id=event_id)
        if not self._events.delete(event.event_id):
            raise NotFoundError("Event not found")
        logger.info("Event %s deleted by organizer %s", event.event_id, organizer_id)
