from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_utc
from ..common.validators import optional_text, require_email, require_max_length, require_non_empty
from ..core.constants import MAX_ACCESS_CODE_INPUT_LENGTH, MAX_NAME_LENGTH
from ..core.enums import EventState
from ..core.exceptions import EventNotOpenError, NotFoundError
from ..events.repository import EventRepository
from ..notifications.mailer import AttendanceNotifier, NullNotifier
from ..participants.repository import ParticipantRepository
from .model import AttendanceConfirmation, AttendeeRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use case: public self check-in by access code.

    Exactly one attendance per (event, participant). The store's unique key is
    the only guard, so concurrent identical requests yield one success and
    AlreadyConfirmedError for the rest.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        events: EventRepository,
        participants: ParticipantRepository,
        *,
        notifier: Optional[AttendanceNotifier] = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._attendance = attendance
        self._events = events
        self._participants = participants
        self._notifier = notifier or NullNotifier()
        self._clock = clock

    def confirm_attendance(
        self,
        access_code: str,
        participant_name: str,
        participant_email: str,
        participant_phone: Optional[str] = None,
    ) -> AttendanceConfirmation:
        code = require_max_length(
            require_non_empty(access_code, "Access code").upper(), "Access code", MAX_ACCESS_CODE_INPUT_LENGTH
        )
        name = require_max_length(require_non_empty(participant_name, "Participant name"), "Participant name", MAX_NAME_LENGTH)
        email = require_email(participant_email, "Participant email")
        phone = optional_text(participant_phone)

        event = self._events.get_by_access_code(code)
        if not event:
            raise NotFoundError("Invalid access code")

        # Persisted state only; the window is not recomputed here.
        if event.state != EventState.OPEN:
            raise EventNotOpenError(event.state)

        participant = self._participants.upsert_by_email(email=email, name=name, phone=phone)

        attendance = self._attendance.create(
            event_id=event.event_id,
            participant_id=participant.participant_id,
            confirmed_at=self._clock(),
        )
        logger.info("Participant %s checked in to event %s", participant.participant_id, event.event_id)

        self._notify(to=participant.email, participant_name=participant.name, event_name=event.name, confirmed_at=attendance.confirmed_at)

        return AttendanceConfirmation(
            attendance=attendance,
            event_id=event.event_id,
            event_name=event.name,
            participant_id=participant.participant_id,
            participant_name=participant.name,
            participant_email=participant.email,
        )

    def list_attendees(self, *, event_id: int) -> Sequence[AttendeeRow]:
        """Caller must have resolved ``event_id`` through an ownership check."""
        return self._attendance.list_attendees(event_id)

    def _notify(self, *, to: str, participant_name: str, event_name: str, confirmed_at: datetime) -> None:
        try:
            self._notifier.send_attendance_confirmation(
                to=to,
                participant_name=participant_name,
                event_name=event_name,
                confirmed_at=confirmed_at,
            )
        except Exception:
            logger.warning("Attendance confirmation email to %s failed", to, exc_info=True)
