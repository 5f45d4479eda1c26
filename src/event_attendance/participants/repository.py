from __future__ import annotations

from typing import Optional, Protocol

from .model import Participant


class ParticipantRepository(Protocol):
    def get_by_email(self, email: str) -> Optional[Participant]:
        raise NotImplementedError

    def upsert_by_email(self, *, email: str, name: str, phone: Optional[str]) -> Participant:
        """Create the participant or update name (and phone, when given) in one statement.

        The email is never changed by an update.
        """

        raise NotImplementedError
