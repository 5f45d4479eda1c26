from __future__ import annotations

from datetime import datetime
from typing import Optional

from .enums import EventState


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when credentials or bearer tokens are invalid."""


class NotFoundError(DomainError):
    """Raised for an unknown access code or an id the caller does not own."""


class InvalidStateError(DomainError):
    """Raised when an entity is not in the state an operation requires."""


class EventNotOpenError(InvalidStateError):
    def __init__(self, state: EventState):
        super().__init__("Event is not currently open for attendance confirmation")
        self.state = state


class ConflictError(DomainError):
    """Raised when a uniqueness rule would be broken."""


class AlreadyConfirmedError(ConflictError):
    def __init__(self, confirmed_at: Optional[datetime]):
        super().__init__("Attendance already confirmed for this event")
        self.confirmed_at = confirmed_at


class DuplicateAccessCodeError(ConflictError):
    def __init__(self, access_code: str):
        super().__init__("Access code already in use")
        self.access_code = access_code


class NothingToExportError(DomainError):
    """Raised when an export would contain no attendance rows."""


class TransientStoreError(DomainError):
    """Raised when the store is unreachable or fails in a retryable way."""


class NotificationError(DomainError):
    """Raised by notifiers; always swallowed by callers."""
