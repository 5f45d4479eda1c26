from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Organizer account roles."""

    ORGANIZER = "organizer"
    ADMIN = "admin"


class EventState(str, Enum):
    """Check-in state of an event, driven by the state scheduler."""

    CLOSED = "CLOSED"
    OPEN = "OPEN"


class ExportFormat(str, Enum):
    CSV = "csv"
    XLSX = "xlsx"
