from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Participant:
    """Someone who checked in; identified by email."""

    participant_id: int
    email: str
    name: str
    phone: Optional[str] = None
