from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: an organizer account.

    Note: Plain data object (no DB access code).
    """

    user_id: int
    username: str
    email: str
    password_hash: str
    role: Role = Role.ORGANIZER
    created_at: Optional[datetime] = None

    def public_view(self) -> dict:
        return {
            "id": self.user_id,
            "username": self.username,
            "email": self.email,
            "role": self.role.value,
        }
