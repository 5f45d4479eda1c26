from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_utc
from ..common.validators import require_email, require_max_length, require_min_length, require_non_empty
from ..core.constants import DEFAULT_TOKEN_TTL_HOURS, MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from .model import User
from .repository import UserRepository

_USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]{3,50}$")


@dataclass(frozen=True)
class RegistrationInput:
    username: str
    email: str
    password: str


def validate_registration(*, username: str, email: str, password: str) -> RegistrationInput:
    username = require_non_empty(username, "Username")
    if not _USERNAME_RE.match(username):
        raise ValidationError("Username must be 3-50 letters, numbers or underscores")
    email = require_max_length(require_email(email), "Email", 100)
    require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
    return RegistrationInput(username=username, email=email, password=password)


def hash_password(password: str) -> str:
    """Write-path step: plaintext never reaches the repository."""
    return generate_password_hash(password)


class TokenService:
    """Issues and verifies HS256 bearer tokens for organizers."""

    ALGORITHM = "HS256"

    def __init__(
        self,
        secret_key: str,
        *,
        ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._secret_key = secret_key
        self._ttl = timedelta(hours=int(ttl_hours))
        self._clock = clock

    def issue(self, user: User) -> str:
        now = self._clock()
        payload = {
            "sub": str(user.user_id),
            "role": user.role.value,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.ALGORITHM)

    def verify(self, token: str) -> int:
        """Return the organizer id carried by ``token``."""
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.ALGORITHM])
            return int(payload["sub"])
        except (jwt.PyJWTError, KeyError, ValueError):
            raise AuthenticationError("Invalid or expired token") from None


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User


class AuthService:
    """Use case: organizer registration and login."""

    def __init__(self, users: UserRepository, tokens: TokenService):
        self._users = users
        self._tokens = tokens

    def register(self, *, username: str, email: str, password: str) -> LoginResult:
        data = validate_registration(username=username, email=email, password=password)
        password_hash = hash_password(data.password)
        user_id = self._users.create_user(
            username=data.username,
            email=data.email,
            password_hash=password_hash,
            role=Role.ORGANIZER,
        )
        user = self._users.get_by_id(user_id)
        if not user:
            raise AuthenticationError("Registration failed")
        return LoginResult(token=self._tokens.issue(user), user=user)

    def login(self, *, email: str, password: str) -> LoginResult:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user:
            raise AuthenticationError("Invalid email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # e.g. placeholder or corrupted hash values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid email or password")
        return LoginResult(token=self._tokens.issue(user), user=user)

    def authenticate_token(self, token: str) -> User:
        user_id = self._tokens.verify(token)
        user = self._users.get_by_id(user_id)
        if not user:
            raise AuthenticationError("Invalid or expired token")
        return user
