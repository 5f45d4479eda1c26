from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Optional

from ..core.enums import ExportFormat
from ..core.exceptions import ValidationError
from .datetime_utils import ensure_utc, parse_iso_datetime

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters long")
    return value


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if len(value) > max_len:
        raise ValidationError(f"{field_name} must be at most {max_len} characters long")
    return value


def require_email(value: Optional[str], field_name: str = "Email") -> str:
    email = require_non_empty(value, field_name).lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError(f"{field_name} must be a valid email address")
    return email


def require_positive_int(value: Any, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a positive integer") from None
    if isinstance(value, bool) or number < 1 or str(number) != str(value).strip():
        raise ValidationError(f"{field_name} must be a positive integer")
    return number


def require_datetime(value: Any, field_name: str) -> datetime:
    if isinstance(value, datetime):
        return ensure_utc(value)
    text = require_non_empty(value, field_name)
    try:
        return parse_iso_datetime(text)
    except ValueError:
        raise ValidationError(f"{field_name} must be a valid ISO-8601 date") from None


def optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def require_export_format(value: Optional[str]) -> ExportFormat:
    try:
        return ExportFormat((value or ExportFormat.CSV.value).lower())
    except ValueError:
        raise ValidationError("Format must be either csv or xlsx") from None
