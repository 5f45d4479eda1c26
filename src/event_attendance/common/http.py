from __future__ import annotations

from datetime import datetime
from functools import wraps
from typing import Any, Callable, Optional

from flask import Flask, current_app, g, jsonify, request

from ..core.exceptions import (
    AlreadyConfirmedError,
    AuthenticationError,
    ConflictError,
    DomainError,
    EventNotOpenError,
    InvalidStateError,
    NothingToExportError,
    NotFoundError,
    TransientStoreError,
    ValidationError,
)

_STATUS_BY_ERROR: list[tuple[type[DomainError], int]] = [
    (ValidationError, 400),
    (AuthenticationError, 401),
    (NotFoundError, 404),
    (NothingToExportError, 404),
    (InvalidStateError, 409),
    (ConflictError, 409),
    (TransientStoreError, 503),
]


def iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def ok(data: Any = None, *, message: Optional[str] = None, status: int = 200):
    payload: dict[str, Any] = {"success": True}
    if message:
        payload["message"] = message
    if data is not None:
        payload["data"] = data
    return jsonify(payload), status


def error_response(exc: DomainError):
    status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 500)
    payload: dict[str, Any] = {"success": False, "message": str(exc)}
    if isinstance(exc, EventNotOpenError):
        payload["event_state"] = exc.state.value
    if isinstance(exc, AlreadyConfirmedError):
        payload["confirmed_at"] = iso(exc.confirmed_at)
    if isinstance(exc, TransientStoreError):
        payload["message"] = "Service temporarily unavailable, please retry"
    return jsonify(payload), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(exc: DomainError):
        if isinstance(exc, TransientStoreError):
            app.logger.warning("Store error on %s %s: %s", request.method, request.path, exc)
        return error_response(exc)

    @app.errorhandler(404)
    def _not_found(_exc):
        return jsonify({"success": False, "message": "Route not found"}), 404


def bearer_required(view: Callable):
    """Resolve the Authorization bearer token to ``g.organizer``."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise AuthenticationError("Missing bearer token")
        container = current_app.extensions["event_attendance"]
        g.organizer = container.auth_service.authenticate_token(token.strip())
        return view(*args, **kwargs)

    return wrapper
