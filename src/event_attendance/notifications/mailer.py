from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from datetime import datetime
from email.message import EmailMessage
from typing import Optional, Protocol

from ..common.datetime_utils import format_local
from ..core.exceptions import NotificationError

logger = logging.getLogger(__name__)

_FOOTER = "This is an automated message from the Attendance Monitoring System."


class AttendanceNotifier(Protocol):
    def send_attendance_confirmation(
        self,
        *,
        to: str,
        participant_name: str,
        event_name: str,
        confirmed_at: datetime,
    ) -> None:
        raise NotImplementedError

    def send_event_reminder(
        self,
        *,
        to: str,
        participant_name: str,
        event_name: str,
        scheduled_time: datetime,
    ) -> None:
        raise NotImplementedError


class NullNotifier(AttendanceNotifier):
    """Used when SMTP is not configured."""

    def send_attendance_confirmation(self, *, to, participant_name, event_name, confirmed_at) -> None:
        logger.debug("Email not configured, skipping confirmation to %s", to)

    def send_event_reminder(self, *, to, participant_name, event_name, scheduled_time) -> None:
        logger.debug("Email not configured, skipping reminder to %s", to)


@dataclass(frozen=True)
class SMTPSettings:
    host: str
    port: int = 587
    user: str = ""
    password: str = ""
    sender: str = "noreply@attendance-monitoring.com"
    use_tls: bool = True
    timeout: int = 10

    @classmethod
    def from_dict(cls, cfg: dict) -> Optional["SMTPSettings"]:
        host = str(cfg.get("host") or "").strip()
        if not host:
            return None
        return cls(
            host=host,
            port=int(cfg.get("port", 587)),
            user=str(cfg.get("user") or ""),
            password=str(cfg.get("password") or ""),
            sender=str(cfg.get("sender") or "noreply@attendance-monitoring.com"),
            use_tls=bool(cfg.get("use_tls", True)),
            timeout=int(cfg.get("timeout", 10)),
        )


class SMTPNotifier(AttendanceNotifier):
    def __init__(self, settings: SMTPSettings):
        self._settings = settings

    def send_attendance_confirmation(
        self,
        *,
        to: str,
        participant_name: str,
        event_name: str,
        confirmed_at: datetime,
    ) -> None:
        body = (
            f"Hello {participant_name},\n\n"
            "Your attendance has been successfully confirmed for:\n\n"
            f"Event: {event_name}\n"
            f"Confirmed at: {format_local(confirmed_at)}\n\n"
            "Thank you for attending!\n\n"
            f"---\n{_FOOTER}\n"
        )
        self._send(to=to, subject=f"Attendance Confirmed - {event_name}", body=body)

    def send_event_reminder(
        self,
        *,
        to: str,
        participant_name: str,
        event_name: str,
        scheduled_time: datetime,
    ) -> None:
        body = (
            f"Hello {participant_name},\n\n"
            "This is a reminder for the upcoming event:\n\n"
            f"Event: {event_name}\n"
            f"Scheduled for: {format_local(scheduled_time)}\n\n"
            "Don't forget to confirm your attendance when the event starts!\n\n"
            f"---\n{_FOOTER}\n"
        )
        self._send(to=to, subject=f"Event Reminder - {event_name}", body=body)

    def _send(self, *, to: str, subject: str, body: str) -> None:
        s = self._settings
        msg = EmailMessage()
        msg["From"] = s.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)

        try:
            with smtplib.SMTP(s.host, s.port, timeout=s.timeout) as smtp:
                if s.use_tls:
                    smtp.starttls()
                if s.user:
                    smtp.login(s.user, s.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f"Failed to send '{subject}' to {to}: {exc}") from exc
        logger.info("Email '%s' sent to %s", subject, to)


def build_notifier(smtp_config: Optional[dict]) -> AttendanceNotifier:
    settings = SMTPSettings.from_dict(smtp_config or {})
    if settings is None:
        logger.warning("Email service not configured, notifications disabled")
        return NullNotifier()
    return SMTPNotifier(settings)
