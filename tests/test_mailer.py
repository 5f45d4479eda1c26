from __future__ import annotations

import smtplib

import pytest

from conftest import T0
from event_attendance.core.exceptions import NotificationError
from event_attendance.notifications import mailer
from event_attendance.notifications.mailer import NullNotifier, SMTPNotifier, SMTPSettings, build_notifier


class FakeSMTP:
    instances: list["FakeSMTP"] = []

    def __init__(self, host, port, timeout=None):
        self.host, self.port, self.timeout = host, port, timeout
        self.tls = False
        self.login_args = None
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.tls = True

    def login(self, user, password):
        self.login_args = (user, password)

    def send_message(self, msg):
        self.messages.append(msg)


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(mailer.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


def test_build_notifier_without_host_is_null():
    assert isinstance(build_notifier({"host": ""}), NullNotifier)
    assert isinstance(build_notifier(None), NullNotifier)


def test_confirmation_email(fake_smtp):
    notifier = build_notifier({"host": "smtp.example.com", "port": 2525, "user": "u", "password": "p"})

    notifier.send_attendance_confirmation(
        to="ann@example.com", participant_name="Ann", event_name="Kickoff", confirmed_at=T0
    )

    smtp = fake_smtp.instances[0]
    assert (smtp.host, smtp.port, smtp.tls, smtp.login_args) == ("smtp.example.com", 2525, True, ("u", "p"))
    msg = smtp.messages[0]
    assert msg["To"] == "ann@example.com"
    assert msg["Subject"] == "Attendance Confirmed - Kickoff"
    assert "Hello Ann" in msg.get_content()


def test_reminder_email(fake_smtp):
    notifier = SMTPNotifier(SMTPSettings(host="smtp.example.com", use_tls=False))

    notifier.send_event_reminder(to="ann@example.com", participant_name="Ann", event_name="Kickoff", scheduled_time=T0)

    smtp = fake_smtp.instances[0]
    assert smtp.tls is False and smtp.login_args is None
    assert smtp.messages[0]["Subject"] == "Event Reminder - Kickoff"


def test_smtp_failure_raises_notification_error(monkeypatch):
    def refuse(*_args, **_kwargs):
        raise smtplib.SMTPConnectError(421, "busy")

    monkeypatch.setattr(mailer.smtplib, "SMTP", refuse)
    notifier = SMTPNotifier(SMTPSettings(host="smtp.example.com"))

    with pytest.raises(NotificationError):
        notifier.send_attendance_confirmation(
            to="ann@example.com", participant_name="Ann", event_name="Kickoff", confirmed_at=T0
        )
