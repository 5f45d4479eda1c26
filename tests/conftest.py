from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from event_attendance.attendance.model import Attendance, AttendanceExportRecord, AttendeeRow
from event_attendance.attendance.service import AttendanceService
from event_attendance.core.enums import EventState, Role
from event_attendance.core.exceptions import AlreadyConfirmedError, ConflictError, DuplicateAccessCodeError, TransientStoreError
from event_attendance.events.model import Event, EventGroup
from event_attendance.events.timing import is_within_window
from event_attendance.participants.model import Participant
from event_attendance.users.model import User

T0 = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


class InMemoryUsers:
    def __init__(self):
        self._by_id: dict[int, User] = {}
        self._next_id = 1

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._by_id.get(int(user_id))

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._by_id.values() if u.email == email), None)

    def create_user(self, *, username: str, email: str, password_hash: str, role: Role) -> int:
        if any(u.username == username or u.email == email for u in self._by_id.values()):
            raise ConflictError("User with this email or username already exists")
        uid = self._next_id
        self._next_id += 1
        self._by_id[uid] = User(user_id=uid, username=username, email=email, password_hash=password_hash, role=role)
        return uid


class InMemoryGroups:
    def __init__(self):
        self.groups: dict[int, EventGroup] = {}
        self._next_id = 1
        self.events: Optional["InMemoryEvents"] = None

    def create(self, *, organizer_id: int, name: str, description: Optional[str]) -> EventGroup:
        gid = self._next_id
        self._next_id += 1
        group = EventGroup(group_id=gid, organizer_id=organizer_id, name=name, description=description, created_at=T0)
        self.groups[gid] = group
        return group

    def get_for_organizer(self, group_id: int, organizer_id: int) -> Optional[EventGroup]:
        group = self.groups.get(int(group_id))
        if group and group.organizer_id == int(organizer_id):
            return group
        return None

    def list_for_organizer(self, organizer_id: int):
        return sorted(
            (g for g in self.groups.values() if g.organizer_id == organizer_id),
            key=lambda g: g.group_id,
            reverse=True,
        )

    def update(self, group_id: int, *, name: str, description: Optional[str]) -> bool:
        group = self.groups.get(group_id)
        if not group:
            return False
        self.groups[group_id] = replace(group, name=name, description=description)
        return True

    def delete(self, group_id: int) -> bool:
        if self.groups.pop(group_id, None) is None:
            return False
        if self.events is not None:
            for event in [e for e in self.events.events.values() if e.group_id == group_id]:
                self.events.delete(event.event_id)
        return True


class InMemoryEvents:
    def __init__(self, groups: InMemoryGroups):
        self.events: dict[int, Event] = {}
        self._groups = groups
        groups.events = self
        self._next_id = 1
        self._lock = threading.Lock()
        self.fail_transition_ids: set[int] = set()
        self.attendance: Optional["InMemoryAttendance"] = None

    def add(self, *, group_id: int = 1, name: str = "Event", scheduled_time: datetime = T0,
            duration_minutes: int = 30, state: EventState = EventState.CLOSED, access_code: Optional[str] = None) -> Event:
        eid = self._next_id
        self._next_id += 1
        event = Event(
            event_id=eid,
            group_id=group_id,
            name=name,
            scheduled_time=scheduled_time,
            duration_minutes=duration_minutes,
            state=state,
            access_code=access_code or f"CODE{eid:04d}",
        )
        self.events[eid] = event
        return event

    def create(self, *, group_id, name, scheduled_time, duration_minutes, access_code, qr_code_data) -> Event:
        with self._lock:
            if any(e.access_code == access_code for e in self.events.values()):
                raise DuplicateAccessCodeError(access_code)
            event = self.add(
                group_id=group_id,
                name=name,
                scheduled_time=scheduled_time,
                duration_minutes=duration_minutes,
                access_code=access_code,
            )
            event = replace(event, qr_code_data=qr_code_data)
            self.events[event.event_id] = event
            return event

    def get_by_id(self, event_id: int) -> Optional[Event]:
        return self.events.get(int(event_id))

    def get_by_access_code(self, access_code: str) -> Optional[Event]:
        return next((e for e in self.events.values() if e.access_code == access_code), None)

    def get_for_organizer(self, event_id: int, organizer_id: int) -> Optional[Event]:
        event = self.events.get(int(event_id))
        if event and self._groups.get_for_organizer(event.group_id, organizer_id):
            return event
        return None

    def list_for_group(self, group_id: int):
        return sorted((e for e in self.events.values() if e.group_id == group_id), key=lambda e: e.scheduled_time)

    def list_closed_due(self, now: datetime):
        return [
            e
            for e in self.events.values()
            if e.state == EventState.CLOSED and is_within_window(e.scheduled_time, e.duration_minutes, now)
        ]

    def list_open(self):
        return [e for e in self.events.values() if e.state == EventState.OPEN]

    def update_details(self, event_id: int, *, name, scheduled_time, duration_minutes) -> bool:
        event = self.events.get(event_id)
        if not event:
            return False
        self.events[event_id] = replace(event, name=name, scheduled_time=scheduled_time, duration_minutes=duration_minutes)
        return True

    def transition_state(self, event_id: int, *, from_state: EventState, to_state: EventState) -> bool:
        if event_id in self.fail_transition_ids:
            raise TransientStoreError("connection reset")
        with self._lock:
            event = self.events.get(event_id)
            if not event or event.state != from_state:
                return False
            self.events[event_id] = replace(event, state=to_state)
            return True

    def delete(self, event_id: int) -> bool:
        if self.events.pop(event_id, None) is None:
            return False
        if self.attendance is not None:
            self.attendance.delete_for_event(event_id)
        return True


class InMemoryParticipants:
    def __init__(self):
        self.by_email: dict[str, Participant] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def get_by_email(self, email: str) -> Optional[Participant]:
        return self.by_email.get(email)

    def upsert_by_email(self, *, email: str, name: str, phone: Optional[str]) -> Participant:
        with self._lock:
            existing = self.by_email.get(email)
            if existing:
                updated = replace(existing, name=name, phone=phone if phone is not None else existing.phone)
            else:
                updated = Participant(participant_id=self._next_id, email=email, name=name, phone=phone)
                self._next_id += 1
            self.by_email[email] = updated
            return updated

    def get_by_id(self, participant_id: int) -> Optional[Participant]:
        return next((p for p in self.by_email.values() if p.participant_id == participant_id), None)


class InMemoryAttendance:
    """Unique (event_id, participant_id) enforced atomically under a lock, like a DB unique key."""

    def __init__(self, events: InMemoryEvents, participants: InMemoryParticipants):
        self.rows: dict[tuple[int, int], Attendance] = {}
        self._events = events
        self._participants = participants
        events.attendance = self
        self._next_id = 1
        self._lock = threading.Lock()

    def create(self, *, event_id: int, participant_id: int, confirmed_at: datetime) -> Attendance:
        with self._lock:
            existing = self.rows.get((event_id, participant_id))
            if existing:
                raise AlreadyConfirmedError(existing.confirmed_at)
            row = Attendance(
                attendance_id=self._next_id,
                event_id=event_id,
                participant_id=participant_id,
                confirmed_at=confirmed_at,
            )
            self._next_id += 1
            self.rows[(event_id, participant_id)] = row
            return row

    def get_for_event_and_participant(self, event_id: int, participant_id: int) -> Optional[Attendance]:
        return self.rows.get((event_id, participant_id))

    def delete_for_event(self, event_id: int) -> None:
        for key in [k for k in self.rows if k[0] == event_id]:
            del self.rows[key]

    def _sorted_for_event(self, event_id: int):
        return sorted(
            (a for a in self.rows.values() if a.event_id == event_id),
            key=lambda a: (a.confirmed_at, a.attendance_id),
            reverse=True,
        )

    def list_attendees(self, event_id: int):
        out = []
        for a in self._sorted_for_event(event_id):
            p = self._participants.get_by_id(a.participant_id)
            out.append(
                AttendeeRow(
                    attendance_id=a.attendance_id,
                    confirmed_at=a.confirmed_at,
                    participant_id=p.participant_id,
                    name=p.name,
                    email=p.email,
                    phone=p.phone,
                )
            )
        return out

    def _record(self, a: Attendance) -> AttendanceExportRecord:
        event = self._events.get_by_id(a.event_id)
        p = self._participants.get_by_id(a.participant_id)
        return AttendanceExportRecord(
            attendance_id=a.attendance_id,
            confirmed_at=a.confirmed_at,
            event_name=event.name if event else None,
            participant_name=p.name if p else None,
            participant_email=p.email if p else None,
        )

    def list_export_records_for_event(self, event_id: int):
        return [self._record(a) for a in self._sorted_for_event(event_id)]

    def list_export_records_for_group(self, group_id: int):
        out = []
        for event in self._events.list_for_group(group_id):
            out.extend(self._record(a) for a in self._sorted_for_event(event.event_id))
        return out


class ScriptedCursor:
    """Records executed SQL. Each execute consumes the next queued outcome:
    a list of row dicts, or an exception to raise."""

    def __init__(self, outcomes, lastrowid):
        self.outcomes = list(outcomes)
        self.executed: list[tuple[str, tuple]] = []
        self.lastrowid = lastrowid
        self.rowcount = 0
        self._rows: list[dict] = []

    def execute(self, sql, params=()):
        self.executed.append((" ".join(sql.split()), tuple(params)))
        outcome = self.outcomes.pop(0) if self.outcomes else []
        if isinstance(outcome, BaseException):
            raise outcome
        self._rows = list(outcome)
        self.rowcount = len(self._rows)

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)

    def close(self):
        pass


class ScriptedConnection:
    """Stands in for both the connection factory and the connection."""

    def __init__(self, *outcomes, lastrowid: int = 1):
        self.cur = ScriptedCursor(outcomes, lastrowid)

    def connect(self):
        return self

    def cursor(self, dictionary=True):
        return self.cur

    def commit(self):
        pass

    def rollback(self):
        pass

    def close(self):
        pass


class RecordingNotifier:
    def __init__(self, *, fail: bool = False):
        self.sent: list[dict] = []
        self.fail = fail

    def send_attendance_confirmation(self, *, to, participant_name, event_name, confirmed_at) -> None:
        if self.fail:
            raise RuntimeError("SMTP down")
        self.sent.append(
            {"to": to, "participant_name": participant_name, "event_name": event_name, "confirmed_at": confirmed_at}
        )

    def send_event_reminder(self, *, to, participant_name, event_name, scheduled_time) -> None:
        self.sent.append({"to": to, "event_name": event_name, "scheduled_time": scheduled_time})


class Clock:
    """Settable clock shared by services under test."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def users() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def groups() -> InMemoryGroups:
    return InMemoryGroups()


@pytest.fixture
def events(groups) -> InMemoryEvents:
    return InMemoryEvents(groups)


@pytest.fixture
def participants() -> InMemoryParticipants:
    return InMemoryParticipants()


@pytest.fixture
def attendance(events, participants) -> InMemoryAttendance:
    return InMemoryAttendance(events, participants)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def attendance_service(attendance, events, participants, notifier, clock) -> AttendanceService:
    return AttendanceService(attendance, events, participants, notifier=notifier, clock=clock)
