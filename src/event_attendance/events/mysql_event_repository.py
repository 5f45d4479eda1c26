from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..common.datetime_utils import from_db, to_db
from ..core.enums import EventState
from ..core.exceptions import DuplicateAccessCodeError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_name, fetchall, fetchone, is_duplicate_key
from .model import Event
from .repository import EventRepository

_EVENT_COLUMNS = """
    e.event_id, e.group_id, e.name, e.scheduled_time, e.duration_minutes,
    e.state, e.access_code, e.qr_code_data, e.created_at
"""

# Sweep queries skip the QR payload.
_SCHEDULE_COLUMNS = """
    e.event_id, e.group_id, e.name, e.scheduled_time, e.duration_minutes,
    e.state, e.access_code, e.created_at
"""


def _to_event(r: Dict[str, Any]) -> Event:
    return Event(
        event_id=int(r["event_id"]),
        group_id=int(r["group_id"]),
        name=r["name"],
        scheduled_time=from_db(r["scheduled_time"]),
        duration_minutes=int(r["duration_minutes"]),
        state=EventState(r["state"]),
        access_code=r["access_code"],
        qr_code_data=r.get("qr_code_data"),
        created_at=from_db(r.get("created_at")),
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        group_id: int,
        name: str,
        scheduled_time: datetime,
        duration_minutes: int,
        access_code: str,
        qr_code_data: Optional[str],
    ) -> Event:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO events(group_id, name, scheduled_time, duration_minutes, state, access_code, qr_code_data)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(group_id),
                        name,
                        to_db(scheduled_time),
                        int(duration_minutes),
                        EventState.CLOSED.value,
                        access_code,
                        qr_code_data,
                    ),
                )
                event_id = int(cur.lastrowid)
        except mysql.connector.errors.IntegrityError as exc:
            if is_duplicate_key(exc) and duplicate_key_name(exc) == "uq_events_access_code":
                raise DuplicateAccessCodeError(access_code) from exc
            raise

        event = self.get_by_id(event_id)
        if event is None:
            raise RuntimeError(f"Event {event_id} vanished right after insert")
        return event

    def _get_one(self, where: str, params: tuple) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_EVENT_COLUMNS}
                FROM events e
                JOIN event_groups g ON g.group_id = e.group_id
                WHERE {where}
                """,
                params,
            )
            r = fetchone(cur)
            return _to_event(r) if r else None

    def get_by_id(self, event_id: int) -> Optional[Event]:
        return self._get_one("e.event_id=%s", (int(event_id),))

    def get_by_access_code(self, access_code: str) -> Optional[Event]:
        return self._get_one("e.access_code=%s", (access_code,))

    def get_for_organizer(self, event_id: int, organizer_id: int) -> Optional[Event]:
        return self._get_one("e.event_id=%s AND g.organizer_id=%s", (int(event_id), int(organizer_id)))

    def _list(self, where: str, params: tuple, order_by: str, *, columns: str = _EVENT_COLUMNS) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {columns}
                FROM events e
                WHERE {where}
                ORDER BY {order_by}
                """,
                params,
            )
            return [_to_event(r) for r in fetchall(cur)]

    def list_for_group(self, group_id: int) -> Sequence[Event]:
        return self._list("e.group_id=%s", (int(group_id),), "e.scheduled_time ASC, e.event_id ASC")

    def list_closed_due(self, now: datetime) -> Sequence[Event]:
        at = to_db(now)
        return self._list(
            "e.state=%s AND e.scheduled_time <= %s"
            " AND DATE_ADD(e.scheduled_time, INTERVAL e.duration_minutes MINUTE) >= %s",
            (EventState.CLOSED.value, at, at),
            "e.scheduled_time ASC",
            columns=_SCHEDULE_COLUMNS,
        )

    def list_open(self) -> Sequence[Event]:
        return self._list("e.state=%s", (EventState.OPEN.value,), "e.scheduled_time ASC", columns=_SCHEDULE_COLUMNS)

    def update_details(
        self,
        event_id: int,
        *,
        name: str,
        scheduled_time: datetime,
        duration_minutes: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE events
                SET name=%s, scheduled_time=%s, duration_minutes=%s
                WHERE event_id=%s
                """,
                (name, to_db(scheduled_time), int(duration_minutes), int(event_id)),
            )
            return cur.rowcount > 0

    def transition_state(self, event_id: int, *, from_state: EventState, to_state: EventState) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE events SET state=%s WHERE event_id=%s AND state=%s",
                (to_state.value, int(event_id), from_state.value),
            )
            return cur.rowcount > 0

    def delete(self, event_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM events WHERE event_id=%s", (int(event_id),))
            return cur.rowcount > 0
