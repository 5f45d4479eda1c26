from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

import mysql.connector

from ..common.datetime_utils import from_db, to_db
from ..core.exceptions import AlreadyConfirmedError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key, is_missing_reference
from .model import Attendance, AttendanceExportRecord, AttendeeRow
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, event_id: int, participant_id: int, confirmed_at: datetime) -> Attendance:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance(event_id, participant_id, confirmed_at)
                    VALUES(%s,%s,%s)
                    """,
                    (int(event_id), int(participant_id), to_db(confirmed_at)),
                )
                attendance_id = int(cur.lastrowid)
        except mysql.connector.errors.IntegrityError as exc:
            if is_missing_reference(exc):
                # Event deleted between the code lookup and this insert.
                raise NotFoundError("Event not found") from exc
            if not is_duplicate_key(exc):
                raise
            existing = self.get_for_event_and_participant(event_id, participant_id)
            raise AlreadyConfirmedError(existing.confirmed_at if existing else None) from exc

        return Attendance(
            attendance_id=attendance_id,
            event_id=int(event_id),
            participant_id=int(participant_id),
            confirmed_at=confirmed_at,
        )

    def get_for_event_and_participant(self, event_id: int, participant_id: int) -> Optional[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attendance_id, event_id, participant_id, confirmed_at
                FROM attendance
                WHERE event_id=%s AND participant_id=%s
                """,
                (int(event_id), int(participant_id)),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Attendance(
                attendance_id=int(r["attendance_id"]),
                event_id=int(r["event_id"]),
                participant_id=int(r["participant_id"]),
                confirmed_at=from_db(r["confirmed_at"]),
            )

    def list_attendees(self, event_id: int) -> Sequence[AttendeeRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT a.attendance_id, a.confirmed_at, p.participant_id, p.name, p.email, p.phone
                FROM attendance a
                JOIN participants p ON p.participant_id = a.participant_id
                WHERE a.event_id=%s
                ORDER BY a.confirmed_at DESC, a.attendance_id DESC
                """,
                (int(event_id),),
            )
            return [
                AttendeeRow(
                    attendance_id=int(r["attendance_id"]),
                    confirmed_at=from_db(r["confirmed_at"]),
                    participant_id=int(r["participant_id"]),
                    name=r["name"],
                    email=r["email"],
                    phone=r.get("phone"),
                )
                for r in fetchall(cur)
            ]

    def _export_records(self, where: str, params: tuple, order_by: str) -> Sequence[AttendanceExportRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT a.attendance_id, a.confirmed_at,
                       e.name AS event_name,
                       p.name AS participant_name, p.email AS participant_email
                FROM attendance a
                LEFT JOIN events e ON e.event_id = a.event_id
                LEFT JOIN participants p ON p.participant_id = a.participant_id
                WHERE {where}
                ORDER BY {order_by}
                """,
                params,
            )
            return [
                AttendanceExportRecord(
                    attendance_id=int(r["attendance_id"]),
                    confirmed_at=from_db(r["confirmed_at"]),
                    event_name=r.get("event_name"),
                    participant_name=r.get("participant_name"),
                    participant_email=r.get("participant_email"),
                )
                for r in fetchall(cur)
            ]

    def list_export_records_for_event(self, event_id: int) -> Sequence[AttendanceExportRecord]:
        return self._export_records(
            "a.event_id=%s",
            (int(event_id),),
            "a.confirmed_at DESC, a.attendance_id DESC",
        )

    def list_export_records_for_group(self, group_id: int) -> Sequence[AttendanceExportRecord]:
        return self._export_records(
            "a.event_id IN (SELECT event_id FROM events WHERE group_id=%s)",
            (int(group_id),),
            "e.scheduled_time ASC, e.event_id ASC, a.confirmed_at DESC, a.attendance_id DESC",
        )
