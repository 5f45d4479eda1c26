from __future__ import annotations

from typing import Optional, Sequence

from ..common.datetime_utils import from_db
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import EventGroup
from .repository import EventGroupRepository


class MySQLEventGroupRepository(EventGroupRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, organizer_id: int, name: str, description: Optional[str]) -> EventGroup:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO event_groups(organizer_id, name, description) VALUES(%s,%s,%s)",
                (int(organizer_id), name, description),
            )
            group_id = int(cur.lastrowid)

        group = self.get_for_organizer(group_id, organizer_id)
        if group is None:
            raise RuntimeError(f"Event group {group_id} vanished right after insert")
        return group

    def get_for_organizer(self, group_id: int, organizer_id: int) -> Optional[EventGroup]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT group_id, organizer_id, name, description, created_at
                FROM event_groups
                WHERE group_id=%s AND organizer_id=%s
                """,
                (int(group_id), int(organizer_id)),
            )
            r = fetchone(cur)
            if not r:
                return None
            return EventGroup(
                group_id=int(r["group_id"]),
                organizer_id=int(r["organizer_id"]),
                name=r["name"],
                description=r.get("description"),
                created_at=from_db(r.get("created_at")),
            )

    def list_for_organizer(self, organizer_id: int) -> Sequence[EventGroup]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT group_id, organizer_id, name, description, created_at
                FROM event_groups
                WHERE organizer_id=%s
                ORDER BY created_at DESC, group_id DESC
                """,
                (int(organizer_id),),
            )
            return [
                EventGroup(
                    group_id=int(r["group_id"]),
                    organizer_id=int(r["organizer_id"]),
                    name=r["name"],
                    description=r.get("description"),
                    created_at=from_db(r.get("created_at")),
                )
                for r in fetchall(cur)
            ]

    def update(self, group_id: int, *, name: str, description: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE event_groups SET name=%s, description=%s WHERE group_id=%s",
                (name, description, int(group_id)),
            )
            return cur.rowcount > 0

    def delete(self, group_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM event_groups WHERE group_id=%s", (int(group_id),))
            return cur.rowcount > 0
