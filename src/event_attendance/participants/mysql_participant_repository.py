from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Participant
from .repository import ParticipantRepository


class MySQLParticipantRepository(ParticipantRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_email(self, email: str) -> Optional[Participant]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT participant_id, email, name, phone FROM participants WHERE email=%s",
                (email,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Participant(
                participant_id=int(r["participant_id"]),
                email=r["email"],
                name=r["name"],
                phone=r.get("phone"),
            )

    def upsert_by_email(self, *, email: str, name: str, phone: Optional[str]) -> Participant:
        with db_cursor(self._conn_factory) as (_, cur):
            # LAST_INSERT_ID(expr) makes lastrowid the existing id on the update path.
            cur.execute(
                """
                INSERT INTO participants(email, name, phone)
                VALUES(%s,%s,%s) AS new
                ON DUPLICATE KEY UPDATE
                    participant_id=LAST_INSERT_ID(participants.participant_id),
                    name=new.name,
                    phone=COALESCE(new.phone, participants.phone)
                """,
                (email, name, phone),
            )
            participant_id = int(cur.lastrowid)
            cur.execute(
                "SELECT participant_id, email, name, phone FROM participants WHERE participant_id=%s",
                (participant_id,),
            )
            r = fetchone(cur)
            return Participant(
                participant_id=int(r["participant_id"]),
                email=r["email"],
                name=r["name"],
                phone=r.get("phone"),
            )
