from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_SWEEP_INTERVAL_SECONDS, DEFAULT_TOKEN_TTL_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .events.mysql_event_group_repository import MySQLEventGroupRepository
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventGroupRepository, EventRepository
from .events.service import EventGroupService, EventService
from .export.service import ExportService
from .notifications.mailer import AttendanceNotifier, build_notifier
from .participants.mysql_participant_repository import MySQLParticipantRepository
from .participants.repository import ParticipantRepository
from .scheduler.service import EventStateScheduler
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, TokenService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    groups_repo: EventGroupRepository
    events_repo: EventRepository
    participants_repo: ParticipantRepository
    attendance_repo: AttendanceRepository

    notifier: AttendanceNotifier
    auth_service: AuthService
    group_service: EventGroupService
    event_service: EventService
    attendance_service: AttendanceService
    export_service: ExportService
    scheduler: EventStateScheduler


def wire_container(
    *,
    users_repo: UserRepository,
    groups_repo: EventGroupRepository,
    events_repo: EventRepository,
    participants_repo: ParticipantRepository,
    attendance_repo: AttendanceRepository,
    notifier: AttendanceNotifier,
    secret_key: str,
    export_dir: str | Path,
    sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    token_ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS,
) -> Container:
    """Build services on top of any repository implementations."""

    return Container(
        users_repo=users_repo,
        groups_repo=groups_repo,
        events_repo=events_repo,
        participants_repo=participants_repo,
        attendance_repo=attendance_repo,
        notifier=notifier,
        auth_service=AuthService(users_repo, TokenService(secret_key, ttl_hours=token_ttl_hours)),
        group_service=EventGroupService(groups_repo, events_repo),
        event_service=EventService(events_repo, groups_repo),
        attendance_service=AttendanceService(attendance_repo, events_repo, participants_repo, notifier=notifier),
        export_service=ExportService(attendance_repo, events_repo, groups_repo, export_dir=export_dir),
        scheduler=EventStateScheduler(events_repo, interval_seconds=sweep_interval_seconds),
    )


def build_container(
    *,
    db_config: dict,
    secret_key: str,
    export_dir: str | Path,
    smtp_config: Optional[dict] = None,
    sweep_interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
    token_ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    return wire_container(
        users_repo=MySQLUserRepository(conn),
        groups_repo=MySQLEventGroupRepository(conn),
        events_repo=MySQLEventRepository(conn),
        participants_repo=MySQLParticipantRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        notifier=build_notifier(smtp_config),
        secret_key=secret_key,
        export_dir=export_dir,
        sweep_interval_seconds=sweep_interval_seconds,
        token_ttl_hours=token_ttl_hours,
    )
