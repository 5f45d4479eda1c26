from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Callable, Optional, Sequence

from ..attendance.model import AttendanceExportRecord
from ..attendance.repository import AttendanceRepository
from ..core.constants import DEFAULT_EXPORT_MAX_AGE_HOURS
from ..core.enums import ExportFormat
from ..core.exceptions import NotFoundError
from ..events.repository import EventGroupRepository, EventRepository
from .formatter import format_records, to_csv, to_xlsx

logger = logging.getLogger(__name__)


class ExportService:
    """Use case: organizers download attendance for an event or a whole group."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        events: EventRepository,
        groups: EventGroupRepository,
        *,
        export_dir: str | Path,
        timestamp: Callable[[], int] = lambda: int(time.time() * 1000),
    ):
        self._attendance = attendance
        self._events = events
        self._groups = groups
        self._export_dir = Path(export_dir).resolve()
        self._timestamp = timestamp

    @property
    def export_dir(self) -> Path:
        return self._export_dir

    def export_event(self, *, organizer_id: int, event_id: int, fmt: ExportFormat = ExportFormat.CSV) -> Path:
        event = self._events.get_for_organizer(event_id, organizer_id)
        if not event:
            raise NotFoundError("Event not found")

        records = self._attendance.list_export_records_for_event(event.event_id)
        return self._write(records, f"event_{event.event_id}_attendance_{self._timestamp()}", fmt)

    def export_group(self, *, organizer_id: int, group_id: int, fmt: ExportFormat = ExportFormat.CSV) -> Path:
        group = self._groups.get_for_organizer(group_id, organizer_id)
        if not group:
            raise NotFoundError("Event group not found")

        records = self._attendance.list_export_records_for_group(group.group_id)
        return self._write(records, f"group_{group.group_id}_attendance_{self._timestamp()}", fmt)

    def _write(self, records: Sequence[AttendanceExportRecord], stem: str, fmt: ExportFormat) -> Path:
        rows = format_records(records)
        path = self._export_dir / f"{stem}.{fmt.value}"
        if fmt == ExportFormat.XLSX:
            to_xlsx(rows, path)
        else:
            to_csv(rows, path)
        logger.info("%s export created: %s (%s rows)", fmt.value.upper(), path, len(rows))
        return path

    def cleanup_old_exports(self, max_age_hours: float = DEFAULT_EXPORT_MAX_AGE_HOURS, *, now: Optional[float] = None) -> int:
        """Delete export files older than ``max_age_hours``. Returns how many were removed."""

        if not self._export_dir.is_dir():
            return 0

        now = time.time() if now is None else now
        max_age = max_age_hours * 3600
        removed = 0
        for path in self._export_dir.iterdir():
            if not path.is_file() or path.suffix not in {".csv", ".xlsx"}:
                continue
            try:
                if now - path.stat().st_mtime > max_age:
                    path.unlink()
                    removed += 1
                    logger.info("Deleted old export file: %s", path.name)
            except OSError:
                logger.warning("Could not remove export file %s", path, exc_info=True)
        return removed
