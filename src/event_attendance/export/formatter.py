"""Render attendance records into CSV / XLSX files.

Rows keep the caller's order. Files are written to a temporary sibling and
renamed into place, so a failed export never leaves a partial file behind.
"""

from __future__ import annotations

import csv
import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Sequence

import pandas as pd
from openpyxl.utils import get_column_letter

from ..common.datetime_utils import format_local
from ..core.constants import EXPORT_COLUMN_WIDTHS, EXPORT_HEADERS, EXPORT_SHEET_NAME, MISSING_VALUE
from ..core.exceptions import NothingToExportError
from ..attendance.model import AttendanceExportRecord


@dataclass(frozen=True)
class ExportRow:
    event_name: str
    participant_name: str
    participant_email: str
    confirmed_at: str

    def as_tuple(self) -> tuple[str, str, str, str]:
        return (self.event_name, self.participant_name, self.participant_email, self.confirmed_at)


def format_records(records: Sequence[AttendanceExportRecord]) -> list[ExportRow]:
    return [
        ExportRow(
            event_name=r.event_name or MISSING_VALUE,
            participant_name=r.participant_name or MISSING_VALUE,
            participant_email=r.participant_email or MISSING_VALUE,
            confirmed_at=format_local(r.confirmed_at) if r.confirmed_at else MISSING_VALUE,
        )
        for r in records
    ]


def _require_rows(rows: Sequence[ExportRow]) -> None:
    if not rows:
        raise NothingToExportError("No attendance records found, nothing to export")


@contextmanager
def atomic_output(path: str | Path) -> Iterator[Path]:
    """Yield a temp path next to ``path``; move it into place only on success."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.stem}-", suffix=target.suffix, dir=target.parent)
    os.close(fd)
    tmp = Path(tmp_name)
    try:
        yield tmp
        os.replace(tmp, target)
    finally:
        if tmp.exists():
            tmp.unlink()


def to_csv(rows: Sequence[ExportRow], path: str | Path) -> Path:
    _require_rows(rows)
    with atomic_output(path) as tmp:
        with tmp.open("w", newline="", encoding="utf-8") as fh:
            writer = csv.writer(fh)
            writer.writerow(EXPORT_HEADERS)
            for row in rows:
                writer.writerow(row.as_tuple())
    return Path(path)


def to_xlsx(rows: Sequence[ExportRow], path: str | Path) -> Path:
    _require_rows(rows)
    df = pd.DataFrame([row.as_tuple() for row in rows], columns=list(EXPORT_HEADERS))

    with atomic_output(path) as tmp:
        with pd.ExcelWriter(tmp, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name=EXPORT_SHEET_NAME)
            sheet = writer.sheets[EXPORT_SHEET_NAME]
            for idx, width in enumerate(EXPORT_COLUMN_WIDTHS, start=1):
                sheet.column_dimensions[get_column_letter(idx)].width = width
    return Path(path)
