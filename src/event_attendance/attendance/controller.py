from __future__ import annotations

from flask import Flask, g, request, send_file

from ..common.http import bearer_required, iso, json_body, ok
from ..common.validators import require_export_format
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/confirm", methods=["POST"], endpoint="attendance_confirm")
    def attendance_confirm():
        """Public check-in by access code (typed or scanned from the QR image)."""
        body = json_body()
        result = container.attendance_service.confirm_attendance(
            body.get("accessCode", body.get("access_code", "")),
            body.get("participantName", body.get("participant_name", "")),
            body.get("participantEmail", body.get("participant_email", "")),
            body.get("participantPhone", body.get("participant_phone")),
        )
        return ok(
            {
                "event": {"id": result.event_id, "name": result.event_name},
                "participant": {
                    "id": result.participant_id,
                    "name": result.participant_name,
                    "email": result.participant_email,
                },
                "confirmed_at": iso(result.confirmed_at),
            },
            message="Attendance confirmed successfully",
            status=201,
        )

    def _send_export(path):
        return send_file(path, as_attachment=True, download_name=path.name)

    @app.route("/api/attendance/export/<int:event_id>", methods=["GET"], endpoint="attendance_export_event")
    @bearer_required
    def attendance_export_event(event_id: int):
        fmt = require_export_format(request.args.get("format"))
        path = container.export_service.export_event(organizer_id=g.organizer.user_id, event_id=event_id, fmt=fmt)
        return _send_export(path)

    @app.route("/api/attendance/export/group/<int:group_id>", methods=["GET"], endpoint="attendance_export_group")
    @bearer_required
    def attendance_export_group(group_id: int):
        fmt = require_export_format(request.args.get("format"))
        path = container.export_service.export_group(organizer_id=g.organizer.user_id, group_id=group_id, fmt=fmt)
        return _send_export(path)
