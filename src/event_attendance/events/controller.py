from __future__ import annotations

import io

from flask import Flask, g, send_file

from ..codes.generator import render_qr_png
from ..common.http import bearer_required, iso, json_body, ok
from ..container import Container
from .model import Event, EventGroup
from .timing import event_end_time


def group_to_dict(group: EventGroup) -> dict:
    return {
        "id": group.group_id,
        "name": group.name,
        "description": group.description,
        "created_at": iso(group.created_at),
    }


def event_to_dict(event: Event, *, include_qr: bool = True) -> dict:
    data = {
        "id": event.event_id,
        "event_group_id": event.group_id,
        "name": event.name,
        "scheduled_time": iso(event.scheduled_time),
        "end_time": iso(event_end_time(event.scheduled_time, event.duration_minutes)),
        "duration": event.duration_minutes,
        "state": event.state.value,
        "access_code": event.access_code,
    }
    if include_qr:
        data["qr_code_data"] = event.qr_code_data
    return data


def register(app: Flask, container: Container) -> None:
    # ---- Event groups ----

    @app.route("/api/event-groups", methods=["POST"], endpoint="group_create")
    @bearer_required
    def group_create():
        body = json_body()
        group = container.group_service.create_group(
            organizer_id=g.organizer.user_id,
            name=body.get("name", ""),
            description=body.get("description"),
        )
        return ok(group_to_dict(group), message="Event group created successfully", status=201)

    @app.route("/api/event-groups", methods=["GET"], endpoint="group_list")
    @bearer_required
    def group_list():
        organizer_id = g.organizer.user_id
        data = []
        for group in container.group_service.list_groups(organizer_id=organizer_id):
            item = group_to_dict(group)
            item["events"] = [
                event_to_dict(e, include_qr=False)
                for e in container.group_service.list_group_events(organizer_id=organizer_id, group_id=group.group_id)
            ]
            data.append(item)
        return ok(data)

    @app.route("/api/event-groups/<int:group_id>", methods=["GET"], endpoint="group_detail")
    @bearer_required
    def group_detail(group_id: int):
        organizer_id = g.organizer.user_id
        group = container.group_service.get_group(organizer_id=organizer_id, group_id=group_id)
        data = group_to_dict(group)
        data["events"] = [
            event_to_dict(e) for e in container.group_service.list_group_events(organizer_id=organizer_id, group_id=group_id)
        ]
        return ok(data)

    @app.route("/api/event-groups/<int:group_id>", methods=["PUT"], endpoint="group_update")
    @bearer_required
    def group_update(group_id: int):
        body = json_body()
        group = container.group_service.update_group(
            organizer_id=g.organizer.user_id,
            group_id=group_id,
            name=body.get("name", ""),
            description=body.get("description"),
        )
        return ok(group_to_dict(group), message="Event group updated successfully")

    @app.route("/api/event-groups/<int:group_id>", methods=["DELETE"], endpoint="group_delete")
    @bearer_required
    def group_delete(group_id: int):
        container.group_service.delete_group(organizer_id=g.organizer.user_id, group_id=group_id)
        return ok(message="Event group deleted successfully")

    # ---- Events ----

    @app.route("/api/events", methods=["POST"], endpoint="event_create")
    @bearer_required
    def event_create():
        body = json_body()
        event = container.event_service.create_event(
            organizer_id=g.organizer.user_id,
            group_id=body.get("eventGroupId", body.get("event_group_id")),
            name=body.get("name", ""),
            scheduled_time=body.get("scheduledTime", body.get("scheduled_time")),
            duration_minutes=body.get("duration"),
        )
        return ok(event_to_dict(event), message="Event created successfully", status=201)

    @app.route("/api/events/<int:event_id>", methods=["GET"], endpoint="event_detail")
    @bearer_required
    def event_detail(event_id: int):
        event = container.event_service.get_event(organizer_id=g.organizer.user_id, event_id=event_id)
        return ok(event_to_dict(event))

    @app.route("/api/events/<int:event_id>", methods=["PUT"], endpoint="event_update")
    @bearer_required
    def event_update(event_id: int):
        body = json_body()
        event = container.event_service.update_event(
            organizer_id=g.organizer.user_id,
            event_id=event_id,
            name=body.get("name"),
            scheduled_time=body.get("scheduledTime", body.get("scheduled_time")),
            duration_minutes=body.get("duration"),
        )
        return ok(event_to_dict(event), message="Event updated successfully")

    @app.route("/api/events/<int:event_id>", methods=["DELETE"], endpoint="event_delete")
    @bearer_required
    def event_delete(event_id: int):
        container.event_service.delete_event(organizer_id=g.organizer.user_id, event_id=event_id)
        return ok(message="Event deleted successfully")

    @app.route("/api/events/<int:event_id>/attendees", methods=["GET"], endpoint="event_attendees")
    @bearer_required
    def event_attendees(event_id: int):
        event = container.event_service.get_event(organizer_id=g.organizer.user_id, event_id=event_id)
        attendees = container.attendance_service.list_attendees(event_id=event.event_id)
        return ok(
            {
                "event": {
                    "id": event.event_id,
                    "name": event.name,
                    "scheduled_time": iso(event.scheduled_time),
                    "state": event.state.value,
                },
                "attendees": [
                    {
                        "id": a.attendance_id,
                        "participant": {"id": a.participant_id, "name": a.name, "email": a.email, "phone": a.phone},
                        "confirmed_at": iso(a.confirmed_at),
                    }
                    for a in attendees
                ],
                "total": len(attendees),
            }
        )

    @app.route("/api/events/<int:event_id>/qr.png", methods=["GET"], endpoint="event_qr_image")
    @bearer_required
    def event_qr_image(event_id: int):
        event = container.event_service.get_event(organizer_id=g.organizer.user_id, event_id=event_id)
        buf = io.BytesIO(render_qr_png(event.access_code))
        return send_file(buf, mimetype="image/png", download_name=f"event_{event.event_id}_qr.png")
