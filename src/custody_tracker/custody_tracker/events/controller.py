from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.images import read_image_upload
from ..common.web import client_ip, current_identity
from ..container import Container


def register(app: Flask, container: Container) -> None:
    max_image_bytes = container.options.max_image_bytes

    @app.post("/api/tasks/<task_id>/events", endpoint="task_events_create")
    def create_event(task_id: str):
        """Multipart upload: image, event_type, latitude, longitude.

        Any client-supplied timestamp is ignored; the server assigns it.
        """
        user_id, _ = current_identity()
        image = read_image_upload(request.files.get("image"), max_bytes=max_image_bytes)
        event = container.event_service.submit(
            task_id,
            agent_id=user_id,
            event_type=request.form.get("event_type"),
            image=image,
            latitude=request.form.get("latitude"),
            longitude=request.form.get("longitude"),
            ip_address=client_ip(),
        )
        return jsonify(event.to_dict()), 201

    @app.get("/api/tasks/<task_id>/events", endpoint="task_events_list")
    def list_events(task_id: str):
        user_id, role = current_identity()
        events = container.event_service.list_events(task_id, user_id=user_id, role=role)
        return jsonify([e.to_dict() for e in events])

    @app.get("/api/tasks/<task_id>/events/allowed", endpoint="task_events_allowed")
    def allowed_events(task_id: str):
        user_id, role = current_identity()
        allowed = container.event_service.allowed_events(task_id, user_id=user_id, role=role)
        return jsonify(allowed.to_dict())
