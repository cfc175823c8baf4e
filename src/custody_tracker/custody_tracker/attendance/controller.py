from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.images import read_image_upload
from ..common.web import client_ip, current_identity
from ..container import Container


def register(app: Flask, container: Container) -> None:
    max_image_bytes = container.options.max_image_bytes
    service = container.attendance_service

    @app.post("/api/tasks/<task_id>/attendance", endpoint="attendance_mark")
    def mark_attendance(task_id: str):
        user_id, _ = current_identity()
        image = read_image_upload(request.files.get("image"), max_bytes=max_image_bytes)
        record = service.mark_attendance(
            task_id,
            agent_id=user_id,
            location_type=request.form.get("location_type"),
            image=image,
            latitude=request.form.get("latitude"),
            longitude=request.form.get("longitude"),
            ip_address=client_ip(),
        )
        return jsonify({"success": True, "message": service.describe(record), "attendance": record.to_dict()}), 201

    @app.get("/api/tasks/<task_id>/attendance", endpoint="attendance_list")
    def list_attendance(task_id: str):
        user_id, role = current_identity()
        records = service.list_attendance(task_id, user_id=user_id, role=role)
        return jsonify({"success": True, "attendance": [r.to_dict() for r in records]})
