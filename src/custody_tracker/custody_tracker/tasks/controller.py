from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_identity
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.get("/api/tasks/<task_id>", endpoint="task_detail")
    def task_detail(task_id: str):
        user_id, role = current_identity()
        task = container.task_service.get_for_viewer(task_id, user_id=user_id, role=role)
        return jsonify(task.to_dict())
