from __future__ import annotations

from typing import Optional, Protocol

from .model import Task


class TaskRepository(Protocol):
    def get_by_id(self, task_id: str) -> Optional[Task]:
        raise NotImplementedError

    def get_by_pack_code(self, sealed_pack_code: str) -> Optional[Task]:
        raise NotImplementedError

    def insert(self, task: Task) -> None:
        """Persist a new task. Status and the suspicious flag change only
        through ``TaskEventRepository.append``."""

        raise NotImplementedError
