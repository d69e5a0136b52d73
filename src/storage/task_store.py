from __future__ import annotations

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from pydantic import ValidationError

from agenda_ai.errors import TaskStoreError
from agenda_ai.models import Task

logger = logging.getLogger(__name__)


class TaskStore(ABC):
    """Persistence collaborator. Failures surface as TaskStoreError."""

    @abstractmethod
    def create_task(self, fields: Dict[str, Any]) -> str:
        raise NotImplementedError

    @abstractmethod
    def update_task(self, task_id: str, fields: Dict[str, Any]) -> Task:
        raise NotImplementedError

    @abstractmethod
    def delete_task(self, task_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_tasks(self) -> List[Task]:
        raise NotImplementedError


class InMemoryTaskStore(TaskStore):
    def __init__(self, tasks: List[Task] = None):
        self._tasks: Dict[str, Task] = {}
        self._lock = threading.Lock()
        for task in tasks or []:
            task_id = task.id or uuid.uuid4().hex
            self._tasks[task_id] = task.model_copy(update={"id": task_id})

    def create_task(self, fields: Dict[str, Any]) -> str:
        task_id = uuid.uuid4().hex
        try:
            task = Task(**{**fields, "id": task_id})
        except ValidationError as e:
            raise TaskStoreError(f"invalid task: {e}") from e
        with self._lock:
            self._tasks[task_id] = task
        logger.info("Created task %s (%r)", task_id, task.title)
        return task_id

    def update_task(self, task_id: str, fields: Dict[str, Any]) -> Task:
        with self._lock:
            current = self._tasks.get(task_id)
            if current is None:
                raise TaskStoreError(f"unknown task id: {task_id}")
            try:
                updated = Task(**{**current.model_dump(), **fields, "id": task_id})
            except ValidationError as e:
                raise TaskStoreError(f"invalid update for {task_id}: {e}") from e
            self._tasks[task_id] = updated
        logger.info("Updated task %s: %s", task_id, sorted(fields))
        return updated

    def delete_task(self, task_id: str) -> None:
        with self._lock:
            removed = self._tasks.pop(task_id, None)
        if removed is None:
            raise TaskStoreError(f"unknown task id: {task_id}")
        logger.info("Deleted task %s", task_id)

    def list_tasks(self) -> List[Task]:
        with self._lock:
            return list(self._tasks.values())
