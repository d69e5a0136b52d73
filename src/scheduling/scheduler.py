from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, Iterable, Optional

from pydantic import BaseModel, ValidationError, field_validator

from agenda_ai.errors import NoSuitableSlot, TaskStoreError
from agenda_ai.models import AssistantPreferences, CommandResult, Task
from agenda_ai.timeutils import format_date, normalize_clock
from scheduling.conflict_detector import ConflictDetector
from scheduling.slot_finder import SlotFinder
from storage.task_store import TaskStore

logger = logging.getLogger(__name__)

SCHEDULE_FIELDS = ("scheduled_date", "start_time", "duration")

CONFLICT_MESSAGE = "Existem conflitos com o novo horário. Deseja continuar mesmo assim?"
STORE_ERROR_MESSAGE = "Ocorreu um erro ao reagendar a tarefa. Por favor, tente novamente."


class RescheduleRequest(BaseModel):
    task_id: str
    new_date: Optional[str] = None
    new_time: Optional[str] = None

    @field_validator("new_date")
    @classmethod
    def valid_date(cls, v: Optional[str]) -> Optional[str]:
        return date.fromisoformat(v).isoformat() if v is not None else v

    @field_validator("new_time")
    @classmethod
    def valid_time(cls, v: Optional[str]) -> Optional[str]:
        return normalize_clock(v) if v is not None else v


class Scheduler:
    """Moves existing tasks, refusing conflicting moves unless forced."""

    def __init__(
        self,
        detector: Optional[ConflictDetector] = None,
        slot_finder: Optional[SlotFinder] = None,
        preferences: Optional[AssistantPreferences] = None,
    ):
        self.detector = detector or ConflictDetector()
        self.slot_finder = slot_finder or SlotFinder()
        self.preferences = preferences or AssistantPreferences()

    def reschedule(
        self,
        request: RescheduleRequest,
        all_tasks: Iterable[Task],
        store: TaskStore,
        force: bool = False,
        today: Optional[date] = None,
    ) -> CommandResult:
        tasks = list(all_tasks)
        task = next((t for t in tasks if t.id == request.task_id), None)
        if task is None:
            return CommandResult(success=False, message="Tarefa não encontrada.")

        changes: Dict[str, Any] = {}
        if request.new_date:
            changes["scheduled_date"] = request.new_date
        if request.new_time:
            changes["start_time"] = request.new_time
        if not changes:
            slot = self.slot_finder.find_slot(
                task,
                tasks,
                horizon_days=self.preferences.horizon_days,
                work_hours=self.preferences.work_hours,
                today=today,
            )
            if slot is None:
                raise NoSuitableSlot(
                    f"Não encontrei um horário livre para \"{task.title}\" "
                    f"nos próximos {self.preferences.horizon_days} dias."
                )
            changes = {"scheduled_date": slot.date, "start_time": slot.time}

        return self.apply_update(task, changes, tasks, store, force=force)

    def apply_update(
        self,
        task: Task,
        changes: Dict[str, Any],
        all_tasks: Iterable[Task],
        store: TaskStore,
        force: bool = False,
    ) -> CommandResult:
        """Validate, conflict-check and persist ``changes`` (Task field names) for ``task``."""
        try:
            candidate = Task(**{**task.model_dump(), **changes})
        except ValidationError as e:
            logger.warning("Rejected update for task %s: %s", task.id, e)
            return CommandResult(
                success=False,
                message="Não consegui entender os novos dados da tarefa. Pode tentar de novo?",
            )

        moved = any(f in changes for f in SCHEDULE_FIELDS)
        if moved:
            conflicts = self.detector.detect(candidate, all_tasks)
            if conflicts and not force:
                return CommandResult(
                    success=False,
                    message=CONFLICT_MESSAGE,
                    data={
                        "task": candidate.model_dump(),
                        "conflicts": [c.model_dump() for c in conflicts],
                    },
                )

        try:
            updated = store.update_task(task.id, changes)
        except TaskStoreError as e:
            logger.warning("Could not persist update for task %s: %s", task.id, e)
            return CommandResult(success=False, message=STORE_ERROR_MESSAGE)

        if moved:
            message = f"Tarefa reagendada com sucesso para {format_date(updated.scheduled_date)}"
            if updated.start_time:
                message += f" às {updated.start_time}"
            message += "."
        else:
            message = f'Atualizei a tarefa "{updated.title}" com as novas informações.'
        return CommandResult(success=True, message=message, data={"task": updated.model_dump()})
