from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from agenda_ai.errors import AssistantError, ParseAmbiguous, ParseIncomplete, TaskNotFound
from agenda_ai.models import (
    AssistantPreferences,
    BaseCommand,
    CommandResult,
    Task,
)
from agenda_ai.timeutils import format_date
from parsing.command_parser import TITLE_PROMPT
from scheduling.conflict_detector import ConflictDetector
from scheduling.optimizer import suggest_optimizations
from scheduling.slot_finder import SlotFinder

logger = logging.getLogger(__name__)

UNKNOWN_MESSAGE = (
    "Não entendi completamente. Posso ajudar a gerenciar suas tarefas, "
    "consultar compromissos, ou criar novos eventos."
)
APOLOGY_MESSAGE = (
    "Desculpe, houve um problema ao processar seu pedido. "
    "Pode tentar de novo com outras palavras?"
)
OPTIMIZE_MESSAGE = (
    "Analisei suas tarefas e organizei sua agenda da melhor forma possível. "
    "Agora suas tarefas estão melhor distribuídas ao longo do dia para otimizar sua produtividade."
)
UPCOMING_LIMIT = 3

FILTER_DESCRIPTIONS = {
    "hoje": " para hoje",
    "amanhã": " para amanhã",
    "semana": " para esta semana",
    "mês": " para este mês",
}
PERIOD_DESCRIPTIONS = {
    "dia": "para hoje",
    "semana": "para esta semana",
    "mês": "para este mês",
}


def date_window(name: str, today: date) -> Tuple[str, str]:
    """Inclusive ISO bounds for hoje/dia, amanhã, semana and mês."""
    if name in ("hoje", "dia"):
        return today.isoformat(), today.isoformat()
    if name == "amanhã":
        tomorrow = (today + timedelta(days=1)).isoformat()
        return tomorrow, tomorrow
    if name == "semana":
        return today.isoformat(), (today + timedelta(days=6)).isoformat()
    if name == "mês":
        first = today.replace(day=1)
        next_month = (first + timedelta(days=32)).replace(day=1)
        return first.isoformat(), (next_month - timedelta(days=1)).isoformat()
    raise ValueError(f"unknown window: {name}")


def _in_window(task: Task, window: Tuple[str, str]) -> bool:
    return bool(task.scheduled_date) and window[0] <= task.scheduled_date <= window[1]


def _scheduled_phrase(date_value: Optional[str], time_value: Optional[str], location: Optional[str]) -> str:
    phrase = ""
    if date_value:
        phrase += f" para {format_date(date_value)}"
    if time_value:
        phrase += f" às {time_value}"
    if location:
        phrase += f" em {location}"
    return phrase


class CommandExecutor:
    """Turns a parsed command into a CommandResult against a task snapshot.

    Handlers never write to a store; create/update/delete results describe
    what the caller should persist.
    """

    def __init__(
        self,
        detector: Optional[ConflictDetector] = None,
        slot_finder: Optional[SlotFinder] = None,
        preferences: Optional[AssistantPreferences] = None,
    ):
        self.detector = detector or ConflictDetector()
        self.slot_finder = slot_finder or SlotFinder()
        self.preferences = preferences or AssistantPreferences()
        self._handlers: Dict[str, Callable[[BaseCommand, List[Task], date], CommandResult]] = {
            "create": self._create,
            "update": self._update,
            "delete": self._delete,
            "query": self._query,
            "summary": self._summary,
            "optimize": self._optimize,
        }

    def dispatch(
        self,
        command: BaseCommand,
        all_tasks: Sequence[Task],
        today: Optional[date] = None,
    ) -> CommandResult:
        today = today or date.today()
        handler = self._handlers.get(command.type)
        if handler is None:
            return CommandResult(success=False, message=UNKNOWN_MESSAGE)
        try:
            return handler(command, list(all_tasks), today)
        except AssistantError as e:
            logger.info("%s command not executed: %s", command.type, e.message)
            return CommandResult(success=False, message=e.message)
        except Exception:
            logger.exception("Failed to execute %s command", command.type)
            return CommandResult(success=False, message=APOLOGY_MESSAGE)

    # --- handlers ---------------------------------------------------------

    def _create(self, command, tasks: List[Task], today: date) -> CommandResult:
        if not command.title:
            raise ParseIncomplete("Para criar uma tarefa, preciso de um título. " + TITLE_PROMPT)

        message = (
            f'Ótimo! Criei a tarefa "{command.title}"'
            f"{_scheduled_phrase(command.date, command.time, command.location)}."
        )
        data = dict(command.parameters)

        candidate = self._candidate(command, today)
        if candidate is not None and candidate.start_time:
            conflicts = self.detector.detect(candidate, tasks)
            if conflicts:
                data["conflicts"] = [c.model_dump() for c in conflicts]
                message += f"\n\nAtenção: {conflicts[0].suggestion}"
                slot = self.slot_finder.find_slot(
                    candidate,
                    tasks,
                    horizon_days=self.preferences.horizon_days,
                    work_hours=self.preferences.work_hours,
                    today=today,
                )
                if slot is not None:
                    data["alternative"] = slot.model_dump()
                    message += f" Um horário livre: {format_date(slot.date)} às {slot.time}."
        return CommandResult(success=True, message=message, data=data)

    def _candidate(self, command, today: date) -> Optional[Task]:
        try:
            return Task(
                title=command.title,
                scheduled_date=command.date or today.isoformat(),
                start_time=command.time,
                duration=command.duration or self.preferences.default_duration_min,
                location=command.location,
            )
        except ValidationError as e:
            logger.debug("No conflict check for %r: %s", command.title, e)
            return None

    def _update(self, command, tasks: List[Task], today: date) -> CommandResult:
        task = self._single_match(
            command, tasks,
            "Para atualizar uma tarefa, preciso saber qual tarefa você quer modificar. "
            "Pode me dizer o título da tarefa?",
        )
        return CommandResult(
            success=True,
            message=(
                f'Atualizei a tarefa "{task.title}" com as novas informações. '
                "O que mais posso fazer por você?"
            ),
            data={"task": task.model_dump(), "changes": command.changes},
        )

    def _delete(self, command, tasks: List[Task], today: date) -> CommandResult:
        task = self._single_match(
            command, tasks,
            "Para excluir uma tarefa, preciso saber qual tarefa você quer remover. "
            "Pode me dizer o título da tarefa?",
        )
        return CommandResult(
            success=True,
            message=f'Removi a tarefa "{task.title}" da sua agenda. Posso ajudar com mais alguma coisa?',
            data={"task": task.model_dump()},
        )

    @staticmethod
    def _single_match(command, tasks: List[Task], missing_title: str) -> Task:
        if command.task_id:
            by_id = [t for t in tasks if t.id == command.task_id]
            if by_id:
                return by_id[0]
        if not command.title:
            raise ParseIncomplete(missing_title)
        needle = command.title.lower()
        matches = [t for t in tasks if needle in t.title.lower()]
        if not matches:
            raise TaskNotFound(
                f'Não encontrei nenhuma tarefa com o título "{command.title}". '
                "Pode verificar o nome e tentar novamente?"
            )
        if len(matches) > 1:
            raise ParseAmbiguous(
                f'Encontrei várias tarefas que correspondem a "{command.title}". '
                "Pode ser mais específico?"
            )
        return matches[0]

    def _query(self, command, tasks: List[Task], today: date) -> CommandResult:
        if not tasks:
            return CommandResult(success=True, message="Você não tem nenhuma tarefa agendada no momento.")

        selected = tasks
        description = ""
        query_filter = command.filter
        if query_filter is None and command.date == today.isoformat():
            query_filter = "hoje"
        if query_filter:
            window = date_window(query_filter, today)
            selected = [t for t in tasks if _in_window(t, window)]
            description = FILTER_DESCRIPTIONS[query_filter]
        elif command.date:
            selected = [t for t in tasks if t.scheduled_date == command.date]
            description = f" para {format_date(command.date)}"

        if not selected:
            return CommandResult(success=True, message=f"Você não tem tarefas agendadas{description}.")

        lines = []
        for task in selected:
            line = f"- {task.title}"
            if task.start_time:
                line += f" às {task.start_time}"
            lines.append(line)
        return CommandResult(
            success=True,
            message=f"Aqui estão suas tarefas{description}:\n\n" + "\n".join(lines),
            data=[t.model_dump() for t in selected],
        )

    def _summary(self, command, tasks: List[Task], today: date) -> CommandResult:
        if command.period:
            window = date_window(command.period, today)
            tasks = [t for t in tasks if _in_window(t, window)]
        if not tasks:
            return CommandResult(success=True, message="Você não tem nenhuma tarefa agendada para resumir.")

        description = PERIOD_DESCRIPTIONS.get(command.period, "agendadas")
        completed = sum(1 for t in tasks if t.completed)
        pending = len(tasks) - completed

        summary = f"Você tem {len(tasks)} tarefas {description}. "
        if completed:
            summary += (
                f"Você já concluiu {completed} {'tarefa' if completed == 1 else 'tarefas'} "
                f"e tem {pending} {'tarefa pendente' if pending == 1 else 'tarefas pendentes'}."
            )
        else:
            summary += f"Todas as {len(tasks)} tarefas estão pendentes."

        today_iso = today.isoformat()
        upcoming = sorted(
            (t for t in tasks if not t.completed and t.scheduled_date and t.scheduled_date >= today_iso),
            key=lambda t: (t.scheduled_date, t.start_time or ""),
        )[:UPCOMING_LIMIT]
        if upcoming:
            summary += "\n\nPróximas tarefas:"
            for task in upcoming:
                summary += f"\n- {task.title}"
                if task.scheduled_date != today_iso:
                    summary += f" em {format_date(task.scheduled_date)}"
                if task.start_time:
                    summary += f" às {task.start_time}"

        return CommandResult(
            success=True,
            message=summary,
            data={
                "total_tasks": len(tasks),
                "completed_tasks": completed,
                "pending_tasks": pending,
                "upcoming": [t.model_dump() for t in upcoming],
            },
        )

    def _optimize(self, command, tasks: List[Task], today: date) -> CommandResult:
        return CommandResult(
            success=True,
            message=OPTIMIZE_MESSAGE,
            data={"suggestions": suggest_optimizations(tasks)},
        )
