import logging
from datetime import date
from typing import Any, List, Optional

from pydantic import BaseModel

from agenda_ai.errors import AssistantError, TaskStoreError
from agenda_ai.models import (
    AssistantPreferences,
    BaseCommand,
    PendingTaskInfo,
    QueryCommand,
    Task,
    build_command,
)
from classification.command_classifier import normalize
from conversation import local_responses
from conversation.confirmation import is_decision
from conversation.state import ConversationState
from execution.command_executor import CommandExecutor
from extraction.entity_extractor import EntityExtractor
from integration.connectivity import ConnectivityChecker
from parsing.command_parser import CommandParser
from scheduling.optimizer import suggest_optimizations
from scheduling.scheduler import Scheduler
from storage.task_store import TaskStore

logger = logging.getLogger(__name__)

APOLOGY = (
    "Desculpe, não consegui processar sua solicitação completamente. "
    "Posso ajudar você a adicionar um compromisso ou responder perguntas básicas."
)
DELETE_FAILED = "Não consegui remover a tarefa agora. Por favor, tente novamente."
NOTHING_TO_CHANGE = (
    'O que você quer mudar na tarefa "{title}"? Pode me dizer a nova data, o horário ou o local.'
)


class AssistantReply(BaseModel):
    message: str
    intent: str
    success: bool = True
    awaiting_confirmation: bool = False
    pending: Optional[PendingTaskInfo] = None
    tip: Optional[str] = None
    offline: bool = False
    data: Optional[Any] = None


class AssistantBackend:
    """Central orchestration of one assistant turn."""

    def __init__(
        self,
        store: TaskStore,
        connectivity: Optional[ConnectivityChecker] = None,
        preferences: Optional[AssistantPreferences] = None,
        parser: Optional[CommandParser] = None,
    ):
        self.store = store
        self.connectivity = connectivity or ConnectivityChecker()
        self.preferences = preferences or AssistantPreferences()
        self.parser = parser or CommandParser()
        self.extractor: EntityExtractor = self.parser.extractor
        self.executor = CommandExecutor(preferences=self.preferences)
        self.scheduler = Scheduler(preferences=self.preferences)

    def handle_message(
        self,
        text: str,
        conversation: ConversationState,
        today: Optional[date] = None,
    ) -> AssistantReply:
        today = today or date.today()
        with conversation.lock:
            return self._turn(text, conversation, today)

    def _turn(self, text, conversation, today) -> AssistantReply:
        history = conversation.recent()
        conversation.remember("user", text)
        try:
            reply = self._respond(text, conversation, history, today)
        except AssistantError as e:
            reply = AssistantReply(message=e.message, intent="error", success=False)
        except Exception:
            logger.exception("Failed to handle assistant message")
            reply = AssistantReply(message=APOLOGY, intent="error", success=False)

        reply.awaiting_confirmation = conversation.flow.awaiting
        reply.pending = conversation.flow.pending
        conversation.remember("assistant", reply.message)
        if reply.tip:
            conversation.remember("assistant", reply.tip)
        return reply

    def _respond(self, text, conversation, history, today) -> AssistantReply:
        tasks = self.store.list_tasks()

        if conversation.flow.awaiting:
            return self._while_pending(text, conversation, history, tasks, today)

        local = local_responses.local_response(text)
        if local and self.parser.classifier.classify(normalize(text)) not in ("create", "update", "delete"):
            conversation.draft = None
            return AssistantReply(message=local, intent="local")

        if not self.connectivity.is_online():
            conversation.draft = None
            return self._offline(text, conversation, today)
        conversation.connection_attempts = 0

        command = self.parser.parse(text, history, today)
        if command.type != "create":
            # A title-less create only carries into the turn right after it.
            conversation.draft = None
        if command.type == "unknown":
            return self._unknown(text, conversation, tasks, today)
        return self._execute(command, conversation, tasks, today)

    def _while_pending(self, text, conversation, history, tasks, today) -> AssistantReply:
        command = self.parser.parse(text, history, today)
        if command.type == "create" and command.title and not is_decision(text):
            return self._propose(command, conversation, tasks, today)

        outcome = conversation.flow.resolve(text, self.store, today)
        return AssistantReply(
            message=outcome.message,
            intent=f"confirmation_{outcome.decision}",
            success=outcome.decision != "failed",
            data={"task_id": outcome.task_id} if outcome.task_id else None,
        )

    def _offline(self, text, conversation, today) -> AssistantReply:
        conversation.connection_attempts += 1
        logger.warning("Assistant offline (attempt %d)", conversation.connection_attempts)
        if local_responses.looks_like_event_creation(text):
            pending = self.extractor.extract_pending_task(text, today)
            if pending is not None:
                prompt = conversation.flow.propose(pending)
                return AssistantReply(
                    message=f"{local_responses.OFFLINE_NOTICE}\n\n{prompt}",
                    intent="create",
                    offline=True,
                )
        return AssistantReply(
            message=local_responses.fallback_response(conversation.connection_attempts - 1),
            intent="offline",
            success=False,
            offline=True,
        )

    def _execute(self, command: BaseCommand, conversation, tasks: List[Task], today) -> AssistantReply:
        if command.type == "create":
            if conversation.draft:
                merged = {**conversation.draft, **command.parameters}
                command = build_command("create", command.original_text, merged)
            if not command.title:
                conversation.draft = command.parameters
                result = self.executor.dispatch(command, tasks, today)
                return AssistantReply(message=result.message, intent="create", success=False)
            conversation.draft = None
            return self._propose(command, conversation, tasks, today)

        result = self.executor.dispatch(command, tasks, today)
        if not result.success:
            return AssistantReply(message=result.message, intent=command.type, success=False)

        if command.type == "update":
            return self._apply_update(result.data, tasks)
        if command.type == "delete":
            return self._delete(result)

        reply = AssistantReply(message=result.message, intent=command.type, data=result.data)
        if command.type in ("query", "optimize") and tasks:
            tips = suggest_optimizations(tasks)
            if tips:
                reply.tip = f"Dica: {tips[0]}"
        return reply

    def _propose(self, command, conversation, tasks, today) -> AssistantReply:
        result = self.executor.dispatch(command, tasks, today)
        pending = PendingTaskInfo(
            title=command.title,
            date=command.date,
            time=command.time,
            location=command.location,
        )
        message = conversation.flow.propose(pending)
        data = result.data if result.success else None
        if data and data.get("conflicts"):
            message = f"Atenção: {data['conflicts'][0]['suggestion']}\n\n{message}"
        return AssistantReply(message=message, intent="create", data=data)

    def _apply_update(self, data, tasks) -> AssistantReply:
        task = Task(**data["task"])
        changes = data["changes"]
        if not changes:
            return AssistantReply(
                message=NOTHING_TO_CHANGE.format(title=task.title), intent="update", success=False
            )
        result = self.scheduler.apply_update(task, changes, tasks, self.store)
        return AssistantReply(
            message=result.message, intent="update", success=result.success, data=result.data
        )

    def _delete(self, result) -> AssistantReply:
        task_id = result.data["task"]["id"]
        try:
            self.store.delete_task(task_id)
        except TaskStoreError as e:
            logger.warning("Could not delete task %s: %s", task_id, e)
            return AssistantReply(message=DELETE_FAILED, intent="delete", success=False)
        return AssistantReply(message=result.message, intent="delete", data=result.data)

    def _unknown(self, text, conversation, tasks, today) -> AssistantReply:
        if local_responses.looks_like_event_creation(text):
            pending = self.extractor.extract_pending_task(text, today)
            if pending is None:
                return AssistantReply(message=local_responses.MISSING_DETAILS, intent="unknown", success=False)
            message = conversation.flow.propose(pending)
            return AssistantReply(message=message, intent="create")

        if local_responses.is_query_about_appointments(text):
            result = self.executor.dispatch(QueryCommand(original_text=text), tasks, today)
            return AssistantReply(message=result.message, intent="query", data=result.data)

        return AssistantReply(message=local_responses.GENERIC_HELP, intent="unknown", success=False)
