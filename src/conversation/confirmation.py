from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Literal, Optional, Union

from agenda_ai.errors import NoPendingTaskError, TaskStoreError
from agenda_ai.models import PendingTaskInfo
from agenda_ai.text import fold, tokenize
from agenda_ai.timeutils import format_date
from storage.task_store import TaskStore

logger = logging.getLogger(__name__)

CONFIRM_KEYWORDS = ("sim", "yes", "confirmar", "confirmo", "ok", "certo", "pode", "correto", "adicionar")
CANCEL_KEYWORDS = ("não", "nao", "no", "cancela", "cancelar", "errado", "incorreto")

SUCCESS_MESSAGE = "Tarefa adicionada com sucesso! Posso ajudar com mais alguma coisa?"
CANCEL_MESSAGE = "Entendi. Quer tentar adicionar a tarefa novamente com informações diferentes?"
REPROMPT_MESSAGE = (
    "Desculpe, não entendi. Você confirma a criação desta tarefa? "
    "Por favor, responda com 'sim' ou 'não'."
)
STORE_FAILURE_MESSAGE = (
    "Desculpe, não consegui salvar a tarefa agora. "
    "Responda 'sim' para tentar de novo ou 'não' para desistir."
)

Decision = Literal["confirmed", "cancelled", "unclear", "failed"]


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class AwaitingConfirmation:
    pending: PendingTaskInfo


ConfirmationState = Union[Idle, AwaitingConfirmation]


@dataclass(frozen=True)
class ConfirmationOutcome:
    decision: Decision
    message: str
    task_id: Optional[str] = None


def is_decision(reply: str) -> bool:
    """Whole-word yes/no check, stricter than the containment test in ``resolve``."""
    words = set(tokenize(reply))
    return any(fold(k) in words for k in CONFIRM_KEYWORDS + CANCEL_KEYWORDS)


def confirmation_prompt(pending: PendingTaskInfo) -> str:
    prompt = f"Confirmando: {pending.title}"
    if pending.date:
        prompt += f" para {format_date(pending.date)}"
    if pending.time:
        prompt += f" às {pending.time}"
    if pending.location:
        prompt += f" em {pending.location}"
    return prompt + ". Confirma?"


class ConfirmationFlow:
    """Holds at most one unconfirmed task for a single conversation."""

    def __init__(self):
        self.state: ConfirmationState = Idle()

    @property
    def awaiting(self) -> bool:
        return isinstance(self.state, AwaitingConfirmation)

    @property
    def pending(self) -> Optional[PendingTaskInfo]:
        return self.state.pending if isinstance(self.state, AwaitingConfirmation) else None

    def propose(self, pending: PendingTaskInfo) -> str:
        """Enter AwaitingConfirmation, replacing any task already pending."""
        if self.pending is not None:
            logger.info("Replacing pending task %r with %r", self.pending.title, pending.title)
        self.state = AwaitingConfirmation(pending)
        return confirmation_prompt(pending)

    def resolve(
        self,
        reply: str,
        store: TaskStore,
        today: Optional[date] = None,
    ) -> ConfirmationOutcome:
        pending = self.pending
        if pending is None:
            raise NoPendingTaskError("no task is awaiting confirmation")

        text = reply.lower()
        # Substring containment, confirm first: "sim, pode confirmar" confirms.
        if any(k in text for k in CONFIRM_KEYWORDS):
            try:
                task_id = store.create_task(pending.to_task_fields(today or date.today()))
            except TaskStoreError as e:
                logger.warning("Could not persist confirmed task %r: %s", pending.title, e)
                return ConfirmationOutcome("failed", STORE_FAILURE_MESSAGE)
            self.state = Idle()
            logger.info("Confirmed task %r as %s", pending.title, task_id)
            return ConfirmationOutcome("confirmed", SUCCESS_MESSAGE, task_id)

        if any(k in text for k in CANCEL_KEYWORDS):
            self.state = Idle()
            logger.info("Discarded pending task %r", pending.title)
            return ConfirmationOutcome("cancelled", CANCEL_MESSAGE)

        return ConfirmationOutcome("unclear", REPROMPT_MESSAGE)
