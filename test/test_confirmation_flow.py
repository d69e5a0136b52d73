import pytest

from agenda_ai.errors import NoPendingTaskError, TaskStoreError
from agenda_ai.models import PendingTaskInfo
from conversation.confirmation import (
    AwaitingConfirmation,
    ConfirmationFlow,
    Idle,
    is_decision,
)
from storage.task_store import InMemoryTaskStore


class FailingStore(InMemoryTaskStore):
    def create_task(self, fields):
        raise TaskStoreError("database unavailable")


@pytest.fixture
def pending():
    return PendingTaskInfo(title="Dentista", date="2026-10-15", time="14:00", location="Centro")


def test_propose_echoes_details(pending):
    flow = ConfirmationFlow()
    prompt = flow.propose(pending)
    assert prompt == "Confirmando: Dentista para 15/10/2026 às 14:00 em Centro. Confirma?"
    assert isinstance(flow.state, AwaitingConfirmation)


def test_prompt_omits_missing_fields():
    prompt = ConfirmationFlow().propose(PendingTaskInfo(title="Academia"))
    assert prompt == "Confirmando: Academia. Confirma?"


def test_confirm_persists_exactly_once(pending, store, reference_date):
    flow = ConfirmationFlow()
    flow.propose(pending)
    outcome = flow.resolve("sim, pode confirmar", store, reference_date)
    assert outcome.decision == "confirmed"
    assert isinstance(flow.state, Idle)
    tasks = store.list_tasks()
    assert len(tasks) == 1
    assert tasks[0].id == outcome.task_id
    assert tasks[0].scheduled_date == "2026-10-15"
    assert tasks[0].start_time == "14:00"
    with pytest.raises(NoPendingTaskError):
        flow.resolve("sim", store, reference_date)
    assert len(store.list_tasks()) == 1


def test_missing_date_defaults_to_today(store, reference_date):
    flow = ConfirmationFlow()
    flow.propose(PendingTaskInfo(title="Ligar para o banco"))
    flow.resolve("ok", store, reference_date)
    assert store.list_tasks()[0].scheduled_date == reference_date.isoformat()


def test_cancel_discards(pending, store, reference_date):
    flow = ConfirmationFlow()
    flow.propose(pending)
    outcome = flow.resolve("Não, está errado", store, reference_date)
    assert outcome.decision == "cancelled"
    assert not flow.awaiting
    assert store.list_tasks() == []


def test_confirm_keywords_are_checked_first(pending, store, reference_date):
    flow = ConfirmationFlow()
    flow.propose(pending)
    assert flow.resolve("não sei... ok", store, reference_date).decision == "confirmed"


def test_unclear_reply_keeps_pending(pending, store, reference_date):
    flow = ConfirmationFlow()
    flow.propose(pending)
    outcome = flow.resolve("talvez depois", store, reference_date)
    assert outcome.decision == "unclear"
    assert "'sim' ou 'não'" in outcome.message
    assert flow.pending == pending


def test_store_failure_keeps_pending(pending, reference_date):
    flow = ConfirmationFlow()
    flow.propose(pending)
    outcome = flow.resolve("sim", FailingStore(), reference_date)
    assert outcome.decision == "failed"
    assert flow.pending == pending


def test_resolve_while_idle_is_a_programming_error(store):
    with pytest.raises(NoPendingTaskError):
        ConfirmationFlow().resolve("sim", store)


def test_new_proposal_replaces_pending(pending):
    flow = ConfirmationFlow()
    flow.propose(pending)
    flow.propose(PendingTaskInfo(title="Academia"))
    assert flow.pending.title == "Academia"


def test_is_decision_uses_whole_words():
    assert is_decision("sim, pode adicionar")
    assert is_decision("não")
    assert not is_decision("novo evento amanhã")
