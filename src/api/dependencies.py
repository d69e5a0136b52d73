import logging
import os
from datetime import date

from fastapi import Depends

from agenda_ai.models import AssistantPreferences
from api import state
from api.backend import AssistantBackend
from conversation.state import ConversationState
from integration.connectivity import ConnectivityChecker
from storage.preferences_store import PreferencesStore
from storage.task_store import TaskStore

logger = logging.getLogger(__name__)

# Configuration
ASSISTANT_CONNECTIVITY_URL = os.getenv("ASSISTANT_CONNECTIVITY_URL", "").strip()
ASSISTANT_CONNECTIVITY_TIMEOUT_S = float(os.getenv("ASSISTANT_CONNECTIVITY_TIMEOUT_S", "1.0"))
ASSISTANT_ASSUME_ONLINE = os.getenv("ASSISTANT_ASSUME_ONLINE", "true").lower() in {"1", "true", "yes"}
ASSISTANT_PREFERENCES_PATH = os.getenv("ASSISTANT_PREFERENCES_PATH", "data/assistant_preferences.json")
ASSISTANT_HISTORY_TURNS = int(os.getenv("ASSISTANT_HISTORY_TURNS", "10"))
ASSISTANT_MAX_CONVERSATIONS = int(os.getenv("ASSISTANT_MAX_CONVERSATIONS", "1000"))

connectivity = ConnectivityChecker(
    check_url=ASSISTANT_CONNECTIVITY_URL,
    timeout_s=ASSISTANT_CONNECTIVITY_TIMEOUT_S,
    assume_online=ASSISTANT_ASSUME_ONLINE,
)
preferences_store = PreferencesStore(ASSISTANT_PREFERENCES_PATH)


def get_task_store() -> TaskStore:
    return state.task_store


def get_connectivity() -> ConnectivityChecker:
    return connectivity


def get_preferences() -> AssistantPreferences:
    return preferences_store.load()


def get_today() -> date:
    return date.today()


def get_backend(
    store: TaskStore = Depends(get_task_store),
    checker: ConnectivityChecker = Depends(get_connectivity),
    preferences: AssistantPreferences = Depends(get_preferences),
) -> AssistantBackend:
    return AssistantBackend(store, connectivity=checker, preferences=preferences)


def get_conversation(conversation_id: str) -> ConversationState:
    with state.conversations_lock:
        conversation = state.conversations.pop(conversation_id, None)
        if conversation is None:
            conversation = ConversationState(max_turns=ASSISTANT_HISTORY_TURNS)
        state.conversations[conversation_id] = conversation
        while len(state.conversations) > ASSISTANT_MAX_CONVERSATIONS:
            evicted = next(iter(state.conversations))
            del state.conversations[evicted]
            logger.info("Evicted idle conversation %s", evicted)
    return conversation
