import threading
from typing import Dict

from conversation.state import ConversationState
from storage.task_store import InMemoryTaskStore, TaskStore

# One entry per conversation id; never shared between conversations.
# Insertion order doubles as recency order (least recently used first).
conversations: Dict[str, ConversationState] = {}
conversations_lock = threading.Lock()

task_store: TaskStore = InMemoryTaskStore()


def pending_confirmations() -> int:
    with conversations_lock:
        current = list(conversations.values())
    return sum(1 for c in current if c.flow.awaiting)
