from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional

from agenda_ai.models import Message, ParameterBag
from conversation.confirmation import ConfirmationFlow

DEFAULT_HISTORY_TURNS = 10


@dataclass
class ConversationState:
    """Everything the assistant remembers about one conversation."""

    max_turns: int = DEFAULT_HISTORY_TURNS
    flow: ConfirmationFlow = field(default_factory=ConfirmationFlow)
    connection_attempts: int = 0
    # Parameters of a create that still lacks a title.
    draft: Optional[ParameterBag] = None
    history: Deque[Message] = field(init=False)
    # Held for a whole turn; concurrent requests for one conversation run one at a time.
    lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        self.history = deque(maxlen=self.max_turns)

    def remember(self, role: str, content: str) -> None:
        self.history.append(Message(role=role, content=content))

    def recent(self) -> List[Message]:
        return list(self.history)
