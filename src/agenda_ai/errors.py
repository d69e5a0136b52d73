from __future__ import annotations


class AssistantError(Exception):
    """Recoverable failure; ``message`` is shown to the user as-is."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ParseIncomplete(AssistantError):
    """A required field (usually the title) is missing from the utterance."""


class ParseAmbiguous(AssistantError):
    """More than one task matches the requested title."""


class TaskNotFound(AssistantError):
    pass


class NoSuitableSlot(AssistantError):
    """The slot search horizon was exhausted."""


class InvalidTemporalToken(ValueError):
    """A date/time substring failed range validation. Never leaves the resolver."""


class NoPendingTaskError(RuntimeError):
    """ConfirmationFlow.resolve() was called with nothing pending."""


class TaskStoreError(RuntimeError):
    pass
