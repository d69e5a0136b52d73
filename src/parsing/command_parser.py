from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from agenda_ai.models import BaseCommand, Message, ParameterBag, build_command
from agenda_ai.text import has_phrase, tokenize
from classification.command_classifier import CommandClassifier, normalize
from extraction.datetime_resolver import DateTimeResolver
from extraction.entity_extractor import EntityExtractor

logger = logging.getLogger(__name__)

# The create handler asks this when a create command has no title.
TITLE_PROMPT = "Pode me dizer qual é o título da tarefa?"

CONTEXT_TURNS = 3

TIME_MARKERS = ("que horas",)
DATE_MARKERS = ("em qual data", "qual dia")
LOCATION_MARKERS = ("onde", "local")
TITLE_MARKERS = ("qual e o titulo",)
CREATION_FLOW_MARKERS = (
    ("voce quer criar uma tarefa",) + TIME_MARKERS + DATE_MARKERS + LOCATION_MARKERS + TITLE_MARKERS
)


def _mentions(content: str, markers: Sequence[str]) -> bool:
    tokens = tokenize(content)
    return any(has_phrase(tokens, m) for m in markers)


class CommandParser:
    """normalize -> classify -> extract -> refine once with recent turns."""

    def __init__(
        self,
        classifier: Optional[CommandClassifier] = None,
        extractor: Optional[EntityExtractor] = None,
        resolver: Optional[DateTimeResolver] = None,
    ):
        self.classifier = classifier or CommandClassifier()
        self.resolver = resolver or DateTimeResolver()
        self.extractor = extractor or EntityExtractor(self.resolver)

    def parse(
        self,
        text: str,
        history: Optional[Sequence[Message]] = None,
        reference_date: Optional[date] = None,
    ) -> BaseCommand:
        command_type = self.classifier.classify(normalize(text))
        params = self.extractor.extract(text, command_type, reference_date)
        if command_type == "unknown" and history:
            command_type, params = self.refine_with_context(text, params, history, reference_date)
        command = build_command(command_type, text, params)
        logger.debug("Parsed %r as %s %s", text, command.type, command.parameters)
        return command

    def refine_with_context(
        self,
        text: str,
        params: ParameterBag,
        history: Sequence[Message],
        reference_date: Optional[date] = None,
    ) -> tuple:
        """Reinterpret an unknown reply as an answer to a creation-flow question."""
        recent = list(history)[-CONTEXT_TURNS:]
        prompts = [m for m in recent if m.role == "assistant"]
        if not any(_mentions(m.content, CREATION_FLOW_MARKERS) for m in prompts):
            return "unknown", params

        refined = dict(params)
        last = prompts[-1].content
        reply = text.strip()
        if _mentions(last, TIME_MARKERS):
            clock = self.resolver.bare_clock(reply)
            if clock:
                refined["time"] = clock
        elif _mentions(last, DATE_MARKERS):
            resolved = self.resolver.resolve_date(reply, reference_date)
            if resolved:
                refined["date"] = resolved
        elif _mentions(last, LOCATION_MARKERS):
            if reply:
                refined["location"] = reply
        elif _mentions(last, TITLE_MARKERS):
            if reply:
                refined["title"] = reply
        logger.info("Reply %r refined into a create command from conversation context", text)
        return "create", refined
