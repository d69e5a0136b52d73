from __future__ import annotations

import logging
import re
from datetime import date
from typing import Iterable, Optional, Pattern, Tuple

from agenda_ai.models import ParameterBag, PendingTaskInfo
from agenda_ai.text import fold, has_phrase, tokenize
from extraction.datetime_resolver import MONTHS, WEEKDAYS, DateTimeResolver

logger = logging.getLogger(__name__)

CREATE_VERBS = (
    "nova tarefa", "novo compromisso", "novo evento", "lembrar de", "lembre de",
    "criar", "crie", "agendar", "agende", "marcar", "marque", "adicionar", "adicione",
)
MUTATION_VERBS = (
    "atualizar", "atualize", "mudar", "mude", "alterar", "altere", "editar", "edite",
    "modificar", "modifique", "remarcar", "remarque", "reagendar", "reagende",
    "excluir", "exclua", "deletar", "delete", "remover", "remova", "cancelar", "cancele",
    "apagar", "apague", "desmarcar", "desmarque",
)


def _verb_pattern(verbs: Iterable[str]) -> Pattern[str]:
    alternation = "|".join(re.escape(v).replace(r"\ ", r"\s+") for v in verbs)
    return re.compile(rf"\b(?:{alternation})\b\s+([^.,;]+)")


_CREATE_TITLE = _verb_pattern(CREATE_VERBS)
_MUTATION_TITLE = _verb_pattern(MUTATION_VERBS)

_MONTH_NAMES = "|".join(sorted(MONTHS, key=len, reverse=True))
_WEEKDAY_NAMES = "|".join(WEEKDAYS)

_TEMPORAL_TAIL = (
    re.compile(r"\b(?:hoje|amanha|depois de amanha)\b"),
    re.compile(rf"\b(?:{_WEEKDAY_NAMES})\b"),
    re.compile(rf"\bproxim[ao]s?\s+(?:{_WEEKDAY_NAMES}|semana|mes)\b"),
    re.compile(r"\b(?:(?:semana|mes)\s+)?que vem\b"),
    re.compile(r"\b\d{1,2}[/-]\d{1,2}"),
    re.compile(rf"\b\d{{1,2}}\s+(?:de\s+)?(?:{_MONTH_NAMES})\b"),
    # "dia 5/11", "dia 15 de marco"
    re.compile(r"\bdia\s+\d{1,2}\b"),
)
CREATE_TITLE_STOPS: Tuple[Pattern[str], ...] = (
    re.compile(r"\bpara\b"),
    re.compile(r"\bno dia\b"),
    re.compile(r"\bna data\b"),
    re.compile(r"\bem\b"),
    re.compile(r"\bas\b"),
) + _TEMPORAL_TAIL
MUTATION_TITLE_STOPS: Tuple[Pattern[str], ...] = (
    re.compile(r"\bpara\b"),
    re.compile(r"\bno dia\b"),
    re.compile(r"\bna data\b"),
    re.compile(r"\bem\b"),
) + _TEMPORAL_TAIL

_LEADING_FILLER = re.compile(
    r"(?:(?:a|o|as|os|um|uma|minha|meu|minhas|meus)\s+)?"
    r"(?:(?:tarefa|evento|compromisso|lembrete)\b\s*(?:(?:de|do|da)\s+)?)?"
)
_BASIC_CLAUSE_BREAK = re.compile(r"\s+(?:em|no|na|para|as|ao|dia)\s+")
_TRAILING_JOINER = re.compile(r"(?:\s+(?:de|do|da|dos|das|e|com))+\s*$")

_LOCATION = re.compile(r"\b(?:em|no|na|local|lugar)\b[:\s]*([^.,;]+)")
_SOCIAL_MEAL = re.compile(
    r"\b(almoco|jantar|cafe)\b(?:\s+[\w-]+){0,3}?\s+(?:(?:com|para)\s+)?(?:(?:os|as)\s+)?"
    r"(pais|familia|parentes|avos|primos|tios)\s+d[aeo]s?\s+(\w+)"
)
_DURATION = re.compile(r"\b(?:duracao|durar|durante)\s+(?:de\s+)?(\d+)\s*(min|minutos?|horas?|h)\b")

PRIORITY_PHRASES = (
    ("high", ("prioridade alta", "alta prioridade")),
    ("medium", ("prioridade media", "media prioridade")),
    ("low", ("prioridade baixa", "baixa prioridade")),
)
MEAL_TIMES = (("almoco", "12:30"), ("jantar", "20:00"), ("cafe", "09:00"))
SUMMARY_WORDS = ("resumo", "resumir", "recapitular")


class EntityExtractor:
    """Pulls a ParameterBag out of a pt-BR utterance.

    Matching runs on the folded text (lowercase, no accents); titles and
    locations are sliced from the original so they keep their spelling.
    """

    def __init__(self, resolver: Optional[DateTimeResolver] = None):
        self.resolver = resolver or DateTimeResolver()

    def extract(
        self,
        text: str,
        command_type: str,
        reference_date: Optional[date] = None,
    ) -> ParameterBag:
        folded = fold(text)
        tokens = tokenize(text)
        params: ParameterBag = {}

        duration_span = None
        m = _DURATION.search(folded)
        if m:
            amount = int(m.group(1))
            params["duration"] = f"{amount}min" if m.group(2).startswith("min") else f"{amount}h"
            duration_span = m.span()

        # "duração de 2 horas" must not be read as 02:00
        temporal_text = folded
        if duration_span:
            start, end = duration_span
            temporal_text = folded[:start] + " " * (end - start) + folded[end:]
        temporal = self.resolver.resolve(temporal_text, reference_date)
        if temporal.date:
            params["date"] = temporal.date
        if temporal.time:
            params["time"] = temporal.time

        location = self._location(text, folded)
        if location:
            params["location"] = location

        if command_type == "create":
            title = self.social_meal_title(text) or self._title(text, folded, _CREATE_TITLE, CREATE_TITLE_STOPS)
        elif command_type in ("update", "delete"):
            title = self._title(text, folded, _MUTATION_TITLE, MUTATION_TITLE_STOPS)
        else:
            title = None
        if title:
            params["title"] = title

        if command_type == "query":
            query_filter = self._query_filter(tokens)
            if query_filter:
                params["filter"] = query_filter
        if command_type in ("query", "summary"):
            period = self._period(tokens)
            if period:
                params["period"] = period

        for priority, phrases in PRIORITY_PHRASES:
            if any(has_phrase(tokens, p) for p in phrases):
                params["priority"] = priority
                break

        if "time" not in params:
            meal_time = self.meal_default_time(tokens)
            if meal_time:
                params["time"] = meal_time

        logger.debug("Extracted %s parameters: %s", command_type, params)
        return params

    def extract_pending_task(
        self,
        text: str,
        reference_date: Optional[date] = None,
    ) -> Optional[PendingTaskInfo]:
        """Best-effort task for event-like text that no command rule claimed."""
        if not text.strip():
            return None
        folded = fold(text)
        params = self.extract(text, "create", reference_date)
        title = params.get("title") or self._basic_title(text, folded)
        if not title:
            return None
        return PendingTaskInfo(
            title=title,
            date=params.get("date"),
            time=params.get("time"),
            location=params.get("location"),
        )

    def social_meal_title(self, text: str) -> Optional[str]:
        m = _SOCIAL_MEAL.search(fold(text))
        if not m:
            return None
        meal, relationship, name = (text[m.start(i) : m.end(i)] for i in (1, 2, 3))
        return f"{meal} com {relationship} de {name}"

    @staticmethod
    def meal_default_time(tokens) -> Optional[str]:
        for meal, clock in MEAL_TIMES:
            if meal in tokens:
                return clock
        return None

    def _title(
        self,
        text: str,
        folded: str,
        verb_pattern: Pattern[str],
        stops: Tuple[Pattern[str], ...],
    ) -> Optional[str]:
        m = verb_pattern.search(folded)
        if not m:
            return None
        return self._clean_title(text, folded, m.start(1), m.end(1), stops)

    def _basic_title(self, text: str, folded: str) -> Optional[str]:
        end = len(folded)
        m = _BASIC_CLAUSE_BREAK.search(folded)
        if m:
            end = m.start()
        return self._clean_title(text, folded, 0, end, _TEMPORAL_TAIL)

    @staticmethod
    def _clean_title(
        text: str,
        folded: str,
        start: int,
        end: int,
        stops: Tuple[Pattern[str], ...],
    ) -> Optional[str]:
        filler = _LEADING_FILLER.match(folded, start, end)
        if filler:
            start = filler.end()
        for stop in stops:
            m = stop.search(folded, start, end)
            if m:
                end = m.start()
        dangling = _TRAILING_JOINER.search(folded, start, end)
        if dangling:
            end = dangling.start()
        title = text[start:end].strip(" -:")
        return title or None

    @staticmethod
    def _location(text: str, folded: str) -> Optional[str]:
        for m in _LOCATION.finditer(folded):
            value = folded[m.start(1) : m.end(1)]
            # "no dia 10" / "na data ..." are dates, not places
            if re.match(r"(?:dia|data)\b", value):
                continue
            location = text[m.start(1) : m.end(1)].strip()
            if location:
                return location
        return None

    @staticmethod
    def _query_filter(tokens) -> Optional[str]:
        if "hoje" in tokens:
            return "hoje"
        if "amanha" in tokens:
            return "amanhã"
        if "semana" in tokens:
            return "semana"
        if "mes" in tokens:
            return "mês"
        return None

    @staticmethod
    def _period(tokens) -> Optional[str]:
        if not any(w in tokens for w in SUMMARY_WORDS):
            return None
        if "semana" in tokens:
            return "semana"
        if "mes" in tokens:
            return "mês"
        if "dia" in tokens or "hoje" in tokens:
            return "dia"
        return None
