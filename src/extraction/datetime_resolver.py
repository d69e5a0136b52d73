from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, List, Optional, Pattern, Tuple

from agenda_ai.errors import InvalidTemporalToken
from agenda_ai.text import fold, has_phrase, tokenize

logger = logging.getLogger(__name__)

Span = Tuple[int, int]

WEEKDAYS = {
    "segunda": 0,
    "terca": 1,
    "quarta": 2,
    "quinta": 3,
    "sexta": 4,
    "sabado": 5,
    "domingo": 6,
}

MONTHS = {
    "janeiro": 1, "jan": 1,
    "fevereiro": 2, "fev": 2,
    "marco": 3, "mar": 3,
    "abril": 4, "abr": 4,
    "maio": 5, "mai": 5,
    "junho": 6, "jun": 6,
    "julho": 7, "jul": 7,
    "agosto": 8, "ago": 8,
    "setembro": 9, "set": 9,
    "outubro": 10, "out": 10,
    "novembro": 11, "nov": 11,
    "dezembro": 12, "dez": 12,
}

RELATIVE_DAYS = {"hoje": 0, "amanha": 1, "depois de amanha": 2}

NEXT_WEEK_QUALIFIERS = ("proxima", "proximo", "que vem")

DAY_PARTS = {"manha": "09:00", "tarde": "15:00", "noite": "20:00"}

# Indicator word immediately before a candidate, matched on folded text.
_TIME_INDICATOR = re.compile(r"\b(?:as|para|de|em)\s*$")
_DAY_PART_INDICATOR = re.compile(r"\b(?:as|a|para|de|da|pela|na|em)\s*$")
_HOUR_WORD = re.compile(r"\b(?:h|hora|horas|hrs?)\b")

_NUMERIC_TIME = re.compile(
    r"(?<![\d/:-])(\d{1,2})(?:(?::|h)(\d{2}))?(?:\s*(horas?|hrs?|h)\b)?(?![\d/:-])"
)
_CLOCK_TOKEN = re.compile(r"\bmeio[\s-]dia\b|\bmeia[\s-]noite\b")
_DAY_PART = re.compile(r"\b(manha|tarde|noite)\b")
_BARE_CLOCK = re.compile(r"(\d{1,2})(?::(\d{2}))?")


@dataclass(frozen=True)
class TemporalMatch:
    date: Optional[str] = None
    time: Optional[str] = None
    date_span: Optional[Span] = None


DateHandler = Callable[["re.Match[str]", str, date], Optional[date]]


def _year(raw: Optional[str], reference: date) -> int:
    if raw is None:
        return reference.year
    return int("20" + raw) if len(raw) == 2 else int(raw)


def _build_date(year: int, month: int, day: int) -> date:
    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidTemporalToken(f"{day}/{month}/{year}") from e


def _numeric_date(m: "re.Match[str]", text: str, reference: date) -> Optional[date]:
    return _build_date(_year(m.group(3), reference), int(m.group(2)), int(m.group(1)))


def _relative_date(m: "re.Match[str]", text: str, reference: date) -> Optional[date]:
    return reference + timedelta(days=RELATIVE_DAYS[m.group(1)])


def _weekday_date(m: "re.Match[str]", text: str, reference: date) -> Optional[date]:
    offset = (WEEKDAYS[m.group(1)] - reference.weekday()) % 7
    tokens = tokenize(text)
    if any(has_phrase(tokens, q) for q in NEXT_WEEK_QUALIFIERS):
        offset += 7
    return reference + timedelta(days=offset)


def _textual_date(m: "re.Match[str]", text: str, reference: date) -> Optional[date]:
    month = MONTHS.get(m.group(2))
    if month is None:
        return None
    return _build_date(_year(m.group(3), reference), month, int(m.group(1)))


# Tried in order; the first rule producing a valid date wins.
DATE_RULES: List[Tuple[Pattern[str], DateHandler]] = [
    (re.compile(r"\b(\d{1,2})[/-](\d{1,2})(?:[/-](\d{4}|\d{2}))?\b"), _numeric_date),
    (re.compile(r"\b(depois de amanha|amanha|hoje)\b"), _relative_date),
    (
        re.compile(r"\b(segunda|terca|quarta|quinta|sexta|sabado|domingo)\b(?:[\s-]*feira\b)?"),
        _weekday_date,
    ),
    (
        re.compile(r"\b(\d{1,2})\s+(?:de\s+)?([a-z]+)(?:\s+(?:de\s+)?(\d{4}|\d{2}))?\b"),
        _textual_date,
    ),
]


def _overlaps(span: Span, other: Optional[Span]) -> bool:
    return other is not None and span[0] < other[1] and other[0] < span[1]


class DateTimeResolver:
    """Turns pt-BR date/time expressions into ISO dates and ``HH:MM`` clock times."""

    def resolve(self, text: str, reference_date: Optional[date] = None) -> TemporalMatch:
        reference = reference_date or date.today()
        folded = fold(text)
        found = self._resolve_date(folded, reference)
        if found is None:
            return TemporalMatch(time=self._resolve_time(folded))
        iso, span = found
        return TemporalMatch(date=iso, time=self._resolve_time(folded, skip=span), date_span=span)

    def resolve_date(self, text: str, reference_date: Optional[date] = None) -> Optional[str]:
        return self.resolve(text, reference_date).date

    def resolve_time(self, text: str) -> Optional[str]:
        return self._resolve_time(fold(text))

    def bare_clock(self, text: str) -> Optional[str]:
        """First ``H[:MM]`` in a short reply, no indicator required."""
        m = _BARE_CLOCK.search(text)
        if not m:
            return None
        return self._clock(int(m.group(1)), int(m.group(2) or 0))

    def _resolve_date(self, folded: str, reference: date) -> Optional[Tuple[str, Span]]:
        for pattern, handler in DATE_RULES:
            for m in pattern.finditer(folded):
                try:
                    resolved = handler(m, folded, reference)
                except InvalidTemporalToken as e:
                    logger.debug("Discarding invalid date %r: %s", m.group(0), e)
                    continue
                if resolved is not None:
                    return resolved.isoformat(), m.span()
        return None

    def _resolve_time(self, folded: str, skip: Optional[Span] = None) -> Optional[str]:
        has_hour_word = _HOUR_WORD.search(folded) is not None
        candidates = [m for m in _NUMERIC_TIME.finditer(folded) if not _overlaps(m.span(), skip)]

        # Candidates carrying their own marker ("às 9", "15h", "14h30", "9:30")
        # beat ones only justified by an hour word elsewhere in the sentence.
        explicit = [
            m for m in candidates
            if m.group(2) or m.group(3) or _TIME_INDICATOR.search(folded[: m.start()])
        ]
        for m in explicit + (candidates if has_hour_word else []):
            value = self._clock(int(m.group(1)), int(m.group(2) or 0))
            if value is not None:
                return value

        m = _CLOCK_TOKEN.search(folded)
        if m:
            return "12:00" if m.group(0).startswith("meio") else "00:00"

        for m in _DAY_PART.finditer(folded):
            if _DAY_PART_INDICATOR.search(folded[: m.start()]) or has_hour_word:
                return DAY_PARTS[m.group(1)]
        return None

    @staticmethod
    def _clock(hour: int, minute: int) -> Optional[str]:
        if 0 <= hour <= 23 and 0 <= minute <= 59:
            return f"{hour:02d}:{minute:02d}"
        logger.debug("Discarding out-of-range time %d:%02d", hour, minute)
        return None
