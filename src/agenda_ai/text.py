from __future__ import annotations

import re
import unicodedata
from typing import List, Sequence

_WORD = re.compile(r"\w+")


def fold(text: str) -> str:
    """Lowercase and strip accents, one output character per input character.

    Keeping the length unchanged lets regex spans found on the folded text be
    used to slice the original text (titles keep their casing and accents).
    """
    out = []
    for ch in text:
        decomposed = unicodedata.normalize("NFD", ch.lower())
        base = "".join(c for c in decomposed if not unicodedata.combining(c))
        out.append(base if len(base) == 1 else ch)
    return "".join(out)


def tokenize(text: str) -> List[str]:
    return _WORD.findall(fold(text))


def has_phrase(tokens: Sequence[str], phrase: str) -> bool:
    """True if the (already folded) phrase occurs as contiguous whole tokens."""
    words = phrase.split()
    n = len(words)
    if n == 0:
        return False
    return any(list(tokens[i : i + n]) == words for i in range(len(tokens) - n + 1))
