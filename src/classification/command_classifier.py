from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from agenda_ai.text import fold, has_phrase, tokenize


@dataclass(frozen=True)
class KeywordRule:
    """Fires when any phrase occurs, or when every token of some group is present."""

    command_type: str
    phrases: Tuple[str, ...] = ()
    all_of: Tuple[Tuple[str, ...], ...] = ()

    def matches(self, tokens: Sequence[str]) -> bool:
        if any(has_phrase(tokens, p) for p in self.phrases):
            return True
        return any(all(t in tokens for t in group) for group in self.all_of)


# Order is the tie-break: a text matching several rules gets the first type.
RULES: List[KeywordRule] = [
    KeywordRule(
        "create",
        phrases=(
            "criar", "crie", "agendar", "agende", "marcar", "marque",
            "adicionar", "adicione", "nova tarefa", "novo compromisso", "novo evento",
        ),
        all_of=(("lembrar", "de"),),
    ),
    KeywordRule(
        "update",
        phrases=(
            "atualizar", "atualize", "mudar", "mude", "alterar", "altere",
            "editar", "edite", "modificar", "modifique",
            "remarcar", "remarque", "reagendar", "reagende",
        ),
    ),
    KeywordRule(
        "delete",
        phrases=(
            "excluir", "exclua", "deletar", "delete", "remover", "remova",
            "cancelar", "cancele", "apagar", "apague", "desmarcar", "desmarque",
        ),
    ),
    KeywordRule(
        "query",
        phrases=(
            "mostrar", "mostre", "listar", "liste", "exibir", "quais", "ver",
            "tenho", "existe", "ha", "quando", "agenda", "compromisso",
            "compromissos", "o que",
        ),
    ),
    KeywordRule(
        "summary",
        phrases=("resumir", "resumo", "recapitular", "sintetizar", "sumarizar"),
    ),
    KeywordRule(
        "optimize",
        phrases=("otimizar", "organizar", "priorizar", "reorganizar", "sugerir"),
    ),
]


def normalize(text: str) -> str:
    """Lowercase and strip accents."""
    return fold(text)


class CommandClassifier:
    def __init__(self, rules: Sequence[KeywordRule] = RULES):
        self.rules = list(rules)

    def classify(self, normalized_text: str) -> str:
        tokens = tokenize(normalized_text)
        for rule in self.rules:
            if rule.matches(tokens):
                return rule.command_type
        return "unknown"
