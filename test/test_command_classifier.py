import pytest

from classification.command_classifier import CommandClassifier, normalize


@pytest.fixture
def classifier():
    return CommandClassifier()


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Agendar reunião amanhã", "create"),
        ("crie um lembrete", "create"),
        ("nova tarefa: comprar pão", "create"),
        ("lembrar de ligar para o banco", "create"),
        ("reagendar reunião para amanhã", "update"),
        ("mude o dentista para sexta", "update"),
        ("cancelar o almoço", "delete"),
        ("apague a tarefa de estudo", "delete"),
        ("o que tenho hoje?", "query"),
        ("quais são meus compromissos", "query"),
        ("me dá um resumo", "summary"),
        ("otimizar meu dia", "optimize"),
        ("bom tempo lá fora", "unknown"),
        ("", "unknown"),
    ],
)
def test_classification(classifier, text, expected):
    assert classifier.classify(normalize(text)) == expected


def test_create_wins_over_delete(classifier):
    assert classifier.classify(normalize("agendar reunião e cancelar o almoço")) == "create"


def test_keywords_match_whole_words(classifier):
    # "verificar" contains "ver", "reagendar" contains "agendar"
    assert classifier.classify("verificar pneu") == "unknown"
    assert classifier.classify("reagendar") == "update"


def test_lembrar_needs_de(classifier):
    assert classifier.classify("lembrar") == "unknown"


def test_normalize_strips_accents():
    assert normalize("Reunião AMANHÃ às 15h") == "reuniao amanha as 15h"
