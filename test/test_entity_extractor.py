import pytest

from extraction.entity_extractor import EntityExtractor


@pytest.fixture
def extractor():
    return EntityExtractor()


def test_social_meal_scenario(extractor, reference_date):
    params = extractor.extract("almoço domingo com os pais da Gardenia", "create", reference_date)
    assert params["title"] == "almoço com pais de Gardenia"
    assert params["time"] == "12:30"
    assert params["date"] == "2026-10-18"


def test_create_title_location_date_time(extractor, reference_date):
    params = extractor.extract(
        "Agendar reunião com cliente amanhã às 15h no escritório", "create", reference_date
    )
    assert params == {
        "title": "reunião com cliente",
        "date": "2026-10-15",
        "time": "15:00",
        "location": "escritório",
    }


def test_create_title_stops_at_para(extractor, reference_date):
    params = extractor.extract("criar relatório para sexta", "create", reference_date)
    assert params["title"] == "relatório"
    assert params["date"] == "2026-10-16"


def test_create_without_title(extractor, reference_date):
    params = extractor.extract("criar tarefa amanhã às 10h", "create", reference_date)
    assert "title" not in params
    assert params["time"] == "10:00"


def test_mutation_title_drops_dangling_preposition(extractor, reference_date):
    params = extractor.extract("cancelar a reunião de amanhã", "delete", reference_date)
    assert params["title"] == "reunião"


def test_update_title_and_new_schedule(extractor, reference_date):
    params = extractor.extract("mudar a reunião para sexta às 10h", "update", reference_date)
    assert params["title"] == "reunião"
    assert params["date"] == "2026-10-16"
    assert params["time"] == "10:00"


def test_duration_is_not_read_as_time(extractor, reference_date):
    params = extractor.extract(
        "agendar treino amanhã às 7h duração de 2 horas", "create", reference_date
    )
    assert params["duration"] == "2h"
    assert params["time"] == "07:00"
    assert params["title"] == "treino"


def test_duration_in_minutes(extractor, reference_date):
    params = extractor.extract("marcar call durante 45 minutos", "create", reference_date)
    assert params["duration"] == "45min"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("criar relatório de prioridade alta", "high"),
        ("criar relatório alta prioridade", "high"),
        ("criar relatório prioridade média", "medium"),
        ("criar relatório baixa prioridade", "low"),
    ],
)
def test_priority(extractor, reference_date, text, expected):
    assert extractor.extract(text, "create", reference_date)["priority"] == expected


def test_meal_default_only_without_explicit_time(extractor, reference_date):
    assert extractor.extract("jantar com amigos", "create", reference_date)["time"] == "20:00"
    assert extractor.extract("jantar com amigos às 21h", "create", reference_date)["time"] == "21:00"


def test_query_filter_and_no_title(extractor, reference_date):
    params = extractor.extract("o que tenho amanhã", "query", reference_date)
    assert params["filter"] == "amanhã"
    assert "title" not in params


def test_summary_period(extractor, reference_date):
    assert extractor.extract("resumo da semana", "summary", reference_date)["period"] == "semana"
    assert extractor.extract("resumir o mês", "summary", reference_date)["period"] == "mês"


def test_no_dia_is_not_a_location(extractor, reference_date):
    params = extractor.extract("marcar dentista no dia 20/10", "create", reference_date)
    assert "location" not in params
    assert params["date"] == "2026-10-20"


def test_pending_task_from_plain_event_text(extractor, reference_date):
    pending = extractor.extract_pending_task("viagem para Santos sábado", reference_date)
    assert pending is not None
    assert pending.title == "viagem"
    assert pending.date == "2026-10-17"


def test_pending_task_for_empty_text(extractor, reference_date):
    assert extractor.extract_pending_task("   ", reference_date) is None


@pytest.mark.parametrize(
    "text, title, resolved",
    [
        ("agendar reunião próxima segunda às 10h", "reunião", "2026-10-26"),
        ("agendar dentista 15 de março de 2027 às 9", "dentista", "2027-03-15"),
        ("marcar revisão do carro 3 de novembro", "revisão do carro", "2026-11-03"),
    ],
)
def test_date_words_stay_out_of_create_title(extractor, reference_date, text, title, resolved):
    params = extractor.extract(text, "create", reference_date)
    assert params["title"] == title
    assert params["date"] == resolved


def test_semana_que_vem_is_not_part_of_title(extractor, reference_date):
    params = extractor.extract("marcar treino semana que vem", "create", reference_date)
    assert params["title"] == "treino"


def test_dia_before_numeric_date_leaves_no_title(extractor, reference_date):
    params = extractor.extract("agendar evento dia 5/11 às 8h30", "create", reference_date)
    assert "title" not in params
    assert params["date"] == "2026-11-05"
    assert params["time"] == "08:30"
