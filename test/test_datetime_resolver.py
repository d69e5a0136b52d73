from datetime import date, timedelta

import pytest

from extraction.datetime_resolver import DateTimeResolver


@pytest.fixture
def resolver():
    return DateTimeResolver()


@pytest.mark.parametrize("day", [1, 9, 15, 28])
@pytest.mark.parametrize("month", [1, 2, 7, 12])
def test_numeric_date_is_zero_padded_iso(resolver, reference_date, day, month):
    result = resolver.resolve(f"{day}/{month}/2027", reference_date)
    assert result.date == f"2027-{month:02d}-{day:02d}"


def test_two_digit_year_gets_century_prefix(resolver, reference_date):
    assert resolver.resolve_date("reunião 05/11/27", reference_date) == "2027-11-05"


def test_numeric_date_without_year_uses_reference_year(resolver, reference_date):
    assert resolver.resolve_date("dia 3/12", reference_date) == "2026-12-03"


@pytest.mark.parametrize("ref", [date(2026, 1, 31), date(2026, 2, 28), date(2026, 12, 31)])
def test_relative_days(resolver, ref):
    assert resolver.resolve_date("hoje", ref) == ref.isoformat()
    assert resolver.resolve_date("amanhã", ref) == (ref + timedelta(days=1)).isoformat()
    assert resolver.resolve_date("depois de amanhã", ref) == (ref + timedelta(days=2)).isoformat()


def test_weekday_resolves_to_next_occurrence(resolver, reference_date):
    assert resolver.resolve_date("segunda", reference_date) == "2026-10-19"
    assert resolver.resolve_date("sexta-feira", reference_date) == "2026-10-16"


def test_same_weekday_resolves_to_reference_date(resolver, reference_date):
    assert resolver.resolve_date("quarta", reference_date) == "2026-10-14"


def test_next_week_qualifier_adds_seven_days(resolver, reference_date):
    plain = date.fromisoformat(resolver.resolve_date("segunda", reference_date))
    qualified = date.fromisoformat(resolver.resolve_date("próxima segunda", reference_date))
    assert qualified - plain == timedelta(days=7)
    assert resolver.resolve_date("sábado que vem", reference_date) == "2026-10-24"


def test_textual_month_date(resolver, reference_date):
    assert resolver.resolve_date("10 de março", reference_date) == "2026-03-10"
    assert resolver.resolve_date("25 de dezembro de 2027", reference_date) == "2027-12-25"


def test_unknown_month_name_is_skipped(resolver, reference_date):
    assert resolver.resolve("5 de qualquer coisa", reference_date).date is None


def test_invalid_calendar_date_is_discarded(resolver, reference_date):
    result = resolver.resolve("31/02/2026", reference_date)
    assert result.date is None
    assert result.time is None


@pytest.mark.parametrize(
    "text, expected",
    [
        ("reunião às 15h", "15:00"),
        ("às 9:30", "09:30"),
        ("para as 7", "07:00"),
        ("começa 14h30", "14:30"),
        ("treino 18 horas", "18:00"),
        ("almoço ao meio-dia", "12:00"),
        ("plantão até meia-noite", "00:00"),
        ("reunião à tarde", "15:00"),
        ("jantar de noite", "20:00"),
        ("café pela manhã", "09:00"),
    ],
)
def test_time_forms(resolver, text, expected):
    assert resolver.resolve_time(text) == expected


def test_bare_number_without_indicator_is_not_a_time(resolver):
    assert resolver.resolve_time("comprar 3 livros") is None


def test_day_part_without_indicator_is_ignored(resolver):
    assert resolver.resolve_time("tarde demais") is None


def test_out_of_range_time_is_discarded(resolver):
    assert resolver.resolve_time("às 25h") is None
    assert resolver.resolve_time("às 10:75") is None


def test_date_digits_are_not_read_as_time(resolver, reference_date):
    result = resolver.resolve("dentista 20/10 às 16h", reference_date)
    assert result.date == "2026-10-20"
    assert result.time == "16:00"


def test_textual_date_day_is_not_read_as_time(resolver, reference_date):
    result = resolver.resolve("no dia 10 de novembro", reference_date)
    assert result.date == "2026-11-10"
    assert result.time is None


def test_bare_clock(resolver):
    assert resolver.bare_clock("15") == "15:00"
    assert resolver.bare_clock("lá pelas 8:45") == "08:45"
    assert resolver.bare_clock("sem horário") is None
