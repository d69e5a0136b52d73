from datetime import time

import pytest
from pydantic import TypeAdapter, ValidationError

from agenda_ai.models import (
    AssistantPreferences,
    Command,
    CreateCommand,
    PendingTaskInfo,
    Task,
    UpdateCommand,
    build_command,
)


def test_task_normalizes_time_and_duration():
    t = Task(title=" Dentista ", scheduled_date="2026-10-15", start_time="9:05:00", duration="2h")
    assert t.title == "Dentista"
    assert t.start_time == "09:05"
    assert t.duration == 120


def test_task_defaults():
    t = Task(title="Test")
    assert t.effective_duration == 60
    assert t.completed is False
    assert t.type == "task"


@pytest.mark.parametrize("field, value", [("start_time", "24:00"), ("scheduled_date", "2026-02-30"), ("duration", 0)])
def test_task_rejects_invalid_values(field, value):
    with pytest.raises(ValidationError):
        Task(title="X", **{field: value})


def test_parameters_hold_only_detected_keys():
    command = CreateCommand(original_text="criar dentista", title="dentista")
    assert command.parameters == {"title": "dentista"}


def test_commands_are_immutable():
    command = CreateCommand(title="dentista")
    with pytest.raises(ValidationError):
        command.title = "outro"


def test_build_command_drops_foreign_keys():
    command = build_command("delete", "excluir dentista", {"title": "dentista", "time": "10:00"})
    assert command.type == "delete"
    assert command.parameters == {"title": "dentista"}


def test_update_changes_use_task_field_names():
    command = UpdateCommand(title="dentista", date="2026-10-16", location="Centro", priority="high")
    assert command.changes == {"scheduled_date": "2026-10-16", "location": "Centro", "priority": "high"}


def test_command_union_is_keyed_by_type():
    adapter = TypeAdapter(Command)
    command = adapter.validate_python({"type": "summary", "period": "semana"})
    assert command.period == "semana"
    with pytest.raises(ValidationError):
        adapter.validate_python({"type": "summary", "period": "ano"})


def test_pending_task_defaults_to_today(reference_date):
    fields = PendingTaskInfo(title="Academia").to_task_fields(reference_date)
    assert fields["scheduled_date"] == "2026-10-14"
    assert fields["completed"] is False


def test_preferences_work_day():
    prefs = AssistantPreferences(work_start=time(8, 0), work_end=time(12, 0))
    assert prefs.work_hours.start == "08:00"
    with pytest.raises(ValidationError):
        AssistantPreferences(work_start=time(18, 0), work_end=time(9, 0))
