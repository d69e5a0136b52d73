from datetime import date

import pytest

from agenda_ai.models import Task
from storage.task_store import InMemoryTaskStore

# A Wednesday; the next Sunday is 2026-10-18 and the next Monday 2026-10-19.
REFERENCE_DATE = date(2026, 10, 14)


class FakeConnectivity:
    def __init__(self, online: bool):
        self.online = online
        self.check_url = ""

    def is_online(self) -> bool:
        return self.online


@pytest.fixture
def reference_date():
    return REFERENCE_DATE


@pytest.fixture
def fake_connectivity_factory():
    def _make(online: bool = True):
        return FakeConnectivity(online)
    return _make


@pytest.fixture
def store():
    return InMemoryTaskStore()


@pytest.fixture
def task_factory():
    counter = {"n": 0}

    def _make(title="Tarefa", scheduled_date="2026-10-14", start_time=None, duration=None, **kw):
        counter["n"] += 1
        kw.setdefault("id", f"t{counter['n']}")
        return Task(
            title=title,
            scheduled_date=scheduled_date,
            start_time=start_time,
            duration=duration,
            **kw,
        )
    return _make
