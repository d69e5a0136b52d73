from __future__ import annotations

import json
import logging
from datetime import time
from pathlib import Path

from agenda_ai.models import AssistantPreferences

logger = logging.getLogger(__name__)

_TIME_FIELDS = ("work_start", "work_end")


def _time_to_str(t: time) -> str:
    return t.strftime("%H:%M")


def _str_to_time(s: str) -> time:
    h, m = map(int, s.split(":"))
    return time(h, m)


class PreferencesStore:
    def __init__(self, path: str = "data/assistant_preferences.json"):
        self.path = Path(path)

    def load(self) -> AssistantPreferences:
        try:
            if not self.path.exists():
                return AssistantPreferences()

            data = json.loads(self.path.read_text(encoding="utf-8"))
            for key in _TIME_FIELDS:
                if isinstance(data.get(key), str):
                    data[key] = _str_to_time(data[key])

            return AssistantPreferences(**data)
        except Exception as e:
            logger.warning("Unreadable preferences at %s, using defaults: %s", self.path, e)
            return AssistantPreferences()

    def save(self, prefs: AssistantPreferences) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        data = prefs.model_dump()
        for key in _TIME_FIELDS:
            if isinstance(data.get(key), time):
                data[key] = _time_to_str(data[key])

        self.path.write_text(
            json.dumps(data, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
