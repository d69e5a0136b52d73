from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from agenda_ai.models import SchedulingConflict, Task
from agenda_ai.timeutils import minutes_to_time, time_to_minutes

logger = logging.getLogger(__name__)

PROXIMITY_MIN = 30
TRAVEL_MIN = 60


def interval(task: Task) -> Optional[Tuple[int, int]]:
    """``(start, end)`` in minutes from midnight, or None for untimed tasks."""
    if not task.start_time:
        return None
    start = time_to_minutes(task.start_time)
    return start, start + task.effective_duration


def _gap_below(a: Tuple[int, int], b: Tuple[int, int], limit: int) -> bool:
    return abs(a[1] - b[0]) < limit or abs(b[1] - a[0]) < limit


class ConflictDetector:
    """Overlap, proximity and travel-time checks between same-day tasks."""

    def detect(self, candidate: Task, all_tasks: Iterable[Task]) -> List[SchedulingConflict]:
        if not candidate.scheduled_date:
            return []
        same_day = [
            t for t in all_tasks
            if t.scheduled_date == candidate.scheduled_date
            and not (candidate.id is not None and t.id == candidate.id)
        ]
        span = interval(candidate)
        if span is None or not same_day:
            return []

        timed = [(t, interval(t)) for t in same_day if t.start_time]
        conflicts = self._time_conflicts(candidate, span, timed)
        conflicts += self._location_conflicts(candidate, span, timed)
        if conflicts:
            logger.info(
                "Task %r has %d conflict(s) on %s",
                candidate.title, len(conflicts), candidate.scheduled_date,
            )
        return conflicts

    def _time_conflicts(self, candidate, span, timed) -> List[SchedulingConflict]:
        found = []
        for other, other_span in timed:
            # Touching endpoints count as an overlap.
            if span[0] <= other_span[1] and span[1] >= other_span[0]:
                found.append(SchedulingConflict(
                    task_id=candidate.id,
                    conflicting_task_id=other.id,
                    conflict_type="overlap",
                    severity="high",
                    suggestion=(
                        f'Este compromisso se sobrepõe a "{other.title}" '
                        f"das {other.start_time} às {minutes_to_time(other_span[1])}."
                    ),
                ))
            elif _gap_below(span, other_span, PROXIMITY_MIN):
                found.append(SchedulingConflict(
                    task_id=candidate.id,
                    conflicting_task_id=other.id,
                    conflict_type="proximity",
                    severity="medium",
                    suggestion=(
                        f'Este compromisso está muito próximo de "{other.title}". '
                        "Considere adicionar mais tempo entre eles."
                    ),
                ))
        return found

    def _location_conflicts(self, candidate, span, timed) -> List[SchedulingConflict]:
        if not candidate.location:
            return []
        found = []
        for other, other_span in timed:
            if not other.location or other.location == candidate.location:
                continue
            if _gap_below(span, other_span, TRAVEL_MIN):
                found.append(SchedulingConflict(
                    task_id=candidate.id,
                    conflicting_task_id=other.id,
                    conflict_type="location",
                    severity="medium",
                    suggestion=(
                        f'Você tem pouco tempo para se deslocar de "{candidate.location}" '
                        f'para "{other.location}". Considere reagendar ou adicionar mais '
                        "tempo entre os compromissos."
                    ),
                ))
        return found
