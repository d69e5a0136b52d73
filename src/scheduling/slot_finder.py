from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional, Tuple

from agenda_ai.models import Slot, Task, WorkHours
from agenda_ai.timeutils import minutes_to_time, time_to_minutes
from scheduling.conflict_detector import interval

logger = logging.getLogger(__name__)

Interval = Tuple[int, int]

DEFAULT_HORIZON_DAYS = 7


def merge_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    """Merge overlapping or adjacent ``[start, end)`` intervals."""
    merged: List[Interval] = []
    for start, end in sorted(intervals):
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def free_gaps(busy: List[Interval], work_start: int, work_end: int) -> List[Interval]:
    gaps = []
    cursor = work_start
    for start, end in busy:
        if start > cursor:
            gaps.append((cursor, min(start, work_end)))
        cursor = max(cursor, end)
        if cursor >= work_end:
            break
    if cursor < work_end:
        gaps.append((cursor, work_end))
    return [g for g in gaps if g[1] > g[0]]


class SlotFinder:
    def find_slot(
        self,
        task: Task,
        all_tasks: Iterable[Task],
        horizon_days: int = DEFAULT_HORIZON_DAYS,
        work_hours: Optional[WorkHours] = None,
        today: Optional[date] = None,
    ) -> Optional[Slot]:
        """First gap, day by day from ``today``, that fits the task's duration."""
        hours = work_hours or WorkHours()
        start_day = today or date.today()
        needed = task.effective_duration
        work_start, work_end = time_to_minutes(hours.start), time_to_minutes(hours.end)
        tasks = [t for t in all_tasks if not (task.id is not None and t.id == task.id)]

        for offset in range(horizon_days):
            day = (start_day + timedelta(days=offset)).isoformat()
            busy = merge_intervals(
                interval(t) for t in tasks if t.scheduled_date == day and t.start_time
            )
            for gap_start, gap_end in free_gaps(busy, work_start, work_end):
                if gap_end - gap_start >= needed:
                    return Slot(date=day, time=minutes_to_time(gap_start))

        logger.info("No %d-minute slot for %r in the next %d days", needed, task.title, horizon_days)
        return None
