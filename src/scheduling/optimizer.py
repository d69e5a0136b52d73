from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List

from agenda_ai.models import Task
from agenda_ai.timeutils import format_date

GROUP_MIN_TASKS = 3
GROUP_MIN_DAYS = 3
OVERLOADED_DAY = 8
LIGHT_DAY = 2


def suggest_optimizations(tasks: Iterable[Task]) -> List[str]:
    """Grouping and redistribution tips for a task snapshot."""
    tasks = list(tasks)
    suggestions: List[str] = []

    by_type: Dict[str, List[Task]] = defaultdict(list)
    for task in tasks:
        if task.type:
            by_type[task.type].append(task)
    for task_type, same_type in by_type.items():
        days = {t.scheduled_date for t in same_type}
        if len(same_type) >= GROUP_MIN_TASKS and len(days) >= GROUP_MIN_DAYS:
            suggestions.append(
                f'Você tem {len(same_type)} tarefas do tipo "{task_type}" espalhadas em '
                "diferentes dias. Considere agrupá-las para maior produtividade."
            )

    by_date: Dict[str, List[Task]] = defaultdict(list)
    for task in tasks:
        by_date[task.scheduled_date].append(task)
    overloaded = [d for d, ts in by_date.items() if d and len(ts) > OVERLOADED_DAY]
    light = [d for d, ts in by_date.items() if d and len(ts) < LIGHT_DAY]
    if overloaded and light:
        busy_day, quiet_day = overloaded[0], light[0]
        suggestions.append(
            f"Você tem muitas tarefas em {format_date(busy_day)} ({len(by_date[busy_day])}) "
            f"e poucas em {format_date(quiet_day)} ({len(by_date[quiet_day])}). "
            "Considere redistribuir algumas tarefas."
        )
    return suggestions
