import logging
import time
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from agenda_ai.errors import NoSuitableSlot
from agenda_ai.models import AssistantPreferences, Task, WorkHours
from api.dependencies import get_preferences, get_task_store, get_today
from api.metrics import record_conflicts, record_request
from scheduling.conflict_detector import ConflictDetector
from scheduling.optimizer import suggest_optimizations
from scheduling.scheduler import RescheduleRequest, Scheduler
from scheduling.slot_finder import SlotFinder
from storage.task_store import TaskStore

router = APIRouter()
logger = logging.getLogger(__name__)


class ConflictsIn(BaseModel):
    candidate: Task
    tasks: Optional[List[Task]] = None


class SlotIn(BaseModel):
    task: Task
    tasks: Optional[List[Task]] = None
    horizon_days: Optional[int] = Field(None, ge=1, le=31)
    work_hours: Optional[WorkHours] = None
    today: Optional[date] = None


class RescheduleIn(RescheduleRequest):
    force: bool = False
    today: Optional[date] = None


@router.post("/scheduling/conflicts")
async def detect_conflicts(payload: ConflictsIn, store: TaskStore = Depends(get_task_store)) -> dict:
    start = time.time()
    tasks = payload.tasks if payload.tasks is not None else store.list_tasks()
    conflicts = [c.model_dump() for c in ConflictDetector().detect(payload.candidate, tasks)]
    record_conflicts(conflicts)
    record_request("/scheduling/conflicts", "ok", start)
    return {"conflicts": conflicts}


@router.post("/scheduling/slot")
async def find_slot(
    payload: SlotIn,
    store: TaskStore = Depends(get_task_store),
    preferences: AssistantPreferences = Depends(get_preferences),
    today: date = Depends(get_today),
) -> dict:
    start = time.time()
    tasks = payload.tasks if payload.tasks is not None else store.list_tasks()
    task = payload.task
    if task.duration is None:
        task = task.model_copy(update={"duration": preferences.default_duration_min})
    horizon = payload.horizon_days or preferences.horizon_days

    slot = SlotFinder().find_slot(
        task,
        tasks,
        horizon_days=horizon,
        work_hours=payload.work_hours or preferences.work_hours,
        today=payload.today or today,
    )
    if slot is None:
        record_request("/scheduling/slot", "not_found", start)
        raise HTTPException(status_code=404, detail=f"No free slot in the next {horizon} days")
    record_request("/scheduling/slot", "ok", start)
    return {"slot": slot.model_dump()}


@router.post("/scheduling/reschedule")
async def reschedule(
    payload: RescheduleIn,
    store: TaskStore = Depends(get_task_store),
    preferences: AssistantPreferences = Depends(get_preferences),
    today: date = Depends(get_today),
) -> dict:
    start = time.time()
    tasks = store.list_tasks()
    if not any(t.id == payload.task_id for t in tasks):
        record_request("/scheduling/reschedule", "not_found", start)
        raise HTTPException(status_code=404, detail="Task not found")

    request = RescheduleRequest(
        task_id=payload.task_id, new_date=payload.new_date, new_time=payload.new_time
    )
    try:
        result = Scheduler(preferences=preferences).reschedule(
            request, tasks, store, force=payload.force, today=payload.today or today
        )
    except NoSuitableSlot as e:
        record_request("/scheduling/reschedule", "not_found", start)
        raise HTTPException(status_code=404, detail=e.message)

    if not result.success and isinstance(result.data, dict) and result.data.get("conflicts"):
        record_conflicts(result.data["conflicts"])
        record_request("/scheduling/reschedule", "conflict", start)
        raise HTTPException(status_code=409, detail=result.model_dump())

    record_request("/scheduling/reschedule", "ok" if result.success else "failed", start)
    return result.model_dump()


@router.get("/scheduling/suggestions")
async def suggestions(store: TaskStore = Depends(get_task_store)) -> dict:
    return {"suggestions": suggest_optimizations(store.list_tasks())}
