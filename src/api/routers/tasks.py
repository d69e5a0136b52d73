import logging

from fastapi import APIRouter, Depends, HTTPException

from agenda_ai.errors import TaskStoreError
from agenda_ai.models import Task
from api.dependencies import get_task_store
from storage.task_store import TaskStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/tasks")
async def get_tasks(store: TaskStore = Depends(get_task_store)) -> dict:
    tasks = sorted(
        store.list_tasks(),
        key=lambda t: (t.scheduled_date or "", t.start_time or ""),
    )
    return {"tasks": [t.model_dump() for t in tasks], "total": len(tasks)}


@router.post("/tasks")
async def create_task(payload: Task, store: TaskStore = Depends(get_task_store)) -> dict:
    """Manually create a task, bypassing the assistant."""
    try:
        task_id = store.create_task(payload.model_dump(exclude={"id"}))
    except TaskStoreError as e:
        logger.error(f"Error creating task: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    task = next(t for t in store.list_tasks() if t.id == task_id)
    return {"status": "created", "task": task.model_dump()}


@router.delete("/tasks/{task_id}")
async def delete_task(task_id: str, store: TaskStore = Depends(get_task_store)) -> dict:
    try:
        store.delete_task(task_id)
    except TaskStoreError:
        raise HTTPException(status_code=404, detail="Task not found")
    return {"status": "deleted"}
