import logging
import time
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from agenda_ai.models import AssistantPreferences, Command, Message, Task
from api.dependencies import get_preferences, get_task_store, get_today
from api.metrics import COMMANDS_TOTAL, record_conflicts, record_request
from execution.command_executor import CommandExecutor
from parsing.command_parser import CommandParser
from storage.task_store import TaskStore

router = APIRouter()
logger = logging.getLogger(__name__)
parser = CommandParser()


class ParseIn(BaseModel):
    text: str = Field(..., min_length=1)
    history: List[Message] = Field(default_factory=list)
    reference_date: Optional[date] = None


class ExecuteIn(BaseModel):
    command: Command
    # Omitted -> the stored tasks are used as the snapshot.
    tasks: Optional[List[Task]] = None
    today: Optional[date] = None


@router.post("/commands/parse")
async def parse_command(payload: ParseIn, today: date = Depends(get_today)) -> dict:
    start = time.time()
    command = parser.parse(payload.text, payload.history, payload.reference_date or today)
    record_request("/commands/parse", command.type, start)
    return {"command": command.model_dump(), "parameters": command.parameters}


@router.post("/commands/execute")
async def execute_command(
    payload: ExecuteIn,
    store: TaskStore = Depends(get_task_store),
    preferences: AssistantPreferences = Depends(get_preferences),
    today: date = Depends(get_today),
) -> dict:
    start = time.time()
    tasks = payload.tasks if payload.tasks is not None else store.list_tasks()
    executor = CommandExecutor(preferences=preferences)
    result = executor.dispatch(payload.command, tasks, payload.today or today)

    COMMANDS_TOTAL.labels(type=payload.command.type).inc()
    if isinstance(result.data, dict):
        record_conflicts(result.data.get("conflicts"))
    record_request("/commands/execute", "ok" if result.success else "failed", start)
    return result.model_dump()
