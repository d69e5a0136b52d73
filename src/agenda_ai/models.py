from __future__ import annotations

from datetime import date as Date, time
from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from agenda_ai.timeutils import DEFAULT_DURATION_MIN, normalize_clock, parse_duration


CommandType = Literal["create", "update", "delete", "query", "summary", "optimize", "unknown"]
Priority = Literal["high", "medium", "low"]
QueryFilter = Literal["hoje", "amanhã", "semana", "mês"]
Period = Literal["dia", "semana", "mês"]
ConflictType = Literal["overlap", "proximity", "location"]
Severity = Literal["low", "medium", "high"]

# Only detected keys are present; values are never None.
ParameterBag = Dict[str, str]


def _iso_date(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    return Date.fromisoformat(v).isoformat()


def _clock(v: Optional[str]) -> Optional[str]:
    return normalize_clock(v) if v is not None else v


class Task(BaseModel):
    """A stored task as supplied by the caller. The core never mutates it."""

    id: Optional[str] = None
    title: str = Field(..., min_length=1)
    scheduled_date: Optional[str] = None
    start_time: Optional[str] = None
    duration: Optional[int] = None
    location: Optional[str] = None
    completed: bool = False
    type: str = "task"
    priority: Optional[Priority] = None

    @field_validator("id", mode="before")
    @classmethod
    def id_as_str(cls, v: Any) -> Optional[str]:
        return str(v) if v is not None else None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v2 = v.strip()
        if not v2:
            raise ValueError("title must not be blank")
        return v2

    @field_validator("scheduled_date")
    @classmethod
    def valid_date(cls, v: Optional[str]) -> Optional[str]:
        return _iso_date(v)

    @field_validator("start_time")
    @classmethod
    def valid_time(cls, v: Optional[str]) -> Optional[str]:
        return _clock(v)

    @field_validator("duration", mode="before")
    @classmethod
    def duration_minutes(cls, v: Any) -> Optional[int]:
        return parse_duration(v)

    @property
    def effective_duration(self) -> int:
        return self.duration or DEFAULT_DURATION_MIN


class PendingTaskInfo(BaseModel):
    title: str = Field(..., min_length=1)
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None

    @field_validator("time")
    @classmethod
    def valid_time(cls, v: Optional[str]) -> Optional[str]:
        return _clock(v)

    def to_task_fields(self, today: Date) -> Dict[str, Any]:
        return {
            "title": self.title,
            "scheduled_date": self.date or today.isoformat(),
            "start_time": self.time,
            "location": self.location,
            "completed": False,
            "type": "task",
        }


class SchedulingConflict(BaseModel):
    task_id: Optional[str] = None
    conflicting_task_id: Optional[str] = None
    conflict_type: ConflictType
    severity: Severity
    suggestion: str


class CommandResult(BaseModel):
    success: bool
    message: str
    data: Optional[Any] = None


class Slot(BaseModel):
    date: str
    time: str


class Message(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class WorkHours(BaseModel):
    start: str = "09:00"
    end: str = "18:00"

    @field_validator("start", "end")
    @classmethod
    def valid_clock(cls, v: str) -> str:
        return normalize_clock(v)

    @model_validator(mode="after")
    def start_before_end(self) -> "WorkHours":
        if self.start >= self.end:
            raise ValueError("work hours must start before they end")
        return self


class AssistantPreferences(BaseModel):
    work_start: time = Field(default_factory=lambda: time(9, 0))
    work_end: time = Field(default_factory=lambda: time(18, 0))
    horizon_days: int = Field(7, ge=1, le=31)
    default_duration_min: int = Field(DEFAULT_DURATION_MIN, gt=0)

    @model_validator(mode="after")
    def work_day_not_empty(self) -> "AssistantPreferences":
        if self.work_start >= self.work_end:
            raise ValueError("work_start must be before work_end")
        return self

    @property
    def work_hours(self) -> WorkHours:
        return WorkHours(
            start=self.work_start.strftime("%H:%M"),
            end=self.work_end.strftime("%H:%M"),
        )


# --- commands -------------------------------------------------------------


class BaseCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    original_text: str = ""

    @property
    def parameters(self) -> ParameterBag:
        return self.model_dump(exclude={"type", "original_text"}, exclude_none=True)


class _ScheduledFields(BaseCommand):
    title: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None
    duration: Optional[str] = Field(None, pattern=r"^\d+(min|h)$")
    priority: Optional[Priority] = None

    @field_validator("date")
    @classmethod
    def valid_date(cls, v: Optional[str]) -> Optional[str]:
        return _iso_date(v)

    @field_validator("time")
    @classmethod
    def valid_time(cls, v: Optional[str]) -> Optional[str]:
        return _clock(v)


class CreateCommand(_ScheduledFields):
    type: Literal["create"] = "create"


class UpdateCommand(_ScheduledFields):
    type: Literal["update"] = "update"
    task_id: Optional[str] = None

    @property
    def changes(self) -> Dict[str, str]:
        """Requested new values, keyed by Task field name."""
        mapping = {"date": "scheduled_date", "time": "start_time", "location": "location",
                   "duration": "duration", "priority": "priority"}
        params = self.parameters
        return {field: params[key] for key, field in mapping.items() if key in params}


class DeleteCommand(BaseCommand):
    type: Literal["delete"] = "delete"
    title: Optional[str] = None
    task_id: Optional[str] = None


class QueryCommand(BaseCommand):
    type: Literal["query"] = "query"
    filter: Optional[QueryFilter] = None
    date: Optional[str] = None
    period: Optional[Period] = None


class SummaryCommand(BaseCommand):
    type: Literal["summary"] = "summary"
    period: Optional[Period] = None


class OptimizeCommand(BaseCommand):
    type: Literal["optimize"] = "optimize"


class UnknownCommand(BaseCommand):
    type: Literal["unknown"] = "unknown"


Command = Annotated[
    Union[
        CreateCommand,
        UpdateCommand,
        DeleteCommand,
        QueryCommand,
        SummaryCommand,
        OptimizeCommand,
        UnknownCommand,
    ],
    Field(discriminator="type"),
]

COMMAND_VARIANTS = {
    "create": CreateCommand,
    "update": UpdateCommand,
    "delete": DeleteCommand,
    "query": QueryCommand,
    "summary": SummaryCommand,
    "optimize": OptimizeCommand,
    "unknown": UnknownCommand,
}


def build_command(command_type: str, original_text: str, parameters: ParameterBag) -> BaseCommand:
    """Build the variant for ``command_type``, keeping only the parameters it declares."""
    cls = COMMAND_VARIANTS[command_type]
    fields = {
        k: v
        for k, v in parameters.items()
        if k in cls.model_fields and k not in {"type", "original_text"}
    }
    return cls(original_text=original_text, **fields)
