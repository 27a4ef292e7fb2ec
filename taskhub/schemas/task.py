# taskhub/schemas/task.py
from pydantic import BaseModel, Field, field_validator
from datetime import date, datetime
from typing import Optional, List, Any, Dict

from taskhub.models.task import TaskStatus, RecurrencePattern


def not_null(value):
    # Optional only so the field may be omitted; the column is NOT NULL
    if value is None:
        raise ValueError("must not be null")
    return value


class TaskBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    priority: Optional[int] = Field(None, ge=1, le=10)
    due_date: Optional[date] = None
    project_id: Optional[int] = None
    status: Optional[TaskStatus] = None
    file: Optional[str] = None
    collaborators: Optional[List[str]] = None

    # Recurrence
    is_recurring: Optional[bool] = None
    recurrence_pattern: Optional[RecurrencePattern] = None
    recurrence_interval: Optional[int] = Field(None, ge=1)
    recurrence_end_date: Optional[date] = None
    recurrence_count: Optional[int] = Field(None, ge=1)
    recurrence_weekday: Optional[int] = Field(None, ge=0, le=6)
    parent_recurrence_id: Optional[int] = None
    recurrence_series_id: Optional[str] = None
    next_occurrence_date: Optional[date] = None
    last_completed_date: Optional[date] = None

    @field_validator("collaborators", mode="before")
    @classmethod
    def collaborators_as_strings(cls, v):
        if v is None:
            return v
        return [str(c) for c in v]

    @field_validator("status", "is_recurring")
    @classmethod
    def required_columns(cls, v):
        return not_null(v)


class TaskCreate(TaskBase):
    pass


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    priority: Optional[int] = Field(None, ge=1, le=10)
    due_date: Optional[date] = None
    project_id: Optional[int] = None
    status: Optional[TaskStatus] = None
    file: Optional[str] = None
    collaborators: Optional[List[str]] = None
    is_recurring: Optional[bool] = None
    recurrence_pattern: Optional[RecurrencePattern] = None
    recurrence_interval: Optional[int] = Field(None, ge=1)
    recurrence_end_date: Optional[date] = None
    recurrence_max_count: Optional[int] = Field(None, ge=1)
    recurrence_weekday: Optional[int] = Field(None, ge=0, le=6)

    @field_validator("collaborators", mode="before")
    @classmethod
    def collaborators_as_strings(cls, v):
        if v is None:
            return v
        return [str(c) for c in v]

    @field_validator("title", "status", "is_recurring")
    @classmethod
    def required_columns(cls, v):
        return not_null(v)


class ManagerInfo(BaseModel):
    emp_id: str
    name: str
    department: Optional[str] = None


class TaskOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: str
    priority: Optional[int] = None
    due_date: Optional[date] = None
    file: Optional[str] = None
    owner_id: Optional[str] = None
    collaborators: List[str] = []
    project_id: Optional[int] = None
    is_recurring: bool = False
    recurrence_pattern: Optional[str] = None
    recurrence_interval: Optional[int] = None
    recurrence_end_date: Optional[date] = None
    recurrence_count: Optional[int] = None
    recurrence_max_count: Optional[int] = None
    recurrence_weekday: Optional[int] = None
    recurrence_series_id: Optional[str] = None
    parent_recurrence_id: Optional[int] = None
    next_occurrence_date: Optional[date] = None
    last_completed_date: Optional[date] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    manager: Optional[ManagerInfo] = None
    next_occurrence: Optional["TaskOut"] = None

    model_config = {
        "from_attributes": True
    }


class ProjectTaskOut(BaseModel):
    id: int
    title: str
    status: str
    project_id: Optional[int] = None
    description: Optional[str] = None
    due_date: Optional[date] = None
    priority: Optional[int] = None

    model_config = {
        "from_attributes": True
    }


class BulkProjectTasksRequest(BaseModel):
    project_ids: Optional[Any] = None


class TaskHistoryOut(BaseModel):
    id: int
    task_id: int
    editor_emp_id: Optional[str] = None
    action: str
    details: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }
TaskOut.model_rebuild()
