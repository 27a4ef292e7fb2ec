from pydantic import BaseModel, field_validator
from datetime import date, datetime
from typing import Optional, List, Union

from taskhub.models.task import TaskStatus
from taskhub.schemas.task import not_null


class SubTaskCreate(BaseModel):
    parent_task_id: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Union[int, str]] = None
    status: Optional[TaskStatus] = TaskStatus.ONGOING
    due_date: Optional[date] = None
    collaborators: Optional[List[str]] = None


class SubTaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Union[int, str]] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[date] = None
    collaborators: Optional[List[str]] = None

    @field_validator("status")
    @classmethod
    def status_not_null(cls, v):
        return not_null(v)


class SubTaskOut(BaseModel):
    id: int
    parent_task_id: int
    title: str
    description: Optional[str] = None
    priority: Optional[int] = None
    status: str
    due_date: Optional[date] = None
    collaborators: List[str] = []
    owner_id: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }
