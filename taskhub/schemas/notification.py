# taskhub/schemas/notification.py
from pydantic import BaseModel, field_validator
from typing import Optional, Union
from datetime import datetime


class NotificationCreate(BaseModel):
    title: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    emp_id: Optional[Union[str, int]] = None
    task_id: Optional[int] = None
    recipient_id: Optional[Union[str, int]] = None

    @field_validator("emp_id", "recipient_id", mode="after")
    @classmethod
    def as_string(cls, v):
        return None if v is None else str(v)


class NotificationOut(BaseModel):
    id: int
    emp_id: str
    task_id: Optional[int] = None
    recipient_id: Optional[str] = None
    type: str
    notification_category: Optional[str] = None
    title: str
    description: Optional[str] = None
    read: bool
    read_at: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class UnreadCount(BaseModel):
    unread_count: int


class DeadlineCheckRequest(BaseModel):
    force: Optional[bool] = False
