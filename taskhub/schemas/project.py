from pydantic import BaseModel, field_validator
from typing import Optional, List, Any
from datetime import datetime


def _member_emp_ids(members):
    # Members may arrive as plain emp_ids or as user objects
    emp_ids = []
    for member in members or []:
        if isinstance(member, dict) and member.get("emp_id"):
            emp_ids.append(str(member["emp_id"]))
        elif member is not None and not isinstance(member, dict):
            emp_ids.append(str(member))
    return emp_ids


class ProjectCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = "active"
    members: List[Any] = []

    @field_validator("members", mode="before")
    @classmethod
    def normalize_members(cls, v):
        return _member_emp_ids(v)


class ProjectUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    members: Optional[List[Any]] = None

    @field_validator("members", mode="before")
    @classmethod
    def normalize_members(cls, v):
        if v is None:
            return v
        return _member_emp_ids(v)


class ProjectOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    owner_id: str
    status: str
    members: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }
