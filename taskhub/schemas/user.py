from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
    department: str = Field(..., min_length=1)
    role: str = Field(..., min_length=1)
    emp_id: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RefreshRequest(BaseModel):
    refresh_token: str


class UserOut(BaseModel):
    id: str
    emp_id: str
    name: str
    email: str
    department: Optional[str] = None
    role: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class UserSummary(BaseModel):
    emp_id: str
    name: str
    email: str
    role: Optional[str] = None
    department: Optional[str] = None

    model_config = {
        "from_attributes": True
    }


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    department: Optional[str] = None
    role: Optional[str] = None


class BulkUsersRequest(BaseModel):
    emp_ids: Optional[list] = None
