# taskhub/models/user.py
import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func

from taskhub.database import Base


class UserRole:
    STAFF = "staff"
    MANAGER = "manager"
    HR = "hr"
    DIRECTOR = "director"

    ALL = (STAFF, MANAGER, HR, DIRECTOR)


class User(Base):
    __tablename__ = "users"

    # Internal id; everything user-facing refers to emp_id instead
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    emp_id = Column(String(50), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    department = Column(String(100), nullable=True, index=True)
    role = Column(String(50), nullable=False, default=UserRole.STAFF)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<User(emp_id='{self.emp_id}', name='{self.name}', role='{self.role}')>"
