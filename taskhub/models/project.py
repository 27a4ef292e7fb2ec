# taskhub/models/project.py
from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from taskhub.database import Base


class ProjectStatus:
    ACTIVE = "active"
    COMPLETED = "completed"
    ON_HOLD = "on-hold"


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    owner_id = Column(String(50), nullable=False, index=True)  # emp_id
    status = Column(String(20), nullable=False, default=ProjectStatus.ACTIVE)
    members = Column(JSON, nullable=False, default=list)  # emp_ids
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    tasks = relationship("Task", back_populates="project")

    def has_member(self, emp_id: str) -> bool:
        return str(self.owner_id) == str(emp_id) or str(emp_id) in [str(m) for m in (self.members or [])]
