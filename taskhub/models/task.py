# taskhub/models/task.py
import enum

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Boolean, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from taskhub.database import Base


class TaskStatus(str, enum.Enum):
    ONGOING = "ongoing"
    UNDER_REVIEW = "under review"
    COMPLETED = "completed"


class RecurrencePattern(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default=TaskStatus.ONGOING.value)
    priority = Column(Integer, nullable=True)  # 1 (lowest) .. 10 (highest)
    due_date = Column(Date, nullable=True, index=True)
    file = Column(String(500), nullable=True)

    # emp_id strings, not foreign keys
    owner_id = Column(String(50), nullable=True, index=True)
    collaborators = Column(JSON, nullable=False, default=list)

    project_id = Column(Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True, index=True)

    # Recurrence
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurrence_pattern = Column(String(20), nullable=True)
    recurrence_interval = Column(Integer, nullable=True)
    recurrence_end_date = Column(Date, nullable=True)
    recurrence_count = Column(Integer, nullable=True)  # occurrence number within the series
    recurrence_max_count = Column(Integer, nullable=True)
    recurrence_weekday = Column(Integer, nullable=True)  # 0 = Sunday .. 6 = Saturday
    recurrence_series_id = Column(String(36), nullable=True, index=True)
    parent_recurrence_id = Column(Integer, nullable=True)
    next_occurrence_date = Column(Date, nullable=True)
    last_completed_date = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    project = relationship("Project", back_populates="tasks")
    subtasks = relationship("SubTask", back_populates="parent_task", cascade="all, delete-orphan")
    history = relationship("TaskEditHistory", back_populates="task", cascade="all, delete-orphan")

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED.value

    def involves(self, emp_id: str) -> bool:
        """True when emp_id owns the task or collaborates on it"""
        if emp_id is None:
            return False
        if str(self.owner_id) == str(emp_id):
            return True
        return str(emp_id) in [str(c) for c in (self.collaborators or [])]
