# taskhub/models/task_history.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from taskhub.database import Base


class TaskEditHistory(Base):
    __tablename__ = "task_edit_history"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    editor_emp_id = Column(String(50), nullable=True)
    editor_user_id = Column(String(36), nullable=True)
    action = Column(String(50), nullable=False)  # task_update, subtask_create, subtask_update
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    task = relationship("Task", back_populates="history")
