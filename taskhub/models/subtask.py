# taskhub/models/subtask.py
from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from taskhub.database import Base


class SubTask(Base):
    __tablename__ = "sub_task"

    id = Column(Integer, primary_key=True, index=True)
    parent_task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default="ongoing")
    due_date = Column(Date, nullable=True)
    collaborators = Column(JSON, nullable=False, default=list)
    owner_id = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    parent_task = relationship("Task", back_populates="subtasks")
