# taskhub/models/notification.py
from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, UniqueConstraint
from sqlalchemy.sql import func

from taskhub.database import Base


class NotificationType:
    UPCOMING_DEADLINE = "Upcoming Deadline"
    DEADLINE_MISSED = "Deadline Missed"
    SHARED_TASK = "Shared Task"


class Notification(Base):
    __tablename__ = "notifications"
    # One alert per task/employee/type/title, so concurrent deadline checks cannot double-notify
    __table_args__ = (
        UniqueConstraint("task_id", "emp_id", "type", "title", name="uniq_notifications_task_emp_type_title"),
    )

    id = Column(Integer, primary_key=True, index=True)
    emp_id = Column(String(50), nullable=False, index=True)
    task_id = Column(Integer, nullable=True, index=True)
    recipient_id = Column(String(50), nullable=True)
    type = Column(String(50), nullable=False)
    notification_category = Column(String(50), nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Notification(id={self.id}, emp_id='{self.emp_id}', title='{self.title}', type='{self.type}')>"
