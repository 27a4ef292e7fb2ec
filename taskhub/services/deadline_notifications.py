# taskhub/services/deadline_notifications.py
"""
Deadline reminder service: scans due dates and emits notification rows for
task owners and collaborators
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from taskhub.config import settings
from taskhub.database import SessionLocal
from taskhub.models import Task, Notification, NotificationType, TaskStatus
from taskhub.utils.notifications import create_notification

logger = logging.getLogger(__name__)


def upcoming_title(days: int, task_title: str) -> str:
    return f"{days} days before {task_title} is due"


def upcoming_description(days: int, task_title: str, due: date) -> str:
    plural = "s" if days > 1 else ""
    return (
        f'Your task "{task_title}" is due in {days} day{plural} ({due.isoformat()}). '
        "Please make sure to complete it on time."
    )


def missed_title(task_title: str) -> str:
    return f"Overdue: {task_title} deadline has passed"


def missed_description(task_title: str, due: date) -> str:
    return (
        f'Your task "{task_title}" was due on {due.isoformat()} and is now overdue. '
        "Please complete it as soon as possible."
    )


def task_recipients(task: Task) -> List[str]:
    """Owner plus collaborators, each once, in that order"""
    recipients = []
    if task.owner_id:
        recipients.append(str(task.owner_id))
    recipients.extend(str(c) for c in (task.collaborators or []) if c)
    return list(dict.fromkeys(recipients))


class DeadlineNotificationService:
    """Creates Upcoming Deadline / Deadline Missed notifications"""

    def __init__(self, cooldown_seconds: Optional[int] = None, check_days: Optional[List[int]] = None):
        self.cooldown = timedelta(seconds=cooldown_seconds if cooldown_seconds is not None
                                  else settings.deadline_cooldown_seconds())
        self.check_days = list(check_days or settings.DEADLINE_CHECK_DAYS)
        self.last_check: Optional[datetime] = None

    def reset(self):
        self.last_check = None

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def cooldown_remaining(self) -> timedelta:
        if self.last_check is None:
            return timedelta(0)
        remaining = self.last_check + self.cooldown - self._now()
        return max(remaining, timedelta(0))

    def _already_notified(self, db: Session, task_id: int, emp_id: str, notification_type: str,
                          days: Optional[int] = None) -> bool:
        query = db.query(Notification).filter(
            Notification.task_id == task_id,
            Notification.emp_id == emp_id,
            Notification.type == notification_type,
            Notification.read.is_(False),
        )
        if days is not None:
            query = query.filter(Notification.title.ilike(f"%{days} days%"))
        return query.first() is not None

    def check_upcoming_deadlines(self, db: Session, force: bool = False) -> Dict[str, Any]:
        """Notify about tasks due in exactly 1, 3 or 7 days"""
        now = self._now()
        remaining = self.cooldown_remaining()
        if not force and remaining > timedelta(0):
            remaining_minutes = -(-int(remaining.total_seconds()) // 60)
            logger.info(f"Deadline check skipped due to cooldown ({remaining_minutes} min remaining)")
            return {
                "success": True,
                "message": "Deadline check skipped due to cooldown",
                "nextCheckAvailable": (self.last_check + self.cooldown).isoformat(),
                "remainingMinutes": remaining_minutes,
                "skipped": True,
            }

        self.last_check = now
        today = date.today()
        notifications_created = 0
        duplicates_prevented = 0
        tasks_checked = 0

        for days in self.check_days:
            target = today + timedelta(days=days)
            tasks = (
                db.query(Task)
                .filter(Task.due_date == target, Task.status != TaskStatus.COMPLETED.value)
                .all()
            )
            tasks_checked += len(tasks)
            for task in tasks:
                for emp_id in task_recipients(task):
                    if self._already_notified(db, task.id, emp_id, NotificationType.UPCOMING_DEADLINE, days):
                        duplicates_prevented += 1
                        continue
                    notification = create_notification(
                        db,
                        emp_id=emp_id,
                        task_id=task.id,
                        title=upcoming_title(days, task.title),
                        description=upcoming_description(days, task.title, task.due_date),
                        notification_type=NotificationType.UPCOMING_DEADLINE,
                        category="deadline",
                    )
                    if notification is None:
                        duplicates_prevented += 1
                    else:
                        notifications_created += 1

        logger.info(
            f"Upcoming deadline check: {tasks_checked} tasks, {notifications_created} created, "
            f"{duplicates_prevented} duplicates prevented"
        )
        return {
            "success": True,
            "notificationsCreated": notifications_created,
            "duplicatesPrevented": duplicates_prevented,
            "tasksChecked": tasks_checked,
            "timestamp": now.isoformat(),
        }

    def check_missed_deadlines(self, db: Session) -> Dict[str, Any]:
        """Notify about tasks whose due date has passed"""
        today = date.today()
        tasks = (
            db.query(Task)
            .filter(Task.due_date < today, Task.status != TaskStatus.COMPLETED.value)
            .all()
        )
        notifications_created = 0
        duplicates_prevented = 0

        for task in tasks:
            for emp_id in task_recipients(task):
                if self._already_notified(db, task.id, emp_id, NotificationType.DEADLINE_MISSED):
                    duplicates_prevented += 1
                    continue
                notification = create_notification(
                    db,
                    emp_id=emp_id,
                    task_id=task.id,
                    title=missed_title(task.title),
                    description=missed_description(task.title, task.due_date),
                    notification_type=NotificationType.DEADLINE_MISSED,
                    category="deadline",
                )
                if notification is None:
                    duplicates_prevented += 1
                else:
                    notifications_created += 1

        logger.info(
            f"Missed deadline check: {len(tasks)} overdue tasks, {notifications_created} created, "
            f"{duplicates_prevented} duplicates prevented"
        )
        return {
            "success": True,
            "notificationsCreated": notifications_created,
            "duplicatesPrevented": duplicates_prevented,
            "overdueTasks": len(tasks),
        }

    def run_deadline_checks(self, db: Session, force: bool = False) -> Dict[str, Any]:
        upcoming = self.check_upcoming_deadlines(db, force=force)
        missed = self.check_missed_deadlines(db)
        return {
            "success": True,
            "upcoming": upcoming,
            "missed": missed,
            "totalNotificationsCreated": (
                upcoming.get("notificationsCreated", 0) + missed.get("notificationsCreated", 0)
            ),
        }

    def get_status(self) -> Dict[str, Any]:
        next_available = self.last_check + self.cooldown if self.last_check else None
        return {
            "last_check": self.last_check.isoformat() if self.last_check else None,
            "next_check_available": next_available.isoformat() if next_available else None,
            "cooldown_active": self.cooldown_remaining() > timedelta(0),
        }


deadline_service = DeadlineNotificationService()


def run_deadline_checks_in_background(force: bool = False):
    """Entry point for background tasks and the scheduler; owns its session"""
    db = SessionLocal()
    try:
        return deadline_service.run_deadline_checks(db, force=force)
    except Exception as e:
        logger.error(f"Background deadline check failed: {e}")
        return None
    finally:
        db.close()
