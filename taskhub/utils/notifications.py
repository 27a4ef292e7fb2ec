# taskhub/utils/notifications.py
"""
Helpers for building and storing notification rows
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskhub.models import Notification, NotificationType

logger = logging.getLogger(__name__)


def collaborator_notification_title(task_title: Optional[str]) -> str:
    if not task_title:
        return "Added as collaborator"
    return f'Added as collaborator for "{task_title}"'


def collaborator_notification_description(assigner_name: Optional[str], task_title: Optional[str]) -> str:
    name = assigner_name or "Someone"
    title = task_title or "a task"
    return f'{name} has added you as a collaborator for the shared task: "{title}".'


def create_notification(
    db: Session,
    emp_id: str,
    title: str,
    notification_type: str,
    description: Optional[str] = None,
    task_id: Optional[int] = None,
    recipient_id: Optional[str] = None,
    category: Optional[str] = None,
) -> Optional[Notification]:
    """
    Insert a notification row.

    Returns None when the row collides with the task/employee/type/title
    unique constraint; the session is rolled back in that case.
    """
    now = datetime.now(timezone.utc)
    notification = Notification(
        emp_id=str(emp_id),
        task_id=task_id,
        recipient_id=recipient_id,
        type=notification_type,
        notification_category=category,
        title=title,
        description=description,
        read=False,
        created_at=now,
        sent_at=now,
    )
    db.add(notification)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info(f"Duplicate notification skipped for task {task_id}, emp {emp_id}: {title}")
        return None
    db.refresh(notification)
    return notification


def notify_collaborators(
    db: Session,
    task,
    assigner_name: Optional[str],
    skip_emp_id: Optional[str] = None,
    collaborators: Optional[List[str]] = None,
) -> int:
    """
    Send a Shared Task notification to every collaborator except skip_emp_id.
    collaborators narrows the recipients, e.g. to the ones just added.
    """
    if collaborators is None:
        collaborators = task.collaborators or []
    created = 0
    for collaborator in dict.fromkeys(str(c) for c in collaborators):
        if skip_emp_id is not None and collaborator == str(skip_emp_id):
            continue
        notification = create_notification(
            db,
            emp_id=collaborator,
            task_id=task.id,
            title=collaborator_notification_title(task.title),
            description=collaborator_notification_description(assigner_name, task.title),
            notification_type=NotificationType.SHARED_TASK,
            category="collaboration",
        )
        if notification:
            created += 1
    return created
