# taskhub/services/recurrence.py
"""
Recurring task handling.

A recurring task is an ordinary task carrying recurrence metadata. When an
occurrence is completed the next one is created as a brand new task in the
same series (same ``recurrence_series_id``) with the following due date, and
the subtasks are copied across. There is no separate master record.

Weekday numbers follow the 0 = Sunday .. 6 = Saturday convention used by the
front end.
"""

import calendar
import logging
import uuid
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from taskhub.models import Task, SubTask, TaskStatus, RecurrencePattern

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def _sunday_based_weekday(value: date) -> int:
    return (value.weekday() + 1) % 7


def _add_months(value: date, months: int) -> date:
    """Shift by whole months, clamping the day to the end of the target month"""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def get_next_weekday(from_date: date, target_weekday: int, weeks_to_add: int = 0) -> date:
    """
    Next occurrence of target_weekday strictly after from_date, plus
    weeks_to_add extra weeks. Completing on the target weekday itself moves a
    full week ahead.
    """
    days_to_add = target_weekday - _sunday_based_weekday(from_date)
    if days_to_add <= 0:
        days_to_add += 7
    return from_date + timedelta(days=days_to_add + weeks_to_add * 7)


def calculate_next_occurrence(
    current_date: date,
    pattern: str,
    interval: int = 1,
    weekday: Optional[int] = None,
) -> date:
    """Compute the due date of the occurrence following current_date"""
    if isinstance(current_date, datetime):
        current_date = current_date.date()
    interval = interval or 1
    pattern = pattern.value if isinstance(pattern, RecurrencePattern) else pattern

    if pattern == RecurrencePattern.DAILY.value:
        return current_date + timedelta(days=interval)
    if pattern == RecurrencePattern.WEEKLY.value:
        if weekday is not None:
            return get_next_weekday(current_date, weekday, 0)
        return current_date + timedelta(weeks=interval)
    if pattern == RecurrencePattern.BIWEEKLY.value:
        if weekday is not None:
            return get_next_weekday(current_date, weekday, 1)
        return current_date + timedelta(weeks=2 * interval)
    if pattern == RecurrencePattern.MONTHLY.value:
        return _add_months(current_date, interval)
    if pattern == RecurrencePattern.QUARTERLY.value:
        return _add_months(current_date, 3 * interval)
    if pattern == RecurrencePattern.YEARLY.value:
        return _add_months(current_date, 12 * interval)

    raise ValueError(f"Invalid recurrence pattern: {pattern}")


def should_continue_recurrence(
    next_date: date,
    end_date: Optional[date],
    max_count: Optional[int],
    current_count: int,
) -> bool:
    """Whether a series should produce an occurrence on next_date"""
    if end_date and next_date > end_date:
        return False
    if max_count and current_count >= max_count:
        return False
    return True


def copy_subtasks_to_new_task(db: Session, from_task_id: int, to_task: Task) -> int:
    subtasks = db.query(SubTask).filter(SubTask.parent_task_id == from_task_id).all()
    for subtask in subtasks:
        db.add(SubTask(
            parent_task_id=to_task.id,
            title=subtask.title,
            description=subtask.description,
            priority=subtask.priority,
            status=TaskStatus.ONGOING.value,
            collaborators=list(subtask.collaborators or []),
            owner_id=to_task.owner_id,
        ))
    if subtasks:
        db.commit()
        logger.info(f"Copied {len(subtasks)} subtasks to task {to_task.id}")
    return len(subtasks)


def create_next_recurring_task(db: Session, completed_task: Task) -> Optional[Task]:
    """Create the occurrence following completed_task, or None when the series is over"""
    existing = db.query(Task).filter(Task.parent_recurrence_id == completed_task.id).first()
    if existing:
        logger.info(f"Next occurrence of task {completed_task.id} already exists (task {existing.id})")
        return existing

    weekday = None
    if completed_task.recurrence_pattern in (RecurrencePattern.WEEKLY.value, RecurrencePattern.BIWEEKLY.value):
        weekday = completed_task.recurrence_weekday

    current_due = completed_task.due_date or date.today()
    next_date = calculate_next_occurrence(
        current_due,
        completed_task.recurrence_pattern,
        completed_task.recurrence_interval or 1,
        weekday,
    )

    current_number = completed_task.recurrence_count or 1
    max_count = completed_task.recurrence_max_count
    if max_count is not None and current_number >= max_count:
        logger.info(f"Recurrence completed for '{completed_task.title}' (count limit {current_number}/{max_count})")
        return None

    if not should_continue_recurrence(next_date, completed_task.recurrence_end_date, None, 1):
        logger.info(f"Recurrence completed for '{completed_task.title}' (end date reached)")
        return None

    next_task = Task(
        title=completed_task.title,
        description=completed_task.description,
        due_date=next_date,
        status=TaskStatus.ONGOING.value,
        priority=completed_task.priority,
        owner_id=completed_task.owner_id,
        project_id=completed_task.project_id,
        collaborators=list(completed_task.collaborators or []),
        file=completed_task.file,
        is_recurring=True,
        recurrence_pattern=completed_task.recurrence_pattern,
        recurrence_interval=completed_task.recurrence_interval,
        recurrence_end_date=completed_task.recurrence_end_date,
        recurrence_count=current_number + 1,
        recurrence_max_count=max_count,
        recurrence_weekday=completed_task.recurrence_weekday,
        recurrence_series_id=completed_task.recurrence_series_id,
        parent_recurrence_id=completed_task.id,
    )
    db.add(next_task)
    completed_task.next_occurrence_date = next_date
    db.commit()
    db.refresh(next_task)
    logger.info(f"Created next recurring task '{next_task.title}' (due {next_task.due_date})")

    copy_subtasks_to_new_task(db, completed_task.id, next_task)
    return next_task


def handle_task_completion(db: Session, task_id: int) -> Dict[str, Any]:
    """Spawn the next occurrence of a completed recurring task"""
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        logger.error(f"Task not found: {task_id}")
        return {"success": False, "error": "Task not found"}

    if not task.is_recurring or not task.recurrence_pattern:
        return {"success": True, "message": "Task is not recurring"}

    logger.info(f"Recurring task completed: '{task.title}' (due {task.due_date})")
    next_task = create_next_recurring_task(db, task)
    if next_task is None:
        return {"success": True, "message": "Recurrence series completed"}

    return {
        "success": True,
        "next_task": next_task,
        "message": "Next recurring task created successfully",
    }


def create_recurring_task(db: Session, task_data: Dict[str, Any], weekday_preference: Optional[int] = None) -> Task:
    """
    Create occurrence 1 of a new series. ``recurrence_count`` in task_data is
    the requested number of occurrences and is stored as the series maximum.
    """
    data = dict(task_data)
    max_count = data.pop("recurrence_count", None)
    for key in ("recurrence_weekday", "status", "is_recurring", "recurrence_series_id", "recurrence_max_count"):
        data.pop(key, None)

    task = Task(
        **data,
        status=TaskStatus.ONGOING.value,
        recurrence_series_id=str(uuid.uuid4()),
        is_recurring=True,
        recurrence_weekday=weekday_preference,
        recurrence_count=1,
        recurrence_max_count=max_count,
    )
    db.add(task)
    db.commit()
    db.refresh(task)

    suffix = f" of {max_count}" if max_count else ""
    logger.info(f"Created recurring task '{task.title}' (due {task.due_date}) - occurrence 1{suffix}")
    if weekday_preference is not None:
        logger.info(f"Will recur on {WEEKDAY_NAMES[weekday_preference]}")
    return task


def get_recurrence_instances(db: Session, series_id: str) -> List[Task]:
    return (
        db.query(Task)
        .filter(Task.recurrence_series_id == series_id)
        .order_by(Task.due_date.asc(), Task.id.asc())
        .all()
    )
