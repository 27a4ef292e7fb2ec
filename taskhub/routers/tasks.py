import enum
import logging
import uuid
from datetime import date
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from taskhub.database import get_db, json_list_may_contain
from taskhub.models import Task, TaskEditHistory, TaskStatus, User
from taskhub.schemas.task import (
    TaskCreate,
    TaskUpdate,
    TaskOut,
    ManagerInfo,
    ProjectTaskOut,
    BulkProjectTasksRequest,
    TaskHistoryOut,
)
from taskhub.services import recurrence
from taskhub.utils.auth import get_current_user
from taskhub.utils.history import record_task_history
from taskhub.utils.notifications import notify_collaborators

logger = logging.getLogger(__name__)

router = APIRouter()


def _column_values(data: dict) -> dict:
    return {key: value.value if isinstance(value, enum.Enum) else value for key, value in data.items()}


def _managers_for(db: Session, tasks: List[Task]) -> Dict[str, User]:
    owner_ids = {t.owner_id for t in tasks if t.owner_id}
    if not owner_ids:
        return {}
    owners = db.query(User).filter(User.emp_id.in_(owner_ids)).all()
    return {u.emp_id: u for u in owners}


def _task_out(task: Task, managers: Dict[str, User]) -> TaskOut:
    out = TaskOut.model_validate(task)
    owner = managers.get(task.owner_id)
    if owner:
        out.manager = ManagerInfo(emp_id=owner.emp_id, name=owner.name, department=owner.department)
    return out


def _get_visible_task(db: Session, task_id: int, user: User) -> Task:
    task = db.query(Task).filter(Task.id == task_id).first()
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    if not task.involves(user.emp_id):
        raise HTTPException(status_code=403, detail="Forbidden: no access to this task")
    return task


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    data = _column_values(payload.model_dump(exclude_unset=True))
    data["owner_id"] = current_user.emp_id
    data["collaborators"] = data.get("collaborators") or []
    data.setdefault("status", TaskStatus.ONGOING.value)

    if data.get("is_recurring") and data.get("recurrence_pattern"):
        data.pop("status", None)
        task = recurrence.create_recurring_task(db, data, data.get("recurrence_weekday"))
    else:
        data.pop("recurrence_count", None)
        task = Task(**data)
        db.add(task)
        db.commit()
        db.refresh(task)

    logger.info(f"Task {task.id} created by {current_user.emp_id}")
    record_task_history(db, task.id, current_user, "create", {"title": task.title})
    notify_collaborators(db, task, current_user.name, skip_emp_id=current_user.emp_id)

    return _task_out(task, {current_user.emp_id: current_user})


@router.get("")
def list_tasks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Tasks the caller owns or collaborates on, newest first"""
    emp_id = current_user.emp_id
    tasks = (
        db.query(Task)
        .filter(or_(Task.owner_id == emp_id, json_list_may_contain(Task.collaborators, emp_id)))
        .order_by(Task.created_at.desc(), Task.id.desc())
        .all()
    )
    tasks = [t for t in tasks if t.involves(emp_id)]
    managers = _managers_for(db, tasks)
    return {"tasks": [_task_out(t, managers) for t in tasks]}


@router.post("/bulk", response_model=List[ProjectTaskOut])
def tasks_for_projects(
    payload: BulkProjectTasksRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not isinstance(payload.project_ids, list):
        raise HTTPException(status_code=400, detail="project_ids array is required")
    if not payload.project_ids:
        return []
    return db.query(Task).filter(Task.project_id.in_(payload.project_ids)).all()


@router.get("/project/{project_id}", response_model=List[ProjectTaskOut])
def tasks_for_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return db.query(Task).filter(Task.project_id == project_id).all()


@router.get("/recurrence/{series_id}", response_model=List[TaskOut])
def recurrence_series(
    series_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    tasks = recurrence.get_recurrence_instances(db, series_id)
    tasks = [t for t in tasks if t.involves(current_user.emp_id)]
    managers = _managers_for(db, tasks)
    return [_task_out(t, managers) for t in tasks]


@router.get("/{task_id}", response_model=TaskOut)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = _get_visible_task(db, task_id, current_user)
    return _task_out(task, _managers_for(db, [task]))


@router.get("/{task_id}/history", response_model=List[TaskHistoryOut])
def task_history(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _get_visible_task(db, task_id, current_user)
    return (
        db.query(TaskEditHistory)
        .filter(TaskEditHistory.task_id == task_id)
        .order_by(TaskEditHistory.created_at.desc(), TaskEditHistory.id.desc())
        .all()
    )


@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    payload: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = db.query(Task).filter(Task.id == task_id, Task.owner_id == current_user.emp_id).first()
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")

    update_data = _column_values(payload.model_dump(exclude_unset=True))
    was_completed = task.is_completed
    previous_collaborators = {str(c) for c in (task.collaborators or [])}

    changes = {}
    for key, value in update_data.items():
        old = getattr(task, key)
        if old != value:
            changes[key] = {"from": old, "to": value}
        setattr(task, key, value)

    if task.collaborators is None:
        task.collaborators = []
    # A task switched to recurring starts a new series
    if task.is_recurring and task.recurrence_pattern and not task.recurrence_series_id:
        task.recurrence_series_id = str(uuid.uuid4())
        task.recurrence_count = 1

    completed_now = task.is_completed and not was_completed
    if completed_now:
        task.last_completed_date = date.today()

    db.commit()
    db.refresh(task)
    logger.info(f"Task {task.id} updated by {current_user.emp_id}: {sorted(changes)}")

    if changes:
        record_task_history(db, task.id, current_user, "update", changes)

    added = [c for c in (task.collaborators or []) if str(c) not in previous_collaborators]
    if added:
        notify_collaborators(db, task, current_user.name, skip_emp_id=current_user.emp_id, collaborators=added)

    next_task = None
    if completed_now and task.is_recurring:
        result = recurrence.handle_task_completion(db, task.id)
        next_task = result.get("next_task")
        db.refresh(task)

    managers = {current_user.emp_id: current_user}
    out = _task_out(task, managers)
    if next_task is not None:
        out.next_occurrence = _task_out(next_task, managers)
    return out


@router.delete("/{task_id}")
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    task = db.query(Task).filter(Task.id == task_id, Task.owner_id == current_user.emp_id).first()
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")

    db.delete(task)
    db.commit()
    logger.info(f"Task {task_id} deleted by {current_user.emp_id}")
    return {"ok": True}
