import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from taskhub.database import get_db
from taskhub.models import SubTask, Task, TaskStatus, User
from taskhub.schemas.subtask import SubTaskCreate, SubTaskUpdate, SubTaskOut
from taskhub.utils.auth import get_current_user
from taskhub.utils.history import record_task_history

logger = logging.getLogger(__name__)

router = APIRouter()


def normalize_priority(value: Optional[Union[int, str]]) -> Optional[int]:
    """Integer priority in 1..10, or None for anything else"""
    if value is None or value == "":
        return None
    try:
        priority = int(value)
    except (TypeError, ValueError):
        return None
    return priority if 1 <= priority <= 10 else None


def _parent_owned_by(db: Session, parent_task_id: int, user: User, verb: str) -> Task:
    parent = db.query(Task).filter(Task.id == parent_task_id).first()
    if not parent:
        raise HTTPException(status_code=404, detail="Parent task not found")
    if str(parent.owner_id) != str(user.emp_id):
        raise HTTPException(status_code=403, detail=f"Only the task owner can {verb} subtasks")
    return parent


def _get_subtask(db: Session, subtask_id: int) -> SubTask:
    subtask = db.query(SubTask).filter(SubTask.id == subtask_id).first()
    if not subtask:
        raise HTTPException(status_code=404, detail="Subtask not found")
    return subtask


@router.get("/task/{task_id}")
def list_subtasks(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    parent = db.query(Task).filter(Task.id == task_id).first()
    if not parent:
        raise HTTPException(status_code=404, detail="Parent task not found")
    if not parent.involves(current_user.emp_id):
        raise HTTPException(status_code=403, detail="Forbidden: no access to this task")

    subtasks = db.query(SubTask).filter(SubTask.parent_task_id == task_id).all()
    # Highest priority first, unprioritised last
    subtasks.sort(key=lambda s: (s.priority is None, -(s.priority or 0), s.id))
    return {"subtasks": [SubTaskOut.model_validate(s) for s in subtasks]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_subtask(
    payload: SubTaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not payload.parent_task_id or not payload.title or not payload.title.strip():
        raise HTTPException(status_code=400, detail="parent_task_id and title are required")

    parent = _parent_owned_by(db, payload.parent_task_id, current_user, "add")

    subtask = SubTask(
        parent_task_id=parent.id,
        title=payload.title.strip(),
        description=payload.description or None,
        priority=normalize_priority(payload.priority),
        status=(payload.status or TaskStatus.ONGOING).value,
        due_date=payload.due_date,
        collaborators=payload.collaborators or [],
        owner_id=parent.owner_id,
    )
    db.add(subtask)
    db.commit()
    db.refresh(subtask)

    record_task_history(db, parent.id, current_user, "subtask_create", {
        "subtask_id": subtask.id,
        "title": subtask.title,
        "priority": subtask.priority,
        "status": subtask.status,
        "due_date": subtask.due_date,
    })
    logger.info(f"Subtask {subtask.id} added to task {parent.id}")
    return {"subtask": SubTaskOut.model_validate(subtask)}


@router.put("/{subtask_id}")
def update_subtask(
    subtask_id: int,
    payload: SubTaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    subtask = _get_subtask(db, subtask_id)
    _parent_owned_by(db, subtask.parent_task_id, current_user, "edit")

    updates = payload.model_dump(exclude_unset=True)
    if "priority" in updates:
        priority = normalize_priority(updates["priority"])
        if priority is None:
            del updates["priority"]
        else:
            updates["priority"] = priority
    if "title" in updates:
        updates["title"] = (updates["title"] or "").strip()
        if not updates["title"]:
            del updates["title"]
    if updates.get("description") == "":
        updates["description"] = None
    if "collaborators" in updates and updates["collaborators"] is None:
        updates["collaborators"] = []
    if "status" in updates:
        updates["status"] = updates["status"].value

    for key, value in updates.items():
        setattr(subtask, key, value)
    db.commit()
    db.refresh(subtask)

    record_task_history(db, subtask.parent_task_id, current_user, "subtask_update", {
        "subtask_id": subtask.id,
        "updates": updates,
    })
    return {"subtask": SubTaskOut.model_validate(subtask)}


@router.delete("/{subtask_id}")
def delete_subtask(
    subtask_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    subtask = _get_subtask(db, subtask_id)
    _parent_owned_by(db, subtask.parent_task_id, current_user, "delete")

    parent_task_id = subtask.parent_task_id
    db.delete(subtask)
    db.commit()

    record_task_history(db, parent_task_id, current_user, "subtask_delete", {"subtask_id": subtask_id})
    return {"ok": True}
