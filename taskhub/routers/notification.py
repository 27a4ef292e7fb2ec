import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from taskhub.database import get_db
from taskhub.models import Notification, User
from taskhub.schemas.notification import NotificationCreate, NotificationOut, UnreadCount, DeadlineCheckRequest
from taskhub.services.deadline_notifications import deadline_service, run_deadline_checks_in_background
from taskhub.utils.auth import get_current_user
from taskhub.utils.notifications import create_notification

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[NotificationOut])
def list_notifications(
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notifications = (
        db.query(Notification)
        .filter(Notification.emp_id == current_user.emp_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )
    # Opportunistic deadline scan; the cooldown keeps this cheap
    background_tasks.add_task(run_deadline_checks_in_background, False)
    return notifications


@router.get("/unread-count", response_model=UnreadCount)
def unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    count = (
        db.query(Notification)
        .filter(Notification.emp_id == current_user.emp_id, Notification.read.is_(False))
        .count()
    )
    return {"unread_count": count}


@router.post("", response_model=NotificationOut, status_code=status.HTTP_201_CREATED)
def add_notification(
    payload: NotificationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not payload.title or not payload.type or not payload.emp_id:
        raise HTTPException(status_code=400, detail="Missing required fields")

    notification = create_notification(
        db,
        emp_id=payload.emp_id,
        title=payload.title,
        notification_type=payload.type,
        description=payload.description,
        task_id=payload.task_id,
        recipient_id=payload.recipient_id,
    )
    if notification is None:
        raise HTTPException(status_code=409, detail="Notification already exists")
    return notification


@router.patch("/mark-all-read")
def mark_all_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    unread = (
        db.query(Notification)
        .filter(Notification.emp_id == current_user.emp_id, Notification.read.is_(False))
        .all()
    )
    now = datetime.now(timezone.utc)
    for notification in unread:
        notification.read = True
        notification.read_at = now
    db.commit()

    return {
        "message": "All notifications marked as read",
        "updated_count": len(unread),
        "data": [NotificationOut.model_validate(n) for n in unread],
    }


@router.patch("/{notification_id}/read", response_model=NotificationOut)
def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.emp_id == current_user.emp_id)
        .first()
    )
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    if not notification.read:
        notification.read = True
        notification.read_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(notification)
    return notification


@router.post("/check-deadlines")
def check_deadlines(
    payload: Optional[DeadlineCheckRequest] = Body(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    force = bool(payload and payload.force)
    logger.info(f"Deadline check requested by {current_user.emp_id} (force={force})")
    return deadline_service.run_deadline_checks(db, force=force)


@router.get("/deadline-status")
def deadline_status(current_user: User = Depends(get_current_user)):
    return {
        "success": True,
        "message": "Deadline service status retrieved",
        "data": deadline_service.get_status(),
    }
