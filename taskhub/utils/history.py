# taskhub/utils/history.py
import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskhub.models import TaskEditHistory, User

logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if hasattr(value, "isoformat"):
        return value.isoformat()
    if hasattr(value, "value"):  # enums
        return value.value
    return value


def record_task_history(
    db: Session,
    task_id: int,
    editor: User,
    action: str,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """Write an edit history row; failures are logged and never fail the request"""
    try:
        db.add(TaskEditHistory(
            task_id=task_id,
            editor_emp_id=editor.emp_id,
            editor_user_id=editor.id,
            action=action,
            details=_jsonable(details or {}),
        ))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to write task history ({action}) for task {task_id}: {e}")
