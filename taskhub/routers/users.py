from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from taskhub.database import get_db
from taskhub.models import User
from taskhub.schemas.user import UserSummary, BulkUsersRequest
from taskhub.utils.auth import get_current_user

router = APIRouter()


@router.get("")
def list_users(
    roles: Optional[str] = None,
    exclude_self: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """GET /users?roles=staff,manager&exclude_self=true"""
    query = db.query(User)
    if roles:
        wanted = [r.strip().lower() for r in roles.split(",") if r.strip()]
        query = query.filter(User.role.in_(wanted))
    if exclude_self:
        query = query.filter(User.emp_id != current_user.emp_id)
    users = query.order_by(User.name).all()
    return {"users": [UserSummary.model_validate(u) for u in users]}


@router.get("/search", response_model=List[UserSummary])
def search_users(
    q: str = Query(""),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    term = q.strip()
    if not term:
        return []
    return db.query(User).filter(User.name.ilike(f"%{term}%")).order_by(User.name).limit(10).all()


@router.post("/bulk", response_model=List[UserSummary])
def users_by_emp_ids(
    payload: BulkUsersRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not isinstance(payload.emp_ids, list):
        raise HTTPException(status_code=400, detail="emp_ids array is required")
    emp_ids = [str(e) for e in payload.emp_ids if e is not None]
    if not emp_ids:
        return []
    return db.query(User).filter(User.emp_id.in_(emp_ids)).all()


@router.get("/profile/{emp_id}", response_model=UserSummary)
def user_profile(
    emp_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user = db.query(User).filter(User.emp_id == emp_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
